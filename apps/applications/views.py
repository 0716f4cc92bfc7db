# apps/applications/views.py
"""
Application endpoints for visa, ePassport and graphic design jobs.
"""
from rest_framework import status, viewsets
from rest_framework.response import Response

from apps.core.mixins import (
    AdminWritePermissionMixin,
    EnvelopeResponseMixin,
    StandardFilterMixin,
    TimestampOrderingMixin,
)
from apps.core.permissions import IsSuperAdmin
from .filters import EpassportApplicationFilter, GraphicDesignJobFilter, VisaApplicationFilter
from .models import EpassportApplication, GraphicDesignJob, VisaApplication
from .serializers import (
    EpassportApplicationSerializer,
    GraphicDesignJobSerializer,
    VisaApplicationSerializer,
)
from .services import ApplicationService


class BaseApplicationViewSet(
    StandardFilterMixin,
    TimestampOrderingMixin,
    AdminWritePermissionMixin,
    EnvelopeResponseMixin,
    viewsets.ModelViewSet
):
    """
    Shared behaviour of every application type.

    Permissions:
        - List/Retrieve: Authenticated accounts
        - Create/Update: Admins and super-admins
        - Delete: Super-admins only

    Updates are always partial; payment totals are recomputed server side.
    """
    destroy_permission_classes = [IsSuperAdmin]
    collection_key = 'data'
    display_name = 'Application'

    search_fields = ['client_name', 'notes']

    def get_object(self):
        application = ApplicationService.get_application(self.queryset.model, self.kwargs['pk'])
        self.check_object_permissions(self.request, application)
        return application

    def retrieve(self, request, *args, **kwargs):
        return Response({'success': True, 'data': self.get_serializer(self.get_object()).data})

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = serializer.save()
        return Response(
            {
                'success': True,
                'message': f'{self.display_name} created successfully',
                'data': self.get_serializer(application).data,
            },
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        kwargs.pop('partial', None)
        application = self.get_object()
        serializer = self.get_serializer(application, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        application = serializer.save()
        return Response({
            'success': True,
            'message': f'{self.display_name} updated successfully',
            'data': self.get_serializer(application).data,
        })

    def destroy(self, request, *args, **kwargs):
        ApplicationService.delete_application(self.queryset.model, self.kwargs['pk'])
        return Response({'success': True, 'message': f'{self.display_name} deleted successfully'})


class VisaApplicationViewSet(BaseApplicationViewSet):
    """
    Endpoints:
        - POST   /api/v1/visaApplication/createVisaApplication
        - GET    /api/v1/visaApplication/getAllVisaApplication
        - GET    /api/v1/visaApplication/getVisaApplication/{id}
        - PUT/PATCH /api/v1/visaApplication/updateVisaApplication/{id}
        - DELETE /api/v1/visaApplication/deleteVisaApplication/{id}
    """
    queryset = VisaApplication.objects.select_related('client')
    serializer_class = VisaApplicationSerializer
    filterset_class = VisaApplicationFilter
    display_name = 'Visa application'
    search_fields = BaseApplicationViewSet.search_fields + ['country']
    ordering_fields = ['created_at', 'deadline', 'due_amount', 'country']


class EpassportApplicationViewSet(BaseApplicationViewSet):
    queryset = EpassportApplication.objects.select_related('client')
    serializer_class = EpassportApplicationSerializer
    filterset_class = EpassportApplicationFilter
    display_name = 'ePassport application'
    search_fields = BaseApplicationViewSet.search_fields + ['mobile_no', 'prefecture']
    ordering_fields = ['created_at', 'deadline', 'due_amount', 'date']


class GraphicDesignJobViewSet(BaseApplicationViewSet):
    queryset = GraphicDesignJob.objects.select_related('client')
    serializer_class = GraphicDesignJobSerializer
    filterset_class = GraphicDesignJobFilter
    display_name = 'Design job'
    search_fields = BaseApplicationViewSet.search_fields + ['business_name', 'design_type']
    ordering_fields = ['created_at', 'deadline', 'due_amount', 'business_name']
