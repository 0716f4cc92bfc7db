# apps/service_requests/views.py
from rest_framework import status, viewsets
from rest_framework.response import Response

from apps.core.mixins import EnvelopeResponseMixin, StandardFilterMixin, TimestampOrderingMixin
from apps.core.permissions import IsAdmin, IsAuthenticatedAccount, IsSuperAdmin
from .serializers import ServiceRequestSerializer, ServiceRequestStatusSerializer
from .services import ServiceRequestService


class ServiceRequestViewSet(
    StandardFilterMixin,
    TimestampOrderingMixin,
    EnvelopeResponseMixin,
    viewsets.ModelViewSet
):
    """
    Endpoints:
        - POST   /api/v1/serviceRequest/createServiceRequest
        - GET    /api/v1/serviceRequest/getAllServiceRequests
        - GET    /api/v1/serviceRequest/getServiceRequest/{id}
        - PUT/PATCH /api/v1/serviceRequest/updateServiceRequestStatus/{id}
        - DELETE /api/v1/serviceRequest/deleteServiceRequest/{id}

    Permissions:
        - Create/List/Retrieve: Authenticated accounts (clients see their own)
        - Status update: Admins and super-admins
        - Delete: Super-admins only
    """
    serializer_class = ServiceRequestSerializer
    collection_key = 'data'
    filterset_fields = ['status']
    search_fields = ['client_name', 'phone_number', 'service_name', 'message']

    def get_permissions(self):
        if self.action in ['update', 'partial_update']:
            return [IsAdmin()]
        if self.action == 'destroy':
            return [IsSuperAdmin()]
        return [IsAuthenticatedAccount()]

    def get_queryset(self):
        return ServiceRequestService.visible_to(self.request.user)

    def get_object(self):
        service_request = ServiceRequestService.get_request(self.kwargs['pk'], self.request.user)
        self.check_object_permissions(self.request, service_request)
        return service_request

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service_request = serializer.save()
        return Response(
            {
                'success': True,
                'message': 'Service request created successfully.',
                'data': self.get_serializer(service_request).data,
            },
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, *args, **kwargs):
        return Response({'success': True, 'data': self.get_serializer(self.get_object()).data})

    def update(self, request, *args, **kwargs):
        service_request = self.get_object()
        serializer = ServiceRequestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service_request = ServiceRequestService.update_status(
            service_request, serializer.validated_data.get('status')
        )
        return Response({
            'success': True,
            'message': 'Service request updated successfully.',
            'data': self.get_serializer(service_request).data,
        })

    def destroy(self, request, *args, **kwargs):
        ServiceRequestService.delete_request(self.get_object())
        return Response({'success': True, 'message': 'Service request deleted successfully.'})
