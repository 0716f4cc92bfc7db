# apps/clients/views.py
"""
Client intake endpoints.
"""
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from apps.core.exceptions import ForbiddenError
from apps.core.mixins import (
    AdminWritePermissionMixin,
    EnvelopeResponseMixin,
    StandardFilterMixin,
    TimestampOrderingMixin,
)
from apps.core.permissions import IsAuthenticatedAccount
from .models import Client
from .serializers import ClientSerializer
from .services import ClientIntakeService


class ClientViewSet(
    StandardFilterMixin,
    TimestampOrderingMixin,
    AdminWritePermissionMixin,
    EnvelopeResponseMixin,
    viewsets.ModelViewSet
):
    """
    ViewSet for managing clients.

    Permissions:
        - List/Retrieve: Authenticated accounts
        - Create/Update/Delete: Admins and super-admins

    Endpoints:
        - POST   /api/v1/client/createClient            - Create client (JSON or multipart)
        - GET    /api/v1/client/getClient               - List clients
        - GET    /api/v1/client/getClient/{id}          - Retrieve client
        - PUT/PATCH /api/v1/client/updateClient/{id}    - Update client
        - DELETE /api/v1/client/deleteClient/{id}       - Delete client
        - GET    /api/v1/client/lookupAddress           - Postal code autofill
        - GET    /api/v1/client/{id}/applications       - Client's applications and balance
    """
    queryset = Client.objects.all()
    serializer_class = ClientSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    collection_key = 'clients'

    filterset_fields = ['category', 'status']
    search_fields = ['name', 'email', 'phone', 'city', 'prefecture']
    ordering_fields = ['name', 'created_at', 'date_joined']

    def get_permissions(self):
        if self.action in ['lookup_address', 'applications']:
            return [IsAuthenticatedAccount()]
        return super().get_permissions()

    def retrieve(self, request, *args, **kwargs):
        client = self.get_object()
        return Response({'success': True, 'client': self.get_serializer(client).data})

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        client = serializer.save()
        return Response(
            {
                'success': True,
                'message': 'Client created successfully',
                'client': self.get_serializer(client).data,
            },
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        client = self.get_object()
        serializer = self.get_serializer(client, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        client = serializer.save()
        return Response({
            'success': True,
            'message': 'Client updated successfully',
            'client': self.get_serializer(client).data,
        })

    def destroy(self, request, *args, **kwargs):
        ClientIntakeService.delete_client(self.get_object())
        return Response({'success': True, 'message': 'Client deleted successfully'})

    @action(detail=False, methods=['get'], url_path='lookupAddress')
    def lookup_address(self, request):
        """
        Resolve a Japanese postal code for the intake form.

        Query Parameters:
            - postalCode: NNN-NNNN or 7 digits
            - category: client category; optional-address categories skip the lookup
        """
        address, warning = ClientIntakeService.lookup_address(
            request.query_params.get('category'),
            request.query_params.get('postalCode', ''),
        )
        if address is None:
            return Response({'success': True, 'lookupPerformed': False, 'address': None})
        if warning:
            return Response({'success': False, 'message': warning, 'address': address.as_dict()})
        return Response({'success': True, 'lookupPerformed': True, 'address': address.as_dict()})

    @action(detail=True, methods=['get'])
    def applications(self, request, pk=None):
        """
        All applications of a client with the outstanding balance.
        Clients may only read their own.
        """
        from apps.applications.serializers import ClientApplicationsSerializer
        from apps.applications.services import ApplicationService

        client = self.get_object()
        identity = request.user
        if identity.role == Client.ROLE_CLIENT and identity.account_id != str(client.pk):
            raise ForbiddenError()

        summary = ClientApplicationsSerializer(ApplicationService.client_summary(client)).data
        return Response({'success': True, **summary})
