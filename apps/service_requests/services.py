# apps/service_requests/services.py
import logging

from django.db import transaction

from apps.accounts.identity import ROLE_SUPERADMIN
from apps.accounts.services import CLIENT_STORE, SUPERADMIN_STORE
from apps.clients.models import Client
from apps.core.exceptions import NotFoundError, ValidationError
from .models import ServiceRequest, ServiceRequestStatus

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "This field is required."
REQUIRED_FIELDS = {
    'client_name': 'clientName',
    'phone_number': 'phoneNumber',
    'service_name': 'serviceName',
    'message': 'message',
}


class ServiceRequestService:
    """
    Create, read, re-status and delete service requests.

    The caller's identity decides the links: a super-admin is recorded as
    ``super_admin``, a client as ``client``. Clients only ever see their
    own requests.
    """

    @staticmethod
    def visible_to(identity):
        queryset = ServiceRequest.objects.select_related('client', 'super_admin')
        if identity.role == Client.ROLE_CLIENT:
            return queryset.filter(client_id=identity.account_id)
        return queryset

    @staticmethod
    @transaction.atomic
    def create_request(data, identity=None):
        """
        Raises:
            ValidationError: listing every missing field
        """
        data = {field: (data.get(field) or '').strip() for field in REQUIRED_FIELDS}
        errors = {
            name: [REQUIRED_MESSAGE] for field, name in REQUIRED_FIELDS.items() if not data[field]
        }
        if errors:
            raise ValidationError({'message': ['All fields are required.'], **errors})

        service_request = ServiceRequest(**data)
        if identity is not None:
            if identity.role == ROLE_SUPERADMIN:
                service_request.super_admin = SUPERADMIN_STORE.find_by_id(identity.account_id)
            elif identity.role == Client.ROLE_CLIENT:
                service_request.client = CLIENT_STORE.find_by_id(identity.account_id)
        service_request.save()

        logger.info(
            "Service request %s created: %s for %s",
            service_request.pk, service_request.service_name, service_request.client_name,
        )
        return service_request

    @staticmethod
    def get_request(request_id, identity):
        service_request = ServiceRequestService.visible_to(identity).filter(pk=request_id).first()
        if service_request is None:
            raise NotFoundError('Service request not found')
        return service_request

    @staticmethod
    @transaction.atomic
    def update_status(service_request, status):
        """
        Raises:
            ValidationError: status is not pending/approved/rejected
        """
        if status not in ServiceRequestStatus.values:
            raise ValidationError({'status': ['Invalid status value.']})

        previous = service_request.status
        service_request.status = status
        service_request.save(update_fields=['status', 'updated_at'])
        logger.info("Service request %s: %s -> %s", service_request.pk, previous, status)
        return service_request

    @staticmethod
    @transaction.atomic
    def delete_request(service_request):
        request_id = service_request.pk
        service_request.delete()
        logger.info("Service request %s deleted", request_id)
