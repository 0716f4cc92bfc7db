# apps/applications/services.py
"""
Service layer for the application/payment workflow.
Resolves client and handler references, keeps the payment block
consistent and performs every write atomically.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.text import capfirst

from apps.accounts.services import STAFF_STORE
from apps.clients.models import Client
from apps.core.exceptions import NotFoundError, ValidationError
from apps.core.middleware import get_current_identity
from .models import EpassportApplication, GraphicDesignJob, VisaApplication

logger = logging.getLogger(__name__)

CLIENT_NOT_FOUND = "Client not found"
INVALID_HANDLER = "Invalid handler selected"

# Request field name of each handler column
HANDLER_INPUT_NAMES = {
    'handled_by': 'handledBy',
    'translation_handler': 'translationHandler',
}

APPLICATION_MODELS = {
    'visa': VisaApplication,
    'epassport': EpassportApplication,
    'graphicDesign': GraphicDesignJob,
}


@dataclass(frozen=True)
class HandlerSnapshot:
    """Staff id and display name captured when an application is written."""
    id: str
    name: str

    @classmethod
    def of(cls, account):
        return cls(id=str(account.pk), name=account.full_name)

    def as_dict(self):
        return {'id': self.id, 'name': self.name}


def _actor():
    identity = get_current_identity()
    return identity.email if identity else 'system'


class ApplicationService:
    """
    Creates, updates and deletes applications of any type.
    """

    @staticmethod
    def resolve_client(client_id):
        if not client_id:
            return None
        try:
            return Client.objects.filter(pk=client_id).first()
        except (DjangoValidationError, ValueError):
            return None

    @staticmethod
    def resolve_handler(staff_id):
        if not staff_id:
            return None
        account = STAFF_STORE.find_by_id(staff_id)
        if account is None:
            return None
        return HandlerSnapshot.of(account)

    @staticmethod
    def _resolve_references(model, data, errors, partial=False):
        """
        Replace ``client_id`` and handler ids in ``data`` by the resolved
        client and handler snapshots, collecting every failure in ``errors``.
        """
        if 'client_id' in data or not partial:
            client = ApplicationService.resolve_client(data.pop('client_id', None))
            if client is None:
                errors['clientId'] = [CLIENT_NOT_FOUND]
            else:
                data['client'] = client
                data['client_name'] = client.name

        for field in model.handler_fields:
            if field not in data and partial:
                continue
            snapshot = ApplicationService.resolve_handler(data.get(field))
            if snapshot is None:
                errors[HANDLER_INPUT_NAMES.get(field, field)] = [INVALID_HANDLER]
            else:
                data[field] = snapshot.as_dict()

    @staticmethod
    @transaction.atomic
    def create_application(model, data):
        """
        Create an application; payment fields are derived on save.

        Raises:
            ValidationError: client or handler cannot be resolved
        """
        data = dict(data)
        errors = {}
        ApplicationService._resolve_references(model, data, errors)
        if errors:
            raise ValidationError(errors)

        application = model(**data)
        application.submission_date = timezone.now()
        application.save()
        logger.info(
            "%s %s created for %s by %s (due %s, %s)",
            model.__name__, application.pk, application.client_name, _actor(),
            application.due_amount, application.payment_status,
        )
        return application

    @staticmethod
    def get_application(model, application_id):
        try:
            return model.objects.get(pk=application_id)
        except (model.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError(f"{capfirst(model._meta.verbose_name)} not found")

    @staticmethod
    @transaction.atomic
    def apply_update(application, data):
        """
        Apply a partial update. Due amount and payment status are always
        recomputed from the stored fee/paid/discount values.
        """
        data = dict(data)
        errors = {}
        ApplicationService._resolve_references(type(application), data, errors, partial=True)
        if errors:
            raise ValidationError(errors)

        for field, value in data.items():
            setattr(application, field, value)
        application.save()
        logger.info(
            "%s %s updated by %s (due %s, %s)",
            type(application).__name__, application.pk, _actor(),
            application.due_amount, application.payment_status,
        )
        return application

    @staticmethod
    def update_application(model, application_id, data):
        """
        Raises:
            NotFoundError: no application with that id
            ValidationError: client or handler cannot be resolved
        """
        application = ApplicationService.get_application(model, application_id)
        return ApplicationService.apply_update(application, data)

    @staticmethod
    @transaction.atomic
    def delete_application(model, application_id):
        """Delete unconditionally; role gating belongs to the caller."""
        application = ApplicationService.get_application(model, application_id)
        application.delete()
        logger.info("%s %s deleted by %s", model.__name__, application_id, _actor())

    @staticmethod
    def client_summary(client):
        """
        Every application of ``client`` grouped by type, with the
        outstanding balance (overpayments do not reduce other balances).
        """
        applications = {
            key: model.objects.filter(client=client).order_by('-created_at')
            for key, model in APPLICATION_MODELS.items()
        }
        total_due = Decimal('0.00')
        total_paid = Decimal('0.00')
        for queryset in applications.values():
            for application in queryset:
                total_due += max(application.due_amount, Decimal('0.00'))
                total_paid += application.paid_amount
        return {
            'totalDue': total_due,
            'totalPaid': total_paid,
            'applications': applications,
        }
