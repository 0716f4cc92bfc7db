# apps/clients/services.py
"""
Client intake workflow: category-dependent address rules, postal code
lookup and client create/update/delete.
"""
import logging
import re
from dataclasses import dataclass

import requests
from django.conf import settings
from django.db import IntegrityError, transaction

from apps.core.exceptions import AddressLookupError, ConflictError, ValidationError
from .models import Client, ClientCategory

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "This field is required."

# Categories whose clients may be created without an address
OPTIONAL_ADDRESS_CATEGORIES = frozenset({
    ClientCategory.DOCUMENT_TRANSLATION.value,
    ClientCategory.EPASSPORT.value,
    ClientCategory.JAPAN_VISA.value,
    ClientCategory.GRAPHIC_DESIGN.value,
    ClientCategory.WEB_DESIGN.value,
    ClientCategory.BIRTH_REGISTRATION.value,
    ClientCategory.DOCUMENTATION_SUPPORT.value,
    ClientCategory.OTHER.value,
})

REQUIRED_ADDRESS_FIELDS = ('prefecture', 'city', 'street')
REQUIRED_CLIENT_FIELDS = ('name', 'category', 'email')

POSTAL_CODE_DIGITS = 7


class AddressRequirement:
    REQUIRED = 'required'
    OPTIONAL = 'optional'


def classify_address_requirement(category):
    """Optional for the categories above, required for every other value."""
    if category is not None and str(category) in OPTIONAL_ADDRESS_CATEGORIES:
        return AddressRequirement.OPTIONAL
    return AddressRequirement.REQUIRED


def address_errors(category, values):
    """
    {field: [message]} for every required address field left empty.
    ``values`` maps prefecture/city/street to their submitted values.
    """
    if classify_address_requirement(category) == AddressRequirement.OPTIONAL:
        return {}
    return {
        field: [REQUIRED_MESSAGE]
        for field in REQUIRED_ADDRESS_FIELDS
        if not str(values.get(field) or '').strip()
    }


def client_errors(data):
    """Every violated field of a full client record, not only the first one."""
    errors = {
        field: [REQUIRED_MESSAGE]
        for field in REQUIRED_CLIENT_FIELDS
        if not str(data.get(field) or '').strip()
    }
    for field, messages in address_errors(data.get('category'), data).items():
        errors.setdefault(field, messages)
    return errors


@dataclass
class Address:
    postal_code: str = ''
    prefecture: str = ''
    city: str = ''
    street: str = ''

    @classmethod
    def cleared(cls, postal_code=''):
        return cls(postal_code=postal_code or '')

    def as_dict(self):
        return {
            'postalCode': self.postal_code,
            'prefecture': self.prefecture,
            'city': self.city,
            'street': self.street,
        }


def normalize_postal_code(postal_code):
    return re.sub(r'\D', '', postal_code or '')


class AddressLookupService:
    """
    Resolves a Japanese postal code (NNN-NNNN) through a zipcloud
    compatible HTTP API.
    """

    @staticmethod
    def resolve_address(postal_code):
        """
        Returns an Address. Fewer (or more) than 7 digits returns the
        cleared address without calling the remote API.

        Raises:
            AddressLookupError: nothing found for the code or the API failed
        """
        digits = normalize_postal_code(postal_code)
        if len(digits) != POSTAL_CODE_DIGITS:
            return Address.cleared(postal_code)

        formatted = f"{digits[:3]}-{digits[3:]}"
        try:
            response = requests.get(
                settings.ADDRESS_LOOKUP_URL,
                params={'zipcode': digits},
                timeout=settings.ADDRESS_LOOKUP_TIMEOUT,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Address lookup failed for %s: %s", formatted, exc)
            raise AddressLookupError('Failed to fetch address. Please enter it manually.') from exc

        results = payload.get('results') or []
        if not results:
            logger.info("No address found for postal code %s", formatted)
            raise AddressLookupError('No address found for this postal code.')

        result = results[0]
        return Address(
            postal_code=formatted,
            prefecture=result.get('address1', ''),
            city=result.get('address2', ''),
            street=result.get('address3', ''),
        )


class ClientIntakeService:
    """
    Validates and persists clients. Writes are atomic: a client is either
    stored with every field or not at all.
    """

    @staticmethod
    def lookup_address(category, postal_code):
        """
        Address autofill for the intake form.

        Returns (address, warning). For optional-address categories no
        lookup happens and address is None. A failed lookup yields a
        cleared address and a warning message instead of an error.
        """
        if category and classify_address_requirement(category) == AddressRequirement.OPTIONAL:
            return None, None
        try:
            return AddressLookupService.resolve_address(postal_code), None
        except AddressLookupError as exc:
            return Address.cleared(postal_code), str(exc.detail)

    @staticmethod
    def _ensure_unique_email(email, instance=None):
        queryset = Client.objects.filter(email=email.strip().lower())
        if instance is not None:
            queryset = queryset.exclude(pk=instance.pk)
        if queryset.exists():
            raise ConflictError('Client with this email already exists')

    @staticmethod
    def _save(client):
        """Save inside a savepoint; a concurrent insert of the same email surfaces as a conflict."""
        try:
            with transaction.atomic():
                client.save()
        except IntegrityError:
            raise ConflictError('Client with this email already exists')

    @staticmethod
    @transaction.atomic
    def create_client(data):
        """
        Create a client from model-field data.

        Raises:
            ValidationError: listing every missing field
            ConflictError: email already used by another client
        """
        data = dict(data)
        errors = client_errors(data)
        if errors:
            raise ValidationError(errors)

        ClientIntakeService._ensure_unique_email(data['email'])

        password = data.pop('password', None)
        if not password:
            password = settings.CLIENT_DEFAULT_PASSWORD
            logger.warning("Client %s created with the default password", data['email'])

        client = Client(**data)
        client.set_password(password)
        ClientIntakeService._save(client)
        logger.info("Client created: %s (%s)", client.email, client.category)
        return client

    @staticmethod
    @transaction.atomic
    def update_client(client, data):
        """Apply a (partial) update with the same rules as creation."""
        data = dict(data)
        password = data.pop('password', None)

        merged = {field: getattr(client, field) for field in REQUIRED_CLIENT_FIELDS + REQUIRED_ADDRESS_FIELDS}
        merged.update({k: v for k, v in data.items() if k in merged})
        errors = client_errors(merged)
        if errors:
            raise ValidationError(errors)

        if 'email' in data:
            ClientIntakeService._ensure_unique_email(data['email'], instance=client)

        for field, value in data.items():
            setattr(client, field, value)
        if password:
            client.set_password(password)
        ClientIntakeService._save(client)
        logger.info("Client updated: %s", client.email)
        return client

    @staticmethod
    @transaction.atomic
    def delete_client(client):
        """
        Delete unconditionally. Applications keep their client-name
        snapshot and lose the link (see the ``client`` foreign keys).
        """
        email = client.email
        client.delete()
        logger.info("Client deleted: %s", email)
