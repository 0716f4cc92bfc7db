# apps/core/exceptions.py
"""
Typed errors shared by every workflow and the handler that renders them.

Each error subclasses the DRF exception that carries its status code, so a
workflow can raise it from anywhere and the transport maps it to
400/401/403/404/409 without extra glue.
"""
import logging

from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class ValidationError(exceptions.ValidationError):
    """Missing or malformed input. ``detail`` is a field -> messages mapping."""
    default_detail = 'Invalid input.'
    default_code = 'invalid'


class ConflictError(exceptions.APIException):
    """A uniqueness rule was violated (e.g. duplicate email)"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


class AuthError(exceptions.AuthenticationFailed):
    """Bad credentials or an invalid/expired token"""
    default_detail = 'Unauthorized.'
    default_code = 'authentication_failed'


class ForbiddenError(exceptions.PermissionDenied):
    """Authenticated, but the role is insufficient"""
    default_detail = 'Access Denied: Insufficient Permissions'
    default_code = 'forbidden'


class NotFoundError(exceptions.NotFound):
    """Referenced entity absent"""
    default_detail = 'Not found.'
    default_code = 'not_found'


class AddressLookupError(exceptions.APIException):
    """The postal-code lookup collaborator failed or found nothing"""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'No address found for this postal code.'
    default_code = 'address_lookup_failed'


class EmailDeliveryError(exceptions.APIException):
    """The mail backend refused or could not reach the server"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Failed to send email. Please try again later.'
    default_code = 'email_delivery_failed'


def _first_message(detail):
    """Walk a DRF error structure down to its first human readable string."""
    if isinstance(detail, dict):
        if 'message' in detail:
            return _first_message(detail['message'])
        for value in detail.values():
            return _first_message(value)
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def _field_errors(detail):
    """Normalise validation details to {field: [messages]}."""
    if isinstance(detail, dict):
        errors = {}
        for field, messages in detail.items():
            if isinstance(messages, dict):
                errors[field] = _field_errors(messages)
            elif isinstance(messages, (list, tuple)):
                errors[field] = [
                    _field_errors(m) if isinstance(m, dict) else str(m)
                    for m in messages
                ]
            else:
                errors[field] = [str(messages)]
        return errors
    return {'non_field_errors': [str(m) for m in detail]} if isinstance(detail, list) else {}


def custom_exception_handler(exc, context):
    """Render every error as {success: false, message[, errors]}"""
    # Imported here: rest_framework.views loads the authentication classes,
    # which import this module.
    from rest_framework.views import exception_handler

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception(
            "Unhandled error in %s", view.__class__.__name__ if view else 'unknown view'
        )
        return Response(
            {'success': False, 'message': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        detail = exc.detail
        if isinstance(detail, dict):
            errors = _field_errors({k: v for k, v in detail.items() if k != 'message'})
            if 'message' in detail:
                message = _first_message(detail['message'])
            elif len(errors) > 1:
                message = 'Please correct the highlighted fields.'
            else:
                message = _first_message(detail)
        else:
            errors = _field_errors(detail)
            message = _first_message(detail)
        response.data = {'success': False, 'message': message or 'Invalid input.', 'errors': errors}
    else:
        response.data = {'success': False, 'message': _first_message(response.data)}

    return response
