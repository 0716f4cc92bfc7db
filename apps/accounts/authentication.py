# apps/accounts/authentication.py
"""
DRF authentication backed by the credential service.
"""
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from apps.core.middleware import set_current_identity
from .services import CredentialService


class AccountJWTAuthentication(BaseAuthentication):
    """
    Resolves ``Authorization: Bearer <token>`` to an Identity.

    No header means an anonymous request (permission classes decide);
    a header that fails verification is rejected with 401.
    """
    keyword = 'Bearer'

    def authenticate(self, request):
        header = get_authorization_header(request)
        if not header:
            return None

        identity = CredentialService.verify(header)
        set_current_identity(identity)
        return identity, None

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'
