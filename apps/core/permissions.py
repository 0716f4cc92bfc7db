# apps/core/permissions.py
"""
Centralized permission classes for the entire application.

``request.user`` is an :class:`apps.accounts.identity.Identity` decoded from
the bearer token. Role gates re-check the account in its store, so an
account deleted or demoted after the token was issued loses access at once.
"""
from rest_framework import permissions


def _is_identified(request):
    user = getattr(request, 'user', None)
    return bool(user and user.is_authenticated)


class IsAuthenticatedAccount(permissions.BasePermission):
    """
    Any holder of a valid token (staff, client or super-admin).
    """
    message = "Unauthorized: Login First"

    def has_permission(self, request, view):
        return _is_identified(request)


class IsAdmin(permissions.BasePermission):
    """
    Permission class for admin-only access.
    Grants access to staff with the admin role and to super-admins.
    """
    message = "Access Denied: Insufficient Permissions"

    def has_permission(self, request, view):
        if not _is_identified(request):
            return False

        from apps.accounts.services import CredentialService
        CredentialService.authorize_admin(request.user)
        return True


class IsSuperAdmin(permissions.BasePermission):
    """
    Permission class for super-admin-only operations (e.g. deleting applications).
    """
    message = "Access Denied: Super admin only"

    def has_permission(self, request, view):
        if not _is_identified(request):
            return False

        from apps.accounts.services import CredentialService
        CredentialService.authorize_superadmin(request.user)
        return True
