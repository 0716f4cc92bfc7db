# apps/accounts/identity.py
"""Identity resolved from a verified bearer token."""
from dataclasses import dataclass


class AccountKind:
    STAFF = 'staff'
    CLIENT = 'client'
    SUPERADMIN = 'superadmin'


ROLE_SUPERADMIN = 'superadmin'
ADMIN_ROLES = frozenset({'admin', ROLE_SUPERADMIN})


@dataclass(frozen=True)
class Identity:
    """The authenticated principal of a request (``request.user``)."""

    account_id: str
    email: str
    role: str

    # DRF permission classes only look at this flag
    is_authenticated = True
    is_anonymous = False

    @property
    def pk(self):
        return self.account_id

    def __str__(self):
        return f"{self.email} ({self.role})"
