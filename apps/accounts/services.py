# apps/accounts/services.py
"""
Service layer for accounts: the three account stores, the credential
service that authenticates against them and the password reset flow.

Email is unique inside each store but not across stores, so every lookup
scans the stores in a fixed order (staff, client, super-admin) and takes
the first match.
"""
import logging
import smtplib
import string
from dataclasses import dataclass

from django.apps import apps
from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.mail import send_mail
from django.db import IntegrityError, transaction
from django.utils.crypto import get_random_string
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from apps.core.exceptions import (
    AuthError,
    ConflictError,
    EmailDeliveryError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from .identity import ADMIN_ROLES, AccountKind, Identity, ROLE_SUPERADMIN
from .models import PasswordResetCode

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
REQUIRED_MESSAGE = "This field is required."
INVALID_RESET_CODE = "Invalid or expired OTP"
RESET_EMAIL_SUBJECT = "Your password reset code"
RESET_CODE_LENGTH = 6
MIN_PASSWORD_LENGTH = 6


class AccountStore:
    """
    One account store. Subclasses name the model and how role and display
    name are read from a row.
    """
    kind = None
    model_label = None
    default_role = None

    def get_model(self):
        return apps.get_model(self.model_label)

    def find_by_email(self, email):
        if not email:
            return None
        return self.get_model().objects.filter(email=email.strip().lower()).first()

    def find_by_id(self, account_id):
        try:
            return self.get_model().objects.filter(pk=account_id).first()
        except (DjangoValidationError, ValueError):
            return None

    def exists_email(self, email):
        return self.get_model().objects.filter(email=email.strip().lower()).exists()

    def role_of(self, account):
        return account.role or self.default_role

    def display_name(self, account):
        raise NotImplementedError


class StaffStore(AccountStore):
    kind = AccountKind.STAFF
    model_label = 'accounts.StaffAccount'
    default_role = 'admin'

    def display_name(self, account):
        return account.full_name


class ClientStore(AccountStore):
    kind = AccountKind.CLIENT
    model_label = 'clients.Client'
    default_role = 'client'

    def display_name(self, account):
        return account.name


class SuperAdminStore(AccountStore):
    kind = AccountKind.SUPERADMIN
    model_label = 'accounts.SuperAdminAccount'
    default_role = ROLE_SUPERADMIN

    def role_of(self, account):
        return ROLE_SUPERADMIN

    def display_name(self, account):
        return account.email


STAFF_STORE = StaffStore()
CLIENT_STORE = ClientStore()
SUPERADMIN_STORE = SuperAdminStore()

# Lookup order matters: the first store holding an email wins
ACCOUNT_STORES = (STAFF_STORE, CLIENT_STORE, SUPERADMIN_STORE)


@dataclass
class LoginResult:
    account: object
    store: AccountStore
    role: str
    token: str

    @property
    def user_payload(self):
        """Login response body, display name normalised across stores"""
        return {
            'id': str(self.account.pk),
            'fullName': self.store.display_name(self.account),
            'email': self.account.email,
            'role': self.role,
            'phone': getattr(self.account, 'phone', None),
        }


def _missing_fields(**values):
    return {field: [REQUIRED_MESSAGE] for field, value in values.items() if not value}


class CredentialService:
    """
    Hashes passwords, verifies logins, mints and verifies role-bearing
    tokens and authorizes admin actions.
    """

    @staticmethod
    def resolve_by_email(email):
        """Return (account, store) for the first store holding ``email``."""
        for store in ACCOUNT_STORES:
            account = store.find_by_email(email)
            if account is not None:
                return account, store
        return None, None

    @staticmethod
    def resolve_by_id(account_id):
        for store in ACCOUNT_STORES:
            account = store.find_by_id(account_id)
            if account is not None:
                return account, store
        return None, None

    @staticmethod
    @transaction.atomic
    def register(full_name, phone, nationality, email, password, confirm_password):
        """
        Create a staff account.

        Raises:
            ValidationError: a field is missing or the passwords differ
            ConflictError: the email is already used by a staff account
        """
        errors = _missing_fields(
            fullName=full_name,
            phone=phone,
            nationality=nationality,
            email=email,
            password=password,
            confirmPassword=confirm_password,
        )
        if errors:
            raise ValidationError({'message': ['All fields are required'], **errors})

        if password != confirm_password:
            raise ValidationError({'confirmPassword': ['Passwords do not match']})

        if STAFF_STORE.exists_email(email):
            raise ConflictError('User already exists')

        try:
            with transaction.atomic():
                account = STAFF_STORE.get_model().objects.create_user(
                    email=email,
                    password=password,
                    full_name=full_name,
                    phone=phone,
                    nationality=nationality,
                )
        except IntegrityError:
            raise ConflictError('User already exists')
        logger.info("Staff account registered: %s", account.email)
        return account

    @staticmethod
    @transaction.atomic
    def create_super_admin(name, email, password):
        errors = _missing_fields(name=name, email=email, password=password)
        if errors:
            raise ValidationError({'message': ['All fields are required'], **errors})

        if SUPERADMIN_STORE.exists_email(email):
            raise ConflictError('Super admin already exists')

        account = SUPERADMIN_STORE.get_model()(name=name, email=email)
        account.set_password(password)
        try:
            with transaction.atomic():
                account.save()
        except IntegrityError:
            raise ConflictError('Super admin already exists')
        logger.info("Super admin account created: %s", account.email)
        return account

    @staticmethod
    def login(email, password):
        """
        Authenticate ``email``/``password`` against the account stores.

        Unknown email and wrong password fail with the same AuthError.
        """
        if not email or not password:
            raise ValidationError({'message': ['Email and password are required']})

        account, store = CredentialService.resolve_by_email(email)
        if account is None:
            # same hashing cost as a wrong password
            make_password(password)
            logger.info("Failed login attempt")
            raise AuthError(INVALID_CREDENTIALS)

        if not account.check_password(password):
            logger.info("Failed login attempt")
            raise AuthError(INVALID_CREDENTIALS)

        role = store.role_of(account)
        token = CredentialService.issue_token(account, role)
        logger.info("Login: %s as %s (%s store)", account.email, role, store.kind)
        return LoginResult(account=account, store=store, role=role, token=token)

    @staticmethod
    def issue_token(account, role):
        """Signed token carrying {account_id, email, role}; lifetime from SIMPLE_JWT."""
        token = AccessToken()
        token['account_id'] = str(account.pk)
        token['email'] = account.email
        token['role'] = role
        return str(token)

    @staticmethod
    def verify(authorization):
        """
        Decode an ``Authorization`` header value into an Identity.

        Raises:
            AuthError: no Bearer prefix, bad signature, expired or malformed token
        """
        if isinstance(authorization, bytes):
            authorization = authorization.decode('latin-1')

        parts = (authorization or '').split()
        if len(parts) != 2 or parts[0] != 'Bearer':
            raise AuthError('Unauthorized: Login First')

        try:
            token = AccessToken(parts[1])
        except TokenError:
            raise AuthError('Unauthorized: Invalid Token')

        try:
            return Identity(
                account_id=token['account_id'],
                email=token['email'],
                role=token['role'],
            )
        except KeyError:
            raise AuthError('Unauthorized: Invalid Token')

    @staticmethod
    def authorize_admin(identity):
        """
        Re-read the account behind ``identity`` and require an admin role.
        A deleted account or a demoted role is refused even with a live token.
        """
        account, store = CredentialService.resolve_by_id(identity.account_id)
        if account is None:
            raise ForbiddenError()

        if store.role_of(account) not in ADMIN_ROLES:
            raise ForbiddenError()

    @staticmethod
    def authorize_superadmin(identity):
        if SUPERADMIN_STORE.find_by_id(identity.account_id) is None:
            raise ForbiddenError('Access Denied: Super admin only')

    @staticmethod
    def list_handlers():
        """Staff accounts that can be assigned to applications"""
        return STAFF_STORE.get_model().objects.filter(status='active').order_by('full_name')


class PasswordResetService:
    """
    Two-step reset: ``request_code`` mails a one-time code to an account
    found in any store, ``reset_password`` exchanges it for a new password.
    """

    @staticmethod
    def _send_code(email, code):
        minutes = settings.PASSWORD_RESET_CODE_MINUTES
        try:
            send_mail(
                RESET_EMAIL_SUBJECT,
                f"Your password reset code is {code}.\n"
                f"It expires in {minutes} minutes. Ignore this email if you did not ask for it.",
                settings.DEFAULT_FROM_EMAIL,
                [email],
                fail_silently=False,
            )
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send password reset code to %s: %s", email, exc)
            raise EmailDeliveryError()

    @staticmethod
    @transaction.atomic
    def request_code(email):
        """
        Issue a fresh code for ``email`` and mail it. Earlier unused codes
        for the same email are retired.

        Raises:
            ValidationError: email missing
            NotFoundError: no store holds the email
            EmailDeliveryError: the mail backend failed (nothing is stored)
        """
        if not email:
            raise ValidationError({'email': [REQUIRED_MESSAGE]})

        account, store = CredentialService.resolve_by_email(email)
        if account is None:
            raise NotFoundError('User not found')

        PasswordResetCode.objects.filter(email=account.email, used=False).update(used=True)
        code = get_random_string(RESET_CODE_LENGTH, allowed_chars=string.digits)
        PasswordResetCode.objects.create(
            email=account.email,
            account_kind=store.kind,
            code=make_password(code),
        )
        PasswordResetService._send_code(account.email, code)
        logger.info("Password reset code issued for %s (%s store)", account.email, store.kind)

    @staticmethod
    def reset_password(email, otp, new_password):
        """
        Check ``otp`` against the latest live code and set ``new_password``
        on the account the code was issued for.

        A wrong code counts as an attempt; the code dies after
        PASSWORD_RESET_MAX_ATTEMPTS wrong tries or when it expires.

        Raises:
            ValidationError: missing fields, short password, or an invalid/expired code
        """
        errors = _missing_fields(email=email, otp=otp, newPassword=new_password)
        if errors:
            raise ValidationError({'message': ['All fields are required'], **errors})
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError({'newPassword': [
                f'Password must be at least {MIN_PASSWORD_LENGTH} characters long.'
            ]})

        account, store = CredentialService.resolve_by_email(email)
        if account is None:
            raise ValidationError({'otp': [INVALID_RESET_CODE]})

        reset_code = (
            PasswordResetCode.objects
            .filter(email=account.email, account_kind=store.kind, used=False)
            .order_by('-created_at')
            .first()
        )
        if reset_code is None or not reset_code.is_valid():
            raise ValidationError({'otp': [INVALID_RESET_CODE]})

        if not check_password(str(otp).strip(), reset_code.code):
            reset_code.attempts += 1
            reset_code.save(update_fields=['attempts'])
            logger.info("Wrong password reset code for %s (attempt %s)", account.email, reset_code.attempts)
            raise ValidationError({'otp': [INVALID_RESET_CODE]})

        with transaction.atomic():
            account.set_password(new_password)
            account.save()
            reset_code.mark_as_used()
        logger.info("Password reset for %s (%s store)", account.email, store.kind)
        return account
