# apps/accounts/tests.py
"""
Accounts app tests - Testing the account stores, credential service, password reset and auth endpoints
"""
import re
import smtplib
from datetime import timedelta
from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken

from apps.accounts.identity import ADMIN_ROLES, Identity
from apps.accounts.models import PasswordResetCode, StaffAccount, SuperAdminAccount
from apps.accounts.services import (
    ACCOUNT_STORES,
    CLIENT_STORE,
    STAFF_STORE,
    SUPERADMIN_STORE,
    CredentialService,
    PasswordResetService,
)
from apps.clients.models import Client, ClientCategory
from apps.core.exceptions import (
    AuthError,
    ConflictError,
    EmailDeliveryError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from apps.core.tests import BaseTestCase


class StaffAccountModelTests(TestCase):
    """Test StaffAccount model"""

    def test_create_user_defaults(self):
        account = StaffAccount.objects.create_user(
            email='New.Staff@Example.com', password='pass123', full_name='New Staff'
        )

        self.assertEqual(account.email, 'new.staff@example.com')
        self.assertEqual(account.role, StaffAccount.ROLE_ADMIN)
        self.assertEqual(account.status, 'active')
        self.assertTrue(account.check_password('pass123'))

    def test_superadmin_role_is_forced(self):
        account = SuperAdminAccount(name='Root', email='root@example.com', role='admin')
        account.set_password('pass123')
        account.save()

        account.refresh_from_db()
        self.assertEqual(account.role, 'superadmin')

    def test_superuser_flag_does_not_grant_admin_role(self):
        account = StaffAccount.objects.create_superuser(
            email='ops@example.com', password='pass123', full_name='Ops', role=StaffAccount.ROLE_MANAGER
        )
        identity = Identity(account_id=str(account.pk), email=account.email, role=account.role)

        self.assertTrue(account.is_superuser)
        with self.assertRaises(ForbiddenError):
            CredentialService.authorize_admin(identity)


class CredentialServiceRegisterTests(TestCase):
    """Test staff registration rules"""

    def register(self, **overrides):
        data = {
            'full_name': 'Sita Sharma',
            'phone': '09011112222',
            'nationality': 'Nepali',
            'email': 'sita@example.com',
            'password': 'secret123',
            'confirm_password': 'secret123',
        }
        data.update(overrides)
        return CredentialService.register(**data)

    def test_register_creates_staff_account(self):
        account = self.register()

        self.assertEqual(account.role, StaffAccount.ROLE_ADMIN)
        self.assertNotEqual(account.password, 'secret123')

    def test_missing_fields_are_all_reported(self):
        with self.assertRaises(ValidationError) as context:
            self.register(phone='', nationality='')

        self.assertIn('phone', context.exception.detail)
        self.assertIn('nationality', context.exception.detail)

    def test_password_mismatch(self):
        with self.assertRaises(ValidationError) as context:
            self.register(confirm_password='different')

        self.assertIn('confirmPassword', context.exception.detail)
        self.assertFalse(StaffAccount.objects.exists())

    def test_duplicate_email_conflicts(self):
        self.register()

        with self.assertRaises(ConflictError):
            self.register(email='SITA@example.com')

    def test_concurrent_duplicate_insert_conflicts(self):
        self.register()

        # the other request passed the uniqueness check first
        with mock.patch.object(STAFF_STORE, 'exists_email', return_value=False):
            with self.assertRaises(ConflictError):
                self.register()

        self.assertEqual(StaffAccount.objects.filter(email='sita@example.com').count(), 1)

    def test_concurrent_duplicate_super_admin_conflicts(self):
        CredentialService.create_super_admin('Root', 'root@example.com', 'secret123')

        with mock.patch.object(SUPERADMIN_STORE, 'exists_email', return_value=False):
            with self.assertRaises(ConflictError):
                CredentialService.create_super_admin('Root', 'root@example.com', 'secret123')

    def test_register_then_login_round_trip(self):
        account = self.register()
        result = CredentialService.login('sita@example.com', 'secret123')

        self.assertEqual(result.account.pk, account.pk)
        self.assertEqual(result.role, account.role)


class CredentialServiceLoginTests(BaseTestCase):
    """Test login across the three account stores"""

    def test_store_lookup_order(self):
        self.assertEqual(ACCOUNT_STORES, (STAFF_STORE, CLIENT_STORE, SUPERADMIN_STORE))

    def test_login_staff(self):
        result = CredentialService.login('admin@example.com', 'testpass123')

        self.assertEqual(result.role, 'admin')
        self.assertEqual(result.user_payload['fullName'], 'Admin User')
        self.assertEqual(result.user_payload['phone'], '09012345678')

    def test_login_client(self):
        result = CredentialService.login('portal@example.com', 'testpass123')

        self.assertEqual(result.role, 'client')
        self.assertEqual(result.user_payload['fullName'], 'Portal Client')

    def test_login_superadmin(self):
        result = CredentialService.login('root@example.com', 'testpass123')

        self.assertEqual(result.role, 'superadmin')
        self.assertIsNone(result.user_payload['phone'])

    def test_login_is_case_insensitive(self):
        result = CredentialService.login('ADMIN@Example.com', 'testpass123')
        self.assertEqual(result.account.pk, self.admin.pk)

    def test_staff_wins_when_email_exists_in_several_stores(self):
        client = Client(name='Shadow', category=ClientCategory.OTHER, email='admin@example.com')
        client.set_password('testpass123')
        client.save()

        result = CredentialService.login('admin@example.com', 'testpass123')
        self.assertEqual(result.store, STAFF_STORE)
        self.assertEqual(result.account.pk, self.admin.pk)

    def test_unknown_email_and_wrong_password_fail_identically(self):
        with self.assertRaises(AuthError) as wrong_password:
            CredentialService.login('admin@example.com', 'nope')
        with self.assertRaises(AuthError) as unknown_email:
            CredentialService.login('nobody@example.com', 'nope')

        self.assertEqual(str(wrong_password.exception.detail), str(unknown_email.exception.detail))
        self.assertEqual(wrong_password.exception.status_code, unknown_email.exception.status_code)

    def test_missing_credentials(self):
        with self.assertRaises(ValidationError):
            CredentialService.login('', 'testpass123')

    def test_token_carries_identity_claims(self):
        result = CredentialService.login('admin@example.com', 'testpass123')
        token = AccessToken(result.token)

        self.assertEqual(token['account_id'], str(self.admin.pk))
        self.assertEqual(token['email'], 'admin@example.com')
        self.assertEqual(token['role'], 'admin')

    def test_token_lifetime_is_seven_days(self):
        token = AccessToken(CredentialService.issue_token(self.admin, 'admin'))
        expected = timezone.now() + timedelta(days=7)

        self.assertAlmostEqual(token['exp'], expected.timestamp(), delta=60)


class CredentialServiceVerifyTests(BaseTestCase):
    """Test bearer token verification and admin authorization"""

    def test_verify_round_trip(self):
        token = CredentialService.issue_token(self.admin, 'admin')
        identity = CredentialService.verify(f'Bearer {token}')

        self.assertEqual(identity, Identity(str(self.admin.pk), 'admin@example.com', 'admin'))

    def test_verify_accepts_bytes_header(self):
        token = CredentialService.issue_token(self.client_account, 'client')
        identity = CredentialService.verify(f'Bearer {token}'.encode())

        self.assertEqual(identity.role, 'client')

    def test_verify_requires_bearer_prefix(self):
        token = CredentialService.issue_token(self.admin, 'admin')

        with self.assertRaises(AuthError) as context:
            CredentialService.verify(token)
        self.assertEqual(str(context.exception.detail), 'Unauthorized: Login First')

    def test_verify_rejects_tampered_token(self):
        token = CredentialService.issue_token(self.admin, 'admin')

        with self.assertRaises(AuthError) as context:
            CredentialService.verify(f'Bearer {token[:-2]}xx')
        self.assertEqual(str(context.exception.detail), 'Unauthorized: Invalid Token')

    def test_verify_rejects_expired_token(self):
        token = AccessToken()
        token['account_id'] = str(self.admin.pk)
        token['email'] = self.admin.email
        token['role'] = 'admin'
        token.set_exp(lifetime=-timedelta(seconds=1))

        with self.assertRaises(AuthError):
            CredentialService.verify(f'Bearer {token}')

    def test_authorize_admin_roles(self):
        self.assertEqual(ADMIN_ROLES, {'admin', 'superadmin'})
        CredentialService.authorize_admin(self.identity(self.admin))
        CredentialService.authorize_admin(self.identity(self.superadmin))

        with self.assertRaises(ForbiddenError):
            CredentialService.authorize_admin(self.identity(self.manager))
        with self.assertRaises(ForbiddenError):
            CredentialService.authorize_admin(self.identity(self.client_account))

    def test_authorize_admin_reads_current_role(self):
        """A demoted account is refused even though its token still says admin"""
        identity = self.identity(self.admin)
        self.admin.role = StaffAccount.ROLE_MANAGER
        self.admin.save()

        with self.assertRaises(ForbiddenError):
            CredentialService.authorize_admin(identity)

    def test_list_handlers_only_active_staff(self):
        self.manager.status = 'inactive'
        self.manager.save()

        handlers = list(CredentialService.list_handlers())
        self.assertEqual(handlers, [self.admin])


def mailed_code():
    """Pull the code out of the last reset email"""
    return re.search(r'\b(\d{6})\b', mail.outbox[-1].body).group(1)


def other_code(code):
    return '000000' if code != '000000' else '111111'


class PasswordResetServiceTests(BaseTestCase):
    """Test the forgot/reset password flow across the three stores"""

    def test_request_code_mails_a_six_digit_code(self):
        PasswordResetService.request_code('admin@example.com')

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['admin@example.com'])
        code = mailed_code()
        reset_code = PasswordResetCode.objects.get(email='admin@example.com')
        self.assertEqual(reset_code.account_kind, 'staff')
        self.assertNotEqual(reset_code.code, code)
        self.assertFalse(reset_code.used)

    def test_request_code_unknown_email(self):
        with self.assertRaises(NotFoundError):
            PasswordResetService.request_code('nobody@example.com')
        self.assertEqual(len(mail.outbox), 0)

    def test_request_code_missing_email(self):
        with self.assertRaises(ValidationError) as context:
            PasswordResetService.request_code('')
        self.assertIn('email', context.exception.detail)

    def test_new_request_retires_previous_codes(self):
        PasswordResetService.request_code('admin@example.com')
        PasswordResetService.request_code('admin@example.com')

        codes = PasswordResetCode.objects.filter(email='admin@example.com')
        self.assertEqual(codes.count(), 2)
        self.assertEqual(codes.filter(used=False).count(), 1)
        self.assertEqual(len(mail.outbox), 2)

    def test_reset_staff_password(self):
        PasswordResetService.request_code('admin@example.com')
        PasswordResetService.reset_password('admin@example.com', mailed_code(), 'newpass123')

        result = CredentialService.login('admin@example.com', 'newpass123')
        self.assertEqual(result.account.pk, self.admin.pk)
        with self.assertRaises(AuthError):
            CredentialService.login('admin@example.com', 'testpass123')

    def test_reset_client_and_superadmin_passwords(self):
        for email in ('portal@example.com', 'root@example.com'):
            PasswordResetService.request_code(email)
            PasswordResetService.reset_password(email, mailed_code(), 'newpass123')

            self.assertEqual(CredentialService.login(email, 'newpass123').account.email, email)

        kinds = set(PasswordResetCode.objects.values_list('account_kind', flat=True))
        self.assertEqual(kinds, {'client', 'superadmin'})

    def test_staff_wins_when_email_exists_in_several_stores(self):
        shadow = Client(name='Shadow', category=ClientCategory.OTHER, email='admin@example.com')
        shadow.set_password('testpass123')
        shadow.save()

        PasswordResetService.request_code('admin@example.com')
        account = PasswordResetService.reset_password('admin@example.com', mailed_code(), 'newpass123')

        self.assertEqual(account.pk, self.admin.pk)
        shadow.refresh_from_db()
        self.assertTrue(shadow.check_password('testpass123'))

    def test_code_is_single_use(self):
        PasswordResetService.request_code('admin@example.com')
        code = mailed_code()
        PasswordResetService.reset_password('admin@example.com', code, 'newpass123')

        with self.assertRaises(ValidationError) as context:
            PasswordResetService.reset_password('admin@example.com', code, 'another123')
        self.assertIn('otp', context.exception.detail)

    def test_expired_code_is_rejected(self):
        PasswordResetService.request_code('admin@example.com')
        PasswordResetCode.objects.update(expires_at=timezone.now() - timedelta(minutes=1))

        with self.assertRaises(ValidationError):
            PasswordResetService.reset_password('admin@example.com', mailed_code(), 'newpass123')

    def test_code_expiry_follows_setting(self):
        PasswordResetService.request_code('admin@example.com')
        reset_code = PasswordResetCode.objects.get()

        self.assertAlmostEqual(
            (reset_code.expires_at - reset_code.created_at).total_seconds(), 10 * 60, delta=5
        )

    @override_settings(PASSWORD_RESET_MAX_ATTEMPTS=2)
    def test_code_dies_after_too_many_wrong_tries(self):
        PasswordResetService.request_code('admin@example.com')
        code = mailed_code()

        for _ in range(2):
            with self.assertRaises(ValidationError):
                PasswordResetService.reset_password('admin@example.com', other_code(code), 'newpass123')

        self.assertEqual(PasswordResetCode.objects.get().attempts, 2)
        with self.assertRaises(ValidationError):
            PasswordResetService.reset_password('admin@example.com', code, 'newpass123')

    def test_short_password_is_rejected(self):
        PasswordResetService.request_code('admin@example.com')

        with self.assertRaises(ValidationError) as context:
            PasswordResetService.reset_password('admin@example.com', mailed_code(), '123')
        self.assertIn('newPassword', context.exception.detail)

    def test_missing_fields_are_all_reported(self):
        with self.assertRaises(ValidationError) as context:
            PasswordResetService.reset_password('admin@example.com', '', '')

        self.assertIn('otp', context.exception.detail)
        self.assertIn('newPassword', context.exception.detail)

    def test_mail_failure_stores_nothing(self):
        with mock.patch('apps.accounts.services.send_mail', side_effect=smtplib.SMTPException('down')):
            with self.assertRaises(EmailDeliveryError):
                PasswordResetService.request_code('admin@example.com')

        self.assertFalse(PasswordResetCode.objects.exists())


class AuthEndpointTests(BaseTestCase):
    """Test register/login/verify-token/password reset/createSuperAdmin/getAllAdmin endpoints"""

    def test_register_endpoint(self):
        response = self.client.post(reverse('auth-register'), {
            'fullName': 'Ram Thapa',
            'phone': '08011112222',
            'nationality': 'Nepali',
            'email': 'ram@example.com',
            'password': 'secret123',
            'confirmPassword': 'secret123',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['user']['email'], 'ram@example.com')

    def test_register_missing_fields(self):
        response = self.client.post(reverse('auth-register'), {'email': 'ram@example.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'All fields are required')
        self.assertIn('fullName', response.data['errors'])

    def test_register_duplicate_email(self):
        response = self.client.post(reverse('auth-register'), {
            'fullName': 'Admin Again',
            'phone': '08011112222',
            'nationality': 'Nepali',
            'email': 'admin@example.com',
            'password': 'secret123',
            'confirmPassword': 'secret123',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['message'], 'User already exists')

    def test_login_endpoint(self):
        response = self.client.post(
            reverse('auth-login'), {'email': 'admin@example.com', 'password': 'testpass123'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['role'], 'admin')
        self.assertIn('token', response.data)

    def test_login_failures_are_uniform(self):
        wrong_password = self.client.post(
            reverse('auth-login'), {'email': 'admin@example.com', 'password': 'nope'}, format='json'
        )
        unknown_email = self.client.post(
            reverse('auth-login'), {'email': 'ghost@example.com', 'password': 'nope'}, format='json'
        )

        self.assertEqual(wrong_password.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(wrong_password.status_code, unknown_email.status_code)
        self.assertEqual(wrong_password.data, unknown_email.data)

    def test_login_ignores_stale_authorization_header(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer garbage')
        response = self.client.post(
            reverse('auth-login'), {'email': 'admin@example.com', 'password': 'testpass123'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_verify_token_endpoint(self):
        self.authenticate(self.client_account)
        response = self.client.get(reverse('auth-verify-token'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['role'], 'client')

    def test_verify_token_without_header(self):
        response = self.client.get(reverse('auth-verify-token'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_verify_token_without_bearer_prefix(self):
        token = CredentialService.issue_token(self.admin, 'admin')
        self.client.credentials(HTTP_AUTHORIZATION=token)
        response = self.client.get(reverse('auth-verify-token'))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Unauthorized: Login First')

    def test_verify_token_with_invalid_token(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not.a.token')
        response = self.client.get(reverse('auth-verify-token'))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Unauthorized: Invalid Token')

    def test_create_super_admin_requires_superadmin(self):
        payload = {'name': 'Second', 'email': 'second@example.com', 'password': 'secret123'}

        response = self.client.post(reverse('auth-create-superadmin'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.authenticate(self.admin)
        response = self.client.post(reverse('auth-create-superadmin'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.superadmin)
        response = self.client.post(reverse('auth-create-superadmin'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], 'superadmin')

    def test_create_super_admin_bootstrap(self):
        SuperAdminAccount.objects.all().delete()

        response = self.client.post(
            reverse('auth-create-superadmin'),
            {'name': 'First', 'email': 'first@example.com', 'password': 'secret123'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_create_super_admin_duplicate_email(self):
        self.authenticate(self.superadmin)
        response = self.client.post(
            reverse('auth-create-superadmin'),
            {'name': 'Root', 'email': 'root@example.com', 'password': 'secret123'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_list_admins(self):
        self.authenticate(self.admin)
        response = self.client.get(reverse('admin-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [admin['name'] for admin in response.data['admins']]
        self.assertEqual(names, ['Admin User', 'Manager User'])

    def test_forgot_and_reset_password_endpoints(self):
        response = self.client.post(reverse('auth-forgot-password'), {'email': 'portal@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])

        response = self.client.post(reverse('auth-reset-password'), {
            'email': 'portal@example.com',
            'otp': mailed_code(),
            'newPassword': 'newpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Password reset successfully')

        response = self.client.post(
            reverse('auth-login'), {'email': 'portal@example.com', 'password': 'newpass123'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['role'], 'client')

    def test_forgot_password_unknown_email(self):
        response = self.client.post(reverse('auth-forgot-password'), {'email': 'nobody@example.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['message'], 'User not found')

    def test_reset_password_wrong_code(self):
        self.client.post(reverse('auth-forgot-password'), {'email': 'admin@example.com'}, format='json')

        response = self.client.post(reverse('auth-reset-password'), {
            'email': 'admin@example.com',
            'otp': other_code(mailed_code()),
            'newPassword': 'newpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid or expired OTP')
        self.assertIn('otp', response.data['errors'])

    def test_reset_password_ignores_bearer_token(self):
        self.client.post(reverse('auth-forgot-password'), {'email': 'admin@example.com'}, format='json')
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')

        response = self.client.post(reverse('auth-reset-password'), {
            'email': 'admin@example.com',
            'otp': mailed_code(),
            'newPassword': 'newpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
