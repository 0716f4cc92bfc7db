# apps/core/tests.py
"""
Core app tests - Testing base models, permissions, error rendering and pagination
"""
from django.test import TestCase
from rest_framework import exceptions
from rest_framework.test import APITestCase, APIClient, APIRequestFactory

from apps.accounts.identity import Identity
from apps.accounts.models import StaffAccount, SuperAdminAccount
from apps.accounts.services import CredentialService
from apps.clients.models import Client, ClientCategory
from apps.core.exceptions import (
    AddressLookupError,
    AuthError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    custom_exception_handler,
)


class BaseTestCase(APITestCase):
    """Base test case with one account of every kind"""

    def setUp(self):
        """Set up accounts and an API client"""
        self.admin = StaffAccount.objects.create_user(
            email='admin@example.com',
            password='testpass123',
            full_name='Admin User',
            phone='09012345678',
            nationality='Nepali',
            role=StaffAccount.ROLE_ADMIN,
        )

        self.manager = StaffAccount.objects.create_user(
            email='manager@example.com',
            password='testpass123',
            full_name='Manager User',
            role=StaffAccount.ROLE_MANAGER,
        )

        self.superadmin = SuperAdminAccount(name='Root', email='root@example.com')
        self.superadmin.set_password('testpass123')
        self.superadmin.save()

        self.client_account = Client(
            name='Portal Client',
            category=ClientCategory.DOCUMENT_TRANSLATION,
            email='portal@example.com',
        )
        self.client_account.set_password('testpass123')
        self.client_account.save()

        self.client = APIClient()

    def identity(self, account):
        return Identity(account_id=str(account.pk), email=account.email, role=account.role)

    def authenticate(self, account):
        """Helper to send a real bearer token for ``account``"""
        token = CredentialService.issue_token(account, account.role)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    def unauthenticate(self):
        """Helper to clear authentication"""
        self.client.credentials()


class AccountModelTests(TestCase):
    """Test the abstract account base through Client"""

    def test_email_is_lowercased_on_save(self):
        client = Client(name='Mixed', category=ClientCategory.OTHER, email='  Mixed.Case@Example.COM ')
        client.set_password('secret')
        client.save()

        self.assertEqual(client.email, 'mixed.case@example.com')

    def test_password_is_hashed(self):
        client = Client(name='Hashed', category=ClientCategory.OTHER, email='hashed@example.com')
        client.set_password('secret')

        self.assertNotEqual(client.password, 'secret')
        self.assertTrue(client.check_password('secret'))
        self.assertFalse(client.check_password('wrong'))

    def test_default_status_is_active(self):
        client = Client.objects.create(name='Status', category=ClientCategory.OTHER, email='status@example.com')
        self.assertEqual(client.status, 'active')


class PermissionTests(BaseTestCase):
    """Test custom permission classes"""

    def _request(self, user, method='GET'):
        class MockRequest:
            pass

        request = MockRequest()
        request.user = user
        request.method = method
        return request

    def test_is_admin_permission_with_admin_role(self):
        """Test that ADMIN role staff pass IsAdmin permission"""
        from apps.core.permissions import IsAdmin

        self.assertTrue(IsAdmin().has_permission(self._request(self.identity(self.admin)), None))

    def test_is_admin_permission_with_superadmin(self):
        from apps.core.permissions import IsAdmin

        self.assertTrue(IsAdmin().has_permission(self._request(self.identity(self.superadmin)), None))

    def test_is_admin_permission_with_manager(self):
        """Test that managers are refused"""
        from apps.core.permissions import IsAdmin

        with self.assertRaises(ForbiddenError):
            IsAdmin().has_permission(self._request(self.identity(self.manager)), None)

    def test_is_admin_permission_with_client(self):
        from apps.core.permissions import IsAdmin

        with self.assertRaises(ForbiddenError):
            IsAdmin().has_permission(self._request(self.identity(self.client_account)), None)

    def test_is_admin_rechecks_account_store(self):
        """A token whose role claim says admin is refused once the account is gone"""
        from apps.core.permissions import IsAdmin

        identity = self.identity(self.admin)
        self.admin.delete()

        with self.assertRaises(ForbiddenError):
            IsAdmin().has_permission(self._request(identity), None)

    def test_is_superadmin_permission(self):
        from apps.core.permissions import IsSuperAdmin

        permission = IsSuperAdmin()
        self.assertTrue(permission.has_permission(self._request(self.identity(self.superadmin)), None))
        with self.assertRaises(ForbiddenError):
            permission.has_permission(self._request(self.identity(self.admin)), None)

    def test_anonymous_request_is_not_authenticated(self):
        from apps.core.permissions import IsAuthenticatedAccount

        self.assertFalse(IsAuthenticatedAccount().has_permission(self._request(None), None))


class ExceptionTests(TestCase):
    """Test typed errors and the envelope rendered by the exception handler"""

    def render(self, exc):
        return custom_exception_handler(exc, {'view': None, 'request': None})

    def test_status_codes(self):
        self.assertEqual(ValidationError({'name': ['required']}).status_code, 400)
        self.assertEqual(AuthError().status_code, 401)
        self.assertEqual(ForbiddenError().status_code, 403)
        self.assertEqual(NotFoundError().status_code, 404)
        self.assertEqual(ConflictError().status_code, 409)
        self.assertEqual(AddressLookupError().status_code, 502)

    def test_validation_error_lists_every_field(self):
        response = self.render(ValidationError({
            'prefecture': ['This field is required.'],
            'city': ['This field is required.'],
            'street': ['This field is required.'],
        }))

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['message'], 'Please correct the highlighted fields.')
        self.assertEqual(set(response.data['errors']), {'prefecture', 'city', 'street'})

    def test_validation_error_single_field_uses_its_message(self):
        response = self.render(ValidationError({'clientId': ['Client not found']}))

        self.assertEqual(response.data['message'], 'Client not found')
        self.assertEqual(response.data['errors'], {'clientId': ['Client not found']})

    def test_validation_error_explicit_message(self):
        response = self.render(ValidationError({
            'message': ['All fields are required'],
            'email': ['This field is required.'],
        }))

        self.assertEqual(response.data['message'], 'All fields are required')
        self.assertNotIn('message', response.data['errors'])
        self.assertIn('email', response.data['errors'])

    def test_conflict_error(self):
        response = self.render(ConflictError('User already exists'))

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data, {'success': False, 'message': 'User already exists'})

    def test_auth_error(self):
        response = self.render(AuthError('Invalid email or password'))

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['message'], 'Invalid email or password')

    def test_drf_not_found_is_wrapped(self):
        response = self.render(exceptions.NotFound())

        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.data['success'])

    def test_unexpected_exception_is_500(self):
        response = self.render(RuntimeError('boom'))

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {'success': False, 'message': 'Internal server error'})


class PaginationTests(TestCase):
    """Test pagination classes"""

    def test_static_pagination_defaults(self):
        from apps.core.pagination import StaticPagination

        pagination = StaticPagination()
        self.assertEqual(pagination.page_size, 10)
        self.assertEqual(pagination.max_page_size, 100)
        self.assertEqual(pagination.page_size_query_param, 'page_size')

    def test_optional_pagination_skips_without_page_params(self):
        from rest_framework.request import Request
        from apps.core.pagination import OptionalPagination

        request = Request(APIRequestFactory().get('/items'))
        self.assertIsNone(OptionalPagination().paginate_queryset(list(range(30)), request))

    def test_optional_pagination_pages_when_asked(self):
        from rest_framework.request import Request
        from apps.core.pagination import OptionalPagination

        request = Request(APIRequestFactory().get('/items', {'page': 2}))
        page = OptionalPagination().paginate_queryset(list(range(30)), request)
        self.assertEqual(page, list(range(10, 20)))
