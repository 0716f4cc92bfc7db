# apps/clients/tests.py
"""
Clients app tests - Testing the intake rules, address lookup and client endpoints
"""
from unittest import mock

import requests
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from apps.accounts.services import CredentialService
from apps.clients.models import Client, ClientCategory
from apps.clients.services import (
    OPTIONAL_ADDRESS_CATEGORIES,
    AddressLookupService,
    AddressRequirement,
    ClientIntakeService,
    address_errors,
    classify_address_requirement,
    normalize_postal_code,
)
from apps.core.exceptions import AddressLookupError, ConflictError, ValidationError
from apps.core.tests import BaseTestCase


def zipcloud_response(results):
    response = mock.Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = {'status': 200, 'results': results}
    return response


TOKYO_RESULT = {
    'zipcode': '1000001',
    'address1': '東京都',
    'address2': '千代田区',
    'address3': '千代田',
}


class AddressRuleTests(TestCase):
    """Test the category-dependent address requirement"""

    def test_optional_categories(self):
        self.assertEqual(OPTIONAL_ADDRESS_CATEGORIES, {
            'Document Translation',
            'Epassport Applicant',
            'Japan Visa',
            'Graphic Design & Printing',
            'Web Design & Seo',
            'Birth Registration',
            'Documentation Support',
            'Other',
        })

    def test_every_other_category_requires_address(self):
        for category in ClientCategory.values:
            expected = (
                AddressRequirement.OPTIONAL if category in OPTIONAL_ADDRESS_CATEGORIES
                else AddressRequirement.REQUIRED
            )
            self.assertEqual(classify_address_requirement(category), expected, category)

    def test_unknown_category_requires_address(self):
        self.assertEqual(classify_address_requirement('Something New'), AddressRequirement.REQUIRED)

    def test_address_errors_name_every_empty_field(self):
        errors = address_errors('Student Visa Applicant', {'prefecture': '', 'city': ' ', 'street': 'Chiyoda 1-1'})
        self.assertEqual(set(errors), {'prefecture', 'city'})

    def test_normalize_postal_code(self):
        self.assertEqual(normalize_postal_code('100-0001'), '1000001')
        self.assertEqual(normalize_postal_code(None), '')


class ClientIntakeServiceTests(TestCase):
    """Test create/update rules of the intake workflow"""

    def test_optional_category_without_address(self):
        for index, category in enumerate(sorted(OPTIONAL_ADDRESS_CATEGORIES)):
            client = ClientIntakeService.create_client({
                'name': 'No Address',
                'category': category,
                'email': f'no-address-{index}@example.com',
            })
            self.assertEqual(client.prefecture, '')

    def test_required_category_without_address(self):
        with self.assertRaises(ValidationError) as context:
            ClientIntakeService.create_client({
                'name': 'Student',
                'category': ClientCategory.STUDENT_VISA,
                'email': 'student@example.com',
            })

        self.assertEqual(set(context.exception.detail), {'prefecture', 'city', 'street'})
        self.assertFalse(Client.objects.exists())

    def test_all_missing_fields_reported_together(self):
        with self.assertRaises(ValidationError) as context:
            ClientIntakeService.create_client({'category': ClientCategory.VISIT_VISA})

        self.assertEqual(
            set(context.exception.detail), {'name', 'email', 'prefecture', 'city', 'street'}
        )

    def test_default_password_is_used_and_logged(self):
        with self.assertLogs('apps.clients.services', level='WARNING') as logs:
            client = ClientIntakeService.create_client({
                'name': 'Default',
                'category': ClientCategory.OTHER,
                'email': 'default@example.com',
            })

        self.assertTrue(client.check_password('zoom'))
        self.assertIn('default password', logs.output[0])

    def test_supplied_password_is_hashed(self):
        client = ClientIntakeService.create_client({
            'name': 'Own Password',
            'category': ClientCategory.OTHER,
            'email': 'own@example.com',
            'password': 's3cret',
        })

        self.assertNotEqual(client.password, 's3cret')
        self.assertTrue(client.check_password('s3cret'))

    def test_duplicate_email_conflicts(self):
        data = {'name': 'One', 'category': ClientCategory.OTHER, 'email': 'dup@example.com'}
        ClientIntakeService.create_client(data)

        with self.assertRaises(ConflictError):
            ClientIntakeService.create_client({**data, 'email': 'DUP@example.com'})

    def test_update_applies_same_rules(self):
        client = ClientIntakeService.create_client({
            'name': 'Switcher', 'category': ClientCategory.OTHER, 'email': 'switch@example.com',
        })

        with self.assertRaises(ValidationError):
            ClientIntakeService.update_client(client, {'category': ClientCategory.VISIT_VISA})

        client.refresh_from_db()
        self.assertEqual(client.category, ClientCategory.OTHER)

    def test_update_rehashes_password(self):
        client = ClientIntakeService.create_client({
            'name': 'Rotate', 'category': ClientCategory.OTHER, 'email': 'rotate@example.com',
        })
        ClientIntakeService.update_client(client, {'password': 'rotated!'})

        client.refresh_from_db()
        self.assertTrue(client.check_password('rotated!'))
        self.assertFalse(client.check_password('zoom'))

    def test_update_email_conflict(self):
        ClientIntakeService.create_client({'name': 'A', 'category': ClientCategory.OTHER, 'email': 'a@example.com'})
        b = ClientIntakeService.create_client({'name': 'B', 'category': ClientCategory.OTHER, 'email': 'b@example.com'})

        with self.assertRaises(ConflictError):
            ClientIntakeService.update_client(b, {'email': 'a@example.com'})

    def test_concurrent_duplicate_create_conflicts(self):
        ClientIntakeService.create_client({'name': 'A', 'category': ClientCategory.OTHER, 'email': 'a@example.com'})

        # the other request passed the uniqueness check first
        with mock.patch.object(ClientIntakeService, '_ensure_unique_email'):
            with self.assertRaises(ConflictError):
                ClientIntakeService.create_client(
                    {'name': 'A2', 'category': ClientCategory.OTHER, 'email': 'a@example.com'}
                )

        self.assertEqual(Client.objects.filter(email='a@example.com').count(), 1)

    def test_concurrent_duplicate_update_conflicts(self):
        ClientIntakeService.create_client({'name': 'A', 'category': ClientCategory.OTHER, 'email': 'a@example.com'})
        b = ClientIntakeService.create_client({'name': 'B', 'category': ClientCategory.OTHER, 'email': 'b@example.com'})

        with mock.patch.object(ClientIntakeService, '_ensure_unique_email'):
            with self.assertRaises(ConflictError):
                ClientIntakeService.update_client(b, {'email': 'a@example.com'})

    def test_client_can_log_in(self):
        ClientIntakeService.create_client({
            'name': 'Portal', 'category': ClientCategory.OTHER, 'email': 'login@example.com', 'password': 'pw12345',
        })

        result = CredentialService.login('login@example.com', 'pw12345')
        self.assertEqual(result.role, 'client')


@mock.patch('apps.clients.services.requests.get')
class AddressLookupTests(TestCase):
    """Test the postal code lookup"""

    def test_resolves_address(self, mock_get):
        mock_get.return_value = zipcloud_response([TOKYO_RESULT])

        address = AddressLookupService.resolve_address('1000001')

        self.assertEqual(address.postal_code, '100-0001')
        self.assertEqual(address.prefecture, '東京都')
        self.assertEqual(address.city, '千代田区')
        self.assertEqual(address.street, '千代田')
        self.assertEqual(mock_get.call_args.kwargs['params'], {'zipcode': '1000001'})

    def test_short_code_clears_without_request(self, mock_get):
        address = AddressLookupService.resolve_address('100-00')

        self.assertEqual(address.prefecture, '')
        mock_get.assert_not_called()

    def test_no_results(self, mock_get):
        mock_get.return_value = zipcloud_response(None)

        with self.assertRaises(AddressLookupError) as context:
            AddressLookupService.resolve_address('999-9999')
        self.assertEqual(str(context.exception.detail), 'No address found for this postal code.')

    def test_network_failure(self, mock_get):
        mock_get.side_effect = requests.ConnectionError('down')

        with self.assertRaises(AddressLookupError) as context:
            AddressLookupService.resolve_address('100-0001')
        self.assertEqual(
            str(context.exception.detail), 'Failed to fetch address. Please enter it manually.'
        )

    def test_intake_lookup_skips_optional_categories(self, mock_get):
        address, warning = ClientIntakeService.lookup_address(ClientCategory.OTHER, '100-0001')

        self.assertIsNone(address)
        self.assertIsNone(warning)
        mock_get.assert_not_called()

    def test_intake_lookup_failure_clears_with_warning(self, mock_get):
        mock_get.side_effect = requests.Timeout()

        address, warning = ClientIntakeService.lookup_address(ClientCategory.VISIT_VISA, '100-0001')

        self.assertEqual(address.prefecture, '')
        self.assertEqual(warning, 'Failed to fetch address. Please enter it manually.')


class ClientViewSetTests(BaseTestCase):
    """Test ClientViewSet endpoints"""

    def setUp(self):
        """Set up test data"""
        super().setUp()
        self.create_url = reverse('client-create')
        self.list_url = reverse('client-list')
        self.payload = {
            'name': 'Hari Gurung',
            'category': 'Visit Visa Applicant',
            'email': 'hari@example.com',
            'phone': '08033334444',
            'postalCode': '100-0001',
            'prefecture': '東京都',
            'city': '千代田区',
            'street': '千代田1-1',
            'modeOfContact': ['Viber', 'WhatsApp'],
        }

    def test_create_client_as_admin(self):
        self.authenticate(self.admin)
        response = self.client.post(self.create_url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Client created successfully')
        self.assertEqual(response.data['client']['modeOfContact'], ['Viber', 'WhatsApp'])
        self.assertNotIn('password', response.data['client'])

    def test_create_optional_address_category(self):
        self.authenticate(self.admin)
        response = self.client.post(self.create_url, {
            'name': 'Translator Client',
            'category': 'Document Translation',
            'email': 'translate@example.com',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_create_missing_address(self):
        self.authenticate(self.admin)
        response = self.client.post(self.create_url, {
            'name': 'Student',
            'category': 'Student Visa Applicant',
            'email': 'student@example.com',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(set(response.data['errors']), {'prefecture', 'city', 'street'})

    def test_create_reports_field_and_address_errors_together(self):
        self.authenticate(self.admin)
        response = self.client.post(self.create_url, {
            'category': 'Student Visa Applicant',
            'email': 'not-an-email',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue({'name', 'email', 'prefecture', 'city', 'street'} <= set(response.data['errors']))

    def test_create_duplicate_email(self):
        self.authenticate(self.admin)
        self.client.post(self.create_url, self.payload, format='json')
        response = self.client.post(self.create_url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['message'], 'Client with this email already exists')

    def test_create_multipart_with_photo(self):
        self.authenticate(self.superadmin)
        data = {
            'name': 'Photo Client',
            'category': 'Graphic Design & Printing',
            'email': 'photo@example.com',
            'modeOfContact': '["Direct Call"]',
            'profilePhoto': SimpleUploadedFile('me.png', b'\x89PNG\r\n', content_type='image/png'),
        }
        response = self.client.post(self.create_url, data, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['client']['modeOfContact'], ['Direct Call'])
        self.assertTrue(response.data['client']['profilePhotoUrl'])

    def test_create_client_as_manager(self):
        """Managers are authenticated but may not write"""
        self.authenticate(self.manager)
        response = self.client.post(self.create_url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_client_unauthenticated(self):
        response = self.client.post(self.create_url, self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_and_filter_clients(self):
        self.authenticate(self.manager)
        response = self.client.get(self.list_url, {'category': 'Document Translation'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['email'] for c in response.data['clients']], ['portal@example.com'])

    def test_list_paginated_on_request(self):
        self.authenticate(self.manager)
        response = self.client.get(self.list_url, {'page': 1})

        self.assertEqual(response.data['count'], 1)
        self.assertIn('clients', response.data)

    def test_search_clients_by_name(self):
        self.authenticate(self.manager)
        response = self.client.get(self.list_url, {'search': 'Portal'})

        self.assertEqual(len(response.data['clients']), 1)

    def test_retrieve_client(self):
        self.authenticate(self.manager)
        response = self.client.get(reverse('client-detail', kwargs={'pk': self.client_account.pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['client']['name'], 'Portal Client')

    def test_update_client(self):
        self.authenticate(self.admin)
        url = reverse('client-update', kwargs={'pk': self.client_account.pk})
        response = self.client.patch(url, {'name': 'Renamed', 'status': 'inactive'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.client_account.refresh_from_db()
        self.assertEqual(self.client_account.name, 'Renamed')
        self.assertEqual(self.client_account.status, 'inactive')

    def test_update_to_required_category_without_address(self):
        self.authenticate(self.admin)
        url = reverse('client-update', kwargs={'pk': self.client_account.pk})
        response = self.client.patch(url, {'category': 'Student Visa Applicant'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(set(response.data['errors']), {'prefecture', 'city', 'street'})

    def test_delete_client(self):
        self.authenticate(self.admin)
        response = self.client.delete(reverse('client-delete', kwargs={'pk': self.client_account.pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Client deleted successfully')
        self.assertFalse(Client.objects.filter(pk=self.client_account.pk).exists())

    def test_delete_client_as_manager(self):
        self.authenticate(self.manager)
        response = self.client.delete(reverse('client-delete', kwargs={'pk': self.client_account.pk}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @mock.patch('apps.clients.services.requests.get')
    def test_lookup_address_endpoint(self, mock_get):
        mock_get.return_value = zipcloud_response([TOKYO_RESULT])
        self.authenticate(self.admin)

        response = self.client.get(
            reverse('client-lookup-address'),
            {'postalCode': '1000001', 'category': 'Visit Visa Applicant'},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['lookupPerformed'])
        self.assertEqual(response.data['address']['postalCode'], '100-0001')
        self.assertEqual(response.data['address']['city'], '千代田区')

    @mock.patch('apps.clients.services.requests.get')
    def test_lookup_address_endpoint_failure(self, mock_get):
        mock_get.side_effect = requests.ConnectionError()
        self.authenticate(self.admin)

        response = self.client.get(reverse('client-lookup-address'), {'postalCode': '1000001'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['address']['prefecture'], '')
