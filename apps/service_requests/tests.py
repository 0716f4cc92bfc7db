# apps/service_requests/tests.py
"""
Service request tests - Testing creation rules, visibility and the status workflow
"""
from django.urls import reverse
from rest_framework import status

from apps.core.exceptions import NotFoundError, ValidationError
from apps.core.tests import BaseTestCase
from apps.service_requests.models import ServiceRequest, ServiceRequestStatus
from apps.service_requests.services import ServiceRequestService


def request_payload(**overrides):
    payload = {
        'clientName': 'Portal Client',
        'phoneNumber': '09055556666',
        'serviceName': 'Document Translation',
        'message': 'Need my birth certificate translated.',
    }
    payload.update(overrides)
    return payload


class ServiceRequestServiceTests(BaseTestCase):
    """Test the service layer directly"""

    def create(self, identity=None, **overrides):
        data = {
            'client_name': 'Walk-in',
            'phone_number': '09011112222',
            'service_name': 'ePassport',
            'message': 'Renewal',
        }
        data.update(overrides)
        return ServiceRequestService.create_request(data, identity)

    def test_new_request_is_pending(self):
        service_request = self.create()

        self.assertEqual(service_request.status, ServiceRequestStatus.PENDING)
        self.assertIsNone(service_request.client)
        self.assertIsNone(service_request.super_admin)

    def test_missing_fields_are_all_reported(self):
        with self.assertRaises(ValidationError) as context:
            self.create(phone_number='', message='  ')

        self.assertIn('phoneNumber', context.exception.detail)
        self.assertIn('message', context.exception.detail)
        self.assertFalse(ServiceRequest.objects.exists())

    def test_creator_links(self):
        by_superadmin = self.create(identity=self.identity(self.superadmin))
        by_client = self.create(identity=self.identity(self.client_account))
        by_staff = self.create(identity=self.identity(self.admin))

        self.assertEqual(by_superadmin.super_admin, self.superadmin)
        self.assertEqual(by_client.client, self.client_account)
        self.assertIsNone(by_staff.client)
        self.assertIsNone(by_staff.super_admin)

    def test_clients_only_see_their_own(self):
        own = self.create(identity=self.identity(self.client_account))
        other = self.create()

        visible = ServiceRequestService.visible_to(self.identity(self.client_account))
        self.assertEqual(list(visible), [own])
        with self.assertRaises(NotFoundError):
            ServiceRequestService.get_request(other.pk, self.identity(self.client_account))

        self.assertEqual(ServiceRequestService.visible_to(self.identity(self.manager)).count(), 2)

    def test_status_transitions(self):
        service_request = self.create()

        ServiceRequestService.update_status(service_request, 'approved')
        service_request.refresh_from_db()
        self.assertEqual(service_request.status, ServiceRequestStatus.APPROVED)

        with self.assertRaises(ValidationError):
            ServiceRequestService.update_status(service_request, 'done')
        service_request.refresh_from_db()
        self.assertEqual(service_request.status, ServiceRequestStatus.APPROVED)

    def test_deleting_client_keeps_request(self):
        service_request = self.create(identity=self.identity(self.client_account))
        self.client_account.delete()

        service_request.refresh_from_db()
        self.assertIsNone(service_request.client)
        self.assertEqual(service_request.client_name, 'Walk-in')


class ServiceRequestViewSetTests(BaseTestCase):
    """Test the service request endpoints"""

    def setUp(self):
        super().setUp()
        self.service_request = ServiceRequest.objects.create(
            client_name='Walk-in',
            phone_number='09011112222',
            service_name='ePassport',
            message='Renewal',
        )

    def test_create_requires_authentication(self):
        response = self.client.post(reverse('service-request-create'), request_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_client_creates_request(self):
        self.authenticate(self.client_account)
        response = self.client.post(reverse('service-request-create'), request_payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['status'], 'pending')
        self.assertEqual(response.data['data']['clientId'], str(self.client_account.pk))
        self.assertIsNone(response.data['data']['superAdminId'])

    def test_create_ignores_status_in_payload(self):
        self.authenticate(self.admin)
        response = self.client.post(
            reverse('service-request-create'), request_payload(status='approved'), format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['status'], 'pending')

    def test_create_missing_fields(self):
        self.authenticate(self.admin)
        response = self.client.post(reverse('service-request-create'), {'clientName': 'X'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['message'], 'All fields are required.')
        self.assertIn('serviceName', response.data['errors'])

    def test_list_and_filter(self):
        ServiceRequest.objects.create(
            client_name='Other', phone_number='1', service_name='Visa', message='m', status='approved'
        )
        self.authenticate(self.manager)

        response = self.client.get(reverse('service-request-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 2)

        response = self.client.get(reverse('service-request-list'), {'status': 'approved'})
        self.assertEqual([item['clientName'] for item in response.data['data']], ['Other'])

    def test_client_list_is_scoped(self):
        self.authenticate(self.client_account)

        response = self.client.get(reverse('service-request-list'))
        self.assertEqual(response.data['data'], [])

        response = self.client.get(reverse('service-request-detail', args=[self.service_request.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_retrieve(self):
        self.authenticate(self.admin)
        response = self.client.get(reverse('service-request-detail', args=[self.service_request.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['serviceName'], 'ePassport')

    def test_update_status_requires_admin(self):
        url = reverse('service-request-update', args=[self.service_request.pk])

        self.authenticate(self.manager)
        response = self.client.patch(url, {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.client_account)
        response = self.client.patch(url, {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.admin)
        response = self.client.put(url, {'status': 'rejected'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'rejected')

    def test_update_invalid_status(self):
        self.authenticate(self.superadmin)
        response = self.client.patch(
            reverse('service-request-update', args=[self.service_request.pk]), {'status': 'archived'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid status value.')

    def test_update_only_touches_status(self):
        self.authenticate(self.admin)
        self.client.patch(
            reverse('service-request-update', args=[self.service_request.pk]),
            {'status': 'approved', 'clientName': 'Renamed'},
            format='json',
        )

        self.service_request.refresh_from_db()
        self.assertEqual(self.service_request.status, 'approved')
        self.assertEqual(self.service_request.client_name, 'Walk-in')

    def test_delete_requires_superadmin(self):
        url = reverse('service-request-delete', args=[self.service_request.pk])

        self.authenticate(self.admin)
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.superadmin)
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(ServiceRequest.objects.filter(pk=self.service_request.pk).exists())

    def test_delete_missing_request(self):
        self.authenticate(self.superadmin)
        response = self.client.delete(reverse('service-request-delete', args=[999999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
