# apps/applications/tests.py
"""
Applications app tests - Testing payment derivation, the application workflow and endpoints
"""
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from apps.applications.models import EpassportApplication, GraphicDesignJob, VisaApplication
from apps.applications.payments import compute_due_amount, derive_payment_status, to_money
from apps.applications.services import ApplicationService, HandlerSnapshot
from apps.clients.models import Client, ClientCategory
from apps.clients.services import ClientIntakeService
from apps.core.exceptions import NotFoundError, ValidationError
from apps.core.tests import BaseTestCase


class PaymentDerivationTests(TestCase):
    """Test the due amount and payment status rules"""

    def test_due_amount_formula(self):
        cases = [
            ([50000], 20000, 5000, Decimal('25000')),
            ([10000], 10000, 0, Decimal('0')),
            ([8000, 4000], 0, 0, Decimal('12000')),
            ([8000, 4000], 6000, 1000, Decimal('5000')),
            ([], 0, 0, Decimal('0')),
        ]
        for fees, paid, discount, expected in cases:
            self.assertEqual(compute_due_amount(fees, paid, discount), expected, (fees, paid, discount))

    def test_overpayment_is_not_clamped(self):
        due = compute_due_amount([10000], 12000, 0)

        self.assertEqual(due, Decimal('-2000'))
        self.assertEqual(derive_payment_status(due), 'Paid')

    def test_payment_status_threshold(self):
        self.assertEqual(derive_payment_status(Decimal('0')), 'Paid')
        self.assertEqual(derive_payment_status(Decimal('-0.01')), 'Paid')
        self.assertEqual(derive_payment_status(Decimal('0.01')), 'Due')

    def test_to_money(self):
        self.assertEqual(to_money(None), Decimal('0.00'))
        self.assertEqual(to_money(''), Decimal('0.00'))
        self.assertEqual(to_money('12.345'), Decimal('12.35'))
        self.assertEqual(to_money(7), Decimal('7.00'))


class ApplicationModelTests(TestCase):
    """Test that derived payment columns follow the fee columns on save"""

    def test_save_derives_payment_columns(self):
        job = GraphicDesignJob.objects.create(
            business_name='Momo House', design_type='Menu',
            amount=Decimal('50000'), paid_amount=Decimal('20000'), discount=Decimal('5000'),
        )

        self.assertEqual(job.due_amount, Decimal('25000'))
        self.assertEqual(job.total, job.due_amount)
        self.assertEqual(job.payment_status, 'Due')

    def test_supplied_derived_values_are_ignored(self):
        job = GraphicDesignJob(
            business_name='Momo House', design_type='Menu',
            amount=Decimal('10000'), paid_amount=Decimal('10000'),
            due_amount=Decimal('999'), payment_status='Due',
        )
        job.save()

        self.assertEqual(job.due_amount, Decimal('0'))
        self.assertEqual(job.payment_status, 'Paid')

    def test_save_with_update_fields_keeps_payment_consistent(self):
        job = GraphicDesignJob.objects.create(business_name='Momo House', design_type='Menu', amount=Decimal('1000'))
        job.paid_amount = Decimal('1000')
        job.save(update_fields=['paid_amount'])

        job.refresh_from_db()
        self.assertEqual(job.payment_status, 'Paid')

    def test_visa_sums_both_fees(self):
        visa = VisaApplication.objects.create(
            country='Japan',
            visa_application_fee=Decimal('8000'),
            translation_fee=Decimal('4000'),
            paid_amount=Decimal('2000'),
        )
        self.assertEqual(visa.due_amount, Decimal('10000'))


class ApplicationServiceTests(BaseTestCase):
    """Test the application workflow"""

    def visa_data(self, **overrides):
        data = {
            'client_id': str(self.client_account.pk),
            'handled_by': str(self.admin.pk),
            'translation_handler': str(self.manager.pk),
            'country': 'Japan',
            'visa_application_fee': Decimal('50000'),
            'translation_fee': Decimal('0'),
            'paid_amount': Decimal('20000'),
            'discount': Decimal('5000'),
        }
        data.update(overrides)
        return data

    def test_create_application(self):
        visa = ApplicationService.create_application(VisaApplication, self.visa_data())

        self.assertEqual(visa.client, self.client_account)
        self.assertEqual(visa.client_name, 'Portal Client')
        self.assertEqual(visa.handled_by, {'id': str(self.admin.pk), 'name': 'Admin User'})
        self.assertEqual(visa.translation_handler['name'], 'Manager User')
        self.assertEqual(visa.due_amount, Decimal('25000'))
        self.assertEqual(visa.payment_status, 'Due')
        self.assertIsNotNone(visa.submission_date)

    def test_fully_paid_application(self):
        job = ApplicationService.create_application(GraphicDesignJob, {
            'client_id': str(self.client_account.pk),
            'handled_by': str(self.admin.pk),
            'business_name': 'Everest Cafe',
            'design_type': 'Logo',
            'amount': Decimal('10000'),
            'paid_amount': Decimal('10000'),
            'discount': Decimal('0'),
        })

        self.assertEqual(job.due_amount, Decimal('0'))
        self.assertEqual(job.payment_status, 'Paid')

    def test_unknown_client(self):
        with self.assertRaises(ValidationError) as context:
            ApplicationService.create_application(
                VisaApplication, self.visa_data(client_id='00000000-0000-0000-0000-000000000000')
            )

        self.assertEqual(context.exception.detail['clientId'][0], 'Client not found')
        self.assertFalse(VisaApplication.objects.exists())

    def test_malformed_client_id(self):
        with self.assertRaises(ValidationError) as context:
            ApplicationService.create_application(VisaApplication, self.visa_data(client_id='abc'))

        self.assertIn('clientId', context.exception.detail)

    def test_handlers_must_be_staff(self):
        """Clients and super-admins cannot be handlers"""
        with self.assertRaises(ValidationError) as context:
            ApplicationService.create_application(VisaApplication, self.visa_data(
                handled_by=str(self.client_account.pk),
                translation_handler=str(self.superadmin.pk),
            ))

        self.assertEqual(context.exception.detail['handledBy'][0], 'Invalid handler selected')
        self.assertEqual(context.exception.detail['translationHandler'][0], 'Invalid handler selected')

    def test_all_reference_errors_reported_together(self):
        with self.assertRaises(ValidationError) as context:
            ApplicationService.create_application(VisaApplication, self.visa_data(client_id=None, handled_by=None))

        self.assertEqual(set(context.exception.detail), {'clientId', 'handledBy'})

    def test_handler_snapshot_survives_rename(self):
        visa = ApplicationService.create_application(VisaApplication, self.visa_data())
        self.admin.full_name = 'Renamed Admin'
        self.admin.save()

        visa.refresh_from_db()
        self.assertEqual(visa.handler_name, 'Admin User')

    def test_update_recomputes_payment(self):
        visa = ApplicationService.create_application(VisaApplication, self.visa_data())

        visa = ApplicationService.update_application(VisaApplication, visa.pk, {'paid_amount': Decimal('45000')})

        self.assertEqual(visa.due_amount, Decimal('0'))
        self.assertEqual(visa.payment_status, 'Paid')

    def test_update_is_idempotent(self):
        visa = ApplicationService.create_application(VisaApplication, self.visa_data())
        delta = {'paid_amount': Decimal('30000'), 'discount': Decimal('2500')}

        first = ApplicationService.update_application(VisaApplication, visa.pk, delta).due_amount
        second = ApplicationService.update_application(VisaApplication, visa.pk, delta).due_amount

        self.assertEqual(first, Decimal('17500'))
        self.assertEqual(first, second)

    def test_update_ignores_supplied_derived_fields(self):
        visa = ApplicationService.create_application(VisaApplication, self.visa_data())

        visa = ApplicationService.update_application(
            VisaApplication, visa.pk, {'due_amount': Decimal('0'), 'payment_status': 'Paid'}
        )

        self.assertEqual(visa.due_amount, Decimal('25000'))
        self.assertEqual(visa.payment_status, 'Due')

    def test_update_rechecks_handler(self):
        visa = ApplicationService.create_application(VisaApplication, self.visa_data())

        with self.assertRaises(ValidationError):
            ApplicationService.update_application(
                VisaApplication, visa.pk, {'handled_by': str(self.client_account.pk), 'paid_amount': Decimal('1')}
            )

        visa.refresh_from_db()
        self.assertEqual(visa.paid_amount, Decimal('20000'))

    def test_update_missing_application(self):
        with self.assertRaises(NotFoundError):
            ApplicationService.update_application(VisaApplication, 999, {'notes': 'x'})

    def test_delete_application(self):
        visa = ApplicationService.create_application(VisaApplication, self.visa_data())
        ApplicationService.delete_application(VisaApplication, visa.pk)

        self.assertFalse(VisaApplication.objects.exists())
        with self.assertRaises(NotFoundError):
            ApplicationService.delete_application(VisaApplication, visa.pk)

    def test_client_deletion_keeps_applications(self):
        visa = ApplicationService.create_application(VisaApplication, self.visa_data())
        ClientIntakeService.delete_client(self.client_account)

        visa.refresh_from_db()
        self.assertIsNone(visa.client)
        self.assertEqual(visa.client_name, 'Portal Client')

    def test_client_summary(self):
        ApplicationService.create_application(VisaApplication, self.visa_data())
        ApplicationService.create_application(EpassportApplication, {
            'client_id': str(self.client_account.pk),
            'handled_by': str(self.admin.pk),
            'application_type': 'Passport Renewal',
            'amount': Decimal('5000'),
            'paid_amount': Decimal('6000'),
        })

        summary = ApplicationService.client_summary(self.client_account)

        self.assertEqual(summary['totalDue'], Decimal('25000'))
        self.assertEqual(summary['totalPaid'], Decimal('26000'))
        self.assertEqual(summary['applications']['visa'].count(), 1)
        self.assertEqual(summary['applications']['epassport'].count(), 1)
        self.assertEqual(summary['applications']['graphicDesign'].count(), 0)

    def test_handler_snapshot(self):
        snapshot = HandlerSnapshot.of(self.admin)
        self.assertEqual(snapshot.as_dict(), {'id': str(self.admin.pk), 'name': 'Admin User'})


class VisaApplicationViewSetTests(BaseTestCase):
    """Test visa application endpoints"""

    def setUp(self):
        super().setUp()
        self.payload = {
            'clientId': str(self.client_account.pk),
            'handledBy': str(self.admin.pk),
            'translationHandler': str(self.manager.pk),
            'applicationType': 'Student Visa',
            'country': 'Japan',
            'deadline': '2026-12-01',
            'payment': {
                'visaApplicationFee': '50000',
                'translationFee': '0',
                'paidAmount': '20000',
                'discount': '5000',
            },
            'notes': 'Needs COE copy',
            'todos': [{'task': 'Collect passport', 'priority': 'High', 'dueDate': '2026-11-20'}],
        }

    def create(self):
        self.authenticate(self.admin)
        return self.client.post(reverse('visa-create'), self.payload, format='json')

    def test_create_visa_application(self):
        response = self.create()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['message'], 'Visa application created successfully')
        data = response.data['data']
        self.assertEqual(data['clientName'], 'Portal Client')
        self.assertEqual(data['handledBy'], 'Admin User')
        self.assertEqual(data['handledById'], str(self.admin.pk))
        self.assertEqual(data['translationHandler'], 'Manager User')
        self.assertEqual(data['payment']['dueAmount'], Decimal('25000'))
        self.assertEqual(data['payment']['total'], Decimal('25000'))
        self.assertEqual(data['paymentStatus'], 'Due')
        self.assertEqual(data['todos'][0]['dueDate'], '2026-11-20')
        self.assertFalse(data['todos'][0]['completed'])
        self.assertTrue(data['todos'][0]['id'])

    def test_create_ignores_client_supplied_totals(self):
        self.payload['payment'].update({'dueAmount': '0', 'total': '0'})
        self.payload['paymentStatus'] = 'Paid'
        response = self.create()

        self.assertEqual(response.data['data']['payment']['dueAmount'], Decimal('25000'))
        self.assertEqual(response.data['data']['paymentStatus'], 'Due')

    def test_create_with_unknown_client(self):
        self.payload['clientId'] = '00000000-0000-0000-0000-000000000000'
        response = self.create()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Client not found')

    def test_create_with_invalid_handler(self):
        self.payload['handledBy'] = str(self.client_account.pk)
        response = self.create()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors']['handledBy'], ['Invalid handler selected'])

    def test_create_rejects_negative_fee(self):
        self.payload['payment']['paidAmount'] = '-1'
        response = self.create()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('payment', response.data['errors'])

    def test_create_as_manager_forbidden(self):
        self.authenticate(self.manager)
        response = self.client.post(reverse('visa-create'), self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_unauthenticated(self):
        response = self.client.post(reverse('visa-create'), self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_partial_payment_update(self):
        pk = self.create().data['data']['id']
        response = self.client.put(
            reverse('visa-update', kwargs={'pk': pk}), {'payment': {'paidAmount': '45000'}}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Visa application updated successfully')
        self.assertEqual(response.data['data']['payment']['dueAmount'], Decimal('0'))
        self.assertEqual(response.data['data']['paymentStatus'], 'Paid')
        self.assertEqual(response.data['data']['country'], 'Japan')

    def test_update_twice_same_result(self):
        pk = self.create().data['data']['id']
        url = reverse('visa-update', kwargs={'pk': pk})
        body = {'payment': {'paidAmount': '30000', 'discount': '2500'}}

        first = self.client.patch(url, body, format='json').data['data']['payment']['dueAmount']
        second = self.client.patch(url, body, format='json').data['data']['payment']['dueAmount']

        self.assertEqual(first, Decimal('17500'))
        self.assertEqual(first, second)

    def test_update_missing_application(self):
        self.authenticate(self.admin)
        response = self.client.patch(reverse('visa-update', kwargs={'pk': 999}), {'notes': 'x'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Visa application not found')

    def test_list_and_filter(self):
        self.create()
        VisaApplication.objects.create(country='Nepal', paid_amount=Decimal('0'))
        self.authenticate(self.manager)

        response = self.client.get(reverse('visa-list'))
        self.assertEqual(len(response.data['data']), 2)

        response = self.client.get(reverse('visa-list'), {'paymentStatus': 'Due'})
        self.assertEqual([a['country'] for a in response.data['data']], ['Japan'])

        response = self.client.get(reverse('visa-list'), {'handledBy': 'admin user'})
        self.assertEqual(len(response.data['data']), 1)

        response = self.client.get(reverse('visa-list'), {'client': str(self.client_account.pk)})
        self.assertEqual(len(response.data['data']), 1)

    def test_retrieve(self):
        pk = self.create().data['data']['id']
        self.authenticate(self.client_account)
        response = self.client.get(reverse('visa-detail', kwargs={'pk': pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['country'], 'Japan')

    def test_delete_requires_superadmin(self):
        pk = self.create().data['data']['id']
        url = reverse('visa-delete', kwargs={'pk': pk})

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.superadmin)
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Visa application deleted successfully')
        self.assertFalse(VisaApplication.objects.exists())

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class EpassportAndDesignViewSetTests(BaseTestCase):
    """Test the ePassport and graphic design endpoints"""

    def test_create_epassport(self):
        self.authenticate(self.admin)
        response = self.client.post(reverse('epassport-create'), {
            'clientId': str(self.client_account.pk),
            'handledBy': str(self.admin.pk),
            'applicationType': 'Passport Renewal',
            'contactChannel': 'Viber',
            'paymentMethod': 'Counter Cash',
            'payment': {'amount': '10000', 'paidAmount': '10000', 'discount': '0'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'ePassport application created successfully')
        self.assertEqual(response.data['data']['payment']['dueAmount'], Decimal('0'))
        self.assertEqual(response.data['data']['paymentStatus'], 'Paid')

    def test_create_graphic_design(self):
        self.authenticate(self.superadmin)
        response = self.client.post(reverse('graphic-design-create'), {
            'clientId': str(self.client_account.pk),
            'handledBy': str(self.manager.pk),
            'businessName': 'Himalayan Kitchen',
            'designType': 'Flyer',
            'payment': {'amount': '50000', 'paidAmount': '20000', 'discount': '5000'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['payment']['dueAmount'], Decimal('25000'))
        self.assertEqual(response.data['data']['paymentStatus'], 'Due')
        self.assertEqual(response.data['data']['status'], 'In Progress')

    def test_graphic_design_missing_business_name(self):
        self.authenticate(self.admin)
        response = self.client.post(reverse('graphic-design-create'), {
            'clientId': str(self.client_account.pk),
            'handledBy': str(self.admin.pk),
            'designType': 'Flyer',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('businessName', response.data['errors'])


class ClientApplicationsEndpointTests(BaseTestCase):
    """Test the per-client applications view"""

    def setUp(self):
        super().setUp()
        ApplicationService.create_application(GraphicDesignJob, {
            'client_id': str(self.client_account.pk),
            'handled_by': str(self.admin.pk),
            'business_name': 'Portal Shop',
            'design_type': 'Logo',
            'amount': Decimal('30000'),
            'paid_amount': Decimal('10000'),
        })
        self.url = reverse('client-applications', kwargs={'pk': self.client_account.pk})

    def test_client_reads_own_applications(self):
        self.authenticate(self.client_account)
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalDue'], Decimal('20000'))
        self.assertEqual(response.data['totalPaid'], Decimal('10000'))
        self.assertEqual(len(response.data['applications']['graphicDesign']), 1)
        self.assertEqual(response.data['applications']['visa'], [])

    def test_client_cannot_read_other_clients(self):
        other = Client(name='Other', category=ClientCategory.OTHER, email='other@example.com')
        other.set_password('testpass123')
        other.save()
        self.authenticate(other)

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_reads_any_client(self):
        self.authenticate(self.manager)
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)


class SeedCommandTests(TestCase):
    """Test the seed_agency management command"""

    def test_seed_and_clear(self):
        call_command('seed_agency', staff=2, clients=3, applications=5, stdout=StringIO())

        self.assertEqual(Client.objects.count(), 3)
        total = VisaApplication.objects.count() + EpassportApplication.objects.count() + GraphicDesignJob.objects.count()
        self.assertEqual(total, 5)
        for job in GraphicDesignJob.objects.all():
            self.assertEqual(job.total, job.due_amount)

        call_command('seed_agency', staff=0, clients=0, applications=0, clear=True, stdout=StringIO())
        self.assertEqual(Client.objects.count(), 0)
        self.assertEqual(VisaApplication.objects.count(), 0)
