"""
Test suite for Parties module
Tests: customer/supplier CRUD, list cache invalidation, snapshot resolution
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from orderdesk.core.exceptions import InvalidReferenceError, ValidationError
from orderdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from orderdesk.parties.models import Customer, Supplier
from orderdesk.parties.snapshots import auto_create_party, resolve_snapshot


class SnapshotResolverTests(TestCase):
    """Test resolve_snapshot"""

    def test_existing_party_snapshot(self):
        customer = TestDataFactory.create_customer(name='Acme', email='buy@acme.test', address='1 Main St')
        result = resolve_snapshot(Customer, customer.id, {'name': 'ignored'})
        self.assertEqual(result.party, customer)
        self.assertEqual(result.name, 'Acme')
        self.assertEqual(result.address, '1 Main St')
        self.assertFalse(result.auto_created)

    def test_unknown_party_id(self):
        with self.assertRaises(InvalidReferenceError):
            resolve_snapshot(Customer, 999999, {})

    def test_auto_creates_from_name(self):
        result = resolve_snapshot(Supplier, None, {'name': '  Widgets Ltd ', 'phone': '555-1000'})
        self.assertTrue(result.auto_created)
        self.assertEqual(result.party.name, 'Widgets Ltd')
        self.assertEqual(Supplier.objects.get(pk=result.party.pk).phone, '555-1000')

    def test_name_required_without_id(self):
        with self.assertRaises(ValidationError):
            resolve_snapshot(Customer, None, {'name': '   '})

    def test_failed_auto_create_keeps_snapshot(self):
        with self.assertLogs('orderdesk.parties.snapshots', level='WARNING'):
            result = resolve_snapshot(Customer, None, {'name': 'Walk-in', 'email': 'not-an-email'})
        self.assertIsNone(result.party)
        self.assertEqual(result.name, 'Walk-in')
        self.assertEqual(result.email, 'not-an-email')
        self.assertFalse(Customer.objects.filter(name='Walk-in').exists())

    def test_auto_create_result_reports_error(self):
        result = auto_create_party(Customer, {'name': 'x' * 300, 'email': '', 'phone': '', 'address': ''})
        self.assertFalse(result.created)
        self.assertTrue(result.error)


class CustomerAPITests(TestCase):
    """Test Customer API endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer_defaults(self):
        response = self.client.post('/api/v1/customers/', {'name': 'Jane Doe', 'email': 'jane@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['country'], 'USA')
        self.assertEqual(data['status'], 'active')

    def test_blank_name_rejected(self):
        response = self.client.post('/api/v1/customers/', {'name': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_cache_is_invalidated_on_save(self):
        TestDataFactory.create_customer(name='First')
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(len(response.data['data']), 1)

        TestDataFactory.create_customer(name='Second')
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(len(response.data['data']), 2)

    def test_search(self):
        TestDataFactory.create_customer(name='Alpha Stores')
        TestDataFactory.create_customer(name='Beta Mart')
        response = self.client.get('/api/v1/customers/', {'search': 'alpha'})
        self.assertEqual([c['name'] for c in response.data['data']], ['Alpha Stores'])

    def test_update_customer(self):
        customer = TestDataFactory.create_customer()
        response = self.client.patch(f'/api/v1/customers/{customer.id}/', {'credit_limit': '500.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        customer.refresh_from_db()
        self.assertEqual(str(customer.credit_limit), '500.00')

    def test_referenced_customer_cannot_be_deleted(self):
        customer = TestDataFactory.create_customer()
        TestDataFactory.create_sales_order(customer=customer)
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Customer.objects.filter(id=customer.id).exists())

    def test_delete_unreferenced_customer(self):
        customer = TestDataFactory.create_customer()
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['id'], customer.id)
        self.assertFalse(Customer.objects.filter(id=customer.id).exists())


class SupplierAPITests(TestCase):
    """Test Supplier API endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_list_supplier(self):
        response = self.client.post('/api/v1/suppliers/', {'name': 'Parts Co', 'bank_details': 'IBAN 123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/suppliers/')
        self.assertEqual(response.data['data'][0]['bank_details'], 'IBAN 123')

    def test_missing_supplier_is_404(self):
        response = self.client.get('/api/v1/suppliers/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
