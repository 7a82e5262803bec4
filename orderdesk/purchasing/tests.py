"""
Test suite for Purchasing module
Tests: purchase order CRUD, cost pricing, receive/cancel stock movements
"""
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from orderdesk.core.models import AuditLog
from orderdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from orderdesk.parties.models import Supplier
from orderdesk.purchasing.models import PurchaseOrder


class PurchaseOrderAPITests(TestCase):
    """Test Purchase Order API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier(name='Parts Co')
        self.product = TestDataFactory.create_product(price=Decimal('15.00'), cost=Decimal('9.00'), stock=10)

    def create_order(self, **overrides):
        payload = {
            'supplier': self.supplier.id,
            'items': [{'product': self.product.id, 'quantity': 20}],
        }
        payload.update(overrides)
        return self.client.post('/api/v1/purchase-orders/', payload, format='json')

    def test_create_priced_at_cost(self):
        response = self.create_order()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['order_number'], f'PO-{timezone.now().year}-000001')
        self.assertEqual(Decimal(str(data['items'][0]['price'])), Decimal('9.00'))
        self.assertEqual(Decimal(str(data['total'])), Decimal('180.00'))
        self.assertEqual(data['supplier_name'], 'Parts Co')

    def test_explicit_unit_price(self):
        response = self.create_order(items=[{'product': self.product.id, 'quantity': 2, 'unit_price': '8.25'}])
        self.assertEqual(Decimal(str(response.data['data']['subtotal'])), Decimal('16.50'))

    def test_receive_adds_stock(self):
        order_id = self.create_order().data['data']['id']
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

        response = self.client.patch(f'/api/v1/purchase-orders/{order_id}/', {'status': 'received'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 30)
        self.assertTrue(AuditLog.objects.filter(action='stock_purchase').exists())

    def test_cancelling_received_order_removes_stock(self):
        order_id = self.create_order().data['data']['id']
        self.client.patch(f'/api/v1/purchase-orders/{order_id}/', {'status': 'received'}, format='json')
        self.client.patch(f'/api/v1/purchase-orders/{order_id}/', {'status': 'cancelled'}, format='json')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

    def test_created_as_received_adds_stock(self):
        response = self.create_order(status='received')
        self.assertTrue(response.data['data']['stock_applied'])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 30)

    def test_ordered_status_keeps_stock(self):
        order_id = self.create_order().data['data']['id']
        self.client.patch(f'/api/v1/purchase-orders/{order_id}/', {'status': 'ordered'}, format='json')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

    def test_new_supplier_from_name(self):
        response = self.client.post('/api/v1/purchase-orders/', {
            'supplier_name': 'Fresh Supplies',
            'items': [{'product': self.product.id, 'quantity': 1}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Supplier.objects.filter(name='Fresh Supplies').exists())

    def test_supplier_required(self):
        response = self.client.post('/api/v1/purchase-orders/', {
            'items': [{'product': self.product.id, 'quantity': 1}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Supplier name and items are required')

    def test_delete_received_order_removes_stock(self):
        order_id = self.create_order(status='received').data['data']['id']
        response = self.client.delete(f'/api/v1/purchase-orders/{order_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(PurchaseOrder.objects.filter(id=order_id).exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

    def test_list_filter_by_supplier(self):
        TestDataFactory.create_purchase_order(supplier=self.supplier)
        TestDataFactory.create_purchase_order()
        response = self.client.get('/api/v1/purchase-orders/', {'supplier': self.supplier.id})
        self.assertEqual(response.data['data']['count'], 1)
