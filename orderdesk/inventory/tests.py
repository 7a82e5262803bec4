"""
Test suite for Inventory module
Tests: stock records keeping product stock in step, stock policies
"""
from types import SimpleNamespace

from django.test import TestCase, override_settings
from rest_framework import status
from orderdesk.core.exceptions import InvalidReferenceError
from orderdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from orderdesk.inventory.lifecycle import PURCHASE_STOCK_POLICY, SALES_STOCK_POLICY
from orderdesk.inventory.models import StockRecord
from orderdesk.inventory.services import adjust_product_stock


class AdjustStockTests(TestCase):

    def test_adjust_and_allow_negative(self):
        product = TestDataFactory.create_product(stock=2)
        adjust_product_stock(product.id, -5)
        product.refresh_from_db()
        self.assertEqual(product.stock, -3)

    def test_unknown_product(self):
        with self.assertRaises(InvalidReferenceError):
            adjust_product_stock(999999, 1)


class StockPolicyTests(TestCase):
    """Status transitions against the stock_applied flag"""

    def setUp(self):
        self.product = TestDataFactory.create_product(stock=50)
        self.items = [SimpleNamespace(product_id=self.product.id, product_name=self.product.name, quantity=5)]

    def order(self, status, stock_applied=False):
        return SimpleNamespace(order_number='SO-TEST', status=status, stock_applied=stock_applied)

    def stock(self):
        self.product.refresh_from_db()
        return self.product.stock

    def test_sales_confirm_deducts(self):
        order = self.order('confirmed')
        movements = SALES_STOCK_POLICY.on_update(order, 'pending', self.items)
        self.assertEqual([m.delta for m in movements], [-5])
        self.assertTrue(order.stock_applied)
        self.assertEqual(self.stock(), 45)

    def test_sales_between_holding_statuses_is_noop(self):
        order = self.order('completed', stock_applied=True)
        self.assertEqual(SALES_STOCK_POLICY.on_update(order, 'confirmed', self.items), [])
        self.assertEqual(self.stock(), 50)

    def test_sales_cancel_reverses(self):
        order = self.order('cancelled', stock_applied=True)
        SALES_STOCK_POLICY.on_update(order, 'confirmed', self.items)
        self.assertFalse(order.stock_applied)
        self.assertEqual(self.stock(), 55)

    def test_cancel_without_applied_stock_is_noop(self):
        order = self.order('cancelled')
        self.assertEqual(SALES_STOCK_POLICY.on_update(order, 'pending', self.items), [])
        self.assertEqual(self.stock(), 50)

    def test_sales_create_confirmed_applies(self):
        order = self.order('confirmed')
        SALES_STOCK_POLICY.on_create(order, self.items)
        self.assertTrue(order.stock_applied)
        self.assertEqual(self.stock(), 45)

    @override_settings(ORDERDESK_APPLY_STOCK_ON_SALES_CREATE=False)
    def test_sales_create_can_defer_stock(self):
        order = self.order('confirmed')
        self.assertEqual(SALES_STOCK_POLICY.on_create(order, self.items), [])
        self.assertFalse(order.stock_applied)

    def test_purchase_create_received_applies(self):
        order = self.order('received')
        PURCHASE_STOCK_POLICY.on_create(order, self.items)
        self.assertTrue(order.stock_applied)
        self.assertEqual(self.stock(), 55)

    def test_delete_reverses_applied_stock(self):
        order = self.order('received', stock_applied=True)
        PURCHASE_STOCK_POLICY.on_delete(order, self.items)
        self.assertEqual(self.stock(), 45)


class StockRecordAPITests(TestCase):
    """Test Stock API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(stock=0)

    def add_record(self, quantity=10, **extra):
        payload = {'product': self.product.id, 'quantity': quantity, 'location': 'Main', **extra}
        return self.client.post('/api/v1/stocks/', payload, format='json')

    def test_create_adds_to_product_stock(self):
        response = self.add_record(quantity=12, batch_number='B-1')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['product_name'], self.product.name)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 12)

    def test_invalid_product(self):
        response = self.client.post('/api/v1/stocks/', {'product': 999999, 'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(StockRecord.objects.count(), 0)

    def test_update_quantity_shifts_stock(self):
        record_id = self.add_record(quantity=10).data['data']['id']
        response = self.client.patch(f'/api/v1/stocks/{record_id}/', {'quantity': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 4)

    def test_moving_record_to_other_product(self):
        other = TestDataFactory.create_product(stock=1)
        record_id = self.add_record(quantity=6).data['data']['id']
        self.client.patch(f'/api/v1/stocks/{record_id}/', {'product': other.id}, format='json')
        self.product.refresh_from_db()
        other.refresh_from_db()
        self.assertEqual(self.product.stock, 0)
        self.assertEqual(other.stock, 7)

    def test_delete_subtracts(self):
        record_id = self.add_record(quantity=8).data['data']['id']
        response = self.client.delete(f'/api/v1/stocks/{record_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 0)

    def test_low_stock_and_by_product(self):
        self.add_record(quantity=3)
        self.add_record(quantity=40)
        response = self.client.get('/api/v1/stocks/low-stock/')
        self.assertEqual([r['quantity'] for r in response.data['data']], [3])

        response = self.client.get(f'/api/v1/stocks/product/{self.product.id}/')
        self.assertEqual(len(response.data['data']), 2)

        response = self.client.get('/api/v1/stocks/', {'location': 'main'})
        self.assertEqual(response.data['data']['count'], 2)
