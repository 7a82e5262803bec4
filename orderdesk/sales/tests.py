"""
Test suite for Sales module
Tests: sales order CRUD, numbering, snapshots, status-driven stock movements
"""
from decimal import Decimal

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from orderdesk.core.models import AuditLog
from orderdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from orderdesk.parties.models import Customer
from orderdesk.sales.models import SalesOrder, SalesOrderItem


class SalesOrderAPITests(TestCase):
    """Test Sales Order API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(name='Acme', address='1 Main St')
        self.product = TestDataFactory.create_product(price=Decimal('10.00'), stock=50)
        self.year = timezone.now().year

    def create_order(self, **overrides):
        payload = {
            'customer': self.customer.id,
            'items': [{'product': self.product.id, 'quantity': 5}],
        }
        payload.update(overrides)
        return self.client.post('/api/v1/sales-orders/', payload, format='json')

    def set_status(self, order_id, new_status):
        return self.client.patch(f'/api/v1/sales-orders/{order_id}/', {'status': new_status}, format='json')

    def test_create_sales_order(self):
        response = self.create_order(tax='5')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['order_number'], f'SO-{self.year}-000001')
        self.assertEqual(data['status'], 'pending')
        self.assertEqual(data['customer_name'], 'Acme')
        self.assertEqual(Decimal(str(data['subtotal'])), Decimal('50.00'))
        self.assertEqual(Decimal(str(data['total'])), Decimal('55.00'))
        self.assertEqual(data['items'][0]['product_name'], self.product.name)
        self.assertFalse(data['has_invoice'])
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='SalesOrder').exists())

    def test_pending_order_does_not_touch_stock(self):
        self.create_order()
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 50)

    def test_next_number_preview(self):
        response = self.client.get('/api/v1/sales-orders/next-number/')
        self.assertEqual(response.data['data']['order_number'], f'SO-{self.year}-000001')
        self.create_order()
        response = self.client.get('/api/v1/sales-orders/next-number/')
        self.assertEqual(response.data['data']['order_number'], f'SO-{self.year}-000002')

    def test_client_supplied_number(self):
        response = self.create_order(order_number='SO-MANUAL-1')
        self.assertEqual(response.data['data']['order_number'], 'SO-MANUAL-1')

        response = self.create_order(order_number='SO-MANUAL-1')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('already exists', response.data['message'])

    def test_customer_and_items_required(self):
        response = self.client.post('/api/v1/sales-orders/', {
            'items': [{'product': self.product.id, 'quantity': 1}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Customer name and items are required')

        response = self.create_order(items=[])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_walk_in_customer_is_auto_created(self):
        response = self.client.post('/api/v1/sales-orders/', {
            'customer_name': 'Walk-in Buyer',
            'customer_phone': '555-0101',
            'items': [{'product': self.product.id, 'quantity': 1}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        customer = Customer.objects.get(name='Walk-in Buyer')
        self.assertEqual(response.data['data']['customer'], customer.id)
        self.assertEqual(response.data['data']['customer_phone'], '555-0101')

    def test_unknown_customer_id(self):
        response = self.create_order(customer=999999)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(SalesOrder.objects.count(), 0)

    def test_missing_product_leaves_nothing_behind(self):
        response = self.client.post('/api/v1/sales-orders/', {
            'customer_name': 'Never Saved',
            'items': [
                {'product': self.product.id, 'quantity': 1},
                {'product': 999999, 'quantity': 1},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('999999', response.data['message'])
        self.assertEqual(SalesOrder.objects.count(), 0)
        self.assertEqual(SalesOrderItem.objects.count(), 0)
        self.assertFalse(Customer.objects.filter(name='Never Saved').exists())

    def test_snapshot_survives_customer_edit(self):
        order_id = self.create_order().data['data']['id']
        self.customer.name = 'Acme Renamed'
        self.customer.address = '99 Other Rd'
        self.customer.save()

        response = self.client.get(f'/api/v1/sales-orders/{order_id}/')
        self.assertEqual(response.data['data']['customer_name'], 'Acme')
        self.assertEqual(response.data['data']['customer_address'], '1 Main St')

    def test_confirm_then_cancel_restores_stock(self):
        order_id = self.create_order().data['data']['id']

        response = self.set_status(order_id, 'confirmed')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['stock_applied'])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 45)

        self.set_status(order_id, 'cancelled')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 50)
        self.assertTrue(AuditLog.objects.filter(action='status_change', model_name='SalesOrder').exists())
        self.assertEqual(AuditLog.objects.filter(action='stock_sale').count(), 2)

    def test_confirmed_to_completed_deducts_once(self):
        order_id = self.create_order().data['data']['id']
        self.set_status(order_id, 'confirmed')
        self.set_status(order_id, 'processing')
        self.set_status(order_id, 'completed')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 45)

    def test_back_to_pending_releases_stock(self):
        order_id = self.create_order().data['data']['id']
        self.set_status(order_id, 'confirmed')
        self.set_status(order_id, 'pending')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 50)

    def test_replacing_items_on_confirmed_order_reconciles_stock(self):
        other = TestDataFactory.create_product(price=Decimal('4.00'), stock=20)
        order_id = self.create_order().data['data']['id']
        self.set_status(order_id, 'confirmed')

        response = self.client.put(f'/api/v1/sales-orders/{order_id}/', {
            'items': [{'product': other.id, 'quantity': 3}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data['data']['subtotal'])), Decimal('12.00'))
        self.product.refresh_from_db()
        other.refresh_from_db()
        self.assertEqual(self.product.stock, 50)
        self.assertEqual(other.stock, 17)

    def test_confirm_with_new_items_applies_new_items(self):
        order_id = self.create_order().data['data']['id']
        response = self.client.patch(f'/api/v1/sales-orders/{order_id}/', {
            'status': 'confirmed',
            'items': [{'product': self.product.id, 'quantity': 2}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 48)

    def test_update_with_empty_items_rejected(self):
        order_id = self.create_order().data['data']['id']
        response = self.client.patch(f'/api/v1/sales-orders/{order_id}/', {'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(SalesOrderItem.objects.filter(order_id=order_id).count(), 1)

    def test_update_customer_fields_overlay_snapshot(self):
        order_id = self.create_order().data['data']['id']
        response = self.client.patch(f'/api/v1/sales-orders/{order_id}/', {
            'customer_phone': '555-9999', 'notes': None,
        }, format='json')
        data = response.data['data']
        self.assertEqual(data['customer_name'], 'Acme')
        self.assertEqual(data['customer_phone'], '555-9999')
        self.assertEqual(data['notes'], '')

    def test_delete_confirmed_order_returns_stock(self):
        order_id = self.create_order().data['data']['id']
        self.set_status(order_id, 'confirmed')
        response = self.client.delete(f'/api/v1/sales-orders/{order_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['id'], order_id)
        self.assertFalse(SalesOrder.objects.filter(id=order_id).exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 50)

    def test_missing_order_is_404(self):
        response = self.client.get('/api/v1/sales-orders/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Sales order not found')

    def test_list_filters(self):
        TestDataFactory.create_sales_order(customer=self.customer, status='confirmed')
        TestDataFactory.create_sales_order(status='pending')
        response = self.client.get('/api/v1/sales-orders/', {'status': 'confirmed'})
        self.assertEqual(response.data['data']['count'], 1)
        response = self.client.get('/api/v1/sales-orders/', {'customer': self.customer.id})
        self.assertEqual(response.data['data']['count'], 1)
        response = self.client.get('/api/v1/sales-orders/', {'search': 'acme'})
        self.assertEqual(response.data['data']['count'], 1)

    def test_create_confirmed_deducts_stock(self):
        response = self.create_order(status='confirmed')
        self.assertTrue(response.data['data']['stock_applied'])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 45)

    def test_created_confirmed_then_completed_deducts_once(self):
        order_id = self.create_order(status='confirmed').data['data']['id']
        response = self.set_status(order_id, 'completed')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 45)

    @override_settings(ORDERDESK_APPLY_STOCK_ON_SALES_CREATE=False)
    def test_create_confirmed_defers_stock_when_disabled(self):
        response = self.create_order(status='confirmed')
        self.assertFalse(response.data['data']['stock_applied'])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 50)

    def test_total_ignores_explicit_subtotal(self):
        response = self.create_order(
            items=[{'product': self.product.id, 'quantity': 2}], subtotal='100', tax='10',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(Decimal(str(data['subtotal'])), Decimal('100.00'))
        self.assertEqual(Decimal(str(data['total'])), Decimal('30.00'))

    def test_line_name_is_copied_from_product(self):
        response = self.create_order(items=[
            {'product': self.product.id, 'quantity': 1, 'product_name': 'Forged'},
        ])
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['items'][0]['product_name'], self.product.name)
        self.assertEqual(SalesOrderItem.objects.get().product_name, self.product.name)
