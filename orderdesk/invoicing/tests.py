"""
Test suite for Invoicing module
Tests: manual invoices, generation from sales orders, duplicate protection
"""
from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from orderdesk.core.exceptions import ConflictError
from orderdesk.core.models import AuditLog
from orderdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from orderdesk.invoicing.models import Invoice, InvoiceItem
from orderdesk.invoicing.services import InvoiceService


class GenerateInvoiceTests(TestCase):
    """Invoices generated from sales orders"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(price=Decimal('12.00'))
        self.order = TestDataFactory.create_sales_order(items=[(self.product, 3)], status='confirmed')

    def generate(self, order=None, payload=None):
        order = order or self.order
        return self.client.post(f'/api/v1/invoices/from-sales-order/{order.id}/', payload or {}, format='json')

    def test_generate_copies_order(self):
        response = self.generate()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['invoice_number'], f'INV-{timezone.now().year}-000001')
        self.assertEqual(data['sales_order'], self.order.id)
        self.assertEqual(data['sales_order_number'], self.order.order_number)
        self.assertEqual(data['customer_name'], self.order.customer_name)
        self.assertEqual(data['status'], 'paid')
        self.assertEqual(Decimal(str(data['total'])), Decimal('36.00'))
        self.assertEqual(Decimal(str(data['paid_amount'])), Decimal('36.00'))
        self.assertEqual(Decimal(str(data['balance_due'])), Decimal('0.00'))
        self.assertEqual(data['notes'], f'Generated from Sales Order {self.order.order_number}')
        self.assertEqual(len(data['items']), 1)
        self.assertEqual(data['items'][0]['quantity'], 3)
        self.assertTrue(AuditLog.objects.filter(action='invoice_generate').exists())

    def test_second_generation_conflicts(self):
        first = self.generate().data['data']
        response = self.generate()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invoice already exists for this sales order')
        self.assertEqual(response.data['existing_invoice']['id'], first['id'])
        self.assertEqual(Invoice.objects.filter(sales_order=self.order).count(), 1)

    def test_pending_order_cannot_be_invoiced(self):
        pending = TestDataFactory.create_sales_order(items=[(self.product, 1)], status='pending')
        response = self.generate(order=pending)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['order_status'], 'pending')
        self.assertFalse(Invoice.objects.filter(sales_order=pending).exists())

    def test_unknown_order_is_404(self):
        response = self.client.post('/api/v1/invoices/from-sales-order/999999/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Sales order not found')

    def test_explicit_dates_and_notes(self):
        response = self.generate(payload={'invoice_date': '2026-03-01', 'due_date': '2026-03-15', 'notes': 'Net 14'})
        data = response.data['data']
        self.assertEqual(data['invoice_date'], '2026-03-01')
        self.assertEqual(data['due_date'], '2026-03-15')
        self.assertEqual(data['notes'], 'Net 14')

    @override_settings(ORDERDESK_INVOICE_DUE_DAYS=7)
    def test_due_date_defaults_from_setting(self):
        invoice = InvoiceService().generate_from_sales_order(self.order.id, invoice_date=date(2026, 1, 10))
        self.assertEqual(invoice.due_date, date(2026, 1, 17))

    def test_service_raises_conflict(self):
        InvoiceService().generate_from_sales_order(self.order.id)
        with self.assertRaises(ConflictError):
            InvoiceService().generate_from_sales_order(self.order.id)

    def test_sales_order_reports_invoice(self):
        self.generate()
        response = self.client.get(f'/api/v1/sales-orders/{self.order.id}/')
        self.assertTrue(response.data['data']['has_invoice'])

    def test_by_sales_order(self):
        self.generate()
        response = self.client.get(f'/api/v1/invoices/by-sales-order/{self.order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)

        response = self.client.get('/api/v1/invoices/by-sales-order/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ManualInvoiceAPITests(TestCase):
    """Invoices entered by hand"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(name='Globex')
        self.product = TestDataFactory.create_product(price=Decimal('20.00'))

    def create_invoice(self, **overrides):
        payload = {
            'invoice_number': 'INV-MANUAL-1',
            'customer': self.customer.id,
            'items': [{'product': self.product.id, 'quantity': 2}],
        }
        payload.update(overrides)
        return self.client.post('/api/v1/invoices/', payload, format='json')

    def test_create_manual_invoice(self):
        response = self.create_invoice(tax='4', invoice_date=str(timezone.localdate()))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['status'], 'unpaid')
        self.assertEqual(Decimal(str(data['total'])), Decimal('44.00'))
        self.assertEqual(Decimal(str(data['balance_due'])), Decimal('44.00'))
        self.assertEqual(data['due_date'], str(timezone.localdate() + timedelta(days=30)))
        self.assertEqual(InvoiceItem.objects.filter(invoice_id=data['id']).count(), 1)

    def test_number_required(self):
        response = self.create_invoice(invoice_number='')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invoice number is required')

    def test_duplicate_number(self):
        self.create_invoice()
        response = self.create_invoice()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Invoice.objects.count(), 1)

    def test_linking_invoiced_sales_order_conflicts(self):
        order = TestDataFactory.create_sales_order(customer=self.customer, items=[(self.product, 1)], status='confirmed')
        InvoiceService().generate_from_sales_order(order.id)
        response = self.create_invoice(sales_order=order.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('existing_invoice', response.data)

    def test_partial_payment_update(self):
        invoice_id = self.create_invoice().data['data']['id']
        response = self.client.patch(f'/api/v1/invoices/{invoice_id}/', {
            'paid_amount': '15.00', 'status': 'partial', 'payment_method': 'cash',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['status'], 'partial')
        self.assertEqual(Decimal(str(data['balance_due'])), Decimal('25.00'))
        self.assertEqual(Decimal(str(data['total'])), Decimal('40.00'))

    def test_delete_invoice(self):
        invoice_id = self.create_invoice().data['data']['id']
        response = self.client.delete(f'/api/v1/invoices/{invoice_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Invoice.objects.filter(id=invoice_id).exists())

    def test_list_and_search(self):
        self.create_invoice()
        self.create_invoice(invoice_number='INV-MANUAL-2', status='paid')
        response = self.client.get('/api/v1/invoices/', {'status': 'paid'})
        self.assertEqual(response.data['data']['count'], 1)
        response = self.client.get('/api/v1/invoices/', {'search': 'globex'})
        self.assertEqual(response.data['data']['count'], 2)
