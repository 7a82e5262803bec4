"""
Test suite for core module
Tests: sequence numbers, line-item pricing and totals, lenient fields, error envelope, auth and users
"""
import threading
from decimal import Decimal
from unittest import skipUnless

from django.db import IntegrityError, connection, transaction
from django.test import TestCase, TransactionTestCase
from django.utils import timezone
from rest_framework import status
from orderdesk.core.exceptions import InvalidReferenceError, ValidationError
from orderdesk.core.fields import LenientDecimalField
from orderdesk.core.line_items import compute_totals, enrich_items
from orderdesk.core.models import AuditLog, DocumentSequence
from orderdesk.core.sequences import SALES_ORDER_PREFIX, format_number, next_number, parse_sequence, peek_next_number
from orderdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from orderdesk.core.utils import create_audit_log
from orderdesk.sales.models import SalesOrder


class SequenceTests(TestCase):
    """Test document number allocation"""

    def setUp(self):
        self.year = timezone.now().year

    def allocate(self, year=None):
        with transaction.atomic():
            return next_number(SalesOrder, 'order_number', SALES_ORDER_PREFIX, year=year)

    def test_format_number(self):
        self.assertEqual(format_number('SO', 2026, 42), 'SO-2026-000042')

    def test_parse_sequence(self):
        self.assertEqual(parse_sequence('INV-2026-000017', 'INV-2026-'), 17)
        self.assertEqual(parse_sequence('INV-2026-abc', 'INV-2026-'), 0)
        self.assertEqual(parse_sequence(None, 'INV-2026-'), 0)

    def test_first_number_of_year(self):
        self.assertEqual(self.allocate(), f'SO-{self.year}-000001')

    def test_allocations_are_gap_free_and_distinct(self):
        numbers = [self.allocate() for _ in range(5)]
        self.assertEqual(numbers, [f'SO-{self.year}-{n:06d}' for n in range(1, 6)])

    def test_continues_after_stored_number(self):
        TestDataFactory.create_sales_order(order_number=f'SO-{self.year}-000041')
        self.assertEqual(self.allocate(), f'SO-{self.year}-000042')

    def test_years_are_independent(self):
        self.allocate(year=2020)
        self.allocate(year=2020)
        self.assertEqual(self.allocate(year=2021), 'SO-2021-000001')
        self.assertEqual(DocumentSequence.objects.get(prefix='SO', year=2020).last_value, 2)

    def test_peek_does_not_consume(self):
        self.allocate()
        peeked = peek_next_number(SalesOrder, 'order_number', SALES_ORDER_PREFIX)
        self.assertEqual(peeked, f'SO-{self.year}-000002')
        self.assertEqual(self.allocate(), peeked)

    def test_lagging_counter_never_reissues_stored_number(self):
        first = self.allocate()
        TestDataFactory.create_sales_order(order_number=first)
        DocumentSequence.objects.filter(prefix='SO', year=self.year).update(last_value=0)
        self.assertEqual(self.allocate(), f'SO-{self.year}-000002')

    def test_duplicate_number_rejected_by_database(self):
        number = self.allocate()
        TestDataFactory.create_sales_order(order_number=number)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                TestDataFactory.create_sales_order(order_number=number)


@skipUnless(connection.features.has_select_for_update, 'database does not support row locks')
class ConcurrentSequenceTests(TransactionTestCase):
    """Concurrent allocations never hand out the same number"""

    def test_parallel_allocations_are_unique(self):
        results = []
        errors = []
        lock = threading.Lock()

        def worker():
            try:
                for _ in range(5):
                    with transaction.atomic():
                        number = next_number(SalesOrder, 'order_number', SALES_ORDER_PREFIX)
                    with lock:
                        results.append(number)
            except Exception as e:
                errors.append(e)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(len(results), 20)
        self.assertEqual(len(set(results)), 20)


class LineItemTests(TestCase):
    """Test item enrichment and totals"""

    def setUp(self):
        self.product_a = TestDataFactory.create_product(price=Decimal('10.00'), cost=Decimal('7.00'))
        self.product_b = TestDataFactory.create_product(price=Decimal('5.00'), cost=Decimal('3.00'))

    def test_totals_from_items(self):
        items = enrich_items([
            {'product': self.product_a.id, 'quantity': 2},
            {'product': self.product_b.id, 'quantity': 1},
        ])
        totals = compute_totals(items, {'tax': Decimal('10')})
        self.assertEqual(totals.subtotal, Decimal('25.00'))
        self.assertEqual(totals.total, Decimal('35.00'))

    def test_price_falls_back_to_price_field(self):
        items = enrich_items([{'product': self.product_a.id, 'quantity': 3}], price_field='cost')
        self.assertEqual(items[0].price, Decimal('7.00'))
        self.assertEqual(items[0].total, Decimal('21.00'))
        self.assertEqual(items[0].product_name, self.product_a.name)

    def test_explicit_price_wins_including_zero(self):
        items = enrich_items([
            {'product': self.product_a.id, 'quantity': 1, 'price': Decimal('0')},
            {'product': self.product_b.id, 'quantity': 2, 'unit_price': Decimal('4.50')},
        ])
        self.assertEqual(items[0].price, Decimal('0.00'))
        self.assertEqual(items[1].total, Decimal('9.00'))

    def test_missing_product_names_the_id(self):
        with self.assertRaises(InvalidReferenceError) as ctx:
            enrich_items([
                {'product': self.product_a.id, 'quantity': 1},
                {'product': 999999, 'quantity': 1},
            ])
        self.assertIn('999999', str(ctx.exception.detail))

    def test_empty_items_rejected(self):
        with self.assertRaises(ValidationError):
            enrich_items([])

    def test_explicit_totals_used_verbatim(self):
        items = enrich_items([{'product': self.product_a.id, 'quantity': 1}])
        totals = compute_totals(items, {'subtotal': Decimal('100'), 'total': Decimal('0')})
        self.assertEqual(totals.subtotal, Decimal('100.00'))
        self.assertEqual(totals.total, Decimal('0.00'))

    def test_total_uses_item_sum_over_explicit_subtotal(self):
        items = enrich_items([{'product': self.product_a.id, 'quantity': 2}])
        totals = compute_totals(items, {'subtotal': Decimal('100'), 'tax': Decimal('10')})
        self.assertEqual(totals.subtotal, Decimal('100.00'))
        self.assertEqual(totals.total, Decimal('30.00'))

    def test_update_subtotal_without_items_uses_it_for_total(self):
        current = {'subtotal': Decimal('20'), 'tax': Decimal('2'), 'discount': Decimal('0'), 'total': Decimal('22')}
        totals = compute_totals(None, {'subtotal': Decimal('50')}, current=current)
        self.assertEqual(totals.total, Decimal('52.00'))

    def test_product_name_comes_from_catalog(self):
        items = enrich_items([{'product': self.product_a.id, 'quantity': 1, 'product_name': 'Forged'}])
        self.assertEqual(items[0].product_name, self.product_a.name)

    def test_update_without_changes_keeps_stored_total(self):
        current = {'subtotal': Decimal('20'), 'tax': Decimal('2'), 'discount': Decimal('0'), 'total': Decimal('99')}
        totals = compute_totals(None, {}, current=current)
        self.assertEqual(totals.total, Decimal('99.00'))

    def test_update_tax_recomputes_total(self):
        current = {'subtotal': Decimal('20'), 'tax': Decimal('2'), 'discount': Decimal('0'), 'total': Decimal('22')}
        totals = compute_totals(None, {'tax': Decimal('5')}, current=current)
        self.assertEqual(totals.total, Decimal('25.00'))


class LenientDecimalFieldTests(TestCase):

    def test_unparseable_becomes_zero(self):
        field = LenientDecimalField()
        self.assertEqual(field.run_validation('abc'), Decimal('0.00'))
        self.assertEqual(field.run_validation(''), Decimal('0.00'))
        self.assertEqual(field.run_validation(None), Decimal('0.00'))

    def test_rounds_to_cents(self):
        field = LenientDecimalField()
        self.assertEqual(field.run_validation('10.005'), Decimal('10.01'))
        self.assertEqual(field.run_validation(7), Decimal('7.00'))

    def test_nullable_keeps_none(self):
        field = LenientDecimalField(allow_null=True)
        self.assertIsNone(field.run_validation(None))


class AuditLogTests(TestCase):

    def test_missing_fields_skipped(self):
        self.assertIsNone(create_audit_log(action='create', model_name=None, object_id=1))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_entry_created(self):
        user = TestDataFactory.create_user()
        log = create_audit_log(action='create', model_name='Product', object_id=5, user=user,
                               object_name='Widget', changes={'stock': 3})
        self.assertEqual(log.user, user)
        self.assertEqual(log.object_id, '5')


class AuthAPITests(TestCase):
    """Test auth endpoints and the response envelope"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(username='alice', password='S3cure-pass!')

    def test_unauthenticated_request_uses_error_envelope(self):
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])
        self.assertIn('message', response.data)

    def test_register(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'bob',
            'email': 'bob@test.com',
            'password': 'An0ther-pass!',
            'password_confirm': 'An0ther-pass!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertIn('access', response.data['data'])
        self.assertEqual(response.data['data']['user']['role'], 'staff')

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'carol',
            'password': 'An0ther-pass!',
            'password_confirm': 'different-pass!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid request data')
        self.assertIn('password', response.data['error'])

    def test_login_refresh_and_profile(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'alice', 'password': 'S3cure-pass!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tokens = response.data['data']
        self.assertEqual(tokens['user']['username'], 'alice')

        response = self.client.post('/api/v1/auth/refresh/', {'refresh': tokens['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data['data'])

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = self.client.get('/api/v1/auth/profile/')
        self.assertEqual(response.data['data']['username'], 'alice')
        response = self.client.get('/api/v1/auth/verify/')
        self.assertTrue(response.data['data']['valid'])

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'alice', 'password': 'wrong',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])


class UserAdminAPITests(TestCase):
    """User management is limited to the admin role"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.staff = TestDataFactory.create_user()

    def test_staff_cannot_list_users(self):
        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['success'])

    def test_admin_creates_and_updates_user(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/users/', {
            'username': 'manager1', 'password': 'Manag3r-pass!', 'role': 'manager',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user_id = response.data['data']['id']

        response = self.client.patch(f'/api/v1/users/{user_id}/', {'role': 'viewer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['role'], 'viewer')

    def test_unknown_user_is_404(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'User not found')

    def test_audit_log_listing(self):
        self.client.authenticate_user(self.admin)
        create_audit_log(action='create', model_name='Product', object_id=1, user=self.admin)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 1)
