"""
Test suite for Catalog module
Tests: category and product CRUD, filtering, low stock, delete protection
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from orderdesk.catalog.models import Category, Product
from orderdesk.core.models import AuditLog
from orderdesk.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class CategoryAPITests(TestCase):
    """Test Category API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_category(self):
        response = self.client.post('/api/v1/categories/', {'name': 'Tools', 'description': 'Hand tools'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['name'], 'Tools')

    def test_name_too_short(self):
        response = self.client.post('/api/v1/categories/', {'name': 'T'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data['error'])

    def test_category_cannot_be_own_parent(self):
        category = TestDataFactory.create_category()
        response = self.client.patch(f'/api/v1/categories/{category.id}/', {'parent': category.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_includes_product_count(self):
        category = TestDataFactory.create_category(name='Paint')
        TestDataFactory.create_product(category=category)
        TestDataFactory.create_product(category=category)
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = next(c for c in response.data['data'] if c['id'] == category.id)
        self.assertEqual(entry['product_count'], 2)

    def test_delete_category_keeps_products(self):
        category = TestDataFactory.create_category()
        product = TestDataFactory.create_product(category=category)
        response = self.client.delete(f'/api/v1/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Category.objects.filter(id=category.id).exists())
        product.refresh_from_db()
        self.assertIsNone(product.category)

    def test_missing_category_is_404(self):
        response = self.client.get('/api/v1/categories/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data['success'])


class ProductAPITests(TestCase):
    """Test Product API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.category = TestDataFactory.create_category()

    def test_create_product(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Hammer',
            'category': self.category.id,
            'price': '12.50',
            'cost': '8.00',
            'stock': 20,
            'min_stock': 5,
            'gallery': ['https://img.example.com/hammer-1.jpg'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['unit'], 'pcs')
        self.assertEqual(Decimal(str(data['price'])), Decimal('12.50'))
        self.assertEqual(data['gallery'], ['https://img.example.com/hammer-1.jpg'])

    def test_negative_price_rejected(self):
        response = self.client.post('/api/v1/products/', {'name': 'Bad', 'price': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_is_paginated_and_searchable(self):
        TestDataFactory.create_product(name='Blue Paint')
        TestDataFactory.create_product(name='Red Paint')
        TestDataFactory.create_product(name='Screwdriver')
        response = self.client.get('/api/v1/products/', {'search': 'paint'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 2)

        response = self.client.get('/api/v1/products/', {'limit': 2, 'page': 2})
        self.assertEqual(response.data['data']['page'], 2)
        self.assertEqual(len(response.data['data']['results']), 1)

    def test_filter_by_category(self):
        TestDataFactory.create_product(category=self.category)
        TestDataFactory.create_product()
        response = self.client.get('/api/v1/products/', {'category': self.category.id})
        self.assertEqual(response.data['data']['count'], 1)

    def test_low_stock(self):
        at_min = TestDataFactory.create_product(stock=5, min_stock=5)
        default_threshold = TestDataFactory.create_product(stock=10, min_stock=0)
        healthy = TestDataFactory.create_product(stock=50, min_stock=5)
        response = self.client.get('/api/v1/products/low-stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = {p['id'] for p in response.data['data']}
        self.assertIn(at_min.id, ids)
        self.assertIn(default_threshold.id, ids)
        self.assertNotIn(healthy.id, ids)

        response = self.client.get('/api/v1/products/', {'low_stock': 'true'})
        self.assertEqual(response.data['data']['count'], 2)

    def test_manual_stock_change_is_audited(self):
        product = TestDataFactory.create_product(stock=3)
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'stock': 7}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(action='stock_adjust', object_id=str(product.id))
        self.assertEqual(log.changes, {'old_stock': 3, 'new_stock': 7})

    def test_product_on_order_cannot_be_deleted(self):
        product = TestDataFactory.create_product()
        TestDataFactory.create_sales_order(items=[(product, 1)])
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertTrue(Product.objects.filter(id=product.id).exists())
