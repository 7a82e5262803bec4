"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from orderdesk.catalog.models import Category, Product
from orderdesk.parties.models import Customer, Supplier
from orderdesk.sales.models import SalesOrder, SalesOrderItem
from orderdesk.purchasing.models import PurchaseOrder, PurchaseOrderItem
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='staff', is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_superuser=is_superuser,
        )

    @staticmethod
    def create_admin(username=None):
        """Create a user with the admin role"""
        return TestDataFactory.create_user(username=username, role='admin')

    @staticmethod
    def create_category(name=None, description=None, parent=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(
            name=name,
            description=description or f'Test category {name}',
            parent=parent,
        )

    @staticmethod
    def create_product(name=None, sku=None, category=None, price=None, cost=None, stock=0, min_stock=0):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU_{TestDataFactory.random_string(8)}'
        return Product.objects.create(
            name=name,
            sku=sku,
            category=category,
            price=price if price is not None else Decimal('10.00'),
            cost=cost if cost is not None else Decimal('6.00'),
            stock=stock,
            min_stock=min_stock,
        )

    @staticmethod
    def create_customer(name=None, phone=None, email=None, address=''):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'9{random.randint(100000000, 999999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Customer.objects.create(name=name, phone=phone, email=email, address=address)

    @staticmethod
    def create_supplier(name=None, phone=None, email=None):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'9{random.randint(100000000, 999999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Supplier.objects.create(name=name, phone=phone, email=email)

    @staticmethod
    def create_sales_order(customer=None, items=None, status='pending', order_number=None, stock_applied=False):
        """
        Create a sales order directly, without stock side effects

        items: list of (product, quantity) tuples priced at the product price
        """
        if not customer:
            customer = TestDataFactory.create_customer()
        if not order_number:
            order_number = f'SO-TEST-{TestDataFactory.random_string(6).upper()}'
        items = items or []
        subtotal = sum((product.price * quantity for product, quantity in items), Decimal('0.00'))
        order = SalesOrder.objects.create(
            order_number=order_number,
            customer=customer,
            customer_name=customer.name,
            customer_email=customer.email,
            customer_phone=customer.phone,
            customer_address=customer.address,
            subtotal=subtotal,
            total=subtotal,
            status=status,
            stock_applied=stock_applied,
        )
        for product, quantity in items:
            SalesOrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                quantity=quantity,
                price=product.price,
                total=product.price * quantity,
            )
        return order

    @staticmethod
    def create_purchase_order(supplier=None, items=None, status='pending', order_number=None):
        """Create a purchase order directly, without stock side effects"""
        if not supplier:
            supplier = TestDataFactory.create_supplier()
        if not order_number:
            order_number = f'PO-TEST-{TestDataFactory.random_string(6).upper()}'
        items = items or []
        subtotal = sum((product.cost * quantity for product, quantity in items), Decimal('0.00'))
        order = PurchaseOrder.objects.create(
            order_number=order_number,
            supplier=supplier,
            supplier_name=supplier.name,
            subtotal=subtotal,
            total=subtotal,
            status=status,
        )
        for product, quantity in items:
            PurchaseOrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                quantity=quantity,
                price=product.cost,
                total=product.cost * quantity,
            )
        return order


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
