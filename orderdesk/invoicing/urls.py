from django.urls import path
from .views import (
    invoice_list_create, invoice_next_number, invoice_from_sales_order,
    invoice_by_sales_order, invoice_detail,
)

urlpatterns = [
    path('invoices/', invoice_list_create, name='invoice-list-create'),
    path('invoices/next-number/', invoice_next_number, name='invoice-next-number'),
    path('invoices/from-sales-order/<int:sales_order_id>/', invoice_from_sales_order, name='invoice-from-sales-order'),
    path('invoices/by-sales-order/<int:sales_order_id>/', invoice_by_sales_order, name='invoice-by-sales-order'),
    path('invoices/<int:pk>/', invoice_detail, name='invoice-detail'),
]
