from django.urls import path
from .views import sales_order_list_create, sales_order_next_number, sales_order_detail

urlpatterns = [
    path('sales-orders/', sales_order_list_create, name='sales-order-list-create'),
    path('sales-orders/next-number/', sales_order_next_number, name='sales-order-next-number'),
    path('sales-orders/<int:pk>/', sales_order_detail, name='sales-order-detail'),
]
