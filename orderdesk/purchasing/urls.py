from django.urls import path
from .views import purchase_order_list_create, purchase_order_next_number, purchase_order_detail

urlpatterns = [
    path('purchase-orders/', purchase_order_list_create, name='purchase-order-list-create'),
    path('purchase-orders/next-number/', purchase_order_next_number, name='purchase-order-next-number'),
    path('purchase-orders/<int:pk>/', purchase_order_detail, name='purchase-order-detail'),
]
