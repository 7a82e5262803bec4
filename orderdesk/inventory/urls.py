from django.urls import path
from .views import stock_list_create, stock_low, stock_by_product, stock_detail

urlpatterns = [
    path('stocks/', stock_list_create, name='stock-list-create'),
    path('stocks/low-stock/', stock_low, name='stock-low'),
    path('stocks/product/<int:product_id>/', stock_by_product, name='stock-by-product'),
    path('stocks/<int:pk>/', stock_detail, name='stock-detail'),
]
