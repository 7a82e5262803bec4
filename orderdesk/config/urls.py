"""
URL configuration for the orderdesk project.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "OrderDesk Admin"
admin.site.site_title = "OrderDesk Admin Portal"
admin.site.index_title = "Inventory and order management"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('orderdesk.core.urls')),
    path('api/v1/', include('orderdesk.catalog.urls')),
    path('api/v1/', include('orderdesk.parties.urls')),
    path('api/v1/', include('orderdesk.inventory.urls')),
    path('api/v1/', include('orderdesk.sales.urls')),
    path('api/v1/', include('orderdesk.purchasing.urls')),
    path('api/v1/', include('orderdesk.invoicing.urls')),
]
