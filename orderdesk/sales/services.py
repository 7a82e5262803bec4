"""Sales order lifecycle: create, update and delete with stock side effects"""
from orderdesk.core.documents import DocumentService
from orderdesk.core.sequences import SALES_ORDER_PREFIX
from orderdesk.inventory.lifecycle import SALES_STOCK_POLICY
from orderdesk.parties.models import Customer
from .models import SalesOrder, SalesOrderItem


class SalesOrderService(DocumentService):
    model = SalesOrder
    item_model = SalesOrderItem
    party_model = Customer
    party_field = 'customer'
    number_prefix = SALES_ORDER_PREFIX
    price_field = 'price'
    stock_policy = SALES_STOCK_POLICY
    stock_action = 'stock_sale'
    header_fields = ('order_date', 'delivery_date', 'notes')
