"""Purchase order lifecycle: create, update and delete with stock side effects"""
from orderdesk.core.documents import DocumentService
from orderdesk.core.sequences import PURCHASE_ORDER_PREFIX
from orderdesk.inventory.lifecycle import PURCHASE_STOCK_POLICY
from orderdesk.parties.models import Supplier
from .models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderService(DocumentService):
    model = PurchaseOrder
    item_model = PurchaseOrderItem
    party_model = Supplier
    party_field = 'supplier'
    number_prefix = PURCHASE_ORDER_PREFIX
    # purchases are priced at cost unless the line says otherwise
    price_field = 'cost'
    stock_policy = PURCHASE_STOCK_POLICY
    stock_action = 'stock_purchase'
    header_fields = ('order_date', 'expected_date', 'notes')
