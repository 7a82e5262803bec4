"""Invoice creation: manual entry and generation from a sales order"""
import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from orderdesk.core.documents import DocumentService
from orderdesk.core.exceptions import ConflictError, InvalidReferenceError, InvalidStateError, NotFoundError, ValidationError
from orderdesk.core.sequences import INVOICE_PREFIX, next_number
from orderdesk.parties.models import Customer
from orderdesk.sales.models import SalesOrder
from .models import Invoice, InvoiceItem
from .serializers import InvoiceSerializer

logger = logging.getLogger(__name__)

INVOICEABLE_STATUSES = ('confirmed', 'completed')


def invoice_due_date(invoice_date):
    return invoice_date + timedelta(days=getattr(settings, 'ORDERDESK_INVOICE_DUE_DAYS', 30))


class InvoiceService(DocumentService):
    model = Invoice
    item_model = InvoiceItem
    item_parent_field = 'invoice'
    party_model = Customer
    party_field = 'customer'
    number_field = 'invoice_number'
    number_prefix = INVOICE_PREFIX
    price_field = 'price'
    default_status = 'unpaid'
    create_action = 'invoice_create'
    header_fields = ('invoice_date', 'due_date', 'paid_amount', 'payment_method', 'notes')

    def resolve_number(self, data):
        number = (data.get(self.number_field) or '').strip()
        if not number:
            raise ValidationError('Invoice number is required')
        return super().resolve_number(data)

    def _lock_sales_order(self, sales_order_id, exclude_invoice=None):
        """Lock an invoiceable sales order; raises if it is unknown or already invoiced"""
        try:
            order = SalesOrder.objects.using(self.using).select_for_update().get(pk=sales_order_id)
        except SalesOrder.DoesNotExist:
            raise InvalidReferenceError(f"Sales order with ID {sales_order_id} not found")
        existing = Invoice.objects.using(self.using).filter(sales_order=order)
        if exclude_invoice is not None:
            existing = existing.exclude(pk=exclude_invoice.pk)
        existing = existing.order_by('id').first()
        if existing is not None:
            raise ConflictError(
                f"Invoice already exists for sales order {order.order_number}",
                existing_invoice=InvoiceSerializer(existing).data,
            )
        return order

    def prepare_new(self, invoice, data):
        if data.get('sales_order') is not None:
            invoice.sales_order = self._lock_sales_order(data['sales_order'])
        if invoice.due_date is None:
            invoice.due_date = invoice_due_date(invoice.invoice_date)

    def prepare_update(self, invoice, data):
        if 'sales_order' not in data:
            return
        if data['sales_order'] is None:
            invoice.sales_order = None
        elif data['sales_order'] != invoice.sales_order_id:
            invoice.sales_order = self._lock_sales_order(data['sales_order'], exclude_invoice=invoice)

    def generate_from_sales_order(self, sales_order_id, invoice_date=None, due_date=None, notes=None):
        """
        Create a paid invoice that copies a confirmed or completed sales order.

        The sales order row stays locked until commit, so concurrent requests
        for the same order serialize and the second one sees the first invoice.

        Raises:
            NotFoundError: the sales order does not exist
            InvalidStateError: the order is not confirmed or completed
            ConflictError: an invoice already references the order
        """
        with transaction.atomic(using=self.using):
            try:
                order = SalesOrder.objects.using(self.using).select_for_update().get(pk=sales_order_id)
            except SalesOrder.DoesNotExist:
                raise NotFoundError('Sales order not found')

            if order.status not in INVOICEABLE_STATUSES:
                raise InvalidStateError(
                    'Invoice can only be generated from confirmed or completed sales orders',
                    order_status=order.status,
                )

            existing = Invoice.objects.using(self.using).filter(sales_order=order).order_by('id').first()
            if existing is not None:
                raise ConflictError(
                    'Invoice already exists for this sales order',
                    existing_invoice=InvoiceSerializer(existing).data,
                )

            invoice_date = invoice_date or timezone.localdate()
            invoice = Invoice(
                invoice_number=next_number(Invoice, 'invoice_number', INVOICE_PREFIX, using=self.using),
                sales_order=order,
                customer_id=order.customer_id,
                customer_name=order.customer_name,
                customer_email=order.customer_email,
                customer_phone=order.customer_phone,
                customer_address=order.customer_address,
                invoice_date=invoice_date,
                due_date=due_date or invoice_due_date(invoice_date),
                subtotal=order.subtotal,
                tax=order.tax,
                discount=order.discount,
                total=order.total,
                paid_amount=order.total,
                status='paid',
                notes=notes or f"Generated from Sales Order {order.order_number}",
            )
            if self.request is not None and self.request.user.is_authenticated:
                invoice.created_by = self.request.user
            invoice.save(using=self.using)
            InvoiceItem.objects.using(self.using).bulk_create([
                InvoiceItem(
                    invoice=invoice,
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    price=item.price,
                    total=item.total,
                )
                for item in order.items.all()
            ])

        logger.info(f"Generated invoice {invoice.invoice_number} from sales order {order.order_number}")
        self._audit('invoice_generate', invoice, changes={
            'sales_order': order.order_number,
            'total': str(invoice.total),
        })
        return invoice
