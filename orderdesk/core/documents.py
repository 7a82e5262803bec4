"""
Shared write path for orders and invoices.

A document has a number, a party link with a contact snapshot, line items,
money totals and a status. ``DocumentService`` subclasses only declare the
models and field names; creation, update and deletion run the same steps in
one transaction: resolve snapshot, price items, compute totals, persist,
apply the stock policy, audit.
"""
import logging

from django.db import DEFAULT_DB_ALIAS, transaction

from orderdesk.parties.snapshots import SNAPSHOT_FIELDS, clean_raw_fields, resolve_snapshot
from .exceptions import ValidationError
from .line_items import MONEY_FIELDS, compute_totals, enrich_items
from .sequences import next_number
from .utils import create_audit_log

logger = logging.getLogger(__name__)


class DocumentService:
    model = None
    item_model = None
    item_parent_field = 'order'
    party_model = None
    party_field = None
    number_field = 'order_number'
    number_prefix = None
    price_field = 'price'
    stock_policy = None
    header_fields = ('notes',)
    default_status = 'pending'
    stock_action = 'stock_adjust'
    create_action = 'create'

    def __init__(self, request=None, using=DEFAULT_DB_ALIAS):
        self.request = request
        self.using = using

    # --- helpers -----------------------------------------------------------

    @property
    def label(self):
        return self.model._meta.verbose_name.title()

    @property
    def party_label(self):
        return self.party_model._meta.verbose_name.capitalize()

    def _raw_snapshot(self, data):
        return {field: data.get(f'{self.party_field}_{field}') for field in SNAPSHOT_FIELDS}

    def _supplied_snapshot(self, data):
        """Snapshot fields present in the payload, cleaned"""
        return {
            field: (data.get(f'{self.party_field}_{field}') or '').strip()
            for field in SNAPSHOT_FIELDS
            if f'{self.party_field}_{field}' in data
        }

    def _current_totals(self, document):
        return {name: getattr(document, name) for name in MONEY_FIELDS}

    def _number_taken(self, number, exclude_pk=None):
        queryset = self.model._default_manager.using(self.using).filter(**{self.number_field: number})
        if exclude_pk is not None:
            queryset = queryset.exclude(pk=exclude_pk)
        return queryset.exists()

    def resolve_number(self, data):
        """Client-supplied number (checked for uniqueness) or the next generated one"""
        number = (data.get(self.number_field) or '').strip()
        if number:
            if self._number_taken(number):
                raise ValidationError(f"{self.label} number {number} already exists")
            return number
        return next_number(self.model, self.number_field, self.number_prefix, using=self.using)

    def prepare_new(self, document, data):
        """Hook for type-specific defaults before the first save"""

    def prepare_update(self, document, data):
        """Hook for type-specific changes before an update is saved"""

    def _write_items(self, document, enriched):
        self.item_model._default_manager.using(self.using).bulk_create([
            self.item_model(**{self.item_parent_field: document}, **item.as_model_kwargs())
            for item in enriched
        ])

    def _audit(self, action, document, changes=None):
        create_audit_log(
            request=self.request,
            action=action,
            model_name=self.model.__name__,
            object_id=document.pk,
            object_name=getattr(document, f'{self.party_field}_name'),
            object_reference=getattr(document, self.number_field),
            changes=changes,
        )

    def _audit_movements(self, document, movements):
        if movements:
            self._audit(self.stock_action, document, changes={
                'movements': [
                    {'product_id': m.product_id, 'product_name': m.product_name, 'delta': m.delta}
                    for m in movements
                ],
            })

    # --- operations --------------------------------------------------------

    def create(self, data):
        """Create a document from validated payload data"""
        party_id = data.get(self.party_field)
        raw = self._raw_snapshot(data)
        items = data.get('items') or []
        if not items or (party_id is None and not clean_raw_fields(raw)['name']):
            raise ValidationError(f"{self.party_label} name and items are required")

        enriched = enrich_items(items, self.price_field, using=self.using)
        totals = compute_totals(enriched, data)

        with transaction.atomic(using=self.using):
            snapshot = resolve_snapshot(self.party_model, party_id, raw, using=self.using)
            document = self.model(
                **{
                    self.number_field: self.resolve_number(data),
                    self.party_field: snapshot.party,
                    'status': data.get('status') or self.default_status,
                },
                **snapshot.as_fields(self.party_field),
                **totals.as_dict(),
            )
            for field in self.header_fields:
                if data.get(field) is not None:
                    setattr(document, field, data[field])
            if hasattr(document, 'created_by') and self.request is not None and self.request.user.is_authenticated:
                document.created_by = self.request.user
            self.prepare_new(document, data)
            document.save(using=self.using)
            self._write_items(document, enriched)

            movements = []
            if self.stock_policy is not None:
                movements = self.stock_policy.on_create(document, enriched, using=self.using)
                if movements:
                    document.save(using=self.using, update_fields=['stock_applied'])

        logger.info(f"Created {self.label} {getattr(document, self.number_field)} ({document.status}, total {document.total})")
        self._audit(self.create_action, document, changes={
            'status': document.status,
            'total': str(document.total),
            'items': len(enriched),
            'party_auto_created': snapshot.auto_created,
        })
        self._audit_movements(document, movements)
        return document

    def _apply_party_update(self, document, data):
        supplied = self._supplied_snapshot(data)

        if data.get(self.party_field) is not None:
            snapshot = resolve_snapshot(self.party_model, data[self.party_field], {}, using=self.using)
            setattr(document, self.party_field, snapshot.party)
            for field, value in snapshot.as_fields(self.party_field).items():
                setattr(document, field, value)
            return

        if self.party_field in data:
            setattr(document, self.party_field, None)
        for field, value in supplied.items():
            setattr(document, f'{self.party_field}_{field}', value)
        if not getattr(document, f'{self.party_field}_name'):
            raise ValidationError(f"{self.party_label} name is required")

    def update(self, document, data):
        """Apply a (partial) update; only keys present in ``data`` change"""
        if 'items' in data and not data['items']:
            raise ValidationError('At least one item is required')

        with transaction.atomic(using=self.using):
            document = self.model._default_manager.using(self.using).select_for_update().get(pk=document.pk)
            old_status = document.status
            old_items = list(document.items.all())

            new_items = None
            if 'items' in data:
                new_items = enrich_items(data['items'], self.price_field, using=self.using)

            self._apply_party_update(document, data)

            number = (data.get(self.number_field) or '').strip()
            if number and number != getattr(document, self.number_field):
                if self._number_taken(number, exclude_pk=document.pk):
                    raise ValidationError(f"{self.label} number {number} already exists")
                setattr(document, self.number_field, number)

            for field in self.header_fields:
                if field in data:
                    value = data[field]
                    setattr(document, field, '' if value is None and field == 'notes' else value)

            totals = compute_totals(new_items, data, current=self._current_totals(document))
            for name, value in totals.as_dict().items():
                setattr(document, name, value)

            if data.get('status'):
                document.status = data['status']
            self.prepare_update(document, data)

            if new_items is not None:
                document.items.all().delete()
                self._write_items(document, new_items)

            movements = []
            if self.stock_policy is not None:
                movements = self.stock_policy.on_update(document, old_status, old_items, new_items, using=self.using)

            document.save(using=self.using)

        if document.status != old_status:
            logger.info(f"{self.label} {getattr(document, self.number_field)} status {old_status} -> {document.status}")
            self._audit('status_change', document, changes={'old_status': old_status, 'new_status': document.status})
        self._audit('update', document, changes={'fields': sorted(k for k in data.keys() if k != 'items'),
                                                 'items_replaced': new_items is not None})
        self._audit_movements(document, movements)
        return document

    def delete(self, document):
        """Delete a document, compensating any stock it holds"""
        with transaction.atomic(using=self.using):
            document = self.model._default_manager.using(self.using).select_for_update().get(pk=document.pk)
            items = list(document.items.all())
            movements = []
            if self.stock_policy is not None:
                movements = self.stock_policy.on_delete(document, items, using=self.using)
            document_id = document.pk
            document.delete()
            document.pk = document_id

        logger.info(f"Deleted {self.label} {getattr(document, self.number_field)}")
        self._audit('delete', document)
        self._audit_movements(document, movements)
        return document
