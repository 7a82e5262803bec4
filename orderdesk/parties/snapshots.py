"""
Party snapshot resolution for orders and invoices.

A document stores a copy of its party's contact fields at the time it is
written. The party link itself is optional: a document may reference an
existing party, auto-create one from the submitted contact fields, or carry
only the copied fields.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction

from orderdesk.core.exceptions import InvalidReferenceError, ValidationError

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = ('name', 'email', 'phone', 'address')


@dataclass
class AutoCreateResult:
    party: Optional[object] = None
    error: Optional[str] = None

    @property
    def created(self):
        return self.party is not None


@dataclass
class SnapshotResult:
    party: Optional[object]
    name: str
    email: str = ''
    phone: str = ''
    address: str = ''
    auto_created: bool = False

    def as_fields(self, prefix):
        """Snapshot as model kwargs, e.g. ``customer_name`` for prefix ``customer``"""
        return {f'{prefix}_{field}': getattr(self, field) for field in SNAPSHOT_FIELDS}


def clean_raw_fields(raw):
    return {field: (raw.get(field) or '').strip() for field in SNAPSHOT_FIELDS}


def auto_create_party(model, fields, using=DEFAULT_DB_ALIAS) -> AutoCreateResult:
    """Create a party from submitted contact fields; failures are returned, not raised"""
    party = model(**fields)
    try:
        party.full_clean(exclude=['current_balance', 'credit_limit', 'status', 'country'])
        with transaction.atomic(using=using):
            party.save(using=using)
    except (DjangoValidationError, DatabaseError) as e:
        return AutoCreateResult(error=str(e))
    logger.info(f"Auto-created {model.__name__} {party.pk} ({party.name})")
    return AutoCreateResult(party=party)


def resolve_snapshot(model, party_id, raw, using=DEFAULT_DB_ALIAS, auto_create=True) -> SnapshotResult:
    """
    Resolve the party link and contact snapshot for a document.

    Args:
        model: ``Customer`` or ``Supplier``
        party_id: Referenced party id, or ``None``
        raw: Submitted contact fields keyed by ``name``/``email``/``phone``/``address``
        using: Database alias
        auto_create: Create a party from ``raw`` when no id is given

    Raises:
        InvalidReferenceError: ``party_id`` does not exist
        ValidationError: neither ``party_id`` nor a non-blank name was given
    """
    label = model._meta.verbose_name.capitalize()

    if party_id is not None:
        try:
            party = model._default_manager.using(using).get(pk=party_id)
        except model.DoesNotExist:
            raise InvalidReferenceError(f"{label} with ID {party_id} not found")
        return SnapshotResult(party=party, **party.snapshot())

    fields = clean_raw_fields(raw)
    if not fields['name']:
        raise ValidationError(f"{label} name is required")

    if auto_create:
        result = auto_create_party(model, fields, using=using)
        if result.created:
            return SnapshotResult(party=result.party, auto_created=True, **fields)
        logger.warning(f"Could not auto-create {label.lower()} '{fields['name']}', keeping snapshot only: {result.error}")

    return SnapshotResult(party=None, **fields)
