"""
Resource schema registry.

The single source of truth for type coercion and pushdown per resource
kind. Each entry describes:

- fields: ordered ``(json field, ColumnType)`` pairs
- envelope: ``LIST`` for ``{"object": "list", "data": [...], "has_more"}``
  collections, ``OBJECT`` for endpoints returning one bare object
- records_key: key holding the record array
- pushdown_fields: fields whose equality predicates become query params
- direct_lookup: whether ``id = '...'`` may fetch ``/{resource}/{id}``
- paginated: whether ``limit``/``starting_after`` are sent

Adding a resource is a data entry in ``RESOURCE_SCHEMAS``.

References:
    https://stripe.com/docs/api/balance
    https://stripe.com/docs/api/balance_transactions/list
    https://stripe.com/docs/api/charges/list
    https://stripe.com/docs/api/customers/list
    https://stripe.com/docs/api/invoices/list
    https://stripe.com/docs/api/payment_intents/list
    https://stripe.com/docs/api/products/list
    https://stripe.com/docs/api/subscriptions/list
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from stripe_spine.core.errors import UnsupportedResourceError


class ResourceKind(str, Enum):
    """Supported Stripe collections, named as in their URL path."""

    BALANCE = "balance"
    BALANCE_TRANSACTIONS = "balance_transactions"
    CHARGES = "charges"
    CUSTOMERS = "customers"
    INVOICES = "invoices"
    PAYMENT_INTENTS = "payment_intents"
    PRODUCTS = "products"
    SUBSCRIPTIONS = "subscriptions"

    @classmethod
    def parse(cls, name: str | ResourceKind) -> ResourceKind:
        """Parse an ``object`` option value.

        Raises:
            UnsupportedResourceError: If no such kind exists
        """
        if isinstance(name, ResourceKind):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnsupportedResourceError(str(name)) from None


class ColumnType(str, Enum):
    """Semantic column types used for JSON coercion."""

    BOOL = "bool"
    I64 = "i64"
    STRING = "string"
    TIMESTAMP = "timestamp"


class Envelope(str, Enum):
    """Outer JSON shape returned by a resource endpoint."""

    LIST = "list"
    OBJECT = "object"


FieldSchema = tuple[tuple[str, ColumnType], ...]


@dataclass(frozen=True)
class ResourceSchema:
    """Static description of one resource kind."""

    kind: ResourceKind
    fields: FieldSchema
    envelope: Envelope = Envelope.LIST
    records_key: str = "data"
    pushdown_fields: tuple[str, ...] = ()
    direct_lookup: bool = False
    paginated: bool = True

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def field_names(self) -> list[str]:
        return [name for name, _ in self.fields]

    def column_type(self, column: str) -> ColumnType | None:
        for name, col_type in self.fields:
            if name == column:
                return col_type
        return None


_S = ColumnType.STRING
_I = ColumnType.I64
_B = ColumnType.BOOL
_T = ColumnType.TIMESTAMP


RESOURCE_SCHEMAS: Mapping[ResourceKind, ResourceSchema] = MappingProxyType({
    ResourceKind.BALANCE: ResourceSchema(
        kind=ResourceKind.BALANCE,
        fields=(("amount", _I), ("currency", _S)),
        envelope=Envelope.OBJECT,
        records_key="available",
        paginated=False,
    ),
    ResourceKind.BALANCE_TRANSACTIONS: ResourceSchema(
        kind=ResourceKind.BALANCE_TRANSACTIONS,
        fields=(
            ("id", _S),
            ("amount", _I),
            ("currency", _S),
            ("description", _S),
            ("fee", _I),
            ("net", _I),
            ("status", _S),
            ("type", _S),
            ("created", _T),
        ),
        pushdown_fields=("payout", "type"),
    ),
    ResourceKind.CHARGES: ResourceSchema(
        kind=ResourceKind.CHARGES,
        fields=(
            ("id", _S),
            ("amount", _I),
            ("currency", _S),
            ("customer", _S),
            ("description", _S),
            ("invoice", _S),
            ("payment_intent", _S),
            ("status", _S),
            ("created", _T),
        ),
        pushdown_fields=("customer",),
    ),
    ResourceKind.CUSTOMERS: ResourceSchema(
        kind=ResourceKind.CUSTOMERS,
        fields=(
            ("id", _S),
            ("email", _S),
            ("name", _S),
            ("description", _S),
            ("created", _T),
        ),
        pushdown_fields=("email",),
        direct_lookup=True,
    ),
    ResourceKind.INVOICES: ResourceSchema(
        kind=ResourceKind.INVOICES,
        fields=(
            ("id", _S),
            ("customer", _S),
            ("subscription", _S),
            ("status", _S),
            ("total", _I),
            ("currency", _S),
            ("period_start", _T),
            ("period_end", _T),
        ),
        pushdown_fields=("customer", "status", "subscription"),
    ),
    ResourceKind.PAYMENT_INTENTS: ResourceSchema(
        kind=ResourceKind.PAYMENT_INTENTS,
        fields=(
            ("id", _S),
            ("customer", _S),
            ("amount", _I),
            ("currency", _S),
            ("payment_method", _S),
            ("created", _T),
        ),
        pushdown_fields=("customer",),
    ),
    ResourceKind.PRODUCTS: ResourceSchema(
        kind=ResourceKind.PRODUCTS,
        fields=(
            ("id", _S),
            ("name", _S),
            ("active", _B),
            ("default_price", _S),
            ("description", _S),
            ("created", _T),
            ("updated", _T),
        ),
        pushdown_fields=("active",),
        direct_lookup=True,
    ),
    ResourceKind.SUBSCRIPTIONS: ResourceSchema(
        kind=ResourceKind.SUBSCRIPTIONS,
        fields=(
            ("id", _S),
            ("customer", _S),
            ("currency", _S),
            ("current_period_start", _T),
            ("current_period_end", _T),
        ),
        pushdown_fields=("customer", "price", "status"),
        direct_lookup=True,
    ),
})


def get_schema(kind: str | ResourceKind) -> ResourceSchema:
    """
    Look up the schema for a resource kind.

    Raises:
        UnsupportedResourceError: If the kind is unknown
    """
    resource = ResourceKind.parse(kind)
    try:
        return RESOURCE_SCHEMAS[resource]
    except KeyError:
        raise UnsupportedResourceError(resource.value) from None


def list_schemas() -> list[ResourceSchema]:
    """All registered schemas, in declaration order."""
    return list(RESOURCE_SCHEMAS.values())


__all__ = [
    "ResourceKind",
    "ColumnType",
    "Envelope",
    "FieldSchema",
    "ResourceSchema",
    "RESOURCE_SCHEMAS",
    "get_schema",
    "list_schemas",
]
