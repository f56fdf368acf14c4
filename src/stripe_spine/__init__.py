"""
stripe-spine - Stripe collections exposed as relational rows.

A foreign data wrapper core: a host query engine hands over predicates,
columns and limits; the wrapper turns them into paginated Stripe API calls
and hands back typed rows. INSERT/UPDATE/DELETE become single POST/DELETE
requests.

Packages:
    stripe_spine.core   Errors, settings, secrets, logging, retry policy
    stripe_spine.fdw    Registry, pushdown, codec, transport, scan/modify engines
    stripe_spine.cli    ``stripe-spine`` command line
"""

__version__ = "0.1.0"

from stripe_spine.fdw import (  # noqa: E402
    JsonDocument,
    Limit,
    Qual,
    ResourceKind,
    Row,
    Sort,
    StripeFdw,
)

__all__ = [
    "__version__",
    "JsonDocument",
    "Limit",
    "Qual",
    "ResourceKind",
    "Row",
    "Sort",
    "StripeFdw",
]
