"""
Engine exceptions.

Data-quality problems (missing text, no price, nothing matched) are never
raised — they come back as empty link lists, None prices or an empty tree.
Only caller mistakes (a required collection that is None, a non-node passed
where a tree is expected) raise.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all engine errors."""
    pass


class CatalogInputError(CatalogError, ValueError):
    """Raised when a caller breaks the engine's input contract."""
    pass


def require_collection(value: Any, name: str) -> list:
    """Materialize a required record collection; None is a contract violation."""
    if value is None:
        raise CatalogInputError(f"{name} is required (got None)")
    if isinstance(value, (str, bytes, dict)):
        raise CatalogInputError(
            f"{name} must be a collection of records, not {type(value).__name__}"
        )
    return list(value)
