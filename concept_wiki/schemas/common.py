"""Shared schema primitives."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class RecordSchema(BaseSchema):
    """Immutable input record handed over by the ingestion collaborators."""

    model_config = ConfigDict(
        from_attributes=True, populate_by_name=True, frozen=True
    )


def clean_str(value: Any) -> Optional[str]:
    """Strip and normalize a string value; return None if empty."""
    if value is None:
        return None
    s = str(value).strip()
    return s if s and s.lower() not in ("nan", "none", "n/a") else None
