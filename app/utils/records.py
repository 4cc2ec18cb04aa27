"""Helpers for building write payloads."""

from typing import Any

from pydantic import BaseModel


def clean_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None.

    A field left unset in an update must not overwrite the stored value,
    and embedded JSON must not carry null keys.
    """
    return {key: value for key, value in data.items() if value is not None}


def update_payload(schema: BaseModel) -> dict[str, Any]:
    """Fields explicitly set on an update schema, minus empty ones.

    Enums come out as their values, nested models as dicts.
    """
    return clean_fields(schema.model_dump(mode="json", exclude_unset=True))
