"""Shared base for domain records stored in the document store

Stored documents use camelCase keys. Records accept either the field
name or its camelCase alias and silently drop unknown keys.
"""

import secrets
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Dict, Union
from pydantic import BaseModel as PydanticBaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


class BaseModel(PydanticBaseModel):
    """Base class for typed document records"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the JSON-compatible shape written to the store"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, document: Dict[str, Any], **overrides):
        payload = dict(document or {})
        payload.update(overrides)
        return cls.model_validate(payload)


def money_to_json(value: Decimal) -> Union[int, float, str]:
    """
    JSON form of an amount

    Whole amounts become ints and others floats, so other readers of the
    store see numbers. An amount a float cannot hold exactly stays a
    string rather than losing digits.
    """
    if value == value.to_integral_value():
        return int(value)
    as_float = float(value)
    if Decimal(repr(as_float)) == value:
        return as_float
    return str(value)


# Decimal in memory, number in stored documents
Money = Annotated[Decimal, PlainSerializer(money_to_json, when_used="json")]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_push_key() -> str:
    """
    Generate a chronologically sortable child key

    Millisecond timestamp in hex followed by random bytes, so keys
    created later sort after earlier ones.
    """
    return f"{int(time.time() * 1000):012x}{secrets.token_hex(4)}"
