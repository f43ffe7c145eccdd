"""Base model for Estoque API payloads.

Every response model inherits from :class:`EstoqueBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``null`` values so the
  field default is used instead.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def parse_api_timestamp(value: Any) -> datetime | None:
    """Coerce an ISO 8601 string (or epoch milliseconds) to an aware datetime.

    Naive values are assumed to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value / 1000, tz=UTC)
    else:
        parsed = datetime.fromisoformat(str(value).strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


ApiTimestamp = Annotated[datetime | None, BeforeValidator(parse_api_timestamp)]
"""Annotated type that coerces ISO strings and epoch ms to UTC datetimes."""


class EstoqueBaseModel(BaseModel):
    """Base for Estoque API response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original API response dict."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        """Drop ``null`` values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        # Keep a caller supplied raw= (kwargs construction).
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned

    def to_payload(self) -> dict[str, Any]:
        """Serialize back to the camelCase JSON shape the API expects."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
