"""Pydantic request models for client entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
They are used internally by :class:`pyestoque.client.EstoqueClient` and
:class:`pyestoque.auth.AuthProvider`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from pyestoque.exceptions import EstoqueValidationError

if TYPE_CHECKING:
    from pyestoque.models.company import AuthUser


class _Request(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LoginRequest(_Request):
    username: str
    password: str

    @field_validator("username", "password")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must be non-empty")
        return value


class SaleItemInput(_Request):
    product_id: int
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)
    total: float = Field(ge=0)


class SaleInput(_Request):
    payment_method: str
    total: float = Field(ge=0)
    user_id: int | None = None
    company_id: int | None = None


class CreateSaleRequest(_Request):
    """Body of ``POST /api/sales``; a sale needs at least one item."""

    sale: SaleInput
    items: list[SaleItemInput] = Field(min_length=1)

    @classmethod
    def build(
        cls,
        sale: SaleInput | Mapping[str, Any],
        items: Sequence[SaleItemInput | Mapping[str, Any]],
        *,
        user: AuthUser | None = None,
    ) -> CreateSaleRequest:
        """Validate caller input, filling user and company from *user*.

        Raises
        ------
        EstoqueValidationError
            Naming the first offending field.
        """
        header = sale.model_dump(exclude_none=True) if isinstance(sale, SaleInput) else dict(sale)
        if user is not None:
            if "user_id" not in header and "userId" not in header:
                header["user_id"] = user.id
            if user.company_id is not None and "company_id" not in header and "companyId" not in header:
                header["company_id"] = user.company_id
        lines = [item.model_dump(exclude_none=True) if isinstance(item, SaleItemInput) else dict(item) for item in items]
        try:
            return cls(sale=header, items=lines)
        except ValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ()))
            raise EstoqueValidationError(f"Invalid sale: {field}: {first.get('msg')}", field=field) from exc
