"""Company and user models."""

from __future__ import annotations

from pydantic import Field

from pyestoque.models._base import ApiTimestamp, EstoqueBaseModel


class CompanyPhone(EstoqueBaseModel):
    id: int | None = None
    company_id: int | None = None
    number: str
    is_whatsapp: bool = False


class Company(EstoqueBaseModel):
    """Tenant company. ``is_configured`` flips once onboarding is saved."""

    id: int | None = None
    name: str
    cnpj: str
    legal_name: str
    cep: str
    street: str
    number: str | None = None
    no_number: bool = False
    complement: str | None = None
    neighborhood: str | None = None
    city: str
    state: str
    email: str | None = None
    logo: str | None = None
    created_at: ApiTimestamp = None
    is_configured: bool = False
    phones: list[CompanyPhone] = Field(default_factory=list)


class AuthUser(EstoqueBaseModel):
    id: int
    company_id: int | None = None
    name: str
    username: str
    role: str = "user"
    is_admin: bool = False
    last_active: ApiTimestamp = None

    @property
    def is_admin_role(self) -> bool:
        """Admins own onboarding: either flag or the ``admin`` role counts."""
        return self.is_admin or self.role == "admin"
