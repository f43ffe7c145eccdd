"""Postal address model returned by the CEP lookup service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Address(BaseModel):
    """Address record for a Brazilian postal code (CEP).

    Field names follow the lookup service payload; the English properties
    are the ones form code fills company fields from.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    cep: str = ""
    logradouro: str = ""
    complemento: str = ""
    bairro: str = ""
    localidade: str = ""
    uf: str = ""
    ibge: str = ""
    gia: str = ""
    ddd: str = ""
    siafi: str = ""

    @property
    def street(self) -> str:
        return self.logradouro

    @property
    def neighborhood(self) -> str:
        return self.bairro

    @property
    def city(self) -> str:
        return self.localidade

    @property
    def state(self) -> str:
        return self.uf
