from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field, field_validator

from groupsettle.core.utils import normalize_currency


class Balance(BaseModel):
    """One member's net position in one currency. Positive means the member is owed."""

    member_id: str = Field(min_length=1)
    display_name: str | None = None
    net_amount: Decimal
    currency: str

    class Config:
        frozen = True

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v: str) -> str:
        return normalize_currency(v)


class BalancesIn(BaseModel):
    balances: List[Balance]
