from decimal import Decimal
from typing import Annotated, Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator

from groupsettle.core.utils import normalize_currency


class ExchangeRate(BaseModel):
    """1 unit of ``from_currency`` buys ``rate`` units of ``to_currency``."""

    from_currency: str
    to_currency: str
    rate: Decimal = Field(gt=0)

    class Config:
        frozen = True

    @field_validator("from_currency", "to_currency")
    @classmethod
    def check_currency(cls, v: str) -> str:
        return normalize_currency(v)

    @model_validator(mode="after")
    def check_pair(self):
        if self.from_currency == self.to_currency:
            raise ValueError("Exchange rate must be between two different currencies")
        return self


class ConversionTableIn(BaseModel):
    base_currency: str
    rates: List[ExchangeRate] = []
    base_rates: Dict[str, Annotated[Decimal, Field(gt=0)]] = {}

    @field_validator("base_currency")
    @classmethod
    def check_currency(cls, v: str) -> str:
        return normalize_currency(v)

    @field_validator("base_rates")
    @classmethod
    def check_rate_codes(cls, v: Dict[str, Decimal]) -> Dict[str, Decimal]:
        return {normalize_currency(code): rate for code, rate in v.items()}
