from decimal import Decimal
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from groupsettle.core.utils import dsum, normalize_currency
from groupsettle.schemas.balances import Balance
from groupsettle.schemas.expense import Expense
from groupsettle.schemas.group import Member
from groupsettle.schemas.rates import ConversionTableIn


class SettlementStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class _Transfer(BaseModel):
    from_member_id: str = Field(min_length=1)
    to_member_id: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    currency: str

    class Config:
        frozen = True

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v: str) -> str:
        return normalize_currency(v)

    @model_validator(mode="after")
    def check_parties(self):
        if self.from_member_id == self.to_member_id:
            raise ValueError("A member cannot pay themselves")
        return self


class Payment(_Transfer):
    """A suggested transfer from a debtor to a creditor."""

    from_display_name: str | None = None
    to_display_name: str | None = None


class SettlementRecord(_Transfer):
    """A settlement known to the ledger. Only completed ones move balances."""

    settlement_id: str | None = None
    status: SettlementStatus = SettlementStatus.PENDING


class SettlementPlan(BaseModel):
    """Simplifier output for one currency.

    ``unsettled`` holds whatever the matching could not pair up, which only
    happens when the input balances do not sum to zero.
    """

    currency: str | None = None
    payments: List[Payment] = []
    unsettled: List[Balance] = []

    @computed_field
    @property
    def residual(self) -> Decimal:
        return dsum(abs(b.net_amount) for b in self.unsettled)

    @computed_field
    @property
    def is_complete(self) -> bool:
        return not self.unsettled


class SettlementSavings(BaseModel):
    optimized_count: int
    unoptimized_count: int
    transactions_saved: int


class SavingsOut(SettlementSavings):
    summary: str


class BalanceComputeRequest(BaseModel):
    members: List[Member]
    expenses: List[Expense] = []
    settlements: List[SettlementRecord] = []
    base_currency: str | None = None

    @field_validator("base_currency")
    @classmethod
    def check_currency(cls, v: str | None) -> str | None:
        return normalize_currency(v) if v is not None else v


class UnifiedSettlementRequest(BaseModel):
    balances_by_currency: Dict[str, List[Balance]]
    target_currency: str
    rates: ConversionTableIn

    @field_validator("balances_by_currency")
    @classmethod
    def check_currency_keys(cls, v: Dict[str, List[Balance]]) -> Dict[str, List[Balance]]:
        return {normalize_currency(code): group for code, group in v.items()}

    @field_validator("target_currency")
    @classmethod
    def check_currency(cls, v: str) -> str:
        return normalize_currency(v)


class ValidateSettlementRequest(BaseModel):
    balances: List[Balance]
    payments: List[Payment]


class ValidationOut(BaseModel):
    valid: bool
