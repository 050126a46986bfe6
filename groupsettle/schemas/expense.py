from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator

from groupsettle.core.utils import dsum, normalize_currency


class ExpenseSplit(BaseModel):
    member_id: str = Field(min_length=1)
    amount: Decimal = Field(ge=0)


class Expense(BaseModel):
    expense_id: str | None = None
    title: str | None = None
    amount: Decimal = Field(gt=0)
    currency: str
    paid_by: str = Field(min_length=1)
    splits: List[ExpenseSplit] = Field(min_length=1)

    class Config:
        frozen = True

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v: str) -> str:
        return normalize_currency(v)

    @model_validator(mode="after")
    def check_splits(self):
        member_ids = [s.member_id for s in self.splits]
        if len(member_ids) != len(set(member_ids)):
            raise ValueError("Duplicate members found in splits")

        total_split = dsum(s.amount for s in self.splits)
        if total_split != self.amount:
            raise ValueError(
                f"Split total ({total_split}) must equal expense amount ({self.amount})"
            )
        return self
