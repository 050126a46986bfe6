from typing import Dict, List

from fastapi import APIRouter
from groupsettle.core.config import settings
from groupsettle.schemas.balances import BalancesIn
from groupsettle.schemas.settlements import (
    Payment,
    SavingsOut,
    SettlementPlan,
    UnifiedSettlementRequest,
    ValidateSettlementRequest,
    ValidationOut,
)
from groupsettle.services.currency_service import (
    ConversionTable,
    minimize_payments_by_currency,
    minimize_payments_unified,
)
from groupsettle.services.settlement_service import (
    calculate_settlement_savings,
    check_conservation,
    minimize_payments,
    settlement_summary,
    simplify_debts,
)
from groupsettle.services.validation_service import validate_settlement

router = APIRouter()


def _guard(balances):
    if settings.STRICT_CONSERVATION:
        check_conservation(balances, settings.SETTLEMENT_EPSILON)


@router.post("/simplify", response_model=SettlementPlan)
async def simplify(data: BalancesIn):
    _guard(data.balances)
    return simplify_debts(data.balances, settings.SETTLEMENT_EPSILON)


@router.post("/by-currency", response_model=Dict[str, List[Payment]])
async def by_currency(data: BalancesIn):
    _guard(data.balances)
    return minimize_payments_by_currency(data.balances, settings.SETTLEMENT_EPSILON)


@router.post("/unified", response_model=List[Payment])
async def unified(data: UnifiedSettlementRequest):
    rates = ConversionTable.from_schema(data.rates)
    return minimize_payments_unified(
        data.balances_by_currency,
        data.target_currency,
        rates,
        settings.SETTLEMENT_EPSILON,
    )


@router.post("/validate", response_model=ValidationOut)
async def validate(data: ValidateSettlementRequest):
    return ValidationOut(
        valid=validate_settlement(data.balances, data.payments, settings.SETTLEMENT_EPSILON)
    )


@router.post("/savings", response_model=SavingsOut)
async def savings(data: BalancesIn):
    _guard(data.balances)
    result = calculate_settlement_savings(data.balances, settings.SETTLEMENT_EPSILON)
    payments = minimize_payments(data.balances, settings.SETTLEMENT_EPSILON)
    return SavingsOut(**result.model_dump(), summary=settlement_summary(payments))
