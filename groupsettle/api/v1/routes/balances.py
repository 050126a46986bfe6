from typing import List

from fastapi import APIRouter
from groupsettle.core.config import settings
from groupsettle.schemas.balances import Balance
from groupsettle.schemas.settlements import BalanceComputeRequest
from groupsettle.services.balance_service import compute_balances

router = APIRouter()


@router.post("/compute", response_model=List[Balance])
async def compute(data: BalanceComputeRequest):
    return compute_balances(
        data.members,
        data.expenses,
        data.settlements,
        base_currency=data.base_currency or settings.BASE_CURRENCY,
    )
