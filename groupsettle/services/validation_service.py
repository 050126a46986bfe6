import logging
from decimal import Decimal
from typing import Dict, List, Sequence, Tuple

from groupsettle.core.errors import InvalidSettlementError
from groupsettle.core.utils import EPSILON, ZERO
from groupsettle.schemas.balances import Balance
from groupsettle.schemas.settlements import Payment

logger = logging.getLogger(__name__)


def _apply_payments(
    balances: Sequence[Balance], payments: Sequence[Payment]
) -> Dict[Tuple[str, str], Decimal]:
    # (currency, member_id) -> simulated net amount
    simulated: Dict[Tuple[str, str], Decimal] = {}
    for b in balances:
        key = (b.currency, b.member_id)
        simulated[key] = simulated.get(key, ZERO) + b.net_amount

    for p in payments:
        payer = (p.currency, p.from_member_id)
        payee = (p.currency, p.to_member_id)
        simulated[payer] = simulated.get(payer, ZERO) + p.amount
        simulated[payee] = simulated.get(payee, ZERO) - p.amount

    return simulated


def validate_settlement(
    balances: Sequence[Balance], payments: Sequence[Payment], epsilon: Decimal = EPSILON
) -> bool:
    """True iff applying ``payments`` leaves every balance strictly within ``epsilon`` of zero."""
    return all(abs(amount) < epsilon for amount in _apply_payments(balances, payments).values())


def ensure_valid_settlement(
    balances: Sequence[Balance], payments: Sequence[Payment], epsilon: Decimal = EPSILON
) -> None:
    """Guard to run before persisting a batch of payments."""
    leftovers = {
        key: amount
        for key, amount in _apply_payments(balances, payments).items()
        if abs(amount) >= epsilon
    }
    if leftovers:
        logger.warning("Rejected settlement batch of %d payments", len(payments))
        detail = ", ".join(f"{member} {amount} {currency}" for (currency, member), amount in leftovers.items())
        raise InvalidSettlementError(f"Payments leave outstanding balances: {detail}")


def compute_final_balances(balances: Sequence[Balance], payments: Sequence[Payment]) -> List[Balance]:
    """Balances as they will stand once every payment has been made."""
    simulated = _apply_payments(balances, payments)
    return [
        Balance(
            member_id=b.member_id,
            display_name=b.display_name,
            net_amount=simulated[(b.currency, b.member_id)],
            currency=b.currency,
        )
        for b in balances
    ]


def is_group_settled(balances: Sequence[Balance], epsilon: Decimal = EPSILON) -> bool:
    return all(abs(b.net_amount) < epsilon for b in balances)
