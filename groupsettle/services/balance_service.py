"""Balance derivation from an expense and settlement ledger.

Formula per member and currency:
    net = paid for others - own splits + completed payments made - completed payments received

Positive balances are owed money, negative balances owe money. The ledger
is never mutated; balances are recomputed on every call.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from groupsettle.core.errors import UnknownMemberError
from groupsettle.core.utils import DEFAULT_CURRENCY, ZERO, normalize_currency
from groupsettle.schemas.balances import Balance
from groupsettle.schemas.expense import Expense
from groupsettle.schemas.group import Member
from groupsettle.schemas.settlements import SettlementRecord, SettlementStatus

logger = logging.getLogger(__name__)


def _ensure_member(known: Dict[str, Member], member_id: str, context: str) -> None:
    if member_id not in known:
        raise UnknownMemberError(member_id, context)


def compute_balances(
    members: Sequence[Member],
    expenses: Iterable[Expense],
    completed_settlements: Iterable[SettlementRecord] = (),
    base_currency: str | None = None,
) -> List[Balance]:
    """Fold expenses and completed settlements into per-currency balances.

    Args:
        members: Group members; output keeps this order within a currency
        expenses: Expenses with payer and splits
        completed_settlements: Settlement records; anything not COMPLETED is ignored
        base_currency: Currency used for the all-zero result of an empty ledger

    Returns:
        One Balance per member for every currency present in the ledger,
        currencies in order of first appearance

    Raises:
        UnknownMemberError: If a payer, split or settlement party is not a member
    """
    known = {m.member_id: m for m in members}

    # currency -> member_id -> net amount
    ledger: Dict[str, Dict[str, Decimal]] = {}

    def account(currency: str) -> Dict[str, Decimal]:
        if currency not in ledger:
            ledger[currency] = {member_id: ZERO for member_id in known}
        return ledger[currency]

    expense_count = 0
    for expense in expenses:
        context = f"expense {expense.expense_id or expense.title or expense_count}"
        _ensure_member(known, expense.paid_by, context)

        nets = account(expense.currency)
        # paid_by increases balance
        nets[expense.paid_by] += expense.amount

        # splits decrease balance
        for split in expense.splits:
            _ensure_member(known, split.member_id, context)
            nets[split.member_id] -= split.amount
        expense_count += 1

    applied = 0
    for settlement in completed_settlements:
        if settlement.status != SettlementStatus.COMPLETED:
            continue
        context = f"settlement {settlement.settlement_id or applied}"
        _ensure_member(known, settlement.from_member_id, context)
        _ensure_member(known, settlement.to_member_id, context)

        # a completed payment moves both parties toward zero
        nets = account(settlement.currency)
        nets[settlement.from_member_id] += settlement.amount
        nets[settlement.to_member_id] -= settlement.amount
        applied += 1

    if not ledger:
        account(normalize_currency(base_currency or DEFAULT_CURRENCY))

    logger.debug(
        "Computed balances for %d members from %d expenses and %d completed settlements",
        len(known),
        expense_count,
        applied,
    )

    return [
        Balance(
            member_id=member_id,
            display_name=known[member_id].display_name,
            net_amount=amount,
            currency=currency,
        )
        for currency, nets in ledger.items()
        for member_id, amount in nets.items()
    ]


def group_by_currency(balances: Iterable[Balance]) -> Dict[str, List[Balance]]:
    """Partition balances by currency, preserving input order inside each group."""
    grouped: Dict[str, List[Balance]] = {}
    for balance in balances:
        grouped.setdefault(balance.currency, []).append(balance)
    return grouped
