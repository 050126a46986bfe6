"""Debt simplification for balances in a single currency.

Greedy largest-first matching: the largest remaining creditor is paid by the
largest remaining debtor until one side runs out. For conserved input this
needs at most (non-zero balances - 1) payments.

Ties between equal amounts keep input order (sorted() is stable), so callers
that want a specific pairing on ties control it through the order of the
balances they pass in.
"""

import logging
from decimal import Decimal
from typing import List, Sequence

from groupsettle.core.currencies import format_currency
from groupsettle.core.errors import MixedCurrencyError, UnconservedBalanceError
from groupsettle.core.utils import EPSILON, ZERO, qround
from groupsettle.schemas.balances import Balance
from groupsettle.schemas.settlements import Payment, SettlementPlan, SettlementSavings

logger = logging.getLogger(__name__)


def _single_currency(balances: Sequence[Balance]) -> str | None:
    currencies = {b.currency for b in balances}
    if len(currencies) > 1:
        raise MixedCurrencyError(currencies)
    return next(iter(currencies), None)


def simplify_debts(balances: Sequence[Balance], epsilon: Decimal = EPSILON) -> SettlementPlan:
    """
    Compute the payments that zero out ``balances``.

    Balances within ``epsilon`` of zero are treated as settled. Matching runs
    on the unrounded values. Each emitted amount is the rounded running total
    of everything matched so far minus what was already emitted, so every
    member's payments add up to within a cent of what they owe or are owed.

    Returns:
        SettlementPlan whose ``unsettled`` list is empty unless the balances
        do not sum to zero
    """
    currency = _single_currency(balances)

    # working copies: [balance, remaining]
    creditors = [[b, b.net_amount] for b in balances if b.net_amount > epsilon]
    debtors = [[b, -b.net_amount] for b in balances if b.net_amount < -epsilon]

    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    payments: List[Payment] = []
    matched = ZERO
    emitted = ZERO
    i = 0
    j = 0

    while i < len(creditors) and j < len(debtors):
        creditor, recv = creditors[i]
        debtor, owe = debtors[j]

        settle_amount = min(recv, owe)
        matched += settle_amount
        amount = qround(matched) - emitted

        # amounts below half a cent roll into the next payment
        if amount > 0:
            payments.append(Payment(
                from_member_id=debtor.member_id,
                from_display_name=debtor.display_name,
                to_member_id=creditor.member_id,
                to_display_name=creditor.display_name,
                amount=amount,
                currency=currency,
            ))
            emitted += amount

        creditors[i][1] -= settle_amount
        debtors[j][1] -= settle_amount

        if creditors[i][1] <= epsilon:
            i += 1
        if debtors[j][1] <= epsilon:
            j += 1

    unsettled = [
        Balance(
            member_id=b.member_id,
            display_name=b.display_name,
            net_amount=remaining,
            currency=b.currency,
        )
        for b, remaining in creditors[i:]
        if remaining > epsilon
    ] + [
        Balance(
            member_id=b.member_id,
            display_name=b.display_name,
            net_amount=-remaining,
            currency=b.currency,
        )
        for b, remaining in debtors[j:]
        if remaining > epsilon
    ]

    plan = SettlementPlan(currency=currency, payments=payments, unsettled=unsettled)

    if unsettled:
        logger.warning(
            "Unconserved balances in %s: %s left unmatched across %d members",
            currency,
            plan.residual,
            len(unsettled),
        )
    logger.debug(
        "Simplified %d creditors and %d debtors into %d payments",
        len(creditors),
        len(debtors),
        len(payments),
    )
    return plan


def minimize_payments(balances: Sequence[Balance], epsilon: Decimal = EPSILON) -> List[Payment]:
    """Minimal payment list for single-currency balances."""
    return simplify_debts(balances, epsilon).payments


def check_conservation(balances: Sequence[Balance], epsilon: Decimal = EPSILON) -> None:
    """Raise UnconservedBalanceError if any currency's balances do not sum to zero."""
    totals = {}
    for b in balances:
        totals[b.currency] = totals.get(b.currency, ZERO) + b.net_amount

    for currency, total in totals.items():
        if abs(total) > epsilon:
            raise UnconservedBalanceError(currency, total)


def count_unoptimized_transactions(balances: Sequence[Balance], epsilon: Decimal = EPSILON) -> int:
    non_zero = [b for b in balances if abs(b.net_amount) > epsilon]
    return max(0, len(non_zero) - 1)


def calculate_settlement_savings(
    balances: Sequence[Balance], epsilon: Decimal = EPSILON
) -> SettlementSavings:
    optimized_count = len(minimize_payments(balances, epsilon))
    unoptimized_count = count_unoptimized_transactions(balances, epsilon)

    return SettlementSavings(
        optimized_count=optimized_count,
        unoptimized_count=unoptimized_count,
        transactions_saved=max(0, unoptimized_count - optimized_count),
    )


def settlement_summary(payments: Sequence[Payment]) -> str:
    """One "<payer> pays <payee> <amount>" line per payment."""
    if not payments:
        return "Everyone is settled up! No payments needed."

    return "\n".join(
        f"{p.from_display_name or p.from_member_id} pays "
        f"{p.to_display_name or p.to_member_id} {format_currency(p.amount, p.currency)}"
        for p in payments
    )

