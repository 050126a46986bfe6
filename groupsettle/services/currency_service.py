"""Multi-currency settlement.

Per-currency mode settles every currency on its own and never converts.
Unified mode converts everything into one target currency first, trading
fewer payments for exchange-rate exposure; callers must offer it as an
explicit opt-in.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Protocol, Sequence

from groupsettle.core.errors import MissingConversionRateError, MixedCurrencyError
from groupsettle.core.utils import EPSILON, ZERO, is_zero, normalize_currency
from groupsettle.schemas.balances import Balance
from groupsettle.schemas.rates import ConversionTableIn, ExchangeRate
from groupsettle.schemas.settlements import Payment
from groupsettle.services.balance_service import group_by_currency
from groupsettle.services.settlement_service import minimize_payments

logger = logging.getLogger(__name__)

ONE = Decimal("1")


class RateLookup(Protocol):
    def get_rate(self, from_currency: str, to_currency: str) -> Decimal:
        """Multiplier turning an amount in ``from_currency`` into ``to_currency``."""


class ConversionTable:
    """Exchange rates with a two-hop fallback through ``base_currency``.

    Lookup order for (from, to):
        1. identical currencies -> 1
        2. a direct rate, or the inverse of the opposite direct rate
        3. from -> base -> to, each hop resolved as in step 2
    """

    def __init__(self, base_currency: str, rates: Iterable[ExchangeRate] = ()):
        self.base_currency = normalize_currency(base_currency)
        self._rates: Dict[tuple, Decimal] = {}
        for r in rates:
            self._rates[(r.from_currency, r.to_currency)] = r.rate

    @classmethod
    def from_base_rates(cls, base_currency: str, rates: Mapping[str, Decimal]) -> "ConversionTable":
        """Build a table from quotes of the form ``1 base = rates[code] code``."""
        base = normalize_currency(base_currency)
        entries = []
        for code, rate in rates.items():
            code = normalize_currency(code)
            if code == base:
                continue
            entries.append(ExchangeRate(from_currency=base, to_currency=code, rate=Decimal(str(rate))))
        return cls(base, entries)

    @classmethod
    def from_schema(cls, data: ConversionTableIn) -> "ConversionTable":
        table = cls.from_base_rates(data.base_currency, data.base_rates)
        for r in data.rates:
            table._rates[(r.from_currency, r.to_currency)] = r.rate
        return table

    def _direct(self, from_currency: str, to_currency: str) -> Decimal | None:
        if from_currency == to_currency:
            return ONE
        rate = self._rates.get((from_currency, to_currency))
        if rate is not None:
            return rate
        inverse = self._rates.get((to_currency, from_currency))
        if inverse is not None:
            return ONE / inverse
        return None

    def get_rate(self, from_currency: str, to_currency: str) -> Decimal:
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)

        rate = self._direct(from_currency, to_currency)
        if rate is not None:
            return rate

        to_base = self._direct(from_currency, self.base_currency)
        from_base = self._direct(self.base_currency, to_currency)
        if to_base is None or from_base is None:
            raise MissingConversionRateError(from_currency, to_currency)
        return to_base * from_base


def convert_amount(amount: Decimal, from_currency: str, to_currency: str, rates: RateLookup) -> Decimal:
    return amount * rates.get_rate(from_currency, to_currency)


def minimize_payments_by_currency(
    balances: Sequence[Balance], epsilon: Decimal = EPSILON
) -> Dict[str, List[Payment]]:
    """Settle each currency independently; no payment ever crosses currencies."""
    return {
        currency: minimize_payments(group, epsilon)
        for currency, group in group_by_currency(balances).items()
    }


def minimize_payments_unified(
    balances_by_currency: Mapping[str, Sequence[Balance]],
    target_currency: str,
    rates: RateLookup,
    epsilon: Decimal = EPSILON,
) -> List[Payment]:
    """
    Convert every balance into ``target_currency`` and settle once.

    Args:
        balances_by_currency: Balances grouped under their currency code
        target_currency: Currency all payments are denominated in
        rates: Rate lookup, e.g. a ConversionTable
        epsilon: Tolerance below which a combined balance counts as settled

    Raises:
        MissingConversionRateError: If any currency cannot reach the target;
            nothing is returned in that case
        MixedCurrencyError: If a balance is filed under another currency's key
    """
    target = normalize_currency(target_currency)

    combined: Dict[str, Decimal] = {}
    names: Dict[str, str | None] = {}

    for currency, group in balances_by_currency.items():
        currency = normalize_currency(currency)
        stray = {b.currency for b in group} - {currency}
        if stray:
            raise MixedCurrencyError(stray | {currency})
        if not group:
            continue

        rate = rates.get_rate(currency, target)
        if currency != target:
            logger.info("Converting %d %s balances to %s at %s", len(group), currency, target, rate)

        for b in group:
            combined[b.member_id] = combined.get(b.member_id, ZERO) + b.net_amount * rate
            if names.get(b.member_id) is None:
                names[b.member_id] = b.display_name

    unified = [
        Balance(
            member_id=member_id,
            display_name=names[member_id],
            net_amount=amount,
            currency=target,
        )
        for member_id, amount in combined.items()
        if not is_zero(amount, epsilon)
    ]

    return minimize_payments(unified, epsilon)
