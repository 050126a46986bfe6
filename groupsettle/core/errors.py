"""Error types raised by the settlement core and mapped to HTTP responses."""

from typing import Any, Dict

from fastapi import status


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class SettlementError(AppError):
    """Base class for settlement engine failures."""


class MixedCurrencyError(SettlementError):
    """Balances handed to a single-currency operation span several currencies."""

    def __init__(self, currencies):
        codes = ", ".join(sorted(currencies))
        super().__init__(
            f"Expected balances in a single currency, got: {codes}",
            "mixed_currency",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
        self.currencies = set(currencies)


class UnknownMemberError(SettlementError):
    """A ledger entry references a member that is not part of the group."""

    def __init__(self, member_id: str, context: str):
        super().__init__(
            f"Unknown member '{member_id}' referenced by {context}",
            "unknown_member",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
        self.member_id = member_id


class UnconservedBalanceError(SettlementError):
    """Balances for a currency do not sum to zero."""

    def __init__(self, currency: str, total):
        super().__init__(
            f"Balances in {currency} sum to {total}, expected 0",
            "unconserved_balances",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
        self.currency = currency
        self.total = total


class MissingConversionRateError(SettlementError):
    """No direct or two-hop rate exists between two currencies."""

    def __init__(self, from_currency: str, to_currency: str):
        super().__init__(
            f"No conversion rate from {from_currency} to {to_currency}",
            "missing_conversion_rate",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
        self.from_currency = from_currency
        self.to_currency = to_currency


class InvalidSettlementError(SettlementError):
    """Proposed payments do not zero out every balance."""

    def __init__(self, message: str = "Payments do not settle all balances"):
        super().__init__(message, "invalid_settlement", status.HTTP_409_CONFLICT)


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }
