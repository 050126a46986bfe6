"""Unit tests for balance derivation."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from groupsettle.core.errors import UnknownMemberError
from groupsettle.schemas.expense import Expense, ExpenseSplit
from groupsettle.schemas.settlements import SettlementRecord, SettlementStatus
from groupsettle.services.balance_service import compute_balances, group_by_currency
from groupsettle.services.settlement_service import minimize_payments


def equal_expense(amount, paid_by, member_ids, currency="USD"):
    share = Decimal(amount) / len(member_ids)
    return Expense(
        amount=Decimal(amount),
        currency=currency,
        paid_by=paid_by,
        splits=[ExpenseSplit(member_id=m, amount=share) for m in member_ids],
    )


def nets(balances):
    return {(b.currency, b.member_id): b.net_amount for b in balances}


class TestComputeBalances:
    """Folding expenses and settlements into balances."""

    def test_single_expense(self, members):
        """Payer gains amount minus own share; others lose their share."""
        expense = equal_expense(90, "alice", ["alice", "bob", "carol"])

        result = compute_balances(members, [expense], [])

        assert nets(result) == {
            ("USD", "alice"): Decimal("60"),
            ("USD", "bob"): Decimal("-30"),
            ("USD", "carol"): Decimal("-30"),
        }
        assert [b.display_name for b in result] == ["Alice", "Bob", "Carol"]

    def test_weighted_splits(self, members):
        """Splits need not be equal."""
        expense = Expense(
            amount=Decimal("100"),
            currency="USD",
            paid_by="bob",
            splits=[
                ExpenseSplit(member_id="alice", amount=Decimal("70")),
                ExpenseSplit(member_id="carol", amount=Decimal("30")),
            ],
        )

        result = nets(compute_balances(members, [expense], []))

        assert result[("USD", "alice")] == Decimal("-70")
        assert result[("USD", "bob")] == Decimal("100")
        assert result[("USD", "carol")] == Decimal("-30")

    def test_completed_settlement_moves_both_toward_zero(self, members):
        expense = equal_expense(90, "alice", ["alice", "bob", "carol"])
        paid = SettlementRecord(
            from_member_id="bob",
            to_member_id="alice",
            amount=Decimal("30"),
            currency="USD",
            status=SettlementStatus.COMPLETED,
        )

        result = nets(compute_balances(members, [expense], [paid]))

        assert result[("USD", "alice")] == Decimal("30")
        assert result[("USD", "bob")] == Decimal("0")
        assert result[("USD", "carol")] == Decimal("-30")

    @pytest.mark.parametrize("status", [SettlementStatus.PENDING, SettlementStatus.CANCELLED])
    def test_non_completed_settlements_ignored(self, members, status):
        expense = equal_expense(90, "alice", ["alice", "bob", "carol"])
        record = SettlementRecord(
            from_member_id="bob",
            to_member_id="alice",
            amount=Decimal("30"),
            currency="USD",
            status=status,
        )

        result = nets(compute_balances(members, [expense], [record]))

        assert result[("USD", "bob")] == Decimal("-30")

    def test_balance_per_member_per_currency(self, members):
        """Every currency in the ledger gets a row for every member."""
        expenses = [
            equal_expense(30, "alice", ["alice", "bob", "carol"]),
            equal_expense(20, "carol", ["bob", "carol"], currency="EUR"),
        ]

        result = compute_balances(members, expenses, [])

        assert [(b.currency, b.member_id) for b in result] == [
            ("USD", "alice"), ("USD", "bob"), ("USD", "carol"),
            ("EUR", "alice"), ("EUR", "bob"), ("EUR", "carol"),
        ]
        assert nets(result)[("EUR", "alice")] == Decimal("0")
        assert nets(result)[("EUR", "carol")] == Decimal("10")

    def test_each_currency_sums_to_zero(self, members):
        expenses = [
            equal_expense(120, "alice", ["alice", "bob", "carol"]),
            equal_expense(45, "bob", ["alice", "carol"], currency="JPY"),
        ]

        for currency, group in group_by_currency(compute_balances(members, expenses, [])).items():
            assert abs(sum(b.net_amount for b in group)) < Decimal("0.01"), currency

    def test_empty_ledger_uses_base_currency(self, members):
        result = compute_balances(members, [], [], base_currency="sgd")

        assert [(b.currency, b.net_amount) for b in result] == [("SGD", Decimal("0"))] * 3

    def test_unknown_payer(self, members):
        with pytest.raises(UnknownMemberError) as exc_info:
            compute_balances(members, [equal_expense(10, "mallory", ["alice"])], [])

        assert exc_info.value.member_id == "mallory"

    def test_unknown_split_member(self, members):
        with pytest.raises(UnknownMemberError):
            compute_balances(members, [equal_expense(10, "alice", ["alice", "zed"])], [])

    def test_unknown_settlement_party(self, members):
        record = SettlementRecord(
            from_member_id="zed",
            to_member_id="alice",
            amount=Decimal("5"),
            currency="USD",
            status=SettlementStatus.COMPLETED,
        )

        with pytest.raises(UnknownMemberError):
            compute_balances(members, [], [record])

    def test_paying_suggested_payments_settles_group(self, members):
        """Recording every suggestion as completed zeroes all balances."""
        expenses = [
            equal_expense(90, "alice", ["alice", "bob", "carol"]),
            equal_expense(60, "bob", ["alice", "bob", "carol"]),
        ]
        payments = minimize_payments(compute_balances(members, expenses, []))
        records = [
            SettlementRecord(
                from_member_id=p.from_member_id,
                to_member_id=p.to_member_id,
                amount=p.amount,
                currency=p.currency,
                status=SettlementStatus.COMPLETED,
            )
            for p in payments
        ]

        after = compute_balances(members, expenses, records)

        assert all(abs(b.net_amount) < Decimal("0.01") for b in after)


class TestExpenseValidation:
    """Expense records are checked when built."""

    def test_split_total_must_match(self):
        with pytest.raises(ValidationError, match="must equal expense amount"):
            Expense(
                amount=Decimal("50"),
                currency="USD",
                paid_by="alice",
                splits=[ExpenseSplit(member_id="alice", amount=Decimal("20"))],
            )

    def test_duplicate_split_members(self):
        with pytest.raises(ValidationError, match="Duplicate members"):
            Expense(
                amount=Decimal("20"),
                currency="USD",
                paid_by="alice",
                splits=[
                    ExpenseSplit(member_id="bob", amount=Decimal("10")),
                    ExpenseSplit(member_id="bob", amount=Decimal("10")),
                ],
            )

    def test_negative_split_rejected(self):
        with pytest.raises(ValidationError):
            ExpenseSplit(member_id="bob", amount=Decimal("-1"))
