"""Shared fixtures for settlement tests."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from groupsettle.schemas.balances import Balance
from groupsettle.schemas.group import Member


def _balances(amounts, currency="USD"):
    return [
        Balance(member_id=member_id, display_name=member_id.title(), net_amount=Decimal(str(amount)), currency=currency)
        for member_id, amount in amounts.items()
    ]


@pytest.fixture
def make_balances():
    """Factory building balances from a {member_id: amount} mapping, keeping its order."""
    return _balances


@pytest.fixture
def members():
    """Three-person group."""
    return [
        Member(member_id="alice", display_name="Alice"),
        Member(member_id="bob", display_name="Bob"),
        Member(member_id="carol", display_name="Carol"),
    ]


@pytest.fixture
def client():
    """Test client for the FastAPI app."""
    from groupsettle.main import app

    return TestClient(app)
