"""Shared fixtures for the prepayment planner tests."""

from decimal import Decimal

import pytest

from loan_prepay.data_models import LoanConfig


def _make_config(**overrides):
    values = {
        "principal": Decimal("2500000"),
        "rate": Decimal("7.5"),
        "tenure_years": Decimal("15"),
    }
    values.update(overrides)
    return LoanConfig(**values)


@pytest.fixture
def make_config():
    """Build a ``LoanConfig`` for the 2.5M / 7.5% / 15 year base loan."""
    return _make_config


@pytest.fixture
def base_config():
    return _make_config()
