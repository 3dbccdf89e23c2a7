"""Data models for the prepayment planner.

This module defines dataclasses representing the entities used by the
planner: the loan configuration, individual schedule entries and the
aggregate summary and insight figures derived from a pair of schedules.
Using dataclasses makes it easy to construct, inspect and serialize these
structures.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Dict, Tuple

TIMING_START = "start"  # extra payments reduce the balance before interest accrues
TIMING_END = "end"  # extra payments are applied after the installment
PREPAYMENT_TIMINGS = (TIMING_START, TIMING_END)

MODE_REDUCE_TENURE = "reduce-tenure"
MODE_REDUCE_INSTALLMENT = "reduce-installment"
PREPAYMENT_MODES = (MODE_REDUCE_TENURE, MODE_REDUCE_INSTALLMENT)


@dataclass(frozen=True)
class LoanConfig:
    """Configuration of a loan and its prepayment plan.

    The configuration is immutable for the duration of a simulation run. To
    try a different plan, build a new configuration (see
    ``loan_prepay.main.build_config_from_options``).

    Attributes
    ----------
    principal: Decimal
        Amount borrowed.
    rate: Decimal
        Nominal annual interest rate in percent (``7.5`` means 7.5 %).
    tenure_years: Decimal
        Tenure of the standard (no prepayment) schedule. The number of
        standard periods is ``round(tenure_years * 12)``.
    custom_installment: Decimal
        When greater than zero, this exact amount is charged every period of
        the prepaid schedule instead of the computed installment.
    monthly_extra_payment: Decimal
        Extra amount paid every period when prepayments are active.
    lump_sum_amount: Decimal
        Extra amount paid every ``lump_sum_frequency`` periods.
    lump_sum_frequency: int
        Number of periods between lump sums. ``0`` disables lump sums.
    yearly_prepayments: Tuple[Decimal, ...]
        One extra amount per tenure year, paid once a year.
    prepayment_timing: str
        ``"start"`` or ``"end"``; see ``TIMING_START`` and ``TIMING_END``.
    prepayment_mode: str
        ``"reduce-tenure"`` or ``"reduce-installment"``.
    """

    principal: Decimal
    rate: Decimal
    tenure_years: Decimal
    custom_installment: Decimal = Decimal("0")
    monthly_extra_payment: Decimal = Decimal("0")
    lump_sum_amount: Decimal = Decimal("0")
    lump_sum_frequency: int = 0
    yearly_prepayments: Tuple[Decimal, ...] = ()
    prepayment_timing: str = TIMING_END
    prepayment_mode: str = MODE_REDUCE_TENURE

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-serialisable representation of the configuration."""
        return {
            "principal": str(self.principal),
            "rate": str(self.rate),
            "tenure_years": str(self.tenure_years),
            "custom_installment": str(self.custom_installment),
            "monthly_extra_payment": str(self.monthly_extra_payment),
            "lump_sum_amount": str(self.lump_sum_amount),
            "lump_sum_frequency": self.lump_sum_frequency,
            "yearly_prepayments": [str(v) for v in self.yearly_prepayments],
            "prepayment_timing": self.prepayment_timing,
            "prepayment_mode": self.prepayment_mode,
        }


@dataclass(frozen=True)
class ScheduleEntry:
    """An entry in the amortization schedule.

    Each entry corresponds to one month. ``total_paid`` is the cash that
    left the borrower's pocket in that month: the installment plus any extra
    payment that was actually applied.
    """

    period: int
    year: int
    starting_balance: Decimal
    installment: Decimal
    interest_payment: Decimal
    principal_payment: Decimal
    extra_payment: Decimal
    total_paid: Decimal
    ending_balance: Decimal


@dataclass(frozen=True)
class LoanSummary:
    """Aggregate figures for a standard schedule and its prepaid counterpart."""

    installment: Decimal
    total_interest_standard: Decimal
    total_interest_with_prepayment: Decimal
    interest_saved: Decimal
    standard_tenure_months: int
    new_tenure_months: int
    tenure_saved_months: int
    total_amount_standard: Decimal
    total_amount_with_prepayment: Decimal
    total_prepayment_outlay: Decimal

    def to_dict(self) -> Dict[str, object]:
        return {
            key: float(value) if isinstance(value, Decimal) else value
            for key, value in asdict(self).items()
        }


@dataclass(frozen=True)
class PrepaymentInsight:
    """Return figures for the money put into prepayments.

    ``annualised_return`` is a simplified compounding approximation spread
    over the years of tenure saved. It is not an internal rate of return and
    should not be read as a financial guarantee.
    """

    total_prepayment_outlay: Decimal
    interest_saved: Decimal
    roi: Decimal
    annualised_return: Decimal
    tenure_saved_months: int

    def to_dict(self) -> Dict[str, object]:
        return {
            key: float(value) if isinstance(value, Decimal) else value
            for key, value in asdict(self).items()
        }


@dataclass(frozen=True)
class CumulativeInterestPoint:
    period: int
    year: int
    label: str
    standard_cumulative_interest: int
    prepaid_cumulative_interest: int


@dataclass(frozen=True)
class YearlyBalancePoint:
    """Closing balances at the end of a tenure year, rounded to whole units."""

    year: int
    label: str
    standard_balance: int
    prepaid_balances: Tuple[int, ...] = ()


@dataclass(frozen=True)
class ScenarioComparison:
    """Side-by-side winners between two prepayment scenarios.

    Each winner is ``"A"``, ``"B"`` or ``"tie"``.
    """

    starting_installment: str
    new_tenure_months: str
    interest_saved: str
    total_amount_with_prepayment: str
    total_interest_with_prepayment: str
