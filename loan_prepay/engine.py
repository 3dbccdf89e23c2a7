"""Core calculation engine for the prepayment planner.

This module implements the month-by-month balance simulation that produces
an amortization schedule for a fixed-rate annuity loan. When prepayments are
active it applies the flat monthly extra, the recurring lump sum and the
yearly prepayment, either before interest accrues or after the installment
is deducted, and optionally re-amortizes the remaining balance so that the
installment falls instead of the tenure.

The engine is pure: it performs no I/O, keeps no state between calls and
never raises for out-of-range configuration values. Validation is the job of
``loan_prepay.validation``.
"""

from __future__ import annotations

import logging
from decimal import MAX_EMAX, ROUND_HALF_UP, Decimal, Overflow, getcontext, localcontext
from typing import List

from .data_models import (
    MODE_REDUCE_INSTALLMENT,
    TIMING_END,
    TIMING_START,
    LoanConfig,
    ScheduleEntry,
)

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

MAX_PERIODS = 600  # 50 years; guarantees termination for any configuration
BALANCE_EPSILON = Decimal("0.01")
ZERO = Decimal("0")


def monthly_rate(rate: Decimal) -> Decimal:
    """Convert an annual nominal rate in percent into a monthly decimal rate."""
    return rate / Decimal(12) / Decimal(100)


def total_periods(tenure_years: Decimal) -> int:
    """Return the number of standard periods, ``round(tenure_years * 12)``."""
    if tenure_years <= 0:
        return 0
    with localcontext() as ctx:
        ctx.Emax = MAX_EMAX
        return int((tenure_years * 12).to_integral_value(rounding=ROUND_HALF_UP))


def simulated_years(tenure_years: Decimal) -> int:
    """Return how many tenure years a schedule can reach, at most ``MAX_PERIODS // 12``."""
    return min((total_periods(tenure_years) + 11) // 12, MAX_PERIODS // 12)


def calculate_installment(principal: Decimal, rate: Decimal, months: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate derived
    from the annual ``rate`` in percent and ``n`` is the number of payments.
    When the interest rate is zero, the payment simplifies to ``P / n``. A
    non-positive principal or number of payments gives zero. When
    ``(1 + i)^n`` is too large to represent the payment is its limit as ``n``
    grows, the interest-only payment ``P * i``.
    """
    if principal <= 0 or months <= 0:
        return ZERO
    rate_per_month = monthly_rate(rate)
    if rate_per_month == 0:
        return principal / Decimal(months)
    try:
        factor = (1 + rate_per_month) ** months
    except Overflow:
        return principal * rate_per_month
    if factor == 1:
        # rate too small to register at this precision
        return principal / Decimal(months)
    return principal * (rate_per_month * factor) / (factor - 1)


def _extra_for_period(config: LoanConfig, period: int) -> Decimal:
    """Sum the extra payment due in ``period`` from all prepayment sources.

    Each source is clamped to zero before summing. The yearly prepayment
    lands on the first month of the year when extras are applied before
    interest accrues and on the last month of the year otherwise.
    """
    extra = max(ZERO, config.monthly_extra_payment)
    frequency = config.lump_sum_frequency
    if frequency > 0 and period % frequency == 0:
        extra += max(ZERO, config.lump_sum_amount)

    if config.prepayment_timing == TIMING_START:
        yearly_due = period % 12 == 1
    else:
        yearly_due = period % 12 == 0
    if yearly_due:
        year_index = (period - 1) // 12
        if year_index < len(config.yearly_prepayments):
            extra += max(ZERO, config.yearly_prepayments[year_index])
    return extra


def generate_schedule(config: LoanConfig, prepayments_active: bool) -> List[ScheduleEntry]:
    """Simulate the loan month by month and return its amortization schedule.

    Parameters
    ----------
    config: LoanConfig
        The loan and prepayment configuration. It is not validated here.
    prepayments_active: bool
        When False every prepayment setting (including the custom
        installment) is ignored, giving the standard schedule.

    Returns
    -------
    List[ScheduleEntry]
        One entry per simulated month, in period order. The simulation stops
        when the balance is paid off or after ``MAX_PERIODS`` months,
        whichever comes first. A non-positive principal or tenure gives an
        empty schedule.
    """
    periods = total_periods(config.tenure_years)
    if config.principal <= 0 or periods <= 0:
        return []

    rate_per_month = monthly_rate(config.rate)
    standard_installment = calculate_installment(config.principal, config.rate, periods)
    reduce_installment = prepayments_active and config.prepayment_mode == MODE_REDUCE_INSTALLMENT
    use_custom = prepayments_active and config.custom_installment > 0

    schedule: List[ScheduleEntry] = []
    balance = config.principal
    period = 1
    while balance > BALANCE_EPSILON and period <= MAX_PERIODS:
        starting_balance = balance
        extra = _extra_for_period(config, period) if prepayments_active else ZERO
        applied_extra = ZERO

        if prepayments_active and config.prepayment_timing == TIMING_START and extra > 0:
            applied_extra = min(balance, extra)
            balance -= applied_extra

        interest_payment = balance * rate_per_month

        installment = standard_installment
        if reduce_installment:
            remaining = max(1, periods - period + 1)
            installment = calculate_installment(balance, config.rate, remaining)
        if use_custom:
            installment = config.custom_installment
        # Final-period guard: never charge more than what is owed
        installment = min(balance + interest_payment, installment)
        principal_payment = installment - interest_payment

        if prepayments_active and config.prepayment_timing == TIMING_END and extra > 0:
            remaining_after_installment = max(ZERO, balance - principal_payment)
            applied_extra = min(remaining_after_installment, extra)
            balance = remaining_after_installment - applied_extra
        else:
            balance -= principal_payment

        schedule.append(
            ScheduleEntry(
                period=period,
                year=(period + 11) // 12,
                starting_balance=starting_balance,
                installment=installment,
                interest_payment=interest_payment,
                principal_payment=principal_payment,
                extra_payment=applied_extra,
                total_paid=installment + applied_extra,
                ending_balance=max(ZERO, balance),
            )
        )

        if balance <= 0:
            break
        period += 1

    if balance > BALANCE_EPSILON:
        logger.debug(
            "Schedule stopped after %d periods with %.2f outstanding", len(schedule), balance
        )
    return schedule
