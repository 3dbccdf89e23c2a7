"""Comparative analytics over a standard schedule and its prepaid variant.

All functions here are pure. ``get_summary`` is the only one that runs the
engine; the others work on schedules or summaries that were already
computed, so callers decide when to recompute.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence

from .data_models import (
    CumulativeInterestPoint,
    LoanConfig,
    LoanSummary,
    PrepaymentInsight,
    ScenarioComparison,
    ScheduleEntry,
    YearlyBalancePoint,
)
from .engine import MAX_PERIODS, ZERO, calculate_installment, generate_schedule, total_periods


def _round_whole(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def get_summary(config: LoanConfig) -> LoanSummary:
    """Run the standard and the prepaid schedules and reduce them to totals.

    The standard schedule is always generated with prepayments disabled,
    whatever the configuration says.
    """
    return summarize_schedules(
        config, generate_schedule(config, False), generate_schedule(config, True)
    )


def summarize_schedules(
    config: LoanConfig,
    standard: Sequence[ScheduleEntry],
    prepaid: Sequence[ScheduleEntry],
) -> LoanSummary:
    """Reduce schedules already generated for ``config`` to a ``LoanSummary``."""
    if config.custom_installment > 0:
        installment = config.custom_installment
    else:
        installment = calculate_installment(
            config.principal, config.rate, total_periods(config.tenure_years)
        )

    total_interest_standard = sum((row.interest_payment for row in standard), ZERO)
    total_interest_prepaid = sum((row.interest_payment for row in prepaid), ZERO)

    return LoanSummary(
        installment=installment,
        total_interest_standard=total_interest_standard,
        total_interest_with_prepayment=total_interest_prepaid,
        interest_saved=max(ZERO, total_interest_standard - total_interest_prepaid),
        standard_tenure_months=len(standard),
        new_tenure_months=len(prepaid),
        tenure_saved_months=max(0, len(standard) - len(prepaid)),
        total_amount_standard=sum((row.total_paid for row in standard), ZERO),
        total_amount_with_prepayment=sum((row.total_paid for row in prepaid), ZERO),
        total_prepayment_outlay=sum((row.extra_payment for row in prepaid), ZERO),
    )


def get_prepayment_insight(summary: LoanSummary) -> PrepaymentInsight:
    """Return the return on the money put into prepayments.

    ``roi`` is the interest saved as a percentage of the total extra outlay.
    ``annualised_return`` spreads that gain over the years of tenure saved:

        ((1 + saved / outlay) ^ (1 / max(1, years_saved)) - 1) * 100

    This is a simplified compounding approximation, not an internal rate of
    return, and says nothing about what the outlay could earn elsewhere.
    Both figures are zero when nothing was prepaid; the annualised figure is
    also zero when no tenure was saved.
    """
    outlay = summary.total_prepayment_outlay
    saved = summary.interest_saved
    roi = saved / outlay * 100 if outlay > 0 else ZERO

    years_saved = Decimal(summary.tenure_saved_months) / 12
    if outlay > 0 and years_saved > 0:
        exponent = 1 / max(Decimal(1), years_saved)
        annualised = ((1 + saved / outlay) ** exponent - 1) * 100
    else:
        annualised = ZERO

    return PrepaymentInsight(
        total_prepayment_outlay=outlay,
        interest_saved=saved,
        roi=roi,
        annualised_return=annualised,
        tenure_saved_months=summary.tenure_saved_months,
    )


def get_cumulative_interest_data(
    standard_schedule: Sequence[ScheduleEntry],
    prepaid_schedule: Sequence[ScheduleEntry],
    yearly_granularity: bool = True,
) -> List[CumulativeInterestPoint]:
    """Return running interest totals for two schedules walked in lockstep.

    The walk covers the longer schedule; months past the end of the shorter
    one add no interest. With ``yearly_granularity`` only every twelfth month
    and the final month are emitted, otherwise every month is.
    """
    length = max(len(standard_schedule), len(prepaid_schedule))
    points: List[CumulativeInterestPoint] = []
    standard_total = ZERO
    prepaid_total = ZERO
    for index in range(length):
        if index < len(standard_schedule):
            standard_total += standard_schedule[index].interest_payment
        if index < len(prepaid_schedule):
            prepaid_total += prepaid_schedule[index].interest_payment
        period = index + 1
        if yearly_granularity and period % 12 != 0 and index != length - 1:
            continue
        year = (period + 11) // 12
        points.append(
            CumulativeInterestPoint(
                period=period,
                year=year,
                label=f"Yr {year}",
                standard_cumulative_interest=_round_whole(standard_total),
                prepaid_cumulative_interest=_round_whole(prepaid_total),
            )
        )
    return points


def get_yearly_balance_data(
    standard_schedule: Sequence[ScheduleEntry],
    prepaid_schedules: Iterable[Sequence[ScheduleEntry]],
    tenure_years: Decimal,
) -> List[YearlyBalancePoint]:
    """Return the closing balance at the end of each tenure year.

    A schedule that has already ended contributes a zero balance. No year
    past the last simulated period is reported.
    """
    prepaid_schedules = list(prepaid_schedules)

    def balance_at(schedule: Sequence[ScheduleEntry], index: int) -> int:
        if index < len(schedule):
            return _round_whole(schedule[index].ending_balance)
        return 0

    points: List[YearlyBalancePoint] = []
    max_year = 0
    if tenure_years > 0:
        whole_years = tenure_years.to_integral_value(rounding=ROUND_CEILING)
        max_year = int(min(whole_years, Decimal(MAX_PERIODS // 12)))
    for year in range(1, max_year + 1):
        index = year * 12 - 1
        points.append(
            YearlyBalancePoint(
                year=year,
                label=f"Yr {year}",
                standard_balance=balance_at(standard_schedule, index),
                prepaid_balances=tuple(balance_at(s, index) for s in prepaid_schedules),
            )
        )
    return points


def pick_winner(a, b, prefer_lower: bool) -> str:
    """Return ``"A"``, ``"B"`` or ``"tie"`` for a single metric."""
    if a == b:
        return "tie"
    if prefer_lower:
        return "A" if a < b else "B"
    return "A" if a > b else "B"


def compare_scenarios(
    summary_a: LoanSummary,
    summary_b: LoanSummary,
    schedule_a: Optional[Sequence[ScheduleEntry]] = None,
    schedule_b: Optional[Sequence[ScheduleEntry]] = None,
) -> ScenarioComparison:
    """Compare two prepayment scenarios metric by metric.

    The starting installment is taken from the first row of each prepaid
    schedule when one is given, since lower-installment plans may start
    below the summary installment.
    """
    start_a = schedule_a[0].installment if schedule_a else summary_a.installment
    start_b = schedule_b[0].installment if schedule_b else summary_b.installment
    return ScenarioComparison(
        starting_installment=pick_winner(start_a, start_b, True),
        new_tenure_months=pick_winner(summary_a.new_tenure_months, summary_b.new_tenure_months, True),
        interest_saved=pick_winner(summary_a.interest_saved, summary_b.interest_saved, False),
        total_amount_with_prepayment=pick_winner(
            summary_a.total_amount_with_prepayment, summary_b.total_amount_with_prepayment, True
        ),
        total_interest_with_prepayment=pick_winner(
            summary_a.total_interest_with_prepayment, summary_b.total_interest_with_prepayment, True
        ),
    )


def normalize_yearly_prepayments(values: Iterable[Decimal], years: int) -> List[Decimal]:
    """Truncate or zero-pad ``values`` to exactly one entry per tenure year."""
    normalized = list(values)[: max(0, years)]
    while len(normalized) < years:
        normalized.append(ZERO)
    return normalized
