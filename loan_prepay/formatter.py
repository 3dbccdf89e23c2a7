"""Output helpers for the prepayment planner.

This module renders schedules, summaries and insights as plain text tables
for the terminal, and converts schedules to CSV text and JSON-serialisable
dictionaries for export.
"""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .data_models import (
    CumulativeInterestPoint,
    LoanSummary,
    PrepaymentInsight,
    ScenarioComparison,
    ScheduleEntry,
)

CSV_HEADER = [
    "Period",
    "Year",
    "Opening Balance",
    "Installment",
    "Interest",
    "Principal",
    "Extra Payment",
    "Total Paid",
    "Closing Balance",
]


def format_tenure(months: int) -> str:
    """Return a tenure in months as ``"<years>y <months>m"``."""
    return f"{months // 12}y {months % 12}m"


def schedule_to_csv(schedule: Iterable[ScheduleEntry]) -> str:
    """Render a schedule as CSV text with one header line and one line per row.

    Numeric fields are fixed to two decimal places.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for e in schedule:
        writer.writerow(
            [
                e.period,
                e.year,
                f"{e.starting_balance:.2f}",
                f"{e.installment:.2f}",
                f"{e.interest_payment:.2f}",
                f"{e.principal_payment:.2f}",
                f"{e.extra_payment:.2f}",
                f"{e.total_paid:.2f}",
                f"{e.ending_balance:.2f}",
            ]
        )
    return buffer.getvalue()


def export_to_csv(path: Path, schedule: Iterable[ScheduleEntry]) -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(schedule_to_csv(schedule))


def serialize_schedule(schedule: Iterable[ScheduleEntry]) -> List[Dict[str, Any]]:
    """Convert schedule entries into JSON-serialisable dictionaries."""
    return [
        {
            "period": e.period,
            "year": e.year,
            "starting_balance": float(e.starting_balance),
            "installment": float(e.installment),
            "interest": float(e.interest_payment),
            "principal": float(e.principal_payment),
            "extra_payment": float(e.extra_payment),
            "total_paid": float(e.total_paid),
            "ending_balance": float(e.ending_balance),
        }
        for e in schedule
    ]


def serialize_cumulative(points: Iterable[CumulativeInterestPoint]) -> List[Dict[str, Any]]:
    return [
        {
            "period": p.period,
            "year": p.year,
            "label": p.label,
            "standard": p.standard_cumulative_interest,
            "prepaid": p.prepaid_cumulative_interest,
        }
        for p in points
    ]


def export_to_json(
    path: Path,
    schedule: List[ScheduleEntry],
    summary: LoanSummary,
    insight: Optional[PrepaymentInsight] = None,
) -> None:
    """Export schedule, summary and (optionally) insight to a JSON file."""
    data: Dict[str, Any] = {"summary": summary.to_dict(), "schedule": serialize_schedule(schedule)}
    if insight is not None:
        data["insight"] = insight.to_dict()
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def print_warnings(warnings: Iterable[str]) -> None:
    warnings = list(warnings)
    if not warnings:
        return
    print("Warnings")
    print("-" * 72)
    for message in warnings:
        print(f"! {message}")
    print("-" * 72)


def print_summary(summary: LoanSummary) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Installment          : {summary.installment:.2f}")
    print(f"Interest (standard)  : {summary.total_interest_standard:.2f}")
    print(f"Interest (prepaid)   : {summary.total_interest_with_prepayment:.2f}")
    print(f"Interest saved       : {summary.interest_saved:.2f}")
    print(f"Standard tenure      : {format_tenure(summary.standard_tenure_months)}")
    print(f"New tenure           : {format_tenure(summary.new_tenure_months)}")
    if summary.tenure_saved_months:
        print(f"Tenure saved         : {format_tenure(summary.tenure_saved_months)}")
    print(f"Total paid (standard): {summary.total_amount_standard:.2f}")
    print(f"Total paid (prepaid) : {summary.total_amount_with_prepayment:.2f}")
    if summary.total_prepayment_outlay:
        print(f"Prepayment outlay    : {summary.total_prepayment_outlay:.2f}")
    print("-" * 72)


def print_insight(insight: PrepaymentInsight) -> None:
    """Print the return on prepayment figures.

    The annualised figure is an approximation, so it is labelled as such.
    """
    if not insight.total_prepayment_outlay:
        return
    print("Prepayment insight")
    print("-" * 72)
    print(f"Return on outlay     : {insight.roi:.2f}%")
    print(f"Annualised (approx)  : {insight.annualised_return:.2f}%")
    print("-" * 72)


def print_schedule(schedule: Iterable[ScheduleEntry]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = [
        "Period",
        "Year",
        "StartBal",
        "Installment",
        "Interest",
        "Principal",
        "Extra",
        "TotalPaid",
        "EndBal",
    ]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.period),
            str(entry.year),
            f"{entry.starting_balance:.2f}",
            f"{entry.installment:.2f}",
            f"{entry.interest_payment:.2f}",
            f"{entry.principal_payment:.2f}",
            f"{entry.extra_payment:.2f}",
            f"{entry.total_paid:.2f}",
            f"{entry.ending_balance:.2f}",
        ]
        print("\t".join(row))


def print_cumulative(points: Iterable[CumulativeInterestPoint]) -> None:
    print(f"{'Period':>8s} {'Label':>8s} {'Standard':>15s} {'Prepaid':>15s}")
    for p in points:
        print(
            f"{p.period:8d} {p.label:>8s} {p.standard_cumulative_interest:15d} "
            f"{p.prepaid_cumulative_interest:15d}"
        )


def print_comparison(
    s1: LoanSummary, s2: LoanSummary, winners: Optional[ScenarioComparison] = None
) -> None:
    """Print a comparison of two prepayment scenarios side by side.

    The difference column is scenario2 - scenario1; when ``winners`` is
    given the better scenario for each metric is shown as well.
    """
    w = winners
    rows = [
        ("new_tenure_months", s1.new_tenure_months, s2.new_tenure_months, w and w.new_tenure_months),
        ("interest_saved", s1.interest_saved, s2.interest_saved, w and w.interest_saved),
        (
            "total_amount_with_prepayment",
            s1.total_amount_with_prepayment,
            s2.total_amount_with_prepayment,
            w and w.total_amount_with_prepayment,
        ),
        (
            "total_interest_with_prepayment",
            s1.total_interest_with_prepayment,
            s2.total_interest_with_prepayment,
            w and w.total_interest_with_prepayment,
        ),
    ]
    print("Comparison")
    print("=" * 80)
    print(f"{'Metric':32s} {'Scenario1':>14s} {'Scenario2':>14s} {'Difference':>14s} {'Better':>6s}")
    for key, v1, v2, better in rows:
        print(f"{key:32s} {float(v1):14.2f} {float(v2):14.2f} {float(v2 - v1):14.2f} {better or '':>6s}")
    print("=" * 80)
