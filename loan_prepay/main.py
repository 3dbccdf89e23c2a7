"""Command-line interface for the prepayment planner.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries and
prepayment insights, compare two prepayment plans for the same loan or ask
for written advice. Results can be printed to the terminal or exported to
JSON/CSV files.
"""

from __future__ import annotations

import json
import logging
import shlex
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click

from .advice import get_loan_advice
from .analytics import (
    compare_scenarios,
    get_cumulative_interest_data,
    get_prepayment_insight,
    get_summary,
)
from .data_models import (
    MODE_REDUCE_TENURE,
    PREPAYMENT_MODES,
    PREPAYMENT_TIMINGS,
    TIMING_END,
    LoanConfig,
)
from .engine import generate_schedule, simulated_years
from .formatter import (
    export_to_csv,
    export_to_json,
    print_comparison,
    print_cumulative,
    print_insight,
    print_schedule,
    print_summary,
    print_warnings,
)
from .utils import decimal_from_str, parse_amount, parse_yearly_prepayments
from .validation import validate_inputs

MAX_PRINTED_ROWS = 120


def build_config_from_options(
    principal: str,
    rate: str,
    tenure: str,
    custom_installment: Optional[str] = None,
    monthly_extra: Optional[str] = None,
    lump_sum: Optional[str] = None,
    lump_sum_frequency: int = 0,
    yearly_prepayment: Tuple[str, ...] = (),
    timing: str = TIMING_END,
    mode: str = MODE_REDUCE_TENURE,
) -> LoanConfig:
    """Turn raw option values into a ``LoanConfig``.

    Raises ``click.BadParameter`` for values that cannot be parsed. Values
    that parse but are out of range are left for ``validate_inputs``.
    """
    try:
        tenure_value = decimal_from_str(str(tenure))
        config = LoanConfig(
            principal=parse_amount(principal),
            rate=decimal_from_str(str(rate)),
            tenure_years=tenure_value,
            custom_installment=parse_amount(custom_installment) if custom_installment else decimal_from_str("0"),
            monthly_extra_payment=parse_amount(monthly_extra) if monthly_extra else decimal_from_str("0"),
            lump_sum_amount=parse_amount(lump_sum) if lump_sum else decimal_from_str("0"),
            lump_sum_frequency=int(lump_sum_frequency or 0),
            yearly_prepayments=parse_yearly_prepayments(yearly_prepayment, simulated_years(tenure_value)),
            prepayment_timing=timing.lower(),
            prepayment_mode=mode.lower(),
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    if config.prepayment_timing not in PREPAYMENT_TIMINGS:
        raise click.BadParameter(f"Prepayment timing must be 'start' or 'end'; got {timing}")
    if config.prepayment_mode not in PREPAYMENT_MODES:
        raise click.BadParameter(
            f"Prepayment mode must be 'reduce-tenure' or 'reduce-installment'; got {mode}"
        )
    return config


def loan_options(func):
    """Attach the options shared by every command that describes one loan."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts k, m, l, cr suffixes)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--tenure", "-t", "tenure", required=True, help="Loan tenure in years"),
        click.option("--custom-installment", "custom_installment", help="Fixed installment used with prepayments"),
        click.option("--monthly-extra", "monthly_extra", help="Extra amount paid every month"),
        click.option("--lump-sum", "lump_sum", help="Lump sum paid every --lump-sum-frequency months"),
        click.option("--lump-sum-frequency", "lump_sum_frequency", type=int, default=0, help="Months between lump sums (0 disables)"),
        click.option("--yearly-prepayment", "yearly_prepayment", multiple=True, help="Yearly prepayment in YEAR:AMOUNT format"),
        click.option("--timing", "timing", type=click.Choice(PREPAYMENT_TIMINGS), default=TIMING_END, help="Apply extras before interest (start) or after the installment (end)"),
        click.option("--mode", "mode", type=click.Choice(PREPAYMENT_MODES), default=MODE_REDUCE_TENURE, help="Shorten the tenure or lower the installment"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log calculation details to stderr")
def cli(verbose: bool) -> None:
    """A command-line planner for loan prepayments."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
@click.option("--standard", "standard", is_flag=True, help="Show the schedule without prepayments")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(standard: bool, output: Optional[str], **loan: Any) -> None:
    """Compute and print the full amortization schedule."""
    config = build_config_from_options(**loan)
    print_warnings(validate_inputs(config))
    schedule_entries = generate_schedule(config, not standard)
    summary_data = get_summary(config)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, schedule_entries, summary_data, get_prepayment_insight(summary_data))
            click.echo(f"Schedule exported to {path}")
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, schedule_entries)
            click.echo(f"Schedule exported to {path}")
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
    else:
        print_summary(summary_data)
        # Limit schedule length printed to avoid flooding the terminal
        if len(schedule_entries) > MAX_PRINTED_ROWS:
            click.echo(
                f"Schedule has {len(schedule_entries)} rows; showing first {MAX_PRINTED_ROWS} rows."
            )
            print_schedule(schedule_entries[:MAX_PRINTED_ROWS])
        else:
            print_schedule(schedule_entries)


@cli.command()
@loan_options
@click.option("--yearly/--monthly", "yearly", default=True, help="Granularity of the cumulative interest table")
@click.option("--cumulative", "cumulative", is_flag=True, help="Also print cumulative interest")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(yearly: bool, cumulative: bool, output: Optional[str], **loan: Any) -> None:
    """Compute and print the summary and prepayment insight for a loan."""
    config = build_config_from_options(**loan)
    print_warnings(validate_inputs(config))
    summary_data = get_summary(config)
    insight = get_prepayment_insight(summary_data)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data.to_dict(), "insight": insight.to_dict()}, f, indent=2)
        click.echo(f"Summary exported to {path}")
        return
    print_summary(summary_data)
    print_insight(insight)
    if cumulative:
        points = get_cumulative_interest_data(
            generate_schedule(config, False), generate_schedule(config, True), yearly
        )
        print_cumulative(points)


SCENARIO_OPTIONS: Dict[str, Tuple[str, bool]] = {
    "-p": ("principal", False),
    "--principal": ("principal", False),
    "-r": ("rate", False),
    "--rate": ("rate", False),
    "-t": ("tenure", False),
    "--tenure": ("tenure", False),
    "--custom-installment": ("custom_installment", False),
    "--monthly-extra": ("monthly_extra", False),
    "--lump-sum": ("lump_sum", False),
    "--lump-sum-frequency": ("lump_sum_frequency", False),
    "--yearly-prepayment": ("yearly_prepayment", True),
    "--timing": ("timing", False),
    "--mode": ("mode", False),
}


def parse_scenario_opts(opts: str) -> Dict[str, Any]:
    """Convert a quoted scenario option string into ``build_config_from_options`` arguments."""
    tokens = shlex.split(opts)
    params: Dict[str, Any] = {"yearly_prepayment": []}
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token not in SCENARIO_OPTIONS or i + 1 >= len(tokens):
            raise click.BadParameter(f"Unknown or incomplete option in scenario: {token}")
        name, repeatable = SCENARIO_OPTIONS[token]
        if repeatable:
            params[name].append(tokens[i + 1])
        else:
            params[name] = tokens[i + 1]
        i += 2
    for required in ("principal", "rate", "tenure"):
        if required not in params:
            raise click.BadParameter(f"Scenario missing required option {required}")
    params["yearly_prepayment"] = tuple(params["yearly_prepayment"])
    if "lump_sum_frequency" in params:
        try:
            params["lump_sum_frequency"] = int(params["lump_sum_frequency"])
        except ValueError:
            raise click.BadParameter(f"Invalid lump sum frequency: {params['lump_sum_frequency']}")
    return params


@cli.command()
@click.option("--scenario1", "scenario1", required=True, help="First scenario options quoted string")
@click.option("--scenario2", "scenario2", required=True, help="Second scenario options quoted string")
def compare(scenario1: str, scenario2: str) -> None:
    """Compare two prepayment scenarios.

    Scenarios are provided as quoted option strings, for example:

        loan-prepay compare --scenario1 "-p 25l -r 7.5 -t 15 --monthly-extra 5000"
            --scenario2 "-p 25l -r 7.5 -t 15 --lump-sum 1l --lump-sum-frequency 12"
    """
    config1 = build_config_from_options(**parse_scenario_opts(scenario1))
    config2 = build_config_from_options(**parse_scenario_opts(scenario2))
    summary1 = get_summary(config1)
    summary2 = get_summary(config2)
    winners = compare_scenarios(
        summary1,
        summary2,
        generate_schedule(config1, True),
        generate_schedule(config2, True),
    )
    print_comparison(summary1, summary2, winners)


@cli.command()
@loan_options
def advice(**loan: Any) -> None:
    """Ask the advice service to comment on a prepayment plan."""
    config = build_config_from_options(**loan)
    print_warnings(validate_inputs(config))
    click.echo(get_loan_advice(get_summary(config), config))


if __name__ == "__main__":
    cli()
