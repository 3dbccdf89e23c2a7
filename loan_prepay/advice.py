"""Natural-language advice for a prepayment plan.

The advice text comes from an external text-generation service. This module
formats the prompt from a summary and its configuration and calls the
service through the ``openai`` client. Any failure of the service is
reported as ``ADVICE_FAILURE_MESSAGE``; nothing here feeds back into the
calculations.
"""

from __future__ import annotations

import logging
import os
from decimal import Decimal
from typing import Optional

from openai import OpenAI

from .data_models import MODE_REDUCE_INSTALLMENT, TIMING_START, LoanConfig, LoanSummary

logger = logging.getLogger(__name__)

ADVICE_FAILURE_MESSAGE = "Failed to fetch advice. Please check your connection and try again."
DEFAULT_ADVICE_MODEL = "gpt-4.1-mini"


def planned_annual_prepayment(config: LoanConfig) -> Decimal:
    """Return the extra money the plan puts in over a year.

    Lump sums are annualised from their frequency; yearly prepayments are
    not included since they vary per year.
    """
    annual_lump_sum = Decimal("0")
    if config.lump_sum_frequency > 0:
        annual_lump_sum = Decimal(12) / Decimal(config.lump_sum_frequency) * config.lump_sum_amount
    return annual_lump_sum + config.monthly_extra_payment * 12


def build_advice_prompt(summary: LoanSummary, config: LoanConfig) -> str:
    timing = "Start of month" if config.prepayment_timing == TIMING_START else "End of month"
    mode = "Reduce installment" if config.prepayment_mode == MODE_REDUCE_INSTALLMENT else "Reduce tenure"
    saved_years, saved_months = divmod(summary.tenure_saved_months, 12)
    new_years, new_months = divmod(summary.new_tenure_months, 12)
    return "\n".join(
        [
            "As a senior financial advisor, analyze this home loan scenario.",
            "",
            "Current inputs:",
            f"- Loan amount: {config.principal:,.2f}",
            f"- Interest rate: {config.rate}%",
            f"- Standard tenure: {config.tenure_years} years",
            f"- Planned annual prepayment: {planned_annual_prepayment(config):,.2f}",
            f"- Prepayment timing: {timing}",
            f"- Prepayment mode: {mode}",
            "",
            "Comparison results:",
            f"- Interest saved: {summary.interest_saved:,.2f}",
            f"- Tenure reduced by: {saved_years} years and {saved_months} months",
            f"- New tenure: {new_years} years and {new_months} months",
            "",
            "Please provide:",
            "1. A brief executive summary of the impact.",
            "2. Strategic advice: is this prepayment amount optimal?",
            "3. Alternative suggestions (e.g. increasing the installment vs. lump sums).",
            "",
            "Format the response in clean Markdown.",
        ]
    )


def get_loan_advice(
    summary: LoanSummary,
    config: LoanConfig,
    client: Optional[OpenAI] = None,
    model: Optional[str] = None,
) -> str:
    """Return advice text for the plan, or ``ADVICE_FAILURE_MESSAGE``."""
    prompt = build_advice_prompt(summary, config)
    model = model or os.environ.get("LOAN_PREPAY_ADVICE_MODEL", DEFAULT_ADVICE_MODEL)
    try:
        if client is None:
            client = OpenAI()
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
        )
        text = response.choices[0].message.content
    except Exception:
        logger.exception("Advice generation failed")
        return ADVICE_FAILURE_MESSAGE
    return text or ADVICE_FAILURE_MESSAGE
