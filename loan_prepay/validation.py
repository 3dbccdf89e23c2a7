"""Advisory checks for a loan configuration.

Validation never blocks a calculation: the engine terminates on any input.
The warnings returned here are meant to be shown to the user next to the
results.
"""

from __future__ import annotations

import logging
from decimal import ROUND_CEILING, Decimal
from typing import List

from .data_models import LoanConfig
from .engine import monthly_rate

logger = logging.getLogger(__name__)

MAX_REALISTIC_RATE = Decimal("50")
MAX_TENURE_YEARS = Decimal("40")


def minimum_custom_installment(config: LoanConfig) -> Decimal:
    """Return the first month's interest-only charge.

    A custom installment at or below this amount never reduces principal.
    """
    return config.principal * monthly_rate(config.rate)


def validate_inputs(config: LoanConfig) -> List[str]:
    """Return human-readable warnings for ``config``; an empty list means valid."""
    errors: List[str] = []
    if config.principal <= 0:
        errors.append("Loan amount must be positive.")
    if config.rate < 0:
        errors.append("Interest rate cannot be negative.")
    if config.rate > MAX_REALISTIC_RATE:
        errors.append("Interest rate seems unrealistically high (>50%).")
    if config.tenure_years <= 0:
        errors.append("Tenure must be greater than zero.")
    if config.tenure_years > MAX_TENURE_YEARS:
        errors.append("Tenure exceeds 40 years.")
    if config.lump_sum_amount < 0:
        errors.append("Lump sum amount cannot be negative.")
    if config.lump_sum_frequency < 0:
        errors.append("Lump sum frequency cannot be negative.")
    if config.monthly_extra_payment < 0:
        errors.append("Monthly extra payment cannot be negative.")
    if any(amount < 0 for amount in config.yearly_prepayments):
        errors.append("Yearly prepayments cannot be negative.")
    if config.custom_installment < 0:
        errors.append("Custom installment cannot be negative.")
    if config.custom_installment > 0:
        minimum = minimum_custom_installment(config)
        if config.custom_installment <= minimum:
            shown = minimum.to_integral_value(rounding=ROUND_CEILING)
            errors.append(
                f"Custom installment must exceed monthly interest ({shown:,}) to reduce principal."
            )

    for message in errors:
        logger.debug("Validation warning: %s", message)
    return errors
