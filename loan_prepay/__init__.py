"""Amortization schedules and prepayment analytics for fixed-rate loans."""
