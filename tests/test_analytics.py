"""
Tests for summary, insight and comparison analytics.
"""

from decimal import Decimal

import pytest

from loan_prepay.analytics import (
    compare_scenarios,
    get_cumulative_interest_data,
    get_prepayment_insight,
    get_summary,
    get_yearly_balance_data,
    normalize_yearly_prepayments,
    pick_winner,
    summarize_schedules,
)
from loan_prepay.data_models import MODE_REDUCE_INSTALLMENT, LoanSummary
from loan_prepay.engine import MAX_PERIODS, generate_schedule


def _summary(saved, outlay, tenure_saved):
    return LoanSummary(
        installment=Decimal("1000"),
        total_interest_standard=Decimal("5000"),
        total_interest_with_prepayment=Decimal("5000") - Decimal(saved),
        interest_saved=Decimal(saved),
        standard_tenure_months=120,
        new_tenure_months=120 - tenure_saved,
        tenure_saved_months=tenure_saved,
        total_amount_standard=Decimal("125000"),
        total_amount_with_prepayment=Decimal("125000"),
        total_prepayment_outlay=Decimal(outlay),
    )


class TestSummary:
    """Test the standard vs. prepaid summary."""

    def test_without_prepayments(self, base_config):
        summary = get_summary(base_config)

        assert summary.standard_tenure_months == 180
        assert summary.new_tenure_months == 180
        assert summary.tenure_saved_months == 0
        assert summary.interest_saved == 0
        assert summary.total_prepayment_outlay == 0
        assert summary.total_interest_standard == summary.total_interest_with_prepayment
        assert Decimal("23100") < summary.installment < Decimal("23250")

    def test_with_monthly_extra(self, make_config):
        config = make_config(monthly_extra_payment=Decimal("50000"))
        summary = get_summary(config)
        prepaid = generate_schedule(config, True)

        assert summary.new_tenure_months == len(prepaid) < 180
        assert summary.tenure_saved_months == 180 - len(prepaid)
        assert summary.total_interest_with_prepayment < summary.total_interest_standard
        assert summary.interest_saved == (
            summary.total_interest_standard - summary.total_interest_with_prepayment
        )
        assert summary.total_prepayment_outlay == sum(r.extra_payment for r in prepaid)
        assert summary.total_amount_with_prepayment == sum(r.total_paid for r in prepaid)

    def test_total_paid_covers_principal_and_interest(self, base_config):
        summary = get_summary(base_config)
        expected = base_config.principal + summary.total_interest_standard
        assert abs(summary.total_amount_standard - expected) < Decimal("0.01")

    def test_custom_installment_is_reported(self, make_config):
        summary = get_summary(make_config(custom_installment=Decimal("30000")))
        assert summary.installment == Decimal("30000")

    def test_interest_saved_is_floored(self, make_config):
        # an installment below the interest charge costs more than the standard plan
        summary = get_summary(make_config(custom_installment=Decimal("15000")))
        assert summary.total_interest_with_prepayment > summary.total_interest_standard
        assert summary.interest_saved == 0
        assert summary.tenure_saved_months == 0

    def test_zero_rate_has_no_interest(self, make_config):
        config = make_config(principal=Decimal("120000"), rate=Decimal("0"), tenure_years=Decimal("10"))
        summary = get_summary(config)
        assert summary.total_interest_standard == 0
        assert summary.installment == Decimal("1000")

    def test_reuses_generated_schedules(self, make_config):
        config = make_config(lump_sum_amount=Decimal("100000"), lump_sum_frequency=12)
        summary = summarize_schedules(
            config, generate_schedule(config, False), generate_schedule(config, True)
        )
        assert summary == get_summary(config)

    def test_huge_tenure_does_not_raise(self, make_config):
        summary = get_summary(make_config(tenure_years=Decimal("1000000000")))
        assert summary.installment == Decimal("15625")
        assert summary.standard_tenure_months == MAX_PERIODS


class TestPrepaymentInsight:
    """Test return on prepayment figures."""

    def test_no_outlay(self):
        insight = get_prepayment_insight(_summary(0, 0, 0))
        assert insight.roi == 0
        assert insight.annualised_return == 0

    def test_roi(self):
        insight = get_prepayment_insight(_summary(50, 100, 24))
        assert insight.roi == Decimal("50")
        assert float(insight.annualised_return) == pytest.approx(22.4745, abs=1e-3)

    def test_short_saving_uses_one_year(self):
        insight = get_prepayment_insight(_summary(50, 100, 6))
        assert float(insight.annualised_return) == pytest.approx(50.0)

    def test_no_tenure_saved(self):
        insight = get_prepayment_insight(_summary(50, 100, 0))
        assert insight.roi == Decimal("50")
        assert insight.annualised_return == 0

    def test_real_plan(self, make_config):
        summary = get_summary(make_config(monthly_extra_payment=Decimal("50000")))
        insight = get_prepayment_insight(summary)
        assert insight.roi > 0
        assert insight.annualised_return > 0
        assert insight.tenure_saved_months == summary.tenure_saved_months


class TestCumulativeInterest:
    """Test cumulative interest curves."""

    def test_monthly_points(self, make_config):
        config = make_config(monthly_extra_payment=Decimal("50000"))
        standard = generate_schedule(config, False)
        prepaid = generate_schedule(config, True)
        points = get_cumulative_interest_data(standard, prepaid, yearly_granularity=False)

        assert len(points) == len(standard)
        assert [p.period for p in points] == list(range(1, len(standard) + 1))
        assert points[-1].standard_cumulative_interest == round(
            sum(r.interest_payment for r in standard)
        )
        assert points[-1].prepaid_cumulative_interest == round(
            sum(r.interest_payment for r in prepaid)
        )
        # prepaid curve stays flat once that schedule has ended
        assert points[-1].prepaid_cumulative_interest == points[len(prepaid) - 1].prepaid_cumulative_interest

    def test_yearly_points(self, base_config):
        schedule = generate_schedule(base_config, False)
        points = get_cumulative_interest_data(schedule, schedule)

        assert [p.period for p in points] == list(range(12, 181, 12))
        assert points[0].label == "Yr 1"
        assert points[-1].year == 15

    def test_yearly_points_include_final_period(self, make_config):
        config = make_config(tenure_years=Decimal("1.25"))
        schedule = generate_schedule(config, False)
        points = get_cumulative_interest_data(schedule, [])

        assert [p.period for p in points] == [12, 15]
        assert points[-1].year == 2
        assert all(p.prepaid_cumulative_interest == 0 for p in points)

    def test_empty_schedules(self):
        assert get_cumulative_interest_data([], []) == []


class TestYearlyBalances:
    def test_balances_drop_to_zero_after_payoff(self, make_config):
        config = make_config(
            principal=Decimal("2400"),
            rate=Decimal("0"),
            tenure_years=Decimal("2"),
            monthly_extra_payment=Decimal("100"),
        )
        points = get_yearly_balance_data(
            generate_schedule(config, False), [generate_schedule(config, True)], config.tenure_years
        )

        assert [p.year for p in points] == [1, 2]
        assert points[0].standard_balance == 1200
        assert points[0].prepaid_balances == (0,)
        assert points[1].standard_balance == 0

    def test_years_stop_at_last_simulated_period(self, make_config):
        config = make_config(tenure_years=Decimal("100000000"))
        schedule = generate_schedule(config, False)
        points = get_yearly_balance_data(schedule, [schedule], config.tenure_years)

        assert len(points) == MAX_PERIODS // 12
        assert points[-1].standard_balance == 2500000


class TestScenarioComparison:
    def test_pick_winner(self):
        assert pick_winner(1, 1, True) == "tie"
        assert pick_winner(1, 2, True) == "A"
        assert pick_winner(1, 2, False) == "B"

    def test_compare_scenarios(self, make_config):
        config_a = make_config(monthly_extra_payment=Decimal("50000"))
        config_b = make_config(
            lump_sum_amount=Decimal("100000"),
            lump_sum_frequency=12,
            prepayment_mode=MODE_REDUCE_INSTALLMENT,
        )
        winners = compare_scenarios(
            get_summary(config_a),
            get_summary(config_b),
            generate_schedule(config_a, True),
            generate_schedule(config_b, True),
        )

        assert winners.new_tenure_months == "A"
        assert winners.interest_saved == "A"
        assert winners.starting_installment == "tie"


class TestNormalizeYearlyPrepayments:
    def test_pads_and_truncates(self):
        assert normalize_yearly_prepayments([Decimal("1")], 3) == [Decimal("1"), 0, 0]
        assert normalize_yearly_prepayments([Decimal("1"), Decimal("2"), Decimal("3")], 2) == [
            Decimal("1"),
            Decimal("2"),
        ]
        assert normalize_yearly_prepayments([Decimal("1")], 0) == []
