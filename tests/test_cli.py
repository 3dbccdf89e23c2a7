"""
Tests for the click command-line interface.
"""

from decimal import Decimal

import click
import pytest
from click.testing import CliRunner

from loan_prepay.data_models import MODE_REDUCE_INSTALLMENT, TIMING_START
from loan_prepay.main import build_config_from_options, cli, parse_scenario_opts

BASE_ARGS = ["-p", "25l", "-r", "7.5", "-t", "15"]


@pytest.fixture
def runner():
    return CliRunner()


class TestBuildConfig:
    def test_full_options(self):
        config = build_config_from_options(
            principal="25l",
            rate="7.5",
            tenure="15",
            custom_installment="30k",
            monthly_extra="5000",
            lump_sum="1l",
            lump_sum_frequency=12,
            yearly_prepayment=("2:50k",),
            timing="START",
            mode="reduce-installment",
        )
        assert config.principal == Decimal("2500000")
        assert config.custom_installment == Decimal("30000")
        assert config.lump_sum_amount == Decimal("100000")
        assert len(config.yearly_prepayments) == 15
        assert config.yearly_prepayments[1] == Decimal("50000")
        assert config.prepayment_timing == TIMING_START
        assert config.prepayment_mode == MODE_REDUCE_INSTALLMENT

    def test_bad_values_raise_bad_parameter(self):
        with pytest.raises(click.BadParameter):
            build_config_from_options(principal="lots", rate="7.5", tenure="15")
        with pytest.raises(click.BadParameter):
            build_config_from_options(principal="1000", rate="7.5", tenure="15", timing="later")
        with pytest.raises(click.BadParameter):
            build_config_from_options(principal="1000", rate="7.5", tenure="1", yearly_prepayment=("3:10",))

    def test_out_of_range_values_are_accepted(self):
        config = build_config_from_options(principal="-1000", rate="75", tenure="60")
        assert config.principal == Decimal("-1000")

    def test_parse_scenario_opts(self):
        params = parse_scenario_opts(
            "-p 25l -r 7.5 -t 15 --lump-sum 1l --lump-sum-frequency 6 "
            "--yearly-prepayment 1:10k --yearly-prepayment 2:20k --mode reduce-installment"
        )
        assert params["lump_sum_frequency"] == 6
        assert params["yearly_prepayment"] == ("1:10k", "2:20k")
        assert params["mode"] == "reduce-installment"

    def test_parse_scenario_opts_errors(self):
        with pytest.raises(click.BadParameter):
            parse_scenario_opts("-p 25l -r 7.5")
        with pytest.raises(click.BadParameter):
            parse_scenario_opts("-p 25l -r 7.5 -t 15 --holiday 2025-01")
        with pytest.raises(click.BadParameter):
            parse_scenario_opts("-p 25l -r 7.5 -t")


class TestCommands:
    def test_summary(self, runner):
        result = runner.invoke(cli, ["summary", *BASE_ARGS, "--monthly-extra", "50000", "--cumulative"])
        assert result.exit_code == 0, result.output
        assert "Summary" in result.output
        assert "Return on outlay" in result.output
        assert "Yr 1" in result.output

    def test_summary_prints_warnings_but_runs(self, runner):
        result = runner.invoke(cli, ["summary", "-p", "25l", "-r", "7.5", "-t", "15", "--custom-installment", "15625"])
        assert result.exit_code == 0, result.output
        assert "Custom installment must exceed monthly interest" in result.output

    def test_schedule_truncates_output(self, runner):
        result = runner.invoke(cli, ["schedule", *BASE_ARGS])
        assert result.exit_code == 0, result.output
        assert "Schedule has 180 rows; showing first 120 rows." in result.output

    def test_schedule_csv_export(self, runner, tmp_path):
        path = tmp_path / "plan.csv"
        result = runner.invoke(cli, ["schedule", *BASE_ARGS, "--monthly-extra", "50000", "--output", str(path)])
        assert result.exit_code == 0, result.output
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("Period,Year,Opening Balance")
        assert 1 < len(lines) < 181

    def test_schedule_rejects_unknown_format(self, runner, tmp_path):
        result = runner.invoke(cli, ["schedule", *BASE_ARGS, "--output", str(tmp_path / "plan.xlsx")])
        assert result.exit_code != 0

    def test_summary_json_export(self, runner, tmp_path):
        path = tmp_path / "summary.json"
        result = runner.invoke(cli, ["summary", *BASE_ARGS, "--output", str(path)])
        assert result.exit_code == 0, result.output
        assert '"standard_tenure_months": 180' in path.read_text(encoding="utf-8")

    def test_invalid_choice(self, runner):
        result = runner.invoke(cli, ["summary", *BASE_ARGS, "--timing", "middle"])
        assert result.exit_code == 2

    def test_invalid_amount(self, runner):
        result = runner.invoke(cli, ["summary", "-p", "lots", "-r", "7.5", "-t", "15"])
        assert result.exit_code == 2
        assert "Invalid amount" in result.output

    def test_compare(self, runner):
        result = runner.invoke(
            cli,
            [
                "compare",
                "--scenario1",
                "-p 25l -r 7.5 -t 15 --monthly-extra 50000",
                "--scenario2",
                "-p 25l -r 7.5 -t 15 --lump-sum 1l --lump-sum-frequency 12 --mode reduce-installment",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Comparison" in result.output
        assert "interest_saved" in result.output
