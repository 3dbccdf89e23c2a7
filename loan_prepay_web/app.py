"""JSON web API for the prepayment planner.

Every request carries the full loan configuration; the server recomputes
schedules on each call and keeps no calculation state. Saved scenarios live
in the ``ScenarioStore`` keyed by a per-session user token.

Run locally with ``flask --app loan_prepay_web.app run``.
"""

import logging
import os
from uuid import uuid4

import click
from flask import Flask, Response, jsonify, request, session

from loan_prepay.advice import get_loan_advice
from loan_prepay.analytics import (
    compare_scenarios,
    get_cumulative_interest_data,
    get_prepayment_insight,
    get_summary,
    get_yearly_balance_data,
    normalize_yearly_prepayments,
    summarize_schedules,
)
from loan_prepay.engine import generate_schedule, simulated_years
from loan_prepay.formatter import schedule_to_csv, serialize_cumulative, serialize_schedule
from loan_prepay.main import build_config_from_options
from loan_prepay.utils import decimal_from_str
from loan_prepay.validation import validate_inputs
from loan_prepay_web.scenario_store import create_store_from_env

logger = logging.getLogger(__name__)


class PayloadError(ValueError):
    """Raised when a request body cannot be turned into a loan configuration."""


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _text(payload: dict, key: str):
    value = payload.get(key)
    if value is None or value == "":
        return None
    return str(value)


def _json_object() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _whole_number(payload: dict, key: str) -> int:
    value = _text(payload, key)
    if value is None:
        return 0
    try:
        number = decimal_from_str(value)
    except ValueError:
        raise PayloadError(f"Invalid {key.replace('_', ' ')}: {value}")
    if number != number.to_integral_value():
        raise PayloadError(f"{key} must be a whole number; got {value}")
    return int(number)


def _payload_to_config(payload):
    if not isinstance(payload, dict):
        raise PayloadError("Request body must be a JSON object")
    for required in ("principal", "rate", "tenure_years"):
        if _text(payload, required) is None:
            raise PayloadError(f"Missing required field {required}")
    try:
        tenure = decimal_from_str(_text(payload, "tenure_years"))
    except ValueError as exc:
        raise PayloadError(str(exc))

    yearly = payload.get("yearly_prepayments") or []
    if not isinstance(yearly, list):
        raise PayloadError("yearly_prepayments must be a list with one amount per year")
    # entries past the tenure are dropped, as when the tenure is shortened
    yearly = normalize_yearly_prepayments(yearly, simulated_years(tenure))
    yearly_tokens = tuple(f"{year}:{amount}" for year, amount in enumerate(yearly, start=1) if amount)

    try:
        return build_config_from_options(
            principal=_text(payload, "principal"),
            rate=_text(payload, "rate"),
            tenure=_text(payload, "tenure_years"),
            custom_installment=_text(payload, "custom_installment"),
            monthly_extra=_text(payload, "monthly_extra_payment"),
            lump_sum=_text(payload, "lump_sum_amount"),
            lump_sum_frequency=_whole_number(payload, "lump_sum_frequency"),
            yearly_prepayment=yearly_tokens,
            timing=_text(payload, "prepayment_timing") or "end",
            mode=_text(payload, "prepayment_mode") or "reduce-tenure",
        )
    except click.BadParameter as exc:
        raise PayloadError(exc.message)


def _analysis(config, yearly_granularity: bool) -> dict:
    standard = generate_schedule(config, False)
    prepaid = generate_schedule(config, True)
    summary = summarize_schedules(config, standard, prepaid)
    return {
        "warnings": validate_inputs(config),
        "summary": summary.to_dict(),
        "insight": get_prepayment_insight(summary).to_dict(),
        "standard_schedule": serialize_schedule(standard),
        "prepaid_schedule": serialize_schedule(prepaid),
        "cumulative_interest": serialize_cumulative(
            get_cumulative_interest_data(standard, prepaid, yearly_granularity)
        ),
        "yearly_balances": [
            {
                "year": p.year,
                "label": p.label,
                "standard": p.standard_balance,
                "prepaid": p.prepaid_balances[0],
            }
            for p in get_yearly_balance_data(standard, [prepaid], config.tenure_years)
        ],
    }


def create_app(test_config=None) -> Flask:
    app = Flask(__name__)
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("FLASK_SECRET_KEY", "dev-secret-key"),
        SCENARIO_DATABASE_URL=os.environ.get("SCENARIO_DATABASE_URL"),
        ADVICE_CLIENT=None,
    )
    if test_config:
        app.config.update(test_config)
    store = create_store_from_env(app.config["SCENARIO_DATABASE_URL"])

    @app.errorhandler(PayloadError)
    def handle_payload_error(exc):
        logger.info("Rejected request to %s: %s", request.path, exc)
        return jsonify({"error": str(exc)}), 400

    @app.post("/api/analysis")
    def analysis():
        config = _payload_to_config(request.get_json(silent=True))
        yearly = request.args.get("granularity", "yearly") != "monthly"
        return jsonify(_analysis(config, yearly))

    @app.post("/api/schedule.csv")
    def schedule_csv():
        config = _payload_to_config(request.get_json(silent=True))
        standard = request.args.get("standard") == "1"
        body = schedule_to_csv(generate_schedule(config, not standard))
        name = "standard-schedule.csv" if standard else "prepaid-schedule.csv"
        return Response(
            body,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={name}"},
        )

    @app.post("/api/compare")
    def compare():
        payload = _json_object()
        config_a = _payload_to_config(payload.get("scenario_a"))
        config_b = _payload_to_config(payload.get("scenario_b"))
        summary_a = get_summary(config_a)
        summary_b = get_summary(config_b)
        winners = compare_scenarios(
            summary_a,
            summary_b,
            generate_schedule(config_a, True),
            generate_schedule(config_b, True),
        )
        return jsonify(
            {
                "scenario_a": summary_a.to_dict(),
                "scenario_b": summary_b.to_dict(),
                "winners": {
                    "starting_installment": winners.starting_installment,
                    "new_tenure_months": winners.new_tenure_months,
                    "interest_saved": winners.interest_saved,
                    "total_amount_with_prepayment": winners.total_amount_with_prepayment,
                    "total_interest_with_prepayment": winners.total_interest_with_prepayment,
                },
            }
        )

    @app.post("/api/advice")
    def advice():
        config = _payload_to_config(request.get_json(silent=True))
        text = get_loan_advice(get_summary(config), config, client=app.config["ADVICE_CLIENT"])
        return jsonify({"advice": text})

    @app.get("/api/scenarios")
    def list_scenarios():
        return jsonify(store.list_scenarios(_ensure_user_token()))

    @app.post("/api/scenarios")
    def save_scenario():
        payload = _json_object()
        config = _payload_to_config(payload.get("config"))
        scenario_id = uuid4().hex
        name = str(payload.get("name") or "").strip() or "Scenario"
        store.add_scenario(
            _ensure_user_token(), scenario_id, name, config.to_dict(), get_summary(config).to_dict()
        )
        return jsonify({"id": scenario_id, "name": name}), 201

    @app.get("/api/scenarios/<scenario_id>")
    def get_scenario(scenario_id):
        scenario = store.get_scenario(_ensure_user_token(), scenario_id)
        if scenario is None:
            return jsonify({"error": "Scenario not found"}), 404
        return jsonify(scenario)

    @app.delete("/api/scenarios/<scenario_id>")
    def remove_scenario(scenario_id):
        if not store.remove_scenario(_ensure_user_token(), scenario_id):
            return jsonify({"error": "Scenario not found"}), 404
        return "", 204

    @app.delete("/api/scenarios")
    def clear_scenarios():
        store.clear_scenarios(_ensure_user_token())
        return "", 204

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting prepayment planner API...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
