"""
Tests for the SQLAlchemy-backed scenario store.
"""

import pytest

from loan_prepay_web.scenario_store import ScenarioStore


@pytest.fixture
def store():
    return ScenarioStore("sqlite://", max_per_user=3)


class TestScenarioStore:
    def test_add_and_list(self, store):
        store.add_scenario("user-a", "s1", "Monthly extra", {"principal": "2500000"}, {"interest_saved": 1.5})
        scenarios = store.list_scenarios("user-a")

        assert len(scenarios) == 1
        assert scenarios[0]["id"] == "s1"
        assert scenarios[0]["config"] == {"principal": "2500000"}
        assert scenarios[0]["summary"] == {"interest_saved": 1.5}

    def test_users_are_isolated(self, store):
        store.add_scenario("user-a", "s1", "A", {}, {})
        assert store.list_scenarios("user-b") == []
        assert store.get_scenario("user-b", "s1") is None
        assert store.remove_scenario("user-b", "s1") is False
        assert store.get_scenario("user-a", "s1")["name"] == "A"

    def test_remove_and_clear(self, store):
        store.add_scenario("user-a", "s1", "A", {}, {})
        store.add_scenario("user-a", "s2", "B", {}, {})

        assert store.remove_scenario("user-a", "s1") is True
        assert [s["id"] for s in store.list_scenarios("user-a")] == ["s2"]
        store.clear_scenarios("user-a")
        assert store.list_scenarios("user-a") == []

    def test_trims_to_limit(self, store):
        for index in range(5):
            store.add_scenario("user-a", f"s{index}", f"Plan {index}", {}, {})
        assert len(store.list_scenarios("user-a")) == 3

    def test_missing_token_is_ignored(self, store):
        store.add_scenario(None, "s1", "A", {}, {})
        assert store.list_scenarios(None) == []
        assert store.list_scenarios("") == []
