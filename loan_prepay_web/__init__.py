"""Flask JSON API and scenario persistence for the prepayment planner."""
