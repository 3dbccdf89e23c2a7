"""Persistence layer for saved prepayment scenarios.

The planner itself has no notion of persistence: it takes and returns plain
configuration values. This module stores those values per user so the web
app can restore a user's scenarios later. It defaults to SQLite for local
development, but accepts any SQLAlchemy-compatible URL (e.g.
PostgreSQL/MySQL).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


class ScenarioModel(Base):
    __tablename__ = "prepayment_scenarios"

    id = Column(String(64), primary_key=True)
    user_token = Column(String(64), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    config_json = Column(Text, nullable=False)
    summary_json = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ScenarioStore:
    """Database-backed scenario store keyed by user token and scenario id."""

    def __init__(self, url: str, *, max_per_user: int = 10) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._max_per_user = max_per_user

    def list_scenarios(self, user_token: Optional[str]) -> List[Dict[str, Any]]:
        if not user_token:
            return []
        with self._session_factory() as session:
            rows: Iterable[ScenarioModel] = session.execute(
                select(ScenarioModel)
                .where(ScenarioModel.user_token == user_token)
                .order_by(ScenarioModel.created_at.asc())
            ).scalars()
            return [self._to_dict(row) for row in rows]

    def get_scenario(self, user_token: Optional[str], scenario_id: str) -> Optional[Dict[str, Any]]:
        if not user_token:
            return None
        with self._session_factory() as session:
            row = session.get(ScenarioModel, scenario_id)
            if row is None or row.user_token != user_token:
                return None
            return self._to_dict(row)

    def add_scenario(
        self, user_token: Optional[str], scenario_id: str, name: str, config: dict, summary: dict
    ) -> None:
        if not user_token:
            return
        payload = ScenarioModel(
            id=scenario_id,
            user_token=user_token,
            name=name,
            config_json=json.dumps(config),
            summary_json=json.dumps(summary),
        )
        with self._session_factory() as session:
            session.add(payload)
            session.commit()
        logger.info("Saved scenario %s for user %s", scenario_id, user_token)
        self._trim_user(user_token)

    def remove_scenario(self, user_token: Optional[str], scenario_id: str) -> bool:
        if not user_token:
            return False
        with self._session_factory() as session:
            row = session.get(ScenarioModel, scenario_id)
            if row and row.user_token == user_token:
                session.delete(row)
                session.commit()
                return True
        return False

    def clear_scenarios(self, user_token: Optional[str]) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            session.execute(
                ScenarioModel.__table__.delete().where(ScenarioModel.user_token == user_token)
            )
            session.commit()

    def _trim_user(self, user_token: str) -> None:
        if not self._max_per_user or self._max_per_user < 0:
            return
        with self._session_factory() as session:
            rows = session.execute(
                select(ScenarioModel)
                .where(ScenarioModel.user_token == user_token)
                .order_by(ScenarioModel.created_at.desc())
            ).scalars().all()
            if len(rows) <= self._max_per_user:
                return
            for row in rows[self._max_per_user :]:
                session.delete(row)
            session.commit()
            logger.info("Trimmed %d old scenarios for user %s", len(rows) - self._max_per_user, user_token)

    @staticmethod
    def _to_dict(row: ScenarioModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "name": row.name,
            "config": json.loads(row.config_json),
            "summary": json.loads(row.summary_json),
            "created_at": row.created_at.isoformat(),
        }


def create_store_from_env(url: Optional[str]) -> ScenarioStore:
    return ScenarioStore(url or "sqlite:///scenario_data.sqlite3")
