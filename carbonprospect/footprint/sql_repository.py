# -*- coding: utf-8 -*-
"""
SQL Scenario Repository

SQLAlchemy-backed ScenarioRepository storing one row per scenario in the
``footprint_scenarios`` table. The payload merge runs inside a single
transaction with the row locked for update where the backend supports it.

Example:
    >>> repo = SqlScenarioRepository.from_url("sqlite:///scenarios.db")
    >>> store = ScenarioStore(repo)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator, List, Optional

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from carbonprospect.footprint.models import ScenarioUpdate
from carbonprospect.footprint.payload import merge_payload
from carbonprospect.footprint.scenario_store import ScenarioRecord, ScenarioRepository

logger = logging.getLogger(__name__)

Base = declarative_base()


class ScenarioRow(Base):
    """Stored scenario."""

    __tablename__ = "footprint_scenarios"

    scenario_id = Column(String(36), primary_key=True)
    footprint_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    payload = Column(Text, nullable=False)
    schema_version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    revision = Column(Integer, nullable=False, index=True)
    sequence = Column(Integer, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<ScenarioRow(id={self.scenario_id}, footprint={self.footprint_id})>"


def _aware(value: datetime) -> datetime:
    # SQLite drops the offset on round-trip.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(row: ScenarioRow) -> ScenarioRecord:
    return ScenarioRecord(
        scenario_id=row.scenario_id,
        footprint_id=row.footprint_id,
        name=row.name,
        payload=row.payload,
        schema_version=row.schema_version,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
        revision=row.revision,
        sequence=row.sequence,
    )


def create_repository_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine, sharing one connection for in-memory SQLite."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}, "echo": echo}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(
        database_url, pool_size=5, max_overflow=10, pool_recycle=3600, echo=echo,
    )


class SqlScenarioRepository(ScenarioRepository):
    """ScenarioRepository backed by a relational database."""

    def __init__(self, engine: Engine, create_tables: bool = True) -> None:
        self.engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False,
        )
        if create_tables:
            Base.metadata.create_all(bind=engine)
        logger.info("SqlScenarioRepository initialized on %s", engine.url.render_as_string())

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> SqlScenarioRepository:
        return cls(create_repository_engine(database_url, echo=echo))

    @contextmanager
    def _session(self) -> Generator[Session, None, None]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @staticmethod
    def _next(session: Session, column) -> int:
        return (session.execute(select(func.max(column))).scalar() or 0) + 1

    def insert(self, record: ScenarioRecord) -> ScenarioRecord:
        with self._session() as session:
            row = ScenarioRow(
                scenario_id=record.scenario_id,
                footprint_id=record.footprint_id,
                name=record.name,
                payload=record.payload,
                schema_version=record.schema_version,
                created_at=record.created_at,
                updated_at=record.updated_at,
                revision=self._next(session, ScenarioRow.revision),
                sequence=self._next(session, ScenarioRow.sequence),
            )
            session.add(row)
            session.flush()
            return _to_record(row)

    def get(self, scenario_id: str) -> Optional[ScenarioRecord]:
        with self._session() as session:
            row = session.get(ScenarioRow, scenario_id)
            return _to_record(row) if row is not None else None

    def merge(
        self,
        scenario_id: str,
        update: ScenarioUpdate,
        updated_at: datetime,
    ) -> Optional[ScenarioRecord]:
        with self._session() as session:
            row = session.execute(
                select(ScenarioRow)
                .where(ScenarioRow.scenario_id == scenario_id)
                .with_for_update()
            ).scalar_one_or_none()
            if row is None:
                return None
            row.payload, row.schema_version = merge_payload(
                row.payload, row.schema_version, update,
            )
            row.updated_at = updated_at
            row.revision = self._next(session, ScenarioRow.revision)
            session.flush()
            return _to_record(row)

    def list_for_footprint(self, footprint_id: str) -> List[ScenarioRecord]:
        with self._session() as session:
            rows = session.execute(
                select(ScenarioRow)
                .where(ScenarioRow.footprint_id == footprint_id)
                .order_by(ScenarioRow.sequence)
            ).scalars().all()
            return [_to_record(row) for row in rows]

    def delete(self, scenario_id: str) -> bool:
        with self._session() as session:
            row = session.get(ScenarioRow, scenario_id)
            if row is None:
                return False
            session.delete(row)
            return True

    def count(self, footprint_id: Optional[str] = None) -> int:
        with self._session() as session:
            query = select(func.count()).select_from(ScenarioRow)
            if footprint_id is not None:
                query = query.where(ScenarioRow.footprint_id == footprint_id)
            return session.execute(query).scalar_one()


__all__ = ["SqlScenarioRepository", "ScenarioRow", "create_repository_engine", "Base"]
