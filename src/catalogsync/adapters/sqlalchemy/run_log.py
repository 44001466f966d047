"""Run log persisted through SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from catalogsync.domain.model import RunRecord

from .mappings import run_record_table


class SqlAlchemyRunLogStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def append(self, record: RunRecord) -> None:
        with self.session_factory() as session, session.begin():
            session.add(record)

    def recent(self, *, limit: int = 20) -> list[RunRecord]:
        stmt = select(RunRecord).order_by(run_record_table.c.started_at.desc()).limit(limit)
        with self.session_factory() as session:
            return list(session.execute(stmt).scalars().all())


if TYPE_CHECKING:
    from catalogsync.domain.ports import RunLogStore

    _store_check: RunLogStore = SqlAlchemyRunLogStore(sessionmaker())
