from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from catalogsync.adapters.sqlalchemy import create_all_tables, shutdown, start_mappers, startup
from catalogsync.domain.images import ImageResolver
from catalogsync.domain.reconciliation import CatalogReconciler
from catalogsync.domain.writer import CatalogWriter
from tests.support.catalog import (
    FakeGenerator,
    FakeLedger,
    FakePlatform,
    InMemoryRunLock,
    InMemoryRunLog,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:")
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session_factory(sqlite_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=sqlite_engine, expire_on_commit=False)


@pytest.fixture
def started_database(sqlite_engine: Engine) -> Iterator[Engine]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield sqlite_engine
    finally:
        shutdown()


@pytest.fixture
def ticking_clock() -> Callable[[], datetime]:
    moments = iter(datetime(2025, 1, 1, tzinfo=UTC) + timedelta(seconds=i) for i in range(10_000))

    def clock() -> datetime:
        return next(moments)

    return clock


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def run_log() -> InMemoryRunLog:
    return InMemoryRunLog()


@pytest.fixture
def run_lock() -> InMemoryRunLock:
    return InMemoryRunLock()


@pytest.fixture
def reconciler(
    ledger: FakeLedger,
    platform: FakePlatform,
    generator: FakeGenerator,
    run_log: InMemoryRunLog,
    run_lock: InMemoryRunLock,
    ticking_clock: Callable[[], datetime],
) -> CatalogReconciler:
    return CatalogReconciler(
        ledger=ledger,
        platform=platform,
        writer=CatalogWriter(platform),
        images=ImageResolver(platform=platform, generator=generator, style_prompt="Flat art:"),
        run_log=run_log,
        lock=run_lock,
        clock=ticking_clock,
    )
