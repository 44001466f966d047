"""Lease-based advisory lock stored in the run database."""

from __future__ import annotations

import os
import socket
import uuid
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError

from catalogsync.config.reconcile import DEFAULT_LOCK_TTL_SECONDS
from catalogsync.domain.errors import ReconciliationLockedError

from .mappings import run_lock_table

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Connection, Engine

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def default_holder_id() -> str:
    return f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}"


class SqlAlchemyRunLock:
    """Named lease held in the ``run_lock`` table.

    A lease older than ``ttl_seconds`` is considered abandoned (its holder crashed)
    and may be taken over. Takeover is a compare-and-swap on the previous holder so
    two contenders cannot both win. Long runs call ``renew`` so a live holder never
    looks abandoned.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        ttl_seconds: float = DEFAULT_LOCK_TTL_SECONDS,
        holder_id: str | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.engine = engine
        self.ttl = timedelta(seconds=ttl_seconds)
        self.holder_id = holder_id or default_holder_id()
        self.clock = clock

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        self.acquire(name)
        try:
            yield
        finally:
            self.release(name)

    def acquire(self, name: str) -> None:
        now = self.clock()
        expires_at = now + self.ttl
        with self.engine.begin() as connection:
            current = connection.execute(
                select(run_lock_table.c.holder, run_lock_table.c.expires_at).where(
                    run_lock_table.c.name == name
                )
            ).first()
            if current is None:
                self._insert(connection, name, now=now, expires_at=expires_at)
            elif current.expires_at <= now:
                self._take_over(
                    connection, name, previous=current.holder, now=now, expires_at=expires_at
                )
            else:
                raise ReconciliationLockedError(name, holder=current.holder)
        log.info("Acquired lock %r as %s until %s", name, self.holder_id, expires_at)

    def release(self, name: str) -> None:
        with self.engine.begin() as connection:
            result = connection.execute(
                delete(run_lock_table)
                .where(run_lock_table.c.name == name)
                .where(run_lock_table.c.holder == self.holder_id)
            )
        if result.rowcount == 0:
            log.warning("Lock %r was no longer held by %s at release", name, self.holder_id)
        else:
            log.info("Released lock %r", name)

    def renew(self, name: str) -> None:
        """Extend the lease held by this holder; raise if it was lost."""

        expires_at = self.clock() + self.ttl
        with self.engine.begin() as connection:
            result = connection.execute(
                update(run_lock_table)
                .where(run_lock_table.c.name == name)
                .where(run_lock_table.c.holder == self.holder_id)
                .values(expires_at=expires_at)
            )
        if result.rowcount == 0:
            raise ReconciliationLockedError(name)
        log.debug("Renewed lock %r until %s", name, expires_at)

    def _insert(
        self,
        connection: Connection,
        name: str,
        *,
        now: datetime,
        expires_at: datetime,
    ) -> None:
        try:
            connection.execute(
                insert(run_lock_table).values(
                    name=name,
                    holder=self.holder_id,
                    acquired_at=now,
                    expires_at=expires_at,
                )
            )
        except IntegrityError as exc:
            raise ReconciliationLockedError(name) from exc

    def _take_over(
        self,
        connection: Connection,
        name: str,
        *,
        previous: str,
        now: datetime,
        expires_at: datetime,
    ) -> None:
        result = connection.execute(
            update(run_lock_table)
            .where(run_lock_table.c.name == name)
            .where(run_lock_table.c.holder == previous)
            .values(holder=self.holder_id, acquired_at=now, expires_at=expires_at)
        )
        if result.rowcount == 0:
            raise ReconciliationLockedError(name)
        log.warning("Took over expired lock %r from %s", name, previous)
