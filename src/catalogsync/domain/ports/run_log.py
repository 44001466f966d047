"""Ports for the operational run log and the cross-run advisory lock."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from catalogsync.domain.model import RunRecord


@runtime_checkable
class RunLogStore(Protocol):
    def append(self, record: RunRecord) -> None: ...

    def recent(self, *, limit: int = 20) -> list[RunRecord]: ...


@runtime_checkable
class RunLock(Protocol):
    """Named mutual exclusion across processes.

    ``hold`` raises ``ReconciliationLockedError`` when another holder owns the name and
    releases on every exit path of the ``with`` block. ``renew`` extends a held lease
    and raises ``ReconciliationLockedError`` when it has been lost.
    """

    def hold(self, name: str) -> AbstractContextManager[None]: ...

    def renew(self, name: str) -> None: ...


__all__ = ["RunLock", "RunLogStore"]
