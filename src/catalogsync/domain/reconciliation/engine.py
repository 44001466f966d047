"""Orchestrator for catalog reconciliation runs.

A run reads both sides, plans, and (unless dry) executes each plan item as an
independent unit of work. The whole run holds the catalog lock so two runs never
race on create-if-absent.
"""

from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.config.reconcile import DEFAULT_LOCK_NAME
from catalogsync.domain.model import Action, PriceSpec, ProductSpec, RunMode, RunRecord
from catalogsync.domain.normalize import name_key

from .audit import AuditReport, audit_catalog
from .plan import PlanItem, PlanSummary, build_plan, summarize
from .snapshot import read_catalog_snapshot

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from contextlib import AbstractContextManager

    from catalogsync.domain.images import ImageResolver
    from catalogsync.domain.ports import CommercePlatform, ProductLedger, RunLock, RunLogStore
    from catalogsync.domain.writer import CatalogWriter

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class PlanReport:
    items: tuple[PlanItem, ...]
    summary: PlanSummary


@dataclass(frozen=True, slots=True, kw_only=True)
class ItemResult:
    """Outcome of executing one plan item."""

    name: str
    ok: bool
    product_id: str | None = None
    price_id: str | None = None
    created: bool = False
    image_attached: bool = False
    error: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RunResult:
    dry_run: bool
    items: tuple[PlanItem, ...]
    summary: PlanSummary
    results: tuple[ItemResult, ...] = ()
    started_at: datetime = field(default_factory=_utcnow)
    finished_at: datetime | None = None

    @property
    def created(self) -> list[str]:
        return [r.product_id for r in self.results if r.ok and r.created and r.product_id]

    @property
    def updated(self) -> list[str]:
        return [r.product_id for r in self.results if r.ok and not r.created and r.product_id]

    @property
    def failed(self) -> list[ItemResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(slots=True, kw_only=True)
class CatalogReconciler:
    ledger: ProductLedger
    platform: CommercePlatform
    writer: CatalogWriter
    images: ImageResolver
    run_log: RunLogStore | None = None
    lock: RunLock | None = None
    lock_name: str = DEFAULT_LOCK_NAME
    clock: Callable[[], datetime] = _utcnow

    def plan(self) -> PlanReport:
        """Read both sides and compute the plan without touching either."""

        started_at = self.clock()
        report = self._compute_plan()
        self._record(
            RunRecord(
                mode=RunMode.PLAN,
                dry_run=True,
                item_count=len(report.items),
                started_at=started_at,
                finished_at=self.clock(),
            )
        )
        return report

    def run(self, *, dry_run: bool = True, names: Iterable[str] | None = None) -> RunResult:
        """Plan afresh and, unless ``dry_run``, converge the selected items."""

        with self._hold_lock():
            started_at = self.clock()
            report = self._compute_plan()
            results: tuple[ItemResult, ...] = ()
            if not dry_run:
                selected = _select(report.items, names)
                executed: list[ItemResult] = []
                for item in selected:
                    self._renew_lock()
                    executed.append(self._execute_item(item))
                results = tuple(executed)
            result = RunResult(
                dry_run=dry_run,
                items=report.items,
                summary=report.summary,
                results=results,
                started_at=started_at,
                finished_at=self.clock(),
            )
            self._record(
                RunRecord(
                    mode=RunMode.DRY_RUN if dry_run else RunMode.EXECUTE,
                    dry_run=dry_run,
                    item_count=len(report.items),
                    created_count=len(result.created),
                    updated_count=len(result.updated),
                    failed_count=len(result.failed),
                    started_at=started_at,
                    finished_at=result.finished_at,
                )
            )
        log.info(
            "Finished reconciliation run: dry_run=%s, items=%s, executed=%s, failed=%s",
            dry_run,
            len(report.items),
            len(results),
            len(result.failed),
        )
        return result

    def audit(self) -> AuditReport:
        """Report drift between ledger and platform without mutating anything."""

        started_at = self.clock()
        desired = self.ledger.read_desired_products()
        snapshot = read_catalog_snapshot(self.platform)
        report = audit_catalog(desired, snapshot.products)
        self._record(
            RunRecord(
                mode=RunMode.AUDIT,
                dry_run=True,
                item_count=len(desired),
                started_at=started_at,
                finished_at=self.clock(),
            )
        )
        return report

    def refresh_image(self, product_id: str) -> bool:
        """Resolve and attach an image for an existing platform product."""

        with self._hold_lock():
            product = self.platform.retrieve_product(product_id)
            if product is None:
                raise LookupError(f"Unknown platform product: {product_id}")
            image = self.images.resolve(product.name, platform_product_id=product_id)
            if image is None:
                log.info("No image found for product %s", product_id)
                return False
            self.writer.attach_image(product_id, image)
            return True

    def _compute_plan(self) -> PlanReport:
        desired = self.ledger.read_desired_products()
        snapshot = read_catalog_snapshot(self.platform)
        items = build_plan(desired, snapshot.products, snapshot.prices)
        summary = summarize(items)
        log.info(
            "Planned %s items: create=%s, update=%s, price=%s, image=%s",
            len(items),
            summary.to_create,
            summary.to_update,
            summary.to_price_create,
            summary.to_image_attach,
        )
        return PlanReport(items=tuple(items), summary=summary)

    def _execute_item(self, item: PlanItem) -> ItemResult:
        try:
            return self._converge(item)
        except Exception as exc:
            log.exception("Reconciliation failed for %r", item.name)
            return ItemResult(
                name=item.name,
                ok=False,
                product_id=item.matched_platform_id,
                error=f"{type(exc).__name__}: {exc}",
            )

    def _converge(self, item: PlanItem) -> ItemResult:
        desired = item.desired
        product_id = desired.platform_product_id or item.matched_platform_id
        spec = ProductSpec.from_desired(desired, product_id=product_id)
        product = self.writer.ensure_product(spec)
        price = self.writer.ensure_price(product.id, PriceSpec.from_desired(desired))
        self.writer.set_default_price(product.id, price.id)

        image_attached = False
        if item.requires(Action.ATTACH_IMAGE):
            image = self.images.resolve(
                desired.name,
                image_folder=desired.image_folder,
                platform_product_id=product.id,
            )
            if image is not None:
                self.writer.attach_image(product.id, image)
                image_attached = True

        if (product.id, price.id) != (desired.platform_product_id, desired.platform_price_id):
            self.ledger.write_platform_ids(desired.id, product_id=product.id, price_id=price.id)

        return ItemResult(
            name=item.name,
            ok=True,
            product_id=product.id,
            price_id=price.id,
            created=item.requires(Action.CREATE_PRODUCT),
            image_attached=image_attached,
        )

    def _hold_lock(self) -> AbstractContextManager[None]:
        if self.lock is None:
            return nullcontext()
        return self.lock.hold(self.lock_name)

    def _renew_lock(self) -> None:
        if self.lock is not None:
            self.lock.renew(self.lock_name)

    def _record(self, record: RunRecord) -> None:
        if self.run_log is None:
            return
        try:
            self.run_log.append(record)
        except Exception:
            log.exception("Failed to append %s run record", record.mode)


def _select(items: Iterable[PlanItem], names: Iterable[str] | None) -> list[PlanItem]:
    wanted = {name_key(name) for name in names} if names is not None else None
    selected: list[PlanItem] = []
    for item in items:
        if wanted is not None and name_key(item.name) not in wanted:
            continue
        if not item.needs_work:
            continue
        selected.append(item)
    return selected
