from __future__ import annotations

import pytest

from catalogsync.config.reconcile import DEFAULT_LOCK_NAME
from catalogsync.domain.errors import ReconciliationLockedError
from catalogsync.domain.images import ImageResolver
from catalogsync.domain.model import ActualPrice, ActualProduct, RunMode
from catalogsync.domain.reconciliation import CatalogReconciler
from catalogsync.domain.writer import CatalogWriter
from tests.support.catalog import (
    FakeGenerator,
    FakeLedger,
    FakePlatform,
    InMemoryRunLock,
    InMemoryRunLog,
    make_desired,
)


def test_new_product_end_to_end(
    reconciler: CatalogReconciler,
    ledger: FakeLedger,
    platform: FakePlatform,
    generator: FakeGenerator,
) -> None:
    ledger.rows = [make_desired("Starter Reading", unit_amount=4400, currency="usd")]

    result = reconciler.run(dry_run=False)

    assert result.ok
    (product,) = platform.products.values()
    (price,) = platform.prices.values()
    assert product.name == "Starter Reading"
    assert price.unit_amount == 4400
    assert price.currency == "usd"
    assert product.default_price_id == price.id
    assert len(product.images) == 1
    assert generator.prompts == ["Flat art: Starter Reading"]
    assert ledger.writes == [("row-starter-reading", product.id, price.id)]
    assert result.created == [product.id]
    assert result.results[0].image_attached


def test_second_run_is_a_noop(
    reconciler: CatalogReconciler,
    ledger: FakeLedger,
    platform: FakePlatform,
) -> None:
    ledger.rows = [make_desired("Starter Reading"), make_desired("Second Book", unit_amount=25)]
    reconciler.run(dry_run=False)
    writes_after_first = list(platform.writes)

    report = reconciler.plan()
    second = reconciler.run(dry_run=False)

    assert report.summary.total_actions == 0
    assert all(not item.actions for item in report.items)
    assert second.results == ()
    assert platform.writes == writes_after_first
    assert len(ledger.writes) == 2


def test_cleared_descriptor_converges_after_one_update(
    ledger: FakeLedger,
    run_log: InMemoryRunLog,
    run_lock: InMemoryRunLock,
) -> None:
    product = ActualProduct(
        id="prod_1",
        name="Starter Reading",
        description="Starter Reading description",
        statement_descriptor="MESSY MAGNETIC",
        images=("https://cdn.example/a.png",),
        default_price_id="price_1",
    )
    price = ActualPrice(id="price_1", product_id="prod_1", unit_amount=4400, currency="usd")
    platform = FakePlatform([product], [price])
    ledger.rows = [
        make_desired(
            statement_descriptor="",
            platform_product_id="prod_1",
            platform_price_id="price_1",
        )
    ]
    reconciler = _reconciler(ledger, platform, run_log, run_lock)

    first = reconciler.run(dry_run=False)
    writes_after_first = list(platform.writes)
    second = reconciler.run(dry_run=False)

    assert first.summary.to_update == 1
    assert platform.products["prod_1"].statement_descriptor is None
    assert second.summary.total_actions == 0
    assert second.results == ()
    assert platform.writes == writes_after_first


def test_dry_run_performs_no_writes(
    reconciler: CatalogReconciler,
    ledger: FakeLedger,
    platform: FakePlatform,
    run_log: InMemoryRunLog,
) -> None:
    ledger.rows = [make_desired()]

    result = reconciler.run()

    assert result.dry_run
    assert result.summary.to_create == 1
    assert result.results == ()
    assert platform.writes == []
    assert ledger.writes == []
    assert run_log.records[-1].mode is RunMode.DRY_RUN


def test_concurrent_run_is_rejected(
    reconciler: CatalogReconciler,
    ledger: FakeLedger,
    platform: FakePlatform,
    run_lock: InMemoryRunLock,
) -> None:
    ledger.rows = [make_desired()]
    run_lock.held.add(DEFAULT_LOCK_NAME)

    with pytest.raises(ReconciliationLockedError):
        reconciler.run(dry_run=False)

    assert platform.writes == []


def test_lease_is_renewed_before_each_item(
    reconciler: CatalogReconciler,
    ledger: FakeLedger,
    run_lock: InMemoryRunLock,
) -> None:
    ledger.rows = [make_desired("First Kit"), make_desired("Second Kit")]

    reconciler.run(dry_run=False)

    assert run_lock.renewals == [DEFAULT_LOCK_NAME, DEFAULT_LOCK_NAME]


def test_lost_lease_stops_the_run(
    reconciler: CatalogReconciler,
    ledger: FakeLedger,
    platform: FakePlatform,
    run_lock: InMemoryRunLock,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _lost(name: str) -> None:
        raise ReconciliationLockedError(name, holder="worker-b")

    monkeypatch.setattr(run_lock, "renew", _lost)
    ledger.rows = [make_desired()]

    with pytest.raises(ReconciliationLockedError):
        reconciler.run(dry_run=False)

    assert platform.writes == []
    assert run_lock.held == set()


def test_lock_is_released_when_reading_fails(
    reconciler: CatalogReconciler,
    ledger: FakeLedger,
    run_lock: InMemoryRunLock,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _broken() -> list[object]:
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr(ledger, "read_desired_products", _broken)

    with pytest.raises(RuntimeError, match="ledger unavailable"):
        reconciler.run(dry_run=False)

    assert run_lock.acquired == [DEFAULT_LOCK_NAME]
    assert run_lock.held == set()


def test_item_failure_does_not_stop_the_batch(
    reconciler: CatalogReconciler,
    ledger: FakeLedger,
    platform: FakePlatform,
    run_log: InMemoryRunLog,
) -> None:
    ledger.rows = [make_desired("Broken Kit"), make_desired("Good Kit")]
    platform.failing_names = {"Broken Kit"}

    result = reconciler.run(dry_run=False)

    assert not result.ok
    broken, good = result.results
    assert not broken.ok
    assert broken.error is not None
    assert "platform rejected Broken Kit" in broken.error
    assert good.ok
    assert [product.name for product in platform.products.values()] == ["Good Kit"]
    assert run_log.records[-1].failed_count == 1
    assert run_log.records[-1].created_count == 1


def test_names_restrict_execution(
    reconciler: CatalogReconciler,
    ledger: FakeLedger,
    platform: FakePlatform,
) -> None:
    ledger.rows = [make_desired("First Kit"), make_desired("Second Kit")]

    result = reconciler.run(dry_run=False, names=["second kit"])

    assert [item.name for item in result.results] == ["Second Kit"]
    assert [product.name for product in platform.products.values()] == ["Second Kit"]
    assert len(result.items) == 2


def test_price_change_supersedes_without_mutation(
    ledger: FakeLedger,
    run_log: InMemoryRunLog,
    run_lock: InMemoryRunLock,
) -> None:
    product = ActualProduct(
        id="prod_1",
        name="Starter Reading",
        description="Starter Reading description",
        statement_descriptor="MESSY MAGNETIC",
        images=("https://cdn.example/a.png",),
        default_price_id="price_old",
    )
    old = ActualPrice(id="price_old", product_id="prod_1", unit_amount=4400, currency="usd")
    platform = FakePlatform([product], [old])
    ledger.rows = [
        make_desired(unit_amount=5000, platform_product_id="prod_1", platform_price_id="price_old")
    ]
    reconciler = _reconciler(ledger, platform, run_log, run_lock)

    result = reconciler.run(dry_run=False)

    (item,) = result.results
    assert item.ok
    assert item.price_id != "price_old"
    assert platform.prices["price_old"] == old
    assert platform.products["prod_1"].default_price_id == item.price_id
    assert ledger.writes == [("row-starter-reading", "prod_1", item.price_id)]
    assert result.updated == ["prod_1"]


def test_failing_run_log_does_not_fail_the_run(
    ledger: FakeLedger,
    platform: FakePlatform,
    run_lock: InMemoryRunLock,
) -> None:
    class _BrokenLog(InMemoryRunLog):
        def append(self, record: object) -> None:
            raise RuntimeError("disk full")

    ledger.rows = [make_desired()]
    reconciler = _reconciler(ledger, platform, _BrokenLog(), run_lock)

    assert reconciler.run(dry_run=False).ok


def test_plan_and_audit_are_recorded_read_only(
    reconciler: CatalogReconciler,
    ledger: FakeLedger,
    platform: FakePlatform,
    run_log: InMemoryRunLog,
) -> None:
    ledger.rows = [make_desired()]

    reconciler.plan()
    report = reconciler.audit()

    assert [record.mode for record in run_log.records] == [RunMode.PLAN, RunMode.AUDIT]
    assert report.missing_in_platform
    assert platform.writes == []


def test_refresh_image_attaches_to_existing_product(
    reconciler: CatalogReconciler,
    platform: FakePlatform,
) -> None:
    platform.products["prod_1"] = ActualProduct(id="prod_1", name="Kit")

    assert reconciler.refresh_image("prod_1")
    assert platform.products["prod_1"].images

    with pytest.raises(LookupError):
        reconciler.refresh_image("prod_missing")


def test_refresh_image_is_rejected_while_a_run_holds_the_lock(
    reconciler: CatalogReconciler,
    platform: FakePlatform,
    run_lock: InMemoryRunLock,
) -> None:
    platform.products["prod_1"] = ActualProduct(id="prod_1", name="Kit")
    run_lock.held.add(DEFAULT_LOCK_NAME)

    with pytest.raises(ReconciliationLockedError):
        reconciler.refresh_image("prod_1")

    assert platform.writes == []


def _reconciler(
    ledger: FakeLedger,
    platform: FakePlatform,
    run_log: InMemoryRunLog,
    run_lock: InMemoryRunLock,
) -> CatalogReconciler:
    return CatalogReconciler(
        ledger=ledger,
        platform=platform,
        writer=CatalogWriter(platform),
        images=ImageResolver(platform=platform, generator=FakeGenerator()),
        run_log=run_log,
        lock=run_lock,
    )
