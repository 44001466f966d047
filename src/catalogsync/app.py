"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.adapters.drive import DriveImageSource
from catalogsync.adapters.notion import NotionClient, NotionLedger
from catalogsync.adapters.openai import OpenAIImageGenerator
from catalogsync.adapters.sqlalchemy import (
    SqlAlchemyRunLock,
    SqlAlchemyRunLogStore,
    configured_engine,
    session_factory,
    startup,
)
from catalogsync.adapters.stripe import StripeClient
from catalogsync.config import (
    get_drive_config,
    get_image_generation_config,
    get_notion_config,
    get_reconcile_config,
    get_stripe_config,
)
from catalogsync.domain.images import ImageResolver
from catalogsync.domain.reconciliation import CatalogReconciler
from catalogsync.domain.writer import CatalogWriter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogsync.domain.ports import (
        CommercePlatform,
        FolderImageSource,
        ImageGenerator,
        ProductLedger,
        RunLock,
        RunLogStore,
    )
    from catalogsync.domain.reconciliation import AuditReport, PlanReport, RunResult


log = getLogger(__name__)


def build_reconciler(
    *,
    ledger: ProductLedger | None = None,
    platform: CommercePlatform | None = None,
    folders: FolderImageSource | None = None,
    generator: ImageGenerator | None = None,
    run_log: RunLogStore | None = None,
    lock: RunLock | None = None,
) -> CatalogReconciler:
    """Wire the reconciler from environment configuration.

    Every required setting is loaded before anything is read from either side, so a
    missing variable aborts with ``MissingConfigurationError`` and no side effects.
    Explicit collaborators replace the configured adapters (tests pass fakes here).
    """

    reconcile_config = get_reconcile_config()
    if platform is None:
        platform = StripeClient(config=get_stripe_config())
    if ledger is None:
        notion_config = get_notion_config()
        ledger = NotionLedger(
            NotionClient(config=notion_config),
            notion_config.products_database_id,
            default_statement_descriptor=reconcile_config.default_statement_descriptor,
        )

    style_prompt = ""
    if generator is None:
        generation_config = get_image_generation_config()
        if generation_config is not None:
            generator = OpenAIImageGenerator(config=generation_config)
            style_prompt = generation_config.style_prompt
    if folders is None:
        drive_config = get_drive_config()
        if drive_config is not None:
            folders = DriveImageSource(config=drive_config)

    if run_log is None or lock is None:
        engine = configured_engine() or startup()
        run_log = run_log or SqlAlchemyRunLogStore(session_factory())
        lock = lock or SqlAlchemyRunLock(engine, ttl_seconds=reconcile_config.lock_ttl_seconds)

    log.info(
        "Configured reconciler: folders=%s, generator=%s",
        folders is not None,
        generator is not None,
    )
    return CatalogReconciler(
        ledger=ledger,
        platform=platform,
        writer=CatalogWriter(platform),
        images=ImageResolver(
            platform=platform,
            folders=folders,
            generator=generator,
            style_prompt=style_prompt,
        ),
        run_log=run_log,
        lock=lock,
        lock_name=reconcile_config.lock_name,
    )


def plan_catalog(*, reconciler: CatalogReconciler | None = None) -> PlanReport:
    """Compute the reconciliation plan without writing anything."""

    return (reconciler or build_reconciler()).plan()


def run_catalog(
    *,
    execute: bool = False,
    names: Iterable[str] | None = None,
    reconciler: CatalogReconciler | None = None,
) -> RunResult:
    """Run reconciliation; a dry run unless ``execute`` is set."""

    effective = reconciler or build_reconciler()
    log.info("Starting reconciliation run: execute=%s, names=%s", execute, names)
    return effective.run(dry_run=not execute, names=names)


def audit_catalog_drift(*, reconciler: CatalogReconciler | None = None) -> AuditReport:
    """Report drift between ledger and platform."""

    return (reconciler or build_reconciler()).audit()


def refresh_product_image(
    product_id: str,
    *,
    reconciler: CatalogReconciler | None = None,
) -> bool:
    """Resolve and attach an image for an existing platform product."""

    return (reconciler or build_reconciler()).refresh_image(product_id)
