# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from catalogsync.app import (
    audit_catalog_drift,
    plan_catalog,
    refresh_product_image,
    run_catalog,
)
from catalogsync.config import configure_logging
from catalogsync.domain.errors import ReconciliationLockedError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from catalogsync.domain.reconciliation import (
        AuditReport,
        ItemResult,
        PlanItem,
        PlanSummary,
        RunResult,
    )

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_LOCKED = 3


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile the product catalog")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("plan", help="Show the actions a run would take")

    run = subparsers.add_parser("run", help="Reconcile the catalog (dry run by default)")
    run.add_argument(
        "--execute",
        action="store_true",
        help="Apply the plan; without this flag the run only reports",
    )
    run.add_argument(
        "--name",
        dest="names",
        action="append",
        metavar="NAME",
        help="Restrict execution to this product name (repeatable, case-insensitive)",
    )

    subparsers.add_parser("audit", help="Report drift between ledger and platform")

    refresh = subparsers.add_parser(
        "refresh-image",
        help="Resolve and attach an image for an existing platform product",
    )
    refresh.add_argument("product_id", help="Platform product id")

    args = parser.parse_args(list(argv))
    if args.command == "run" and args.names is not None:
        names = [name.strip() for name in args.names]
        if not all(names):
            raise ValueError("--name must not be blank")
        args.names = names
    if args.command == "refresh-image" and not args.product_id.strip():
        raise ValueError("PRODUCT_ID must not be blank")
    return args


def summary_payload(summary: PlanSummary) -> dict[str, int]:
    return {
        "toCreate": summary.to_create,
        "toUpdate": summary.to_update,
        "toPriceCreate": summary.to_price_create,
        "toImageAttach": summary.to_image_attach,
    }


def plan_item_payload(item: PlanItem) -> dict[str, object]:
    return {
        "name": item.name,
        "matchedId": item.matched_platform_id,
        "actions": [str(action) for action in item.actions],
    }


def plan_payload(items: Sequence[PlanItem], summary: PlanSummary) -> dict[str, object]:
    return {
        "ok": True,
        "summary": summary_payload(summary),
        "items": [plan_item_payload(item) for item in items],
    }


def item_result_payload(result: ItemResult) -> dict[str, object]:
    return {
        "name": result.name,
        "ok": result.ok,
        "productId": result.product_id,
        "priceId": result.price_id,
        "imageAttached": result.image_attached,
        "error": result.error,
    }


def run_payload(result: RunResult) -> dict[str, object]:
    payload = plan_payload(result.items, result.summary)
    payload["dryRun"] = result.dry_run
    if not result.dry_run:
        payload["ok"] = result.ok
        payload["results"] = [item_result_payload(item) for item in result.results]
        payload["created"] = result.created
        payload["updated"] = result.updated
    return payload


def audit_payload(report: AuditReport) -> dict[str, object]:
    return {
        "ok": True,
        "missingInPlatform": [
            {"id": record.id, "name": record.name} for record in report.missing_in_platform
        ],
        "missingInLedger": [
            {"id": record.id, "name": record.name} for record in report.missing_in_ledger
        ],
        "fieldMismatches": [
            {
                "productId": mismatch.product_id,
                "field": mismatch.field,
                "ledger": mismatch.ledger,
                "platform": mismatch.platform,
            }
            for mismatch in report.field_mismatches
        ],
        "duplicateLinkage": list(report.duplicate_linkage),
    }


def _emit(payload: dict[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "plan":
        report = plan_catalog()
        _emit(plan_payload(report.items, report.summary))
        return EXIT_OK
    if args.command == "run":
        result = run_catalog(execute=args.execute, names=args.names)
        _emit(run_payload(result))
        return EXIT_OK if result.ok else EXIT_FAILURE
    if args.command == "audit":
        _emit(audit_payload(audit_catalog_drift()))
        return EXIT_OK
    if args.command == "refresh-image":
        attached = refresh_product_image(args.product_id.strip())
        _emit({"ok": True, "attached": attached})
        return EXIT_OK
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(EXIT_USAGE)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        exit_code = _dispatch(parsed_args)
    except ReconciliationLockedError as exc:
        log.error("%s", exc)  # noqa: TRY400
        _emit({"ok": False, "error": str(exc)})
        sys.exit(EXIT_LOCKED)
    except Exception as exc:
        log.exception("Fatal error during %s", parsed_args.command)
        _emit({"ok": False, "error": f"{type(exc).__name__}: {exc}"})
        sys.exit(EXIT_FAILURE)

    if exit_code != EXIT_OK:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def entrypoint() -> None:
    """Console script entry: load ``.env`` and install the SIGINT handler first."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    entrypoint()
