from __future__ import annotations

import argparse
import logging
import sys

from compliance_engine.config import SETTINGS
from compliance_engine.infra.db import init_db
from compliance_engine.infra.logging import setup_logging
from compliance_engine.infra.repository import TaskRepository
from compliance_engine.services.scheduler import RecurrenceScheduler

logger = logging.getLogger("compliance_engine")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate upcoming recurring compliance tasks.")
    parser.add_argument("--tenant", type=int, default=None, help="only this tenant id")
    parser.add_argument(
        "--force",
        action="store_true",
        help="ignore lead time and generate the next period now",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    setup_logging()
    try:
        init_db()
    except Exception as exc:  # noqa: BLE001
        logger.error("Database unavailable: %s", exc)
        return 1

    scheduler = RecurrenceScheduler(
        TaskRepository(),
        default_lead_days=SETTINGS.default_lead_days,
        due_date_offset_days=SETTINGS.due_date_offset_days,
    )
    override = 0 if args.force else None
    if args.tenant is not None:
        created = scheduler.generate_for_tenant(args.tenant, lead_days_override=override)
        logger.info("Tenant %s: %d task(s) created", args.tenant, len(created))
    else:
        scheduler.generate_for_all_tenants(lead_days_override=override)
    return 0


if __name__ == "__main__":
    sys.exit(main())
