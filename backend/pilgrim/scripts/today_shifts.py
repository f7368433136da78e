"""Print today's shifts for a site (and optionally ping the guides on duty).

Run from the backend environment, e.g. from cron each morning.

Env:
  - DATABASE_URL (read by pilgrim.core.config)
  - SITE_ID: site to report on (required)
  - TODAY=YYYY-MM-DD to report on another day (for manual testing)
  - NOTIFY=1 sends each guide a reminder through the notifier (log sink by default)
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date, datetime, time

from pilgrim.core.db import SessionLocal
from pilgrim.core.errors import EngineError
from pilgrim.core.log import setup_logging
from pilgrim.services.notify import log_notifier, notify_user
from pilgrim.services.shift_definition import DAY_NAMES
from pilgrim.services.submissions import SubmissionWorkflow

log = logging.getLogger("pilgrim.scripts.today_shifts")


def _fmt_time(t) -> str:
    return t.strftime("%H:%M")


def _now_from_env() -> datetime | None:
    raw = os.getenv("TODAY", "").strip()
    if not raw:
        return None
    return datetime.combine(date.fromisoformat(raw), time(12, 0))


def main() -> int:
    raw_site = os.getenv("SITE_ID", "").strip()
    if not raw_site.isdigit():
        log.error("SITE_ID is required")
        return 2
    site_id = int(raw_site)
    notify = os.getenv("NOTIFY", "").strip() in ("1", "true", "yes")

    with SessionLocal() as db:
        wf = SubmissionWorkflow(db)
        try:
            rows = wf.todays_shifts(site_id, now=_now_from_env())
        except EngineError as e:
            log.error("cannot list shifts for site_id=%s: %s", site_id, e.message)
            return 1

        if not rows:
            print(f"site_id={site_id}: no shifts today")
        for r in rows:
            print(
                f"{r.date.isoformat()} {DAY_NAMES[r.day_of_week]} "
                f"{_fmt_time(r.start_time)}-{_fmt_time(r.end_time)} "
                f"guide_id={r.guide_id} {r.guide_name or ''}".rstrip()
            )
            if notify:
                notify_user(
                    log_notifier,
                    r.guide_id,
                    f"Reminder: you are on duty today {_fmt_time(r.start_time)}-{_fmt_time(r.end_time)}",
                )

    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(main())
