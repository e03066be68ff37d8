"""Cron-based scheduling of the check cycle using APScheduler."""

import logging
from typing import Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.cron import CronTrigger

from site_monitor.exception import ConfigError

logger = logging.getLogger(__name__)

SCHEDULER_TIMEZONE = "UTC"
CRON_DAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def _cron_day_number(token: str) -> int:
    token = token.strip().lower()
    if token.isdigit():
        value = int(token)
        if not 0 <= value <= 7:
            raise ValueError(f"day-of-week value out of range: {token}")
        return value
    if token[:3] in CRON_DAY_NAMES:
        return CRON_DAY_NAMES.index(token[:3])
    raise ValueError(f"invalid day-of-week value: {token}")


def cron_day_of_week_to_apscheduler(field: str) -> str:
    """
    Translate a crontab day-of-week field (0/7 = Sunday) into explicit day names.

    APScheduler numbers weekdays from Monday = 0, so numeric crontab values
    cannot be passed through unchanged.
    """
    if field in ("*", "?"):
        return "*"

    days: set[int] = set()
    for part in field.split(","):
        base, has_step, step_raw = part.partition("/")
        step = int(step_raw) if has_step else 1
        if step < 1:
            raise ValueError(f"invalid day-of-week step: {part}")

        if base == "*":
            start, end = 0, 6
        elif "-" in base:
            first, last = base.split("-", 1)
            start, end = _cron_day_number(first), _cron_day_number(last)
            if start > end:
                raise ValueError(f"invalid day-of-week range: {base}")
        else:
            start = _cron_day_number(base)
            end = 6 if has_step else start

        days.update(day % 7 for day in range(start, end + 1, step))

    return ",".join(CRON_DAY_NAMES[day] for day in sorted(days))


def _is_unrestricted(field: str) -> bool:
    return field.startswith(("*", "?"))


def build_cron_trigger(cron_expression: str) -> BaseTrigger:
    """
    Parse a five-field cron expression (minute hour day month day_of_week), evaluated in UTC.

    When both day fields are restricted the schedule fires when either matches,
    as crontab does. APScheduler's CronTrigger alone would require both.
    """
    cron_parts = cron_expression.split()
    if len(cron_parts) != 5:
        raise ConfigError(
            f"invalid CRON_SCHEDULE: {cron_expression!r} (expected 5 fields, got {len(cron_parts)})",
            problems=["CRON_SCHEDULE"],
        )

    minute, hour, day, month, day_of_week = cron_parts
    try:
        day_of_week = cron_day_of_week_to_apscheduler(day_of_week)
        if _is_unrestricted(day) or _is_unrestricted(cron_parts[4]):
            return CronTrigger(
                minute=minute,
                hour=hour,
                day=day,
                month=month,
                day_of_week=day_of_week,
                timezone=SCHEDULER_TIMEZONE,
            )

        return OrTrigger(
            [
                CronTrigger(minute=minute, hour=hour, day=day, month=month, timezone=SCHEDULER_TIMEZONE),
                CronTrigger(
                    minute=minute, hour=hour, month=month, day_of_week=day_of_week, timezone=SCHEDULER_TIMEZONE
                ),
            ]
        )
    except ValueError as e:
        raise ConfigError(f"invalid CRON_SCHEDULE: {cron_expression!r}: {e}", problems=["CRON_SCHEDULE"]) from e


class CronScheduler:
    """Runs a coroutine job on a cron schedule inside the running event loop."""

    def __init__(self, cron_expression: str, max_instances: int = 3, misfire_grace_time: int = 60):
        self.cron_expression = cron_expression
        self.trigger: BaseTrigger = build_cron_trigger(cron_expression)
        self.max_instances = max_instances
        self.misfire_grace_time = misfire_grace_time
        self.scheduler = AsyncIOScheduler(timezone=SCHEDULER_TIMEZONE)
        self.running = False

    def add_job(self, job_id: str, func: Callable[[], Awaitable[None]], description: str | None = None):
        self.scheduler.add_job(
            func=func,
            trigger=self.trigger,
            id=job_id,
            name=description or job_id,
            max_instances=self.max_instances,
            coalesce=True,
            misfire_grace_time=self.misfire_grace_time,
            replace_existing=True,
        )
        logger.info(f"[SCHEDULER] Added cron job {job_id} ({self.cron_expression} UTC)")

    def start(self):
        if self.running:
            logger.warning("[SCHEDULER] already running")
            return

        self.scheduler.start()
        self.running = True
        for job in self.scheduler.get_jobs():
            logger.info(f"[SCHEDULER] {job.id} next run at {job.next_run_time.isoformat()}")

    def shutdown(self):
        if not self.running:
            return

        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("[SCHEDULER] stopped")
