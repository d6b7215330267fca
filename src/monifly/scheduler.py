"""Background task scheduler for periodic ledger maintenance."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler as APScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .logging_config import get_logger

if TYPE_CHECKING:
    from .context import AppContext

logger = get_logger("scheduler")

MONTHLY_RESET_JOB = "monthly_budget_reset"
OVERDUE_DEBTS_JOB = "overdue_debts"
PRICE_REFRESH_JOB = "crypto_price_refresh"


class BackgroundScheduler:
    """Runs the budget period reset, overdue debt sweep and price refresh."""

    def __init__(self, ctx: AppContext, *, price_refresh_minutes: int = 5):
        self.ctx = ctx
        self.price_refresh_minutes = price_refresh_minutes
        self.scheduler: Optional[APScheduler] = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = APScheduler()

        # Budget spend counters restart with each month
        self.scheduler.add_job(
            func=self.reset_budgets,
            trigger=CronTrigger(day=1, hour=0, minute=5),
            id=MONTHLY_RESET_JOB,
            name="Monthly Budget Reset",
            replace_existing=True,
        )
        self.scheduler.add_job(
            func=self.mark_overdue,
            trigger=CronTrigger(hour=0, minute=10),
            id=OVERDUE_DEBTS_JOB,
            name="Overdue Debt Sweep",
            replace_existing=True,
        )
        self.scheduler.add_job(
            func=self.refresh_prices,
            trigger=IntervalTrigger(minutes=self.price_refresh_minutes),
            id=PRICE_REFRESH_JOB,
            name="Crypto Price Refresh",
            replace_existing=True,
        )

        self.scheduler.start()
        logger.info("Background scheduler started", extra={"jobs": self.job_ids()})

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Background scheduler stopped")

    def job_ids(self) -> list[str]:
        if self.scheduler is None:
            return []
        return sorted(job.id for job in self.scheduler.get_jobs())

    def reset_budgets(self) -> int:
        result = self.ctx.reset_period()
        count = result.value if result.ok else 0
        logger.info("Monthly budget reset", extra={"entries": count})
        return count or 0

    def mark_overdue(self) -> list[int]:
        result = self.ctx.mark_overdue_debts()
        ids = result.value if result.ok else []
        if ids:
            logger.info("Debts marked overdue", extra={"debt_ids": ids})
        return ids or []

    def refresh_prices(self) -> dict[str, float]:
        result = self.ctx.refresh_crypto_prices()
        return result.value if result.ok and result.value else {}

    def run_all(self) -> None:
        """Run every maintenance task once, immediately."""
        self.reset_budgets()
        self.mark_overdue()
        self.refresh_prices()

    def add_job(
        self,
        func: Callable,
        trigger: str,
        *,
        job_id: str,
        name: str | None = None,
        **trigger_args,
    ) -> None:
        """Add a custom job to the scheduler.

        Args:
            func: Function to execute
            trigger: Trigger type ('cron' or 'interval')
            job_id: Unique job identifier
            name: Human-readable job name
            **trigger_args: Additional trigger arguments
        """
        if self.scheduler is None:
            logger.warning(f"Cannot add job {job_id}: scheduler not started")
            return

        if trigger == "cron":
            trigger_obj = CronTrigger(**trigger_args)
        elif trigger == "interval":
            trigger_obj = IntervalTrigger(**trigger_args)
        else:
            raise ValueError(f"Unknown trigger type: {trigger}")

        self.scheduler.add_job(
            func=func,
            trigger=trigger_obj,
            id=job_id,
            name=name or job_id,
            replace_existing=True,
        )
        logger.info(f"Added job: {job_id}")

    def remove_job(self, job_id: str) -> None:
        if self.scheduler is not None:
            self.scheduler.remove_job(job_id)
            logger.info(f"Removed job: {job_id}")


def create_scheduler(ctx: AppContext, *, auto_start: bool = False) -> BackgroundScheduler:
    """Create and optionally start a background scheduler."""
    scheduler = BackgroundScheduler(ctx)
    if auto_start:
        scheduler.start()
    return scheduler
