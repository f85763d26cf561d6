from __future__ import annotations

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from ochistory.errors import RemoteError, TransportError
from ochistory.service import ReportService

JOB_ID = "oc_history_report"


class ReportRunner:
    def __init__(self, service: ReportService) -> None:
        self.service = service
        self._lock = asyncio.Lock()

    async def run_pass(self) -> bool:
        if self._lock.locked():
            logger.warning("Previous report pass still running, waiting for it to finish")
        async with self._lock:
            cfg = self.service.config
            logger.info("Start report pass mode={} output={}", cfg.mode.value, cfg.output)
            try:
                result = await self.service.run_once()
            except (TransportError, RemoteError) as exc:
                logger.error("Report pass aborted: {}", exc)
                return False
            except Exception:
                logger.exception("Report pass failed unexpectedly")
                return False

            if not result.ok:
                logger.warning("Report pass finished with failed targets {}", result.failed_targets)
                return False
            logger.info("Report pass finished, emitted {}", result.emitted)
            return True

    def schedule(self, scheduler: AsyncIOScheduler) -> None:
        seconds = self.service.config.interval.total_seconds()
        scheduler.add_job(
            self.run_pass,
            "interval",
            seconds=seconds,
            id=JOB_ID,
            coalesce=True,
            max_instances=2,
            replace_existing=True,
        )
        logger.info("Scheduled report pass every {} seconds", seconds)

    async def serve(self) -> None:
        await self.run_pass()
        if self.service.config.interval.total_seconds() <= 0:
            return

        scheduler = AsyncIOScheduler()
        self.schedule(scheduler)
        scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.shutdown(wait=False)
