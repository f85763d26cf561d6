from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx
from loguru import logger

from ochistory.collector import get_completed_crimes, get_faction_members
from ochistory.config import ReportConfig
from ochistory.errors import SinkError
from ochistory.models import ReportMode, Selection
from ochistory.report import NO_MATCHING_MEMBERS, generate_report_lines
from ochistory.selector import member_ids, select_members
from ochistory.sinks import ReportSink
from ochistory.stats import build_stats_index

CONSOLE_BANNERS = {
    ReportMode.NOT_IN_OC: "=== Members not in OC ===",
    ReportMode.ALL: "=== All Members ===",
}


@dataclass(slots=True)
class PassResult:
    emitted: dict[str, int] = field(default_factory=dict)
    failed_targets: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_targets


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportService:
    def __init__(
        self,
        config: ReportConfig,
        client: httpx.AsyncClient,
        sink: ReportSink,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.config = config
        self.client = client
        self.sink = sink
        self.clock = clock

    def _with_banner(self, selection: Selection, lines: list[str], first: bool) -> list[str]:
        if self.config.mode is not ReportMode.BOTH or self.config.output != "stdout":
            return lines
        banner = [CONSOLE_BANNERS[selection.mode]]
        if not first:
            banner.insert(0, "")
        return banner + lines

    async def _emit(self, result: PassResult, target: str, lines: list[str]) -> None:
        try:
            await self.sink.emit(target, lines)
        except SinkError as exc:
            logger.error("Emit to {} failed: {}", target, exc)
            result.failed_targets.append(target)
            return
        result.emitted[target] = len(lines)

    async def run_once(self) -> PassResult:
        """Run one report pass.

        Fetch errors propagate to the caller; sink errors are recorded per
        target so that the second target of a ``both`` pass is still tried.
        """
        cfg = self.config
        result = PassResult()

        roster = await get_faction_members(self.client, cfg.base_url, cfg.api_key)
        selections = select_members(roster, cfg.mode)
        logger.info(
            "Fetched {} members, selection sizes {}",
            len(roster),
            [len(s.members) for s in selections],
        )

        if cfg.mode is not ReportMode.BOTH and not selections[0].members:
            await self._emit(result, cfg.target_for(cfg.mode), [NO_MATCHING_MEMBERS])
            return result

        crimes = await get_completed_crimes(self.client, cfg.base_url, cfg.api_key)
        member_filter = None if cfg.mode is ReportMode.BOTH else member_ids(selections)
        stats = build_stats_index(crimes, member_filter)
        logger.info("Reduced {} crimes into {} stat entries", len(crimes), len(stats))

        now = self.clock().astimezone(cfg.tz)
        for i, selection in enumerate(selections):
            lines = generate_report_lines(selection.members, stats, now=now, tz=cfg.tz)
            await self._emit(
                result,
                cfg.target_for(selection.mode),
                self._with_banner(selection, lines, first=(i == 0)),
            )
        return result
