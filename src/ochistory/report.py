from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone, tzinfo

from ochistory.models import Member
from ochistory.stats import StatisticsIndex

NO_MATCHING_MEMBERS = "No matching faction members found."
NO_HISTORY = "  No historical OC participation recorded."
POSITION_WIDTH = 15


def format_timestamp(value: datetime) -> str:
    # RFC 3339, seconds precision; UTC is written as "Z".
    text = value.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def format_epoch(seconds: int, tz: tzinfo | None = None) -> str:
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return format_timestamp(moment.astimezone(tz))


def header_line(now: datetime) -> str:
    return f"Report generated at: {format_timestamp(now)}"


def member_line(member: Member) -> str:
    return (
        f"Member: {member.name} ({member.id}) - "
        f"Last seen: {member.last_action.status} ({member.last_action.relative})"
    )


def _sorted_members(members: Sequence[Member]) -> list[Member]:
    # sorted() is stable, so equal names keep roster order.
    return sorted(members, key=lambda m: m.name.lower())


def generate_report_lines(
    members: Sequence[Member],
    stats: StatisticsIndex,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[str]:
    if now is None:
        now = datetime.now(tz=timezone.utc).astimezone(tz)
    lines = [header_line(now)]
    if not members:
        lines.append(NO_MATCHING_MEMBERS)
        return lines

    for i, member in enumerate(_sorted_members(members)):
        if i:
            lines.append("")
        lines.append(member_line(member))

        if not stats.has_member(member.id):
            lines.append(NO_HISTORY)
            continue

        for difficulty in stats.difficulties(member.id):
            lines.append(f"  Difficulty {difficulty}:")
            for position, entry in stats.positions(member.id, difficulty):
                if entry.pass_rate == 0:
                    lines.append(f"    {position:<{POSITION_WIDTH}} -")
                else:
                    lines.append(
                        f"    {position:<{POSITION_WIDTH}} {entry.pass_rate:3d}% "
                        f"(executed_at {format_epoch(entry.executed_at, tz)})"
                    )
    return lines


def build_sheet_rows(lines: Sequence[str]) -> list[list[str]]:
    return [[line] for line in lines]
