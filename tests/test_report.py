from datetime import datetime, timedelta, timezone

from ochistory.models import CrimeRecord, LastAction, Member, Slot, SlotUser
from ochistory.report import (
    NO_MATCHING_MEMBERS,
    build_sheet_rows,
    format_epoch,
    format_timestamp,
    generate_report_lines,
)
from ochistory.stats import build_stats_index

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _member(member_id: int, name: str) -> Member:
    return Member(
        id=member_id,
        name=name,
        is_in_oc=False,
        last_action=LastAction(status="Offline", timestamp=0, relative="1 day ago"),
    )


def _crime(executed_at: int, difficulty: int, slots: list[tuple[str, int, int]]) -> CrimeRecord:
    return CrimeRecord(
        id=executed_at,
        name="Mob Mentality",
        difficulty=difficulty,
        executed_at=executed_at,
        slots=tuple(Slot(position=p, user=SlotUser(id=u), checkpoint_pass_rate=r) for p, u, r in slots),
    )


def test_timestamp_format() -> None:
    assert format_timestamp(NOW) == "2024-05-01T12:00:00Z"
    plus_two = NOW.astimezone(timezone(timedelta(hours=2)))
    assert format_timestamp(plus_two) == "2024-05-01T14:00:00+02:00"
    assert format_epoch(1700000000, timezone.utc) == "2023-11-14T22:13:20Z"


def test_full_report_layout() -> None:
    stats = build_stats_index(
        [
            _crime(1700000000, 2, [("Picklock #1", 10, 64), ("Thief", 10, 0)]),
            _crime(1700000000, 1, [("Muscle", 10, 7)]),
        ]
    )
    lines = generate_report_lines(
        [_member(11, "bob"), _member(10, "Alice")], stats, now=NOW, tz=timezone.utc
    )
    assert lines == [
        "Report generated at: 2024-05-01T12:00:00Z",
        "Member: Alice (10) - Last seen: Offline (1 day ago)",
        "  Difficulty 1:",
        "    Muscle            7% (executed_at 2023-11-14T22:13:20Z)",
        "  Difficulty 2:",
        "    Picklock #1      64% (executed_at 2023-11-14T22:13:20Z)",
        "    Thief           -",
        "",
        "Member: bob (11) - Last seen: Offline (1 day ago)",
        "  No historical OC participation recorded.",
    ]


def test_zero_rate_renders_dash_not_percent() -> None:
    stats = build_stats_index([_crime(100, 3, [("Lookout", 5, 0)])])
    lines = generate_report_lines([_member(5, "Zed")], stats, now=NOW, tz=timezone.utc)
    assert lines[-1] == "    Lookout         -"
    assert not any("0%" in line for line in lines)


def test_case_insensitive_sort_is_stable() -> None:
    members = [_member(3, "carol"), _member(1, "Dave"), _member(2, "CAROL"), _member(4, "alice")]
    lines = generate_report_lines(members, build_stats_index([]), now=NOW)
    names = [line.split(" (")[0] for line in lines if line.startswith("Member:")]
    assert names == ["Member: alice", "Member: carol", "Member: CAROL", "Member: Dave"]


def test_empty_selection_renders_no_match_line() -> None:
    lines = generate_report_lines([], build_stats_index([]), now=NOW)
    assert lines == ["Report generated at: 2024-05-01T12:00:00Z", NO_MATCHING_MEMBERS]


def test_sheet_rows_are_single_cells() -> None:
    assert build_sheet_rows(["a", "", "b"]) == [["a"], [""], ["b"]]
