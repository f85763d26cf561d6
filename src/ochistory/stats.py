from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import NamedTuple

from ochistory.models import CrimeRecord, StatEntry


class StatKey(NamedTuple):
    member_id: int
    difficulty: int
    position: str


class StatisticsIndex:
    """Most recent checkpoint pass rate per (member, difficulty, position).

    Entries are keyed by a flat ``StatKey``; the sorted views never rely on
    dict insertion order.
    """

    def __init__(self) -> None:
        self._entries: dict[StatKey, StatEntry] = {}
        self._members: set[int] = set()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, member_id: int, difficulty: int, position: str) -> StatEntry | None:
        return self._entries.get(StatKey(member_id, difficulty, position))

    def observe(self, key: StatKey, pass_rate: int, executed_at: int) -> bool:
        current = self._entries.get(key, StatEntry())
        self._members.add(key.member_id)
        if executed_at > current.executed_at:
            self._entries[key] = StatEntry(pass_rate=pass_rate, executed_at=executed_at)
            return True
        # Keep a zero entry so the member/difficulty/position is still listed.
        self._entries.setdefault(key, current)
        return False

    def has_member(self, member_id: int) -> bool:
        return member_id in self._members

    def difficulties(self, member_id: int) -> list[int]:
        return sorted({k.difficulty for k in self._entries if k.member_id == member_id})

    def positions(self, member_id: int, difficulty: int) -> list[tuple[str, StatEntry]]:
        found = [
            (k.position, entry)
            for k, entry in self._entries.items()
            if k.member_id == member_id and k.difficulty == difficulty
        ]
        return sorted(found, key=lambda item: item[0])


def build_stats_index(
    crimes: Iterable[CrimeRecord],
    member_filter: Collection[int] | None = None,
) -> StatisticsIndex:
    index = StatisticsIndex()
    for crime in crimes:
        for slot in crime.slots:
            member_id = slot.user.id
            if not member_id:
                continue
            if member_filter is not None and member_id not in member_filter:
                continue
            index.observe(
                StatKey(member_id, crime.difficulty, slot.position),
                slot.checkpoint_pass_rate,
                crime.executed_at,
            )
    return index
