from __future__ import annotations

from collections.abc import Sequence

from ochistory.models import Member, ReportMode, Selection


def select_all(roster: Sequence[Member]) -> Selection:
    return Selection(ReportMode.ALL, list(roster))


def select_not_in_oc(roster: Sequence[Member]) -> Selection:
    return Selection(ReportMode.NOT_IN_OC, [m for m in roster if not m.is_in_oc])


def select_members(roster: Sequence[Member], mode: ReportMode) -> list[Selection]:
    """Return the selections a pass reports on, in emission order.

    ``BOTH`` yields the not-in-OC selection first, then all members, each
    computed from the same roster snapshot.
    """
    if mode is ReportMode.ALL:
        return [select_all(roster)]
    if mode is ReportMode.BOTH:
        return [select_not_in_oc(roster), select_all(roster)]
    return [select_not_in_oc(roster)]


def member_ids(selections: Sequence[Selection]) -> set[int]:
    return {m.id for s in selections for m in s.members}
