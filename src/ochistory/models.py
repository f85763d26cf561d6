from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ReportMode(str, Enum):
    ALL = "all"
    NOT_IN_OC = "not-in-oc"
    BOTH = "both"


@dataclass(frozen=True, slots=True)
class LastAction:
    status: str
    timestamp: int
    relative: str


@dataclass(frozen=True, slots=True)
class Member:
    id: int
    name: str
    is_in_oc: bool
    last_action: LastAction


@dataclass(frozen=True, slots=True)
class SlotUser:
    id: int
    outcome: str = ""


@dataclass(frozen=True, slots=True)
class Slot:
    position: str
    user: SlotUser
    checkpoint_pass_rate: int


@dataclass(frozen=True, slots=True)
class CrimeRecord:
    id: int
    name: str
    difficulty: int
    executed_at: int
    slots: tuple[Slot, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class StatEntry:
    pass_rate: int = 0
    executed_at: int = 0


@dataclass(slots=True)
class Selection:
    mode: ReportMode
    members: list[Member]
