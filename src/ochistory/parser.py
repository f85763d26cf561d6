from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ochistory.models import CrimeRecord, LastAction, Member, Slot, SlotUser


def _as_int(value: object) -> int:
    if value is None or value == "":
        return 0
    return int(value)  # type: ignore[arg-type]


def _as_mapping(value: object) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    return {}


def parse_member(raw: Mapping[str, Any]) -> Member:
    last_action = _as_mapping(raw.get("last_action"))
    return Member(
        id=_as_int(raw.get("id")),
        name=str(raw.get("name") or ""),
        is_in_oc=bool(raw.get("is_in_oc")),
        last_action=LastAction(
            status=str(last_action.get("status") or ""),
            timestamp=_as_int(last_action.get("timestamp")),
            relative=str(last_action.get("relative") or ""),
        ),
    )


def parse_slot(raw: Mapping[str, Any]) -> Slot:
    # Unfilled slots come back with "user": null.
    user = _as_mapping(raw.get("user"))
    return Slot(
        position=str(raw.get("position") or ""),
        user=SlotUser(id=_as_int(user.get("id")), outcome=str(user.get("outcome") or "")),
        checkpoint_pass_rate=_as_int(raw.get("checkpoint_pass_rate")),
    )


def parse_crime(raw: Mapping[str, Any]) -> CrimeRecord:
    slots = raw.get("slots") or []
    return CrimeRecord(
        id=_as_int(raw.get("id")),
        name=str(raw.get("name") or ""),
        difficulty=_as_int(raw.get("difficulty")),
        executed_at=_as_int(raw.get("executed_at")),
        slots=tuple(parse_slot(s) for s in slots if isinstance(s, Mapping)),
    )


def _extract_list(payload: object, key: str) -> list[Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        raise ValueError(f"expected a JSON object with {key!r}")
    if "error" in payload:
        raise ValueError(f"API error: {payload['error']}")
    items = payload.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValueError(f"{key!r} must be a list")
    return [item for item in items if isinstance(item, Mapping)]


def parse_members_payload(payload: object) -> list[Member]:
    return [parse_member(item) for item in _extract_list(payload, "members")]


def parse_crimes_payload(payload: object) -> list[CrimeRecord]:
    return [parse_crime(item) for item in _extract_list(payload, "crimes")]
