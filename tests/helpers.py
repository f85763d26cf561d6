from __future__ import annotations

from typing import Any

import httpx

from ochistory.errors import SinkError


def member_json(
    member_id: int,
    name: str,
    in_oc: bool = False,
    status: str = "Offline",
    relative: str = "3 hours ago",
) -> dict[str, Any]:
    return {
        "id": member_id,
        "name": name,
        "is_in_oc": in_oc,
        "last_action": {"status": status, "timestamp": 1700000000, "relative": relative},
    }


def crime_json(
    crime_id: int,
    difficulty: int,
    executed_at: int,
    slots: list[tuple[str, int | None, int]],
) -> dict[str, Any]:
    return {
        "id": crime_id,
        "name": f"Crime {crime_id}",
        "difficulty": difficulty,
        "executed_at": executed_at,
        "slots": [
            {
                "position": position,
                "user": None if user_id is None else {"id": user_id, "outcome": "Successful"},
                "checkpoint_pass_rate": rate,
            }
            for position, user_id, rate in slots
        ],
    }


class FakeTornApi:
    def __init__(
        self,
        members: list[dict[str, Any]],
        crime_pages: list[list[dict[str, Any]]] | None = None,
    ) -> None:
        self.members = members
        self.crime_pages = crime_pages or [[]]
        self.requests: list[httpx.Request] = []
        self.fail_path: str | None = None

    def crime_offsets(self) -> list[int]:
        return [
            int(r.url.params["offset"])
            for r in self.requests
            if r.url.path.endswith("/faction/crimes")
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_path and request.url.path.endswith(self.fail_path):
            return httpx.Response(500, text="upstream exploded")
        if request.url.path.endswith("/faction/members"):
            return httpx.Response(200, json={"members": self.members})
        if request.url.path.endswith("/faction/crimes"):
            page = int(request.url.params["offset"]) // 100
            crimes = self.crime_pages[page] if page < len(self.crime_pages) else []
            return httpx.Response(200, json={"crimes": crimes})
        return httpx.Response(404, text="not found")


class RecordingSink:
    def __init__(self, fail_targets: set[str] | None = None) -> None:
        self.emitted: list[tuple[str, list[str]]] = []
        self.fail_targets = fail_targets or set()

    async def emit(self, target: str, lines) -> None:
        if target in self.fail_targets:
            raise SinkError(target, "write failed")
        self.emitted.append((target, list(lines)))


class _SheetRequest:
    def __init__(self, action) -> None:
        self._action = action

    def execute(self):
        return self._action()


class FakeSheetValues:
    def __init__(
        self,
        clear_errors: dict[str, Exception] | None = None,
        update_errors: dict[str, Exception] | None = None,
    ) -> None:
        self.ranges: dict[str, list[list[str]]] = {}
        self.calls: list[tuple[str, str]] = []
        self.clear_errors = clear_errors or {}
        self.update_errors = update_errors or {}

    def clear(self, spreadsheetId, range, body):
        def _do():
            self.calls.append(("clear", range))
            sheet = range.split("!")[0]
            if sheet in self.clear_errors:
                raise self.clear_errors[sheet]
            for key in [k for k in self.ranges if k.split("!")[0] == sheet]:
                del self.ranges[key]
            return {}

        return _SheetRequest(_do)

    def update(self, spreadsheetId, range, valueInputOption, body):
        def _do():
            self.calls.append(("update", range))
            if range in self.update_errors:
                raise self.update_errors[range]
            self.ranges[range] = body["values"]
            return {"updatedRows": len(body["values"])}

        return _SheetRequest(_do)


class FakeSheetsService:
    def __init__(self, values: FakeSheetValues) -> None:
        self._values = values

    def spreadsheets(self):
        return self

    def values(self):
        return self._values
