from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from ochistory.errors import RemoteError, TransportError
from ochistory.models import CrimeRecord, Member
from ochistory.parser import parse_crimes_payload, parse_members_payload

CRIMES_PAGE_SIZE = 100


async def _get_json(client: httpx.AsyncClient, url: str, params: dict[str, Any]) -> Any:
    try:
        resp = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        raise TransportError(f"GET {url} failed: {exc}") from exc

    if resp.status_code != httpx.codes.OK:
        raise RemoteError(resp.status_code, resp.text)

    try:
        return resp.json()
    except ValueError as exc:
        raise RemoteError(resp.status_code, resp.text) from exc


async def get_faction_members(
    client: httpx.AsyncClient, base_url: str, api_key: str
) -> list[Member]:
    data = await _get_json(client, f"{base_url}/faction/members", {"key": api_key})
    try:
        return parse_members_payload(data)
    except (ValueError, TypeError) as exc:
        raise RemoteError(httpx.codes.OK, str(exc)) from exc


async def get_completed_crimes(
    client: httpx.AsyncClient,
    base_url: str,
    api_key: str,
    page_size: int = CRIMES_PAGE_SIZE,
) -> list[CrimeRecord]:
    # A short page ends the listing; offsets advance by the requested size.
    crimes: list[CrimeRecord] = []
    offset = 0
    while True:
        data = await _get_json(
            client,
            f"{base_url}/faction/crimes",
            {"key": api_key, "cat": "completed", "offset": offset},
        )
        try:
            page = parse_crimes_payload(data)
        except (ValueError, TypeError) as exc:
            raise RemoteError(httpx.codes.OK, str(exc)) from exc

        logger.debug("Fetched crimes page offset={} count={}", offset, len(page))
        crimes.extend(page)
        if len(page) < page_size:
            break
        offset += page_size
    return crimes
