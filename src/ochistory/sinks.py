from __future__ import annotations

import asyncio
import re
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol, TextIO

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleApiError
from loguru import logger

from ochistory.errors import ConfigurationError, SinkError
from ochistory.report import build_sheet_rows

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Failures the Google client stack raises from execute(), including token refresh.
SHEETS_ERRORS = (GoogleApiError, GoogleAuthError, httplib2.HttpLib2Error, OSError)

_ANCHOR_RE = re.compile(r"^(?P<sheet>.+!)?(?P<col>[A-Za-z]+)(?P<row>\d+)$")


class ReportSink(Protocol):
    async def emit(self, target: str, lines: Sequence[str]) -> None: ...


class ConsoleSink:
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def emit(self, target: str, lines: Sequence[str]) -> None:
        stream = self._stream or sys.stdout
        for line in lines:
            print(line, file=stream)
        stream.flush()


def clear_range_for(target: str) -> str:
    """Widen a single-cell anchor like ``History!A1`` to ``History!A1:A``."""
    m = _ANCHOR_RE.match(target.strip())
    if not m:
        return target
    sheet = m.group("sheet") or ""
    col = m.group("col")
    return f"{sheet}{col}{m.group('row')}:{col}"


class SheetsSink:
    def __init__(self, service: Any, spreadsheet_id: str) -> None:
        self._service = service
        self.spreadsheet_id = spreadsheet_id

    @classmethod
    def from_credentials_file(cls, path: Path, spreadsheet_id: str) -> "SheetsSink":
        try:
            creds = service_account.Credentials.from_service_account_file(
                str(path), scopes=SHEETS_SCOPES
            )
        except (OSError, ValueError, GoogleAuthError) as exc:
            raise ConfigurationError(f"cannot load sheets credentials from {path}: {exc}") from exc
        service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        return cls(service, spreadsheet_id)

    def _clear(self, target: str) -> None:
        self._service.spreadsheets().values().clear(
            spreadsheetId=self.spreadsheet_id,
            range=clear_range_for(target),
            body={},
        ).execute()

    def _update(self, target: str, rows: list[list[str]]) -> None:
        self._service.spreadsheets().values().update(
            spreadsheetId=self.spreadsheet_id,
            range=target,
            valueInputOption="RAW",
            body={"values": rows},
        ).execute()

    async def emit(self, target: str, lines: Sequence[str]) -> None:
        rows = build_sheet_rows(lines)
        try:
            await asyncio.to_thread(self._clear, target)
        except SHEETS_ERRORS as exc:
            logger.error("Clear sheet range {} failed: {}", target, exc)

        try:
            await asyncio.to_thread(self._update, target, rows)
        except SHEETS_ERRORS as exc:
            raise SinkError(target, f"write failed: {exc}") from exc
        logger.info("Wrote {} rows to sheet range {}", len(rows), target)
