from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ochistory.errors import ConfigurationError
from ochistory.models import ReportMode

DEFAULT_BASE_URL = "https://api.torn.com/v2"
DEFAULT_RANGE_NOT_IN_OC = "History!A1"
DEFAULT_RANGE_ALL = "HistoryAll!A1"
OUTPUTS = ("stdout", "sheets")

# zerolog level names -> loguru level names
LOG_LEVELS = {
    "trace": "TRACE",
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
    "fatal": "CRITICAL",
    "panic": "CRITICAL",
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    torn_api_key: str = ""
    torn_base_url: str = DEFAULT_BASE_URL
    spreadsheet_id: str = ""
    google_credentials_file: Path = Path("credentials.json")
    loglevel: str = "info"
    env: str = "development"
    report_timezone: str | None = None
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("loglevel", mode="before")
    @classmethod
    def _parse_loglevel(cls, value: object) -> str:
        text = str(value or "info").strip().lower()
        if text not in LOG_LEVELS:
            raise ValueError(f"LOGLEVEL must be one of {', '.join(sorted(LOG_LEVELS))}")
        return text

    @field_validator("torn_base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def loguru_level(self) -> str:
        return LOG_LEVELS[self.loglevel]

    @property
    def is_production(self) -> bool:
        return self.env.strip().lower() == "production"

    def timezone(self) -> tzinfo | None:
        if not self.report_timezone:
            return None
        try:
            return ZoneInfo(self.report_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"unknown REPORT_TIMEZONE {self.report_timezone!r}") from exc


def parse_interval(text: str | None) -> timedelta:
    """Parse ``5m``, ``1h30m``, ``90s``, ``250ms`` or a bare number of seconds."""
    raw = (text or "").strip()
    if not raw or raw == "0":
        return timedelta(0)
    try:
        seconds = float(raw)
    except ValueError:
        pos = 0
        seconds = 0.0
        for m in _DURATION_PART.finditer(raw):
            if m.start() != pos:
                break
            seconds += float(m.group(1)) * _DURATION_UNITS[m.group(2)]
            pos = m.end()
        if pos != len(raw):
            raise ConfigurationError(f"invalid interval {text!r}") from None
    if seconds < 0:
        raise ConfigurationError(f"interval must not be negative: {text!r}")
    return timedelta(seconds=seconds)


@dataclass(frozen=True, slots=True)
class ReportConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    output: str = "stdout"
    mode: ReportMode = ReportMode.NOT_IN_OC
    range_not_in_oc: str = DEFAULT_RANGE_NOT_IN_OC
    range_all: str = DEFAULT_RANGE_ALL
    interval: timedelta = timedelta(0)
    spreadsheet_id: str = ""
    tz: tzinfo | None = None

    def target_for(self, mode: ReportMode) -> str:
        if mode is ReportMode.ALL:
            return self.range_all
        return self.range_not_in_oc


def resolve_mode(all_members: bool, both: bool) -> ReportMode:
    if all_members and both:
        raise ConfigurationError("--all and --both cannot be used together")
    if both:
        return ReportMode.BOTH
    if all_members:
        return ReportMode.ALL
    return ReportMode.NOT_IN_OC


def build_report_config(
    settings: Settings,
    *,
    output: str = "stdout",
    all_members: bool = False,
    both: bool = False,
    range_not_in_oc: str = DEFAULT_RANGE_NOT_IN_OC,
    range_all: str = DEFAULT_RANGE_ALL,
    interval: str | None = None,
) -> ReportConfig:
    mode = resolve_mode(all_members, both)
    if output not in OUTPUTS:
        raise ConfigurationError("--output must be either 'stdout' or 'sheets'")
    if not settings.torn_api_key:
        raise ConfigurationError("TORN_API_KEY is required")
    if output == "sheets" and not settings.spreadsheet_id:
        raise ConfigurationError("SPREADSHEET_ID is required when --output=sheets")

    return ReportConfig(
        api_key=settings.torn_api_key,
        base_url=settings.torn_base_url,
        output=output,
        mode=mode,
        range_not_in_oc=range_not_in_oc,
        range_all=range_all,
        interval=parse_interval(interval),
        spreadsheet_id=settings.spreadsheet_id,
        tz=settings.timezone(),
    )
