"""Run configuration built from environment variables."""

import math
import os
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

from cin7_hubspot_sync.connectors.cin7.constants import DEFAULT_FIELDS
from cin7_hubspot_sync.errors import ConfigError

HUBSPOT_API_URL = "https://api.hubapi.com"
UNIQUE_PROPERTY = "cin7_order_id"

# Ten years; anything larger is a typo and would overflow the cutoff date
MAX_LOOKBACK_HOURS = 24 * 366 * 10

_REQUIRED = (
    "HUBSPOT_PRIVATE_APP_TOKEN",
    "CIN7_USERNAME",
    "CIN7_KEY",
    "CIN7_BASE_URL",
    "CIN7_SALES_ORDERS_PATH",
)


def format_utc(dt: datetime) -> str:
    """Format as UTC ISO with second precision and a Z suffix (Cin7 filter format)."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def iso_timestamp(dt: Optional[datetime] = None) -> str:
    """UTC ISO timestamp with millisecond precision, e.g. 2026-01-21T00:00:00.000Z."""
    dt = dt or datetime.now(timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_since(value: str) -> str:
    """
    Validate an ISO datetime override and normalize it to Cin7 filter format.
    Naive values are taken as UTC.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise ConfigError(
            f"Invalid CIN7_FORCE_SINCE: {value!r}. Use ISO UTC, e.g. 2026-01-21T00:00:00Z"
        ) from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return format_utc(dt)


class SyncConfig(BaseModel):
    """Everything one sync run needs. Built once, passed down explicitly."""

    hubspot_token: str
    cin7_username: str
    cin7_key: str
    cin7_base_url: str
    cin7_path: str

    lookback_hours: float = 48
    force_since: Optional[str] = None
    rows: int = Field(default=250, ge=1)
    max_pages: int = Field(default=50, ge=1)
    cin7_fields: tuple[str, ...] = DEFAULT_FIELDS
    field_map_path: Optional[Path] = None

    hubspot_base_url: str = HUBSPOT_API_URL
    unique_property: str = UNIQUE_PROPERTY
    upsert_mode: Literal["batch", "search"] = "batch"
    batch_size: int = Field(default=100, ge=1, le=100)
    currency_code: str = "USD"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SyncConfig":
        """
        Read configuration from environment (or the given mapping).
        Raises ConfigError on missing required vars or malformed numbers.
        """
        env = os.environ if environ is None else environ

        def _get(name: str) -> Optional[str]:
            value = env.get(name)
            if value is None or not value.strip():
                return None
            return value.strip()

        for name in _REQUIRED:
            if _get(name) is None:
                raise ConfigError(f"Missing env var: {name}")

        def _number(name: str, default, kind=int):
            raw = _get(name)
            if raw is None:
                return default
            try:
                return kind(raw)
            except ValueError:
                raise ConfigError(f"Invalid {name}: {raw!r}") from None

        force_since = _get("CIN7_FORCE_SINCE")
        fields_raw = _get("CIN7_FIELDS")
        field_map_path = _get("CIN7_FIELD_MAP_PATH")
        mode = (_get("HUBSPOT_UPSERT_MODE") or "batch").lower()
        if mode not in ("batch", "search"):
            raise ConfigError(f"Invalid HUBSPOT_UPSERT_MODE: {mode!r} (use batch or search)")

        batch_size = _number("HUBSPOT_BATCH_SIZE", 100)
        if not 1 <= batch_size <= 100:
            raise ConfigError(f"Invalid HUBSPOT_BATCH_SIZE: {batch_size} (1-100)")
        lookback_hours = _number("CIN7_LOOKBACK_HOURS", 48, float)
        if not (math.isfinite(lookback_hours) and 0 <= lookback_hours <= MAX_LOOKBACK_HOURS):
            raise ConfigError(
                f"Invalid CIN7_LOOKBACK_HOURS: {lookback_hours} (0-{MAX_LOOKBACK_HOURS})"
            )
        rows = _number("CIN7_ROWS", 250)
        max_pages = _number("CIN7_MAX_PAGES", 50)
        if rows < 1 or max_pages < 1:
            raise ConfigError("CIN7_ROWS and CIN7_MAX_PAGES must be positive")

        return cls(
            hubspot_token=_get("HUBSPOT_PRIVATE_APP_TOKEN"),
            cin7_username=_get("CIN7_USERNAME"),
            cin7_key=_get("CIN7_KEY"),
            cin7_base_url=_get("CIN7_BASE_URL").rstrip("/"),
            cin7_path=_get("CIN7_SALES_ORDERS_PATH"),
            lookback_hours=lookback_hours,
            force_since=parse_since(force_since) if force_since else None,
            rows=rows,
            max_pages=max_pages,
            cin7_fields=(
                tuple(f.strip() for f in fields_raw.split(",") if f.strip())
                if fields_raw
                else DEFAULT_FIELDS
            ),
            field_map_path=Path(field_map_path) if field_map_path else None,
            hubspot_base_url=(_get("HUBSPOT_BASE_URL") or HUBSPOT_API_URL).rstrip("/"),
            unique_property=_get("HUBSPOT_UNIQUE_PROPERTY") or UNIQUE_PROPERTY,
            upsert_mode=mode,
            batch_size=batch_size,
            currency_code=_get("HUBSPOT_CURRENCY_CODE") or "USD",
        )

    def resolve_since(self, now: Optional[datetime] = None) -> str:
        """Forced cutoff if set, otherwise now minus the lookback window."""
        if self.force_since:
            return self.force_since
        now = now or datetime.now(timezone.utc)
        return format_utc(now - timedelta(hours=self.lookback_hours))


def webhook_secret(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """HubSpot app client secret used to sign webhook requests."""
    env = os.environ if environ is None else environ
    return env.get("HUBSPOT_CLIENT_SECRET") or None
