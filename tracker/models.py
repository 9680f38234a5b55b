from __future__ import annotations

from dataclasses import astuple, dataclass
from typing import Optional

import pandas as pd


STATUS_OPEN = "Open"
STATUS_CLOSED = "Closed"
STATUS_ON_HOLD = "On Hold"
STATUSES = (STATUS_OPEN, STATUS_CLOSED, STATUS_ON_HOLD)
ALL = "All"

# pandas reads these as the current instant; sheet cells holding them are not dates.
RELATIVE_DATE_WORDS = frozenset({"now", "today"})


class IssueDataError(ValueError):
    """Raised when a sheet export yields no usable issues."""


class SourceFetchError(RuntimeError):
    """Raised when the issue sheet cannot be downloaded."""


class EmptyExportError(ValueError):
    """Raised when an export is requested for an empty issue view."""


@dataclass(frozen=True)
class Issue:
    issue_id: str = ""
    client: str = ""
    city: str = ""
    issue: str = ""
    vehicle_number: str = ""
    priority: str = ""
    assigned_to: str = ""
    raised_at: str = ""
    resolved: str = ""
    next_follow_up: str = ""

    def values(self) -> tuple:
        return astuple(self)

    def searchable_text(self) -> str:
        return " ".join(self.values()).lower()


def parse_timestamp(value: object) -> Optional[pd.Timestamp]:
    """Parse a loosely formatted date string; None when blank or unparseable."""
    if value is None:
        return None
    s = str(value).strip()
    if not s or s.lower() in RELATIVE_DATE_WORDS:
        return None
    try:
        ts = pd.to_datetime(s, errors="coerce", dayfirst=False)
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts


def format_display_date(value: str) -> str:
    ts = parse_timestamp(value)
    if ts is None:
        return value or ""
    return f"{ts.strftime('%b')} {ts.day}, {ts.year}"


def age_in_days(raised: pd.Timestamp, now: pd.Timestamp) -> int:
    return int((now - raised).total_seconds() // 86400)


def to_now(now: Optional[object] = None) -> pd.Timestamp:
    if now is None:
        return pd.Timestamp.now()
    ts = pd.Timestamp(now)
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts

