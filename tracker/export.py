from __future__ import annotations

import time
from typing import Optional, Sequence

from tracker.columns import CANONICAL_FIELDS
from tracker.models import EmptyExportError, Issue


EXPORT_MEDIA_TYPE = "text/csv"


def _quote(value: str) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def to_csv(issues: Sequence[Issue]) -> str:
    """Serialize issues with every value quoted under a canonical header row."""
    if not issues:
        raise EmptyExportError("No issues to export")
    lines = [",".join(f.header for f in CANONICAL_FIELDS)]
    for issue in issues:
        lines.append(",".join(_quote(getattr(issue, f.attr)) for f in CANONICAL_FIELDS))
    return "\n".join(lines)


def export_filename(now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"issues_export_{now_ms}.csv"
