from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import httpx

from tracker.columns import CANONICAL_FIELDS, CLIENT_CANDIDATES, resolve
from tracker.config import SourceConfig
from tracker.csv_parser import split_csv_document
from tracker.models import Issue, IssueDataError, SourceFetchError


logger = logging.getLogger(__name__)

SOURCE_SHEET = "sheet"
SOURCE_FILE = "file"
SOURCE_DEMO = "demo"

PLACEHOLDER_CLIENTS = {"", "undefined", "null", "unknown", "n/a"}

DEMO_ISSUES: List[Issue] = [
    Issue(
        issue_id="ISS-001",
        client="Acme Logistics",
        city="Mumbai",
        issue="GPS not working",
        vehicle_number="MH01AB1234",
        priority="High",
        assigned_to="Ravi",
        raised_at="2025-01-06",
        resolved="N",
        next_follow_up="",
    ),
    Issue(
        issue_id="ISS-002",
        client="Blue Dart Movers",
        city="Pune",
        issue="Fuel sensor fault",
        vehicle_number="MH12CD5678",
        priority="Medium",
        assigned_to="Priya",
        raised_at="2025-01-18",
        resolved="Y",
        next_follow_up="",
    ),
    Issue(
        issue_id="ISS-003",
        client="Citylink Transport",
        city="Delhi",
        issue="Device offline",
        vehicle_number="DL03EF9012",
        priority="Low",
        assigned_to="Ravi",
        raised_at="2025-02-02",
        resolved="N",
        next_follow_up="2025-02-20",
    ),
    Issue(
        issue_id="ISS-004",
        client="Acme Logistics",
        city="Mumbai",
        issue="Device offline",
        vehicle_number="MH01GH3456",
        priority="High",
        assigned_to="Arjun",
        raised_at="2025-02-14",
        resolved="N",
        next_follow_up="",
    ),
    Issue(
        issue_id="ISS-005",
        client="Deccan Freight",
        city="Hyderabad",
        issue="GPS not working",
        vehicle_number="TS09IJ7890",
        priority="Medium",
        assigned_to="Priya",
        raised_at="2025-03-03",
        resolved="Y",
        next_follow_up="",
    ),
]


@dataclass(frozen=True)
class LoadResult:
    issues: List[Issue]
    source: str
    message: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.source == SOURCE_DEMO


def is_usable_client(value: str) -> bool:
    s = (value or "").strip()
    if len(s) <= 1:
        return False
    return s.lower() not in PLACEHOLDER_CLIENTS


def row_mapping(headers: Sequence[str], row: Sequence[str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for idx, header in enumerate(headers):
        key = header.strip()
        if key in out:
            continue
        out[key] = row[idx] if idx < len(row) else ""
    return out


def normalize(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> List[Issue]:
    """Turn parsed CSV rows into Issue records, dropping rows without a client."""
    issues: List[Issue] = []
    dropped = 0
    for row in rows:
        raw = row_mapping(headers, row)
        client = resolve(raw, CLIENT_CANDIDATES)
        if not is_usable_client(client):
            dropped += 1
            continue
        values = {f.attr: resolve(raw, f.candidates) for f in CANONICAL_FIELDS if f.attr != "client"}
        issues.append(Issue(client=client, **values))
    if dropped:
        logger.debug("Dropped %d row(s) without a usable client", dropped)
    return issues


def parse_issues_csv(text: str) -> List[Issue]:
    headers, rows = split_csv_document(text)
    if not headers or not rows:
        raise IssueDataError("Sheet export has no data rows")
    issues = normalize(headers, rows)
    if not issues:
        raise IssueDataError("No rows with a client were found")
    return issues


def fetch_csv_text(url: str, *, timeout: float = 15.0, client: Optional[httpx.Client] = None) -> str:
    try:
        if client is not None:
            response = client.get(url, timeout=timeout, follow_redirects=True)
        else:
            response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise SourceFetchError(f"Failed to fetch issue sheet: {exc}") from exc
    return response.text


def read_csv_file(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise SourceFetchError(f"Failed to read {path}: {exc}") from exc


def demo_result(message: str) -> LoadResult:
    return LoadResult(issues=list(DEMO_ISSUES), source=SOURCE_DEMO, message=message)


def load_issues(config: Optional[SourceConfig] = None, *, client: Optional[httpx.Client] = None) -> LoadResult:
    """Load issues from the configured source, falling back to the demo dataset."""
    config = config or SourceConfig()
    try:
        if config.csv_path:
            source = SOURCE_FILE
            text = read_csv_file(config.csv_path)
        else:
            url = config.export_url()
            if not url:
                return demo_result("No issue sheet configured; showing demo data.")
            source = SOURCE_SHEET
            text = fetch_csv_text(url, timeout=config.fetch_timeout, client=client)
        issues = parse_issues_csv(text)
    except (SourceFetchError, IssueDataError) as exc:
        logger.warning("Falling back to demo data: %s", exc)
        return demo_result(f"Could not load issue data ({exc}); showing demo data.")
    logger.info("Loaded %d issue(s) from %s source", len(issues), source)
    return LoadResult(issues=issues, source=source)
