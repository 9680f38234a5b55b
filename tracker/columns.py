from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple

from tracker.models import Issue


@dataclass(frozen=True)
class CanonicalField:
    attr: str
    header: str
    candidates: Tuple[str, ...]


# Canonical field order; also the export column order.
CANONICAL_FIELDS: Tuple[CanonicalField, ...] = (
    CanonicalField("issue_id", "Issue ID", ("Issue ID", "ID", "IssueID", "Issue_ID")),
    CanonicalField("client", "Client", ("Client", "Customer", "Company", "Client Name")),
    CanonicalField("city", "City", ("City", "Location", "Place")),
    CanonicalField("issue", "Issue", ("Issue", "Problem", "Description", "Issue Description")),
    CanonicalField(
        "vehicle_number",
        "Vehicle Number",
        ("Vehicle Number", "Vehicle No", "VehicleNumber", "Vehicle", "Vehicle_Number", "VehicleNo"),
    ),
    CanonicalField("priority", "Priority (High/Med/Low)", ("Priority (High/Med/Low)", "Priority", "Severity")),
    CanonicalField("assigned_to", "Assigned To", ("Assigned To", "Assignee", "Assigned", "Owner")),
    CanonicalField(
        "raised_at",
        "Timestamp Issues Raised",
        ("Timestamp Issues Raised", "Date", "Created Date", "Timestamp"),
    ),
    CanonicalField("resolved", "Resolved Y/N", ("Resolved Y/N", "Resolved", "Status", "Resolution Status")),
    CanonicalField(
        "next_follow_up",
        "Next Follow Up Date",
        ("Next Follow Up Date", "Follow Up", "Next Follow Up", "Follow Up Date"),
    ),
)

FIELDS_BY_ATTR: Dict[str, CanonicalField] = {f.attr: f for f in CANONICAL_FIELDS}
CANONICAL_HEADERS: List[str] = [f.header for f in CANONICAL_FIELDS]
CLIENT_CANDIDATES = FIELDS_BY_ATTR["client"].candidates


def _value(raw: object) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def resolve(row: Mapping[str, object], candidates: Sequence[str]) -> str:
    """Return the first non-empty value whose column matches a candidate name.

    Each candidate is tried in order against exact, case-insensitive and then
    substring (either direction, case-insensitive) column matches before moving
    on to the next candidate.
    """
    for name in candidates:
        value = _value(row.get(name))
        if name in row and value:
            return value

        lowered = name.lower()
        for key, raw in row.items():
            if key.lower() == lowered:
                value = _value(raw)
                if value:
                    return value

        for key, raw in row.items():
            key_l = key.lower()
            if not key_l:
                continue
            if key_l in lowered or lowered in key_l:
                value = _value(raw)
                if value:
                    return value
    return ""


def issue_record(issue: Issue) -> Dict[str, str]:
    """Issue as an ordered mapping keyed by canonical header."""
    return {f.header: getattr(issue, f.attr) for f in CANONICAL_FIELDS}
