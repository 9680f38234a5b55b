from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from tracker.models import ALL, STATUSES, Issue
from tracker.status import matches_status_filter


# Dropdown filters compared by exact equality against the Issue attribute.
EQUALITY_FILTERS = ("city", "client", "assigned_to", "priority")
FILTER_NAMES = ("search",) + EQUALITY_FILTERS + ("status",)


@dataclass(frozen=True)
class IssueFilters:
    search: str = ""
    city: str = ALL
    client: str = ALL
    assigned_to: str = ALL
    priority: str = ALL
    status: str = ALL

    def is_default(self) -> bool:
        return self == IssueFilters()

    def with_value(self, name: str, value: Optional[str]) -> "IssueFilters":
        if name not in FILTER_NAMES:
            raise KeyError(f"Unknown filter: {name}")
        return normalize_filters({**asdict(self), name: value})


def _choice(value: object) -> str:
    if value is None:
        return ALL
    s = str(value)
    return s if s.strip() else ALL


def normalize_filters(raw: Optional[dict]) -> IssueFilters:
    raw = raw or {}
    search = raw.get("search")
    search = str(search) if search is not None else ""
    return IssueFilters(
        search=search,
        city=_choice(raw.get("city")),
        client=_choice(raw.get("client")),
        assigned_to=_choice(raw.get("assigned_to")),
        priority=_choice(raw.get("priority")),
        status=_choice(raw.get("status")),
    )


def matches(issue: Issue, filters: IssueFilters) -> bool:
    if filters.search:
        if filters.search.lower() not in issue.searchable_text():
            return False
    for name in EQUALITY_FILTERS:
        wanted = getattr(filters, name)
        if wanted != ALL and getattr(issue, name) != wanted:
            return False
    if filters.status != ALL and not matches_status_filter(issue, filters.status):
        return False
    return True


def apply_filters(issues: Sequence[Issue], filters: IssueFilters) -> List[Issue]:
    """Order-preserving subset of `issues` passing every active filter."""
    if filters.is_default():
        return list(issues)
    return [issue for issue in issues if matches(issue, filters)]


def _unique_sorted(values: Iterable[str]) -> List[str]:
    return sorted({v for v in values if v})


def filter_options(issues: Sequence[Issue]) -> Dict[str, List[str]]:
    return {
        "city": _unique_sorted(i.city for i in issues),
        "client": _unique_sorted(i.client for i in issues),
        "assigned_to": _unique_sorted(i.assigned_to for i in issues),
        "priority": _unique_sorted(i.priority for i in issues),
        "status": list(STATUSES),
    }

