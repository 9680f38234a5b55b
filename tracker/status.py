"""Status classification.

Two predicates live here on purpose. `classify_display` is the permissive
classifier behind the summary cards and the status chart; it also accepts
"true"/"closed". `matches_status_filter` is the narrower rule applied by the
status dropdown and only understands yes/y/no/n. Both agree on the common
Y/N spellings; they differ for tokens such as "true", "closed" or "open".
"""
from __future__ import annotations

from tracker.models import ALL, STATUS_CLOSED, STATUS_ON_HOLD, STATUS_OPEN, Issue


CLOSED_TOKENS = frozenset({"yes", "y", "true", "closed"})
FILTER_CLOSED_TOKENS = frozenset({"yes", "y"})
FILTER_NOT_RESOLVED_TOKENS = frozenset({"no", "n"})


def resolved_token(issue: Issue) -> str:
    return (issue.resolved or "").strip().lower()


def follow_up_value(issue: Issue) -> str:
    return (issue.next_follow_up or "").strip()


def classify_display(issue: Issue) -> str:
    if resolved_token(issue) in CLOSED_TOKENS:
        return STATUS_CLOSED
    if follow_up_value(issue):
        return STATUS_ON_HOLD
    return STATUS_OPEN


def is_resolved(issue: Issue) -> bool:
    """Binary closed check used by the trend and aging views."""
    return resolved_token(issue) in FILTER_CLOSED_TOKENS


def matches_status_filter(issue: Issue, status: str) -> bool:
    if status == ALL:
        return True
    r = resolved_token(issue)
    f = follow_up_value(issue)
    if status == STATUS_OPEN:
        return (r in FILTER_NOT_RESOLVED_TOKENS or r == "") and f == ""
    if status == STATUS_CLOSED:
        return r in FILTER_CLOSED_TOKENS
    if status == STATUS_ON_HOLD:
        return r in FILTER_NOT_RESOLVED_TOKENS and f != ""
    return False
