from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence

from tracker.metrics_charts import assignee_label, priority_level
from tracker.models import Issue, age_in_days, format_display_date, parse_timestamp, to_now
from tracker.status import is_resolved


DEFAULT_MIN_AGE_DAYS = 20


def compute_unresolved(
    issues: Sequence[Issue],
    *,
    now: Optional[object] = None,
    min_age_days: int = DEFAULT_MIN_AGE_DAYS,
) -> Dict[str, Any]:
    """Unresolved issues at least `min_age_days` old, grouped by assignee.

    Issues without a parseable raised timestamp are left out. Groups and their
    members keep the order in which they were first seen.
    """
    now_ts = to_now(now)
    threshold = timedelta(days=min_age_days)
    groups: Dict[str, List[Dict[str, Any]]] = {}
    count = 0
    for issue in issues:
        if is_resolved(issue):
            continue
        raised = parse_timestamp(issue.raised_at)
        if raised is None or now_ts - raised < threshold:
            continue
        groups.setdefault(assignee_label(issue), []).append(
            {
                "issue_id": issue.issue_id,
                "client": issue.client,
                "city": issue.city,
                "issue": issue.issue,
                "vehicle_number": issue.vehicle_number,
                "priority": issue.priority,
                "priority_level": priority_level(issue.priority),
                "raised_at": format_display_date(issue.raised_at),
                "age_days": age_in_days(raised, now_ts),
                "next_follow_up": format_display_date(issue.next_follow_up),
            }
        )
        count += 1

    return {
        "count": count,
        "min_age_days": min_age_days,
        "groups": [
            {"assigned_to": assignee, "count": len(members), "issues": members}
            for assignee, members in groups.items()
        ],
    }
