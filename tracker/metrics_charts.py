from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional, Sequence

import altair as alt
import pandas as pd

from tracker.charts import PRIORITY_COLORS, STATUS_COLORS, color_for_index, to_vega_spec
from tracker.columns import issue_record
from tracker.filters import IssueFilters
from tracker.models import STATUSES, Issue, age_in_days, format_display_date, parse_timestamp, to_now
from tracker.status import classify_display, is_resolved


UNKNOWN = "Unknown"
UNASSIGNED = "Unassigned"
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def priority_level(priority: str) -> str:
    p = (priority or "").lower()
    if "high" in p:
        return "high"
    if "med" in p:
        return "medium"
    if "low" in p:
        return "low"
    return "unclassified"


def assignee_label(issue: Issue) -> str:
    return issue.assigned_to or UNASSIGNED


def status_counts(issues: Sequence[Issue]) -> Dict[str, int]:
    counts = {s: 0 for s in STATUSES}
    for issue in issues:
        counts[classify_display(issue)] += 1
    return counts


def priority_counts(issues: Sequence[Issue]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for issue in issues:
        label = issue.priority or UNKNOWN
        counts[label] = counts.get(label, 0) + 1
    out = []
    for label, count in counts.items():
        level = priority_level(label)
        out.append({"priority": label, "count": count, "level": level, "color": PRIORITY_COLORS[level]})
    return out


def city_counts(issues: Sequence[Issue]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for issue in issues:
        label = issue.city or UNKNOWN
        counts[label] = counts.get(label, 0) + 1
    return [{"city": label, "count": count} for label, count in counts.items()]


def month_label(raised_at: str) -> str:
    ts = parse_timestamp(raised_at)
    if ts is None:
        return UNKNOWN
    return MONTH_NAMES[ts.month - 1]


def monthly_trend(issues: Sequence[Issue]) -> List[Dict[str, Any]]:
    buckets: Dict[str, Dict[str, int]] = {}
    for issue in issues:
        bucket = buckets.setdefault(month_label(issue.raised_at), {"total": 0, "open": 0, "closed": 0})
        bucket["total"] += 1
        if is_resolved(issue):
            bucket["closed"] += 1
        else:
            bucket["open"] += 1
    return [{"month": month, **counts} for month, counts in buckets.items()]


def assignee_issue_types(issues: Sequence[Issue]) -> Dict[str, Any]:
    nested: Dict[str, Dict[str, int]] = {}
    issue_types: List[str] = []
    for issue in issues:
        assignee = assignee_label(issue)
        issue_type = issue.issue or UNKNOWN
        per_type = nested.setdefault(assignee, {})
        per_type[issue_type] = per_type.get(issue_type, 0) + 1
        if issue_type not in issue_types:
            issue_types.append(issue_type)

    assignees = list(nested)
    series = [
        {
            "issue_type": issue_type,
            "color": color_for_index(idx),
            "counts": [nested[a].get(issue_type, 0) for a in assignees],
        }
        for idx, issue_type in enumerate(issue_types)
    ]
    rows = [
        {"assigned_to": a, "issue": t, "count": c}
        for a, per_type in nested.items()
        for t, c in per_type.items()
    ]
    return {"assignees": assignees, "issue_types": issue_types, "series": series, "rows": rows}


def oldest_open_by_assignee(issues: Sequence[Issue], now: Optional[object] = None) -> List[Dict[str, Any]]:
    """Earliest-raised unresolved issue per assignee, with its age in days."""
    now_ts = to_now(now)
    oldest: Dict[str, tuple] = {}
    for issue in issues:
        if is_resolved(issue):
            continue
        raised = parse_timestamp(issue.raised_at)
        if raised is None:
            continue
        assignee = assignee_label(issue)
        current = oldest.get(assignee)
        if current is None or raised < current[1]:
            oldest[assignee] = (issue, raised)

    out = []
    for assignee, (issue, raised) in oldest.items():
        out.append(
            {
                "assigned_to": assignee,
                "issue_id": issue.issue_id,
                "client": issue.client,
                "issue": issue.issue,
                "raised_at": issue.raised_at,
                "age_days": age_in_days(raised, now_ts),
            }
        )
    return out


def _status_chart(counts: Dict[str, int]) -> alt.Chart:
    df = pd.DataFrame({"status": list(counts), "count": list(counts.values())})
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=60)
        .encode(
            theta=alt.Theta("count:Q"),
            color=alt.Color(
                "status:N",
                scale=alt.Scale(domain=list(STATUS_COLORS), range=list(STATUS_COLORS.values())),
                legend=alt.Legend(orient="bottom"),
            ),
            tooltip=["status", "count"],
        )
        .properties(height=260)
    )


def _priority_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(rows)
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("priority:N", sort=None, title="Priority"),
            y=alt.Y("count:Q", title="Issues", axis=alt.Axis(tickMinStep=1)),
            color=alt.Color("color:N", scale=None),
            tooltip=["priority", "count"],
        )
        .properties(height=260)
    )


def _city_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(rows)
    return (
        alt.Chart(df)
        .mark_bar(color="#2563eb")
        .encode(
            x=alt.X("city:N", sort=None, title="City"),
            y=alt.Y("count:Q", title="Issues", axis=alt.Axis(tickMinStep=1)),
            tooltip=["city", "count"],
        )
        .properties(height=260)
    )


def _monthly_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(rows)
    long_df = df.melt(id_vars="month", value_vars=["total", "open", "closed"], var_name="metric", value_name="issues")
    hover = alt.selection_point(fields=["metric"], on="mouseover", empty="all")
    return (
        alt.Chart(long_df)
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            x=alt.X("month:N", sort=df["month"].tolist(), title="Month", axis=alt.Axis(grid=False)),
            y=alt.Y("issues:Q", title="Issues", axis=alt.Axis(tickMinStep=1, gridDash=[4, 4])),
            color=alt.Color(
                "metric:N",
                scale=alt.Scale(domain=["total", "open", "closed"], range=["#2563eb", "#f59e0b", "#10b981"]),
                title="Metric",
            ),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=["month", "metric", "issues"],
        )
        .add_params(hover)
        .properties(height=260)
    )


def _assignee_types_chart(payload: Dict[str, Any]) -> alt.Chart:
    df = pd.DataFrame(payload["rows"])
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("assigned_to:N", sort=payload["assignees"], title="Assigned To"),
            y=alt.Y("sum(count):Q", stack="zero", title="Issues", axis=alt.Axis(tickMinStep=1)),
            color=alt.Color(
                "issue:N",
                scale=alt.Scale(domain=payload["issue_types"], range=[s["color"] for s in payload["series"]]),
                title="Issue",
            ),
            tooltip=["assigned_to", "issue", "count"],
        )
        .properties(height=300)
    )


def _oldest_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(rows)
    return (
        alt.Chart(df)
        .mark_bar(color="#dc2626")
        .encode(
            x=alt.X("assigned_to:N", sort=None, title="Assigned To"),
            y=alt.Y("age_days:Q", title="Age (days)"),
            tooltip=["assigned_to", "issue_id", "client", "issue", "age_days"],
        )
        .properties(height=260)
    )


def compute_charts(filters: IssueFilters, issues: Sequence[Issue], *, now: Optional[object] = None) -> Dict[str, Any]:
    by_status = status_counts(issues)
    by_priority = priority_counts(issues)
    by_city = city_counts(issues)
    by_month = monthly_trend(issues)
    by_assignee = assignee_issue_types(issues)
    oldest = oldest_open_by_assignee(issues, now=now)

    charts: Dict[str, Any] = {}
    if issues:
        charts = {
            "status": to_vega_spec(_status_chart(by_status)),
            "priority": to_vega_spec(_priority_chart(by_priority)),
            "city": to_vega_spec(_city_chart(by_city)),
            "monthly": to_vega_spec(_monthly_chart(by_month)),
            "assignee_issue_types": to_vega_spec(_assignee_types_chart(by_assignee)),
        }
        if oldest:
            charts["oldest_open"] = to_vega_spec(_oldest_chart(oldest))

    return {
        "filters": asdict(filters),
        "status": by_status,
        "priority": by_priority,
        "city": by_city,
        "monthly": by_month,
        "assignee_issue_types": by_assignee,
        "oldest_open": oldest,
        "charts": charts,
    }


def table_rows(issues: Sequence[Issue]) -> List[Dict[str, Any]]:
    """Rows for the issues table, with display status and formatted dates."""
    rows = []
    for issue in issues:
        row = issue_record(issue)
        row["Status"] = classify_display(issue)
        row["Priority Level"] = priority_level(issue.priority)
        row["Timestamp Issues Raised"] = format_display_date(issue.raised_at)
        row["Next Follow Up Date"] = format_display_date(issue.next_follow_up)
        rows.append(row)
    return rows
