import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from tracker.config import configure_logging, get_config
from tracker.data import load_issues
from tracker.export import EXPORT_MEDIA_TYPE, export_filename
from tracker.metrics_charts import oldest_open_by_assignee
from tracker.models import EmptyExportError, STATUSES
from tracker.state import DashboardController

alt.data_transformers.disable_max_rows()
config = get_config()
configure_logging(config.dashboard.log_level)

FILTER_LABELS = {
    "city": "City",
    "client": "Client",
    "assigned_to": "Assigned To",
    "status": "Status",
    "priority": "Priority",
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        .priority-high {color: #dc2626;font-weight: 600;}
        .priority-medium {color: #d97706;font-weight: 600;}
        .priority-low {color: #059669;font-weight: 600;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(filters: Dict[str, str]) -> str:
    chips = [f"Search: {filters['search']}" if filters["search"] else "Search: none"]
    for key, label in FILTER_LABELS.items():
        chips.append(f"{label}: {filters[key]}")
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_chart(spec: Optional[Dict[str, Any]], empty_text: str = "No data for the selected filters."):
    if not spec:
        st.info(empty_text)
        return
    st.vega_lite_chart(spec, use_container_width=True)


# ---------- State ----------
@st.cache_data(ttl=config.dashboard.refresh_seconds, show_spinner=False)
def _load_cached():
    return load_issues(config.source)


def get_controller() -> DashboardController:
    if "controller" not in st.session_state:
        st.session_state["controller"] = DashboardController(config.source, config.dashboard, loader=_load_cached)
    return st.session_state["controller"]


def render_kpi_tiles(summary: Dict[str, int]):
    cols = st.columns(4)
    cols[0].metric("Total Issues", f"{summary['total']:,}")
    cols[1].metric("Open", f"{summary['open']:,}")
    cols[2].metric("Closed", f"{summary['closed']:,}")
    cols[3].metric("On Hold", f"{summary['on_hold']:,}")


def render_oldest(rows: List[Dict[str, Any]]):
    if not rows:
        st.info("No open issues found")
        return
    for row in rows:
        st.markdown(
            f"**{row['assigned_to']}**: {row['issue'] or 'No description'}  \n"
            f"Issue ID: {row['issue_id'] or 'N/A'} | Client: {row['client'] or 'N/A'} | "
            f"<span style='color:#dc2626;font-weight:600;'>{row['age_days']} days old</span>",
            unsafe_allow_html=True,
        )


def render_dashboard_tab(controller: DashboardController):
    render_kpi_tiles(controller.summary())
    charts = controller.state.charts

    c1, c2 = st.columns(2)
    with c1:
        with card("Status Distribution"):
            render_chart(charts.get("status"))
    with c2:
        with card("Priority Distribution"):
            render_chart(charts.get("priority"))

    c3, c4 = st.columns(2)
    with c3:
        with card("City-wise Issues"):
            render_chart(charts.get("city"))
    with c4:
        with card("Monthly Trends"):
            render_chart(charts.get("monthly"))

    with card("Issue Types by Assignee"):
        render_chart(charts.get("assignee_issue_types"))

    with card("Oldest Open Issue per Assignee"):
        render_chart(charts.get("oldest_open"), empty_text="No open issues found")
        render_oldest(oldest_open_by_assignee(controller.state.filtered))

    table = controller.table()
    with card("Issues"):
        st.caption(f"Showing {table['showing']} of {table['total']} issues")
        if table["rows"]:
            st.dataframe(pd.DataFrame(table["rows"]), hide_index=True, use_container_width=True)
        else:
            st.info("No issues match the selected filters.")


def render_unresolved_tab(controller: DashboardController):
    data = controller.unresolved()
    st.metric(f"Unresolved Issues ({data['min_age_days']}+ days)", data["count"])
    if not data["groups"]:
        st.info(f"No unresolved issues older than {data['min_age_days']} days found")
        return
    for group in data["groups"]:
        with st.expander(f"{group['assigned_to']}: {group['count']} issues", expanded=True):
            df = pd.DataFrame(group["issues"]).rename(
                columns={
                    "issue_id": "Issue ID",
                    "client": "Client",
                    "city": "City",
                    "issue": "Issue",
                    "vehicle_number": "Vehicle Number",
                    "priority": "Priority",
                    "raised_at": "Date Raised",
                    "age_days": "Age (days)",
                    "next_follow_up": "Next Follow Up",
                }
            )
            st.dataframe(df.drop(columns=["priority_level"], errors="ignore"), hide_index=True, use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Issue Tracker Dashboard", layout="wide")
inject_base_styles()

controller = get_controller()
if controller.needs_refresh():
    with st.spinner("Loading issues..."):
        controller.refresh()

state = controller.state
options = controller.filter_options()

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### Filters")
    search = st.text_input("Search", value=state.filters.search, key="filter_search")
    selections: Dict[str, str] = {"search": search}
    for key, label in FILTER_LABELS.items():
        choices = ["All"] + (list(STATUSES) if key == "status" else options.get(key, []))
        current = getattr(state.filters, key)
        index = choices.index(current) if current in choices else 0
        selections[key] = st.selectbox(label, options=choices, index=index, key=f"filter_{key}")

    st.markdown("---")
    btn_cols = st.columns(2)
    reset_clicked = btn_cols[0].button("Reset")
    refresh_clicked = btn_cols[1].button("Refresh")

if reset_clicked:
    controller.reset_filters()
    for key in ("search",) + tuple(FILTER_LABELS):
        st.session_state.pop(f"filter_{key}", None)
    st.rerun()
if refresh_clicked:
    _load_cached.clear()
    controller.refresh()
    st.rerun()

controller.update_filters(selections)

top = st.container()
c1, c2 = top.columns([8, 2])
with c1:
    st.markdown(
        "<div class='app-top-bar'><div class='page-title'>Issue Tracker Dashboard</div></div>",
        unsafe_allow_html=True,
    )
with c2:
    try:
        csv_text = controller.export_csv()
    except EmptyExportError as exc:
        st.warning(str(exc))
    else:
        st.download_button(
            "Export CSV",
            data=csv_text.encode("utf-8"),
            file_name=export_filename(),
            mime=EXPORT_MEDIA_TYPE,
        )
st.markdown(f"<div class='chip-row'>{format_filter_summary(selections)}</div>", unsafe_allow_html=True)


# Re-runs on its own so an idle page still picks up new sheet data.
@st.fragment(run_every=config.dashboard.refresh_seconds)
def render_live_view(controller: DashboardController):
    controller.refresh_if_due()
    st.caption(controller.last_updated_text())
    if controller.state.degraded:
        st.warning(controller.state.message or "Showing demo data.")

    dashboard_tab, unresolved_tab = st.tabs(["Dashboard", "Unresolved Issues"])
    with dashboard_tab:
        render_dashboard_tab(controller)
    with unresolved_tab:
        render_unresolved_tab(controller)


render_live_view(controller)
