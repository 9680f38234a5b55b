"""Application state and the controller that owns it.

The controller is the only writer of `DashboardState`. Every refresh cycle gets
a token; a load that completes after a newer refresh has started is dropped, so
a slow response can never overwrite fresher data.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from tracker.charts import ChartRegistry
from tracker.config import DashboardConfig, SourceConfig
from tracker.data import SOURCE_DEMO, LoadResult, demo_result, load_issues
from tracker.export import to_csv
from tracker.filters import IssueFilters, apply_filters, filter_options, normalize_filters
from tracker.metrics_charts import compute_charts, table_rows
from tracker.metrics_summary import summarize
from tracker.metrics_unresolved import compute_unresolved
from tracker.models import EmptyExportError, Issue


logger = logging.getLogger(__name__)

LAST_UPDATED_FORMAT = "%Y-%m-%d %H:%M:%S"

Loader = Callable[[], LoadResult]


@dataclass
class DashboardState:
    issues: List[Issue] = field(default_factory=list)
    filters: IssueFilters = field(default_factory=IssueFilters)
    filtered: List[Issue] = field(default_factory=list)
    last_updated: Optional[datetime] = None
    loading: bool = False
    source: Optional[str] = None
    message: Optional[str] = None
    refresh_token: int = 0
    charts: ChartRegistry = field(default_factory=ChartRegistry)

    @property
    def degraded(self) -> bool:
        return self.source == SOURCE_DEMO


class DashboardController:
    def __init__(
        self,
        source_config: Optional[SourceConfig] = None,
        dashboard_config: Optional[DashboardConfig] = None,
        *,
        loader: Optional[Loader] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.source_config = source_config or SourceConfig()
        self.dashboard_config = dashboard_config or DashboardConfig()
        self._loader = loader or (lambda: load_issues(self.source_config))
        self._clock = clock
        self._lock = threading.Lock()
        self.state = DashboardState()

    # ---------------- Refresh cycle ----------------
    def begin_refresh(self) -> int:
        with self._lock:
            self.state.refresh_token += 1
            self.state.loading = True
            return self.state.refresh_token

    def complete_refresh(self, token: int, result: LoadResult) -> bool:
        with self._lock:
            if token != self.state.refresh_token:
                logger.info("Discarding stale refresh %d (current %d)", token, self.state.refresh_token)
                return False
            self.state.issues = list(result.issues)
            self.state.source = result.source
            self.state.message = result.message
            self.state.last_updated = self._clock()
            self.state.loading = False
            self._recompute()
            return True

    def fail_refresh(self, token: int, error: BaseException) -> bool:
        logger.warning("Refresh %d failed: %s", token, error)
        return self.complete_refresh(token, demo_result(f"Refresh failed ({error}); showing demo data."))

    def refresh(self, loader: Optional[Loader] = None) -> bool:
        token = self.begin_refresh()
        try:
            result = (loader or self._loader)()
        except Exception as exc:
            return self.fail_refresh(token, exc)
        return self.complete_refresh(token, result)

    def needs_refresh(self, now: Optional[datetime] = None) -> bool:
        if self.state.last_updated is None:
            return True
        now = now or self._clock()
        return now - self.state.last_updated >= timedelta(seconds=self.dashboard_config.refresh_seconds)

    def refresh_if_due(self, now: Optional[datetime] = None) -> bool:
        """Periodic tick: reload only once the refresh interval has elapsed."""
        if not self.needs_refresh(now):
            return False
        return self.refresh()

    # ---------------- Filters ----------------
    def update_filters(self, raw: Optional[dict]) -> IssueFilters:
        with self._lock:
            self.state.filters = normalize_filters(raw)
            self._recompute()
            return self.state.filters

    def set_filter(self, name: str, value: Optional[str]) -> IssueFilters:
        with self._lock:
            self.state.filters = self.state.filters.with_value(name, value)
            self._recompute()
            return self.state.filters

    def set_search(self, text: str) -> IssueFilters:
        return self.set_filter("search", text)

    def reset_filters(self) -> IssueFilters:
        with self._lock:
            self.state.filters = IssueFilters()
            self._recompute()
            return self.state.filters

    def _recompute(self) -> None:
        self.state.filtered = apply_filters(self.state.issues, self.state.filters)
        payload = compute_charts(self.state.filters, self.state.filtered)
        self.state.charts.replace_all(payload["charts"])

    # ---------------- Queries ----------------
    def summary(self) -> Dict[str, int]:
        return summarize(self.state.filtered)

    def charts(self, *, now: Optional[object] = None) -> Dict[str, Any]:
        return compute_charts(self.state.filters, self.state.filtered, now=now)

    def table(self) -> Dict[str, Any]:
        return {
            "rows": table_rows(self.state.filtered),
            "showing": len(self.state.filtered),
            "total": len(self.state.issues),
        }

    def unresolved(self, *, now: Optional[object] = None) -> Dict[str, Any]:
        return compute_unresolved(self.state.issues, now=now, min_age_days=self.dashboard_config.unresolved_days)

    def filter_options(self) -> Dict[str, List[str]]:
        return filter_options(self.state.issues)

    def export_csv(self) -> str:
        if not self.state.filtered:
            raise EmptyExportError("No issues match the current filters; nothing to export.")
        return to_csv(self.state.filtered)

    def last_updated_text(self) -> str:
        if self.state.last_updated is None:
            return "Never"
        return f"Last Updated: {self.state.last_updated.strftime(LAST_UPDATED_FORMAT)}"

    def status(self) -> Dict[str, Any]:
        return {
            "last_updated": self.last_updated_text(),
            "source": self.state.source,
            "degraded": self.state.degraded,
            "message": self.state.message,
            "loading": self.state.loading,
            "total": len(self.state.issues),
            "showing": len(self.state.filtered),
        }
