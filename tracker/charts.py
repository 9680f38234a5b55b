from __future__ import annotations

from typing import Any, Dict, List, Optional

import altair as alt

alt.data_transformers.disable_max_rows()

STATUS_COLORS = {"Open": "#f59e0b", "Closed": "#10b981", "On Hold": "#ef4444"}
PRIORITY_COLORS = {"high": "#ef4444", "medium": "#f59e0b", "low": "#10b981", "unclassified": "#6b7280"}
SERIES_PALETTE: List[str] = [
    "#2563eb", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6",
    "#06b6d4", "#84cc16", "#f97316", "#ec4899", "#6366f1",
]


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def color_for_index(index: int) -> str:
    return SERIES_PALETTE[index % len(SERIES_PALETTE)]


class ChartRegistry:
    """Chart specs keyed by chart id; rebuilt wholesale on every recompute."""

    def __init__(self) -> None:
        self._charts: Dict[str, Dict[str, Any]] = {}

    def replace_all(self, charts: Dict[str, Dict[str, Any]]) -> None:
        self.clear()
        self._charts.update(charts)

    def clear(self) -> None:
        self._charts.clear()

    def get(self, chart_id: str) -> Optional[Dict[str, Any]]:
        return self._charts.get(chart_id)

    def ids(self) -> List[str]:
        return list(self._charts)
