from __future__ import annotations

from typing import Dict, Sequence

from tracker.models import STATUS_CLOSED, STATUS_ON_HOLD, Issue
from tracker.status import classify_display


def summarize(issues: Sequence[Issue]) -> Dict[str, int]:
    open_count = closed_count = on_hold_count = 0
    for issue in issues:
        status = classify_display(issue)
        if status == STATUS_CLOSED:
            closed_count += 1
        elif status == STATUS_ON_HOLD:
            on_hold_count += 1
        else:
            open_count += 1
    return {
        "total": len(issues),
        "open": open_count,
        "closed": closed_count,
        "on_hold": on_hold_count,
    }
