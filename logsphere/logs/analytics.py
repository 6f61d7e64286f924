"""Dashboard figures computed from a set of logs."""

from __future__ import annotations

from collections import Counter
from typing import Any

from logsphere.core.constants import (
    LOG_STATUSES,
    STATUS_APPROVED,
    STATUS_FINAL_APPROVED,
)

from .models import Log, total_hours


def team_log_summary(logs: list[Log]) -> dict[str, Any]:
    """Summarize logs by status and hours per week."""
    status_counts = Counter(log["status"] for log in logs)

    hours_by_week: dict[int, float] = {}
    for log in logs:
        week = log["weekNumber"]
        hours_by_week[week] = hours_by_week.get(week, 0) + total_hours(log)

    total_logs = len(logs)
    approved = status_counts[STATUS_APPROVED] + status_counts[STATUS_FINAL_APPROVED]
    approval_rate = (approved / total_logs) * 100 if total_logs > 0 else 0

    return {
        "total_logs": total_logs,
        "total_hours": sum(hours_by_week.values()),
        "status_counts": {status: status_counts[status] for status in LOG_STATUSES},
        "hours_by_week": [
            {"week": week, "hours": hours_by_week[week]}
            for week in sorted(hours_by_week)
        ],
        "approval_rate": approval_rate,
    }
