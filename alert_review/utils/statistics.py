"""
Statistical Utilities for Report Metrics

Totals and top-N shares over aggregated alert sets. Percentages are always
computed from the numeric counts and formatted with two decimals.
"""

import logging
from typing import Sequence

from alert_review.models.alert import AggregatedAlert

logger = logging.getLogger(__name__)


def total_count(alerts: Sequence[AggregatedAlert]) -> int:
    """Sum of all counts in the set."""
    return sum(alert.count for alert in alerts)


def top_count_sum(alerts: Sequence[AggregatedAlert], top_n: int) -> int:
    """
    Sum of counts over the ``top_n`` highest-count entries.

    The set is re-sorted (stable, descending) before slicing so callers
    need not guarantee the order.

    Raises:
        ValueError: If top_n is negative.
    """
    if top_n < 0:
        raise ValueError(f"top_n must be >= 0, got {top_n}")

    ranked = sorted(alerts, key=lambda alert: alert.count, reverse=True)
    return sum(alert.count for alert in ranked[:top_n])


def format_percentage(part: int, whole: int) -> str:
    """
    Format ``part / whole`` as a percentage with exactly two decimals.

    Returns:
        "0.00" when whole is zero.
    """
    if whole == 0:
        return "0.00"
    return f"{part / whole * 100:.2f}"


def top_percentage(alerts: Sequence[AggregatedAlert], top_n: int) -> str:
    """
    Share of the total count contributed by the ``top_n`` entries.

    Example:
        >>> alerts = [AggregatedAlert(label="disk full", count=3),
        ...           AggregatedAlert(label="cpu high", count=1)]
        >>> top_percentage(alerts, 1)
        '75.00'
    """
    total = total_count(alerts)
    if total == 0:
        logger.debug("Top percentage requested for an empty alert set")
    return format_percentage(top_count_sum(alerts, top_n), total)


def share_percentage(count: int, total: int) -> str:
    """Share of a single row, as shown in the report table cells."""
    return format_percentage(count, total)
