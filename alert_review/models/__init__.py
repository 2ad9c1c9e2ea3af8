# Models Package
"""
Pydantic models for typed data contracts.

Aggregated alerts are immutable after creation.
"""

from alert_review.models.alert import (
    AggregatedAlert,
    AlertSource,
    Multiplier,
    MultiplierTag,
    NoMultiplier,
    ReportSection,
)

__all__ = [
    "AggregatedAlert",
    "AlertSource",
    "Multiplier",
    "MultiplierTag",
    "NoMultiplier",
    "ReportSection",
]
