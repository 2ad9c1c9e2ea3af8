"""
Alert Models - Aggregated Alert Entities

Represents deduplicated alert labels with their occurrence counts, the
multiplier annotations parsed out of raw labels, and the report sections
built from them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class AlertSource(str, Enum):
    """Source of the alert records."""
    EMAIL = "email"
    PAGING = "paging"
    SPREADSHEET = "spreadsheet"


@dataclass(frozen=True)
class NoMultiplier:
    """Raw label carries no multiplier annotation."""

    value: int = 1


@dataclass(frozen=True)
class Multiplier:
    """Raw label carries a ``[Nx]`` or ``[FIRING:N]`` annotation.

    ``start``/``end`` locate the bracket token inside the searched text.
    """

    value: int
    start: int
    end: int


MultiplierTag = Union[NoMultiplier, Multiplier]


class AggregatedAlert(BaseModel):
    """
    A normalized label paired with its accumulated occurrence count.

    Unique by label within one result set.
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Normalized alert label (subject or service name)")
    count: int = Field(..., ge=1, description="Accumulated occurrence count")


class ReportSection(BaseModel):
    """
    One report section: the aggregated alerts of a single source.

    A section whose fetch failed carries ``error`` and no alerts.
    """

    source: AlertSource = Field(..., description="Source the alerts came from")
    title: str = Field(..., description="Section heading")
    subtitle: str = Field(default="", description="Section subheading")
    label_column: str = Field(default="Subject", description="Header of the label column")
    alerts: list[AggregatedAlert] = Field(default_factory=list)
    top_count: int = Field(default=5, ge=1, description="Number of rows shown")
    error: Optional[str] = Field(None, description="Fetch error, if the source failed")

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def top_alerts(self) -> list[AggregatedAlert]:
        return self.alerts[: self.top_count]

    @property
    def total_count(self) -> int:
        from alert_review.utils.statistics import total_count

        return total_count(self.alerts)

    @property
    def top_percentage(self) -> str:
        from alert_review.utils.statistics import top_percentage

        return top_percentage(self.alerts, self.top_count)
