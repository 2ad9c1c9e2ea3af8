# Agents Package
"""
Report pipeline components.

Pipeline: AlertCollector (per source, cached, concurrent) → Report (sections, metrics, rendering)
"""

from alert_review.agents.alert_collector import AlertCollectorAgent
from alert_review.agents.report_agent import ReportAgent, ReportRenderer

__all__ = [
    "AlertCollectorAgent",
    "ReportAgent",
    "ReportRenderer",
]
