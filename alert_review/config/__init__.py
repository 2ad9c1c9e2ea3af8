# Config Package
"""
Configuration for the alert review report.

Usage:
    from alert_review.config import load_config

    config = load_config()
    config.validate_required()
"""

from alert_review.config.settings import (
    CacheConfig,
    Config,
    GmailConfig,
    GoogleConfig,
    ReportConfig,
    VictorOpsConfig,
    load_config,
)

__all__ = [
    "CacheConfig",
    "Config",
    "GmailConfig",
    "GoogleConfig",
    "ReportConfig",
    "VictorOpsConfig",
    "load_config",
]
