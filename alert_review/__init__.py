# Alert Review - Main Package
"""
Alert review report generator.

This package provides:
- Alert label normalization and aggregation
- Read-through caching of aggregated alerts
- Collectors for Gmail, VictorOps and spreadsheet sources
- Google Docs / Sheets report rendering
"""

__version__ = "0.1.0"
