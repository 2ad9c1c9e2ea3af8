# Utils Package
"""
Cross-cutting utilities.

- alert_normalizer.py: Label normalization and aggregation
- statistics.py: Totals and top-N percentages
- error_handling.py: Error taxonomy and failure policy
- logging_context.py: Run id correlation for log records
"""

from alert_review.utils.alert_normalizer import AlertNormalizer, aggregate, normalize
from alert_review.utils.error_handling import (
    AlertReviewError,
    ErrorContext,
    FetchFailurePolicy,
    ReportGenerationError,
    SchemaError,
    SourceFetchError,
    classify_error,
)
from alert_review.utils.statistics import (
    share_percentage,
    top_count_sum,
    top_percentage,
    total_count,
)

__all__ = [
    "AlertNormalizer",
    "aggregate",
    "normalize",
    "AlertReviewError",
    "ErrorContext",
    "FetchFailurePolicy",
    "ReportGenerationError",
    "SchemaError",
    "SourceFetchError",
    "classify_error",
    "share_percentage",
    "top_count_sum",
    "top_percentage",
    "total_count",
]
