"""
Error Handling Utilities

Provides:
- Source fetch / schema error taxonomy
- Failure policy for failed sources
- Error classification
- Structured error capture per report section
"""

import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class AlertReviewError(Exception):
    """Base class for alert review errors."""
    pass


class SourceFetchError(AlertReviewError):
    """Raised when an alert source cannot be fetched or parsed."""

    def __init__(self, source: str, message: str):
        super().__init__(f"[{source}] {message}")
        self.source = source
        self.message = message


class SchemaError(SourceFetchError):
    """Raised when tabular source data lacks required columns."""
    pass


class ReportGenerationError(AlertReviewError):
    """Raised after a report pass in which one or more sections failed."""

    def __init__(self, failures: dict[str, str]):
        details = "; ".join(f"{name}: {error}" for name, error in failures.items())
        super().__init__(f"{len(failures)} report section(s) failed: {details}")
        self.failures = failures


class FetchFailurePolicy(str, Enum):
    """What a report pass does with a source that failed to fetch."""
    RAISE = "raise"        # Render a failure note, fail the pass at the end
    DEGRADE = "degrade"    # Treat the source as empty, pass succeeds


def classify_error(error: Exception) -> str:
    """
    Classify an error for logging.

    Args:
        error: Exception to classify.

    Returns:
        Error category string.
    """
    error_name = type(error).__name__.lower()
    error_msg = str(error).lower()

    if isinstance(error, SchemaError):
        return "schema"

    # Network errors
    if any(x in error_name for x in ["connect", "network", "socket"]):
        return "network"
    if any(x in error_msg for x in ["connection refused", "network unreachable"]):
        return "network"

    # Timeout errors
    if "timeout" in error_name or "timed out" in error_msg:
        return "timeout"

    # Authentication errors
    if any(x in error_name for x in ["auth", "permission", "forbidden", "refresh"]):
        return "auth"
    if any(x in error_msg for x in ["401", "403", "unauthorized"]):
        return "auth"

    # Rate limiting
    if "rate" in error_msg or "429" in error_msg:
        return "rate_limit"

    # Malformed payloads
    if "validation" in error_name or "invalid" in error_msg or "missing" in error_msg:
        return "payload"

    return "unknown"


class ErrorContext:
    """
    Structured error record for one operation.

    Usage:
        ctx = ErrorContext("collect:paging")
        ctx.capture(error)

        if ctx.failed:
            print(f"{ctx.error_category}: {ctx.error}")
    """

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        self.error: Optional[Exception] = None
        self.error_category: Optional[str] = None
        self.failed = False

    def capture(self, error: Exception) -> None:
        """Record and log ``error`` with its category."""
        self.failed = True
        self.error = error
        self.error_category = classify_error(error)

        logger.error(
            f"[ErrorContext:{self.operation_name}] "
            f"Category: {self.error_category}, Error: {error}"
        )
