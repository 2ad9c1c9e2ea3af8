"""
Logging Context - Run Correlation

Each report pass gets a run id kept in a ContextVar. RunIdFilter stamps it
on every log record so the two concurrent source fetches of one pass can be
told apart from earlier or later passes in the same log stream.

ContextVars are copied into asyncio tasks and ``asyncio.to_thread`` workers,
so the id follows both fetch branches.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

_run_id: ContextVar[str] = ContextVar("run_id", default="")


class RunIdFilter(logging.Filter):
    """Filter that adds ``run_id`` to each LogRecord."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _run_id.get() or "-"
        return True


class LoggingContext:
    """Accessors for the current run id."""

    @staticmethod
    def set_run_id(run_id: Optional[str] = None) -> str:
        """
        Set the run id, generating one if not given.

        Returns:
            The run id now in effect.
        """
        if not run_id:
            run_id = uuid.uuid4().hex[:12]
        _run_id.set(run_id)
        return run_id

    @staticmethod
    def get_run_id() -> str:
        return _run_id.get()

    @staticmethod
    def clear() -> None:
        _run_id.set("")


def install_run_id_filter(handler: logging.Handler) -> logging.Handler:
    """Attach a RunIdFilter to ``handler`` and return it."""
    handler.addFilter(RunIdFilter())
    return handler
