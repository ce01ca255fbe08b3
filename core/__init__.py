"""Framework-agnostic plumbing — JSON logging and error sinks.

This package must NEVER import from ``grambot/``.
"""

from core.error_sink import ErrorSink, LoggerErrorSink
from core.logger import GrambotLogger

__all__ = [
    "ErrorSink",
    "LoggerErrorSink",
    "GrambotLogger",
]
