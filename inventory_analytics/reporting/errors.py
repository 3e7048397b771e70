"""
Report error taxonomy.

Every error raised by the reporting engine carries a ``kind`` so callers can
branch on it instead of matching messages.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Failure classes of the reporting engine"""
    INVALID_CONFIGURATION = "invalid_configuration"  # Rejected before computing
    DATA_UNAVAILABLE = "data_unavailable"  # Data source could not supply records
    COMPUTATION_FAILURE = "computation_failure"  # Internal invariant broken
    INVALID_STATE = "invalid_state"  # Lifecycle command on a report in the wrong state


class ReportError(Exception):
    """Base class for reporting errors"""

    kind: ErrorKind = ErrorKind.COMPUTATION_FAILURE

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class InvalidConfiguration(ReportError):
    """Malformed report configuration: bad dates, unknown enum, bad thresholds"""

    kind = ErrorKind.INVALID_CONFIGURATION


class DataUnavailable(ReportError):
    """The data source cannot return snapshots or activity for the request"""

    kind = ErrorKind.DATA_UNAVAILABLE


class ComputationFailure(ReportError):
    """An internal invariant was violated. This is a defect, never user input."""

    kind = ErrorKind.COMPUTATION_FAILURE


class InvalidReportState(ReportError):
    """A lifecycle command was applied to a report in the wrong state"""

    kind = ErrorKind.INVALID_STATE
