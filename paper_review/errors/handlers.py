"""Error handlers for graceful degradation.

This module turns exceptions into uniform log lines, response
dictionaries and short failure reasons for ``failedAgents``.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any

from paper_review.errors.exceptions import (
    AgentInvocationError,
    AgentTimeoutError,
    CompletionError,
    ContextLengthExceeded,
    FatalInputError,
    MappingMiss,
    MissingReferenceResource,
    PaperReviewError,
    ValidationMismatch,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Error Response Creation
# =============================================================================


def create_error_response(
    error: Exception,
    stage: str | None = None,
    include_traceback: bool = False,
) -> dict[str, Any]:
    """Create a standardized error response dictionary.

    Args:
        error: The exception that occurred
        stage: Pipeline stage or agent where the error occurred
        include_traceback: Whether to include full traceback

    Returns:
        Standardized error response dictionary
    """
    if isinstance(error, PaperReviewError):
        response = {
            "error_type": error.__class__.__name__,
            "category": detect_error_category(error),
            "message": error.message,
            "details": error.details,
            "recoverable": error.recoverable,
        }
    else:
        response = {
            "error_type": error.__class__.__name__,
            "category": detect_error_category(error),
            "message": str(error),
            "details": {},
            "recoverable": True,
        }

    if stage:
        response["stage"] = stage

    response["timestamp"] = datetime.now(timezone.utc).isoformat()

    if include_traceback:
        response["traceback"] = traceback.format_exc()

    return response


def detect_error_category(error: BaseException) -> str:
    """Detect error category from exception type."""
    if isinstance(error, FatalInputError):
        return "fatal_input"
    elif isinstance(error, ContextLengthExceeded):
        return "context_length_exceeded"
    elif isinstance(error, CompletionError):
        return "completion_error"
    elif isinstance(error, AgentTimeoutError):
        return "agent_timeout"
    elif isinstance(error, AgentInvocationError):
        return "agent_invocation_error"
    elif isinstance(error, MissingReferenceResource):
        return "missing_reference"
    elif isinstance(error, ValidationMismatch):
        return "validation_mismatch"
    elif isinstance(error, MappingMiss):
        return "mapping_miss"
    elif isinstance(error, PaperReviewError):
        return "paper_review_error"
    elif isinstance(error, (TimeoutError, ConnectionError)):
        return "connection_error"
    else:
        return "unknown_error"


def failure_message(error: BaseException) -> str:
    """Message of ``error`` without its class name."""
    if isinstance(error, PaperReviewError):
        return error.message
    return str(error) or error.__class__.__name__


def describe_failure(error: BaseException) -> str:
    """Short, user-facing reason for a failed agent."""
    return f"Error: {failure_message(error)}"


# =============================================================================
# Error Logging
# =============================================================================


def log_error_with_context(
    error: BaseException,
    stage: str | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with full context.

    Args:
        error: The exception that occurred
        stage: Pipeline stage or agent where the error occurred
        context: Additional context to log
        level: Logging level (default: ERROR)
    """
    parts = [f"Error: {error.__class__.__name__}: {error}"]

    if stage:
        parts.append(f"Stage: {stage}")

    if isinstance(error, PaperReviewError):
        if error.details:
            parts.append(f"Details: {error.details}")
        parts.append(f"Recoverable: {error.recoverable}")

    if context:
        parts.append(f"Context: {context}")

    logger.log(level, " | ".join(parts))
    logger.debug(f"Traceback:\n{traceback.format_exc()}")
