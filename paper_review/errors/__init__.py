"""Error handling for the paper review pipeline.

This module provides:
- Custom exception types for each failure class
- The retry-on-overflow policy and prompt truncation helpers
- Error handlers for logging and failure reporting
"""

from paper_review.errors.exceptions import (
    PaperReviewError,
    FatalInputError,
    MissingReferenceResource,
    CompletionError,
    ContextLengthExceeded,
    AgentError,
    AgentTimeoutError,
    AgentInvocationError,
    ValidationMismatch,
    MappingMiss,
)
from paper_review.errors.policies import (
    TruncationRetryPolicy,
    DEFAULT_TRUNCATION_POLICY,
    TRUNCATION_MARKER,
    is_context_length_error,
    truncate_text,
    preview_text,
)
from paper_review.errors.handlers import (
    create_error_response,
    detect_error_category,
    describe_failure,
    failure_message,
    log_error_with_context,
)

__all__ = [
    # Exceptions
    "PaperReviewError",
    "FatalInputError",
    "MissingReferenceResource",
    "CompletionError",
    "ContextLengthExceeded",
    "AgentError",
    "AgentTimeoutError",
    "AgentInvocationError",
    "ValidationMismatch",
    "MappingMiss",
    # Policies
    "TruncationRetryPolicy",
    "DEFAULT_TRUNCATION_POLICY",
    "TRUNCATION_MARKER",
    "is_context_length_error",
    "truncate_text",
    "preview_text",
    # Handlers
    "create_error_response",
    "detect_error_category",
    "describe_failure",
    "failure_message",
    "log_error_with_context",
]
