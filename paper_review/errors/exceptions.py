"""Custom exception types for the paper review pipeline.

This module defines a hierarchy of exceptions for categorizing failures
across merging, classification, reviewer agents and comment mapping.
Only ``FatalInputError`` aborts a run; everything else degrades to a
smaller, annotated result.
"""

from typing import Any


class PaperReviewError(Exception):
    """Base exception for all paper review errors.

    Attributes:
        message: Human-readable error description
        details: Additional error context
        recoverable: Whether the run can continue past this error
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Input Errors
# =============================================================================


class FatalInputError(PaperReviewError):
    """The project cannot be reviewed at all.

    Raised when no root document can be resolved from the source store.
    """

    def __init__(
        self,
        message: str,
        root_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if root_path:
            details["root_path"] = root_path
        super().__init__(message, details, recoverable=False)
        self.root_path = root_path


class MissingReferenceResource(PaperReviewError):
    """A skill or guideline file could not be found.

    Callers degrade to a placeholder string instead of failing.
    """

    def __init__(
        self,
        message: str,
        resource: str,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        details["resource"] = resource
        super().__init__(message, details, recoverable=True)
        self.resource = resource


# =============================================================================
# Completion Service Errors
# =============================================================================


class CompletionError(PaperReviewError):
    """Error from the structured-generation completion service."""

    def __init__(
        self,
        message: str,
        label: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        details = details or {}
        if label:
            details["label"] = label
        super().__init__(message, details, recoverable)
        self.label = label


class ContextLengthExceeded(CompletionError):
    """The prompt did not fit the model's context window.

    Recoverable by retrying with a truncated prompt.
    """

    def __init__(
        self,
        message: str,
        label: str | None = None,
        prompt_chars: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if prompt_chars:
            details["prompt_chars"] = prompt_chars
        super().__init__(message, label=label, details=details, recoverable=True)
        self.prompt_chars = prompt_chars


# =============================================================================
# Agent Errors
# =============================================================================


class AgentError(PaperReviewError):
    """Failure isolated to a single reviewer agent."""

    def __init__(
        self,
        message: str,
        agent_id: str,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        details["agent_id"] = agent_id
        super().__init__(message, details, recoverable=True)
        self.agent_id = agent_id


class AgentTimeoutError(AgentError):
    """An agent exceeded its wall-clock budget."""

    def __init__(
        self,
        agent_id: str,
        timeout_seconds: float,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        details["timeout_seconds"] = timeout_seconds
        super().__init__(
            f"Timeout after {timeout_seconds:g}s",
            agent_id=agent_id,
            details=details,
        )
        self.timeout_seconds = timeout_seconds


class AgentInvocationError(AgentError):
    """An agent's completion call or post-processing failed."""


# =============================================================================
# Comment Errors
# =============================================================================


class ValidationMismatch(PaperReviewError):
    """A comment's anchor text is not present in the text its agent saw."""

    def __init__(
        self,
        message: str,
        highlight_text: str,
        agent_name: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        details["highlight_text"] = highlight_text[:80]
        if agent_name:
            details["agent_name"] = agent_name
        super().__init__(message, details, recoverable=True)
        self.highlight_text = highlight_text
        self.agent_name = agent_name


class MappingMiss(PaperReviewError):
    """A comment's anchor text could not be located in any original file."""

    def __init__(
        self,
        message: str,
        highlight_text: str,
        expected_file: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        details["highlight_text"] = highlight_text[:80]
        if expected_file:
            details["expected_file"] = expected_file
        super().__init__(message, details, recoverable=True)
        self.highlight_text = highlight_text
        self.expected_file = expected_file
