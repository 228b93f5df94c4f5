"""Tests for the error handling module.

This module tests:
- Custom exception hierarchy
- The truncation retry policy and text helpers
- Error handlers
"""

import logging

import pytest

from paper_review.errors import (
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
    TruncationRetryPolicy,
    DEFAULT_TRUNCATION_POLICY,
    TRUNCATION_MARKER,
    is_context_length_error,
    truncate_text,
    preview_text,
    create_error_response,
    detect_error_category,
    describe_failure,
    failure_message,
    log_error_with_context,
)


# =============================================================================
# Exception Tests
# =============================================================================


class TestPaperReviewError:
    """Tests for the base PaperReviewError exception."""

    def test_basic_creation(self):
        """Test creating a basic error."""
        error = PaperReviewError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.details == {}
        assert error.recoverable is True

    def test_to_dict(self):
        """Test serializing an error."""
        error = PaperReviewError("Boom", details={"key": "value"}, recoverable=False)
        assert error.to_dict() == {
            "type": "PaperReviewError",
            "message": "Boom",
            "details": {"key": "value"},
            "recoverable": False,
        }


class TestExceptionHierarchy:
    """Tests for the specific exception types."""

    def test_fatal_input_is_not_recoverable(self):
        error = FatalInputError("No root", root_path="main.tex")
        assert error.recoverable is False
        assert error.details["root_path"] == "main.tex"

    def test_missing_reference_records_resource(self):
        error = MissingReferenceResource("Missing", resource="03_paper_sections/abstract.md")
        assert error.resource == "03_paper_sections/abstract.md"
        assert error.recoverable is True

    def test_context_length_is_completion_error(self):
        error = ContextLengthExceeded("Too long", label="reviewer-methods", prompt_chars=1000)
        assert isinstance(error, CompletionError)
        assert error.details == {"label": "reviewer-methods", "prompt_chars": 1000}

    def test_timeout_message(self):
        error = AgentTimeoutError("methods", 120.0)
        assert isinstance(error, AgentError)
        assert error.message == "Timeout after 120s"
        assert error.details["agent_id"] == "methods"

    def test_invocation_error_is_agent_error(self):
        error = AgentInvocationError("Failed", agent_id="abstract")
        assert isinstance(error, AgentError)
        assert error.agent_id == "abstract"

    def test_comment_errors_truncate_highlight_in_details(self):
        text = "x" * 150
        assert len(ValidationMismatch("miss", highlight_text=text).details["highlight_text"]) == 80
        miss = MappingMiss("miss", highlight_text="abc", expected_file="a.tex")
        assert miss.details["expected_file"] == "a.tex"


# =============================================================================
# Policy Tests
# =============================================================================


class TestTruncationRetryPolicy:
    """Tests for TruncationRetryPolicy."""

    def test_default_schedule(self):
        assert DEFAULT_TRUNCATION_POLICY.fractions == (1.0, 0.5, 0.25)
        assert DEFAULT_TRUNCATION_POLICY.max_attempts == 3

    def test_retries_context_length_errors(self):
        policy = TruncationRetryPolicy()
        assert policy.should_attempt_retry(ContextLengthExceeded("too long"), 0) is True
        assert policy.should_attempt_retry(ContextLengthExceeded("too long"), 1) is True

    def test_no_retry_on_last_attempt(self):
        policy = TruncationRetryPolicy()
        assert policy.should_attempt_retry(ContextLengthExceeded("too long"), 2) is False

    def test_no_retry_on_other_errors(self):
        policy = TruncationRetryPolicy()
        assert policy.should_attempt_retry(CompletionError("rate limited"), 0) is False
        assert policy.should_attempt_retry(ValueError("bad"), 0) is False

    def test_prompt_for_attempt(self):
        policy = TruncationRetryPolicy()
        prompt = "a" * 100
        assert policy.prompt_for_attempt(prompt, 0) == prompt
        half = policy.prompt_for_attempt(prompt, 1)
        assert half == "a" * 25 + TRUNCATION_MARKER + "a" * 25


class TestContextLengthDetection:
    """Tests for is_context_length_error."""

    @pytest.mark.parametrize(
        "message",
        [
            "Error code: context_length_exceeded",
            "This model's maximum context length is 8192 tokens",
            "Input exceeds the context window",
            "prompt is too long: 250000 tokens > 200000 maximum",
        ],
    )
    def test_provider_messages(self, message):
        assert is_context_length_error(RuntimeError(message)) is True

    def test_other_errors(self):
        assert is_context_length_error(RuntimeError("rate limit exceeded")) is False


class TestTextHelpers:
    """Tests for truncate_text and preview_text."""

    def test_truncate_keeps_short_text(self):
        assert truncate_text("short", 10) == "short"

    def test_truncate_keeps_head_and_tail(self):
        text = "HEAD" + "m" * 92 + "TAIL"
        truncated = truncate_text(text, 8)
        assert truncated.startswith("HEAD")
        assert truncated.endswith("TAIL")
        assert TRUNCATION_MARKER in truncated

    def test_preview_short_text_unchanged(self):
        assert preview_text("abc") == "abc"

    def test_preview_long_text(self):
        text = "a" * 500 + "b" * 100 + "c" * 500
        preview = preview_text(text)
        assert preview.startswith("a" * 500)
        assert preview.endswith("c" * 500)
        assert "[100 chars omitted]" in preview


# =============================================================================
# Handler Tests
# =============================================================================


class TestHandlers:
    """Tests for error handlers."""

    def test_detect_error_category(self):
        assert detect_error_category(FatalInputError("x")) == "fatal_input"
        assert detect_error_category(ContextLengthExceeded("x")) == "context_length_exceeded"
        assert detect_error_category(CompletionError("x")) == "completion_error"
        assert detect_error_category(AgentTimeoutError("a", 1)) == "agent_timeout"
        assert detect_error_category(ValueError("x")) == "unknown_error"

    def test_create_error_response(self):
        response = create_error_response(CompletionError("Bad response", label="classifier"), stage="classify")
        assert response["error_type"] == "CompletionError"
        assert response["category"] == "completion_error"
        assert response["stage"] == "classify"
        assert response["details"] == {"label": "classifier"}
        assert "timestamp" in response

    def test_create_error_response_for_plain_exception(self):
        response = create_error_response(ValueError("nope"))
        assert response["message"] == "nope"
        assert response["recoverable"] is True

    def test_describe_failure(self):
        assert describe_failure(AgentTimeoutError("a", 120)) == "Error: Timeout after 120s"
        assert describe_failure(RuntimeError("boom")) == "Error: boom"
        assert describe_failure(RuntimeError()) == "Error: RuntimeError"

    def test_failure_message(self):
        assert failure_message(CompletionError("Bad", label="classifier")) == "Bad"
        assert failure_message(ValueError()) == "ValueError"

    def test_log_error_with_context(self, caplog):
        with caplog.at_level(logging.ERROR):
            log_error_with_context(
                CompletionError("Bad", label="classifier"),
                stage="classify",
                context={"attempt": 1},
            )
        assert "Stage: classify" in caplog.text
        assert "Context: {'attempt': 1}" in caplog.text
