"""Retry policy for context-window overflows.

Completion calls are retried only when the service reports that the
prompt is too long, each time with a smaller share of the original
prompt. Any other failure surfaces immediately.
"""

import logging
from dataclasses import dataclass

from paper_review.errors.exceptions import ContextLengthExceeded

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n[... truncated due to context length limits ...]\n\n"

CONTEXT_LENGTH_MESSAGES = (
    "context_length_exceeded",
    "maximum context length",
    "exceeds the context window",
    "maximum number of tokens",
    "prompt is too long",
    "input is too long",
)


@dataclass(frozen=True)
class TruncationRetryPolicy:
    """Configuration for retry-on-overflow behavior.

    Attributes:
        fractions: Share of the original prompt sent on each attempt.
            The first entry should be 1.0 (the untouched prompt).
    """

    fractions: tuple[float, ...] = (1.0, 0.5, 0.25)

    @property
    def max_attempts(self) -> int:
        return len(self.fractions)

    def should_attempt_retry(self, error: Exception, attempt: int) -> bool:
        """Determine if another attempt should follow a failure.

        Args:
            error: The exception that occurred
            attempt: The attempt that just failed (0-indexed)

        Returns:
            True if a further, more truncated attempt should run
        """
        if attempt >= self.max_attempts - 1:
            return False
        return is_context_length_error(error)

    def prompt_for_attempt(self, prompt: str, attempt: int) -> str:
        """Return the prompt to send on the given attempt (0-indexed)."""
        fraction = self.fractions[attempt]
        if fraction >= 1.0:
            return prompt
        return truncate_text(prompt, int(len(prompt) * fraction))


DEFAULT_TRUNCATION_POLICY = TruncationRetryPolicy()


def is_context_length_error(error: BaseException) -> bool:
    """Detect a provider error that means the prompt was too long."""
    if isinstance(error, ContextLengthExceeded):
        return True
    message = str(error).lower()
    return any(token in message for token in CONTEXT_LENGTH_MESSAGES)


def truncate_text(text: str, max_chars: int) -> str:
    """Keep the head and tail of ``text`` with an elision marker between them."""
    if len(text) <= max_chars:
        return text
    half = max(max_chars // 2, 0)
    head = text[:half]
    tail = text[len(text) - half:] if half else ""
    return head + TRUNCATION_MARKER + tail


def preview_text(text: str, head_len: int = 500, tail_len: int = 500) -> str:
    """First and last characters of a long block, for log output."""
    if len(text) <= head_len + tail_len + 20:
        return text
    omitted = len(text) - head_len - tail_len
    return (
        text[:head_len]
        + f"\n... [{omitted} chars omitted] ...\n"
        + text[-tail_len:]
    )
