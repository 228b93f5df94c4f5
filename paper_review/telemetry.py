"""Observer interface for review progress and diagnostics.

The pipeline reports what it does through a ``ReviewObserver`` passed in
by the caller. ``LoggingObserver`` forwards every event to ``logging``;
``ReviewObserver`` itself ignores everything and can be subclassed to
collect events, stream progress to a UI, or both.
"""

import logging

from paper_review.errors import preview_text
from paper_review.state.enums import AgentStatus
from paper_review.state.models import AgentOutcome

logger = logging.getLogger("paper_review")


class ReviewObserver:
    """No-op base observer."""

    def stage_started(self, stage: str) -> None:
        pass

    def stage_completed(self, stage: str, elapsed: float, **counts) -> None:
        pass

    def agent_settled(self, outcome: AgentOutcome) -> None:
        pass

    def llm_attempt(
        self,
        label: str,
        attempt: int,
        max_attempts: int,
        system_chars: int,
        prompt_chars: int,
        fraction: float,
    ) -> None:
        pass

    def prompt(self, label: str, system: str, prompt: str) -> None:
        pass

    def response(self, label: str, response: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass


class LoggingObserver(ReviewObserver):
    """Observer that writes every event to the ``paper_review`` logger."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def stage_started(self, stage: str) -> None:
        self.log.info(f"[{stage}] Starting")

    def stage_completed(self, stage: str, elapsed: float, **counts) -> None:
        detail = ", ".join(f"{key}={value}" for key, value in counts.items())
        self.log.info(f"[{stage}] Complete in {elapsed:.2f}s" + (f" ({detail})" if detail else ""))

    def agent_settled(self, outcome: AgentOutcome) -> None:
        if outcome.status == AgentStatus.COMPLETED:
            self.log.info(
                f"[{outcome.agent_name}] {len(outcome.comments)}/{outcome.raw_comment_count} "
                f"comments kept in {outcome.elapsed_seconds:.1f}s"
            )
        elif outcome.status == AgentStatus.SKIPPED:
            self.log.info(f"[{outcome.agent_name}] SKIPPED: {outcome.reason}")
        else:
            self.log.error(f"[{outcome.agent_name}] FAILED: {outcome.reason}")

    def llm_attempt(
        self,
        label: str,
        attempt: int,
        max_attempts: int,
        system_chars: int,
        prompt_chars: int,
        fraction: float,
    ) -> None:
        message = (
            f"[{label}] Attempt {attempt}/{max_attempts}: "
            f"system {system_chars} chars, prompt {prompt_chars} chars"
        )
        if fraction < 1.0:
            message += f" (truncated to {round(fraction * 100)}%)"
        self.log.info(message)

    def prompt(self, label: str, system: str, prompt: str) -> None:
        self.log.info(f"[{label}] System prompt:\n{system}")
        self.log.info(f"[{label}] User prompt:\n{prompt}")

    def response(self, label: str, response: str) -> None:
        self.log.info(f"[{label}] Response:\n{preview_text(response)}")

    def warning(self, message: str) -> None:
        self.log.warning(message)
