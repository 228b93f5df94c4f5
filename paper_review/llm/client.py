"""Structured-generation completion service.

The pipeline only needs one capability from a language model: send a
system prompt, a user prompt and a pydantic schema, get back an instance
of that schema, or a classified failure (``ContextLengthExceeded`` versus
any other ``CompletionError``). ``AnthropicCompletionService`` provides it
on top of ``ChatAnthropic.with_structured_output``.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import TypeVar

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel

from paper_review.config import settings
from paper_review.errors import (
    CompletionError,
    ContextLengthExceeded,
    DEFAULT_TRUNCATION_POLICY,
    TruncationRetryPolicy,
    is_context_length_error,
    preview_text,
)
from paper_review.telemetry import ReviewObserver

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class CompletionService(ABC):
    """Prompt plus schema in, schema instance out."""

    @abstractmethod
    async def generate(
        self,
        *,
        system: str,
        prompt: str,
        schema: type[SchemaT],
        temperature: float,
        label: str,
    ) -> SchemaT:
        """
        Produce a schema-validated object.

        Raises:
            ContextLengthExceeded: If the prompt does not fit the model.
            CompletionError: For any other failure.
        """


class AnthropicCompletionService(CompletionService):
    """Completion service backed by Anthropic Claude via LangChain."""

    def __init__(
        self,
        model_name: str | None = None,
        max_tokens: int = 8192,
        api_key: str | None = None,
    ):
        """
        Initialize the service.

        Args:
            model_name: Claude model to use (default from settings).
            max_tokens: Maximum tokens in each response.
            api_key: Anthropic API key (default from settings).
        """
        self.model_name = model_name or settings.default_model
        self.max_tokens = max_tokens
        self.api_key = api_key or settings.anthropic_api_key

    def create_model(self, temperature: float) -> ChatAnthropic:
        """Create a ChatAnthropic instance for one call."""
        return ChatAnthropic(
            model=self.model_name,
            temperature=temperature,
            max_tokens=self.max_tokens,
            api_key=self.api_key,
        )

    async def generate(
        self,
        *,
        system: str,
        prompt: str,
        schema: type[SchemaT],
        temperature: float,
        label: str,
    ) -> SchemaT:
        structured = self.create_model(temperature).with_structured_output(schema)
        messages = [
            SystemMessage(content=system),
            HumanMessage(content=prompt),
        ]

        try:
            result = await structured.ainvoke(messages)
        except Exception as e:
            if is_context_length_error(e):
                raise ContextLengthExceeded(
                    f"Context length exceeded: {e}",
                    label=label,
                    prompt_chars=len(prompt),
                ) from e
            raise CompletionError(f"{e.__class__.__name__}: {e}", label=label) from e

        if result is None:
            raise CompletionError("Model returned no structured output", label=label)
        if isinstance(result, dict):
            result = schema.model_validate(result)
        return result


async def generate_with_truncation(
    service: CompletionService,
    *,
    system: str,
    prompt: str,
    schema: type[SchemaT],
    temperature: float,
    label: str,
    observer: ReviewObserver,
    policy: TruncationRetryPolicy = DEFAULT_TRUNCATION_POLICY,
    log_prompts: bool = False,
    log_system: str | None = None,
    log_prompt: str | None = None,
) -> SchemaT:
    """
    Call the completion service, shrinking the prompt on context overflow.

    The first attempt sends the full prompt. When the service reports a
    context-length failure, the next attempt sends the prompt truncated to
    the policy's next fraction (head and tail kept, middle elided). Any
    other failure, or an overflow on the last attempt, is re-raised.

    Args:
        service: Completion service to call.
        system: System prompt (never truncated).
        prompt: User prompt.
        schema: Pydantic model describing the expected output.
        temperature: Sampling temperature.
        label: Name used in logs and errors.
        observer: Receives attempt notices and optional prompt dumps.
        policy: Truncation schedule.
        log_prompts: Dump prompts and responses through the observer.
        log_system: Log-friendly system prompt (long blocks previewed).
        log_prompt: Log-friendly user prompt (long blocks previewed).

    Returns:
        The schema instance from the first successful attempt.
    """
    for attempt in range(policy.max_attempts):
        fraction = policy.fractions[attempt]
        attempt_prompt = policy.prompt_for_attempt(prompt, attempt)

        observer.llm_attempt(
            label,
            attempt + 1,
            policy.max_attempts,
            len(system),
            len(attempt_prompt),
            fraction,
        )
        if log_prompts:
            shown_prompt = preview_text(attempt_prompt) if fraction < 1.0 else (log_prompt or prompt)
            observer.prompt(label, log_system or system, shown_prompt)

        start = time.monotonic()
        try:
            result = await service.generate(
                system=system,
                prompt=attempt_prompt,
                schema=schema,
                temperature=temperature,
                label=label,
            )
        except Exception as e:
            elapsed = time.monotonic() - start
            if policy.should_attempt_retry(e, attempt):
                next_percent = round(policy.fractions[attempt + 1] * 100)
                observer.warning(
                    f"[{label}] Context length exceeded after {elapsed:.1f}s "
                    f"(prompt {len(attempt_prompt)} chars). "
                    f"Retrying with ~{next_percent}% of original prompt"
                )
                continue
            logger.error(f"[{label}] FAILED after {elapsed:.1f}s: {e}")
            raise

        elapsed = time.monotonic() - start
        logger.debug(f"[{label}] Completed in {elapsed:.1f}s")
        if log_prompts:
            observer.response(label, result.model_dump_json(by_alias=True))
        return result

    raise CompletionError(f"No attempts configured for {label}", label=label)
