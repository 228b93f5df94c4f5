"""Tests for the completion service and retry-on-overflow."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from paper_review.errors import CompletionError, ContextLengthExceeded, TruncationRetryPolicy
from paper_review.errors.policies import TRUNCATION_MARKER
from paper_review.llm import AnthropicCompletionService, generate_with_truncation
from paper_review.state.models import CommentBatch

PROMPT = "x" * 400


def _service_returning(outcome) -> AnthropicCompletionService:
    """Service whose structured model resolves to ``outcome`` (or raises it)."""
    service = AnthropicCompletionService(model_name="test-model", api_key="test-key")
    structured = MagicMock()
    if isinstance(outcome, BaseException):
        structured.ainvoke = AsyncMock(side_effect=outcome)
    else:
        structured.ainvoke = AsyncMock(return_value=outcome)
    model = MagicMock()
    model.with_structured_output.return_value = structured
    service.create_model = MagicMock(return_value=model)
    return service


# =============================================================================
# generate_with_truncation
# =============================================================================


class TestGenerateWithTruncation:
    """Tests for the truncation retry loop."""

    async def _generate(self, completion, observer, **kwargs):
        return await generate_with_truncation(
            completion,
            system="system",
            prompt=PROMPT,
            schema=CommentBatch,
            temperature=0.4,
            label="reviewer-test",
            observer=observer,
            **kwargs,
        )

    async def test_first_attempt_succeeds(self, observer, make_completion):
        completion = make_completion({"reviewer-test": {"comments": []}})
        result = await self._generate(completion, observer)

        assert result == CommentBatch()
        assert completion.calls[0]["prompt"] == PROMPT
        assert observer.of_kind("llm_attempt") == [("llm_attempt", "reviewer-test", 1, 400, 1.0)]

    async def test_shrinks_prompt_on_each_overflow(self, observer, make_completion):
        completion = make_completion(
            {
                "reviewer-test": [
                    ContextLengthExceeded("too long"),
                    ContextLengthExceeded("still too long"),
                    {"comments": []},
                ]
            }
        )
        await self._generate(completion, observer)

        prompts = [call["prompt"] for call in completion.calls]
        assert prompts[0] == PROMPT
        assert prompts[1] == "x" * 100 + TRUNCATION_MARKER + "x" * 100
        assert prompts[2] == "x" * 50 + TRUNCATION_MARKER + "x" * 50
        assert [e[4] for e in observer.of_kind("llm_attempt")] == [1.0, 0.5, 0.25]
        assert len(observer.of_kind("warning")) == 2

    async def test_overflow_on_last_attempt_raises(self, observer, make_completion):
        completion = make_completion(
            {"reviewer-test": [ContextLengthExceeded("too long")] * 3}
        )
        with pytest.raises(ContextLengthExceeded):
            await self._generate(completion, observer)
        assert len(completion.calls) == 3

    async def test_other_errors_not_retried(self, observer, make_completion):
        completion = make_completion({"reviewer-test": CompletionError("bad request")})
        with pytest.raises(CompletionError):
            await self._generate(completion, observer)
        assert len(completion.calls) == 1

    async def test_custom_policy(self, observer, make_completion):
        completion = make_completion({"reviewer-test": ContextLengthExceeded("too long")})
        with pytest.raises(ContextLengthExceeded):
            await self._generate(completion, observer, policy=TruncationRetryPolicy(fractions=(1.0,)))
        assert len(completion.calls) == 1

    async def test_prompt_logging(self, observer, make_completion):
        completion = make_completion({"reviewer-test": {"comments": []}})
        await self._generate(completion, observer, log_prompts=True, log_prompt="short")

        assert observer.of_kind("prompt") == [("prompt", "reviewer-test")]
        assert observer.of_kind("response") == [("response", "reviewer-test")]


# =============================================================================
# AnthropicCompletionService
# =============================================================================


class TestAnthropicCompletionService:
    """Tests for error classification and result handling."""

    async def _generate(self, service):
        return await service.generate(
            system="system",
            prompt="prompt",
            schema=CommentBatch,
            temperature=0.3,
            label="classifier",
        )

    async def test_returns_schema_instance(self):
        batch = CommentBatch()
        service = _service_returning(batch)

        assert await self._generate(service) is batch
        service.create_model.assert_called_once_with(0.3)
        service.create_model.return_value.with_structured_output.assert_called_once_with(CommentBatch)

    async def test_validates_dict_output(self):
        service = _service_returning(
            {"comments": [{"highlightText": "a", "comment": "b", "severity": "critical"}]}
        )
        result = await self._generate(service)
        assert result.comments[0].highlight_text == "a"

    async def test_context_length_error(self):
        service = _service_returning(
            RuntimeError("prompt is too long: 250000 tokens > 200000 maximum")
        )
        with pytest.raises(ContextLengthExceeded) as exc_info:
            await self._generate(service)
        assert exc_info.value.details["label"] == "classifier"

    async def test_other_error(self):
        service = _service_returning(RuntimeError("boom"))
        with pytest.raises(CompletionError) as exc_info:
            await self._generate(service)
        assert not isinstance(exc_info.value, ContextLengthExceeded)
        assert exc_info.value.message == "RuntimeError: boom"

    async def test_empty_output(self):
        service = _service_returning(None)
        with pytest.raises(CompletionError):
            await self._generate(service)
