"""Language-model access for the review pipeline."""

from paper_review.llm.client import (
    AnthropicCompletionService,
    CompletionService,
    generate_with_truncation,
)

__all__ = [
    "AnthropicCompletionService",
    "CompletionService",
    "generate_with_truncation",
]
