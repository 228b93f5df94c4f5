"""Anchor validation for reviewer comments.

A comment is kept only when its highlight text occurs verbatim in the
text its agent reviewed. Models sometimes emit LaTeX commands inside JSON
strings without escaping the backslash, so ``\\begin`` arrives as a
backspace followed by ``egin``. One repair reverses that before a comment
is discarded.
"""

import logging

from paper_review.errors import ValidationMismatch
from paper_review.state.models import (
    MAX_HIGHLIGHT_CHARS,
    CommentDraft,
    ReviewComment,
    ReviewerAgentSpec,
)

logger = logging.getLogger(__name__)

# Control characters produced by unescaped \b, \f, \t and \r
ESCAPE_REPAIRS = (
    ("\x08", "\\b"),
    ("\x0c", "\\f"),
    ("\t", "\\t"),
    ("\r", "\\r"),
)


def repair_escaped_latex(text: str) -> str:
    """Restore backslash sequences swallowed by JSON string decoding."""
    for control, sequence in ESCAPE_REPAIRS:
        text = text.replace(control, sequence)
    return text


def anchor_in_text(highlight_text: str, review_text: str) -> str:
    """
    Return the form of ``highlight_text`` that occurs in ``review_text``.

    Raises:
        ValidationMismatch: If neither the text nor its repair occurs, or
            the anchor is empty or too long to be a highlight.
    """
    _check_length(highlight_text)
    if highlight_text in review_text:
        return highlight_text

    repaired = repair_escaped_latex(highlight_text)
    if repaired != highlight_text and repaired in review_text:
        # Repair grows each control character into two characters
        _check_length(repaired)
        logger.debug(f"Repaired JSON-escaped highlightText: {repaired[:80]!r}")
        return repaired

    raise ValidationMismatch(
        "highlightText not found in review text",
        highlight_text=highlight_text,
    )


def _check_length(anchor: str) -> None:
    if not anchor or len(anchor) > MAX_HIGHLIGHT_CHARS:
        raise ValidationMismatch(
            f"Highlight text must be 1-{MAX_HIGHLIGHT_CHARS} chars, got {len(anchor)}",
            highlight_text=anchor,
        )


def validate_comments(
    drafts: list[CommentDraft],
    review_text: str,
    spec: ReviewerAgentSpec,
    max_comments: int | None = None,
) -> list[ReviewComment]:
    """
    Keep the comments anchored in the reviewed text.

    Args:
        drafts: Comments returned by the agent.
        review_text: The exact text the agent was shown.
        spec: The agent, recorded on each kept comment.
        max_comments: Keep at most this many validated comments.

    Returns:
        Validated comments in model order, tagged with the agent's id as
        category and its display name.
    """
    validated = []
    for draft in drafts:
        try:
            anchor = anchor_in_text(draft.highlight_text, review_text)
        except ValidationMismatch as e:
            logger.warning(
                f"[{spec.name}] {e.message}, discarding: "
                f"{draft.highlight_text[:80]!r} (comment: {draft.comment[:60]!r})"
            )
            continue
        validated.append(
            ReviewComment(
                highlight_text=anchor,
                comment_text=draft.comment,
                severity=draft.severity,
                category=spec.id,
                agent_name=spec.name,
            )
        )

    discarded = len(drafts) - len(validated)
    logger.info(
        f"[{spec.name}] Validation: {len(validated)}/{len(drafts)} comments kept"
        + (f" ({discarded} discarded)" if discarded else "")
    )

    if max_comments is not None and len(validated) > max_comments:
        logger.info(f"[{spec.name}] Keeping first {max_comments} of {len(validated)} comments")
        validated = validated[:max_comments]
    return validated
