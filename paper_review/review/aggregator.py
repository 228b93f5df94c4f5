"""Assembly of the final review result."""

import logging
from collections import Counter

from paper_review.state.enums import AgentStatus
from paper_review.state.models import (
    AgentOutcome,
    Classification,
    FailedAgent,
    MappedComment,
    ReviewDiagnostics,
    ReviewResult,
    ReviewSummary,
)

logger = logging.getLogger(__name__)


def prefix_comment(comment: MappedComment, prefix: str | None) -> MappedComment:
    """Prefix the comment text with severity and agent, unless already prefixed."""
    if not prefix or comment.comment_text.startswith(prefix):
        return comment
    return comment.model_copy(
        update={
            "comment_text": (
                f"{prefix} [{comment.severity.value}] [{comment.agent_name}] {comment.comment_text}"
            )
        }
    )


def failed_agents(outcomes: list[AgentOutcome]) -> list[FailedAgent]:
    """Skipped and failed agents, in roster order."""
    return [
        FailedAgent(
            id=outcome.agent_id,
            name=outcome.agent_name,
            reason=outcome.reason or "Unknown error",
        )
        for outcome in outcomes
        if outcome.status != AgentStatus.COMPLETED
    ]


def summarize(comments: list[MappedComment]) -> ReviewSummary:
    return ReviewSummary(
        total=len(comments),
        by_category=dict(Counter(c.category for c in comments)),
        by_severity=dict(Counter(c.severity.value for c in comments)),
    )


def aggregate_review(
    project_id: str,
    model: str,
    classification: Classification,
    mapped_comments: list[MappedComment],
    outcomes: list[AgentOutcome],
    comment_prefix: str | None = None,
    diagnostics: ReviewDiagnostics | None = None,
) -> ReviewResult:
    """
    Group comments by document and build the review result.

    Args:
        project_id: Project identifier.
        model: Model name used for the run.
        classification: The paper's classification.
        mapped_comments: Comments located in original files.
        outcomes: Settled outcome of every agent.
        comment_prefix: Prefix for delivered comment text (None disables it).
        diagnostics: Run diagnostics kept on the result.

    Returns:
        The ReviewResult.
    """
    comments = [prefix_comment(c, comment_prefix) for c in mapped_comments]

    comments_by_doc: dict[str, list[MappedComment]] = {}
    for comment in comments:
        comments_by_doc.setdefault(comment.doc_path, []).append(comment)

    result = ReviewResult(
        project_id=project_id,
        model=model,
        classification=classification,
        comments_by_doc=comments_by_doc,
        summary=summarize(comments),
        failed_agents=failed_agents(outcomes),
        diagnostics=diagnostics or ReviewDiagnostics(),
    )

    logger.info(
        f"Review assembled: {result.summary.total} comments across "
        f"{len(comments_by_doc)} document(s), {len(result.failed_agents)} failed/skipped agents"
    )
    return result
