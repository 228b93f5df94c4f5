"""WorkflowState schema for the review graph.

The state flows through every node of the LangGraph review workflow.
Inputs are set once by the caller; each node adds the artifacts it
derives and never rewrites what earlier nodes produced.
"""

from typing_extensions import TypedDict

from paper_review.state.enums import ReviewStatus
from paper_review.state.models import (
    AgentOutcome,
    Classification,
    MappedComment,
    MappingStats,
    MergeResult,
    ReviewComment,
    ReviewerAgentSpec,
    ReviewResult,
    Section,
)


class WorkflowState(TypedDict, total=False):
    """
    Central state schema for one review run.

    The state is structured in logical groups:
    1. Inputs - project identity and original sources
    2. Document context - merged text and parsed sections
    3. Review context - classification, roster and agent outcomes
    4. Output - mapped comments and the final result
    5. Run metadata - status, timings and classifier fallback flags
    """

    # =========================================================================
    # Inputs
    # =========================================================================

    project_id: str
    model: str
    sources: dict[str, str]
    root_path: str
    cached_merged_text: str

    # =========================================================================
    # Document Context
    # =========================================================================

    merge: MergeResult
    sections: list[Section]

    # =========================================================================
    # Review Context
    # =========================================================================

    classification: Classification
    roster: list[ReviewerAgentSpec]
    outcomes: list[AgentOutcome]
    comments: list[ReviewComment]

    # =========================================================================
    # Output
    # =========================================================================

    mapped_comments: list[MappedComment]
    mapping_stats: MappingStats
    result: ReviewResult

    # =========================================================================
    # Run Metadata
    # =========================================================================

    status: ReviewStatus
    stage_seconds: dict[str, float]
    classifier_fallback: bool
    classifier_error: str | None
