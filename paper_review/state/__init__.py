"""State models, enums and the workflow schema."""

from paper_review.state.enums import (
    AgentStatus,
    GENERAL_GUIDANCE_KEY,
    GUIDANCE_KEYS,
    PaperType,
    ReviewCategory,
    ReviewStatus,
    Severity,
    TextStrategy,
)
from paper_review.state.models import (
    MAX_HIGHLIGHT_CHARS,
    AgentOutcome,
    Classification,
    ClassificationResponse,
    CommentBatch,
    CommentDraft,
    FailedAgent,
    FileCategory,
    MappedComment,
    MappingStats,
    MergeResult,
    ProjectAnalysis,
    ProjectMetadata,
    ProvenanceRegion,
    ReviewComment,
    ReviewDiagnostics,
    ReviewerAgentSpec,
    ReviewResult,
    ReviewSummary,
    Section,
    SectionAssignment,
    TypeSpecificGuidance,
)
from paper_review.state.schema import WorkflowState

__all__ = [
    "AgentStatus",
    "GENERAL_GUIDANCE_KEY",
    "GUIDANCE_KEYS",
    "PaperType",
    "ReviewCategory",
    "ReviewStatus",
    "Severity",
    "TextStrategy",
    "MAX_HIGHLIGHT_CHARS",
    "AgentOutcome",
    "Classification",
    "ClassificationResponse",
    "CommentBatch",
    "CommentDraft",
    "FailedAgent",
    "FileCategory",
    "MappedComment",
    "MappingStats",
    "MergeResult",
    "ProjectAnalysis",
    "ProjectMetadata",
    "ProvenanceRegion",
    "ReviewComment",
    "ReviewDiagnostics",
    "ReviewerAgentSpec",
    "ReviewResult",
    "ReviewSummary",
    "Section",
    "SectionAssignment",
    "TypeSpecificGuidance",
    "WorkflowState",
]
