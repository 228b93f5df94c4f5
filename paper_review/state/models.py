"""Pydantic models for the paper review workflow.

These models cover the whole run: merged documents and their provenance,
parsed sections, the classifier's output, reviewer agent descriptors,
comments before and after remapping, and the final cached result.

Models that end up in cached JSON use camelCase aliases so that
``model_dump(by_alias=True)`` produces the stable external key names.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from paper_review.state.enums import (
    AgentStatus,
    PaperType,
    ReviewCategory,
    Severity,
    TextStrategy,
)

MAX_HIGHLIGHT_CHARS = 200


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Document Models
# =============================================================================


class ProvenanceRegion(BaseModel):
    """A character range of the merged text copied from one original file."""

    model_config = ConfigDict(frozen=True)

    file: str = Field(..., description="Normalized path of the original file")
    start_offset: int = Field(..., ge=0, description="Inclusive start in merged text")
    end_offset: int = Field(..., ge=0, description="Exclusive end in merged text")

    def contains(self, position: int) -> bool:
        """Check whether a merged-text offset falls inside this region."""
        return self.start_offset <= position < self.end_offset


class MergeResult(BaseModel):
    """Output of inlining every include of a project into one text."""

    root_path: str = Field(..., description="Normalized root document path")
    merged_text: str = Field(default="", description="The merged document")
    regions: list[ProvenanceRegion] = Field(
        default_factory=list,
        description="Provenance of text copied from included files"
    )
    ordered_files: list[str] = Field(
        default_factory=list,
        description="Files in the order they were inlined, root first"
    )
    referenced_figures: list[str] = Field(default_factory=list)
    referenced_bib_files: list[str] = Field(default_factory=list)
    referenced_packages: list[str] = Field(default_factory=list)


class Section(BaseModel):
    """A heading-delimited span of the merged document."""

    model_config = ConfigDict(frozen=True)

    title: str
    level: int = Field(..., ge=0, le=3, description="0 = abstract, 1-3 = header depth")
    content: str
    char_start: int = Field(..., ge=0)
    char_end: int = Field(..., ge=0)

    @property
    def is_abstract(self) -> bool:
        return self.title.strip().lower() == "abstract"


# =============================================================================
# Classification Models
# =============================================================================


class TypeSpecificGuidance(CamelModel):
    """Reviewing criteria generated for the classified paper type."""

    abstract_focus: str = Field(
        default="",
        description="Type-specific reviewing criteria for the abstract reviewer"
    )
    introduction_focus: str = Field(default="")
    methods_focus: str = Field(default="")
    results_focus: str = Field(default="")
    overall_notes: str = Field(
        default="",
        description="Any additional type-specific notes for all reviewers"
    )

    def get(self, key: str | None) -> str:
        """Guidance text for a key, empty when the key is unknown."""
        if not key:
            return ""
        return getattr(self, key, "") or ""


class SectionAssignment(CamelModel):
    """One section-to-category assignment returned by the classifier."""

    section_title: str = Field(
        ...,
        description="The EXACT section title from the outline"
    )
    category: ReviewCategory = Field(
        ...,
        description=(
            "Which reviewer this section should be assigned to. "
            "abstract = abstract, introduction = introduction, "
            "related_work = related work / background / prior work, "
            "methods = methods / approach / methodology / dataset construction / "
            "task formulation / preliminaries, "
            "results = results / experiments / analysis / discussion / RQ sections / evaluation, "
            "conclusion = conclusion / limitations / ethical considerations / acknowledgments, "
            "appendix = all the appendix sections"
        ),
    )


class ClassificationResponse(CamelModel):
    """Structured output requested from the classifier call."""

    paper_type: PaperType
    paper_type_summary: str = Field(
        ...,
        description="One-sentence description of why this paper type was chosen"
    )
    section_assignments: list[SectionAssignment] = Field(
        default_factory=list,
        description=(
            "An assignment for EVERY section in the outline. Each section title "
            "must appear exactly once. No section should be left unassigned."
        ),
    )
    type_specific_guidance: TypeSpecificGuidance = Field(
        default_factory=TypeSpecificGuidance,
        description=(
            "Reviewing criteria generated specifically for this paper type, "
            "to be injected into each reviewer"
        ),
    )


class Classification(CamelModel):
    """Paper type, section-to-category mapping and per-type guidance."""

    paper_type: PaperType
    paper_type_summary: str = ""
    section_mapping: dict[str, list[str]] = Field(default_factory=dict)
    type_specific_guidance: TypeSpecificGuidance = Field(
        default_factory=TypeSpecificGuidance
    )

    def titles_for(self, category: ReviewCategory | str) -> list[str]:
        """Section titles assigned to a category."""
        key = category.value if isinstance(category, ReviewCategory) else category
        return list(self.section_mapping.get(key, []))

    def category_of(self, title: str) -> str | None:
        """Category a section title is assigned to, if any."""
        for category, titles in self.section_mapping.items():
            if title in titles:
                return category
        return None


# =============================================================================
# Reviewer Agent Models
# =============================================================================


class ReviewerAgentSpec(BaseModel):
    """Descriptor for one reviewer agent in the roster."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    strategy: TextStrategy
    skill_files: tuple[str, ...] = ()
    section_categories: tuple[ReviewCategory, ...] | None = None
    guidance_key: str | None = None
    system_preamble: str = ""

    @model_validator(mode="after")
    def _check_strategy(self) -> "ReviewerAgentSpec":
        """Category lists belong to the section strategy and only to it."""
        if self.strategy == TextStrategy.SECTIONS and not self.section_categories:
            raise ValueError(f"Agent {self.id!r} uses sections but names no categories")
        if self.strategy != TextStrategy.SECTIONS and self.section_categories is not None:
            raise ValueError(f"Agent {self.id!r} names categories but does not use sections")
        return self


class CommentDraft(CamelModel):
    """A comment as returned by a reviewer agent, before validation."""

    highlight_text: str = Field(
        ...,
        description=(
            "The EXACT text from the paper to highlight. "
            "Must be a verbatim substring (1-200 chars)."
        ),
    )
    comment: str = Field(
        ...,
        description="Constructive review comment or suggestion for this highlighted text"
    )
    severity: Severity = Field(
        ...,
        description="suggestion = nice-to-have, warning = should fix, critical = must fix"
    )


class CommentBatch(BaseModel):
    """Structured output requested from each reviewer agent."""

    comments: list[CommentDraft] = Field(default_factory=list)


class ReviewComment(CamelModel):
    """A validated comment anchored in the text its agent reviewed."""

    highlight_text: str = Field(..., min_length=1, max_length=MAX_HIGHLIGHT_CHARS)
    comment_text: str
    severity: Severity
    category: str = Field(..., description="Id of the agent that produced the comment")
    agent_name: str


class MappedComment(ReviewComment):
    """A comment located in its original file."""

    doc_path: str
    start_offset: int = Field(..., ge=0)
    end_offset: int = Field(..., ge=0)


class AgentOutcome(BaseModel):
    """Settled result of one reviewer agent."""

    agent_id: str
    agent_name: str
    status: AgentStatus
    comments: list[ReviewComment] = Field(default_factory=list)
    reason: str | None = None
    raw_comment_count: int = 0
    elapsed_seconds: float = 0.0

    @classmethod
    def completed(
        cls,
        spec: ReviewerAgentSpec,
        comments: list[ReviewComment],
        raw_comment_count: int,
    ) -> "AgentOutcome":
        return cls(
            agent_id=spec.id,
            agent_name=spec.name,
            status=AgentStatus.COMPLETED,
            comments=comments,
            raw_comment_count=raw_comment_count,
        )

    @classmethod
    def skipped(cls, spec: ReviewerAgentSpec, reason: str) -> "AgentOutcome":
        return cls(
            agent_id=spec.id,
            agent_name=spec.name,
            status=AgentStatus.SKIPPED,
            reason=reason,
        )

    @classmethod
    def failed(cls, spec: ReviewerAgentSpec, reason: str) -> "AgentOutcome":
        return cls(
            agent_id=spec.id,
            agent_name=spec.name,
            status=AgentStatus.FAILED,
            reason=reason,
        )


# =============================================================================
# Result Models
# =============================================================================


class FailedAgent(CamelModel):
    """An agent that was skipped or failed, with the reason."""

    id: str
    name: str
    reason: str


class ReviewSummary(CamelModel):
    """Counts over the delivered comments."""

    total: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)
    by_severity: dict[str, int] = Field(default_factory=dict)


class MappingStats(CamelModel):
    """How comments were located in original files."""

    direct: int = 0
    fallback: int = 0
    not_in_merged: int = 0
    unmapped: int = 0

    @property
    def mapped(self) -> int:
        return self.direct + self.fallback

    @property
    def dropped(self) -> int:
        return self.not_in_merged + self.unmapped


class ReviewDiagnostics(CamelModel):
    """Per-stage counts and timings kept alongside a result."""

    stage_seconds: dict[str, float] = Field(default_factory=dict)
    section_count: int = 0
    agent_count: int = 0
    raw_comment_count: int = 0
    validated_comment_count: int = 0
    mapping: MappingStats = Field(default_factory=MappingStats)
    classifier_fallback: bool = False
    classifier_error: str | None = None


class ReviewResult(CamelModel):
    """Final output of a review run."""

    project_id: str
    model: str
    reviewed_at: datetime = Field(default_factory=_utc_now)
    classification: Classification
    comments_by_doc: dict[str, list[MappedComment]] = Field(default_factory=dict)
    summary: ReviewSummary = Field(default_factory=ReviewSummary)
    failed_agents: list[FailedAgent] = Field(default_factory=list)
    diagnostics: ReviewDiagnostics = Field(
        default_factory=ReviewDiagnostics,
        exclude=True,
    )

    def all_comments(self) -> list[MappedComment]:
        """Flatten comments across documents."""
        return [c for comments in self.comments_by_doc.values() for c in comments]

    def to_cache_dict(self) -> dict:
        """JSON-ready dictionary with the external key names."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# Project Analysis Models
# =============================================================================


class FileCategory(CamelModel):
    """One bucket of project files."""

    description: str
    files: list[str] = Field(default_factory=list)
    references: list[str] | None = None
    count: int = 0

    @model_validator(mode="after")
    def _sync_count(self) -> "FileCategory":
        self.count = len(self.files)
        return self


class ProjectMetadata(CamelModel):
    """Description of a project's files, cached next to the merged text."""

    project_id: str
    root_doc_path: str
    analyzed_at: datetime = Field(default_factory=_utc_now)
    categories: dict[str, FileCategory] = Field(default_factory=dict)
    merged_text_length: int = 0
    total_docs: int = 0
    total_files: int = 0


class ProjectAnalysis(BaseModel):
    """Merged document plus project metadata."""

    merge: MergeResult
    metadata: ProjectMetadata
