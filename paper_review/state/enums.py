"""Enums and constants for the paper review workflow state."""

from enum import Enum


class ReviewStatus(str, Enum):
    """Status of a review run."""

    INITIALIZED = "initialized"
    MERGED = "merged"
    PARSED = "parsed"
    CLASSIFIED = "classified"
    REVIEWED = "reviewed"
    MAPPED = "mapped"
    COMPLETED = "completed"
    FAILED = "failed"


class PaperType(str, Enum):
    """Paper type assigned by the classifier."""

    DATASET = "dataset"
    METHOD_IMPROVEMENT = "method_improvement"
    LLM_ENGINEERING = "llm_engineering"
    LLM_INFERENCE_FINDINGS = "llm_inference_findings"
    CSS = "css"
    POSITION = "position"
    OTHER = "other"


class ReviewCategory(str, Enum):
    """Review bucket a section is assigned to."""

    ABSTRACT = "abstract"
    INTRODUCTION = "introduction"
    RELATED_WORK = "related_work"
    METHODS = "methods"
    RESULTS = "results"
    CONCLUSION = "conclusion"
    APPENDIX = "appendix"


class Severity(str, Enum):
    """Severity label on a reviewer comment."""

    SUGGESTION = "suggestion"  # Nice to have
    WARNING = "warning"        # Should fix
    CRITICAL = "critical"      # Must fix


class TextStrategy(str, Enum):
    """How a reviewer agent gathers the text it reviews."""

    SECTIONS = "sections"              # Sections mapped to the agent's categories
    FULL_DOCUMENT = "full_document"    # The whole merged text
    FIGURES_TABLES = "figures_tables"  # Figure/table environments with context
    SKELETON = "skeleton"              # Headings plus first sentences


class AgentStatus(str, Enum):
    """Settled state of one reviewer agent."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


# Guidance keys on TypeSpecificGuidance that agents may consume
GUIDANCE_KEYS = (
    "abstract_focus",
    "introduction_focus",
    "methods_focus",
    "results_focus",
    "overall_notes",
)

GENERAL_GUIDANCE_KEY = "overall_notes"
