"""Classification, reviewer agents and comment post-processing."""

from paper_review.review.skills import SkillLibrary
from paper_review.review.agents import (
    REVIEWER_AGENTS,
    build_agent_roster,
    paper_type_agent,
)
from paper_review.review.gathering import (
    GatheredText,
    build_skeleton,
    collect_section_content,
    extract_figure_table_environments,
    gather_review_text,
)
from paper_review.review.classifier import (
    apply_appendix_override,
    build_section_mapping,
    classify_paper,
    fallback_category,
    finalize_mapping,
    heuristic_classification,
)
from paper_review.review.validator import repair_escaped_latex, validate_comments
from paper_review.review.reviewer import ReviewInputs, run_agent_pool, run_reviewer_agent
from paper_review.review.remapper import RemapResult, find_original_file, remap_comments
from paper_review.review.aggregator import aggregate_review, prefix_comment

__all__ = [
    "SkillLibrary",
    "REVIEWER_AGENTS",
    "build_agent_roster",
    "paper_type_agent",
    "GatheredText",
    "build_skeleton",
    "collect_section_content",
    "extract_figure_table_environments",
    "gather_review_text",
    "apply_appendix_override",
    "build_section_mapping",
    "classify_paper",
    "fallback_category",
    "finalize_mapping",
    "heuristic_classification",
    "repair_escaped_latex",
    "validate_comments",
    "ReviewInputs",
    "run_agent_pool",
    "run_reviewer_agent",
    "RemapResult",
    "find_original_file",
    "remap_comments",
    "aggregate_review",
    "prefix_comment",
]
