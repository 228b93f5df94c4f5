"""Paper type classification and section-to-category mapping.

One completion call classifies the paper and assigns each section to a
review category. The model's assignments then pass through a safety net
that makes the mapping total and consistent:

1. assignments naming a title the parser never produced are dropped, and a
   title assigned twice keeps its first category;
2. every non-abstract section the model missed is assigned by keyword
   heuristics on its title, defaulting to ``results``;
3. the abstract, when present, is always in ``abstract``;
4. any title containing "appendix" is moved to ``appendix``. This runs
   last and is idempotent.
"""

import logging

from paper_review.config import ReviewConfig
from paper_review.errors import TruncationRetryPolicy
from paper_review.llm import CompletionService, generate_with_truncation
from paper_review.review.prompts import build_classifier_prompts, sections_to_assign
from paper_review.review.skills import SkillLibrary
from paper_review.state.enums import PaperType, ReviewCategory
from paper_review.state.models import (
    Classification,
    ClassificationResponse,
    SectionAssignment,
    Section,
    TypeSpecificGuidance,
)
from paper_review.telemetry import ReviewObserver

logger = logging.getLogger(__name__)

PAPER_TYPE_DEFINITIONS_SKILL = "01_setup/paper_type_definitions.md"
CLASSIFIER_LABEL = "classifier"
APPENDIX_KEYWORD = "appendix"
HEURISTIC_SUMMARY = "Classifier unavailable; sections assigned by title keywords."

# Checked in order; the first matching keyword group wins
FALLBACK_KEYWORDS: tuple[tuple[ReviewCategory, tuple[str, ...]], ...] = (
    (ReviewCategory.INTRODUCTION, ("introduction",)),
    (ReviewCategory.RELATED_WORK, ("related", "background", "prior")),
    (
        ReviewCategory.METHODS,
        ("method", "approach", "dataset", "preliminar", "formulation", "framework"),
    ),
    (
        ReviewCategory.CONCLUSION,
        ("conclusion", "limitation", "ethic", "acknowledgment"),
    ),
    (ReviewCategory.APPENDIX, ("appendix",)),
)


def _key(title: str) -> str:
    return title.lower().strip()


def fallback_category(title: str) -> ReviewCategory:
    """Category for a section the model did not assign."""
    lower = title.lower()
    for category, keywords in FALLBACK_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return category
    return ReviewCategory.RESULTS


def find_abstract_section(sections: list[Section]) -> Section | None:
    return next((s for s in sections if s.is_abstract), None)


def find_introduction_section(sections: list[Section]) -> Section | None:
    return next((s for s in sections if s.title.lower().startswith("introduction")), None)


def build_section_mapping(
    assignments: list[SectionAssignment],
    sections: list[Section],
) -> dict[str, list[str]]:
    """
    Convert per-section assignments into a category-to-titles mapping.

    Every category key is present. Each non-abstract section title appears
    in exactly one category; the abstract is left to the caller.
    """
    mapping: dict[str, list[str]] = {category.value: [] for category in ReviewCategory}

    titles_by_key: dict[str, str] = {}
    for section in sections:
        if not section.is_abstract:
            titles_by_key.setdefault(_key(section.title), section.title)

    assigned: set[str] = set()
    for assignment in assignments:
        key = _key(assignment.section_title)
        title = titles_by_key.get(key)
        if title is None:
            if key != "abstract":
                logger.warning(
                    f"Classifier assigned unknown section {assignment.section_title!r}, ignoring"
                )
            continue
        if key in assigned:
            continue
        assigned.add(key)
        mapping[assignment.category.value].append(title)

    for key, title in titles_by_key.items():
        if key in assigned:
            continue
        category = fallback_category(title)
        mapping[category.value].append(title)
        logger.warning(
            f"Section {title!r} was not assigned by the classifier, falling back to {category.value!r}"
        )

    return mapping


def apply_appendix_override(mapping: dict[str, list[str]]) -> dict[str, list[str]]:
    """Move every title containing "appendix" into the appendix category."""
    appendix = mapping.setdefault(ReviewCategory.APPENDIX.value, [])
    for category, titles in mapping.items():
        if category == ReviewCategory.APPENDIX.value:
            continue
        to_move = [t for t in titles if APPENDIX_KEYWORD in t.lower()]
        if not to_move:
            continue
        mapping[category] = [t for t in titles if APPENDIX_KEYWORD not in t.lower()]
        appendix.extend(t for t in to_move if t not in appendix)
        logger.info(
            f"Moved {len(to_move)} appendix section(s) from {category!r} to 'appendix': {to_move}"
        )
    return mapping


def finalize_mapping(
    assignments: list[SectionAssignment],
    sections: list[Section],
) -> dict[str, list[str]]:
    """Safety net, abstract assignment and appendix override, in that order."""
    mapping = build_section_mapping(assignments, sections)
    abstract = find_abstract_section(sections)
    if abstract is not None and abstract.title not in mapping[ReviewCategory.ABSTRACT.value]:
        mapping[ReviewCategory.ABSTRACT.value].append(abstract.title)
    return apply_appendix_override(mapping)


def heuristic_classification(sections: list[Section]) -> Classification:
    """Classification built without the model, used when the classifier fails."""
    return Classification(
        paper_type=PaperType.OTHER,
        paper_type_summary=HEURISTIC_SUMMARY,
        section_mapping=finalize_mapping([], sections),
        type_specific_guidance=TypeSpecificGuidance(),
    )


async def classify_paper(
    sections: list[Section],
    completion: CompletionService,
    skills: SkillLibrary,
    config: ReviewConfig,
    observer: ReviewObserver,
) -> Classification:
    """
    Classify the paper and map its sections to review categories.

    Args:
        sections: Parsed sections of the merged document.
        completion: Completion service.
        skills: Skill library holding the paper type definitions.
        config: Run configuration (temperature, truncation schedule).
        observer: Receives attempt notices and prompt dumps.

    Returns:
        Classification whose mapping covers every non-abstract section.

    Raises:
        CompletionError: If the classifier call fails after retries.
    """
    abstract = find_abstract_section(sections)
    introduction = find_introduction_section(sections)
    logger.info(
        f"Abstract found: {abstract is not None} ({len(abstract.content) if abstract else 0} chars), "
        f"Introduction found: {introduction is not None} "
        f"({len(introduction.content) if introduction else 0} chars), "
        f"{len(sections_to_assign(sections))} sections to assign"
    )

    system, prompt, log_system, log_prompt = build_classifier_prompts(
        sections,
        skills.load(PAPER_TYPE_DEFINITIONS_SKILL),
        abstract.content if abstract else None,
        introduction.content if introduction else None,
    )

    response = await generate_with_truncation(
        completion,
        system=system,
        prompt=prompt,
        schema=ClassificationResponse,
        temperature=config.classifier_temperature,
        label=CLASSIFIER_LABEL,
        observer=observer,
        policy=TruncationRetryPolicy(fractions=config.truncation_fractions),
        log_prompts=config.log_prompts,
        log_system=log_system,
        log_prompt=log_prompt,
    )

    logger.info(
        f"Classifier result: paperType={response.paper_type.value!r}, "
        f"{len(response.section_assignments)} section assignments, "
        f"summary: {response.paper_type_summary!r}"
    )

    mapping = finalize_mapping(response.section_assignments, sections)
    for category, titles in mapping.items():
        logger.debug(f"  {category}: {titles}")

    return Classification(
        paper_type=response.paper_type,
        paper_type_summary=response.paper_type_summary,
        section_mapping=mapping,
        type_specific_guidance=response.type_specific_guidance,
    )
