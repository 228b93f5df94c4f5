"""Reviewer agent roster.

Eleven static agents cover the paper by section category, by whole
document, by figure/table excerpts and by structural skeleton. A twelfth,
paper-type-specific agent joins the roster when the skill library holds a
guideline file for the classified paper type.
"""

import logging

from paper_review.review.skills import SkillLibrary
from paper_review.state.enums import ReviewCategory, TextStrategy
from paper_review.state.models import Classification, ReviewerAgentSpec

logger = logging.getLogger(__name__)

PAPER_TYPE_AGENT_ID = "paper_type"
PAPER_TYPE_SKILL = "02_paper_types/{paper_type}_paper.md"


REVIEWER_AGENTS: tuple[ReviewerAgentSpec, ...] = (
    ReviewerAgentSpec(
        id="abstract",
        name="Abstract Reviewer",
        strategy=TextStrategy.SECTIONS,
        skill_files=("03_paper_sections/abstract.md",),
        section_categories=(ReviewCategory.ABSTRACT,),
        guidance_key="abstract_focus",
        system_preamble=(
            "Review the abstract for structure (5-sentence pattern), specificity "
            "(exact numbers, not vague), matryoshka doll principle, and clarity."
        ),
    ),
    ReviewerAgentSpec(
        id="introduction",
        name="Introduction Reviewer",
        strategy=TextStrategy.SECTIONS,
        skill_files=("03_paper_sections/introduction.md",),
        section_categories=(ReviewCategory.INTRODUCTION,),
        guidance_key="introduction_focus",
        system_preamble=(
            "Review the introduction for the 5-question structure, storytelling "
            "(setting/villain/superhero), contributions list, and whether it sets "
            "the right expectations."
        ),
    ),
    ReviewerAgentSpec(
        id="related_work",
        name="Related Work Reviewer",
        strategy=TextStrategy.SECTIONS,
        skill_files=(
            "03_paper_sections/related_work.md",
            "05_writing_style/citations_and_references.md",
        ),
        section_categories=(ReviewCategory.RELATED_WORK,),
        system_preamble=(
            "Review the related work section for coverage, history-book paragraph "
            "structure, compare-and-contrast, and proper citation usage."
        ),
    ),
    ReviewerAgentSpec(
        id="methods",
        name="Methods Reviewer",
        strategy=TextStrategy.SECTIONS,
        skill_files=(
            "03_paper_sections/methods.md",
            "03_paper_sections/task_formulation.md",
            "05_writing_style/math_and_formulas.md",
        ),
        section_categories=(ReviewCategory.METHODS,),
        guidance_key="methods_focus",
        system_preamble=(
            "Review methods for clarity, design justification, intuition-before-formalism, "
            "notation consistency, and pseudo-code readability."
        ),
    ),
    ReviewerAgentSpec(
        id="results",
        name="Results Reviewer",
        strategy=TextStrategy.SECTIONS,
        skill_files=("03_paper_sections/results_and_analysis.md",),
        section_categories=(ReviewCategory.RESULTS,),
        guidance_key="results_focus",
        system_preamble=(
            "Review results for RQ structure, bold findings at paragraph starts, "
            "figure/table interpretation, and whether claims are supported by evidence."
        ),
    ),
    ReviewerAgentSpec(
        id="conclusion",
        name="Conclusion & Supplements Reviewer",
        strategy=TextStrategy.SECTIONS,
        skill_files=(
            "03_paper_sections/conclusion.md",
            "03_paper_sections/limitations.md",
            "03_paper_sections/ethical_considerations.md",
        ),
        section_categories=(ReviewCategory.CONCLUSION,),
        system_preamble=(
            "Review conclusion for brevity (not repeating abstract), limitations "
            "coverage, ethical considerations, and future work."
        ),
    ),
    ReviewerAgentSpec(
        id="appendix",
        name="Appendix Reviewer",
        strategy=TextStrategy.SECTIONS,
        skill_files=("03_paper_sections/faq_appendix.md",),
        section_categories=(ReviewCategory.APPENDIX,),
        system_preamble=(
            "Review the appendix sections as a unified block. Check that supplementary "
            "material is well-organized, that proofs are complete and clearly presented, "
            "that additional experiments/tables are properly referenced from the main text, "
            "and that a FAQ section (if present) anticipates likely reviewer questions. "
            "Also check that content in the appendix truly belongs there rather than in "
            "the main paper."
        ),
    ),
    ReviewerAgentSpec(
        id="writing_style",
        name="Writing Style Reviewer",
        strategy=TextStrategy.FULL_DOCUMENT,
        skill_files=(
            "05_writing_style/grammar_and_punctuation.md",
            "05_writing_style/capitalization_and_acronyms.md",
            "05_writing_style/general_writing_habits.md",
            "05_writing_style/citations_and_references.md",
        ),
        system_preamble=(
            "Review the writing style: grammar, tense consistency, pronoun clarity, "
            "vague language, formality, active voice, filler words, and capitalization."
        ),
    ),
    ReviewerAgentSpec(
        id="latex_formatting",
        name="LaTeX & Formatting Reviewer",
        strategy=TextStrategy.FULL_DOCUMENT,
        skill_files=(
            "05_writing_style/latex_formatting.md",
            "05_writing_style/math_and_formulas.md",
            "04_figures_and_tables/table_formatting.md",
        ),
        system_preamble=(
            "Review LaTeX formatting: \\cref usage, table formatting (booktabs, no "
            "vertical bars), equation punctuation, broken references, quotation marks."
        ),
    ),
    ReviewerAgentSpec(
        id="figures_tables",
        name="Figures & Captions Reviewer",
        strategy=TextStrategy.FIGURES_TABLES,
        skill_files=(
            "04_figures_and_tables/caption_writing.md",
            "04_figures_and_tables/figure1_design.md",
            "04_figures_and_tables/experiment_visualization.md",
        ),
        system_preamble=(
            "Review figure and table captions for self-containedness, "
            "first-sentence-as-statement, abbreviation definitions, and whether the "
            "surrounding text properly explains each figure/table."
        ),
    ),
    ReviewerAgentSpec(
        id="structure",
        name="Structure & Narrative Reviewer",
        strategy=TextStrategy.SKELETON,
        skill_files=("05_writing_style/general_writing_habits.md",),
        guidance_key="overall_notes",
        system_preamble=(
            "Review overall paper structure: one key idea, storytelling flow, whether "
            "first sentences of paragraphs tell the whole story, section ordering, "
            "heading frequency (~every 10-15 lines), and consistency."
        ),
    ),
)


def paper_type_agent(classification: Classification) -> ReviewerAgentSpec:
    """Build the reviewer that checks the paper against its type guideline."""
    paper_type = classification.paper_type.value
    return ReviewerAgentSpec(
        id=PAPER_TYPE_AGENT_ID,
        name=f"Paper Type Reviewer ({paper_type})",
        strategy=TextStrategy.FULL_DOCUMENT,
        skill_files=(PAPER_TYPE_SKILL.format(paper_type=paper_type),),
        guidance_key="overall_notes",
        system_preamble=(
            f'This paper has been classified as: "{paper_type}" - '
            f"{classification.paper_type_summary}\n"
            "Review the paper against the type-specific writing guidelines provided in "
            "the skills reference. Check whether the paper follows the recommended "
            "structure, includes the expected elements, and addresses the criteria that "
            "reviewers of this paper type typically look for. Focus on high-level "
            "structural and content issues specific to this paper type, not general "
            "writing style."
        ),
    )


def build_agent_roster(
    classification: Classification,
    skills: SkillLibrary,
) -> list[ReviewerAgentSpec]:
    """
    Assemble the agents for one run.

    Args:
        classification: The paper's classification.
        skills: Library used to check for a paper-type guideline.

    Returns:
        The static agents, followed by the paper-type agent when a guideline
        file exists for the classified type.
    """
    roster = list(REVIEWER_AGENTS)
    guideline = PAPER_TYPE_SKILL.format(paper_type=classification.paper_type.value)
    if skills.exists(guideline):
        roster.append(paper_type_agent(classification))
        logger.info(
            f"Added Paper Type Reviewer for {classification.paper_type.value!r} using {guideline}"
        )
    else:
        logger.info(
            f"No paper type guideline for {classification.paper_type.value!r}, "
            "skipping Paper Type Reviewer"
        )
    return roster
