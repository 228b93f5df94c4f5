"""Prompt templates for the classifier and the reviewer agents.

Every builder returns the prompt actually sent plus a log-friendly twin in
which long embedded blocks (skill content, paper text) are previewed.
"""

from paper_review.errors import preview_text
from paper_review.state.enums import GENERAL_GUIDANCE_KEY
from paper_review.state.models import ReviewerAgentSpec, Section, TypeSpecificGuidance

NOT_FOUND_TEXT = "(not found)"


# =============================================================================
# Classifier
# =============================================================================

CLASSIFIER_SYSTEM_TEMPLATE = """You are a paper type classifier for an academic writing tutor.
Given a paper's abstract, introduction, and section outline, classify its type
and produce a section-to-category mapping plus type-specific review guidance.

{paper_type_definitions}"""

CLASSIFIER_USER_TEMPLATE = """## Section Outline
{outline}

## All Sections to Assign (you MUST assign every one of these)
{numbered_sections}

## Abstract
{abstract}

## Introduction
{introduction}

Based on the above:
1. Classify the paper type.
2. In sectionAssignments, assign EVERY section from the numbered list above to exactly one review category. Use the EXACT section titles. Do not skip any section.
3. Generate type-specific guidance for each reviewer."""


def section_outline(sections: list[Section]) -> str:
    """Titles of levels 0-2, indented two spaces per level."""
    return "\n".join(
        f"{'  ' * s.level}{s.title}" for s in sections if s.level <= 2
    )


def sections_to_assign(sections: list[Section]) -> list[Section]:
    """Level 1 and 2 sections, which the classifier must assign."""
    return [s for s in sections if 1 <= s.level <= 2]


def numbered_section_list(sections: list[Section]) -> str:
    return "\n".join(
        f"{index}. {s.title}" for index, s in enumerate(sections_to_assign(sections), start=1)
    )


def build_classifier_prompts(
    sections: list[Section],
    paper_type_definitions: str,
    abstract_text: str | None,
    introduction_text: str | None,
) -> tuple[str, str, str, str]:
    """
    Build the classifier prompts.

    Returns:
        ``(system, prompt, log_system, log_prompt)``
    """
    abstract = abstract_text or NOT_FOUND_TEXT
    introduction = introduction_text or NOT_FOUND_TEXT
    outline = section_outline(sections)
    numbered = numbered_section_list(sections)

    system = CLASSIFIER_SYSTEM_TEMPLATE.format(paper_type_definitions=paper_type_definitions)
    prompt = CLASSIFIER_USER_TEMPLATE.format(
        outline=outline,
        numbered_sections=numbered,
        abstract=abstract,
        introduction=introduction,
    )
    log_system = CLASSIFIER_SYSTEM_TEMPLATE.format(
        paper_type_definitions=preview_text(paper_type_definitions)
    )
    log_prompt = CLASSIFIER_USER_TEMPLATE.format(
        outline=outline,
        numbered_sections=numbered,
        abstract=preview_text(abstract),
        introduction=preview_text(introduction),
    )
    return system, prompt, log_system, log_prompt


# =============================================================================
# Reviewer Agents
# =============================================================================

REVIEWER_SYSTEM_TEMPLATE = """You are the "{name}" for an academic paper writing tutor.
{preamble}

Your task: Read the provided LaTeX text and produce specific, actionable inline feedback that helps the author strengthen their paper.

Each piece of feedback must:
- Reference an EXACT substring from the text (1-200 chars) as highlightText. The highlightText MUST appear verbatim. Do not paraphrase or shorten it.
- Be one of two types:
  **Suggestion**: A concrete rewrite, restructuring, or addition the author should consider. Explain *why* the change improves clarity, precision, or persuasiveness.
  **Concern**: A specific weakness, gap, or risk in the current writing, e.g. an unsupported claim, ambiguous phrasing, missing context, logical gap, weak transition, or unclear contribution.

Do NOT produce:
- Generic praise ("Good point here")
- Vague observations ("This could be improved")
- Comments about negligible LaTeX syntax
- Summaries of what the text already says

Every comment should answer the question: "What should the author *do* to make this part of the paper stronger?"

Produce at most {max_comments} comments. Prioritize fewer, deeper comments over many shallow ones. Label each comment as one of:
[suggestion] (nice to have),
[warning] (should fix), or
[critical] (must fix).

Avoid including too many low impact [suggestion] comments. If there are only a few meaningful issues, generate fewer comments. Your comments must be concise, limited to 1 to 3 sentences to ensure readability.

## Writing Skills Reference
{skill_content}
{guidance}"""

REVIEWER_USER_TEMPLATE = "Review the following LaTeX text and provide your comments:\n\n{text}"


def build_guidance_injection(
    spec: ReviewerAgentSpec,
    guidance: TypeSpecificGuidance,
) -> str:
    """
    Type-specific guidance for one agent.

    The agent's own guidance key is injected as the review focus; the
    general notes follow for every agent except the one whose key is the
    general notes.
    """
    injection = ""
    focus = guidance.get(spec.guidance_key)
    if focus:
        injection = f"\n\n## Type-Specific Review Focus\n{focus}"
    if guidance.overall_notes and spec.guidance_key != GENERAL_GUIDANCE_KEY:
        injection += f"\n\n## General Type Notes\n{guidance.overall_notes}"
    return injection


def build_reviewer_prompts(
    spec: ReviewerAgentSpec,
    skill_content: str,
    guidance: TypeSpecificGuidance,
    review_text: str,
    max_comments: int = 10,
) -> tuple[str, str, str, str]:
    """
    Build the prompts for one reviewer agent.

    Returns:
        ``(system, prompt, log_system, log_prompt)``
    """
    injection = build_guidance_injection(spec, guidance)

    def render(skills: str) -> str:
        return REVIEWER_SYSTEM_TEMPLATE.format(
            name=spec.name,
            preamble=spec.system_preamble,
            max_comments=max_comments,
            skill_content=skills,
            guidance=injection,
        )

    system = render(skill_content)
    prompt = REVIEWER_USER_TEMPLATE.format(text=review_text)
    return (
        system,
        prompt,
        render(preview_text(skill_content)),
        REVIEWER_USER_TEMPLATE.format(text=preview_text(review_text)),
    )
