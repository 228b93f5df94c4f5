"""Text gathering for reviewer agents.

Each agent reviews one slice of the paper chosen by its text strategy:
the sections assigned to its categories, the whole merged document, the
figure and table environments with a little surrounding context, or a
skeleton of headings and paragraph-opening sentences.
"""

import logging
import re
from dataclasses import dataclass

from paper_review.state.enums import TextStrategy
from paper_review.state.models import Classification, ReviewerAgentSpec, Section

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

FIGURE_TABLE_PATTERN = re.compile(
    r"\\begin\{(figure|table)\*?\}.*?\\end\{\1\*?\}",
    re.DOTALL,
)
EXCERPT_SEPARATOR = "\n\n---\n\n"
CONTEXT_LINES = 3
CONTEXT_WINDOW_CHARS = 300

PARAGRAPH_SPLIT_PATTERN = re.compile(r"\n\n+")
LEADING_HEADER_PATTERN = re.compile(r"^\s*\\(?:sub)*section\*?\{[^}]+\}\s*")
FIRST_SENTENCE_PATTERN = re.compile(r"^[^.!?]*[.!?]")
SKELETON_MAX_LEVEL = 2
SKELETON_MIN_PARAGRAPH_CHARS = 20
SKELETON_MAX_PARAGRAPHS = 10


@dataclass
class GatheredText:
    """Text an agent will review, or the reason it has nothing to review."""

    text: str
    source: str
    skip_reason: str | None = None

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None


# =============================================================================
# Strategies
# =============================================================================


def collect_section_content(sections: list[Section], titles: list[str]) -> str:
    """
    Concatenate the content of sections whose titles are listed.

    Titles match case-insensitively after trimming. When nothing matches
    exactly, sections are matched by substring in either direction.
    """
    if not titles:
        return ""
    wanted = {title.lower().strip() for title in titles}

    matched = [s for s in sections if s.title.lower().strip() in wanted]
    if matched:
        return "\n\n".join(s.content for s in matched)

    fuzzy = [
        s for s in sections
        if any(t in s.title.lower() or s.title.lower() in t for t in wanted)
    ]
    if fuzzy:
        logger.warning(
            f"No exact section match for {titles}. "
            f"Fuzzy-matched {len(fuzzy)} section(s): {[s.title for s in fuzzy]}"
        )
    else:
        logger.warning(f"No sections matched (exact or fuzzy) for titles: {titles}")
    return "\n\n".join(s.content for s in fuzzy)


def extract_figure_table_environments(merged_text: str) -> str:
    """
    Extract every figure and table environment with three lines of context
    on each side, joined by a separator line.
    """
    excerpts = []
    for match in FIGURE_TABLE_PATTERN.finditer(merged_text):
        start, end = match.start(), match.end()

        before_start = merged_text.rfind("\n", 0, max(0, start - 1) + 1)
        window_start = max(0, before_start - CONTEXT_WINDOW_CHARS)
        lines_before = "\n".join(
            merged_text[window_start:start].split("\n")[-CONTEXT_LINES:]
        )

        after_end = merged_text.find("\n", end)
        if after_end == -1:
            after_end = len(merged_text)
        window_end = min(len(merged_text), after_end + CONTEXT_WINDOW_CHARS)
        lines_after = "\n".join(
            merged_text[end:window_end].split("\n")[:CONTEXT_LINES]
        )

        excerpts.append(f"{lines_before}\n{match.group(0)}\n{lines_after}")
    return EXCERPT_SEPARATOR.join(excerpts)


def first_sentence(paragraph: str) -> str | None:
    match = FIRST_SENTENCE_PATTERN.match(paragraph)
    return match.group(0).strip() if match else None


def build_skeleton(sections: list[Section]) -> str:
    """
    Outline the paper as headings plus the first sentence of each paragraph.

    Only sections at level 2 or above are included. Paragraphs of 20
    characters or fewer and paragraphs starting with a comment are skipped,
    and at most ten paragraphs per section contribute a sentence.
    """
    lines = []
    for section in sections:
        if section.level > SKELETON_MAX_LEVEL:
            continue
        lines.append(f"{'#' * (section.level + 1)} {section.title}")

        paragraphs = [
            LEADING_HEADER_PATTERN.sub("", paragraph, count=1).strip()
            for paragraph in PARAGRAPH_SPLIT_PATTERN.split(section.content)
        ]
        paragraphs = [
            p for p in paragraphs
            if len(p) > SKELETON_MIN_PARAGRAPH_CHARS and not p.startswith("%")
        ]
        for paragraph in paragraphs[:SKELETON_MAX_PARAGRAPHS]:
            sentence = first_sentence(paragraph)
            if sentence:
                lines.append(f"  - {sentence}")
    return "\n".join(lines)


# =============================================================================
# Dispatch
# =============================================================================


def gather_review_text(
    spec: ReviewerAgentSpec,
    sections: list[Section],
    classification: Classification,
    merged_text: str,
    min_section_chars: int = 30,
    min_figure_chars: int = 50,
) -> GatheredText:
    """
    Gather the text an agent reviews according to its strategy.

    Args:
        spec: The agent.
        sections: Parsed sections of the merged document.
        classification: Classification holding the section mapping.
        merged_text: The merged document.
        min_section_chars: Section text shorter than this (after trimming)
            skips the agent.
        min_figure_chars: Figure/table excerpts shorter than this skip the
            agent.

    Returns:
        GatheredText with the text and a description of its source, or a
        skip reason.
    """
    if spec.strategy == TextStrategy.FIGURES_TABLES:
        text = extract_figure_table_environments(merged_text)
        if len(text) < min_figure_chars:
            return GatheredText(text, "figure/table environments", "No figures/tables found")
        return GatheredText(text, "figure/table environments")

    if spec.strategy == TextStrategy.SKELETON:
        return GatheredText(build_skeleton(sections), "paper skeleton")

    if spec.strategy == TextStrategy.FULL_DOCUMENT:
        return GatheredText(merged_text, "full merged document")

    categories = [category.value for category in spec.section_categories or ()]
    parts = []
    for category in categories:
        text = collect_section_content(sections, classification.titles_for(category))
        if text:
            parts.append(text)
    text = "\n\n".join(parts)
    source = f"sections: {', '.join(categories)}"
    if len(text.strip()) < min_section_chars:
        return GatheredText(
            text,
            source,
            f"No matching sections found for categories: {', '.join(categories)}",
        )
    return GatheredText(text, source)
