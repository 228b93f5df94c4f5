"""Heuristic section parsing of a merged LaTeX document.

The parser recognizes two things:

- an optional abstract block, ``\\begin{abstract} ... \\end{abstract}``
  (the first one wins), returned as a level-0 section titled "Abstract";
- header commands at the start of a line, ``\\section{T}``,
  ``\\subsection{T}`` and ``\\subsubsection{T}`` (levels 1-3), each with an
  optional ``*``. Titles are brace-delimited and may not contain ``}``.

A header's section runs from the header to the next header whose level is
numerically lower or equal, or to the end of the document. Levels need
not be contiguous.
"""

import logging
import re

from paper_review.state.models import Section

logger = logging.getLogger(__name__)

ABSTRACT_TITLE = "Abstract"
ABSTRACT_PATTERN = re.compile(r"\\begin\{abstract\}(.*?)\\end\{abstract\}", re.DOTALL)
HEADER_PATTERN = re.compile(
    r"^\\(section|subsection|subsubsection)\*?\{([^}]+)\}",
    re.MULTILINE,
)
HEADER_LEVELS = {
    "section": 1,
    "subsection": 2,
    "subsubsection": 3,
}


def find_abstract(merged_text: str) -> Section | None:
    """Extract the first abstract environment, if any."""
    match = ABSTRACT_PATTERN.search(merged_text)
    if match is None:
        return None
    return Section(
        title=ABSTRACT_TITLE,
        level=0,
        content=match.group(1).strip(),
        char_start=match.start(),
        char_end=match.end(),
    )


def find_headers(merged_text: str) -> list[tuple[str, int, int]]:
    """Return ``(title, level, position)`` for every header in document order."""
    return [
        (match.group(2).strip(), HEADER_LEVELS[match.group(1)], match.start())
        for match in HEADER_PATTERN.finditer(merged_text)
    ]


def parse_sections(merged_text: str) -> list[Section]:
    """
    Parse the merged document into an ordered list of sections.

    Args:
        merged_text: The merged LaTeX document.

    Returns:
        The abstract (if present) followed by every header section in
        document order. Header section content includes the header line.
    """
    sections: list[Section] = []

    abstract = find_abstract(merged_text)
    if abstract is not None:
        sections.append(abstract)

    headers = find_headers(merged_text)
    for index, (title, level, position) in enumerate(headers):
        end = len(merged_text)
        for _, next_level, next_position in headers[index + 1:]:
            if next_level <= level:
                end = next_position
                break
        sections.append(
            Section(
                title=title,
                level=level,
                content=merged_text[position:end],
                char_start=position,
                char_end=end,
            )
        )

    logger.debug(f"Parsed {len(sections)} sections ({len(headers)} headers)")
    return sections
