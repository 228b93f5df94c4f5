"""Mapping comments from merged-text positions back to original files.

For each comment the remapper finds the first occurrence of its highlight
text in the merged document, looks up which original file that position
was copied from, and locates the text in that file. When the owning file
is unknown or does not contain the text, every original file is searched
in sorted path order instead. Comments found nowhere are dropped.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from paper_review.errors import MappingMiss
from paper_review.state.models import (
    MappedComment,
    MappingStats,
    ProvenanceRegion,
    ReviewComment,
)

logger = logging.getLogger(__name__)


@dataclass
class RemapResult:
    """Mapped comments plus how each was located."""

    mapped: list[MappedComment] = field(default_factory=list)
    stats: MappingStats = field(default_factory=MappingStats)


def find_original_file(
    position: int,
    regions: list[ProvenanceRegion],
    root_path: str,
) -> str:
    """
    Return the file a merged-text position was copied from.

    Nested regions may contain the same position; the innermost one (the
    containing region that starts last) wins. Positions outside every
    region belong to the root document.
    """
    owner = None
    for region in regions:
        if region.contains(position) and (owner is None or region.start_offset >= owner.start_offset):
            owner = region
    return owner.file if owner is not None else root_path


def search_all_sources(highlight_text: str, sources: Mapping[str, str]) -> tuple[str, int] | None:
    """First file, in sorted path order, containing the text, with its offset."""
    for path in sorted(sources):
        index = sources[path].find(highlight_text)
        if index != -1:
            return path, index
    return None


def _mapped(comment: ReviewComment, doc_path: str, start: int) -> MappedComment:
    return MappedComment(
        **comment.model_dump(),
        doc_path=doc_path,
        start_offset=start,
        end_offset=start + len(comment.highlight_text),
    )


def remap_comments(
    comments: list[ReviewComment],
    merged_text: str,
    sources: Mapping[str, str],
    root_path: str,
    regions: list[ProvenanceRegion],
) -> RemapResult:
    """
    Locate each comment in its original file.

    Args:
        comments: Validated comments from every agent.
        merged_text: The merged document.
        sources: Original ``path -> content`` mapping.
        root_path: Normalized root document path.
        regions: Provenance regions of the merged text.

    Returns:
        RemapResult with mapped comments in input order and the counts of
        direct, fallback, not-in-merged and unmapped comments.
    """
    result = RemapResult()
    stats = result.stats

    for comment in comments:
        text = comment.highlight_text
        merged_position = merged_text.find(text)
        if merged_position == -1:
            logger.warning(
                f"highlightText not found in merged text at all: {text[:80]!r} [{comment.agent_name}]"
            )
            stats.not_in_merged += 1
            continue

        original_file = find_original_file(merged_position, regions, root_path)
        if original_file not in sources and original_file + ".tex" in sources:
            original_file = original_file + ".tex"

        content = sources.get(original_file)
        if content:
            index = content.find(text)
            if index != -1:
                result.mapped.append(_mapped(comment, original_file, index))
                stats.direct += 1
                continue

        found = search_all_sources(text, sources)
        if found is None:
            miss = MappingMiss(
                "highlightText in merged text but not in any original file",
                highlight_text=text,
                expected_file=original_file,
            )
            logger.warning(f"{miss.message}: {text[:60]!r} (expected: {original_file}) [{comment.agent_name}]")
            stats.unmapped += 1
            continue

        doc_path, index = found
        logger.warning(
            f"highlightText not in expected file {original_file!r}, "
            f"fallback found in {doc_path!r}: {text[:50]!r}"
        )
        result.mapped.append(_mapped(comment, doc_path, index))
        stats.fallback += 1

    logger.info(
        f"Mapping complete: {stats.direct} direct, {stats.fallback} fallback, "
        f"{stats.not_in_merged} not in merged text, {stats.unmapped} unmapped. "
        f"Total mapped: {stats.mapped}/{len(comments)}"
    )
    return result
