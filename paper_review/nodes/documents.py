"""MERGE and PARSE nodes.

MERGE inlines every include reachable from the root document and records
provenance, or reuses a cached merged text and rebuilds provenance from
its inline markers. PARSE splits the merged text into sections. Neither calls the
completion service; a root document that cannot be resolved is the only
failure that aborts a run.
"""

import logging
import time

from langchain_core.runnables import RunnableConfig

from paper_review.documents import (
    merge_documents,
    normalize_path,
    parse_sections,
    provenance_from_markers,
)
from paper_review.runtime import get_runtime, with_stage_time
from paper_review.state.enums import ReviewStatus
from paper_review.state.models import MergeResult
from paper_review.state.schema import WorkflowState

logger = logging.getLogger(__name__)


def merge_node(state: WorkflowState, config: RunnableConfig) -> dict:
    """
    MERGE node: build the merged document.

    Raises:
        FatalInputError: If the root document is not among the sources.
    """
    observer = get_runtime(config).observer
    observer.stage_started("merge")
    start = time.monotonic()

    cached = state.get("cached_merged_text")
    if cached:
        logger.info(f"[Merge] Reusing cached merged text ({len(cached)} chars)")
        merge = MergeResult(
            root_path=normalize_path(state["root_path"]),
            merged_text=cached,
            regions=provenance_from_markers(cached),
            ordered_files=[normalize_path(state["root_path"])],
        )
    else:
        merge = merge_documents(state["root_path"], state["sources"])

    elapsed = time.monotonic() - start
    observer.stage_completed(
        "merge",
        elapsed,
        files=len(merge.ordered_files),
        chars=len(merge.merged_text),
        regions=len(merge.regions),
    )
    return {
        "merge": merge,
        "status": ReviewStatus.MERGED,
        "stage_seconds": with_stage_time(state, "merge", elapsed),
    }


def parse_node(state: WorkflowState, config: RunnableConfig) -> dict:
    """PARSE node: split the merged document into sections."""
    observer = get_runtime(config).observer
    observer.stage_started("parse")
    start = time.monotonic()

    sections = parse_sections(state["merge"].merged_text)
    for section in sections:
        logger.debug(
            f"[Parse] L{section.level} {section.title!r} ({len(section.content)} chars, "
            f"pos {section.char_start}-{section.char_end})"
        )

    elapsed = time.monotonic() - start
    observer.stage_completed("parse", elapsed, sections=len(sections))
    return {
        "sections": sections,
        "status": ReviewStatus.PARSED,
        "stage_seconds": with_stage_time(state, "parse", elapsed),
    }
