"""REMAP and AGGREGATE nodes.

REMAP locates each validated comment in its original file. AGGREGATE
prefixes and groups the mapped comments, counts them and assembles the
ReviewResult with its diagnostics.
"""

import logging
import time

from langchain_core.runnables import RunnableConfig

from paper_review.review.aggregator import aggregate_review
from paper_review.review.remapper import remap_comments
from paper_review.runtime import get_runtime, with_stage_time
from paper_review.state.enums import ReviewStatus
from paper_review.state.models import MappingStats, ReviewDiagnostics
from paper_review.state.schema import WorkflowState

logger = logging.getLogger(__name__)


def remap_node(state: WorkflowState, config: RunnableConfig) -> dict:
    """REMAP node: merged-text anchors to original file offsets."""
    observer = get_runtime(config).observer
    observer.stage_started("remap")
    start = time.monotonic()

    merge = state["merge"]
    comments = state.get("comments") or []
    remapped = remap_comments(
        comments,
        merge.merged_text,
        state["sources"],
        merge.root_path,
        merge.regions,
    )

    stats = remapped.stats
    elapsed = time.monotonic() - start
    observer.stage_completed(
        "remap",
        elapsed,
        direct=stats.direct,
        fallback=stats.fallback,
        not_in_merged=stats.not_in_merged,
        unmapped=stats.unmapped,
    )
    return {
        "mapped_comments": remapped.mapped,
        "mapping_stats": stats,
        "status": ReviewStatus.MAPPED,
        "stage_seconds": with_stage_time(state, "remap", elapsed),
    }


def aggregate_node(state: WorkflowState, config: RunnableConfig) -> dict:
    """AGGREGATE node: build the final ReviewResult."""
    runtime = get_runtime(config)
    runtime.observer.stage_started("aggregate")
    start = time.monotonic()

    outcomes = state.get("outcomes") or []
    mapped = state.get("mapped_comments") or []
    stage_seconds = with_stage_time(state, "aggregate", time.monotonic() - start)

    diagnostics = ReviewDiagnostics(
        stage_seconds=stage_seconds,
        section_count=len(state.get("sections") or []),
        agent_count=len(outcomes),
        raw_comment_count=sum(o.raw_comment_count for o in outcomes),
        validated_comment_count=len(state.get("comments") or []),
        mapping=state.get("mapping_stats") or MappingStats(),
        classifier_fallback=state.get("classifier_fallback", False),
        classifier_error=state.get("classifier_error"),
    )

    result = aggregate_review(
        project_id=state["project_id"],
        model=state["model"],
        classification=state["classification"],
        mapped_comments=mapped,
        outcomes=outcomes,
        comment_prefix=runtime.config.comment_prefix,
        diagnostics=diagnostics,
    )

    elapsed = time.monotonic() - start
    runtime.observer.stage_completed(
        "aggregate",
        elapsed,
        total=result.summary.total,
        documents=len(result.comments_by_doc),
    )
    return {
        "result": result,
        "status": ReviewStatus.COMPLETED,
        "stage_seconds": with_stage_time(state, "aggregate", elapsed),
    }
