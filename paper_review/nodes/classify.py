"""CLASSIFY node.

Classifies the paper and maps sections to review categories. A classifier
failure does not stop the review: the node falls back to a keyword-based
classification and flags the fallback in the run state.
"""

import logging
import time

from langchain_core.runnables import RunnableConfig

from paper_review.errors import describe_failure, log_error_with_context
from paper_review.review.classifier import classify_paper, heuristic_classification
from paper_review.runtime import get_runtime, with_stage_time
from paper_review.state.enums import ReviewStatus
from paper_review.state.schema import WorkflowState

logger = logging.getLogger(__name__)


async def classify_node(state: WorkflowState, config: RunnableConfig) -> dict:
    """
    CLASSIFY node: paper type, section mapping and type guidance.

    Args:
        state: Workflow state with parsed sections.
        config: Run config carrying the runtime.

    Returns:
        State update with the classification and fallback flags.
    """
    runtime = get_runtime(config)
    runtime.observer.stage_started("classify")
    start = time.monotonic()
    sections = state.get("sections") or []

    fallback = False
    error_reason = None
    try:
        classification = await classify_paper(
            sections,
            runtime.completion,
            runtime.skills,
            runtime.config,
            runtime.observer,
        )
    except Exception as e:
        log_error_with_context(e, stage="classify")
        error_reason = describe_failure(e)
        runtime.observer.warning(
            f"[Classify] Classifier failed ({error_reason}); using heuristic classification"
        )
        classification = heuristic_classification(sections)
        fallback = True

    elapsed = time.monotonic() - start
    runtime.observer.stage_completed(
        "classify",
        elapsed,
        paper_type=classification.paper_type.value,
        fallback=fallback,
    )
    return {
        "classification": classification,
        "classifier_fallback": fallback,
        "classifier_error": error_reason,
        "status": ReviewStatus.CLASSIFIED,
        "stage_seconds": with_stage_time(state, "classify", elapsed),
    }
