"""REVIEW node.

Builds the agent roster for the classified paper and runs every agent
concurrently. Completed agents contribute their validated comments, in
roster order; skipped and failed agents are kept as outcomes for the
final report.
"""

import logging
import time

from langchain_core.runnables import RunnableConfig

from paper_review.review.agents import build_agent_roster
from paper_review.review.reviewer import ReviewInputs, run_agent_pool
from paper_review.runtime import get_runtime, with_stage_time
from paper_review.state.enums import AgentStatus, ReviewStatus
from paper_review.state.schema import WorkflowState

logger = logging.getLogger(__name__)


async def review_node(state: WorkflowState, config: RunnableConfig) -> dict:
    """REVIEW node: run the reviewer agent pool."""
    runtime = get_runtime(config)
    runtime.observer.stage_started("review")
    start = time.monotonic()

    classification = state["classification"]
    roster = build_agent_roster(classification, runtime.skills)
    inputs = ReviewInputs(
        sections=state.get("sections") or [],
        classification=classification,
        merged_text=state["merge"].merged_text,
    )

    outcomes = await run_agent_pool(
        roster,
        inputs,
        runtime.completion,
        runtime.skills,
        runtime.config,
        runtime.observer,
    )

    comments = [
        comment
        for outcome in outcomes
        if outcome.status == AgentStatus.COMPLETED
        for comment in outcome.comments
    ]
    not_completed = sum(1 for o in outcomes if o.status != AgentStatus.COMPLETED)

    elapsed = time.monotonic() - start
    runtime.observer.stage_completed(
        "review",
        elapsed,
        agents=len(roster),
        comments=len(comments),
        failed_or_skipped=not_completed,
    )
    return {
        "roster": roster,
        "outcomes": outcomes,
        "comments": comments,
        "status": ReviewStatus.REVIEWED,
        "stage_seconds": with_stage_time(state, "review", elapsed),
    }
