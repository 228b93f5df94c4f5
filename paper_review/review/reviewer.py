"""Reviewer agents and the concurrent agent pool.

Each agent gathers its text, builds its prompts, calls the completion
service (shrinking the prompt on context overflow) and validates the
returned comments. The pool launches every agent at once, bounds each
with its own deadline and waits for all of them to settle. A failing or
slow agent becomes a failed outcome; its siblings are unaffected.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from paper_review.config import ReviewConfig
from paper_review.errors import (
    AgentInvocationError,
    AgentTimeoutError,
    TruncationRetryPolicy,
    describe_failure,
    failure_message,
    log_error_with_context,
)
from paper_review.llm import CompletionService, generate_with_truncation
from paper_review.review.gathering import gather_review_text
from paper_review.review.prompts import build_reviewer_prompts
from paper_review.review.skills import SkillLibrary
from paper_review.review.validator import validate_comments
from paper_review.state.models import (
    AgentOutcome,
    Classification,
    CommentBatch,
    ReviewerAgentSpec,
    Section,
)
from paper_review.telemetry import ReviewObserver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewInputs:
    """Shared, read-only inputs of every agent in a run."""

    sections: list[Section]
    classification: Classification
    merged_text: str


async def run_reviewer_agent(
    spec: ReviewerAgentSpec,
    inputs: ReviewInputs,
    completion: CompletionService,
    skills: SkillLibrary,
    config: ReviewConfig,
    observer: ReviewObserver,
) -> AgentOutcome:
    """
    Run one reviewer agent to completion.

    Returns:
        A completed outcome with validated comments, or a skipped outcome
        when the agent has nothing to review.

    Raises:
        CompletionError: If the completion call fails after retries.
    """
    gathered = gather_review_text(
        spec,
        inputs.sections,
        inputs.classification,
        inputs.merged_text,
        min_section_chars=config.min_section_chars,
        min_figure_chars=config.min_figure_chars,
    )
    if gathered.skipped:
        logger.info(f"[{spec.name}] Skipped: {gathered.skip_reason}")
        return AgentOutcome.skipped(spec, gathered.skip_reason)
    logger.info(f"[{spec.name}] Review text: {len(gathered.text)} chars from {gathered.source}")

    system, prompt, log_system, log_prompt = build_reviewer_prompts(
        spec,
        skills.load_many(spec.skill_files),
        inputs.classification.type_specific_guidance,
        gathered.text,
        max_comments=config.max_comments_per_agent,
    )

    batch = await generate_with_truncation(
        completion,
        system=system,
        prompt=prompt,
        schema=CommentBatch,
        temperature=config.reviewer_temperature,
        label=f"reviewer-{spec.id}",
        observer=observer,
        policy=TruncationRetryPolicy(fractions=config.truncation_fractions),
        log_prompts=config.log_prompts,
        log_system=log_system,
        log_prompt=log_prompt,
    )

    comments = validate_comments(
        batch.comments,
        gathered.text,
        spec,
        max_comments=config.max_comments_per_agent,
    )
    return AgentOutcome.completed(spec, comments, raw_comment_count=len(batch.comments))


async def run_agent_pool(
    roster: list[ReviewerAgentSpec],
    inputs: ReviewInputs,
    completion: CompletionService,
    skills: SkillLibrary,
    config: ReviewConfig,
    observer: ReviewObserver,
) -> list[AgentOutcome]:
    """
    Run every agent concurrently and wait for all of them to settle.

    Args:
        roster: Agents to run.
        inputs: Shared inputs.
        completion: Completion service.
        skills: Skill library.
        config: Run configuration (timeout, concurrency cap).
        observer: Notified as each agent settles.

    Returns:
        One outcome per agent, in roster order.
    """
    semaphore = asyncio.Semaphore(config.max_concurrency) if config.max_concurrency else None
    timeout = config.agent_timeout_seconds

    async def bounded(spec: ReviewerAgentSpec) -> AgentOutcome:
        return await asyncio.wait_for(
            run_reviewer_agent(spec, inputs, completion, skills, config, observer),
            timeout=timeout,
        )

    async def settle(spec: ReviewerAgentSpec) -> AgentOutcome:
        start = time.monotonic()
        try:
            if semaphore is not None:
                async with semaphore:
                    outcome = await bounded(spec)
            else:
                outcome = await bounded(spec)
        except asyncio.TimeoutError:
            error = AgentTimeoutError(spec.id, timeout)
            log_error_with_context(error, stage=spec.id)
            outcome = AgentOutcome.failed(spec, describe_failure(error))
        except Exception as e:
            error = AgentInvocationError(
                failure_message(e),
                agent_id=spec.id,
                details={"cause": e.__class__.__name__},
            )
            log_error_with_context(error, stage=spec.id)
            outcome = AgentOutcome.failed(spec, describe_failure(error))
        outcome.elapsed_seconds = time.monotonic() - start
        observer.agent_settled(outcome)
        return outcome

    logger.info(f"Launching {len(roster)} reviewer agents")
    settled = await asyncio.gather(*(settle(spec) for spec in roster), return_exceptions=True)

    outcomes = []
    for spec, result in zip(roster, settled):
        if isinstance(result, BaseException):
            outcomes.append(AgentOutcome.failed(spec, describe_failure(result)))
        else:
            outcomes.append(result)
    return outcomes
