"""Tests for reviewer agents and the agent pool."""

import asyncio
import logging
from dataclasses import replace

import pytest

from paper_review.documents import merge_documents, parse_sections
from paper_review.errors import CompletionError, ContextLengthExceeded
from paper_review.review.agents import REVIEWER_AGENTS
from paper_review.review.reviewer import ReviewInputs, run_agent_pool, run_reviewer_agent
from paper_review.state.enums import AgentStatus, PaperType
from paper_review.state.models import Classification, TypeSpecificGuidance

AGENTS = {spec.id: spec for spec in REVIEWER_AGENTS}


@pytest.fixture
def inputs(paper_sources):
    merged_text = merge_documents("main.tex", paper_sources).merged_text
    classification = Classification(
        paper_type=PaperType.METHOD_IMPROVEMENT,
        section_mapping={
            "abstract": ["Abstract"],
            "introduction": ["Introduction"],
            "related_work": [],
            "methods": ["Method", "Details"],
            "results": [],
            "conclusion": ["Conclusion"],
            "appendix": [],
        },
        type_specific_guidance=TypeSpecificGuidance(methods_focus="Check the ablations."),
    )
    return ReviewInputs(
        sections=parse_sections(merged_text),
        classification=classification,
        merged_text=merged_text,
    )


def _batch(*highlights: str) -> dict:
    return {
        "comments": [
            {"highlightText": h, "comment": "Make this concrete.", "severity": "warning"}
            for h in highlights
        ]
    }


class TestRunReviewerAgent:
    """Tests for a single agent run."""

    async def test_completed_with_validation(
        self, inputs, skills, review_config, observer, make_completion
    ):
        completion = make_completion(
            {"reviewer-methods": _batch("Our approach splits the paper", "not in the paper")}
        )
        outcome = await run_reviewer_agent(
            AGENTS["methods"], inputs, completion, skills, review_config, observer
        )

        assert outcome.status == AgentStatus.COMPLETED
        assert outcome.raw_comment_count == 2
        assert [c.highlight_text for c in outcome.comments] == ["Our approach splits the paper"]

        call = completion.calls_for("reviewer-methods")[0]
        assert call["temperature"] == 0.4
        assert "Check the ablations." in call["system"]
        assert "Each reviewer agent sees only the text" in call["prompt"]
        assert "We presented an automatic reviewer" not in call["prompt"]

    async def test_skipped_without_text(
        self, inputs, skills, review_config, observer, make_completion
    ):
        completion = make_completion()
        outcome = await run_reviewer_agent(
            AGENTS["related_work"], inputs, completion, skills, review_config, observer
        )

        assert outcome.status == AgentStatus.SKIPPED
        assert outcome.reason == "No matching sections found for categories: related_work"
        assert completion.calls == []

    async def test_retries_on_overflow(
        self, inputs, skills, review_config, observer, make_completion
    ):
        completion = make_completion(
            {"reviewer-writing_style": [ContextLengthExceeded("too long"), _batch("papers")]}
        )
        outcome = await run_reviewer_agent(
            AGENTS["writing_style"], inputs, completion, skills, review_config, observer
        )

        assert outcome.status == AgentStatus.COMPLETED
        attempts = [e for e in observer.of_kind("llm_attempt") if e[1] == "reviewer-writing_style"]
        assert [(e[2], e[4]) for e in attempts] == [(1, 1.0), (2, 0.5)]
        assert len(observer.of_kind("warning")) == 1


class TestRunAgentPool:
    """Tests for the concurrent agent pool."""

    async def test_partial_failure(self, inputs, skills, review_config, observer, make_completion):
        completion = make_completion(
            {
                "reviewer-abstract": CompletionError("service unavailable"),
                "reviewer-methods": _batch("Our approach splits the paper"),
            }
        )
        outcomes = await run_agent_pool(
            list(REVIEWER_AGENTS), inputs, completion, skills, review_config, observer
        )

        assert [o.agent_id for o in outcomes] == [spec.id for spec in REVIEWER_AGENTS]
        by_id = {o.agent_id: o for o in outcomes}
        assert by_id["abstract"].status == AgentStatus.FAILED
        assert by_id["abstract"].reason == "Error: service unavailable"
        assert by_id["methods"].status == AgentStatus.COMPLETED
        assert len(by_id["methods"].comments) == 1
        assert by_id["figures_tables"].status == AgentStatus.SKIPPED
        assert by_id["appendix"].status == AgentStatus.SKIPPED
        assert by_id["structure"].status == AgentStatus.COMPLETED
        assert len(observer.of_kind("agent_settled")) == len(REVIEWER_AGENTS)

    async def test_failure_logged_as_invocation_error(
        self, inputs, skills, review_config, observer, make_completion, caplog
    ):
        def broken(system, prompt):
            raise ValueError("malformed tool call")

        completion = make_completion({"reviewer-abstract": broken})

        with caplog.at_level(logging.ERROR, logger="paper_review.errors.handlers"):
            outcomes = await run_agent_pool(
                [AGENTS["abstract"]], inputs, completion, skills, review_config, observer
            )

        assert outcomes[0].status == AgentStatus.FAILED
        assert outcomes[0].reason == "Error: malformed tool call"
        assert "AgentInvocationError: malformed tool call" in caplog.text
        assert "'cause': 'ValueError'" in caplog.text
        assert "'agent_id': 'abstract'" in caplog.text

    async def test_timeout(self, inputs, skills, review_config, observer, make_completion):
        async def slow(system, prompt):
            await asyncio.sleep(5)

        completion = make_completion({"reviewer-abstract": slow})
        config = replace(review_config, agent_timeout_seconds=0.05)

        outcomes = await run_agent_pool(
            [AGENTS["abstract"], AGENTS["methods"]], inputs, completion, skills, config, observer
        )

        assert outcomes[0].status == AgentStatus.FAILED
        assert outcomes[0].reason == "Error: Timeout after 0.05s"
        assert outcomes[1].status == AgentStatus.COMPLETED

    async def test_max_concurrency(self, inputs, skills, review_config, observer, make_completion):
        running = 0
        peak = 0

        async def tracked(system, prompt):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return _batch()

        roster = [AGENTS["writing_style"], AGENTS["latex_formatting"], AGENTS["structure"]]
        completion = make_completion({f"reviewer-{spec.id}": tracked for spec in roster})
        config = replace(review_config, max_concurrency=1)

        outcomes = await run_agent_pool(roster, inputs, completion, skills, config, observer)

        assert peak == 1
        assert all(o.status == AgentStatus.COMPLETED for o in outcomes)
