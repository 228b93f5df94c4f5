"""Test configuration and fixtures."""

import inspect

import pytest
from pydantic import BaseModel

from paper_review.config import DEFAULT_SKILLS_DIR, ReviewConfig
from paper_review.errors import CompletionError
from paper_review.llm import CompletionService
from paper_review.review.skills import SkillLibrary
from paper_review.state.models import CommentBatch
from paper_review.telemetry import ReviewObserver


class FakeCompletionService(CompletionService):
    """Scripted completion service keyed by call label.

    A script entry may be a schema instance, a dict validated against the
    requested schema, an exception to raise, a (possibly async) callable
    taking ``system`` and ``prompt``, or a list of such entries consumed
    one per call. Reviewer labels without an entry return no comments.
    """

    def __init__(self, responses: dict | None = None):
        self.responses = dict(responses or {})
        self.calls: list[dict] = []

    async def generate(self, *, system, prompt, schema, temperature, label):
        self.calls.append(
            {
                "system": system,
                "prompt": prompt,
                "schema": schema,
                "temperature": temperature,
                "label": label,
            }
        )
        entry = self.responses.get(label)
        if isinstance(entry, list):
            entry = entry.pop(0)
        if entry is None:
            if schema is CommentBatch:
                return CommentBatch()
            raise CompletionError(f"No scripted response for {label}", label=label)
        if callable(entry) and not isinstance(entry, (BaseModel, BaseException)):
            entry = entry(system=system, prompt=prompt)
            if inspect.isawaitable(entry):
                entry = await entry
        if isinstance(entry, BaseException):
            raise entry
        if isinstance(entry, dict):
            return schema.model_validate(entry)
        return entry

    def calls_for(self, label: str) -> list[dict]:
        return [call for call in self.calls if call["label"] == label]


class RecordingObserver(ReviewObserver):
    """Observer that records every event for assertions."""

    def __init__(self):
        self.events: list[tuple] = []

    def stage_started(self, stage):
        self.events.append(("stage_started", stage))

    def stage_completed(self, stage, elapsed, **counts):
        self.events.append(("stage_completed", stage, counts))

    def agent_settled(self, outcome):
        self.events.append(("agent_settled", outcome.agent_id, outcome.status))

    def llm_attempt(self, label, attempt, max_attempts, system_chars, prompt_chars, fraction):
        self.events.append(("llm_attempt", label, attempt, prompt_chars, fraction))

    def prompt(self, label, system, prompt):
        self.events.append(("prompt", label))

    def response(self, label, response):
        self.events.append(("response", label))

    def warning(self, message):
        self.events.append(("warning", message))

    def of_kind(self, kind: str) -> list[tuple]:
        return [event for event in self.events if event[0] == kind]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def make_completion():
    """Factory for scripted completion services."""
    return FakeCompletionService


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def skills():
    """The skill library shipped with the package."""
    return SkillLibrary(DEFAULT_SKILLS_DIR)


@pytest.fixture
def review_config():
    """Run configuration with a short timeout and no cache writes."""
    return ReviewConfig(model_name="test-model", agent_timeout_seconds=5.0)


@pytest.fixture
def paper_sources():
    """A three-file project: root, one chapter, one nested include."""
    return {
        "main.tex": (
            "\\documentclass{article}\n"
            "\\usepackage{booktabs}\n"
            "\\begin{document}\n"
            "\\begin{abstract}\n"
            "We study how reviewers read papers. Our method finds 12 issues per paper.\n"
            "\\end{abstract}\n"
            "\\section{Introduction}\n"
            "Reviewing papers is slow and inconsistent across reviewers.\n"
            "\\input{sections/method}\n"
            "\\section{Conclusion}\n"
            "We presented an automatic reviewer for long documents.\n"
            "\\end{document}\n"
        ),
        "sections/method.tex": (
            "\\section{Method}\n"
            "Our approach splits the paper into sections before reviewing.\n"
            "\\input{details}\n"
        ),
        "sections/details.tex": (
            "\\subsection{Details}\n"
            "Each reviewer agent sees only the text it is responsible for.\n"
        ),
    }


@pytest.fixture
def classification_response():
    """Classifier output for the ``paper_sources`` project."""
    return {
        "paperType": "method_improvement",
        "paperTypeSummary": "Proposes a new reviewing method.",
        "sectionAssignments": [
            {"sectionTitle": "Introduction", "category": "introduction"},
            {"sectionTitle": "Method", "category": "methods"},
            {"sectionTitle": "Details", "category": "methods"},
            {"sectionTitle": "Conclusion", "category": "conclusion"},
        ],
        "typeSpecificGuidance": {
            "abstractFocus": "Check the headline number.",
            "introductionFocus": "Check the contributions list.",
            "methodsFocus": "Check the ablations.",
            "resultsFocus": "",
            "overallNotes": "Compare against strong baselines.",
        },
    }
