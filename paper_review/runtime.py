"""Per-run collaborators handed to workflow nodes.

Nodes receive the completion service, run configuration, skill library
and observer through the ``configurable`` mapping of the LangGraph run
config rather than from module globals, so concurrent runs never share
state.
"""

from dataclasses import dataclass, field

from langchain_core.runnables import RunnableConfig

from paper_review.config import ReviewConfig
from paper_review.llm import CompletionService
from paper_review.review.skills import SkillLibrary
from paper_review.state.schema import WorkflowState
from paper_review.telemetry import LoggingObserver, ReviewObserver

RUNTIME_KEY = "runtime"


@dataclass
class ReviewRuntime:
    """Collaborators for one review run."""

    completion: CompletionService
    config: ReviewConfig = field(default_factory=ReviewConfig)
    skills: SkillLibrary | None = None
    observer: ReviewObserver = field(default_factory=LoggingObserver)

    def __post_init__(self):
        if self.skills is None:
            self.skills = SkillLibrary(self.config.skills_dir)

    def as_config(self) -> RunnableConfig:
        """Run config carrying this runtime."""
        return {"configurable": {RUNTIME_KEY: self}}


def get_runtime(config: RunnableConfig | None) -> ReviewRuntime:
    """
    Extract the runtime from a node's run config.

    Raises:
        KeyError: If the workflow was invoked without a runtime.
    """
    configurable = (config or {}).get("configurable", {})
    runtime = configurable.get(RUNTIME_KEY)
    if runtime is None:
        raise KeyError(
            "Review workflow invoked without a runtime; pass ReviewRuntime.as_config()"
        )
    return runtime


def with_stage_time(state: WorkflowState, stage: str, elapsed: float) -> dict[str, float]:
    """Stage timings with one more stage recorded."""
    timings = dict(state.get("stage_seconds") or {})
    timings[stage] = round(elapsed, 3)
    return timings
