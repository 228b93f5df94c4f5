"""Application settings and per-run review configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")

PACKAGE_ROOT = Path(__file__).parent.parent
DEFAULT_SKILLS_DIR = PACKAGE_ROOT / "skills"


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Anthropic
    anthropic_api_key: str = os.getenv("ANTHROPIC_API_KEY", "")
    default_model: str = os.getenv("PAPER_REVIEW_MODEL", "claude-sonnet-4-5-20250929")

    # LangSmith
    langsmith_api_key: str = os.getenv("LANGSMITH_API_KEY", "")
    langsmith_tracing: bool = os.getenv("LANGSMITH_TRACING", "false").lower() == "true"
    langsmith_project: str = os.getenv("LANGSMITH_PROJECT", "paper-review")

    # Artifacts
    cache_dir: str = os.getenv("PAPER_REVIEW_CACHE_DIR", str(PROJECT_ROOT / "data" / "cache"))
    log_dir: str = os.getenv("PAPER_REVIEW_LOG_DIR", "")

    # Set PAPER_REVIEW_LOG_PROMPTS=true to log full prompts and responses
    log_prompts: bool = os.getenv("PAPER_REVIEW_LOG_PROMPTS", "false").lower() == "true"

    def __post_init__(self):
        """Configure LangSmith environment variables."""
        if self.langsmith_api_key:
            os.environ["LANGSMITH_API_KEY"] = self.langsmith_api_key
            os.environ["LANGSMITH_TRACING"] = str(self.langsmith_tracing).lower()
            os.environ["LANGSMITH_PROJECT"] = self.langsmith_project

    def validate(self) -> list[str]:
        """Validate required settings are present."""
        errors = []
        if not self.anthropic_api_key:
            errors.append("ANTHROPIC_API_KEY is not set")
        return errors


@dataclass
class ReviewConfig:
    """Explicit configuration for a single review run.

    Nothing here is read from the environment; outer surfaces build it
    with ``ReviewConfig.from_settings`` or pass values directly.

    Attributes:
        model_name: Model identifier handed to the completion service.
        classifier_temperature: Sampling temperature for the classifier call.
        reviewer_temperature: Sampling temperature for reviewer agents.
        agent_timeout_seconds: Wall-clock budget for one agent's whole run.
        max_concurrency: Cap on simultaneously running agents (None = all at once).
        truncation_fractions: Prompt fractions tried on context overflow.
        min_section_chars: Gathered section text below this skips the agent.
        min_figure_chars: Figure/table excerpts below this skip the agent.
        max_comments_per_agent: Validated comments kept per agent.
        skills_dir: Root of the skill reference library.
        cache_dir: Root directory for cache artifacts (None disables writes).
        review_log_dir: Directory for the JSONL review log (None disables it).
        log_prompts: Log prompts and responses with long blocks previewed.
        comment_prefix: Prefix added to delivered comment text (None disables it).
    """

    model_name: str = "claude-sonnet-4-5-20250929"
    classifier_temperature: float = 0.3
    reviewer_temperature: float = 0.4
    agent_timeout_seconds: float = 120.0
    max_concurrency: int | None = None
    truncation_fractions: tuple[float, ...] = (1.0, 0.5, 0.25)
    min_section_chars: int = 30
    min_figure_chars: int = 50
    max_comments_per_agent: int = 10
    skills_dir: Path = field(default_factory=lambda: DEFAULT_SKILLS_DIR)
    cache_dir: Path | None = None
    review_log_dir: Path | None = None
    log_prompts: bool = False
    comment_prefix: str | None = "[Paper Review]"

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "ReviewConfig":
        """Build a run configuration from environment-derived settings."""
        values = {
            "model_name": settings.default_model,
            "cache_dir": Path(settings.cache_dir) if settings.cache_dir else None,
            "review_log_dir": Path(settings.log_dir) if settings.log_dir else None,
            "log_prompts": settings.log_prompts,
        }
        values.update(overrides)
        return cls(**values)


# Global settings instance
settings = Settings()
