"""Configuration for the paper review pipeline."""

from paper_review.config.settings import (
    DEFAULT_SKILLS_DIR,
    ReviewConfig,
    Settings,
    settings,
)

__all__ = [
    "DEFAULT_SKILLS_DIR",
    "ReviewConfig",
    "Settings",
    "settings",
]
