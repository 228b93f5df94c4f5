"""Skill reference library.

Reviewer prompts embed writing guidelines stored as markdown files under
a skills directory, addressed by relative path (for example
``03_paper_sections/abstract.md``). A missing file never fails a review:
``load`` returns a placeholder string naming the path instead.
"""

import logging
from pathlib import Path

from paper_review.config import DEFAULT_SKILLS_DIR
from paper_review.errors import MissingReferenceResource

logger = logging.getLogger(__name__)

MISSING_SKILL_PLACEHOLDER = "[skill file not found: {path}]"


class SkillLibrary:
    """Read-only access to the skill reference files."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root) if root is not None else DEFAULT_SKILLS_DIR

    def path_for(self, relative_path: str) -> Path:
        return self.root / relative_path

    def exists(self, relative_path: str) -> bool:
        return self.path_for(relative_path).is_file()

    def read(self, relative_path: str) -> str:
        """
        Read a skill file.

        Raises:
            MissingReferenceResource: If the file cannot be read.
        """
        path = self.path_for(relative_path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise MissingReferenceResource(
                f"Skill file not found: {relative_path} ({e})",
                resource=relative_path,
            ) from e
        logger.debug(f"Loaded skill: {relative_path} ({len(content)} chars)")
        return content

    def load(self, relative_path: str) -> str:
        """Read a skill file, degrading to a placeholder when it is missing."""
        try:
            return self.read(relative_path)
        except MissingReferenceResource as e:
            logger.warning(e.message)
            return MISSING_SKILL_PLACEHOLDER.format(path=relative_path)

    def load_many(self, relative_paths: tuple[str, ...] | list[str]) -> str:
        """Concatenate skill files, each headed by its path."""
        return "\n\n".join(
            f"--- {path} ---\n{self.load(path)}" for path in relative_paths
        )
