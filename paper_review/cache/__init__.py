"""Project-scoped cache artifacts and the review log.

Each project gets a directory under the cache root:

    <root>/<projectId>/merged.tex            merged document
    <root>/<projectId>/metadata.json         project file categorization
    <root>/<projectId>/review_comments.json  the last ReviewResult

Usage:
    from paper_review.cache import ArtifactCache

    cache = ArtifactCache("./data/cache")
    cache.write_merged_text(project_id, merge.merged_text)
    cached = cache.read_result(project_id)

The review log is a separate, optional JSONL file per day
(``paper-review-YYYY-MM-DD.jsonl``) with one line per completed review.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from paper_review.state.models import ProjectMetadata, ReviewResult

logger = logging.getLogger(__name__)

MERGED_FILENAME = "merged.tex"
METADATA_FILENAME = "metadata.json"
RESULT_FILENAME = "review_comments.json"
REVIEW_LOG_PATTERN = "paper-review-{date}.jsonl"


class ArtifactCache:
    """File-system cache of per-project review artifacts."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def project_dir(self, project_id: str) -> Path:
        return self.root / project_id

    def _write(self, project_id: str, filename: str, content: str) -> Path:
        directory = self.project_dir(project_id)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_text(content, encoding="utf-8")
        logger.info(f"Cached {filename} for {project_id} at {path}")
        return path

    def _read(self, project_id: str, filename: str) -> str | None:
        path = self.project_dir(project_id) / filename
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    # -------------------------------------------------------------------------
    # Merged document
    # -------------------------------------------------------------------------

    def write_merged_text(self, project_id: str, merged_text: str) -> Path:
        return self._write(project_id, MERGED_FILENAME, merged_text)

    def read_merged_text(self, project_id: str) -> str | None:
        return self._read(project_id, MERGED_FILENAME)

    # -------------------------------------------------------------------------
    # Project metadata
    # -------------------------------------------------------------------------

    def write_metadata(self, metadata: ProjectMetadata) -> Path:
        content = json.dumps(metadata.model_dump(by_alias=True, mode="json"), indent=2)
        return self._write(metadata.project_id, METADATA_FILENAME, content)

    def read_metadata(self, project_id: str) -> ProjectMetadata | None:
        content = self._read(project_id, METADATA_FILENAME)
        if content is None:
            return None
        return ProjectMetadata.model_validate_json(content)

    # -------------------------------------------------------------------------
    # Review result
    # -------------------------------------------------------------------------

    def write_result(self, result: ReviewResult) -> Path:
        content = json.dumps(result.to_cache_dict(), indent=2)
        return self._write(result.project_id, RESULT_FILENAME, content)

    def read_result(self, project_id: str) -> ReviewResult | None:
        content = self._read(project_id, RESULT_FILENAME)
        if content is None:
            return None
        return ReviewResult.model_validate_json(content)


def review_log_entry(result: ReviewResult) -> dict:
    """One JSONL record describing a completed review."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "projectId": result.project_id,
        "model": result.model,
        "paperType": result.classification.paper_type.value,
        "summary": result.summary.model_dump(by_alias=True),
        "failedAgents": [agent.model_dump(by_alias=True) for agent in result.failed_agents],
        "comments": [
            comment.model_dump(by_alias=True, mode="json") for comment in result.all_comments()
        ],
    }


def append_review_log(log_dir: str | Path, result: ReviewResult) -> Path | None:
    """
    Append a review to the day's JSONL log.

    Write failures are logged and swallowed; the log never fails a review.

    Returns:
        Path of the log file, or None if the write failed.
    """
    directory = Path(log_dir)
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    path = directory / REVIEW_LOG_PATTERN.format(date=date)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(review_log_entry(result)) + "\n")
    except OSError as e:
        logger.warning(f"Could not write review log {path}: {e}")
        return None
    logger.info(f"Appended review of {result.project_id} to {path}")
    return path


__all__ = [
    "ArtifactCache",
    "append_review_log",
    "review_log_entry",
    "MERGED_FILENAME",
    "METADATA_FILENAME",
    "RESULT_FILENAME",
]
