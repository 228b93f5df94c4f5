"""Tests for the artifact cache and the review log."""

import json

from paper_review.cache import (
    MERGED_FILENAME,
    RESULT_FILENAME,
    ArtifactCache,
    append_review_log,
    review_log_entry,
)
from paper_review.state.enums import PaperType, Severity
from paper_review.state.models import (
    Classification,
    FailedAgent,
    FileCategory,
    MappedComment,
    ProjectMetadata,
    ReviewResult,
    ReviewSummary,
)


def _result() -> ReviewResult:
    comment = MappedComment(
        highlight_text="We study",
        comment_text="[Paper Review] [warning] [Abstract Reviewer] Be specific.",
        severity=Severity.WARNING,
        category="abstract",
        agent_name="Abstract Reviewer",
        doc_path="main.tex",
        start_offset=10,
        end_offset=18,
    )
    return ReviewResult(
        project_id="proj-1",
        model="test-model",
        classification=Classification(
            paper_type=PaperType.DATASET,
            section_mapping={"abstract": ["Abstract"]},
        ),
        comments_by_doc={"main.tex": [comment]},
        summary=ReviewSummary(total=1, by_category={"abstract": 1}, by_severity={"warning": 1}),
        failed_agents=[FailedAgent(id="appendix", name="Appendix Reviewer", reason="No appendix")],
    )


# =============================================================================
# ArtifactCache
# =============================================================================


class TestArtifactCache:
    """Tests for ArtifactCache."""

    def test_missing_artifacts_return_none(self, tmp_path):
        cache = ArtifactCache(tmp_path)
        assert cache.read_merged_text("nope") is None
        assert cache.read_metadata("nope") is None
        assert cache.read_result("nope") is None

    def test_merged_text(self, tmp_path):
        cache = ArtifactCache(tmp_path)
        path = cache.write_merged_text("proj-1", "\\section{A}\n")

        assert path == tmp_path / "proj-1" / MERGED_FILENAME
        assert cache.read_merged_text("proj-1") == "\\section{A}\n"

    def test_result_json_uses_external_keys(self, tmp_path):
        cache = ArtifactCache(tmp_path)
        cache.write_result(_result())

        data = json.loads((tmp_path / "proj-1" / RESULT_FILENAME).read_text())
        assert data["projectId"] == "proj-1"
        assert data["classification"]["paperType"] == "dataset"
        assert data["classification"]["sectionMapping"] == {"abstract": ["Abstract"]}
        assert data["summary"]["byCategory"] == {"abstract": 1}
        comment = data["commentsByDoc"]["main.tex"][0]
        assert comment["startOffset"] == 10
        assert comment["agentName"] == "Abstract Reviewer"
        assert "diagnostics" not in data

    def test_result_round_trip(self, tmp_path):
        cache = ArtifactCache(tmp_path)
        original = _result()
        cache.write_result(original)

        loaded = cache.read_result("proj-1")
        assert loaded.project_id == original.project_id
        assert loaded.reviewed_at == original.reviewed_at
        assert loaded.all_comments() == original.all_comments()
        assert loaded.failed_agents == original.failed_agents

    def test_result_overwritten(self, tmp_path):
        cache = ArtifactCache(tmp_path)
        cache.write_result(_result())
        second = _result().model_copy(update={"model": "other-model"})
        cache.write_result(second)
        assert cache.read_result("proj-1").model == "other-model"

    def test_metadata(self, tmp_path):
        cache = ArtifactCache(tmp_path)
        metadata = ProjectMetadata(
            project_id="proj-1",
            root_doc_path="main.tex",
            categories={"texFiles": FileCategory(description="TeX", files=["main.tex"])},
            merged_text_length=42,
        )
        cache.write_metadata(metadata)

        data = json.loads((tmp_path / "proj-1" / "metadata.json").read_text())
        assert data["rootDocPath"] == "main.tex"
        assert data["categories"]["texFiles"]["count"] == 1
        assert cache.read_metadata("proj-1").merged_text_length == 42


# =============================================================================
# Review Log
# =============================================================================


class TestReviewLog:
    """Tests for the JSONL review log."""

    def test_entry(self):
        entry = review_log_entry(_result())
        assert entry["projectId"] == "proj-1"
        assert entry["paperType"] == "dataset"
        assert entry["failedAgents"][0]["id"] == "appendix"
        assert entry["comments"][0]["docPath"] == "main.tex"

    def test_append(self, tmp_path):
        first = append_review_log(tmp_path / "logs", _result())
        second = append_review_log(tmp_path / "logs", _result())

        assert first == second
        assert first.name.startswith("paper-review-")
        lines = first.read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])["model"] == "test-model"

    def test_write_failure_is_swallowed(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")
        assert append_review_log(blocker, _result()) is None
