"""Tests for comment anchor validation."""

import pytest

from paper_review.errors import ValidationMismatch
from paper_review.review.agents import REVIEWER_AGENTS
from paper_review.review.validator import anchor_in_text, repair_escaped_latex, validate_comments
from paper_review.state.enums import Severity
from paper_review.state.models import CommentDraft

SPEC = REVIEWER_AGENTS[0]
REVIEW_TEXT = (
    "\\begin{table}\\centering\n"
    "We study how reviewers read papers. Our method finds 12 issues per paper.\n"
    "\\end{table}"
)


def _draft(highlight: str, comment: str = "Be specific.") -> CommentDraft:
    return CommentDraft(highlight_text=highlight, comment=comment, severity=Severity.WARNING)


class TestRepairEscapedLatex:
    """Tests for JSON escape repair."""

    def test_backspace_restored(self):
        assert repair_escaped_latex("\x08egin{table}") == "\\begin{table}"

    def test_other_controls(self):
        assert repair_escaped_latex("\x0crac \textbf \ref") == "\\frac \\textbf \\ref"

    def test_plain_text_unchanged(self):
        assert repair_escaped_latex("plain") == "plain"


class TestAnchorInText:
    """Tests for anchor lookup."""

    def test_verbatim(self):
        assert anchor_in_text("Our method finds", REVIEW_TEXT) == "Our method finds"

    def test_repaired(self):
        assert anchor_in_text("\x08egin{table}", REVIEW_TEXT) == "\\begin{table}"

    def test_missing(self):
        with pytest.raises(ValidationMismatch):
            anchor_in_text("Our approach finds", REVIEW_TEXT)

    def test_too_long(self):
        with pytest.raises(ValidationMismatch):
            anchor_in_text(REVIEW_TEXT * 3, REVIEW_TEXT * 3)

    def test_empty(self):
        with pytest.raises(ValidationMismatch):
            anchor_in_text("", REVIEW_TEXT)


class TestValidateComments:
    """Tests for validate_comments."""

    def test_keeps_only_anchored_comments(self):
        drafts = [
            _draft("We study how reviewers read papers."),
            _draft("a paraphrase that is not in the text"),
            _draft("\x08egin{table}", "Use booktabs."),
        ]
        comments = validate_comments(drafts, REVIEW_TEXT, SPEC)

        assert [c.highlight_text for c in comments] == [
            "We study how reviewers read papers.",
            "\\begin{table}",
        ]
        for comment in comments:
            assert comment.highlight_text in REVIEW_TEXT
            assert comment.category == SPEC.id
            assert comment.agent_name == SPEC.name
        assert comments[1].comment_text == "Use booktabs."

    def test_cap_applies_after_validation(self):
        drafts = [_draft("not present")] * 3 + [_draft("papers")] * 4
        comments = validate_comments(drafts, REVIEW_TEXT, SPEC, max_comments=2)
        assert len(comments) == 2
        assert all(c.highlight_text == "papers" for c in comments)

    def test_repair_over_length_limit_is_discarded(self):
        # 199 characters raw, 201 once both backspaces are restored
        body = "y" * 190
        raw = f"\x08egin{{x}}{body}\x08"
        repaired = repair_escaped_latex(raw)
        assert len(raw) == 199
        assert len(repaired) == 201
        review_text = f"plain words here\n{repaired}\n"

        comments = validate_comments(
            [_draft("plain words here"), _draft(raw)], review_text, SPEC
        )

        assert [c.highlight_text for c in comments] == ["plain words here"]

    def test_no_drafts(self):
        assert validate_comments([], REVIEW_TEXT, SPEC) == []
