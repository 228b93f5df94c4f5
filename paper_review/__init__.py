"""Multi-agent review of multi-file LaTeX papers.

Merges a project into one document, classifies the paper, runs reviewer
agents concurrently and maps their comments back to the original files.
"""

from paper_review.pipeline import analyze_project, review_project, run_full_review

__all__ = ["analyze_project", "review_project", "run_full_review"]

__version__ = "0.1.0"
