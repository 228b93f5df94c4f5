"""Graph assembly for the review workflow."""

from paper_review.graphs.review_workflow import WORKFLOW_NODES, create_review_workflow

__all__ = ["WORKFLOW_NODES", "create_review_workflow"]
