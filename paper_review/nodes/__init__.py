"""Workflow nodes for the review graph."""

from paper_review.nodes.documents import merge_node, parse_node
from paper_review.nodes.classify import classify_node
from paper_review.nodes.review import review_node
from paper_review.nodes.output import aggregate_node, remap_node

__all__ = [
    "merge_node",
    "parse_node",
    "classify_node",
    "review_node",
    "remap_node",
    "aggregate_node",
]
