"""Review workflow graph assembly.

This module provides the factory function for the paper review graph:
a straight pipeline of six nodes over ``WorkflowState``. Runtime
collaborators are supplied per invocation through the run config (see
``paper_review.runtime``).
"""

import logging

from langgraph.graph import StateGraph, START, END

from paper_review.nodes import (
    merge_node,
    parse_node,
    classify_node,
    review_node,
    remap_node,
    aggregate_node,
)
from paper_review.state.schema import WorkflowState

logger = logging.getLogger(__name__)


# All nodes in workflow order
WORKFLOW_NODES = [
    "merge",
    "parse",
    "classify",
    "review",
    "remap",
    "aggregate",
]

NODE_FUNCTIONS = {
    "merge": merge_node,
    "parse": parse_node,
    "classify": classify_node,
    "review": review_node,
    "remap": remap_node,
    "aggregate": aggregate_node,
}


def create_review_workflow():
    """
    Create the compiled paper review workflow.

    Flow:
        START -> merge -> parse -> classify -> review -> remap -> aggregate -> END

    Returns:
        Compiled StateGraph; invoke it with ``ainvoke(state, config)`` where
        ``config`` carries a ReviewRuntime.
    """
    workflow = StateGraph(WorkflowState)

    for name in WORKFLOW_NODES:
        workflow.add_node(name, NODE_FUNCTIONS[name])

    workflow.add_edge(START, WORKFLOW_NODES[0])
    for current, following in zip(WORKFLOW_NODES, WORKFLOW_NODES[1:]):
        workflow.add_edge(current, following)
    workflow.add_edge(WORKFLOW_NODES[-1], END)

    logger.debug(f"Review workflow assembled: {' -> '.join(WORKFLOW_NODES)}")
    return workflow.compile()
