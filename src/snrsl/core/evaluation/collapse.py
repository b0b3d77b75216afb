"""Pass 3: condition collapsing.

If every class that can reach a question has its own predicated edge to the
same action, the action applies regardless of class: the predicated edges
are removed and replaced with a single edge without a predicate.  Each action
of a question is considered independently.  The replacement keeps the answer
text of the first edge in the group, so answers that differ between classes
are merged into that one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from snrsl.core.errors import InvariantViolation
from snrsl.core.graph.graph import NodeView, SpecGraph
from snrsl.core.graph.model import Action, EdgeType, NodeType, SpecEdge

logger = logging.getLogger(__name__)

def class_remaining(edges: Iterable[SpecEdge], class_in: frozenset[str]) -> int:
    """Count the classes in *class_in* not cleared by any of *edges*.

    An edge clears the class named by its predicate; an edge with no
    predicate already applies to every class.
    """
    cleared: set[str] = set()
    for edge in edges:
        if edge.pred is None:
            return 0
        cleared.add(edge.pred)
    return len(class_in - cleared)

def collapse_question(graph: SpecGraph, view: NodeView) -> int:
    """Collapse redundant conditional edges leaving *view*.

    Returns:
        The number of edge groups replaced.
    """
    class_in = view.data.class_in
    if class_in is None:
        raise InvariantViolation(f"Class inputs were not computed for question {view.id}")

    collapsed = 0

    for target in view.edges.outgoing:
        groups: dict[Action | None, list[SpecEdge]] = {}
        for edge in target.related:
            if edge.type is EdgeType.COND:
                groups.setdefault(edge.action, []).append(edge)

        for action, group in groups.items():
            if class_remaining(group, class_in) > 0:
                continue
            if len(group) == 1 and group[0].pred is None:
                continue

            for edge in group:
                graph.remove_edge(edge)

            first = group[0]
            graph.add_edge(
                view.id,
                target.id,
                SpecEdge(
                    type=EdgeType.COND,
                    cond=first.cond,
                    action=action,
                    pred=None,
                    properties=dict(first.properties),
                ),
            )
            collapsed += 1

            logger.debug(
                "Collapsed %d edges for action %s on %d->%d",
                len(group),
                action.value if action is not None else None,
                view.id,
                target.id,
            )

    return collapsed

def process_collapsing(graph: SpecGraph) -> int:
    """Collapse conditions on every question; return the groups replaced."""
    collapsed = 0

    for view in graph.iter_views():
        if view.type is NodeType.QUESTION:
            collapsed += collapse_question(graph, view)

    logger.debug("Collapsed %d condition groups", collapsed)
    return collapsed
