"""Pass 2: class-input propagation.

Each question's ``class_in`` is the set of class codes that can reach it:
the codes of its direct class parents plus the ``class_in`` of every parent
question, transitively.  The result is a pure union, so the order in which
parents are visited cannot change it, and a question whose ``class_in`` is
already known is never recomputed.
"""

from __future__ import annotations

import logging

from snrsl.core.errors import InvariantViolation
from snrsl.core.graph.graph import NodeView, SpecGraph
from snrsl.core.graph.model import NodeType

logger = logging.getLogger(__name__)

def compute_class_in(view: NodeView) -> frozenset[str]:
    """Return (and memoize on the node) the class inputs of question *view*.

    Ancestors are walked depth-first through question in-edges.  An ancestor
    that already carries ``class_in`` contributes it whole and is not walked
    further; cycles through repeated question text are cut by the visited set.

    Raises:
        InvariantViolation: No class reaches the question.
    """
    if view.data.class_in is not None:
        return view.data.class_in

    codes: set[str] = set()
    visited = {view.id}
    stack = [view]

    while stack:
        current = stack.pop()
        for parent in current.edges.incoming:
            if parent.type is NodeType.CLASS:
                codes.add(parent.data.class_code)
            elif parent.type is NodeType.QUESTION and parent.id not in visited:
                visited.add(parent.id)
                if parent.data.class_in is not None:
                    codes |= parent.data.class_in
                else:
                    stack.append(parent)

    if not codes:
        raise InvariantViolation(
            f"Question {view.id} ({view.data.label!r}) has no path to a class"
        )

    view.data.class_in = frozenset(codes)
    return view.data.class_in

def process_class_inputs(graph: SpecGraph) -> int:
    """Compute ``class_in`` for every question; return the question count."""
    questions = 0

    for view in graph.iter_views():
        if view.type is not NodeType.QUESTION:
            continue
        compute_class_in(view)
        questions += 1

    logger.debug("Propagated class inputs to %d questions", questions)
    return questions
