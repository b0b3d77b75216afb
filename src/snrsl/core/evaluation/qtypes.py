"""Pass 4: question type inference.

A question's options are the distinct, lower-cased guard texts of its
outgoing conditional edges; the options decide the input type.
"""

from __future__ import annotations

from collections.abc import Iterable

from snrsl.core.graph.graph import NodeView, SpecGraph
from snrsl.core.graph.model import EdgeType, NodeType, QuestionType

_NOYES: frozenset[str] = frozenset({"yes", "no"})

def question_options(view: NodeView) -> list[str]:
    """Return the sorted, de-duplicated options of question *view*."""
    return sorted(
        {
            edge.cond.strip().lower()
            for target in view.edges.outgoing
            for edge in target.related
            if edge.type is EdgeType.COND and edge.cond is not None
        }
    )

def infer_question_type(options: Iterable[str]) -> QuestionType:
    """Guess the question type from its option labels.

    No options means free-form text; yes and/or no is a yes/no question;
    all percentages is a percent; anything else needs a select.
    """
    opts = set(options)

    if not opts:
        return QuestionType.TEXT

    if opts <= _NOYES:
        return QuestionType.NOYES

    if all(opt.endswith("%") for opt in opts):
        return QuestionType.PERCENT

    return QuestionType.SELECT

def process_question_types(graph: SpecGraph) -> dict[QuestionType, int]:
    """Set ``qopts`` and ``qtype`` on every question; return a type histogram."""
    counts: dict[QuestionType, int] = {}

    for view in graph.iter_views():
        if view.type is not NodeType.QUESTION:
            continue

        view.data.qopts = question_options(view)
        view.data.qtype = infer_question_type(view.data.qopts)
        counts[view.data.qtype] = counts.get(view.data.qtype, 0) + 1

    return counts
