"""Graph evaluator for snrsl.

Runs the normalization passes over a fully parsed graph, in place.  Each
pass visits every node before the next pass starts, since later passes
depend on earlier results for all nodes, not only the current one.

Passes executed:
    1. Label backfill
    2. Class-input propagation (questions)
    3. Condition collapsing (questions)
    4. Question type inference
    5. Question id assignment
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from snrsl.config.dialect import DEFAULT_DIALECT, DialectPatterns
from snrsl.core.evaluation.class_inputs import process_class_inputs
from snrsl.core.evaluation.collapse import process_collapsing
from snrsl.core.evaluation.ids import process_question_ids
from snrsl.core.evaluation.labels import process_labels
from snrsl.core.evaluation.qtypes import process_question_types
from snrsl.core.graph.graph import SpecGraph
from snrsl.core.graph.model import QuestionType

logger = logging.getLogger(__name__)

@dataclass
class EvaluationResult:
    """Summary of an evaluation run."""

    labelled: int = 0
    questions: int = 0
    collapsed: int = 0
    question_types: dict[QuestionType, int] = field(default_factory=dict)

def run_evaluation(
    graph: SpecGraph,
    progress_callback: Callable[[str, float], None] | None = None,
    dialect: DialectPatterns = DEFAULT_DIALECT,
) -> EvaluationResult:
    """Run every pass over *graph* and return a summary of what changed.

    Raises:
        InvariantViolation: The graph is not one the parser could produce.
    """
    result = EvaluationResult()

    def report(phase: str, pct: float) -> None:
        if progress_callback is not None:
            progress_callback(phase, pct)

    report("Backfilling labels", 0.0)
    result.labelled = process_labels(graph, dialect)
    report("Backfilling labels", 1.0)

    report("Propagating class inputs", 0.0)
    result.questions = process_class_inputs(graph)
    report("Propagating class inputs", 1.0)

    report("Collapsing conditions", 0.0)
    result.collapsed = process_collapsing(graph)
    report("Collapsing conditions", 1.0)

    report("Inferring question types", 0.0)
    result.question_types = process_question_types(graph)
    report("Inferring question types", 1.0)

    report("Assigning question ids", 0.0)
    process_question_ids(graph)
    report("Assigning question ids", 1.0)

    logger.info(
        "Evaluated %d questions (%d labels backfilled, %d condition groups collapsed)",
        result.questions,
        result.labelled,
        result.collapsed,
    )
    logger.info(
        "Question types: %s",
        {qtype.value: count for qtype, count in result.question_types.items()},
    )
    return result

def evaluate(graph: SpecGraph) -> SpecGraph:
    """Normalize *graph* in place and return it."""
    run_evaluation(graph)
    return graph
