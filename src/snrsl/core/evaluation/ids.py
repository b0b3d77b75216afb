"""Pass 5: question id assignment.

Ids are derived from the question label alone, so re-compiling unchanged
input reproduces the same ids.
"""

from __future__ import annotations

import hashlib

from snrsl.core.graph.graph import SpecGraph
from snrsl.core.graph.model import NodeType

QID_PREFIX = "q_"
QID_WIDTH = 5

def question_id(label: str, prefix: str = QID_PREFIX, width: int = QID_WIDTH) -> str:
    """Return ``prefix`` plus the first *width* hex digits of SHA-256(label)."""
    digest = hashlib.sha256(label.encode("utf-8")).hexdigest()
    return prefix + digest[:width]

def process_question_ids(graph: SpecGraph) -> int:
    """Set ``qid`` on every question; return the number of questions."""
    assigned = 0
    for node in graph.iter_nodes():
        if node.type is NodeType.QUESTION:
            node.qid = question_id(node.label)
            assigned += 1
    return assigned
