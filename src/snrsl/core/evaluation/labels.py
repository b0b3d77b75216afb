"""Pass 1: label backfill.

Nodes created without an explicit label (action nodes, the class root) take
one from their index key with the leading ``kind$`` prefixes stripped.
"""

from __future__ import annotations

from snrsl.config.dialect import DEFAULT_DIALECT, DialectPatterns
from snrsl.core.graph.graph import SpecGraph

def process_labels(graph: SpecGraph, dialect: DialectPatterns = DEFAULT_DIALECT) -> int:
    """Backfill missing labels; return the number of nodes labelled."""
    labelled = 0

    for node in graph.iter_nodes():
        if node.label:
            continue

        if node.key is not None:
            node.label = dialect.strip_label_prefix(str(node.key))
        else:
            node.label = node.type.value
        labelled += 1

    return labelled
