"""Exception hierarchy for snrsl.

Every error raised by the compiler core derives from :class:`SpecError` and
from the closest builtin exception, so callers may catch either.  All of
them are fatal: the pipeline has no partial-success mode.
"""

from __future__ import annotations

from typing import Any

class SpecError(Exception):
    """Base class for all compiler errors."""

# ---------------------------------------------------------------------------
# Input shape / syntax (raised by the parser)
# ---------------------------------------------------------------------------

class InputShapeError(SpecError, ValueError):
    """A row is missing a required column."""

    def __init__(self, column: str, row: int) -> None:
        super().__init__(f"Missing column '{column}' for row {row}")
        self.column = column
        self.row = row

class SpecSyntaxError(SpecError, ValueError):
    """A line of question-set text could not be parsed."""

    def __init__(
        self,
        message: str,
        text: str = "",
        offset: int | None = None,
        row: int | None = None,
    ) -> None:
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
        self.text = text
        self.offset = offset
        self.row = row

    def __str__(self) -> str:
        message = super().__str__()
        if self.row is not None:
            return f"row {self.row}: {message}"
        return message

class UnknownActionError(SpecSyntaxError):
    """A condition leads to an action no pattern recognises."""

class ClassAssertionError(SpecSyntaxError):
    """A class-reassignment action has no, or inconsistently parsed, codes."""

# ---------------------------------------------------------------------------
# Referential (raised by the graph store)
# ---------------------------------------------------------------------------

class GraphError(SpecError):
    """Graph store contract violation."""

class NodeDataError(GraphError, TypeError):
    """Node data is not a :class:`~snrsl.core.graph.model.SpecNode`."""

class MalformedReferenceError(GraphError, TypeError):
    """A node reference is neither an id, a key, nor a node-like object."""

    def __init__(self, ref: Any) -> None:
        super().__init__(f"Object is not a node reference: {ref!r}")
        self.ref = ref

class UnknownNodeError(GraphError, LookupError):
    def __init__(self, node_id: int) -> None:
        super().__init__(f"Node {node_id} does not exist")
        self.node_id = node_id

class UnknownKeyError(GraphError, LookupError):
    def __init__(self, key: Any) -> None:
        super().__init__(f"Node key '{key}' not found")
        self.key = key

class DuplicateKeyError(GraphError, ValueError):
    """A node key, or an edge key within its scope, is already registered."""

    def __init__(self, message: str, key: Any) -> None:
        super().__init__(message)
        self.key = key

class PayloadInUseError(GraphError, ValueError):
    """A node or edge payload object is already stored in a graph."""

    def __init__(self, kind: str, item_id: int) -> None:
        super().__init__(f"{kind} payload is already stored as {kind.lower()} {item_id}")
        self.kind = kind
        self.item_id = item_id

class UnknownEdgeError(GraphError, LookupError):
    def __init__(self, edge_id: Any) -> None:
        super().__init__(f"Edge id not found: {edge_id!r}")
        self.edge_id = edge_id

class EdgeRemovedError(GraphError, LookupError):
    def __init__(self, edge_id: int) -> None:
        super().__init__(f"Edge {edge_id} has already been removed")
        self.edge_id = edge_id

# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

class InvariantViolation(SpecError, RuntimeError):
    """The evaluator found a graph state the parser should never produce."""
