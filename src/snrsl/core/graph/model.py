"""Graph data model for snrsl.

Defines the node and edge types that represent a compiled rating
specification: the synthetic class root, class codes, questions, and the
actions that question answers lead to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Predicate recorded on a conditional edge when the class code is unknown.
UNKNOWN_PREDICATE = "???"

class NodeType(Enum):
    """Types of graph nodes."""

    CLASSES = "classes"
    CLASS = "class"
    QUESTION = "question"
    ATTACH_FORM = "attach-form"
    EXCLUDE = "exclude"
    SURCHARGE = "surcharge"
    DOC = "doc"
    INELIGIBLE = "ineligible"
    XML = "xml"

class EdgeType(Enum):
    """Types of graph edges.

    ``PLAIN`` is the unlabeled default (e.g. class -> question).
    """

    PLAIN = "plain"
    CLASSROOT = "classroot"
    COND = "cond"
    XML = "xml"

class Action(Enum):
    """Semantic action that a conditional edge leads to."""

    QUESTION = "question"
    ATTACH_FORM = "attach-form"
    EXCLUDE = "exclude"
    SURCHARGE = "surcharge"
    DOC = "doc"
    ASSERT_CLASS = "assert-class"
    INELIGIBLE = "ineligible"

class QuestionType(Enum):
    """Question input type inferred from the options its conditions use."""

    TEXT = "text"
    NOYES = "noyes"
    PERCENT = "percent"
    SELECT = "select"

@dataclass(frozen=True)
class NodeKey:
    """Structured dedup key for a node.

    At most one node may ever be registered under a given key.  The string
    form (``kind$value``) is what label backfill strips prefixes from.
    """

    kind: NodeType
    value: str = ""

    def __str__(self) -> str:
        if not self.value:
            return self.kind.value
        return f"{self.kind.value}${self.value}"

@dataclass(frozen=True)
class EdgeKey:
    """Structured dedup key for an edge, scoped by its endpoints."""

    kind: EdgeType
    pred: str | None = None
    cond: str = ""

def question_key(text: str) -> NodeKey:
    """Key of the question node for the exact question *text*."""
    return NodeKey(NodeType.QUESTION, text)

def class_key(class_code: str) -> NodeKey:
    """Key of the class node for *class_code*."""
    return NodeKey(NodeType.CLASS, class_code)

ROOT_KEY = NodeKey(NodeType.CLASSES)

@dataclass
class SpecNode:
    """A vertex in the specification graph.

    Only ``type`` is required; the remaining payload fields apply to
    particular node types and default to empty.  ``id``, ``key`` and
    ``occur`` are owned by the graph and set on insertion.
    """

    type: NodeType
    label: str = ""

    # class nodes
    class_code: str = ""
    desc: str = ""

    # action nodes
    value: str = ""

    # question nodes (populated by the evaluator)
    qid: str = ""
    qtype: QuestionType | None = None
    qopts: list[str] = field(default_factory=list)
    class_in: frozenset[str] | None = None

    properties: dict[str, Any] = field(default_factory=dict)

    id: int = -1
    key: NodeKey | None = None
    occur: int = 1

@dataclass
class SpecEdge:
    """A directed edge in the specification graph.

    ``cond``, ``action`` and ``pred`` are only meaningful on ``COND`` edges.
    ``id``, ``source``, ``target``, ``key`` and ``removed`` are owned by the
    graph.
    """

    type: EdgeType = EdgeType.PLAIN
    cond: str | None = None
    action: Action | None = None
    pred: str | None = None

    properties: dict[str, Any] = field(default_factory=dict)

    id: int = -1
    source: int = -1
    target: int = -1
    key: EdgeKey | None = None
    removed: bool = False
