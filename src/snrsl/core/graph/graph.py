"""In-memory specification graph for snrsl.

A simple and heavily indexed graph.  Nodes and edges live in append-only
arenas addressed by dense integer ids; secondary indexes map structured keys
to ids so that deduplicating insertion is O(1).  Adjacency is never
materialised ahead of time: :class:`NodeView` resolves neighbours from the
index on every access, so nodes may freely reference nodes that are created
later and re-access always reflects the current state of the graph.
"""

from __future__ import annotations

import dataclasses
from collections import Counter
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, TypeVar, Union

from snrsl.core.errors import (
    DuplicateKeyError,
    EdgeRemovedError,
    MalformedReferenceError,
    NodeDataError,
    PayloadInUseError,
    UnknownEdgeError,
    UnknownKeyError,
    UnknownNodeError,
)
from snrsl.core.graph.model import EdgeKey, NodeKey, NodeType, SpecEdge, SpecNode

T = TypeVar("T")

NodeRef = Union[int, NodeKey, SpecNode, "NodeView"]

@dataclass
class _Slot:
    """Adjacency bookkeeping for one node.

    ``outgoing`` maps target id -> edge ids, ``incoming`` maps source id ->
    edge ids.  A removed edge leaves ``None`` in its position so that every
    other recorded position stays valid.
    """

    outgoing: dict[int, list[int | None]] = field(default_factory=dict)
    incoming: dict[int, list[int | None]] = field(default_factory=dict)
    edge_index: dict[tuple[int, EdgeKey], int] = field(default_factory=dict)

@dataclass
class GraphStats:
    """Summary of graph size."""

    node_count: int
    edge_count: int
    removed_edge_count: int
    types: dict[str, int]

class NodeEdges:
    """Lazy incoming/outgoing adjacency of a node."""

    __slots__ = ("_graph", "_node_id")

    def __init__(self, graph: SpecGraph, node_id: int) -> None:
        self._graph = graph
        self._node_id = node_id

    @property
    def outgoing(self) -> list[NodeView]:
        """Target nodes, each carrying the active edges leading to it."""
        return self._graph._neighbors(self._graph._slots[self._node_id].outgoing)

    @property
    def incoming(self) -> list[NodeView]:
        """Source nodes, each carrying the active edges leading from it."""
        return self._graph._neighbors(self._graph._slots[self._node_id].incoming)

class NodeView:
    """Read view of a node as seen during traversal.

    ``related`` is only populated for neighbour views and holds the active
    edges between the neighbour and the node it was reached from.
    """

    __slots__ = ("_graph", "data", "related")

    def __init__(
        self, graph: SpecGraph, data: SpecNode, related: list[SpecEdge] | None = None
    ) -> None:
        self._graph = graph
        self.data = data
        self.related: list[SpecEdge] = related if related is not None else []

    @property
    def id(self) -> int:
        return self.data.id

    @property
    def type(self) -> NodeType:
        return self.data.type

    @property
    def key(self) -> NodeKey | None:
        return self.data.key

    @property
    def occur(self) -> int:
        return self.data.occur

    @property
    def edges(self) -> NodeEdges:
        return NodeEdges(self._graph, self.data.id)

    def __repr__(self) -> str:
        return f"NodeView(id={self.id}, type={self.type.value}, key={self.key})"

class SpecGraph:
    """Indexed directed graph of specification nodes and edges.

    Node and edge ids are assigned sequentially and never reused.  Nodes
    are never removed.  Edges are removed by tombstoning: the edge keeps
    its id and is flagged ``removed``, and its adjacency positions are
    blanked rather than shifted.
    """

    def __init__(self) -> None:
        self._nodes: list[SpecNode] = []
        self._slots: list[_Slot] = []
        self._edges: list[SpecEdge] = []
        self._positions: dict[int, tuple[int, int]] = {}
        self._index: dict[NodeKey, int] = {}
        self._removed = 0

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def add_node(self, data: SpecNode, key: NodeKey | None = None) -> int:
        """Add *data* as a new node and return its id.

        Raises:
            NodeDataError: If *data* is not a :class:`SpecNode`.
            PayloadInUseError: If *data* is already stored as a node.
            DuplicateKeyError: If *key* is already registered.
        """
        if not isinstance(data, SpecNode):
            raise NodeDataError(f"Node data must be a SpecNode, not {type(data).__name__}")
        if data.id != -1:
            raise PayloadInUseError("Node", data.id)

        if key is not None and key in self._index:
            raise DuplicateKeyError(f"Node key '{key}' already exists", key)

        node_id = len(self._nodes)
        data.id = node_id
        data.key = key
        data.occur = 1

        self._nodes.append(data)
        self._slots.append(_Slot())

        if key is not None:
            self._index[key] = node_id

        return node_id

    def add_node_if_new(self, data: SpecNode, key: NodeKey | None = None) -> int:
        """Add *data* unless *key* is registered, in which case count it again.

        Without a key no lookup is possible, so a new node is always created.
        """
        if key is None:
            return self.add_node(data)

        existing = self._index.get(key)
        if existing is not None:
            self._nodes[existing].occur += 1
            return existing

        return self.add_node(data, key)

    def has_key(self, key: NodeKey) -> bool:
        """Return whether a node is registered under *key*."""
        return key in self._index

    def node_lookup(self, ref: NodeRef) -> tuple[int, SpecNode]:
        """Resolve *ref* to ``(id, node)``.

        *ref* may be a node id, a :class:`NodeKey`, or any object exposing an
        integer ``id`` (a :class:`SpecNode` or :class:`NodeView`).

        Raises:
            UnknownNodeError: No node has the given id.
            UnknownKeyError: No node is registered under the given key.
            MalformedReferenceError: *ref* is none of the above.
        """
        if isinstance(ref, bool):
            raise MalformedReferenceError(ref)

        if isinstance(ref, int):
            if not 0 <= ref < len(self._nodes):
                raise UnknownNodeError(ref)
            return ref, self._nodes[ref]

        if isinstance(ref, NodeKey):
            node_id = self._index.get(ref)
            if node_id is None:
                raise UnknownKeyError(ref)
            return node_id, self._nodes[node_id]

        node_id = getattr(ref, "id", None)
        if isinstance(node_id, int) and not isinstance(node_id, bool):
            return self.node_lookup(node_id)

        raise MalformedReferenceError(ref)

    def get(self, ref: Any) -> SpecNode | None:
        """Return the node *ref* resolves to, or ``None`` on any failure."""
        try:
            return self.node_lookup(ref)[1]
        except (UnknownNodeError, UnknownKeyError, MalformedReferenceError):
            return None

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def add_edge(
        self,
        source: NodeRef,
        target: NodeRef,
        data: SpecEdge | None = None,
        key: EdgeKey | None = None,
    ) -> int:
        """Add an edge from *source* to *target* and return its id.

        *key*, when given, is scoped by the edge's endpoints: the same key
        may be reused towards a different destination.

        Raises:
            DuplicateKeyError: If *key* already exists for this destination.
            PayloadInUseError: If *data* is already stored as an edge.
        """
        data = data if data is not None else SpecEdge()
        if data.id != -1:
            raise PayloadInUseError("Edge", data.id)

        source_id, _ = self.node_lookup(source)
        target_id, _ = self.node_lookup(target)

        source_slot = self._slots[source_id]
        target_slot = self._slots[target_id]

        if key is not None and (target_id, key) in source_slot.edge_index:
            raise DuplicateKeyError(
                f"Edge key {key} already exists for {source_id}->{target_id}", key
            )

        edge_id = len(self._edges)
        data.id = edge_id
        data.source = source_id
        data.target = target_id
        data.key = key
        data.removed = False
        self._edges.append(data)

        out_list = source_slot.outgoing.setdefault(target_id, [])
        in_list = target_slot.incoming.setdefault(source_id, [])
        out_list.append(edge_id)
        in_list.append(edge_id)
        self._positions[edge_id] = (len(out_list) - 1, len(in_list) - 1)

        if key is not None:
            source_slot.edge_index[(target_id, key)] = edge_id

        return edge_id

    def add_edge_if_new(
        self,
        source: NodeRef,
        target: NodeRef,
        data: SpecEdge | None = None,
        key: EdgeKey | None = None,
    ) -> int:
        """Like :meth:`add_edge`, but return the existing id for a known key."""
        source_id, _ = self.node_lookup(source)
        target_id, _ = self.node_lookup(target)

        if key is not None:
            existing = self._slots[source_id].edge_index.get((target_id, key))
            if existing is not None:
                return existing

        return self.add_edge(source_id, target_id, data, key)

    def add_edges(
        self,
        source: NodeRef,
        targets: Iterable[NodeRef],
        data: SpecEdge | None = None,
        key: EdgeKey | None = None,
    ) -> list[int]:
        """Add one edge per target; each gets its own copy of *data*."""
        return [self.add_edge(source, t, _copy_edge(data), key) for t in targets]

    def add_edges_if_new(
        self,
        source: NodeRef,
        targets: Iterable[NodeRef],
        data: SpecEdge | None = None,
        key: EdgeKey | None = None,
    ) -> list[int]:
        return [self.add_edge_if_new(source, t, _copy_edge(data), key) for t in targets]

    def remove_edge(self, edge: int | SpecEdge) -> None:
        """Tombstone *edge*.

        The edge keeps its id but is flagged removed; its slots in both
        endpoints' adjacency lists are blanked in place and its key, if any,
        is released.

        Raises:
            UnknownEdgeError: The edge never existed.
            EdgeRemovedError: The edge was already removed.
        """
        edge_id = edge.id if isinstance(edge, SpecEdge) else edge
        if not _is_edge_id(edge_id):
            raise UnknownEdgeError(edge)
        if not 0 <= edge_id < len(self._edges):
            raise UnknownEdgeError(edge_id)

        data = self._edges[edge_id]
        if data.removed:
            raise EdgeRemovedError(edge_id)

        out_pos, in_pos = self._positions.pop(edge_id)
        source_slot = self._slots[data.source]
        source_slot.outgoing[data.target][out_pos] = None
        self._slots[data.target].incoming[data.source][in_pos] = None

        if data.key is not None:
            source_slot.edge_index.pop((data.target, data.key), None)

        data.removed = True
        self._removed += 1

    def edge(self, edge_id: int) -> SpecEdge:
        """Return the active edge with *edge_id*.

        Raises:
            UnknownEdgeError: The edge never existed.
            EdgeRemovedError: The edge has been removed.
        """
        if not _is_edge_id(edge_id) or not 0 <= edge_id < len(self._edges):
            raise UnknownEdgeError(edge_id)
        data = self._edges[edge_id]
        if data.removed:
            raise EdgeRemovedError(edge_id)
        return data

    def is_removed(self, edge_id: int) -> bool:
        """Return whether the edge with *edge_id* has been removed.

        Raises:
            UnknownEdgeError: The edge never existed.
        """
        if not _is_edge_id(edge_id) or not 0 <= edge_id < len(self._edges):
            raise UnknownEdgeError(edge_id)
        return self._edges[edge_id].removed

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def iter_nodes(self) -> Iterator[SpecNode]:
        """Yield all nodes in id order."""
        return iter(self._nodes)

    def iter_edges(self) -> Iterator[SpecEdge]:
        """Yield all active (non-removed) edges in id order."""
        return (e for e in self._edges if not e.removed)

    def view(self, ref: NodeRef) -> NodeView:
        """Return a traversal view of the node *ref* resolves to."""
        _, node = self.node_lookup(ref)
        return NodeView(self, node)

    def iter_views(self) -> Iterator[NodeView]:
        """Yield a view of every node in id order.

        Nodes added while iterating are visited too.
        """
        i = 0
        while i < len(self._nodes):
            yield NodeView(self, self._nodes[i])
            i += 1

    def map_nodes(self, fn: Callable[[NodeView], T]) -> list[T]:
        """Apply *fn* to a view of every node, in id order."""
        return [fn(view) for view in self.iter_views()]

    @staticmethod
    def neighbors_of_type(node_type: NodeType, neighbors: Iterable[NodeView]) -> list[NodeView]:
        return [n for n in neighbors if n.type is node_type]

    def _neighbors(self, adjacency: dict[int, list[int | None]]) -> list[NodeView]:
        views = []
        for node_id, edge_ids in adjacency.items():
            related = [self._edges[eid] for eid in edge_ids if eid is not None]
            if not related:
                continue
            views.append(NodeView(self, self._nodes[node_id], related))
        return views

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Number of active edges."""
        return len(self._edges) - self._removed

    def stats(self) -> GraphStats:
        """Return a summary of graph size and a node type histogram."""
        types = Counter(node.type.value for node in self._nodes)
        return GraphStats(
            node_count=len(self._nodes),
            edge_count=self.edge_count,
            removed_edge_count=self._removed,
            types=dict(sorted(types.items())),
        )

def _is_edge_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

def _copy_edge(data: SpecEdge | None) -> SpecEdge:
    if data is None:
        return SpecEdge()
    # graph-owned fields are reset so a stored edge can serve as a template
    return dataclasses.replace(
        data,
        properties=dict(data.properties),
        id=-1,
        source=-1,
        target=-1,
        key=None,
        removed=False,
    )
