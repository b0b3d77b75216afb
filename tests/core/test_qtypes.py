"""Tests for question option and type inference."""

from __future__ import annotations

import pytest

from snrsl.core.evaluation.qtypes import (
    infer_question_type,
    process_question_types,
    question_options,
)
from snrsl.core.graph.graph import SpecGraph
from snrsl.core.graph.model import (
    Action,
    EdgeType,
    NodeKey,
    NodeType,
    QuestionType,
    SpecEdge,
    SpecNode,
    question_key,
)


@pytest.mark.parametrize(
    ("options", "expected"),
    [
        ([], QuestionType.TEXT),
        (["yes"], QuestionType.NOYES),
        (["no"], QuestionType.NOYES),
        (["no", "yes"], QuestionType.NOYES),
        (["25%", "50%"], QuestionType.PERCENT),
        (["10%"], QuestionType.PERCENT),
        (["10", "20"], QuestionType.SELECT),
        (["25%", "yes"], QuestionType.SELECT),
        (["maybe", "no", "yes"], QuestionType.SELECT),
    ],
)
def test_infer_question_type(options: list[str], expected: QuestionType) -> None:
    assert infer_question_type(options) is expected


class TestQuestionOptions:
    @pytest.fixture()
    def graph(self) -> SpecGraph:
        graph = SpecGraph()
        q = graph.add_node(SpecNode(NodeType.QUESTION, label="q?"), question_key("q?"))
        s = graph.add_node(SpecNode(NodeType.SURCHARGE), NodeKey(NodeType.SURCHARGE, "heavy"))
        x = graph.add_node(SpecNode(NodeType.EXCLUDE), NodeKey(NodeType.EXCLUDE, "logs"))
        graph.add_edge(q, s, SpecEdge(EdgeType.COND, "Yes", Action.SURCHARGE, "A"))
        graph.add_edge(q, s, SpecEdge(EdgeType.COND, " yes ", Action.SURCHARGE, "B"))
        graph.add_edge(q, x, SpecEdge(EdgeType.COND, "No", Action.EXCLUDE, "A"))
        graph.add_edge(q, x, SpecEdge())
        return graph

    def test_distinct_lower_cased_sorted(self, graph: SpecGraph) -> None:
        view = graph.view(question_key("q?"))
        assert question_options(view) == ["no", "yes"]

    def test_removed_edges_excluded(self, graph: SpecGraph) -> None:
        no_edge = next(e for e in graph.iter_edges() if e.cond == "No")
        graph.remove_edge(no_edge)
        assert question_options(graph.view(question_key("q?"))) == ["yes"]

    def test_process_sets_fields(self, graph: SpecGraph) -> None:
        counts = process_question_types(graph)

        node = graph.get(question_key("q?"))
        assert node.qopts == ["no", "yes"]
        assert node.qtype is QuestionType.NOYES
        assert counts == {QuestionType.NOYES: 1}

    def test_question_without_conditions(self) -> None:
        graph = SpecGraph()
        graph.add_node(SpecNode(NodeType.QUESTION, label="Name?"), question_key("Name?"))

        counts = process_question_types(graph)

        node = graph.get(question_key("Name?"))
        assert node.qopts == []
        assert node.qtype is QuestionType.TEXT
        assert counts == {QuestionType.TEXT: 1}

    def test_other_nodes_untouched(self, graph: SpecGraph) -> None:
        process_question_types(graph)
        surcharge = graph.get(NodeKey(NodeType.SURCHARGE, "heavy"))
        assert surcharge.qtype is None
