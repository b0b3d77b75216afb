"""End-to-end tests for the full snrsl pipeline.

Writes a specification CSV to a temp directory, compiles it from disk, and
verifies the evaluated graph.
"""

from __future__ import annotations

import asyncio
import csv
from collections import Counter
from pathlib import Path

import pytest

from snrsl.core.graph.graph import SpecGraph
from snrsl.core.graph.model import (
    EdgeType,
    NodeType,
    QuestionType,
    class_key,
    question_key,
)
from snrsl.core.ingestion.pipeline import CompileResult, compile_spec
from snrsl.core.ingestion.rows import read_csv_rows

HEADER = [
    "Class Code",
    "Class(es) of Business",
    "Question Set",
    "Question Set, continued",
    "Question Set, continued 2",
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _write_csv(path: Path, rows: list[list[str]]) -> Path:
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(HEADER)
        writer.writerows(rows)
    return path


def _compile(path: Path) -> tuple[SpecGraph, CompileResult]:
    return asyncio.run(compile_spec(read_csv_rows(path)))


@pytest.fixture()
def state_spec(tmp_path: Path) -> Path:
    return _write_csv(
        tmp_path / "state.csv",
        [
            [
                "12345",
                "Trucking",
                "Do you operate in state X? \n- yes, surcharge heavy.\n- no, continue.",
                "",
                "",
            ],
            ["67890", "Warehousing", "", "", ""],
        ],
    )


@pytest.fixture()
def fleet_spec(tmp_path: Path) -> Path:
    return _write_csv(
        tmp_path / "fleet.csv",
        [
            [
                "12345",
                "Trucking",
                "Do you haul:\n- logs?\n- steel?\n  If yes, not eligible.",
                "How many trucks?\n  If 10, surcharge fleet.\n  If 20, surcharge large fleet.",
                "What percentage is interstate?\n  If 25%, attach form CG 2010.\n"
                "  If 50%, redirect and change to class code Long Haul 99999.",
            ],
            [
                "67890",
                "Hauling",
                "Do you haul:\n- logs?\n- steel?\n  If yes, not eligible.",
                "How many trucks?\n  If 10, surcharge fleet.",
                "",
            ],
        ],
    )


# ---------------------------------------------------------------------------
# Scenario
# ---------------------------------------------------------------------------


class TestStateScenario:
    def test_one_class_node_for_code(self, state_spec: Path) -> None:
        graph, _ = _compile(state_spec)
        assert graph.get(class_key("12345")).desc == "Trucking"
        assert graph.stats().types["class"] == 2

    def test_one_noyes_question(self, state_spec: Path) -> None:
        graph, _ = _compile(state_spec)
        (question,) = [n for n in graph.iter_nodes() if n.type is NodeType.QUESTION]
        assert question.label == "Do you operate in state X?"
        assert question.qtype is QuestionType.NOYES
        assert question.qopts == ["yes"]

    def test_single_yes_edge_to_surcharge(self, state_spec: Path) -> None:
        graph, _ = _compile(state_spec)
        (surcharge,) = [n for n in graph.iter_nodes() if n.type is NodeType.SURCHARGE]

        incoming = [e for e in graph.iter_edges() if e.target == surcharge.id]
        assert len(incoming) == 1
        assert incoming[0].type is EdgeType.COND
        assert incoming[0].cond == "yes"

    def test_no_edges_for_continue(self, state_spec: Path) -> None:
        graph, _ = _compile(state_spec)
        assert [e for e in graph.iter_edges() if e.cond == "no"] == []


# ---------------------------------------------------------------------------
# Larger specification
# ---------------------------------------------------------------------------


class TestFleetSpec:
    def test_question_sets_expanded(self, fleet_spec: Path) -> None:
        graph, _ = _compile(fleet_spec)
        assert graph.get(question_key("Do you haul: logs")) is not None
        assert graph.get(question_key("Do you haul: steel")) is not None

    def test_shared_conditions_collapsed(self, fleet_spec: Path) -> None:
        graph, result = _compile(fleet_spec)
        (ineligible,) = [n for n in graph.iter_nodes() if n.type is NodeType.INELIGIBLE]
        incoming = [e for e in graph.iter_edges() if e.target == ineligible.id]

        # one unpredicated edge per question in the set
        assert len(incoming) == 2
        assert all(e.pred is None for e in incoming)
        assert result.collapsed >= 3

    def test_partial_conditions_kept(self, fleet_spec: Path) -> None:
        graph, _ = _compile(fleet_spec)
        large = next(n for n in graph.iter_nodes() if n.value == "surcharge large fleet.")
        (edge,) = [e for e in graph.iter_edges() if e.target == large.id]
        assert edge.pred == "12345"

    def test_question_types(self, fleet_spec: Path) -> None:
        graph, _ = _compile(fleet_spec)
        assert graph.get(question_key("How many trucks?")).qtype is QuestionType.SELECT
        assert graph.get(question_key("What percentage is interstate?")).qtype is (
            QuestionType.PERCENT
        )
        assert graph.get(question_key("Do you haul: logs")).qtype is QuestionType.NOYES

    def test_asserted_class(self, fleet_spec: Path) -> None:
        graph, _ = _compile(fleet_spec)
        node = graph.get(class_key("99999"))
        assert node.desc == "Long Haul"
        assert node.label == "Class 99999"

    def test_class_inputs(self, fleet_spec: Path) -> None:
        graph, _ = _compile(fleet_spec)
        assert graph.get(question_key("How many trucks?")).class_in == {"12345", "67890"}
        assert graph.get(question_key("What percentage is interstate?")).class_in == {"12345"}


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------


def test_recompiling_is_deterministic(fleet_spec: Path) -> None:
    first, first_result = _compile(fleet_spec)
    second, second_result = _compile(fleet_spec)

    def qids(graph: SpecGraph) -> dict[str, str]:
        return {n.label: n.qid for n in graph.iter_nodes() if n.type is NodeType.QUESTION}

    def edge_types(graph: SpecGraph) -> Counter:
        return Counter((e.type, e.action, e.pred) for e in graph.iter_edges())

    assert qids(first) == qids(second)
    assert first_result.types == second_result.types
    assert first.edge_count == second.edge_count
    assert edge_types(first) == edge_types(second)
