"""Scannerless parser for rating specification rows.

Rows are lexed as they arrive; once the row source is exhausted the token
lists are consumed, one row at a time, to build the graph directly.  There
is no intermediate syntax tree: every question, action and condition turns
into a graph node or edge as soon as it is recognised.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, Mapping
from typing import Any

from snrsl.config.columns import DEFAULT_LAYOUT, ColumnLayout
from snrsl.config.dialect import DEFAULT_DIALECT, DialectPatterns
from snrsl.core.errors import InputShapeError, SpecSyntaxError
from snrsl.core.graph.graph import SpecGraph
from snrsl.core.graph.model import (
    ROOT_KEY,
    UNKNOWN_PREDICATE,
    EdgeKey,
    EdgeType,
    NodeKey,
    NodeType,
    SpecEdge,
    SpecNode,
    class_key,
    question_key,
)
from snrsl.core.parsers.base import ACTION_TOKENS, RowBlock, Token, TokenType
from snrsl.core.parsers.lexer import LineLexer

logger = logging.getLogger(__name__)

_CLASS_QUESTION_KEY = EdgeKey(EdgeType.PLAIN)
_CLASSROOT_KEY = EdgeKey(EdgeType.CLASSROOT)

class _Cursor:
    """Read position over an immutable token sequence."""

    __slots__ = ("_tokens", "pos")

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tuple(tokens)
        self.pos = 0

    @property
    def done(self) -> bool:
        return self.pos >= len(self._tokens)

    def peek(self) -> Token | None:
        if self.done:
            return None
        return self._tokens[self.pos]

    def next(self) -> Token | None:
        tok = self.peek()
        if tok is not None:
            self.pos += 1
        return tok

class SpecParser:
    """Parse specification rows into a :class:`SpecGraph`.

    Parameters
    ----------
    dialect:
        Pattern table used to classify lines and build labels.
    layout:
        Row field names for the class code, description and question sets.
    """

    def __init__(
        self,
        dialect: DialectPatterns = DEFAULT_DIALECT,
        layout: ColumnLayout = DEFAULT_LAYOUT,
    ) -> None:
        self._dialect = dialect
        self._layout = layout
        self._lexer = LineLexer(dialect)

    @property
    def dialect(self) -> DialectPatterns:
        return self._dialect

    async def parse(self, rows: AsyncIterable[Mapping[str, Any]], graph: SpecGraph) -> SpecGraph:
        """Consume *rows* and populate *graph*.

        Returns only once the row source is exhausted.  The first missing
        column or unparsable line aborts the whole parse.

        Raises:
            InputShapeError: A row lacks a required column.
            SpecSyntaxError: A line or conditional action cannot be parsed.
        """
        blocks: list[RowBlock] = []

        row_number = 0
        async for row in rows:
            row_number += 1
            block = self.concat_row(row, row_number)
            block.tokens = self._lexer.lex_block(block.text, row=row_number)
            logger.debug(
                "Row %d (class %s): %d tokens", row_number, block.class_code, len(block.tokens)
            )
            blocks.append(block)

        logger.info("Lexed %d rows", len(blocks))
        return self.populate_graph(graph, blocks)

    def concat_row(self, row: Mapping[str, Any], row_number: int) -> RowBlock:
        """Join a row's question-set columns into one newline-delimited block."""
        for column in self._layout.required:
            if row.get(column) is None:
                raise InputShapeError(column, row_number)

        text = "".join(f"{row[column]}\n" for column in self._layout.questions)

        return RowBlock(
            row=row_number,
            class_code=str(row[self._layout.class_code]).strip(),
            class_desc=str(row[self._layout.class_desc]).strip(),
            text=text,
        )

    def populate_graph(self, graph: SpecGraph, blocks: list[RowBlock]) -> SpecGraph:
        # single root for all classes so that the graph is connected
        graph.add_node_if_new(SpecNode(NodeType.CLASSES), ROOT_KEY)

        for block in blocks:
            self._row_to_graph(graph, block)

        return graph

    def _row_to_graph(self, graph: SpecGraph, block: RowBlock) -> None:
        class_id = self._class_node(graph, block.class_code, block.class_desc)

        if not block.tokens:
            logger.warning("Row %d (class %s) has no questions", block.row, block.class_code)
            return

        cursor = _Cursor(block.tokens)
        while not cursor.done:
            tok = cursor.next()

            if tok.type is not TokenType.QUESTION:
                raise SpecSyntaxError(
                    f"Expected top-level question, but received {tok.type.value}",
                    text=tok.lexeme.strip(),
                    offset=tok.offset,
                    row=block.row,
                )

            questions = self._create_questions(graph, tok, cursor, block)
            graph.add_edges_if_new(class_id, questions, SpecEdge(), _CLASS_QUESTION_KEY)

    def _class_node(self, graph: SpecGraph, class_code: str, class_desc: str) -> int:
        # an assertion may reference a class before (or without) its own row
        node_id = graph.add_node_if_new(
            SpecNode(
                NodeType.CLASS,
                label=f"Class {class_code}",
                class_code=class_code,
                desc=class_desc,
            ),
            class_key(class_code),
        )

        node = graph.get(node_id)
        if class_desc and not node.desc:
            node.desc = class_desc

        graph.add_edge_if_new(
            ROOT_KEY, node_id, SpecEdge(type=EdgeType.CLASSROOT), _CLASSROOT_KEY
        )
        return node_id

    def _create_questions(
        self, graph: SpecGraph, qtok: Token, cursor: _Cursor, block: RowBlock
    ) -> list[int]:
        qset = self._create_question_set(graph, qtok, cursor)

        # conditions apply to every question of the set
        self._attach_conditions(graph, qtok.depth, qset, cursor, block)
        return qset

    def _create_question_set(self, graph: SpecGraph, qtok: Token, cursor: _Cursor) -> list[int]:
        texts = []
        while (tok := cursor.peek()) is not None:
            if tok.type is not TokenType.QUESTION_CONT or tok.depth < qtok.depth:
                break
            cursor.next()
            texts.append(f"{qtok.value} {tok.value}")

        if not texts:
            texts.append(qtok.value)

        ids = (
            graph.add_node_if_new(
                SpecNode(NodeType.QUESTION, label=self._dialect.question_label(text)),
                question_key(text),
            )
            for text in texts
        )
        return list(dict.fromkeys(ids))

    def _attach_conditions(
        self,
        graph: SpecGraph,
        depth: int,
        qset: list[int],
        cursor: _Cursor,
        block: RowBlock,
    ) -> None:
        pred = block.class_code or UNKNOWN_PREDICATE

        while (tok := cursor.peek()) is not None:
            if tok.type is not TokenType.COND or not _nested(tok, depth):
                break
            cursor.next()

            action_tok = cursor.next()
            if action_tok is None or action_tok.type not in ACTION_TOKENS:
                raise SpecSyntaxError(
                    f"Condition '{tok.value}' has no action",
                    text=tok.lexeme.strip(),
                    offset=tok.offset,
                    row=block.row,
                )

            targets = self._create_actions(graph, action_tok, cursor, block)

            # the condition text is kept raw; it becomes the option label
            edge = SpecEdge(
                type=EdgeType.COND,
                cond=tok.value,
                action=ACTION_TOKENS[action_tok.type],
                pred=pred,
            )
            key = EdgeKey(EdgeType.COND, pred, tok.value)

            for question in qset:
                graph.add_edges_if_new(question, targets, edge, key)

    def _create_actions(
        self, graph: SpecGraph, tok: Token, cursor: _Cursor, block: RowBlock
    ) -> list[int]:
        if tok.type is TokenType.QUESTION:
            return self._create_questions(graph, tok, cursor, block)

        if tok.type is TokenType.ASSERT_CLASS:
            return [self._class_node(graph, ref.code, ref.desc) for ref in tok.classes]

        node_type = NodeType(tok.type.value)
        return [
            graph.add_node_if_new(
                SpecNode(node_type, value=tok.value),
                NodeKey(node_type, tok.value),
            )
        ]

def _nested(tok: Token, depth: int) -> bool:
    # bulleted answers may sit at their question's own indentation
    if tok.bulleted:
        return tok.depth >= depth
    return tok.depth > depth
