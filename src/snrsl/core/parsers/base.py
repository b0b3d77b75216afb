"""Token and row structures shared by the lexer and the spec parser.

Tokens are produced per row and consumed immediately while building the
graph; nothing here outlives a single :meth:`SpecParser.parse` call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from snrsl.core.graph.model import Action

class TokenType(Enum):
    """Classification of a lexed line (or of the action half of a condition)."""

    QUESTION = "question"
    QUESTION_CONT = "question-cont"
    COND = "cond"
    INELIGIBLE = "ineligible"
    ATTACH_FORM = "attach-form"
    EXCLUDE = "exclude"
    SURCHARGE = "surcharge"
    ASSERT_CLASS = "assert-class"
    DOC = "doc"

# Action tokens and the edge action they produce.
ACTION_TOKENS: dict[TokenType, Action] = {
    TokenType.QUESTION: Action.QUESTION,
    TokenType.INELIGIBLE: Action.INELIGIBLE,
    TokenType.ATTACH_FORM: Action.ATTACH_FORM,
    TokenType.EXCLUDE: Action.EXCLUDE,
    TokenType.SURCHARGE: Action.SURCHARGE,
    TokenType.ASSERT_CLASS: Action.ASSERT_CLASS,
    TokenType.DOC: Action.DOC,
}

@dataclass(frozen=True)
class ClassRef:
    """A class code (and optional description) named by a class assertion."""

    code: str
    desc: str = ""

@dataclass(frozen=True)
class Token:
    """A lexed unit of question-set text.

    ``depth`` is the leading-whitespace length of the source line and
    ``offset`` its position within the row's concatenated question text.
    ``bulleted`` marks conditions written as ``- answer, action``.
    """

    type: TokenType
    value: str
    depth: int = 0
    offset: int = 0
    lexeme: str = ""
    bulleted: bool = False
    classes: tuple[ClassRef, ...] = field(default_factory=tuple)

@dataclass
class RowBlock:
    """One row's question sets concatenated into a newline-delimited block."""

    row: int  # 1-based
    class_code: str
    class_desc: str
    text: str
    tokens: list[Token] = field(default_factory=list)
