"""Line classifier for question-set text.

Each non-blank line is classified on its own, without looking at its
neighbours, into a question, a question continuation, or a condition (which
also yields the token for the action it leads to).  Nesting is recovered
later by the parser from each token's ``depth``.
"""

from __future__ import annotations

import dataclasses
import logging

from snrsl.config.dialect import DEFAULT_DIALECT, DialectPatterns
from snrsl.core.errors import ClassAssertionError, SpecSyntaxError, UnknownActionError
from snrsl.core.parsers.base import ClassRef, Token, TokenType

logger = logging.getLogger(__name__)

class LineLexer:
    """Turn a row's question-set block into a flat list of tokens."""

    def __init__(self, dialect: DialectPatterns = DEFAULT_DIALECT) -> None:
        self._dialect = dialect

    def lex_block(self, text: str, row: int | None = None) -> list[Token]:
        """Lex every line of *text*.

        Blank lines are skipped.  ``depth`` is the length of a line's leading
        whitespace in characters and ``offset`` the UTF-8 byte offset of the
        line's first non-blank character within *text*.

        Raises:
            SpecSyntaxError: A line (or a condition's action) matches no
                pattern.  The error carries *row* when given.
        """
        tokens: list[Token] = []
        offset = 0

        for raw in text.splitlines(keepends=True):
            content = raw.rstrip()
            line = content.lstrip()
            depth = len(content) - len(line)
            start = offset + _utf8_len(content[:depth])

            if line:
                try:
                    line_tokens = self.make_tokens(line, start)
                except SpecSyntaxError as exc:
                    exc.row = row
                    raise

                tokens.extend(
                    dataclasses.replace(tok, depth=depth, offset=start, lexeme=raw)
                    for tok in line_tokens
                )

            offset += _utf8_len(raw)

        return tokens

    def make_tokens(self, line: str, offset: int | None = None) -> list[Token]:
        """Classify a single stripped *line*."""
        d = self._dialect

        if line.startswith("-"):
            bullet = d.bulleted_cond.match(line)
            if bullet is not None:
                action = self.lex_action(bullet.group(2), allow_question=False)
                if action is not None:
                    return self._cond_tokens(bullet.group(1), action, bulleted=True)

            return [self._tok(TokenType.QUESTION_CONT, d.question_cont.match(line).group(1))]

        cond = d.cond.match(line)
        if cond is not None:
            cmp, action_text = cond.groups()
            action = self.lex_action(action_text)
            if action is None:
                raise UnknownActionError(
                    f"Unexpected conditional action '{action_text}'", text=line, offset=offset
                )
            return self._cond_tokens(cmp, action)

        if self.is_question(line):
            return [self._tok(TokenType.QUESTION, line)]

        raise SpecSyntaxError(f"Unexpected expression: '{line}'", text=line, offset=offset)

    def is_question(self, text: str) -> bool:
        return self._dialect.question.search(text) is not None

    def lex_action(self, action: str, allow_question: bool = True) -> list[Token] | None:
        """Classify the action half of a condition.

        Returns an empty list for actions that need no edge (``continue`` and
        ``eligible``, eligibility being the default), the action's tokens
        otherwise, or ``None`` if no pattern recognises *action*.
        """
        d = self._dialect

        if d.continue_.match(action) or d.eligible.match(action):
            return []

        if d.ineligible.match(action):
            return [self._tok(TokenType.INELIGIBLE, TokenType.INELIGIBLE.value)]

        if self.is_question(action):
            if not allow_question:
                return None
            return [self._tok(TokenType.QUESTION, action)]

        attach = d.attach_form.match(action)
        if attach is not None:
            return [self._tok(TokenType.ATTACH_FORM, attach.group(1))]

        if d.exclude.match(action):
            return [self._tok(TokenType.EXCLUDE, action)]

        if d.surcharge.match(action):
            return [self._tok(TokenType.SURCHARGE, action)]

        change = d.assert_class.match(action)
        if change is not None:
            return [self._lex_assert_class(change.group(1))]

        if d.doc.match(action):
            return [self._tok(TokenType.DOC, action)]

        return None

    def _lex_assert_class(self, redirect: str) -> Token:
        d = self._dialect

        target = d.assert_class_target.match(redirect)
        if target is None:
            raise ClassAssertionError(
                f"Unrecognized class code assert expression: {redirect}", text=redirect
            )

        raw = target.group(1)
        chunks = [m.group(0) for m in d.class_chunk_loose.finditer(raw)]

        # the chunk pattern also captures descriptions; make sure it did not
        # swallow or miss a code that a plain digit scan finds
        codes = d.class_code_strict.findall(raw)
        if not codes:
            raise ClassAssertionError(
                f"No classes provided for class assert expression: {redirect}", text=redirect
            )
        if len(codes) != len(chunks):
            raise ClassAssertionError(f"Class desc parsing failure: '{raw}'", text=raw)

        return Token(
            TokenType.ASSERT_CLASS,
            d.normalize(raw),
            classes=tuple(self._class_ref(chunk) for chunk in chunks),
        )

    def _class_ref(self, chunk: str) -> ClassRef:
        # trailing digits are the class code, everything before is the desc
        match = self._dialect.class_chunk.match(chunk)
        if match is None:
            raise ClassAssertionError(f"Unrecognized class chunk: '{chunk}'", text=chunk)

        desc, code = match.groups()
        if not desc:
            logger.warning("Class %s asserted without a description", code)
        return ClassRef(code=code, desc=self._dialect.normalize(desc.strip()))

    def _cond_tokens(self, cmp: str, action: list[Token], bulleted: bool = False) -> list[Token]:
        if not action:
            return []
        return [self._tok(TokenType.COND, cmp.strip(), bulleted=bulleted), *action]

    def _tok(self, type_: TokenType, value: str, bulleted: bool = False) -> Token:
        return Token(type_, self._dialect.normalize(value), bulleted=bulleted)

def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))
