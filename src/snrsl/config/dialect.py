"""Pattern table for the question-set dialect.

The input dialect is natural language typed into spreadsheets by hand, so
every pattern here is a heuristic.  They are kept together in one table so
that a differently-phrased document can swap in its own patterns without
touching the parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

@dataclass(frozen=True)
class DialectPatterns:
    """Compiled regular expressions used by the lexer and label helpers."""

    # "- yes, surcharge heavy."
    bulleted_cond: re.Pattern[str] = re.compile(r"^-\s*([^,]+?),\s*(.*)$")

    # "- in the state of Ohio?"
    question_cont: re.Pattern[str] = re.compile(r"^-\s*(.*?)\??\s*$")

    # "If yes, ..." -- "is" is a frequent typo for "if".  A comma inside a
    # number ("10,000") never separates the comparison from the action.
    cond: re.Pattern[str] = re.compile(
        r"^i[fs] ((?:[^,]|,(?=[0-9]{3}(?![0-9])))+),(?![0-9]{3}(?![0-9]))\s*(.*)$",
        re.IGNORECASE,
    )

    # trailing "?" or ":", or "?" followed by a parenthesized clarification
    question: re.Pattern[str] = re.compile(r"[?:]$|\?\s*\([^)]+\)$")

    continue_: re.Pattern[str] = re.compile(r"^continue\.?$", re.IGNORECASE)
    eligible: re.Pattern[str] = re.compile(r"^eligible\.?$", re.IGNORECASE)
    ineligible: re.Pattern[str] = re.compile(r"^not eligible\.?$", re.IGNORECASE)
    attach_form: re.Pattern[str] = re.compile(
        r"^attach(?:ed)?(?: form)? (.*?)\.?$", re.IGNORECASE
    )
    exclude: re.Pattern[str] = re.compile(r"^exclude (.*)$", re.IGNORECASE)
    surcharge: re.Pattern[str] = re.compile(r"^surcharge (.*)$", re.IGNORECASE)
    doc: re.Pattern[str] = re.compile(r"^(?:see|require the user) (.*)$", re.IGNORECASE)

    # "redirect and change to appropriate class code (12345)."
    assert_class: re.Pattern[str] = re.compile(
        r"^(?:add|redirect and change)\s*(.*)$", re.IGNORECASE
    )
    assert_class_target: re.Pattern[str] = re.compile(
        r"^(?:(?:to\s*)?appropriate\s*)?.*class(?: code)?\s*(?:[.-]\s*)?[(\[]?\s*(.*?)\s*[\])]?\.?$",
        re.IGNORECASE,
    )
    # description-aware class code chunks, e.g. "Trucking 12345; Hauling 67890"
    class_chunk_loose: re.Pattern[str] = re.compile(
        r"(?:^|\s*[;, ]+|\s*or)[; ]*(.*?\s*[0-9]{5,})"
    )
    class_code_strict: re.Pattern[str] = re.compile(r"[0-9]{5,}")
    class_chunk: re.Pattern[str] = re.compile(
        r"^[;,. ]*(?:(?:or|and|to)\s+)?(.*?)[ (\[-]*([0-9]+)$"
    )

    whitespace_run: re.Pattern[str] = re.compile(r"  +")
    sentence_start: re.Pattern[str] = re.compile(r"(?:^|[.?;] *)[a-z]")
    label_prefix: re.Pattern[str] = re.compile(r"^(?:[a-z-]+\$)+")

    def normalize(self, value: str) -> str:
        """Collapse runs of spaces to a single space."""
        return self.whitespace_run.sub(" ", value)

    def question_label(self, text: str) -> str:
        """Human-facing label for question *text*.

        Collapses space runs and capitalizes the first sentence start.
        """
        return self.sentence_start.sub(
            lambda m: m.group(0).upper(), self.normalize(text), count=1
        )

    def strip_label_prefix(self, key: str) -> str:
        """Strip leading ``tag$`` prefixes from a rendered node key."""
        return self.label_prefix.sub("", key)

DEFAULT_DIALECT = DialectPatterns()
