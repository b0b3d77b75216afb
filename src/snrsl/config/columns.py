"""Column names expected on every specification row."""

from __future__ import annotations

from dataclasses import dataclass

CLASS_CODE_COLUMN = "Class Code"
CLASS_DESC_COLUMN = "Class(es) of Business"

QUESTION_COLUMNS: tuple[str, ...] = (
    "Question Set",
    "Question Set, continued",
    "Question Set, continued 2",
)

@dataclass(frozen=True)
class ColumnLayout:
    """Which row fields hold the class code, description and question sets.

    The question-set columns are concatenated in the order given here.
    """

    class_code: str = CLASS_CODE_COLUMN
    class_desc: str = CLASS_DESC_COLUMN
    questions: tuple[str, ...] = QUESTION_COLUMNS

    @property
    def required(self) -> tuple[str, ...]:
        return (self.class_code, self.class_desc, *self.questions)

DEFAULT_LAYOUT = ColumnLayout()
