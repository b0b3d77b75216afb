"""snrsl configuration -- row column layout and dialect patterns."""

from snrsl.config.columns import (
    CLASS_CODE_COLUMN,
    CLASS_DESC_COLUMN,
    DEFAULT_LAYOUT,
    QUESTION_COLUMNS,
    ColumnLayout,
)
from snrsl.config.dialect import DEFAULT_DIALECT, DialectPatterns

__all__ = [
    "CLASS_CODE_COLUMN",
    "CLASS_DESC_COLUMN",
    "DEFAULT_DIALECT",
    "DEFAULT_LAYOUT",
    "QUESTION_COLUMNS",
    "ColumnLayout",
    "DialectPatterns",
]
