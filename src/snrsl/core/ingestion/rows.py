"""Row sources for the spec parser.

The parser consumes rows as an async iterable so that it only ever waits on
the next row.  These adapters cover the two common cases: rows already in
memory, and a CSV export of the specification spreadsheet.
"""

from __future__ import annotations

import csv
from collections.abc import AsyncIterator, Iterable, Mapping
from pathlib import Path
from typing import Any

async def iter_rows(rows: Iterable[Mapping[str, Any]]) -> AsyncIterator[Mapping[str, Any]]:
    """Yield each of *rows*, in order."""
    for row in rows:
        yield row

async def read_csv_rows(path: Path, encoding: str = "utf-8-sig") -> AsyncIterator[dict[str, Any]]:
    """Yield the records of the CSV file at *path*, keyed by header.

    Fields missing from a short record are ``None`` so that the parser reports
    them as missing columns.
    """
    with path.open(newline="", encoding=encoding) as fh:
        for record in csv.DictReader(fh):
            yield record
