"""Tests for the row sources."""

from __future__ import annotations

import asyncio
import csv
from collections.abc import AsyncIterable
from pathlib import Path

from snrsl.core.ingestion.rows import iter_rows, read_csv_rows

HEADER = [
    "Class Code",
    "Class(es) of Business",
    "Question Set",
    "Question Set, continued",
    "Question Set, continued 2",
]


def _collect(rows: AsyncIterable) -> list:
    async def run() -> list:
        return [row async for row in rows]

    return asyncio.run(run())


class TestIterRows:
    def test_preserves_order(self) -> None:
        rows = [{"n": 1}, {"n": 2}, {"n": 3}]
        assert _collect(iter_rows(rows)) == rows

    def test_empty(self) -> None:
        assert _collect(iter_rows([])) == []


class TestReadCsvRows:
    def test_reads_records_by_header(self, tmp_path: Path) -> None:
        path = tmp_path / "spec.csv"
        with path.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerow(HEADER)
            writer.writerow(["12345", "Trucking", "Do you haul logs?\n  If yes, not eligible.", "", ""])

        (row,) = _collect(read_csv_rows(path))
        assert row["Class Code"] == "12345"
        assert row["Question Set"] == "Do you haul logs?\n  If yes, not eligible."
        assert row["Question Set, continued 2"] == ""

    def test_strips_byte_order_mark(self, tmp_path: Path) -> None:
        path = tmp_path / "spec.csv"
        path.write_text(",".join(f'"{h}"' for h in HEADER) + "\n12345,Trucking,Q?,,\n", encoding="utf-8-sig")

        (row,) = _collect(read_csv_rows(path))
        assert "Class Code" in row

    def test_short_record_fields_are_none(self, tmp_path: Path) -> None:
        path = tmp_path / "spec.csv"
        path.write_text(",".join(f'"{h}"' for h in HEADER) + "\n12345,Trucking\n", encoding="utf-8")

        (row,) = _collect(read_csv_rows(path))
        assert row["Question Set"] is None
