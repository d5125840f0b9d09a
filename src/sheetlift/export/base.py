"""
Row export contracts.

A RowExporter produces the rows of a (possibly filtered) dataset and pushes them,
one at a time and in order, into a TabularSerializer. It can also report the size
of what it would export, so a destination can be shaped before streaming starts.
"""

from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

from sheetlift.spreadsheet.model import CellData


class TabularSerializer(Protocol):
    """Consumer of exported rows."""

    def start_file(self, options: Dict[str, Any]) -> None:
        """Called once before the first row."""
        ...

    def add_row(self, cells: Sequence[Optional[CellData]], is_header: bool) -> None:
        """Called once per row, in increasing row order starting at row 0.

        ``None`` entries (or CellData with no text) are empty cells.
        """
        ...

    def end_file(self) -> None:
        """Called once after the last row."""
        ...


class RowExporter(Protocol):
    """Producer of exported rows."""

    def count_columns_rows(self) -> Tuple[int, int]:
        """Return ``(rows, cols)`` of the export, header included."""
        ...

    def export_rows(self, serializer: TabularSerializer) -> None:
        """Push every row into ``serializer`` between start_file and end_file."""
        ...
