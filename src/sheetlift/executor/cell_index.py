"""
Cell index for a freshly created worksheet.

The index maps 0-indexed (row, col) positions to the remote cell identities of a
worksheet. It is built from a single cell listing that includes empty cells, and
must cover the whole grid before any row is streamed.
"""

from typing import List, Optional, Tuple

from sheetlift.exceptions import CellIndexError
from sheetlift.executor.base import GridService
from sheetlift.spreadsheet.model import CellIdentity, Worksheet


class CellIndex:
    """Dense row-major lookup of cell identities.

    Attributes:
        rows: Number of indexed rows
        cols: Number of indexed columns
    """

    def __init__(self, rows: int, cols: int, cells: List[CellIdentity]) -> None:
        """Place ``cells`` into an ``rows`` x ``cols`` grid.

        Raises:
            CellIndexError: If a cell lies outside the grid or a position is left empty
        """
        if rows <= 0 or cols <= 0:
            raise CellIndexError(f"Cannot index a {rows}x{cols} grid")

        self.rows = rows
        self.cols = cols
        grid: List[List[Optional[CellIdentity]]] = [[None] * cols for _ in range(rows)]

        for cell in cells:
            # wire coordinates are 1-indexed
            r, c = cell.row - 1, cell.col - 1
            if not (0 <= r < rows and 0 <= c < cols):
                raise CellIndexError(
                    f"Cell R{cell.row}C{cell.col} lies outside the {rows}x{cols} worksheet"
                )
            grid[r][c] = cell

        missing = [
            (r, c) for r in range(rows) for c in range(cols) if grid[r][c] is None
        ]
        if missing:
            r, c = missing[0]
            raise CellIndexError(
                f"Cell listing is incomplete: {len(missing)} of {rows * cols} cells "
                f"missing (first R{r + 1}C{c + 1})"
            )

        self._grid = grid

    @classmethod
    def build(cls, service: GridService, worksheet: Worksheet) -> "CellIndex":
        """Fetch every cell of ``worksheet`` and index it.

        Raises:
            CellIndexError: If the listing does not cover the worksheet exactly
            SheetsAPIError: If the listing request fails
        """
        cells = service.fetch_cells(worksheet, include_empty=True)
        return cls(worksheet.rows, worksheet.cols, cells)

    def lookup(self, row: int, col: int) -> CellIdentity:
        """Return the identity of the cell at 0-indexed (row, col)."""
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise CellIndexError(
                f"Position ({row}, {col}) is outside the indexed "
                f"{self.rows}x{self.cols} grid"
            )
        return self._grid[row][col]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    def __len__(self) -> int:
        return self.rows * self.cols

    def __repr__(self) -> str:
        return f"CellIndex(rows={self.rows}, cols={self.cols})"
