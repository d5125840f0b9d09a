"""
Abstract grid service interface.

The GridService protocol is the narrow set of remote capabilities an upload needs:
create a spreadsheet, shape its worksheets, list the cells of a worksheet and
submit batches of cell changes. SheetsClient implements it over gspread; tests
use an in-memory fake.
"""

from typing import List, Protocol, Sequence

from sheetlift.spreadsheet.model import (
    BatchOutcome,
    CellIdentity,
    GridDocument,
    Mutation,
    Worksheet,
)


class GridService(Protocol):
    """Protocol for remote grid-style document stores."""

    def create_document(self, title: str) -> GridDocument:
        """Create a new spreadsheet with the given title."""
        ...

    def add_worksheet(
        self, document: GridDocument, title: str, rows: int, cols: int
    ) -> Worksheet:
        """Add a worksheet of exactly ``rows`` x ``cols`` cells to ``document``."""
        ...

    def list_worksheets(self, document: GridDocument) -> List[Worksheet]:
        """Return every worksheet currently in ``document``."""
        ...

    def delete_worksheet(self, document: GridDocument, worksheet: Worksheet) -> None:
        """Delete ``worksheet`` from ``document``."""
        ...

    def fetch_cells(
        self, worksheet: Worksheet, include_empty: bool = True
    ) -> List[CellIdentity]:
        """List the cells of ``worksheet`` in one request.

        With ``include_empty`` every position of the grid is returned, blank or not.
        """
        ...

    def batch_update(
        self, worksheet: Worksheet, mutations: Sequence[Mutation]
    ) -> BatchOutcome:
        """Apply ``mutations`` in one request and return their per-cell results.

        Raises:
            SheetsAPIError: If the request as a whole fails
        """
        ...
