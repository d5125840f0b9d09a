"""
Spreadsheet data model for uploads.

This module provides flat records for the remote objects an upload touches and
for the changes it sends:
- GridDocument: A spreadsheet created for one upload
- Worksheet: The single tab the dataset is written into
- CellIdentity: The remote handle for one cell position
- CellData: One exported cell value, optionally with a link
- Mutation: A pending change to one cell
- CellResult / BatchOutcome: Per-cell results of a batch submission

Rows and columns are 1-indexed on CellIdentity (as on the wire) and 0-indexed
everywhere else. CellIndex is the only place that converts between the two.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True)
class GridDocument:
    """A spreadsheet document.

    Attributes:
        id: The spreadsheet key
        title: The spreadsheet title
        url: Public link to the spreadsheet
    """
    id: str
    title: str
    url: str


@dataclass(frozen=True)
class Worksheet:
    """A worksheet (tab) with fixed dimensions.

    Attributes:
        id: The worksheet id within its document
        title: The worksheet title
        rows: Number of rows
        cols: Number of columns
        document_id: Key of the owning GridDocument
    """
    id: int
    title: str
    rows: int
    cols: int
    document_id: str

    @property
    def size(self) -> int:
        return self.rows * self.cols


@dataclass(frozen=True)
class CellIdentity:
    """Remote handle for one cell.

    Attributes:
        row: Row number (1-indexed)
        col: Column number (1-indexed)
        address: A1 notation address used when updating the cell (e.g. "B5")
    """
    row: int
    col: int
    address: str


@dataclass(frozen=True)
class CellData:
    """One exported cell: its text and an optional link target."""
    text: Optional[str]
    link: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.text is None


@dataclass(frozen=True)
class Mutation:
    """A pending change to one cell.

    Attributes:
        cell: The target cell
        value: The new cell text
        link: Optional link target; rendered as a HYPERLINK formula
        batch_id: Correlation id, unique within one batch ("R{row}C{col}")
    """
    cell: CellIdentity
    value: str
    link: Optional[str]
    batch_id: str

    def input_value(self) -> str:
        """Return the value as it should be entered into the cell."""
        if self.link is None:
            return self.value
        return f'=HYPERLINK("{_quote(self.link)}","{_quote(self.value)}")'


def _quote(text: str) -> str:
    return text.replace('"', '""')


def batch_id_for(row: int, col: int) -> str:
    """Build the correlation id for a 0-indexed (row, col) position."""
    return f"R{row + 1}C{col + 1}"


class CellBatch:
    """An ordered group of mutations submitted together.

    Correlation ids must be unique within a batch.
    """

    def __init__(self) -> None:
        self.mutations: List[Mutation] = []
        self._ids: set = set()

    def add(self, mutation: Mutation) -> None:
        if mutation.batch_id in self._ids:
            raise ValueError(f"Duplicate batch id in batch: {mutation.batch_id}")
        self._ids.add(mutation.batch_id)
        self.mutations.append(mutation)

    @property
    def batch_ids(self) -> List[str]:
        return [m.batch_id for m in self.mutations]

    def __len__(self) -> int:
        return len(self.mutations)

    def __iter__(self):
        return iter(self.mutations)

    def __repr__(self) -> str:
        return f"CellBatch(mutations={len(self.mutations)})"


@dataclass(frozen=True)
class CellResult:
    """Outcome of one mutation in a batch.

    Attributes:
        batch_id: Correlation id of the mutation
        success: Whether the remote service applied the change
        reason: Short failure reason (empty on success)
        content: Any detail payload returned for the cell
    """
    batch_id: str
    success: bool
    reason: str = ""
    content: Any = None


@dataclass
class BatchOutcome:
    """Per-mutation results of one batch submission, in submission order."""
    results: List[CellResult] = field(default_factory=list)

    @property
    def failures(self) -> List[CellResult]:
        return [r for r in self.results if not r.success]

    @property
    def first_failure(self) -> Optional[CellResult]:
        for r in self.results:
            if not r.success:
                return r
        return None

    @property
    def succeeded(self) -> bool:
        return self.first_failure is None

    def get(self, batch_id: str) -> Optional[CellResult]:
        for r in self.results:
            if r.batch_id == batch_id:
                return r
        return None
