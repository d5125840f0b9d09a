"""
Google Sheets API client wrapper.

This module provides the GridService implementation for Google Sheets via gspread,
with error wrapping for the operations an upload performs.
"""

from typing import Dict, List, Sequence, Tuple

import gspread
import requests
from gspread.exceptions import APIError

from sheetlift.exceptions import SheetsAPIError
from sheetlift.spreadsheet.model import (
    BatchOutcome,
    CellIdentity,
    CellResult,
    GridDocument,
    Mutation,
    Worksheet,
)


class SheetsClient:
    """
    A wrapper around gspread implementing the GridService protocol.

    This client wraps an authenticated gspread client, converting gspread objects into
    flat records and wrapping API and transport errors in SheetsAPIError. gspread
    objects created through this client are cached by key so later calls do not need
    to re-open them.

    Attributes:
        gc: The authenticated gspread client instance
    """

    def __init__(self, gc: gspread.Client) -> None:
        """
        Initialize the Sheets client with an authenticated gspread client.

        Args:
            gc: An authenticated gspread client, e.g. from ``gspread.service_account()``
                or ``gspread.oauth()``.
        """
        self.gc = gc
        self._spreadsheets: Dict[str, gspread.Spreadsheet] = {}
        self._worksheets: Dict[Tuple[str, int], gspread.Worksheet] = {}

    def create_document(self, title: str) -> GridDocument:
        """
        Create a new spreadsheet.

        Args:
            title: The title for the new spreadsheet

        Returns:
            The created GridDocument

        Raises:
            SheetsAPIError: If the API call fails
        """
        try:
            spreadsheet = self.gc.create(title)
        except (APIError, requests.RequestException) as e:
            raise SheetsAPIError(f"Failed to create spreadsheet '{title}': {e}") from e

        self._spreadsheets[spreadsheet.id] = spreadsheet
        return GridDocument(id=spreadsheet.id, title=title, url=spreadsheet.url)

    def add_worksheet(
        self,
        document: GridDocument,
        title: str,
        rows: int,
        cols: int
    ) -> Worksheet:
        """
        Add a new worksheet (tab) to an existing spreadsheet.

        Args:
            document: The spreadsheet to add the worksheet to
            title: The name for the new worksheet
            rows: Number of rows in the new worksheet
            cols: Number of columns in the new worksheet

        Returns:
            The created Worksheet

        Raises:
            SheetsAPIError: If the API call fails
        """
        spreadsheet = self._spreadsheet(document)
        try:
            ws = spreadsheet.add_worksheet(title=title, rows=rows, cols=cols)
        except (APIError, requests.RequestException) as e:
            raise SheetsAPIError(
                f"Failed to add worksheet '{title}' to spreadsheet: {e}"
            ) from e

        return self._record(document, ws)

    def list_worksheets(self, document: GridDocument) -> List[Worksheet]:
        """
        List the worksheets of a spreadsheet.

        Raises:
            SheetsAPIError: If the API call fails
        """
        spreadsheet = self._spreadsheet(document)
        try:
            worksheets = spreadsheet.worksheets()
        except (APIError, requests.RequestException) as e:
            raise SheetsAPIError(
                f"Failed to list worksheets of spreadsheet '{document.title}': {e}"
            ) from e

        return [self._record(document, ws) for ws in worksheets]

    def delete_worksheet(self, document: GridDocument, worksheet: Worksheet) -> None:
        """
        Delete a worksheet from a spreadsheet.

        Raises:
            SheetsAPIError: If the API call fails
        """
        spreadsheet = self._spreadsheet(document)
        ws = self._worksheet(worksheet)
        try:
            spreadsheet.del_worksheet(ws)
        except (APIError, requests.RequestException) as e:
            raise SheetsAPIError(
                f"Failed to delete worksheet '{worksheet.title}': {e}"
            ) from e

        self._worksheets.pop((worksheet.document_id, worksheet.id), None)

    def fetch_cells(
        self,
        worksheet: Worksheet,
        include_empty: bool = True
    ) -> List[CellIdentity]:
        """
        List the cells of a worksheet in one request.

        ``Worksheet.range`` over the full grid returns a Cell for every position,
        blank or not; blank cells are dropped when ``include_empty`` is false.

        Args:
            worksheet: The worksheet to list
            include_empty: Whether to return blank cells

        Returns:
            Cell identities in row-major order

        Raises:
            SheetsAPIError: If the API call fails
        """
        ws = self._worksheet(worksheet)
        try:
            cells = ws.range(1, 1, worksheet.rows, worksheet.cols)
        except (APIError, requests.RequestException) as e:
            raise SheetsAPIError(
                f"Failed to list cells of worksheet '{worksheet.title}': {e}"
            ) from e

        return [
            CellIdentity(row=cell.row, col=cell.col, address=cell.address)
            for cell in cells
            if include_empty or cell.value not in (None, "")
        ]

    def batch_update(
        self,
        worksheet: Worksheet,
        mutations: Sequence[Mutation]
    ) -> BatchOutcome:
        """
        Write a batch of cell changes in one request.

        Values are entered as a user would type them, so HYPERLINK formulas are
        evaluated. Each mutation becomes one single-cell range; the API answers
        with one response per range in request order.

        Args:
            worksheet: The worksheet to write to
            mutations: The changes to apply

        Returns:
            Per-mutation results

        Raises:
            SheetsAPIError: If the API call fails
        """
        if not mutations:
            return BatchOutcome()

        ws = self._worksheet(worksheet)
        updates = [
            {'range': m.cell.address, 'values': [[m.input_value()]]}
            for m in mutations
        ]
        try:
            response = ws.batch_update(updates, raw=False)
        except (APIError, requests.RequestException) as e:
            raise SheetsAPIError(
                f"Failed to batch update {len(updates)} cells in {worksheet.title}: {e}"
            ) from e

        return self._outcome(mutations, response or {})

    @staticmethod
    def _outcome(mutations: Sequence[Mutation], response: dict) -> BatchOutcome:
        responses = response.get("responses", [])
        results = []
        for i, mutation in enumerate(mutations):
            if i >= len(responses):
                results.append(CellResult(mutation.batch_id, False, "no response"))
                continue
            detail = responses[i]
            # Zero counts are omitted from the JSON reply
            if detail.get("updatedCells", 0) >= 1:
                results.append(CellResult(mutation.batch_id, True, content=detail))
            else:
                results.append(
                    CellResult(mutation.batch_id, False, "not updated", detail)
                )
        return BatchOutcome(results)

    def _spreadsheet(self, document: GridDocument) -> gspread.Spreadsheet:
        spreadsheet = self._spreadsheets.get(document.id)
        if spreadsheet is None:
            try:
                spreadsheet = self.gc.open_by_key(document.id)
            except (APIError, requests.RequestException) as e:
                raise SheetsAPIError(
                    f"Failed to open spreadsheet '{document.id}': {e}"
                ) from e
            self._spreadsheets[document.id] = spreadsheet
        return spreadsheet

    def _worksheet(self, worksheet: Worksheet) -> gspread.Worksheet:
        key = (worksheet.document_id, worksheet.id)
        ws = self._worksheets.get(key)
        if ws is None:
            spreadsheet = self._spreadsheets.get(worksheet.document_id)
            if spreadsheet is None:
                spreadsheet = self._spreadsheet(
                    GridDocument(id=worksheet.document_id, title="", url="")
                )
            try:
                ws = spreadsheet.get_worksheet_by_id(worksheet.id)
            except (APIError, requests.RequestException) as e:
                raise SheetsAPIError(
                    f"Failed to open worksheet '{worksheet.title}': {e}"
                ) from e
            self._worksheets[key] = ws
        return ws

    def _record(self, document: GridDocument, ws: gspread.Worksheet) -> Worksheet:
        self._worksheets[(document.id, ws.id)] = ws
        return Worksheet(
            id=ws.id,
            title=ws.title,
            rows=ws.row_count,
            cols=ws.col_count,
            document_id=document.id,
        )
