"""
Row sink that turns exported rows into cell batches.

CellFeedSink implements the TabularSerializer contract. Every non-empty cell of
an incoming row becomes a Mutation against the pre-fetched cell identity at the
same position; every ``flush_rows`` rows, and once more at the end of the
stream, the accumulated batch is submitted.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from sheetlift.exceptions import SheetsAPIError
from sheetlift.executor.batch import BatchAccumulator, BatchSubmitter
from sheetlift.executor.cell_index import CellIndex
from sheetlift.spreadsheet.model import CellData, Mutation, batch_id_for

logger = logging.getLogger(__name__)


class CellFeedSink:
    """Streams rows into a worksheet in fixed-size batches.

    A batch that fails to submit is logged and dropped; streaming continues with
    the next rows. Header rows are written like any other row.

    Attributes:
        index: Cell identities of the target worksheet
        submitter: Sends batches to the worksheet
        accumulator: Collects mutations between flushes
        rows_processed: Rows seen so far (also the 0-indexed row of the next row)
        batches_submitted: Batches sent successfully
        failed_batches: Batches whose submission raised
        cells_sent: Mutations in successfully sent batches
    """

    def __init__(
        self,
        index: CellIndex,
        submitter: BatchSubmitter,
        accumulator: BatchAccumulator,
    ) -> None:
        self.index = index
        self.submitter = submitter
        self.accumulator = accumulator
        self.rows_processed = 0
        self.batches_submitted = 0
        self.failed_batches = 0
        self.cells_sent = 0
        self._rows_since_flush = 0

    def start_file(self, options: Dict[str, Any]) -> None:
        pass

    def add_row(self, cells: Sequence[Optional[CellData]], is_header: bool) -> None:
        row = self.rows_processed
        for col, cell in enumerate(cells):
            if cell is None or cell.is_empty:
                continue
            self.accumulator.add(
                Mutation(
                    cell=self.index.lookup(row, col),
                    value=cell.text,
                    link=cell.link,
                    batch_id=batch_id_for(row, col),
                )
            )

        self.rows_processed += 1
        self._rows_since_flush += 1
        if self.accumulator.should_flush(self._rows_since_flush):
            self._send_batch()

    def end_file(self) -> None:
        if self.accumulator.pending:
            self._send_batch()
        logger.info(
            "Finished streaming %d rows: %d batches sent, %d failed, %d cells written",
            self.rows_processed, self.batches_submitted, self.failed_batches, self.cells_sent,
        )

    def _send_batch(self) -> None:
        self._rows_since_flush = 0
        batch = self.accumulator.take_and_reset()
        if not len(batch):
            return

        try:
            self.submitter.submit(batch)
        except SheetsAPIError:
            self.failed_batches += 1
            logger.exception(
                "Failed to submit batch of %d cells ending at row %d",
                len(batch), self.rows_processed,
            )
            return

        self.batches_submitted += 1
        self.cells_sent += len(batch)
