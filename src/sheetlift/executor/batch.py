"""
Batch accumulation and submission.

This module provides the two halves of cell batching:
- BatchAccumulator collects mutations into the open CellBatch and decides when
  enough rows have been seen to flush it
- BatchSubmitter sends one CellBatch to the grid service and inspects the
  per-cell results, with optional retry and exponential backoff
"""

import logging
import time
from typing import Optional

from sheetlift.config import UploadConfig
from sheetlift.exceptions import SheetsAPIError
from sheetlift.executor.base import GridService
from sheetlift.spreadsheet.model import BatchOutcome, CellBatch, Mutation, Worksheet

logger = logging.getLogger(__name__)


class BatchAccumulator:
    """Collects mutations until a row threshold is reached.

    Attributes:
        flush_rows: Number of rows after which the open batch should be submitted
    """

    def __init__(self, flush_rows: int) -> None:
        if flush_rows <= 0:
            raise ValueError(f"flush_rows must be positive, got {flush_rows}")
        self.flush_rows = flush_rows
        self._batch: Optional[CellBatch] = None

    def add(self, mutation: Mutation) -> None:
        """Append a mutation to the open batch, opening one if needed."""
        if self._batch is None:
            self._batch = CellBatch()
        self._batch.add(mutation)

    def should_flush(self, rows_since_flush: int) -> bool:
        return rows_since_flush >= self.flush_rows

    def take_and_reset(self) -> CellBatch:
        """Return the open batch (possibly empty) and start afresh."""
        batch = self._batch if self._batch is not None else CellBatch()
        self._batch = None
        return batch

    @property
    def pending(self) -> int:
        return len(self._batch) if self._batch is not None else 0


class BatchSubmitter:
    """Submits cell batches against one worksheet.

    Attributes:
        service: Grid service the batches are sent to
        worksheet: Target worksheet
        config: Upload settings (retry policy, failure reporting)
    """

    def __init__(
        self,
        service: GridService,
        worksheet: Worksheet,
        config: Optional[UploadConfig] = None,
    ) -> None:
        self.service = service
        self.worksheet = worksheet
        self.config = config or UploadConfig()

    def submit(self, batch: CellBatch) -> BatchOutcome:
        """Send ``batch`` and log failed cells.

        Args:
            batch: The batch to send; it is consumed whole and must not be reused

        Returns:
            The per-cell outcome reported by the service

        Raises:
            SheetsAPIError: If the submission fails as a whole after all retries
        """
        if not len(batch):
            return BatchOutcome()

        outcome = self._retry_operation(batch)
        logger.debug(
            "Submitted %d cells (%s..%s) to %s",
            len(batch), batch.batch_ids[0], batch.batch_ids[-1], self.worksheet.title,
        )

        for result in outcome.results:
            if not result.success:
                logger.warning(
                    "Error: %s failed (%s) %s", result.batch_id, result.reason, result.content
                )
                if not self.config.report_all_failures:
                    break
        return outcome

    def _retry_operation(self, batch: CellBatch) -> BatchOutcome:
        """Submit with retry and exponential backoff.

        Raises:
            SheetsAPIError: If every attempt fails
        """
        attempts = self.config.max_retries + 1
        last_error = None

        for attempt in range(attempts):
            try:
                return self.service.batch_update(self.worksheet, batch.mutations)
            except SheetsAPIError as e:
                last_error = e
                if attempt < attempts - 1:
                    delay = self.config.base_delay * (2 ** attempt)
                    logger.info(
                        "Batch submission failed (%s), retrying in %.1fs", e, delay
                    )
                    time.sleep(delay)

        if attempts == 1:
            raise last_error
        raise SheetsAPIError(
            f"Failed to submit {len(batch)} cells after {attempts} attempts: {last_error}"
        ) from last_error
