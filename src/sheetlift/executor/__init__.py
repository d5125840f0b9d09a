"""
Executor module for sheetlift.

This module provides the pieces that move exported rows into a worksheet.
``SheetsClient`` targets the Google Sheets API; ``CellIndex``, the batching
classes and ``CellFeedSink`` work against any ``GridService``.
"""

from sheetlift.executor.base import GridService
from sheetlift.executor.batch import BatchAccumulator, BatchSubmitter
from sheetlift.executor.cell_index import CellIndex
from sheetlift.executor.sheets_client import SheetsClient
from sheetlift.executor.sink import CellFeedSink

__all__ = [
    "GridService",
    "BatchAccumulator",
    "BatchSubmitter",
    "CellIndex",
    "SheetsClient",
    "CellFeedSink",
]
