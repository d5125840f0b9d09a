"""
Spreadsheet model module.

This module provides the flat records shared by the upload pipeline and the
remote grid service.
"""

from sheetlift.spreadsheet.model import (
    GridDocument,
    Worksheet,
    CellIdentity,
    CellData,
    Mutation,
    CellBatch,
    CellResult,
    BatchOutcome,
    batch_id_for,
)

__all__ = [
    "GridDocument",
    "Worksheet",
    "CellIdentity",
    "CellData",
    "Mutation",
    "CellBatch",
    "CellResult",
    "BatchOutcome",
    "batch_id_for",
]
