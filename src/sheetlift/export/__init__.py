"""
Export module for sheetlift.

This module provides the row export contracts and a pandas-backed exporter.
"""

from sheetlift.export.base import RowExporter, TabularSerializer
from sheetlift.export.dataframe import DataFrameExporter, ExportOptions

__all__ = [
    "RowExporter",
    "TabularSerializer",
    "DataFrameExporter",
    "ExportOptions",
]
