"""
sheetlift - Stream tabular data into Google Sheets in batches.

This package publishes a (possibly filtered) pandas DataFrame into a new Google
Sheets spreadsheet. The spreadsheet is created and sized up front and its link is
returned right away; rows are then written in fixed-size batches of cell updates
on a background thread.

Usage:
    >>> import gspread
    >>> import sheetlift
    >>> handle = sheetlift.upload_to_sheets(gspread.service_account(), df, "Report")
    >>> print(handle.url)
    >>> handle.wait()

Key components:
- SheetUploader: Creates the destination and starts the background stream
- CellIndex: Pre-fetched cell identities of the destination worksheet
- BatchAccumulator / BatchSubmitter: Batch cell updates and send them
- CellFeedSink: Converts exported rows into cell updates
- DataFrameExporter: Pushes the selected rows of a DataFrame into a sink
"""

from .config import UploadConfig
from .exceptions import *
from .export import DataFrameExporter, ExportOptions
from .uploader import (
    GOOGLE_SPREADSHEET_FORMAT,
    SheetUploader,
    UploadHandle,
    UploadState,
    upload_response,
    upload_to_sheets,
)

# Version
__version__ = "0.1.0"

__all__ = [
    'UploadConfig',
    'DataFrameExporter',
    'ExportOptions',
    'SheetUploader',
    'UploadHandle',
    'UploadState',
    'upload_to_sheets',
    'upload_response',
    'GOOGLE_SPREADSHEET_FORMAT',
]
