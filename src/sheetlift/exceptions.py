"""
Exception classes for sheetlift.

These exceptions are used throughout the sheetlift package to signal error conditions
while preparing a destination spreadsheet and while streaming rows into it.
"""


class SheetsAPIError(Exception):
    """Raised when a Google Sheets API call fails.

    This error wraps exceptions from the Google Sheets API (via gspread) and from the
    underlying HTTP transport, and provides context about which operation failed.
    Common causes include:
        - Authentication failures
        - Rate limiting (HTTP 429)
        - Network connectivity issues
        - A spreadsheet deleted while an upload is still running
    """
    pass


class CellIndexError(Exception):
    """Raised when the cell index cannot cover the worksheet grid.

    The index is built once per upload from a single cell listing. A listing that
    leaves any (row, column) position unfilled, or that reports cells outside the
    worksheet, makes every later lookup unreliable, so the upload is abandoned.
    Lookups outside the indexed grid raise this error as well.
    """
    pass


class NotAuthorizedError(Exception):
    """Raised when an upload is requested without an authenticated client."""
    pass


class UnsupportedFormatError(Exception):
    """Raised when an upload is requested for a destination format we cannot produce."""
    pass


class UploadError(Exception):
    """Raised when a destination spreadsheet cannot be prepared for an upload.

    Wraps failures in the synchronous part of an upload (sizing the dataset,
    creating the worksheet) that are not already reported as ``SheetsAPIError``
    or ``CellIndexError``.
    """
    pass
