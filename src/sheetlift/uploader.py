"""
Upload orchestration.

SheetUploader prepares a destination spreadsheet synchronously (create, size,
shape the worksheet, index its cells) and then streams the dataset into it on a
background thread. The caller gets the spreadsheet link back as soon as the
destination exists; failures after that point are logged and recorded on the
returned UploadHandle but never raised to the caller.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Dict, Optional

from sheetlift.config import UploadConfig
from sheetlift.exceptions import NotAuthorizedError, UnsupportedFormatError, UploadError
from sheetlift.executor.base import GridService
from sheetlift.executor.batch import BatchAccumulator, BatchSubmitter
from sheetlift.executor.cell_index import CellIndex
from sheetlift.executor.sink import CellFeedSink
from sheetlift.export.base import RowExporter
from sheetlift.spreadsheet.model import GridDocument, Worksheet

logger = logging.getLogger(__name__)


GOOGLE_SPREADSHEET_FORMAT = "google-spreadsheet"


class UploadState(Enum):
    """Lifecycle of one upload. Transitions are strictly sequential."""
    CREATED = "created"
    SIZED = "sized"
    WORKSHEET_READY = "worksheet_ready"
    INDEX_BUILT = "index_built"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


class UploadHandle:
    """Caller-side view of a running upload.

    Attributes:
        document: The destination spreadsheet
        worksheet: The worksheet rows are written into (None until created)
        state: Current lifecycle state
        error: Exception that ended the background stream, if any
        sink: The row sink once streaming has started
    """

    def __init__(self, document: GridDocument) -> None:
        self.document = document
        self.worksheet: Optional[Worksheet] = None
        self.state = UploadState.CREATED
        self.error: Optional[BaseException] = None
        self.sink: Optional[CellFeedSink] = None
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return self.document.url

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until streaming has finished.

        Returns:
            True if the upload finished (completed or failed) within ``timeout``
        """
        return self._done.wait(timeout)

    def _start(self, exporter: RowExporter) -> None:
        """Stream ``exporter``'s rows into ``self.sink`` on a background thread."""
        self._thread = threading.Thread(
            target=self._stream,
            args=(exporter,),
            name=f"sheetlift-upload-{self.document.id}",
            daemon=True,
        )
        self.state = UploadState.STREAMING
        self._thread.start()

    def _stream(self, exporter: RowExporter) -> None:
        try:
            exporter.export_rows(self.sink)
        except Exception as e:
            # Nobody is left to raise to: the caller already has the link
            logger.exception(
                "Error uploading data to Google Sheets spreadsheet '%s'", self.document.title
            )
            self.error = e
            self.state = UploadState.FAILED
        else:
            self.state = UploadState.COMPLETED
        finally:
            self._done.set()

    def __repr__(self) -> str:
        return f"UploadHandle(url={self.url!r}, state={self.state.value})"


class SheetUploader:
    """Publishes exported rows into a new spreadsheet.

    Attributes:
        service: Grid service that hosts the spreadsheet
        config: Upload settings
    """

    def __init__(self, service: GridService, config: Optional[UploadConfig] = None) -> None:
        self.service = service
        self.config = config or UploadConfig()

    def upload(self, exporter: RowExporter, title: str) -> UploadHandle:
        """Create a spreadsheet for ``exporter``'s rows and start filling it.

        Args:
            exporter: Source of the rows and of their extents
            title: Title for the new spreadsheet

        Returns:
            Handle of the upload; ``handle.url`` is usable immediately

        Raises:
            SheetsAPIError: If the spreadsheet or worksheet cannot be set up
            CellIndexError: If the worksheet's cells cannot be indexed
            UploadError: If the dataset extents are invalid or the worksheet
                does not have the requested size
        """
        document = self.service.create_document(title)
        handle = UploadHandle(document)

        rows, cols = exporter.count_columns_rows()
        if rows < 0 or cols < 0:
            raise UploadError(f"Invalid dataset extents: {rows} rows x {cols} columns")
        handle.state = UploadState.SIZED

        handle.worksheet = self._prepare_worksheet(document, rows, cols)
        handle.state = UploadState.WORKSHEET_READY

        index = CellIndex.build(self.service, handle.worksheet)
        handle.state = UploadState.INDEX_BUILT

        handle.sink = CellFeedSink(
            index,
            BatchSubmitter(self.service, handle.worksheet, self.config),
            BatchAccumulator(self.config.flush_rows),
        )
        handle._start(exporter)

        logger.info(
            "Started upload of %d x %d cells to %s", rows, cols, document.url
        )
        return handle

    def _prepare_worksheet(self, document: GridDocument, rows: int, cols: int) -> Worksheet:
        """Add the destination worksheet and drop every other one.

        Google Sheets rejects empty grids, so an empty export still gets one cell.
        """
        rows, cols = max(rows, 1), max(cols, 1)
        worksheet = self.service.add_worksheet(
            document, self.config.worksheet_title, rows, cols
        )
        if (worksheet.rows, worksheet.cols) != (rows, cols):
            raise UploadError(
                f"Worksheet '{worksheet.title}' was created with "
                f"{worksheet.rows}x{worksheet.cols} cells, expected {rows}x{cols}"
            )

        for other in self.service.list_worksheets(document):
            if other.id != worksheet.id:
                self.service.delete_worksheet(document, other)
        return worksheet


def upload_to_sheets(
    gc: Any,
    df: Any,
    title: str,
    options: Any = None,
    config: Optional[UploadConfig] = None,
) -> UploadHandle:
    """Upload a DataFrame to a new Google Sheet.

    Args:
        gc: An authenticated ``gspread.Client`` (from
            ``gspread.service_account()`` or ``gspread.oauth()``).
        df: The pandas DataFrame to upload.
        title: Title for the new Google Sheet.
        options: ``ExportOptions`` selecting rows and columns.
        config: Upload settings.

    Returns:
        The ``UploadHandle`` of the running upload.

    Raises:
        NotAuthorizedError: If no client is given
    """
    from sheetlift.executor.sheets_client import SheetsClient
    from sheetlift.export.dataframe import DataFrameExporter

    if gc is None:
        raise NotAuthorizedError("Not authorized")

    uploader = SheetUploader(SheetsClient(gc), config)
    return uploader.upload(DataFrameExporter(df, options), title)


def upload_response(
    gc: Any,
    df: Any,
    title: str,
    format: str = GOOGLE_SPREADSHEET_FORMAT,
    options: Any = None,
    config: Optional[UploadConfig] = None,
) -> Dict[str, str]:
    """Run an upload and describe the result as a JSON-ready status mapping.

    Returns:
        ``{"status": "ok", "url": ...}`` once the spreadsheet exists, or
        ``{"status": "error", "message": ...}`` if it could not be set up
    """
    try:
        if gc is None:
            raise NotAuthorizedError("Not authorized")
        if format != GOOGLE_SPREADSHEET_FORMAT:
            raise UnsupportedFormatError("No such format")
        handle = upload_to_sheets(gc, df, title, options, config)
    except (NotAuthorizedError, UnsupportedFormatError) as e:
        return {"status": "error", "message": str(e)}
    except Exception as e:
        logger.exception("Upload of '%s' failed", title)
        return {"status": "error", "message": str(e)}

    return {"status": "ok", "url": handle.url}
