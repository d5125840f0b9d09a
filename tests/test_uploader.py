"""
Tests for upload orchestration.

The core pipeline runs against FakeGridService; the background stream is awaited
through UploadHandle.wait so no test depends on timing.
"""

import logging
from unittest.mock import Mock

import pytest

import sheetlift
from sheetlift.config import UploadConfig
from sheetlift.exceptions import (
    CellIndexError,
    NotAuthorizedError,
    SheetsAPIError,
    UploadError,
)
from sheetlift.export import ExportOptions
from sheetlift.spreadsheet.model import CellData, GridDocument
from sheetlift.uploader import (
    SheetUploader,
    UploadHandle,
    UploadState,
    upload_response,
    upload_to_sheets,
)
from tests.helpers.fake_grid import FakeGridService, ListExporter


def _run(rows, service=None, config=None, cols=None):
    service = service or FakeGridService()
    handle = SheetUploader(service, config).upload(ListExporter(rows, cols), "Report")
    assert handle.wait(5)
    return handle, service


class TestScenarios:

    def test_a_two_batches(self, wide_table):
        """25 full rows x 3 columns at threshold 20 -> batches of 60 and 15 cells."""
        handle, service = _run(wide_table)

        assert handle.state == UploadState.COMPLETED
        assert [len(b) for b in service.batches] == [60, 15]
        assert service.batch_ids(1)[0] == "R21C1"
        assert service.batch_ids(1)[-1] == "R25C3"

    def test_b_empty_row_sends_nothing(self):
        """A 5-row dataset whose third row is empty yields 4 rows of mutations."""
        rows = [["a", "b"], ["c", "d"], [None, None], ["e", "f"], ["g", "h"]]
        handle, service = _run(rows)

        assert len(service.batches) == 1
        ids = service.batch_ids(0)
        assert len(ids) == 8
        assert not any(i.startswith("R3C") for i in ids)

    def test_c_transport_error_does_not_stop_upload(self, wide_table, caplog):
        """A failed submission is logged and the next batch is still attempted."""
        service = FakeGridService()
        service.fail_submissions = {1}

        with caplog.at_level(logging.ERROR):
            handle, _ = _run(wide_table, service)

        assert handle.state == UploadState.COMPLETED
        assert len(service.batches) == 2
        assert handle.sink.failed_batches == 1
        assert handle.sink.batches_submitted == 1
        assert (1, 1) not in service.values
        assert service.values[(25, 3)] == "r24c2"
        assert any("Failed to submit batch" in r.getMessage() for r in caplog.records)

    def test_d_cell_failure_logged(self, caplog):
        """A failed cell is logged with its correlation id and reason."""
        service = FakeGridService()
        service.fail_cells = {"R2C1", "R3C1"}

        with caplog.at_level(logging.WARNING, logger="sheetlift.executor.batch"):
            handle, _ = _run([["a"], ["b"], ["c"]], service)

        assert handle.state == UploadState.COMPLETED
        warnings = [r.getMessage() for r in caplog.records]
        assert len(warnings) == 1
        assert "R2C1" in warnings[0]
        assert "not updated" in warnings[0]


class TestOrchestration:

    def test_worksheet_sized_before_any_mutation(self, wide_table):
        handle, service = _run(wide_table)

        assert (handle.worksheet.rows, handle.worksheet.cols) == (25, 3)
        assert service.calls.index("add_worksheet") < service.calls.index("batch_update")
        assert service.calls.index("fetch_cells") < service.calls.index("batch_update")

    def test_default_worksheet_deleted(self, wide_table):
        handle, service = _run(wide_table)

        remaining = service.worksheets[handle.document.id]
        assert [ws.title for ws in remaining] == ["Uploaded Data"]

    def test_worksheet_title_from_config(self):
        handle, service = _run([["a"]], config=UploadConfig(worksheet_title="Export"))
        assert handle.worksheet.title == "Export"

    def test_returns_before_streaming_finishes(self, wide_table):
        """The url is available while rows are still being exported."""
        service = FakeGridService()
        exporter = ListExporter(wide_table)
        exporter.release.clear()

        handle = SheetUploader(service).upload(exporter, "Report")

        assert handle.url == "https://docs.google.com/spreadsheets/d/doc1"
        assert exporter.started.wait(5)
        assert handle.state == UploadState.STREAMING
        assert not handle.done
        assert service.batches == []

        exporter.release.set()
        assert handle.wait(5)
        assert handle.state == UploadState.COMPLETED

    def test_batches_submitted_from_background_thread(self, wide_table):
        handle, service = _run(wide_table)

        assert set(service.submission_threads) == {"sheetlift-upload-doc1"}

    def test_handle_streams_into_its_sink(self):
        handle = UploadHandle(GridDocument("k1", "Report", "https://example.com/k1"))
        handle.sink = Mock()
        exporter = ListExporter([["a"]])
        exporter.release.clear()

        handle._start(exporter)

        assert exporter.started.wait(5)
        assert handle.state == UploadState.STREAMING
        exporter.release.set()
        assert handle.wait(5)
        assert handle.state == UploadState.COMPLETED
        handle.sink.add_row.assert_called_once_with([CellData("a")], False)
        handle.sink.end_file.assert_called_once_with()

    def test_custom_threshold(self, wide_table):
        handle, service = _run(wide_table, config=UploadConfig(flush_rows=10))
        assert [len(b) for b in service.batches] == [30, 30, 15]

    def test_empty_dataset(self):
        handle, service = _run([], cols=0)

        assert (handle.worksheet.rows, handle.worksheet.cols) == (1, 1)
        assert service.batches == []
        assert handle.state == UploadState.COMPLETED

    def test_background_failure_is_logged_not_raised(self, caplog):
        class BrokenExporter(ListExporter):
            def export_rows(self, serializer):
                raise RuntimeError("export pipeline crashed")

        service = FakeGridService()
        with caplog.at_level(logging.ERROR, logger="sheetlift.uploader"):
            handle = SheetUploader(service).upload(BrokenExporter([["a"]]), "Report")
            assert handle.wait(5)

        assert handle.url
        assert handle.state == UploadState.FAILED
        assert isinstance(handle.error, RuntimeError)
        assert any("Error uploading data" in r.getMessage() for r in caplog.records)


class TestPreconditionFailures:
    """Failures before streaming starts propagate and no handle is returned."""

    def test_document_creation_failure(self):
        class NoCreate(FakeGridService):
            def create_document(self, title):
                raise SheetsAPIError("Failed to create spreadsheet 'Report': 403")

        with pytest.raises(SheetsAPIError):
            SheetUploader(NoCreate()).upload(ListExporter([["a"]]), "Report")

    def test_worksheet_size_mismatch(self):
        service = FakeGridService()
        service.size_override = (10, 1)

        with pytest.raises(UploadError, match="expected 2x1"):
            SheetUploader(service).upload(ListExporter([["a"], ["b"]]), "Report")
        assert "batch_update" not in service.calls

    def test_incomplete_cell_index(self):
        service = FakeGridService()
        service.drop_cells = {(1, 1)}

        with pytest.raises(CellIndexError):
            SheetUploader(service).upload(ListExporter([["a"]]), "Report")
        assert "batch_update" not in service.calls

    def test_invalid_extents(self):
        class Negative(ListExporter):
            def count_columns_rows(self):
                return -1, 2

        with pytest.raises(UploadError, match="Invalid dataset extents"):
            SheetUploader(FakeGridService()).upload(Negative([]), "Report")


class TestUploadToSheets:

    @pytest.fixture
    def fake_service(self, monkeypatch):
        service = FakeGridService()
        monkeypatch.setattr(
            "sheetlift.executor.sheets_client.SheetsClient", lambda gc: service
        )
        return service

    def test_dataframe_upload(self, employees, fake_service):
        handle = upload_to_sheets(object(), employees, "Employees")
        assert handle.wait(5)

        assert (handle.worksheet.rows, handle.worksheet.cols) == (9, 4)
        assert fake_service.values[(1, 1)] == "name"
        assert fake_service.values[(2, 1)] == "Alice"
        assert fake_service.values[(9, 4)] == "110000"

    def test_filtered_upload(self, employees, fake_service):
        options = ExportOptions(
            columns=["name"], row_filter=lambda df: df["dept"] == "hr"
        )
        handle = upload_to_sheets(object(), employees, "HR", options)
        assert handle.wait(5)

        assert (handle.worksheet.rows, handle.worksheet.cols) == (3, 1)
        assert fake_service.values == {(1, 1): "name", (2, 1): "Eve", (3, 1): "Grace"}

    def test_missing_client(self, employees):
        with pytest.raises(NotAuthorizedError):
            upload_to_sheets(None, employees, "Employees")

    def test_response_ok(self, employees, fake_service):
        response = upload_response(object(), employees, "Employees")
        assert response == {
            "status": "ok",
            "url": "https://docs.google.com/spreadsheets/d/doc1",
        }

    def test_response_not_authorized(self, employees):
        assert upload_response(None, employees, "Employees") == {
            "status": "error", "message": "Not authorized",
        }

    def test_response_checks_client_before_format(self, employees):
        response = upload_response(None, employees, "Employees", format="csv")
        assert response == {"status": "error", "message": "Not authorized"}

    def test_response_unknown_format(self, employees, fake_service):
        response = upload_response(object(), employees, "Employees", format="csv")
        assert response == {"status": "error", "message": "No such format"}
        assert fake_service.calls == []

    def test_response_reports_setup_failure(self, employees, monkeypatch):
        class NoCreate(FakeGridService):
            def create_document(self, title):
                raise SheetsAPIError("Failed to create spreadsheet 'Employees': 403")

        monkeypatch.setattr(
            "sheetlift.executor.sheets_client.SheetsClient", lambda gc: NoCreate()
        )
        response = upload_response(object(), employees, "Employees")

        assert response["status"] == "error"
        assert "Failed to create spreadsheet" in response["message"]


@pytest.mark.slow
def test_live_upload(employees):
    """Upload to a real Google Sheet (needs gspread service account credentials)."""
    import gspread

    gc = gspread.service_account()
    handle = sheetlift.upload_to_sheets(gc, employees, "sheetlift live test")
    assert handle.wait(120)
    assert handle.state == UploadState.COMPLETED
    assert handle.sink.failed_batches == 0
    gc.del_spreadsheet(handle.document.id)
