"""Upload the README example DataFrame to a new Google Sheet."""

import logging
import sys

import gspread
import pandas as pd

import sheetlift
from sheetlift import ExportOptions, UploadConfig


def _get_gspread_client():
    try:
        return gspread.service_account()
    except Exception:
        pass
    try:
        return gspread.oauth()
    except Exception as exc:
        print(f"Error: could not authenticate with Google Sheets: {exc}")
        print("See README for credential setup instructions.")
        sys.exit(1)


logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

employees = pd.DataFrame(
    {
        "name": ["Alice", "Bob", "Charlie", "Diana", "Eve"],
        "age": [30, 25, 35, 28, 32],
        "dept": ["eng", "eng", "sales", "eng", "sales"],
        "salary": [95000, 85000, 72000, 90000, 78000],
        "profile": [f"https://example.com/people/{n}" for n in range(5)],
    }
)

options = ExportOptions(
    columns=["name", "dept", "salary"],
    row_filter=lambda df: df["age"] > 28,
    link_columns={"name": "profile"},
)
handle = sheetlift.upload_to_sheets(
    _get_gspread_client(), employees, "Employee Analysis", options,
    UploadConfig(flush_rows=2),
)
print(handle.url)
handle.wait()
print(f"Upload {handle.state.value}")
