"""
Upload configuration.
"""

from dataclasses import dataclass


DEFAULT_FLUSH_ROWS = 20
DEFAULT_WORKSHEET_TITLE = "Uploaded Data"


@dataclass
class UploadConfig:
    """Settings for one upload.

    Attributes:
        flush_rows: Number of exported rows collected before a batch is submitted
        worksheet_title: Title of the worksheet the dataset is written into
        max_retries: Retry attempts for a failed batch submission (0 disables retry)
        base_delay: Base delay for exponential backoff between retries, in seconds
        report_all_failures: Log every failed cell of a batch instead of only the first
    """
    flush_rows: int = DEFAULT_FLUSH_ROWS
    worksheet_title: str = DEFAULT_WORKSHEET_TITLE
    max_retries: int = 0
    base_delay: float = 1.0
    report_all_failures: bool = False

    def __post_init__(self) -> None:
        if self.flush_rows <= 0:
            raise ValueError(f"flush_rows must be positive, got {self.flush_rows}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {self.max_retries}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be non-negative, got {self.base_delay}")
        if not self.worksheet_title:
            raise ValueError("worksheet_title must be a non-empty string")
