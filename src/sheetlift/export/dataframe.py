"""
Row exporter for pandas DataFrames.

DataFrameExporter applies an ExportOptions selection (row filter, column
selection, link columns) to a DataFrame and pushes the result row by row into a
TabularSerializer. Sizing and streaming see the same selection, so a destination
shaped from ``count_columns_rows`` fits every exported row.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from sheetlift.export.base import TabularSerializer
from sheetlift.spreadsheet.model import CellData


RowFilter = Union[Callable[[pd.DataFrame], Any], pd.Series, List[bool]]


@dataclass
class ExportOptions:
    """Selection and formatting of an export.

    Attributes:
        columns: Columns to export, in order (default: all non-link columns)
        row_filter: Boolean mask, or a callable returning one for the DataFrame
        include_header: Emit the column names as the first row
        link_columns: Maps a value column to the column holding its link target;
            link columns are not exported themselves
        strip_float_zero: Render whole floats without the trailing ".0"
    """
    columns: Optional[List[str]] = None
    row_filter: Optional[RowFilter] = None
    include_header: bool = True
    link_columns: Dict[str, str] = field(default_factory=dict)
    strip_float_zero: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the options mapping handed to ``start_file``."""
        return {
            "columns": self.columns,
            "includeHeader": self.include_header,
            "linkColumns": dict(self.link_columns),
        }


class DataFrameExporter:
    """Exports the selected rows of a DataFrame.

    Attributes:
        df: The source DataFrame
        options: Selection and formatting options
    """

    def __init__(self, df: pd.DataFrame, options: Optional[ExportOptions] = None) -> None:
        self.df = df
        self.options = options or ExportOptions()
        self._validate()

    def _validate(self) -> None:
        known = set(self.df.columns)
        for name in self.options.columns or []:
            if name not in known:
                raise KeyError(f"Column '{name}' not found in DataFrame")
        for value_col, link_col in self.options.link_columns.items():
            if value_col not in known or link_col not in known:
                raise KeyError(
                    f"Link mapping '{value_col}' -> '{link_col}' references a missing column"
                )
        # Columns addressed by name must resolve to exactly one position
        named = list(self.options.columns or []) + list(self.options.link_columns.values())
        for name in named:
            if (self.df.columns == name).sum() > 1:
                raise ValueError(f"Column label '{name}' is not unique in DataFrame")

    def _selected_positions(self) -> List[int]:
        labels = list(self.df.columns)
        if self.options.columns is not None:
            return [labels.index(name) for name in self.options.columns]
        link_targets = set(self.options.link_columns.values())
        return [i for i, c in enumerate(labels) if c not in link_targets]

    def _selected_rows(self) -> pd.DataFrame:
        row_filter = self.options.row_filter
        if row_filter is None:
            return self.df
        mask = row_filter(self.df) if callable(row_filter) else row_filter
        if isinstance(mask, pd.Series):
            # Labels missing from the mask are filtered out, never kept
            mask = mask.reindex(self.df.index, fill_value=False).fillna(False)
            return self.df[mask.astype(bool).to_numpy()]
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (len(self.df),):
            raise ValueError(
                f"Row filter has {mask.size} entries, DataFrame has {len(self.df)} rows"
            )
        return self.df[mask]

    def count_columns_rows(self) -> Tuple[int, int]:
        rows = len(self._selected_rows())
        if self.options.include_header:
            rows += 1
        return rows, len(self._selected_positions())

    def export_rows(self, serializer: TabularSerializer) -> None:
        positions = self._selected_positions()
        labels = list(self.df.columns)
        link_positions = {
            i: labels.index(self.options.link_columns[labels[i]])
            for i in positions
            if labels[i] in self.options.link_columns
        }
        frame = self._selected_rows()

        serializer.start_file(self.options.to_dict())
        if self.options.include_header:
            serializer.add_row([CellData(str(labels[i])) for i in positions], True)

        # Positional access keeps duplicate labels apart; itertuples keeps column dtypes
        for values in frame.itertuples(index=False, name=None):
            cells = []
            for i in positions:
                text = self._render(values[i])
                link = self._render(values[link_positions[i]]) if i in link_positions else None
                cells.append(CellData(text, link) if text is not None else None)
            serializer.add_row(cells, False)
        serializer.end_file()

    def _render(self, value: Any) -> Optional[str]:
        if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
            return None
        if self.options.strip_float_zero and isinstance(value, float) and value.is_integer():
            return str(int(value))
        text = str(value)
        return text if text != "" else None
