"""Table output model: per-cell results and the assembled matrix."""

import csv
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .stencil import CellIndex


@dataclass(frozen=True)
class CellResult:
    """Outcome of one cell: recognized text or a failure description."""

    row_index: int
    col_index: int
    text: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 1

    @property
    def index(self) -> CellIndex:
        return self.row_index, self.col_index

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, row_index: int, col_index: int, text: str, attempts: int = 1) -> "CellResult":
        return cls(row_index, col_index, text=text, attempts=attempts)

    @classmethod
    def failure(cls, row_index: int, col_index: int, error: str, attempts: int = 1) -> "CellResult":
        return cls(row_index, col_index, error=error, attempts=attempts)


class Table:
    """Row-major matrix of recognized strings from one extraction run.
    
    Failed cells render as ``failure_token``; the underlying results stay
    available through ``result`` and ``failures``. A Table never changes
    after it has been assembled.
    """
    
    def __init__(
        self,
        results: Tuple[Tuple[CellResult, ...], ...] = (),
        failure_token: str = "",
    ):
        self._results = tuple(tuple(row) for row in results)
        self.failure_token = failure_token
        self._rows = tuple(
            tuple(r.text if r.ok else failure_token for r in row)
            for row in self._results
        )
    
    @classmethod
    def empty(cls, failure_token: str = "") -> "Table":
        return cls((), failure_token)
    
    @property
    def rows(self) -> Tuple[Tuple[str, ...], ...]:
        return self._rows
    
    @property
    def n_rows(self) -> int:
        return len(self._rows)
    
    @property
    def n_cols(self) -> int:
        return len(self._rows[0]) if self._rows else 0
    
    @property
    def shape(self) -> Tuple[int, int]:
        return self.n_rows, self.n_cols
    
    @property
    def is_empty(self) -> bool:
        return self.n_rows == 0 or self.n_cols == 0
    
    def cell(self, row_index: int, col_index: int) -> str:
        return self._rows[row_index][col_index]
    
    def result(self, row_index: int, col_index: int) -> CellResult:
        return self._results[row_index][col_index]
    
    @property
    def failures(self) -> List[CellResult]:
        """Failed cells in row-major order."""
        return [r for row in self._results for r in row if not r.ok]
    
    @property
    def has_failures(self) -> bool:
        return bool(self.failures)
    
    def to_list(self) -> List[List[str]]:
        return [list(row) for row in self._rows]
    
    def to_csv(self, delimiter: str = ",", quote_all: bool = True) -> str:
        """Serialize the table as CSV text."""
        buffer = io.StringIO()
        writer = csv.writer(
            buffer,
            delimiter=delimiter,
            quoting=csv.QUOTE_ALL if quote_all else csv.QUOTE_MINIMAL,
            lineterminator="\n",
        )
        writer.writerows(self._rows)
        return buffer.getvalue()
    
    def write_csv(self, output_path: Union[str, Path], **kwargs) -> Path:
        """Write the table as CSV, creating parent directories as needed."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_csv(**kwargs), encoding="utf-8")
        return path
    
    def summary(self) -> Dict[str, int]:
        failed = len(self.failures)
        total = self.n_rows * self.n_cols
        return {"rows": self.n_rows, "cols": self.n_cols, "cells": total,
                "succeeded": total - failed, "failed": failed}
    
    def __iter__(self):
        return iter(self._rows)
    
    def __len__(self) -> int:
        return self.n_rows
    
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return self._results == other._results and self.failure_token == other.failure_token
    
    def __repr__(self) -> str:
        return f"Table(shape={self.shape}, failed={len(self.failures)})"
