"""Table assembly: place per-cell results into a row-major matrix."""

from collections import Counter
from typing import Iterable

from .exceptions import IncompleteResults
from .table import CellResult, Table


def assemble(
    n_rows: int,
    n_cols: int,
    results: Iterable[CellResult],
    failure_token: str = "",
) -> Table:
    """Assemble an ``n_rows`` x ``n_cols`` table from unordered cell results.
    
    Args:
        n_rows: Number of stencil rows
        n_cols: Number of stencil columns
        results: Exactly one result per cell, in any order
        failure_token: String rendered for failed cells
        
    Returns:
        Assembled table
        
    Raises:
        IncompleteResults: If a cell is missing, duplicated or out of range
    """
    results = list(results)
    if n_rows == 0 or n_cols == 0:
        if results:
            raise IncompleteResults(
                "Results supplied for an empty table",
                unexpected=[r.index for r in results],
            )
        return Table.empty(failure_token)
    
    counts = Counter(r.index for r in results)
    expected = {(i, j) for i in range(n_rows) for j in range(n_cols)}
    missing = sorted(expected - counts.keys())
    unexpected = sorted(counts.keys() - expected)
    duplicated = sorted(index for index, count in counts.items() if count > 1)
    
    if missing or unexpected or duplicated:
        raise IncompleteResults(
            f"Expected exactly one result per cell of a {n_rows}x{n_cols} table",
            missing=missing,
            duplicated=duplicated,
            unexpected=unexpected,
        )
    
    grid = [[None] * n_cols for _ in range(n_rows)]
    for result in results:
        grid[result.row_index][result.col_index] = result
    return Table(tuple(tuple(row) for row in grid), failure_token)
