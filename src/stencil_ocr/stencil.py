"""Stencil grid model: row/column boundaries and the cell rectangles they define."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from .exceptions import InvalidStencil

CellIndex = Tuple[int, int]


class Rectangle(NamedTuple):
    """Cell rectangle in image coordinates, ordered like the stencil bounds."""

    top: float
    bottom: float
    left: float
    right: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def clip(self, width: float, height: float) -> "Rectangle":
        """Clamp the rectangle to ``[0, width] x [0, height]``."""
        return Rectangle(
            top=min(max(self.top, 0), height),
            bottom=min(max(self.bottom, 0), height),
            left=min(max(self.left, 0), width),
            right=min(max(self.right, 0), width),
        )


def _check_increasing(bounds: Sequence[float], axis: str) -> None:
    for previous, current in zip(bounds, bounds[1:]):
        if not current > previous:
            raise InvalidStencil(
                f"{axis} must be strictly increasing", axis=axis, bounds=bounds
            )


@dataclass(frozen=True)
class Stencil:
    """Immutable snapshot of a table grid.

    ``row_bounds`` holds N+1 positions along the vertical axis (top to
    bottom) and ``col_bounds`` M+1 positions along the horizontal axis (left
    to right). A sequence with fewer than two positions describes an empty
    axis, which yields an empty table rather than an error.
    """

    row_bounds: Tuple[float, ...]
    col_bounds: Tuple[float, ...]

    def __post_init__(self) -> None:
        # Copy into tuples so callers cannot mutate the snapshot afterwards
        object.__setattr__(self, "row_bounds", tuple(self.row_bounds))
        object.__setattr__(self, "col_bounds", tuple(self.col_bounds))
        _check_increasing(self.row_bounds, "row_bounds")
        _check_increasing(self.col_bounds, "col_bounds")

    @property
    def n_rows(self) -> int:
        return max(len(self.row_bounds) - 1, 0)

    @property
    def n_cols(self) -> int:
        return max(len(self.col_bounds) - 1, 0)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.n_rows, self.n_cols

    @property
    def is_empty(self) -> bool:
        return self.n_rows == 0 or self.n_cols == 0

    def cell_rectangle(self, row_index: int, col_index: int) -> Rectangle:
        """Rectangle of a single cell."""
        if not (0 <= row_index < self.n_rows and 0 <= col_index < self.n_cols):
            raise IndexError(f"Cell ({row_index}, {col_index}) outside {self.shape} stencil")
        return Rectangle(
            self.row_bounds[row_index],
            self.row_bounds[row_index + 1],
            self.col_bounds[col_index],
            self.col_bounds[col_index + 1],
        )

    def cell_rectangles(self) -> List[Tuple[CellIndex, Rectangle]]:
        """Return every cell rectangle in row-major order.

        Raises:
            InvalidStencil: If either axis has fewer than two bounds
        """
        for axis, bounds in (("row_bounds", self.row_bounds), ("col_bounds", self.col_bounds)):
            if len(bounds) < 2:
                raise InvalidStencil(
                    f"{axis} needs at least two positions to define a cell",
                    axis=axis,
                    bounds=bounds,
                )
        return [
            ((i, j), self.cell_rectangle(i, j))
            for i in range(self.n_rows)
            for j in range(self.n_cols)
        ]

    def out_of_bounds(self, width: float, height: float) -> Dict[str, List[float]]:
        """List bounds lying outside an image of the given size."""
        outside = {
            "row_bounds": [y for y in self.row_bounds if y < 0 or y > height],
            "col_bounds": [x for x in self.col_bounds if x < 0 or x > width],
        }
        return {axis: values for axis, values in outside.items() if values}

    def to_dict(self) -> Dict[str, Any]:
        return {"row_bounds": list(self.row_bounds), "col_bounds": list(self.col_bounds)}

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> "Stencil":
        """Build a stencil from a mapping as stored in stencil files.

        Recognized keys are ``row_bounds``, ``col_bounds`` and the optional
        ``normalized`` and ``y_up`` flags. Normalized bounds need the image
        size to be converted into pixels.
        """
        try:
            rows = data["row_bounds"]
            cols = data["col_bounds"]
        except (KeyError, TypeError) as e:
            raise InvalidStencil(f"Stencil data is missing {e}") from e

        if data.get("normalized", False):
            if width is None or height is None:
                raise InvalidStencil("Normalized stencil requires the image size")
            return cls.from_normalized(rows, cols, width, height, y_up=data.get("y_up", False))
        return cls(tuple(rows), tuple(cols))

    @classmethod
    def from_normalized(
        cls,
        row_fractions: Sequence[float],
        col_fractions: Sequence[float],
        width: float,
        height: float,
        y_up: bool = False,
    ) -> "Stencil":
        """Convert fractional [0, 1] separator positions into a pixel stencil.

        With ``y_up`` the vertical fractions are measured from the bottom of
        the image, so they are flipped and reversed to keep rows top to bottom.
        """
        if y_up:
            rows = [height * (1.0 - f) for f in reversed(list(row_fractions))]
        else:
            rows = [height * f for f in row_fractions]
        cols = [width * f for f in col_fractions]
        return cls(tuple(rows), tuple(cols))


DEFAULT_ROW_FRACTIONS = (0.1, 0.2)
DEFAULT_COL_FRACTIONS = (0.1, 0.2)


@dataclass
class StencilEditor:
    """Mutable separator model driven by an interactive grid editor.

    The editor may hold separators in any order and may be changed at any
    time; the pipeline only ever sees the immutable result of ``snapshot``.
    """

    width: float = 1.0
    height: float = 1.0
    row_bounds: List[float] = field(default_factory=list)
    col_bounds: List[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.row_bounds and not self.col_bounds:
            self.reset()

    def reset(self) -> None:
        """Restore the default two-by-two separator grid."""
        self.row_bounds = [self.height * f for f in DEFAULT_ROW_FRACTIONS]
        self.col_bounds = [self.width * f for f in DEFAULT_COL_FRACTIONS]

    def add_row_bound(self, y: float) -> None:
        self.row_bounds.append(y)

    def add_col_bound(self, x: float) -> None:
        self.col_bounds.append(x)

    def remove_row_bound(self, index: int = -1) -> bool:
        """Remove a horizontal separator, keeping at least two.

        By default the bottom-most separator goes.
        """
        if len(self.row_bounds) <= 2:
            return False
        self.row_bounds.sort()
        del self.row_bounds[index]
        return True

    def remove_col_bound(self, index: int = -1) -> bool:
        """Remove a vertical separator, keeping at least two."""
        if len(self.col_bounds) <= 2:
            return False
        self.col_bounds.sort()
        del self.col_bounds[index]
        return True

    def translate(self, dx: float = 0.0, dy: float = 0.0) -> None:
        """Shift the whole grid."""
        self.row_bounds = [y + dy for y in self.row_bounds]
        self.col_bounds = [x + dx for x in self.col_bounds]

    def snapshot(self) -> Stencil:
        """Sorted, deduplicated immutable copy of the current grid."""
        return Stencil(tuple(sorted(set(self.row_bounds))), tuple(sorted(set(self.col_bounds))))
