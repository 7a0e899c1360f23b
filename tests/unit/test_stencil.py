"""Tests for the stencil grid model and the stencil editor."""

import pytest

from stencil_ocr.exceptions import InvalidStencil
from stencil_ocr.stencil import Rectangle, Stencil, StencilEditor


class TestStencil:
    """Cell rectangle derivation and validation."""
    
    def test_cell_rectangles_row_major(self):
        stencil = Stencil((0, 10, 20), (0, 5, 15, 30))
        cells = stencil.cell_rectangles()
        
        assert len(cells) == 6
        assert [index for index, _ in cells] == [
            (0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)
        ]
        assert dict(cells)[(0, 1)] == Rectangle(0, 10, 5, 15)
        assert dict(cells)[(1, 2)] == Rectangle(10, 20, 15, 30)
    
    def test_shape(self):
        stencil = Stencil((0, 10, 20), (0, 5, 15, 30))
        assert stencil.shape == (2, 3)
        assert not stencil.is_empty
    
    @pytest.mark.parametrize("rows", [(5, 5), (0, 10, 10), (20, 10)])
    def test_non_increasing_bounds_rejected(self, rows):
        with pytest.raises(InvalidStencil) as exc_info:
            Stencil(rows, (0, 10))
        assert exc_info.value.details["axis"] == "row_bounds"
    
    def test_non_increasing_columns_rejected(self):
        with pytest.raises(InvalidStencil, match="col_bounds"):
            Stencil((0, 10), (0, 30, 20))
    
    def test_single_bound_is_empty_axis(self):
        stencil = Stencil((0,), (0, 5, 15))
        assert stencil.is_empty
        assert stencil.shape == (0, 2)
    
    def test_cell_rectangles_requires_two_bounds(self):
        stencil = Stencil((0,), (0, 5, 15))
        with pytest.raises(InvalidStencil, match="at least two"):
            stencil.cell_rectangles()
    
    def test_snapshot_is_immutable(self):
        rows = [0, 10, 20]
        stencil = Stencil(rows, [0, 5])
        rows.append(30)
        
        assert stencil.row_bounds == (0, 10, 20)
        with pytest.raises(AttributeError):
            stencil.row_bounds = (0, 1)
    
    def test_out_of_bounds(self):
        stencil = Stencil((-2, 10, 55), (0, 40))
        assert stencil.out_of_bounds(width=40, height=50) == {"row_bounds": [-2, 55]}
    
    def test_cell_rectangle_index_error(self):
        stencil = Stencil((0, 10), (0, 10))
        with pytest.raises(IndexError):
            stencil.cell_rectangle(1, 0)


class TestStencilSerialization:
    """Stencil files and normalized coordinates."""
    
    def test_round_trip_dict(self):
        stencil = Stencil((0, 10, 20), (0, 5))
        assert Stencil.from_dict(stencil.to_dict()) == stencil
    
    def test_from_dict_missing_key(self):
        with pytest.raises(InvalidStencil, match="missing"):
            Stencil.from_dict({"row_bounds": [0, 10]})
    
    def test_from_normalized(self):
        stencil = Stencil.from_normalized([0.0, 0.5, 1.0], [0.25, 0.75], width=200, height=100)
        assert stencil.row_bounds == (0.0, 50.0, 100.0)
        assert stencil.col_bounds == (50.0, 150.0)
    
    def test_from_normalized_y_up_flips_rows(self):
        stencil = Stencil.from_normalized([0.8, 0.9, 1.0], [0.0, 1.0], width=10, height=100, y_up=True)
        assert stencil.row_bounds == pytest.approx((0.0, 10.0, 20.0))
    
    def test_normalized_dict_requires_size(self):
        data = {"row_bounds": [0, 1], "col_bounds": [0, 1], "normalized": True}
        with pytest.raises(InvalidStencil, match="image size"):
            Stencil.from_dict(data)
        assert Stencil.from_dict(data, width=40, height=20).shape == (1, 1)


class TestRectangle:
    
    def test_clip_partially_outside(self):
        assert Rectangle(-5, 15, 90, 130).clip(width=100, height=10) == Rectangle(0, 10, 90, 100)
    
    def test_degenerate(self):
        assert Rectangle(5, 5, 0, 10).is_degenerate
        assert Rectangle(0, 10, 20, 10).is_degenerate
        assert not Rectangle(0, 1, 0, 1).is_degenerate


class TestStencilEditor:
    """Editing operations and snapshots."""
    
    def test_default_grid(self):
        editor = StencilEditor(width=200, height=100)
        stencil = editor.snapshot()
        assert stencil.row_bounds == pytest.approx((10.0, 20.0))
        assert stencil.col_bounds == pytest.approx((20.0, 40.0))
    
    def test_snapshot_sorts_and_deduplicates(self):
        editor = StencilEditor(row_bounds=[30, 10, 20, 10], col_bounds=[50, 0])
        stencil = editor.snapshot()
        assert stencil.row_bounds == (10, 20, 30)
        assert stencil.col_bounds == (0, 50)
    
    def test_snapshot_unaffected_by_later_edits(self):
        editor = StencilEditor(row_bounds=[0, 10], col_bounds=[0, 10])
        stencil = editor.snapshot()
        editor.add_row_bound(20)
        editor.translate(dx=5)
        assert stencil == Stencil((0, 10), (0, 10))
        assert editor.snapshot() == Stencil((0, 10, 20), (5, 15))
    
    def test_remove_keeps_two_bounds(self):
        editor = StencilEditor(row_bounds=[0, 10, 20], col_bounds=[0, 10, 20])
        assert editor.remove_row_bound() is True
        assert editor.row_bounds == [0, 10]
        assert editor.remove_row_bound() is False
        
        assert editor.remove_col_bound() is True
        assert editor.col_bounds == [0, 10]
        assert editor.remove_col_bound() is False
    
    def test_remove_row_defaults_to_bottom_separator(self):
        editor = StencilEditor(row_bounds=[30, 5, 18], col_bounds=[0, 10])
        assert editor.remove_row_bound() is True
        assert editor.row_bounds == [5, 18]
        assert editor.remove_row_bound(0) is False

        editor.add_row_bound(40)
        assert editor.remove_row_bound(0) is True
        assert editor.row_bounds == [18, 40]

    def test_reset(self):
        editor = StencilEditor(width=10, height=10, row_bounds=[1, 2, 3], col_bounds=[1, 2, 3])
        editor.reset()
        assert len(editor.row_bounds) == 2
        assert len(editor.col_bounds) == 2
