"""Stencil-guided table OCR."""

__version__ = "1.0.0"
__author__ = "Stencil OCR Team"

from .exceptions import (
    StencilOCRError,
    ConfigurationError,
    InvalidStencil,
    OcrError,
    IncompleteResults,
    ImageLoadError,
    ExtractionCancelled,
)
from .stencil import Stencil, StencilEditor, Rectangle
from .table import CellResult, Table
from .assembler import assemble
from .pipeline import ExtractionPipeline, ExtractionJob, run

__all__ = [
    "Stencil",
    "StencilEditor",
    "Rectangle",
    "CellResult",
    "Table",
    "assemble",
    "ExtractionPipeline",
    "ExtractionJob",
    "run",
    "StencilOCRError",
    "ConfigurationError",
    "InvalidStencil",
    "OcrError",
    "IncompleteResults",
    "ImageLoadError",
    "ExtractionCancelled",
]
