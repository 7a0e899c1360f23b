"""
Pytest configuration and shared fixtures for stencil OCR tests.

Provides synthetic table images whose cells encode their own position, a
matching stencil, and fake OCR backends, so no OCR engine is needed.
"""

import random
import shutil
import sys
import tempfile
import textwrap
import threading
import time
from pathlib import Path
from typing import Generator, List

import numpy as np
import pytest

from stencil_ocr.backends import OcrBackend
from stencil_ocr.config import Config, get_default_config
from stencil_ocr.exceptions import OcrError
from stencil_ocr.stencil import Stencil
from stencil_ocr.utils.logging_utils import setup_logging

CELL_HEIGHT = 20
CELL_WIDTH = 30
GRID_ROWS = 3
GRID_COLS = 4


def encode_cell(row: int, col: int) -> int:
    """Gray value painted into cell (row, col) of the coded image."""
    return 16 * row + col + 1


def decode_cell(cell_image: np.ndarray) -> tuple:
    """Recover (row, col) from a crop of the coded image."""
    if cell_image.ndim == 3:
        cell_image = cell_image[:, :, 0]
    value = int(cell_image[cell_image.shape[0] // 2, cell_image.shape[1] // 2]) - 1
    return divmod(value, 16)


def make_coded_image(rows: int = GRID_ROWS, cols: int = GRID_COLS) -> np.ndarray:
    """Grayscale image whose cells are filled with their encoded position."""
    image = np.zeros((rows * CELL_HEIGHT, cols * CELL_WIDTH), dtype=np.uint8)
    for i in range(rows):
        for j in range(cols):
            image[i * CELL_HEIGHT:(i + 1) * CELL_HEIGHT,
                  j * CELL_WIDTH:(j + 1) * CELL_WIDTH] = encode_cell(i, j)
    return image


class CoordinateBackend(OcrBackend):
    """Answers ``"<row>,<col>"`` for a crop of the coded image.
    
    Sleeps a random few milliseconds so cells complete out of order.
    """
    
    name = "coordinates"
    
    def __init__(self, jitter: float = 0.002):
        self.jitter = jitter
        self.calls = 0
        self._lock = threading.Lock()
    
    def recognize(self, cell_image: np.ndarray) -> str:
        with self._lock:
            self.calls += 1
        if self.jitter:
            time.sleep(random.uniform(0, self.jitter))
        row, col = decode_cell(cell_image)
        return f"{row},{col}"


class FailingCellBackend(CoordinateBackend):
    """Coordinate backend that raises ``OcrError`` for selected cells."""
    
    name = "failing"
    
    def __init__(self, failing: List[tuple], jitter: float = 0.0):
        super().__init__(jitter)
        self.failing = set(failing)
    
    def recognize(self, cell_image: np.ndarray) -> str:
        text = super().recognize(cell_image)
        if decode_cell(cell_image) in self.failing:
            raise OcrError("unreadable region", backend=self.name)
        return text


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def coded_image() -> np.ndarray:
    """3x4 coded table image."""
    return make_coded_image()


@pytest.fixture
def coded_stencil() -> Stencil:
    """Stencil matching ``coded_image`` exactly."""
    return Stencil(
        tuple(i * CELL_HEIGHT for i in range(GRID_ROWS + 1)),
        tuple(j * CELL_WIDTH for j in range(GRID_COLS + 1)),
    )


@pytest.fixture
def coordinate_backend() -> CoordinateBackend:
    return CoordinateBackend()


@pytest.fixture
def sample_config() -> Config:
    """Create a sample configuration for testing."""
    config = get_default_config()
    
    config.logging.level = "DEBUG"
    config.logging.use_rich = False  # Disable rich for cleaner test output
    config.extraction.retry_backoff = 0.0
    
    return config


@pytest.fixture
def echo_ocr_script(temp_dir: Path) -> Path:
    """Stand-in OCR program: writes ``<text_base>.txt`` with a fixed line."""
    script = temp_dir / "fake_ocr.py"
    script.write_text(textwrap.dedent("""
        import sys
        from pathlib import Path

        image_path, text_base = sys.argv[1], sys.argv[2]
        if not Path(image_path).exists():
            sys.exit(3)
        Path(text_base + ".txt").write_text("  'Total'\\n", encoding="utf-8")
    """), encoding="utf-8")
    return script


@pytest.fixture
def echo_ocr_template(echo_ocr_script: Path) -> str:
    return f'"{sys.executable}" "{echo_ocr_script}" %img_in% %txt_out%'


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Setup logging for tests."""
    setup_logging(
        level="WARNING",  # Only show warnings and errors in tests
        use_rich=False,   # Disable rich formatting for cleaner test output
        format_style="minimal"
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (deselect with '-m \"not unit\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location and name."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "slow" in item.name:
            item.add_marker(pytest.mark.slow)
