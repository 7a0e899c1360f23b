"""Extraction pipeline: stencil cells fanned out to an OCR backend, fanned back into a table."""

import threading
import time
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from .assembler import assemble
from .cells import extract_cell
from .cleaning import CleaningOptions, clean_text
from .config import Config, get_default_config
from .exceptions import ExtractionCancelled, OcrError
from .image_io import rotate_image
from .stencil import CellIndex, Stencil
from .table import CellResult, Table
from .utils.logging_utils import get_logger, log_processing_stats

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]

EMPTY_CELL_ERROR = "empty cell region"
CANCELLED_ERROR = "cancelled"


def extract_cells(
    image: np.ndarray,
    stencil: Stencil,
    padding: int = 0
) -> List[Tuple[CellIndex, np.ndarray]]:
    """Crop every stencil cell out of the image, in row-major order."""
    return [
        (index, extract_cell(image, rectangle, padding))
        for index, rectangle in stencil.cell_rectangles()
    ]


def recognize_cell(
    backend,
    index: CellIndex,
    cell_image: np.ndarray,
    cleaning: CleaningOptions = CleaningOptions(),
    retries: int = 0,
    retry_backoff: float = 0.0,
    cancel_event: Optional[threading.Event] = None,
) -> CellResult:
    """Recognize one cell in a worker thread.

    Never raises: every outcome, including backend faults, comes back as a
    ``CellResult`` so one bad cell cannot take the rest of the table down.

    Args:
        backend: Object with a ``recognize(cell_image) -> str`` method
        index: ``(row_index, col_index)`` of the cell
        cell_image: Cropped cell image
        cleaning: Text cleaning applied to recognized text
        retries: Extra attempts after an ``OcrError``
        retry_backoff: Base delay between attempts, doubled each time
        cancel_event: Set by the caller to stop pending work

    Returns:
        Result for the cell
    """
    row, col = index

    if cell_image.size == 0:
        return CellResult.failure(row, col, EMPTY_CELL_ERROR, attempts=0)

    attempts = 0
    last_error = None
    for attempt in range(retries + 1):
        if cancel_event is not None and cancel_event.is_set():
            return CellResult.failure(row, col, CANCELLED_ERROR, attempts=attempts)

        attempts += 1
        try:
            text = backend.recognize(cell_image)
        except OcrError as e:
            last_error = e.reason
            logger.debug(f"Cell ({row}, {col}) attempt {attempts} failed: {e}")
        except Exception as e:
            logger.warning(f"Cell ({row}, {col}) backend fault: {type(e).__name__}: {e}")
            return CellResult.failure(row, col, f"{type(e).__name__}: {e}", attempts=attempts)
        else:
            if text is None:
                text = ""
            if not isinstance(text, str):
                logger.warning(f"Cell ({row}, {col}) backend returned {type(text).__name__}, expected str")
                return CellResult.failure(
                    row, col, f"backend returned {type(text).__name__}", attempts=attempts
                )
            return CellResult.success(row, col, clean_text(text, cleaning), attempts=attempts)

        if attempt < retries:
            delay = retry_backoff * (2 ** attempt)
            if cancel_event is not None:
                cancel_event.wait(delay)
            else:
                time.sleep(delay)

    logger.warning(f"Cell ({row}, {col}) failed after {attempts} attempt(s): {last_error}")
    return CellResult.failure(row, col, last_error, attempts=attempts)


class ExtractionJob:
    """Handle for an extraction running off the calling thread."""

    def __init__(self, cancel_event: threading.Event, total: int):
        self._future: Optional[Future] = None
        self._cancel_event = cancel_event
        self.total = total
        self.completed = 0

    def _on_progress(self, completed: int, total: int) -> None:
        self.completed = completed

    @property
    def progress(self) -> Tuple[int, int]:
        """``(resolved_cells, total_cells)`` so far."""
        return self.completed, self.total

    def cancel(self) -> None:
        """Stop dispatching further cells; cells already in a backend call finish.

        Has no effect once the job is done.
        """
        if self._future.done():
            return
        self._cancel_event.set()
        self._future.cancel()

    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> Table:
        """Wait for the table.

        Raises:
            ExtractionCancelled: If the job was cancelled before every cell resolved
            concurrent.futures.TimeoutError: If the table is not ready in time
        """
        try:
            table = self._future.result(timeout)
        except CancelledError:
            raise ExtractionCancelled("Extraction was cancelled before it started")
        if self._cancel_event.is_set() and any(
            failure.error == CANCELLED_ERROR for failure in table.failures
        ):
            raise ExtractionCancelled(
                "Extraction was cancelled",
                {"resolved": self.completed, "total": self.total},
            )
        return table


class ExtractionPipeline:
    """Turn an image and a stencil into a table using a pluggable OCR backend."""

    def __init__(
        self,
        config: Optional[Config] = None,
        max_workers: Optional[int] = None,
        show_progress: Optional[bool] = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Configuration (defaults when None)
            max_workers: Override for ``extraction.max_workers``
            show_progress: Override for ``extraction.show_progress``
        """
        self.config = config or get_default_config()
        extraction = self.config.extraction

        self.max_workers = max_workers or extraction.max_workers
        self.show_progress = extraction.show_progress if show_progress is None else show_progress
        self.cell_padding = extraction.cell_padding
        self.failure_token = extraction.failure_token
        self.retries = extraction.retries
        self.retry_backoff = extraction.retry_backoff
        self.rotation = extraction.rotation
        self.cleaning = self.config.cleaning.to_options()

    def run(
        self,
        image: np.ndarray,
        stencil: Stencil,
        backend,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Table:
        """Extract a table.

        Blocks until every cell is resolved; the cells themselves are
        recognized in parallel. Per-cell failures end up in the table as
        failure markers.

        Args:
            image: Source image, only read
            stencil: Grid snapshot, only read
            backend: Object with a ``recognize(cell_image) -> str`` method
            progress_callback: Called with ``(resolved, total)`` after each cell
            cancel_event: When set, cells not yet dispatched resolve as cancelled

        Returns:
            Table with the stencil's shape

        Raises:
            InvalidStencil: If the stencil is malformed
            IncompleteResults: If a dispatched cell produced no result
        """
        if stencil.is_empty:
            logger.info("Stencil defines no cells, returning an empty table")
            return Table.empty(self.failure_token)

        if self.rotation:
            image = rotate_image(image, self.rotation)

        height, width = image.shape[:2]
        outside = stencil.out_of_bounds(width, height)
        if outside:
            logger.warning(f"Stencil bounds outside the {width}x{height} image are clipped: {outside}")

        cells = extract_cells(image, stencil, self.cell_padding)
        n_rows, n_cols = stencil.shape
        total = len(cells)

        backend_name = getattr(backend, "name", type(backend).__name__)
        results: List[CellResult] = []
        with log_processing_stats(
            f"extraction of {n_rows}x{n_cols} cells with {backend_name}", logger
        ) as stats:
            with ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="stencil-ocr"
            ) as executor:
                futures = [
                    executor.submit(
                        recognize_cell,
                        backend,
                        index,
                        cell_image,
                        self.cleaning,
                        self.retries,
                        self.retry_backoff,
                        cancel_event,
                    )
                    for index, cell_image in cells
                ]

                with tqdm(
                    total=total, desc="Recognizing cells", unit="cell", disable=not self.show_progress
                ) as pbar:
                    for future in as_completed(futures):
                        result = future.result()
                        results.append(result)
                        if result.ok:
                            stats["cells_processed"] += 1
                        else:
                            stats["cells_failed"] += 1
                        pbar.update(1)
                        if progress_callback is not None:
                            progress_callback(len(results), total)

        return assemble(n_rows, n_cols, results, self.failure_token)

    def submit(self, image: np.ndarray, stencil: Stencil, backend) -> ExtractionJob:
        """Start ``run`` on a background thread and return a job handle.

        The image and stencil passed here are what the job extracts; later
        edits made by the caller do not reach it.
        """
        cancel_event = threading.Event()
        job = ExtractionJob(cancel_event, stencil.n_rows * stencil.n_cols)
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="stencil-ocr-job")
        job._future = executor.submit(
            self.run, image.copy(), stencil, backend, job._on_progress, cancel_event
        )
        executor.shutdown(wait=False)
        return job


def run(
    image: np.ndarray,
    stencil: Stencil,
    backend,
    config: Optional[Config] = None,
) -> Table:
    """Extract a table from ``image`` using ``stencil`` and ``backend``."""
    return ExtractionPipeline(config).run(image, stencil, backend)
