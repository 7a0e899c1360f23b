"""Tesseract backend using pytesseract."""

import logging
from typing import Optional

import cv2
import numpy as np
import pytesseract
from PIL import Image

from ..exceptions import OcrError
from .base import OcrBackend

logger = logging.getLogger(__name__)


class TesseractBackend(OcrBackend):
    """Recognize cell images with the Tesseract engine.
    
    pytesseract starts a separate ``tesseract`` process with its own
    temporary files for every call, so concurrent calls are independent.
    """
    
    name = "tesseract"
    
    def __init__(
        self,
        language: str = "eng",
        psm: Optional[int] = 7,
        oem: Optional[int] = None,
        timeout: float = 0,
        extra_config: str = "",
        tesseract_cmd: Optional[str] = None,
    ):
        """Initialize the backend.
        
        Args:
            language: Tesseract language code(s), e.g. ``eng`` or ``eng+deu``
            psm: Page segmentation mode; 7 treats the cell as a single text line
            oem: OCR engine mode, engine default when None
            timeout: Seconds before a call is aborted, 0 disables the limit
            extra_config: Additional raw tesseract options
            tesseract_cmd: Path to the tesseract binary if not on PATH
        """
        self.language = language
        self.psm = psm
        self.oem = oem
        self.timeout = timeout
        self.extra_config = extra_config
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
    
    @property
    def config_string(self) -> str:
        parts = []
        if self.psm is not None:
            parts.append(f"--psm {self.psm}")
        if self.oem is not None:
            parts.append(f"--oem {self.oem}")
        if self.extra_config:
            parts.append(self.extra_config)
        return " ".join(parts)
    
    def recognize(self, cell_image: np.ndarray) -> str:
        if cell_image.size == 0:
            raise OcrError("Empty cell image", backend=self.name)
        
        if cell_image.ndim == 3 and cell_image.shape[2] == 3:
            cell_image = cv2.cvtColor(cell_image, cv2.COLOR_BGR2RGB)
        pil_image = Image.fromarray(cell_image)
        
        try:
            return pytesseract.image_to_string(
                pil_image,
                lang=self.language,
                config=self.config_string,
                timeout=self.timeout,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise OcrError("tesseract binary not found on PATH", backend=self.name) from e
        except pytesseract.TesseractError as e:
            raise OcrError(f"Tesseract failed: {e.message}", backend=self.name,
                           status=e.status) from e
        except RuntimeError as e:
            # pytesseract signals an expired timeout with a RuntimeError
            raise OcrError(f"Tesseract call aborted: {e}", backend=self.name,
                           timeout=self.timeout) from e
