"""Backend driving any command-line OCR engine through a command template."""

import logging
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from ..exceptions import OcrError
from .base import OcrBackend

logger = logging.getLogger(__name__)

IMAGE_PLACEHOLDER = "%img_in%"
TEXT_PLACEHOLDER = "%txt_out%"

TESSERACT_COMMAND = "tesseract -l eng %img_in% %txt_out%"
CUNEIFORM_COMMAND = "cuneiform -l eng -f text -o %txt_out%.txt %img_in%"

COMMAND_PRESETS = {
    "tesseract": TESSERACT_COMMAND,
    "cuneiform": CUNEIFORM_COMMAND,
}


class CommandBackend(OcrBackend):
    """Run an external OCR program once per cell.
    
    The template names the input image with ``%img_in%`` and the output
    base name with ``%txt_out%``; the engine is expected to write its text to
    ``<txt_out>.txt``. Every call works in its own temporary directory so
    concurrent calls never share files.
    """
    
    name = "command"
    
    def __init__(
        self,
        template: str = TESSERACT_COMMAND,
        timeout: Optional[float] = 30.0,
        image_suffix: str = ".png",
        encoding: str = "utf-8",
    ):
        if template in COMMAND_PRESETS:
            template = COMMAND_PRESETS[template]
        if IMAGE_PLACEHOLDER not in template:
            raise ValueError(f"Command template must contain {IMAGE_PLACEHOLDER}: {template!r}")
        if TEXT_PLACEHOLDER not in template:
            raise ValueError(f"Command template must contain {TEXT_PLACEHOLDER}: {template!r}")
        self.template = template
        self.timeout = timeout
        self.image_suffix = image_suffix
        self.encoding = encoding
    
    def build_command(self, image_path: Path, text_base: Path) -> List[str]:
        """Fill the template for one call."""
        return [
            token.replace(IMAGE_PLACEHOLDER, str(image_path)).replace(TEXT_PLACEHOLDER, str(text_base))
            for token in shlex.split(self.template)
        ]
    
    def recognize(self, cell_image: np.ndarray) -> str:
        if cell_image.size == 0:
            raise OcrError("Empty cell image", backend=self.name)
        
        with tempfile.TemporaryDirectory(prefix="stencil_ocr_") as work_dir:
            image_path = Path(work_dir) / f"cell{self.image_suffix}"
            text_base = Path(work_dir) / "cell_out"
            
            if not cv2.imwrite(str(image_path), cell_image):
                raise OcrError("Could not write cell image", backend=self.name,
                               image_path=str(image_path))
            
            cmd = self.build_command(image_path, text_base)
            try:
                proc = subprocess.run(
                    cmd,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.PIPE,
                    timeout=self.timeout,
                    check=False,
                )
            except FileNotFoundError as e:
                raise OcrError(f"{cmd[0]} not found on PATH", backend=self.name) from e
            except subprocess.TimeoutExpired as e:
                raise OcrError("OCR command timed out", backend=self.name,
                               timeout=self.timeout) from e
            
            if proc.returncode != 0:
                stderr = proc.stderr.decode(self.encoding, errors="replace")[-500:]
                raise OcrError(
                    f"OCR command exited with status {proc.returncode}",
                    backend=self.name,
                    stderr=stderr.strip(),
                )
            
            text_path = text_base.with_name(text_base.name + ".txt")
            try:
                return text_path.read_text(encoding=self.encoding, errors="replace")
            except FileNotFoundError as e:
                raise OcrError("OCR command produced no output file", backend=self.name,
                               expected=str(text_path)) from e
