"""Backend interface and generic backend wrappers."""

import threading
from abc import ABC, abstractmethod
from typing import Callable

import numpy as np


class OcrBackend(ABC):
    """Base class for OCR backends.
    
    ``recognize`` turns one cell image into text or raises ``OcrError``. It
    is called from many worker threads at once, so implementations must not
    keep per-call state on the instance.
    """
    
    name = "backend"
    
    @abstractmethod
    def recognize(self, cell_image: np.ndarray) -> str:
        """Recognize the text of a single cell image."""
        pass
    
    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class FunctionBackend(OcrBackend):
    """Backend wrapping a plain ``image -> text`` callable."""
    
    def __init__(self, func: Callable[[np.ndarray], str], name: str = "function"):
        self.func = func
        self.name = name
    
    def recognize(self, cell_image: np.ndarray) -> str:
        return self.func(cell_image)


class SerializedBackend(OcrBackend):
    """Run another backend one call at a time.
    
    For engines that cannot be driven concurrently (a single connection to a
    remote service, a non-reentrant library handle). The pipeline still
    dispatches in parallel; calls simply queue on the lock.
    """
    
    def __init__(self, backend: OcrBackend):
        self.backend = backend
        self.name = f"serialized({getattr(backend, 'name', type(backend).__name__)})"
        self._lock = threading.Lock()
    
    def recognize(self, cell_image: np.ndarray) -> str:
        with self._lock:
            return self.backend.recognize(cell_image)
