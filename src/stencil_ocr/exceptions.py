"""
Custom exceptions for stencil-based table extraction.

Structural problems (a malformed stencil, an unreadable image, a bad
configuration) are raised to the caller before any cell is dispatched.
Per-cell OCR failures are raised by backends as ``OcrError`` and folded into
the resulting table by the pipeline instead of aborting the run.
"""

from typing import Optional, Any


class StencilOCRError(Exception):
    """Base exception for all stencil OCR errors."""
    
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} (Details: {details_str})"
        return self.message


class ConfigurationError(StencilOCRError):
    """Raised when there are configuration-related errors."""
    pass


class InvalidStencil(StencilOCRError):
    """Raised when stencil boundaries are not strictly increasing or too few."""
    
    def __init__(self, message: str, axis: Optional[str] = None,
                 bounds: Optional[Any] = None, **kwargs: Any) -> None:
        details = kwargs
        if axis:
            details["axis"] = axis
        if bounds is not None:
            details["bounds"] = list(bounds)
        super().__init__(message, details)


class OcrError(StencilOCRError):
    """Raised by a backend when a single cell cannot be recognized."""
    
    def __init__(self, reason: str, backend: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs
        if backend:
            details["backend"] = backend
        super().__init__(reason, details)
        self.reason = reason


class IncompleteResults(StencilOCRError):
    """Raised when a run did not produce exactly one result per cell."""
    
    def __init__(self, message: str, missing: Optional[list] = None,
                 duplicated: Optional[list] = None, unexpected: Optional[list] = None) -> None:
        details: dict[str, Any] = {}
        if missing:
            details["missing"] = missing
        if duplicated:
            details["duplicated"] = duplicated
        if unexpected:
            details["unexpected"] = unexpected
        super().__init__(message, details)
        self.missing = missing or []
        self.duplicated = duplicated or []
        self.unexpected = unexpected or []


class ImageLoadError(StencilOCRError):
    """Raised when an image cannot be loaded or is invalid."""
    
    def __init__(self, message: str, image_path: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs
        if image_path:
            details["image_path"] = image_path
        super().__init__(message, details)


class ExtractionCancelled(StencilOCRError):
    """Raised when the result of a cancelled background extraction is requested."""
    pass
