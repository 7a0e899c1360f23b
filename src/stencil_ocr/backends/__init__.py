"""
OCR backends.

Any object with a ``recognize(cell_image) -> str`` method that raises
``OcrError`` on failure can be handed to the pipeline; the classes here are
the engines shipped with the package.
"""

from typing import Any, Dict, List, Type

from ..exceptions import ConfigurationError
from .base import OcrBackend, FunctionBackend, SerializedBackend
from .command import (
    CommandBackend,
    COMMAND_PRESETS,
    CUNEIFORM_COMMAND,
    TESSERACT_COMMAND,
)
from .tesseract import TesseractBackend

BACKENDS: Dict[str, Type[OcrBackend]] = {
    "tesseract": TesseractBackend,
    "command": CommandBackend,
}


def available_backends() -> List[str]:
    """Names accepted by ``get_backend``."""
    return sorted(BACKENDS)


def get_backend(name: str, serialize: bool = False, **options: Any) -> OcrBackend:
    """
    Create a backend by name.
    
    Args:
        name: Registered backend name
        serialize: Wrap the backend so calls run one at a time
        **options: Keyword arguments for the backend constructor
        
    Returns:
        Backend instance
        
    Raises:
        ConfigurationError: If the name is unknown or the options are invalid
    """
    try:
        backend_cls = BACKENDS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown OCR backend: {name}",
            {"available": ", ".join(available_backends())},
        )
    
    try:
        backend = backend_cls(**options)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid options for backend {name}: {e}")
    
    return SerializedBackend(backend) if serialize else backend


def backend_from_config(config: Any) -> OcrBackend:
    """Create the backend described by a ``BackendConfig`` section."""
    if config.name == "tesseract":
        options = {
            "language": config.language,
            "psm": config.psm,
            "oem": config.oem,
            "timeout": config.timeout or 0,
            "extra_config": config.extra_config,
            "tesseract_cmd": config.tesseract_cmd,
        }
    else:
        options = {"template": config.command, "timeout": config.timeout}
    return get_backend(config.name, serialize=config.serialize, **options)


__all__ = [
    "OcrBackend",
    "FunctionBackend",
    "SerializedBackend",
    "TesseractBackend",
    "CommandBackend",
    "COMMAND_PRESETS",
    "TESSERACT_COMMAND",
    "CUNEIFORM_COMMAND",
    "BACKENDS",
    "available_backends",
    "get_backend",
    "backend_from_config",
]
