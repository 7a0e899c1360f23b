"""
Logging utilities with rich console output and run statistics.

Provides logging setup for the command line tool and a context manager that
reports how many cells of an extraction run succeeded or failed.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional, Union, Generator

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)


class StencilFormatter(logging.Formatter):
    """Formatter assembling the line layout from the selected fields."""
    
    def __init__(self, include_module: bool = True, include_function: bool = False):
        self.include_module = include_module
        self.include_function = include_function
        
        format_parts = ["%(asctime)s"]
        if include_module:
            format_parts.append("%(name)s")
        format_parts.append("%(levelname)s")
        if include_function:
            format_parts.append("%(funcName)s")
        format_parts.append("%(message)s")
        
        super().__init__(" - ".join(format_parts), datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    use_rich: bool = True,
    format_style: str = "detailed"
) -> logging.Logger:
    """
    Set up logging for stencil OCR.
    
    Args:
        level: Logging level
        log_file: Optional log file path
        use_rich: Whether to use rich console output
        format_style: Format style ('simple', 'detailed', 'minimal')
        
    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    root_logger.setLevel(level)
    
    # Console output goes to stderr so CSV on stdout stays clean
    if use_rich:
        console_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=format_style == "detailed",
            markup=False,
            rich_tracebacks=True
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        
        if format_style == "minimal":
            formatter = StencilFormatter(include_module=False, include_function=False)
        elif format_style == "simple":
            formatter = StencilFormatter(include_module=True, include_function=False)
        else:  # detailed
            formatter = StencilFormatter(include_module=True, include_function=True)
        
        console_handler.setFormatter(formatter)
    
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)
    
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(StencilFormatter(include_module=True, include_function=True))
        file_handler.setLevel(logging.DEBUG)  # More verbose in file
        root_logger.addHandler(file_handler)
    
    # Reduce noise from external libraries
    logging.getLogger("PIL").setLevel(logging.WARNING)
    
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.
    
    Args:
        name: Logger name (usually __name__)
        
    Returns:
        Logger instance
    """
    return logging.getLogger(name)


@contextmanager
def log_processing_stats(
    operation: str,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO
) -> Generator[Dict[str, Any], None, None]:
    """
    Context manager for logging processing statistics.
    
    The caller fills ``cells_processed`` and ``cells_failed`` in the yielded
    dictionary; a summary line is logged when the block exits.
    
    Args:
        operation: Description of the operation
        logger: Logger instance (uses root if None)
        level: Logging level for the stats
        
    Yields:
        Dictionary to store additional statistics
    """
    if logger is None:
        logger = logging.getLogger()
    
    stats = {
        "operation": operation,
        "start_time": time.perf_counter(),
        "cells_processed": 0,
        "cells_failed": 0,
    }
    
    logger.log(level, f"Starting {operation}")
    
    try:
        yield stats
    except Exception as e:
        duration = time.perf_counter() - stats["start_time"]
        logger.error(f"Failed {operation} after {duration:.2f}s: {e}")
        raise
    
    duration = time.perf_counter() - stats["start_time"]
    total = stats["cells_processed"] + stats["cells_failed"]
    stats["duration"] = duration
    stats["success_rate"] = stats["cells_processed"] / total if total > 0 else 0
    
    logger.log(level,
               f"Completed {operation}: "
               f"processed={stats['cells_processed']}, "
               f"failed={stats['cells_failed']}, "
               f"duration={duration:.2f}s, "
               f"success_rate={stats['success_rate']*100:.1f}%")
