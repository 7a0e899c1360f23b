"""Command line interface: extract a table from an image and a stencil file."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .backends import available_backends, backend_from_config
from .config import Config, get_default_config, load_config, load_mapping
from .exceptions import StencilOCRError
from .image_io import load_image
from .pipeline import ExtractionPipeline
from .stencil import Stencil
from .utils.logging_utils import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CELL_FAILURES = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stencil-ocr",
        description="Extract a table from an image using a user-supplied row/column stencil",
    )
    parser.add_argument("image", help="Table image")
    parser.add_argument("-s", "--stencil", required=True,
                        help="Stencil file (JSON/YAML/TOML) with row_bounds and col_bounds")
    parser.add_argument("-c", "--config", help="Configuration file (default: built-in defaults)")
    parser.add_argument("-o", "--output", help="CSV output path (default: stdout)")
    parser.add_argument("--backend", choices=available_backends(), help="OCR backend")
    parser.add_argument("--command", help="Command template or preset for the command backend")
    parser.add_argument("--lang", help="Tesseract language")
    parser.add_argument("--psm", type=int, help="Tesseract page segmentation mode")
    parser.add_argument("--workers", type=int, help="Maximum concurrent OCR calls")
    parser.add_argument("--padding", type=int, help="Pixels trimmed from each side of a cell")
    parser.add_argument("--rotate", type=float, help="Rotate the image by DEG degrees first")
    parser.add_argument("--retries", type=int, help="Extra OCR attempts for failing cells")
    parser.add_argument("--failure-token", help="Text written for cells whose OCR failed")
    parser.add_argument("--delimiter", default=",", help="CSV delimiter")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--strict", action="store_true",
                        help=f"Exit with status {EXIT_CELL_FAILURES} if any cell failed")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command line options on top of the loaded configuration."""
    if args.backend:
        config.backend.name = args.backend
    if args.command:
        config.backend.command = args.command
        if not args.backend:
            config.backend.name = "command"
    if args.lang:
        config.backend.language = args.lang
    if args.psm is not None:
        config.backend.psm = args.psm
    if args.workers:
        config.extraction.max_workers = args.workers
    if args.padding is not None:
        config.extraction.cell_padding = args.padding
    if args.rotate is not None:
        config.extraction.rotation = args.rotate
    if args.retries is not None:
        config.extraction.retries = args.retries
    if args.failure_token is not None:
        config.extraction.failure_token = args.failure_token
    if args.progress:
        config.extraction.show_progress = True
    if args.verbose:
        config.logging.level = "DEBUG"
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""
    args = build_parser().parse_args(argv)
    
    try:
        config = load_config(args.config) if args.config else get_default_config()
        config = apply_overrides(config, args)
    except (StencilOCRError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    
    setup_logging(
        level=config.logging.level,
        log_file=config.logging.log_file,
        use_rich=config.logging.use_rich,
        format_style=config.logging.format_style,
    )
    
    try:
        image = load_image(args.image)
        height, width = image.shape[:2]
        stencil = Stencil.from_dict(load_mapping(args.stencil), width=width, height=height)
        backend = backend_from_config(config.backend)
        
        table = ExtractionPipeline(config).run(image, stencil, backend)
    except StencilOCRError as e:
        logger.error(str(e))
        return EXIT_ERROR
    
    if args.output:
        path = table.write_csv(args.output, delimiter=args.delimiter)
        logger.info(f"Table written to {path}")
    else:
        sys.stdout.write(table.to_csv(delimiter=args.delimiter))
    
    summary = table.summary()
    logger.info(
        f"{summary['rows']}x{summary['cols']} table: "
        f"{summary['succeeded']} cells recognized, {summary['failed']} failed"
    )
    for failure in table.failures:
        logger.warning(f"Cell ({failure.row_index}, {failure.col_index}): {failure.error}")
    
    if args.strict and table.has_failures:
        return EXIT_CELL_FAILURES
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
