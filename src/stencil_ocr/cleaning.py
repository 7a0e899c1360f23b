"""Post-OCR text cleaning."""

from dataclasses import dataclass

SINGLE_QUOTES = "'‘’"
DOUBLE_QUOTES = '"“”'


@dataclass(frozen=True)
class CleaningOptions:
    """Which artefacts to strip from recognized cell text."""

    trim_whitespace: bool = True
    trim_single_quote: bool = True
    trim_double_quote: bool = True
    no_newlines: bool = True


def clean_text(text: str, options: CleaningOptions = CleaningOptions()) -> str:
    """Apply the enabled cleaning steps in order.

    OCR engines tend to wrap a lone cell value in stray quote marks and end
    it with a newline or form feed.
    """
    if options.trim_whitespace:
        text = text.strip()
    if options.trim_single_quote:
        text = text.strip(SINGLE_QUOTES)
    if options.trim_double_quote:
        text = text.strip(DOUBLE_QUOTES)
    if options.no_newlines:
        text = text.replace("\r", "").replace("\n", "")
    return text
