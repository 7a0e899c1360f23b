"""
Pydantic models for stencil OCR configuration.

Defines configuration schemas with validation and defaults for the
extraction pipeline, text cleaning, OCR backend and logging.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..backends.command import IMAGE_PLACEHOLDER, TEXT_PLACEHOLDER, COMMAND_PRESETS
from ..cleaning import CleaningOptions


class LogLevel(str, Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BackendName(str, Enum):
    """Built-in OCR backends."""
    TESSERACT = "tesseract"
    COMMAND = "command"


class ExtractionConfig(BaseModel):
    """Configuration for the cell extraction pipeline."""
    
    model_config = ConfigDict(extra="forbid", validate_assignment=True)
    
    max_workers: Optional[int] = Field(
        default=None,
        gt=0,
        description="Maximum concurrent OCR calls (thread pool default when unset)"
    )
    cell_padding: int = Field(
        default=0,
        ge=0,
        description="Pixels trimmed from each side of a cell to keep ruling lines out"
    )
    failure_token: str = Field(
        default="",
        description="Text rendered in the table for cells whose OCR failed"
    )
    retries: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Extra OCR attempts for a cell after an OcrError (0 disables retry)"
    )
    retry_backoff: float = Field(
        default=0.5,
        ge=0.0,
        description="Base delay in seconds between retries, doubled on every attempt"
    )
    show_progress: bool = Field(
        default=False,
        description="Whether to show a progress bar while cells are recognized"
    )
    rotation: float = Field(
        default=0.0,
        ge=-45.0,
        le=45.0,
        description="Rotation in degrees applied to the image before extraction"
    )


class CleaningConfig(BaseModel):
    """Configuration for post-OCR text cleaning."""
    
    model_config = ConfigDict(extra="forbid", validate_assignment=True)
    
    trim_whitespace: bool = Field(default=True, description="Strip surrounding whitespace")
    trim_single_quote: bool = Field(default=True, description="Strip surrounding single quotes")
    trim_double_quote: bool = Field(default=True, description="Strip surrounding double quotes")
    no_newlines: bool = Field(default=True, description="Remove line breaks inside a cell")
    
    def to_options(self) -> CleaningOptions:
        return CleaningOptions(**self.model_dump())


class BackendConfig(BaseModel):
    """Configuration for the OCR backend."""
    
    model_config = ConfigDict(extra="forbid", validate_assignment=True, use_enum_values=True)
    
    name: BackendName = Field(
        default=BackendName.TESSERACT,
        description="Backend used to recognize cells"
    )
    language: str = Field(
        default="eng",
        min_length=1,
        description="Tesseract language code(s)"
    )
    psm: Optional[int] = Field(
        default=7,
        ge=0,
        le=13,
        description="Tesseract page segmentation mode"
    )
    oem: Optional[int] = Field(
        default=None,
        ge=0,
        le=3,
        description="Tesseract OCR engine mode"
    )
    extra_config: str = Field(
        default="",
        description="Additional raw tesseract options"
    )
    tesseract_cmd: Optional[str] = Field(
        default=None,
        description="Path to the tesseract binary if not on PATH"
    )
    command: str = Field(
        default="tesseract",
        description="Command template or preset name for the command backend"
    )
    timeout: Optional[float] = Field(
        default=30.0,
        gt=0.0,
        description="Seconds before a single OCR call is aborted"
    )
    serialize: bool = Field(
        default=False,
        description="Run OCR calls one at a time for engines that are not thread safe"
    )
    
    @field_validator('command')
    @classmethod
    def validate_command_template(cls, v):
        """Ensure the command template names input image and output text."""
        template = COMMAND_PRESETS.get(v, v)
        for placeholder in (IMAGE_PLACEHOLDER, TEXT_PLACEHOLDER):
            if placeholder not in template:
                raise ValueError(f"Command template must contain {placeholder}")
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging behavior."""
    
    model_config = ConfigDict(extra="forbid", validate_assignment=True, use_enum_values=True)
    
    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Base logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file path"
    )
    use_rich: bool = Field(
        default=True,
        description="Whether to use rich console output"
    )
    format_style: str = Field(
        default="detailed",
        pattern="^(simple|detailed|minimal)$",
        description="Logging format style"
    )


class Config(BaseModel):
    """Main configuration model for stencil OCR."""
    
    model_config = ConfigDict(extra="forbid", validate_assignment=True, use_enum_values=True)
    
    extraction: ExtractionConfig = Field(
        default_factory=ExtractionConfig,
        description="Extraction pipeline configuration"
    )
    cleaning: CleaningConfig = Field(
        default_factory=CleaningConfig,
        description="Text cleaning configuration"
    )
    backend: BackendConfig = Field(
        default_factory=BackendConfig,
        description="OCR backend configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration"
    )
    
    version: str = Field(
        default="1.0",
        description="Configuration version"
    )
    description: Optional[str] = Field(
        default=None,
        description="Configuration description"
    )
    
    @model_validator(mode="after")
    def validate_retry_policy(self):
        """Bound the time a single cell may spend in retried OCR calls."""
        if self.extraction.retries and self.backend.timeout is not None:
            worst_case = (self.extraction.retries + 1) * self.backend.timeout
            if worst_case > 3600:
                raise ValueError("retries * timeout allows a single cell to run for over an hour")
        return self
