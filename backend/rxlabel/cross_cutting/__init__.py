"""
Cross-Cutting Concerns

Utilities and services that span across multiple layers.
"""

from .logging import setup_logging, configure_logging, get_logger, PipelineLogger
from .validation import validate_image_bytes, validate_text
from .error_handling import ErrorHandler

__all__ = [
    "setup_logging",
    "configure_logging",
    "get_logger",
    "PipelineLogger",
    "validate_image_bytes",
    "validate_text",
    "ErrorHandler",
]
