"""
Configuration Module

Application settings and configuration management.
"""

from .settings import (
    AppConfig,
    PreprocessingConfig,
    OCRConfig,
    PipelineConfig,
    LookupConfig,
    LoggingConfig,
    get_default_config,
)

__all__ = [
    "AppConfig",
    "PreprocessingConfig",
    "OCRConfig",
    "PipelineConfig",
    "LookupConfig",
    "LoggingConfig",
    "get_default_config",
]
