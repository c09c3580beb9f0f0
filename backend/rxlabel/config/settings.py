"""
Application Configuration

Dataclass settings, read from defaults, a dict or RXLABEL_* environment variables.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Callable, Dict, Optional, Tuple
import os


@dataclass
class PreprocessingConfig:
    """Resizing, quality thresholds and the pixel budget for working buffers."""

    target_long_edge: int = 2000
    max_scale: float = 2.0
    blur_threshold: float = 100.0
    rotation_ratio: float = 1.2
    max_pixels: int = 40_000_000  # Upper bound for any working buffer


@dataclass
class OCRConfig:
    """Which engine recognizes text, and how long it may take."""

    type: str = "tesseract"  # tesseract, static
    language: str = "eng"  # Tesseract language codes
    oem: int = 3
    psm: int = 3
    timeout_seconds: float = 30.0


@dataclass
class PipelineConfig:
    """Per-run pipeline behaviour."""

    verbose_logging: bool = False
    parallel_strategies: bool = False
    strategy_workers: int = 4
    attach_preview: bool = True  # Store the preview data URL on each record


@dataclass
class LookupConfig:
    """Endpoints for NDC and UPC lookups."""

    openfda_url: str = "https://api.fda.gov/drug/ndc.json"
    openfoodfacts_url: str = "https://world.openfoodfacts.org/api/v2/product"
    upcitemdb_url: str = "https://api.upcitemdb.com/prod/trial/lookup"
    timeout: int = 10


@dataclass
class LoggingConfig:
    """Handed to cross_cutting.logging.configure_logging."""

    level: str = "INFO"
    log_file: Optional[str] = None
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _env_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


SECTIONS = ("preprocessing", "ocr", "pipeline", "lookup", "logging")

# variable -> (section, attribute, parser)
ENV_OVERRIDES: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "RXLABEL_OCR_TYPE": ("ocr", "type", str),
    "RXLABEL_OCR_LANGUAGE": ("ocr", "language", str),
    "RXLABEL_OCR_TIMEOUT": ("ocr", "timeout_seconds", float),
    "RXLABEL_VERBOSE": ("pipeline", "verbose_logging", _env_bool),
    "RXLABEL_PARALLEL_STRATEGIES": ("pipeline", "parallel_strategies", _env_bool),
    "RXLABEL_MAX_PIXELS": ("preprocessing", "max_pixels", int),
    "RXLABEL_LOG_LEVEL": ("logging", "level", str),
    "RXLABEL_LOG_FILE": ("logging", "log_file", str),
}


@dataclass
class AppConfig:
    """
    All settings, one attribute per section.

    Sections are plain mutable dataclasses, so tests and callers can
    adjust a single value after construction.
    """

    preprocessing: PreprocessingConfig = field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    lookup: LookupConfig = field(default_factory=LookupConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Defaults overridden by any non-empty variable listed in ENV_OVERRIDES."""
        config = cls()
        for name, (section, attribute, parse) in ENV_OVERRIDES.items():
            raw = os.getenv(name)
            if raw:
                setattr(getattr(config, section), attribute, parse(raw))
        return config

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Build from nested dicts; unknown sections and keys are ignored."""
        config = cls()
        for section in SECTIONS:
            target = getattr(config, section)
            known = {f.name for f in fields(target)}
            for key, value in (data.get(section) or {}).items():
                if key in known:
                    setattr(target, key, value)
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {section: asdict(getattr(self, section)) for section in SECTIONS}


def get_default_config() -> AppConfig:
    """Configuration used when a caller supplies none: defaults plus environment."""
    return AppConfig.from_env()
