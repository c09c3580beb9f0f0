"""
Scan Result Entities

Diagnostics, strategy trials and the final result of scanning one label
image.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple

from ..value_objects.pixel_buffer import PixelBuffer
from ..value_objects.preprocessing_strategy import PreprocessingStrategy
from .medication import MedicationRecord
from .recognition import RecognitionResult


BLUR_THRESHOLD = 100.0


@dataclass(frozen=True)
class ImageDiagnostics:
    """
    Image quality signals surfaced to the capture screen.

    Attributes:
        blur_score: Laplacian-based sharpness, higher is sharper
        rotation_degrees: Detected rotation (0, 90, 180 or 270)
        is_blurry: True when blur_score is below the blur threshold
        rotation_corrected: True when the working image was rotated
        strategy: Name of the winning preprocessing strategy
    """

    blur_score: float
    rotation_degrees: int = 0
    is_blurry: bool = False
    rotation_corrected: bool = False
    strategy: Optional[str] = None

    @classmethod
    def from_scores(
        cls,
        blur_score: float,
        rotation_degrees: int,
        blur_threshold: float = BLUR_THRESHOLD,
        strategy: Optional[str] = None
    ) -> "ImageDiagnostics":
        return cls(
            blur_score=blur_score,
            rotation_degrees=rotation_degrees,
            is_blurry=blur_score < blur_threshold,
            rotation_corrected=rotation_degrees != 0,
            strategy=strategy,
        )

    @property
    def needs_retake(self) -> bool:
        """Whether the capture UI should suggest taking the photo again."""
        return self.is_blurry

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blur_score": round(self.blur_score, 2),
            "rotation_degrees": self.rotation_degrees,
            "is_blurry": self.is_blurry,
            "rotation_corrected": self.rotation_corrected,
            "strategy": self.strategy,
        }


@dataclass(frozen=True)
class StrategyTrial:
    """
    One preprocessing strategy applied to one image.

    Attributes:
        strategy: The strategy that was applied
        result_buffer: Binarized output
        edge_score: Count of high-contrast adjacent pixel pairs
    """

    strategy: PreprocessingStrategy
    result_buffer: PixelBuffer
    edge_score: int

    def __str__(self) -> str:
        return f"StrategyTrial({self.strategy.label}, edge_score={self.edge_score})"


@dataclass(frozen=True)
class PreprocessedImage:
    """
    Output of the preprocessing stage.

    Attributes:
        binarized: Winning strategy output, fed to recognition
        preview: Scaled, oriented colour image for the capture UI
        diagnostics: Blur/rotation/strategy signals
        trials: Every strategy trial, in declaration order
    """

    binarized: PixelBuffer
    preview: PixelBuffer
    diagnostics: ImageDiagnostics
    trials: Tuple[StrategyTrial, ...] = ()

    @property
    def strategy_scores(self) -> Dict[str, int]:
        return {t.strategy.label: t.edge_score for t in self.trials}


@dataclass
class LabelScanResult:
    """
    Everything the chart-creation collaborator receives for one image.

    Attributes:
        medications: Parsed records in the order found
        recognition: Raw recognition output
        diagnostics: Image quality signals
        preview: Full-colour oriented preview image
        preprocessed: Binarized image that was recognized
        strategy_scores: Edge score per strategy
        highlights: Per-record word highlights, parallel to medications
        request_id: Identifier of the pipeline run
        processing_time_ms: Wall time of the run
    """

    medications: List[MedicationRecord] = field(default_factory=list)
    recognition: Optional[RecognitionResult] = None
    diagnostics: Optional[ImageDiagnostics] = None
    preview: Optional[PixelBuffer] = None
    preprocessed: Optional[PixelBuffer] = None
    strategy_scores: Dict[str, int] = field(default_factory=dict)
    highlights: List[List[Any]] = field(default_factory=list)
    request_id: Optional[str] = None
    processing_time_ms: float = 0.0

    @property
    def preview_width(self) -> Optional[int]:
        return self.preview.width if self.preview is not None else None

    @property
    def preview_height(self) -> Optional[int]:
        return self.preview.height if self.preview is not None else None

    @property
    def has_medications(self) -> bool:
        return len(self.medications) > 0

    @property
    def text(self) -> str:
        return self.recognition.text if self.recognition else ""

    def to_dict(self, include_images: bool = False) -> Dict[str, Any]:
        """
        Convert to a JSON-ready dictionary.

        Args:
            include_images: Embed preview and preprocessed images as data URLs
        """
        data: Dict[str, Any] = {
            "request_id": self.request_id,
            "medications": [m.to_dict() for m in self.medications],
            "text": self.text,
            "confidence": self.recognition.confidence if self.recognition else 0.0,
            "words": [w.to_dict() for w in self.recognition.words] if self.recognition else [],
            "diagnostics": self.diagnostics.to_dict() if self.diagnostics else None,
            "preview_width": self.preview_width,
            "preview_height": self.preview_height,
            "strategy_scores": dict(self.strategy_scores),
            "highlights": [[h.to_dict() for h in record_highlights] for record_highlights in self.highlights],
            "processing_time_ms": round(self.processing_time_ms, 2),
        }
        if include_images:
            data["preview_image"] = self.preview.to_base64() if self.preview is not None else None
            data["preprocessed_image"] = (
                self.preprocessed.to_base64() if self.preprocessed is not None else None
            )
        return data
