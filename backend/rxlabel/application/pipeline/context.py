"""
Pipeline Context

Mutable state of one label scan, handed from stage to stage.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
import time
import uuid

from ...config.settings import AppConfig
from ...cross_cutting.logging import PipelineLogger
from ...domain.value_objects.image_data import ImageData
from ...domain.entities.medication import MedicationRecord
from ...domain.entities.recognition import RecognitionResult
from ...domain.entities.scan_result import PreprocessedImage, LabelScanResult


@dataclass
class StageMetrics:
    """Timing of one stage; ``succeeded`` stays False until it finishes cleanly."""

    stage: str
    started: float = field(default_factory=time.perf_counter)
    duration_ms: float = 0.0
    succeeded: bool = False

    def finish(self, succeeded: bool = True) -> None:
        self.duration_ms = (time.perf_counter() - self.started) * 1000
        self.succeeded = succeeded


@dataclass
class ScanContext:
    """
    Everything a scan has produced so far.

    A context belongs to exactly one run. Stages read what earlier stages
    wrote and add their own output:

        preprocessing -> ``preprocessed``
        recognition   -> ``recognition``
        parsing       -> ``medications`` and ``highlights``

    Attributes:
        request_id: Random id, also used to name the run's logger
        image: Photo being scanned
        config: Settings for this run
        stage_metrics: Timing per stage name, in execution order
        log: Per-run logger; built from ``config`` when not given
    """

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    image: Optional[ImageData] = None
    config: AppConfig = field(default_factory=AppConfig)

    preprocessed: Optional[PreprocessedImage] = None
    recognition: Optional[RecognitionResult] = None
    medications: List[MedicationRecord] = field(default_factory=list)
    highlights: List[List[Any]] = field(default_factory=list)

    stage_metrics: Dict[str, StageMetrics] = field(default_factory=dict)
    log: Optional[PipelineLogger] = None

    def __post_init__(self) -> None:
        if self.log is None:
            self.log = PipelineLogger(self.request_id, verbose=self.config.pipeline.verbose_logging)

    @classmethod
    def create(cls, image: ImageData, config: Optional[AppConfig] = None) -> "ScanContext":
        return cls(image=image, config=config or AppConfig())

    def start_stage(self, stage: str) -> None:
        self.stage_metrics[stage] = StageMetrics(stage)
        self.log.stage_start(stage)

    def finish_stage(self, stage: str, succeeded: bool = True) -> None:
        metrics = self.stage_metrics.get(stage)
        if metrics is not None:
            metrics.finish(succeeded)
        self.log.stage_end(stage, succeeded)

    def get_stage_duration(self, stage: str) -> float:
        """Milliseconds spent in ``stage``; 0.0 if it never ran."""
        metrics = self.stage_metrics.get(stage)
        return metrics.duration_ms if metrics is not None else 0.0

    @property
    def total_duration_ms(self) -> float:
        return sum(m.duration_ms for m in self.stage_metrics.values())

    @property
    def recognized_text(self) -> str:
        return self.recognition.text if self.recognition else ""

    def to_scan_result(self) -> LabelScanResult:
        """Freeze what the stages produced into the result handed to callers."""
        fields: Dict[str, Any] = {}
        if self.preprocessed is not None:
            fields.update(
                diagnostics=self.preprocessed.diagnostics,
                preview=self.preprocessed.preview,
                preprocessed=self.preprocessed.binarized,
                strategy_scores=self.preprocessed.strategy_scores,
            )
        return LabelScanResult(
            medications=list(self.medications),
            recognition=self.recognition,
            highlights=[list(h) for h in self.highlights],
            request_id=self.request_id,
            processing_time_ms=self.total_duration_ms,
            **fields
        )

    def __str__(self) -> str:
        done = ", ".join(self.stage_metrics) or "none"
        return f"ScanContext(id={self.request_id[:8]}, stages={done})"
