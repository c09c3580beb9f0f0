"""
Pipeline Orchestrator

Main orchestration logic for turning a label photo into medication
records: PREPROCESS -> RECOGNIZE -> PARSE.
"""

from typing import List, Optional, Union
import logging
import time

from .context import ScanContext
from .stages import (
    PipelineStageExecutor,
    PreprocessingStage,
    RecognitionStage,
    ParsingStage,
)
from ...config.settings import AppConfig, get_default_config
from ...domain.value_objects.image_data import ImageData
from ...domain.entities.medication import MedicationRecord
from ...domain.entities.scan_result import LabelScanResult
from ...domain.ports.text_recognizer import TextRecognizerPort
from ...domain.exceptions import PipelineConfigurationError
from ...infrastructure.ocr.adapter import RecognitionAdapter
from ...infrastructure.ocr.factory import RecognizerFactory
from ...infrastructure.extraction import parse_multiple_medications, score_batch


logger = logging.getLogger(__name__)

ImageInput = Union[ImageData, bytes, bytearray, str]


class LabelScanPipeline:
    """
    Pipeline for scanning a medication label image.

    Stages run in order and each runs once. A failing stage ends the run
    with its exception; there is no partial result.

    Usage:
        pipeline = LabelScanPipeline(recognizer=TesseractRecognizer())
        result = pipeline.run(image_bytes)
        for medication in result.medications:
            print(medication.name, medication.confidence)
    """

    def __init__(
        self,
        recognizer: TextRecognizerPort,
        config: Optional[AppConfig] = None
    ):
        """
        Initialize the pipeline.

        Args:
            recognizer: Text recognition engine
            config: Application configuration
        """
        if recognizer is None:
            raise PipelineConfigurationError(
                message="Pipeline is missing required components: recognizer",
                missing_components=["recognizer"]
            )

        self.config = config or AppConfig()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self._recognizer = recognizer
        self._adapter = RecognitionAdapter(recognizer, timeout_seconds=self.config.ocr.timeout_seconds)

        self._stages = self._build_stages()

        self.logger.debug(f"Pipeline initialized with {len(self._stages)} stages")

    def _build_stages(self) -> List[PipelineStageExecutor]:
        """preprocessing, recognition, parsing; each runs exactly once per scan."""
        return [
            PreprocessingStage(),
            RecognitionStage(adapter=self._adapter),
            ParsingStage(),
        ]

    def run(self, image: ImageInput) -> LabelScanResult:
        """
        Scan one label image.

        Args:
            image: ImageData, raw encoded bytes, or a base64 / data URL string

        Returns:
            LabelScanResult with medications, preview and diagnostics

        Raises:
            ImageLoadError: If the image cannot be decoded
            BufferAllocationError: If the image is too large to process
            RecognitionError: If the engine fails or times out
            StageExecutionError: For unexpected failures
        """
        start_time = time.time()

        context = ScanContext.create(image=ImageData.coerce(image), config=self.config)
        self.logger.info(f"Starting label scan (request_id={context.request_id})")

        for stage_executor in self._stages:
            stage_executor.run(context)

        result = context.to_scan_result()
        result.processing_time_ms = (time.time() - start_time) * 1000

        self.logger.info(
            f"Label scan completed: {len(result.medications)} medication(s), "
            f"total time: {result.processing_time_ms:.2f}ms"
        )
        return result

    def parse_text(self, text: str) -> List[MedicationRecord]:
        """
        Run only segmentation, parsing and scoring on already recognized text.

        Args:
            text: Recognized label text

        Returns:
            Scored medication records
        """
        return score_batch(parse_multiple_medications(text))

    @property
    def recognizer(self) -> TextRecognizerPort:
        return self._recognizer

    @property
    def stage_names(self) -> List[str]:
        """Stage names in execution order."""
        return [s.name for s in self._stages]


class PipelineBuilder:
    """
    Builder for constructing label scan pipelines.

    Usage:
        pipeline = (
            PipelineBuilder()
            .with_recognizer(TesseractRecognizer())
            .with_config(AppConfig.from_env())
            .build()
        )
    """

    def __init__(self):
        self._recognizer: Optional[TextRecognizerPort] = None
        self._config: Optional[AppConfig] = None

    def with_recognizer(self, recognizer: TextRecognizerPort) -> "PipelineBuilder":
        """Set the text recognizer."""
        self._recognizer = recognizer
        return self

    def with_config(self, config: AppConfig) -> "PipelineBuilder":
        """Set the application configuration."""
        self._config = config
        return self

    def build(self) -> LabelScanPipeline:
        """
        Build the pipeline.

        Returns:
            Configured LabelScanPipeline

        Raises:
            PipelineConfigurationError: If no recognizer was set
        """
        if self._recognizer is None:
            raise PipelineConfigurationError(
                message="Cannot build pipeline, missing: recognizer",
                missing_components=["recognizer"]
            )
        return LabelScanPipeline(recognizer=self._recognizer, config=self._config)


def scan_label(
    image: ImageInput,
    recognizer: Optional[TextRecognizerPort] = None,
    config: Optional[AppConfig] = None
) -> LabelScanResult:
    """
    Scan a label image with a one-off pipeline.

    Args:
        image: ImageData, raw encoded bytes, or a base64 / data URL string
        recognizer: Engine to use; built from ``config.ocr`` when omitted
        config: Configuration; read from the environment when omitted

    Returns:
        LabelScanResult
    """
    config = config or get_default_config()
    if recognizer is None:
        recognizer = RecognizerFactory.create_from_config(config.ocr)
    return LabelScanPipeline(recognizer=recognizer, config=config).run(image)
