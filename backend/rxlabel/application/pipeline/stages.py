"""
Pipeline Stage Definitions

The three steps of a label scan, each reading and writing a ScanContext.
"""

from abc import ABC, abstractmethod
from dataclasses import replace
import logging

from .context import ScanContext
from ...cross_cutting.validation import validate_image_bytes, validate_text
from ...domain.entities.scan_result import ImageDiagnostics, PreprocessedImage
from ...domain.exceptions import DomainException, ImageLoadError, StageExecutionError
from ...infrastructure.imaging import (
    decode_image,
    ensure_capacity,
    upscale,
    correct_rotation,
    to_grayscale,
    detect_blur,
    select_strategy,
)
from ...infrastructure.ocr.adapter import RecognitionAdapter
from ...infrastructure.extraction import (
    parse_multiple_medications,
    score_batch,
    locate_field_words,
)


logger = logging.getLogger(__name__)


class PipelineStageExecutor(ABC):
    """
    One step of a label scan.

    Each stage reads what it needs from the context and writes its
    result back. Stages run exactly once: domain errors propagate
    unchanged and anything unexpected is wrapped in StageExecutionError.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Get stage name."""
        pass

    @abstractmethod
    def execute(self, context: ScanContext) -> None:
        """
        Do the work of this stage.

        Args:
            context: The scan in progress
        """
        pass

    def run(self, context: ScanContext) -> None:
        """
        Run the stage and record its timing.

        Raises:
            DomainException: Whatever the stage raised
            StageExecutionError: For any non-domain failure
        """
        context.start_stage(self.name)
        try:
            self.execute(context)
        except DomainException as e:
            context.finish_stage(self.name, succeeded=False)
            context.log.stage_error(self.name, e)
            raise
        except Exception as e:
            context.finish_stage(self.name, succeeded=False)
            self.logger.error(f"Unexpected error in stage {self.name}: {e}", exc_info=True)
            raise StageExecutionError(self.name, e) from e
        context.finish_stage(self.name)


# =============================================================================
# Concrete Stage Executors
# =============================================================================

class PreprocessingStage(PipelineStageExecutor):
    """
    Image Preprocessing Stage Executor.

    Decodes the image, scales it up, fixes sideways captures, scores blur
    and picks the best binarization strategy.
    """

    @property
    def name(self) -> str:
        return "preprocessing"

    def execute(self, context: ScanContext) -> None:
        settings = context.config.preprocessing
        pipeline_settings = context.config.pipeline

        image_bytes = context.image.bytes
        is_valid, error = validate_image_bytes(image_bytes)
        if not is_valid:
            raise ImageLoadError(error)

        source = decode_image(image_bytes)
        ensure_capacity(source.width, source.height, settings.max_pixels)

        scaled = upscale(
            source,
            target_long_edge=settings.target_long_edge,
            max_scale=settings.max_scale,
            max_pixels=settings.max_pixels
        )
        oriented, rotation = correct_rotation(scaled, settings.rotation_ratio)

        gray = to_grayscale(oriented)
        blur_score = detect_blur(gray)

        winner, trials = select_strategy(
            gray,
            parallel=pipeline_settings.parallel_strategies,
            max_workers=pipeline_settings.strategy_workers
        )

        diagnostics = ImageDiagnostics.from_scores(
            blur_score,
            rotation,
            blur_threshold=settings.blur_threshold,
            strategy=winner.strategy.label
        )
        context.preprocessed = PreprocessedImage(
            binarized=winner.result_buffer,
            preview=oriented,
            diagnostics=diagnostics,
            trials=tuple(trials)
        )

        context.log.metric("size", f"{source.width}x{source.height} -> {oriented.width}x{oriented.height}")
        context.log.metric("blur_score", f"{blur_score:.1f}")
        context.log.metric("rotation", rotation, "deg")
        context.log.metric("strategy_scores", context.preprocessed.strategy_scores)

        if diagnostics.is_blurry:
            self.logger.info(f"Image looks blurry (score {blur_score:.1f}), a retake may help")


class RecognitionStage(PipelineStageExecutor):
    """
    Text Recognition Stage Executor.

    Sends the winning binarized buffer to the recognition engine.
    """

    def __init__(self, adapter: RecognitionAdapter):
        super().__init__()
        self.adapter = adapter

    @property
    def name(self) -> str:
        return "recognition"

    def execute(self, context: ScanContext) -> None:
        result = self.adapter.recognize(context.preprocessed.binarized)
        context.recognition = result

        context.log.metric("words", result.word_count)
        context.log.metric("recognition_confidence", f"{result.confidence:.1f}")

        if not result.has_text:
            self.logger.info("No text recognized")


class ParsingStage(PipelineStageExecutor):
    """
    Medication Parsing Stage Executor.

    Segments the recognized text, parses each medication, scores it and
    maps its fields back to word boxes.
    """

    @property
    def name(self) -> str:
        return "parsing"

    def execute(self, context: ScanContext) -> None:
        text = context.recognized_text
        is_valid, reason = validate_text(text)
        if not is_valid:
            self.logger.debug(f"Nothing to parse: {reason}")
            medications = []
        else:
            medications = score_batch(parse_multiple_medications(text))

        preview = context.preprocessed.preview if context.preprocessed else None
        if context.config.pipeline.attach_preview and preview is not None and medications:
            preview_url = preview.to_base64()
            medications = [replace(m, image=preview_url) for m in medications]

        words = context.recognition.words if context.recognition else ()
        context.medications = medications
        context.highlights = [locate_field_words(m, words) for m in medications]

        context.log.metric("medications", len(medications))
