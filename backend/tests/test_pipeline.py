"""
End-to-end tests for the label scan pipeline.

The engine is a StaticTextRecognizer, so these run without Tesseract.
"""

import base64
import json

import numpy as np
import pytest

from rxlabel.application import LabelScanPipeline, PipelineBuilder, ScanContext, scan_label
from rxlabel.config.settings import AppConfig, PreprocessingConfig, PipelineConfig
from rxlabel.domain.exceptions import (
    ImageLoadError,
    BufferAllocationError,
    RecognitionError,
    PipelineConfigurationError,
)
from rxlabel.domain.value_objects.image_data import ImageData
from rxlabel.infrastructure.ocr import StaticTextRecognizer

from conftest import LISINOPRIL_LABEL, encode_png, horizontal_stripes, vertical_stripes


def _no_upscale_config():
    return AppConfig(preprocessing=PreprocessingConfig(max_scale=1.0))


def test_scan_lisinopril_label(label_png):
    recognizer = StaticTextRecognizer(LISINOPRIL_LABEL)
    pipeline = LabelScanPipeline(recognizer=recognizer)

    result = pipeline.run(label_png)

    assert len(result.medications) == 1
    medication = result.medications[0]
    assert medication.name == "Lisinopril"
    assert medication.dosage == "10 mg"
    assert medication.confidence == 90
    assert medication.image.startswith("data:image/png;base64,")

    # 300x200 capture scaled 2x, possibly turned on its side
    assert result.preview_width * result.preview_height == 600 * 400
    assert result.preprocessed.size == result.preview.size
    assert set(result.strategy_scores) == {"standard", "high-contrast", "denoise", "aggressive"}
    assert result.diagnostics.strategy in result.strategy_scores
    assert result.text == LISINOPRIL_LABEL
    assert result.processing_time_ms > 0

    assert recognizer.acquire_count == 1
    assert recognizer.release_count == 1
    assert recognizer.recognized == [result.preprocessed]


def test_highlights_follow_medications(label_png):
    result = LabelScanPipeline(StaticTextRecognizer(LISINOPRIL_LABEL)).run(label_png)

    assert len(result.highlights) == len(result.medications)
    fields = [h.field for h in result.highlights[0]]
    assert fields[0] == "name"
    assert "dosage" in fields


def test_preview_is_not_attached_when_disabled(label_png):
    config = AppConfig(pipeline=PipelineConfig(attach_preview=False))
    result = LabelScanPipeline(StaticTextRecognizer(LISINOPRIL_LABEL), config=config).run(label_png)

    assert result.medications[0].image is None
    assert result.preview is not None


def test_no_text_gives_no_medications(label_png):
    result = LabelScanPipeline(StaticTextRecognizer("")).run(label_png)

    assert result.medications == []
    assert result.highlights == []
    assert not result.has_medications


def test_invalid_bytes_fail_before_recognition():
    recognizer = StaticTextRecognizer(LISINOPRIL_LABEL)

    with pytest.raises(ImageLoadError):
        LabelScanPipeline(recognizer).run(b"definitely not an image")

    assert recognizer.acquire_count == 0


def test_oversized_image_is_refused(label_png):
    config = AppConfig(preprocessing=PreprocessingConfig(max_pixels=100))
    recognizer = StaticTextRecognizer(LISINOPRIL_LABEL)

    with pytest.raises(BufferAllocationError) as exc_info:
        LabelScanPipeline(recognizer, config=config).run(label_png)

    assert exc_info.value.details == {"width": 300, "height": 200}
    assert not exc_info.value.is_recoverable
    assert recognizer.acquire_count == 0


def test_engine_failure_is_reported_and_engine_released(label_png):
    recognizer = StaticTextRecognizer(LISINOPRIL_LABEL, error=ValueError("engine crashed"))

    with pytest.raises(RecognitionError):
        LabelScanPipeline(recognizer).run(label_png)

    assert recognizer.release_count == 1


def test_sideways_capture_is_rotated():
    result = LabelScanPipeline(StaticTextRecognizer(""), config=_no_upscale_config()).run(
        encode_png(horizontal_stripes(60, 100))
    )

    assert result.diagnostics.rotation_corrected
    assert result.diagnostics.rotation_degrees == 90
    assert (result.preview_width, result.preview_height) == (60, 100)


def test_upright_capture_is_not_rotated():
    result = LabelScanPipeline(StaticTextRecognizer(""), config=_no_upscale_config()).run(
        encode_png(vertical_stripes(60, 100))
    )

    assert not result.diagnostics.rotation_corrected
    assert (result.preview_width, result.preview_height) == (100, 60)


def test_flat_image_is_reported_blurry():
    flat = np.full((50, 80), 200, dtype=np.uint8)
    result = LabelScanPipeline(StaticTextRecognizer(""), config=_no_upscale_config()).run(encode_png(flat))

    assert result.diagnostics.blur_score == 0.0
    assert result.diagnostics.is_blurry
    assert result.diagnostics.needs_retake
    assert result.diagnostics.strategy == "standard"


def test_truncated_data_url_is_an_image_load_error():
    recognizer = StaticTextRecognizer(LISINOPRIL_LABEL)

    with pytest.raises(ImageLoadError):
        LabelScanPipeline(recognizer).run("data:image/png;base64")

    assert recognizer.acquire_count == 0


def test_data_url_input(label_png):
    data_url = "data:image/png;base64," + base64.b64encode(label_png).decode("utf-8")
    result = LabelScanPipeline(StaticTextRecognizer(LISINOPRIL_LABEL)).run(data_url)

    assert result.medications[0].name == "Lisinopril"


def test_parallel_strategies_pick_the_same_winner(label_png):
    sequential = LabelScanPipeline(StaticTextRecognizer("")).run(label_png)
    parallel_config = AppConfig(pipeline=PipelineConfig(parallel_strategies=True))
    parallel = LabelScanPipeline(StaticTextRecognizer(""), config=parallel_config).run(label_png)

    assert parallel.strategy_scores == sequential.strategy_scores
    assert parallel.diagnostics.strategy == sequential.diagnostics.strategy
    assert parallel.preprocessed == sequential.preprocessed


def test_result_serializes_to_json(label_png):
    result = LabelScanPipeline(StaticTextRecognizer(LISINOPRIL_LABEL)).run(label_png)
    data = json.loads(json.dumps(result.to_dict(include_images=True)))

    assert data["medications"][0]["name"] == "Lisinopril"
    assert "prescriber" not in data["medications"][0]
    assert data["preview_image"].startswith("data:image/png;base64,")
    assert data["highlights"][0][0]["field"] == "name"
    assert data["diagnostics"]["strategy"] == result.diagnostics.strategy


def test_parse_text_skips_imaging():
    pipeline = LabelScanPipeline(StaticTextRecognizer())
    records = pipeline.parse_text("1. Lisinopril 10 mg once daily\n2. Metformin 500 mg twice daily")

    assert [(r.name, r.confidence) for r in records] == [("Lisinopril", 75), ("Metformin", 75)]
    assert pipeline.stage_names == ["preprocessing", "recognition", "parsing"]


def test_pipeline_requires_a_recognizer():
    with pytest.raises(PipelineConfigurationError):
        LabelScanPipeline(recognizer=None)

    with pytest.raises(PipelineConfigurationError):
        PipelineBuilder().build()


def test_builder_and_scan_label(label_png):
    recognizer = StaticTextRecognizer(LISINOPRIL_LABEL)
    config = AppConfig(pipeline=PipelineConfig(attach_preview=False))

    pipeline = PipelineBuilder().with_recognizer(recognizer).with_config(config).build()
    assert pipeline.recognizer is recognizer
    assert pipeline.config is config

    result = scan_label(label_png, recognizer=recognizer, config=config)
    assert result.medications[0].name == "Lisinopril"
    assert recognizer.release_count == 1


def test_scan_context_records_stage_metrics():
    context = ScanContext.create(ImageData.from_bytes(b"\x89PNG"))

    context.start_stage("preprocessing")
    context.finish_stage("preprocessing")
    context.start_stage("recognition")
    context.finish_stage("recognition", succeeded=False)

    assert context.stage_metrics["preprocessing"].succeeded
    assert not context.stage_metrics["recognition"].succeeded
    assert context.get_stage_duration("preprocessing") >= 0.0
    assert context.get_stage_duration("parsing") == 0.0
    assert context.total_duration_ms == pytest.approx(
        context.get_stage_duration("preprocessing") + context.get_stage_duration("recognition")
    )
    assert context.recognized_text == ""
    assert context.to_scan_result().medications == []
