"""
Tests for recognizers and the recognition adapter.
"""

import numpy as np
import pytest
import pytesseract

from rxlabel.config.settings import OCRConfig
from rxlabel.domain.value_objects.pixel_buffer import PixelBuffer
from rxlabel.domain.exceptions import RecognitionError, RecognitionTimeoutError, InvalidInputError
from rxlabel.infrastructure.ocr import (
    TesseractRecognizer,
    StaticTextRecognizer,
    RecognitionAdapter,
    RecognizerFactory,
    RecognizerType,
    build_recognition_result,
)


def _blank_buffer():
    return PixelBuffer.from_array(np.full((20, 40), 255, dtype=np.uint8))


def _tesseract_data():
    # page, block, paragraph, line rows carry no text and conf -1
    rows = [
        # text, conf, block, par, line, left
        ("", -1, 0, 0, 0, 0),
        ("", -1, 1, 0, 0, 0),
        ("", -1, 1, 1, 0, 0),
        ("", -1, 1, 1, 1, 0),
        ("Lisinopril", 90, 1, 1, 1, 10),
        ("10mg", 80, 1, 1, 1, 120),
        ("", -1, 1, 1, 2, 0),
        ("Take", 70, 1, 1, 2, 10),
        ("daily", 60, 1, 1, 2, 60),
        (" ", 95, 1, 1, 2, 90),
        ("", -1, 1, 2, 0, 0),
        ("Qty:", 50, 1, 2, 1, 10),
        ("30", 40, 1, 2, 1, 60),
    ]
    return {
        "text": [r[0] for r in rows],
        "conf": [r[1] for r in rows],
        "block_num": [r[2] for r in rows],
        "par_num": [r[3] for r in rows],
        "line_num": [r[4] for r in rows],
        "left": [r[5] for r in rows],
        "top": [20] * len(rows),
        "width": [30] * len(rows),
        "height": [10] * len(rows),
    }


def test_build_recognition_result_rebuilds_lines_and_paragraphs():
    result = build_recognition_result(_tesseract_data())

    assert result.text == "Lisinopril 10mg\nTake daily\n\nQty: 30"
    assert [w.text for w in result.words] == ["Lisinopril", "10mg", "Take", "daily", "Qty:", "30"]
    assert result.confidence == pytest.approx(65.0)
    assert result.words[0].bounding_box.to_xyxy() == (10, 20, 40, 30)
    assert result.engine == "Tesseract"


def test_build_recognition_result_with_no_words():
    result = build_recognition_result({
        "text": [""], "conf": [-1], "block_num": [0], "par_num": [0], "line_num": [0],
        "left": [0], "top": [0], "width": [10], "height": [10],
    })

    assert result.text == ""
    assert result.confidence == 0.0
    assert not result.has_text


def test_tesseract_acquire_fails_without_binary(monkeypatch):
    def missing():
        raise pytesseract.TesseractNotFoundError()

    monkeypatch.setattr(pytesseract, "get_tesseract_version", missing)

    with pytest.raises(RecognitionError):
        TesseractRecognizer().acquire()


def test_tesseract_recognize_passes_configuration(monkeypatch):
    calls = {}

    def fake_image_to_data(image, lang, config, output_type, timeout):
        calls.update(lang=lang, config=config, size=image.size, timeout=timeout)
        return _tesseract_data()

    monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)

    recognizer = TesseractRecognizer(lang="eng", psm=6, timeout=5)
    result = recognizer.recognize(_blank_buffer())

    assert calls["lang"] == "eng"
    assert "--psm 6" in calls["config"]
    assert "--oem 3" in calls["config"]
    assert calls["size"] == (40, 20)
    assert calls["timeout"] == 5
    assert result.word_count == 6


def test_tesseract_timeout_becomes_recognition_timeout(monkeypatch):
    def slow(*args, **kwargs):
        raise RuntimeError("Tesseract process timeout")

    monkeypatch.setattr(pytesseract, "image_to_data", slow)

    with pytest.raises(RecognitionTimeoutError):
        TesseractRecognizer(timeout=1).recognize(_blank_buffer())


def test_session_acquires_and_releases():
    recognizer = StaticTextRecognizer("hello")
    with recognizer.session() as engine:
        assert engine.is_active
        engine.recognize(_blank_buffer())

    assert recognizer.acquire_count == 1
    assert recognizer.release_count == 1


def test_static_recognizer_lays_out_words():
    recognizer = StaticTextRecognizer("Take 1\ntablet")
    result = recognizer.recognize(_blank_buffer())

    assert [w.text for w in result.words] == ["Take", "1", "tablet"]
    assert result.words[1].bounding_box.x0 == 50
    assert result.words[2].bounding_box.y0 == 20


def test_adapter_returns_result_and_releases():
    recognizer = StaticTextRecognizer("Lisinopril 10mg")
    result = RecognitionAdapter(recognizer, timeout_seconds=5).recognize(_blank_buffer())

    assert result.text == "Lisinopril 10mg"
    assert recognizer.acquire_count == 1
    assert recognizer.release_count == 1


def test_adapter_wraps_engine_failure():
    recognizer = StaticTextRecognizer("x", error=ValueError("engine crashed"))

    with pytest.raises(RecognitionError) as exc_info:
        RecognitionAdapter(recognizer).recognize(_blank_buffer())

    assert "engine crashed" in str(exc_info.value)
    assert exc_info.value.details["engine"] == "Static"
    assert recognizer.release_count == 1


def test_adapter_passes_recognition_errors_through():
    error = RecognitionError("engine down", engine_name="Static")
    recognizer = StaticTextRecognizer("x", error=error)

    with pytest.raises(RecognitionError) as exc_info:
        RecognitionAdapter(recognizer).recognize(_blank_buffer())

    assert exc_info.value is error


def test_adapter_times_out_and_still_releases():
    recognizer = StaticTextRecognizer("late", delay_seconds=1.0)

    with pytest.raises(RecognitionTimeoutError) as exc_info:
        RecognitionAdapter(recognizer, timeout_seconds=0.05).recognize(_blank_buffer())

    assert isinstance(exc_info.value, RecognitionError)
    assert exc_info.value.details["timeout_seconds"] == 0.05
    assert recognizer.release_count == 1


def test_adapter_rejects_negative_timeout():
    with pytest.raises(InvalidInputError) as exc_info:
        RecognitionAdapter(StaticTextRecognizer("x"), timeout_seconds=-1)

    assert exc_info.value.details["field"] == "timeout_seconds"


def test_factory_creates_recognizers():
    assert isinstance(RecognizerFactory.create(RecognizerType.STATIC, preset_text="x"), StaticTextRecognizer)
    assert isinstance(RecognizerFactory.create(RecognizerType.TESSERACT), TesseractRecognizer)


def test_factory_from_config():
    recognizer = RecognizerFactory.create_from_config(OCRConfig(type="static"))
    assert isinstance(recognizer, StaticTextRecognizer)

    with pytest.raises(ValueError):
        RecognizerFactory.create_from_config(OCRConfig(type="paddle"))


def test_factory_forwards_timeout_to_tesseract():
    recognizer = RecognizerFactory.create_from_config(OCRConfig(type="tesseract", timeout_seconds=5))

    assert isinstance(recognizer, TesseractRecognizer)
    assert recognizer.timeout == 5
