"""
Tesseract Text Recognizer

Recognition engine implementation using Tesseract via pytesseract.
"""

from typing import Dict, Any, List, Tuple
import logging
import shutil
import sys
import time
from pathlib import Path

import numpy as np
import pytesseract
from PIL import Image as PILImage

from ...domain.ports.text_recognizer import TextRecognizerPort
from ...domain.value_objects.pixel_buffer import PixelBuffer
from ...domain.value_objects.bounding_box import BoundingBox
from ...domain.entities.recognition import RecognizedWord, RecognitionResult
from ...domain.exceptions import RecognitionError, RecognitionTimeoutError


logger = logging.getLogger(__name__)

ENGINE_NAME = "Tesseract"


def build_recognition_result(
    data: Dict[str, List[Any]],
    engine: str = ENGINE_NAME,
    processing_time_ms: float = 0.0
) -> RecognitionResult:
    """
    Turn pytesseract ``image_to_data`` DICT output into a RecognitionResult.

    Entries without text or with a negative confidence are structural rows
    (page, block, line) and are skipped. Text is rebuilt line by line:
    words joined by spaces, lines by newlines and paragraphs by a blank
    line, which is the layout the label segmenter relies on.

    Args:
        data: Output of ``pytesseract.image_to_data(..., output_type=DICT)``
        engine: Engine name to record
        processing_time_ms: Time spent in the engine

    Returns:
        RecognitionResult
    """
    words: List[RecognizedWord] = []
    lines: Dict[Tuple[int, int, int], List[str]] = {}

    for i in range(len(data["text"])):
        text = str(data["text"][i]).strip()
        try:
            conf = float(data["conf"][i])
        except (TypeError, ValueError):
            conf = -1.0

        if not text or conf < 0:
            continue

        bbox = BoundingBox.from_xywh(
            int(data["left"][i]),
            int(data["top"][i]),
            int(data["width"][i]),
            int(data["height"][i]),
        )
        words.append(RecognizedWord(text=text, bounding_box=bbox, confidence=conf))

        key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
        lines.setdefault(key, []).append(text)

    paragraphs: List[str] = []
    current_paragraph = None
    current_lines: List[str] = []
    for (block, par, _line), line_words in lines.items():
        if (block, par) != current_paragraph:
            if current_lines:
                paragraphs.append("\n".join(current_lines))
            current_paragraph = (block, par)
            current_lines = []
        current_lines.append(" ".join(line_words))
    if current_lines:
        paragraphs.append("\n".join(current_lines))

    confidence = sum(w.confidence for w in words) / len(words) if words else 0.0

    return RecognitionResult(
        text="\n\n".join(paragraphs),
        confidence=confidence,
        words=tuple(words),
        engine=engine,
        processing_time_ms=processing_time_ms,
    )


WINDOWS_INSTALL_PATHS = (
    r"C:\Program Files\Tesseract-OCR\tesseract.exe",
    r"C:\Program Files (x86)\Tesseract-OCR\tesseract.exe",
)


def locate_tesseract() -> None:
    """
    Point pytesseract at a standard Windows install when the binary is not on PATH.

    Elsewhere, and when ``tesseract`` is already on PATH, this does nothing.
    """
    if sys.platform != "win32" or shutil.which("tesseract"):
        return

    found = next((p for p in WINDOWS_INSTALL_PATHS if Path(p).is_file()), None)
    if found is None:
        logger.warning("tesseract executable not found on PATH or in Program Files")
        return

    pytesseract.pytesseract.tesseract_cmd = found
    logger.info(f"Using tesseract at {found}")


class TesseractRecognizer(TextRecognizerPort):
    """
    Recognition engine backed by the tesseract binary through pytesseract.

    ``acquire`` only checks that the binary runs; every ``recognize`` call
    starts a fresh tesseract process, so there is nothing to free on release.

    Args:
        lang: Language pack(s), e.g. "eng" or "eng+spa"
        config: Extra command-line flags appended after --oem/--psm
        oem: Engine mode passed as --oem
        psm: Page segmentation mode passed as --psm
        timeout: Seconds pytesseract lets one call run, 0 for no limit
    """

    def __init__(
        self,
        lang: str = "eng",
        config: str = "",
        oem: int = 3,
        psm: int = 3,
        timeout: float = 0
    ):
        self.lang = lang
        self.timeout = timeout
        self.flags = " ".join(part for part in (f"--oem {oem}", f"--psm {psm}", config) if part)
        self.version = None
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        locate_tesseract()

    def acquire(self) -> None:
        try:
            self.version = pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            raise RecognitionError(f"Tesseract is not available: {e}", engine_name=ENGINE_NAME)
        self.logger.debug(f"tesseract {self.version} ready ({self.lang}, {self.flags})")

    def _run(self, image: PILImage.Image) -> Dict[str, List[Any]]:
        try:
            return pytesseract.image_to_data(
                image,
                lang=self.lang,
                config=self.flags,
                output_type=pytesseract.Output.DICT,
                timeout=self.timeout
            )
        except pytesseract.TesseractError as e:
            raise RecognitionError(f"Tesseract OCR failed: {e}", engine_name=ENGINE_NAME)
        except RuntimeError as e:
            # pytesseract reports its own timeout as RuntimeError("... timeout")
            if "timeout" not in str(e).lower():
                raise RecognitionError(f"Tesseract OCR failed: {e}", engine_name=ENGINE_NAME)
            raise RecognitionTimeoutError(self.timeout, engine_name=ENGINE_NAME)

    def recognize(self, buffer: PixelBuffer) -> RecognitionResult:
        began = time.perf_counter()
        rgb = np.ascontiguousarray(buffer.pixels[:, :, :3])
        data = self._run(PILImage.fromarray(rgb))
        elapsed_ms = (time.perf_counter() - began) * 1000

        result = build_recognition_result(data, ENGINE_NAME, elapsed_ms)
        self.logger.debug(
            f"{result.word_count} words at mean confidence {result.confidence:.1f} "
            f"in {elapsed_ms:.0f}ms"
        )
        return result

    def release(self) -> None:
        self.version = None

    @property
    def engine_name(self) -> str:
        return ENGINE_NAME
