"""
Recognition Adapter

Runs a TextRecognizerPort with an explicit time limit and a guaranteed
release of the engine.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import replace
from typing import Optional
import logging
import time

from ...domain.ports.text_recognizer import TextRecognizerPort
from ...domain.value_objects.pixel_buffer import PixelBuffer
from ...domain.entities.recognition import RecognitionResult
from ...domain.exceptions import RecognitionError, RecognitionTimeoutError, InvalidInputError


class RecognitionAdapter:
    """
    Wraps a recognizer in the acquire -> recognize -> release lifecycle.

    Recognition runs on a dedicated single-worker thread and the caller
    waits at most ``timeout_seconds`` for it. On timeout the engine is
    released and RecognitionTimeoutError is raised; the worker thread is
    abandoned rather than joined. Any other engine failure surfaces as
    RecognitionError. Nothing is retried.

    Usage:
        adapter = RecognitionAdapter(TesseractRecognizer(), timeout_seconds=30)
        result = adapter.recognize(binarized)
    """

    def __init__(
        self,
        recognizer: TextRecognizerPort,
        timeout_seconds: Optional[float] = 30.0
    ):
        """
        Args:
            recognizer: Engine to run
            timeout_seconds: Wait limit; None or 0 waits indefinitely

        Raises:
            InvalidInputError: If timeout_seconds is negative
        """
        if timeout_seconds is not None and timeout_seconds < 0:
            raise InvalidInputError("timeout_seconds", f"must not be negative, got {timeout_seconds}")

        self._recognizer = recognizer
        self._timeout = timeout_seconds if timeout_seconds else None
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def recognizer(self) -> TextRecognizerPort:
        return self._recognizer

    @property
    def engine_name(self) -> str:
        return self._recognizer.engine_name

    def recognize(self, buffer: PixelBuffer) -> RecognitionResult:
        """
        Recognize text in a binarized buffer.

        Raises:
            RecognitionTimeoutError: If the engine exceeds the time limit
            RecognitionError: If the engine cannot be acquired or fails
        """
        engine_name = self._recognizer.engine_name
        start_time = time.time()

        try:
            with self._recognizer.session() as engine:
                result = self._run_with_timeout(engine, buffer)
        except RecognitionError:
            raise
        except Exception as e:
            self.logger.error(f"{engine_name} failed: {e}")
            raise RecognitionError(f"Text recognition failed: {e}", engine_name=engine_name) from e

        if not result.processing_time_ms:
            result = replace(result, processing_time_ms=(time.time() - start_time) * 1000)
        return result

    def _run_with_timeout(self, engine: TextRecognizerPort, buffer: PixelBuffer) -> RecognitionResult:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="recognition")
        try:
            future = executor.submit(engine.recognize, buffer)
            try:
                return future.result(timeout=self._timeout)
            except FuturesTimeoutError:
                if future.done():
                    raise
                self.logger.error(f"{engine.engine_name} timed out after {self._timeout}s")
                raise RecognitionTimeoutError(self._timeout, engine_name=engine.engine_name)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
