"""
S2 OCR Service Implementation.

Second stage of a scan tick: turns a captured card frame into text
detections. The heavy lifting is done by an IOcrExtractor (PaddleOCR
unless another one is injected); this service adds model lifecycle,
per-frame error reporting and the ``ocr_<frameId>.json`` debug dump.
"""

import time
from typing import Optional

import numpy as np

from core.interfaces.ocr_extractor_interface import IOcrExtractor, OcrResult
from core.ocr.paddle_ocr_extractor import PaddleOcrExtractor
from services.interfaces.ocr_service_interface import (
    IOcrService,
    OcrServiceResult
)
from services.interfaces.base_service_interface import BaseService


DISABLED_MESSAGE = "OCR is disabled in configuration"
NOT_READY_MESSAGE = "OCR model is not ready"


class S2OcrService(IOcrService, BaseService):
    """
    Text recognition stage.

    ``loadModel`` blocks for several seconds on first use, so the UI calls
    it from a worker thread. Until it returns, ``isReady`` is False and
    ``getError`` is None, which the session reports as "loading".
    """

    SERVICE_NAME = "s2_ocr"

    def __init__(
        self,
        ocrExtractor: Optional[IOcrExtractor] = None,
        enabled: bool = True,
        lang: str = "en",
        textDetThresh: float = 0.3,
        textDetBoxThresh: float = 0.5,
        textRecScoreThresh: float = 0.5,
        textDetLimitType: str = "max",
        textDetLimitSideLen: int = 960,
        textDetectionModelName: Optional[str] = None,
        textRecognitionModelName: Optional[str] = None,
        cpuThreads: int = 8,
        device: str = "cpu",
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Args:
            ocrExtractor: Recognition backend. When None a PaddleOcrExtractor
                is built from the remaining engine parameters.
            enabled: False makes loadModel fail with a configuration error.
        """
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        if ocrExtractor is None:
            ocrExtractor = PaddleOcrExtractor(
                lang=lang,
                textDetThresh=textDetThresh,
                textDetBoxThresh=textDetBoxThresh,
                textRecScoreThresh=textRecScoreThresh,
                textDetLimitType=textDetLimitType,
                textDetLimitSideLen=textDetLimitSideLen,
                textDetectionModelName=textDetectionModelName,
                textRecognitionModelName=textRecognitionModelName,
                cpuThreads=cpuThreads,
                device=device,
                logger=self._logger
            )
        self._ocrExtractor: IOcrExtractor = ocrExtractor
        self._enabled = enabled
        self._error: Optional[str] = None

        self._logger.info(
            f"Recognition backend: {type(ocrExtractor).__name__} "
            f"({lang}, {device}, enabled={enabled})"
        )

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Model lifecycle
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def loadModel(self) -> bool:
        if not self._enabled:
            self._error = DISABLED_MESSAGE
            self._logger.error(DISABLED_MESSAGE)
            return False

        if self._ocrExtractor.isReady():
            return True

        self._error = None
        startTime = time.time()
        loaded = self._ocrExtractor.load()
        elapsedMs = self._measureTime(startTime)

        if not loaded:
            self._error = self._ocrExtractor.error or "OCR model failed to load"
            self._logger.error(f"Model load gave up after {elapsedMs:.0f}ms: {self._error}")
            return False

        self._logger.info(f"Model loaded in {elapsedMs:.0f}ms")
        return True

    def isReady(self) -> bool:
        return self._enabled and self._ocrExtractor.isReady()

    def getError(self) -> Optional[str]:
        return self._error

    def release(self) -> None:
        self._ocrExtractor.release()
        self._logger.info("Model released")

    def setEnabled(self, enabled: bool) -> None:
        self._enabled = enabled
        self._logger.info(f"Recognition {'enabled' if enabled else 'disabled'}")

    def isEnabled(self) -> bool:
        return self._enabled

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Recognition
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _failure(self, frameId: str, startTime: float, message: str) -> OcrServiceResult:
        return OcrServiceResult(
            ocrData=None,
            frameId=frameId,
            success=False,
            processingTimeMs=self._measureTime(startTime),
            errorMessage=message
        )

    def extractText(self, image: np.ndarray, frameId: str) -> OcrServiceResult:
        """
        Recognize text on one frame.

        An empty detection list is a successful result: the card may
        simply be out of view. Only a missing model, a missing image or a
        backend RuntimeError yield ``success=False``.
        """
        startTime = time.time()

        if not self.isReady():
            self._logger.warning(f"[{frameId}] Skipped, {NOT_READY_MESSAGE}")
            return self._failure(frameId, startTime, NOT_READY_MESSAGE)

        if image is None:
            self._logger.warning(f"[{frameId}] Skipped, no image")
            return self._failure(frameId, startTime, "No image provided")

        try:
            ocrResult = self._ocrExtractor.extract(image)
        except RuntimeError as e:
            self._logger.error(f"[{frameId}] Recognition failed: {e}")
            return self._failure(frameId, startTime, str(e))

        elapsedMs = self._measureTime(startTime)
        self._logger.debug(
            f"[{frameId}] {len(ocrResult.detections)} text region(s): "
            f"{[d.text for d in ocrResult.detections]}"
        )
        self._dumpDetections(frameId, ocrResult)
        self._logTiming(frameId, elapsedMs)

        return OcrServiceResult(
            ocrData=ocrResult,
            frameId=frameId,
            success=True,
            processingTimeMs=elapsedMs
        )

    def _dumpDetections(self, frameId: str, ocrResult: OcrResult) -> None:
        if not self._debugEnabled:
            return
        self._saveDebugJson(frameId, {
            "frameId": frameId,
            "detections": [
                {"text": d.text, "score": d.score, "bbox": d.bbox}
                for d in ocrResult.detections
            ]
        }, "ocr")
