"""Shared fixtures: fake camera / OCR collaborators and detection builders."""

from __future__ import annotations

import os
import sys
from typing import List, Optional

import numpy as np
import pytest

# Ensure the project root is on the path
TESTS_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_DIR = os.path.dirname(TESTS_DIR)
if PROJECT_DIR not in sys.path:
    sys.path.insert(0, PROJECT_DIR)

from core.interfaces.camera_interface import CameraInfo
from core.interfaces.ocr_extractor_interface import IOcrExtractor, OcrDetection, OcrResult
from services.interfaces.camera_service_interface import CameraFrame, ICameraService
from services.interfaces.ocr_service_interface import IOcrService, OcrServiceResult


# ── Detection builders ────────────────────────────────────────────


def det(text: str, x: float = 0, y: float = 0, w: float = 100, h: float = 20) -> OcrDetection:
    """Detection with a rectangular polygon whose top-left corner is (x, y)."""
    return OcrDetection(
        text=text,
        score=0.9,
        bbox=[[x, y], [x + w, y], [x + w, y + h], [x, y + h]],
    )


def fullCardFrame() -> List[OcrDetection]:
    """A clean read of a card: bank, number, expiry and holder on separate lines."""
    return [
        det("CHASE", 40, 20),
        det("4111 1111 1111 1111", 40, 120, w=400),
        det("12/25", 200, 180),
        det("JOHN SMITH", 40, 230, w=200),
    ]


# ── Fake collaborators ────────────────────────────────────────────


class FakeCameraService(ICameraService):
    """Camera service returning a blank frame, or failing on demand."""

    def __init__(self) -> None:
        self.fail = False
        self.captureCount = 0
        self.closeCount = 0
        self._opened = True

    def captureFrame(self) -> CameraFrame:
        self.captureCount += 1
        frameId = f"frame_test_{self.captureCount:03d}"
        if self.fail or not self._opened:
            return CameraFrame(image=None, frameId=frameId, timestamp="", success=False)
        return CameraFrame(
            image=np.zeros((8, 8, 3), dtype=np.uint8),
            frameId=frameId,
            timestamp="",
            success=True,
            processingTimeMs=1.0,
        )

    def getAvailableCameras(self) -> List[CameraInfo]:
        return [CameraInfo(index=0, name="Fake camera")]

    def openCamera(self, index: int, width: int = 1280, height: int = 720) -> bool:
        self._opened = True
        return True

    def closeCamera(self) -> None:
        self.closeCount += 1
        self._opened = False

    def isOpened(self) -> bool:
        return self._opened


class FakeOcrService(IOcrService):
    """
    OCR service replaying scripted frames of detections.

    Each extractText() call returns the next frame; the last frame repeats.
    """

    def __init__(self, frames: Optional[List[List[OcrDetection]]] = None, ready: bool = True) -> None:
        self.frames = frames if frames is not None else [fullCardFrame()]
        self.ready = ready
        self.error: Optional[str] = None
        self.fail = False
        self.callCount = 0
        self.releaseCount = 0

    def loadModel(self) -> bool:
        if self.error:
            return False
        self.ready = True
        return True

    def isReady(self) -> bool:
        return self.ready

    def getError(self) -> Optional[str]:
        return self.error

    def extractText(self, image: np.ndarray, frameId: str) -> OcrServiceResult:
        self.callCount += 1
        if self.fail:
            return OcrServiceResult(
                ocrData=None, frameId=frameId, success=False, errorMessage="inference failed"
            )
        frame = self.frames[min(self.callCount - 1, len(self.frames) - 1)]
        return OcrServiceResult(
            ocrData=OcrResult(detections=list(frame)),
            frameId=frameId,
            success=True,
            processingTimeMs=5.0,
        )

    def release(self) -> None:
        self.releaseCount += 1
        self.ready = False


class FakeOcrExtractor(IOcrExtractor):
    """Extractor returning the same detections for every image."""

    def __init__(self, detections: Optional[List[OcrDetection]] = None, loadError: Optional[str] = None) -> None:
        self.detections = detections if detections is not None else fullCardFrame()
        self.loadError = loadError
        self.raiseOnExtract = False
        self._ready = False

    def load(self) -> bool:
        self._ready = self.loadError is None
        return self._ready

    def isReady(self) -> bool:
        return self._ready

    @property
    def error(self) -> Optional[str]:
        return self.loadError

    def extract(self, image: np.ndarray) -> OcrResult:
        if not self._ready:
            raise RuntimeError("not loaded")
        if self.raiseOnExtract:
            raise RuntimeError("inference exploded")
        return OcrResult(detections=list(self.detections))

    def release(self) -> None:
        self._ready = False


# ── Fixtures ──────────────────────────────────────────────────────


@pytest.fixture
def cameraService() -> FakeCameraService:
    return FakeCameraService()


@pytest.fixture
def ocrService() -> FakeOcrService:
    return FakeOcrService()
