"""
Camera Service Interface Module.

First stage of a scan tick: one frame in, tagged with the frame id that
follows it through OCR, parsing and the debug folder.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional
import numpy as np

from core.interfaces.camera_interface import CameraInfo


@dataclass
class CameraFrame:
    """
    One capture attempt.

    ``frameId`` is ``frame_<timestamp>`` with a millisecond timestamp such
    as ``20251218_024810_535``. It is set even when ``success`` is False,
    so failed ticks can still be traced in the logs.
    """
    image: Optional[np.ndarray]
    frameId: str
    timestamp: str
    success: bool
    processingTimeMs: float = 0.0


class ICameraService(ABC):
    """Frame source used by ScanSessionService.captureAndRecognize."""

    @abstractmethod
    def captureFrame(self) -> CameraFrame:
        """Grab the next frame. Never raises; failures come back as ``success=False``."""
        pass

    @abstractmethod
    def getAvailableCameras(self) -> List[CameraInfo]:
        pass

    @abstractmethod
    def openCamera(self, index: int, width: int = 1280, height: int = 720) -> bool:
        """Open source ``index``, closing the current one first."""
        pass

    @abstractmethod
    def closeCamera(self) -> None:
        pass

    @abstractmethod
    def isOpened(self) -> bool:
        pass
