"""
S1 Camera Service Implementation.

First stage of a scan tick. Pulls one frame from the capture source and
stamps it with a frame id that tags every log line and debug artifact
produced for that frame further down the tick.
"""

import time
from datetime import datetime
from typing import List, Optional, Tuple

from core.interfaces.camera_interface import ICameraCapture, CameraInfo
from core.camera.opencv_camera import OpenCVCamera
from services.interfaces.camera_service_interface import (
    ICameraService,
    CameraFrame
)
from services.interfaces.base_service_interface import BaseService


class S1CameraService(ICameraService, BaseService):
    """
    Frame source for the scan session.

    The capture backend is injected: a live OpenCVCamera when nothing is
    given, an ImageFolderCamera when replaying stored card photos.
    """

    SERVICE_NAME = "s1_camera"

    def __init__(
        self,
        cameraCapture: Optional[ICameraCapture] = None,
        frameWidth: int = 1280,
        frameHeight: int = 720,
        maxCameraSearch: int = 2,
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        if cameraCapture is None:
            cameraCapture = OpenCVCamera(maxCameraSearch=maxCameraSearch)
        self._cameraCapture: ICameraCapture = cameraCapture
        self._frameSize = (frameWidth, frameHeight)
        self._currentCameraIndex: Optional[int] = None

        self._logger.info(
            f"Frame source: {type(cameraCapture).__name__}, "
            f"default size {frameWidth}x{frameHeight}"
        )

    @staticmethod
    def _newFrameId() -> Tuple[str, str]:
        """Millisecond timestamp and the ``frame_<timestamp>`` id built from it."""
        now = datetime.now()
        stamp = f"{now:%Y%m%d_%H%M%S}_{now.microsecond // 1000:03d}"
        return stamp, f"frame_{stamp}"

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Capture
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def captureFrame(self) -> CameraFrame:
        startTime = time.time()
        timestamp, frameId = self._newFrameId()

        frame = None
        if not self.isOpened():
            self._logger.warning(f"[{frameId}] Capture requested with no source open")
        else:
            grabbed, frame = self._cameraCapture.read()
            if not grabbed:
                frame = None
            if frame is None:
                self._logger.warning(f"[{frameId}] Source returned no frame")

        elapsedMs = self._measureTime(startTime)
        if frame is not None:
            self._saveDebugImage(frameId, frame)
            self._logTiming(frameId, elapsedMs)

        return CameraFrame(
            image=frame,
            frameId=frameId,
            timestamp=timestamp,
            success=frame is not None,
            processingTimeMs=elapsedMs
        )

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Device management
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getAvailableCameras(self) -> List[CameraInfo]:
        cameras = self._cameraCapture.listAvailableCameras()
        self._logger.info(f"{len(cameras)} source(s) can be scanned from")
        return cameras

    def openCamera(self, index: int, width: int = 1280, height: int = 720) -> bool:
        """Switch to source ``index``, closing whatever was open before."""
        self.closeCamera()

        if not self._cameraCapture.open(index, width, height):
            self._logger.error(f"Source {index} unavailable")
            return False

        self._currentCameraIndex = index
        self._frameSize = (width, height)
        self._logger.info(f"Source {index} ready at {width}x{height}")
        return True

    def closeCamera(self) -> None:
        if self._currentCameraIndex is None:
            return
        self._cameraCapture.release()
        self._logger.info(f"Source {self._currentCameraIndex} closed")
        self._currentCameraIndex = None

    def isOpened(self) -> bool:
        return self._currentCameraIndex is not None and self._cameraCapture.isOpened()

    def getCurrentCameraIndex(self) -> Optional[int]:
        return self._currentCameraIndex
