"""
Live card capture through cv2.VideoCapture.

Embossed card digits are small, so the device is asked for HD frames and
its internal queue is shrunk to a single frame: each scan tick sees what
the lens sees now, not what it saw a second ago.
"""

import logging
from typing import List, Tuple, Optional
import numpy as np
import cv2

from core.interfaces.camera_interface import ICameraCapture, CameraInfo


logger = logging.getLogger(__name__)

NO_DEVICE = -1


class OpenCVCamera(ICameraCapture):
    """ICameraCapture backed by a USB or built-in webcam."""

    def __init__(self, maxCameraSearch: int = 2):
        self._device: Optional[cv2.VideoCapture] = None
        self._deviceIndex: int = NO_DEVICE
        self._maxCameraSearch = maxCameraSearch

    def _probe(self, index: int) -> bool:
        device = cv2.VideoCapture(index)
        try:
            return device.isOpened() and device.read()[0]
        finally:
            device.release()

    def listAvailableCameras(self) -> List[CameraInfo]:
        """Indices below maxCameraSearch that open and hand back one frame."""
        found = []
        for index in range(self._maxCameraSearch):
            try:
                usable = self._probe(index)
            except cv2.error as e:
                logger.debug(f"Probe of device {index} raised: {e}")
                usable = False
            if usable:
                found.append(CameraInfo(index=index, name=f"Camera {index}"))

        if found:
            logger.info(f"{len(found)} capture device(s) available for scanning")
        else:
            logger.warning(f"No capture device answered among indices 0..{self._maxCameraSearch - 1}")
        return found

    def open(self, cameraIndex: int, width: int = 1280, height: int = 720) -> bool:
        self.release()

        try:
            device = cv2.VideoCapture(cameraIndex)
        except cv2.error as e:
            logger.error(f"Device {cameraIndex} could not be created: {e}")
            return False

        if not device.isOpened():
            logger.error(f"Device {cameraIndex} did not open")
            device.release()
            return False

        for prop, value in (
            (cv2.CAP_PROP_FRAME_WIDTH, width),
            (cv2.CAP_PROP_FRAME_HEIGHT, height),
            (cv2.CAP_PROP_BUFFERSIZE, 1),
        ):
            device.set(prop, value)

        self._device = device
        self._deviceIndex = cameraIndex
        logger.info(f"Scanning from device {cameraIndex}, requested {width}x{height}")
        return True

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        if not self.isOpened():
            return (False, None)

        try:
            grabbed, frame = self._device.read()
        except cv2.error as e:
            logger.error(f"Frame grab on device {self._deviceIndex} failed: {e}")
            return (False, None)
        return (True, frame) if grabbed else (False, None)

    def release(self) -> None:
        if self._device is None:
            return

        device, index = self._device, self._deviceIndex
        self._device = None
        self._deviceIndex = NO_DEVICE
        try:
            device.release()
        except cv2.error as e:
            logger.error(f"Device {index} did not release cleanly: {e}")
            return
        logger.info(f"Device {index} released")

    def isOpened(self) -> bool:
        return self._device is not None and self._device.isOpened()
