"""
Capture backend contract.

Two backends exist: OpenCVCamera for a live webcam and ImageFolderCamera
for replaying stored card photos. S1CameraService only sees this ABC.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Tuple, Optional
import numpy as np


@dataclass
class CameraInfo:
    """Selectable source, shown by name in device lists."""
    index: int
    name: str

    def __str__(self) -> str:
        return self.name


class ICameraCapture(ABC):
    """Raw frame source. Implementations log their own errors and never raise."""

    @abstractmethod
    def listAvailableCameras(self) -> List[CameraInfo]:
        pass

    @abstractmethod
    def open(self, cameraIndex: int, width: int = 1280, height: int = 720) -> bool:
        """
        Start delivering frames from ``cameraIndex``.

        ``width`` and ``height`` are requests; a backend may ignore them.
        """
        pass

    @abstractmethod
    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """``(True, bgrFrame)`` on success, ``(False, None)`` otherwise."""
        pass

    @abstractmethod
    def release(self) -> None:
        pass

    @abstractmethod
    def isOpened(self) -> bool:
        pass
