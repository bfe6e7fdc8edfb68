"""
Image Folder Camera Implementation

Implements ICameraCapture by replaying card photos from disk.
Used for headless scanning and for reproducing scans without a camera.
"""

import logging
from pathlib import Path
from typing import List, Tuple, Optional, Sequence, Union
import numpy as np
import cv2

from core.interfaces.camera_interface import ICameraCapture, CameraInfo


logger = logging.getLogger(__name__)


SUPPORTED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.webp'}


class ImageFolderCamera(ICameraCapture):
    """
    Frame source that reads image files in name order.

    Each read() returns the next image. With loop enabled the sequence
    restarts after the last file, which mimics a camera pointed at the
    same card for the whole session.
    """

    def __init__(
        self,
        source: Union[str, Path, Sequence[Union[str, Path]]],
        loop: bool = True
    ):
        """
        Initialize ImageFolderCamera.

        Args:
            source: Directory of images, or an explicit list of image paths.
            loop: Restart from the first image after the last one.
        """
        self._source = source
        self._loop = loop
        self._paths: List[Path] = []
        self._position = 0
        self._opened = False

    def _collectPaths(self) -> List[Path]:
        """Resolve the source into a sorted list of image files."""
        if isinstance(self._source, (str, Path)):
            folder = Path(self._source)
            if not folder.is_dir():
                logger.error(f"Image folder not found: {folder}")
                return []
            return sorted(
                p for p in folder.iterdir()
                if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
            )
        return [Path(p) for p in self._source]

    def listAvailableCameras(self) -> List[CameraInfo]:
        """The folder is exposed as a single device at index 0."""
        name = str(self._source) if isinstance(self._source, (str, Path)) else "Image list"
        return [CameraInfo(index=0, name=name)]

    def open(self, cameraIndex: int = 0, width: int = 1280, height: int = 720) -> bool:
        """Load the image list. Frame size arguments are ignored."""
        self._paths = self._collectPaths()
        self._position = 0
        self._opened = bool(self._paths)

        if self._opened:
            logger.info(f"Image source opened with {len(self._paths)} image(s)")
        else:
            logger.error("Image source has no images")
        return self._opened

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """Read the next image."""
        if not self._opened:
            return (False, None)

        if self._position >= len(self._paths):
            if not self._loop:
                return (False, None)
            self._position = 0

        path = self._paths[self._position]
        self._position += 1

        frame = cv2.imread(str(path))
        if frame is None:
            logger.warning(f"Failed to read image: {path}")
            return (False, None)

        logger.debug(f"Replaying image: {path.name}")
        return (True, frame)

    @property
    def isExhausted(self) -> bool:
        """True when a non-looping source has returned every image."""
        return not self._loop and self._position >= len(self._paths)

    def release(self) -> None:
        """Forget the image list."""
        if self._opened:
            logger.info("Image source released")
        self._opened = False
        self._paths = []
        self._position = 0

    def isOpened(self) -> bool:
        """Check if the image list is loaded."""
        return self._opened
