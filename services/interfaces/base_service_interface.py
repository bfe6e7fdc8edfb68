"""
Shared plumbing for the card scanner services.

Every tick stage (camera, OCR, parsing, session) derives from BaseService,
which gives it a logger named after the stage and a private folder under
the debug root for per-frame artifacts.
"""

from abc import ABC, abstractmethod
from typing import Optional, Any, Dict
from pathlib import Path
import logging
import json
import time


class IBaseService(ABC):
    """Identity and debug switch common to all scanner stages."""

    @abstractmethod
    def getServiceName(self) -> str:
        """Stage name, also used as logger name and debug sub-folder."""
        pass

    @abstractmethod
    def setDebugEnabled(self, enabled: bool) -> None:
        """Turn per-frame debug artifacts on or off."""
        pass

    @abstractmethod
    def isDebugEnabled(self) -> bool:
        pass


class BaseService(IBaseService):
    """
    Default IBaseService implementation.

    Debug artifacts land in ``<debugBasePath>/<serviceName>/`` and are
    named ``[<prefix>_]<frameId>.<ext>``. Writing them never interrupts a
    scan: failures are logged as warnings and the tick carries on.
    """

    def __init__(
        self,
        serviceName: str,
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        self._serviceName = serviceName
        self._debugBasePath = Path(debugBasePath) / serviceName
        self._debugEnabled = debugEnabled
        self._logger = logging.getLogger(serviceName)

        if self._debugEnabled:
            self._ensureDebugDirectory()

    def getServiceName(self) -> str:
        return self._serviceName

    def setDebugEnabled(self, enabled: bool) -> None:
        self._debugEnabled = enabled
        if self._debugEnabled:
            self._ensureDebugDirectory()
        state = "on" if enabled else "off"
        self._logger.info(f"Debug artifacts switched {state}")

    def isDebugEnabled(self) -> bool:
        return self._debugEnabled

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Debug artifacts
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _ensureDebugDirectory(self) -> None:
        self._debugBasePath.mkdir(parents=True, exist_ok=True)

    def _debugFilePath(self, frameId: str, prefix: str, extension: str) -> Path:
        stem = f"{prefix}_{frameId}" if prefix else frameId
        return self._debugBasePath / f"{stem}.{extension}"

    def _saveDebugImage(self, frameId: str, image: Any, prefix: str = "") -> Optional[str]:
        """
        Write a captured or intermediate frame as PNG.

        Returns the written path, or None when debug is off, the image is
        missing or OpenCV could not encode it.
        """
        if not self._debugEnabled or image is None:
            return None

        import cv2

        target = self._debugFilePath(frameId, prefix, "png")
        try:
            if not cv2.imwrite(str(target), image):
                self._logger.warning(f"[{frameId}] OpenCV refused to write {target}")
                return None
        except (cv2.error, OSError) as e:
            self._logger.warning(f"[{frameId}] Debug image not written: {e}")
            return None

        self._logger.debug(f"[{frameId}] Debug image -> {target}")
        return str(target)

    def _saveDebugJson(self, frameId: str, data: Dict, prefix: str = "") -> Optional[str]:
        """Dump a tick payload as pretty JSON next to the frame images."""
        if not self._debugEnabled:
            return None

        target = self._debugFilePath(frameId, prefix, "json")
        try:
            target.write_text(
                json.dumps(data, indent=2, ensure_ascii=False, default=str),
                encoding="utf-8"
            )
        except (OSError, TypeError, ValueError) as e:
            self._logger.warning(f"[{frameId}] Debug JSON not written: {e}")
            return None

        self._logger.debug(f"[{frameId}] Debug JSON -> {target}")
        return str(target)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Timing
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _logTiming(self, frameId: str, processingTimeMs: float) -> None:
        self._logger.debug(f"[{frameId}] {self._serviceName} took {processingTimeMs:.2f}ms")

    def _measureTime(self, startTime: float) -> float:
        """Milliseconds elapsed since ``startTime`` (a time.time() value)."""
        return (time.time() - startTime) * 1000
