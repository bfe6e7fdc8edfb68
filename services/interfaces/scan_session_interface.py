"""
Scan Session Interface Module.

Defines the scan session contract: status values, the per-tick observer,
and the operations a driver (Qt timers or a headless loop) calls.

Follows:
- ISP: Drivers only see tick/countdown/close operations
- DIP: Session depends on camera, OCR and parsing service abstractions
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from core.interfaces.card_parser_interface import ParsedCardFields, ScannedCard
from core.interfaces.ocr_extractor_interface import OcrDetection


class ScanStatus(Enum):
    """Lifecycle of a scan session."""
    LOADING = "loading"
    SCANNING = "scanning"
    LOCKED = "locked"
    TIMED_OUT = "timed_out"
    MODEL_ERROR = "model_error"
    CLOSED = "closed"


# Statuses after which no tick may change the session
TERMINAL_STATUSES = frozenset({
    ScanStatus.LOCKED,
    ScanStatus.TIMED_OUT,
    ScanStatus.MODEL_ERROR,
    ScanStatus.CLOSED,
})


@dataclass
class CapturedDetections:
    """
    Output of the capture + OCR half of a tick.

    Attributes:
        frameId: Frame identifier from the camera service.
        detections: OCR detections for the frame (may be empty).
        captureMs: Capture time in milliseconds.
        ocrMs: OCR time in milliseconds.
    """
    frameId: str
    detections: List[OcrDetection] = field(default_factory=list)
    captureMs: float = 0.0
    ocrMs: float = 0.0


class IScanObserver(ABC):
    """
    Observer notified synchronously after every applied tick.

    Useful for live debug displays of what the scanner currently reads.
    """

    @abstractmethod
    def onDisplayFields(self, fields: ParsedCardFields, summary: str) -> None:
        """
        Receive the fields to display after a tick.

        Args:
            fields: Locked values, or this frame's values where not locked yet.
            summary: Four-line text rendering of the fields.
        """
        pass


class CallbackScanObserver(IScanObserver):
    """Adapts a plain text callback to IScanObserver."""

    def __init__(self, onOcrText: Callable[[str], None]):
        self._onOcrText = onOcrText

    def onDisplayFields(self, fields: ParsedCardFields, summary: str) -> None:
        self._onOcrText(summary)


class IScanSession(ABC):
    """
    Interface for one card scan session.

    A tick is split in three so that the capture + OCR half can run on a
    worker thread while accumulation stays on the driver's thread:
    startCycle() -> captureAndRecognize() -> applyDetections().
    """

    @property
    @abstractmethod
    def status(self) -> ScanStatus:
        """Current session status."""
        pass

    @abstractmethod
    def startCycle(self) -> bool:
        """
        Claim the single in-flight slot for a new tick.

        Returns:
            bool: False if finished, not ready, or a tick is already in flight.
        """
        pass

    @abstractmethod
    def captureAndRecognize(self) -> Optional[CapturedDetections]:
        """
        Capture a frame and run OCR on it.

        Returns:
            CapturedDetections, or None on capture or inference failure.
        """
        pass

    @abstractmethod
    def applyDetections(self, captured: Optional[CapturedDetections]) -> Optional[ScannedCard]:
        """
        Finish a tick: parse, accumulate and check for completion.

        Returns:
            ScannedCard if this tick finished the session, None otherwise.
        """
        pass

    @abstractmethod
    def runTick(self) -> Optional[ScannedCard]:
        """Run a whole tick synchronously."""
        pass

    @abstractmethod
    def countdownTick(self) -> Optional[ScannedCard]:
        """
        Advance the countdown by one second.

        Returns:
            ScannedCard if the session timed out on this tick, None otherwise.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop the session and release the camera and OCR collaborators."""
        pass
