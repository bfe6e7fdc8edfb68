"""
OCR Service Interface Module.

Defines the interface for OCR operations (Step 2 of a scan tick).
Responsible for model lifecycle and text extraction.

Follows:
- SRP: Only handles OCR operations
- DIP: Depends on IOcrExtractor abstraction from core layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import numpy as np

from core.interfaces.ocr_extractor_interface import OcrResult


@dataclass
class OcrServiceResult:
    """
    Result of the OCR service.

    Attributes:
        ocrData: OCR extraction result with detections, None on failure.
        frameId: Frame identifier for debug output.
        success: Whether OCR inference ran. An empty result is still a success.
        processingTimeMs: Time taken for OCR.
        errorMessage: Failure description if success is False.
    """
    ocrData: Optional[OcrResult]
    frameId: str
    success: bool
    processingTimeMs: float = 0.0
    errorMessage: str = ""


class IOcrService(ABC):
    """
    Interface for OCR operations (Step 2).

    Exposes a readiness flag and an error slot for the model, and an
    inference operation mapping a frame to OCR detections.
    """

    @abstractmethod
    def loadModel(self) -> bool:
        """
        Load the OCR model. May block for several seconds.

        Returns:
            bool: True if the model is ready.
        """
        pass

    @abstractmethod
    def isReady(self) -> bool:
        """Check if the model is loaded."""
        pass

    @abstractmethod
    def getError(self) -> Optional[str]:
        """Model error message, None if the model is loaded or still loading."""
        pass

    @abstractmethod
    def extractText(self, image: np.ndarray, frameId: str) -> OcrServiceResult:
        """
        Extract text from an image.

        Never raises; inference failures are reported with success=False.

        Args:
            image: Input image (BGR format).
            frameId: Frame identifier for debug output.

        Returns:
            OcrServiceResult: OCR result with detections.
        """
        pass

    @abstractmethod
    def release(self) -> None:
        """Release the model."""
        pass
