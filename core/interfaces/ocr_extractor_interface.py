"""
OCR Extractor Interface Module.

This module defines the interface and data classes for OCR text extraction.
Follows the Interface Segregation Principle (ISP) from SOLID.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Any, Optional
import numpy as np


@dataclass(frozen=True)
class OcrDetection:
    """
    A single text region recognized by OCR.

    Attributes:
        text: Recognized text content
        score: OCR confidence score (0-1), passed through untouched
        bbox: Region polygon as list of corner points [[x,y], ...],
              first point is the top-left corner. May be None.
    """
    text: str
    score: float = 0.0
    bbox: Optional[List[List[float]]] = None


@dataclass
class OcrResult:
    """
    Result of OCR extraction.

    Attributes:
        detections: List of recognized text regions, in engine order
        rawResult: Raw result from OCR engine for debugging
    """
    detections: List[OcrDetection] = field(default_factory=list)
    rawResult: Any = None


class IOcrExtractor(ABC):
    """
    Interface for OCR text extractor.

    Implementations expose a readiness flag and an error slot so that
    callers can tell "still loading" apart from "failed to load".
    """

    @abstractmethod
    def load(self) -> bool:
        """
        Load the OCR model.

        Returns:
            True if the model is ready, False if loading failed
            (the reason is available from error).
        """
        pass

    @abstractmethod
    def isReady(self) -> bool:
        """Check if the model is loaded and can run inference."""
        pass

    @property
    @abstractmethod
    def error(self) -> Optional[str]:
        """Error message if model loading failed, None otherwise."""
        pass

    @abstractmethod
    def extract(self, image: np.ndarray) -> OcrResult:
        """
        Extract text from an image using OCR.

        Args:
            image: Input image for OCR processing

        Returns:
            OcrResult with list of detections

        Raises:
            RuntimeError: If inference fails
        """
        pass

    @abstractmethod
    def release(self) -> None:
        """Release the model and free resources."""
        pass
