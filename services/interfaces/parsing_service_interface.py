"""
Parsing Service Interface Module.

Defines the interface for card field parsing (Step 3 of a scan tick).

Follows:
- SRP: Only handles single-frame field extraction
- DIP: Depends on ICardParser abstraction from core layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from core.interfaces.card_parser_interface import ParsedCardFields
from core.interfaces.ocr_extractor_interface import OcrDetection


@dataclass
class ParsingServiceResult:
    """
    Result of the parsing service.

    Attributes:
        fields: Card fields found in this frame.
        frameId: Frame identifier for debug output.
        processingTimeMs: Time taken for parsing.
    """
    fields: ParsedCardFields = field(default_factory=ParsedCardFields)
    frameId: str = ""
    processingTimeMs: float = 0.0


class IParsingService(ABC):
    """Interface for card field parsing (Step 3)."""

    @abstractmethod
    def parse(self, detections: List[OcrDetection], frameId: str) -> ParsingServiceResult:
        """
        Extract card fields from one frame's detections.

        Args:
            detections: OCR detections in engine order.
            frameId: Frame identifier for debug output.

        Returns:
            ParsingServiceResult with the parsed fields.
        """
        pass
