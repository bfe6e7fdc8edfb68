"""
Card Parser Interface Module.

This module defines the interface and data classes for turning one
frame's OCR detections into structured payment-card fields.
Follows the Interface Segregation Principle (ISP) from SOLID.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from core.interfaces.ocr_extractor_interface import OcrDetection


@dataclass
class ParsedCardFields:
    """
    Card fields extracted from a single frame.

    Also used as the record of locked fields for a scan session.
    A None field means "not found this frame", not "confirmed absent".

    Attributes:
        bankName: Text printed above the card number
        cardNumber: 13-19 digit card number
        expiry: Expiry date formatted as MM/YY
        holderName: Cardholder name (2-3 words)
    """
    bankName: Optional[str] = None
    cardNumber: Optional[str] = None
    expiry: Optional[str] = None
    holderName: Optional[str] = None


@dataclass
class ScannedCard:
    """
    Terminal result of a scan session.

    Attributes:
        cardNumber: Locked card number
        expiryMonth: Two-digit month from the locked expiry
        expiryYear: Two-digit year from the locked expiry
        holderName: Locked cardholder name
        raw: Human-readable summary, lists fields that could not be read
    """
    cardNumber: Optional[str] = None
    expiryMonth: Optional[str] = None
    expiryYear: Optional[str] = None
    holderName: Optional[str] = None
    raw: Optional[str] = None


class ICardParser(ABC):
    """
    Interface for single-frame card field parsing.

    Implementations must be stateless across frames and total:
    any list of detections yields a ParsedCardFields, never an exception.
    """

    @abstractmethod
    def parse(self, detections: List[OcrDetection]) -> ParsedCardFields:
        """
        Extract card fields from one frame's detections.

        Args:
            detections: OCR detections in engine order

        Returns:
            ParsedCardFields with every field found in this frame
        """
        pass
