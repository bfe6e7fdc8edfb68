"""Card field processor module."""

from core.processor.digit_corrector import fixDigits
from core.processor.card_field_parser import CardFieldParser, parseCardFromDetections

__all__ = ['fixDigits', 'CardFieldParser', 'parseCardFromDetections']
