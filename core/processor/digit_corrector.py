"""OCR character-confusion correction for digit fields."""

from core.processor.card_constants import CHAR_TO_DIGIT


def fixDigits(text: str) -> str:
    """
    Replace characters OCR commonly confuses with digits.

    Characters missing from CHAR_TO_DIGIT pass through unchanged.

    Examples:
        fixDigits("O1I") -> "011"
        fixDigits("l2/2S") -> "12/25"
    """
    return ''.join(CHAR_TO_DIGIT.get(c, c) for c in text)
