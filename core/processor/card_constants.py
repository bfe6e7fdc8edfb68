"""
Card Scanner Constants.

Shared lookup tables and session defaults for card field extraction.
"""

# Session defaults
DEFAULT_TIMEOUT = 120          # seconds
DEFAULT_SCAN_INTERVAL = 1000   # milliseconds
DEFAULT_REQUIRED_TICKS = 2

# Card number length range (ISO/IEC 7812 PAN)
CARD_NUMBER_MIN_LENGTH = 13
CARD_NUMBER_MAX_LENGTH = 19

# Detections whose top-left y differ by less than this are on the same line
DEFAULT_SAME_LINE_TOLERANCE = 30

# Positional fallback when a detection has no usable bbox
FALLBACK_X_STEP = 1000

# OCR characters that are commonly confused with digits
CHAR_TO_DIGIT = {
    'O': '0', 'o': '0', 'D': '0',
    'I': '1', 'l': '1', 'i': '1', '|': '1',
    'Z': '2', 'z': '2',
    'E': '3', 'B': '8',
    'A': '4', 'a': '4', 'U': '4', 'u': '4',
    'S': '5', 's': '5',
    'G': '6', 'b': '6', 'L': '6',
    'T': '1', 't': '1',
    'g': '9', 'q': '9',
}

# Words printed on cards that are never part of a holder name.
# Matched as substrings of lowercased words.
BANNED_WORDS = frozenset([
    # English
    'card', 'holder', 'cardholder', 'expires', 'expiry', 'expiration',
    'valid', 'thru', 'through', 'from', 'member', 'since', 'date', 'last',
    'visa', 'mastercard', 'amex', 'american', 'express', 'discover',
    'maestro', 'debit', 'credit', 'platinum', 'gold', 'classic', 'signature',
    'bank', 'international', 'electronic', 'use', 'only', 'month', 'year',
    'number', 'name', 'first', 'middle', 'security', 'code', 'cvv', 'cvc', 'exp', 'pin',
    'issued', 'customer', 'account', 'prepaid', 'business', 'corporate',
    'world', 'elite', 'premium', 'rewards', 'contactless', 'chip',
    # Spanish
    'tarjeta', 'titular', 'vencimiento', 'vence', 'valida', 'valido',
    'desde', 'miembro', 'nombre', 'fecha', 'debito', 'credito',
    'habiente', 'tarjetahabiente', 'segundo', 'apellido', 'primer',
    'numero', 'cliente', 'cuenta', 'emision', 'banco', 'sucursal',
])
