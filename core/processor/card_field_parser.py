"""
Card Field Parser Implementation.

This module turns one frame of OCR detections into card fields by:
1. Finding the card number (single detection, then same-line reassembly)
2. Taking text above the card number line as the bank name
3. Collecting expiry candidates below the card number line
4. Picking the first 2-3 word line free of banned words as the holder name

Follows the Single Responsibility Principle (SRP) from SOLID.
"""

import re
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from core.interfaces.card_parser_interface import ICardParser, ParsedCardFields
from core.interfaces.ocr_extractor_interface import OcrDetection
from core.processor.card_constants import (
    BANNED_WORDS,
    CARD_NUMBER_MAX_LENGTH,
    CARD_NUMBER_MIN_LENGTH,
    DEFAULT_SAME_LINE_TOLERANCE,
    FALLBACK_X_STEP,
)
from core.processor.digit_corrector import fixDigits


@dataclass(frozen=True)
class _TextLine:
    """A trimmed, non-empty detection and its position in the normalized list."""
    index: int
    text: str
    bbox: Optional[Sequence]


@dataclass(frozen=True)
class _DigitCandidate:
    """A detection carrying at least a few digits, used for same-line reassembly."""
    index: int
    digits: str
    x: float
    y: float


@dataclass(frozen=True)
class _ExpiryCandidate:
    """Digits found around a date separator."""
    before: str
    after: str
    yearValue: int


class CardFieldParser(ICardParser):
    """
    Extracts payment-card fields from a single frame of OCR detections.

    Stateless across frames. The card number line is used as an anchor:
    detections above it are bank name candidates, detections below it
    are expiry and holder name candidates.
    """

    NON_DIGIT_PATTERN = re.compile(r'[^0-9]')

    # Separators dropped before keeping digits for same-line reassembly
    CANDIDATE_SEPARATOR_PATTERN = re.compile(r'[\s\-/]')

    NON_ALPHA_PATTERN = re.compile(r'[^a-zA-Z]')
    NON_NAME_PATTERN = re.compile(r'[^a-zA-Z\s]')

    # Generic date pattern: "1/25", "01-2025", "12 / 26"
    EXPIRY_PATTERN = re.compile(r'([0-9]{1,2})\s?[/\-]\s?([0-9]{2,4})')

    # Characters taken on each side of a "/" when reading an expiry date
    EXPIRY_WINDOW = 4

    MIN_CANDIDATE_DIGITS = 3
    MIN_BANK_ALPHA = 2
    MIN_HOLDER_LENGTH = 3
    MIN_HOLDER_WORD_LENGTH = 2
    HOLDER_WORD_RANGE = (2, 3)

    def __init__(
        self,
        sameLineTolerance: float = DEFAULT_SAME_LINE_TOLERANCE,
        bannedWords: Optional[Iterable[str]] = None,
        bannedWordsJsonPath: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize CardFieldParser.

        Args:
            sameLineTolerance: Max top-left y difference for two detections
                to be treated as one text line
            bannedWords: Words never accepted inside a holder name
                (default: BANNED_WORDS)
            bannedWordsJsonPath: Optional JSON file with extra banned words
            logger: Logger instance for debug output

        Raises:
            ValueError: If sameLineTolerance is not positive
        """
        if sameLineTolerance <= 0:
            raise ValueError(f"sameLineTolerance must be positive, got {sameLineTolerance}")

        self._logger = logger or logging.getLogger(__name__)
        self._sameLineTolerance = sameLineTolerance

        words = BANNED_WORDS if bannedWords is None else bannedWords
        self._bannedWords = {w.strip().lower() for w in words if w and w.strip()}

        if bannedWordsJsonPath:
            self._loadBannedWords(bannedWordsJsonPath)

        # Sorted for deterministic iteration
        self._bannedList = sorted(self._bannedWords)

        self._logger.debug(
            f"CardFieldParser initialized with {len(self._bannedList)} banned words, "
            f"sameLineTolerance={sameLineTolerance}"
        )

    def _loadBannedWords(self, jsonPath: str) -> None:
        """Load extra banned words from JSON file (list of strings or {"word": ...} objects)."""
        try:
            path = Path(jsonPath)
            if not path.exists():
                self._logger.warning(f"Banned words file not found: {jsonPath}")
                return
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            loaded = 0
            for item in data:
                word = item.get('word', '') if isinstance(item, dict) else item
                word = str(word).strip().lower()
                if word:
                    self._bannedWords.add(word)
                    loaded += 1
            self._logger.debug(f"Loaded {loaded} banned words from {jsonPath}")
        except Exception as e:
            self._logger.warning(f"Failed to load banned words from {jsonPath}: {e}")

    @property
    def bannedWords(self) -> frozenset:
        """Banned words in effect for holder name filtering."""
        return frozenset(self._bannedWords)

    def parse(self, detections: List[OcrDetection]) -> ParsedCardFields:
        """
        Extract card fields from one frame's detections.

        Args:
            detections: OCR detections in engine order (not spatially sorted)

        Returns:
            ParsedCardFields with every field found in this frame
        """
        result = ParsedCardFields()
        lines = self._normalize(detections)

        # PHASE 1: Card number from a single detection
        anchorIndex, cardNumber = self._findSingleDetectionNumber(lines)

        # PHASE 2: Card number split across detections on one line
        if cardNumber is None:
            anchorIndex, cardNumber = self._findMultiDetectionNumber(lines)

        if cardNumber is None:
            self._logger.debug("Card number not found - skipping other fields")
            return result

        result.cardNumber = cardNumber

        # PHASE 3: Bank name from the lines above the card number
        if anchorIndex > 0:
            result.bankName = self._extractBankName(lines[:anchorIndex])

        # PHASE 4: Expiry and holder name from the lines below
        candidates: List[_ExpiryCandidate] = []
        for line in lines[anchorIndex + 1:]:
            candidate = self._extractExpiryCandidate(line.text)
            if candidate is not None:
                candidates.append(candidate)
                continue

            if result.holderName is None:
                result.holderName = self._extractHolderName(line.text)

        # PHASE 5: Latest year wins, first seen on ties
        if candidates:
            best = max(candidates, key=lambda c: c.yearValue)
            result.expiry = f"{best.before}/{best.after}"

        self._logger.debug(
            f"Parsed card fields: bank={result.bankName}, number={result.cardNumber}, "
            f"expiry={result.expiry}, holder={result.holderName}"
        )
        return result

    def _normalize(self, detections: Sequence[OcrDetection]) -> List[_TextLine]:
        """Trim detection texts and drop empty ones."""
        lines = []
        for detection in detections or []:
            text = (detection.text or '').strip()
            if text:
                lines.append(_TextLine(index=len(lines), text=text, bbox=detection.bbox))
        return lines

    def _findSingleDetectionNumber(self, lines: List[_TextLine]) -> Tuple[int, Optional[str]]:
        """
        Find the first detection holding a whole card number.

        Returns:
            Tuple of (anchor index, card number), (-1, None) if not found
        """
        for line in lines:
            digits = self.NON_DIGIT_PATTERN.sub('', line.text)
            if CARD_NUMBER_MIN_LENGTH <= len(digits) <= CARD_NUMBER_MAX_LENGTH:
                self._logger.debug(f"[Card Number] Single detection at index {line.index}: {digits}")
                return (line.index, digits)
        return (-1, None)

    def _findMultiDetectionNumber(self, lines: List[_TextLine]) -> Tuple[int, Optional[str]]:
        """
        Reassemble a card number printed as several detections on one line.

        Every digit-bearing detection is tried as the line anchor; detections
        within the same-line tolerance are joined left to right. The longest
        valid join wins, ties go to the topmost line, then the leftmost start.

        Returns:
            Tuple of (index of the leftmost detection, card number),
            (-1, None) if not found
        """
        candidates = []
        for line in lines:
            digits = self.NON_DIGIT_PATTERN.sub(
                '', self.CANDIDATE_SEPARATOR_PATTERN.sub('', line.text)
            )
            if len(digits) >= self.MIN_CANDIDATE_DIGITS:
                x, y = self._topLeft(line.bbox, line.index)
                candidates.append(_DigitCandidate(line.index, digits, x, y))

        if len(candidates) < 2:
            return (-1, None)

        bestRank = None
        bestNumber = None
        bestIndex = -1

        for anchor in candidates:
            sameLine = sorted(
                (c for c in candidates if abs(c.y - anchor.y) < self._sameLineTolerance),
                key=lambda c: c.x
            )
            combined = ''.join(c.digits for c in sameLine)
            if not CARD_NUMBER_MIN_LENGTH <= len(combined) <= CARD_NUMBER_MAX_LENGTH:
                continue

            rank = (len(combined), -anchor.y, -sameLine[0].x)
            if bestRank is None or rank > bestRank:
                bestRank = rank
                bestNumber = combined
                bestIndex = sameLine[0].index

        if bestNumber is not None:
            self._logger.debug(
                f"[Card Number] Reassembled from same-line detections at index {bestIndex}: {bestNumber}"
            )
        return (bestIndex, bestNumber)

    @staticmethod
    def _topLeft(bbox: Optional[Sequence], index: int) -> Tuple[float, float]:
        """
        Get the top-left point of a detection polygon.

        Accepts [[x, y], ...] or [{"x": .., "y": ..}, ...]. Missing or
        malformed boxes fall back to a positional default so that detections
        keep their engine order on a single line.
        """
        fallback = (float(index * FALLBACK_X_STEP), 0.0)
        try:
            if bbox is None or len(bbox) == 0:
                return fallback
            point = bbox[0]
            if isinstance(point, dict):
                return (float(point['x']), float(point['y']))
            return (float(point[0]), float(point[1]))
        except (TypeError, ValueError, IndexError, KeyError):
            return fallback

    def _extractBankName(self, lines: List[_TextLine]) -> Optional[str]:
        """Join the lines above the card number that carry at least a couple of letters."""
        bankTexts = [
            line.text for line in lines
            if len(self.NON_ALPHA_PATTERN.sub('', line.text)) >= self.MIN_BANK_ALPHA
        ]
        return ' '.join(bankTexts) if bankTexts else None

    def _extractExpiryCandidate(self, text: str) -> Optional[_ExpiryCandidate]:
        """
        Read an expiry date candidate from one detection.

        Looks at the characters around the first "/" after digit correction,
        then falls back to a generic MM/YY or MM-YYYY pattern.
        """
        slashPos = text.find('/')
        if slashPos >= 0:
            window = self.EXPIRY_WINDOW
            before = self.NON_DIGIT_PATTERN.sub(
                '', fixDigits(text[max(0, slashPos - window):slashPos])
            )
            after = self.NON_DIGIT_PATTERN.sub(
                '', fixDigits(text[slashPos + 1:slashPos + 1 + window])
            )
            if before or after:
                return _ExpiryCandidate(before, after, self._yearValue(after))

        match = self.EXPIRY_PATTERN.search(text)
        if match:
            month = match.group(1).zfill(2)
            year = match.group(2)[-2:]
            return _ExpiryCandidate(month, year, self._yearValue(year))

        return None

    @staticmethod
    def _yearValue(digits: str) -> int:
        """Two-digit year used to rank candidates, 0 if absent."""
        year = digits[:2]
        return int(year) if year.isascii() and year.isdigit() else 0

    def _extractHolderName(self, text: str) -> Optional[str]:
        """
        Accept a detection as the holder name.

        Keeps letters and spaces, requires 2-3 words of at least two letters
        and rejects the whole detection if any word contains a banned word.
        """
        alpha = self.NON_NAME_PATTERN.sub('', text).strip()
        if len(alpha) < self.MIN_HOLDER_LENGTH:
            return None

        words = [w for w in alpha.split() if len(w) >= self.MIN_HOLDER_WORD_LENGTH]

        for word in words:
            lowered = word.lower()
            if any(banned in lowered for banned in self._bannedList):
                self._logger.debug(f"[Holder Name] Rejected '{text}' (banned word in '{word}')")
                return None

        minWords, maxWords = self.HOLDER_WORD_RANGE
        if minWords <= len(words) <= maxWords:
            return ' '.join(words)
        return None


_defaultParser = CardFieldParser()


def parseCardFromDetections(detections: List[OcrDetection]) -> ParsedCardFields:
    """
    Extract card fields from one frame's detections with the default parser.

    Args:
        detections: OCR detections in engine order

    Returns:
        ParsedCardFields with every field found in this frame
    """
    return _defaultParser.parse(detections)
