"""
S3 Parsing Service Implementation.

Step 3 of a scan tick: single-frame card field extraction.
Wraps CardFieldParser from the core layer.
"""

import time
from dataclasses import asdict
from typing import List, Optional

from core.interfaces.card_parser_interface import ICardParser
from core.interfaces.ocr_extractor_interface import OcrDetection
from core.processor.card_constants import DEFAULT_SAME_LINE_TOLERANCE
from core.processor.card_field_parser import CardFieldParser
from services.interfaces.parsing_service_interface import (
    IParsingService,
    ParsingServiceResult
)
from services.interfaces.base_service_interface import BaseService


class S3ParsingService(IParsingService, BaseService):
    """
    Step 3: Parsing Service Implementation.

    Turns one frame's OCR detections into bank name, card number,
    expiry and holder name. Never raises; fields not found stay None.
    """

    SERVICE_NAME = "s3_parsing"

    def __init__(
        self,
        cardParser: Optional[ICardParser] = None,
        sameLineTolerance: float = DEFAULT_SAME_LINE_TOLERANCE,
        bannedWordsJsonPath: Optional[str] = None,
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Initialize S3ParsingService.

        Args:
            cardParser: Parser to use; a CardFieldParser is created if None.
            sameLineTolerance: Max y difference for detections on one line.
            bannedWordsJsonPath: Optional JSON file with extra banned words.
            debugBasePath: Base path for debug output.
            debugEnabled: Whether to save debug output.
        """
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        self._cardParser: ICardParser = cardParser or CardFieldParser(
            sameLineTolerance=sameLineTolerance,
            bannedWordsJsonPath=bannedWordsJsonPath,
            logger=self._logger
        )

        self._logger.info(
            f"S3ParsingService initialized (parser={type(self._cardParser).__name__})"
        )

    def parse(self, detections: List[OcrDetection], frameId: str) -> ParsingServiceResult:
        """Extract card fields from one frame's detections."""
        startTime = time.time()

        fields = self._cardParser.parse(detections)

        processingTimeMs = self._measureTime(startTime)

        self._logger.debug(
            f"[{frameId}] Parsed bank={fields.bankName!r} number={fields.cardNumber!r} "
            f"expiry={fields.expiry!r} holder={fields.holderName!r}"
        )
        self._saveDebugJson(frameId, {"frameId": frameId, "fields": asdict(fields)}, "parsed")
        self._logTiming(frameId, processingTimeMs)

        return ParsingServiceResult(
            fields=fields,
            frameId=frameId,
            processingTimeMs=processingTimeMs
        )
