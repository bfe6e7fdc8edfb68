"""
Scan Session Service Implementation.

Drives one card scan: each tick captures a frame, runs OCR, parses the
detections and feeds them into the field accumulators until every field
is locked or the countdown runs out.

The session only holds state and decides; timers and threads belong to
the driver (ScanController for the GUI, scripts/scan_images.py headless).

Follows:
- SRP: Only handles the scan state machine
- DIP: Depends on camera, OCR and parsing service abstractions
"""

import time
from typing import Optional

from core.accumulator.card_accumulator import (
    AccumulatorState,
    formatExpiryProgress,
    updateAccumulator,
)
from core.interfaces.card_parser_interface import ParsedCardFields, ScannedCard
from core.processor.card_constants import DEFAULT_REQUIRED_TICKS, DEFAULT_TIMEOUT
from services.impl.s3_parsing_service import S3ParsingService
from services.interfaces.base_service_interface import BaseService
from services.interfaces.camera_service_interface import ICameraService
from services.interfaces.ocr_service_interface import IOcrService
from services.interfaces.parsing_service_interface import IParsingService
from services.interfaces.scan_session_interface import (
    CapturedDetections,
    IScanObserver,
    IScanSession,
    ScanStatus,
    TERMINAL_STATUSES,
)
from services.performance_logger import PerformanceLogger


UNPARSEABLE_CARD_MESSAGE = "Could not parse Card Data. Please fill manually."


def buildScanResult(locked: ParsedCardFields, timedOut: bool) -> ScannedCard:
    """
    Build the terminal result from the locked fields.

    Without a card number nothing else is reported. On timeout the
    summary lists the missing expiry and holder name.

    Args:
        locked: Fields locked during the session.
        timedOut: True if the session ended by countdown.

    Returns:
        ScannedCard for the consumer.
    """
    if not locked.cardNumber:
        return ScannedCard(raw=UNPARSEABLE_CARD_MESSAGE)

    missing = []
    if not locked.expiry:
        missing.append("Expiry Date")
    if not locked.holderName:
        missing.append("Cardholder Name")

    missingMsg = ""
    if missing and timedOut:
        missingMsg = f"\nCould not parse: {', '.join(missing)}. Please fill manually."

    expiryMonth = expiryYear = None
    if locked.expiry:
        expiryMonth, _, expiryYear = locked.expiry.partition('/')

    return ScannedCard(
        cardNumber=locked.cardNumber,
        expiryMonth=expiryMonth,
        expiryYear=expiryYear,
        holderName=locked.holderName,
        raw=f"Bank: {locked.bankName or 'N/A'}{missingMsg}"
    )


def formatCardNumber(cardNumber: str) -> str:
    """Group a card number in blocks of four: "4111 1111 1111 1111"."""
    return ' '.join(cardNumber[i:i + 4] for i in range(0, len(cardNumber), 4))


def formatSummary(fields: ParsedCardFields) -> str:
    """Four-line text rendering of the display fields, "..." where unknown."""
    card = formatCardNumber(fields.cardNumber) if fields.cardNumber else '...'
    return (
        f"Bank: {fields.bankName or '...'}\n"
        f"Card: {card}\n"
        f"Date: {fields.expiry or '...'}\n"
        f"Name: {fields.holderName or '...'}"
    )


class ScanSessionService(IScanSession, BaseService):
    """
    One card scan session.

    Owns the accumulation state and the locked fields for the session.
    A new session is created for every scan; a finished session never
    changes again.

    Threading:
        captureAndRecognize() only touches the camera and OCR services and
        may run on a worker thread. startCycle(), applyDetections(),
        countdownTick() and close() must be called from the driver's thread.
    """

    SERVICE_NAME = "scan_session"

    def __init__(
        self,
        cameraService: ICameraService,
        ocrService: IOcrService,
        parsingService: Optional[IParsingService] = None,
        timeout: int = DEFAULT_TIMEOUT,
        requiredTicks: int = DEFAULT_REQUIRED_TICKS,
        finishOnEssentials: bool = False,
        observer: Optional[IScanObserver] = None,
        performanceLogger: Optional[PerformanceLogger] = None,
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Initialize ScanSessionService.

        Args:
            cameraService: Frame source (Step 1).
            ocrService: Text recognizer (Step 2).
            parsingService: Field parser (Step 3); an S3ParsingService is created if None.
            timeout: Countdown length in seconds.
            requiredTicks: Consecutive identical observations needed to lock a field.
            finishOnEssentials: Finish once card number, expiry and holder name
                                are locked, without waiting for the bank name.
            observer: Notified with display fields after every applied tick.
            performanceLogger: Records per-tick stage timings.
            debugBasePath: Base path for debug output.
            debugEnabled: Whether to save per-tick state as JSON.

        Raises:
            ValueError: If a collaborator is missing or a setting is out of range.
        """
        if cameraService is None:
            raise ValueError("ScanSessionService requires a camera service")
        if ocrService is None:
            raise ValueError("ScanSessionService requires an OCR service")
        if timeout < 1:
            raise ValueError(f"timeout must be at least 1 second, got {timeout}")
        if requiredTicks < 1:
            raise ValueError(f"requiredTicks must be at least 1, got {requiredTicks}")

        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        self._cameraService = cameraService
        self._ocrService = ocrService
        self._parsingService = parsingService or S3ParsingService(
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )
        self._timeout = timeout
        self._requiredTicks = requiredTicks
        self._finishOnEssentials = finishOnEssentials
        self._observer = observer
        self._performanceLogger = performanceLogger

        self._state = AccumulatorState()
        self._locked = ParsedCardFields()
        self._displayFields = ParsedCardFields()
        self._countdown = timeout
        self._result: Optional[ScannedCard] = None
        self._finalStatus: Optional[ScanStatus] = None
        self._inFlight = False
        self._closed = False
        self._modelStatus = "Loading OCR model..."
        self._modelError: Optional[str] = None
        self._modelReadyLogged = False

        self._logger.info(
            f"ScanSessionService created (timeout={timeout}s, requiredTicks={requiredTicks}, "
            f"finishOnEssentials={finishOnEssentials})"
        )

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # State Access
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @property
    def status(self) -> ScanStatus:
        """Current session status."""
        self._checkModel()
        if self._finalStatus is not None:
            return self._finalStatus
        if self._ocrService.isReady():
            return ScanStatus.SCANNING
        return ScanStatus.LOADING

    @property
    def isFinished(self) -> bool:
        """True once locked, timed out, failed or closed."""
        return self._finalStatus in TERMINAL_STATUSES

    @property
    def isScanning(self) -> bool:
        """True while ticks are being accepted."""
        return self.status == ScanStatus.SCANNING

    @property
    def countdown(self) -> int:
        """Seconds left before the session times out."""
        return self._countdown

    @property
    def displayFields(self) -> ParsedCardFields:
        """Fields to show: locked values, else the latest frame's values."""
        return self._displayFields

    @property
    def locked(self) -> ParsedCardFields:
        """Fields locked so far."""
        return self._locked

    @property
    def state(self) -> AccumulatorState:
        """Current accumulation state."""
        return self._state

    @property
    def result(self) -> Optional[ScannedCard]:
        """Terminal result, None until the session locks or times out."""
        return self._result

    @property
    def modelStatus(self) -> str:
        """Human-readable OCR model status."""
        self._checkModel()
        return self._modelStatus

    @property
    def modelError(self) -> Optional[str]:
        """OCR model error message, None if there is none."""
        self._checkModel()
        return self._modelError

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Model
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def loadModel(self) -> bool:
        """
        Load the OCR model. Blocks; drivers run it on a worker thread.

        Returns:
            bool: True if the model is ready.
        """
        self._logger.info("Loading OCR model...")
        return self._ocrService.loadModel()

    def _checkModel(self) -> None:
        """Follow the OCR service's readiness and error slot."""
        if self._modelError is not None or self._closed:
            return

        error = self._ocrService.getError()
        if error:
            self._modelError = str(error)
            self._modelStatus = f"Model error: {self._modelError}"
            self._logger.error(self._modelStatus)
            if not self.isFinished:
                self._finalStatus = ScanStatus.MODEL_ERROR
            return

        if self._ocrService.isReady() and not self._modelReadyLogged:
            self._modelReadyLogged = True
            self._modelStatus = "OCR model ready"
            self._logger.info(f"OCR model ready, starting {self._timeout}s countdown")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Tick
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def startCycle(self) -> bool:
        """Claim the single in-flight slot for a new tick."""
        if self.status != ScanStatus.SCANNING or self._inFlight:
            return False
        self._inFlight = True
        return True

    def captureAndRecognize(self) -> Optional[CapturedDetections]:
        """Capture a frame and run OCR on it."""
        try:
            frame = self._cameraService.captureFrame()
            if not frame.success:
                self._logger.debug(f"[{frame.frameId}] Capture failed, skipping tick")
                return None

            # Session may have ended while the camera was busy
            if self.isFinished:
                return None

            ocrResult = self._ocrService.extractText(frame.image, frame.frameId)
            if not ocrResult.success:
                self._logger.warning(
                    f"[{frame.frameId}] Inference failed, skipping tick: {ocrResult.errorMessage}"
                )
                return None

            detections = ocrResult.ocrData.detections if ocrResult.ocrData else []

            return CapturedDetections(
                frameId=frame.frameId,
                detections=list(detections),
                captureMs=frame.processingTimeMs,
                ocrMs=ocrResult.processingTimeMs
            )

        except Exception as e:
            self._logger.error(f"Capture/OCR cycle failed: {e}")
            return None

    def applyDetections(self, captured: Optional[CapturedDetections]) -> Optional[ScannedCard]:
        """Finish a tick: parse, accumulate and check for completion."""
        self._inFlight = False

        if captured is None:
            return None

        frameId = captured.frameId

        if self.isFinished:
            self._logger.debug(f"[{frameId}] Result arrived after the session finished, discarded")
            return None

        if not captured.detections:
            self._logger.debug(f"[{frameId}] No text detected")
            return None

        parsing = self._parsingService.parse(captured.detections, frameId)
        parsed = parsing.fields

        accumulateStart = time.time()
        previouslyLocked = self._locked
        update = updateAccumulator(self._state, self._locked, parsed, self._requiredTicks)
        self._state = update.state
        self._locked = update.locked
        accumulateMs = self._measureTime(accumulateStart)

        self._logNewLocks(frameId, previouslyLocked, update.locked)

        self._displayFields = ParsedCardFields(
            bankName=self._locked.bankName or parsed.bankName,
            cardNumber=self._locked.cardNumber or parsed.cardNumber,
            expiry=self._locked.expiry or formatExpiryProgress(self._state.expiryDigits),
            holderName=self._locked.holderName or parsed.holderName
        )

        if self._observer is not None:
            self._observer.onDisplayFields(self._displayFields, formatSummary(self._displayFields))

        if self._performanceLogger is not None:
            self._performanceLogger.recordTiming({
                "capture_ms": captured.captureMs,
                "ocr_ms": captured.ocrMs,
                "parse_ms": parsing.processingTimeMs,
                "accumulate_ms": accumulateMs
            })

        self._saveDebugJson(frameId, {
            "frameId": frameId,
            "parsed": vars(parsed),
            "locked": vars(self._locked),
            "expiryDigits": list(self._state.expiryDigits),
        }, "tick")

        if update.allLocked or (self._finishOnEssentials and update.essentialsLocked):
            self._logger.info(f"[{frameId}] All fields locked: {self._locked}")
            return self._finish(ScanStatus.LOCKED, timedOut=False)

        return None

    def runTick(self) -> Optional[ScannedCard]:
        """Run a whole tick synchronously."""
        if not self.startCycle():
            return None
        return self.applyDetections(self.captureAndRecognize())

    def countdownTick(self) -> Optional[ScannedCard]:
        """Advance the countdown by one second once the model is ready."""
        if self.status != ScanStatus.SCANNING:
            return None

        self._countdown = max(self._countdown - 1, 0)

        if self._countdown == 0:
            self._logger.info(f"Scan timed out with locked fields: {self._locked}")
            return self._finish(ScanStatus.TIMED_OUT, timedOut=True)

        return None

    def close(self) -> None:
        """Stop the session and release the camera and OCR services."""
        if self._closed:
            return
        self._closed = True
        self._finalStatus = ScanStatus.CLOSED
        self._inFlight = False

        self._cameraService.closeCamera()
        self._ocrService.release()
        self._logger.info("Scan session closed")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Helpers
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _finish(self, status: ScanStatus, timedOut: bool) -> ScannedCard:
        """Freeze the session and build its one result."""
        self._finalStatus = status
        self._result = buildScanResult(self._locked, timedOut)
        self._logger.info(f"Scan finished ({status.value}): {self._result.raw!r}")
        return self._result

    def _logNewLocks(
        self,
        frameId: str,
        before: ParsedCardFields,
        after: ParsedCardFields
    ) -> None:
        """Log fields that locked on this tick."""
        for name, value in vars(after).items():
            if value and not getattr(before, name):
                self._logger.info(f"[{frameId}] Locked {name}: {value}")
