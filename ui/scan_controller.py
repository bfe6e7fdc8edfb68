"""
Scan Controller

Qt driver for a ScanSessionService.
Runs the scan tick and the one-second countdown on QTimers, loads the OCR
model and runs capture + OCR on worker threads, and applies results on
the GUI thread so the session state is only touched from one thread.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject, QThread, QTimer, Signal

from core.interfaces.card_parser_interface import ParsedCardFields, ScannedCard
from services.impl.scan_session_service import ScanSessionService
from services.interfaces.scan_session_interface import IScanObserver, ScanStatus


logger = logging.getLogger(__name__)


class ModelLoadWorker(QThread):
    """Loads the OCR model off the GUI thread."""

    # (session, ready)
    loaded = Signal(object, bool)

    def __init__(self, session: ScanSessionService, parent=None):
        super().__init__(parent)
        self._session = session

    def run(self):
        self.loaded.emit(self._session, self._session.loadModel())


class TickWorker(QThread):
    """Runs the capture + OCR half of one tick."""

    # (session, CapturedDetections or None)
    captured = Signal(object, object)

    def __init__(self, session: ScanSessionService, parent=None):
        super().__init__(parent)
        self._session = session

    def run(self):
        self.captured.emit(self._session, self._session.captureAndRecognize())


class _SignalObserver(IScanObserver):
    """Forwards session display updates to the controller's signal."""

    def __init__(self, controller: "ScanController"):
        self._controller = controller

    def onDisplayFields(self, fields: ParsedCardFields, summary: str) -> None:
        self._controller.fieldsChanged.emit(fields, summary)


class ScanController(QObject):
    """
    Drives one scan session from the Qt event loop.

    Signals:
        fieldsChanged(ParsedCardFields, str): Display fields and summary after a tick.
        countdownChanged(int): Seconds left.
        statusChanged(str, str): ScanStatus value and model status text.
        scanFinished(ScannedCard): Terminal result on lock or timeout.
    """

    fieldsChanged = Signal(object, str)
    countdownChanged = Signal(int)
    statusChanged = Signal(str, str)
    scanFinished = Signal(object)

    def __init__(self, scanInterval: int = 1000, parent=None):
        """
        Initialize ScanController.

        Args:
            scanInterval: Milliseconds between scan ticks.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self._session: Optional[ScanSessionService] = None
        self._modelWorker: Optional[ModelLoadWorker] = None
        self._tickWorker: Optional[TickWorker] = None
        self._lastStatus: Optional[ScanStatus] = None

        self._scanTimer = QTimer(self)
        self._scanTimer.setInterval(scanInterval)
        self._scanTimer.timeout.connect(self._onScanTimer)

        self._countdownTimer = QTimer(self)
        self._countdownTimer.setInterval(1000)
        self._countdownTimer.timeout.connect(self._onCountdownTimer)

    def createObserver(self) -> IScanObserver:
        """Observer to pass to the session so display updates become signals."""
        return _SignalObserver(self)

    @property
    def session(self) -> Optional[ScanSessionService]:
        """Session being driven, None when stopped."""
        return self._session

    def start(self, session: ScanSessionService) -> None:
        """
        Start driving a session: load the model, then run both timers.

        Args:
            session: New session, typically from ScannerOrchestrator.createSession().
        """
        self.stop()

        self._session = session
        self._lastStatus = None
        self.countdownChanged.emit(session.countdown)
        self._emitStatus()

        self._modelWorker = ModelLoadWorker(session, self)
        self._modelWorker.loaded.connect(self._onModelLoaded)
        self._modelWorker.finished.connect(self._onWorkerFinished)
        self._modelWorker.finished.connect(self._modelWorker.deleteLater)
        self._modelWorker.start()

    def stop(self) -> None:
        """Stop both timers, wait for workers and close the session."""
        self._scanTimer.stop()
        self._countdownTimer.stop()

        for worker in (self._modelWorker, self._tickWorker):
            if worker is not None and worker.isRunning():
                worker.wait()
        self._modelWorker = None
        self._tickWorker = None

        if self._session is not None:
            # A finished session keeps showing how it ended
            wasFinished = self._session.isFinished
            self._session.close()
            if not wasFinished:
                self._emitStatus()
            self._session = None

    def _onWorkerFinished(self) -> None:
        """Forget a worker once its thread has ended."""
        worker = self.sender()
        if worker is self._modelWorker:
            self._modelWorker = None
        elif worker is self._tickWorker:
            self._tickWorker = None

    def _onModelLoaded(self, session: ScanSessionService, ready: bool) -> None:
        """Start ticking once the model is ready."""
        if session is not self._session:
            return

        self._emitStatus()
        if ready and not session.isFinished:
            logger.info("OCR model ready, scanning started")
            self._scanTimer.start()
            self._countdownTimer.start()

    def _onScanTimer(self) -> None:
        """Start one tick on a worker unless one is still in flight."""
        if self._session is None or not self._session.startCycle():
            self._emitStatus()
            return

        self._tickWorker = TickWorker(self._session, self)
        self._tickWorker.captured.connect(self._onCaptured)
        self._tickWorker.finished.connect(self._onWorkerFinished)
        self._tickWorker.finished.connect(self._tickWorker.deleteLater)
        self._tickWorker.start()

    def _onCaptured(self, session: ScanSessionService, captured) -> None:
        """Apply a tick's detections on the GUI thread."""
        # Results from a session that was stopped or replaced are dropped
        if session is not self._session:
            return
        result = self._session.applyDetections(captured)
        if result is not None:
            self._finish(result)

    def _onCountdownTimer(self) -> None:
        """Count down one second."""
        if self._session is None:
            return
        result = self._session.countdownTick()
        self.countdownChanged.emit(self._session.countdown)
        if result is not None:
            self._finish(result)
        else:
            self._emitStatus()

    def _finish(self, result: ScannedCard) -> None:
        """Stop the timers and report the terminal result."""
        self._scanTimer.stop()
        self._countdownTimer.stop()
        self._emitStatus()
        self.scanFinished.emit(result)

    def _emitStatus(self) -> None:
        """Emit statusChanged when the session status changes."""
        if self._session is None:
            return
        status = self._session.status
        if status != self._lastStatus:
            self._lastStatus = status
            self.statusChanged.emit(status.value, self._session.modelStatus)
            if status == ScanStatus.MODEL_ERROR:
                self._scanTimer.stop()
                self._countdownTimer.stop()
