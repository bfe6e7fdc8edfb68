"""
Main Window

Main application window for the card scanner.
Starts and stops scans through ScanController and shows the fields
read so far via CardResultWidget.
"""

import logging
from typing import TYPE_CHECKING

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout,
    QStatusBar, QLabel, QPushButton, QPlainTextEdit
)

from core.interfaces.card_parser_interface import ParsedCardFields, ScannedCard
from services.performance_logger import TimingInfo
from ui.scan_controller import ScanController
from ui.widgets.card_result_widget import CardResultWidget

if TYPE_CHECKING:
    from ui.scanner_orchestrator import ScannerOrchestrator


logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    Scan window: live reading on the left, locked fields on the right.

    Each press of Scan asks the orchestrator for a new session and hands it
    to the ScanController, whose signals drive every widget update.
    """

    def __init__(self, orchestrator: "ScannerOrchestrator"):
        super().__init__()

        self._orchestrator = orchestrator
        self._configService = orchestrator.configService

        self._controller = ScanController(
            scanInterval=self._configService.getScanInterval(),
            parent=self
        )

        self._setupUI()
        self._setupConnections()

    def _setupUI(self):
        self.setWindowTitle("Card Field Scanner")
        self.setMinimumSize(
            self._configService.getWindowMinWidth(),
            self._configService.getWindowMinHeight()
        )

        centralWidget = QWidget()
        self.setCentralWidget(centralWidget)

        mainLayout = QHBoxLayout(centralWidget)
        mainLayout.setContentsMargins(10, 10, 10, 10)
        mainLayout.setSpacing(10)

        # Live OCR text (left side)
        leftLayout = QVBoxLayout()
        self._liveText = QPlainTextEdit()
        self._liveText.setReadOnly(True)
        self._liveText.setPlaceholderText("Press Scan and hold a card in front of the camera")
        leftLayout.addWidget(self._liveText, stretch=1)

        buttonLayout = QHBoxLayout()
        self._scanButton = QPushButton("Scan")
        self._cancelButton = QPushButton("Cancel")
        self._cancelButton.setEnabled(False)
        buttonLayout.addWidget(self._scanButton)
        buttonLayout.addWidget(self._cancelButton)
        leftLayout.addLayout(buttonLayout)

        mainLayout.addLayout(leftLayout, stretch=3)

        # Result panel (right side, fixed width)
        self._resultWidget = CardResultWidget()
        self._resultWidget.setFixedWidth(260)
        mainLayout.addWidget(self._resultWidget, stretch=0)

        # Status bar
        self._statusBar = QStatusBar()
        self.setStatusBar(self._statusBar)
        self._statusBar.showMessage("Ready")

        self._perfLabel = QLabel("")
        self._perfLabel.setStyleSheet("color: #888888; padding-right: 10px;")
        self._statusBar.addPermanentWidget(self._perfLabel)

        self._applyTheme()

    def _applyTheme(self):
        self.setStyleSheet("""
            QMainWindow {
                background-color: #2b2b2b;
            }
            QWidget {
                background-color: #2b2b2b;
                color: #ffffff;
            }
            QGroupBox {
                border: 1px solid #444444;
                margin-top: 12px;
            }
            QPlainTextEdit {
                background-color: #1e1e1e;
                border: 1px solid #555555;
                font-family: Consolas, monospace;
            }
            QPushButton {
                background-color: #3c3c3c;
                border: 1px solid #555555;
                border-radius: 3px;
                padding: 6px 14px;
            }
            QPushButton:disabled {
                color: #777777;
            }
            QStatusBar {
                background-color: #1e1e1e;
                color: #888888;
            }
        """)

    def _setupConnections(self):
        self._scanButton.clicked.connect(self._onScanRequested)
        self._cancelButton.clicked.connect(self._onCancelRequested)

        self._controller.fieldsChanged.connect(self._resultWidget.updateFields)
        self._controller.fieldsChanged.connect(self._onFieldsChanged)
        self._controller.countdownChanged.connect(self._resultWidget.updateCountdown)
        self._controller.statusChanged.connect(self._resultWidget.updateStatus)
        self._controller.statusChanged.connect(self._onStatusChanged)
        self._controller.scanFinished.connect(self._resultWidget.showResult)
        self._controller.scanFinished.connect(self._onScanFinished)

    def _setScanning(self, scanning: bool):
        self._scanButton.setEnabled(not scanning)
        self._cancelButton.setEnabled(scanning)

    def _onScanRequested(self):
        """One click, one fresh session; the previous one is closed by the orchestrator."""
        self._resultWidget.clear()
        self._liveText.clear()

        session = self._orchestrator.createSession(self._controller.createObserver())
        if not self._orchestrator.cameraService.isOpened():
            self._statusBar.showMessage("Failed to open camera")
            session.close()
            return

        self._orchestrator.performanceLogger.onUpdate = self._onTiming
        self._controller.start(session)

        self._setScanning(True)
        self._statusBar.showMessage("Loading OCR model...")

    def _onCancelRequested(self):
        """Stop the running scan."""
        self._controller.stop()
        self._setScanning(False)
        self._statusBar.showMessage("Scan cancelled")

    def _onFieldsChanged(self, fields: ParsedCardFields, summary: str):
        """Show the scanner's current reading."""
        self._liveText.setPlainText(summary)

    def _onStatusChanged(self, status: str, modelStatus: str):
        """Reflect session status in the status bar."""
        self._statusBar.showMessage(modelStatus if status != "scanning" else "Scanning...")
        if status == "model_error":
            self._setScanning(False)

    def _onScanFinished(self, card: ScannedCard):
        """Report the scan result and release the camera and model."""
        logger.info(f"Scan result: {card}")
        self._controller.stop()
        self._statusBar.showMessage("Scan complete" if card.cardNumber else "Card not recognized")
        self._setScanning(False)

    def _onTiming(self, timing: TimingInfo):
        """Show the last tick's timing."""
        self._perfLabel.setText(
            f"OCR: {timing.ocrMs:.0f}ms | Total: {timing.totalMs:.0f}ms"
        )

    def closeEvent(self, event):
        """Stop the worker threads; the orchestrator is shut down by main()."""
        self._controller.stop()
        logger.info("Application closed")
        event.accept()
