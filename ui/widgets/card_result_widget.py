"""
Card Result Widget.

This widget displays the card fields read so far in a structured format.
Shows bank name, card number, expiry and holder name, the countdown
and the scan status.
"""

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel,
    QGroupBox, QGridLayout, QFrame
)
from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QFont

from core.interfaces.card_parser_interface import ParsedCardFields, ScannedCard
from services.impl.scan_session_service import formatCardNumber


# Status label styles per ScanStatus value
_STATUS_STYLES = {
    "loading": ("Loading model", "#6c757d"),
    "scanning": ("Scanning", "#007bff"),
    "locked": ("✓ LOCKED", "#28a745"),
    "timed_out": ("⏱ TIMED OUT", "#ffc107"),
    "model_error": ("✗ MODEL ERROR", "#dc3545"),
    "closed": ("Stopped", "#6c757d"),
}


class CardResultWidget(QWidget):
    """
    Widget to display card scan results.

    Shows:
    - Card fields (bank, number, expiry, holder)
    - Countdown and scan status
    - Final result summary
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._initUi()

    def _initUi(self) -> None:
        """Initialize the user interface."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)
        layout.setSpacing(5)

        titleLabel = QLabel("Card Scan")
        titleLabel.setFont(QFont("Arial", 12, QFont.Weight.Bold))
        titleLabel.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(titleLabel)

        # Card Fields Group
        fieldsGroup = QGroupBox("Card Fields")
        fieldsLayout = QGridLayout(fieldsGroup)
        fieldsLayout.setSpacing(4)

        self._bankLabel = self._createValueLabel()
        self._numberLabel = self._createValueLabel()
        self._expiryLabel = self._createValueLabel()
        self._holderLabel = self._createValueLabel()

        fieldsLayout.addWidget(QLabel("Bank:"), 0, 0)
        fieldsLayout.addWidget(self._bankLabel, 0, 1)
        fieldsLayout.addWidget(QLabel("Card:"), 1, 0)
        fieldsLayout.addWidget(self._numberLabel, 1, 1)
        fieldsLayout.addWidget(QLabel("Date:"), 2, 0)
        fieldsLayout.addWidget(self._expiryLabel, 2, 1)
        fieldsLayout.addWidget(QLabel("Name:"), 3, 0)
        fieldsLayout.addWidget(self._holderLabel, 3, 1)

        layout.addWidget(fieldsGroup)

        # Status
        statusFrame = QFrame()
        statusFrame.setFrameStyle(QFrame.Shape.StyledPanel)
        statusLayout = QHBoxLayout(statusFrame)
        statusLayout.setContentsMargins(5, 5, 5, 5)

        statusLayout.addWidget(QLabel("Status:"))
        self._statusLabel = QLabel("--")
        self._statusLabel.setFont(QFont("Arial", 10, QFont.Weight.Bold))
        statusLayout.addWidget(self._statusLabel)
        statusLayout.addStretch()

        self._countdownLabel = QLabel("--")
        self._countdownLabel.setFont(QFont("Consolas", 10))
        statusLayout.addWidget(self._countdownLabel)

        layout.addWidget(statusFrame)

        # Final result summary
        self._resultLabel = QLabel("")
        self._resultLabel.setWordWrap(True)
        self._resultLabel.setStyleSheet("color: gray; font-size: 10px;")
        layout.addWidget(self._resultLabel)

        layout.addStretch()

        self.clear()

    def _createValueLabel(self) -> QLabel:
        """Create a styled value label."""
        label = QLabel("...")
        label.setFont(QFont("Consolas", 10))
        label.setStyleSheet("color: #333; background-color: #f5f5f5; padding: 2px 5px;")
        label.setWordWrap(True)
        return label

    @Slot()
    def clear(self) -> None:
        """Clear all displayed values."""
        for label in (self._bankLabel, self._numberLabel, self._expiryLabel, self._holderLabel):
            label.setText("...")
        self._statusLabel.setText("--")
        self._statusLabel.setStyleSheet("color: gray;")
        self._countdownLabel.setText("--")
        self._resultLabel.setText("")

    @Slot(object, str)
    def updateFields(self, fields: ParsedCardFields, summary: str = "") -> None:
        """
        Update the widget with the current display fields.

        Args:
            fields: Locked values, or the latest frame's values.
            summary: Four-line text summary, shown by MainWindow instead.
        """
        self._bankLabel.setText(fields.bankName or "...")
        self._numberLabel.setText(
            formatCardNumber(fields.cardNumber) if fields.cardNumber else "..."
        )
        self._expiryLabel.setText(fields.expiry or "...")
        self._holderLabel.setText(fields.holderName or "...")

    @Slot(int)
    def updateCountdown(self, seconds: int) -> None:
        """Show the seconds left."""
        self._countdownLabel.setText(f"{seconds}s")

    @Slot(str, str)
    def updateStatus(self, status: str, modelStatus: str) -> None:
        """
        Show the session status.

        Args:
            status: ScanStatus value.
            modelStatus: OCR model status text, shown as tooltip.
        """
        text, color = _STATUS_STYLES.get(status, (status, "#6c757d"))
        self._statusLabel.setText(text)
        self._statusLabel.setToolTip(modelStatus)
        self._statusLabel.setStyleSheet(
            f"color: white; background-color: {color}; padding: 2px 8px; border-radius: 3px;"
        )
        if status == "model_error":
            self._resultLabel.setText(modelStatus)

    @Slot(object)
    def showResult(self, card: ScannedCard) -> None:
        """Display the terminal scan result."""
        if card.cardNumber:
            self._numberLabel.setText(formatCardNumber(card.cardNumber))
        if card.expiryMonth and card.expiryYear:
            self._expiryLabel.setText(f"{card.expiryMonth}/{card.expiryYear}")
        if card.holderName:
            self._holderLabel.setText(card.holderName)
        self._resultLabel.setText(card.raw or "")
