# UI module for Card Field Scanner
# Contains PySide6 widgets, the scan controller and the main window

from ui.main_window import MainWindow
from ui.scan_controller import ScanController
from ui.scanner_orchestrator import ScannerOrchestrator
from ui.widgets.card_result_widget import CardResultWidget

__all__ = [
    "MainWindow",
    "ScanController",
    "ScannerOrchestrator",
    "CardResultWidget",
]
