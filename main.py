"""
Card Field Scanner Application

Desktop entry point. Point a webcam at a payment card, press Start, and
the window shows card number, expiry, holder and bank as they lock in.

    python main.py [--config path/to/application_config.json] [--debug]

DEBUG=true in the environment has the same effect as --debug.
"""

import sys
import os
import argparse
import logging

from PySide6.QtWidgets import QApplication

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from ui.scanner_orchestrator import ScannerOrchestrator
from ui.main_window import MainWindow


APP_NAME = "Card Field Scanner"
APP_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def setupLogging(debugMode: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debugMode else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def parseArgs() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=APP_NAME)
    parser.add_argument(
        "--config", "-c",
        type=str,
        default="config/application_config.json",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Verbose logging and per-frame debug artifacts under the debug base path"
    )
    return parser.parse_args()


def createApplication(
    configPath: str = "config/application_config.json",
    debugMode: bool = False
) -> tuple:
    """
    Build the Qt application around a ScannerOrchestrator.

    Returns:
        (QApplication, MainWindow, ScannerOrchestrator). The caller owns
        the orchestrator and must shut it down after the event loop exits.

    Raises:
        RuntimeError: configuration could not be loaded.
    """
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    orchestrator = ScannerOrchestrator(configPath)
    orchestrator.setDebugEnabled(debugMode or orchestrator.isDebugEnabled())

    return app, MainWindow(orchestrator), orchestrator


def main():
    args = parseArgs()
    debugMode = args.debug or os.environ.get("DEBUG", "").lower() == "true"
    setupLogging(debugMode=debugMode)
    logger.info(f"{APP_NAME} v{APP_VERSION} starting")

    try:
        app, mainWindow, orchestrator = createApplication(args.config, debugMode)
    except RuntimeError as e:
        logger.error(f"Application failed to start: {e}")
        sys.exit(1)

    mainWindow.show()
    try:
        exitCode = app.exec()
    finally:
        orchestrator.shutdown()

    logger.info(f"Event loop finished with code {exitCode}")
    sys.exit(exitCode)


if __name__ == "__main__":
    main()
