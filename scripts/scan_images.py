#!/usr/bin/env python3
"""
Headless Card Scan Script.

Replays card photos from a directory through a scan session instead of
a live camera, with the same tick interval and countdown as the GUI.

Usage:
    python scripts/scan_images.py --input samples/
    python scripts/scan_images.py --input samples/ --once --debug
    python scripts/scan_images.py --input samples/ --output result.json

Tick Steps:
    S1: Camera   - Next image from the folder
    S2: OCR      - Text detection and recognition
    S3: Parsing  - Card fields from the detections
    then fields accumulate across ticks until all lock or time runs out.

Output:
    The ScannedCard is printed as JSON (and written to --output if given).
"""

import sys
import argparse
import json
import logging
import time
from dataclasses import asdict
from pathlib import Path
from typing import Optional

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.camera.image_folder_camera import ImageFolderCamera
from core.interfaces.card_parser_interface import ScannedCard
from services.impl.scan_session_service import ScanSessionService
from services.interfaces.scan_session_interface import CallbackScanObserver
from ui.scanner_orchestrator import ScannerOrchestrator


logger = logging.getLogger(__name__)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Scan Loop
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def runSession(
    session: ScanSessionService,
    camera: ImageFolderCamera,
    scanInterval: int
) -> Optional[ScannedCard]:
    """
    Drive a session on a monotonic clock until it finishes.

    Ticks run every scanInterval milliseconds and the countdown every
    second. Once a non-looping folder is used up the countdown is run
    out immediately so the session ends with its timeout result.

    Args:
        session: Session with its OCR model loaded.
        camera: Image source used by the session.
        scanInterval: Milliseconds between ticks.

    Returns:
        ScannedCard, or None if the session ended without a result.
    """
    intervalSec = scanInterval / 1000.0
    nextTick = time.monotonic()
    nextSecond = nextTick + 1.0
    result = None

    while result is None and not session.isFinished:
        now = time.monotonic()

        if now >= nextTick:
            result = session.runTick()
            nextTick = now + intervalSec

        if camera.isExhausted:
            logger.info("All images replayed, running out the countdown")
            while result is None and not session.isFinished:
                result = session.countdownTick()
            break

        now = time.monotonic()
        while result is None and now >= nextSecond and not session.isFinished:
            result = session.countdownTick()
            nextSecond += 1.0

        time.sleep(max(0.0, min(nextTick, nextSecond) - time.monotonic()))

    return result or session.result


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CLI Interface
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def setupLogging(debugMode: bool = False) -> None:
    """Log to stdout; DEBUG level when --debug is given."""
    level = logging.DEBUG if debugMode else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def parseArgs() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Headless card scan - replay card photos through a scan session",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/scan_images.py --input samples/
  python scripts/scan_images.py --input samples/ --once --debug
  python scripts/scan_images.py --input samples/ --output result.json
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        default="samples",
        help="Input directory containing card photos (default: samples)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default="config/application_config.json",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Replay the images once instead of looping until the scan ends"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write the scan result as JSON to this file"
    )

    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug mode (saves output to output/debug/)"
    )

    return parser.parse_args()


def scanFolder(args: argparse.Namespace) -> int:
    """Run one scan over ``args.input`` and return the process exit code."""
    camera = ImageFolderCamera(Path(args.input), loop=not args.once)
    orchestrator = ScannerOrchestrator(args.config, cameraCapture=camera)
    if args.debug:
        orchestrator.setDebugEnabled(True)

    try:
        session = orchestrator.createSession(
            CallbackScanObserver(lambda summary: logger.info("Reading:\n" + summary))
        )
        if not orchestrator.cameraService.isOpened():
            logger.error(f"No card photos in {args.input}")
            return 1
        if not session.loadModel():
            logger.error(session.modelStatus)
            return 1

        result = runSession(session, camera, orchestrator.configService.getScanInterval())
        status = session.status.value
    finally:
        orchestrator.shutdown()

    if result is None:
        logger.error(f"Scan ended without a result ({status})")
        return 1

    report = json.dumps({"status": status, "card": asdict(result)}, indent=2, ensure_ascii=False)
    print(report)
    if args.output:
        Path(args.output).write_text(report, encoding="utf-8")
        logger.info(f"Result written to {args.output}")

    return 0 if result.cardNumber else 1


def main():
    args = parseArgs()
    setupLogging(debugMode=args.debug)

    if not Path(args.input).is_dir():
        logger.error(f"Input directory not found: {args.input}")
        sys.exit(1)

    logger.info(f"Replaying {args.input} (config={args.config}, once={args.once}, debug={args.debug})")

    try:
        sys.exit(scanFolder(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except RuntimeError as e:
        logger.error(f"Scanner could not start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
