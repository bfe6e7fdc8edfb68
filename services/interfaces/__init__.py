"""
Services Interfaces Package.

Exports all service interfaces for the card scanner.
"""

from services.interfaces.base_service_interface import (
    IBaseService,
    BaseService
)

from services.interfaces.config_service_interface import IConfigService

from services.interfaces.camera_service_interface import (
    CameraFrame,
    ICameraService
)

from services.interfaces.ocr_service_interface import (
    OcrServiceResult,
    IOcrService
)

from services.interfaces.parsing_service_interface import (
    ParsingServiceResult,
    IParsingService
)

from services.interfaces.scan_session_interface import (
    ScanStatus,
    TERMINAL_STATUSES,
    CapturedDetections,
    IScanObserver,
    CallbackScanObserver,
    IScanSession
)


__all__ = [
    # Base
    "IBaseService",
    "BaseService",
    # Config
    "IConfigService",
    # Step 1: Camera
    "CameraFrame",
    "ICameraService",
    # Step 2: OCR
    "OcrServiceResult",
    "IOcrService",
    # Step 3: Parsing
    "ParsingServiceResult",
    "IParsingService",
    # Scan session
    "ScanStatus",
    "TERMINAL_STATUSES",
    "CapturedDetections",
    "IScanObserver",
    "CallbackScanObserver",
    "IScanSession",
]
