"""
Services Implementation Package.

Exports all service implementations for the card scanner.
"""

from services.impl.config_service import ConfigService
from services.impl.s1_camera_service import S1CameraService
from services.impl.s2_ocr_service import S2OcrService
from services.impl.s3_parsing_service import S3ParsingService
from services.impl.scan_session_service import ScanSessionService


__all__ = [
    "ConfigService",
    "S1CameraService",
    "S2OcrService",
    "S3ParsingService",
    "ScanSessionService",
]
