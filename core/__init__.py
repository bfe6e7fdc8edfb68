# Core module for Card Field Scanner
# Contains interfaces and implementations for camera, OCR, parsing and accumulation

from core.interfaces.camera_interface import ICameraCapture, CameraInfo
from core.interfaces.ocr_extractor_interface import IOcrExtractor, OcrDetection, OcrResult
from core.interfaces.card_parser_interface import ICardParser, ParsedCardFields, ScannedCard
from core.camera.opencv_camera import OpenCVCamera
from core.camera.image_folder_camera import ImageFolderCamera
from core.processor.card_field_parser import CardFieldParser, parseCardFromDetections

__all__ = [
    "ICameraCapture",
    "CameraInfo",
    "IOcrExtractor",
    "OcrDetection",
    "OcrResult",
    "ICardParser",
    "ParsedCardFields",
    "ScannedCard",
    "OpenCVCamera",
    "ImageFolderCamera",
    "CardFieldParser",
    "parseCardFromDetections",
]
