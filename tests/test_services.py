"""Tests for the camera, OCR and parsing tick services."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List

import cv2
import numpy as np
import pytest

from conftest import FakeOcrExtractor, det, fullCardFrame
from core.camera.image_folder_camera import ImageFolderCamera
from core.interfaces.card_parser_interface import ParsedCardFields
from core.ocr.paddle_ocr_extractor import (
    PaddleOcrExtractor,
    buildEngineOptions,
    detectionsFromPage,
)
from services.impl.s1_camera_service import S1CameraService
from services.impl.s2_ocr_service import S2OcrService
from services.impl.s3_parsing_service import S3ParsingService


@pytest.fixture
def imageFolder(tmp_path: Path) -> Path:
    folder = tmp_path / "cards"
    folder.mkdir()
    for name, value in (("b.png", 200), ("a.png", 100)):
        cv2.imwrite(str(folder / name), np.full((6, 8, 3), value, dtype=np.uint8))
    (folder / "notes.txt").write_text("not an image", encoding="utf-8")
    return folder


def readValues(camera: ImageFolderCamera, count: int) -> List[int]:
    values = []
    for _ in range(count):
        ok, frame = camera.read()
        values.append(int(frame[0, 0, 0]) if ok else None)
    return values


# ── Image folder camera ──────────────────────────────────────────


class TestImageFolderCamera:
    def test_reads_in_name_order_and_loops(self, imageFolder: Path) -> None:
        camera = ImageFolderCamera(imageFolder)
        assert camera.open(0) is True
        assert readValues(camera, 3) == [100, 200, 100]
        assert camera.isExhausted is False

    def test_once_stops_after_last_image(self, imageFolder: Path) -> None:
        camera = ImageFolderCamera(imageFolder, loop=False)
        camera.open(0)
        assert readValues(camera, 3) == [100, 200, None]
        assert camera.isExhausted is True

    def test_explicit_path_list(self, imageFolder: Path) -> None:
        camera = ImageFolderCamera([imageFolder / "b.png"], loop=False)
        camera.open(0)
        assert readValues(camera, 2) == [200, None]

    def test_missing_folder(self, tmp_path: Path) -> None:
        camera = ImageFolderCamera(tmp_path / "missing")
        assert camera.open(0) is False
        assert camera.read() == (False, None)

    def test_empty_folder(self, tmp_path: Path) -> None:
        assert ImageFolderCamera(tmp_path).open(0) is False

    def test_unreadable_image(self, tmp_path: Path) -> None:
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"not a png")
        camera = ImageFolderCamera(tmp_path)
        camera.open(0)
        assert camera.read() == (False, None)

    def test_release(self, imageFolder: Path) -> None:
        camera = ImageFolderCamera(imageFolder)
        camera.open(0)
        camera.release()
        assert camera.isOpened() is False
        assert camera.read() == (False, None)

    def test_single_device_listed(self, imageFolder: Path) -> None:
        cameras = ImageFolderCamera(imageFolder).listAvailableCameras()
        assert [c.index for c in cameras] == [0]


# ── S1 camera service ────────────────────────────────────────────


class TestCameraService:
    def test_capture_before_open_fails(self, imageFolder: Path) -> None:
        service = S1CameraService(cameraCapture=ImageFolderCamera(imageFolder))
        frame = service.captureFrame()
        assert frame.success is False
        assert frame.image is None

    def test_capture_frame(self, imageFolder: Path) -> None:
        service = S1CameraService(cameraCapture=ImageFolderCamera(imageFolder))
        assert service.openCamera(0) is True
        assert service.getCurrentCameraIndex() == 0

        frame = service.captureFrame()
        assert frame.success is True
        assert frame.image.shape == (6, 8, 3)
        assert re.fullmatch(r"frame_\d{8}_\d{6}_\d{3}", frame.frameId)
        assert frame.frameId == f"frame_{frame.timestamp}"

    def test_close_camera(self, imageFolder: Path) -> None:
        service = S1CameraService(cameraCapture=ImageFolderCamera(imageFolder))
        service.openCamera(0)
        service.closeCamera()
        assert service.isOpened() is False
        assert service.captureFrame().success is False

    def test_exhausted_source_fails_capture(self, imageFolder: Path) -> None:
        service = S1CameraService(cameraCapture=ImageFolderCamera(imageFolder, loop=False))
        service.openCamera(0)
        results = [service.captureFrame().success for _ in range(3)]
        assert results == [True, True, False]

    def test_debug_frame_saved(self, imageFolder: Path, tmp_path: Path) -> None:
        debugPath = tmp_path / "debug"
        service = S1CameraService(
            cameraCapture=ImageFolderCamera(imageFolder),
            debugBasePath=str(debugPath),
            debugEnabled=True,
        )
        service.openCamera(0)
        frame = service.captureFrame()
        assert (debugPath / "s1_camera" / f"{frame.frameId}.png").exists()


# ── S2 OCR service ───────────────────────────────────────────────


class TestOcrService:
    def test_not_ready_before_load(self) -> None:
        service = S2OcrService(ocrExtractor=FakeOcrExtractor())
        assert service.isReady() is False
        assert service.getError() is None

        result = service.extractText(np.zeros((4, 4, 3), dtype=np.uint8), "frame_1")
        assert result.success is False

    def test_extract_after_load(self) -> None:
        service = S2OcrService(ocrExtractor=FakeOcrExtractor())
        assert service.loadModel() is True
        assert service.isReady() is True

        result = service.extractText(np.zeros((4, 4, 3), dtype=np.uint8), "frame_1")
        assert result.success is True
        assert [d.text for d in result.ocrData.detections] == [d.text for d in fullCardFrame()]

    def test_empty_result_is_success(self) -> None:
        service = S2OcrService(ocrExtractor=FakeOcrExtractor(detections=[]))
        service.loadModel()
        result = service.extractText(np.zeros((4, 4, 3), dtype=np.uint8), "frame_1")
        assert result.success is True
        assert result.ocrData.detections == []

    def test_missing_image(self) -> None:
        service = S2OcrService(ocrExtractor=FakeOcrExtractor())
        service.loadModel()
        assert service.extractText(None, "frame_1").success is False

    def test_inference_error_reported(self) -> None:
        extractor = FakeOcrExtractor()
        service = S2OcrService(ocrExtractor=extractor)
        service.loadModel()
        extractor.raiseOnExtract = True

        result = service.extractText(np.zeros((4, 4, 3), dtype=np.uint8), "frame_1")
        assert result.success is False
        assert result.errorMessage == "inference exploded"

    def test_load_failure_sets_error(self) -> None:
        service = S2OcrService(ocrExtractor=FakeOcrExtractor(loadError="weights missing"))
        assert service.loadModel() is False
        assert service.getError() == "weights missing"
        assert service.isReady() is False

    def test_disabled(self) -> None:
        service = S2OcrService(ocrExtractor=FakeOcrExtractor(), enabled=False)
        assert service.loadModel() is False
        assert service.getError() == "OCR is disabled in configuration"

    def test_release(self) -> None:
        service = S2OcrService(ocrExtractor=FakeOcrExtractor())
        service.loadModel()
        service.release()
        assert service.isReady() is False


# ── S3 parsing service ───────────────────────────────────────────


class TestParsingService:
    def test_parse(self) -> None:
        result = S3ParsingService().parse(fullCardFrame(), "frame_1")
        assert result.frameId == "frame_1"
        assert result.fields.cardNumber == "4111111111111111"
        assert result.processingTimeMs >= 0.0

    def test_tolerance_passed_to_parser(self) -> None:
        detections = [
            det("4111", x=0, y=0),
            det("1111", x=100, y=0),
            det("1111", x=200, y=40),
            det("1111", x=300, y=40),
        ]
        assert S3ParsingService().parse(detections, "f").fields == ParsedCardFields()
        wide = S3ParsingService(sameLineTolerance=50).parse(detections, "f")
        assert wide.fields.cardNumber == "4111111111111111"

    def test_debug_json_written(self, tmp_path: Path) -> None:
        service = S3ParsingService(debugBasePath=str(tmp_path), debugEnabled=True)
        service.parse(fullCardFrame(), "frame_1")
        assert (tmp_path / "s3_parsing" / "parsed_frame_1.json").exists()


# ── PaddleOCR result mapping ─────────────────────────────────────


class TestPaddleResultMapping:
    def test_page_to_detections(self) -> None:
        page = {
            "rec_texts": ["4111 1111", "12/25"],
            "rec_scores": [0.98],
            "dt_polys": [np.array([[1, 2], [9, 2], [9, 6], [1, 6]])],
        }
        detections = detectionsFromPage(page)
        assert [d.text for d in detections] == ["4111 1111", "12/25"]
        assert detections[0].score == pytest.approx(0.98)
        assert detections[0].bbox == [[1, 2], [9, 2], [9, 6], [1, 6]]
        assert detections[1].score == 0.0
        assert detections[1].bbox is None

    def test_engine_options_skip_unset_models(self) -> None:
        options = buildEngineOptions(
            "en", False, 0.3, 0.5, 0.5, "max", 960,
            None, "en_PP-OCRv5_mobile_rec", True, 4, "cpu"
        )
        assert "text_detection_model_name" not in options
        assert options["text_recognition_model_name"] == "en_PP-OCRv5_mobile_rec"
        assert options["use_doc_unwarping"] is False

    def test_extract_before_load_raises(self) -> None:
        with pytest.raises(RuntimeError):
            PaddleOcrExtractor().extract(np.zeros((4, 4, 3), dtype=np.uint8))
