"""
PaddleOCR backend for card text recognition.

Targets the PaddleOCR 3.x ``predict`` API. Document orientation and
unwarping are switched off: the user holds the card flat in front of
the lens, and both stages cost more than they recover on a card face.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np

from core.interfaces.ocr_extractor_interface import (
    IOcrExtractor,
    OcrDetection,
    OcrResult
)


def buildEngineOptions(
    lang: str,
    useTextlineOrientation: bool,
    textDetThresh: float,
    textDetBoxThresh: float,
    textRecScoreThresh: float,
    textDetLimitType: str,
    textDetLimitSideLen: int,
    textDetectionModelName: Optional[str],
    textRecognitionModelName: Optional[str],
    enableMkldnn: bool,
    cpuThreads: int,
    device: str
) -> Dict[str, Any]:
    """Keyword arguments for ``paddleocr.PaddleOCR``; unset model names are left out."""
    options: Dict[str, Any] = dict(
        lang=lang,
        use_doc_orientation_classify=False,
        use_doc_unwarping=False,
        use_textline_orientation=useTextlineOrientation,
        text_det_thresh=textDetThresh,
        text_det_box_thresh=textDetBoxThresh,
        text_rec_score_thresh=textRecScoreThresh,
        text_det_limit_type=textDetLimitType,
        text_det_limit_side_len=textDetLimitSideLen,
        enable_mkldnn=enableMkldnn,
        cpu_threads=cpuThreads,
        device=device,
    )
    if textDetectionModelName:
        options["text_detection_model_name"] = textDetectionModelName
    if textRecognitionModelName:
        options["text_recognition_model_name"] = textRecognitionModelName
    return options


def detectionsFromPage(page: Any) -> List[OcrDetection]:
    """
    Flatten one PaddleOCR page result into OcrDetection objects.

    ``rec_texts``, ``rec_scores`` and ``dt_polys`` are parallel lists;
    a text without a score gets 0.0 and one without a polygon gets no bbox.
    """
    texts = page.get("rec_texts", [])
    scores = page.get("rec_scores", [])
    polygons = page.get("dt_polys", [])

    detections = []
    for i, text in enumerate(texts):
        detections.append(OcrDetection(
            text=str(text),
            score=float(scores[i]) if i < len(scores) else 0.0,
            bbox=np.asarray(polygons[i]).tolist() if i < len(polygons) else None
        ))
    return detections


class PaddleOcrExtractor(IOcrExtractor):
    """
    IOcrExtractor running PaddleOCR in-process.

    Construction only records options. The engine, and the model download
    that may come with it, happens in ``load``.
    """

    def __init__(
        self,
        lang: str = 'en',
        useTextlineOrientation: bool = False,
        textDetThresh: float = 0.3,
        textDetBoxThresh: float = 0.5,
        textRecScoreThresh: float = 0.5,
        textDetLimitType: str = 'max',
        textDetLimitSideLen: int = 960,
        textDetectionModelName: Optional[str] = None,
        textRecognitionModelName: Optional[str] = None,
        enableMkldnn: bool = True,
        cpuThreads: int = 8,
        device: str = 'cpu',
        logger: Optional[logging.Logger] = None
    ):
        self._logger = logger or logging.getLogger(__name__)
        self._engine = None
        self._error: Optional[str] = None
        self._options = buildEngineOptions(
            lang, useTextlineOrientation, textDetThresh, textDetBoxThresh,
            textRecScoreThresh, textDetLimitType, textDetLimitSideLen,
            textDetectionModelName, textRecognitionModelName,
            enableMkldnn, cpuThreads, device
        )
        self._logger.debug(f"PaddleOCR options: {self._options}")

    def load(self) -> bool:
        if self._engine is not None:
            return True

        try:
            from paddleocr import PaddleOCR
        except ImportError as e:
            self._error = f"PaddleOCR not available: {e}"
            self._logger.error(f"{self._error} (install the 'ocr' extra)")
            return False

        try:
            self._engine = PaddleOCR(**self._options)
        except Exception as e:
            self._error = f"PaddleOCR initialization failed: {e}"
            self._logger.error(self._error)
            return False

        self._error = None
        self._logger.info(
            f"PaddleOCR engine up (lang={self._options['lang']}, "
            f"device={self._options['device']})"
        )
        return True

    def isReady(self) -> bool:
        return self._engine is not None

    @property
    def error(self) -> Optional[str]:
        return self._error

    def extract(self, image: np.ndarray) -> OcrResult:
        """
        Run detection and recognition on one frame.

        Raises:
            RuntimeError: engine not loaded, or PaddleOCR raised during predict.
        """
        if self._engine is None:
            raise RuntimeError(self._error or "PaddleOCR engine is not loaded")

        try:
            pages = self._engine.predict(image)
        except Exception as e:
            raise RuntimeError(f"PaddleOCR inference failed: {e}") from e

        detections: List[OcrDetection] = []
        for page in pages or []:
            detections.extend(detectionsFromPage(page))

        for d in detections:
            self._logger.debug(f"  '{d.text}' score={d.score:.3f}")
        return OcrResult(detections=detections, rawResult=pages)

    def release(self) -> None:
        if self._engine is None:
            return
        self._engine = None
        self._logger.info("PaddleOCR engine dropped")
