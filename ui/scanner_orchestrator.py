"""
Scanner Orchestrator Module.

Composition root shared by the Qt window and the headless replay script.
One orchestrator owns the three tick stages (S1 capture, S2 OCR,
S3 parsing) for the life of the process and hands them to a fresh
ScanSessionService for every scan the user starts.
"""

import logging
from typing import Optional

from core.interfaces.camera_interface import ICameraCapture
from core.interfaces.ocr_extractor_interface import IOcrExtractor
from services.impl.config_service import ConfigService
from services.impl.s1_camera_service import S1CameraService
from services.impl.s2_ocr_service import S2OcrService
from services.impl.s3_parsing_service import S3ParsingService
from services.impl.scan_session_service import ScanSessionService
from services.interfaces.scan_session_interface import IScanObserver
from services.performance_logger import PerformanceLogger


class ScannerOrchestrator:
    """
    Builds the card scanner from application_config.json.

    Responsibilities:
    - Initialize ConfigService
    - Create the camera, OCR and parsing services with parameters from config
    - Create one ScanSessionService per scan
    """

    def __init__(
        self,
        configPath: str = "config/application_config.json",
        cameraCapture: Optional[ICameraCapture] = None,
        ocrExtractor: Optional[IOcrExtractor] = None
    ):
        """
        Initialize the scanner orchestrator.

        Args:
            configPath: Path to the application configuration file.
            cameraCapture: Capture implementation to use instead of the live camera.
            ocrExtractor: OCR extractor to use instead of PaddleOCR.

        Raises:
            RuntimeError: If the configuration cannot be loaded.
        """
        self._logger = logging.getLogger(__name__)

        self._configService = ConfigService(configPath)
        self._logger.info("ConfigService initialized")

        self._performanceLogger = PerformanceLogger(
            enabled=self._configService.isPerformanceLoggingEnabled(),
            logInterval=self._configService.getPerformanceLogInterval()
        )

        self._initializeServices(
            self._configService.getDebugBasePath(),
            self._configService.isDebugEnabled(),
            cameraCapture,
            ocrExtractor
        )

        self._session: Optional[ScanSessionService] = None

        self._logger.info("ScannerOrchestrator initialized successfully")

    def _initializeServices(
        self,
        debugBasePath: str,
        debugEnabled: bool,
        cameraCapture: Optional[ICameraCapture],
        ocrExtractor: Optional[IOcrExtractor]
    ) -> None:
        """Build S1 to S3 from plain config values; none of them sees ConfigService."""
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # S1 Camera Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._s1CameraService = S1CameraService(
            cameraCapture=cameraCapture,
            frameWidth=self._configService.getFrameWidth(),
            frameHeight=self._configService.getFrameHeight(),
            maxCameraSearch=self._configService.getMaxCameraSearch(),
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # S2 OCR Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._s2OcrService = S2OcrService(
            ocrExtractor=ocrExtractor,
            enabled=self._configService.isOcrEnabled(),
            lang=self._configService.getOcrLang(),
            textDetThresh=self._configService.getTextDetThresh(),
            textDetBoxThresh=self._configService.getTextDetBoxThresh(),
            textRecScoreThresh=self._configService.getTextRecScoreThresh(),
            textDetectionModelName=self._configService.getTextDetectionModelName(),
            textRecognitionModelName=self._configService.getTextRecognitionModelName(),
            cpuThreads=self._configService.getOcrCpuThreads(),
            device=self._configService.getOcrDevice(),
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # S3 Parsing Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._s3ParsingService = S3ParsingService(
            sameLineTolerance=self._configService.getSameLineTolerance(),
            bannedWordsJsonPath=self._configService.getBannedWordsJsonPath(),
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        self._logger.info("Scan services initialized")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Service Getters (For UI/External Access)
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @property
    def configService(self) -> ConfigService:
        return self._configService

    @property
    def cameraService(self) -> S1CameraService:
        return self._s1CameraService

    @property
    def ocrService(self) -> S2OcrService:
        return self._s2OcrService

    @property
    def parsingService(self) -> S3ParsingService:
        return self._s3ParsingService

    @property
    def performanceLogger(self) -> PerformanceLogger:
        return self._performanceLogger

    @property
    def session(self) -> Optional[ScanSessionService]:
        """Session from the last createSession call, None after shutdown."""
        return self._session

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Sessions
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def createSession(self, observer: Optional[IScanObserver] = None) -> ScanSessionService:
        """
        Open the camera and create a new scan session.

        A previous session that is still open is closed first.

        Args:
            observer: Notified with display fields after every tick.

        Returns:
            The new ScanSessionService. The OCR model still has to be
            loaded through session.loadModel().
        """
        if self._session is not None:
            self._session.close()

        if not self._s1CameraService.isOpened():
            self._s1CameraService.openCamera(
                self._configService.getCameraIndex(),
                self._configService.getFrameWidth(),
                self._configService.getFrameHeight()
            )

        self._performanceLogger.reset()

        self._session = ScanSessionService(
            cameraService=self._s1CameraService,
            ocrService=self._s2OcrService,
            parsingService=self._s3ParsingService,
            timeout=self._configService.getScanTimeout(),
            requiredTicks=self._configService.getRequiredTicks(),
            finishOnEssentials=self._configService.isFinishOnEssentials(),
            observer=observer,
            performanceLogger=self._performanceLogger,
            debugBasePath=self._configService.getDebugBasePath(),
            debugEnabled=self._configService.isDebugEnabled()
        )
        return self._session

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Debug Control
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def setDebugEnabled(self, enabled: bool) -> None:
        """
        Enable or disable debug mode for all services.

        Args:
            enabled: True to enable debug output for all services.
        """
        self._configService.setDebugEnabled(enabled)

        self._s1CameraService.setDebugEnabled(enabled)
        self._s2OcrService.setDebugEnabled(enabled)
        self._s3ParsingService.setDebugEnabled(enabled)
        if self._session is not None:
            self._session.setDebugEnabled(enabled)

        self._logger.info(f"Debug mode {'enabled' if enabled else 'disabled'} for all services")

    def isDebugEnabled(self) -> bool:
        """Check if debug mode is enabled."""
        return self._configService.isDebugEnabled()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Lifecycle Management
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def shutdown(self) -> None:
        """
        Close the current session and release camera and OCR resources.

        Call this when the application is closing.
        """
        self._logger.info("Shutting down ScannerOrchestrator...")

        if self._session is not None:
            self._session.close()
            self._session = None
        else:
            self._s1CameraService.closeCamera()
            self._s2OcrService.release()

        self._logger.info("ScannerOrchestrator shutdown complete")
