"""
Config Service Implementation.

Reads application_config.json once at startup and serves typed values to
the orchestrator. Sections follow the tick stages (s1_camera, s2_ocr,
s3_parsing) plus ``scan`` for the session state machine and ``debug``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from core.processor.card_constants import (
    DEFAULT_REQUIRED_TICKS,
    DEFAULT_SAME_LINE_TOLERANCE,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_TIMEOUT,
)
from services.interfaces.config_service_interface import IConfigService

logger = logging.getLogger(__name__)

class ConfigService(IConfigService):
    """
    JSON-backed IConfigService.

    Every getter has a built-in default, so an empty ``{}`` file yields a
    working scanner. A missing or malformed file is fatal: the constructor
    raises RuntimeError instead of guessing.
    """

    def __init__(self, configPath: str = "config/application_config.json"):
        self._config: Dict[str, Any] = {}
        self._configPath = Path(configPath)
        self._debugEnabled = False

        if not self.loadConfig(configPath):
            raise RuntimeError(f"Failed to load configuration from: {configPath}")

    def loadConfig(self, configPath: str) -> bool:
        path = Path(configPath)
        if not path.is_file():
            logger.error(f"No configuration file at {path}")
            return False

        try:
            loaded = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error(f"{path} is not valid JSON: {e}")
            return False
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Could not read {path}: {e}")
            return False

        if not isinstance(loaded, dict):
            logger.error(f"{path} must hold a JSON object at the top level")
            return False

        self._config = loaded
        self._debugEnabled = bool(self.get("debug.enabled", False))
        logger.info(f"Scanner configuration read from {path.absolute()}")
        return True

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Generic Config Access
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key with dot notation support.

        Examples:
            get("scan.timeout") -> 120
            get("s1_camera.cameraIndex") -> 0
        """
        value = self._config
        for part in key.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(part)
            if value is None:
                return default
        return value

    def getServiceConfig(self, serviceName: str) -> Dict[str, Any]:
        """Get all configuration for a specific section."""
        config = self._config.get(serviceName, {})
        return config if isinstance(config, dict) else {}

    def getAllConfig(self) -> Dict[str, Any]:
        """Get complete configuration dictionary."""
        return self._config.copy()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Debug Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getDebugBasePath(self) -> str:
        """Get base path for debug output."""
        return self.get("debug.basePath", "output/debug")

    def isDebugEnabled(self) -> bool:
        """Check if debug mode is enabled."""
        return self._debugEnabled

    def setDebugEnabled(self, enabled: bool) -> None:
        """Enable or disable debug mode at runtime."""
        self._debugEnabled = enabled
        logger.info(f"Debug mode {'enabled' if enabled else 'disabled'}")

    def isPerformanceLoggingEnabled(self) -> bool:
        """Check if performance logging is enabled."""
        return self.get("debug.performanceLogging.enabled", True)

    def getPerformanceLogInterval(self) -> int:
        """Get performance log interval in ticks."""
        return self.get("debug.performanceLogging.logInterval", 10)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # App Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getWindowMinWidth(self) -> int:
        return self.get("app.windowMinWidth", 480)

    def getWindowMinHeight(self) -> int:
        return self.get("app.windowMinHeight", 360)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # S1 Camera Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getCameraIndex(self) -> int:
        return self.get("s1_camera.cameraIndex", 0)

    def getFrameWidth(self) -> int:
        return self.get("s1_camera.frameWidth", 1280)

    def getFrameHeight(self) -> int:
        return self.get("s1_camera.frameHeight", 720)

    def getMaxCameraSearch(self) -> int:
        return self.get("s1_camera.maxCameraSearch", 2)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # S2 OCR Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def isOcrEnabled(self) -> bool:
        """False keeps the OCR model unloaded for the whole run."""
        return self.get("s2_ocr.enabled", True)

    def getOcrLang(self) -> str:
        return self.get("s2_ocr.lang", "en")

    def getOcrDevice(self) -> str:
        return self.get("s2_ocr.device", "cpu")

    def getTextDetThresh(self) -> float:
        return self.get("s2_ocr.textDetThresh", 0.3)

    def getTextDetBoxThresh(self) -> float:
        return self.get("s2_ocr.textDetBoxThresh", 0.5)

    def getTextRecScoreThresh(self) -> float:
        return self.get("s2_ocr.textRecScoreThresh", 0.5)

    def getTextDetectionModelName(self) -> Optional[str]:
        return self.get("s2_ocr.textDetectionModelName")

    def getTextRecognitionModelName(self) -> Optional[str]:
        return self.get("s2_ocr.textRecognitionModelName")

    def getOcrCpuThreads(self) -> int:
        return self.get("s2_ocr.cpuThreads", 8)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # S3 Parsing Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getSameLineTolerance(self) -> float:
        """Get max y difference for detections on one text line."""
        return self.get("s3_parsing.sameLineTolerance", DEFAULT_SAME_LINE_TOLERANCE)

    def getBannedWordsJsonPath(self) -> Optional[str]:
        """Get path of the extra banned words JSON file."""
        return self.get("s3_parsing.bannedWordsJsonPath")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Scan Session Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getScanTimeout(self) -> int:
        """Get scan timeout in seconds."""
        return self.get("scan.timeout", DEFAULT_TIMEOUT)

    def getScanInterval(self) -> int:
        """Get milliseconds between scan ticks."""
        return self.get("scan.scanInterval", DEFAULT_SCAN_INTERVAL)

    def getRequiredTicks(self) -> int:
        """Get consecutive identical observations needed to lock a field."""
        return self.get("scan.requiredTicks", DEFAULT_REQUIRED_TICKS)

    def isFinishOnEssentials(self) -> bool:
        """Check if a scan may finish without the bank name."""
        return self.get("scan.finishOnEssentials", False)
