"""
Config Service Interface Module.

Read side of application_config.json as seen by the scanner orchestrator
and the replay script. Only settings the scan session itself depends on
are abstract here; stage-specific getters live on ConfigService.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class IConfigService(ABC):
    """Settings source for one scanner process."""

    @abstractmethod
    def loadConfig(self, configPath: str) -> bool:
        """Replace the current settings with ``configPath``; False leaves them as they were."""
        pass

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Dotted lookup, e.g. ``get("scan.timeout", 120)``.

        Any missing level, or a non-object on the way down, yields ``default``.
        """
        pass

    @abstractmethod
    def getServiceConfig(self, serviceName: str) -> Dict[str, Any]:
        """Whole section such as ``"scan"`` or ``"s2_ocr"``; ``{}`` when absent."""
        pass

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Scan session
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @abstractmethod
    def getScanTimeout(self) -> int:
        """Countdown length in seconds."""
        pass

    @abstractmethod
    def getScanInterval(self) -> int:
        """Milliseconds between tick starts."""
        pass

    @abstractmethod
    def getRequiredTicks(self) -> int:
        pass

    @abstractmethod
    def isFinishOnEssentials(self) -> bool:
        pass

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Debug artifacts
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @abstractmethod
    def getDebugBasePath(self) -> str:
        pass

    @abstractmethod
    def isDebugEnabled(self) -> bool:
        pass

    @abstractmethod
    def setDebugEnabled(self, enabled: bool) -> None:
        """Runtime switch; the orchestrator forwards it to every stage."""
        pass
