"""
Per-tick stage timings for the scan loop.

The session hands over one ``{"capture_ms": .., "ocr_ms": ..}`` dict per
tick. The logger keeps a short rolling window of tick totals, prints a
summary line every ``logInterval`` ticks and feeds the status bar through
``onUpdate``.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional


logger = logging.getLogger(__name__)

STAGE_KEYS = ("capture_ms", "ocr_ms", "parse_ms", "accumulate_ms")


@dataclass
class TimingInfo:
    """Milliseconds spent in each stage of one tick, plus the rolling rate."""
    captureMs: float = 0.0
    ocrMs: float = 0.0
    parseMs: float = 0.0
    accumulateMs: float = 0.0
    totalMs: float = 0.0
    ticksPerSecond: float = 0.0

    def __repr__(self) -> str:
        stages = (
            f"capture={self.captureMs:.1f}ms, ocr={self.ocrMs:.1f}ms, "
            f"parse={self.parseMs:.1f}ms, accumulate={self.accumulateMs:.1f}ms"
        )
        return f"{stages} | Total={self.totalMs:.1f}ms | TPS={self.ticksPerSecond:.2f}"


class PerformanceLogger:
    """
    Rolling tick statistics.

    ``ticksPerSecond`` is what the pipeline could sustain back to back,
    derived from the average tick total, not the configured scan interval.
    """

    def __init__(
        self,
        enabled: bool = True,
        logInterval: int = 10,
        rollingWindowSize: int = 30,
        onUpdate: Optional[Callable[[TimingInfo], None]] = None
    ):
        """
        Args:
            logInterval: Emit an INFO line every N ticks; 0 keeps quiet.
            rollingWindowSize: Ticks averaged for getTotalTime.
        """
        self._enabled = enabled
        self._logInterval = logInterval
        self._onUpdate = onUpdate

        self._window: Deque[float] = deque(maxlen=rollingWindowSize)
        self._tickCount = 0
        self._lastTiming = TimingInfo()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    @property
    def onUpdate(self) -> Optional[Callable[[TimingInfo], None]]:
        return self._onUpdate

    @onUpdate.setter
    def onUpdate(self, callback: Optional[Callable[[TimingInfo], None]]) -> None:
        self._onUpdate = callback

    @property
    def tickCount(self) -> int:
        """Ticks recorded since construction or the last reset."""
        return self._tickCount

    def recordTiming(self, timing: Dict[str, float]) -> TimingInfo:
        """
        Store one tick. Stage keys that are absent count as zero, so a tick
        that stopped after capture still lands in the window.
        """
        if not self._enabled:
            return TimingInfo()

        capture, ocr, parse, accumulate = (timing.get(key, 0.0) for key in STAGE_KEYS)
        total = capture + ocr + parse + accumulate
        self._window.append(total)
        self._tickCount += 1

        self._lastTiming = TimingInfo(
            captureMs=capture,
            ocrMs=ocr,
            parseMs=parse,
            accumulateMs=accumulate,
            totalMs=total,
            ticksPerSecond=self.getAverageTicksPerSecond()
        )

        if self._logInterval > 0 and self._tickCount % self._logInterval == 0:
            logger.info(f"Performance: {self._lastTiming}")

        if self._onUpdate:
            self._onUpdate(self._lastTiming)

        return self._lastTiming

    def getAverageTicksPerSecond(self) -> float:
        averageMs = self.getTotalTime()
        return 1000.0 / averageMs if averageMs > 0 else 0.0

    def getTotalTime(self) -> float:
        """Average tick total over the window, in milliseconds."""
        if not self._window:
            return 0.0
        return sum(self._window) / len(self._window)

    def getLastTiming(self) -> TimingInfo:
        return self._lastTiming

    def reset(self) -> None:
        """Forget everything; called when a new scan session starts."""
        self._window.clear()
        self._tickCount = 0
        self._lastTiming = TimingInfo()
