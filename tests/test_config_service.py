"""Tests for JSON configuration loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from services.impl.config_service import ConfigService

PROJECT_CONFIG = Path(__file__).resolve().parent.parent / "config" / "application_config.json"


def writeConfig(tmp_path: Path, data) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestLoading:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError):
            ConfigService(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{scan: ", encoding="utf-8")
        with pytest.raises(RuntimeError):
            ConfigService(str(path))

    def test_non_object_root(self, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError):
            ConfigService(writeConfig(tmp_path, [1, 2, 3]))

    def test_shipped_config(self) -> None:
        config = ConfigService(str(PROJECT_CONFIG))
        assert config.getScanTimeout() == 120
        assert config.getScanInterval() == 1000
        assert config.getRequiredTicks() == 2
        assert config.isFinishOnEssentials() is False
        assert config.getSameLineTolerance() == 30
        assert config.getBannedWordsJsonPath() is None
        assert config.getTextRecognitionModelName() == "en_PP-OCRv5_mobile_rec"
        assert config.isDebugEnabled() is False


class TestAccess:
    def test_dot_notation(self, tmp_path: Path) -> None:
        config = ConfigService(writeConfig(tmp_path, {"scan": {"timeout": 45}}))
        assert config.get("scan.timeout") == 45
        assert config.get("scan.missing", "fallback") == "fallback"
        assert config.get("scan.timeout.deeper", 7) == 7

    def test_defaults_for_empty_config(self, tmp_path: Path) -> None:
        config = ConfigService(writeConfig(tmp_path, {}))
        assert config.getScanTimeout() == 120
        assert config.getScanInterval() == 1000
        assert config.getRequiredTicks() == 2
        assert config.getCameraIndex() == 0
        assert (config.getFrameWidth(), config.getFrameHeight()) == (1280, 720)
        assert config.isOcrEnabled() is True
        assert config.getOcrLang() == "en"
        assert config.getDebugBasePath() == "output/debug"
        assert config.getPerformanceLogInterval() == 10

    def test_section_values(self, tmp_path: Path) -> None:
        config = ConfigService(writeConfig(tmp_path, {
            "scan": {"timeout": 30, "requiredTicks": 3, "finishOnEssentials": True},
            "s3_parsing": {"sameLineTolerance": 12, "bannedWordsJsonPath": "words.json"},
        }))
        assert config.getScanTimeout() == 30
        assert config.getRequiredTicks() == 3
        assert config.isFinishOnEssentials() is True
        assert config.getSameLineTolerance() == 12
        assert config.getBannedWordsJsonPath() == "words.json"
        assert config.getServiceConfig("scan")["timeout"] == 30
        assert config.getServiceConfig("nothing") == {}

    def test_debug_toggle(self, tmp_path: Path) -> None:
        config = ConfigService(writeConfig(tmp_path, {"debug": {"enabled": True}}))
        assert config.isDebugEnabled() is True
        config.setDebugEnabled(False)
        assert config.isDebugEnabled() is False

    def test_all_config_is_a_copy(self, tmp_path: Path) -> None:
        config = ConfigService(writeConfig(tmp_path, {"scan": {"timeout": 45}}))
        config.getAllConfig()["scan"] = None
        assert config.getScanTimeout() == 45
