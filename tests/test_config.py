from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import yaml

from beatsnap import config

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "config.yaml"
    monkeypatch.setattr(config, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(config, "CONFIG_FILE", path)
    return path


class TestLoadConfig:
    def test_creates_defaults(self, config_file: Path) -> None:
        cfg = config.load_config()
        assert cfg.beat_divisor == 4
        assert cfg.track_length is None
        assert config_file.exists()
        written = yaml.safe_load(config_file.read_text())
        assert written["beat_divisor"] == 4
        assert written["logging"]["level"] == "INFO"

    def test_reads_existing(self, config_file: Path) -> None:
        config_file.write_text("beat_divisor: 12\ntrack_length: 5000\nlogging:\n  level: DEBUG\n")
        cfg = config.load_config()
        assert cfg.beat_divisor == 12
        assert cfg.track_length == 5000.0
        assert cfg.logging.level == "DEBUG"

    def test_empty_file_uses_defaults(self, config_file: Path) -> None:
        config_file.write_text("")
        assert config.load_config().server_port == 9345

    def test_invalid_yaml(self, config_file: Path) -> None:
        config_file.write_text("beat_divisor: [1, 2\n")
        with pytest.raises(RuntimeError, match="invalid YAML"):
            config.load_config()

    def test_invalid_divisor(self, config_file: Path) -> None:
        config_file.write_text("beat_divisor: 0\n")
        with pytest.raises(RuntimeError, match="invalid values"):
            config.load_config()
