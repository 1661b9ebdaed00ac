from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from phi_accrual.config import (
    CONFIG_FILE_NAME,
    FailureDetectorConfig,
    discover_config,
    load_config,
)


# ---------------------------------------------------------------------------
# Config dataclass defaults
# ---------------------------------------------------------------------------


class TestFailureDetectorConfig:
    def test_defaults(self) -> None:
        cfg = FailureDetectorConfig()
        assert cfg.threshold == 16.0
        assert cfg.max_sample_size == 200
        assert cfg.min_std_deviation_ms == 500.0
        assert cfg.acceptable_heartbeat_pause_ms == 0
        assert cfg.first_heartbeat_estimate_ms == 500

    def test_custom(self) -> None:
        cfg = FailureDetectorConfig(threshold=12.0, max_sample_size=500)
        assert cfg.threshold == 12.0
        assert cfg.max_sample_size == 500

    def test_frozen(self) -> None:
        cfg = FailureDetectorConfig()
        with pytest.raises(AttributeError):
            cfg.threshold = 1.0  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Loading from TOML
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_full_config(self, tmp_path: Path) -> None:
        toml_file = tmp_path / CONFIG_FILE_NAME
        toml_file.write_text(
            "[failure_detector]\n"
            "threshold = 12.0\n"
            "max_sample_size = 1000\n"
            "min_std_deviation_ms = 100.0\n"
            "acceptable_heartbeat_pause_ms = 3000\n"
            "first_heartbeat_estimate_ms = 1000\n"
        )
        cfg = load_config(toml_file)
        assert cfg == FailureDetectorConfig(
            threshold=12.0,
            max_sample_size=1000,
            min_std_deviation_ms=100.0,
            acceptable_heartbeat_pause_ms=3000,
            first_heartbeat_estimate_ms=1000,
        )

    def test_partial_config_keeps_defaults(self, tmp_path: Path) -> None:
        toml_file = tmp_path / CONFIG_FILE_NAME
        toml_file.write_text("[failure_detector]\nthreshold = 8.0\n")
        cfg = load_config(toml_file)
        assert cfg.threshold == 8.0
        assert cfg.max_sample_size == 200

    def test_missing_table_returns_defaults(self, tmp_path: Path) -> None:
        toml_file = tmp_path / CONFIG_FILE_NAME
        toml_file.write_text('[other]\nname = "x"\n')
        assert load_config(toml_file) == FailureDetectorConfig()

    def test_unknown_key_raises(self, tmp_path: Path) -> None:
        toml_file = tmp_path / CONFIG_FILE_NAME
        toml_file.write_text("[failure_detector]\nthreshhold = 8.0\n")
        with pytest.raises(TypeError):
            load_config(toml_file)

    def test_malformed_toml_raises(self, tmp_path: Path) -> None:
        toml_file = tmp_path / CONFIG_FILE_NAME
        toml_file.write_text("[failure_detector\n")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(toml_file)

    def test_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.toml")


# ---------------------------------------------------------------------------
# Auto-discovery
# ---------------------------------------------------------------------------


class TestDiscoverConfig:
    def test_finds_in_cwd(self, tmp_path: Path) -> None:
        toml_file = tmp_path / CONFIG_FILE_NAME
        toml_file.write_text("[failure_detector]\nthreshold = 4.0\n")
        result = discover_config(tmp_path)
        assert result == toml_file

    def test_walks_up(self, tmp_path: Path) -> None:
        toml_file = tmp_path / CONFIG_FILE_NAME
        toml_file.write_text("[failure_detector]\nthreshold = 4.0\n")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        result = discover_config(child)
        assert result == toml_file

    def test_nearest_file_wins(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILE_NAME).write_text("[failure_detector]\n")
        child = tmp_path / "service"
        child.mkdir()
        nearest = child / CONFIG_FILE_NAME
        nearest.write_text("[failure_detector]\nthreshold = 4.0\n")
        assert discover_config(child / ".") == nearest

    def test_not_found_returns_none(self, tmp_path: Path) -> None:
        child = tmp_path / "isolated"
        child.mkdir()
        result = discover_config(child)
        assert result is None

    def test_load_config_no_args_auto_discovery(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        toml_file = tmp_path / CONFIG_FILE_NAME
        toml_file.write_text("[failure_detector]\nthreshold = 4.0\n")
        monkeypatch.chdir(tmp_path)
        cfg = load_config()
        assert cfg.threshold == 4.0

    def test_load_config_no_args_no_file_returns_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        cfg = load_config()
        assert cfg == FailureDetectorConfig()
