"""Tests for settings resolution (env > yaml > default) and EngineConfig."""

from __future__ import annotations

from pathlib import Path

import pytest

from floplab.utils.config import EngineConfig
from floplab.utils.settings import Settings


@pytest.fixture
def yaml_file(tmp_path: Path) -> Path:
    path = tmp_path / "floplab.yaml"
    path.write_text(
        "engine:\n"
        "  iterations: 1200\n"
        "  workers: 3\n"
        "  seed: 17\n"
        "  poll_interval: 0.2\n"
        "  parallel: yes\n",
        encoding="utf-8",
    )
    return path


class TestSettings:
    def test_reads_yaml_values(self, yaml_file: Path) -> None:
        settings = Settings(yaml_file)
        assert settings.get_int("engine.iterations") == 1200
        assert settings.get_optional_int("engine.seed") == 17
        assert settings.get_float("engine.poll_interval") == pytest.approx(0.2)
        assert settings.get_bool("engine.parallel") is True

    def test_env_beats_yaml(self, yaml_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLOPLAB_ENGINE_ITERATIONS", "99")
        monkeypatch.setenv("FLOPLAB_ENGINE_SEED", "none")
        settings = Settings(yaml_file)
        assert settings.get_int("engine.iterations") == 99
        assert settings.get_optional_int("engine.seed") is None

    def test_missing_keys_use_default(self, yaml_file: Path) -> None:
        settings = Settings(yaml_file)
        assert settings.get_int("engine.min_batch", 250) == 250
        assert settings.get_str("engine.nothing", "x") == "x"
        assert settings.get_optional_int("engine.nothing") is None

    def test_bad_env_value_falls_through(self, yaml_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLOPLAB_ENGINE_WORKERS", "many")
        assert Settings(yaml_file).get_int("engine.workers", 1) == 3

    def test_broken_yaml_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("engine: [unclosed\n", encoding="utf-8")
        assert Settings(path).get_int("engine.iterations", 5000) == 5000

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert Settings(tmp_path / "absent.yaml").get_int("engine.iterations", 5000) == 5000

    def test_reload_picks_up_changes(self, yaml_file: Path) -> None:
        settings = Settings(yaml_file)
        assert settings.get_int("engine.workers") == 3
        yaml_file.write_text("engine:\n  workers: 5\n", encoding="utf-8")
        settings.reload()
        assert settings.get_int("engine.workers") == 5


class TestEngineConfig:
    def test_env_read_at_instantiation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLOPLAB_ENGINE_ITERATIONS", "777")
        monkeypatch.setenv("FLOPLAB_ENGINE_WORKERS", "4")
        monkeypatch.setenv("FLOPLAB_ENGINE_SEED", "8")
        config = EngineConfig()
        assert config.iterations == 777
        assert config.workers == 4
        assert config.seed == 8

    def test_values_are_clamped(self) -> None:
        config = EngineConfig(iterations=0, workers=-2, seed=None, poll_interval=0.0, min_batch=0)
        assert config.iterations == 1
        assert config.workers == 1
        assert config.min_batch == 1
        assert config.poll_interval > 0.0

    @pytest.mark.parametrize(
        ("workers", "iterations", "expected"),
        [(4, 5000, 4), (4, 600, 2), (4, 100, 1), (1, 100_000, 1)],
    )
    def test_effective_workers(self, workers: int, iterations: int, expected: int) -> None:
        config = EngineConfig(iterations=iterations, workers=workers, seed=None, min_batch=250)
        assert config.effective_workers(iterations) == expected
