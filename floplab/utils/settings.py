"""Centralised settings loader for ``floplab.yaml``.

Reads the YAML file and exposes its values through typed getters.
Environment variables ``FLOPLAB_*`` **always win** over the YAML; the
file is the friendly fallback.

Usage::

    from floplab.utils.settings import settings

    settings.get_int("engine.iterations", 5000)
    settings.get_bool("engine.parallel")

Equivalent environment variable: the key ``engine.iterations`` becomes
``FLOPLAB_ENGINE_ITERATIONS``.

Loading is lazy (first access) and thread-safe.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any

import yaml

_log = logging.getLogger("floplab.settings")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _find_config_path() -> Path:
    """Resolve ``floplab.yaml``: env override, then cwd, then the package tree."""
    env_path = os.getenv("FLOPLAB_CONFIG_FILE", "").strip()
    if env_path:
        return Path(env_path)

    cwd_candidate = Path.cwd() / "floplab.yaml"
    if cwd_candidate.exists():
        return cwd_candidate

    start = Path(__file__).resolve().parent
    for ancestor in [start.parent, start.parent.parent]:
        candidate = ancestor / "floplab.yaml"
        if candidate.exists():
            return candidate

    return cwd_candidate


class Settings:
    """Dotted-key settings with ``env > yaml > default`` priority.

    Attributes:
        _data: Raw mapping loaded from the YAML file.
        _loaded: Whether the YAML has been read yet.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._data: dict[str, Any] = {}
        self._loaded: bool = False
        self._lock = threading.Lock()

    # ── Lazy loading ──────────────────────────────────────────────

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            self._load()
            self._loaded = True

    def _load(self) -> None:
        config_path = self._path or _find_config_path()
        if not config_path.exists():
            self._data = {}
            return
        try:
            with open(config_path, "r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError) as exc:
            _log.warning("Could not read %s (%s), using defaults", config_path, exc)
            self._data = {}
            return
        if isinstance(raw, dict):
            self._data = raw
        else:
            _log.warning("Ignoring %s: top level is not a mapping", config_path)
            self._data = {}

    def reload(self) -> None:
        """Force a re-read of the file."""
        with self._lock:
            self._loaded = False
            self._load()
            self._loaded = True

    # ── Dotted-key access ─────────────────────────────────────────

    def _resolve(self, dotted_key: str) -> Any:
        """Resolve ``engine.iterations`` → ``data["engine"]["iterations"]``."""
        self._ensure_loaded()
        node: Any = self._data
        for part in dotted_key.split("."):
            if not isinstance(node, dict):
                return None
            node = node.get(part)
        return node

    @staticmethod
    def _env_key(dotted_key: str) -> str:
        return "FLOPLAB_" + dotted_key.upper().replace(".", "_")

    def _env(self, key: str) -> str:
        return os.getenv(self._env_key(key), "").strip()

    # ── Typed getters ─────────────────────────────────────────────

    def get_str(self, key: str, default: str = "") -> str:
        env_val = self._env(key)
        if env_val:
            return env_val
        yaml_val = self._resolve(key)
        if yaml_val is not None:
            return str(yaml_val)
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        env_val = self._env(key)
        if env_val:
            try:
                return int(env_val)
            except ValueError:
                _log.warning("Ignoring non-integer %s=%r", self._env_key(key), env_val)
        yaml_val = self._resolve(key)
        if yaml_val is not None:
            try:
                return int(yaml_val)
            except (ValueError, TypeError):
                _log.warning("Ignoring non-integer %s=%r in config file", key, yaml_val)
        return default

    def get_optional_int(self, key: str) -> int | None:
        """Integer setting that may be absent (e.g. an RNG seed)."""
        raw = self.get_str(key, "").strip()
        if not raw or raw.lower() in {"none", "null"}:
            return None
        try:
            return int(raw)
        except ValueError:
            _log.warning("Ignoring non-integer %s=%r", key, raw)
            return None

    def get_float(self, key: str, default: float = 0.0) -> float:
        env_val = self._env(key)
        if env_val:
            try:
                return float(env_val)
            except ValueError:
                _log.warning("Ignoring non-numeric %s=%r", self._env_key(key), env_val)
        yaml_val = self._resolve(key)
        if yaml_val is not None:
            try:
                return float(yaml_val)
            except (ValueError, TypeError):
                _log.warning("Ignoring non-numeric %s=%r in config file", key, yaml_val)
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        env_val = self._env(key).lower()
        if env_val in _TRUE_VALUES:
            return True
        if env_val in _FALSE_VALUES:
            return False
        yaml_val = self._resolve(key)
        if isinstance(yaml_val, bool):
            return yaml_val
        if yaml_val is not None:
            raw = str(yaml_val).strip().lower()
            if raw in _TRUE_VALUES:
                return True
            if raw in _FALSE_VALUES:
                return False
        return default

    def __repr__(self) -> str:
        self._ensure_loaded()
        return f"<Settings sections={list(self._data.keys())}>"


settings = Settings()
