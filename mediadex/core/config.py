"""
Configuration Management Module

Provides configuration management with JSON storage for mediadex.
Holds classification rules, cache bounds, worker counts, watch and
logging options.
"""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .constants import (
    CONFIG_FILENAME,
    EAGER_CONTENT_PREFIXES,
    EXCLUDED_FAMILIES,
    EXTRA_CONTENT_TYPES,
    HIDDEN_MARKER,
    SYSTEM_MARKER_FILES,
)

logger = logging.getLogger(__name__)


# Default configuration values
DEFAULT_CONFIG = {
    # Classification and traversal
    "index": {
        "system_files": sorted(SYSTEM_MARKER_FILES),
        "hidden_marker": HIDDEN_MARKER,
        "include_hidden": False,
        "excluded_families": list(EXCLUDED_FAMILIES),
        "allowed_labels": [],          # e.g. ["application/json"]
        "eager_prefixes": list(EAGER_CONTENT_PREFIXES),
        "extra_types": dict(EXTRA_CONTENT_TYPES),
        "follow_symlinks": False,
    },

    # Content cache
    "cache": {
        "max_entries": None,  # None = unbounded
    },

    # Load cycle worker pool
    "indexer": {
        "max_workers": 4,
    },

    # Filesystem watching
    "watch": {
        "enabled": True,
        "join_timeout": 5.0,
    },

    # Logging
    "logging": {
        "level": "INFO",
        "file_logging": True,
    },
}


_MISSING = object()


def _lookup(tree: dict, key: str) -> Any:
    """Walk a dotted key through nested dicts; _MISSING if any part is absent."""
    node: Any = tree
    for part in key.split('.'):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


def _merged(base: dict, overrides: dict) -> dict:
    """Deep copy of ``base`` with ``overrides`` applied section by section."""
    merged = deepcopy(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merged(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


@dataclass
class ConfigManager:
    """
    JSON-backed settings store for mediadex.

    Values are addressed with dotted keys ("index.include_hidden"). Keys
    absent from the file fall back to DEFAULT_CONFIG, section by section.
    """

    config_dir: Path
    config_file: str = CONFIG_FILENAME
    _values: dict = field(default_factory=dict)
    _loaded: bool = False

    def __post_init__(self):
        self.config_dir = Path(self.config_dir)
        self._values = deepcopy(DEFAULT_CONFIG)

    @property
    def config_path(self) -> Path:
        return self.config_dir / self.config_file

    def load(self) -> bool:
        """
        Read the configuration file over the defaults.

        A missing file leaves the defaults in place; it is not created.

        Returns:
            bool: False if the file exists but could not be used.
        """
        self._loaded = True
        self._values = deepcopy(DEFAULT_CONFIG)

        if not self.config_path.exists():
            logger.debug(f"No configuration at {self.config_path}, using defaults")
            return True

        try:
            stored = json.loads(self.config_path.read_text(encoding='utf-8'))
            if not isinstance(stored, dict):
                raise ValueError("top-level value must be an object")
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Ignoring invalid configuration {self.config_path}: {e}")
            return False
        except OSError as e:
            logger.error(f"Cannot read configuration {self.config_path}: {e}")
            return False

        self._values = _merged(DEFAULT_CONFIG, stored)
        logger.info(f"Loaded configuration from {self.config_path}")
        return True

    def save(self) -> bool:
        """Write the current values; False if the file could not be written."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(
                json.dumps(self._values, indent=2, ensure_ascii=False),
                encoding='utf-8',
            )
        except OSError as e:
            logger.error(f"Cannot write configuration {self.config_path}: {e}")
            return False
        logger.info(f"Saved configuration to {self.config_path}")
        return True

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Value stored under a dotted key.

        Args:
            key: Dotted key, e.g. "index.follow_symlinks"
            default: Returned when the key is absent
        """
        self._ensure_loaded()
        value = _lookup(self._values, key)
        return default if value is _MISSING else value

    def set(self, key: str, value: Any, save: bool = True) -> None:
        """Store ``value`` under a dotted key, creating sections as needed."""
        self._ensure_loaded()
        *sections, leaf = key.split('.')
        node = self._values
        for section in sections:
            node = node.setdefault(section, {})
        node[leaf] = value
        if save:
            self.save()

    def reset(self, key: Optional[str] = None, save: bool = True) -> None:
        """Restore one key, or everything when ``key`` is None, to its default."""
        if key is None:
            self._values = deepcopy(DEFAULT_CONFIG)
            self._loaded = True
        else:
            default = _lookup(DEFAULT_CONFIG, key)
            self.set(key, None if default is _MISSING else deepcopy(default), save=False)
        if save:
            self.save()

    def get_all(self) -> dict:
        self._ensure_loaded()
        return deepcopy(self._values)


@dataclass(frozen=True)
class IndexSettings:
    """Typed view of the configuration consumed by the indexer."""

    system_files: frozenset = frozenset(SYSTEM_MARKER_FILES)
    hidden_marker: str = HIDDEN_MARKER
    include_hidden: bool = False
    excluded_families: Tuple[str, ...] = EXCLUDED_FAMILIES
    allowed_labels: frozenset = frozenset()
    eager_prefixes: Tuple[str, ...] = EAGER_CONTENT_PREFIXES
    extra_types: Dict[str, str] = field(default_factory=lambda: dict(EXTRA_CONTENT_TYPES), hash=False)
    follow_symlinks: bool = False
    cache_max_entries: Optional[int] = None
    max_workers: int = 4
    watch_enabled: bool = True
    watch_join_timeout: float = 5.0

    @classmethod
    def from_config(cls, config: ConfigManager) -> "IndexSettings":
        """Build settings from a configuration manager."""
        max_workers = int(config.get("indexer.max_workers", 4) or 4)
        max_entries = config.get("cache.max_entries")
        return cls(
            system_files=frozenset(config.get("index.system_files", [])),
            hidden_marker=str(config.get("index.hidden_marker", HIDDEN_MARKER)),
            include_hidden=bool(config.get("index.include_hidden", False)),
            excluded_families=tuple(config.get("index.excluded_families", [])),
            allowed_labels=frozenset(config.get("index.allowed_labels", [])),
            eager_prefixes=tuple(config.get("index.eager_prefixes", [])),
            extra_types=dict(config.get("index.extra_types", {})),
            follow_symlinks=bool(config.get("index.follow_symlinks", False)),
            cache_max_entries=int(max_entries) if max_entries else None,
            max_workers=max(1, max_workers),
            watch_enabled=bool(config.get("watch.enabled", True)),
            watch_join_timeout=float(config.get("watch.join_timeout", 5.0)),
        )


# Global configuration instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Process-wide manager for the runtime config directory, loaded on first use."""
    global _config_manager
    if _config_manager is None:
        from mediadex.runtime.runtime_config import get_config_dir
        _config_manager = ConfigManager(config_dir=get_config_dir())
        _config_manager.load()

    return _config_manager


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ``get_config_manager().get(key, default)``."""
    return get_config_manager().get(key, default)


def load_index_settings(config: Optional[ConfigManager] = None) -> IndexSettings:
    """Settings from ``config`` or the global configuration."""
    return IndexSettings.from_config(config or get_config_manager())
