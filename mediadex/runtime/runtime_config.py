"""
Runtime Configuration Module

Resolves the directories mediadex uses at runtime (configuration and logs)
and validates the interpreter version.

The home directory is taken from the ``MEDIADEX_HOME`` environment
variable, falling back to ``~/.mediadex``.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

HOME_ENV_VAR = "MEDIADEX_HOME"
DEFAULT_HOME_NAME = ".mediadex"


@dataclass
class RuntimePaths:
    """Directories under the runtime home."""

    home_dir: Path
    config_dir: Path
    logs_dir: Path

    @classmethod
    def under(cls, home_dir: Path) -> "RuntimePaths":
        return cls(home_dir=home_dir, config_dir=home_dir / "config", logs_dir=home_dir / "logs")


@dataclass
class RuntimeConfig:
    """Where mediadex keeps its files and what it needs to run."""

    is_frozen: bool = False
    min_python_version: Tuple[int, int] = (3, 9)
    paths: Optional[RuntimePaths] = None
    required_dependencies: List[str] = field(default_factory=lambda: ["watchdog"])

    @classmethod
    def detect(cls) -> "RuntimeConfig":
        """Build the configuration for this process from its environment."""
        override = os.environ.get(HOME_ENV_VAR)
        home_dir = Path(override).expanduser() if override else Path.home() / DEFAULT_HOME_NAME
        return cls(
            is_frozen=bool(getattr(sys, "frozen", False)),
            paths=RuntimePaths.under(home_dir),
        )

    def validate_python_version(self) -> Tuple[bool, str]:
        """
        Compare the running interpreter with ``min_python_version``.

        Returns:
            tuple: (supported, human readable message)
        """
        running = sys.version_info[:2]
        found = f"{running[0]}.{running[1]}"
        if running < tuple(self.min_python_version):
            required = ".".join(str(part) for part in self.min_python_version)
            return False, f"Python {required}+ required, found {found}"
        return True, f"Python {found}"


_runtime_config: Optional[RuntimeConfig] = None


def get_runtime_config() -> RuntimeConfig:
    """Process-wide runtime configuration, detected on first use."""
    global _runtime_config
    if _runtime_config is None:
        _runtime_config = RuntimeConfig.detect()
    return _runtime_config


def reset_runtime_config() -> None:
    """Forget the detected configuration so the next access re-detects it."""
    global _runtime_config
    _runtime_config = None


def get_config_dir() -> Path:
    return get_runtime_config().paths.config_dir


def get_logs_dir() -> Path:
    return get_runtime_config().paths.logs_dir
