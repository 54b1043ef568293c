"""
Bootstrap Module

Prepares the process before the indexer runs: checks the interpreter,
verifies dependencies and configures logging (console plus a rotating
log file under the runtime logs directory).
"""

from __future__ import annotations

import importlib.util
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from mediadex.core.constants import LOG_FILENAME

from .runtime_config import get_logs_dir, get_runtime_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

logger = logging.getLogger(__name__)


class BootstrapError(Exception):
    """The process cannot run: unsupported interpreter or missing dependency."""


class RuntimeBootstrap:
    """
    One-time process setup.

    Steps, in order: interpreter check, dependency check, logging. The
    first two are fatal; logging problems are collected as warnings and
    reported once logging works.
    """

    def __init__(self):
        self._initialized = False
        self._errors: List[str] = []
        self._warnings: List[str] = []

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def errors(self) -> List[str]:
        return list(self._errors)

    @property
    def warnings(self) -> List[str]:
        return list(self._warnings)

    def bootstrap(
        self,
        level: Optional[str] = None,
        file_logging: Optional[bool] = None,
    ) -> bool:
        """
        Run setup once; later calls return immediately.

        Args:
            level: Log level name; the configured level when omitted.
            file_logging: Write the rotating log file; configured when omitted.

        Raises:
            BootstrapError: The interpreter or a dependency is unusable.
        """
        if self._initialized:
            return True

        self._fail_if(self._interpreter_problem())
        self._fail_if(self._dependency_problem())
        self._setup_logging(level, file_logging)

        self._initialized = True
        for warning in self._warnings:
            logger.warning(warning)
        logger.debug("Runtime ready")
        return True

    def _fail_if(self, problem: Optional[str]) -> None:
        if problem:
            self._errors.append(problem)
            raise BootstrapError(problem)

    def _interpreter_problem(self) -> Optional[str]:
        supported, message = get_runtime_config().validate_python_version()
        return None if supported else message

    def _dependency_problem(self) -> Optional[str]:
        missing = [
            name for name in get_runtime_config().required_dependencies
            if importlib.util.find_spec(name) is None
        ]
        if not missing:
            return None
        return f"Missing required dependencies: {', '.join(missing)}. Reinstall mediadex to restore them."

    def _setup_logging(self, level: Optional[str], file_logging: Optional[bool]) -> None:
        from mediadex.core.config import get_config

        level_name = str(level or get_config("logging.level", "INFO")).upper()
        numeric_level = logging.getLevelName(level_name)
        if not isinstance(numeric_level, int):
            self._warnings.append(f"Unknown log level '{level_name}', using INFO")
            numeric_level = logging.INFO

        logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
        logging.getLogger().setLevel(numeric_level)

        if file_logging is None:
            file_logging = bool(get_config("logging.file_logging", True))
        if file_logging:
            self._attach_log_file(get_logs_dir() / LOG_FILENAME)

    def _attach_log_file(self, log_file: Path) -> None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUPS,
                encoding="utf-8",
            )
        except OSError as e:
            self._warnings.append(f"File logging disabled, cannot open {log_file}: {e}")
            return

        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)
        logger.debug(f"Logging to {log_file}")


_bootstrap: Optional[RuntimeBootstrap] = None


def get_bootstrap() -> RuntimeBootstrap:
    """Process-wide bootstrap instance."""
    global _bootstrap
    if _bootstrap is None:
        _bootstrap = RuntimeBootstrap()
    return _bootstrap


def bootstrap(level: Optional[str] = None, file_logging: Optional[bool] = None) -> bool:
    """
    Set up the process. Call once at start, before creating an indexer.

    Raises:
        BootstrapError: If the runtime cannot be used.
    """
    return get_bootstrap().bootstrap(level=level, file_logging=file_logging)


def is_bootstrapped() -> bool:
    return get_bootstrap().is_initialized
