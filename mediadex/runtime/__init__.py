"""
Runtime Module

Handles process-level setup:
- Runtime directories (configuration, logs)
- Interpreter and dependency checks
- Logging initialization

Usage:
    # Bootstrap the runtime (call this first)
    from mediadex.runtime import bootstrap
    bootstrap()

    # Get runtime configuration
    from mediadex.runtime import get_runtime_config
    config = get_runtime_config()
"""

from .runtime_config import (
    RuntimeConfig,
    RuntimePaths,
    get_runtime_config,
    get_config_dir,
    get_logs_dir,
)

from .bootstrap import (
    BootstrapError,
    RuntimeBootstrap,
    bootstrap,
    get_bootstrap,
    is_bootstrapped,
)

__all__ = [
    # Runtime configuration
    "RuntimeConfig",
    "RuntimePaths",
    "get_runtime_config",
    "get_config_dir",
    "get_logs_dir",
    # Bootstrap
    "BootstrapError",
    "RuntimeBootstrap",
    "bootstrap",
    "get_bootstrap",
    "is_bootstrapped",
]
