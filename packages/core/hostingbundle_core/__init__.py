"""Core updater services for settings and per-run logging."""

from .config import AppConfig, RunConfig, load_config, metadata_url_for, save_config, to_run_config
from .logging_setup import JsonFormatter, configure_console, get_logger, run_log

__all__ = [
    "AppConfig",
    "JsonFormatter",
    "RunConfig",
    "configure_console",
    "get_logger",
    "load_config",
    "metadata_url_for",
    "run_log",
    "save_config",
    "to_run_config",
]
