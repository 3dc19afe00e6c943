"""Persistent updater settings schema and load/save helpers."""

from __future__ import annotations

import json
import logging
import os
import platform
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 2

DEFAULT_CHANNEL = "9.0"
METADATA_URL_TEMPLATE = "https://dotnetcli.blob.core.windows.net/dotnet/release-metadata/{channel}/releases.json"
DOWNLOAD_BASE = "https://dotnetcli.azureedge.net/dotnet/aspnetcore/Runtime"
SILENT_FLAG = "/quiet"
RUNTIME_COMMAND = ("dotnet", "--list-runtimes")

_CHANNEL_RE = re.compile(r"\d+\.\d+")
_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("PROGRAMDATA", r"C:\ProgramData"))
        return base / "HostingBundleUpdater"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "HostingBundleUpdater"
    return Path.home() / ".config" / "hostingbundle"


def config_path() -> Path:
    return config_root() / "config.json"


@dataclass
class ReleaseConfig:
    channel: str = DEFAULT_CHANNEL
    metadata_url: str | None = None
    download_base: str = DOWNLOAD_BASE


@dataclass
class InstallConfig:
    silent_flag: str = SILENT_FLAG
    runtime_command: list[str] = field(default_factory=lambda: list(RUNTIME_COMMAND))
    verify_hash: bool = True


@dataclass
class PathsConfig:
    log_dir: str | None = None
    download_dir: str | None = None


@dataclass
class LoggingConfig:
    console: bool = True
    level: str = "INFO"


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    install: InstallConfig = field(default_factory=InstallConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


@dataclass(frozen=True)
class RunConfig:
    """Everything a single pipeline run needs, resolved up front."""

    metadata_url: str
    download_base: str
    log_dir: Path
    download_dir: Path
    silent_flag: str = SILENT_FLAG
    runtime_command: tuple[str, ...] = RUNTIME_COMMAND
    verify_hash: bool = True
    install: bool = True
    console: bool = True
    log_level: int = logging.INFO


def is_valid_channel(channel: str) -> bool:
    return isinstance(channel, str) and _CHANNEL_RE.fullmatch(channel) is not None


def metadata_url_for(channel: str) -> str:
    return METADATA_URL_TEMPLATE.format(channel=channel)


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_release(cfg: AppConfig) -> None:
    channel = str(cfg.release.channel or "").strip()
    cfg.release.channel = channel if is_valid_channel(channel) else DEFAULT_CHANNEL
    cfg.release.download_base = (cfg.release.download_base or DOWNLOAD_BASE).rstrip("/")


def _normalize_install(cfg: AppConfig) -> None:
    cfg.install.silent_flag = str(cfg.install.silent_flag or "").strip() or SILENT_FLAG
    command = cfg.install.runtime_command
    if not isinstance(command, list) or not command or not all(isinstance(p, str) for p in command):
        cfg.install.runtime_command = list(RUNTIME_COMMAND)
    cfg.install.verify_hash = bool(cfg.install.verify_hash)


def _normalize_logging(cfg: AppConfig) -> None:
    level = str(cfg.logging.level or "").upper()
    cfg.logging.level = level if level in _LEVELS else "INFO"
    cfg.logging.console = bool(cfg.logging.console)


def _migrate(raw: dict[str, Any]) -> dict[str, Any]:
    version = int(raw.get("config_version", 1))
    data = dict(raw)

    if version < 2:
        # v1 kept channel and directories at the top level.
        release = dict(data.get("release", {}) or {})
        if "channel" in data:
            release.setdefault("channel", data.pop("channel"))
        paths = dict(data.get("paths", {}) or {})
        for key in ("log_dir", "download_dir"):
            if key in data:
                paths.setdefault(key, data.pop(key))
        data["release"] = release
        data["paths"] = paths
        data["config_version"] = 2

    return data


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()

    data = _migrate(raw)
    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        release=_merge(ReleaseConfig, data.get("release", {})),
        install=_merge(InstallConfig, data.get("install", {})),
        paths=_merge(PathsConfig, data.get("paths", {})),
        logging=_merge(LoggingConfig, data.get("logging", {})),
    )

    _normalize_release(cfg)
    _normalize_install(cfg)
    _normalize_logging(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path


def to_run_config(
    cfg: AppConfig,
    *,
    channel: str | None = None,
    log_dir: Path | None = None,
    download_dir: Path | None = None,
    install: bool = True,
    verify_hash: bool | None = None,
    console: bool | None = None,
) -> RunConfig:
    """Resolve persisted settings plus command line overrides into a RunConfig."""
    if channel:
        if not is_valid_channel(channel):
            raise ValueError(f"Invalid channel {channel!r}, expected major.minor such as 9.0")
        metadata_url = metadata_url_for(channel)
    else:
        metadata_url = cfg.release.metadata_url or metadata_url_for(cfg.release.channel)

    root = config_root()
    resolved_log_dir = log_dir or (Path(cfg.paths.log_dir) if cfg.paths.log_dir else root / "logs")
    resolved_download_dir = download_dir or (
        Path(cfg.paths.download_dir) if cfg.paths.download_dir else root / "downloads"
    )

    return RunConfig(
        metadata_url=metadata_url,
        download_base=cfg.release.download_base,
        log_dir=resolved_log_dir,
        download_dir=resolved_download_dir,
        silent_flag=cfg.install.silent_flag,
        runtime_command=tuple(cfg.install.runtime_command),
        verify_hash=cfg.install.verify_hash if verify_hash is None else verify_hash,
        install=install,
        console=cfg.logging.console if console is None else console,
        log_level=getattr(logging, cfg.logging.level, logging.INFO),
    )
