"""Process-facing collaborators: runtime listing and installer execution."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from .errors import InstallerError


logger = logging.getLogger("hostingbundle.inspector")

NO_RUNTIMES = "no runtimes found"


@dataclass(frozen=True)
class RuntimeListing:
    text: str
    available: bool


class RuntimeHost(Protocol):
    def list_installed_runtimes(self) -> RuntimeListing: ...

    def run_installer(self, installer_path: Path, silent_flag: str) -> int: ...


class SubprocessRuntimeHost:
    def __init__(self, runtime_command: Sequence[str] = ("dotnet", "--list-runtimes")) -> None:
        self.runtime_command = list(runtime_command)

    def list_installed_runtimes(self) -> RuntimeListing:
        try:
            proc = subprocess.run(self.runtime_command, capture_output=True, text=True)
        except OSError as exc:
            logger.debug("runtime listing unavailable: %s", exc)
            return RuntimeListing(text="", available=False)
        if proc.returncode != 0:
            logger.debug("runtime listing exited with %s: %s", proc.returncode, (proc.stderr or "").strip())
            return RuntimeListing(text=proc.stdout or "", available=False)
        return RuntimeListing(text=proc.stdout or "", available=True)

    def run_installer(self, installer_path: Path, silent_flag: str) -> int:
        return subprocess.call([str(installer_path), silent_flag])


def inspect_runtimes(host: RuntimeHost, phase: str) -> RuntimeListing:
    """Log the installed runtimes; never fails the run."""
    try:
        listing = host.list_installed_runtimes()
    except Exception as exc:
        logger.warning("%s runtime check failed: %s", phase, exc, extra={"event": "runtime_check_failed"})
        listing = RuntimeListing(text="", available=False)

    if not listing.available or not listing.text.strip():
        logger.warning("%s runtime check: %s", phase, NO_RUNTIMES, extra={"event": "runtime_check_empty"})
        return RuntimeListing(text=NO_RUNTIMES, available=False)

    logger.info("%s runtime check:\n%s", phase, listing.text.rstrip(), extra={"event": "runtime_check"})
    return listing


def install(host: RuntimeHost, installer_path: Path, silent_flag: str) -> int:
    logger.info("running %s %s", installer_path, silent_flag, extra={"event": "install_start"})
    try:
        code = host.run_installer(installer_path, silent_flag)
    except OSError as exc:
        raise InstallerError(f"Could not launch installer {installer_path}: {exc}") from exc
    if code != 0:
        raise InstallerError(f"Installer {installer_path} exited with code {code}")
    logger.info("installer finished", extra={"event": "install_complete"})
    return code
