"""Metadata fetch, installer download and hash verification."""

from __future__ import annotations

import hashlib
import http.client
import logging
import os
import shutil
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path

import certifi

from .errors import DownloadError, MetadataFetchError
from .releases import SelectedVersion


logger = logging.getLogger("hostingbundle.service")

USER_AGENT = "HostingBundleUpdater/0.1"
_CHUNK = 1024 * 1024


def _build_ssl_context() -> ssl.SSLContext:
    """Create TLS context with explicit CA handling."""
    if os.environ.get("HOSTINGBUNDLE_ALLOW_INSECURE_TLS", "").strip() == "1":
        return ssl._create_unverified_context()

    ca_bundle = os.environ.get("HOSTINGBUNDLE_CA_BUNDLE", "").strip()
    if ca_bundle:
        return ssl.create_default_context(cafile=ca_bundle)

    return ssl.create_default_context(cafile=certifi.where())


def _urlopen(url: str, timeout: float | None = None, accept: str = "*/*"):
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT, "Accept": accept})
    if timeout is None:
        return urllib.request.urlopen(request, context=_build_ssl_context())
    return urllib.request.urlopen(request, timeout=timeout, context=_build_ssl_context())


def fetch_release_metadata(url: str, timeout: float | None = None) -> bytes:
    logger.info("fetching release metadata from %s", url, extra={"event": "metadata_fetch"})
    try:
        with _urlopen(url, timeout=timeout, accept="application/json") as response:
            return response.read()
    except urllib.error.HTTPError as exc:
        raise MetadataFetchError(f"Metadata request to {url} failed with HTTP {exc.code}") from exc
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
        raise MetadataFetchError(f"Metadata request to {url} failed: {exc}") from exc


def installer_file_name(version: str) -> str:
    return f"dotnet-hosting-{version}-win.exe"


def build_download_url(base: str, version: str) -> str:
    return f"{base.rstrip('/')}/{version}/{installer_file_name(version)}"


def download_file(url: str, dest: Path, timeout: float | None = None) -> Path:
    """Stream ``url`` into ``dest`` via a sibling .part file."""
    partial = dest.with_name(dest.name + ".part")
    try:
        with _urlopen(url, timeout=timeout) as response, partial.open("wb") as fh:
            shutil.copyfileobj(response, fh, _CHUNK)
        partial.replace(dest)
    except urllib.error.HTTPError as exc:
        partial.unlink(missing_ok=True)
        raise DownloadError(f"Download of {url} failed with HTTP {exc.code}") from exc
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
        partial.unlink(missing_ok=True)
        raise DownloadError(f"Download of {url} failed: {exc}") from exc
    return dest


def sha512_file(path: Path) -> str:
    h = hashlib.sha512()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_hash(path: Path, expected: str | None) -> bool:
    if not expected:
        return True
    return sha512_file(path).lower() == expected.strip().lower()


@dataclass(frozen=True)
class DownloadResult:
    version: str
    url: str
    installer_path: Path
    verified: bool


def download_installer(
    selected: SelectedVersion,
    base: str,
    destination_dir: Path,
    check_hash: bool = True,
) -> DownloadResult:
    version = selected.version_string
    url = build_download_url(base, version)

    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DownloadError(f"Cannot create download directory {destination_dir}: {exc}") from exc
    installer_path = destination_dir / installer_file_name(version)

    logger.info("downloading %s to %s", url, installer_path, extra={"event": "download_start"})
    download_file(url, installer_path)

    expected = selected.hosting_bundle_hash if check_hash else None
    if expected and not verify_hash(installer_path, expected):
        installer_path.unlink(missing_ok=True)
        raise DownloadError(f"Checksum verification failed for {installer_path.name} from {url}")

    logger.info("download complete %s", installer_path, extra={"event": "download_complete"})
    return DownloadResult(version=version, url=url, installer_path=installer_path, verified=bool(expected))
