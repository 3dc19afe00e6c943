"""Release metadata model and ASP.NET Core runtime version selection."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable

from .errors import MetadataParseError


logger = logging.getLogger("hostingbundle.releases")

HOSTING_BUNDLE_FILE = "dotnet-hosting-win.exe"


@dataclass(frozen=True, order=True)
class RuntimeVersion:
    """Dotted numeric version; a shorter tuple sorts before its extensions."""

    parts: tuple[int, ...]

    @classmethod
    def parse(cls, text: str) -> "RuntimeVersion":
        if not isinstance(text, str) or not text.strip():
            raise ValueError(f"Empty version string: {text!r}")
        parts = []
        for piece in text.strip().split("."):
            if not (piece.isascii() and piece.isdigit()):
                raise ValueError(f"Invalid version component {piece!r} in {text!r}")
            parts.append(int(piece))
        return cls(parts=tuple(parts))

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)


@dataclass(frozen=True)
class RuntimeFile:
    name: str
    url: str | None = None
    hash: str | None = None


@dataclass(frozen=True)
class AspNetCoreRuntimeInfo:
    version: str
    files: tuple[RuntimeFile, ...] = ()

    def find_file(self, name: str) -> RuntimeFile | None:
        for item in self.files:
            if item.name.lower() == name.lower():
                return item
        return None


@dataclass(frozen=True)
class ReleaseEntry:
    release_version: str
    aspnetcore_runtime: AspNetCoreRuntimeInfo | None = None


@dataclass(frozen=True)
class ReleaseMetadataDocument:
    releases: tuple[ReleaseEntry, ...] = ()


@dataclass(frozen=True)
class SelectedVersion:
    entry: ReleaseEntry
    version: RuntimeVersion

    @property
    def version_string(self) -> str:
        # Substitute the string as published, not the normalized tuple.
        runtime = self.entry.aspnetcore_runtime
        return runtime.version.strip() if runtime else str(self.version)

    @property
    def hosting_bundle_hash(self) -> str | None:
        runtime = self.entry.aspnetcore_runtime
        if runtime is None:
            return None
        item = runtime.find_file(HOSTING_BUNDLE_FILE)
        return item.hash if item and item.hash else None


def _parse_files(raw: Any) -> tuple[RuntimeFile, ...]:
    if not isinstance(raw, list):
        return ()
    out: list[RuntimeFile] = []
    for item in raw:
        if isinstance(item, dict) and isinstance(item.get("name"), str):
            out.append(RuntimeFile(name=item["name"], url=item.get("url"), hash=item.get("hash")))
    return tuple(out)


def _parse_runtime(raw: Any) -> AspNetCoreRuntimeInfo | None:
    if not isinstance(raw, dict):
        return None
    version = raw.get("version")
    if version is None:
        return None
    return AspNetCoreRuntimeInfo(version=str(version), files=_parse_files(raw.get("files")))


def _parse_entry(raw: dict[str, Any]) -> ReleaseEntry:
    return ReleaseEntry(
        release_version=str(raw.get("release-version") or ""),
        aspnetcore_runtime=_parse_runtime(raw.get("aspnetcore-runtime")),
    )


def parse_release_metadata(payload: bytes | str) -> ReleaseMetadataDocument:
    try:
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8-sig")
        data = json.loads(payload)
    except (UnicodeDecodeError, ValueError) as exc:
        raise MetadataParseError(f"Release metadata is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MetadataParseError("Release metadata must be a JSON object")
    releases = data.get("releases")
    if not isinstance(releases, list):
        raise MetadataParseError("Release metadata has no 'releases' array")

    return ReleaseMetadataDocument(
        releases=tuple(_parse_entry(item) for item in releases if isinstance(item, dict)),
    )


def select_latest(entries: Iterable[ReleaseEntry]) -> SelectedVersion | None:
    """Pick the entry with the highest ASP.NET Core runtime version.

    Entries without runtime info are ignored and entries whose version does not
    parse are logged and skipped. On equal versions the first entry is kept.
    """
    best: SelectedVersion | None = None
    for entry in entries:
        runtime = entry.aspnetcore_runtime
        if runtime is None:
            continue
        try:
            parsed = RuntimeVersion.parse(runtime.version)
        except ValueError as exc:
            logger.warning(
                "skipping release %s: %s",
                entry.release_version or "<unknown>",
                exc,
                extra={"event": "version_parse_skipped"},
            )
            continue
        if best is None or parsed > best.version:
            best = SelectedVersion(entry=entry, version=parsed)
    return best
