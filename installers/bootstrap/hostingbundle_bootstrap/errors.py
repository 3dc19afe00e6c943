"""Failure types raised by the updater pipeline stages."""

from __future__ import annotations


class BootstrapError(RuntimeError):
    """Base class for failures that abort the remaining pipeline stages."""


class MetadataFetchError(BootstrapError):
    pass


class MetadataParseError(BootstrapError):
    pass


class DownloadError(BootstrapError):
    pass


class InstallerError(BootstrapError):
    pass
