"""Fetch, select, download and install the latest ASP.NET Core hosting bundle."""

from .errors import BootstrapError, DownloadError, InstallerError, MetadataFetchError, MetadataParseError
from .inspector import RuntimeHost, RuntimeListing, SubprocessRuntimeHost, inspect_runtimes
from .pipeline import PipelineResult, run_pipeline
from .releases import (
    AspNetCoreRuntimeInfo,
    ReleaseEntry,
    ReleaseMetadataDocument,
    RuntimeVersion,
    SelectedVersion,
    parse_release_metadata,
    select_latest,
)
from .service import DownloadResult, build_download_url, download_installer, fetch_release_metadata

__all__ = [
    "AspNetCoreRuntimeInfo",
    "BootstrapError",
    "DownloadError",
    "DownloadResult",
    "InstallerError",
    "MetadataFetchError",
    "MetadataParseError",
    "PipelineResult",
    "ReleaseEntry",
    "ReleaseMetadataDocument",
    "RuntimeHost",
    "RuntimeListing",
    "RuntimeVersion",
    "SelectedVersion",
    "SubprocessRuntimeHost",
    "build_download_url",
    "download_installer",
    "fetch_release_metadata",
    "inspect_runtimes",
    "parse_release_metadata",
    "run_pipeline",
    "select_latest",
]
