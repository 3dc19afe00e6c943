"""End-to-end hosting bundle update run."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from hostingbundle_core.config import RunConfig
from hostingbundle_core.logging_setup import configure_console, run_log

from .errors import BootstrapError
from .inspector import RuntimeHost, SubprocessRuntimeHost, inspect_runtimes, install
from .releases import parse_release_metadata, select_latest
from .service import download_installer, fetch_release_metadata


logger = logging.getLogger("hostingbundle.pipeline")

OUTCOME_INSTALLED = "installed"
OUTCOME_DOWNLOADED = "downloaded"
OUTCOME_NO_VERSION = "no_version"
OUTCOME_FAILED = "failed"


@dataclass
class PipelineResult:
    outcome: str
    log_path: Path | None = None
    version: str | None = None
    installer_path: Path | None = None
    error: str | None = None
    runtimes_before: str | None = None
    runtimes_after: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome != OUTCOME_FAILED


def run_pipeline(
    config: RunConfig,
    host: RuntimeHost | None = None,
    fetch: Callable[[str], bytes] = fetch_release_metadata,
) -> PipelineResult:
    host = host or SubprocessRuntimeHost(config.runtime_command)
    if config.console:
        configure_console(config.log_level)

    result = PipelineResult(outcome=OUTCOME_FAILED)
    with ExitStack() as stack:
        try:
            log_path = stack.enter_context(run_log(config.log_dir, config.log_level))
        except OSError as exc:
            result.error = f"Cannot open run log in {config.log_dir}: {exc}"
            logger.error("run failed: %s", result.error, extra={"event": "run_failed"})
            return result
        result.log_path = log_path
        result.runtimes_before = inspect_runtimes(host, "pre-install").text

        try:
            _fetch_select_install(config, host, fetch, result)
        except BootstrapError as exc:
            result.outcome = OUTCOME_FAILED
            result.error = str(exc)
            logger.error("run failed: %s", exc, extra={"event": "run_failed"})
            return result
        except Exception as exc:
            result.outcome = OUTCOME_FAILED
            result.error = str(exc)
            logger.exception("run failed unexpectedly", extra={"event": "run_failed"})
            return result

        result.runtimes_after = inspect_runtimes(host, "post-install").text
        logger.info("run finished: %s", result.outcome, extra={"event": "run_finished"})
    return result


def _fetch_select_install(
    config: RunConfig,
    host: RuntimeHost,
    fetch: Callable[[str], bytes],
    result: PipelineResult,
) -> None:
    document = parse_release_metadata(fetch(config.metadata_url))
    logger.info("parsed %d releases", len(document.releases), extra={"event": "metadata_parsed"})

    selected = select_latest(document.releases)
    if selected is None:
        logger.warning("no ASP.NET Core runtime version found in %s", config.metadata_url,
                       extra={"event": "no_version"})
        result.outcome = OUTCOME_NO_VERSION
        return

    result.version = selected.version_string
    logger.info("latest ASP.NET Core runtime is %s (release %s)", result.version,
                selected.entry.release_version, extra={"event": "version_selected"})

    downloaded = download_installer(
        selected,
        base=config.download_base,
        destination_dir=config.download_dir,
        check_hash=config.verify_hash,
    )
    result.installer_path = downloaded.installer_path

    if not config.install:
        logger.info("install skipped, installer left at %s", downloaded.installer_path,
                    extra={"event": "install_skipped"})
        result.outcome = OUTCOME_DOWNLOADED
        return

    install(host, downloaded.installer_path, config.silent_flag)
    result.outcome = OUTCOME_INSTALLED
