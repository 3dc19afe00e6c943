"""CLI that installs the newest ASP.NET Core hosting bundle."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from hostingbundle_core.config import is_valid_channel, load_config, to_run_config

from .pipeline import run_pipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hostingbundle", description="ASP.NET Core hosting bundle updater")
    parser.add_argument("--config", default=None, help="Path to settings JSON")
    parser.add_argument("--channel", default=None, help="Runtime line such as 9.0")
    parser.add_argument("--log-dir", default=None, help="Directory for per-run log files")
    parser.add_argument("--download-dir", default=None, help="Directory for downloaded installers")
    parser.add_argument("--no-install", action="store_true", help="Resolve and download only")
    parser.add_argument("--no-verify", action="store_true", help="Skip SHA-512 verification")
    parser.add_argument("--quiet-console", action="store_true", help="Log to file only")
    return parser


def _path(value: str | None) -> Path | None:
    return Path(value).expanduser().resolve() if value else None


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.channel is not None and not is_valid_channel(args.channel):
        parser.error(f"--channel must look like 9.0, got {args.channel!r}")

    cfg = load_config(_path(args.config))
    run_config = to_run_config(
        cfg,
        channel=args.channel,
        log_dir=_path(args.log_dir),
        download_dir=_path(args.download_dir),
        install=not args.no_install,
        verify_hash=False if args.no_verify else None,
        console=False if args.quiet_console else None,
    )

    result = run_pipeline(run_config)

    print(json.dumps({
        "outcome": result.outcome,
        "version": result.version,
        "installer": str(result.installer_path) if result.installer_path else None,
        "log": str(result.log_path) if result.log_path else None,
        "error": result.error,
    }, indent=2))

    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
