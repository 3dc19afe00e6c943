import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "installers" / "bootstrap"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from hostingbundle_bootstrap import cli
from hostingbundle_bootstrap.pipeline import PipelineResult


class CliTests(unittest.TestCase):
    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        self.assertIsNone(args.channel)
        self.assertFalse(args.no_install)
        self.assertFalse(args.no_verify)

    def test_flags(self):
        args = cli.build_parser().parse_args(["--channel", "8.0", "--no-install", "--no-verify", "--quiet-console"])
        self.assertEqual(args.channel, "8.0")
        self.assertTrue(args.no_install)
        self.assertTrue(args.no_verify)
        self.assertTrue(args.quiet_console)

    def test_main_builds_run_config_and_reports_failure(self):
        captured = []

        def fake_run_pipeline(run_config):
            captured.append(run_config)
            return PipelineResult(outcome="failed", error="offline")

        with tempfile.TemporaryDirectory() as tmp:
            argv = [
                "--config", str(Path(tmp) / "missing.json"),
                "--channel", "8.0",
                "--log-dir", str(Path(tmp) / "logs"),
                "--download-dir", str(Path(tmp) / "dl"),
                "--no-install",
                "--quiet-console",
            ]
            with patch.object(cli, "run_pipeline", side_effect=fake_run_pipeline), \
                    patch("builtins.print") as fake_print:
                rc = cli.main(argv)

        self.assertEqual(rc, 1)
        run_config = captured[0]
        self.assertTrue(run_config.metadata_url.endswith("/8.0/releases.json"))
        self.assertEqual(run_config.log_dir.name, "logs")
        self.assertEqual(run_config.download_dir.name, "dl")
        self.assertFalse(run_config.install)
        self.assertFalse(run_config.console)
        summary = json.loads(fake_print.call_args[0][0])
        self.assertEqual(summary["outcome"], "failed")
        self.assertEqual(summary["error"], "offline")

    def test_main_rejects_malformed_channel(self):
        with patch.object(cli, "run_pipeline") as fake_run, patch("sys.stderr"):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--channel", "../evil"])
        self.assertEqual(ctx.exception.code, 2)
        fake_run.assert_not_called()

    def test_main_soft_stop_exits_zero(self):
        with tempfile.TemporaryDirectory() as tmp:
            with patch.object(cli, "run_pipeline", return_value=PipelineResult(outcome="no_version")), \
                    patch("builtins.print"):
                rc = cli.main(["--config", str(Path(tmp) / "missing.json")])
        self.assertEqual(rc, 0)


if __name__ == "__main__":
    unittest.main()
