import json
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "installers" / "bootstrap"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from hostingbundle_bootstrap.errors import MetadataParseError
from hostingbundle_bootstrap.releases import (
    AspNetCoreRuntimeInfo,
    ReleaseEntry,
    RuntimeVersion,
    parse_release_metadata,
    select_latest,
)


def _entries(*versions):
    return [
        ReleaseEntry(release_version=f"r{i}", aspnetcore_runtime=AspNetCoreRuntimeInfo(version=v))
        for i, v in enumerate(versions)
    ]


class RuntimeVersionTests(unittest.TestCase):
    def test_numeric_ordering(self):
        self.assertGreater(RuntimeVersion.parse("9.0.10"), RuntimeVersion.parse("9.0.9"))
        self.assertLess(RuntimeVersion.parse("8.9.99"), RuntimeVersion.parse("9.0.0"))

    def test_missing_trailing_component_sorts_lower(self):
        self.assertLess(RuntimeVersion.parse("9.0"), RuntimeVersion.parse("9.0.0"))
        self.assertLess(RuntimeVersion.parse("9.0.1"), RuntimeVersion.parse("9.0.1.0"))

    def test_rejects_non_numeric(self):
        for bad in ("abc", "", "9.0.0-preview.1", "9..1", "9.-1.0", "v9.0.1"):
            with self.assertRaises(ValueError, msg=bad):
                RuntimeVersion.parse(bad)

    def test_str_round_trips_parts(self):
        self.assertEqual(str(RuntimeVersion.parse("9.0.3")), "9.0.3")


class SelectLatestTests(unittest.TestCase):
    def test_selects_numeric_maximum(self):
        selected = select_latest(_entries("9.0.9", "9.0.10", "8.9.99"))
        self.assertIsNotNone(selected)
        self.assertEqual(selected.version_string, "9.0.10")

    def test_skips_malformed_versions(self):
        with self.assertLogs("hostingbundle.releases", level="WARNING") as logs:
            selected = select_latest(_entries("abc", "9.0.1", "9.0.2"))
        self.assertEqual(selected.version_string, "9.0.2")
        self.assertTrue(any("abc" in line for line in logs.output))

    def test_empty_input_selects_nothing(self):
        self.assertIsNone(select_latest([]))

    def test_all_missing_or_unparsable_selects_nothing(self):
        entries = [ReleaseEntry(release_version="9.0.0")] + _entries("nope", "9.x")
        self.assertIsNone(select_latest(entries))

    def test_first_seen_wins_on_tie(self):
        entries = [
            ReleaseEntry(release_version="first", aspnetcore_runtime=AspNetCoreRuntimeInfo(version="9.0.4")),
            ReleaseEntry(release_version="second", aspnetcore_runtime=AspNetCoreRuntimeInfo(version="9.0.4")),
        ]
        selected = select_latest(entries)
        self.assertEqual(selected.entry.release_version, "first")

    def test_accepts_generator(self):
        selected = select_latest(e for e in _entries("8.0.1", "8.0.14"))
        self.assertEqual(selected.version_string, "8.0.14")


class ParseReleaseMetadataTests(unittest.TestCase):
    def test_parses_typed_entries(self):
        payload = {
            "channel-version": "9.0",
            "releases": [
                {
                    "release-version": "9.0.3",
                    "aspnetcore-runtime": {
                        "version": "9.0.3",
                        "files": [
                            {"name": "dotnet-hosting-win.exe", "url": "https://example/h.exe", "hash": "ABC"},
                            {"name": "aspnetcore-runtime-win-x64.zip", "url": "https://example/r.zip"},
                        ],
                    },
                },
                {"release-version": "9.0.2"},
                "garbage",
            ],
        }
        doc = parse_release_metadata(json.dumps(payload).encode("utf-8"))
        self.assertEqual(len(doc.releases), 2)
        self.assertEqual(doc.releases[0].aspnetcore_runtime.version, "9.0.3")
        self.assertIsNone(doc.releases[1].aspnetcore_runtime)

        selected = select_latest(doc.releases)
        self.assertEqual(selected.hosting_bundle_hash, "ABC")

    def test_missing_hash_is_none(self):
        doc = parse_release_metadata('{"releases": [{"release-version": "9.0.1", "aspnetcore-runtime": {"version": "9.0.1"}}]}')
        self.assertIsNone(select_latest(doc.releases).hosting_bundle_hash)

    def test_accepts_utf8_bom(self):
        doc = parse_release_metadata(b'\xef\xbb\xbf{"releases": []}')
        self.assertEqual(doc.releases, ())

    def test_invalid_documents_raise(self):
        for bad in (b"not json", b"[]", b'{"releases": {}}', b"{}"):
            with self.assertRaises(MetadataParseError, msg=bad):
                parse_release_metadata(bad)


if __name__ == "__main__":
    unittest.main()
