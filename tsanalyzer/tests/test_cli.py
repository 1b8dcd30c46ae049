"""
End-to-end tests for the run_extraction command line.
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import run_extraction
from tsanalyzer.extractor import extract_file

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestRunExtraction(unittest.TestCase):
    """Test the JSONL writer and the main entry point."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = self._tmp.name
        self.output_file = os.path.join(self.tmpdir, "out", "functions.jsonl")
        self.report_dir = os.path.join(self.tmpdir, "reports")

    def tearDown(self):
        self._tmp.cleanup()

    def _read_lines(self):
        with open(self.output_file, encoding="utf-8") as f:
            return [json.loads(line) for line in f]

    def test_main_on_sample_project(self):
        code = run_extraction.main([
            str(FIXTURES_DIR / "sample_project"),
            "--output-file", self.output_file,
            "--report-dir", self.report_dir,
            "--with-target-types",
        ])

        self.assertEqual(code, 0)
        lines = self._read_lines()
        self.assertEqual([line["file"] for line in lines], [
            os.path.join("src", "api.ts"),
            os.path.join("src", "lib", "util.ts"),
        ])
        self.assertEqual(lines[0]["functions"][0]["name"], "fetchUser")
        self.assertEqual(lines[1]["targets"][0]["returnType"], "double")

        reports = os.listdir(self.report_dir)
        self.assertEqual(len(reports), 1)
        with open(os.path.join(self.report_dir, reports[0]), encoding="utf-8") as f:
            report = json.load(f)
        self.assertEqual(report["stats"]["functions_extracted"], 3)

    def test_main_all_functions_single_file(self):
        code = run_extraction.main([
            str(FIXTURES_DIR / "test_functions.ts"),
            "--output-file", self.output_file,
            "--report-dir", self.report_dir,
            "--all-functions",
            "--no-docs",
        ])

        self.assertEqual(code, 0)
        lines = self._read_lines()
        self.assertEqual(len(lines), 1)
        self.assertEqual(len(lines[0]["functions"]), 11)

    def test_main_fail_fast_stops_on_bad_file(self):
        real_extract = extract_file

        def flaky(file_path, **kwargs):
            if file_path.endswith("api.ts"):
                raise RuntimeError("unreadable")
            return real_extract(file_path, **kwargs)

        args = [
            str(FIXTURES_DIR / "sample_project"),
            "--output-file", self.output_file,
            "--report-dir", self.report_dir,
        ]
        with patch("tsanalyzer.extractor.extract_file", side_effect=flaky):
            self.assertEqual(run_extraction.main(args + ["--fail-fast"]), 1)
            self.assertEqual(self._read_lines(), [])

            self.assertEqual(run_extraction.main(args), 0)
            lines = self._read_lines()

        self.assertEqual([line["file"] for line in lines], [os.path.join("src", "lib", "util.ts")])

    def test_main_parser_unavailable(self):
        with patch("tsanalyzer.parser.Parser", side_effect=OSError("grammar missing")):
            code = run_extraction.main([
                str(FIXTURES_DIR / "sample_project"),
                "--output-file", self.output_file,
                "--report-dir", self.report_dir,
            ])

        self.assertEqual(code, 1)
        self.assertFalse(os.path.exists(self.report_dir))

    def test_main_missing_source(self):
        code = run_extraction.main([
            os.path.join(self.tmpdir, "missing"),
            "--output-file", self.output_file,
            "--report-dir", self.report_dir,
        ])
        self.assertEqual(code, 1)

    def test_main_strict_invalid_config(self):
        config = os.path.join(self.tmpdir, "settings.yml")
        with open(config, "w", encoding="utf-8") as f:
            f.write("extraction:\n  export_only: sometimes\n")

        code = run_extraction.main([
            str(FIXTURES_DIR / "sample_project"),
            "--config", config,
            "--strict-config",
            "--output-file", self.output_file,
            "--report-dir", self.report_dir,
        ])
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
