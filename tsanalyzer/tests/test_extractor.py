"""
Integration tests for extractor.py

Tests the string, file and directory entry points.
"""

import json
import os
import shutil
import tempfile
import threading
import unittest
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import patch

from tsanalyzer.extractor import (
    ExtractionStats,
    discover_ts_files,
    extract_directory,
    extract_file,
    extract_functions,
    extract_names,
    extract_to_dict_list,
    is_typescript_file,
    iter_extract_directory,
)
from tsanalyzer.models import FileExtraction, FunctionRecord, ParameterRecord
from tsanalyzer.parser import ParserUnavailableError

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestExtractionStats(unittest.TestCase):
    """Test ExtractionStats class."""

    def test_creation(self):
        stats = ExtractionStats()
        self.assertEqual(stats.files_processed, 0)
        self.assertEqual(stats.files_failed, 0)
        self.assertEqual(stats.functions_extracted, 0)
        self.assertEqual(stats.parse_errors, 0)

    def test_to_dict(self):
        stats = ExtractionStats()
        stats.files_processed = 5
        stats.functions_extracted = 20

        result = stats.to_dict()
        self.assertEqual(result["files_processed"], 5)
        self.assertEqual(result["functions_extracted"], 20)

    def test_record(self):
        stats = ExtractionStats()
        stats.record(FileExtraction("a.ts", [FunctionRecord("f")], parse_error_count=2))

        self.assertEqual(stats.files_processed, 1)
        self.assertEqual(stats.functions_extracted, 1)
        self.assertEqual(stats.parse_errors, 2)

    def test_str_representation(self):
        stats = ExtractionStats()
        stats.files_processed = 3
        self.assertIn("processed=3", str(stats))


class TestExtractFunctions(unittest.TestCase):
    """Test extraction from source strings."""

    def test_absent_input_returns_empty(self):
        for source in (None, "", "   ", "\n\t  ", b"", b"  \n"):
            with self.subTest(source=source):
                self.assertEqual(extract_functions(source), [])

    def test_malformed_input_does_not_raise(self):
        for source in ("export function (((", "}}}{{{", "export const = =>", "\x00\x01"):
            with self.subTest(source=source):
                self.assertIsInstance(extract_functions(source), list)

    def test_valid_function_survives_later_syntax_error(self):
        source = (FIXTURES_DIR / "broken_syntax.ts").read_text(encoding="utf-8")
        self.assertIn("intact", extract_names(source))

    def test_add_record(self):
        functions = extract_functions("export function add(a: number, b: number): number { return a + b; }")

        self.assertEqual(functions, [
            FunctionRecord(
                name="add",
                parameters=(
                    ParameterRecord("a", "number", False),
                    ParameterRecord("b", "number", False),
                ),
                return_type="number",
                is_async=False,
            )
        ])

    def test_wire_dict(self):
        functions = extract_functions("export function greet(name: string, age?: number): void {}")

        self.assertEqual(functions[0].to_dict(), {
            "name": "greet",
            "parameters": [
                {"name": "name", "type": "string", "isOptional": False, "defaultValue": None},
                {"name": "age", "type": "number", "isOptional": True, "defaultValue": None},
            ],
            "returnType": "void",
            "isAsync": False,
            "documentation": None,
        })

    def test_n_exports_yield_n_records(self):
        source = "\n".join(f"export function f{i}(x: number): number {{ return x; }}" for i in range(25))
        self.assertEqual(extract_names(source), [f"f{i}" for i in range(25)])

    def test_fixture_export_only(self):
        source = (FIXTURES_DIR / "test_functions.ts").read_text(encoding="utf-8")
        functions = extract_functions(source)

        self.assertEqual([f.name for f in functions], [
            "hello",
            "add",
            "greet",
            "arrowFunction",
            "asyncArrowFunction",
            "functionExpression",
            "defaultFunction",
        ])
        by_name = {f.name: f for f in functions}
        self.assertTrue(by_name["hello"].is_async)
        self.assertTrue(by_name["asyncArrowFunction"].is_async)
        self.assertFalse(by_name["arrowFunction"].is_async)
        self.assertTrue(by_name["greet"].parameters[1].is_optional)
        self.assertEqual(by_name["functionExpression"].return_type, "string")

    def test_fixture_all_functions(self):
        source = (FIXTURES_DIR / "test_functions.ts").read_text(encoding="utf-8")
        names = extract_names(source, export_only=False)

        for name in ("privateFunction", "privateAsyncFunction",
                     "privateArrowFunction", "privateFunctionExpression"):
            self.assertIn(name, names)
        self.assertEqual(len(names), 11)

    def test_idempotent(self):
        source = (FIXTURES_DIR / "test_functions.ts").read_text(encoding="utf-8")
        self.assertEqual(extract_functions(source), extract_functions(source))

    def test_non_text_input_raises_type_error(self):
        for source in (42, ["export function f() {}"]):
            with self.subTest(source=source):
                with self.assertRaises(TypeError):
                    extract_functions(source)

    def test_bytes_input(self):
        self.assertEqual(extract_names(b"export function f(): void {}"), ["f"])

    def test_tsx_dialect(self):
        source = (FIXTURES_DIR / "component.tsx").read_text(encoding="utf-8")
        functions = extract_functions(source, dialect="tsx")

        self.assertEqual([f.name for f in functions], ["Badge", "count"])
        self.assertEqual(functions[0].return_type, "JSX.Element")
        self.assertEqual(functions[0].documentation, "Renders a greeting badge.")
        self.assertEqual(functions[1].parameters[0].type, "string[]")

    def test_parser_failure_propagates(self):
        with patch("tsanalyzer.parser.Parser", side_effect=ValueError("no grammar")):
            with self.assertRaises(ParserUnavailableError):
                extract_functions("export function f() {}")

    def test_concurrent_calls_are_independent(self):
        sources = {
            i: f"export function worker{i}(n: number): number {{ return n; }}" for i in range(8)
        }
        results = {}

        def run(i):
            results[i] = extract_names(sources[i])

        threads = [threading.Thread(target=run, args=(i,)) for i in sources]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(results, {i: [f"worker{i}"] for i in sources})


class TestExtractFile(unittest.TestCase):
    """Test extracting from a single file."""

    def test_extract_fixture_file(self):
        result = extract_file(str(FIXTURES_DIR / "test_functions.ts"))

        self.assertEqual(result.file_path, "test_functions.ts")
        self.assertEqual(result.parse_error_count, 0)
        self.assertIn("add", [f.name for f in result.functions])

    def test_extract_with_repo_root(self):
        project = FIXTURES_DIR / "sample_project"
        result = extract_file(str(project / "src" / "api.ts"), str(project))

        self.assertEqual(result.file_path, os.path.join("src", "api.ts"))
        self.assertEqual([f.name for f in result.functions], ["fetchUser", "saveUser"])
        self.assertEqual(result.functions[0].documentation, "Loads a user by id.")
        self.assertEqual(result.functions[1].parameters[1].default_value, "false")

    def test_tsx_file_uses_tsx_grammar(self):
        result = extract_file(str(FIXTURES_DIR / "component.tsx"))

        self.assertEqual(result.parse_error_count, 0)
        self.assertEqual([f.name for f in result.functions], ["Badge", "count"])

    def test_broken_file_reports_errors(self):
        result = extract_file(str(FIXTURES_DIR / "broken_syntax.ts"))
        self.assertGreater(result.parse_error_count, 0)

    def test_nonexistent_file(self):
        with self.assertRaises(FileNotFoundError):
            extract_file(str(FIXTURES_DIR / "missing.ts"))

    def test_wrong_extension(self):
        with self.assertRaises(ValueError):
            extract_file(str(FIXTURES_DIR / "sample_project" / "README.md"))

    def test_empty_file(self):
        handle = tempfile.NamedTemporaryFile(mode="w", suffix=".ts", delete=False)
        handle.write("   \n")
        handle.close()
        try:
            result = extract_file(handle.name)
            self.assertEqual(result.functions, [])
            self.assertEqual(result.parse_error_count, 0)
        finally:
            os.unlink(handle.name)


class TestDiscovery(unittest.TestCase):
    """Test TypeScript file discovery."""

    def test_is_typescript_file(self):
        self.assertTrue(is_typescript_file("api.ts"))
        self.assertTrue(is_typescript_file("App.TSX"))
        self.assertFalse(is_typescript_file("types.d.ts"))
        self.assertTrue(is_typescript_file("types.d.ts", skip_declaration_files=False))
        self.assertFalse(is_typescript_file("script.js"))

    def test_discover_sample_project(self):
        project = FIXTURES_DIR / "sample_project"
        files = discover_ts_files(str(project))
        relative = [os.path.relpath(f, project) for f in files]

        self.assertEqual(relative, [
            os.path.join("src", "api.ts"),
            os.path.join("src", "lib", "util.ts"),
        ])

    def test_discover_includes_declarations_when_asked(self):
        project = FIXTURES_DIR / "sample_project"
        files = discover_ts_files(str(project), skip_declaration_files=False)
        self.assertIn("types.d.ts", [os.path.basename(f) for f in files])


class TestExtractDirectory(unittest.TestCase):
    """Test directory-level extraction."""

    def test_extract_sample_project(self):
        results, stats = extract_directory(str(FIXTURES_DIR / "sample_project"))

        self.assertEqual(stats.files_processed, 2)
        self.assertEqual(stats.files_failed, 0)
        self.assertEqual(stats.functions_extracted, 3)
        names = [f.name for r in results for f in r.functions]
        self.assertEqual(names, ["fetchUser", "saveUser", "clamp"])

    def test_missing_directory(self):
        with self.assertRaises(FileNotFoundError):
            extract_directory(str(FIXTURES_DIR / "no_such_dir"))

    def test_empty_directory(self):
        tmp = tempfile.mkdtemp()
        try:
            results, stats = extract_directory(tmp)
            self.assertEqual(results, [])
            self.assertEqual(stats.files_processed, 0)
        finally:
            shutil.rmtree(tmp)

    def test_failure_counted_and_skipped(self):
        project = str(FIXTURES_DIR / "sample_project")
        real_extract = extract_file

        def flaky(file_path, **kwargs):
            if file_path.endswith("util.ts"):
                raise RuntimeError("unreadable")
            return real_extract(file_path, **kwargs)

        with patch("tsanalyzer.extractor.extract_file", side_effect=flaky):
            results, stats = extract_directory(project)

        self.assertEqual(stats.files_failed, 1)
        self.assertEqual(stats.files_processed, 1)
        self.assertEqual(len(results), 1)

    def test_parser_failure_is_not_a_file_failure(self):
        project = str(FIXTURES_DIR / "sample_project")
        stats = ExtractionStats()

        with patch("tsanalyzer.parser.Parser", side_effect=OSError("grammar missing")):
            with self.assertRaises(ParserUnavailableError):
                list(iter_extract_directory(project, stats=stats))
            with self.assertRaises(ParserUnavailableError):
                extract_directory(project)
            with self.assertRaises(ParserUnavailableError):
                extract_to_dict_list(project)

        self.assertEqual(stats.files_failed, 0)

    def test_file_scope_wraps_each_file(self):
        seen = []

        @contextmanager
        def scope(relative_path):
            seen.append(relative_path)
            yield

        results, _ = extract_directory(str(FIXTURES_DIR / "sample_project"), file_scope=scope)

        self.assertEqual(len(results), 2)
        self.assertEqual(seen, [
            os.path.join("src", "api.ts"),
            os.path.join("src", "lib", "util.ts"),
        ])

    def test_failure_raised_when_not_continuing(self):
        project = str(FIXTURES_DIR / "sample_project")
        with patch("tsanalyzer.extractor.extract_file", side_effect=RuntimeError("unreadable")):
            with self.assertRaises(RuntimeError):
                extract_directory(project, continue_on_error=False)


class TestExtractToDictList(unittest.TestCase):
    """Test the dictionary convenience API."""

    def test_directory_is_json_serializable(self):
        payload = extract_to_dict_list(str(FIXTURES_DIR / "sample_project"))

        self.assertEqual(len(payload), 2)
        self.assertIsInstance(json.dumps(payload), str)
        self.assertEqual(payload[0]["functions"][0]["returnType"], "Promise<User>")
        self.assertTrue(payload[0]["functions"][0]["isAsync"])

    def test_single_file(self):
        payload = extract_to_dict_list(str(FIXTURES_DIR / "test_functions.ts"), export_only=False)
        self.assertEqual(len(payload[0]["functions"]), 11)

    def test_missing_source(self):
        with self.assertRaises(FileNotFoundError):
            extract_to_dict_list(str(FIXTURES_DIR / "nothing_here"))


if __name__ == "__main__":
    unittest.main()
