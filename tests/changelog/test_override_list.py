import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from vc_changelog.changelog.commit_model import ParsedCommit
from vc_changelog.changelog.override_list import (
    BLOCK_NOT_FOUND_MARKER,
    OverrideBlockNotFound,
    apply_overrides,
    extract_overrides,
    read_override_document,
    write_override_document,
)


TYPES = ("feat", "fix", "perf")

DOCUMENT = """module.exports = {
  extends: ['@commitlint/config-conventional'],
};

changelog_modify = {
    'abc12345': 'fix(runtime): corrected leak',
    'deadbeef': '',
    "cafebabe": "perf(editor): faster redraw",
}
"""


def make_commit(short_sha: str, commit_type: str = "feat", scope: str = "editor", description: str = "original") -> ParsedCommit:
    return ParsedCommit(
        type=commit_type,
        scope=scope,
        description=description,
        sha=short_sha + "0" * 32,
        short_sha=short_sha,
        timestamp=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


class TestExtractOverrides(unittest.TestCase):
    def test_extracts_pairs_and_consumes_block(self) -> None:
        overrides, consumed = extract_overrides(DOCUMENT)
        self.assertEqual(
            overrides,
            {
                "abc12345": "fix(runtime): corrected leak",
                "deadbeef": "",
                "cafebabe": "perf(editor): faster redraw",
            },
        )
        self.assertIn("changelog_modify = {}", consumed)
        self.assertNotIn("abc12345", consumed)
        self.assertTrue(consumed.startswith("module.exports = {"))

    def test_consumed_document_yields_no_overrides(self) -> None:
        _, consumed = extract_overrides(DOCUMENT)
        overrides, again = extract_overrides(consumed)
        self.assertEqual(overrides, {})
        self.assertEqual(again, consumed)

    def test_missing_block(self) -> None:
        with self.assertRaises(OverrideBlockNotFound):
            extract_overrides("module.exports = {};\n")

    def test_braces_inside_quoted_values(self) -> None:
        document = (
            "changelog_modify = {\n"
            "    'aaaaaaaa': 'fix(runtime): handle {} in templates',\n"
            "    \"cccccccc\": \"feat(editor): accept } and { in names\",\n"
            "    'bbbbbbbb': '',\n"
            "}\n"
            "const tail = {};\n"
        )
        overrides, consumed = extract_overrides(document)
        self.assertEqual(
            overrides,
            {
                "aaaaaaaa": "fix(runtime): handle {} in templates",
                "cccccccc": "feat(editor): accept } and { in names",
                "bbbbbbbb": "",
            },
        )
        self.assertEqual(consumed, "changelog_modify = {}\nconst tail = {};\n")

    def test_keys_are_lower_cased(self) -> None:
        overrides, _ = extract_overrides("changelog_modify = { ' ABC12345 ': '' }")
        self.assertEqual(overrides, {"abc12345": ""})

    def test_duplicate_key_last_wins(self) -> None:
        overrides, _ = extract_overrides("changelog_modify = { 'aaaaaaaa': 'feat(a): one', 'aaaaaaaa': '' }")
        self.assertEqual(overrides, {"aaaaaaaa": ""})


class TestOverrideDocument(unittest.TestCase):
    def test_read_and_write_document(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "commitlint.config.js"
            path.write_text(DOCUMENT, encoding="utf-8")
            overrides, original, consumed = read_override_document(path)
            self.assertEqual(len(overrides), 3)
            self.assertEqual(original, DOCUMENT)
            self.assertTrue(write_override_document(path, original, consumed))
            self.assertEqual(path.read_text(encoding="utf-8"), consumed)

    def test_missing_block_marks_document(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "commitlint.config.js"
            path.write_text("module.exports = {};\n", encoding="utf-8")
            overrides, original, new_text = read_override_document(path)
            self.assertEqual(overrides, {})
            self.assertTrue(new_text.startswith(BLOCK_NOT_FOUND_MARKER))
            self.assertTrue(new_text.endswith(original))

    def test_unchanged_document_is_not_rewritten(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "doc.js"
            path.write_text("changelog_modify = {}", encoding="utf-8")
            self.assertFalse(write_override_document(path, "changelog_modify = {}", "changelog_modify = {}"))

    def test_missing_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(OSError):
                read_override_document(Path(tmp) / "absent.js")


class TestApplyOverrides(unittest.TestCase):
    def test_blank_override_deletes_commit(self) -> None:
        for value in ("", "   ", "\t\n"):
            with self.subTest(value=value):
                commits = {"abc12345": make_commit("abc12345"), "bbbbbbbb": make_commit("bbbbbbbb")}
                apply_overrides(commits, {"abc12345": value}, TYPES)
                self.assertEqual(list(commits), ["bbbbbbbb"])

    def test_override_edits_commit(self) -> None:
        original = make_commit("abc12345")
        commits = {"abc12345": original}
        apply_overrides(commits, {"abc12345": "fix(runtime): corrected leak"}, TYPES)
        edited = commits["abc12345"]
        self.assertEqual(edited.type, "fix")
        self.assertEqual(edited.scope, "runtime")
        self.assertEqual(edited.description, "corrected leak")
        self.assertEqual(edited.sha, "abc12345" + "0" * 32)
        self.assertEqual(edited.timestamp, datetime(2024, 5, 1, tzinfo=timezone.utc))

    def test_malformed_override_is_ignored(self) -> None:
        commits = {"abc12345": make_commit("abc12345")}
        apply_overrides(commits, {"abc12345": "just some words"}, TYPES)
        self.assertEqual(commits["abc12345"].description, "original")
        self.assertEqual(commits["abc12345"].type, "feat")

    def test_override_with_unknown_type_is_ignored(self) -> None:
        commits = {"abc12345": make_commit("abc12345")}
        apply_overrides(commits, {"abc12345": "docs(editor): rewritten"}, TYPES)
        self.assertEqual(commits["abc12345"].type, "feat")
        self.assertEqual(commits["abc12345"].description, "original")

    def test_upper_case_key_in_document_deletes_commit(self) -> None:
        commits = {"abc12345": make_commit("abc12345"), "bbbbbbbb": make_commit("bbbbbbbb")}
        overrides, _ = extract_overrides("changelog_modify = { 'ABC12345': '' }")
        apply_overrides(commits, overrides, TYPES)
        self.assertEqual(list(commits), ["bbbbbbbb"])

    def test_override_without_commit_is_ignored(self) -> None:
        commits = {"abc12345": make_commit("abc12345")}
        result = apply_overrides(commits, {"ffffffff": "", "eeeeeeee": "fix(a): b"}, TYPES)
        self.assertIs(result, commits)
        self.assertEqual(list(commits), ["abc12345"])


if __name__ == "__main__":
    unittest.main()
