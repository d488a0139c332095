"""Tests for context string building."""

from pathlib import Path

from agentry.agent.context import build_context_strings


def test_true_uses_summary_and_code_index(tmp_path: Path):
    (tmp_path / "PROJECT_SUMMARY.md").write_text("# Summary")
    (tmp_path / ".agentry").mkdir()
    (tmp_path / ".agentry" / "code_index.txt").write_text("def main()")

    strings = build_context_strings(tmp_path, True)

    assert len(strings) == 2
    assert strings[0] == "This is a project summary:\n# Summary"
    assert strings[1].startswith("This is a code index of the code in this project.")
    assert strings[1].endswith("=======================\ndef main()")


def test_true_without_files_is_empty(tmp_path: Path):
    assert build_context_strings(tmp_path, True) == []


def test_file_list_skips_missing_files(tmp_path: Path):
    (tmp_path / "a.py").write_text("print('a')")
    absolute = tmp_path / "b.txt"
    absolute.write_text("bee")

    strings = build_context_strings(tmp_path, ["a.py", "missing.py", str(absolute)])

    assert strings == [
        "File: a.py\n=======================\nprint('a')\n\n",
        f"File: {absolute}\n=======================\nbee\n\n",
    ]


def test_other_values_give_no_context(tmp_path: Path):
    (tmp_path / "PROJECT_SUMMARY.md").write_text("# Summary")
    assert build_context_strings(tmp_path, False) == []
    assert build_context_strings(tmp_path, None) == []
    assert build_context_strings(tmp_path, "PROJECT_SUMMARY.md") == []
