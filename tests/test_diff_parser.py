"""Tests for the unified diff parser."""

import pytest

from rust_diff_analyzer.git.diff_parser import DiffParseError, DiffParser, parse_diff
from rust_diff_analyzer.git.models import FileStatus, HunkLine, LineType


class TestBasicParsing:
    def test_empty_input(self):
        assert parse_diff("") == []
        assert parse_diff("   \n\n") == []

    def test_added_lines(self, sample_diff_new_file):
        files = parse_diff(sample_diff_new_file)
        assert len(files) == 1
        fd = files[0]
        assert fd.path == "src/util.rs"
        assert fd.old_path is None
        assert fd.status == FileStatus.ADDED
        assert len(fd.hunks) == 1
        lines = fd.hunks[0].lines
        assert [line.line_no for line in lines] == [1, 2, 3]
        assert all(line.line_type == LineType.ADDED for line in lines)
        assert lines[0].content == "pub fn double(x: i32) -> i32 {"

    def test_line_numbers_per_side(self, sample_diff_lib):
        fd = parse_diff(sample_diff_lib)[0]
        first, second = fd.hunks
        assert (first.old_start, first.old_count, first.new_start, first.new_count) == (9, 4, 9, 8)
        assert first.section == "impl Config {"
        added = [line.new_no for line in first.lines if line.line_type == LineType.ADDED]
        assert added == [12, 13, 14, 15]
        closing = first.lines[-1]
        assert closing.line_type == LineType.CONTEXT
        assert (closing.old_no, closing.new_no) == (12, 16)

        removed = [line for line in second.lines if line.line_type == LineType.REMOVED]
        assert len(removed) == 1
        assert removed[0].old_no == 30
        assert removed[0].new_no is None
        assert removed[0].line_no == 30

    def test_line_no_requires_side_number(self):
        assert HunkLine(LineType.REMOVED, "x", old_no=4).line_no == 4
        with pytest.raises(ValueError):
            HunkLine(LineType.ADDED, "x", old_no=4).line_no
        with pytest.raises(ValueError):
            HunkLine(LineType.REMOVED, "x", new_no=4).line_no

    def test_counts(self, sample_diff_lib):
        fd = parse_diff(sample_diff_lib)[0]
        assert fd.added_count == 5
        assert fd.removed_count == 1
        assert fd.hunks[1].added_count == 1
        assert fd.hunks[1].removed_count == 1

    def test_class_and_function_agree(self, sample_diff_lib):
        assert DiffParser(sample_diff_lib).parse() == parse_diff(sample_diff_lib)

    def test_single_line_hunk_header(self):
        """Hunk header without comma implies count=1."""
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "index abc..def 100644\n"
            "--- a/f.rs\n"
            "+++ b/f.rs\n"
            "@@ -1 +1 @@\n"
            "-old line\n"
            "+replaced line\n"
        )
        hunk = parse_diff(diff)[0].hunks[0]
        assert hunk.old_count == 1
        assert hunk.new_count == 1
        assert hunk.removed_count == 1
        assert hunk.added_count == 1

    def test_consecutive_hunks(self):
        """Two hunks in the same file — line counters restart from each header."""
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "index abc..def 100644\n"
            "--- a/f.rs\n"
            "+++ b/f.rs\n"
            "@@ -5,0 +5,1 @@\n"
            "+line at 5\n"
            "@@ -20,0 +21,1 @@\n"
            "+line at 21\n"
        )
        hunks = parse_diff(diff)[0].hunks
        assert [h.lines[0].new_no for h in hunks] == [5, 21]

    def test_multiple_files(self, sample_diff_lib, sample_diff_new_file):
        files = parse_diff(sample_diff_lib + sample_diff_new_file)
        assert [f.path for f in files] == ["src/lib.rs", "src/util.rs"]

    def test_plain_unified_diff(self):
        diff = (
            "--- a/src/lib.rs\t2024-01-01 00:00:00\n"
            "+++ b/src/lib.rs\t2024-01-02 00:00:00\n"
            "@@ -1,2 +1,2 @@\n"
            " fn a() {}\n"
            "-fn b() {}\n"
            "+fn c() {}\n"
        )
        files = parse_diff(diff)
        assert len(files) == 1
        assert files[0].path == "src/lib.rs"
        assert files[0].status == FileStatus.MODIFIED

    def test_preamble_skipped(self, sample_diff_new_file):
        text = "From 1234 Mon Sep 17 00:00:00 2001\nSubject: [PATCH] add util\n\n" + sample_diff_new_file
        assert [f.path for f in parse_diff(text)] == ["src/util.rs"]


class TestEdgeCases:
    def test_binary_file_zero_hunks(self, sample_diff_binary):
        files = parse_diff(sample_diff_binary)
        assert len(files) == 1
        assert files[0].is_binary
        assert files[0].hunks == ()
        assert files[0].path == "assets/logo.png"

    def test_git_binary_patch(self):
        diff = (
            "diff --git a/a.bin b/a.bin\n"
            "index abc..def 100644\n"
            "GIT binary patch\n"
            "literal 12\n"
            "zcmZ?wbhEHbR$d8\n"
            "\n"
            "diff --git a/src/lib.rs b/src/lib.rs\n"
            "--- a/src/lib.rs\n"
            "+++ b/src/lib.rs\n"
            "@@ -1,0 +2,1 @@\n"
            "+fn x() {}\n"
        )
        files = parse_diff(diff)
        assert [f.is_binary for f in files] == [True, False]
        assert files[1].hunks[0].added_count == 1

    def test_rename_attributes_to_new_path(self, sample_diff_rename):
        fd = parse_diff(sample_diff_rename)[0]
        assert fd.is_rename
        assert fd.status == FileStatus.RENAMED
        assert fd.old_path == "src/old_name.rs"
        assert fd.new_path == "src/new_name.rs"
        assert fd.path == "src/new_name.rs"
        assert fd.hunks[0].added_count == 1

    def test_pure_rename_has_no_hunks(self, sample_diff_pure_rename):
        fd = parse_diff(sample_diff_pure_rename)[0]
        assert fd.is_rename
        assert fd.hunks == ()
        assert fd.path == "src/b.rs"

    def test_mode_only(self, sample_diff_mode_only):
        fd = parse_diff(sample_diff_mode_only)[0]
        assert fd.status == FileStatus.MODE_CHANGED
        assert fd.hunks == ()

    def test_empty_new_file(self):
        diff = (
            "diff --git a/src/empty.rs b/src/empty.rs\n"
            "new file mode 100644\n"
            "index 0000000..e69de29\n"
        )
        fd = parse_diff(diff)[0]
        assert fd.status == FileStatus.ADDED
        assert fd.hunks == ()

    def test_deleted_file(self, sample_diff_deleted):
        fd = parse_diff(sample_diff_deleted)[0]
        assert fd.status == FileStatus.DELETED
        assert fd.new_path is None
        assert fd.path == "src/gone.rs"
        assert fd.removed_count == 3
        assert fd.added_count == 0

    def test_no_newline_marker_not_counted(self, sample_diff_no_newline):
        hunk = parse_diff(sample_diff_no_newline)[0].hunks[0]
        assert len(hunk.lines) == 4
        assert hunk.added_count == 1
        assert hunk.removed_count == 1
        assert all("No newline" not in line.content for line in hunk.lines)

    def test_crlf_line_endings(self, sample_diff_new_file):
        files = parse_diff(sample_diff_new_file.replace("\n", "\r\n"))
        assert files[0].hunks[0].lines[2].content == "}"

    def test_bom_stripped(self, sample_diff_new_file):
        files = parse_diff("\ufeff" + sample_diff_new_file)
        assert files[0].path == "src/util.rs"

    def test_blank_line_inside_hunk_is_context(self):
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "--- a/f.rs\n"
            "+++ b/f.rs\n"
            "@@ -1,3 +1,4 @@\n"
            " fn a() {}\n"
            "\n"
            "+fn b() {}\n"
            " fn c() {}\n"
        )
        lines = parse_diff(diff)[0].hunks[0].lines
        assert lines[1] == HunkLine(LineType.CONTEXT, "", old_no=2, new_no=2)
        assert lines[2].new_no == 3

    def test_short_hunk_at_end_of_input(self):
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "--- a/f.rs\n"
            "+++ b/f.rs\n"
            "@@ -1,3 +1,3 @@\n"
            " fn a() {}\n"
        )
        assert len(parse_diff(diff)[0].hunks[0].lines) == 1

    def test_excess_lines_at_end_of_input_absorbed(self):
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "--- a/f.rs\n"
            "+++ b/f.rs\n"
            "@@ -1,1 +1,1 @@\n"
            "-fn a() {}\n"
            "+fn b() {}\n"
            "+fn c() {}\n"
        )
        assert parse_diff(diff)[0].hunks[0].added_count == 2


class TestMalformedInput:
    def test_bare_diff_header(self):
        with pytest.raises(DiffParseError):
            parse_diff("diff --git")

    def test_invalid_hunk_header(self):
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "--- a/f.rs\n"
            "+++ b/f.rs\n"
            "@@ invalid @@\n"
            "+x\n"
        )
        with pytest.raises(DiffParseError, match="malformed hunk header") as exc_info:
            parse_diff(diff)
        assert exc_info.value.line_no == 4

    def test_non_numeric_counts(self):
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "--- a/f.rs\n"
            "+++ b/f.rs\n"
            "@@ -1,x +1,2 @@\n"
        )
        with pytest.raises(DiffParseError):
            parse_diff(diff)

    def test_hunk_outside_section(self):
        with pytest.raises(DiffParseError, match="outside"):
            parse_diff("@@ -1,1 +1,1 @@\n-a\n+b\n")

    def test_path_lines_without_hunks(self):
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "--- a/f.rs\n"
            "+++ b/f.rs\n"
        )
        with pytest.raises(DiffParseError, match="no hunk header"):
            parse_diff(diff)

    def test_minus_without_plus(self):
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "--- a/f.rs\n"
            "@@ -1,1 +1,1 @@\n"
        )
        with pytest.raises(DiffParseError):
            parse_diff(diff)

    def test_header_without_body(self):
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "index abc..def 100644\n"
            "diff --git a/g.rs b/g.rs\n"
        )
        with pytest.raises(DiffParseError, match="truncated file section"):
            parse_diff(diff)

    def test_hunk_cut_short_by_next_section(self):
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "--- a/f.rs\n"
            "+++ b/f.rs\n"
            "@@ -1,3 +1,3 @@\n"
            " fn a() {}\n"
            "diff --git a/g.rs b/g.rs\n"
            "--- a/g.rs\n"
            "+++ b/g.rs\n"
            "@@ -1,1 +1,1 @@\n"
            "-x\n"
            "+y\n"
        )
        with pytest.raises(DiffParseError, match="truncated"):
            parse_diff(diff)

    def test_excess_lines_before_next_section(self):
        diff = (
            "diff --git a/f.rs b/f.rs\n"
            "--- a/f.rs\n"
            "+++ b/f.rs\n"
            "@@ -1,1 +1,1 @@\n"
            "-a\n"
            "+b\n"
            "+c\n"
            "diff --git a/g.rs b/g.rs\n"
            "--- a/g.rs\n"
            "+++ b/g.rs\n"
            "@@ -1,1 +1,1 @@\n"
            "-x\n"
            "+y\n"
        )
        with pytest.raises(DiffParseError, match="exceeds"):
            parse_diff(diff)

    def test_error_message_carries_line(self):
        err = DiffParseError("boom", 7)
        assert "boom" in str(err)
        assert "line 7" in str(err)


class TestQuotedPaths:
    """git C-quotes paths with non-ASCII or special characters."""

    def test_quoted_non_ascii_path(self):
        diff = (
            r'diff --git "a/src/\303\274.rs" "b/src/\303\274.rs"' "\n"
            "index 1111111..2222222 100644\n"
            r'--- "a/src/\303\274.rs"' "\n"
            r'+++ "b/src/\303\274.rs"' "\n"
            "@@ -1,1 +1,1 @@\n"
            "-fn a() {}\n"
            "+fn b() {}\n"
        )
        (fd,) = parse_diff(diff)
        assert fd.path == "src/ü.rs"
        assert fd.old_path == "src/ü.rs"
        assert fd.status == FileStatus.MODIFIED

    def test_quoted_path_with_space(self):
        diff = (
            r'diff --git "a/src/my \303\274.rs" "b/src/my \303\274.rs"' "\n"
            "index 1111111..2222222 100644\n"
            r'--- "a/src/my \303\274.rs"' "\n"
            r'+++ "b/src/my \303\274.rs"' "\n"
            "@@ -1,1 +1,1 @@\n"
            "-fn a() {}\n"
            "+fn b() {}\n"
        )
        (fd,) = parse_diff(diff)
        assert fd.path == "src/my ü.rs"

    def test_quoted_header_without_path_lines(self):
        diff = (
            r'diff --git "a/src/my \303\274.rs" "b/src/my \303\274.rs"' "\n"
            "new file mode 100644\n"
            "index 0000000..e69de29\n"
        )
        (fd,) = parse_diff(diff)
        assert fd.path == "src/my ü.rs"
        assert fd.old_path is None
        assert fd.status == FileStatus.ADDED

    def test_quoted_rename(self):
        diff = (
            r'diff --git a/src/plain.rs "b/src/t\303\251st.rs"' "\n"
            "similarity index 100%\n"
            "rename from src/plain.rs\n"
            r'rename to "src/t\303\251st.rs"' "\n"
        )
        (fd,) = parse_diff(diff)
        assert fd.old_path == "src/plain.rs"
        assert fd.new_path == "src/tést.rs"
        assert fd.status == FileStatus.RENAMED

    def test_escaped_quote_and_tab(self):
        diff = (
            r'diff --git "a/src/a\"b\tc.rs" "b/src/a\"b\tc.rs"' "\n"
            r'--- "a/src/a\"b\tc.rs"' "\n"
            r'+++ "b/src/a\"b\tc.rs"' "\n"
            "@@ -1,1 +1,1 @@\n"
            "-x\n"
            "+y\n"
        )
        (fd,) = parse_diff(diff)
        assert fd.path == 'src/a"b\tc.rs'
