"""Unified diff parser — file sections, hunks, and absolute line numbers.

Handles BOM, CRLF, binary markers, renames, copies, mode-only changes, and
the ``\\ No newline at end of file`` marker. Structural damage (truncated
headers, unparsable hunk headers, path lines without hunks) raises
DiffParseError; nothing is repaired or guessed at.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from rust_diff_analyzer.git.models import FileDiff, FileStatus, Hunk, HunkLine, LineType

# --- Regex patterns for diff parsing ---

_DIFF_HEADER_RE = re.compile(r"^diff --git a/(.+) b/(.+)$")
_DIFF_HEADER_BARE_RE = re.compile(r"^diff --git (\S+) (\S+)$")
_QUOTED = r'"(?:[^"\\]|\\.)*"'
_DIFF_HEADER_QUOTED_RE = re.compile(rf"^diff --git ({_QUOTED}|\S+) ({_QUOTED}|\S+)$")
_HUNK_HEADER_RE = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@ ?(.*)$"
)
_BINARY_RE = re.compile(r"^Binary files .*differ$")
_GIT_BINARY_RE = re.compile(r"^GIT binary patch$")
_RENAME_FROM_RE = re.compile(r"^rename from (.+)$")
_RENAME_TO_RE = re.compile(r"^rename to (.+)$")
_COPY_FROM_RE = re.compile(r"^copy from (.+)$")
_COPY_TO_RE = re.compile(r"^copy to (.+)$")
_NO_NEWLINE_RE = re.compile(r"^\\ No newline at end of file$")
_SIMILARITY_RE = re.compile(r"^(?:dis)?similarity index \d+%$")
_OLD_MODE_RE = re.compile(r"^old mode \d+$")
_NEW_MODE_RE = re.compile(r"^new mode \d+$")
_DELETED_FILE_RE = re.compile(r"^deleted file mode \d+$")
_NEW_FILE_RE = re.compile(r"^new file mode \d+$")
_INDEX_RE = re.compile(r"^index [0-9a-f]+\.\.[0-9a-f]+")

_BODY_MARKERS = (" ", "+", "-")


class DiffParseError(Exception):
    """Raised when diff text is structurally invalid."""

    def __init__(self, message: str, line_no: Optional[int] = None) -> None:
        self.message = message
        self.line_no = line_no
        where = f" (line {line_no})" if line_no is not None else ""
        super().__init__(f"failed to parse diff: {message}{where}")


def _strip_bom(text: str) -> str:
    """Remove UTF-8 BOM if present."""
    return text[1:] if text.startswith("\ufeff") else text


def _normalise(line: str) -> str:
    """Strip trailing CR (CRLF → LF)."""
    return line[:-1] if line.endswith("\r") else line


_C_ESCAPES = {
    "a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92,
}


def _unquote(token: str) -> str:
    """Undo git's C-style path quoting (``core.quotePath``).

    ``"src/\\303\\274.rs"`` → ``src/ü.rs``. Unquoted tokens pass through.
    """
    if len(token) < 2 or not (token.startswith('"') and token.endswith('"')):
        return token
    body = token[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\" or i + 1 == len(body):
            out += ch.encode("utf-8")
            i += 1
            continue
        nxt = body[i + 1]
        octal = body[i + 1:i + 4]
        if len(octal) == 3 and all(c in "01234567" for c in octal):
            out.append(int(octal, 8) & 0xFF)
            i += 4
        elif nxt in _C_ESCAPES:
            out.append(_C_ESCAPES[nxt])
            i += 2
        else:
            out += nxt.encode("utf-8")
            i += 2
    return out.decode("utf-8", errors="replace")


def _strip_prefix(path: str, prefix: str) -> str:
    return path[len(prefix):] if path.startswith(prefix) else path


def _header_paths(header: str) -> Optional[Tuple[str, str]]:
    """Old and new path from a ``diff --git`` line, prefixes removed."""
    m = None
    if '"' in header:
        m = _DIFF_HEADER_QUOTED_RE.match(header)
    if m is None:
        m = _DIFF_HEADER_RE.match(header)
        if m is not None:
            return m.group(1), m.group(2)
        m = _DIFF_HEADER_BARE_RE.match(header)
    if m is None:
        return None
    return (
        _strip_prefix(_unquote(m.group(1)), "a/"),
        _strip_prefix(_unquote(m.group(2)), "b/"),
    )


def _path_token(line: str, prefix: str, line_no: int) -> Optional[str]:
    """Extract the path from a ``---``/``+++`` line. ``/dev/null`` → None."""
    token = line[4:].split("\t", 1)[0].strip()
    if not token:
        raise DiffParseError(f"missing path token in {line!r}", line_no)
    token = _unquote(token)
    if token == "/dev/null":
        return None
    return _strip_prefix(token, prefix)


class DiffParser:
    """Parse unified diff text into a list of FileDiff objects.

    Usage::

        for file_diff in DiffParser(diff_text).parse():
            for hunk in file_diff.hunks:
                ...
    """

    def __init__(self, diff_text: str) -> None:
        lines = _strip_bom(diff_text).split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        self._lines = [_normalise(line) for line in lines]
        self._idx = 0

    def parse(self) -> List[FileDiff]:
        """Return every file section, or raise DiffParseError."""
        self._idx = 0
        files: List[FileDiff] = []
        total = len(self._lines)

        while self._idx < total:
            line = self._lines[self._idx]
            if line.startswith("diff --git"):
                files.append(self._parse_git_section())
            elif self._at_plain_header(self._idx):
                files.append(self._parse_plain_section())
            elif line.startswith("@@"):
                raise DiffParseError("hunk header outside of a file section", self._idx + 1)
            else:
                # Preamble (commit message, mail headers) — not part of any section
                self._idx += 1

        return files

    # ---- file sections ----

    def _parse_git_section(self) -> FileDiff:
        header_no = self._idx + 1
        header = self._lines[self._idx]
        paths = _header_paths(header)
        if paths is None:
            raise DiffParseError(
                f"truncated diff header, missing path tokens: {header!r}", header_no
            )
        old_path: Optional[str] = paths[0]
        new_path: Optional[str] = paths[1]
        self._idx += 1

        is_rename = False
        is_copy = False
        is_binary = False
        is_deleted = False
        is_new = False
        mode_changed = False
        total = len(self._lines)

        # Extended headers (index, modes, renames, new/deleted file, binary)
        while self._idx < total:
            sub = self._lines[self._idx]
            if _INDEX_RE.match(sub) or _SIMILARITY_RE.match(sub):
                pass
            elif _OLD_MODE_RE.match(sub) or _NEW_MODE_RE.match(sub):
                mode_changed = True
            elif _DELETED_FILE_RE.match(sub):
                is_deleted = True
            elif _NEW_FILE_RE.match(sub):
                is_new = True
            elif (rm := _RENAME_FROM_RE.match(sub)):
                old_path = _unquote(rm.group(1))
                is_rename = True
            elif (rt := _RENAME_TO_RE.match(sub)):
                new_path = _unquote(rt.group(1))
                is_rename = True
            elif (cm := _COPY_FROM_RE.match(sub)):
                old_path = _unquote(cm.group(1))
                is_copy = True
            elif (ct := _COPY_TO_RE.match(sub)):
                new_path = _unquote(ct.group(1))
                is_copy = True
            elif _BINARY_RE.match(sub) or _GIT_BINARY_RE.match(sub):
                is_binary = True
            else:
                break
            self._idx += 1

        if is_new:
            old_path = None
        if is_deleted:
            new_path = None

        if is_binary:
            self._skip_to_next_git_section()
            return FileDiff(
                old_path=old_path,
                new_path=new_path,
                status=_status(is_new, is_deleted, is_rename, mode_changed, has_hunks=False),
                is_rename=is_rename,
                is_binary=True,
            )

        if not self._lines_left() or not self._lines[self._idx].startswith("---"):
            if is_rename or is_copy or mode_changed or is_new or is_deleted:
                # Pure rename, mode change, or empty file — legitimately hunk-less
                return FileDiff(
                    old_path=old_path,
                    new_path=new_path,
                    status=_status(is_new, is_deleted, is_rename, mode_changed, has_hunks=False),
                    is_rename=is_rename,
                )
            raise DiffParseError(
                f"truncated file section for {new_path or old_path!r}: no path lines or hunks",
                header_no,
            )

        # The ---/+++ tokens are unambiguous where the header is not (spaces)
        old_path, new_path = self._parse_path_lines()

        hunks = self._parse_hunks()
        if not hunks:
            raise DiffParseError(
                f"file section for {new_path or old_path!r} has no hunk header", header_no
            )

        return FileDiff(
            old_path=old_path,
            new_path=new_path,
            status=_status(old_path is None, new_path is None, is_rename, mode_changed, has_hunks=True),
            is_rename=is_rename,
            hunks=tuple(hunks),
        )

    def _parse_plain_section(self) -> FileDiff:
        header_no = self._idx + 1
        old_path, new_path = self._parse_path_lines()
        hunks = self._parse_hunks()
        if not hunks:
            raise DiffParseError(
                f"file section for {new_path or old_path!r} has no hunk header", header_no
            )
        return FileDiff(
            old_path=old_path,
            new_path=new_path,
            status=_status(old_path is None, new_path is None, False, False, has_hunks=True),
            hunks=tuple(hunks),
        )

    def _parse_path_lines(self) -> Tuple[Optional[str], Optional[str]]:
        minus_no = self._idx + 1
        minus = self._lines[self._idx]
        if not minus.startswith("--- "):
            raise DiffParseError(f"malformed old path line: {minus!r}", minus_no)
        if self._idx + 1 >= len(self._lines) or not self._lines[self._idx + 1].startswith("+++ "):
            raise DiffParseError("'---' path line without a following '+++' line", minus_no)
        plus = self._lines[self._idx + 1]
        self._idx += 2
        return _path_token(minus, "a/", minus_no), _path_token(plus, "b/", minus_no + 1)

    # ---- hunks ----

    def _parse_hunks(self) -> List[Hunk]:
        hunks: List[Hunk] = []
        total = len(self._lines)
        while self._idx < total:
            line = self._lines[self._idx]
            if line.startswith("@@"):
                hunks.append(self._parse_hunk())
            elif _NO_NEWLINE_RE.match(line):
                self._idx += 1
            elif line == "-- ":
                break  # format-patch signature separator
            elif line[:1] in _BODY_MARKERS and not self._at_plain_header(self._idx):
                raise DiffParseError(
                    "hunk body exceeds the line counts declared in its header", self._idx + 1
                )
            else:
                break
        return hunks

    def _parse_hunk(self) -> Hunk:
        header_no = self._idx + 1
        header = self._lines[self._idx]
        m = _HUNK_HEADER_RE.match(header)
        if m is None:
            raise DiffParseError(f"malformed hunk header: {header!r}", header_no)

        old_start = int(m.group(1))
        old_count = int(m.group(2)) if m.group(2) is not None else 1
        new_start = int(m.group(3))
        new_count = int(m.group(4)) if m.group(4) is not None else 1

        old_no, new_no = old_start, new_start
        old_left, new_left = old_count, new_count
        absorbing = False  # counts satisfied, trailing body lines run to EOF
        lines: List[HunkLine] = []
        self._idx += 1
        total = len(self._lines)

        while self._idx < total:
            raw = self._lines[self._idx]

            # --- "\ No newline at end of file" → consumed, never counted ---
            if _NO_NEWLINE_RE.match(raw):
                self._idx += 1
                continue

            pending = old_left > 0 or new_left > 0
            if not pending and not absorbing:
                if not self._rest_is_body(self._idx):
                    break
                absorbing = True

            marker = raw[:1]
            if marker == " " or (raw == "" and old_left > 0 and new_left > 0):
                lines.append(HunkLine(LineType.CONTEXT, raw[1:], old_no=old_no, new_no=new_no))
                old_no += 1
                new_no += 1
                old_left -= 1
                new_left -= 1
            elif marker == "+":
                lines.append(HunkLine(LineType.ADDED, raw[1:], new_no=new_no))
                new_no += 1
                new_left -= 1
            elif marker == "-":
                lines.append(HunkLine(LineType.REMOVED, raw[1:], old_no=old_no))
                old_no += 1
                old_left -= 1
            elif self._rest_is_blank(self._idx):
                break  # short hunk at end of input
            else:
                raise DiffParseError(
                    f"hunk truncated: expected {max(old_left, 0)} more old-side and "
                    f"{max(new_left, 0)} more new-side lines before line {self._idx + 1}",
                    header_no,
                )
            self._idx += 1

        return Hunk(
            old_start=old_start,
            old_count=old_count,
            new_start=new_start,
            new_count=new_count,
            lines=tuple(lines),
            section=m.group(5).strip(),
        )

    # ---- lookahead helpers ----

    def _lines_left(self) -> bool:
        return self._idx < len(self._lines)

    def _at_plain_header(self, idx: int) -> bool:
        return (
            self._lines[idx].startswith("--- ")
            and idx + 1 < len(self._lines)
            and self._lines[idx + 1].startswith("+++ ")
        )

    def _rest_is_body(self, idx: int) -> bool:
        """True if every line from *idx* to EOF is a hunk body line."""
        return all(
            line[:1] in _BODY_MARKERS or line == "" or _NO_NEWLINE_RE.match(line)
            for line in self._lines[idx:]
        )

    def _rest_is_blank(self, idx: int) -> bool:
        return all(not line.strip() for line in self._lines[idx:])

    def _skip_to_next_git_section(self) -> None:
        """Skip a ``GIT binary patch`` payload."""
        while self._idx < len(self._lines) and not self._lines[self._idx].startswith("diff --git"):
            self._idx += 1


def _status(
    is_new: bool, is_deleted: bool, is_rename: bool, mode_changed: bool, *, has_hunks: bool
) -> FileStatus:
    if is_deleted:
        return FileStatus.DELETED
    if is_new:
        return FileStatus.ADDED
    if is_rename:
        return FileStatus.RENAMED
    if mode_changed and not has_hunks:
        return FileStatus.MODE_CHANGED
    return FileStatus.MODIFIED


def parse_diff(diff_text: str) -> List[FileDiff]:
    """Parse *diff_text* into FileDiff objects. Empty input yields []."""
    return DiffParser(diff_text).parse()
