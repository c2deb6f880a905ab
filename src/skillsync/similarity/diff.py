"""Line-level LCS diff with unified-style hunks."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Literal, NamedTuple

from skillsync.utils.string import split_lines

DEFAULT_CONTEXT_LINES = 3

DiffLineType = Literal["added", "removed", "context"]


class DiffLine(NamedTuple):
    type: DiffLineType
    content: str

    @property
    def prefix(self) -> str:
        return {"added": "+", "removed": "-", "context": " "}[self.type]

    def __str__(self) -> str:
        return f"{self.prefix}{self.content}"


@dataclass(frozen=True, slots=True)
class DiffHunk:
    """A contiguous block of changes with its surrounding context.

    ``(source_start, source_count)`` and ``(target_start, target_count)`` are
    1-based and span the changed region only, from the first to the last changed
    line including any context between them. An empty side starts at the line
    before the change, or 0 at the top of the file.
    """

    source_start: int
    source_count: int
    target_start: int
    target_count: int
    lines: tuple[DiffLine, ...]

    @property
    def header(self) -> str:
        return (
            f"@@ -{self.source_start},{self.source_count} "
            f"+{self.target_start},{self.target_count} @@"
        )

    @property
    def lines_added(self) -> int:
        return sum(1 for line in self.lines if line.type == "added")

    @property
    def lines_removed(self) -> int:
        return sum(1 for line in self.lines if line.type == "removed")


@dataclass(frozen=True, slots=True)
class LineDiff:
    hunks: tuple[DiffHunk, ...]
    lines_added: int
    lines_removed: int
    source_lines: int
    target_lines: int

    @property
    def content_score(self) -> float:
        return content_score(
            self.lines_added, self.lines_removed, self.source_lines, self.target_lines
        )

    @property
    def is_identical(self) -> bool:
        return self.lines_added == 0 and self.lines_removed == 0


class _Op(NamedTuple):
    type: DiffLineType
    content: str
    source_pos: int
    """0-based index into the source lines at which this op applies."""
    target_pos: int


def content_score(added: int, removed: int, source_lines: int, target_lines: int) -> float:
    """``1 - (added + removed) / (2 * max(source_lines, target_lines, 1))``, clamped to [0, 1]."""
    score = 1.0 - (added + removed) / (2 * max(source_lines, target_lines, 1))
    return min(1.0, max(0.0, score))


def lcs_ops(source: Sequence[str], target: Sequence[str]) -> list[_Op]:
    """Edit script from ``source`` to ``target`` based on the longest common subsequence.

    Within each run of changes, removed lines come before added lines.
    """
    n, m = len(source), len(target)
    prefix = 0
    while prefix < n and prefix < m and source[prefix] == target[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < n - prefix
        and suffix < m - prefix
        and source[n - 1 - suffix] == target[m - 1 - suffix]
    ):
        suffix += 1

    a = source[prefix : n - suffix]
    b = target[prefix : m - suffix]
    # lengths[i][j] is the LCS length of a[i:] and b[j:]
    lengths = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(len(a) - 1, -1, -1):
        row, below = lengths[i], lengths[i + 1]
        for j in range(len(b) - 1, -1, -1):
            if a[i] == b[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    ops = [_Op("context", source[k], k, k) for k in range(prefix)]
    i = j = 0
    pending_removed: list[_Op] = []
    pending_added: list[_Op] = []

    def flush() -> None:
        ops.extend(pending_removed)
        ops.extend(pending_added)
        pending_removed.clear()
        pending_added.clear()

    while i < len(a) or j < len(b):
        if i < len(a) and j < len(b) and a[i] == b[j]:
            flush()
            ops.append(_Op("context", a[i], prefix + i, prefix + j))
            i += 1
            j += 1
        elif j >= len(b) or (i < len(a) and lengths[i + 1][j] >= lengths[i][j + 1]):
            pending_removed.append(_Op("removed", a[i], prefix + i, prefix + j))
            i += 1
        else:
            pending_added.append(_Op("added", b[j], prefix + i, prefix + j))
            j += 1
    flush()
    ops.extend(
        _Op("context", source[n - suffix + k], n - suffix + k, m - suffix + k)
        for k in range(suffix)
    )
    return _fix_positions(ops)


def _fix_positions(ops: list[_Op]) -> list[_Op]:
    # Reordering removed-before-added leaves stale positions on the added ops.
    fixed: list[_Op] = []
    src = tgt = 0
    for op in ops:
        fixed.append(op._replace(source_pos=src, target_pos=tgt))
        if op.type != "added":
            src += 1
        if op.type != "removed":
            tgt += 1
    return fixed


def _change_runs(ops: Sequence[_Op]) -> list[tuple[int, int]]:
    """Half-open ``[start, end)`` index ranges of consecutive non-context ops."""
    runs: list[tuple[int, int]] = []
    start: int | None = None
    for idx, op in enumerate(ops):
        if op.type == "context":
            if start is not None:
                runs.append((start, idx))
                start = None
        elif start is None:
            start = idx
    if start is not None:
        runs.append((start, len(ops)))
    return runs


def build_hunks(ops: Sequence[_Op], context: int = DEFAULT_CONTEXT_LINES) -> list[DiffHunk]:
    groups: list[tuple[int, int]] = []
    for start, end in _change_runs(ops):
        if groups and start - groups[-1][1] <= 2 * context:
            groups[-1] = (groups[-1][0], end)
        else:
            groups.append((start, end))

    hunks: list[DiffHunk] = []
    for start, end in groups:
        changed = ops[start:end]
        first = changed[0]
        source_count = sum(1 for op in changed if op.type != "added")
        target_count = sum(1 for op in changed if op.type != "removed")
        lo = max(0, start - context)
        hi = min(len(ops), end + context)
        hunks.append(
            DiffHunk(
                source_start=first.source_pos + (1 if source_count else 0),
                source_count=source_count,
                target_start=first.target_pos + (1 if target_count else 0),
                target_count=target_count,
                lines=tuple(DiffLine(op.type, op.content) for op in ops[lo:hi]),
            )
        )
    return hunks


def diff_text(source: str, target: str, context: int = DEFAULT_CONTEXT_LINES) -> LineDiff:
    """
    Diff two texts line by line.

    CRLF is normalized to LF first, so texts that differ only in line endings
    produce no hunks.
    """
    source_lines = split_lines(source)
    target_lines = split_lines(target)
    ops = lcs_ops(source_lines, target_lines)
    return LineDiff(
        hunks=tuple(build_hunks(ops, context)),
        lines_added=sum(1 for op in ops if op.type == "added"),
        lines_removed=sum(1 for op in ops if op.type == "removed"),
        source_lines=len(source_lines),
        target_lines=len(target_lines),
    )


def iter_unified_diff(
    hunks: Sequence[DiffHunk], fromfile: str = "source", tofile: str = "target"
) -> Iterator[str]:
    """Yield unified-diff text lines for ``hunks`` (no trailing newlines)."""
    if not hunks:
        return
    yield f"--- {fromfile}"
    yield f"+++ {tofile}"
    for hunk in hunks:
        yield hunk.header
        for line in hunk.lines:
            yield str(line)
