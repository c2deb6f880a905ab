"""Mechanical line merges used by the ``merge`` and ``three-way`` strategies."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

from loguru import logger

from skillsync.similarity.diff import lcs_ops
from skillsync.utils.string import dominant_newline, split_lines

MARKER_START = "<<<<<<< source"
MARKER_MIDDLE = "======="
MARKER_END = ">>>>>>> target"


@dataclass(frozen=True, slots=True)
class MergeResult:
    content: str
    conflicts: int = 0
    three_way: bool = False

    @property
    def has_conflict_markers(self) -> bool:
        return self.conflicts > 0


class _Change(NamedTuple):
    start: int
    """First replaced base line (0-based)."""
    end: int
    """One past the last replaced base line; equals ``start`` for pure insertions."""
    lines: tuple[str, ...]


def _conflict_block(source: Sequence[str], target: Sequence[str]) -> list[str]:
    return [MARKER_START, *source, MARKER_MIDDLE, *target, MARKER_END]


def _join(lines: Sequence[str], like: str) -> str:
    if not lines:
        return ""
    newline = dominant_newline(like)
    text = newline.join(lines)
    if like.endswith("\n") or not like:
        text += newline
    return text


def two_way_merge_lines(source: Sequence[str], target: Sequence[str]) -> tuple[list[str], int]:
    """Union of two line sequences.

    Common lines are kept once. A block present on only one side is kept as is;
    where both sides differ, both blocks are kept between conflict markers.
    """
    merged: list[str] = []
    conflicts = 0
    removed: list[str] = []
    added: list[str] = []

    def flush() -> None:
        nonlocal conflicts
        if removed and added:
            merged.extend(_conflict_block(removed, added))
            conflicts += 1
        else:
            merged.extend(removed or added)
        removed.clear()
        added.clear()

    for op in lcs_ops(source, target):
        if op.type == "context":
            flush()
            merged.append(op.content)
        elif op.type == "removed":
            removed.append(op.content)
        else:
            added.append(op.content)
    flush()
    return merged, conflicts


def _changes(base: Sequence[str], derived: Sequence[str]) -> list[_Change]:
    changes: list[_Change] = []
    start: int | None = None
    end = 0
    lines: list[str] = []
    for op in lcs_ops(base, derived):
        if op.type == "context":
            if start is not None:
                changes.append(_Change(start, end, tuple(lines)))
                start, lines = None, []
            continue
        if start is None:
            start = end = op.source_pos
        if op.type == "removed":
            end += 1
        else:
            lines.append(op.content)
    if start is not None:
        changes.append(_Change(start, end, tuple(lines)))
    return changes


def _apply(base: Sequence[str], lo: int, hi: int, changes: Sequence[_Change]) -> list[str]:
    out: list[str] = []
    pos = lo
    for change in changes:
        out.extend(base[pos : change.start])
        out.extend(change.lines)
        pos = change.end
    out.extend(base[pos:hi])
    return out


def three_way_merge_lines(
    base: Sequence[str], source: Sequence[str], target: Sequence[str]
) -> tuple[list[str], int]:
    """Merge ``source`` and ``target`` against their common ancestor ``base``.

    Changes made on only one side are applied; overlapping changes that differ
    become conflict blocks.
    """
    source_changes = _changes(base, source)
    target_changes = _changes(base, target)
    merged: list[str] = []
    conflicts = 0
    pos = si = ti = 0

    while si < len(source_changes) or ti < len(target_changes):
        s_start = source_changes[si].start if si < len(source_changes) else len(base) + 1
        t_start = target_changes[ti].start if ti < len(target_changes) else len(base) + 1
        lo = min(s_start, t_start)
        merged.extend(base[pos:lo])

        hi = lo
        cluster_s: list[_Change] = []
        cluster_t: list[_Change] = []
        grew = True
        while grew:
            grew = False
            while si < len(source_changes) and source_changes[si].start <= hi:
                cluster_s.append(source_changes[si])
                hi = max(hi, source_changes[si].end)
                si += 1
                grew = True
            while ti < len(target_changes) and target_changes[ti].start <= hi:
                cluster_t.append(target_changes[ti])
                hi = max(hi, target_changes[ti].end)
                ti += 1
                grew = True

        source_side = _apply(base, lo, hi, cluster_s)
        target_side = _apply(base, lo, hi, cluster_t)
        if not cluster_t:
            merged.extend(source_side)
        elif not cluster_s or source_side == target_side:
            merged.extend(target_side)
        else:
            merged.extend(_conflict_block(source_side, target_side))
            conflicts += 1
        pos = hi

    merged.extend(base[pos:])
    return merged, conflicts


def implicit_ancestor(source: Sequence[str], target: Sequence[str]) -> list[str]:
    """Source lines, in source order, that also occur somewhere in target."""
    shared = set(target)
    return [line for line in source if line in shared]


def merge_text(source: str, target: str) -> MergeResult:
    """Two-way mechanical merge of two bodies, keeping the source's line endings."""
    lines, conflicts = two_way_merge_lines(split_lines(source), split_lines(target))
    return MergeResult(_join(lines, source), conflicts)


def three_way_merge_text(source: str, target: str) -> MergeResult:
    """
    Three-way merge against the implicit ancestor of both bodies.

    The ancestor is the set of lines the two sides share. When it is empty, or
    when either side is unchanged from it, there is nothing to reconcile and the
    result falls back to :func:`merge_text`.
    """
    source_lines = split_lines(source)
    target_lines = split_lines(target)
    base = implicit_ancestor(source_lines, target_lines)
    if not base or base == source_lines or base == target_lines:
        logger.debug("No usable ancestor, falling back to two-way merge")
        return merge_text(source, target)
    lines, conflicts = three_way_merge_lines(base, source_lines, target_lines)
    return MergeResult(_join(lines, source), conflicts, three_way=True)
