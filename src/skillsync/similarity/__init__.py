from __future__ import annotations

from skillsync.similarity.compare import (
    ComparisonResult,
    MatchThresholds,
    compare_skills,
    find_similar,
    match_skills,
)
from skillsync.similarity.diff import DiffHunk, DiffLine, LineDiff, content_score, diff_text
from skillsync.similarity.name import NameAlgorithm, name_similarity

__all__ = [
    "ComparisonResult",
    "DiffHunk",
    "DiffLine",
    "LineDiff",
    "MatchThresholds",
    "NameAlgorithm",
    "compare_skills",
    "content_score",
    "diff_text",
    "find_similar",
    "match_skills",
    "name_similarity",
]
