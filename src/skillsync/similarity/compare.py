"""Pairwise comparison and cross-platform matching of skills."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from loguru import logger

from skillsync.cancel import CancelToken
from skillsync.exception import CancelledError
from skillsync.model import Skill
from skillsync.similarity.diff import DiffHunk, diff_text
from skillsync.similarity.name import NameAlgorithm, name_similarity

DEFAULT_NAME_THRESHOLD = 0.7
DEFAULT_CONTENT_THRESHOLD = 0.6


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    skill_a: Skill
    skill_b: Skill
    name_score: float
    content_score: float
    lines_added: int
    lines_removed: int
    hunks: tuple[DiffHunk, ...]

    @property
    def score(self) -> float:
        return max(self.name_score, self.content_score)


@dataclass(frozen=True, slots=True)
class MatchThresholds:
    """A pair qualifies when either score reaches its threshold."""

    name: float = DEFAULT_NAME_THRESHOLD
    content: float = DEFAULT_CONTENT_THRESHOLD

    @classmethod
    def uniform(cls, threshold: float) -> MatchThresholds:
        """Use one threshold for both scores, i.e. ``max(name, content) >= threshold``."""
        return cls(name=threshold, content=threshold)

    def accepts(self, result: ComparisonResult) -> bool:
        return result.name_score >= self.name or result.content_score >= self.content


def compare_skills(
    a: Skill, b: Skill, algorithm: NameAlgorithm | str = NameAlgorithm.COMBINED
) -> ComparisonResult:
    """Score and diff two skills; the diff reads from ``a`` to ``b``."""
    diff = diff_text(a.content, b.content)
    return ComparisonResult(
        skill_a=a,
        skill_b=b,
        name_score=name_similarity(a.name, b.name, algorithm),
        content_score=diff.content_score,
        lines_added=diff.lines_added,
        lines_removed=diff.lines_removed,
        hunks=diff.hunks,
    )


def match_skills(
    skills_a: Iterable[Skill],
    skills_b: Iterable[Skill],
    *,
    thresholds: MatchThresholds | None = None,
    algorithm: NameAlgorithm | str = NameAlgorithm.COMBINED,
    cancel: CancelToken | None = None,
) -> list[ComparisonResult]:
    """
    Pair up similar skills living on different platforms.

    Each unordered pair is reported once. Results are sorted by content score
    (descending), then name score (descending), then ``skill_a.name``.
    """
    thresholds = thresholds or MatchThresholds()
    candidates_b: Sequence[Skill] = list(skills_b)
    seen: set[frozenset[str]] = set()
    results: list[ComparisonResult] = []
    for a in skills_a:
        if cancel is not None and cancel.cancelled:
            raise CancelledError("Comparison cancelled", partial=_sorted(results))
        for b in candidates_b:
            if a.platform is b.platform:
                continue
            pair = frozenset((str(a.path), str(b.path)))
            if pair in seen:
                continue
            seen.add(pair)
            result = compare_skills(a, b, algorithm)
            if thresholds.accepts(result):
                results.append(result)
    logger.debug("Matched {count} skill pairs", count=len(results))
    return _sorted(results)


def find_similar(
    skills: Sequence[Skill],
    *,
    thresholds: MatchThresholds | None = None,
    algorithm: NameAlgorithm | str = NameAlgorithm.COMBINED,
    cancel: CancelToken | None = None,
) -> list[ComparisonResult]:
    """Find likely duplicates across platforms within a single set of skills."""
    return match_skills(skills, skills, thresholds=thresholds, algorithm=algorithm, cancel=cancel)


def _sorted(results: list[ComparisonResult]) -> list[ComparisonResult]:
    return sorted(
        results,
        key=lambda r: (
            -r.content_score,
            -r.name_score,
            r.skill_a.name,
            r.skill_b.name,
            str(r.skill_a.path),
            str(r.skill_b.path),
        ),
    )
