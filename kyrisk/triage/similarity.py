# kyrisk/triage/similarity.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, List, Sequence, Tuple

from kyrisk.triage.normalizer import TextLine, comparison_form, normalize_lines

SHINGLE_SIZE = 2
DEFAULT_THRESHOLD = 0.72
DEFAULT_CONTAINMENT_MIN = 6
DEFAULT_CONTAINMENT_RATIO = 0.5


def shingles_of_key(key: str, size: int = SHINGLE_SIZE) -> FrozenSet[str]:
    if not key:
        return frozenset()
    if len(key) < size:
        return frozenset({key})
    return frozenset(key[i:i + size] for i in range(len(key) - size + 1))


def shingles(text: Any, size: int = SHINGLE_SIZE) -> FrozenSet[str]:
    """2-character shingles of the comparison form of `text`."""
    return shingles_of_key(comparison_form(text), size)


def jaccard(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def similarity(a: Any, b: Any) -> float:
    """Jaccard similarity of the two lines' shingle sets (0..1, symmetric)."""
    return jaccard(shingles(a), shingles(b))


def _contains(a: str, b: str, min_len: int, min_ratio: float = DEFAULT_CONTAINMENT_RATIO) -> bool:
    short, long_ = (a, b) if len(a) <= len(b) else (b, a)
    if len(short) < min_len or len(short) < min_ratio * len(long_):
        return False
    return short in long_


@dataclass(frozen=True)
class BaselineSet:
    """Comparison keys of the human-authored lines, for duplicate suppression only."""
    keys: Tuple[str, ...] = ()
    shingle_sets: Tuple[FrozenSet[str], ...] = ()

    @classmethod
    def from_lines(cls, lines: Iterable[TextLine]) -> "BaselineSet":
        keys = tuple(dict.fromkeys(ln.key for ln in lines if ln.key))
        return cls(keys=keys, shingle_sets=tuple(shingles_of_key(k) for k in keys))

    @classmethod
    def from_text(cls, text: Any) -> "BaselineSet":
        return cls.from_lines(normalize_lines(text))

    def __len__(self) -> int:
        return len(self.keys)

    def max_similarity(self, key: str) -> float:
        sh = shingles_of_key(key)
        return max((jaccard(sh, b) for b in self.shingle_sets), default=0.0)

    def covers(
        self,
        key: str,
        threshold: float = DEFAULT_THRESHOLD,
        containment_min: int = DEFAULT_CONTAINMENT_MIN,
        containment_ratio: float = DEFAULT_CONTAINMENT_RATIO,
    ) -> bool:
        """
        True when `key` restates some baseline line. Containment only counts
        below an exact-match threshold (1.0), and only when the shorter key
        makes up at least `containment_ratio` of the longer one.
        """
        sh = shingles_of_key(key)
        for k, b in zip(self.keys, self.shingle_sets):
            if jaccard(sh, b) >= threshold:
                return True
            # "there is a risk of falling" vs "risk of falling"
            if threshold < 1.0 and _contains(key, k, containment_min, containment_ratio):
                return True
        return False


def is_near_duplicate(
    key: str,
    others: Sequence[str],
    threshold: float = DEFAULT_THRESHOLD,
    containment_min: int = DEFAULT_CONTAINMENT_MIN,
    containment_ratio: float = DEFAULT_CONTAINMENT_RATIO,
) -> bool:
    return BaselineSet(
        keys=tuple(others), shingle_sets=tuple(shingles_of_key(k) for k in others)
    ).covers(key, threshold, containment_min, containment_ratio)


def dedupe_exact(lines: Iterable[TextLine]) -> List[TextLine]:
    """Collapse lines with identical comparison forms, first occurrence wins."""
    seen = set()
    out: List[TextLine] = []
    for ln in lines:
        if ln.key in seen:
            continue
        seen.add(ln.key)
        out.append(ln)
    return out


def filter_against_baseline(
    lines: Iterable[TextLine],
    baseline: BaselineSet,
    threshold: float = DEFAULT_THRESHOLD,
    containment_min: int = DEFAULT_CONTAINMENT_MIN,
    containment_ratio: float = DEFAULT_CONTAINMENT_RATIO,
) -> List[TextLine]:
    if not len(baseline):
        return list(lines)
    return [
        ln for ln in lines
        if not baseline.covers(ln.key, threshold, containment_min, containment_ratio)
    ]
