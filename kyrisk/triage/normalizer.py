# kyrisk/triage/normalizer.py
# -----------------------------------------------------------------------------
# Turns a free-text blob (human or model output) into clean bullet lines.
# - display form: markers stripped, whitespace collapsed, trimmed
# - comparison form: NFKC + casefold, all punctuation / brackets / spaces
#   removed; used only for similarity and duplicate checks
# - match form: NFKC + casefold, punctuation as single spaces; keyword lookup
# -----------------------------------------------------------------------------
from __future__ import annotations
import re
import unicodedata
from dataclasses import dataclass
from typing import Any, List

MIN_LINE_LENGTH = 3

# "- ", "• ", "・", "* ", "1.", "1)", "(1)", "1、", "①", "a) "
_MARKER_RE = re.compile(
    r"^\s*(?:"
    r"[\-‐‑–—―・•●○◦▪■□◆◇*+>→]+"
    r"|[(（]\s*\d{1,3}\s*[)）]"
    r"|\d{1,3}\s*[.)）、．:](?!\d)"
    r"|[①-⑳]"
    r"|[a-zA-Z][.)](?=\s)"
    r")\s*"
)
_WS_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[\W_]+", re.UNICODE)

# single-line blobs: "a; b; c" or "・a・b" or "①a②b"
_INLINE_SEP_RE = re.compile(r"\s*(?:;|；|・|•)\s*")
_INLINE_ORDINAL_RE = re.compile(r"(?=[①-⑳])|(?<=\S)\s+(?=\(?\d{1,2}[)）]\s)")


@dataclass(frozen=True)
class TextLine:
    display: str
    key: str


def strip_marker(line: str) -> str:
    t = line or ""
    # "- 1) foo" carries two markers
    for _ in range(3):
        stripped = _MARKER_RE.sub("", t, count=1)
        if stripped == t:
            break
        t = stripped
    return t


def collapse_ws(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def comparison_form(text: Any) -> str:
    t = unicodedata.normalize("NFKC", "" if text is None else str(text)).casefold()
    return _NON_WORD_RE.sub("", t)


def match_form(text: Any) -> str:
    """NFKC + casefold with punctuation turned into single spaces; words stay apart."""
    t = unicodedata.normalize("NFKC", "" if text is None else str(text)).casefold()
    return collapse_ws(_NON_WORD_RE.sub(" ", t))


def display_form(line: Any) -> str:
    return collapse_ws(strip_marker(collapse_ws("" if line is None else str(line))))


def split_raw_lines(text: Any) -> List[str]:
    raw = ("" if text is None else str(text)).replace("\r\n", "\n").replace("\r", "\n")
    lines = [ln.strip() for ln in raw.split("\n") if ln.strip()]
    if len(lines) != 1:
        return lines

    one = lines[0]
    parts = [p for p in _INLINE_SEP_RE.split(one) if p.strip()]
    if len(parts) >= 2:
        return parts
    parts = [p for p in _INLINE_ORDINAL_RE.split(one) if p.strip()]
    if len(parts) >= 2:
        return parts
    return lines


def to_line(text: Any) -> TextLine:
    d = display_form(text)
    return TextLine(display=d, key=comparison_form(d))


def normalize_lines(text: Any, min_length: int = MIN_LINE_LENGTH) -> List[TextLine]:
    """
    Ordered display/comparison pairs for every meaningful line in `text`.
    Lines shorter than `min_length` after cleanup are noise and dropped.
    """
    out: List[TextLine] = []
    for raw in split_raw_lines(text):
        line = to_line(raw)
        if len(line.display) < min_length or not line.key:
            continue
        out.append(line)
    return out
