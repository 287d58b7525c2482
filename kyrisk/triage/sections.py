# kyrisk/triage/sections.py
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Pattern, Tuple

from kyrisk.triage.normalizer import strip_marker

# header keyword -> section, checked in order ("third-party measures" is third_party)
_SECTION_KEYS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("work", re.compile(r"\b(work description|work content|task)\b", re.I)),
    ("hazards", re.compile(r"\b(hazards?|dangers?|risk prediction)\b", re.I)),
    ("third_party", re.compile(r"\b(third[\s-]?part(y|ies)|public|pedestrians?|visitors?)\b", re.I)),
    ("countermeasures", re.compile(r"\b(counter-?measures?|measures?|controls?|prevention)\b", re.I)),
)
_BRACKET_HEADER_RE = re.compile(r"^[【\[].*[】\]]$")
_MAX_INLINE_HEAD = 40


@dataclass(frozen=True)
class SupplementSections:
    work: str = ""
    hazards: str = ""
    countermeasures: str = ""
    third_party: str = ""


def _section_of(text: str) -> Optional[str]:
    for name, rx in _SECTION_KEYS:
        if rx.search(text):
            return name
    return None


def split_sections(text: Any) -> SupplementSections:
    """
    Split a sectioned AI supplement such as

        [AI supplement | Hazards]
        - ...
        Countermeasures: ...

    into its parts. Lines before any header count as work description.
    """
    t = ("" if text is None else str(text)).strip()
    if not t:
        return SupplementSections()

    buf: Dict[str, List[str]] = {"work": [], "hazards": [], "countermeasures": [], "third_party": []}
    current: Optional[str] = None

    for raw in t.splitlines():
        line = raw.strip()
        if not line:
            continue

        # standalone header: "[AI supplement | Hazards]" or "Hazards:"
        if _BRACKET_HEADER_RE.match(line) or line.endswith((":", "：")):
            sec = _section_of(line)
            if sec:
                current = sec
                continue

        # inline header: "Hazards: fall from the slope shoulder"; bullets are content
        head, sep, after = line.partition(":") if ":" in line else line.partition("：")
        if sep and len(head) <= _MAX_INLINE_HEAD and strip_marker(line) == line:
            sec = _section_of(head)
            if sec:
                current = sec
                if after.strip():
                    buf[current].append(after.strip())
                continue

        buf[current or "work"].append(line)

    return SupplementSections(**{k: "\n".join(v).strip() for k, v in buf.items()})
