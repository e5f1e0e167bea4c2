"""Best-effort parsing of free-form model output into bullet lists and named sections."""
from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional

BULLET_MARKERS = ("•", "-", "*")

# Section key -> header phrase as the model is asked to write it.
REFLECTION_SECTIONS: Dict[str, str] = {
    "what_went_well": "what went well",
    "what_went_wrong": "what went wrong",
    "possible_reasons": "possible reasons",
    "suggestions": "suggestions",
}

HeaderMatcher = Callable[[str, str], bool]


def contains_header(line: str, phrase: str) -> bool:
    """Permissive matching: the phrase appears anywhere in the line, ignoring case."""
    return phrase.lower() in line.lower()


def exact_header(line: str, phrase: str) -> bool:
    """Strict matching: a heading line that starts with the phrase.

    Markdown emphasis, '#' and a trailing colon are ignored, and a qualifier after the
    phrase is allowed ("Suggestions for Next Week:"). Bullet lines never count as headers.
    """
    stripped = line.strip()
    if stripped.startswith(BULLET_MARKERS) and not stripped.startswith("**"):
        return False
    cleaned = line.strip().strip("#").strip().strip("*_").strip().rstrip(":").strip("*_").strip().lower()
    phrase = phrase.lower()
    return cleaned == phrase or cleaned.startswith(phrase + " ")


def strip_bullet(line: str) -> Optional[str]:
    """Return the bullet's content, or None if the line is not a bullet."""
    stripped = line.strip()
    if not stripped.startswith(BULLET_MARKERS):
        return None
    return stripped[1:].strip()


def extract_bullet_items(text: str) -> List[str]:
    items: List[str] = []
    for line in (text or "").splitlines():
        content = strip_bullet(line)
        if content:
            items.append(content)
    return items


def extract_sections(
    text: str,
    section_headers: Mapping[str, str] = REFLECTION_SECTIONS,
    match_header: HeaderMatcher = contains_header,
) -> Dict[str, List[str]]:
    """Group bullet lines under the most recent recognised header.

    Every key of ``section_headers`` is present in the result, possibly empty. Lines
    before the first header are ignored. A line is checked for a header before it is
    treated as a bullet, so with the default matcher a bullet that mentions a header
    phrase switches sections instead of being collected.
    """
    sections: Dict[str, List[str]] = {key: [] for key in section_headers}
    current: Optional[str] = None

    for line in (text or "").splitlines():
        if not line.strip():
            continue
        header_key = next((key for key, phrase in section_headers.items() if match_header(line, phrase)), None)
        if header_key is not None:
            current = header_key
            continue
        if current is None:
            continue
        content = strip_bullet(line)
        if content:
            sections[current].append(content)

    return sections
