"""Reduce free-form model output to one short usable string."""

import re

MIN_LINE_LENGTH = 10
FALLBACK_LENGTH = 200
TITLE_LENGTH = 100
META_WORDS = ("option", "why", "better", "consider")

_CODE_FENCE_RE = re.compile(r"^[ \t]*```.*$", re.M)
_INLINE_CODE_RE = re.compile(r"`([^`]*)`")
_BOLD_RE = re.compile(r"(\*\*|__)(.+?)\1")
_ITALIC_STAR_RE = re.compile(r"\*(\S(?:.*?\S)?)\*")
_ITALIC_UNDERSCORE_RE = re.compile(r"(?<!\w)_(\S(?:.*?\S)?)_(?!\w)")
_HEADER_RE = re.compile(r"^[ \t]*#{1,6}[ \t]*", re.M)
_BULLET_RE = re.compile(r"^[ \t]*(?:[-*+]|\d+[.)])[ \t]+", re.M)
_RULE_RE = re.compile(r"^[ \t]*(?:[-*_][ \t]*){3,}$", re.M)
_PREAMBLE_RE = re.compile(
    r"^[ \t]*(?:here(?:['’]s| is| are)|sure\b[,!]?|certainly\b[,!]?)[^:\n]*:\s*", re.I | re.M
)
_QUOTED_RE = re.compile(r"[\"“]([^\"“”]+)[\"”]")


def strip_markdown(text: str) -> str:
    """Remove code fences, inline code, emphasis, headers, bullets and rules."""
    text = _CODE_FENCE_RE.sub("", text)
    text = _INLINE_CODE_RE.sub(r"\1", text)
    text = _RULE_RE.sub("", text)
    text = _BOLD_RE.sub(r"\2", text)
    text = _ITALIC_STAR_RE.sub(r"\1", text)
    text = _ITALIC_UNDERSCORE_RE.sub(r"\1", text)
    text = _HEADER_RE.sub("", text)
    text = _BULLET_RE.sub("", text)
    return _PREAMBLE_RE.sub("", text).strip()


def _is_meta(line: str) -> bool:
    lowered = line.lower()
    return any(word in lowered for word in META_WORDS)


def _unquote(line: str) -> str:
    match = _QUOTED_RE.search(line)
    return match.group(1).strip() if match else line


def sanitize(raw: str, field: str = "details") -> str:
    """Pick the first substantial, non-meta line of the cleaned output.

    Quoted content inside the chosen line wins over the line itself. Titles
    are cut to their first line and 100 characters.
    """
    cleaned = strip_markdown(raw)
    lines = [line.strip() for line in cleaned.splitlines() if line.strip()]

    result = next(
        (_unquote(line) for line in lines if len(line) > MIN_LINE_LENGTH and not _is_meta(line)),
        None,
    )
    if result is None:
        result = lines[0] if lines else cleaned[:FALLBACK_LENGTH]

    if field == "title":
        result = result.split("\n", 1)[0][:TITLE_LENGTH]
    return result
