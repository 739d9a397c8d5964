"""Text helpers for turning MDX guide bodies into indexable plain text."""

from __future__ import annotations

import re
from typing import List

_IMPORT_RE = re.compile(r"import\s+.*?from\s+['\"].*?['\"];?")
_EXPORT_RE = re.compile(r"export\s+default\s+.*;")
_FENCE_RE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE_RE = re.compile(r"`[^`]*`")
_TAG_RE = re.compile(r"<[^>]*>")
_BRACE_RE = re.compile(r"\{[^}]*\}")
_IMAGE_RE = re.compile(r"!\[.*?\]\(.*?\)")
_LINK_RE = re.compile(r"\[([^\]]*)\]\(.*?\)")
_HEADING_MARKER_RE = re.compile(r"#{1,6}\s+")
_EMPHASIS_RE = re.compile(r"[*_~]")
_BLANK_LINES_RE = re.compile(r"\n{3,}")
_HEADING_LINE_RE = re.compile(r"^#{1,6}\s+(.+)$", re.MULTILINE)
_TOKEN_RE = re.compile(r"[^\W_]+")


def clean(raw_body: str) -> str:
    """Strip MDX syntax from a guide body and return readable text.

    Code is removed before tags and braces so snippets containing ``<`` or
    ``{`` do not leave fragments behind.
    """
    text = _IMPORT_RE.sub("", raw_body)
    text = _EXPORT_RE.sub("", text)
    text = _FENCE_RE.sub("", text)
    text = _INLINE_CODE_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    text = _BRACE_RE.sub("", text)
    text = _IMAGE_RE.sub("", text)
    text = _LINK_RE.sub(r"\1", text)
    text = _HEADING_MARKER_RE.sub("", text)
    text = _EMPHASIS_RE.sub("", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def headings(raw_body: str) -> List[str]:
    """Return heading texts in document order."""
    return _HEADING_LINE_RE.findall(raw_body)


def truncate_words(text: str, limit: int = 500) -> str:
    """Keep the first ``limit`` words, joined by single spaces."""
    return " ".join(text.split()[:limit])


def tokenize(text: str) -> List[str]:
    """Lower-case terms split on whitespace and punctuation."""
    return _TOKEN_RE.findall(text.lower())
