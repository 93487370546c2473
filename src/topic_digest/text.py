from __future__ import annotations

import re

_URL_RE = re.compile(r"https?://\S+")
_MENTION_RE = re.compile(r"@\w+", re.ASCII)
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_TAG_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9]")

ELLIPSIS = "..."


def normalize(text: str) -> str:
    """Reduce post text to ASCII words separated by single spaces.

    URLs and @mentions are dropped, hashtags keep their word, anything
    outside ASCII letters/digits/whitespace becomes a space.
    """
    if not text:
        return ""
    s = _URL_RE.sub(" ", text)
    s = _MENTION_RE.sub(" ", s)
    s = s.replace("#", "")
    s = _NON_ALNUM_RE.sub(" ", s)
    return collapse_whitespace(s)


def collapse_whitespace(text: str) -> str:
    """Lighter cleanup for quoted excerpts: whitespace only."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(text: str, max_len: int) -> str:
    if text is None:
        return ""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[: max(0, max_len)]
    return text[: max_len - 3].rstrip() + ELLIPSIS


def hashtag(word: str) -> str:
    """Alphanumeric-only form of a word, without the leading '#'."""
    return _TAG_UNSAFE_RE.sub("", word)
