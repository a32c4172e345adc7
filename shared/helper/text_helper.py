"""Text helpers for turning rendered WordPress HTML into prompt-sized plain text."""

import re

# one tag at a time; a trailing unterminated "<..." is dropped too
_TAG_PATTERN = re.compile(r"<[^>]*>?")

ELLIPSIS = "..."
EXCERPT_LIMIT = 200
BODY_LIMIT = 1000


def strip_tags(html: str) -> str:
    """Remove every markup tag from ``html``. Entities are left untouched."""
    return _TAG_PATTERN.sub("", html or "")


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, appending an ellipsis when something was cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def sanitize(html: str, limit: int) -> str:
    """Strip tags from ``html`` and truncate the result to ``limit`` characters.

    >>> sanitize("<b>hi</b> there", 100)
    'hi there'
    >>> sanitize("abcdefgh", 5)
    'abcde...'
    """
    return truncate(strip_tags(html), limit)
