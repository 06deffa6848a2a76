"""HTML cleaning utilities for plain-text message fallbacks."""

import html
import re

_TAG_RE = re.compile(r"<[^>]+>")


def html_to_plain(formatted: str) -> str:
    """Strip tags from a formatted body to produce its plain-text ``body``.

    Entities are unescaped after tags are removed, so ``&lt;b&gt;`` survives
    as the literal text ``<b>``.
    """
    if not formatted:
        return ""
    return html.unescape(_TAG_RE.sub("", formatted))
