"""Text helpers for product names, page metadata and listing queries."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

_HASHTAG = re.compile(r"#\w*", re.ASCII)


def remove_hashtags(name: str) -> str:
    """The name with every hashtag removed."""
    return _HASHTAG.sub("", name)


def count_hashtags(name: str) -> int:
    """The number of hashtags in the name."""
    return len(_HASHTAG.findall(name))


def meta_hashtags(hashtags: Iterable[str]) -> str:
    """Hashtags without their '#', each followed by a comma, for meta keywords."""
    return "".join(tag.replace("#", "") + "," for tag in hashtags)


def truncate(text: str, limit: int) -> str:
    """Shorten text that is longer than limit bytes, always ending in '...'.

    The cut keeps ``limit - 3`` characters so that the ellipsis fits.
    """
    result = text
    if len(text.encode("utf-8")) > limit and limit > 3:
        result = text[: limit - 3]
    return result + "..."


def xml_path(path: str, raw_query: str) -> str:
    """The feed path for a listing path and its query string."""
    base = path.replace(".xml", "", 1)
    if base == "/":
        base = "/index"
    query = f"?{raw_query}" if raw_query else ""
    return f"{base}.xml{query}"


def latest_mod_time(stories: Sequence, now: Optional[datetime] = None) -> datetime:
    """The update time of the first story, or now when there are none."""
    if not stories:
        return now if now is not None else datetime.now(timezone.utc)
    return stories[0].updated_at


def escape_like(term: str) -> str:
    """Escape the LIKE wildcards '_' and '%' in a search term."""
    return term.replace("_", "\\_").replace("%", "\\%")