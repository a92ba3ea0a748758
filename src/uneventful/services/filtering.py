"""
Client-side search over the aggregate.
"""

import html
import re
import unicodedata
from collections.abc import Sequence

from uneventful.models.events import CalendarEvent

_TAG_RE = re.compile(r"<[^>]+>")


def normalize_text(value: str) -> str:
    """Decompose, drop combining marks, lower-case. "César" -> "cesar"."""
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def strip_html(value: str) -> str:
    """Plain-text rendering of an HTML description."""
    return html.unescape(_TAG_RE.sub("", value))


def event_matches(event: CalendarEvent, normalized_query: str) -> bool:
    """True if title, location or description contains the normalized query."""
    if event.summary and normalized_query in normalize_text(event.summary):
        return True
    if event.description and normalized_query in normalize_text(strip_html(event.description)):
        return True
    if event.location and normalized_query in normalize_text(event.location):
        return True
    return False


def filter_events(events: Sequence[CalendarEvent], query: str) -> list[CalendarEvent]:
    """
    Filter events by substring search.

    An empty query returns every event in the original order.
    """
    if not query:
        return list(events)

    normalized_query = normalize_text(query)
    return [event for event in events if event_matches(event, normalized_query)]
