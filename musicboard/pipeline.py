"""
Filter, group and sort events for display.

Everything here is a pure function of its inputs. Malformed data never
raises: unparseable dates drop the event, unparseable times sort last.
"""

import re
from collections import defaultdict
from typing import Any, Optional

from musicboard.dates import normalize_date, parse_time, today_iso
from musicboard.models import GENRES, DateGroup, Event, FilterState, Selection

_FULL_GENRES = frozenset(GENRES)


def slugify(value: Any) -> str:
    """'  Fresno Jazz Society! ' -> 'fresno-jazz-society'"""
    s = "" if value is None else str(value).strip().lower()
    return re.sub(r"[^a-z0-9]+", "-", s).strip("-")


def _matches_selection(event: Event, selection: Selection) -> bool:
    if selection.kind == "venue":
        return event.venue_id == selection.id
    if selection.kind == "partner":
        wanted = slugify(selection.id)
        return any(slugify(p) == wanted for p in event.partner_ids)
    return True


def _title_key(title: str) -> tuple[str, str]:
    # Case-insensitive first; on a tie lowercase sorts before uppercase
    return title.casefold(), title.swapcase()


def filter_events(events: list[Event], state: FilterState) -> list[Event]:
    """Apply the venue/partner, genre and search filters, in that order."""
    result = list(events)

    if state.selection is not None and state.selection.id:
        result = [e for e in result if _matches_selection(e, state.selection)]

    genres = frozenset(state.genres)
    if not genres:
        return []
    if genres != _FULL_GENRES:
        result = [e for e in result if any(g in genres for g in e.genres)]

    needle = (state.search or "").strip().lower()
    if needle:
        result = [e for e in result if needle in e.title.lower()]

    return result


def group_events_by_date(events: list[Event], today: str) -> list[DateGroup]:
    """
    Bucket events by canonical date, dropping undated and past events.

    Groups come back in ascending date order; events within a group are
    ordered by start time and then title.
    """
    buckets: dict[str, list[Event]] = defaultdict(list)
    for event in events:
        d = normalize_date(event.date)
        if d is None or d < today:
            continue
        buckets[d].append(event)

    return [
        DateGroup(
            date=d,
            events=sorted(buckets[d], key=lambda e: (parse_time(e.time), *_title_key(e.title))),
        )
        for d in sorted(buckets)
    ]


def build_view(
    events: Any,
    state: Optional[FilterState] = None,
    today: Optional[str] = None,
) -> list[DateGroup]:
    if not isinstance(events, (list, tuple)):
        return []
    # Raw JSON records are accepted alongside Event objects
    events = [
        e if isinstance(e, Event) else Event.from_dict(e)
        for e in events
        if isinstance(e, (Event, dict))
    ]
    state = state or FilterState()
    return group_events_by_date(filter_events(events, state), today or today_iso())
