from dataclasses import dataclass, field
from typing import Any, Optional

# Fixed genre vocabulary. Event genres are drawn from this list but are not
# validated against it.
GENRES: tuple[str, ...] = (
    "Rock",
    "Punk",
    "Metal",
    "Indie",
    "Hip-Hop",
    "R&B",
    "Jazz",
    "Blues",
    "Folk",
    "Country",
    "Electronic",
    "Latin",
    "Experimental",
    "Other",
)


def clean_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def clean_optional(value: Any) -> Optional[str]:
    s = clean_text(value)
    return s or None


def clean_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [s for s in (clean_text(v) for v in value) if s]


def clean_genres(value: Any) -> list[str]:
    # A comma-separated string is accepted as a convenience
    if isinstance(value, list):
        return clean_list(value)
    return [s.strip() for s in clean_text(value).split(",") if s.strip()]


@dataclass
class Venue:
    id: str
    name: str
    link: Optional[str] = None
    # Address, contact details etc. are carried through untouched
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, raw: dict) -> "Venue":
        known = {"id", "name", "link"}
        return cls(
            id=clean_text(raw.get("id")),
            name=clean_text(raw.get("name")),
            link=clean_optional(raw.get("link")),
            extra={k: v for k, v in raw.items() if k not in known},
        )


@dataclass
class Partner:
    id: str
    name: str
    link: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: dict) -> "Partner":
        return cls(
            id=clean_text(raw.get("id")),
            name=clean_text(raw.get("name")),
            link=clean_optional(raw.get("link")),
        )


@dataclass
class Event:
    id: str
    title: str
    date: str          # As entered: YYYY-MM-DD or M/D/YYYY
    time: Optional[str] = None
    venue_id: Optional[str] = None   # Foreign key to Venue.id
    partner_ids: list[str] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)
    flyer: Optional[str] = None
    link: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: dict) -> "Event":
        return cls(
            id=clean_text(raw.get("id")),
            title=clean_text(raw.get("title")),
            date=clean_text(raw.get("date")),
            time=clean_optional(raw.get("time")),
            venue_id=clean_optional(raw.get("venueId")),
            partner_ids=clean_list(raw.get("partnerIds")),
            genres=clean_genres(raw.get("genres")),
            flyer=clean_optional(raw.get("flyer")),
            link=clean_optional(raw.get("link")),
        )

    def to_dict(self) -> dict:
        """Serialise back to the camelCase shape used in events.json."""
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "time": self.time,
            "venueId": self.venue_id,
            "partnerIds": list(self.partner_ids),
            "genres": list(self.genres),
            "flyer": self.flyer,
            "link": self.link,
        }


@dataclass(frozen=True)
class Selection:
    kind: str          # "venue" or "partner"
    id: str


@dataclass(frozen=True)
class FilterState:
    """
    Session-scoped view filters.

    `genres` is never None: the full GENRES set means "unfiltered" and an
    empty set means "show nothing".
    """
    selection: Optional[Selection] = None
    genres: frozenset[str] = frozenset(GENRES)
    search: str = ""


@dataclass
class DateGroup:
    date: str          # Canonical YYYY-MM-DD
    events: list[Event]


def _load(raw: Any, cls) -> list:
    if not isinstance(raw, list):
        return []
    return [cls.from_dict(r) for r in raw if isinstance(r, dict)]


def load_events(raw: Any) -> list[Event]:
    return _load(raw, Event)


def load_venues(raw: Any) -> list[Venue]:
    return _load(raw, Venue)


def load_partners(raw: Any) -> list[Partner]:
    return _load(raw, Partner)
