"""
Whole-file JSON persistence for events, venues, partners and flyers.

Each collection is a JSON array on disk. Every mutation reads the full
array, changes it in memory and writes the full array back.
"""

import base64
import binascii
import json
import logging
import random
import string
import time
from pathlib import Path

from musicboard.config import DataFiles
from musicboard.dates import parse_time
from musicboard.models import Event, clean_text

logger = logging.getLogger("musicboard.store")

FLYER_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp", ".gif")

_EVENT_FIELDS = ("title", "date", "time", "venueId")
_DIRECTORY_FIELDS = ("id", "name", "link")
_BASE36 = string.digits + string.ascii_lowercase


class StoreError(Exception):
    pass


class ValidationError(StoreError):
    pass


class NotFoundError(StoreError):
    pass


# --- Files ---

def read_json_array(path: Path) -> list:
    """Return the JSON array stored at `path`, or [] if missing or malformed."""
    try:
        with open(path, encoding="utf-8") as f:
            parsed = json.load(f)
    except FileNotFoundError:
        return []
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read %s (%s), treating as empty", path, exc)
        return []
    return parsed if isinstance(parsed, list) else []


def write_json_array(path: Path, items: list) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(items, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.info("Wrote %d records to %s", len(items), path)


# --- Field helpers ---

def _to_base36(n: int) -> str:
    out = ""
    while n:
        n, r = divmod(n, 36)
        out = _BASE36[r] + out
    return out or "0"


def make_event_id() -> str:
    """evt_<base36 millisecond timestamp>_<6 random base36 chars>"""
    suffix = "".join(random.choices(_BASE36, k=6))
    return f"evt_{_to_base36(int(time.time() * 1000))}_{suffix}"


def with_event_ids(events: list) -> tuple[list, bool]:
    """Give every event without an id a fresh one. Existing ids are kept."""
    changed = False
    out = []
    for e in events:
        if isinstance(e, dict) and clean_text(e.get("id")):
            out.append(e)
            continue
        changed = True
        out.append({**(e if isinstance(e, dict) else {}), "id": make_event_id()})
    return out, changed


def sort_events(events: list) -> list:
    """Order stored events by date text, then parsed start time."""
    def key(e):
        return (clean_text(e.get("date")), parse_time(clean_text(e.get("time"))))
    return sorted(events, key=key)


def _event_fields(body: dict) -> dict:
    """Validate an event payload and return its stored fields, minus the id."""
    event = Event.from_dict(body)
    if not (event.title and event.date and event.time and event.venue_id):
        raise ValidationError("Missing required fields: " + ", ".join(_EVENT_FIELDS))
    fields = event.to_dict()
    del fields["id"]
    return fields


def _load_events(files: DataFiles) -> list:
    events, changed = with_event_ids(read_json_array(files.events))
    if changed:
        write_json_array(files.events, events)
    return events


# --- Events ---

def get_events(files: DataFiles) -> list:
    return _load_events(files)


def add_event(files: DataFiles, body: dict) -> list:
    fields = _event_fields(body)
    event = {"id": clean_text(body.get("id")) or make_event_id(), **fields}
    events = sort_events([event, *_load_events(files)])
    write_json_array(files.events, events)
    return events


def update_event(files: DataFiles, body: dict) -> list:
    event_id = clean_text(body.get("id"))
    if not event_id:
        raise ValidationError("Missing required field: id")
    fields = _event_fields(body)

    events = _load_events(files)
    for idx, existing in enumerate(events):
        if clean_text(existing.get("id")) == event_id:
            break
    else:
        raise NotFoundError("Event not found")

    events[idx] = {**existing, "id": event_id, **fields}
    events = sort_events(events)
    write_json_array(files.events, events)
    return events


def delete_event(files: DataFiles, body: dict) -> list:
    event_id = clean_text(body.get("id"))
    if not event_id:
        raise ValidationError("Missing required field: id")
    events = [e for e in _load_events(files) if clean_text(e.get("id")) != event_id]
    write_json_array(files.events, events)
    return events


# --- Venues & partners ---

def get_venues(files: DataFiles) -> list:
    return read_json_array(files.venues)


def get_partners(files: DataFiles) -> list:
    return read_json_array(files.partners)


def _add_directory_entry(path: Path, body: dict) -> list:
    entry = {name: clean_text(body.get(name)) for name in _DIRECTORY_FIELDS}
    if not all(entry.values()):
        raise ValidationError("Missing required fields: " + ", ".join(_DIRECTORY_FIELDS))
    existing = [
        r for r in read_json_array(path)
        if not (isinstance(r, dict) and clean_text(r.get("id")) == entry["id"])
    ]
    items = [entry, *existing]
    write_json_array(path, items)
    return items


def add_venue(files: DataFiles, body: dict) -> list:
    return _add_directory_entry(files.venues, body)


def add_partner(files: DataFiles, body: dict) -> list:
    return _add_directory_entry(files.partners, body)


# --- Flyers ---

def list_flyers(files: DataFiles) -> list[str]:
    """Flyer file names, newest first."""
    files.flyers.mkdir(parents=True, exist_ok=True)
    entries = []
    for p in files.flyers.iterdir():
        if p.name.startswith("."):
            continue
        try:
            st = p.stat()
        except OSError:
            continue
        if p.is_file():
            entries.append((st.st_mtime, p.name))
    entries.sort(key=lambda t: t[0], reverse=True)
    return [name for _, name in entries]


def save_flyer(files: DataFiles, body: dict) -> str:
    """Decode and store an uploaded flyer. Returns its public path."""
    filename = clean_text(body.get("filename"))
    data_b64 = clean_text(body.get("dataBase64"))
    if not filename or not data_b64:
        raise ValidationError("Missing required fields: filename, dataBase64")

    # Keep only the base name so uploads can't escape the flyer directory
    safe_name = Path(filename.replace("\\", "/")).name
    if not safe_name.lower().endswith(FLYER_EXTENSIONS):
        raise ValidationError("Flyer must be an image file (.png, .jpg, .jpeg, .webp, .gif)")

    try:
        data = base64.b64decode(data_b64, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("dataBase64 is not valid base64") from None

    files.flyers.mkdir(parents=True, exist_ok=True)
    (files.flyers / safe_name).write_bytes(data)
    logger.info("Saved flyer %s (%d bytes)", safe_name, len(data))
    return f"/flyers/{safe_name}"
