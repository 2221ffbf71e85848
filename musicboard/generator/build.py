import logging
import shutil
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

import musicboard.config as cfg_module
import musicboard.store as store
from musicboard.dates import format_date_label, today_iso
from musicboard.models import (
    GENRES,
    DateGroup,
    Event,
    FilterState,
    Partner,
    Selection,
    Venue,
    load_events,
    load_partners,
    load_venues,
)
from musicboard.pipeline import build_view, slugify

TEMPLATES_DIR = Path(__file__).parent / "templates"

logger = logging.getLogger("musicboard.generator")


def empty_message(state: FilterState) -> str:
    """Text shown when a view has no groups."""
    return "No results." if state.search.strip() else "No events yet."


def _event_to_card(event: Event, venues: dict[str, Venue]) -> dict:
    """Resolve display fields for one event card."""
    venue = venues.get(event.venue_id) if event.venue_id else None
    return {
        "title": event.title,
        "time": event.time or "Time TBA",
        "venue_name": venue.name if venue and venue.name else "Venue TBA",
        "href": event.link or (venue.link if venue else None),
        "flyer": event.flyer,
        "genres": event.genres,
    }


def _groups_to_context(groups: list[DateGroup], venues: dict[str, Venue]) -> list[dict]:
    return [
        {
            "date": g.date,
            "label": format_date_label(g.date),
            "events": [_event_to_card(e, venues) for e in g.events],
        }
        for g in groups
    ]


def build_site(cfg: dict, output_dir: Path, today: Optional[str] = None) -> None:
    site_cfg = cfg_module.get_site(cfg)
    files = cfg_module.get_data_files(cfg)
    today = today or today_iso()

    events = load_events(store.read_json_array(files.events))
    venue_list = load_venues(store.read_json_array(files.venues))
    partner_list = load_partners(store.read_json_array(files.partners))
    venues = {v.id: v for v in venue_list}

    output_dir.mkdir(parents=True, exist_ok=True)

    # Flyers are referenced as /flyers/<name>
    flyers_dst = output_dir / "flyers"
    if files.flyers.exists():
        if flyers_dst.exists():
            shutil.rmtree(flyers_dst)
        shutil.copytree(files.flyers, flyers_dst)

    env = Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=select_autoescape(["html"]),
    )
    env.globals["site_title"] = site_cfg.get("title", "Music Calendar")
    env.globals["site_city"] = site_cfg.get("city", "")
    env.globals["contact_email"] = site_cfg.get("contact_email", "")
    env.globals["generated_date"] = today
    env.globals["genres"] = GENRES

    def render_view(dest: Path, state: FilterState, heading: str, filter_label: Optional[str], root: str):
        groups = build_view(events, state, today)
        _render(env, "index.html", dest, {
            "groups": _groups_to_context(groups, venues),
            "heading": heading,
            "filter_label": filter_label,
            "empty_message": empty_message(state),
            "root": root,
        })

    render_view(output_dir / "index.html", FilterState(), "Upcoming", None, "")

    for kind, items in (("venue", venue_list), ("partner", partner_list)):
        slugs = _page_slugs(items, kind)
        _render(env, "directory.html", output_dir / f"{kind}s.html", {
            "heading": f"{kind.title()}s",
            "kind": kind,
            "items": [_directory_entry(item, slug) for item, slug in zip(items, slugs)],
            "root": "",
        })
        for item, slug in zip(items, slugs):
            if not slug:
                continue
            dest = output_dir / f"{kind}s" / f"{slug}.html"
            dest.parent.mkdir(parents=True, exist_ok=True)
            state = FilterState(selection=Selection(kind=kind, id=item.id))
            render_view(dest, state, "Upcoming", item.name or kind.title(), "../")

    _render(env, "about.html", output_dir / "about.html", {"root": ""})


def _page_slugs(items: list[Venue] | list[Partner], kind: str) -> list[str]:
    """File-name slug per item. Colliding slugs get a numeric suffix."""
    seen: set[str] = set()
    slugs = []
    for item in items:
        base = slugify(item.id)
        slug = base
        n = 2
        while slug and slug in seen:
            slug = f"{base}-{n}"
            n += 1
        if slug != base:
            logger.warning("%s id %r collides with another page; writing %s.html", kind, item.id, slug)
        seen.add(slug)
        slugs.append(slug)
    return slugs


def _directory_entry(item: Venue | Partner, slug: str) -> dict:
    return {"name": item.name, "slug": slug, "link": item.link}


def _render(env: Environment, template_name: str, dest: Path, context: dict) -> None:
    template = env.get_template(template_name)
    dest.write_text(template.render(**context), encoding="utf-8")
