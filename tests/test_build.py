import json

import pytest
from bs4 import BeautifulSoup

from musicboard.generator.build import build_site

TODAY = "2025-03-01"


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


@pytest.fixture
def site(tmp_path):
    data_dir = tmp_path / "data"
    flyers_dir = tmp_path / "flyers"
    _write(data_dir / "venues.json", [
        {"id": "tower", "name": "Tower Theatre", "link": "https://tower.example"},
        {"id": "strummers", "name": "Strummer's", "link": ""},
    ])
    _write(data_dir / "partners.json", [
        {"id": "Fresno Jazz Society", "name": "Fresno Jazz Society", "link": "https://jazz.example"},
    ])
    _write(data_dir / "events.json", [
        {"id": "1", "title": "Zebra", "date": "2025-03-01", "time": "7:00 PM", "venueId": "tower"},
        {"id": "2", "title": "Apple", "date": "03/01/2025", "time": "19:00", "venueId": "tower",
         "partnerIds": ["fresno-jazz-society"], "genres": ["Jazz"], "flyer": "/flyers/apple.png"},
        {"id": "3", "title": "Mystery", "date": "2025-03-04", "venueId": "gone", "link": "https://m.example"},
        {"id": "4", "title": "Old", "date": "2025-02-01", "time": "8 PM", "venueId": "tower"},
        {"id": "5", "title": "Broken", "date": "someday"},
    ])
    flyers_dir.mkdir()
    (flyers_dir / "apple.png").write_bytes(b"png")

    cfg = {
        "site": {"title": "Test Calendar", "city": "Fresno, CA", "contact_email": "shows@example.com"},
        "data": {"dir": str(data_dir), "flyers_dir": str(flyers_dir)},
    }
    out = tmp_path / "output"
    build_site(cfg, out, today=TODAY)
    return out


def _soup(path):
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


def test_index_groups_and_order(site):
    soup = _soup(site / "index.html")
    groups = soup.select("section.date-group")
    assert [g["data-date"] for g in groups] == ["2025-03-01", "2025-03-04"]
    assert groups[0].h3.get_text() == "Sat, Mar 1"
    titles = [h.get_text() for h in groups[0].select("article.event h4")]
    assert titles == ["Apple", "Zebra"]


def test_index_placeholders_and_links(site):
    soup = _soup(site / "index.html")
    mystery = soup.select("section.date-group")[1].select_one("article.event")
    assert mystery.select_one(".time").get_text() == "Time TBA"
    assert mystery.select_one(".venue").get_text() == "Venue TBA"
    assert mystery.select_one("a.link")["href"] == "https://m.example"

    apple = soup.select_one("section.date-group article.event")
    assert apple.select_one("a.link")["href"] == "https://tower.example"
    assert apple.select_one(".flyer img")["src"] == "/flyers/apple.png"


def test_past_and_undated_events_omitted(site):
    text = (site / "index.html").read_text()
    assert "Old" not in text
    assert "Broken" not in text


def test_venue_page_filters(site):
    soup = _soup(site / "venues" / "tower.html")
    titles = [h.get_text() for h in soup.select("article.event h4")]
    assert titles == ["Apple", "Zebra"]
    assert soup.select_one(".filter-label").get_text() == "Tower Theatre"


def test_empty_venue_page(site):
    soup = _soup(site / "venues" / "strummers.html")
    assert soup.select_one(".empty").get_text() == "No events yet."


def test_partner_page_uses_slug(site):
    soup = _soup(site / "partners" / "fresno-jazz-society.html")
    assert [h.get_text() for h in soup.select("article.event h4")] == ["Apple"]


def test_directory_pages(site):
    soup = _soup(site / "venues.html")
    links = [a["href"] for a in soup.select("a.filter-link")]
    assert links == ["venues/tower.html", "venues/strummers.html"]
    assert len(soup.select("a.link")) == 1

    soup = _soup(site / "partners.html")
    assert soup.select_one("a.filter-link").get_text() == "Fresno Jazz Society"


def test_about_and_flyers_copied(site):
    assert "Fresno, CA" in (site / "about.html").read_text()
    assert (site / "flyers" / "apple.png").read_bytes() == b"png"
    assert "shows@example.com" in (site / "index.html").read_text()


def test_colliding_slugs_get_unique_pages(tmp_path, caplog):
    data_dir = tmp_path / "data"
    _write(data_dir / "venues.json", [
        {"id": "Tower", "name": "Tower Upstairs"},
        {"id": "tower", "name": "Tower Downstairs"},
    ])
    _write(data_dir / "events.json", [
        {"id": "1", "title": "Up", "date": TODAY, "time": "7 PM", "venueId": "Tower"},
        {"id": "2", "title": "Down", "date": TODAY, "time": "8 PM", "venueId": "tower"},
    ])
    cfg = {"data": {"dir": str(data_dir), "flyers_dir": str(tmp_path / "no-flyers")}}
    out = tmp_path / "output"

    with caplog.at_level("WARNING", logger="musicboard.generator"):
        build_site(cfg, out, today=TODAY)

    up = _soup(out / "venues" / "tower.html")
    down = _soup(out / "venues" / "tower-2.html")
    assert [h.get_text() for h in up.select("article.event h4")] == ["Up"]
    assert [h.get_text() for h in down.select("article.event h4")] == ["Down"]

    links = [a["href"] for a in _soup(out / "venues.html").select("a.filter-link")]
    assert links == ["venues/tower.html", "venues/tower-2.html"]
    assert "tower-2" in caplog.text
