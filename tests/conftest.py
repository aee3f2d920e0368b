"""Pytest configuration and fixtures."""

import asyncio
import uuid

import pytest
from flask_jwt_extended import create_access_token

from sitebuilder import create_app
from sitebuilder.extensions import db
from sitebuilder.models import (
    FaqItem,
    HeroContent,
    MenuItem,
    Testimonial,
    ThemePreset,
    Website,
    WebsiteSection,
)


class FakeRowStore:
    """
    In-memory async RowStore.

    - `latency` delays every call, so concurrency is observable
    - `fail(op, table, field=None)` makes matching calls raise
    - `writes` logs (loop time, table, values, record_id, parent_id)
    - `calls` logs (op, table)
    """

    def __init__(self, tables=None, *, latency=0.0):
        self.tables = {name: [dict(row) for row in rows] for name, rows in (tables or {}).items()}
        self.latency = latency
        self.writes = []
        self.calls = []
        self._failures = {}
        self.in_flight = 0
        self.max_in_flight = 0

    def fail(self, op, table, field=None, exc=None):
        self._failures[(op, table, field)] = exc or RuntimeError(f"{op} {table} failed")

    def count(self, op, table):
        return sum(1 for call in self.calls if call == (op, table))

    async def _call(self, op, table, field=None):
        self.calls.append((op, table))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency)
        finally:
            self.in_flight -= 1
        exc = self._failures.get((op, table, field)) or self._failures.get((op, table, None))
        if exc is not None:
            raise exc

    def _rows(self, table):
        return self.tables.setdefault(table, [])

    async def read_one_by_id(self, table, record_id):
        await self._call("read_one_by_id", table)
        for row in self._rows(table):
            if row["id"] == record_id:
                return dict(row)
        return None

    async def find_one(self, table, **criteria):
        await self._call("find_one", table)
        for row in self._rows(table):
            if all(row.get(key) == value for key, value in criteria.items()):
                return dict(row)
        return None

    async def read_many_by_parent_id(self, table, parent_id, *, parent_key="website_id", order_by=None):
        await self._call("read_many_by_parent_id", table)
        rows = [dict(row) for row in self._rows(table) if row.get(parent_key) == parent_id]
        if order_by:
            rows.sort(key=lambda row: row.get(order_by) or 0)
        return rows

    async def update_fields(self, table, values, *, record_id=None, parent_id=None, parent_key="website_id"):
        field = next(iter(values))
        await self._call("update_fields", table, field)
        self.writes.append(
            (asyncio.get_running_loop().time(), table, dict(values), record_id, parent_id)
        )
        touched = 0
        for row in self._rows(table):
            if record_id is not None and row["id"] != record_id:
                continue
            if parent_id is not None and row.get(parent_key) != parent_id:
                continue
            row.update(values)
            touched += 1
        return touched

    async def insert_one(self, table, values):
        await self._call("insert_one", table)
        row = {"id": str(uuid.uuid4()), **values}
        self._rows(table).append(row)
        return dict(row)


SWEET_ID = "site-sweet"
GOLDEN_ID = "site-golden"
CLOSED_ID = "site-closed"
PRESET_ID = "preset-berry"


def seed_tables():
    return {
        "websites": [
            {"id": SWEET_ID, "subdomain": "sweetdelights", "site_title": "Sweet Delights",
             "is_active": True, "theme_preset_id": PRESET_ID},
            {"id": GOLDEN_ID, "subdomain": "golden-crumb", "site_title": "Golden Crumb",
             "is_active": True, "theme_preset_id": None},
            {"id": CLOSED_ID, "subdomain": "closed", "site_title": "Closed Bakery",
             "is_active": False, "theme_preset_id": None},
        ],
        "website_sections": [
            {"id": "s1", "website_id": SWEET_ID, "section_name": "hero", "is_enabled": True, "display_order": 0},
            {"id": "s2", "website_id": SWEET_ID, "section_name": "menu", "is_enabled": None, "display_order": 1},
            {"id": "s3", "website_id": SWEET_ID, "section_name": "specialOffers", "is_enabled": False, "display_order": 2},
            {"id": "s4", "website_id": GOLDEN_ID, "section_name": "hero", "is_enabled": False, "display_order": 0},
        ],
        "theme_presets": [
            {"id": PRESET_ID, "name": "Berry", "colors": {"primary": "#7B1E3A", "cream": "#FCEFF3"}},
        ],
        "hero_content": [
            {"id": "hero-sweet", "website_id": SWEET_ID, "headline": "Fresh every morning", "subheadline": None},
            {"id": "hero-golden", "website_id": GOLDEN_ID, "headline": "Golden", "subheadline": None},
        ],
        "menu_items": [
            {"id": "m1", "website_id": SWEET_ID, "name": "Croissant", "price": "$3", "display_order": 1},
            {"id": "m2", "website_id": SWEET_ID, "name": "Baguette", "price": "$4", "display_order": 2},
            {"id": "m3", "website_id": GOLDEN_ID, "name": "Rye", "price": "$5", "display_order": 1},
        ],
    }


@pytest.fixture
def rows():
    return FakeRowStore(seed_tables())


@pytest.fixture
def slow_rows():
    return FakeRowStore(seed_tables(), latency=0.02)


# -------------------------------------------------
# Flask application
# -------------------------------------------------

@pytest.fixture
def app(tmp_path):
    app = create_app(
        "testing",
        {"SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'site.db'}"},
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seeded(app):
    """Two active sites, one inactive site, one preset. Returns ids by name."""
    preset = ThemePreset(name="Berry", colors={"primary": "#7B1E3A", "cream": "#FCEFF3"})
    db.session.add(preset)
    db.session.flush()

    sweet = Website(subdomain="sweetdelights", site_title="Sweet Delights", theme_preset_id=preset.id)
    golden = Website(subdomain="golden-crumb", site_title="Golden Crumb")
    closed = Website(subdomain="closed", site_title="Closed Bakery", is_active=False)
    db.session.add_all([sweet, golden, closed])
    db.session.flush()

    db.session.add_all([
        WebsiteSection(website_id=sweet.id, section_name="hero", is_enabled=True, display_order=0),
        WebsiteSection(website_id=sweet.id, section_name="menu", is_enabled=None, display_order=1),
        WebsiteSection(website_id=sweet.id, section_name="testimonials", is_enabled=False, display_order=2),
        WebsiteSection(website_id=sweet.id, section_name="faq", is_enabled=True, display_order=3),
        HeroContent(website_id=sweet.id, headline="Fresh every morning"),
        HeroContent(website_id=golden.id, headline="Golden"),
        MenuItem(website_id=sweet.id, name="Baguette", price="$4", display_order=2),
        MenuItem(website_id=sweet.id, name="Croissant", price="$3", display_order=1),
        MenuItem(website_id=golden.id, name="Rye", price="$5", display_order=1),
        Testimonial(website_id=sweet.id, author_name="Ana", quote="Best bread", display_order=1),
        FaqItem(website_id=sweet.id, question="Open Sundays?", answer="Yes", display_order=1),
    ])
    db.session.commit()

    return {
        "sweet": sweet.id,
        "golden": golden.id,
        "closed": closed.id,
        "preset": preset.id,
    }


@pytest.fixture
def token_for(app):
    def make(website_id, role="editor"):
        token = create_access_token(
            identity="user-1",
            additional_claims={"tenant_id": website_id, "role": role},
        )
        return {"Authorization": f"Bearer {token}"}
    return make
