from __future__ import annotations

from typing import Dict, Iterable, List, Optional

# Externally maintained list of toggleable page regions, in page order.
SECTION_DEFINITIONS: List[Dict[str, str]] = [
    {"name": "hero", "label": "Hero Section"},
    {"name": "about", "label": "About Section"},
    {"name": "whyChooseUs", "label": "Why Choose Us"},
    {"name": "team", "label": "Team Section"},
    {"name": "featuredProducts", "label": "Featured Products"},
    {"name": "menu", "label": "Menu Section"},
    {"name": "reservation", "label": "Reservation"},
    {"name": "testimonials", "label": "Testimonials"},
    {"name": "specialOffers", "label": "Special Offers"},
    {"name": "faq", "label": "FAQ Section"},
    {"name": "contact", "label": "Contact Section"},
    {"name": "instagramFeed", "label": "Instagram Feed"},
]

SECTION_NAMES = [s["name"] for s in SECTION_DEFINITIONS]

# Off for freshly provisioned sites unless explicitly requested
DISABLED_BY_DEFAULT = frozenset({"specialOffers"})


def build_visibility_map(rows: Iterable[dict]) -> Dict[str, bool]:
    """
    section_name -> enabled, for every configured row.

    A null flag means enabled. Sections without a row are left out so they
    read as unknown, never as enabled.
    """
    visibility: Dict[str, bool] = {}
    for row in rows:
        enabled = row.get("is_enabled")
        visibility[row["section_name"]] = True if enabled is None else bool(enabled)
    return visibility


class SectionGate:
    """
    Tri-state render decision for a named page region.

    is_enabled() yields None (unknown), True or False. A region renders only
    on True.
    """

    def __init__(self, store):
        self.store = store

    def is_enabled(self, section_name: str) -> Optional[bool]:
        if self.store.loading or self.store.failure is not None:
            return None
        return self.store.section_visibility.get(section_name)

    def renders(self, section_name: str) -> bool:
        return self.is_enabled(section_name) is True

    def snapshot(self, names: Iterable[str] = SECTION_NAMES) -> Dict[str, Optional[bool]]:
        return {name: self.is_enabled(name) for name in names}
