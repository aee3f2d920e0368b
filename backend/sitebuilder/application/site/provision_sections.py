import logging
from typing import Dict, Iterable, List, Optional

from sitebuilder.domain.sections import DISABLED_BY_DEFAULT, SECTION_DEFINITIONS
from sitebuilder.storage import RowStore

from .content_store import WEBSITE_SECTIONS

logger = logging.getLogger(__name__)


async def provision_sections(
    rows: RowStore,
    *,
    website_id: str,
    enabled_sections: Optional[Iterable[str]] = None,
) -> List[Dict]:
    """
    Create the section rows a website is missing.

    Responsibilities:
    - one row per known section, existing rows left untouched
    - new rows ordered after the existing ones, in definition order
    - without an explicit list, everything but the default-off sections is enabled

    Returns the inserted rows.
    """
    enabled = set(enabled_sections) if enabled_sections is not None else None

    existing = await rows.read_many_by_parent_id(WEBSITE_SECTIONS, website_id)
    existing_names = {row["section_name"] for row in existing}

    missing = [d["name"] for d in SECTION_DEFINITIONS if d["name"] not in existing_names]

    inserted = []
    for offset, name in enumerate(missing):
        if enabled is None:
            is_enabled = name not in DISABLED_BY_DEFAULT
        else:
            is_enabled = name in enabled

        row = await rows.insert_one(
            WEBSITE_SECTIONS,
            {
                "website_id": website_id,
                "section_name": name,
                "is_enabled": is_enabled,
                "display_order": len(existing) + offset,
                "custom_config": {},
            },
        )
        inserted.append(row)

    if inserted:
        logger.info("Provisioned %d section(s) for website %s", len(inserted), website_id)

    return inserted
