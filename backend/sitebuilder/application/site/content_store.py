# sitebuilder/application/site/content_store.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sitebuilder.domain.exceptions import (
    LoadFailure,
    LoadPartialFailure,
    SiteError,
    TenantInactive,
    TenantNotFound,
)
from sitebuilder.domain.sections import build_visibility_map
from sitebuilder.domain.tenancy import TenantSelector
from sitebuilder.domain.theme import DEFAULT_THEME, ThemeVariables
from sitebuilder.storage import RowStore

logger = logging.getLogger(__name__)

WEBSITES = "websites"
WEBSITE_SECTIONS = "website_sections"
THEME_PRESETS = "theme_presets"


@dataclass(frozen=True)
class SiteContent:
    tenant: Dict[str, Any]
    section_visibility: Dict[str, bool] = field(default_factory=dict)
    theme: ThemeVariables = DEFAULT_THEME


class TenantContentStore:
    """
    Per-session view of one tenant's site data.

    Responsibilities:
    - resolve a TenantSelector to a website
    - load the website record and its section rows concurrently
    - derive the section visibility map and theme variables
    - keep `loading` true until all of the above is done
    - count refreshes so derived data can be re-fetched

    This store is the only writer of tenant, visibility and theme.
    """

    def __init__(self, rows: RowStore):
        self.rows = rows

        self.selector: TenantSelector = TenantSelector.none()
        self.tenant: Optional[Dict[str, Any]] = None
        self.section_visibility: Dict[str, bool] = {}
        self.theme: ThemeVariables = DEFAULT_THEME

        self.loading = True
        self.failure: Optional[SiteError] = None
        self.content_version = 0
        # Website id whose editor is viewing; that site loads even when inactive
        self.preview_for: Optional[str] = None

        self._load_seq = 0

    @property
    def tenant_id(self) -> Optional[str]:
        return self.tenant["id"] if self.tenant else None

    # -------------------------------------------------
    # Public operations
    # -------------------------------------------------

    async def load(
        self,
        selector: TenantSelector,
        *,
        preview_for: Optional[str] = None,
    ) -> SiteContent:
        """
        Load everything a page needs for `selector`.

        An inactive website loads only when its id equals `preview_for`.

        Raises:
        - TenantNotFound: selector names no website
        - TenantInactive: website exists but is deactivated
        - LoadFailure / LoadPartialFailure: the store could not be read
        """
        self._load_seq += 1
        seq = self._load_seq

        if selector != self.selector:
            # Never let the previous tenant's data answer for the new one
            self.tenant = None
            self.section_visibility = {}
            self.theme = DEFAULT_THEME

        self.selector = selector
        self.preview_for = preview_for
        self.loading = True

        try:
            content = await self._fetch(selector, preview_for=preview_for)
        except SiteError as exc:
            if seq == self._load_seq:
                self.failure = exc
                self.loading = False
            raise

        if seq != self._load_seq:
            logger.debug("Discarding superseded load of %s", selector)
            return content

        self.tenant = content.tenant
        self.section_visibility = content.section_visibility
        self.theme = content.theme
        self.failure = None
        self.loading = False

        return content

    async def refresh(self) -> Optional[SiteContent]:
        """Bump the content version and reload the current tenant once."""
        self.content_version += 1

        if self.selector.is_none:
            return None

        return await self.load(self.selector, preview_for=self.preview_for)

    async def change_tenant(
        self,
        selector: TenantSelector,
        *,
        preview_for: Optional[str] = None,
    ) -> SiteContent:
        return await self.load(selector, preview_for=preview_for)

    # -------------------------------------------------
    # Loading steps
    # -------------------------------------------------

    async def _fetch(self, selector: TenantSelector, *, preview_for: Optional[str]) -> SiteContent:
        # 1️⃣ Selector -> website id
        tenant_id = await self._resolve_tenant_id(selector, preview_for=preview_for)

        # 2️⃣ Record and sections are independent; fetch them together
        tenant_result, sections_result = await asyncio.gather(
            self.rows.read_one_by_id(WEBSITES, tenant_id),
            self.rows.read_many_by_parent_id(
                WEBSITE_SECTIONS, tenant_id, order_by="display_order"
            ),
            return_exceptions=True,
        )

        failed = []
        for name, result in ((WEBSITES, tenant_result), (WEBSITE_SECTIONS, sections_result)):
            if isinstance(result, BaseException):
                logger.error("Error loading %s for website %s: %s", name, tenant_id, result)
                failed.append(name)

        if failed:
            cause = tenant_result if isinstance(tenant_result, BaseException) else sections_result
            raise LoadPartialFailure(tenant_id, failed) from cause

        if tenant_result is None:
            # Deleted between lookup and fetch
            raise TenantNotFound(selector)

        # 3️⃣ Derived state
        visibility = build_visibility_map(sections_result)
        theme = await self._resolve_theme(tenant_result)

        return SiteContent(
            tenant=tenant_result,
            section_visibility=visibility,
            theme=theme,
        )

    async def _resolve_tenant_id(self, selector: TenantSelector, *, preview_for: Optional[str]) -> str:
        if selector.is_none:
            raise TenantNotFound(selector)

        try:
            website = await self.rows.find_one(WEBSITES, subdomain=selector.value)
            if website is None and selector.kind == TenantSelector.QUERY_TOKEN:
                website = await self.rows.read_one_by_id(WEBSITES, selector.value)
        except Exception as exc:
            logger.error("Error looking up website for %s: %s", selector, exc)
            raise LoadFailure(f"Could not look up site {selector}") from exc

        if website is None:
            logger.info("No website for %s", selector)
            raise TenantNotFound(selector)

        if not website.get("is_active") and website["id"] != preview_for:
            logger.info("Website %s is inactive", website["id"])
            raise TenantInactive(selector, website["id"])

        return website["id"]

    async def _resolve_theme(self, tenant: Dict[str, Any]) -> ThemeVariables:
        preset_id = tenant.get("theme_preset_id")
        if not preset_id:
            return DEFAULT_THEME

        try:
            preset = await self.rows.read_one_by_id(THEME_PRESETS, preset_id)
        except Exception as exc:
            logger.warning("Theme preset %s unavailable, using defaults: %s", preset_id, exc)
            return DEFAULT_THEME

        if preset is None:
            logger.warning("Theme preset %s not found, using defaults", preset_id)
            return DEFAULT_THEME

        return ThemeVariables.from_preset(preset.get("colors"))
