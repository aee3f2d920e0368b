# sitebuilder/normalizers/site.py
from __future__ import annotations

from typing import Any, Dict

from sitebuilder.domain.sections import SectionGate
from .content import serialize_value


def normalize_tenant(tenant: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": tenant["id"],
        "subdomain": tenant["subdomain"],
        "site_title": tenant["site_title"],
        "site_description": tenant.get("site_description"),
        "logo_url": tenant.get("logo_url"),
        "is_active": bool(tenant.get("is_active")),
        "created_at": serialize_value(tenant.get("created_at")),
    }


def normalize_site(store) -> Dict[str, Any]:
    """
    Everything a page needs to render its shell.

    Notes:
    - sections are tri-state: true, false, or null for unknown
    - theme is flattened to CSS custom properties
    """
    return {
        "tenant": normalize_tenant(store.tenant),
        "theme": store.theme.as_css_variables(),
        "sections": SectionGate(store).snapshot(),
        "content_version": store.content_version,
    }
