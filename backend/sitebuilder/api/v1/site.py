# sitebuilder/api/v1/site.py
from flask import g, jsonify

from sitebuilder.domain.sections import SectionGate
from sitebuilder.models import CONTENT_SECTIONS, editable_columns
from sitebuilder.normalizers.content import normalize_content_row
from sitebuilder.normalizers.site import normalize_site
from . import v1_bp


@v1_bp.route("/site", methods=["GET"])
def get_site():
    return jsonify(normalize_site(g.site_store))


@v1_bp.route("/site/sections/<section_name>", methods=["GET"])
def get_section(section_name):
    gate = SectionGate(g.site_store)
    return jsonify({
        "section": section_name,
        "enabled": gate.is_enabled(section_name),
    })


@v1_bp.route("/site/content/<table>", methods=["GET"])
async def get_content(table):
    store = g.site_store

    section = CONTENT_SECTIONS.get(table)
    if section is None:
        return jsonify({"error": "Unknown content table"}), 404

    # Disabled and unconfigured sections both render nothing
    if not SectionGate(store).renders(section):
        return jsonify({"error": "Section disabled", "section": section}), 404

    order_by = "display_order" if "display_order" in editable_columns()[table] else None
    rows = await store.rows.read_many_by_parent_id(table, store.tenant_id, order_by=order_by)

    return jsonify({
        "section": section,
        "items": [normalize_content_row(row) for row in rows],
        "content_version": store.content_version,
    })
