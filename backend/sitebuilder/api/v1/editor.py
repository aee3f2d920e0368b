# sitebuilder/api/v1/editor.py
import asyncio

from flask import current_app, g, jsonify, request
from flask_jwt_extended import jwt_required

from sitebuilder.application.site import EditSession
from sitebuilder.domain.exceptions import InvariantViolation, SaveFieldFailure
from sitebuilder.domain.invariants.edit import assert_edit_target
from sitebuilder.models import editable_columns
from sitebuilder.utils.decorators import roles_required, tenant_required
from . import v1_bp


def _validate_edits(edits):
    if not isinstance(edits, list) or not edits:
        raise InvariantViolation("edits must be a non-empty list")

    editable = editable_columns()
    for edit in edits:
        if not isinstance(edit, dict) or "value" not in edit:
            raise InvariantViolation("Each edit needs table, field and value")
        assert_edit_target(
            edit.get("table"),
            edit.get("field"),
            edit.get("record_id"),
            editable=editable,
        )


@v1_bp.route("/editor/fields", methods=["PATCH"])
@jwt_required()
@tenant_required
@roles_required("editor", "admin")
async def save_fields():
    """
    Commit inline edits for the current site.

    All edits of one request go through a single EditSession, so a lone edit
    is written immediately and a burst is coalesced into one debounced flush.
    Sessions do not outlive the request: edits sent in separate requests are
    never merged with each other.
    """
    data = request.get_json(silent=True) or {}
    edits = data.get("edits")
    _validate_edits(edits)

    store = g.site_store
    session = EditSession(
        store.rows,
        lambda: store.tenant_id,
        debounce=current_app.config["EDITOR_SAVE_DEBOUNCE_MS"] / 1000,
        editing=True,
    )

    try:
        results = await asyncio.gather(
            *(
                session.save(e["table"], e["field"], e["value"], e.get("record_id"))
                for e in edits
            ),
            return_exceptions=True,
        )
    finally:
        await session.aclose()

    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, SaveFieldFailure):
            raise result

    if session.has_changes:
        # Consumers re-fetch on a new content_version
        await store.refresh()

    failures = [r for r in results if isinstance(r, SaveFieldFailure)]
    if failures:
        raise SaveFieldFailure.merge(failures)

    current_app.logger.info(f"Saved {len(edits)} field(s) for website {store.tenant_id}")

    return jsonify({
        "saved": len(edits),
        "has_changes": session.has_changes,
        "content_version": store.content_version,
    }), 200
