from flask import request, g, current_app
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from sitebuilder.application.site import TenantContentStore
from sitebuilder.domain.tenancy import ResolverConfig, resolve_tenant
from sitebuilder.extensions import db
from sitebuilder.storage import SqlAlchemyRowStore

# No tenant context needed
PUBLIC_ENDPOINTS = {"v1.health_check", "openapi_site", "static"}
PUBLIC_BLUEPRINTS = {"swagger_ui"}

EDITOR_ROLES = {"editor", "admin"}


def _preview_tenant_id():
    """Website id an editor/admin token may preview while it is inactive."""
    if not verify_jwt_in_request(optional=True):
        return None
    claims = get_jwt()
    if claims.get("role") not in EDITOR_ROLES:
        return None
    return claims.get("tenant_id")


def tenant_middleware(app):
    @app.before_request
    async def load_tenant():
        if request.endpoint is None:
            return  # unmatched route, let Flask 404
        if request.endpoint in PUBLIC_ENDPOINTS or request.blueprint in PUBLIC_BLUEPRINTS:
            return

        selector = resolve_tenant(
            request.host,
            request.args,
            ResolverConfig.from_mapping(current_app.config),
        )

        store = TenantContentStore(SqlAlchemyRowStore(db.engine, db.metadata))
        g.site_store = store

        # Raises TenantNotFound / TenantInactive / LoadFailure -> errors.py
        await store.load(selector, preview_for=_preview_tenant_id())

        # Attach tenant to global context
        g.current_tenant = store.tenant
