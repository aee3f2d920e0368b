from .resolver import (
    ResolverConfig,
    TenantSelector,
    build_site_url,
    current_mode,
    resolve_tenant,
)
