# sitebuilder/domain/tenancy/resolver.py
"""
Tenant resolution from ambient request signals.

Everything here is pure and synchronous: the very first render must already
know whether it is serving a tenant site, so no lookup happens at this stage.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

RESERVED_LABELS = frozenset({"www", "admin"})
LOCAL_HOSTNAMES = frozenset({"localhost", "0.0.0.0", "::1"})


@dataclass(frozen=True)
class ResolverConfig:
    apex_domain: str
    hosting_denylist: Tuple[str, ...] = ()
    query_keys: Tuple[str, ...] = ("site", "website")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "ResolverConfig":
        """Build from a Flask config (or any mapping with the SITE_* keys)."""
        return cls(
            apex_domain=(config.get("SITE_APEX_DOMAIN") or "").strip(".").lower(),
            hosting_denylist=tuple(
                suffix.strip(".").lower()
                for suffix in config.get("SITE_HOSTING_DENYLIST") or ()
            ),
            query_keys=tuple(config.get("SITE_QUERY_KEYS") or ("site", "website")),
        )


@dataclass(frozen=True)
class TenantSelector:
    """
    One of: none, by_query_token(token), by_subdomain(label).
    """
    kind: str
    value: Optional[str] = None

    NONE = "none"
    QUERY_TOKEN = "query_token"
    SUBDOMAIN = "subdomain"

    @classmethod
    def none(cls) -> "TenantSelector":
        return cls(cls.NONE)

    @classmethod
    def by_query_token(cls, token: str) -> "TenantSelector":
        return cls(cls.QUERY_TOKEN, token)

    @classmethod
    def by_subdomain(cls, label: str) -> "TenantSelector":
        return cls(cls.SUBDOMAIN, label)

    @property
    def is_none(self) -> bool:
        return self.kind == self.NONE

    def __str__(self) -> str:
        if self.is_none:
            return "none"
        return f"{self.kind}:{self.value}"


def normalize_hostname(hostname: Optional[str]) -> str:
    """Lowercase, strip the port and any trailing dot."""
    host = (hostname or "").strip().lower()

    if host.startswith("["):
        # [::1]:5000
        host = host[1:].split("]", 1)[0]
    elif host.count(":") == 1:
        host = host.split(":", 1)[0]

    return host.rstrip(".")


def is_local_hostname(host: str) -> bool:
    return (
        host in LOCAL_HOSTNAMES
        or host.endswith(".localhost")
        or host.startswith("127.")
    )


def _under_suffix(host: str, suffix: str) -> bool:
    return host == suffix or host.endswith("." + suffix)


def subdomain_label(host: str, config: ResolverConfig) -> Optional[str]:
    """
    Return the tenant label of `host`, or None if it is not a tenant subdomain
    of the platform's apex domain.
    """
    apex = config.apex_domain
    if not apex or not host:
        return None

    if any(_under_suffix(host, suffix) for suffix in config.hosting_denylist):
        return None

    labels = host.split(".")
    apex_labels = apex.split(".")

    # Exactly one label in front of the apex, never fewer than three overall
    if len(labels) < 3 or len(labels) != len(apex_labels) + 1:
        return None
    if labels[1:] != apex_labels:
        return None

    label = labels[0]
    if not label or label in RESERVED_LABELS:
        return None

    return label


def resolve_tenant(
    hostname: Optional[str],
    query_params: Optional[Mapping[str, str]],
    config: ResolverConfig,
) -> TenantSelector:
    """
    Decide which tenant a request targets.

    Priority:
    1. explicit query token (any accepted alias) wins everywhere
    2. local development hosts never select a tenant
    3. a single label in front of the apex domain selects that subdomain
    4. anything else selects nothing
    """
    for key in config.query_keys:
        token = (query_params or {}).get(key)
        if token and token.strip():
            return TenantSelector.by_query_token(token.strip())

    host = normalize_hostname(hostname)
    if is_local_hostname(host):
        return TenantSelector.none()

    label = subdomain_label(host, config)
    if label:
        return TenantSelector.by_subdomain(label)

    return TenantSelector.none()


# -------------------------------------------------
# Routing helpers
# -------------------------------------------------

def current_mode(path: Optional[str]) -> str:
    """Return "admin", "editor" or "public" for a request path."""
    path = path or "/"
    if path.startswith("/admin"):
        return "admin"
    if path.startswith("/edit"):
        return "editor"
    return "public"


def build_site_url(
    subdomain: str,
    config: ResolverConfig,
    *,
    path: str = "",
    mode: str = "public",
    local_port: Optional[int] = None,
) -> str:
    """
    Build the public or editor URL of a site.

    Local development addresses sites by query token since there is no
    wildcard DNS; production uses the tenant subdomain.
    """
    if mode not in ("public", "editor"):
        raise ValueError(f"Invalid site mode: {mode}")

    edit_path = "/edit" if mode == "editor" else ""

    if local_port is not None:
        return f"http://localhost:{local_port}{edit_path}{path}?site={subdomain}"

    return f"https://{subdomain}.{config.apex_domain}{edit_path}{path}"
