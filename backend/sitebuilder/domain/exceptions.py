from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


class SiteError(Exception):
    """Base class for every tenant-site failure surfaced to callers."""


class InvariantViolation(SiteError):
    pass


# -------------------------------------------------
# Loading
# -------------------------------------------------

class TenantNotFound(SiteError):
    def __init__(self, selector=None, message: str = "No such site"):
        super().__init__(message)
        self.selector = selector


class TenantInactive(TenantNotFound):
    """
    The tenant exists but is deactivated.

    Subclasses TenantNotFound so public rendering treats both the same,
    while diagnostics can still tell them apart.
    """

    def __init__(self, selector=None, tenant_id: Optional[str] = None):
        super().__init__(selector, message="Site is deactivated")
        self.tenant_id = tenant_id


class LoadFailure(SiteError):
    """The backing store could not be read. Never a "not found"."""


class LoadPartialFailure(LoadFailure):
    """One of the concurrent tenant fetches failed; nothing was published."""

    def __init__(self, tenant_id: str, failed: List[str]):
        super().__init__(
            f"Loading site {tenant_id} failed: {', '.join(failed)}"
        )
        self.tenant_id = tenant_id
        self.failed = failed


# -------------------------------------------------
# Saving
# -------------------------------------------------

class TenantUnresolved(SiteError):
    def __init__(self, message: str = "No website ID found"):
        super().__init__(message)


@dataclass(frozen=True)
class FieldFailure:
    table: str
    field: str
    record_id: Optional[str]
    message: str

    def describe(self) -> str:
        return f"{self.table}.{self.field}: {self.message}"

    def to_dict(self):
        return {
            "table": self.table,
            "field": self.field,
            "record_id": self.record_id,
            "message": self.message,
        }


class SaveFieldFailure(SiteError):
    """
    One or more fields in a flush failed to commit.

    Sibling fields of the same flush may already be committed; callers
    must be prepared for partial success.
    """

    def __init__(self, failures: List[FieldFailure]):
        self.failures = list(failures)
        super().__init__(
            "Some changes failed to save: "
            + "; ".join(f.describe() for f in self.failures)
        )

    @classmethod
    def merge(cls, errors: List["SaveFieldFailure"]) -> "SaveFieldFailure":
        seen = {}
        for error in errors:
            for failure in error.failures:
                seen[(failure.table, failure.field, failure.record_id)] = failure
        return cls(list(seen.values()))
