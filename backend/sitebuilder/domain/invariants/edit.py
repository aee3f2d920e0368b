from typing import Any, Iterable, Mapping, Optional

from ..exceptions import InvariantViolation

PROTECTED_FIELDS = frozenset({"id", "website_id", "created_at", "updated_at"})


def assert_edit_target(
    table: Any,
    field: Any,
    record_id: Optional[Any],
    *,
    editable: Mapping[str, Iterable[str]],
) -> None:
    if not isinstance(table, str) or table not in editable:
        raise InvariantViolation(f"Table is not editable: {table}")

    if not isinstance(field, str) or field in PROTECTED_FIELDS:
        raise InvariantViolation(f"Field is not editable: {table}.{field}")

    if field not in set(editable[table]):
        raise InvariantViolation(f"Unknown field: {table}.{field}")

    if record_id is not None and not isinstance(record_id, str):
        raise InvariantViolation("record_id must be a string")
