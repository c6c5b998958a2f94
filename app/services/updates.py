from dataclasses import fields, replace
from typing import Any, Mapping, TypeVar

E = TypeVar("E")

# Owned by the repository (identity, timestamps) or by the credential flow.
PROTECTED_FIELDS: frozenset[str] = frozenset(
    {"id", "created_at", "updated_at", "password", "role_id"}
)


def merge(current: E, changes: Mapping[str, Any]) -> E:
    """
    Return a copy of *current* with the supplied *changes* applied.

    Used by the HTTP layer to turn a partial update into the complete entity
    the services expect.  ``None`` values and protected or unknown fields are
    ignored, so an omitted field keeps its stored value.
    """
    allowed = {f.name for f in fields(current)} - PROTECTED_FIELDS
    applied = {
        name: value
        for name, value in changes.items()
        if name in allowed and value is not None
    }
    return replace(current, **applied)
