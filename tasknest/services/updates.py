"""
Allow-listed partial updates shared by every PUT/PATCH endpoint.
"""
from typing import Any, Mapping

from sqlalchemy.orm import InstrumentedAttribute

from tasknest.core.exceptions import BadRequestError


def apply_changes(
    instance: Any,
    changes: Mapping[str, Any],
    columns: Mapping[str, InstrumentedAttribute],
) -> dict[str, Any]:
    """Copy ``changes`` onto ``instance`` through the ``columns`` allow-list.

    Keys are external field names; the attribute written is always the one
    the allow-list maps it to, never the raw key. An explicit null is only
    accepted for nullable columns.
    """
    unknown = sorted(set(changes) - set(columns))
    if unknown:
        raise BadRequestError(f"Unknown fields: {', '.join(unknown)}")
    if not changes:
        raise BadRequestError("No fields to update")
    for field, value in changes.items():
        if value is None and not columns[field].property.columns[0].nullable:
            raise BadRequestError(f"{field} cannot be null")

    applied = {}
    for field, value in changes.items():
        attribute = columns[field].key
        setattr(instance, attribute, value)
        applied[attribute] = value
    return applied
