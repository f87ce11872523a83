"""Helpers for inspecting resolved field trees and query names."""

from dataclasses import dataclass, field
from typing import Any

from .ir import ResolvedField


@dataclass
class FieldSummary:
    """Counts and a flat description of a row type's top-level fields."""
    total_fields: int
    scalar_fields: int
    object_fields: int
    fields: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalFields": self.total_fields,
            "scalarFields": self.scalar_fields,
            "objectFields": self.object_fields,
            "fields": self.fields,
        }


def format_type(resolved: ResolvedField) -> str:
    """Render a field type in SDL-like notation: [Invoice]!"""
    type_str = resolved.type
    if resolved.is_array:
        type_str = f"[{type_str}]"
    if resolved.is_required:
        type_str = f"{type_str}!"
    return type_str


def summarize_fields(fields: list[ResolvedField], scalars_only: bool = False) -> FieldSummary:
    """Summarize top-level fields; counts always cover every field."""
    scalar_count = sum(1 for f in fields if f.is_scalar)
    listed = [f for f in fields if f.is_scalar] if scalars_only else fields
    return FieldSummary(
        total_fields=len(fields),
        scalar_fields=scalar_count,
        object_fields=len(fields) - scalar_count,
        fields=[
            {
                "name": f.name,
                "type": f.type,
                "isRequired": f.is_required,
                "isArray": f.is_array,
                "hasSubfields": f.has_subfields,
            }
            for f in listed
        ],
    )


def search_queries(queries: list[str], pattern: str) -> list[str]:
    """Case-insensitive substring search, keeping the original order."""
    needle = pattern.lower()
    return [name for name in queries if needle in name.lower()]
