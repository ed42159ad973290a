"""
Name-based correspondence between source and target fields.
"""

from __future__ import annotations

from ..model import FieldInfo, StructInfo


class FieldMatcher:
    """Matches fields purely by name; no fuzzy or type-aware matching."""

    def match_fields(self, source: StructInfo, target: StructInfo) -> dict[str, str]:
        """Return an identity entry for every source field with a same-name target field."""
        target_names = set(target.field_names)
        return {name: name for name in source.field_names if name in target_names}

    def needs_recursive_mapping(self, source_field: FieldInfo, target_field: FieldInfo) -> bool:
        # both sides are records: convert through the nested type's methods
        return source_field.is_nested and target_field.is_nested
