"""
Structural model.

Describes introspected structures and the mapping plans built from them.
"""

from __future__ import annotations

from .opaque_types import PRIMITIVE_ZERO_VALUES, WELL_KNOWN_OPAQUE_TYPES, OpaqueType
from .struct_nodes import (
    FieldInfo,
    MappingConfig,
    StructInfo,
    TypeKind,
    TypeRef,
    derive_target,
    validate_mapping,
)

__all__ = [
    "FieldInfo",
    "StructInfo",
    "MappingConfig",
    "TypeKind",
    "TypeRef",
    "derive_target",
    "validate_mapping",
    "OpaqueType",
    "WELL_KNOWN_OPAQUE_TYPES",
    "PRIMITIVE_ZERO_VALUES",
]
