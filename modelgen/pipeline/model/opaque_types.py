"""
Well-known opaque library types.

These are treated like primitives: copied as-is and never recursed into.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OpaqueType:
    module: str  # module to import in generated code
    zero_value: str  # expression for the type's zero value


WELL_KNOWN_OPAQUE_TYPES: dict[str, OpaqueType] = {
    "datetime.datetime": OpaqueType("datetime", "datetime.datetime.min"),
    "datetime.date": OpaqueType("datetime", "datetime.date.min"),
    "datetime.time": OpaqueType("datetime", "datetime.time()"),
    "datetime.timedelta": OpaqueType("datetime", "datetime.timedelta()"),
    "decimal.Decimal": OpaqueType("decimal", "decimal.Decimal(0)"),
    "uuid.UUID": OpaqueType("uuid", "uuid.UUID(int=0)"),
}

# Builtin scalar types and their zero values
PRIMITIVE_ZERO_VALUES: dict[str, str] = {
    "str": '""',
    "int": "0",
    "float": "0.0",
    "bool": "False",
    "bytes": 'b""',
    "complex": "0j",
}
