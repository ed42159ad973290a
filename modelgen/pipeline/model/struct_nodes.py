"""
Structural model node definitions.

These nodes describe an introspected structure and the mapping plan built
on top of it. They carry no generation logic beyond rendering a type back
to its textual form.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType

from ..errors import ConfigError


class TypeKind(Enum):
    """Kind of type in the structural model."""

    PRIMITIVE = "primitive"  # int, str, bool, float, bytes, complex
    OPAQUE = "opaque"  # well-known library type, never recursed into
    ENUM = "enum"  # Enum declared next to the structure
    RECORD = "record"  # user-defined structure, needs recursive mapping
    LIST = "list"  # list[T]
    DICT = "dict"  # dict[K, V]


@dataclass(frozen=True)
class TypeRef:
    """A resolved type reference."""

    kind: TypeKind = TypeKind.PRIMITIVE
    name: str = ""  # "int", "datetime.datetime", "Author"

    # Qualifier for ENUM and RECORD names ("blog" in "blog.Author")
    namespace: str = ""

    # For container types
    type_args: tuple[TypeRef, ...] = ()

    # Whether None is an accepted value (X | None)
    is_nullable: bool = False

    def render(self) -> str:
        """Render the type as a Python annotation expression."""
        if self.kind == TypeKind.LIST:
            text = f"list[{self.type_args[0].render()}]"
        elif self.kind == TypeKind.DICT:
            key, value = self.type_args
            text = f"dict[{key.render()}, {value.render()}]"
        elif self.kind in (TypeKind.ENUM, TypeKind.RECORD) and self.namespace:
            text = f"{self.namespace}.{self.name}"
        else:
            text = self.name
        if self.is_nullable:
            text = f"{text} | None"
        return text

    def localized(self, namespace: str) -> TypeRef:
        """Return a copy with the ``namespace`` qualifier stripped everywhere."""
        args = tuple(arg.localized(namespace) for arg in self.type_args)
        if self.namespace == namespace:
            return replace(self, namespace="", type_args=args)
        return replace(self, type_args=args)

    def non_null(self) -> TypeRef:
        return replace(self, is_nullable=False) if self.is_nullable else self

    def innermost(self) -> TypeRef:
        """Strip nullable and list wrappers down to the element type."""
        ref = self.non_null()
        while ref.kind == TypeKind.LIST:
            ref = ref.type_args[0].non_null()
        return ref

    def walk(self) -> Iterable[TypeRef]:
        yield self
        for arg in self.type_args:
            yield from arg.walk()


@dataclass(frozen=True)
class FieldInfo:
    """One structure field as discovered or derived."""

    name: str = ""
    type_ref: TypeRef = field(default_factory=TypeRef)

    # Shape classifiers, not mutually exclusive
    is_pointer: bool = False
    is_sequence: bool = False
    is_nested: bool = False

    @classmethod
    def from_type(cls, name: str, type_ref: TypeRef) -> FieldInfo:
        """Build a field, deriving the classifiers from its type."""
        return cls(
            name=name,
            type_ref=type_ref,
            is_pointer=type_ref.is_nullable,
            is_sequence=type_ref.non_null().kind == TypeKind.LIST,
            is_nested=type_ref.innermost().kind == TypeKind.RECORD,
        )

    @property
    def type_expr(self) -> str:
        return self.type_ref.render()

    @property
    def element_ref(self) -> TypeRef:
        """The sequence element type, or the non-null type for other fields."""
        ref = self.type_ref.non_null()
        if ref.kind == TypeKind.LIST:
            return ref.type_args[0]
        return ref


@dataclass(frozen=True)
class StructInfo:
    """One structure as discovered."""

    qualified_namespace: str = ""  # e.g. "blog"
    namespace_path: str = ""  # e.g. "apimodels.blog"
    type_name: str = ""
    fields: tuple[FieldInfo, ...] = ()

    @property
    def qualified_name(self) -> str:
        if self.qualified_namespace:
            return f"{self.qualified_namespace}.{self.type_name}"
        return self.type_name

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> FieldInfo | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(frozen=True)
class MappingConfig:
    """The resolved plan for one generation unit.

    Attributes:
        source_type: The external structure
        target_type: The local structure (derived from the source by default)
        omit_fields: Source field names left out of the target
        field_map: Source name -> target name, only for renamed fields
    """

    source_type: StructInfo
    target_type: StructInfo
    omit_fields: frozenset[str] = frozenset()
    field_map: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @staticmethod
    def create(
        source: StructInfo,
        omit_fields: Iterable[str] = (),
        field_map: Mapping[str, str] | None = None,
        target_namespace: str = "",
        target_type: StructInfo | None = None,
    ) -> MappingConfig:
        """Create a validated config; without options this is the zero-config mapping."""
        omit = frozenset(omit_fields)
        renames = {src: dst for src, dst in (field_map or {}).items() if src != dst}
        validate_mapping(source, omit, renames)
        if target_type is None:
            target_type = derive_target(source, omit, renames, target_namespace)
        return MappingConfig(
            source_type=source,
            target_type=target_type,
            omit_fields=omit,
            field_map=MappingProxyType(dict(renames)),
        )

    def is_omitted(self, name: str) -> bool:
        return name in self.omit_fields

    def target_name(self, name: str) -> str:
        return self.field_map.get(name, name)


def validate_mapping(source: StructInfo, omit_fields: frozenset[str], field_map: Mapping[str, str]) -> None:
    """Check omit and rename entries against the source structure.

    Raises:
        ConfigError: On unknown fields, omit+rename conflicts or duplicate target names
    """
    known = set(source.field_names)

    unknown = sorted((set(field_map) | omit_fields) - known)
    if unknown:
        raise ConfigError(f"{source.qualified_name} has no field(s) {', '.join(unknown)}; available fields: {', '.join(source.field_names)}")

    conflicting = sorted(omit_fields & set(field_map))
    if conflicting:
        raise ConfigError(f"{source.qualified_name}: field(s) {', '.join(conflicting)} are both omitted and renamed")

    seen: dict[str, str] = {}
    for name in source.field_names:
        if name in omit_fields:
            continue
        target = field_map.get(name, name)
        if target in seen:
            raise ConfigError(f"{source.qualified_name}: fields {seen[target]} and {name} both map to {target}")
        seen[target] = name


def derive_target(
    source: StructInfo,
    omit_fields: frozenset[str],
    field_map: Mapping[str, str],
    target_namespace: str = "",
) -> StructInfo:
    """Derive the local structure: kept source fields, renamed and unqualified."""
    fields = tuple(
        replace(f, name=field_map.get(f.name, f.name), type_ref=f.type_ref.localized(source.qualified_namespace))
        for f in source.fields
        if f.name not in omit_fields
    )
    return StructInfo(
        qualified_namespace=target_namespace,
        namespace_path=target_namespace,
        type_name=source.type_name,
        fields=fields,
    )
