"""
Structure introspection.

Turns a reference to a real class into a StructInfo: the module source is
located, parsed with the ``ast`` module, and the class's annotated fields
are classified as pointer / sequence / nested record / primitive / opaque.
"""

from __future__ import annotations

import ast
import importlib
import inspect
import logging
from collections.abc import Callable

from ..errors import DiscoveryError
from ..model import WELL_KNOWN_OPAQUE_TYPES, FieldInfo, StructInfo, TypeKind, TypeRef
from .symbols import ModuleSymbols

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = {"str", "int", "float", "bool", "bytes", "complex"}

LIST_ORIGINS = {"list", "typing.List", "typing.Sequence", "typing.MutableSequence", "collections.abc.Sequence"}
DICT_ORIGINS = {"dict", "typing.Dict", "typing.Mapping", "collections.abc.Mapping"}
OPTIONAL_ORIGINS = {"typing.Optional"}
UNION_ORIGINS = {"typing.Union"}
ANNOTATED_ORIGINS = {"typing.Annotated", "typing_extensions.Annotated"}
SKIPPED_ORIGINS = {"typing.ClassVar", "dataclasses.InitVar"}


def load_module_source(namespace_path: str) -> str:
    """Default source discovery: import the module and read its source file."""
    try:
        module = importlib.import_module(namespace_path)
    except ImportError as e:
        raise DiscoveryError(f"Cannot import module {namespace_path}: {e}") from e
    try:
        return inspect.getsource(module)
    except (OSError, TypeError) as e:
        raise DiscoveryError(f"No source available for module {namespace_path}: {e}") from e


class Introspector:
    """Builds StructInfo descriptions of classes.

    Args:
        source_loader: Returns the source text of a module given its dotted
            path. Defaults to importing the module and reading it with
            ``inspect``.
    """

    def __init__(self, source_loader: Callable[[str], str] | None = None):
        self._load_source = source_loader or load_module_source
        self._cache: dict[tuple[str, str], StructInfo] = {}

    def read(self, struct_type: type | object) -> StructInfo:
        """Introspect a live class (or an instance of it)."""
        if not isinstance(struct_type, type):
            struct_type = type(struct_type)
        if struct_type.__qualname__ != struct_type.__name__:
            raise DiscoveryError(f"{struct_type.__qualname__} is not declared at module level")
        return self.read_module(struct_type.__module__, struct_type.__name__)

    def read_path(self, ref: str) -> StructInfo:
        """Introspect a class given as ``package.module:Type`` or ``package.module.Type``."""
        if ":" in ref:
            namespace_path, _, type_name = ref.partition(":")
        else:
            namespace_path, _, type_name = ref.rpartition(".")
        if not namespace_path or not type_name:
            raise DiscoveryError(f"Invalid type reference {ref!r}, expected 'package.module:Type'")
        return self.read_module(namespace_path, type_name)

    def read_module(self, namespace_path: str, type_name: str) -> StructInfo:
        key = (namespace_path, type_name)
        if key not in self._cache:
            source = self._load_source(namespace_path)
            self._cache[key] = self.read_source(source, type_name, namespace_path)
        return self._cache[key]

    def read_source(self, source: str, type_name: str, namespace_path: str) -> StructInfo:
        """
        Introspect a class from the source text of its module.

        Args:
            source: Source code of the module declaring the class
            type_name: Name of the class
            namespace_path: Dotted path the module is importable as

        Returns:
            StructInfo with fields in declaration order

        Raises:
            DiscoveryError: If the class is missing, is not a dataclass built
                with an ``__init__``, or a field cannot be classified
        """
        try:
            tree = ast.parse(source)
        except SyntaxError as e:
            raise DiscoveryError(f"Cannot parse module {namespace_path}: {e}") from e

        symbols = ModuleSymbols(tree)
        if not symbols.is_local_class(type_name):
            raise DiscoveryError(f"struct {type_name} not found in module {namespace_path}")
        if symbols.is_enum(type_name):
            raise DiscoveryError(f"{namespace_path}.{type_name} is an Enum, not a structure")
        self._check_dataclass(symbols, type_name, namespace_path)

        namespace = namespace_path.rpartition(".")[2]
        resolver = _TypeResolver(symbols, namespace, f"{namespace_path}.{type_name}")
        info = StructInfo(
            qualified_namespace=namespace,
            namespace_path=namespace_path,
            type_name=type_name,
            fields=tuple(self._extract_fields(symbols, resolver, type_name, set())),
        )
        logger.debug("Introspected %s with fields %s", info.qualified_name, info.field_names)
        return info

    def _check_dataclass(self, symbols: ModuleSymbols, type_name: str, namespace_path: str) -> None:
        # conversions construct the external class with keyword arguments
        decorator = symbols.dataclass_decorator(type_name)
        if decorator is None:
            raise DiscoveryError(f"{namespace_path}.{type_name} is not a dataclass")
        if isinstance(decorator, ast.Call) and _passes_false(decorator, "init"):
            raise DiscoveryError(f"{namespace_path}.{type_name} is a dataclass without a generated __init__")

    def _extract_fields(
        self,
        symbols: ModuleSymbols,
        resolver: _TypeResolver,
        class_name: str,
        visiting: set[str],
    ) -> list[FieldInfo]:
        # base class fields come first; redefined fields keep their original position
        fields: dict[str, FieldInfo] = {}
        visiting = visiting | {class_name}
        for base in symbols.local_bases(class_name):
            # annotations of plain base classes are not dataclass fields
            if base in visiting or symbols.is_enum(base) or not symbols.is_dataclass(base):
                continue
            for f in self._extract_fields(symbols, resolver, base, visiting):
                fields[f.name] = f

        for node in symbols.classes[class_name].body:
            if not isinstance(node, ast.AnnAssign) or not isinstance(node.target, ast.Name):
                continue
            if resolver.is_skipped(node.annotation):
                continue
            name = node.target.id
            if symbols.is_field_call(node.value) and _passes_false(node.value, "init"):
                raise resolver._error(name, "fields with init=False cannot be passed to the constructor")
            fields[name] = FieldInfo.from_type(name, resolver.resolve(node.annotation, name))
        return list(fields.values())


def _passes_false(call: ast.Call, keyword: str) -> bool:
    return any(
        kw.arg == keyword and isinstance(kw.value, ast.Constant) and kw.value.value is False for kw in call.keywords
    )


class _TypeResolver:
    """Resolves annotation expressions of one module into TypeRefs."""

    def __init__(self, symbols: ModuleSymbols, namespace: str, owner: str):
        self.symbols = symbols
        self.namespace = namespace
        self.owner = owner

    def _error(self, field_name: str, message: str) -> DiscoveryError:
        return DiscoveryError(f"{self.owner}.{field_name}: {message}")

    def is_skipped(self, annotation: ast.expr) -> bool:
        target = annotation.value if isinstance(annotation, ast.Subscript) else annotation
        return self.symbols.qualify(target) in SKIPPED_ORIGINS

    def resolve(self, node: ast.expr, field_name: str) -> TypeRef:
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            # forward reference
            try:
                parsed = ast.parse(node.value, mode="eval").body
            except SyntaxError as e:
                raise self._error(field_name, f"invalid string annotation {node.value!r}") from e
            return self.resolve(parsed, field_name)

        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
            return self._resolve_union(self._flatten_union(node), field_name)

        if isinstance(node, ast.Subscript):
            return self._resolve_subscript(node, field_name)

        if isinstance(node, (ast.Name, ast.Attribute)):
            return self._resolve_name(node, field_name)

        raise self._error(field_name, f"unsupported annotation {ast.unparse(node)!r}")

    def _resolve_name(self, node: ast.Name | ast.Attribute, field_name: str) -> TypeRef:
        qualified = self.symbols.qualify(node)

        if qualified is not None and self.symbols.is_local_class(qualified):
            kind = TypeKind.ENUM if self.symbols.is_enum(qualified) else TypeKind.RECORD
            return TypeRef(kind=kind, name=qualified, namespace=self.namespace)

        if qualified in PRIMITIVE_TYPES:
            return TypeRef(kind=TypeKind.PRIMITIVE, name=qualified)

        if qualified in WELL_KNOWN_OPAQUE_TYPES:
            return TypeRef(kind=TypeKind.OPAQUE, name=qualified)

        if qualified in LIST_ORIGINS or qualified in DICT_ORIGINS:
            raise self._error(field_name, f"container {qualified} needs type arguments")

        raise self._error(
            field_name,
            f"cannot map type {ast.unparse(node)!r}; records must be declared in the same module as the structure",
        )

    def _resolve_subscript(self, node: ast.Subscript, field_name: str) -> TypeRef:
        origin = self.symbols.qualify(node.value)
        args = list(node.slice.elts) if isinstance(node.slice, ast.Tuple) else [node.slice]

        if origin in ANNOTATED_ORIGINS:
            return self.resolve(args[0], field_name)

        if origin in OPTIONAL_ORIGINS:
            return self._resolve_union([args[0], ast.Constant(value=None)], field_name)

        if origin in UNION_ORIGINS:
            return self._resolve_union(args, field_name)

        if origin in LIST_ORIGINS:
            if len(args) != 1:
                raise self._error(field_name, "sequences take exactly one type argument")
            element = self.resolve(args[0], field_name)
            if element.non_null().kind == TypeKind.LIST and element.innermost().kind == TypeKind.RECORD:
                raise self._error(field_name, "nested sequences of records are not supported")
            return TypeRef(kind=TypeKind.LIST, name="list", type_args=(element,))

        if origin in DICT_ORIGINS:
            if len(args) != 2:
                raise self._error(field_name, "mappings take exactly two type arguments")
            key, value = (self.resolve(arg, field_name) for arg in args)
            for ref in (key, value):
                if any(part.kind == TypeKind.RECORD for part in ref.walk()):
                    raise self._error(field_name, "records inside mappings are not supported")
            return TypeRef(kind=TypeKind.DICT, name="dict", type_args=(key, value))

        raise self._error(field_name, f"unsupported generic {ast.unparse(node)!r}")

    def _flatten_union(self, node: ast.expr) -> list[ast.expr]:
        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
            return self._flatten_union(node.left) + self._flatten_union(node.right)
        return [node]

    def _resolve_union(self, members: list[ast.expr], field_name: str) -> TypeRef:
        def is_none(member: ast.expr) -> bool:
            return isinstance(member, ast.Constant) and member.value is None

        non_null = [m for m in members if not is_none(m)]
        if len(non_null) != 1:
            raise self._error(field_name, "union types are not supported, only 'X | None'")
        resolved = self.resolve(non_null[0], field_name)
        if len(non_null) == len(members):
            return resolved
        return TypeRef(
            kind=resolved.kind,
            name=resolved.name,
            namespace=resolved.namespace,
            type_args=resolved.type_args,
            is_nullable=True,
        )
