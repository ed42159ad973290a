"""
Python AST-based code generation backend.

Generates, for one mapping, a local dataclass plus its forward
(``from_external``) and reverse (``to_external``) conversion methods,
built with the ``ast`` module and unparsed to source.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import replace

from ...utils import namespace_import, pascal_to_snake_case
from ..config import GeneratorConfig
from ..context import GenerationContext
from ..errors import ConfigError
from ..formatters import check_syntax, format_code
from ..mapper import FieldMatcher
from ..model import (
    PRIMITIVE_ZERO_VALUES,
    WELL_KNOWN_OPAQUE_TYPES,
    FieldInfo,
    MappingConfig,
    StructInfo,
    TypeKind,
    TypeRef,
)
from .base import AstBackend, ImportSpec

logger = logging.getLogger(__name__)

SOURCE_ARG = "src"

# dataclasses.field, imported under a name no generated field is allowed to take
FIELD_ALIAS = "_field"


def _load(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def _dotted(path: str) -> ast.expr:
    """Build ``a.b.c`` as nested attribute access."""
    head, *attrs = path.split(".")
    node: ast.expr = _load(head)
    for attr in attrs:
        node = ast.Attribute(value=node, attr=attr, ctx=ast.Load())
    return node


def _attr(owner: str, attr: str) -> ast.Attribute:
    return ast.Attribute(value=_load(owner), attr=attr, ctx=ast.Load())


def _call(func: ast.expr, *args: ast.expr, keywords: list[ast.keyword] | None = None) -> ast.Call:
    return ast.Call(func=func, args=list(args), keywords=keywords or [])


def _method_call(owner: ast.expr, method: str, *args: ast.expr) -> ast.Call:
    return _call(ast.Attribute(value=owner, attr=method, ctx=ast.Load()), *args)


def _is_not_none(expr: ast.expr) -> ast.Compare:
    return ast.Compare(left=expr, ops=[ast.IsNot()], comparators=[ast.Constant(value=None)])


def _is_none(expr: ast.expr) -> ast.Compare:
    return ast.Compare(left=expr, ops=[ast.Is()], comparators=[ast.Constant(value=None)])


def _if_present(attr: ast.expr, body: ast.expr) -> ast.IfExp:
    """``body if attr is not None else None``"""
    return ast.IfExp(test=_is_not_none(attr), body=body, orelse=ast.Constant(value=None))


def _list_comp(element: ast.expr, target: str, iterable: ast.expr) -> ast.ListComp:
    return ast.ListComp(
        elt=element,
        generators=[
            ast.comprehension(
                target=ast.Name(id=target, ctx=ast.Store()),
                iter=iterable,
                ifs=[],
                is_async=0,
            )
        ],
    )


def _arguments(*names: tuple[str, ast.expr | None]) -> ast.arguments:
    return ast.arguments(
        posonlyargs=[],
        args=[ast.arg(arg=name, annotation=annotation) for name, annotation in names],
        vararg=None,
        kwonlyargs=[],
        kw_defaults=[],
        kwarg=None,
        defaults=[],
    )


def _parse_expr(expr_str: str) -> ast.expr:
    """Parse an expression string into an AST expression."""
    return ast.parse(expr_str, mode="eval").body


class PythonAstBackend(AstBackend):
    """Python code generation backend using AST."""

    FILE_EXTENSION = "py"

    def __init__(self, config: GeneratorConfig | None = None, matcher: FieldMatcher | None = None):
        super().__init__(config or GeneratorConfig())
        self.matcher = matcher or FieldMatcher()

    # --- Entry points ---

    def generate(self, mapping: MappingConfig, context: GenerationContext | None = None) -> str:
        """Generate a complete, formatted module for one mapping.

        Raises:
            FormatError: If the generated code is not valid Python
        """
        body = self.generate_body(mapping, context or GenerationContext())
        code = self.render_preamble(self.collect_imports(mapping), self.generation_comment()) + body
        return format_code(code, self.config.formatter)

    def generate_body(self, mapping: MappingConfig, context: GenerationContext) -> str:
        """Generate the local dataclass and its conversion methods, without imports.

        Raises:
            ConfigError: If a field name clashes with the generated class, or the
                type name was already generated from another structure
            FormatError: If the generated code is not valid Python
        """
        source = mapping.source_type
        type_name = mapping.target_type.type_name
        self._check_reserved_names(mapping)

        if context.is_emitted(type_name):
            self._check_same_source(context, type_name, f"{source.namespace_path}.{source.type_name}")
            logger.warning(
                "%s was already generated in this run, skipping mapping of %s",
                type_name,
                source.qualified_name,
            )
            return ""

        aliases = []
        for name in self._enum_aliases(mapping):
            if context.is_emitted(name):
                self._check_same_source(context, name, f"{source.namespace_path}.{name}")
            else:
                aliases.append(name)

        body: list[ast.stmt] = [self._generate_alias(name, source) for name in aliases]
        body.append(self._generate_class(mapping))

        module = ast.Module(body=body, type_ignores=[])
        ast.fix_missing_locations(module)
        code = ast.unparse(module) + "\n"
        check_syntax(code)

        for name in aliases + [type_name]:
            context.mark_emitted(name, f"{source.namespace_path}.{name}")
        logger.info("Generated %s from %s", type_name, source.qualified_name)
        return code

    def _check_reserved_names(self, mapping: MappingConfig) -> None:
        # names evaluated in the class body or bound by it
        reserved = {FIELD_ALIAS, "classmethod", self.config.from_method_name, self.config.to_method_name}
        clashes = sorted(reserved & set(mapping.target_type.field_names))
        if clashes:
            raise ConfigError(
                f"{mapping.source_type.qualified_name}: field(s) {', '.join(clashes)} clash with names "
                "used by the generated class; rename them"
            )

    def _check_same_source(self, context: GenerationContext, name: str, source_path: str) -> None:
        emitted_from = context.source_of(name)
        if emitted_from != source_path:
            raise ConfigError(
                f"{name} is already generated from {emitted_from}, it cannot also be generated from {source_path}"
            )

    def collect_imports(self, mapping: MappingConfig) -> set[ImportSpec]:
        """Collect the imports needed by the generated code of one mapping."""
        imports: set[ImportSpec] = {("__future__", "annotations"), ("dataclasses", "dataclass")}

        # the conversion methods reference the external type
        imports.add(namespace_import(mapping.source_type.namespace_path))

        for info in (mapping.source_type, mapping.target_type):
            for f in info.fields:
                for part in f.type_ref.walk():
                    if part.kind == TypeKind.OPAQUE:
                        imports.add((WELL_KNOWN_OPAQUE_TYPES[part.name].module, None))

        if any(self._uses_field_factory(f.type_ref) for f in mapping.target_type.fields):
            imports.add(("dataclasses", f"field as {FIELD_ALIAS}"))
        return imports

    # --- Structure definition ---

    def _enum_aliases(self, mapping: MappingConfig) -> list[str]:
        """Enums of the source module referenced by kept fields, in field order."""
        namespace = mapping.source_type.qualified_namespace
        names: list[str] = []
        for f in mapping.source_type.fields:
            if mapping.is_omitted(f.name):
                continue
            for part in f.type_ref.walk():
                if part.kind == TypeKind.ENUM and part.namespace == namespace and part.name not in names:
                    names.append(part.name)
        return names

    def _generate_alias(self, name: str, source: StructInfo) -> ast.Assign:
        """``Color = blog.Color``: local name for an enum of the source module."""
        return ast.Assign(
            targets=[ast.Name(id=name, ctx=ast.Store())],
            value=_attr(source.qualified_namespace, name),
        )

    def _generate_class(self, mapping: MappingConfig) -> ast.ClassDef:
        target = mapping.target_type
        source = mapping.source_type

        body: list[ast.stmt] = []
        if self.config.add_docstrings:
            body.append(ast.Expr(value=ast.Constant(value=f"Local model mapped from {source.qualified_name}.")))

        for f in target.fields:
            body.append(
                ast.AnnAssign(
                    target=ast.Name(id=f.name, ctx=ast.Store()),
                    annotation=self._type_node(f.type_ref),
                    value=self._default_value(f.type_ref),
                    simple=1,
                )
            )

        pairs = self._field_pairs(mapping)
        body.append(self._generate_from_method(mapping, pairs))
        body.append(self._generate_to_method(mapping, pairs))

        if self.config.kw_only:
            decorator: ast.expr = _call(
                _load("dataclass"),
                keywords=[ast.keyword(arg="kw_only", value=ast.Constant(value=True))],
            )
        else:
            decorator = _load("dataclass")

        return ast.ClassDef(
            name=target.type_name,
            bases=[],
            keywords=[],
            body=body,
            decorator_list=[decorator],
            type_params=[],
        )

    def _field_pairs(self, mapping: MappingConfig) -> list[tuple[FieldInfo, FieldInfo | None]]:
        """Pair each source field with its target field, None if omitted or unmatched."""
        renamed = replace(
            mapping.source_type,
            fields=tuple(
                replace(f, name=mapping.target_name(f.name))
                for f in mapping.source_type.fields
                if not mapping.is_omitted(f.name)
            ),
        )
        matches = self.matcher.match_fields(renamed, mapping.target_type)

        pairs: list[tuple[FieldInfo, FieldInfo | None]] = []
        for sf in mapping.source_type.fields:
            target_name = mapping.target_name(sf.name)
            if mapping.is_omitted(sf.name):
                pairs.append((sf, None))
            elif target_name not in matches:
                logger.debug("%s.%s has no target field %s", mapping.source_type.qualified_name, sf.name, target_name)
                pairs.append((sf, None))
            else:
                pairs.append((sf, mapping.target_type.get_field(target_name)))
        return pairs

    # --- Forward conversion ---

    def _generate_from_method(self, mapping: MappingConfig, pairs: list[tuple[FieldInfo, FieldInfo | None]]) -> ast.FunctionDef:
        target_name = mapping.target_type.type_name
        source = mapping.source_type
        method = self.config.from_method_name

        body: list[ast.stmt] = []
        if self.config.add_docstrings:
            local_var = pascal_to_snake_case(target_name)
            body.append(
                ast.Expr(
                    value=ast.Constant(
                        value=(
                            f"Build a {target_name} from an external {source.qualified_name}.\n\n"
                            f"        Usage: {local_var} = {target_name}.{method}(external_{local_var})\n"
                            "        "
                        )
                    )
                )
            )

        # null propagation comes first
        body.append(
            ast.If(
                test=_is_none(_load(SOURCE_ARG)),
                body=[ast.Return(value=ast.Constant(value=None))],
                orelse=[],
            )
        )

        keywords = [ast.keyword(arg=tf.name, value=self._forward_value(sf, tf)) for sf, tf in pairs if tf is not None]
        body.append(ast.Return(value=_call(_load("cls"), keywords=keywords)))

        source_ref = TypeRef(kind=TypeKind.RECORD, name=source.type_name, namespace=source.qualified_namespace, is_nullable=True)
        target_ref = TypeRef(kind=TypeKind.RECORD, name=target_name, is_nullable=True)
        return ast.FunctionDef(
            name=method,
            args=_arguments(("cls", None), (SOURCE_ARG, self._type_node(source_ref))),
            body=body,
            decorator_list=[_load("classmethod")],
            returns=self._type_node(target_ref),
            type_params=[],
        )

    def _forward_value(self, sf: FieldInfo, tf: FieldInfo) -> ast.expr:
        """Value expression for one target field, read from the source instance."""
        value = _attr(SOURCE_ARG, sf.name)
        recursive = self.matcher.needs_recursive_mapping(sf, tf)

        if sf.is_sequence and tf.is_sequence and recursive:
            return _if_present(value, self._convert_elements_forward(tf.element_ref, _attr(SOURCE_ARG, sf.name)))

        if sf.is_sequence and tf.is_sequence:
            if sf.element_ref.render() != tf.element_ref.render():
                converted = self._cast_elements(tf.element_ref, _attr(SOURCE_ARG, sf.name))
                return _if_present(value, converted) if sf.is_pointer else converted
            # same element type: share the list
            return value

        if recursive:
            nested = tf.type_ref.non_null().render()
            converted = _method_call(_dotted(nested), self.config.from_method_name, _attr(SOURCE_ARG, sf.name))
            if sf.is_pointer:
                return _if_present(value, converted)
            # a value-typed field is never None: fall back to the zero value
            return ast.BoolOp(op=ast.Or(), values=[converted, _call(_dotted(nested))])

        return value

    def _convert_elements_forward(self, element: TypeRef, iterable: ast.expr) -> ast.ListComp:
        nested = element.non_null().render()
        converted: ast.expr = _method_call(_dotted(nested), self.config.from_method_name, _load("item"))
        if not element.is_nullable:
            converted = ast.BoolOp(op=ast.Or(), values=[converted, _call(_dotted(nested))])
        return _list_comp(converted, "item", iterable)

    def _cast_elements(self, element: TypeRef, iterable: ast.expr) -> ast.ListComp:
        cast: ast.expr = _call(self._type_node(element.non_null()), _load("v"))
        if element.is_nullable:
            cast = _if_present(_load("v"), cast)
        return _list_comp(cast, "v", iterable)

    # --- Reverse conversion ---

    def _generate_to_method(self, mapping: MappingConfig, pairs: list[tuple[FieldInfo, FieldInfo | None]]) -> ast.FunctionDef:
        source = mapping.source_type
        method = self.config.to_method_name

        body: list[ast.stmt] = []
        if self.config.add_docstrings:
            local_var = pascal_to_snake_case(mapping.target_type.type_name)
            body.append(
                ast.Expr(
                    value=ast.Constant(
                        value=(
                            f"Convert back to an external {source.qualified_name}.\n\n"
                            f"        Usage: external_{local_var} = {local_var}.{method}()\n"
                            "        "
                        )
                    )
                )
            )

        keywords = []
        for sf, tf in pairs:
            if tf is None:
                # omitted fields still need a value in the external type
                value = self._zero_value(sf.type_ref)
            else:
                value = self._reverse_value(sf, tf)
            keywords.append(ast.keyword(arg=sf.name, value=value))
        body.append(ast.Return(value=_call(_dotted(source.qualified_name), keywords=keywords)))

        source_ref = TypeRef(kind=TypeKind.RECORD, name=source.type_name, namespace=source.qualified_namespace)
        return ast.FunctionDef(
            name=method,
            args=_arguments(("self", None)),
            body=body,
            decorator_list=[],
            returns=self._type_node(source_ref),
            type_params=[],
        )

    def _reverse_value(self, sf: FieldInfo, tf: FieldInfo) -> ast.expr:
        """Value expression for one external field, read from the local instance."""
        value = _attr("self", tf.name)

        # textually identical types need no conversion
        if sf.type_expr == tf.type_expr:
            return value

        recursive = self.matcher.needs_recursive_mapping(sf, tf)
        to_method = self.config.to_method_name

        if sf.is_sequence and tf.is_sequence and recursive:
            converted: ast.expr = _method_call(_load("item"), to_method)
            if tf.element_ref.is_nullable:
                converted = _if_present(_load("item"), converted)
            return _if_present(value, _list_comp(converted, "item", _attr("self", tf.name)))

        if sf.is_sequence and tf.is_sequence:
            return value

        if recursive:
            converted = _method_call(_attr("self", tf.name), to_method)
            if tf.is_pointer:
                return _if_present(value, converted)
            return converted

        return value

    # --- Types and values ---

    def _type_node(self, type_ref: TypeRef) -> ast.expr:
        """Build the annotation expression for a type."""
        if type_ref.is_nullable:
            return ast.BinOp(
                left=self._type_node(type_ref.non_null()),
                op=ast.BitOr(),
                right=ast.Constant(value=None),
            )
        if type_ref.kind == TypeKind.LIST:
            return ast.Subscript(value=_load("list"), slice=self._type_node(type_ref.type_args[0]), ctx=ast.Load())
        if type_ref.kind == TypeKind.DICT:
            key, value = type_ref.type_args
            return ast.Subscript(
                value=_load("dict"),
                slice=ast.Tuple(elts=[self._type_node(key), self._type_node(value)], ctx=ast.Load()),
                ctx=ast.Load(),
            )
        return _dotted(type_ref.render())

    def _zero_value(self, type_ref: TypeRef) -> ast.expr:
        """The zero value of a type: empty, zero, False, None or a default instance."""
        if type_ref.is_nullable or type_ref.kind in (TypeKind.LIST, TypeKind.DICT):
            return ast.Constant(value=None)
        if type_ref.kind == TypeKind.PRIMITIVE:
            return _parse_expr(PRIMITIVE_ZERO_VALUES[type_ref.name])
        if type_ref.kind == TypeKind.OPAQUE:
            return _parse_expr(WELL_KNOWN_OPAQUE_TYPES[type_ref.name].zero_value)
        if type_ref.kind == TypeKind.ENUM:
            # first declared member
            return _call(_load("next"), _call(_load("iter"), _dotted(type_ref.render())))
        return _call(_dotted(type_ref.render()))

    def _uses_field_factory(self, type_ref: TypeRef) -> bool:
        # only None and builtin scalar constants are safe to evaluate in the class body
        return not type_ref.is_nullable and type_ref.kind != TypeKind.PRIMITIVE

    def _default_value(self, type_ref: TypeRef) -> ast.expr:
        """Default for a local field, so every local model can be built without arguments.

        Anything but a constant is built by a ``lambda`` factory: names in its
        body resolve in the module namespace, where an earlier field of the
        same name (``uuid: uuid.UUID``) cannot shadow them.
        """
        if not self._uses_field_factory(type_ref):
            return self._zero_value(type_ref)

        if type_ref.kind == TypeKind.LIST:
            body: ast.expr = ast.List(elts=[], ctx=ast.Load())
        elif type_ref.kind == TypeKind.DICT:
            body = ast.Dict(keys=[], values=[])
        else:
            body = self._zero_value(type_ref)
        factory = ast.Lambda(args=_arguments(), body=body)
        return _call(_load(FIELD_ALIAS), keywords=[ast.keyword(arg="default_factory", value=factory)])
