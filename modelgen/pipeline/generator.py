"""
Batch generator composing several mappings into one module.

Orchestrates the pipeline:
1. Introspector: class reference -> StructInfo
2. Builder / zero-config: StructInfo -> MappingConfig
3. AST backend: MappingConfig -> source text, one unit per mapping
4. Formatter: black or ruff post-processing of the assembled module
5. Writer: atomic write of the module
"""

from __future__ import annotations

import logging
from collections import deque
from pathlib import Path

from .ast_backends import ImportSpec, PythonAstBackend
from .builder import MappingBuilder
from .config import GeneratorConfig, OutputMode
from .context import GenerationContext
from .errors import ConfigError, ModelgenError
from .formatters import format_code
from .introspector import Introspector
from .model import MappingConfig, StructInfo, TypeKind
from .writer import AtomicWriter

logger = logging.getLogger(__name__)


class ModelGenerator:
    """Generates one module of local models from external structures.

    Usage:
        generator = ModelGenerator(GeneratorConfig(target_package="models"))
        generator.map(blog.Post)
        generator.register(account.Account).rename("ID", "external_id").omit("name").build()
        generator.write("models/generated.py")
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        introspector: Introspector | None = None,
        backend: PythonAstBackend | None = None,
    ):
        self.config = config or GeneratorConfig()
        self.introspector = introspector or Introspector()
        self.backend = backend or PythonAstBackend(self.config)
        self.mappings: list[MappingConfig] = []
        self.errors: list[ModelgenError] = []

    def _read(self, struct_type: type | str) -> StructInfo:
        if isinstance(struct_type, str):
            return self.introspector.read_path(struct_type)
        return self.introspector.read(struct_type)

    def map(self, struct_type: type | str) -> ModelGenerator:
        """Add a zero-config mapping: every field kept under its own name."""
        source = self._read(struct_type)
        return self.add(MappingConfig.create(source, target_namespace=self.config.target_package))

    def register(self, struct_type: type | str) -> MappingBuilder:
        """Start a mapping with rename / omit rules; ``build()`` adds it to this generator."""
        source = self._read(struct_type)
        return MappingBuilder(source, target_namespace=self.config.target_package, on_build=self.add)

    def add(self, mapping: MappingConfig) -> ModelGenerator:
        self.mappings.append(mapping)
        return self

    def generate(self, fail_fast: bool = True) -> str:
        """
        Generate the module for all added mappings.

        Args:
            fail_fast: Raise on the first failing unit. Otherwise failing units
                are logged, recorded in ``errors`` and left out of the module.

        Returns:
            Formatted module source

        Raises:
            ConfigError: If two source modules share the same namespace alias, or
                two records of different modules share the same name
            DiscoveryError: If a nested record cannot be introspected
            FormatError: If the generated code is not valid Python
        """
        self.errors = []
        context = GenerationContext()
        mappings = self._plan(fail_fast)
        self._check_namespaces(mappings)

        bodies: list[str] = []
        imports: set[ImportSpec] = set()
        for mapping in mappings:
            try:
                body = self.backend.generate_body(mapping, context)
            except ModelgenError as e:
                if fail_fast:
                    raise
                logger.error("Skipping %s: %s", mapping.source_type.qualified_name, e)
                self.errors.append(e)
                continue
            if body:
                bodies.append(body)
                imports |= self.backend.collect_imports(mapping)

        code = self.backend.render_preamble(imports, self.backend.generation_comment())
        code += "\n\n".join(bodies)
        return format_code(code, self.config.formatter)

    def write(self, path: str | Path, fail_fast: bool = True) -> Path:
        """
        Generate the module and write it to ``path``.

        Raises:
            FileExistsError: If the file exists and the output mode is not FORCE
        """
        path = Path(path)
        code = self.generate(fail_fast=fail_fast)
        output = self.config.output

        if not output.atomic_write:
            if output.mode == OutputMode.ERROR_IF_EXISTS and path.exists():
                raise FileExistsError(f"Output file already exists: {path}. Use force mode to overwrite.")
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(code, encoding="utf-8")
            return path

        writer = AtomicWriter()
        if output.mode == OutputMode.FORCE:
            writer.write(path, code, validate=output.validate_before_write)
        else:
            writer.write_if_not_exists(path, code, validate=output.validate_before_write)
        return path

    def _plan(self, fail_fast: bool) -> list[MappingConfig]:
        """Registered mappings, then zero-config mappings for unmapped nested records.

        Raises:
            ConfigError: If one local name would stand for records of two modules
        """
        planned = list(self.mappings)

        # local type name -> module of the record it is generated from
        known: dict[str, str] = {}
        for mapping in planned:
            self._claim(known, mapping.target_type.type_name, mapping.source_type.namespace_path)

        queue = deque(planned)
        while queue:
            mapping = queue.popleft()
            namespace_path = mapping.source_type.namespace_path
            for name in self._nested_records(mapping):
                if name in known:
                    self._claim(known, name, namespace_path)
                    continue
                if not self.config.auto_map_nested:
                    continue
                known[name] = namespace_path
                try:
                    source = self.introspector.read_module(namespace_path, name)
                except ModelgenError as e:
                    if fail_fast:
                        raise
                    logger.error("Cannot map nested %s.%s: %s", mapping.source_type.qualified_namespace, name, e)
                    self.errors.append(e)
                    continue
                nested = MappingConfig.create(source, target_namespace=self.config.target_package)
                logger.debug("Mapping nested %s", source.qualified_name)
                planned.append(nested)
                queue.append(nested)
        return planned

    def _claim(self, known: dict[str, str], name: str, namespace_path: str) -> None:
        other = known.setdefault(name, namespace_path)
        if other != namespace_path:
            raise ConfigError(
                f"{other}.{name} and {namespace_path}.{name} would both be generated as {name}; "
                "generate them into separate modules"
            )

    def _nested_records(self, mapping: MappingConfig) -> list[str]:
        names: list[str] = []
        for f in mapping.target_type.fields:
            inner = f.type_ref.innermost()
            if inner.kind == TypeKind.RECORD and inner.name not in names:
                names.append(inner.name)
        return names

    def _check_namespaces(self, mappings: list[MappingConfig]) -> None:
        # each source module is imported under its last dotted component
        seen: dict[str, str] = {}
        for mapping in mappings:
            source = mapping.source_type
            other = seen.setdefault(source.qualified_namespace, source.namespace_path)
            if other != source.namespace_path:
                raise ConfigError(
                    f"Modules {other} and {source.namespace_path} would both be imported as "
                    f"{source.qualified_namespace}; generate them into separate modules"
                )
