"""
Base class for AST-based code generation backends.

Defines the interface of the generation engine and the shared preamble
(generation comment and imports) rendering.
"""

from __future__ import annotations

import collections
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

import jinja2

from ..config import GeneratorConfig
from ..context import GenerationContext
from ..model import MappingConfig

TEMPLATES_DIR = Path(__file__).parent.parent.parent.resolve().absolute() / "templates"

STDLIB_MODULES = {"collections", "dataclasses", "datetime", "decimal", "enum", "typing", "uuid"}

# (module, name): "from module import name"; (module, None): "import module"
ImportSpec = tuple[str, str | None]


def assemble_imports(imports: Iterable[ImportSpec]) -> list[list[str]]:
    """Group imports by module and sort them.

    Returns:
        Import line groups: ``__future__`` first, then the standard library,
        then the external structure modules.
    """
    plain: set[str] = set()
    from_groups: dict[str, set[str]] = collections.defaultdict(set)
    for module, name in imports:
        if name is None:
            plain.add(module)
        else:
            from_groups[module].add(name)

    def lines_for(modules: Iterable[str]) -> list[str]:
        lines = []
        for module in sorted(modules):
            if module in plain:
                lines.append(f"import {module}")
            if module in from_groups:
                lines.append(f"from {module} import {', '.join(sorted(from_groups[module]))}")
        return lines

    all_modules = plain | set(from_groups)
    groups = [
        lines_for(m for m in all_modules if m == "__future__"),
        lines_for(m for m in all_modules if m in STDLIB_MODULES),
        lines_for(m for m in all_modules if m not in STDLIB_MODULES and m != "__future__"),
    ]
    return [group for group in groups if group]


class AstBackend(ABC):
    """Abstract base class for AST-based code generation backends."""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, config: GeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(TEMPLATES_DIR),
            lstrip_blocks=True,
            trim_blocks=True,
        )

    @abstractmethod
    def generate(self, mapping: MappingConfig, context: GenerationContext | None = None) -> str:
        """
        Generate a complete module for one mapping.

        Args:
            mapping: The mapping to generate
            context: Run state; a fresh one is used when omitted

        Returns:
            Formatted source code
        """

    @abstractmethod
    def generate_body(self, mapping: MappingConfig, context: GenerationContext) -> str:
        """
        Generate the definitions for one mapping without the preamble.

        Args:
            mapping: The mapping to generate
            context: Run state shared by all units of the output module

        Returns:
            Unformatted source code, empty if the type was already emitted
        """

    @abstractmethod
    def collect_imports(self, mapping: MappingConfig) -> set[ImportSpec]:
        """
        Collect the imports the generated code for a mapping needs.

        Args:
            mapping: The mapping to generate

        Returns:
            Set of import specs
        """

    def generation_comment(self) -> str:
        """Generate a command line comment for the generated file"""
        if not self.config.add_generation_comment:
            return ""

        from ... import __version__
        from ...cli_utils import reconstruct_command_line

        try:
            from ...modelgen import modelgen as click_command  # noqa

            command_line = reconstruct_command_line(click_command)
        except (ImportError, AttributeError):
            command_line = "modelgen"

        return f"# Generated by modelgen v{__version__} : {command_line}"

    def render_preamble(self, imports: Iterable[ImportSpec], generation_comment: str = "") -> str:
        """Render the generation comment and import block."""
        template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        return template.render(
            generation_comment=generation_comment,
            import_groups=assemble_imports(imports),
        )
