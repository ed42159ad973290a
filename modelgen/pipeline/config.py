"""
Configuration for the model generator pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when the output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Default: raise error if file exists
    FORCE = "force"  # Overwrite


class FormatterTool(str, Enum):
    BLACK = "black"
    RUFF = "ruff"


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        validate_before_write: Whether to validate code before writing
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.ERROR_IF_EXISTS
    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class FormatterConfig:
    """Configuration for the post-processing formatter."""

    # Whether formatting is enabled (generated code is always syntax-checked)
    enabled: bool = True

    # Formatter used when enabled
    tool: FormatterTool = FormatterTool.BLACK

    # Line length for the formatter
    line_length: int = 100

    # Python version target (e.g., "py312", "py313")
    target_version: str = "py312"

    # Whether to use string normalization (convert single quotes to double)
    string_normalization: bool = True

    # Whether to honor magic trailing commas
    magic_trailing_comma: bool = True


@dataclass
class MappingSpec:
    """One mapping declared in a config file.

    Attributes:
        type: Class reference, ``package.module:Type``
        rename: Source field name -> local field name
        omit: Source field names left out of the local model
    """

    type: str = ""
    rename: dict[str, str] = field(default_factory=dict)
    omit: list[str] = field(default_factory=list)

    @staticmethod
    def from_dict(d: dict) -> MappingSpec:
        return MappingSpec(
            type=d["type"],
            rename=dict(d.get("rename", {})),
            omit=list(d.get("omit", [])),
        )

    def to_dict(self) -> dict:
        return {"type": self.type, "rename": self.rename, "omit": self.omit}


@dataclass
class GeneratorConfig:
    """Configuration options for code generation."""

    # Name of the package the generated module belongs to
    target_package: str = "models"

    # Add generation comment at top of file
    add_generation_comment: bool = True

    # Generate keyword-only dataclasses
    kw_only: bool = True

    # Name of the generated forward conversion classmethod
    from_method_name: str = "from_external"

    # Name of the generated reverse conversion method
    to_method_name: str = "to_external"

    # Add docstrings to generated classes and methods
    add_docstrings: bool = True

    # Generate a zero-config mapping for nested records with no registered mapping
    auto_map_nested: bool = True

    # Mappings to generate (used by the CLI)
    mappings: list[MappingSpec] = field(default_factory=list)

    # Formatter configuration
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                tool = v.get("tool", FormatterTool.BLACK)
                config.formatter = FormatterConfig(**{**v, "tool": FormatterTool(tool)})
            elif k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.ERROR_IF_EXISTS)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif k == "mappings":
                config.mappings = [MappingSpec.from_dict(m) for m in v]
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "target_package": self.target_package,
            "add_generation_comment": self.add_generation_comment,
            "kw_only": self.kw_only,
            "from_method_name": self.from_method_name,
            "to_method_name": self.to_method_name,
            "add_docstrings": self.add_docstrings,
            "auto_map_nested": self.auto_map_nested,
            "mappings": [m.to_dict() for m in self.mappings],
            "formatter": {
                "enabled": self.formatter.enabled,
                "tool": self.formatter.tool.value,
                "line_length": self.formatter.line_length,
                "target_version": self.formatter.target_version,
                "string_normalization": self.formatter.string_normalization,
                "magic_trailing_comma": self.formatter.magic_trailing_comma,
            },
            "output": {
                "mode": self.output.mode.value,
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
