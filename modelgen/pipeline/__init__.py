"""
Pipeline - AST-based generator of local models from external structures.

This module provides a multi-phase architecture for generating local
dataclasses with conversion methods from existing Python structures:

1. Phase 1 (Introspector): Read a class into a StructInfo
2. Phase 2 (Builder): Apply rename / omit rules into a MappingConfig
3. Phase 3 (AST Backend): Build the local dataclass and its conversions as a Python AST
4. Phase 4 (Formatter): Post-processing with black or ruff
5. Phase 5 (Writer): Atomic write of the generated module
"""

from __future__ import annotations

from .ast_backends import PythonAstBackend
from .builder import MappingBuilder
from .config import FormatterConfig, FormatterTool, GeneratorConfig, MappingSpec, OutputConfig, OutputMode
from .context import GenerationContext
from .errors import ConfigError, DiscoveryError, FormatError, ModelgenError
from .generator import ModelGenerator
from .introspector import Introspector
from .mapper import FieldMatcher
from .model import FieldInfo, MappingConfig, StructInfo, TypeKind, TypeRef
from .writer import AtomicWriter

__all__ = [
    "ModelGenerator",
    "MappingBuilder",
    "Introspector",
    "FieldMatcher",
    "PythonAstBackend",
    "GenerationContext",
    "GeneratorConfig",
    "FormatterConfig",
    "FormatterTool",
    "MappingSpec",
    "OutputConfig",
    "OutputMode",
    "FieldInfo",
    "MappingConfig",
    "StructInfo",
    "TypeKind",
    "TypeRef",
    "ModelgenError",
    "DiscoveryError",
    "ConfigError",
    "FormatError",
    "AtomicWriter",
]
