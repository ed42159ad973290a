"""modelgen

Generate local dataclasses mirroring external (API) structures, together
with the two conversion methods bridging them: ``from_external`` builds a
local instance from an external one and ``to_external`` converts back.
Fields can be renamed or omitted per mapping.
"""

__version__ = "0.3.0"

from .pipeline import (
    AtomicWriter,
    ConfigError,
    DiscoveryError,
    FormatError,
    FormatterConfig,
    GeneratorConfig,
    Introspector,
    MappingBuilder,
    MappingConfig,
    ModelGenerator,
    OutputConfig,
    OutputMode,
)

__all__ = [
    "ModelGenerator",
    "MappingBuilder",
    "MappingConfig",
    "Introspector",
    "GeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "OutputMode",
    "ConfigError",
    "DiscoveryError",
    "FormatError",
    "AtomicWriter",
]
