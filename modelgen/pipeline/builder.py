"""
Fluent construction of mapping configurations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .model import MappingConfig, StructInfo

logger = logging.getLogger(__name__)


class MappingBuilder:
    """Collects rename and omit rules for one source structure.

    Usage:
        builder = MappingBuilder(source)
        mapping = builder.rename("ID", "external_id").omit("legacy_field").build()

    Args:
        source: The introspected external structure
        target_namespace: Namespace of the generated local structure
        on_build: Called with the built config, used by ModelGenerator.register
    """

    def __init__(
        self,
        source: StructInfo,
        target_namespace: str = "",
        on_build: Callable[[MappingConfig], object] | None = None,
    ):
        self.source = source
        self.target_namespace = target_namespace
        self._on_build = on_build
        self._field_map: dict[str, str] = {}
        self._omit: list[str] = []

    def rename(self, source_name: str, target_name: str) -> MappingBuilder:
        """Expose the source field under another name in the local structure."""
        if source_name in self._field_map:
            logger.debug(
                "%s.%s renamed again: %s replaces %s",
                self.source.qualified_name,
                source_name,
                target_name,
                self._field_map[source_name],
            )
        self._field_map[source_name] = target_name
        return self

    def omit(self, *source_names: str) -> MappingBuilder:
        """Leave source fields out of the local structure."""
        for name in source_names:
            if name not in self._omit:
                self._omit.append(name)
        return self

    def build(self) -> MappingConfig:
        """Validate the rules and produce the mapping.

        Raises:
            ConfigError: If a rule names an unknown field, a field is both
                omitted and renamed, or two fields map to the same name
        """
        mapping = MappingConfig.create(
            self.source,
            omit_fields=self._omit,
            field_map=self._field_map,
            target_namespace=self.target_namespace,
        )
        if self._on_build is not None:
            self._on_build(mapping)
        return mapping
