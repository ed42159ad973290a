"""
Error types raised by the generation pipeline.

Every error is fatal for the generation unit it concerns: no partial
output is produced for that unit.
"""

from __future__ import annotations


class ModelgenError(Exception):
    """Base class for all pipeline errors."""


class DiscoveryError(ModelgenError):
    """Raised when a structure cannot be located or introspected.

    This can happen when:
    - The module or class cannot be imported or has no readable source
    - The class is not declared at module level
    - A field annotation uses a type the mapper cannot classify
    """


class ConfigError(ModelgenError):
    """Raised when a mapping configuration is inconsistent.

    Examples are renaming or omitting a field the source structure does not
    declare, or a field that is both omitted and renamed.
    """


class FormatError(ModelgenError):
    """Raised when generated code fails to parse or format.

    This points at a defect in the generator rather than a user error, so
    the raw (unformatted) source is kept on the exception and appended to
    the message.
    """

    def __init__(self, message: str, source: str):
        self.source = source
        super().__init__(f"{message}\nGenerated code:\n{source}")
