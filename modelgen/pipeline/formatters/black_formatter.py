"""
Black formatter for Python code.
"""

from __future__ import annotations

import black

from ..config import FormatterConfig
from ..errors import FormatError
from .base import Formatter


class BlackFormatter(Formatter):
    """Formatter using black for Python code."""

    def is_available(self) -> bool:
        return True

    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format Python code using black.

        Args:
            code: Python source code to format
            config: Formatter configuration

        Returns:
            Formatted code

        Raises:
            FormatError: If black cannot parse the code
        """
        target_versions = set()
        if config.target_version:
            # Unknown targets (newer than the installed black) let black infer the version
            target = getattr(black.TargetVersion, config.target_version.upper(), None)
            if target is not None:
                target_versions.add(target)

        mode = black.Mode(
            target_versions=target_versions,
            line_length=config.line_length,
            string_normalization=config.string_normalization,
            magic_trailing_comma=config.magic_trailing_comma,
        )

        try:
            return black.format_str(code, mode=mode)
        except black.InvalidInput as e:
            raise FormatError(f"black could not parse generated code: {e}", code) from e
