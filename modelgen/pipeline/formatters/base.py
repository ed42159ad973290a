"""
Base class for code formatters.
"""

from __future__ import annotations

import ast
from abc import ABC, abstractmethod

from ..config import FormatterConfig
from ..errors import FormatError


def check_syntax(code: str) -> None:
    """Raise FormatError if ``code`` is not valid Python."""
    try:
        ast.parse(code)
    except SyntaxError as e:
        raise FormatError(f"Generated code is not valid Python: {e}", code) from e


class Formatter(ABC):
    """Abstract base class for code formatters."""

    @abstractmethod
    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format the given code.

        Args:
            code: The source code to format
            config: Formatter configuration

        Returns:
            Formatted code

        Raises:
            FormatError: If the code cannot be parsed
        """

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if the formatter can be used.

        Returns:
            True if the formatter can be used
        """
