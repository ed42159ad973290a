"""
Post-processing formatters for generated code.
"""

from __future__ import annotations

from ..config import FormatterConfig, FormatterTool
from .base import Formatter, check_syntax
from .black_formatter import BlackFormatter
from .ruff_formatter import RuffFormatter

__all__ = [
    "Formatter",
    "BlackFormatter",
    "RuffFormatter",
    "check_syntax",
    "format_code",
    "get_formatter",
]


def get_formatter(tool: FormatterTool) -> Formatter:
    if tool == FormatterTool.RUFF:
        return RuffFormatter()
    return BlackFormatter()


def format_code(code: str, config: FormatterConfig) -> str:
    """Syntax-check and, when enabled, format generated code.

    Raises:
        FormatError: If the code is not valid Python
    """
    if not config.enabled:
        check_syntax(code)
        return code
    return get_formatter(config.tool).format(code, config)
