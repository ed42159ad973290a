"""
Ruff formatter for Python code.
"""

from __future__ import annotations

import logging
import subprocess

from ..config import FormatterConfig
from ..errors import FormatError
from .base import Formatter, check_syntax

logger = logging.getLogger(__name__)


class RuffFormatter(Formatter):
    """Formatter using the ruff command line for Python code."""

    def __init__(self):
        self._available = None

    def is_available(self) -> bool:
        """Check if ruff is installed."""
        if self._available is None:
            try:
                result = subprocess.run(
                    ["ruff", "--version"],
                    capture_output=True,
                    text=True,
                    timeout=5,
                )
                self._available = result.returncode == 0
            except (subprocess.SubprocessError, FileNotFoundError):
                self._available = False
        return self._available

    def _command(self, config: FormatterConfig) -> list[str]:
        cmd = ["ruff", "format", "--stdin-filename", "models.py"]
        if config.line_length:
            cmd.extend(["--line-length", str(config.line_length)])
        if config.target_version:
            cmd.extend(["--target-version", config.target_version])
        if not config.string_normalization:
            cmd.extend(["--config", "format.quote-style = 'preserve'"])
        if not config.magic_trailing_comma:
            cmd.extend(["--config", "format.skip-magic-trailing-comma = true"])
        return cmd

    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format Python code using ruff.

        Args:
            code: Python source code to format
            config: Formatter configuration

        Returns:
            Formatted code

        Raises:
            FormatError: If the code is not valid Python
        """
        # ruff may be missing or fail for reasons unrelated to the code
        check_syntax(code)

        if not self.is_available():
            logger.warning("ruff is not installed, leaving generated code unformatted")
            return code

        result = subprocess.run(
            self._command(config),
            input=code,
            capture_output=True,
            text=True,
            timeout=30,
        )
        if result.returncode != 0:
            raise FormatError(f"ruff format failed: {result.stderr.strip()}", code)
        return result.stdout
