"""
AST backends for code generation.
"""

from .base import AstBackend, ImportSpec, assemble_imports
from .python_ast_backend import PythonAstBackend

__all__ = ["AstBackend", "ImportSpec", "PythonAstBackend", "assemble_imports"]
