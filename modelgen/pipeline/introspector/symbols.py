"""
Module-level symbol table used to resolve annotation names.
"""

from __future__ import annotations

import ast

ENUM_BASES = {"enum.Enum", "enum.IntEnum", "enum.StrEnum", "enum.Flag", "enum.IntFlag"}
DATACLASS_DECORATORS = {"dataclasses.dataclass"}
FIELD_FUNCTIONS = {"dataclasses.field"}


class ModuleSymbols:
    """Names bound at module level: imports and class definitions.

    Statements nested in ``if`` / ``try`` blocks (``if TYPE_CHECKING:``) are
    included since annotations commonly rely on them.
    """

    def __init__(self, tree: ast.Module):
        self.imports: dict[str, str] = {}  # local name -> qualified name
        self.classes: dict[str, ast.ClassDef] = {}
        self._collect(tree.body)

    def _collect(self, body: list[ast.stmt]) -> None:
        for node in body:
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        self.imports[alias.asname] = alias.name
                    else:
                        head = alias.name.split(".")[0]
                        self.imports[head] = head
            elif isinstance(node, ast.ImportFrom):
                # relative imports keep their leading dots so they never match a known name
                module = "." * node.level + (node.module or "")
                for alias in node.names:
                    self.imports[alias.asname or alias.name] = f"{module}.{alias.name}"
            elif isinstance(node, ast.ClassDef):
                self.classes[node.name] = node
            elif isinstance(node, ast.If):
                self._collect(node.body)
                self._collect(node.orelse)
            elif isinstance(node, ast.Try):
                self._collect(node.body)
                for handler in node.handlers:
                    self._collect(handler.body)

    def qualify(self, node: ast.expr) -> str | None:
        """Resolve a ``Name`` or dotted ``Attribute`` to its qualified name.

        Names bound neither by an import nor a class keep their bare spelling
        (builtins such as ``int`` or ``list``).
        """
        if isinstance(node, ast.Name):
            if node.id in self.classes:
                return node.id
            return self.imports.get(node.id, node.id)
        if isinstance(node, ast.Attribute):
            head = self.qualify(node.value)
            if head is None:
                return None
            return f"{head}.{node.attr}"
        return None

    def is_local_class(self, name: str) -> bool:
        return name in self.classes

    def is_enum(self, name: str) -> bool:
        class_def = self.classes[name]
        for base in class_def.bases:
            qualified = self.qualify(base)
            if qualified in ENUM_BASES:
                return True
            if qualified in self.classes and qualified != name and self.is_enum(qualified):
                return True
        return False

    def local_bases(self, name: str) -> list[str]:
        """Names of the record base classes declared in the same module."""
        bases = []
        for base in self.classes[name].bases:
            if isinstance(base, ast.Name) and base.id in self.classes and base.id != name:
                bases.append(base.id)
        return bases

    def dataclass_decorator(self, name: str) -> ast.expr | None:
        """The ``@dataclass`` / ``@dataclass(...)`` decorator of a class, if any."""
        for decorator in self.classes[name].decorator_list:
            target = decorator.func if isinstance(decorator, ast.Call) else decorator
            if self.qualify(target) in DATACLASS_DECORATORS:
                return decorator
        return None

    def is_dataclass(self, name: str) -> bool:
        return self.dataclass_decorator(name) is not None

    def is_field_call(self, node: ast.expr | None) -> bool:
        return isinstance(node, ast.Call) and self.qualify(node.func) in FIELD_FUNCTIONS
