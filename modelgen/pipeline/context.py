"""
Per-run generation state.
"""

from __future__ import annotations


class GenerationContext:
    """Tracks the type names emitted into one output module.

    A run composes several mapping units into one module; a type reachable
    from more than one unit must be defined only once. Each name remembers
    the structure it was generated from (``apimodels.blog.Author``) so that
    two different structures sharing a name can be told apart. One context
    belongs to one run and is not shared between threads.
    """

    def __init__(self):
        self._emitted: dict[str, str] = {}

    def is_emitted(self, type_name: str) -> bool:
        return type_name in self._emitted

    def mark_emitted(self, type_name: str, source: str = "") -> None:
        self._emitted[type_name] = source

    def source_of(self, type_name: str) -> str | None:
        """Dotted path of the structure a name was generated from."""
        return self._emitted.get(type_name)

    @property
    def emitted(self) -> list[str]:
        """Emitted type names in emission order."""
        return list(self._emitted)
