"""
Introspector module.

Locates a structure's source and classifies its fields.
"""

from __future__ import annotations

from .introspector import Introspector, load_module_source
from .symbols import ModuleSymbols

__all__ = [
    "Introspector",
    "ModuleSymbols",
    "load_module_source",
]
