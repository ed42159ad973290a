"""
Output writing for generated modules.
"""

from .atomic_writer import AtomicWriter

__all__ = ["AtomicWriter"]
