from __future__ import annotations

from .field_matcher import FieldMatcher

__all__ = ["FieldMatcher"]
