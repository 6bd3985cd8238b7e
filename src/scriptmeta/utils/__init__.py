"""Utility modules for scriptmeta."""

from .screenplay import ScreenplayUtils

__all__ = ["ScreenplayUtils"]
