"""Persistence interfaces.

Concrete implementations live in `marketsignal.storage`.
"""

from .interfaces import AnalysisStore

__all__ = ["AnalysisStore"]
