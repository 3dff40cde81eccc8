"""Instance sources feeding the rule filter."""

from .base import BaseInstanceSource
from .static import StaticInstanceSource

__all__ = [
    "BaseInstanceSource",
    "StaticInstanceSource",
]
