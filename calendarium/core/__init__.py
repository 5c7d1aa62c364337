"""
Core module for Calendarium.

Exports the main configuration component.
"""

from calendarium.core.config import settings

__all__ = [
    # Config
    "settings",
]
