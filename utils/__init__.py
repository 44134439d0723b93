"""
Utilities

Shared helpers that don't belong to a single layer.
"""

from .config import load_config, get_fallback_config, get_section

__all__ = [
    "load_config",
    "get_fallback_config",
    "get_section",
]
