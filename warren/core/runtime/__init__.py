"""
Runtime: configuración, ejecución de comandos externos, caché de listados y contratos de estado.
"""

from warren.core.runtime.resolver import Settings, project_base
from warren.core.runtime.runner import CommandRunner
from warren.core.runtime.cache import ListingCache, default_cache
from warren.core.runtime.state import StateDiff

__all__ = [
    "Settings",
    "project_base",
    "CommandRunner",
    "ListingCache",
    "default_cache",
    "StateDiff",
]
