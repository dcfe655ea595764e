"""
Listing Cache: memoiza la salida de los listados por (clase de objeto, scope).

Un solo listado sirve a todos los recursos de la misma clase durante una pasada.
La invalidación es explícita y ocurre entre pasadas: dentro de una pasada
dos lecturas del mismo scope ven siempre la misma instantánea.
"""

import threading
from typing import Callable, Dict, List, Optional


class ListingCache:
    """Tabla por clase de objeto: scope -> líneas crudas del listado."""

    def __init__(self):
        self._tables: Dict[str, Dict[str, List[str]]] = {}
        self._lock = threading.RLock()

    def lines(self, object_class: str, scope: str, loader: Callable[[], str]) -> List[str]:
        """
        Devuelve las líneas del listado para (object_class, scope).

        En el primer acceso llama a loader() y guarda el resultado; después
        devuelve siempre la misma instantánea sin volver a invocar la herramienta.
        Las líneas vacías se descartan.
        """
        with self._lock:
            table = self._tables.setdefault(object_class, {})
            if scope not in table:
                output = loader()
                table[scope] = [line for line in output.splitlines() if line.strip()]
            return table[scope]

    def cached(self, object_class: str, scope: str) -> Optional[List[str]]:
        """Líneas ya cargadas o None si nunca se listó ese scope."""
        with self._lock:
            return self._tables.get(object_class, {}).get(scope)

    def invalidate(self, object_class: str, scope: Optional[str] = None) -> None:
        """Descarta la tabla completa de una clase de objeto, o solo un scope."""
        with self._lock:
            if scope is None:
                self._tables.pop(object_class, None)
            else:
                self._tables.get(object_class, {}).pop(scope, None)

    def clear(self) -> None:
        """Descarta todas las tablas."""
        with self._lock:
            self._tables.clear()


# Caché compartida por defecto del proceso; los providers aceptan otra inyectada
default_cache = ListingCache()
