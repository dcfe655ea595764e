"""
Base opcional para providers: implementación por defecto de métodos comunes.

Los providers pueden heredar de aquí o implementar solo el contrato (Protocol).
"""

from typing import Any, List, Optional
from rich.console import Console

from warren.core.project.models import Ensure, resource_ref
from warren.core.runtime.state import StateDiff


class BaseProvider:
    """Base opcional para providers; no obligatorio usar herencia."""

    kind: str = "base"

    def __init__(self, declaration: Any, console: Optional[Console] = None):
        self.declaration = declaration
        self.console = console

    @property
    def ref(self) -> str:
        return resource_ref(self.kind, self.declaration.name)

    @property
    def should_exist(self) -> bool:
        return self.declaration.ensure == Ensure.PRESENT.value

    def exists(self) -> Optional[Any]:
        """Por defecto: no existe."""
        return None

    def flush(self) -> None:
        """Por defecto: nada que aplicar."""
        return None

    def ensure_diff(self) -> List[StateDiff]:
        """Diff de existencia (ensure) o lista vacía si coincide."""
        present = self.exists() is not None
        if self.should_exist and not present:
            return [StateDiff(self.ref, "ensure", Ensure.PRESENT.value, Ensure.ABSENT.value, "error")]
        if not self.should_exist and present:
            return [StateDiff(self.ref, "ensure", Ensure.ABSENT.value, Ensure.PRESENT.value, "error")]
        return []

    def drift(self) -> List[StateDiff]:
        """Por defecto: solo existencia."""
        return self.ensure_diff()

    def _report(self, message: str) -> None:
        if self.console:
            self.console.print(message)
