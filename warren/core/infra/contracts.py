"""
Contratos que deben implementar los providers de recursos.

El core solo define interfaces; la implementación vive en warren/providers/*.
"""

from typing import Any, List, Optional, Protocol, runtime_checkable

from warren.core.runtime.state import StateDiff


class PlanResult:
    """Resultado de un plan (qué se aplicaría) sin ejecutar."""
    def __init__(
        self,
        actions: List[str],
        diffs: List[StateDiff],
        summary: str = ""
    ):
        self.actions = actions
        self.diffs = diffs
        self.summary = summary


@runtime_checkable
class ProviderContract(Protocol):
    """
    Contrato de un provider: una instancia reconcilia un solo recurso declarado.
    La orquestación llama exists → create/destroy o setters + flush.
    """
    @property
    def ref(self) -> str:
        """Referencia del recurso (ej: user_permissions[dan@myvhost])."""
        ...

    def exists(self) -> Optional[Any]:
        """Registro observado o None si no existe."""
        ...

    def create(self) -> None:
        ...

    def destroy(self) -> None:
        ...

    def flush(self) -> None:
        """Aplica en una sola llamada los cambios preparados por los setters."""
        ...

    def drift(self) -> List[StateDiff]:
        """Diferencias entre lo declarado y lo observado."""
        ...
