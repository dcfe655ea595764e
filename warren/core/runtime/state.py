"""
Contratos de estado: diferencia entre estado deseado y real.

El core no lee el broker; eso lo hacen los providers. Aquí solo se define
la noción de diff; el contrato que la produce es core.infra.ProviderContract.
"""

from typing import Any


class StateDiff:
    """Diferencia entre estado deseado y real (agnóstico de provider)."""
    def __init__(
        self,
        resource_id: str,
        field: str,
        desired: Any,
        actual: Any,
        severity: str = "warning"
    ):
        self.resource_id = resource_id
        self.field = field
        self.desired = desired
        self.actual = actual
        self.severity = severity  # "error", "warning", "info"

    def __repr__(self) -> str:
        return (
            f"StateDiff({self.resource_id!r}, {self.field!r}, "
            f"desired={self.desired!r}, actual={self.actual!r}, severity={self.severity!r})"
        )
