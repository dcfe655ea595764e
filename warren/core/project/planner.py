"""
Planificación: dependencias implícitas, orden de convergencia y plan legible.

Lógica pura: entrada = declaraciones + diffs; salida = orden y acciones.
La ejecución la hacen los providers.
"""

from typing import Dict, List

from warren.core.errors import ValidationError
from warren.core.project.models import (
    Declaration,
    ExchangeDeclaration,
    ResourceKind,
    UserPermissionsDeclaration,
    resource_ref,
)
from warren.core.runtime.state import StateDiff


def declaration_ref(declaration: Declaration) -> str:
    return resource_ref(declaration.kind, declaration.name)


def requirements(declaration: Declaration) -> List[str]:
    """
    Aristas implícitas de dependencia de una declaración.

    - user_permissions → vhost, user
    - exchange → vhost, user, user_permissions de user@vhost
    """
    if isinstance(declaration, UserPermissionsDeclaration):
        return [
            resource_ref("vhost", declaration.vhost),
            resource_ref("user", declaration.user),
        ]
    if isinstance(declaration, ExchangeDeclaration):
        return [
            resource_ref("vhost", declaration.vhost),
            resource_ref("user", declaration.user),
            resource_ref(ResourceKind.USER_PERMISSIONS.value, f"{declaration.user}@{declaration.vhost}"),
        ]
    return []


def order_declarations(declarations: List[Declaration]) -> List[Declaration]:
    """
    Ordena declaraciones para que cada una vaya después de las que requiere.

    Solo cuentan las aristas hacia recursos declarados; el resto (vhosts,
    usuarios) se asume existente. Estable respecto al orden de entrada.

    Raises:
        ValidationError: si hay títulos duplicados o un ciclo
    """
    by_ref: Dict[str, Declaration] = {}
    for declaration in declarations:
        ref = declaration_ref(declaration)
        if ref in by_ref:
            raise ValidationError(f"Recurso declarado dos veces: {ref}")
        by_ref[ref] = declaration

    pending: Dict[str, List[str]] = {
        ref: [r for r in requirements(d) if r in by_ref and r != ref]
        for ref, d in by_ref.items()
    }

    ordered: List[Declaration] = []
    done = set()
    while pending:
        ready = [ref for ref, reqs in pending.items() if all(r in done for r in reqs)]
        if not ready:
            raise ValidationError(f"Dependencias cíclicas entre: {', '.join(pending)}")
        for ref in ready:
            ordered.append(by_ref[ref])
            done.add(ref)
            del pending[ref]
    return ordered


def plan_from_diffs(diffs: List[StateDiff]) -> List[str]:
    """
    Convierte una lista de StateDiff en acciones legibles (para mostrar en CLI).
    No ejecuta nada.
    """
    actions: List[str] = []
    for d in diffs:
        if d.field == "ensure":
            verb = "Crear" if d.desired == "present" else "Eliminar"
            actions.append(f"{verb} {d.resource_id}")
        elif d.severity == "info":
            actions.append(f"Ignorar {d.resource_id}.{d.field}: {d.actual} → {d.desired} (solo al crear)")
        elif d.desired != d.actual:
            actions.append(f"Actualizar {d.resource_id}.{d.field}: {d.actual} → {d.desired}")
    return actions
