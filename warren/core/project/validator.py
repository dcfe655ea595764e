"""
Validación de declaraciones (lógica pura).

Sin I/O; solo reglas sobre el conjunto de atributos declarado y su tipo.
Se ejecuta antes de cualquier llamada externa.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

from warren.core.errors import ValidationError
from warren.core.project.models import Ensure, ResourceKind


PERMISSIONS_NAME_PATTERN = re.compile(r"^\S+@\S+$")
EXCHANGE_NAME_PATTERN = re.compile(r"^\S*@\S+$")
TOKEN_PATTERN = re.compile(r"^\S+$")
PASSWORD_PATTERN = re.compile(r"\S+")

_PERMISSION_ATTRIBUTES = {"configure_permission", "write_permission", "read_permission"}
_EXCHANGE_ATTRIBUTES = {
    "type", "durable", "auto_delete", "internal", "arguments", "user", "password",
}


@dataclass
class ValidationResult:
    """Resultado de validar una declaración"""
    kind: str
    name: str
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Lanza ValidationError con todos los mensajes si hay errores."""
        if self.errors:
            detail = "; ".join(self.errors)
            raise ValidationError(f"{self.kind}[{self.name}]: {detail}")


def validate_declaration(kind: str, attributes: Dict[str, Any]) -> ValidationResult:
    """
    Valida un diccionario de atributos declarados para un tipo de recurso.
    Devuelve ValidationResult; si no tiene errores, es válido.
    """
    if not isinstance(attributes, dict):
        result = ValidationResult(kind=kind, name="")
        result.errors.append("La declaración debe ser un diccionario")
        return result

    name = attributes.get("name")
    result = ValidationResult(kind=kind, name=str(name) if name is not None else "")

    if kind not in {k.value for k in ResourceKind}:
        result.errors.append(f"Tipo de recurso desconocido: {kind}")
        return result

    ensure = attributes.get("ensure", Ensure.PRESENT.value)
    if ensure not in {e.value for e in Ensure}:
        result.errors.append(f"ensure debe ser present o absent, no {ensure!r}")

    if not isinstance(name, str):
        result.errors.append("'name' es requerido y debe ser una cadena")
        return result

    if kind == ResourceKind.USER_PERMISSIONS.value:
        _validate_user_permissions(attributes, result)
    else:
        _validate_exchange(attributes, ensure, result)

    return result


def _validate_user_permissions(attributes: Dict[str, Any], result: ValidationResult) -> None:
    if not PERMISSIONS_NAME_PATTERN.match(attributes["name"]):
        result.errors.append(f"El nombre debe tener la forma user@vhost: {attributes['name']!r}")

    for key in attributes:
        if key in ("name", "ensure", "kind"):
            continue
        if key not in _PERMISSION_ATTRIBUTES:
            result.errors.append(f"Atributo desconocido: {key}")

    for key in _PERMISSION_ATTRIBUTES:
        value = attributes.get(key)
        if value is not None and not isinstance(value, str):
            result.errors.append(f"'{key}' debe ser una cadena (regex)")


def _validate_exchange(attributes: Dict[str, Any], ensure: str, result: ValidationResult) -> None:
    if not EXCHANGE_NAME_PATTERN.match(attributes["name"]):
        result.errors.append(f"El nombre debe tener la forma exchange@vhost: {attributes['name']!r}")

    for key in attributes:
        if key in ("name", "ensure", "kind"):
            continue
        if key not in _EXCHANGE_ATTRIBUTES:
            result.errors.append(f"Atributo desconocido: {key}")

    exchange_type = attributes.get("type")
    if ensure == Ensure.PRESENT.value and exchange_type is None:
        result.errors.append(
            f"must set type when creating exchange for {attributes['name']} whose type is None"
        )
    elif exchange_type is not None and not TOKEN_PATTERN.match(str(exchange_type)):
        result.errors.append(f"type inválido: {exchange_type!r}")

    for flag in ("durable", "auto_delete", "internal"):
        value = attributes.get(flag)
        if value is not None and not isinstance(value, bool) and not TOKEN_PATTERN.match(str(value)):
            result.errors.append(f"'{flag}' inválido: {value!r}")

    user = attributes.get("user")
    if user is not None and not TOKEN_PATTERN.match(str(user)):
        result.errors.append(f"user inválido: {user!r}")

    password = attributes.get("password")
    if password is not None and not PASSWORD_PATTERN.search(str(password)):
        result.errors.append("password no puede estar vacío")

    arguments = attributes.get("arguments")
    if arguments is not None and not isinstance(arguments, dict):
        result.errors.append("'arguments' debe ser un diccionario")
