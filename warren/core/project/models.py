"""
Modelos de datos del sistema declarativo
Usa Pydantic para tipado y serialización; las reglas de negocio viven en validator.py
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Ensure(str, Enum):
    """Estado deseado de un recurso"""
    PRESENT = "present"
    ABSENT = "absent"


class ResourceKind(str, Enum):
    """Tipos de recurso que warren reconcilia"""
    USER_PERMISSIONS = "user_permissions"
    EXCHANGE = "exchange"


# Campos de capacidad en el orden posicional de set_permissions / list_user_permissions
PERMISSION_FIELDS = ("configure", "write", "read")


class ScopeKey(BaseModel):
    """Identidad compuesta `nombre@vhost` de un recurso (inmutable)."""
    model_config = ConfigDict(frozen=True)

    name: str
    vhost: str

    @classmethod
    def parse(cls, title: str) -> "ScopeKey":
        """Separa por el último '@' (los usuarios pueden contener '@', los vhosts no)."""
        name, sep, vhost = title.rpartition("@")
        if not sep:
            return cls(name=title, vhost="")
        return cls(name=name, vhost=vhost)

    def __str__(self) -> str:
        return f"{self.name}@{self.vhost}"


class UserPermissionsDeclaration(BaseModel):
    """Permisos declarados de un usuario sobre un vhost (`user@vhost`)"""
    model_config = ConfigDict(use_enum_values=True)

    kind: Literal["user_permissions"] = "user_permissions"
    name: str = Field(..., description="Título user@vhost")
    ensure: Ensure = Ensure.PRESENT
    configure_permission: Optional[str] = Field(None, description="Regex de configure")
    write_permission: Optional[str] = Field(None, description="Regex de write")
    read_permission: Optional[str] = Field(None, description="Regex de read")

    @property
    def scope(self) -> ScopeKey:
        return ScopeKey.parse(self.name)

    @property
    def user(self) -> str:
        return self.scope.name

    @property
    def vhost(self) -> str:
        return self.scope.vhost

    def desired_attributes(self) -> Dict[str, str]:
        """Solo las capacidades declaradas: configure/write/read -> valor."""
        desired = {}
        for field in PERMISSION_FIELDS:
            value = getattr(self, f"{field}_permission")
            if value is not None:
                desired[field] = value
        return desired


class ExchangeDeclaration(BaseModel):
    """Exchange declarado (`nombre@vhost`); sus atributos solo se aplican al crearlo"""
    model_config = ConfigDict(use_enum_values=True)

    kind: Literal["exchange"] = "exchange"
    name: str = Field(..., description="Título exchange@vhost (el exchange por defecto es vacío)")
    ensure: Ensure = Ensure.PRESENT
    type: Optional[str] = Field(None, description="direct | fanout | topic | headers | x-...")
    durable: str = "false"
    auto_delete: str = "false"
    internal: str = "false"
    arguments: Dict[str, Any] = Field(default_factory=dict)
    user: str = Field("guest", description="Usuario para conectar con rabbitmqadmin")
    password: str = Field("guest", description="Contraseña para conectar con rabbitmqadmin")

    @field_validator("durable", "auto_delete", "internal", mode="before")
    @classmethod
    def normalize_flag(cls, v):
        # YAML entrega true/false como bool; rabbitmqctl imprime "true"/"false"
        if isinstance(v, bool):
            return "true" if v else "false"
        return v

    @property
    def scope(self) -> ScopeKey:
        return ScopeKey.parse(self.name)

    @property
    def exchange(self) -> str:
        return self.scope.name

    @property
    def vhost(self) -> str:
        return self.scope.vhost

    def desired_attributes(self) -> Dict[str, Any]:
        desired: Dict[str, Any] = {
            "durable": self.durable,
            "auto_delete": self.auto_delete,
            "internal": self.internal,
            "arguments": self.arguments,
        }
        if self.type is not None:
            desired["type"] = self.type
        return desired


Declaration = Union[UserPermissionsDeclaration, ExchangeDeclaration]


class Manifest(BaseModel):
    """Manifiesto raíz (warren.yaml)"""
    version: int = Field(1, description="Versión del esquema")
    user_permissions: List[UserPermissionsDeclaration] = Field(default_factory=list)
    exchanges: List[ExchangeDeclaration] = Field(default_factory=list)

    def declarations(self) -> List[Declaration]:
        """Todas las declaraciones en orden de archivo (permisos primero)."""
        return [*self.user_permissions, *self.exchanges]


def resource_ref(kind: str, title: str) -> str:
    """Referencia legible de un recurso: kind[title]."""
    return f"{kind}[{title}]"
