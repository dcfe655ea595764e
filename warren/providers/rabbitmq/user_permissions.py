"""
Provider de permisos de usuario (rabbitmqctl set_permissions / clear_permissions).

Una instancia reconcilia un único `user@vhost`:
- exists() resuelve el registro una sola vez desde el listado cacheado
- los getters leen de ese registro resuelto
- los setters solo preparan cambios; flush() los aplica en una única llamada
  a set_permissions, que no admite actualizaciones parciales
"""

from typing import Dict, List, Optional
from rich.console import Console

from warren.core.infra.base import BaseProvider
from warren.core.project.models import PERMISSION_FIELDS, UserPermissionsDeclaration
from warren.core.runtime.cache import ListingCache, default_cache
from warren.core.runtime.state import StateDiff
from warren.providers.rabbitmq.parser import GrantRecord, find_record, parse_listing
from warren.providers.rabbitmq.rabbitmqctl import Rabbitmqctl


# rabbitmqctl necesita un argumento por capacidad; esta es la forma de "ninguna"
EMPTY_PERMISSION = "''"


class ChangeSet:
    """Cambios preparados por los setters durante una pasada de convergencia"""

    def __init__(self):
        self._values: Dict[str, str] = {}

    def stage(self, field: str, value: str) -> None:
        if field not in PERMISSION_FIELDS:
            raise KeyError(field)
        self._values[field] = value

    def fields(self) -> List[str]:
        return [f for f in PERMISSION_FIELDS if f in self._values]

    def merged(self, observed: Optional[GrantRecord]) -> GrantRecord:
        """Valores preparados sobre los observados; sin registro, el resto queda vacío."""
        base = observed.as_dict() if observed else {f: EMPTY_PERMISSION for f in PERMISSION_FIELDS}
        base.update(self._values)
        return GrantRecord(**base)

    def clear(self) -> None:
        self._values.clear()

    def __bool__(self) -> bool:
        return bool(self._values)


class UserPermissionsProvider(BaseProvider):
    """Reconcilia los permisos configure/write/read de un usuario en un vhost"""

    kind = "user_permissions"

    def __init__(
        self,
        declaration: UserPermissionsDeclaration,
        ctl: Rabbitmqctl,
        cache: Optional[ListingCache] = None,
        console: Optional[Console] = None
    ):
        super().__init__(declaration, console)
        self.ctl = ctl
        self.cache = cache if cache is not None else default_cache
        self.changes = ChangeSet()
        self._record: Optional[GrantRecord] = None
        self._resolved = False

    @property
    def user(self) -> str:
        return self.declaration.user

    @property
    def vhost(self) -> str:
        return self.declaration.vhost

    def _listing(self) -> List[str]:
        # list_user_permissions <user> imprime una línea por vhost
        return self.cache.lines(
            self.kind,
            self.user,
            lambda: self.ctl.rabbitmqctl_list(self.kind, self.user),
        )

    def exists(self) -> Optional[GrantRecord]:
        """
        Registro de permisos de user@vhost, resuelto una sola vez por instancia.

        Returns:
            GrantRecord o None si el usuario no tiene permisos en el vhost

        Raises:
            ParseError: si el listado tiene líneas mal formadas o vhosts repetidos
            ExternalToolError: si rabbitmqctl falla
        """
        if not self._resolved:
            parsed = find_record(self._listing(), self.vhost, PERMISSION_FIELDS, self.kind)
            self._record = GrantRecord(**parsed.values) if parsed else None
            self._resolved = True
        return self._record

    def _observed(self, field: str) -> Optional[str]:
        record = self.exists()
        return getattr(record, field) if record else None

    @property
    def configure_permission(self) -> Optional[str]:
        return self._observed("configure")

    @configure_permission.setter
    def configure_permission(self, value: str) -> None:
        self.changes.stage("configure", value)

    @property
    def write_permission(self) -> Optional[str]:
        return self._observed("write")

    @write_permission.setter
    def write_permission(self, value: str) -> None:
        self.changes.stage("write", value)

    @property
    def read_permission(self) -> Optional[str]:
        return self._observed("read")

    @read_permission.setter
    def read_permission(self, value: str) -> None:
        self.changes.stage("read", value)

    def _set_permissions(self, record: GrantRecord) -> None:
        self.ctl.rabbitmqctl(
            "set_permissions", "-p", self.vhost, self.user,
            record.configure, record.write, record.read,
        )
        self._record = record
        self._resolved = True

    def create(self) -> None:
        """Una sola llamada con las tres capacidades; las no declaradas van vacías."""
        desired = self.declaration.desired_attributes()
        record = GrantRecord(**{f: desired.get(f, EMPTY_PERMISSION) for f in PERMISSION_FIELDS})
        self._set_permissions(record)
        self._report(f"[green]✔[/green] Permisos creados: [cyan]{self.user}@{self.vhost}[/cyan]")

    def destroy(self) -> None:
        self.ctl.rabbitmqctl("clear_permissions", "-p", self.vhost, self.user)
        self._record = None
        self._resolved = True
        self._report(f"[green]✔[/green] Permisos eliminados: [cyan]{self.user}@{self.vhost}[/cyan]")

    def flush(self) -> None:
        """
        Aplica los cambios preparados con una única llamada a set_permissions.

        Los campos no preparados conservan el valor observado en exists().
        Sin cambios preparados no hace nada.
        """
        if not self.changes:
            return
        fields = self.changes.fields()
        record = self.changes.merged(self.exists())
        self._set_permissions(record)
        self.changes.clear()
        self._report(
            f"[green]✔[/green] Permisos actualizados: [cyan]{self.user}@{self.vhost}[/cyan] "
            f"[dim]({', '.join(fields)})[/dim]"
        )

    def drift(self) -> List[StateDiff]:
        diffs = self.ensure_diff()
        if diffs or not self.should_exist:
            return diffs
        record = self.exists()
        for field, desired in self.declaration.desired_attributes().items():
            actual = getattr(record, field)
            if actual != desired:
                diffs.append(StateDiff(self.ref, f"{field}_permission", desired, actual, "warning"))
        return diffs


def list_user_permissions(
    user: str,
    ctl: Rabbitmqctl,
    cache: Optional[ListingCache] = None
) -> Dict[str, GrantRecord]:
    """
    Todos los permisos de un usuario: vhost -> GrantRecord.

    Raises:
        ParseError: si alguna línea está mal formada o hay vhosts repetidos
    """
    cache = cache if cache is not None else default_cache
    lines = cache.lines(
        UserPermissionsProvider.kind,
        user,
        lambda: ctl.rabbitmqctl_list(UserPermissionsProvider.kind, user),
    )
    records = parse_listing(lines, PERMISSION_FIELDS, UserPermissionsProvider.kind)
    return {vhost: GrantRecord(**values) for vhost, values in records.items()}
