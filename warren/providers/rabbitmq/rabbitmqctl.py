"""
Acceso a las herramientas de control de RabbitMQ (rabbitmqctl, rabbitmqadmin).
"""

import re
from typing import List, Optional, Tuple
from rich.console import Console

from warren.core.runtime.resolver import Settings
from warren.core.runtime.runner import CommandRunner


# Desde esta versión rabbitmqctl imprime cabeceras salvo --no-table-headers
TABLE_HEADERS_VERSION = (3, 7, 9)


def version_tuple(version: str) -> Tuple[int, ...]:
    """'3.8.2+rc1' -> (3, 8, 2)"""
    parts = []
    for part in version.split("."):
        match = re.match(r"\d+", part)
        if not match:
            break
        parts.append(int(match.group(0)))
    return tuple(parts)


class Rabbitmqctl:
    """Envoltorio de rabbitmqctl/rabbitmqadmin sobre CommandRunner"""

    def __init__(
        self,
        runner: CommandRunner,
        admin_runner: Optional[CommandRunner] = None,
        version: Optional[str] = None,
        admin_config: Optional[str] = None
    ):
        self.runner = runner
        self.admin_runner = admin_runner or CommandRunner("rabbitmqadmin", timeout=runner.timeout, console=runner.console)
        self.version = version
        self.admin_config = admin_config

    @classmethod
    def from_settings(cls, settings: Settings, console: Optional[Console] = None) -> "Rabbitmqctl":
        return cls(
            CommandRunner(settings.rabbitmqctl, timeout=settings.command_timeout, console=console),
            CommandRunner(settings.rabbitmqadmin, timeout=settings.command_timeout, console=console),
            version=settings.rabbitmq_version,
            admin_config=settings.rabbitmqadmin_config,
        )

    def list_options(self) -> List[str]:
        """-q siempre; --no-table-headers si la versión lo soporta (o es desconocida)."""
        if self.version and version_tuple(self.version) < TABLE_HEADERS_VERSION:
            return ["-q"]
        return ["-q", "--no-table-headers"]

    def rabbitmqctl(self, *args: str) -> str:
        return self.runner.run(*args)

    def rabbitmqctl_list(self, resource: str, *opts: str) -> str:
        """Ejecuta list_<resource> con las opciones de listado silencioso."""
        return self.rabbitmqctl(f"list_{resource}", *opts, *self.list_options())

    def rabbitmqadmin(self, *args: str) -> str:
        extra = ["-c", self.admin_config] if self.admin_config else []
        return self.admin_runner.run(*args, *extra)
