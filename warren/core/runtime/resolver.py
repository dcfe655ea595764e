"""
Resolución de configuración y rutas.

- Settings.from_env(): ejecutables, versión del broker, timeout y manifiesto.
- project_base(): directorio base del proyecto (donde vive warren.yaml / .env).

El core NO carga .env; eso lo hace la CLI antes de resolver.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from warren.core.errors import ConfigError


DEFAULT_MANIFEST = "warren.yaml"


class Settings(BaseModel):
    """Configuración de ejecución resuelta desde variables de entorno."""
    rabbitmqctl: str = Field("rabbitmqctl", description="Ejecutable rabbitmqctl")
    rabbitmqadmin: str = Field("rabbitmqadmin", description="Ejecutable rabbitmqadmin")
    rabbitmqadmin_config: Optional[str] = Field(None, description="Archivo -c de rabbitmqadmin")
    rabbitmq_version: Optional[str] = Field(
        None,
        description="Versión del broker; decide si se pasa --no-table-headers",
    )
    command_timeout: Optional[float] = Field(None, description="Timeout por comando en segundos")
    manifest: str = Field(DEFAULT_MANIFEST, description="Manifiesto declarativo")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Construye Settings desde WARREN_* (por defecto os.environ).

        Raises:
            ConfigError: si algún valor no es válido (ej: timeout no numérico)
        """
        env = os.environ if environ is None else environ
        data = {}
        mapping = {
            "WARREN_RABBITMQCTL": "rabbitmqctl",
            "WARREN_RABBITMQADMIN": "rabbitmqadmin",
            "WARREN_RABBITMQADMIN_CONFIG": "rabbitmqadmin_config",
            "WARREN_RABBITMQ_VERSION": "rabbitmq_version",
            "WARREN_COMMAND_TIMEOUT": "command_timeout",
            "WARREN_MANIFEST": "manifest",
        }
        for var, field in mapping.items():
            value = env.get(var, "").strip()
            if value:
                data[field] = value
        try:
            return cls(**data)
        except PydanticValidationError as e:
            raise ConfigError(f"Configuración inválida en variables WARREN_*: {e}") from e


def project_base(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Directorio base del proyecto.
    Resolución: WARREN_PROJECT_ROOT → primer ancestro de cwd con warren.yaml → cwd.
    """
    env = os.environ if environ is None else environ
    explicit = env.get("WARREN_PROJECT_ROOT", "").strip()
    if explicit:
        return Path(explicit).expanduser().resolve()

    cwd = Path.cwd()
    for d in [cwd] + list(cwd.parents):
        if (d / DEFAULT_MANIFEST).exists():
            return d.resolve()
    return cwd.resolve()
