"""
Core: lógica de negocio pura.

ENFORCEMENT (arquitectura limpia):
- Este paquete NO debe importar: warren.cli ni warren.providers.*.
- Permitido: typing, pathlib.Path, pydantic, yaml, warren.core.* (errors, runtime, project, infra).
- El único acceso a procesos externos es runtime.runner; nada más en core lanza comandos.
- Los providers y la CLI importan desde core; nunca al revés.
"""

from warren.core.errors import (
    WarrenError,
    ValidationError,
    ConfigError,
    ProviderError,
    ExternalToolError,
    ParseError,
)

__all__ = [
    "WarrenError",
    "ValidationError",
    "ConfigError",
    "ProviderError",
    "ExternalToolError",
    "ParseError",
]
