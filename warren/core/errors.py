"""
Errores de warren.

El core solo define excepciones; las capas (CLI) se encargan del formato de salida.
"""

from typing import List, Optional, Sequence


_SECRET_OPTIONS = ("--password=",)


def masked(command: Sequence[str]) -> List[str]:
    """Copia del vector apta para mostrar: oculta el valor de las opciones con secretos."""
    return [
        next((f"{opt}****" for opt in _SECRET_OPTIONS if arg.startswith(opt)), arg)
        for arg in command
    ]


class WarrenError(Exception):
    """Error base de warren."""
    pass


class ValidationError(WarrenError):
    """Error de validación de declaraciones o modelos."""
    pass


class ConfigError(WarrenError):
    """Error de configuración (manifiesto faltante, formato inválido)."""
    pass


class ProviderError(WarrenError):
    """Error delegado desde un provider (rabbitmqctl, rabbitmqadmin)."""
    pass


class ExternalToolError(ProviderError):
    """
    La herramienta de control no pudo lanzarse o terminó con código distinto de cero.

    Conserva el comando, el código de salida (None si no llegó a ejecutarse)
    y el stderr capturado para que la capa superior lo reporte.
    """

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = ""
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        if returncode is None:
            message = f"No se pudo ejecutar: {' '.join(masked(self.command))}"
        else:
            message = f"{' '.join(masked(self.command))} terminó con código {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ParseError(ProviderError):
    """La salida de un listado no tiene la forma tabular esperada."""
    pass
