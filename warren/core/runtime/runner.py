"""
Command Runner: ejecuta la herramienta de control externa de forma segura.

Los argumentos se pasan como lista (sin shell) para que espacios o
metacaracteres en nombres de usuario/vhost no se interpreten.
Nunca reintenta; la política de reintentos es de quien llama.
"""

import subprocess
from typing import List, Optional
from rich.console import Console
from rich.markup import escape

from warren.core.errors import ExternalToolError, masked


class CommandRunner:
    """Invoca un ejecutable con un vector de argumentos y devuelve su stdout."""

    def __init__(
        self,
        executable: str,
        timeout: Optional[float] = None,
        console: Optional[Console] = None
    ):
        """
        Args:
            executable: Ruta o nombre del ejecutable (ej: rabbitmqctl)
            timeout: Timeout en segundos (None = sin límite)
            console: Console de Rich para eco de comandos
        """
        self.executable = executable
        self.timeout = timeout
        self.console = console

    def command(self, *args: str) -> List[str]:
        """Vector completo que se ejecutaría para estos argumentos."""
        return [self.executable, *[str(a) for a in args]]

    def run(self, *args: str) -> str:
        """
        Ejecuta el comando y devuelve stdout como texto.

        Raises:
            ExternalToolError: si no se pudo lanzar, expiró o salió con código != 0
        """
        command = self.command(*args)
        if self.console:
            self.console.print(f"[dim]$ {escape(' '.join(masked(command)))}[/dim]")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False
            )
        except subprocess.TimeoutExpired:
            raise ExternalToolError(command, None, f"Timeout tras {self.timeout}s")
        except FileNotFoundError:
            raise ExternalToolError(command, None, f"Comando no encontrado: {command[0]}")
        except OSError as e:
            raise ExternalToolError(command, None, str(e))

        if result.returncode != 0:
            raise ExternalToolError(command, result.returncode, result.stderr)

        return result.stdout or ""
