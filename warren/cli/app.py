"""
Aplicación CLI de warren.

Solo compone comandos y formatea salida; la lógica vive en core y providers.
"""

from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from warren import __version__
from warren.core.errors import WarrenError
from warren.core.project.loader import ManifestLoader
from warren.core.runtime.cache import ListingCache
from warren.core.runtime.resolver import Settings, project_base
from warren.providers.orchestration import (
    CREATED,
    DESTROYED,
    FAILED,
    PLANNED,
    SKIPPED,
    UNCHANGED,
    UPDATED,
    ConvergenceResult,
    plan as plan_pass,
    run_pass,
)
from warren.providers.rabbitmq import Rabbitmqctl, list_user_permissions

app = typer.Typer(
    name="warren",
    help="warren - Reconciliación declarativa de permisos y exchanges de RabbitMQ",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

_ACTION_STYLE = {
    UNCHANGED: "[dim]sin cambios[/dim]",
    PLANNED: "[yellow]pendiente[/yellow]",
    CREATED: "[green]creado[/green]",
    DESTROYED: "[green]eliminado[/green]",
    UPDATED: "[green]actualizado[/green]",
    SKIPPED: "[yellow]omitido[/yellow]",
    FAILED: "[red]error[/red]",
}


def _settings() -> Settings:
    """Carga .env del proyecto y resuelve Settings desde WARREN_*."""
    env_file = project_base() / ".env"
    if env_file.exists():
        load_dotenv(env_file)
    return Settings.from_env()


def _manifest_path(manifest: Optional[Path], settings: Settings) -> Path:
    if manifest is not None:
        return manifest
    path = Path(settings.manifest)
    return path if path.is_absolute() else project_base() / path


def _fail(error: WarrenError) -> None:
    console.print(Panel.fit(f"[red]✘ {escape(str(error))}[/red]", title="Error", border_style="red"))
    raise typer.Exit(code=1)


def _render_results(results: List[ConvergenceResult], title: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Recurso", style="cyan")
    table.add_column("Acción")
    table.add_column("Detalles", style="yellow")

    for result in results:
        if result.error:
            details = escape(result.error)
        elif result.diffs:
            details = escape(", ".join(f"{d.field}: {d.actual} → {d.desired}" for d in result.diffs))
        else:
            details = "[dim]OK[/dim]"
        table.add_row(escape(result.ref), _ACTION_STYLE.get(result.action, result.action), details)

    console.print(table)


@app.command()
def version():
    """Muestra la versión de warren"""
    console.print(Panel.fit(
        "[bold cyan]warren[/bold cyan]\n"
        "[dim]Reconciliación declarativa sobre rabbitmqctl[/dim]\n\n"
        f"[bold]Versión:[/bold] {__version__}",
        border_style="cyan"
    ))


@app.command()
def validate(
    manifest: Optional[Path] = typer.Option(None, "--manifest", "-f", help="Manifiesto YAML (por defecto warren.yaml)"),
):
    """Valida el manifiesto sin contactar con el broker"""
    try:
        settings = _settings()
        loaded = ManifestLoader(_manifest_path(manifest, settings)).load()
    except WarrenError as e:
        _fail(e)
    console.print(f"[green]✔ Manifiesto válido:[/green] {len(loaded.declarations())} recursos")


@app.command()
def plan(
    manifest: Optional[Path] = typer.Option(None, "--manifest", "-f", help="Manifiesto YAML (por defecto warren.yaml)"),
):
    """
    Muestra qué cambios se aplicarían (sin ejecutar llamadas mutantes)

    Ejemplos:
        warren plan
        warren plan -f produccion.yaml
    """
    try:
        settings = _settings()
        loaded = ManifestLoader(_manifest_path(manifest, settings)).load()
        result = plan_pass(loaded.declarations(), Rabbitmqctl.from_settings(settings), cache=ListingCache(), console=console)
    except WarrenError as e:
        _fail(e)

    if not result.actions:
        console.print("[green]✅ No se detectó drift. Estado deseado y real coinciden.[/green]")
    for action in result.actions:
        console.print(f"  • {escape(action)}")
    console.print(f"[dim]{result.summary}[/dim]")


@app.command()
def apply(
    manifest: Optional[Path] = typer.Option(None, "--manifest", "-f", help="Manifiesto YAML (por defecto warren.yaml)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Solo calcula, no modifica el broker"),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Detiene la pasada en el primer error"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Muestra cada comando ejecutado"),
):
    """Converge el broker al estado declarado en el manifiesto"""
    console.print(Panel.fit("[bold cyan]warren apply[/bold cyan]", border_style="cyan"))
    if dry_run:
        console.print("[yellow]🔍 Modo DRY-RUN activado[/yellow]")

    try:
        settings = _settings()
        loaded = ManifestLoader(_manifest_path(manifest, settings)).load()
        ctl = Rabbitmqctl.from_settings(settings, console=console if verbose else None)
        results = run_pass(
            loaded.declarations(),
            ctl,
            cache=ListingCache(),
            console=console,
            dry_run=dry_run,
            fail_fast=fail_fast,
        )
    except WarrenError as e:
        _fail(e)

    _render_results(results, "Convergencia")

    failed = [r for r in results if r.failed]
    if failed:
        console.print(f"\n[yellow]⚠️ {len(failed)} recursos con errores[/yellow]")
        raise typer.Exit(code=1)
    console.print("\n[bold green]✅ Convergencia completada[/bold green]")


@app.command("list")
def list_permissions(
    user: str = typer.Argument(..., help="Usuario de RabbitMQ"),
):
    """Lista los permisos actuales de un usuario en todos sus vhosts"""
    try:
        settings = _settings()
        grants = list_user_permissions(user, Rabbitmqctl.from_settings(settings), cache=ListingCache())
    except WarrenError as e:
        _fail(e)

    table = Table(title=f"Permisos de {escape(user)}", show_header=True, header_style="bold cyan")
    table.add_column("Vhost", style="cyan")
    table.add_column("Configure", style="green")
    table.add_column("Write", style="green")
    table.add_column("Read", style="green")
    for vhost, record in grants.items():
        table.add_row(*(escape(value) for value in (vhost, record.configure, record.write, record.read)))
    console.print(table)


def main():
    app()
