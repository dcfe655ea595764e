"""
Orquestación de convergencia: una pasada por cada recurso declarado.

Por recurso: exists (vía drift) → create / destroy / setters + un único flush.
Los errores de un recurso (ExternalToolError, ParseError) se registran en su
resultado y la pasada continúa con los recursos independientes; los que
dependen de un recurso fallido se omiten.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from rich.console import Console
from rich.markup import escape

from warren.core.errors import ProviderError
from warren.core.infra.contracts import PlanResult, ProviderContract
from warren.core.project.detector import merge_diffs
from warren.core.project.models import Declaration, Ensure
from warren.core.project.planner import (
    declaration_ref,
    order_declarations,
    plan_from_diffs,
    requirements,
)
from warren.core.runtime.cache import ListingCache, default_cache
from warren.core.runtime.state import StateDiff
from warren.providers import PROVIDERS, build_provider
from warren.providers.rabbitmq.rabbitmqctl import Rabbitmqctl


UNCHANGED = "unchanged"
PLANNED = "planned"
CREATED = "created"
DESTROYED = "destroyed"
UPDATED = "updated"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class ConvergenceResult:
    """Resultado de la pasada de convergencia de un recurso"""
    ref: str
    action: str
    diffs: List[StateDiff] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.action in (FAILED, SKIPPED)


def converge(provider: ProviderContract, dry_run: bool = False) -> ConvergenceResult:
    """
    Converge un recurso con como mucho una llamada mutante.

    Raises:
        ProviderError: si falla la herramienta externa o su salida no se puede parsear
    """
    diffs = provider.drift()
    actionable = [d for d in diffs if d.severity != "info"]
    if not actionable:
        return ConvergenceResult(provider.ref, UNCHANGED, diffs)
    if dry_run:
        return ConvergenceResult(provider.ref, PLANNED, diffs)

    ensure = next((d for d in actionable if d.field == "ensure"), None)
    if ensure is not None:
        if ensure.desired == Ensure.PRESENT.value:
            provider.create()
            return ConvergenceResult(provider.ref, CREATED, diffs)
        provider.destroy()
        return ConvergenceResult(provider.ref, DESTROYED, diffs)

    for d in actionable:
        setattr(provider, d.field, d.desired)
    provider.flush()
    return ConvergenceResult(provider.ref, UPDATED, diffs)


def run_pass(
    declarations: List[Declaration],
    ctl: Rabbitmqctl,
    cache: Optional[ListingCache] = None,
    console: Optional[Console] = None,
    dry_run: bool = False,
    fail_fast: bool = False
) -> List[ConvergenceResult]:
    """
    Ejecuta una pasada completa sobre todas las declaraciones, en orden de dependencias.

    La caché de listados se invalida al empezar: cada pasada parte del estado real.
    """
    cache = cache if cache is not None else default_cache
    for kind in PROVIDERS:
        cache.invalidate(kind)

    results: List[ConvergenceResult] = []
    failed_refs = set()

    for declaration in order_declarations(declarations):
        ref = declaration_ref(declaration)
        blocked = [r for r in requirements(declaration) if r in failed_refs]
        if blocked:
            failed_refs.add(ref)
            results.append(ConvergenceResult(ref, SKIPPED, error=f"Dependencia fallida: {', '.join(blocked)}"))
            if console:
                console.print(f"[yellow]⚠[/yellow] Omitido {escape(ref)}: dependencia fallida")
            continue

        provider = build_provider(declaration, ctl, cache=cache, console=console)
        try:
            result = converge(provider, dry_run=dry_run)
        except ProviderError as e:
            if fail_fast:
                raise
            failed_refs.add(ref)
            result = ConvergenceResult(ref, FAILED, error=str(e))
            if console:
                console.print(f"[red]✘[/red] {escape(ref)}: {escape(str(e))}")
        results.append(result)

    return results


def plan(
    declarations: List[Declaration],
    ctl: Rabbitmqctl,
    cache: Optional[ListingCache] = None,
    console: Optional[Console] = None
) -> PlanResult:
    """Calcula qué se aplicaría sin ejecutar ninguna llamada mutante."""
    results = run_pass(declarations, ctl, cache=cache, console=console, dry_run=True)
    diffs = merge_diffs([r.diffs for r in results])
    failed = [r for r in results if r.failed]
    summary = f"{len(plan_from_diffs(diffs))} acciones, {len(failed)} recursos con error"
    return PlanResult(actions=plan_from_diffs(diffs), diffs=diffs, summary=summary)
