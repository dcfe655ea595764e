"""
Providers: implementaciones concretas del contrato de core.infra.

build_provider() elige el provider según el tipo de la declaración.
"""

from typing import Optional
from rich.console import Console

from warren.core.errors import ValidationError
from warren.core.infra.contracts import ProviderContract
from warren.core.project.models import Declaration, ResourceKind
from warren.core.runtime.cache import ListingCache
from warren.providers.rabbitmq import ExchangeProvider, Rabbitmqctl, UserPermissionsProvider


PROVIDERS = {
    ResourceKind.USER_PERMISSIONS.value: UserPermissionsProvider,
    ResourceKind.EXCHANGE.value: ExchangeProvider,
}


def build_provider(
    declaration: Declaration,
    ctl: Rabbitmqctl,
    cache: Optional[ListingCache] = None,
    console: Optional[Console] = None
) -> ProviderContract:
    """Instancia el provider que reconcilia una declaración."""
    provider_cls = PROVIDERS.get(declaration.kind)
    if provider_cls is None:
        raise ValidationError(f"Sin provider para el tipo: {declaration.kind}")
    return provider_cls(declaration, ctl, cache=cache, console=console)


__all__ = ["PROVIDERS", "build_provider"]
