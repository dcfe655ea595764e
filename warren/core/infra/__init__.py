"""
Contratos y base para providers de recursos.

Los providers (user_permissions, exchange) implementan estos contratos;
el core no depende de ningún provider concreto.
"""

from warren.core.infra.contracts import ProviderContract, PlanResult
from warren.core.infra.base import BaseProvider

__all__ = ["ProviderContract", "PlanResult", "BaseProvider"]
