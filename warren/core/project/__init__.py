"""
Project: modelos declarativos, validación, planificación y detección de drift.

Lógica pura salvo loader (lee el manifiesto YAML); sin dependencias de CLI o providers.
"""

from warren.core.project.models import (
    Ensure,
    ResourceKind,
    ScopeKey,
    UserPermissionsDeclaration,
    ExchangeDeclaration,
    Manifest,
    PERMISSION_FIELDS,
)
from warren.core.project.validator import ValidationResult, validate_declaration
from warren.core.project.planner import order_declarations, requirements, plan_from_diffs
from warren.core.project.detector import merge_diffs
from warren.core.project.loader import ManifestLoader, load_manifest

__all__ = [
    "Ensure",
    "ResourceKind",
    "ScopeKey",
    "UserPermissionsDeclaration",
    "ExchangeDeclaration",
    "Manifest",
    "PERMISSION_FIELDS",
    "ValidationResult",
    "validate_declaration",
    "order_declarations",
    "requirements",
    "plan_from_diffs",
    "merge_diffs",
    "ManifestLoader",
    "load_manifest",
]
