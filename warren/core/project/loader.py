"""
Loader del manifiesto declarativo
Carga warren.yaml, valida cada declaración y la convierte a modelos Pydantic
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from warren.core.errors import ConfigError, ValidationError
from warren.core.project.models import Manifest, ResourceKind
from warren.core.project.validator import ValidationResult, validate_declaration


# Sección del manifiesto -> tipo de recurso
SECTIONS = {
    "user_permissions": ResourceKind.USER_PERMISSIONS.value,
    "exchanges": ResourceKind.EXCHANGE.value,
}


class ManifestLoader:
    """Carga y valida el manifiesto declarativo"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> Dict[str, Any]:
        """Lee el YAML crudo."""
        if not self.path.exists():
            raise ConfigError(f"Manifiesto no encontrado: {self.path}")
        try:
            with open(self.path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Error al parsear YAML en {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"El manifiesto debe ser un diccionario: {self.path}")
        return data

    def validate(self, data: Dict[str, Any]) -> List[ValidationResult]:
        """Valida cada entrada de cada sección sin construir modelos."""
        results = []
        for section, kind in SECTIONS.items():
            entries = data.get(section) or []
            if not isinstance(entries, list):
                raise ConfigError(f"La sección '{section}' debe ser una lista")
            for entry in entries:
                results.append(validate_declaration(kind, entry))
        return results

    def load(self) -> Manifest:
        """
        Carga el manifiesto completo.

        Raises:
            ConfigError: archivo faltante o YAML inválido
            ValidationError: alguna declaración no cumple las reglas
        """
        data = self.read()
        unknown = set(data) - set(SECTIONS) - {"version"}
        if unknown:
            raise ConfigError(f"Secciones desconocidas en el manifiesto: {', '.join(sorted(unknown))}")

        errors = [r for r in self.validate(data) if not r.is_valid]
        if errors:
            raise ValidationError(
                "\n".join(f"{r.kind}[{r.name}]: {'; '.join(r.errors)}" for r in errors)
            )

        try:
            return Manifest(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Manifiesto inválido: {e}") from e


def load_manifest(path: Optional[Path]) -> Manifest:
    """Atajo: ManifestLoader(path).load()."""
    if path is None:
        raise ConfigError("No se indicó manifiesto")
    return ManifestLoader(path).load()
