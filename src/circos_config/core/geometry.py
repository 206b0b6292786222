# src/circos_config/core/geometry.py
"""
Dicionário de geometria (DIMS).

O estágio de layout (colaborador externo) publica aqui, incrementalmente,
as dimensões já calculadas: raios de ideogramas, breakpoints, posições de
trilhas. O resolver de expressões consulta esses valores por caminho
(`dims(ideogram,default,radius)`), sempre em modo somente-leitura.

Invariantes:
    - Um caminho consultado antes de ser publicado é erro fatal,
      nunca um valor default ou obsoleto
    - Folhas são números; nós intermediários são mapas
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from circos_config.core.exceptions import ResolutionError
from circos_config.core.numeric import Number, parse_number


class Dims:
    """Mapa aninhado caminho → valor numérico."""

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = {}
        if data:
            self._merge(self._data, data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dims":
        return cls(data)

    def _merge(self, target: Dict[str, Any], source: Dict[str, Any]) -> None:
        for key, value in source.items():
            if isinstance(value, dict):
                self._merge(target.setdefault(str(key), {}), value)
            else:
                target[str(key)] = value

    def set(self, *path_and_value: Any) -> None:
        """dims.set("ideogram", "default", "radius", 500)"""
        if len(path_and_value) < 2:
            raise ValueError("set() requires a path and a value")
        *path, value = path_and_value
        node = self._data
        for key in path[:-1]:
            child = node.setdefault(str(key), {})
            if not isinstance(child, dict):
                raise ValueError(f"dimension [{key}] is a value, not a group")
            node = child
        node[str(path[-1])] = value

    def has(self, *path: str) -> bool:
        node: Any = self._data
        for key in path:
            if not isinstance(node, dict) or str(key) not in node:
                return False
            node = node[str(key)]
        return True

    def get(self, *path: str) -> Number:
        node: Any = self._data
        for key in path:
            if not isinstance(node, dict) or str(key) not in node:
                raise ResolutionError(
                    f"dimension [{','.join(str(p) for p in path)}] is not defined",
                    details={"path": [str(p) for p in path]},
                    hint="Geometry must be computed before expressions reference it.",
                )
            node = node[str(key)]
        number = parse_number(node)
        if number is None:
            raise ResolutionError(
                f"dimension [{','.join(str(p) for p in path)}] is not a number",
                details={"path": [str(p) for p in path]},
            )
        return number

    def as_dict(self) -> Dict[str, Any]:
        return self._data
