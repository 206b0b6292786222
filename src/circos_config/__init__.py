# src/circos_config/__init__.py
"""
circos-config: núcleo de configuração de um renderizador de diagramas
genômicos circulares.

Arquitetura em alto nível:
    - core.config  → parser, loader, resolver, overrides e validação
    - core.expr    → expressões embutidas sem `eval` do host
    - core.units   → unidades (r, p, u, b) e expressões dimensionais
    - core.context → contadores, eventos de debug, warnings e timers
    - core.colors  → nomes de cor, aliases e opacidade
    - core.errors  → payload canônico e relatório de erro fatal

Limites explícitos:
    - Não desenha nada: pixels, fontes e paletas são de colaboradores
    - Não calcula geometria; apenas consulta o dicionário DIMS
"""

from .core.colors import resolve_color_definition, rgb_color, rgb_color_opacity
from .core.config.loader import load_config, load_configuration, populate_configuration
from .core.config.tree import Block, Scalar, Sequence, fetch_configuration
from .core.context import ResolutionContext
from .core.errors import exception_to_payload, format_error_report
from .core.geometry import Dims
from .core.units.parse import UnitParser

__all__ = [
    "Block",
    "Dims",
    "ResolutionContext",
    "Scalar",
    "Sequence",
    "UnitParser",
    "exception_to_payload",
    "fetch_configuration",
    "format_error_report",
    "load_config",
    "load_configuration",
    "populate_configuration",
    "resolve_color_definition",
    "rgb_color",
    "rgb_color_opacity",
]
