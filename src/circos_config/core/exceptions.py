"""
circos-config: Canonical Exceptions (v1)

Este módulo define as exceções tipadas do núcleo de resolução de
configuração.

Objetivo:
- Permitir que resolver, unit engine e validador levantem falhas semânticas tipadas
- Facilitar o mapeamento determinístico para CircosErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Regras:
- Toda falha aqui é fatal: não existe recuperação parcial nem retry.
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True, eq=False)
class CircosException(Exception):
    """Base class para exceções internas do circos-config.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve identificar a chave, bloco ou expressão ofensora
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Estrutura da árvore
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class StructuralError(CircosException):
    """Chave com espaço, multi-valor fora da whitelist ou colisão posicional."""


# ---------------------------------------------------------------------------
# Unidades
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class FormatError(CircosException):
    """Valor escalar sem unidade reconhecida e sem dígito final."""


@dataclass(frozen=True, eq=False)
class ConversionError(CircosException):
    """Conversão entre unidades sem fator direto ou invertível."""


# ---------------------------------------------------------------------------
# Resolução
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ResolutionError(CircosException):
    """Expressão embutida inválida, dimensão ausente ou alias circular."""


@dataclass(frozen=True, eq=False)
class MissingRequiredParameter(CircosException):
    """Parâmetro obrigatório ausente após a resolução completa."""
