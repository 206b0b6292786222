"""
circos-config: Canonical Error Structures (v1)

Este módulo define o payload canônico de erro do circos-config e sua
renderização textual.

Toda falha do núcleo é fatal. Para o operador, a falha é apresentada como
um relatório em caixa, seguido de instruções de depuração:

    *** CIRCOS ERROR ***
    ...mensagem...
    *** CIRCOS ERROR ***

    If you are having trouble diagnosing this error, ...

Erros são:

- explícitos
- serializáveis
- acionáveis
"""

from __future__ import annotations

import textwrap
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from circos_config.core.config.errors import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigSyntaxError,
    IncludeNotFoundError,
)
from circos_config.core.exceptions import (
    CircosException,
    ConversionError,
    FormatError,
    MissingRequiredParameter,
    ResolutionError,
    StructuralError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CircosErrorPayload:
    """
    Payload canônico de erro.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem humana identificando chave, bloco ou expressão
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Estrutura
CONFIG_STRUCTURAL_ERROR = "CONFIG_STRUCTURAL_ERROR"
CONFIG_SYNTAX_ERROR = "CONFIG_SYNTAX_ERROR"

# Unidades
UNIT_FORMAT_ERROR = "UNIT_FORMAT_ERROR"
UNIT_CONVERSION_ERROR = "UNIT_CONVERSION_ERROR"

# Resolução / validação
EXPRESSION_RESOLUTION_ERROR = "EXPRESSION_RESOLUTION_ERROR"
MISSING_REQUIRED_PARAMETER = "MISSING_REQUIRED_PARAMETER"

# Arquivos
CONFIG_FILE_NOT_FOUND = "CONFIG_FILE_NOT_FOUND"
INCLUDE_NOT_FOUND = "INCLUDE_NOT_FOUND"
CONFIG_READ_ERROR = "CONFIG_READ_ERROR"

INTERNAL_ERROR = "INTERNAL_ERROR"

_EXCEPTION_TYPES = (
    (StructuralError, CONFIG_STRUCTURAL_ERROR),
    (FormatError, UNIT_FORMAT_ERROR),
    (ConversionError, UNIT_CONVERSION_ERROR),
    (ResolutionError, EXPRESSION_RESOLUTION_ERROR),
    (MissingRequiredParameter, MISSING_REQUIRED_PARAMETER),
    (ConfigFileNotFoundError, CONFIG_FILE_NOT_FOUND),
    (IncludeNotFoundError, INCLUDE_NOT_FOUND),
    (ConfigSyntaxError, CONFIG_SYNTAX_ERROR),
    (ConfigError, CONFIG_READ_ERROR),
)

DEBUG_HINT = """\
If you are having trouble diagnosing this error, enable debugging to follow
the resolution as it runs.

To turn on summary debugging messages, set

  debug = yes

To extend debugging to other components, list them in debug_group

  debug_group = summary,timer,counter,conf,unit

To show *all* debugging, use

  debug_group = _all"""


def exception_to_payload(exc: BaseException) -> CircosErrorPayload:
    """Mapeia qualquer exceção para o payload canônico."""
    error_type = INTERNAL_ERROR
    for cls, code in _EXCEPTION_TYPES:
        if isinstance(exc, cls):
            error_type = code
            break

    if isinstance(exc, CircosException):
        return CircosErrorPayload(
            type=error_type,
            message=exc.message,
            details=dict(exc.details),
            hint=exc.hint,
        )
    return CircosErrorPayload(
        type=error_type,
        message=str(exc),
        details={"exc_type": exc.__class__.__name__},
    )


def error_header(text: str = "error", width: int = 80) -> str:
    banner = f" CIRCOS {text.upper()} "
    return banner.center(width, "*")


def format_error_report(payload: CircosErrorPayload, *, width: int = 80, debug_hint: bool = True) -> str:
    """
    Relatório textual de um erro fatal.

    O corpo é quebrado em `width` colunas; `details` e `hint` vêm logo
    depois da mensagem.
    """
    lines: List[str] = [error_header("error", width), ""]
    lines.extend(textwrap.wrap(payload.message, width=width) or [""])
    if payload.details:
        lines.append("")
        for key in sorted(payload.details):
            value = payload.details[key]
            if isinstance(value, dict):
                # dump de blocos pode ser grande; só as chaves
                value = ", ".join(value)
            lines.append(f"  {key}: {value}")
    if payload.hint:
        lines.append("")
        lines.extend(textwrap.wrap(f"Hint: {payload.hint}", width=width))
    lines.extend(["", error_header("error", width)])
    if debug_hint:
        lines.extend(["", error_header("debugging", width), "", DEBUG_HINT, "", error_header("debugging", width)])
    return "\n".join(lines)
