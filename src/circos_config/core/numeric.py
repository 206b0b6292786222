# src/circos_config/core/numeric.py
"""
Conversões numéricas canônicas entre texto de configuração e números.

Valores de configuração são sempre texto. Quando um estágio precisa
tratá-los como números (avaliador de expressões, unit engine, contadores),
a conversão passa por este módulo, garantindo uma única política:

    - texto numérico → int quando não há ponto decimal nem expoente,
      senão float
    - número → texto com até 15 dígitos significativos, sem ".0" para
      valores inteiros (o mesmo texto gravado em arquivos `.conf`)
"""

from __future__ import annotations

import math
import re
from typing import Optional, Union

Number = Union[int, float]

_NUMBER_RX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*$")


def parse_number(text: object) -> Optional[Number]:
    """Retorna o número representado por `text`, ou None se não for numérico."""
    if isinstance(text, bool):
        return int(text)
    if isinstance(text, (int, float)):
        return text
    if not isinstance(text, str) or not _NUMBER_RX.match(text):
        return None
    stripped = text.strip()
    if re.search(r"[.eE]", stripped):
        return float(stripped)
    return int(stripped)


def is_number(text: object) -> bool:
    return parse_number(text) is not None


def normalize_number(value: Number) -> Number:
    # 3.0 -> 3, preserva floats não inteiros
    if isinstance(value, float) and math.isfinite(value) and value.is_integer() and abs(value) < 1e15:
        return int(value)
    return value


def format_number(value: Number) -> str:
    value = normalize_number(value)
    if isinstance(value, int):
        return str(value)
    return format(value, ".15g")
