# src/circos_config/core/units/unit.py
"""
Unit engine: classificação, separação e conversão de valores com unidade.

Um valor com unidade é um texto numérico terminado em exatamente um
caractere de unidade:

    r : relativo (fração de um raio de contexto)
    p : pixel
    u : unidade de cromossomo (escala `chromosomes_units`)
    b : bases
    n : sem unidade (o valor termina em dígito)

O conjunto de unidades aceitas vem da política (`units_ok`,
`units_nounit`), normalmente declarada na própria configuração.

Decisões arquiteturais:
    - `unit_fetch` é a única função que verifica o conjunto aceito;
      todas as demais delegam a ela
    - Conversões exigem fator direto ou invertível fornecido pelo chamador;
      não existem conversões encadeadas implícitas

Invariantes:
    - Unidade fora do conjunto aceito é FormatError, nunca default silencioso
    - unit_split(v) == (m, t) implica unit_fetch(f"{m}{t}") == t
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple, Union

from circos_config.core.config.tree import Block
from circos_config.core.exceptions import ConversionError, FormatError, MissingRequiredParameter
from circos_config.core.numeric import Number, format_number, normalize_number, parse_number

ValueLike = Union[str, Number]


@dataclass(frozen=True)
class UnitPolicy:
    """Conjunto de unidades aceitas e a marca de "sem unidade"."""

    units_ok: str = "bupr"
    units_nounit: str = "n"

    @classmethod
    def from_tree(cls, tree: Block) -> "UnitPolicy":
        units_ok = tree.scalar("units_ok")
        units_nounit = tree.scalar("units_nounit")
        if not units_ok:
            raise MissingRequiredParameter(
                "The value of units_ok parameter is not defined",
                details={"parameter": "units_ok"},
                hint="Try setting it to units_ok = bupr",
            )
        if not units_nounit:
            raise MissingRequiredParameter(
                "The value of units_nounit parameter is not defined",
                details={"parameter": "units_nounit"},
                hint="Try setting it to units_nounit = n",
            )
        return cls(units_ok=units_ok, units_nounit=units_nounit)


DEFAULT_UNIT_POLICY = UnitPolicy()


def _text(value: ValueLike) -> str:
    return value if isinstance(value, str) else format_number(value)


def unit_fetch(value: ValueLike, param: Optional[str] = None, policy: UnitPolicy = DEFAULT_UNIT_POLICY) -> str:
    """
    Retorna a unidade de um valor.

    Returns:
        str: o caractere de unidade, ou `policy.units_nounit` quando o
        valor termina em dígito.

    Raises:
        FormatError: se o valor não termina nem em unidade aceita nem em dígito.
    """
    text = _text(value).strip()
    if text and text[-1] in policy.units_ok:
        return text[-1]
    if text and text[-1].isdigit():
        return policy.units_nounit
    raise FormatError(
        f"The parameter [{param}] value [{text}] is incorrectly formatted.",
        details={"parameter": param, "value": text, "units_ok": policy.units_ok},
    )


def unit_validate(
    value: ValueLike,
    units: Iterable[str],
    param: Optional[str] = None,
    policy: UnitPolicy = DEFAULT_UNIT_POLICY,
) -> str:
    """Garante que a unidade do valor está em `units`; retorna o valor."""
    allowed = list(units)
    if not allowed:
        raise ValueError("no units provided")
    unit = unit_fetch(value, param, policy)
    if unit not in allowed:
        raise FormatError(
            f"The parameter [{param}] value [{_text(value)}] does not have the correct unit "
            f"[saw {unit}], which should be one of {','.join(allowed)}",
            details={"parameter": param, "value": _text(value), "unit": unit, "allowed": allowed},
        )
    return _text(value)


def unit_strip(value: ValueLike, param: Optional[str] = None, policy: UnitPolicy = DEFAULT_UNIT_POLICY) -> str:
    text = _text(value).strip()
    unit = unit_fetch(text, param, policy)
    if text.endswith(unit):
        return text[: -len(unit)]
    return text


def unit_split(
    value: ValueLike, param: Optional[str] = None, policy: UnitPolicy = DEFAULT_UNIT_POLICY
) -> Tuple[Number, str]:
    """Separa `"0.5r"` em `(0.5, "r")`."""
    unit = unit_fetch(value, param, policy)
    stripped = unit_strip(value, param, policy)
    magnitude = parse_number(stripped)
    if magnitude is None:
        raise FormatError(
            f"The parameter [{param}] value [{_text(value)}] is incorrectly formatted.",
            details={"parameter": param, "value": _text(value)},
        )
    return magnitude, unit


def unit_test(unit: str, policy: UnitPolicy = DEFAULT_UNIT_POLICY) -> str:
    if (len(unit) == 1 and unit in policy.units_ok) or unit == policy.units_nounit:
        return unit
    raise FormatError(f"Unit [{unit}] fails format check.", details={"unit": unit})


def unit_convert(
    value: ValueLike,
    to: str,
    factors: Optional[Dict[str, Number]] = None,
    policy: UnitPolicy = DEFAULT_UNIT_POLICY,
) -> Number:
    """
    Converte um valor para a unidade `to`.

    Política:
        - fator `from+to` presente → multiplica
        - fator `to+from` presente → divide
        - mesma unidade → identidade
        - caso contrário → ConversionError

    Exemplo:
        unit_convert("10u", "b", {"ub": 1000}) -> 10000
    """
    magnitude, unit_from = unit_split(value, policy=policy)
    unit_to = unit_test(to, policy)
    factors = factors or {}

    direct = parse_number(factors.get(unit_from + unit_to))
    inverse = parse_number(factors.get(unit_to + unit_from))
    if direct is not None:
        return normalize_number(magnitude * direct)
    if inverse is not None:
        if inverse == 0:
            raise ConversionError(
                f"cannot convert unit [{unit_from}] to [{unit_to}] - conversion factor [{unit_to}{unit_from}] is zero",
                details={"from": unit_from, "to": unit_to},
            )
        return normalize_number(magnitude / inverse)
    if unit_from == unit_to:
        return magnitude
    raise ConversionError(
        f"cannot convert unit [{unit_from}] to [{unit_to}] - no conversion factor supplied",
        details={"from": unit_from, "to": unit_to, "factors": sorted(factors)},
    )
