# src/circos_config/core/units/parse.py
"""
Resolver de expressões dimensionais.

Converte expressões com unidades e lookups de geometria em um número em
pixels (ou bases, para unidades de cromossomo):

    0.1r
    dims(ideogram,radius) + 0.075r
    dims(ideogram,radius_outer) - 50p
    2u + 500b

Etapas, na ordem:
    1. `ideogram,` vira `ideogram,<tag>,` (ou `ideogram,default,` sem contexto)
    2. cada `dims(a,b,...)` é substituído pelo valor do dicionário de geometria
    3. cada literal `<número><unidade>` é convertido para a base comum:
         u → b via `chromosomes_units`
         r → p via fator do raio de contexto; p → p sem consultar a geometria
    4. a aritmética resultante é avaliada pelo avaliador sandboxed

Escolha do fator relativo→pixel:
    - `relative` explícito vence tudo
    - senão `side` (inner / outer) escolhe radius_inner / radius_outer
    - senão pela magnitude: valor < 1 usa radius_inner, senão radius_outer

Invariantes:
    - expressão ausente (None) retorna None, distinto de 0
    - dimensão ausente é erro fatal (ResolutionError)
    - unidade sem fator é erro fatal (ConversionError)
"""

from __future__ import annotations

import re
from typing import Any, Optional, Union

from circos_config.core.config.tree import Block
from circos_config.core.exceptions import ResolutionError
from circos_config.core.expr.evaluator import ExpressionEvaluator
from circos_config.core.geometry import Dims
from circos_config.core.numeric import Number, format_number, parse_number
from circos_config.core.units.unit import DEFAULT_UNIT_POLICY, UnitPolicy, unit_convert, unit_split

_DIMS_RX = re.compile(r"dims\(([^)]+)\)")

RADIUS_INNER = "radius_inner"
RADIUS_OUTER = "radius_outer"


def ideogram_tag(ideogram: Any) -> Optional[str]:
    """Aceita um tag textual, um mapa com "tag" ou um objeto com `.tag`."""
    if ideogram is None or ideogram == "":
        return None
    if isinstance(ideogram, str):
        return ideogram
    if isinstance(ideogram, dict):
        tag = ideogram.get("tag")
    else:
        tag = getattr(ideogram, "tag", None)
    return None if tag is None else str(tag)


def radius_flag(side: Union[str, int, None]) -> Optional[str]:
    """
    Traduz `side` para a chave de raio.

    "-", 0, "" e textos contendo "inner" → radius_inner;
    "+", 1 e textos contendo "outer" → radius_outer; None → sem preferência.
    """
    if side is None:
        return None
    text = str(side).strip()
    if text in ("-", "0", "") or "inner" in text.lower():
        return RADIUS_INNER
    if text in ("+", "1") or "outer" in text.lower():
        return RADIUS_OUTER
    return None


class UnitParser:
    """
    Resolve expressões dimensionais contra a árvore e a geometria.

    Decisões arquiteturais:
        - árvore, geometria e política de unidades são explícitas
        - `chromosomes_units` é lido da raiz da árvore (default 1)
        - a avaliação final reutiliza `ExpressionEvaluator`, sem `eval`
    """

    def __init__(
        self,
        *,
        dims: Dims,
        tree: Optional[Block] = None,
        policy: Optional[UnitPolicy] = None,
        ctx: Any = None,
    ) -> None:
        self.dims = dims
        self.tree = tree
        self.policy = policy or DEFAULT_UNIT_POLICY
        self.ctx = ctx

    @property
    def chromosomes_units(self) -> Number:
        raw = self.tree.scalar("chromosomes_units") if self.tree is not None else None
        number = parse_number(raw) if raw not in (None, "") else 1
        if number is None:
            raise ResolutionError(
                f"chromosomes_units [{raw}] is not a number",
                details={"parameter": "chromosomes_units", "value": raw},
            )
        return number

    def _log(self, message: str, **extra: Any) -> None:
        if self.ctx is not None:
            self.ctx.log(group="unit", message=message, **extra)

    def parse(
        self,
        expression: Optional[str],
        ideogram: Any = None,
        side: Union[str, int, None] = None,
        relative: Optional[Number] = None,
    ) -> Optional[Number]:
        if expression is None:
            return None
        if self.ctx is not None:
            with self.ctx.timer("unitparse"):
                return self._parse(expression, ideogram, side, relative)
        return self._parse(expression, ideogram, side, relative)

    def _parse(
        self,
        expression: str,
        ideogram: Any,
        side: Union[str, int, None],
        relative: Optional[Number],
    ) -> Number:
        self._log("parse", expression=expression, side=side, relative=relative)
        tag = ideogram_tag(ideogram) or "default"
        flag = radius_flag(side)

        resolved = str(expression).replace("ideogram,", f"ideogram,{tag},")
        resolved = _DIMS_RX.sub(lambda m: self._dimension(m.group(1), expression), resolved)

        unit_rx = re.compile(
            r"(?<![\w.])((?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)([%s])(?![\w.])" % re.escape(self.policy.units_ok)
        )
        resolved = unit_rx.sub(
            lambda m: format_number(self._convert(m.group(0), tag, flag, relative)),
            resolved,
        )

        evaluator = ExpressionEvaluator(tree=self.tree, dims=self.dims)
        value = evaluator.evaluate(resolved)
        number = parse_number(value)
        if number is None:
            raise ResolutionError(
                f"expression [{expression}] did not resolve to a number (saw [{value}])",
                details={"expression": expression, "resolved": resolved},
            )
        self._log("parsed", expression=expression, value=number)
        return number

    def _dimension(self, args: str, expression: str) -> str:
        path = [arg.strip() for arg in args.split(",")]
        if not self.dims.has(*path):
            raise ResolutionError(
                f"dimension [{','.join(path)}] is not defined in expression {expression}",
                details={"path": path, "expression": expression},
                hint="Geometry must be computed before expressions reference it.",
            )
        return format_number(self.dims.get(*path))

    def _convert(self, token: str, tag: str, flag: Optional[str], relative: Optional[Number]) -> Number:
        magnitude, unit = unit_split(token, policy=self.policy)
        if unit == "u":
            return unit_convert(token, "b", {"ub": self.chromosomes_units}, policy=self.policy)
        if unit != "r":
            # p é identidade; b não tem fator para p (ConversionError)
            return unit_convert(token, "p", policy=self.policy)
        if relative:
            factor = relative
        else:
            default = RADIUS_INNER if magnitude < 1 else RADIUS_OUTER
            factor = self.dims.get("ideogram", tag, flag or default)
        return unit_convert(token, "p", {"rp": factor}, policy=self.policy)
