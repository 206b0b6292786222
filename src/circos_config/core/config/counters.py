# src/circos_config/core/config/counters.py
"""
Subsistema de contadores nomeados.

Contadores atribuem índices ordinais a blocos repetidos à medida que a
árvore é percorrida (ex.: o terceiro `<plot>` vê `counter(plot) == 2`).
São disparados declarativamente por chaves reservadas encontradas pelo
resolver:

    init_counter           = name:value,...   (só define se ausente)
    pre_increment_counter  = name:delta,...   (antes dos filhos)
    pre_set_counter        = name:value,...   (antes dos filhos)
    post_increment_counter = name:delta,...   (depois dos filhos)
    post_set_counter       = name:value,...   (depois dos filhos)
    increment_counter      = delta            (passo por item repetido)

Invariantes:
    - Contadores são criados sob demanda e nunca resetados durante a resolução
    - Efeitos são imediatamente visíveis (execução single-thread)
    - A ordem de atribuição é a ordem de caminhada da árvore
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Union

from circos_config.core.exceptions import ResolutionError
from circos_config.core.numeric import Number, normalize_number, parse_number

if TYPE_CHECKING:  # pragma: no cover
    from circos_config.core.context import ResolutionContext


INIT_COUNTER = "init_counter"
PRE_INCREMENT_COUNTER = "pre_increment_counter"
PRE_SET_COUNTER = "pre_set_counter"
POST_INCREMENT_COUNTER = "post_increment_counter"
POST_SET_COUNTER = "post_set_counter"
INCREMENT_COUNTER = "increment_counter"

COUNTER_DIRECTIVES = (
    INIT_COUNTER,
    PRE_INCREMENT_COUNTER,
    PRE_SET_COUNTER,
    POST_INCREMENT_COUNTER,
    POST_SET_COUNTER,
    INCREMENT_COUNTER,
)


class IncrementPolicy(str, Enum):
    """
    Precedência de `increment_counter` quando pai e item o definem.

    - PARENT_FIRST: o valor do bloco pai vence (default)
    - ITEM_FIRST: o valor do próprio item repetido vence
    """

    PARENT_FIRST = "parent_first"
    ITEM_FIRST = "item_first"


def _as_amount(name: str, amount: Union[str, Number, None]) -> Number:
    value = parse_number(amount)
    if value is None:
        raise ResolutionError(
            f"Counter [{name}] received a non-numeric amount [{amount}]",
            details={"counter": name, "amount": amount},
        )
    return value


class CounterTable:
    """
    Tabela de contadores nomeados de uma resolução.

    A tabela não é global: pertence a um `ResolutionContext`, que a
    vincula via `bind` para registrar eventos do grupo `counter`.
    """

    def __init__(self, values: Optional[Dict[str, Number]] = None) -> None:
        self._values: Dict[str, Number] = dict(values or {})
        self._ctx: Optional["ResolutionContext"] = None

    def bind(self, ctx: "ResolutionContext") -> None:
        self._ctx = ctx

    def _log(self, message: str, name: str, amount: Number) -> None:
        if self._ctx is not None:
            self._ctx.log(group="counter", message=message, counter=name, amount=amount, now=self._values[name])

    # -----------------------------
    # Operações
    # -----------------------------
    def init(self, name: str, value: Union[str, Number]) -> None:
        amount = _as_amount(name, value)
        if name not in self._values:
            self._values[name] = normalize_number(amount)
        self._log("init counter", name, amount)

    def increment(self, name: str, delta: Union[str, Number] = 1) -> None:
        amount = _as_amount(name, delta)
        self._values[name] = normalize_number(self._values.get(name, 0) + amount)
        self._log("incrementing counter", name, amount)

    def set(self, name: str, value: Union[str, Number]) -> None:
        amount = _as_amount(name, value)
        self._values[name] = normalize_number(amount)
        self._log("set counter", name, amount)

    # -----------------------------
    # Leitura
    # -----------------------------
    def get(self, name: str, default: Optional[Number] = None) -> Optional[Number]:
        return self._values.get(name, default)

    def __getitem__(self, name: str) -> Number:
        if name not in self._values:
            raise ResolutionError(
                f"Counter [{name}] is not defined",
                details={"counter": name, "defined": sorted(self._values)},
            )
        return self._values[name]

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def as_dict(self) -> Dict[str, Number]:
        return dict(self._values)
