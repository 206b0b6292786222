# src/circos_config/core/utils.py
"""
Utilitários compartilhados pelo núcleo e pelos colaboradores de desenho.

Funções pequenas e puras: remapeamento linear, arredondamento, ordenação
"natural" de textos, amostragem de listas por regex, busca de parâmetros
em cadeias de blocos e localização de arquivos auxiliares.
"""

from __future__ import annotations

import math
import os
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional, Pattern, Sequence as Seq, Union

from circos_config.core.config.errors import ConfigFileNotFoundError
from circos_config.core.config.tree import Block, Scalar, Sequence
from circos_config.core.numeric import Number, parse_number


# ---------------------------------------------------------------------------
# Arredondamento e remapeamento
# ---------------------------------------------------------------------------

def round_half_up(value: Number) -> int:
    """Arredonda com empate para longe do zero (2.5 -> 3, -2.5 -> -3)."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def round_custom(value: Number, round_type: Optional[str] = None) -> int:
    if round_type is None:
        return int(value)
    if round_type == "round":
        return round_half_up(value)
    if round_type == "floor":
        return math.floor(value)
    if round_type == "ceil":
        return math.ceil(value)
    raise ValueError(f"unknown rounding type [{round_type}]")


def round_up(value: Number) -> int:
    if value - int(value) > 0.5:
        return round_half_up(value)
    return 1 + int(value)


def remap(value: Number, vmin: Number, vmax: Number, remap_min: Number, remap_max: Number) -> float:
    """
    Mapeia linearmente `value` de [vmin, vmax] para [remap_min, remap_max].

    Valores fora do intervalo são saturados nas extremidades.
    """
    if value <= vmin:
        return remap_min
    if value >= vmax:
        return remap_max
    if vmin == vmax:
        if remap_min == remap_max:
            return remap_min
        raise ValueError(
            f"remap() with min=max ({vmin}={vmax}) only makes sense if remap_min=remap_max"
        )
    fraction = (value - vmin) / (vmax - vmin)
    return remap_min + fraction * (remap_max - remap_min)


def remap_int(*args: Number) -> int:
    return int(remap(*args))


def remap_round(*args: Number) -> int:
    return round_half_up(remap(*args))


# ---------------------------------------------------------------------------
# Texto
# ---------------------------------------------------------------------------

def add_thousands_separator(text: Union[str, Number], sep: str = ",") -> str:
    text = str(text)
    if "." in text:
        return re.sub(r"(?<=\d)(?=(\d{3})+\.)", sep, text)
    return re.sub(r"(?<=\d)(?=(\d{3})+$)", sep, text)


def extract_number(text: str) -> str:
    match = re.search(r"0*(\d+)", text)
    return match.group(1) if match else ""


def compare_str(x: str, y: str) -> int:
    """Compara numericamente quando ambos são números, senão lexicograficamente."""
    nx, ny = parse_number(x), parse_number(y)
    if nx is not None and ny is not None:
        return (nx > ny) - (nx < ny)
    return (x > y) - (x < y)


def compare_strs(list1: Seq[Optional[str]], list2: Seq[Optional[str]]) -> int:
    for a, b in zip(list1, list2):
        if a is None or b is None:
            return 0
        result = compare_str(a, b)
        if result:
            return result
    return 0


def parse_as_rx(text: str) -> Optional[Pattern[str]]:
    """`/regex/` (opcionalmente `-/regex/`) vira padrão compilado; senão None."""
    match = re.match(r"^-?/(.+)/$", text)
    if match is None:
        return None
    return re.compile(match.group(1))


def match_string(text: str, rx: Union[str, Pattern[str], None]) -> bool:
    if rx is None:
        return False
    if isinstance(rx, str):
        return text == rx
    return rx.search(text) is not None


def sample_list(rx: str, items: Iterable[str]) -> List[str]:
    """
    Retorna os itens que casam integralmente com `rx`, ordenados pelos
    grupos capturados. `rev(rx)` inverte a ordem final.

        sample_list(r"chr(\\d+)", ["chr10", "chr2", "x"]) -> ["chr2", "chr10"]
    """
    reverse = False
    wrapped = re.match(r"rev\((.+)\)", rx)
    if wrapped:
        rx, reverse = wrapped.group(1), True
    pattern = re.compile(rf"^(?:{rx})$")
    matches = []
    for item in items:
        found = pattern.match(item)
        if found:
            matches.append((item, list(found.groups())))

    def _key(entry: Any) -> Any:
        # ordenação estável por captura: números antes de texto
        return [
            (0, parse_number(c), "") if parse_number(c) is not None else (1, 0, c or "")
            for c in entry[1]
        ]

    result = [item for item, _ in sorted(matches, key=_key)]
    return list(reversed(result)) if reverse else result


# ---------------------------------------------------------------------------
# Parâmetros em cadeias de blocos
# ---------------------------------------------------------------------------

def _lookup(struct: Block, name: str) -> Optional[str]:
    param = struct.get("param")
    if isinstance(param, Block):
        node = param.get(name)
        if isinstance(node, Scalar):
            return node.value
    node = struct.get(name)
    if isinstance(node, Scalar):
        return node.value
    return None


def seek_parameter(param_name: str, *structures: Union[Block, Sequence, List[Block]]) -> Optional[str]:
    """
    Procura um parâmetro em uma cadeia de blocos, do mais específico ao
    mais genérico.

    `param_name` pode conter sinônimos separados por "|" ("x|y"): o
    primeiro sinônimo encontrado em qualquer estrutura vence. Em cada
    bloco, um sub-bloco `param` tem precedência sobre o próprio bloco.
    """
    for name in param_name.split("|"):
        for struct in structures:
            if isinstance(struct, Block):
                candidates: List[Any] = [struct]
            elif isinstance(struct, (Sequence, list)):
                candidates = list(struct)
            else:
                raise TypeError(
                    f"cannot extract parameter from this data structure ({type(struct).__name__})"
                )
            for candidate in candidates:
                if isinstance(candidate, Block):
                    value = _lookup(candidate, name)
                    if value is not None:
                        return value
    return None


def defined_and_zero(value: Optional[str]) -> bool:
    if value is None:
        return False
    number = parse_number(value)
    return value == "" or number == 0


def is_hidden(*structures: Union[Block, Sequence, List[Block]]) -> bool:
    return defined_and_zero(seek_parameter("show", *structures))


# ---------------------------------------------------------------------------
# Arquivos
# ---------------------------------------------------------------------------

def locate_file(file: Union[str, Path], dirs: Iterable[Union[str, Path]] = (), return_none: bool = False) -> Optional[Path]:
    """
    Localiza um arquivo auxiliar: primeiro o caminho dado, depois cada
    diretório de `dirs`, na ordem.

    Raises:
        ConfigFileNotFoundError: se o arquivo existe mas não é legível, ou
            se não foi encontrado e `return_none` é falso.
    """
    path = Path(file)
    if path.exists():
        if not os.access(path, os.R_OK):
            raise ConfigFileNotFoundError(
                f"File [{path}] exists, but cannot be read. Do you have permissions to read it?"
            )
        return path
    tried = [str(path)]
    for directory in dirs:
        candidate = Path(directory) / path
        tried.append(str(candidate))
        if candidate.exists() and os.access(candidate, os.R_OK):
            return candidate
    if return_none:
        return None
    raise ConfigFileNotFoundError(
        f"Could not locate file [{file}]. Tried: " + ", ".join(tried)
    )
