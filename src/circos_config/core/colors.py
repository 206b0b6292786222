# src/circos_config/core/colors.py
"""
Resolução de nomes de cor do bloco `<colors>`.

Uma cor pode ser definida diretamente ou em termos de outra:

    <colors>
      red       = 255,0,0
      sky       = hsv(200,0.5,1)
      favourite = red          # alias
      red_a3    ...            # sufixo _aN: nível de transparência N
    </colors>

Este módulo apenas resolve nomes e valida definições; a alocação de
paletas e a geração dos níveis de transparência são do colaborador de
desenho.

Invariantes:
    - Cadeias de alias circulares são ResolutionError, detectadas por um
      conjunto de nomes já visitados antes de qualquer recursão infinita
    - Nome desconhecido resolve para None, nunca para uma cor default
"""

from __future__ import annotations

import colorsys
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from circos_config.core.config.lists import str_to_list
from circos_config.core.config.tree import Block, Scalar, Sequence
from circos_config.core.context import ResolutionContext
from circos_config.core.exceptions import (
    FormatError,
    MissingRequiredParameter,
    ResolutionError,
    StructuralError,
)
from circos_config.core.numeric import Number, parse_number
from circos_config.core.utils import round_half_up

ColorTable = Union[Block, Mapping[str, str]]
RGB = Tuple[int, ...]

_RGB_RX = re.compile(r"^\s*\d+\s*,\s*\d+\s*,\s*\d+\s*(,\s*\d+)?\s*$")
_HSV_RX = re.compile(r"hsv\s*\(\s*(.+?)\s*\)", re.IGNORECASE)
_ALPHA_SUFFIX_RX = re.compile(r"^(.+)_a(\d+)$")


def _definitions(colors: ColorTable) -> Dict[str, str]:
    if isinstance(colors, Block):
        return {key: node.value for key, node in colors.items() if isinstance(node, Scalar)}
    return {str(key): str(value) for key, value in colors.items()}


def split_alpha_suffix(name: str) -> Tuple[str, Optional[int]]:
    """"red_a3" -> ("red", 3); "red" -> ("red", None)."""
    match = _ALPHA_SUFFIX_RX.match(name)
    if match is None:
        return name, None
    return match.group(1), int(match.group(2))


def resolve_color_definition(name: str, colors: ColorTable) -> Optional[str]:
    """
    Segue aliases nome → nome até uma definição que não é outro nome.

    Raises:
        ResolutionError: se a cadeia de aliases volta a um nome já visitado.
    """
    table = _definitions(colors)
    if name not in table:
        return None
    seen = {name}
    definition = table[name]
    while definition in table:
        if definition in seen:
            raise ResolutionError(
                f"You have a circular color definition in your <colors> block involving color "
                f"[{definition}] and [{table[definition]}]. While you can define one color in "
                "terms of another (e.g., red=255,0,0 and favourite=red), you must avoid loops "
                "(e.g. red=favourite and favourite=red)",
                details={"color": name, "chain": sorted(seen)},
            )
        seen.add(definition)
        definition = table[definition]
    return definition


def validate_rgb(definition: Any, strict: bool = False) -> Optional[RGB]:
    """
    "255,10,50" ou "255,10,50,100" -> tupla de inteiros.

    Raises:
        FormatError: com `strict`, se a definição não for r,g,b[,a] válido.
    """
    if isinstance(definition, (list, tuple)):
        values = [parse_number(v) for v in definition]
    elif isinstance(definition, str) and _RGB_RX.match(definition):
        values = [parse_number(v) for v in str_to_list(definition)]
    else:
        values = []

    ok = len(values) in (3, 4) and all(
        isinstance(v, int) and 0 <= v <= 255 for v in values
    )
    if ok and len(values) == 4 and values[3] > 127:  # type: ignore[operator]
        ok = False
    if ok:
        return tuple(values)  # type: ignore[arg-type]
    if strict:
        raise FormatError(
            f"Color definition [{definition}] is not in the correct format. You must use r,g,b "
            "(e.g. 255,10,50) or r,g,b,a (e.g. 255,10,50,100), where a is the alpha channel. "
            "r,g,b values must be 0-255 and alpha 0-127.",
            details={"definition": str(definition)},
        )
    return None


def validate_hsv(definition: Any, strict: bool = False) -> Optional[Tuple[Number, ...]]:
    """"hsv(60,1,0.5)" -> (60, 1, 0.5); alfa opcional como quarto valor."""
    match = _HSV_RX.search(definition) if isinstance(definition, str) else None
    values = [parse_number(v) for v in str_to_list(match.group(1))] if match else []
    ok = len(values) in (3, 4) and all(v is not None for v in values)
    if ok:
        h, s, v = values[0], values[1], values[2]
        ok = 0 <= h <= 360 and 0 <= s <= 1 and 0 <= v <= 1  # type: ignore[operator]
    if ok:
        return tuple(values)  # type: ignore[arg-type]
    if match is not None and strict:
        raise FormatError(
            f"HSV color definition [{definition}] is not in the correct format. You must use "
            "h,s,v (e.g. 60,1,0.5) or h,s,v,a (e.g. 0,1,0.5,100), where a is the alpha channel. "
            "h is in the range 0-360, s,v 0-1 and alpha 0-127.",
            details={"definition": definition},
        )
    return None


def hsv_to_rgb(h: Number, s: Number, v: Number, a: Optional[Number] = None) -> RGB:
    r, g, b = colorsys.hsv_to_rgb((h % 360) / 360.0, s, v)
    rgb = [round_half_up(channel * 255) for channel in (r, g, b)]
    if a is not None:
        rgb.append(int(a))
    return tuple(rgb)


def rgb_color(name: Optional[str], colors: ColorTable) -> Optional[RGB]:
    """
    Retorna os canais de uma cor pelo nome.

    O sufixo `_aN` é ignorado (a transparência é tratada por
    `rgb_color_opacity`). Nome desconhecido → None.
    """
    if name is None:
        return None
    root, _ = split_alpha_suffix(name)
    definition = resolve_color_definition(root, colors)
    if definition is None:
        return None
    rgb = validate_rgb(definition)
    if rgb is not None:
        return rgb
    hsv = validate_hsv(definition)
    if hsv is not None:
        return hsv_to_rgb(*hsv)
    return None


def rgb_color_opacity(name: Optional[str], image: Union[Block, Mapping[str, Any], None]) -> float:
    """
    Opacidade de uma cor: 1 para cores sem `_aN`, senão
    `1 - N / (auto_alpha_steps + 1)`.

    Raises:
        MissingRequiredParameter: `_aN` usado sem `auto_alpha_colors` e
            `auto_alpha_steps` no bloco `<image>`.
    """
    if name is None:
        return 1
    _, level = split_alpha_suffix(name)
    if level is None:
        return 1
    image = image if image is not None else {}
    if isinstance(image, Block):
        enabled, steps = image.scalar("auto_alpha_colors"), image.scalar("auto_alpha_steps")
    else:
        enabled, steps = image.get("auto_alpha_colors"), image.get("auto_alpha_steps")
    steps_value = parse_number(steps)
    if not parse_number(enabled) or not steps_value:
        raise MissingRequiredParameter(
            f"You are trying to process a transparent color ({name}) but do not have "
            "auto_alpha_colors or auto_alpha_steps defined",
            details={"color": name},
            hint="Set auto_alpha_colors = yes and auto_alpha_steps = 5 in the <image> block.",
        )
    return 1 - level / (1 + steps_value)


def rgb_color_transparency(name: Optional[str], image: Union[Block, Mapping[str, Any], None]) -> float:
    return 1 - rgb_color_opacity(name, image)


def normalize_color_block(colors: Block, ctx: Optional[ResolutionContext] = None) -> Block:
    """
    Colapsa definições repetidas de uma cor.

    Definições idênticas geram um warning e viram uma só; definições
    distintas são StructuralError. Um sub-bloco no lugar de uma cor
    também é StructuralError.
    """
    for name, node in colors.items():
        if isinstance(node, Block):
            raise StructuralError(
                f"The color [{name}] is not defined correctly. Saw a data structure instead of "
                "a simple color assignment.",
                details={"color": name},
            )
        if not isinstance(node, Sequence):
            continue
        unique: List[str] = []
        for item in node.items:
            value = item.value if isinstance(item, Scalar) else str(item)
            if value not in unique:
                unique.append(value)
        if len(unique) != 1:
            raise StructuralError(
                f"The color [{name}] has multiple distinct definitions: {' '.join(unique)} "
                "Please use only one of these.",
                details={"color": name, "definitions": unique},
            )
        if ctx is not None:
            ctx.add_warning(
                group="color",
                message=f"The color [{name}] has multiple identical definitions: {unique[0]}",
            )
        colors[name] = unique[0]
    return colors
