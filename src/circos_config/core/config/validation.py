# src/circos_config/core/config/validation.py
"""
Validação estrutural e defaults da configuração resolvida.

Três responsabilidades, executadas em momentos distintos:

    check_multivalues        → logo após resolver + overrides: detecta
                               parâmetros duplicados que viraram lista
    apply_structural_defaults → defaults mínimos de amostragem angular
    validate_configuration   → última etapa: variáveis `__name__` da raiz,
                               parâmetros obrigatórios e derivações de
                               `<image>`

Whitelist de blocos repetíveis:
    rule, tick, plot, radius, zoom, highlight

Invariantes:
    - Uma Sequence fora da whitelist é sempre StructuralError
    - Uma Sequence da whitelist só contém blocos (escalar misturado a
      bloco é colisão posicional)
"""

from __future__ import annotations

import re
from typing import Optional

from circos_config.core.config.tree import Block, Scalar, Sequence
from circos_config.core.context import ResolutionContext
from circos_config.core.exceptions import MissingRequiredParameter, ResolutionError, StructuralError
from circos_config.core.numeric import format_number, parse_number

REPEATABLE_BLOCKS = frozenset({"rule", "tick", "plot", "radius", "zoom", "highlight"})

STRUCTURAL_DEFAULTS = {
    "anglestep": "1",
    "minslicestep": "5",
}

IMAGE_INHERITED = (
    "image_map_name",
    "image_map_use",
    "image_map_file",
    "image_map_missing_parameter",
    "png",
    "svg",
)

_VARIABLE_RX = re.compile(r"^__(.+)__$")


def _truthy(value: Optional[str]) -> bool:
    if value is None or value == "":
        return False
    number = parse_number(value)
    return number != 0 if number is not None else True


def check_multivalues(tree: Block) -> None:
    """
    Rejeita parâmetros definidos mais de uma vez fora da whitelist.

    Raises:
        StructuralError: com a chave ofensora e o conteúdo do bloco.
    """
    for key, node in tree.items():
        if not isinstance(node, Sequence):
            continue
        if key not in REPEATABLE_BLOCKS:
            raise StructuralError(
                f"The configuration parameter [{key}] has been defined more than once in the block "
                "shown above, and has been interpreted as a list. This is not allowed. Did you "
                "forget to comment out an old value of the parameter?",
                details={"key": key, "block": tree.to_dict()},
            )
        if any(isinstance(item, Scalar) for item in node.items):
            raise StructuralError(
                f"The configuration parameter [{key}] is defined both as a value and as a block "
                "in the same block. These definitions collide.",
                details={"key": key, "block": tree.to_dict()},
            )

    for node in tree.entries.values():
        if isinstance(node, Block):
            check_multivalues(node)
        elif isinstance(node, Sequence):
            for item in node.blocks():
                check_multivalues(item)


def apply_structural_defaults(tree: Block) -> None:
    for key, default in STRUCTURAL_DEFAULTS.items():
        if not _truthy(tree.scalar(key)):
            tree[key] = default


def _substitute_root_variables(tree: Block) -> None:
    for key in tree.keys():
        match = _VARIABLE_RX.match(key)
        if match is None:
            continue
        value = tree.get(key)
        if not isinstance(value, Scalar):
            raise ResolutionError(
                f"Problem in configuration file: you want to use variable {key} ({match.group(1)}) "
                "in another parameter, but this variable is not defined",
                details={"variable": key},
            )
        for other, node in tree.items():
            if isinstance(node, Scalar) and key in node.value:
                tree[other] = node.value.replace(key, value.value)


def validate_configuration(tree: Block, ctx: Optional[ResolutionContext] = None) -> Block:
    """
    Última etapa da carga: obrigatórios, defaults e derivações.

    Raises:
        MissingRequiredParameter: `configfile` ou `karyotype` ausentes.
        ResolutionError: variável `__name__` referenciada mas sem valor.
    """
    ctx = ctx or ResolutionContext()
    _substitute_root_variables(tree)

    if _truthy(tree.scalar("debug")) and not tree.scalar("debug_group"):
        tree["debug_group"] = "summary,timer"
    ctx.configure_debug(debug=tree.scalar("debug"), debug_group=tree.scalar("debug_group"))

    for key in ("chromosomes_units", "svg_font_scale"):
        if not _truthy(tree.scalar(key)):
            tree[key] = "1"

    if not tree.scalar("configfile"):
        raise MissingRequiredParameter(
            "Error: no configuration file specified.",
            details={"parameter": "configfile"},
            hint="Pass the configuration file path to load_config().",
        )
    if not tree.scalar("karyotype"):
        raise MissingRequiredParameter(
            "Error: no karyotype file specified",
            details={"parameter": "karyotype"},
            hint="Set karyotype = path/to/karyotype.txt at the top level.",
        )

    image = tree.block("image")
    if image is None:
        image = Block()
        tree["image"] = image
    for key in IMAGE_INHERITED:
        if not _truthy(image.scalar(key)) and tree.scalar(key) is not None:
            image[key] = tree.scalar(key)
    image["24bit"] = "1"

    angle_offset = parse_number(image.scalar("angle_offset"))
    if angle_offset is not None and angle_offset > 0:
        image["angle_offset"] = format_number(angle_offset - 360)

    for key in ("chromosomes", "chromosomes_breaks", "chromosomes_radius"):
        if key not in tree:
            tree[key] = ""

    ctx.log(group="conf", message="validated configuration", keys=len(tree))
    return tree
