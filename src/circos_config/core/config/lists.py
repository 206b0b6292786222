# src/circos_config/core/config/lists.py
"""
Parser de valores-lista embutidos em escalares.

Muitos parâmetros carregam listas dentro de um único texto:

    chromosomes_scale = hs1:0.5;hs2:0.25
    file              = a.txt, b.txt
    init_counter      = plot:0,track:10

Delimitadores default:
    - registro: `\\s*[;,]\\s*`
    - campo:    `\\s*[:=]\\s*`

A raiz da configuração pode redefini-los com `list_record_delim` e
`list_field_delim`.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Pattern, Tuple, Union

from circos_config.core.config.tree import Block
from circos_config.core.exceptions import StructuralError

RECORD_DELIM = r"\s*[;,]\s*"
FIELD_DELIM = r"\s*[:=]\s*"

Delim = Union[str, Pattern[str], None]


def _delimiter(explicit: Delim, tree: Optional[Block], key: str, default: str) -> Pattern[str]:
    if explicit:
        return explicit if isinstance(explicit, re.Pattern) else re.compile(explicit)
    if tree is not None:
        configured = tree.scalar(key)
        if configured:
            return re.compile(configured)
    return re.compile(default)


def make_parameter_list_hash(
    text: str,
    record_delim: Delim = None,
    field_delim: Delim = None,
    tree: Optional[Block] = None,
) -> Dict[str, Optional[str]]:
    """
    "hs1:0.5;hs2:0.25" -> {"hs1": "0.5", "hs2": "0.25"}

    Um registro sem separador de campo mapeia para None.

    Raises:
        StructuralError: se o mesmo parâmetro aparece duas vezes.
    """
    records = _delimiter(record_delim, tree, "list_record_delim", RECORD_DELIM)
    fields = _delimiter(field_delim, tree, "list_field_delim", FIELD_DELIM)
    result: Dict[str, Optional[str]] = {}
    for pair in records.split(text):
        if pair == "":
            continue
        parts = fields.split(pair, maxsplit=1)
        name = parts[0]
        if name in result:
            raise StructuralError(
                f"The configuration value [{text}] defines parameter [{name}] more than once. "
                "This is not allowed.",
                details={"value": text, "parameter": name},
            )
        result[name] = parts[1] if len(parts) > 1 else None
    return result


def make_parameter_list_array(
    text: str,
    record_delim: Delim = None,
    tree: Optional[Block] = None,
) -> List[str]:
    records = _delimiter(record_delim, tree, "list_record_delim", RECORD_DELIM)
    return [item for item in records.split(text) if item != ""]


def fetch_parameter_list_item(
    text: str,
    item: str,
    record_delim: Delim = None,
    tree: Optional[Block] = None,
) -> Optional[str]:
    return make_parameter_list_hash(text, record_delim, tree=tree).get(item)


def str_to_list(text: Optional[str]) -> List[str]:
    if text is None or text == "":
        return []
    return [item.strip() for item in text.split(",")]


def parse_counter_directive(text: str) -> List[Tuple[str, str]]:
    """
    "plot:1,track:-2" -> [("plot", "1"), ("track", "-2")]

    A ordem é preservada: diretivas disparam na ordem escrita.
    """
    directives: List[Tuple[str, str]] = []
    for record in text.split(","):
        record = record.strip()
        if not record:
            continue
        name, sep, amount = record.partition(":")
        if not sep or not name.strip():
            raise StructuralError(
                f"Counter directive [{record}] must have the form name:amount",
                details={"value": text, "record": record},
            )
        directives.append((name.strip(), amount.strip()))
    return directives
