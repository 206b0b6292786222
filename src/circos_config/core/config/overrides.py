# src/circos_config/core/config/overrides.py
"""
Override engine: precedência por asteriscos.

Chaves terminadas em `*`, `**`, `***`... sobrescrevem a chave base de
mesmo nome no mesmo bloco. Mais asteriscos vencem:

    thickness   = 1
    thickness*  = 2
    thickness** = 3      # valor final de thickness: 3

A chave base não precisa existir; o override a cria.

Decisões arquiteturais:
    - A sequência de marcadores é lida uma única vez por chave e vira
      uma precedência inteira; a ordenação é estável
    - O nível corrente é concluído antes de descer aos filhos, então os
      filhos sempre enxergam os valores finais do pai

Invariantes:
    - Idempotente: aplicar duas vezes produz a mesma árvore (sobrescrita
      simples, nunca merge)
    - Chaves marcadas permanecem na árvore
"""

from __future__ import annotations

import copy
import re
from typing import List, Optional, Tuple

from circos_config.core.config.tree import Block, Sequence

_MARKER_RX = re.compile(r"^(.+?)(\*+)$")


def split_marker(key: str) -> Optional[Tuple[str, int]]:
    """"name**" -> ("name", 2); chave sem marcador -> None."""
    match = _MARKER_RX.match(key)
    if match is None:
        return None
    return match.group(1), len(match.group(2))


def apply_overrides(tree: Block) -> Block:
    markered: List[Tuple[int, str, str]] = []
    for key in tree.keys():
        parsed = split_marker(key)
        if parsed is not None:
            markered.append((parsed[1], parsed[0], key))

    # sorted() é estável: empates mantêm a ordem de declaração
    for _, base, key in sorted(markered, key=lambda entry: entry[0]):
        tree[base] = copy.deepcopy(tree[key])

    for key in tree.keys():
        node = tree[key]
        if isinstance(node, Block):
            apply_overrides(node)
        elif isinstance(node, Sequence):
            for item in node.blocks():
                apply_overrides(item)
    return tree
