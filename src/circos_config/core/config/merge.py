# src/circos_config/core/config/merge.py
"""
Deep-merge de árvores de configuração.

Usado para sobrepor opções de linha de comando (ou de um chamador
programático) à configuração carregada do arquivo, antes da resolução.

Política de merge:
    - Block + Block → merge recursivo por chave
    - Sequence      → sobrescrita total (sem merge item a item)
    - Scalar        → sobrescrita direta
    - conflito de variante (ex.: Scalar sobre Block) → erro explícito

Invariantes:
    - Nenhum input é mutado; o resultado é sempre uma nova árvore
    - Chaves ausentes do override são preservadas da base
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Mapping

from circos_config.core.config.errors import ConfigTypeConflictError
from circos_config.core.config.tree import Block, Sequence


def deep_merge(base: Block, override: Block) -> Block:
    """
    Realiza um deep-merge determinístico entre duas árvores.

    Args:
        base (Block): árvore base (ex.: arquivo de configuração).
        override (Block): sobreposições explícitas.

    Returns:
        Block: nova árvore resultante.

    Raises:
        ConfigTypeConflictError: se uma chave muda de variante entre base e override.
    """
    if not isinstance(base, Block) or not isinstance(override, Block):
        raise ConfigTypeConflictError(
            f"Deep-merge requer blocos no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result = deepcopy(base)

    for key, override_value in override.items():
        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, Block) and isinstance(override_value, Block):
            result[key] = deep_merge(base_value, override_value)
            continue

        # sequence -> sobrescrita total
        if isinstance(override_value, Sequence):
            result[key] = deepcopy(override_value)
            continue

        if type(base_value) is not type(override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result


def options_to_tree(options: Mapping[str, Any]) -> Block:
    """
    Converte opções planas em árvore.

        {"image/radius": "1500p", "karyotype": "k.txt"}
        -> <image> radius = 1500p </image>, karyotype = k.txt

    Valores None são ignorados (opção não informada).
    """
    nested: Dict[str, Any] = {}
    for name, value in options.items():
        if value is None:
            continue
        *parents, leaf = [part for part in str(name).split("/") if part]
        node = nested
        for parent in parents:
            child = node.setdefault(parent, {})
            if not isinstance(child, dict):
                raise ConfigTypeConflictError(
                    f"Conflito de tipo na opção '{name}': '{parent}' já é um valor"
                )
            node = child
        node[leaf] = value
    return Block.from_dict(nested)
