# src/circos_config/core/config/hashing.py
"""
Hashing canônico da configuração resolvida.

O hash representa a identidade estrutural da árvore final e é gravado em
`ResolutionContext.meta["config_hash"]` pelo loader, para que duas
cargas possam ser comparadas sem diff de arquivos.

Política:
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256

Invariantes:
    - Árvores estruturalmente equivalentes produzem o mesmo hash,
      independente da ordem de declaração das chaves
    - O resultado é sempre uma string hexadecimal de 64 caracteres
"""

import hashlib
import json
from typing import Any, Dict, Union

from circos_config.core.config.tree import Block


def compute_config_hash(config: Union[Block, Dict[str, Any]]) -> str:
    """
    Gera o hash SHA-256 de uma árvore (ou de sua forma `to_dict()`).

    Raises:
        TypeError: se o objeto não for Block nem dict.
    """
    if isinstance(config, Block):
        config = config.to_dict()
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser Block ou dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
