# src/circos_config/core/config/tree.py
"""
Árvore canônica de configuração do circos-config.

Este módulo define a representação em memória de uma configuração
carregada: um mapa ordenado de chaves textuais para nós, onde cada nó é
exatamente uma das variantes:

    - Scalar   → valor textual simples (`key = value`)
    - Block    → bloco aninhado (`<name> ... </name>`)
    - Sequence → definições repetidas da mesma chave, na ordem do arquivo

Princípios fundamentais:
    - A variante é explícita: nenhum consumidor inspeciona tipos Python
      arbitrários, apenas `Scalar`, `Block` e `Sequence`
    - A ordem de inserção é preservada (ordem de caminhada da árvore)
    - A árvore é mutável in-place pelos estágios de resolução

Invariantes:
    - Itens de `Sequence` são sempre `Scalar` ou `Block`
    - Chaves são strings (já normalizadas pelo parser)
    - `to_dict()` produz apenas dict/list/str

Limites explícitos:
    - Não valida multi-valores (ver `validation.check_multivalues`)
    - Não resolve expressões nem aplica overrides
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from circos_config.core.exceptions import StructuralError
from circos_config.core.numeric import format_number


@dataclass
class Scalar:
    """Valor escalar textual."""

    value: str


@dataclass
class Sequence:
    """Definições repetidas de uma mesma chave, em ordem de declaração."""

    items: List[Union[Scalar, "Block"]] = field(default_factory=list)

    def __iter__(self) -> Iterator[Union[Scalar, "Block"]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def blocks(self) -> List["Block"]:
        return [item for item in self.items if isinstance(item, Block)]


@dataclass
class Block:
    """
    Bloco de configuração: mapa ordenado de chave para nó.

    O bloco raiz de uma configuração também é um `Block`.

    Decisões arquiteturais:
        - `add` acumula definições repetidas em `Sequence` (semântica do
          parser); `__setitem__` sempre sobrescreve (semântica dos estágios
          de resolução)
        - Valores Python simples atribuídos via `__setitem__` são
          convertidos para nós com `as_node`
    """

    entries: Dict[str, "Node"] = field(default_factory=dict)

    # -----------------------------
    # Mapping protocol
    # -----------------------------
    def __getitem__(self, key: str) -> "Node":
        return self.entries[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.entries[key] = as_node(value)

    def __delitem__(self, key: str) -> None:
        del self.entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def keys(self) -> List[str]:
        return list(self.entries.keys())

    def items(self) -> List[Tuple[str, "Node"]]:
        return list(self.entries.items())

    def get(self, key: str, default: Optional["Node"] = None) -> Optional["Node"]:
        return self.entries.get(key, default)

    # -----------------------------
    # Typed accessors
    # -----------------------------
    def scalar(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Retorna o texto de uma chave escalar, ou `default` se ausente."""
        node = self.entries.get(key)
        if node is None:
            return default
        if isinstance(node, Scalar):
            return node.value
        raise StructuralError(
            f"Parameter [{key}] was expected to be a single value but is a "
            f"{type(node).__name__.lower()}",
            details={"key": key, "block": self.to_dict()},
        )

    def block(self, key: str) -> Optional["Block"]:
        node = self.entries.get(key)
        if node is None:
            return None
        if isinstance(node, Block):
            return node
        raise StructuralError(
            f"Parameter [{key}] was expected to be a block but is a "
            f"{type(node).__name__.lower()}",
            details={"key": key},
        )

    def add(self, key: str, node: "Node") -> None:
        """Adiciona uma definição; repetições viram `Sequence`."""
        if key not in self.entries:
            self.entries[key] = node
            return
        current = self.entries[key]
        if isinstance(current, Sequence):
            current.items.append(node)  # type: ignore[arg-type]
        else:
            self.entries[key] = Sequence([current, node])  # type: ignore[list-item]

    # -----------------------------
    # Conversions
    # -----------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {key: to_plain(node) for key, node in self.entries.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Block":
        block = cls()
        for key, value in data.items():
            block.entries[str(key)] = as_node(value)
        return block


Node = Union[Scalar, Block, Sequence]


def as_node(value: Any) -> Node:
    """
    Converte um valor Python simples em nó da árvore.

    Regras:
        - Scalar/Block/Sequence → inalterado
        - dict → Block (recursivo)
        - list/tuple → Sequence (itens não podem ser listas)
        - bool → "1"/"0" (auto-true)
        - None → ""
        - números → texto no formato numérico canônico
    """
    if isinstance(value, (Scalar, Block, Sequence)):
        return value
    if isinstance(value, dict):
        return Block.from_dict(value)
    if isinstance(value, (list, tuple)):
        items: List[Union[Scalar, Block]] = []
        for item in value:
            node = as_node(item)
            if isinstance(node, Sequence):
                raise TypeError("nested lists cannot be represented in a configuration tree")
            items.append(node)
        return Sequence(items)
    if isinstance(value, bool):
        return Scalar("1" if value else "0")
    if value is None:
        return Scalar("")
    if isinstance(value, (int, float)):
        return Scalar(format_number(value))
    return Scalar(str(value))


def to_plain(node: Node) -> Any:
    if isinstance(node, Scalar):
        return node.value
    if isinstance(node, Block):
        return node.to_dict()
    if isinstance(node, Sequence):
        return [to_plain(item) for item in node.items]
    raise TypeError(f"unknown configuration node: {type(node).__name__}")


def fetch_configuration(tree: Block, *path: Union[str, int]) -> Optional[Node]:
    """
    Retorna o nó de um caminho de parâmetros, ou None.

    fetch_configuration(tree, "ideogram", "spacing") equivale a
    tree["ideogram"]["spacing"]. Elementos inteiros (ou textos numéricos)
    indexam `Sequence`. Se o nó, ou qualquer ancestral, não existir,
    retorna None.
    """
    node: Node = tree
    for element in path:
        if isinstance(node, Block):
            key = str(element)
            if key not in node:
                return None
            node = node[key]
        elif isinstance(node, Sequence):
            try:
                index = int(element)
            except (TypeError, ValueError):
                return None
            if not 0 <= index < len(node.items):
                return None
            node = node.items[index]
        elif isinstance(node, Scalar):
            return None
        else:
            raise TypeError(f"unknown configuration node: {type(node).__name__}")
    return node
