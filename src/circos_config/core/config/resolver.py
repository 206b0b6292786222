# src/circos_config/core/config/resolver.py
"""
Resolver canônico da árvore de configuração.

Uma única caminhada em profundidade, na ordem de inserção das chaves,
que para cada bloco:

    1. dispara as diretivas `init_counter`, `pre_increment_counter` e
       `pre_set_counter` antes de visitar os filhos
    2. visita cada chave:
         Block    → inicializa o contador `key` (0) e desce
         Sequence → inicializa o contador `key` (0); desce em cada item
                    bloco e incrementa o contador por item
         Scalar   → expande `__EXPR__` e, fora de blocos `rule`,
                    substitui um valor `eval(EXPR)` pelo resultado
    3. dispara `post_increment_counter` e `post_set_counter`

A configuração pode, portanto, depender de si mesma:

    flag = 10
    note = __2*conf(flag)__      # vira 20

Decisões arquiteturais:
    - Contadores, warnings e eventos vivem no `ResolutionContext`
    - Expressões são avaliadas pelo `ExpressionEvaluator` (sem `eval`)
    - Blocos `rule` mantêm `eval(...)` intacto; a avaliação de regras é
      feita por um estágio posterior

Invariantes:
    - Qualquer falha de avaliação interrompe a resolução inteira
    - Chave com espaço é erro estrutural (denuncia um `=` esquecido)
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from circos_config.core.config.counters import (
    INCREMENT_COUNTER,
    INIT_COUNTER,
    POST_INCREMENT_COUNTER,
    POST_SET_COUNTER,
    PRE_INCREMENT_COUNTER,
    PRE_SET_COUNTER,
    IncrementPolicy,
)
from circos_config.core.config.lists import parse_counter_directive
from circos_config.core.config.tree import Block, Node, Scalar, Sequence
from circos_config.core.context import ResolutionContext
from circos_config.core.exceptions import StructuralError
from circos_config.core.expr.evaluator import ExpressionEvaluator

EXPR_TOKEN_RX = re.compile(r"__([^_].+?)__")
EVAL_RX = re.compile(r"^\s*eval\s*\((.+)\)\s*$", re.DOTALL)

RULE_BLOCK = "rule"


def resolve(tree: Block, ctx: Optional[ResolutionContext] = None, *, dims: Any = None) -> ResolutionContext:
    """
    Resolve a árvore in-place e retorna o contexto usado.

    Args:
        tree: raiz da configuração (mutada in-place).
        ctx: contexto de resolução; um novo é criado se ausente.
        dims: dicionário de geometria opcional, para `dims(...)` em expressões.

    Raises:
        StructuralError: chave com espaço.
        ResolutionError: expressão embutida inválida.
    """
    ctx = ctx or ResolutionContext()
    with ctx.timer("resolve"):
        _Resolver(tree, ctx, dims).walk(tree, parent=None)
    return ctx


class _Resolver:
    def __init__(self, root: Block, ctx: ResolutionContext, dims: Any) -> None:
        self.root = root
        self.ctx = ctx
        self.dims = dims

    # -----------------------------
    # Counters
    # -----------------------------
    def _directives(self, block: Block, *names: str) -> None:
        for name in names:
            text = block.scalar(name) if isinstance(block.get(name), Scalar) else None
            if not text:
                continue
            for counter, amount in parse_counter_directive(text):
                if name == INIT_COUNTER:
                    self.ctx.counters.init(counter, amount)
                elif name in (PRE_INCREMENT_COUNTER, POST_INCREMENT_COUNTER):
                    self.ctx.counters.increment(counter, amount)
                else:
                    self.ctx.counters.set(counter, amount)

    def _zero(self, name: str) -> None:
        if name not in self.ctx.counters:
            self.ctx.log(group="counter", message="zeroing counter", counter=name)
            self.ctx.counters.init(name, 0)

    def _increment_amount(self, parent: Block, item: Block) -> str:
        own = item.get(INCREMENT_COUNTER)
        inherited = parent.get(INCREMENT_COUNTER)
        if self.ctx.increment_policy == IncrementPolicy.ITEM_FIRST:
            order = (own, inherited)
        else:
            order = (inherited, own)
        for node in order:
            if isinstance(node, Scalar):
                return node.value
        return "1"

    # -----------------------------
    # Walk
    # -----------------------------
    def walk(self, block: Block, parent: Optional[str]) -> None:
        self._directives(block, INIT_COUNTER, PRE_INCREMENT_COUNTER, PRE_SET_COUNTER)

        for key in block.keys():
            node: Node = block[key]
            if isinstance(node, Block):
                self._zero(key)
                self.walk(node, parent=key)
            elif isinstance(node, Sequence):
                self._zero(key)
                for index, item in enumerate(node.items):
                    if isinstance(item, Block):
                        self.walk(item, parent=key)
                        self.ctx.counters.increment(key, self._increment_amount(block, item))
                    elif isinstance(item, Scalar):
                        node.items[index] = Scalar(self.scalar(key, item.value, block, parent))
                    else:
                        raise TypeError(f"unknown configuration node: {type(item).__name__}")
            elif isinstance(node, Scalar):
                block[key] = self.scalar(key, node.value, block, parent)
            else:
                raise TypeError(f"unknown configuration node: {type(node).__name__}")

        self._directives(block, POST_INCREMENT_COUNTER, POST_SET_COUNTER)

    def scalar(self, key: str, value: str, block: Block, parent: Optional[str]) -> str:
        if re.search(r"\s", key):
            raise StructuralError(
                f"Error parsing configuration. Your parameter [{key}] contains a white space. "
                "This is not allowed. You either forgot a '=' in assignment "
                "(e.g. 'red 255,0,0' vs 'red = 255,0,0') or used a multi-word parameter name "
                "(e.g. 'my red = 255,0,0' vs 'my_red = 255,0,0')",
                details={"key": key, "block": parent},
            )

        evaluator = ExpressionEvaluator(
            tree=self.root,
            counters=self.ctx.counters,
            dims=self.dims,
            current=block,
        )

        cache: Dict[str, str] = {}

        def _expand(match: "re.Match[str]") -> str:
            source = match.group(1)
            if source not in cache:
                cache[source] = evaluator.evaluate_to_text(source)
                self.ctx.log(group="conf", message="repopulate", key=key, var=source, target=cache[source])
            return cache[source]

        value = EXPR_TOKEN_RX.sub(_expand, value)

        match = EVAL_RX.match(value)
        if match and parent != RULE_BLOCK:
            expression = match.group(1)
            value = evaluator.evaluate_to_text(expression)
            self.ctx.log(group="conf", message="repopulateeval", key=key, expression=expression, value=value)
        return value
