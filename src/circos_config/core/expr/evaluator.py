# src/circos_config/core/expr/evaluator.py
"""
Avaliador sandboxed de expressões de configuração.

Valores de configuração podem depender da própria configuração:

    track_width = 0.05
    r0          = eval(sprintf("%.3fr", conf(track1_pos) - conf(track_width)))
    note        = __2*conf(flag)__

Em vez de executar código arbitrário, as expressões são interpretadas por
uma gramática pequena e fechada:

    expr    := term (("+" | "-") term)*
    term    := unary (("*" | "/") unary)*
    unary   := ("+" | "-") unary | primary
    primary := NUMBER | STRING | NAME "(" [expr ("," expr)*] ")"
             | NAME | "." | "(" expr ")"

Nomes soltos (barewords) valem como texto, o que permite escrever
`conf(ideogram, radius)` ou `dims(ideogram, default, radius)` sem aspas.

Lookups disponíveis:
    - conf(a, b, ...)   → valor escalar da árvore ("." = bloco corrente)
    - $CONF{a}{b}       → grafia legada de conf(a, b); $CONF{counter}{x} lê contador
    - counter(name)     → valor de um contador
    - dims(a, b, ...)   → valor do dicionário de geometria

Funções auxiliares: sprintf, min, max, abs, int, round, floor, ceil,
remap, remap_int, remap_round.

Invariantes:
    - Nenhuma construção fora da gramática é executada
    - Texto numérico é convertido para número nas operações aritméticas
    - Qualquer falha vira `ResolutionError` com a expressão e a causa
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from circos_config.core.config.counters import CounterTable
from circos_config.core.config.tree import Block, Scalar, Sequence, fetch_configuration
from circos_config.core.exceptions import ResolutionError
from circos_config.core.numeric import Number, format_number, normalize_number, parse_number
from circos_config.core.utils import remap, remap_int, remap_round, round_half_up

Value = Union[int, float, str]

_TOKEN_RX = re.compile(
    r"""
    \s*(?:
        (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
      | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
      | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
      | (?P<dot>\.)
      | (?P<op>[-+*/(),])
    )
    """,
    re.VERBOSE,
)

_LEGACY_CONF_RX = re.compile(r"\$CONF((?:\{[^{}]*\})+)")


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int


def tokenize(expression: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    length = len(expression)
    while pos < length:
        if expression[pos:].strip() == "":
            break
        match = _TOKEN_RX.match(expression, pos)
        if match is None or match.end() == pos:
            raise ValueError(f"unexpected character [{expression[pos:].strip()[:1]}] at position {pos}")
        kind = match.lastgroup or ""
        tokens.append(Token(kind, match.group(kind), match.start(kind)))
        pos = match.end()
    return tokens


def rewrite_legacy_lookups(expression: str) -> str:
    """Reescreve `$CONF{a}{b}` como `conf("a","b")`."""

    def _replace(match: "re.Match[str]") -> str:
        keys = re.findall(r"\{([^{}]*)\}", match.group(1))
        quoted = ",".join('"%s"' % key.strip().strip("'\"") for key in keys)
        return f"conf({quoted})"

    return _LEGACY_CONF_RX.sub(_replace, expression)


def stringify(value: Value) -> str:
    if isinstance(value, str):
        return value
    return format_number(value)


class _Parser:
    """Parser recursivo descendente que avalia durante a descida."""

    def __init__(self, evaluator: "ExpressionEvaluator", tokens: List[Token]) -> None:
        self.evaluator = evaluator
        self.tokens = tokens
        self.index = 0

    def peek(self) -> Optional[Token]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def take(self) -> Token:
        token = self.peek()
        if token is None:
            raise ValueError("unexpected end of expression")
        self.index += 1
        return token

    def expect(self, text: str) -> None:
        token = self.take()
        if token.text != text:
            raise ValueError(f"expected [{text}] but saw [{token.text}] at position {token.pos}")

    def parse(self) -> Value:
        if not self.tokens:
            raise ValueError("empty expression")
        value = self.expr()
        token = self.peek()
        if token is not None:
            raise ValueError(f"unexpected [{token.text}] at position {token.pos}")
        return value

    def expr(self) -> Value:
        value = self.term()
        while True:
            token = self.peek()
            if token is None or token.text not in ("+", "-"):
                return value
            self.take()
            value = self.evaluator.arithmetic(token.text, value, self.term())

    def term(self) -> Value:
        value = self.unary()
        while True:
            token = self.peek()
            if token is None or token.text not in ("*", "/"):
                return value
            self.take()
            value = self.evaluator.arithmetic(token.text, value, self.unary())

    def unary(self) -> Value:
        token = self.peek()
        if token is not None and token.kind == "op" and token.text in ("+", "-"):
            self.take()
            operand = self.evaluator.numeric(self.unary())
            return operand if token.text == "+" else normalize_number(-operand)
        return self.primary()

    def primary(self) -> Value:
        token = self.take()
        if token.kind == "number":
            return parse_number(token.text)  # type: ignore[return-value]
        if token.kind == "string":
            return re.sub(r"\\(.)", r"\1", token.text[1:-1])
        if token.kind == "dot":
            return "."
        if token.kind == "name":
            following = self.peek()
            if following is not None and following.text == "(":
                self.take()
                return self.evaluator.call(token.text, self.arguments())
            return token.text
        if token.text == "(":
            value = self.expr()
            self.expect(")")
            return value
        raise ValueError(f"unexpected [{token.text}] at position {token.pos}")

    def arguments(self) -> List[Value]:
        args: List[Value] = []
        token = self.peek()
        if token is not None and token.text == ")":
            self.take()
            return args
        while True:
            args.append(self.expr())
            token = self.take()
            if token.text == ")":
                return args
            if token.text != ",":
                raise ValueError(f"expected [,] or [)] but saw [{token.text}] at position {token.pos}")


class ExpressionEvaluator:
    """
    Avaliador de expressões ligado a uma árvore, contadores e geometria.

    Decisões arquiteturais:
        - O estado consultado (árvore, contadores, geometria) é passado
          explicitamente; nada é lido de estado global
        - `current` é o bloco onde a expressão foi encontrada, usado por
          `conf(., key)`
        - A geometria é qualquer objeto com `get(*path)` (ver `Dims`)

    Limites explícitos:
        - Não converte unidades (ver `circos_config.core.units.parse`)
        - Não altera a árvore
    """

    def __init__(
        self,
        *,
        tree: Optional[Block] = None,
        counters: Optional[CounterTable] = None,
        dims: Any = None,
        current: Optional[Block] = None,
    ) -> None:
        self.tree = tree
        self.counters = counters
        self.dims = dims
        self.current = current
        self.functions: Dict[str, Callable[..., Value]] = {
            "conf": self._conf,
            "counter": self._counter,
            "dims": self._dims,
            "sprintf": self._sprintf,
            "min": lambda *a: self._fold(min, a),
            "max": lambda *a: self._fold(max, a),
            "abs": lambda x: normalize_number(abs(self.numeric(x))),
            "int": lambda x: int(self.numeric(x)),
            "round": lambda x: round_half_up(self.numeric(x)),
            "floor": lambda x: math.floor(self.numeric(x)),
            "ceil": lambda x: math.ceil(self.numeric(x)),
            "remap": lambda *a: normalize_number(remap(*self._numbers(a))),
            "remap_int": lambda *a: remap_int(*self._numbers(a)),
            "remap_round": lambda *a: remap_round(*self._numbers(a)),
        }

    # -----------------------------
    # Entry point
    # -----------------------------
    def evaluate(self, expression: str) -> Value:
        source = rewrite_legacy_lookups(expression)
        try:
            return _Parser(self, tokenize(source)).parse()
        except ResolutionError as exc:
            raise ResolutionError(
                f"Tried to evaluate [{expression}] from a parameter, but could not. Error [{exc.message}]",
                details={"expression": expression, **exc.details},
                hint=exc.hint,
            ) from exc
        except (ValueError, TypeError, ZeroDivisionError, OverflowError) as exc:
            raise ResolutionError(
                f"Tried to evaluate [{expression}] from a parameter, but could not. Error [{exc}]",
                details={"expression": expression, "cause": exc.__class__.__name__},
                hint="Only numbers, quoted text, + - * /, parentheses and the lookup functions are allowed.",
            ) from exc

    def evaluate_to_text(self, expression: str) -> str:
        return stringify(self.evaluate(expression))

    # -----------------------------
    # Arithmetic
    # -----------------------------
    def numeric(self, value: Value) -> Number:
        number = parse_number(value)
        if number is None:
            raise ValueError(f"[{value}] is not a number")
        return number

    def arithmetic(self, op: str, left: Value, right: Value) -> Number:
        a, b = self.numeric(left), self.numeric(right)
        if op == "+":
            result = a + b
        elif op == "-":
            result = a - b
        elif op == "*":
            result = a * b
        else:
            if b == 0:
                raise ZeroDivisionError(f"division by zero in [{format_number(a)}/{format_number(b)}]")
            result = a / b
        return normalize_number(result)

    def _numbers(self, args: Tuple[Value, ...]) -> List[Number]:
        return [self.numeric(arg) for arg in args]

    def _fold(self, fn: Callable[..., Number], args: Tuple[Value, ...]) -> Number:
        if not args:
            raise ValueError("at least one argument is required")
        return fn(self._numbers(args))

    # -----------------------------
    # Functions
    # -----------------------------
    def call(self, name: str, args: List[Value]) -> Value:
        fn = self.functions.get(name)
        if fn is None:
            raise ValueError(f"unknown function [{name}]")
        return fn(*args)

    def _conf(self, *path: Value) -> Value:
        keys = [stringify(p) for p in path]
        if not keys:
            raise ValueError("conf() requires at least one parameter name")
        if keys[0] == ".":
            root, keys = self.current, keys[1:]
        else:
            root = self.tree
        if root is None:
            raise ValueError("conf() has no configuration to look into")
        if len(keys) == 2 and keys[0] == "counter" and "counter" not in root and self.counters is not None:
            return self._counter(keys[1])
        node = fetch_configuration(root, *keys)
        if node is None:
            raise ResolutionError(
                f"Configuration parameter [{','.join(keys)}] is not defined",
                details={"path": keys},
            )
        if isinstance(node, Scalar):
            number = parse_number(node.value)
            return node.value if number is None else number
        if isinstance(node, (Block, Sequence)):
            raise ResolutionError(
                f"Configuration parameter [{','.join(keys)}] is a {type(node).__name__.lower()}, not a value",
                details={"path": keys},
            )
        raise TypeError(f"unknown configuration node: {type(node).__name__}")

    def _counter(self, name: Value) -> Number:
        if self.counters is None:
            raise ValueError("no counters are available")
        return self.counters[stringify(name)]

    def _dims(self, *path: Value) -> Number:
        if self.dims is None:
            raise ValueError("no geometry is available")
        return self.dims.get(*[stringify(p) for p in path])

    def _sprintf(self, fmt: Value, *args: Value) -> str:
        values = tuple(
            value if isinstance(value, str) and parse_number(value) is None else
            (parse_number(value) if isinstance(value, str) else value)
            for value in args
        )
        return stringify(fmt) % values
