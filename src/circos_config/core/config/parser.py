# src/circos_config/core/config/parser.py
"""
Parser do formato texto de configuração.

Formato:

    # comentário
    karyotype = data/karyotype.human.txt
    <ideogram>
      <spacing>
        default = 0.005r
      </spacing>
      radius = 0.90r
    </ideogram>
    <plots>
      <plot>
        file = a.txt
      </plot>
      <plot>
        file = b.txt
      </plot>
    </plots>
    <<include etc/colors.conf>>

Regras:
    - `key = value`, separado no primeiro `=`; uma linha sem `=` vira uma
      chave com valor vazio (o resolver denuncia o espaço no nome)
    - `<name>` ... `</name>` abre e fecha blocos; `<name tag>` cria
      `name → tag → bloco`
    - `<<include path>>` é expandido no ponto onde aparece, procurando o
      arquivo no diretório do arquivo que inclui e depois no search path;
      o mesmo arquivo pode ser incluído mais de uma vez
    - `#` inicia comentário (`\\#` é um `#` literal); `\\` no fim da linha
      continua na linha seguinte
    - nomes de chaves e blocos são convertidos para minúsculas
    - yes/on/true → 1 e no/off/false → 0
    - chaves repetidas em um bloco viram `Sequence`

Invariantes:
    - Blocos desbalanceados são ConfigSyntaxError com arquivo e linha
    - Nenhuma árvore parcial é retornada
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence as Seq, Tuple, Union

from circos_config.core.config.errors import ConfigFileNotFoundError, ConfigSyntaxError, IncludeNotFoundError
from circos_config.core.config.tree import Block, Scalar

PathLike = Union[str, Path]

_INCLUDE_RX = re.compile(r"^<<\s*include\s+(.+?)\s*>>$", re.IGNORECASE)
_CLOSE_RX = re.compile(r"^</\s*([^>\s]+)\s*>$")
_OPEN_RX = re.compile(r"^<\s*([^/<>\s][^<>\s]*)(?:\s+([^<>]+?))?\s*>$")
_COMMENT_RX = re.compile(r"(?<!\\)#.*$")

AUTO_TRUE = {"yes": "1", "on": "1", "true": "1", "no": "0", "off": "0", "false": "0"}


@dataclass(frozen=True)
class Line:
    file: str
    number: int
    text: str


def _where(line: Line) -> str:
    return f"{line.file}:{line.number}"


def _clean(raw: str) -> str:
    return _COMMENT_RX.sub("", raw).replace("\\#", "#").strip()


def _logical_lines(text: str, source: str) -> List[Line]:
    """Remove comentários e junta continuações `\\`."""
    lines: List[Line] = []
    pending: Optional[Line] = None
    for number, raw in enumerate(text.splitlines(), start=1):
        cleaned = _clean(raw)
        if pending is not None:
            cleaned = pending.text + cleaned
            number = pending.number
            pending = None
        if cleaned.endswith("\\"):
            pending = Line(source, number, cleaned[:-1])
            continue
        if cleaned:
            lines.append(Line(source, number, cleaned))
    if pending is not None and pending.text.strip():
        lines.append(Line(source, pending.number, pending.text.strip()))
    return lines


def _find_include(target: str, including: Optional[Path], search_path: Seq[PathLike]) -> Path:
    candidates: List[Path] = []
    path = Path(target).expanduser()
    if path.is_absolute():
        candidates.append(path)
    else:
        if including is not None:
            candidates.append(including.parent / path)
        candidates.extend(Path(directory) / path for directory in search_path)
        candidates.append(path)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    raise IncludeNotFoundError(
        f"Could not find included file [{target}]. Tried: " + ", ".join(str(c) for c in candidates)
    )


def _expand(
    text: str,
    source: str,
    path: Optional[Path],
    search_path: Seq[PathLike],
    stack: Tuple[Path, ...],
) -> List[Line]:
    expanded: List[Line] = []
    for line in _logical_lines(text, source):
        match = _INCLUDE_RX.match(line.text)
        if match is None:
            expanded.append(line)
            continue
        included = _find_include(match.group(1), path, search_path).resolve()
        if included in stack:
            raise ConfigSyntaxError(f"{_where(line)}: recursive include of [{included}]")
        expanded.extend(
            _expand(
                included.read_text(encoding="utf-8"),
                str(included),
                included,
                search_path,
                stack + (included,),
            )
        )
    return expanded


def _auto_true(value: str) -> str:
    return AUTO_TRUE.get(value.lower(), value)


def _build(lines: Iterable[Line], source: str) -> Block:
    root = Block()
    # (nome, bloco, linha de abertura)
    stack: List[Tuple[str, Block, Optional[Line]]] = [("", root, None)]

    for line in lines:
        current = stack[-1][1]

        closing = _CLOSE_RX.match(line.text)
        if closing:
            name = closing.group(1).lower()
            if len(stack) == 1:
                raise ConfigSyntaxError(f"{_where(line)}: closing block </{name}> without a matching opening block")
            opened = stack[-1][0]
            if opened != name:
                raise ConfigSyntaxError(
                    f"{_where(line)}: block <{opened}> is closed by </{name}>"
                )
            stack.pop()
            continue

        opening = _OPEN_RX.match(line.text)
        if opening:
            name = opening.group(1).lower()
            tag = opening.group(2)
            block = Block()
            if tag is None:
                current.add(name, block)
            else:
                holder = current.get(name)
                if not isinstance(holder, Block):
                    holder = Block()
                    current.add(name, holder)
                holder.add(tag.strip(), block)
            stack.append((name, block, line))
            continue

        if line.text.startswith("<"):
            raise ConfigSyntaxError(f"{_where(line)}: malformed block line [{line.text}]")

        key, sep, value = line.text.partition("=")
        key = key.strip().lower()
        if not key:
            raise ConfigSyntaxError(f"{_where(line)}: assignment without a parameter name")
        current.add(key, Scalar(_auto_true(value.strip()) if sep else ""))

    if len(stack) > 1:
        name, _, opened_at = stack[-1]
        where = _where(opened_at) if opened_at is not None else source
        raise ConfigSyntaxError(f"{where}: block <{name}> is never closed")
    return root


def parse_text(
    text: str,
    *,
    source: str = "<string>",
    base_dir: Optional[PathLike] = None,
    search_path: Seq[PathLike] = (),
) -> Block:
    """
    Converte texto de configuração em árvore.

    Args:
        text: conteúdo do arquivo.
        source: nome usado nas mensagens de erro.
        base_dir: diretório contra o qual `<<include>>` relativos são resolvidos.
        search_path: diretórios adicionais para includes.

    Raises:
        ConfigSyntaxError: blocos desbalanceados ou linha malformada.
        IncludeNotFoundError: include que não pode ser localizado.
    """
    anchor = Path(base_dir) / source if base_dir is not None else None
    return _build(_expand(text, source, anchor, search_path, ()), source)


def parse_file(path: PathLike, *, search_path: Seq[PathLike] = ()) -> Block:
    file = Path(path)
    if not file.is_file():
        raise ConfigFileNotFoundError(f"Arquivo de configuração não encontrado: {file}")
    resolved = file.resolve()
    lines = _expand(
        resolved.read_text(encoding="utf-8"),
        str(file),
        resolved,
        search_path,
        (resolved,),
    )
    return _build(lines, str(file))
