# src/circos_config/core/config/loader.py
"""
Loader canônico de configuração do circos-config.

Este módulo localiza, carrega e resolve a configuração efetiva usada
pelos colaboradores de desenho (layout, trilhas, cores).

Pipeline de `load_config`:
    1. localizar o arquivo (caminho dado, search path, `etc/`, `~/.circos.conf`)
    2. carregar a árvore (texto Circos, YAML ou JSON)
    3. sobrepor opções explícitas (`deep_merge`)
    4. resolver expressões e contadores (`resolve`)
    5. aplicar overrides por asterisco (`apply_overrides`)
    6. rejeitar multi-valores fora da whitelist (`check_multivalues`)
    7. aplicar defaults estruturais
    8. validar obrigatórios e derivações (`validate_configuration`)

Princípios fundamentais:
    - Configuração é declarativa e explícita
    - Erros estruturais são falhas fatais
    - A mesma entrada sempre produz a mesma árvore final

Invariantes:
    - A raiz é sempre um `Block`
    - O hash canônico da árvore final é registrado em `ctx.meta`

Limites explícitos:
    - Não calcula geometria (o dicionário DIMS é do layout)
    - Não aloca cores nem fontes
"""

from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence as Seq, Union
import json

import yaml  # PyYAML

from circos_config.core.config.errors import (
    ConfigFileNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from circos_config.core.config.hashing import compute_config_hash
from circos_config.core.config.merge import deep_merge, options_to_tree
from circos_config.core.config.overrides import apply_overrides
from circos_config.core.config.parser import parse_file
from circos_config.core.config.resolver import resolve
from circos_config.core.config.tree import Block
from circos_config.core.config.validation import (
    apply_structural_defaults,
    check_multivalues,
    validate_configuration,
)
from circos_config.core.context import ResolutionContext

APP_NAME = "circos"

PathLike = Union[str, Path]

STRUCTURED_SUFFIXES = {".yaml", ".yml", ".json"}


def configuration_candidates(name: PathLike, search_dirs: Iterable[PathLike] = ()) -> List[Path]:
    """Lista ordenada de caminhos onde a configuração é procurada."""
    name = Path(name)
    candidates = [name]
    dirs = [Path(d) for d in search_dirs]
    for directory in dirs:
        candidates.append(directory / name)
        candidates.append(directory / "etc" / name)
    candidates.append(Path.home() / f".{APP_NAME}.conf")
    for directory in dirs:
        candidates.append(directory / f"{APP_NAME}.conf")
        candidates.append(directory / "etc" / f"{APP_NAME}.conf")
    return candidates


def locate_configuration(name: PathLike, search_dirs: Iterable[PathLike] = ()) -> Path:
    """
    Retorna o primeiro candidato legível.

    Raises:
        ConfigFileNotFoundError: lista todos os caminhos tentados.
    """
    candidates = configuration_candidates(name, search_dirs)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    raise ConfigFileNotFoundError(
        "Could not find any configuration file to use. Tried: "
        + ", ".join(str(c) for c in candidates)
    )


def configuration_search_path(path: Path, search_path: Optional[Seq[PathLike]] = None) -> List[Path]:
    """Diretórios de include: o do arquivo, seu `etc/` e os extras dados."""
    directories = [path.parent, path.parent / "etc"]
    directories.extend(Path(p) for p in (search_path or ()))
    return directories


def load_configuration(path: PathLike, search_path: Optional[Seq[PathLike]] = None) -> Block:
    """
    Carrega um arquivo de configuração como árvore, sem resolvê-lo.

    Formatos suportados:
        - YAML (.yaml, .yml) via PyYAML
        - JSON (.json)
        - texto Circos (qualquer outra extensão)

    Raises:
        ConfigFileNotFoundError: se o arquivo não existir.
        InvalidConfigRootTypeError: se a raiz YAML/JSON não for um mapa.
        UnsupportedConfigFormatError: se o YAML/JSON não puder ser lido.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigFileNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()
    if suffix not in STRUCTURED_SUFFIXES:
        return parse_file(path, search_path=configuration_search_path(path, search_path))

    try:
        with path.open("r", encoding="utf-8") as f:
            if suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise UnsupportedConfigFormatError(f"Não foi possível ler {path}: {exc}") from exc

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return Block.from_dict(data)


def populate_configuration(
    tree: Block,
    options: Optional[Mapping[str, Any]] = None,
    ctx: Optional[ResolutionContext] = None,
    *,
    dims: Any = None,
) -> Block:
    """
    Sobrepõe opções, resolve, aplica overrides, checa multi-valores e
    aplica os defaults estruturais.

    Retorna uma nova árvore quando há opções; senão a própria árvore,
    resolvida in-place.
    """
    ctx = ctx or ResolutionContext()
    if options:
        tree = deep_merge(tree, options_to_tree(options))
    resolve(tree, ctx, dims=dims)
    apply_overrides(tree)
    check_multivalues(tree)
    apply_structural_defaults(tree)
    return tree


def load_config(
    path: PathLike,
    *,
    options: Optional[Mapping[str, Any]] = None,
    search_path: Optional[Seq[PathLike]] = None,
    ctx: Optional[ResolutionContext] = None,
) -> Block:
    """
    Localiza, carrega, resolve e valida uma configuração.

    Args:
        path: nome ou caminho do arquivo de configuração.
        options: opções planas (`{"image/radius": "1500p"}`) com prioridade
            sobre o arquivo.
        search_path: diretórios extras para localizar o arquivo e includes.
        ctx: contexto de resolução; recebe contadores, eventos e metadados.

    Returns:
        Block: árvore final.

    Raises:
        ConfigError: falhas de leitura (arquivo, include, sintaxe, formato).
        CircosException: falhas estruturais, de resolução ou de validação.
    """
    ctx = ctx or ResolutionContext()
    located = locate_configuration(path, search_path or ())
    ctx.log(group="conf", message="found file", file=str(located))

    with ctx.timer("load"):
        tree = load_configuration(located, search_path)

    merged = {"configfile": str(located)}
    merged.update(options or {})
    tree = populate_configuration(tree, merged, ctx)
    validate_configuration(tree, ctx)

    ctx.meta["configfile"] = str(located)
    ctx.meta["config_hash"] = compute_config_hash(tree)
    return tree
