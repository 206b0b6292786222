# tests/core/config/test_loader.py
"""
Testes do loader de configuração.

Este módulo valida a localização, o carregamento e o pipeline completo
de `load_config`:

- o arquivo é procurado no caminho dado, no search path e em `etc/`
- texto Circos, YAML e JSON produzem a mesma árvore canônica
- opções explícitas têm prioridade sobre o arquivo
- resolução, overrides, multi-valores e validação são aplicados em ordem
- o hash canônico da árvore final é registrado no contexto

Invariantes:
    - A raiz é sempre um Block
    - Nenhuma árvore parcial é retornada em caso de erro

Limites explícitos:
    - Não valida geometria nem unidades
"""

import json
from pathlib import Path

import pytest

try:
    from circos_config.core.config.errors import (
        ConfigFileNotFoundError,
        InvalidConfigRootTypeError,
        UnsupportedConfigFormatError,
    )
    from circos_config.core.config.loader import (
        load_config,
        load_configuration,
        locate_configuration,
        populate_configuration,
    )
    from circos_config.core.config.tree import Block
    from circos_config.core.context import ResolutionContext
    from circos_config.core.exceptions import MissingRequiredParameter, StructuralError
except Exception as e:  # noqa: BLE001
    load_config = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que o loader e suas exceções tipadas estejam disponíveis.

    Decisões arquiteturais:
        - Falha antecipada e explícita quando contratos do loader estão ausentes
        - Não tenta fallback nem implementação alternativa
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing config loader modules. Implement:\n"
            "- src/circos_config/core/config/loader.py (load_config, load_configuration)\n"
            "- src/circos_config/core/config/errors.py (ConfigError hierarchy)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_load_config_runs_the_full_pipeline(write_conf, minimal_conf_text):
    """
    Verifica o pipeline completo sobre um arquivo texto.

    Invariantes:
        - `configfile` aponta para o arquivo localizado
        - blocos `<plot>` repetidos incrementam o contador `plot`
        - derivações de `<image>` e defaults estruturais estão presentes
        - `ctx.meta` recebe o arquivo e o hash canônico
    """
    _require_imports()
    path = write_conf("circos.conf", minimal_conf_text)
    ctx = ResolutionContext()
    tree = load_config(str(path), ctx=ctx)

    assert tree.scalar("configfile") == str(path)
    assert ctx.counters["plot"] == 2
    assert tree.block("image").scalar("angle_offset") == "-270"
    assert tree.block("image").scalar("24bit") == "1"
    assert tree.scalar("anglestep") == "1"
    assert ctx.meta["configfile"] == str(path)
    assert len(ctx.meta["config_hash"]) == 64


def test_options_take_precedence_over_file(write_conf, minimal_conf_text):
    _require_imports()
    path = write_conf("circos.conf", minimal_conf_text)
    tree = load_config(path, options={"image/radius": "2000p", "chromosomes_units": "1000"})
    assert tree.block("image").scalar("radius") == "2000p"
    assert tree.scalar("chromosomes_units") == "1000"


def test_overrides_and_expressions_in_file(write_conf):
    _require_imports()
    path = write_conf(
        "circos.conf",
        "karyotype = k.txt\n"
        "track_width = 0.05\n"
        "r0 = eval(1 - 2*conf(track_width))\n"
        "<image>\nradius = 1000p\nradius* = 1500p\n</image>\n",
    )
    tree = load_config(path)
    assert tree.scalar("r0") == "0.9"
    assert tree.block("image").scalar("radius") == "1500p"


def test_duplicate_parameter_in_file_is_structural_error(write_conf):
    _require_imports()
    path = write_conf("circos.conf", "karyotype = k.txt\n<ideogram>\nthickness = 1p\nthickness = 2p\n</ideogram>\n")
    with pytest.raises(StructuralError) as exc:
        load_config(path)
    assert "[thickness]" in exc.value.message


def test_missing_karyotype_is_fatal(write_conf):
    _require_imports()
    path = write_conf("circos.conf", "chromosomes_units = 10\n")
    with pytest.raises(MissingRequiredParameter):
        load_config(path)


def test_yaml_and_json_load_as_trees(write_conf):
    """
    YAML e JSON produzem a mesma árvore canônica.

    Decisões arquiteturais:
        - Booleanos viram "1"/"0"
        - Números viram texto canônico
        - Listas viram Sequence
    """
    _require_imports()
    data = {
        "karyotype": "k.txt",
        "image": {"radius": 1500, "auto_alpha_colors": True},
        "plots": {"plot": [{"file": "a"}, {"file": "b"}]},
    }
    yaml_path = write_conf(
        "circos.yaml",
        "karyotype: k.txt\n"
        "image:\n  radius: 1500\n  auto_alpha_colors: true\n"
        "plots:\n  plot:\n    - file: a\n    - file: b\n",
    )
    json_path = write_conf("circos.json", json.dumps(data))

    expected = {
        "karyotype": "k.txt",
        "image": {"radius": "1500", "auto_alpha_colors": "1"},
        "plots": {"plot": [{"file": "a"}, {"file": "b"}]},
    }
    assert load_configuration(yaml_path).to_dict() == expected
    assert load_configuration(json_path).to_dict() == expected


def test_empty_yaml_is_empty_tree(write_conf):
    _require_imports()
    assert load_configuration(write_conf("empty.yml", "")).to_dict() == {}


def test_invalid_root_type_raises(write_conf):
    _require_imports()
    with pytest.raises(InvalidConfigRootTypeError):
        load_configuration(write_conf("list.json", "[1, 2]"))


def test_malformed_json_raises(write_conf):
    _require_imports()
    with pytest.raises(UnsupportedConfigFormatError):
        load_configuration(write_conf("bad.json", "{not json"))


def test_locate_configuration_searches_etc(tmp_path: Path, write_conf, monkeypatch):
    _require_imports()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    expected = write_conf("install/etc/circos.conf", "karyotype = k.txt\n")
    assert locate_configuration("circos.conf", [tmp_path / "install"]) == expected


def test_locate_configuration_lists_candidates(tmp_path: Path, monkeypatch):
    """A falha lista todos os caminhos tentados, na ordem de busca."""
    _require_imports()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    with pytest.raises(ConfigFileNotFoundError) as exc:
        locate_configuration("nothing.conf", [tmp_path / "a"])
    message = str(exc.value)
    assert "nothing.conf" in message
    assert str(tmp_path / "a" / "etc" / "nothing.conf") in message


def test_populate_configuration_without_validation():
    _require_imports()
    tree = Block.from_dict({"a": "1", "b": "__conf(a)*5__", "b*": "7"})
    out = populate_configuration(tree, {"a": "2"})
    assert out.scalar("a") == "2"
    assert out.scalar("b") == "7"
    assert out.scalar("minslicestep") == "5"
