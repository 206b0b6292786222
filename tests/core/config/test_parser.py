# tests/core/config/test_parser.py
"""
Testes do parser do formato texto de configuração.

Os testes asseguram que:
- blocos, blocos nomeados e chaves são lidos na ordem do arquivo
- blocos repetidos viram Sequence
- comentários, continuações e auto-true são tratados
- `<<include>>` é resolvido relativo ao arquivo que inclui
- blocos desbalanceados falham com arquivo e linha

Limites explícitos:
    - Não valida resolução de expressões
    - Não valida multi-valores (ver test_validation)
"""

import pytest

try:
    from circos_config.core.config.errors import ConfigSyntaxError, IncludeNotFoundError
    from circos_config.core.config.parser import parse_file, parse_text
    from circos_config.core.config.tree import Block, Scalar, Sequence
except Exception as e:  # noqa: BLE001
    parse_text = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing configuration parser. Implement:\n"
            "- src/circos_config/core/config/parser.py (parse_text, parse_file)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_parse_blocks_and_repeated_blocks(minimal_conf_text):
    """
    Verifica a leitura de blocos simples e de blocos repetidos.

    Invariantes:
        - `<image>` vira um Block
        - dois `<plot>` no mesmo bloco viram Sequence com dois itens
        - valores são texto, sem conversão numérica
    """
    _require_imports()
    tree = parse_text(minimal_conf_text)
    assert tree.scalar("karyotype") == "data/karyotype.txt"
    assert tree.block("image").scalar("radius") == "1500p"

    plots = tree.block("plots")
    assert isinstance(plots["plot"], Sequence)
    assert [p.scalar("file") for p in plots["plot"]] == ["a.txt", "b.txt"]


def test_named_blocks_nest_by_tag():
    _require_imports()
    text = """\
<ideogram>
<spacing>
default = 0.005r
<pairwise hs1 hs2>
spacing = 2r
</pairwise>
</spacing>
</ideogram>
"""
    tree = parse_text(text)
    spacing = tree.block("ideogram").block("spacing")
    assert spacing.scalar("default") == "0.005r"
    assert spacing.block("pairwise").block("hs1 hs2").scalar("spacing") == "2r"


def test_comments_continuations_case_and_auto_true():
    """
    Verifica regras léxicas do formato.

    - `#` inicia comentário, `\\#` é literal
    - `\\` no fim da linha continua na próxima
    - nomes de chave em minúsculas
    - yes/no viram 1/0
    """
    _require_imports()
    text = """\
# comentário inteiro
Show_Ticks = yes   # comentário no fim
show_labels = Off
label = item \\#1
chromosomes = hs1;hs2;\\
hs3
"""
    tree = parse_text(text)
    assert tree.scalar("show_ticks") == "1"
    assert tree.scalar("show_labels") == "0"
    assert tree.scalar("label") == "item #1"
    assert tree.scalar("chromosomes") == "hs1;hs2;hs3"


def test_line_without_equals_becomes_empty_key():
    """A linha sem `=` é preservada para que o resolver denuncie o espaço no nome."""
    _require_imports()
    tree = parse_text("red 255,0,0\n")
    assert tree.get("red 255,0,0") == Scalar("")


def test_value_is_split_on_first_equals():
    _require_imports()
    tree = parse_text("condition = var(value) == 1\n")
    assert tree.scalar("condition") == "var(value) == 1"


def test_include_is_resolved_relative_to_including_file(write_conf):
    """
    Verifica `<<include>>` relativo e inclusão repetida do mesmo arquivo.

    Decisões arquiteturais:
        - O diretório do arquivo que inclui é o primeiro candidato
        - O mesmo arquivo pode ser incluído mais de uma vez
    """
    _require_imports()
    write_conf("etc/ticks.conf", "<tick>\nspacing = 1u\n</tick>\n")
    main = write_conf(
        "main.conf",
        "karyotype = k.txt\n<ticks>\n<<include etc/ticks.conf>>\n<<include etc/ticks.conf>>\n</ticks>\n",
    )
    tree = parse_file(main)
    ticks = tree.block("ticks")["tick"]
    assert isinstance(ticks, Sequence)
    assert [t.scalar("spacing") for t in ticks] == ["1u", "1u"]


def test_include_found_through_search_path(write_conf, tmp_path):
    _require_imports()
    write_conf("shared/colors.conf", "<colors>\nred = 255,0,0\n</colors>\n")
    main = write_conf("conf/main.conf", "<<include colors.conf>>\n")
    tree = parse_file(main, search_path=[tmp_path / "shared"])
    assert tree.block("colors").scalar("red") == "255,0,0"


def test_missing_include_raises(write_conf):
    _require_imports()
    main = write_conf("main.conf", "<<include nowhere.conf>>\n")
    with pytest.raises(IncludeNotFoundError):
        parse_file(main)


def test_recursive_include_raises(write_conf):
    _require_imports()
    main = write_conf("loop.conf", "a = 1\n<<include loop.conf>>\n")
    with pytest.raises(ConfigSyntaxError):
        parse_file(main)


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("<image>\nradius = 1p\n", "never closed"),
        ("radius = 1p\n</image>\n", "without a matching opening"),
        ("<image>\n</ideogram>\n", "closed by"),
    ],
)
def test_unbalanced_blocks_raise_with_location(text, fragment):
    """Blocos desbalanceados falham com a posição do problema na mensagem."""
    _require_imports()
    with pytest.raises(ConfigSyntaxError) as exc:
        parse_text(text, source="broken.conf")
    assert fragment in str(exc.value)
    assert "broken.conf:" in str(exc.value)


def test_parse_returns_block_root():
    _require_imports()
    assert isinstance(parse_text(""), Block)
