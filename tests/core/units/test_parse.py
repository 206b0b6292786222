# tests/core/units/test_parse.py
"""
Testes do resolver de expressões dimensionais (UnitParser).

Os testes asseguram que:
- `dims(...)` é substituído pela geometria do ideograma de contexto
- tokens com unidade são convertidos para pixels (ou bases, para `u`)
- o fator relativo vem de `relative`, senão de `side`, senão da magnitude
- expressão ausente retorna None, distinto de 0
- geometria ausente é fatal

Geometria usada (ver conftest):
    default: radius 500, radius_inner 450, radius_outer 550
    hs1:     radius 400, radius_inner 380, radius_outer 420
"""

from types import SimpleNamespace

import pytest

try:
    from circos_config.core.config.tree import Block
    from circos_config.core.context import ResolutionContext
    from circos_config.core.exceptions import ConversionError, ResolutionError
    from circos_config.core.geometry import Dims
    from circos_config.core.units.parse import UnitParser, ideogram_tag, radius_flag
except Exception as e:  # noqa: BLE001
    UnitParser = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing unit expression resolver. Implement:\n"
            "- src/circos_config/core/units/parse.py (UnitParser)\n"
            f"Import error: {_IMPORT_ERR}"
        )


@pytest.fixture
def parser(dims):
    return UnitParser(dims=dims, tree=Block.from_dict({"chromosomes_units": "1000"}))


def test_absent_expression_is_none(parser):
    _require_imports()
    assert parser.parse(None) is None
    assert parser.parse("0r") == 0


def test_dims_plus_relative_value(parser):
    """
    `dims(ideogram,radius)+0.075r` com radius 500 e relative 1000 resulta em 575.
    """
    _require_imports()
    assert parser.parse("dims(ideogram,radius)+0.075r", relative=1000) == 575


def test_magnitude_chooses_radius(parser):
    """
    Sem `side` nem `relative`:
        - valor < 1 usa radius_inner
        - valor >= 1 usa radius_outer
    """
    _require_imports()
    assert parser.parse("0.5r") == 225
    assert parser.parse("1.1r") == 605


@pytest.mark.parametrize(
    "side, expected",
    [("outer", 275), ("+", 275), (1, 275), ("inner", 225), ("-", 225), (0, 225), ("", 225)],
)
def test_side_overrides_magnitude(parser, side, expected):
    _require_imports()
    assert parser.parse("0.5r", side=side) == expected


def test_relative_wins_over_side(parser):
    _require_imports()
    assert parser.parse("0.5r", side="outer", relative=100) == 50


def test_ideogram_context(parser):
    """
    O tag do ideograma pode vir como texto, mapa ou objeto com `.tag`.
    """
    _require_imports()
    assert parser.parse("dims(ideogram,radius) - 10p", ideogram="hs1") == 390
    assert parser.parse("0.5r", ideogram={"tag": "hs1"}) == 190
    assert parser.parse("1r", ideogram=SimpleNamespace(tag="hs1")) == 420


def test_chromosome_units_convert_to_bases(parser):
    _require_imports()
    assert parser.parse("2u + 5") == 2005
    assert parser.parse("(1u + 0.5u) / 2") == 750


def test_chromosome_units_default_to_one(dims):
    _require_imports()
    assert UnitParser(dims=dims).parse("3u") == 3


def test_missing_dimension_is_fatal(parser):
    _require_imports()
    with pytest.raises(ResolutionError) as exc:
        parser.parse("dims(ideogram,label_radius) + 5p")
    assert "label_radius" in exc.value.message
    with pytest.raises(ResolutionError):
        parser.parse("0.5r", ideogram="hs9")


def test_bases_cannot_become_pixels(parser):
    _require_imports()
    with pytest.raises(ConversionError):
        parser.parse("500b")


def test_pixel_tokens_need_no_geometry():
    """
    `p` é a unidade de destino: nenhum raio de ideograma é consultado,
    então a expressão resolve mesmo antes do layout publicar os raios.
    """
    _require_imports()
    assert UnitParser(dims=Dims()).parse("1500p") == 1500
    image = Dims({"image": {"radius": 1500}})
    assert UnitParser(dims=image).parse("dims(image,radius)-50p") == 1450
    with pytest.raises(ConversionError):
        UnitParser(dims=Dims()).parse("500b")


def test_exponent_literals_keep_their_unit(parser):
    _require_imports()
    assert parser.parse("1e-3r", relative=1000) == 1
    assert parser.parse("2.5e2p") == 250
    assert parser.parse("1E+1u") == 10000


def test_timer_and_events_recorded_in_context(dims):
    _require_imports()
    ctx = ResolutionContext(debug_groups=["unit"])
    UnitParser(dims=dims, ctx=ctx).parse("0.5r")
    assert "unitparse" in ctx.timings
    assert [e["message"] for e in ctx.events] == ["parse", "parsed"]


def test_helpers():
    _require_imports()
    assert ideogram_tag(None) is None
    assert ideogram_tag("hs2") == "hs2"
    assert radius_flag(None) is None
    assert radius_flag("Inner") == "radius_inner"
    assert radius_flag("OUTER") == "radius_outer"
