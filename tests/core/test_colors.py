# tests/core/test_colors.py
"""
Testes da resolução de cores do bloco `<colors>`.

Os testes asseguram que:
- aliases são seguidos até a definição final
- ciclos de alias são ResolutionError
- definições rgb e hsv são validadas e convertidas
- a opacidade de `_aN` depende de auto_alpha_colors/auto_alpha_steps
- definições repetidas são colapsadas ou rejeitadas
"""

import pytest

try:
    from circos_config.core.colors import (
        hsv_to_rgb,
        normalize_color_block,
        resolve_color_definition,
        rgb_color,
        rgb_color_opacity,
        rgb_color_transparency,
        split_alpha_suffix,
        validate_hsv,
        validate_rgb,
    )
    from circos_config.core.config.tree import Block, Scalar
    from circos_config.core.exceptions import (
        FormatError,
        MissingRequiredParameter,
        ResolutionError,
        StructuralError,
    )
except Exception as e:  # noqa: BLE001
    rgb_color = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing color resolution. Implement:\n"
            "- src/circos_config/core/colors.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


@pytest.fixture
def colors():
    return Block.from_dict(
        {
            "red": "255,0,0",
            "favourite": "red",
            "best": "favourite",
            "dark": "hsv(0,1,0.5)",
            "a": "b",
            "b": "a",
        }
    )


def test_alias_chain(colors):
    _require_imports()
    assert resolve_color_definition("best", colors) == "255,0,0"
    assert rgb_color("best", colors) == (255, 0, 0)
    assert rgb_color("unknown", colors) is None
    assert rgb_color(None, colors) is None


def test_alias_cycle_is_fatal(colors):
    _require_imports()
    with pytest.raises(ResolutionError) as exc:
        rgb_color("a", colors)
    assert "circular" in exc.value.message


def test_alpha_suffix_is_ignored_for_channels(colors):
    _require_imports()
    assert split_alpha_suffix("red_a3") == ("red", 3)
    assert split_alpha_suffix("red") == ("red", None)
    assert rgb_color("red_a3", colors) == (255, 0, 0)


def test_plain_mapping_table():
    _require_imports()
    assert rgb_color("x", {"x": "10,20,30,40"}) == (10, 20, 30, 40)


def test_validate_rgb():
    """
    - três ou quatro inteiros 0-255
    - alfa limitado a 127
    """
    _require_imports()
    assert validate_rgb("255, 10, 50") == (255, 10, 50)
    assert validate_rgb([1, 2, 3]) == (1, 2, 3)
    assert validate_rgb("300,0,0") is None
    assert validate_rgb("255,0,0,200") is None
    assert validate_rgb("red") is None
    with pytest.raises(FormatError):
        validate_rgb("255,0,0,200", strict=True)


def test_validate_hsv_and_conversion(colors):
    _require_imports()
    assert validate_hsv("hsv(60,1,0.5)") == (60, 1, 0.5)
    assert validate_hsv("hsv(400,1,1)") is None
    assert validate_hsv("255,0,0") is None
    with pytest.raises(FormatError):
        validate_hsv("hsv(400,1,1)", strict=True)

    assert hsv_to_rgb(0, 1, 1) == (255, 0, 0)
    assert hsv_to_rgb(0, 0, 1, 50) == (255, 255, 255, 50)
    assert rgb_color("dark", colors) == (128, 0, 0)


def test_opacity():
    """
    opacidade = 1 - N / (auto_alpha_steps + 1)
    """
    _require_imports()
    image = {"auto_alpha_colors": "1", "auto_alpha_steps": "4"}
    assert rgb_color_opacity("red", image) == 1
    assert rgb_color_opacity(None, None) == 1
    assert rgb_color_opacity("red_a1", image) == pytest.approx(0.8)
    assert rgb_color_transparency("red_a2", Block.from_dict(image)) == pytest.approx(0.4)


def test_opacity_requires_auto_alpha():
    _require_imports()
    with pytest.raises(MissingRequiredParameter):
        rgb_color_opacity("red_a1", {"auto_alpha_colors": "0", "auto_alpha_steps": "5"})
    with pytest.raises(MissingRequiredParameter):
        rgb_color_opacity("red_a1", None)


def test_normalize_collapses_identical_definitions(ctx):
    _require_imports()
    colors = Block()
    colors.add("red", Scalar("255,0,0"))
    colors.add("red", Scalar("255,0,0"))
    colors.add("blue", Scalar("0,0,255"))

    normalize_color_block(colors, ctx)

    assert colors.scalar("red") == "255,0,0"
    assert colors.scalar("blue") == "0,0,255"
    assert len(ctx.warnings["color"]) == 1


def test_normalize_rejects_conflicts():
    _require_imports()
    colors = Block()
    colors.add("red", Scalar("255,0,0"))
    colors.add("red", Scalar("250,0,0"))
    with pytest.raises(StructuralError) as exc:
        normalize_color_block(colors)
    assert exc.value.details["definitions"] == ["255,0,0", "250,0,0"]

    with pytest.raises(StructuralError):
        normalize_color_block(Block.from_dict({"red": {"r": "255"}}))
