# tests/core/test_geometry.py
"""
Testes do dicionário de geometria (Dims).

Caminhos consultados antes de publicados são fatais.
"""

import pytest

try:
    from circos_config.core.exceptions import ResolutionError
    from circos_config.core.geometry import Dims
except Exception as e:  # noqa: BLE001
    Dims = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing geometry module. Implement:\n"
            "- src/circos_config/core/geometry.py (Dims)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_get_and_has(dims):
    _require_imports()
    assert dims.get("ideogram", "default", "radius") == 500
    assert dims.has("ideogram", "hs1")
    assert not dims.has("ideogram", "hs9", "radius")
    assert not dims.has("ideogram", "default", "radius", "deeper")


def test_set_publishes_incrementally():
    _require_imports()
    dims = Dims()
    dims.set("ideogram", "default", "radius", 500)
    dims.set("ideogram", "default", "thickness", "20")
    assert dims.get("ideogram", "default", "thickness") == 20
    assert dims.as_dict() == {"ideogram": {"default": {"radius": 500, "thickness": "20"}}}


def test_from_dict_merges_nested_maps():
    _require_imports()
    dims = Dims.from_dict({"ideogram": {"default": {"radius": 1}}})
    dims.set("ideogram", "hs1", "radius", 2)
    assert dims.get("ideogram", "default", "radius") == 1
    assert dims.get("ideogram", "hs1", "radius") == 2


def test_missing_or_non_numeric_is_fatal(dims):
    _require_imports()
    with pytest.raises(ResolutionError) as exc:
        dims.get("ideogram", "default", "label_radius")
    assert exc.value.details["path"] == ["ideogram", "default", "label_radius"]

    with pytest.raises(ResolutionError):
        dims.get("ideogram", "default")


def test_set_rejects_bad_paths(dims):
    _require_imports()
    with pytest.raises(ValueError):
        dims.set(5)
    with pytest.raises(ValueError):
        dims.set("ideogram", "default", "radius", "x", 1)
