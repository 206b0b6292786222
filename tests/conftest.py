# tests/conftest.py
"""
Fixtures compartilhados para testes do circos-config.

Este módulo define fixtures reutilizáveis que fornecem:
- textos de configuração mínimos e determinísticos
- contexto de resolução controlado (ResolutionContext)
- dicionário de geometria com um ideograma default
- fábrica de arquivos de configuração em `tmp_path`

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture compartilha estado entre testes
    - Apenas `write_conf` toca o filesystem (sempre dentro de `tmp_path`)
"""

import pytest


@pytest.fixture
def minimal_conf_text() -> str:
    """
    Configuração texto mínima que passa por toda a validação.

    Contém os obrigatórios (`karyotype`), um bloco `<image>` e dois
    blocos `<plot>` repetidos dentro de `<plots>`.
    """
    return """\
karyotype = data/karyotype.txt
chromosomes_units = 1000000

<image>
radius       = 1500p
angle_offset = 90
</image>

<plots>
<plot>
file = a.txt
r0   = 0.5r
</plot>
<plot>
file = b.txt
r0   = 0.7r
</plot>
</plots>
"""


@pytest.fixture
def ctx():
    """ResolutionContext novo, sem grupos de debug habilitados."""
    from circos_config.core.context import ResolutionContext

    return ResolutionContext()


@pytest.fixture
def debug_ctx():
    """ResolutionContext com todos os grupos de debug habilitados."""
    from circos_config.core.context import ResolutionContext

    return ResolutionContext(debug_groups=["_all"])


@pytest.fixture
def dims():
    """
    Geometria de um ideograma default.

    radius 500, radius_inner 450, radius_outer 550.
    """
    from circos_config.core.geometry import Dims

    return Dims(
        {
            "ideogram": {
                "default": {"radius": 500, "radius_inner": 450, "radius_outer": 550},
                "hs1": {"radius": 400, "radius_inner": 380, "radius_outer": 420},
            }
        }
    )


@pytest.fixture
def write_conf(tmp_path):
    """
    Fábrica que grava um arquivo em `tmp_path` e retorna seu caminho.

    Usado por:
        - testes do parser (includes)
        - testes do loader (texto, YAML, JSON)
    """

    def _write(name: str, content: str):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
