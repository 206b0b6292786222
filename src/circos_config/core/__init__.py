# src/circos_config/core/__init__.py
"""
Core do circos-config.

Este pacote reúne a resolução canônica da configuração de um diagrama
circular: carga da árvore, expressões embutidas, contadores, overrides,
validação estrutural e o motor de unidades.

O core é projetado para ser:
    - determinístico
    - testável de forma isolada
    - livre de estado global (todo estado vive no ResolutionContext)

Componentes principais:
    - config   → árvore, parser, loader, resolver, overrides, validação
    - expr     → avaliador sandboxed de expressões
    - units    → unit engine e resolver de expressões dimensionais
    - geometry → dicionário DIMS publicado pelo layout
    - colors   → resolução de nomes de cor
"""
