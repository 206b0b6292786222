# src/circos_config/core/config/__init__.py

"""
Camada de configuração do circos-config.

Responsabilidades do pacote:
    - Parsing do formato texto (blocos, includes, comentários)
    - Carregamento de YAML/JSON como alternativa ao formato texto
    - Resolução de `__EXPR__`, `eval(...)` e diretivas de contador
    - Overrides por asterisco e detecção de multi-valores
    - Validação final (obrigatórios, defaults, derivações de `<image>`)
    - Hash canônico da árvore resolvida

Invariantes:
    - A raiz é sempre um `Block`
    - Falhas estruturais são fatais
"""
