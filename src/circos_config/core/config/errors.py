# src/circos_config/core/config/errors.py
"""
Exceções canônicas da camada de arquivos de configuração do circos-config.

Este módulo define a hierarquia de exceções utilizadas durante a
localização, leitura e parsing de arquivos de configuração, antes de
qualquer resolução semântica da árvore.

As exceções aqui definidas representam **falhas de entrada explícitas**
(arquivo ausente, include ausente, sintaxe inválida), e não erros de
resolução. Erros de resolução vivem em `circos_config.core.exceptions`.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Falhas de entrada são tratadas como fatais
    - Mensagens indicam arquivo e, quando possível, linha

Invariantes:
    - Todas as exceções desta camada herdam de `ConfigError`
    - Nenhuma exceção representa erro de unidade ou de expressão

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende do resolver, do unit engine ou do validador
"""


class ConfigError(Exception):
    """
    Exceção base para erros de leitura de configuração.

    Todas as exceções levantadas durante localização, leitura e parsing
    de arquivos devem herdar desta classe, permitindo captura genérica
    sem confundir falhas de entrada com falhas de resolução.
    """


class ConfigFileNotFoundError(ConfigError):
    """
    Exceção levantada quando nenhum candidato de arquivo de configuração
    pode ser lido.

    Decisões arquiteturais:
        - O arquivo principal é obrigatório
        - A mensagem lista todos os caminhos tentados, na ordem de busca

    Limites explícitos:
        - Não tenta criar configuração padrão automaticamente
    """


class IncludeNotFoundError(ConfigError):
    """
    Exceção levantada quando uma diretiva `<<include path>>` não pode ser
    resolvida contra o diretório do arquivo que inclui nem contra o
    search path.
    """


class ConfigSyntaxError(ConfigError):
    """
    Exceção levantada quando o texto de configuração é estruturalmente
    inválido (bloco não fechado, fechamento sem abertura, fechamento com
    nome diferente da abertura).

    Invariantes:
        - A mensagem contém o arquivo e a linha do problema
        - Nenhuma árvore parcial é retornada
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo não é suportado.

    Formatos suportados (v1):
        - texto Circos (.conf e qualquer extensão não estruturada)
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz de um arquivo YAML/JSON não
    é um mapa chave-valor.

    Decisões arquiteturais:
        - A raiz da árvore é sempre um bloco
        - Listas ou escalares no root são inválidos
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge
    de opções sobre a árvore.

    Exemplo de conflito:
        - base:     <image> radius = 1500p </image>
        - override: image = 1

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """
