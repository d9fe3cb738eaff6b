# src/atlas_bridge/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Atlas Bridge.

As exceções aqui definidas representam violações estruturais explícitas
da configuração, e não erros de conversão ou de runtime.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Erros de configuração são sempre fatais (sem fallback)
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração da ponte.

    Permite captura genérica de falhas de carregamento, merge e validação,
    distinguindo-as de falhas da sessão ou dos runtimes.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de defaults informado explicitamente não existe.

    Limites explícitos:
        - Não tenta inferir ou criar defaults automaticamente
    """


class UnsupportedConfigFormatError(ConfigError):
    """Extensão de arquivo diferente de .yaml, .yml ou .json."""


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz do arquivo não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"runtimes": {"guest": {"int_bits": 32}}}
        - override: {"runtimes": {"guest": "32"}}
    """


class InvalidConfigValueError(ConfigError):
    """
    Valor estruturalmente válido, porém fora do schema da ponte.

    Exemplos:
        - `runtimes.guest.int_bits` negativo
        - nomes de proxy raiz que não são identificadores python
        - `environments.<nome>.packages` que não é lista de strings
    """
