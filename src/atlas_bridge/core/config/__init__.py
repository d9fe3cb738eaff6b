# src/atlas_bridge/core/config/__init__.py

"""
Camada de configuração do Atlas Bridge.

Este pacote carrega, mescla, valida e identifica (hash) a configuração de
uma sessão da ponte: nomes dos proxies raiz, largura inteira nativa de cada
runtime, pacotes que concedem a capability tabular e environments declarados.

Princípios fundamentais:
    - Configuração é declarativa e explícita
    - Nenhuma heurística implícita durante merge
    - A mesma entrada sempre produz a mesma configuração final
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import DEFAULT_CONFIG, load_config, resolve_config, validate_config
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "DEFAULT_CONFIG",
    "load_config",
    "resolve_config",
    "validate_config",
    "deep_merge",
]
