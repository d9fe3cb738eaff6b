# src/atlas_bridge/core/config/loader.py
"""
Loader canônico de configuração do Atlas Bridge.

A configuração efetiva de uma sessão é resolvida a partir de:
    - um arquivo de defaults (opcional; sem ele usa-se `DEFAULT_CONFIG`)
    - um arquivo local de overrides (opcional)

Responsabilidades do módulo:
    - Carregar arquivos de configuração em YAML ou JSON
    - Validar requisitos estruturais mínimos (tipo raiz)
    - Resolver a configuração final via deep-merge determinístico
    - Validar o schema da ponte (nomes de proxy, larguras inteiras,
      capabilities e environments declarados)

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - `DEFAULT_CONFIG` nunca é mutado
    - Uma configuração retornada por `load_config` já passou por
      `validate_config`

Limites explícitos:
    - Não cria sessões nem environments
    - Não instala pacotes
"""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


DEFAULT_CONFIG: Dict[str, Any] = {
    "bridge": {
        # nome instalado em cada runtime -> proxy raiz para o outro runtime
        "roots": {"host": "guest", "guest": "host"},
    },
    "runtimes": {
        "host": {"int_bits": None},
        "guest": {"int_bits": 32},
    },
    "capabilities": {
        "tabular": ["pandas"],
    },
    "environments": {},
}


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def _require_dict(config: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = config.get(key)
    if not isinstance(value, dict):
        raise InvalidConfigValueError(f"'{key}' deve ser dict, recebido: {type(value).__name__}")
    return value


def _require_str_list(value: Any, where: str) -> None:
    if not isinstance(value, list) or not all(isinstance(x, str) and x.strip() for x in value):
        raise InvalidConfigValueError(f"'{where}' deve ser lista de strings não vazias")


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Valida o schema da ponte e retorna a própria configuração.

    Regras (v1):
        - `bridge.roots.host` e `bridge.roots.guest` são identificadores python
        - `runtimes.<id>.int_bits` é `null` ou inteiro >= 8
        - `capabilities.tabular` é lista de strings
        - `environments.<nome>.packages` é lista de strings

    Raises:
        InvalidConfigValueError: na primeira violação encontrada.
    """
    bridge = _require_dict(config, "bridge")
    roots = bridge.get("roots")
    if not isinstance(roots, dict):
        raise InvalidConfigValueError("'bridge.roots' deve ser dict")
    for side in ("host", "guest"):
        name = roots.get(side)
        if not isinstance(name, str) or not name.isidentifier():
            raise InvalidConfigValueError(
                f"'bridge.roots.{side}' deve ser um identificador python, recebido: {name!r}"
            )

    runtimes = _require_dict(config, "runtimes")
    for side in ("host", "guest"):
        rt = runtimes.get(side)
        if not isinstance(rt, dict):
            raise InvalidConfigValueError(f"'runtimes.{side}' deve ser dict")
        bits = rt.get("int_bits")
        if bits is not None and (isinstance(bits, bool) or not isinstance(bits, int) or bits < 8):
            raise InvalidConfigValueError(
                f"'runtimes.{side}.int_bits' deve ser null ou inteiro >= 8, recebido: {bits!r}"
            )

    capabilities = _require_dict(config, "capabilities")
    _require_str_list(capabilities.get("tabular"), "capabilities.tabular")

    environments = _require_dict(config, "environments")
    for env_name, env in environments.items():
        if not isinstance(env, dict):
            raise InvalidConfigValueError(f"'environments.{env_name}' deve ser dict")
        _require_str_list(env.get("packages", []), f"environments.{env_name}.packages")

    return config


def load_config(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva da ponte.

    Política de resolução:
        - Sem `defaults_path`, a base é `DEFAULT_CONFIG`
        - Com `defaults_path`, o arquivo é mesclado sobre `DEFAULT_CONFIG`
          e precisa existir
        - O arquivo local é opcional; quando ausente em disco é ignorado
        - O local sempre tem prioridade sobre defaults

    Args:
        defaults_path (Optional[str]): Caminho para o arquivo de defaults.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida e validada.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
        InvalidConfigValueError: Se o resultado violar o schema da ponte.
    """
    effective = deepcopy(DEFAULT_CONFIG)

    if defaults_path is not None:
        effective = deep_merge(effective, _load_file(Path(defaults_path)))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    return validate_config(effective)


def resolve_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Mescla overrides em memória sobre `DEFAULT_CONFIG` e valida."""
    if overrides is None:
        return validate_config(deepcopy(DEFAULT_CONFIG))
    return validate_config(deep_merge(DEFAULT_CONFIG, overrides))
