# src/atlas_bridge/core/config/merge.py
"""
Deep-merge canônico da configuração da ponte.

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (ex.: `capabilities.tabular`, `packages`)
    - escalar → sobrescrita direta
    - None na base aceita qualquer override (ex.: `int_bits: null`)
    - conflito de tipos → erro estrutural explícito

Invariantes:
    - Nenhum input é mutado
    - A mesma entrada sempre produz a mesma saída
    - Conflitos estruturais interrompem o merge (sem merge parcial)
"""

from copy import deepcopy
from typing import Any, Dict, List, Optional

from .errors import ConfigTypeConflictError


def deep_merge(
    base: Dict[str, Any],
    override: Dict[str, Any],
    _path: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre defaults e overrides.

    Args:
        base (Dict[str, Any]): Configuração base (ex.: DEFAULT_CONFIG).
        override (Dict[str, Any]): Overrides explícitos.

    Returns:
        Dict[str, Any]: Nova configuração resultante.

    Raises:
        ConfigTypeConflictError: Se uma chave possuir tipos incompatíveis.
    """
    path = _path or []

    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        key_path = path + [str(key)]

        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value, key_path)
            continue

        if base_value is None or override_value is None:
            result[key] = deepcopy(override_value)
            continue

        if isinstance(base_value, list) and isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        if type(base_value) is not type(override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{'.'.join(key_path)}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result
