# src/atlas_bridge/core/config/hashing.py
"""
Hash canônico da configuração efetiva da ponte.

O hash identifica estruturalmente a configuração usada por uma sessão e é
registrado no evento "Sessão iniciada" do log estruturado.

Política (v1):
    - JSON canônico (chaves ordenadas, separadores compactos, UTF-8)
    - SHA-256, hexadecimal de 64 caracteres
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera o hash SHA-256 determinístico da configuração.

    Raises:
        TypeError: Se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
