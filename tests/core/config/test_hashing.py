# tests/core/config/test_hashing.py
"""
Testes do hashing canônico de configuração.

Este módulo valida a função `compute_config_hash`, que identifica
estruturalmente a configuração efetiva de uma sessão da ponte.

Os testes asseguram que:
- o hash é determinístico e independente da ordem das chaves
- o algoritmo é SHA-256 sobre JSON canônico
- mudanças de valor alteram o hash

Limites explícitos:
    - Não valida carregamento nem merge de configuração
"""

import hashlib
import json

import pytest

from atlas_bridge.core.config.hashing import compute_config_hash
from atlas_bridge.core.config.loader import resolve_config


def _canonical_json_bytes(obj) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def test_hash_is_deterministic():
    """
    Verifica que configurações equivalentes produzem o mesmo hash.

    Invariantes:
        - O hash retornado é uma string hexadecimal de 64 caracteres
        - A ordem original das chaves não altera o resultado
    """
    h1 = compute_config_hash({"b": 2, "a": 1})
    h2 = compute_config_hash({"a": 1, "b": 2})
    assert h1 == h2
    assert isinstance(h1, str)
    assert len(h1) == 64


def test_hash_matches_sha256_of_canonical_json():
    cfg = resolve_config({"environments": {"análise": {"packages": ["pandas"]}}})
    expected = hashlib.sha256(_canonical_json_bytes(cfg)).hexdigest()
    assert compute_config_hash(cfg) == expected


def test_hash_changes_on_override():
    base = resolve_config(None)
    changed = resolve_config({"runtimes": {"guest": {"int_bits": 64}}})
    assert compute_config_hash(base) != compute_config_hash(changed)


def test_hash_rejects_non_dict():
    with pytest.raises(TypeError):
        compute_config_hash(["not", "a", "dict"])
