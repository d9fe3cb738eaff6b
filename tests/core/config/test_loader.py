# tests/core/config/test_loader.py
"""
Testes do carregador de configuração (load_config / resolve_config).

Este módulo valida o comportamento do loader responsável por:
- carregar arquivos de defaults e de override local (YAML ou JSON)
- mesclar ambos sobre `DEFAULT_CONFIG`
- validar o schema da ponte

Os testes asseguram que:
- sem arquivos, a configuração efetiva é `DEFAULT_CONFIG`
- um defaults informado explicitamente precisa existir
- o arquivo local é opcional
- formatos e estruturas inválidas são rejeitados
- valores fora do schema são rejeitados com erro tipado

Invariantes:
    - A configuração final é sempre um dicionário
    - `DEFAULT_CONFIG` nunca é mutado
"""

import json
from pathlib import Path

import pytest

try:
    from atlas_bridge.core.config.loader import DEFAULT_CONFIG, load_config, resolve_config, validate_config
    from atlas_bridge.core.config.errors import (
        DefaultsNotFoundError,
        InvalidConfigRootTypeError,
        InvalidConfigValueError,
        UnsupportedConfigFormatError,
    )
except Exception as e:  # noqa: BLE001
    load_config = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que o loader de configuração e suas exceções tipadas estejam disponíveis.

    Falha explicitamente, com mensagem orientada, quando `loader` ou
    `errors` não podem ser importados.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing loader/errors modules. Implement:\n"
            "- src/atlas_bridge/core/config/loader.py (load_config)\n"
            "- src/atlas_bridge/core/config/errors.py (typed exceptions)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_no_files_gives_builtin_defaults():
    _require_imports()
    out = load_config()

    assert out == DEFAULT_CONFIG
    assert out is not DEFAULT_CONFIG
    assert out["bridge"]["roots"] == {"host": "guest", "guest": "host"}
    assert out["runtimes"]["guest"]["int_bits"] == 32


def test_missing_defaults_raises(tmp_path: Path):
    """
    Verifica que um defaults informado e ausente é tratado como erro fatal.

    Invariantes:
        - A exceção utilizada é específica (`DefaultsNotFoundError`)
        - Nenhuma configuração parcial é retornada
    """
    _require_imports()
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(tmp_path / "defaults.yaml"))


def test_missing_local_is_ok(tmp_path: Path, bridge_defaults_yaml):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(bridge_defaults_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(tmp_path / "local.yaml"))

    assert out["runtimes"]["guest"]["int_bits"] == 64
    assert out["runtimes"]["host"]["int_bits"] is None
    assert out["capabilities"]["tabular"] == ["pandas", "polars"]
    assert out["environments"]["analysis"]["packages"] == ["pandas"]


def test_local_overrides_defaults(tmp_path: Path, bridge_defaults_yaml, bridge_local_yaml):
    """
    Verifica que o arquivo local tem prioridade sobre defaults.

    Decisões arquiteturais:
        - Apenas as chaves presentes no local são alteradas
        - Chaves ausentes no local são preservadas de defaults
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yml"
    defaults.write_text(bridge_defaults_yaml, encoding="utf-8")
    local.write_text(bridge_local_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(local))

    assert out["bridge"]["roots"] == {"host": "guest", "guest": "py"}
    assert out["runtimes"]["guest"]["int_bits"] == 32
    assert out["capabilities"]["tabular"] == ["pandas", "polars"]


def test_json_files_are_supported(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.json"
    defaults.write_text(json.dumps({"runtimes": {"guest": {"int_bits": None}}}), encoding="utf-8")

    out = load_config(defaults_path=str(defaults))

    assert out["runtimes"]["guest"]["int_bits"] is None


def test_empty_file_is_empty_dict(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("", encoding="utf-8")
    assert load_config(defaults_path=str(defaults)) == DEFAULT_CONFIG


def test_unsupported_format_raises(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("a = 1", encoding="utf-8")
    with pytest.raises(UnsupportedConfigFormatError):
        load_config(defaults_path=str(defaults))


def test_non_dict_root_raises(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(defaults))


@pytest.mark.parametrize(
    "override",
    [
        {"bridge": {"roots": {"host": "not an identifier"}}},
        {"runtimes": {"guest": {"int_bits": 4}}},
        {"runtimes": {"host": {"int_bits": True}}},
        {"capabilities": {"tabular": ["pandas", ""]}},
        {"environments": {"broken": {"packages": "pandas"}}},
        {"environments": {"broken": ["pandas"]}},
    ],
)
def test_schema_violations_are_rejected(override):
    _require_imports()
    with pytest.raises(InvalidConfigValueError):
        resolve_config(override)


def test_resolve_config_does_not_mutate_defaults():
    _require_imports()
    before = json.dumps(DEFAULT_CONFIG, sort_keys=True)

    out = resolve_config({"environments": {"analysis": {"packages": ["pandas"]}}})

    assert out["environments"] == {"analysis": {"packages": ["pandas"]}}
    assert json.dumps(DEFAULT_CONFIG, sort_keys=True) == before


def test_validate_config_returns_same_object():
    _require_imports()
    cfg = resolve_config(None)
    assert validate_config(cfg) is cfg
