# tests/core/session/test_environment_registry.py
"""
Testes do EnvironmentRegistry.

Invariantes validados:
    - Nomes são únicos e não vazios
    - No máximo um Environment ativo por registro
    - Environments declarados em configuração são registrados na ordem
"""

import pytest

from atlas_bridge.core.exceptions import (
    EnvironmentAlreadyActive,
    EnvironmentAlreadyExists,
    EnvironmentNotFound,
)
from atlas_bridge.core.session.environment import EnvironmentRegistry, EnvironmentState


def test_from_config_registers_declared_environments(bridge_config):
    registry = EnvironmentRegistry.from_config(bridge_config)

    assert [e.name for e in registry.list()] == ["analysis", "plain"]
    assert registry.get("analysis").declares("pandas")
    assert not registry.get("plain").declares_any(["pandas", "polars"])
    assert registry.active() is None


def test_create_rejects_duplicates_and_empty_names():
    registry = EnvironmentRegistry()
    registry.create("a", ["x"])

    with pytest.raises(EnvironmentAlreadyExists):
        registry.create("a")
    with pytest.raises(ValueError):
        registry.create("   ")


def test_get_unknown_environment():
    with pytest.raises(EnvironmentNotFound) as exc:
        EnvironmentRegistry().get("ghost")
    assert exc.value.details["environment"] == "ghost"


def test_single_active_environment():
    registry = EnvironmentRegistry()
    registry.create("a")
    registry.create("b")

    registry.activate("a")
    assert registry.active().name == "a"
    assert registry.get("a").state is EnvironmentState.ACTIVE

    with pytest.raises(EnvironmentAlreadyActive):
        registry.activate("b")
    assert registry.get("b").state is EnvironmentState.INACTIVE

    # reativar o mesmo environment não é erro
    registry.activate("a")

    assert registry.deactivate().name == "a"
    assert registry.active() is None
    assert registry.deactivate() is None


def test_to_dict_is_serializable():
    registry = EnvironmentRegistry()
    env = registry.create("a", ["z", "b"])
    assert env.to_dict() == {"name": "a", "packages": ["b", "z"], "state": "inactive"}
