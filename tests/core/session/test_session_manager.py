# tests/core/session/test_session_manager.py
"""
Testes do ciclo de vida do SessionManager.

Este módulo valida:
- start único por manager (SessionAlreadyStarted)
- gate de ativação obrigatória (falha bloqueia a sessão)
- ativação não obrigatória (falha reportada, sessão sem guest)
- cache de capabilities (TypeProfile) definido pelo Environment ativo
- instalação, colisão e remoção dos proxies raiz
- eventos estruturados registrados no SessionContext

Decisões arquiteturais:
    - Cada teste cria seu próprio manager a partir de `bridge_config`
    - Nenhum teste depende de ordem de execução
"""

import pytest

from atlas_bridge.core.config.hashing import compute_config_hash
from atlas_bridge.core.errors import ENVIRONMENT_ALREADY_ACTIVE, ENVIRONMENT_NOT_FOUND, SESSION_ALREADY_STARTED
from atlas_bridge.core.exceptions import (
    EnvironmentAlreadyActive,
    EnvironmentAlreadyExists,
    EnvironmentNotFound,
    ReservedNameCollision,
    SessionAlreadyStarted,
    SessionBlocked,
    SessionNotReady,
)
from atlas_bridge.core.marshalling.engine import TypeProfile
from atlas_bridge.core.proxy.view import ProxyView
from atlas_bridge.core.session.manager import SessionManager, require_session
from atlas_bridge.core.values import RuntimeId, Value

HOST = RuntimeId.HOST
GUEST = RuntimeId.GUEST


def test_session_with_tabular_environment_has_rich_guest(session):
    assert session.environment.name == "analysis"
    assert session.guest.profile == TypeProfile(int_bits=32, rich_tables=True)
    assert session.host.profile == TypeProfile(int_bits=None, rich_tables=True)
    assert session.engine.profile(GUEST).rich_tables is True


def test_session_without_tabular_package_degrades(degraded_session):
    assert degraded_session.guest.profile.rich_tables is False


def test_session_without_any_environment_has_plain_guest(manager):
    s = manager.start_session()

    assert s.environment is None
    assert s.guest is not None
    assert s.guest.profile.rich_tables is False
    assert isinstance(s.root(GUEST), ProxyView)


def test_second_start_raises_already_started(session, manager):
    with pytest.raises(SessionAlreadyStarted):
        manager.start_session()
    assert session.ready


def test_required_activation_failure_blocks_start(manager):
    with pytest.raises(EnvironmentNotFound):
        manager.activate_environment("ghost", required=True)

    assert manager.blocked
    with pytest.raises(SessionBlocked) as exc:
        manager.start_session()
    assert exc.value.details["cause"]["type"] == ENVIRONMENT_NOT_FOUND


def test_required_activation_failure_after_start_closes_session(session, manager):
    g = session.root(HOST)

    with pytest.raises(EnvironmentAlreadyActive):
        manager.activate_environment("plain", required=True)

    assert not session.ready
    with pytest.raises(SessionNotReady):
        g.anything
    with pytest.raises(SessionNotReady):
        session.execute(HOST, "1")


def test_optional_activation_failure_reports_and_starts_without_guest(manager):
    result = manager.activate_environment("ghost")

    assert result.ok is False
    assert result.error.type == ENVIRONMENT_NOT_FOUND
    assert manager.context.warnings["session"]
    assert not manager.blocked

    s = manager.start_session()

    assert s.guest is None
    assert "guest" not in s.host.namespace
    with pytest.raises(SessionNotReady):
        s.execute(GUEST, "1")
    assert s.execute(HOST, "1 + 1") == Value.integer(2)


def test_optional_failure_followed_by_success_keeps_guest(manager):
    assert manager.activate_environment("ghost").ok is False
    assert manager.activate_environment("analysis").ok is True

    s = manager.start_session()

    assert s.guest is not None
    assert s.environment.name == "analysis"


def test_reactivating_active_environment_is_noop(manager):
    assert manager.activate_environment("analysis").ok
    again = manager.activate_environment("analysis", required=True)

    assert again.ok and again.noop


def test_switching_environment_requires_explicit_deactivation(manager):
    manager.activate_environment("analysis")

    result = manager.activate_environment("plain")
    assert result.ok is False
    assert result.error.type == ENVIRONMENT_ALREADY_ACTIVE

    assert manager.deactivate_environment().name == "analysis"
    assert manager.activate_environment("plain").ok


def test_activation_after_plain_start_is_rejected(manager):
    manager.start_session()

    result = manager.activate_environment("analysis")

    assert result.ok is False
    assert result.error.type == SESSION_ALREADY_STARTED


def test_deactivate_after_start_is_rejected(session, manager):
    with pytest.raises(SessionAlreadyStarted):
        manager.deactivate_environment()


def test_create_environment_then_activate(manager):
    env = manager.create_environment("custom", ["polars", "pandas"])

    assert env.packages == frozenset({"polars", "pandas"})
    with pytest.raises(EnvironmentAlreadyExists):
        manager.create_environment("custom", [])

    assert manager.activate_environment("custom").ok
    s = manager.start_session()
    assert s.guest.profile.rich_tables is True


def test_pre_existing_root_name_collides():
    m = SessionManager()
    with pytest.raises(ReservedNameCollision) as exc:
        m.start_session(host_namespace={"guest": 1})

    assert exc.value.details == {"name": "guest", "runtime": "host"}
    assert m.session is None


def test_failed_start_leaves_embedder_namespaces_untouched():
    host_ns = {"a": 1}
    guest_ns = {"host": "taken"}
    m = SessionManager()

    with pytest.raises(ReservedNameCollision) as exc:
        m.start_session(host_namespace=host_ns, guest_namespace=guest_ns)

    assert exc.value.details == {"name": "host", "runtime": "guest"}
    assert host_ns == {"a": 1}
    assert guest_ns == {"host": "taken"}


def test_custom_root_names_from_config():
    m = SessionManager(config={"bridge": {"roots": {"host": "r", "guest": "py"}}})
    s = m.start_session()

    assert isinstance(s.host.namespace["r"], ProxyView)
    assert isinstance(s.guest.namespace["py"], ProxyView)
    s.execute(GUEST, "answer = 42")
    assert s.execute(HOST, "r.answer") == Value.integer(42)


def test_namespaces_can_be_supplied_by_embedder():
    host_ns = {"existing": [1, 2]}
    m = SessionManager()
    s = m.start_session(host_namespace=host_ns)

    assert s.execute(GUEST, "host.existing") == Value.from_python([1, 2])
    assert isinstance(host_ns["guest"], ProxyView)


def test_close_uninstalls_roots_and_is_idempotent(manager):
    s = manager.start_session()
    s.close()
    s.close()

    assert "guest" not in s.host.namespace
    assert not s.ready
    with pytest.raises(SessionNotReady):
        require_session(manager)


def test_session_started_event_carries_config_hash(session, manager):
    started = [e for e in manager.context.events if e["message"] == "Sessão iniciada"]

    assert len(started) == 1
    event = started[0]
    assert event["session_id"] == "session-test-001"
    assert event["config_hash"] == compute_config_hash(manager.config)
    assert event["guest"] is True
    assert event["profiles"]["guest"] == {"int_bits": 32, "rich_tables": True}
    assert {r["name"] for r in event["roots"]} == {"guest", "host"}


def test_require_session_returns_ready_session(session, manager):
    assert require_session(manager) is session
