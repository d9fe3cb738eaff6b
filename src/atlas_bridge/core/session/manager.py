# src/atlas_bridge/core/session/manager.py
"""
Session Manager do Atlas Bridge.

O `SessionManager` é dono do ciclo de vida da ponte:
    - cria Environments explicitamente e controla sua ativação
    - constrói os dois Runtime Adapters na primeira (e única) sessão
    - fixa as capabilities de tipo (cache de TypeProfile) no start
    - instala os dois proxies raiz, um em cada namespace, sob nomes fixos

Não existe singleton: o estado "uma sessão por processo" pertence à instância
do manager que o embarcador mantém.

Gate de ativação obrigatória:
    - `activate_environment(..., required=True)` que falha bloqueia o
      manager: `start_session` levanta `SessionBlocked` e uma sessão já
      iniciada deixa de aceitar chamadas
    - com `required=False` a falha é reportada (ActivationResult + warning)
      e, se nenhum Environment ficar ativo, a sessão inicia sem guest
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from ..config.hashing import compute_config_hash
from ..config.loader import resolve_config
from ..errors import BridgeErrorPayload, payload_from_exception
from ..exceptions import (
    BridgeException,
    ReservedNameCollision,
    SessionAlreadyStarted,
    SessionBlocked,
    SessionNotReady,
)
from ..marshalling.engine import MarshallingEngine, TypeProfile
from ..proxy.refs import PROXY_TAG, ProxyRef
from ..proxy.resolver import ProxyResolver
from ..proxy.view import ProxyView
from ..runtime.adapter import RuntimeAdapter
from ..runtime.python_runtime import PythonRuntime
from ..values import RuntimeId, Value
from .context import SessionContext
from .environment import Environment, EnvironmentRegistry


@dataclass(frozen=True)
class ActivationResult:
    """Resultado de `activate_environment` quando a ativação não é obrigatória."""

    environment: str
    ok: bool
    error: Optional[BridgeErrorPayload] = None
    noop: bool = False


class Session:
    """
    Sessão iniciada: dois adapters, engine, resolver e proxies raiz.

    `guest` é None quando a sessão iniciou sem runtime guest (ativação não
    obrigatória que falhou).
    """

    def __init__(
        self,
        *,
        host: RuntimeAdapter,
        guest: Optional[RuntimeAdapter],
        engine: MarshallingEngine,
        resolver: ProxyResolver,
        context: SessionContext,
        environment: Optional[Environment],
        roots: Dict[RuntimeId, str],
    ) -> None:
        self.host = host
        self.guest = guest
        self.engine = engine
        self.resolver = resolver
        self.context = context
        self.environment = environment
        self.roots = dict(roots)
        self._adapters = {RuntimeId.HOST: host, RuntimeId.GUEST: guest}

    @property
    def ready(self) -> bool:
        return not self.resolver.closed

    def adapter(self, runtime: RuntimeId) -> RuntimeAdapter:
        return self.resolver.adapter(RuntimeId(runtime))

    def root(self, runtime: RuntimeId) -> ProxyView:
        """Proxy raiz instalado no namespace de `runtime` (aponta para o outro)."""
        runtime = RuntimeId(runtime)
        value = self.adapter(runtime).get(self.roots[runtime])
        return self.adapter(runtime).to_native(value)

    def execute(self, runtime: RuntimeId, code: str) -> Value:
        return self.adapter(RuntimeId(runtime)).execute(code)

    def _uninstall_roots(self) -> None:
        for runtime, name in self.roots.items():
            adapter = self._adapters.get(runtime)
            if adapter is not None and adapter.has(name):
                adapter.delete(name)

    def close(self) -> None:
        """Remove os proxies raiz e encerra a sessão (idempotente)."""
        if self.resolver.closed:
            return
        self._uninstall_roots()
        self.resolver.close("closed")
        self.context.log(component="session", level="INFO", message="Sessão encerrada")

    def _block(self, exc: BridgeException) -> None:
        if self.resolver.closed:
            return
        self._uninstall_roots()
        self.resolver.close("blocked")
        self.context.log(
            component="session",
            level="ERROR",
            message="Sessão bloqueada por falha de ativação obrigatória",
            error=payload_from_exception(exc).to_dict(),
        )


class SessionManager:
    """Dono do registro de Environments e da única sessão da ponte."""

    def __init__(
        self,
        *,
        config: Optional[Dict[str, Any]] = None,
        registry: Optional[EnvironmentRegistry] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.config: Dict[str, Any] = resolve_config(config)
        self.registry = registry or EnvironmentRegistry.from_config(self.config)
        self.context = SessionContext(
            session_id=session_id or uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            config=self.config,
            config_hash=compute_config_hash(self.config),
        )
        self._session: Optional[Session] = None
        self._blocked: Optional[BridgeException] = None
        self._activation_failed = False

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def blocked(self) -> bool:
        return self._blocked is not None

    # -----------------------------
    # Environments
    # -----------------------------
    def create_environment(self, name: str, packages: Iterable[str] = ()) -> Environment:
        env = self.registry.create(name, packages)
        self.context.log(
            component="session",
            level="INFO",
            message=f"Environment criado: {name}",
            environment=env.to_dict(),
        )
        return env

    def activate_environment(self, name: str, *, required: bool = False) -> ActivationResult:
        """
        Ativa um Environment conhecido.

        Raises:
            EnvironmentNotFound, EnvironmentAlreadyActive, SessionAlreadyStarted:
                apenas com `required=True` (o manager fica bloqueado).
        """
        try:
            current = self.registry.active()
            if current is not None and current.name == name:
                self.context.log(
                    component="session",
                    level="INFO",
                    message=f"Environment '{name}' já está ativo",
                )
                return ActivationResult(environment=name, ok=True, noop=True)

            env = self.registry.get(name)
            if current is None and self._session is not None:
                raise SessionAlreadyStarted(
                    message="Capabilities já fixadas: sessão iniciada sem Environment",
                    details={"environment": name},
                )
            self.registry.activate(env.name)

        except BridgeException as exc:
            payload = payload_from_exception(exc)
            if required:
                self._blocked = exc
                self.context.log(
                    component="session",
                    level="ERROR",
                    message=f"Ativação obrigatória falhou: {name}",
                    error=payload.to_dict(),
                )
                if self._session is not None:
                    self._session._block(exc)
                raise
            self._activation_failed = True
            self.context.add_warning(component="session", message=exc.message)
            return ActivationResult(environment=name, ok=False, error=payload)

        self.context.log(
            component="session",
            level="INFO",
            message=f"Environment ativado: {name}",
            environment=env.to_dict(),
        )
        return ActivationResult(environment=name, ok=True)

    def deactivate_environment(self) -> Optional[Environment]:
        """Teardown explícito do Environment ativo (somente antes do start)."""
        if self._session is not None:
            raise SessionAlreadyStarted(
                message="Não é possível desativar o Environment de uma sessão iniciada",
                details={"session_id": self.context.session_id},
            )
        env = self.registry.deactivate()
        if env is not None:
            self.context.log(component="session", level="INFO", message=f"Environment desativado: {env.name}")
        return env

    # -----------------------------
    # Sessão
    # -----------------------------
    def _profiles(self, env: Optional[Environment]) -> Dict[RuntimeId, TypeProfile]:
        runtimes = self.config["runtimes"]
        tabular = self.config["capabilities"]["tabular"]
        return {
            RuntimeId.HOST: TypeProfile(int_bits=runtimes["host"]["int_bits"], rich_tables=True),
            RuntimeId.GUEST: TypeProfile(
                int_bits=runtimes["guest"]["int_bits"],
                rich_tables=env is not None and env.declares_any(tabular),
            ),
        }

    def start_session(
        self,
        *,
        host_namespace: Optional[Dict[str, Any]] = None,
        guest_namespace: Optional[Dict[str, Any]] = None,
    ) -> Session:
        """
        Constrói os adapters, instala os proxies raiz e marca a sessão pronta.

        Raises:
            SessionBlocked: ativação obrigatória falhou anteriormente.
            SessionAlreadyStarted: segunda chamada no mesmo manager.
            ReservedNameCollision: nome de proxy raiz já ocupado.
        """
        if self._blocked is not None:
            raise SessionBlocked(
                message="Sessão bloqueada: ativação obrigatória de Environment falhou",
                details={"cause": payload_from_exception(self._blocked).to_dict()},
                hint="Crie/ative um Environment válido em um novo SessionManager.",
            )
        if self._session is not None:
            raise SessionAlreadyStarted(
                message="Sessão já iniciada neste manager",
                details={"session_id": self.context.session_id},
            )

        env = self.registry.active()
        with_guest = env is not None or not self._activation_failed
        profiles = self._profiles(env)
        engine = MarshallingEngine(profiles)

        roots_cfg = self.config["bridge"]["roots"]
        roots = {RuntimeId.HOST: roots_cfg["host"], RuntimeId.GUEST: roots_cfg["guest"]}

        namespaces = {RuntimeId.HOST: host_namespace}
        if with_guest:
            namespaces[RuntimeId.GUEST] = guest_namespace
        for runtime, namespace in namespaces.items():
            if namespace is not None and roots[runtime] in namespace:
                raise ReservedNameCollision(
                    message=f"Nome reservado '{roots[runtime]}' já existe no runtime '{runtime.value}'",
                    details={"name": roots[runtime], "runtime": runtime.value},
                    hint="Renomeie a variável ou configure outro nome em bridge.roots.",
                )

        # os adapters só tocam os namespaces depois da checagem de nomes
        adapters: Dict[RuntimeId, RuntimeAdapter] = {
            runtime: PythonRuntime(runtime, profiles[runtime], namespace=namespace)
            for runtime, namespace in namespaces.items()
        }

        resolver = ProxyResolver(adapters, engine, context=self.context, reserved=roots)

        installed = []
        if with_guest:
            for runtime in (RuntimeId.HOST, RuntimeId.GUEST):
                view = resolver.view(ProxyRef(runtime.other), runtime)
                adapters[runtime].set(roots[runtime], Value.opaque(runtime, PROXY_TAG, view))
                installed.append({"runtime": runtime.value, "name": roots[runtime]})

        session = Session(
            host=adapters[RuntimeId.HOST],
            guest=adapters.get(RuntimeId.GUEST),
            engine=engine,
            resolver=resolver,
            context=self.context,
            environment=env,
            roots=roots,
        )
        self._session = session

        self.context.log(
            component="session",
            level="INFO",
            message="Sessão iniciada",
            config_hash=self.context.config_hash,
            environment=env.to_dict() if env else None,
            guest=with_guest,
            roots=installed,
            profiles={rid.value: vars(p) for rid, p in profiles.items()},
        )
        return session


def require_session(manager: SessionManager) -> Session:
    """Retorna a sessão pronta do manager ou levanta SessionNotReady."""
    session = manager.session
    if session is None or not session.ready:
        raise SessionNotReady(
            message="Nenhuma sessão pronta neste manager",
            details={"session_id": manager.context.session_id},
        )
    return session
