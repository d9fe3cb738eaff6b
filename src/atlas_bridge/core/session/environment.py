# src/atlas_bridge/core/session/environment.py
"""
Environments declarados e seu registro.

Um Environment é um conjunto nomeado de pacotes declarados. A ponte não
instala nada: os pacotes servem apenas para decidir capabilities (ex.: a
capability tabular, que seleciona a política de conversão de tabelas).

Decisões arquiteturais:
    - Environments só existem por criação explícita (API ou configuração)
    - No máximo um Environment ativo por registro
    - Ativar outro Environment com um já ativo é erro, nunca troca silenciosa
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from ..exceptions import EnvironmentAlreadyActive, EnvironmentAlreadyExists, EnvironmentNotFound


class EnvironmentState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


@dataclass
class Environment:
    """Environment nomeado com pacotes declarados e estado de ativação."""

    name: str
    packages: FrozenSet[str] = frozenset()
    state: EnvironmentState = EnvironmentState.INACTIVE

    @property
    def active(self) -> bool:
        return self.state is EnvironmentState.ACTIVE

    def declares(self, package: str) -> bool:
        return package in self.packages

    def declares_any(self, packages: Iterable[str]) -> bool:
        return any(self.declares(p) for p in packages)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "packages": sorted(self.packages), "state": self.state.value}


@dataclass
class EnvironmentRegistry:
    """
    Registro de Environments por nome, preservando ordem de criação.

    Invariantes:
        - Nomes são strings não vazias e únicas
        - No máximo um Environment com estado ACTIVE
    """

    _envs: Dict[str, Environment] = field(default_factory=dict, init=False, repr=False)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "EnvironmentRegistry":
        registry = cls()
        for name, spec in (config.get("environments") or {}).items():
            registry.create(name, (spec or {}).get("packages", []))
        return registry

    def create(self, name: str, packages: Iterable[str] = ()) -> Environment:
        if not isinstance(name, str) or not name.strip():
            raise ValueError("environment name must be a non-empty string")
        if name in self._envs:
            raise EnvironmentAlreadyExists(
                message=f"Environment já existe: {name}",
                details={"environment": name},
            )
        env = Environment(name=name, packages=frozenset(packages))
        self._envs[name] = env
        return env

    def get(self, name: str) -> Environment:
        if name not in self._envs:
            raise EnvironmentNotFound(
                message=f"Environment não encontrado: {name}",
                details={"environment": name, "known": list(self._envs)},
                hint="Crie o Environment explicitamente (create_environment) antes de ativá-lo.",
            )
        return self._envs[name]

    def list(self) -> List[Environment]:
        return list(self._envs.values())

    def active(self) -> Optional[Environment]:
        for env in self._envs.values():
            if env.active:
                return env
        return None

    def activate(self, name: str) -> Environment:
        env = self.get(name)
        current = self.active()
        if current is not None and current.name != name:
            raise EnvironmentAlreadyActive(
                message=f"Environment '{current.name}' já está ativo",
                details={"environment": name, "active": current.name},
                hint="Desative o Environment atual explicitamente antes de trocar.",
            )
        env.state = EnvironmentState.ACTIVE
        return env

    def deactivate(self) -> Optional[Environment]:
        current = self.active()
        if current is not None:
            current.state = EnvironmentState.INACTIVE
        return current
