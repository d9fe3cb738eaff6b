# src/atlas_bridge/core/session/context.py
"""
SessionContext — log estruturado e warnings de uma sessão da ponte.

O SessionContext é o único ponto de observabilidade do Atlas Bridge:
    - registro de eventos estruturados (não strings livres)
    - coleta de warnings não fatais agrupados por componente

Componentes que registram eventos:
    - session      → ativação de environment, start, close, bloqueio
    - marshalling  → degradação de tabelas, perda de precisão inteira

Invariantes:
    - Todo evento inclui `session_id`, `component`, `level`, `message` e
      timestamp UTC em ISO 8601
    - Warnings são agrupados por componente, na ordem de inserção
    - Campos extras são preservados sem filtragem

Limites explícitos:
    - Não persiste eventos
    - Não decide políticas (apenas registra)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List


@dataclass
class SessionContext:
    """
    Contexto de observabilidade de uma sessão.

    Campos canônicos:
    - session_id: identificador único da sessão
    - created_at: timestamp UTC de criação
    - config: configuração efetiva (defaults + overrides)
    - config_hash: hash SHA-256 da configuração efetiva
    - events: log estruturado de eventos
    - warnings: warnings por componente
    """

    session_id: str
    created_at: datetime
    config: Dict[str, Any]
    config_hash: str = ""

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    def log(self, *, component: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "session_id": self.session_id,
            "component": component,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, component: str, message: str) -> None:
        if component not in self.warnings:
            self.warnings[component] = []
        self.warnings[component].append(message)
        self.log(component=component, level="WARNING", message=message)

    def events_for(self, component: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["component"] == component]
