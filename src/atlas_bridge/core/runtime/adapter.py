# src/atlas_bridge/core/runtime/adapter.py
"""
Contrato canônico de Runtime Adapter do Atlas Bridge.

Um Runtime Adapter é o único componente autorizado a chamar o interpretador
que embarca. Todos os demais componentes (marshalling, proxies, sessão)
interagem exclusivamente via adapter e `Value`.

Operações obrigatórias:
    - get(name)      → lê um binding de topo (NameNotFound se ausente)
    - set(name, v)   → cria ou sobrescreve um binding de topo
    - execute(code)  → avalia um trecho e retorna o valor da última expressão

Operações de suporte à camada de proxy:
    - has / names / delete
    - navigate(container, segment) → um passo dentro de um container
    - assign(container, segment, v) → escrita dentro de um container existente
    - from_native / to_native       → codec nativo do runtime

Invariantes:
    - `get`, `has`, `names` e `navigate` não alteram o namespace
    - "nome ausente" (NameNotFound) é distinto de "erro de avaliação"
      (ExecutionError)
    - O adapter não impõe estabilidade de tipo aos bindings

Conformidade por duck typing (`@runtime_checkable`), como no contrato de Step.
"""

from __future__ import annotations

from typing import Any, List, Protocol, runtime_checkable

from ..marshalling.engine import TypeProfile
from ..values import RuntimeId, Value


@runtime_checkable
class RuntimeAdapter(Protocol):
    """
    Capability wrapper sobre um interpretador embarcado.

    Atributos obrigatórios:
        - runtime_id: identidade do runtime (host ou guest)
        - profile: capabilities de tipo do runtime (cacheadas pela sessão)
    """

    runtime_id: RuntimeId
    profile: TypeProfile

    def get(self, name: str) -> Value:
        ...

    def set(self, name: str, value: Value) -> None:
        ...

    def execute(self, code: str) -> Value:
        ...

    def has(self, name: str) -> bool:
        ...

    def names(self) -> List[str]:
        ...

    def delete(self, name: str) -> None:
        ...

    def navigate(self, container: Value, segment: str) -> Value:
        ...

    def assign(self, container: Value, segment: str, value: Value) -> None:
        ...

    def from_native(self, obj: Any) -> Value:
        ...

    def to_native(self, value: Value) -> Any:
        ...
