# src/atlas_bridge/__init__.py
"""
Atlas Bridge — ponte de variáveis entre runtimes embarcados.

Dois runtimes (host e guest) compartilham um processo e enxergam, um do outro,
as variáveis de topo através de proxies vivos:

    host:  guest.x        → valor atual de `x` no guest
    guest: host.df        → DataFrame do host (ou colunas, sem capability tabular)
    host:  guest.y = 10   → cria/atualiza `y` no guest

Arquitetura em alto nível:
    - core.marshalling → conversão de valores entre sistemas de tipos
    - core.runtime     → adapters dos interpretadores
    - core.proxy       → resolução iterativa de caminhos e cadeias de proxies
    - core.session     → ciclo de vida, environments e log estruturado
    - core.config      → configuração declarativa

Limites explícitos:
    - Não executa código por conta própria fora de `execute`
    - Não marshalla objetos de código (apenas dados e namespaces)
"""

from .core.exceptions import BridgeException
from .core.proxy import ProxyView, read_table, subview
from .core.session import ActivationResult, Session, SessionManager
from .core.values import RuntimeId, Table, Value, ValueKind

__all__ = [
    "BridgeException",
    "ProxyView",
    "subview",
    "read_table",
    "ActivationResult",
    "Session",
    "SessionManager",
    "RuntimeId",
    "Table",
    "Value",
    "ValueKind",
]
