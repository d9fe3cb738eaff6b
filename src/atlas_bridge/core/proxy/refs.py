# src/atlas_bridge/core/proxy/refs.py
"""Endereçamento de proxies: runtime alvo + caminho a partir do namespace de topo."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..values import RuntimeId

# Tag OPAQUE dos handles de proxy dentro de um namespace.
PROXY_TAG = "proxy"


@dataclass(frozen=True)
class ProxyRef:
    """
    Endereço de uma view sobre o namespace de um runtime.

    Não possui dados, apenas o caminho; toda leitura é resolvida de novo
    contra o adapter vivo.
    """

    target: RuntimeId
    path: Tuple[str, ...] = ()

    def child(self, *segments: str) -> "ProxyRef":
        return ProxyRef(self.target, self.path + tuple(segments))

    def __str__(self) -> str:
        return f"{self.target.value}:{'.'.join(self.path) or '<root>'}"
