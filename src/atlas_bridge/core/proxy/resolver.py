# src/atlas_bridge/core/proxy/resolver.py
"""
Resolução de caminhos de proxy contra os adapters vivos.

O `ProxyResolver` implementa as duas operações da camada de proxy:

    - resolve_get(ref, attr, requester) → Value convertido para o solicitante
    - resolve_set(ref, attr, value, requester) → escrita no runtime alvo

Algoritmo (iterativo, sem recursão):
    1. o caminho `ref.path + (attr,)` vira uma fila de segmentos
    2. o primeiro segmento de cada salto é lido com `adapter.get`;
       os seguintes com `adapter.navigate`
    3. se o valor lido é um handle de proxy, o adapter corrente passa a ser
       o alvo desse proxy e o caminho dele é recolocado no início da fila
    4. o valor final é convertido do runtime corrente para o solicitante

Invariantes:
    - Cada salto faz uma resolução completa e viva (sem memoização)
    - Não há limite de profundidade; o custo é linear no tamanho da cadeia
    - Uma cadeia cíclica (proxy que volta ao próprio caminho) levanta
      `ProxyCycle` em vez de percorrer para sempre
    - Ler nunca altera o namespace de origem
    - Escrever não cria estrutura intermediária; a conversão acontece antes
      de qualquer escrita, então uma falha deixa o namespace intacto
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Deque, Dict, List, Mapping, Optional, Tuple

from ..errors import proxy_cycle, unsupported_conversion, with_path
from ..exceptions import AssignmentError, BridgeLookupError, NameNotFound, SessionNotReady
from ..marshalling.engine import MarshallingEngine, has_precision_loss
from ..values import RuntimeId, Value, ValueKind
from .refs import PROXY_TAG, ProxyRef
from .view import ProxyView, proxy_ref_of

if TYPE_CHECKING:  # pragma: no cover
    from ..runtime.adapter import RuntimeAdapter
    from ..session.context import SessionContext


class ProxyResolver:
    """Resolução de leituras e escritas de proxies de uma sessão."""

    def __init__(
        self,
        adapters: Mapping[RuntimeId, "RuntimeAdapter"],
        engine: MarshallingEngine,
        *,
        context: Optional["SessionContext"] = None,
        reserved: Optional[Mapping[RuntimeId, str]] = None,
    ) -> None:
        self._adapters: Dict[RuntimeId, "RuntimeAdapter"] = dict(adapters)
        self.engine = engine
        self.context = context
        self.reserved: Dict[RuntimeId, str] = dict(reserved or {})
        self._closed_reason: Optional[str] = None

    # -----------------------------
    # Ciclo de vida
    # -----------------------------
    def close(self, reason: str = "closed") -> None:
        self._closed_reason = reason

    @property
    def closed(self) -> bool:
        return self._closed_reason is not None

    def adapter(self, runtime: RuntimeId) -> "RuntimeAdapter":
        if self._closed_reason is not None:
            raise SessionNotReady(
                message="Sessão encerrada; a ponte não aceita novas chamadas",
                details={"runtime": runtime.value, "reason": self._closed_reason},
            )
        adapter = self._adapters.get(runtime)
        if adapter is None:
            raise SessionNotReady(
                message=f"Runtime '{runtime.value}' ausente nesta sessão",
                details={"runtime": runtime.value},
                hint="Ative um Environment válido antes de iniciar a sessão.",
            )
        return adapter

    def view(self, ref: ProxyRef, requester: RuntimeId) -> ProxyView:
        return ProxyView(self, ref, requester)

    # -----------------------------
    # Travessia
    # -----------------------------
    def _walk(self, target: RuntimeId, segments: Tuple[str, ...]) -> Tuple[RuntimeId, Optional[Value]]:
        """
        Percorre `segments` a partir do namespace de topo de `target`.

        Retorna `(runtime corrente, valor)`; valor None significa "namespace
        de topo do runtime corrente" (caminho vazio ou terminado em proxy).

        Cada salto registra o tamanho da fila que ficou abaixo do caminho
        empilhado. Enquanto essa cauda não é consumida, repetir o mesmo salto
        reproduz a mesma travessia para sempre: a cadeia é cíclica.

        Raises:
            ProxyCycle: um salto se repete antes de consumir sua cauda.
            NameNotFound, NotIndexable: com `details["path"]` do caminho pedido.
        """
        requested = str(ProxyRef(target, segments))
        current = target
        value: Optional[Value] = None
        pending: Deque[str] = deque(segments)
        open_hops: Dict[ProxyRef, int] = {}

        while pending:
            segment = pending.popleft()
            if open_hops:
                open_hops = {hop: tail for hop, tail in open_hops.items() if tail <= len(pending)}

            adapter = self.adapter(current)
            try:
                value = adapter.get(segment) if value is None else adapter.navigate(value, segment)
            except BridgeLookupError as exc:
                raise with_path(exc, requested) from None

            hop = proxy_ref_of(value)
            if hop is not None:
                if hop in open_hops:
                    raise proxy_cycle(runtime=current.value, hop=str(hop), path=requested)
                open_hops[hop] = len(pending)
                current = hop.target
                value = None
                pending.extendleft(reversed(hop.path))

        return current, value

    # -----------------------------
    # Leitura
    # -----------------------------
    def resolve_get(
        self,
        ref: ProxyRef,
        attr: str,
        requester: RuntimeId,
        *,
        as_table: bool = False,
    ) -> Value:
        """
        Lê `attr` sob `ref` e converte o resultado para `requester`.

        Com `as_table=True` o valor lido precisa formar uma tabela (TABLE ou
        MAPPING coluna -> sequência de mesmo comprimento).

        Um caminho que termina em proxy devolve um handle OPAQUE("proxy")
        pertencente ao solicitante, com um ProxyView novo sobre a raiz do
        runtime alcançado.

        Raises:
            NameNotFound, NotIndexable, ProxyCycle, UnsupportedConversion,
            RaggedTable, SessionNotReady
        """
        self.adapter(requester)
        current, value = self._walk(ref.target, ref.path + (attr,))

        if value is None:
            if as_table:
                raise unsupported_conversion(type_tag=PROXY_TAG, source=current.value, target=requester.value)
            return Value.opaque(requester, PROXY_TAG, self.view(ProxyRef(current), requester))

        converted = self.engine.convert(value, current, requester, as_table=as_table)
        self._record_conversion(value, converted, current, requester, ref.child(attr))
        return converted

    def resolve_ref(self, ref: ProxyRef, attr: str) -> Optional[ProxyRef]:
        """Ref canônico quando `ref.attr` termina em um proxy; senão None."""
        current, value = self._walk(ref.target, ref.path + (attr,))
        return ProxyRef(current) if value is None else None

    def contains(self, ref: ProxyRef, attr: str) -> bool:
        try:
            self._walk(ref.target, ref.path + (attr,))
        except NameNotFound:
            return False
        return True

    def list_names(self, ref: ProxyRef) -> List[str]:
        current, value = self._walk(ref.target, ref.path)
        if value is None:
            return self.adapter(current).names()
        if value.kind is ValueKind.MAPPING:
            return sorted(value.payload)
        if value.kind is ValueKind.TABLE:
            return list(value.payload.columns)
        return []

    # -----------------------------
    # Escrita
    # -----------------------------
    def resolve_set(self, ref: ProxyRef, attr: str, value: Value, requester: RuntimeId) -> None:
        """
        Escreve `value` (do runtime `requester`) em `attr` sob `ref`.

        O container do último segmento precisa existir; nada é criado no
        caminho.

        Raises:
            NameNotFound, NotIndexable, UnsupportedConversion, AssignmentError,
            SessionNotReady
        """
        self.adapter(requester)
        segments = ref.path + (attr,)
        current, container = self._walk(ref.target, segments[:-1])
        last = segments[-1]
        adapter = self.adapter(current)

        if container is None and self.reserved.get(current) == last:
            raise AssignmentError(
                message=f"'{last}' é o proxy raiz reservado do runtime '{current.value}'",
                details={"name": last, "runtime": current.value},
                hint="Escolha outro nome para a variável.",
            )

        hop = proxy_ref_of(value)
        if hop is not None:
            # proxies são objetos da ponte: reancorados no runtime alvo
            converted = Value.opaque(current, PROXY_TAG, self.view(hop, current))
        else:
            converted = self.engine.convert(value, requester, current)
            self._record_conversion(value, converted, requester, current, ref.child(attr))

        if container is None:
            adapter.set(last, converted)
        else:
            adapter.assign(container, last, converted)

    # -----------------------------
    # Observabilidade
    # -----------------------------
    def _record_conversion(
        self,
        original: Value,
        converted: Value,
        source: RuntimeId,
        target: RuntimeId,
        where: ProxyRef,
    ) -> None:
        if self.context is None or source == target:
            return
        if has_precision_loss(converted):
            self.context.add_warning(
                component="marshalling",
                message=f"Perda de precisão inteira em {where} ({source.value} -> {target.value})",
            )
        if original.kind is ValueKind.TABLE and converted.kind is ValueKind.MAPPING:
            self.context.log(
                component="marshalling",
                level="INFO",
                message="Tabela degradada para mapeamento coluna -> sequência",
                path=str(where),
                source=source.value,
                target=target.value,
            )
