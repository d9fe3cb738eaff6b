# src/atlas_bridge/core/proxy/view.py
"""
ProxyView — view viva, por atributo, sobre o namespace do outro runtime.

Código rodando no runtime A recebe um `ProxyView` cujo atributo `x`
corresponde ao valor atual de `x` no runtime B; atribuir `view.x = v`
altera esse mesmo binding.

Regras de acesso:
  - `view.x` / `view["x"]`         → leitura viva (nativo do runtime A)
  - `view.x = v` / `view["x"] = v` → escrita no runtime B
  - leitura que termina em outro proxy devolve um novo ProxyView
  - nomes dunder (`__x__`) não são resolvidos por atributo; use `view["__x__"]`
  - `"x" in view` testa a existência do binding sem convertê-lo
  - `read_table(view, "x")` lê `x` exigindo uma tabela

A classe não expõe atributos públicos próprios: qualquer nome que não seja
dunder pertence ao namespace remoto. O estado interno fica em slots com nome
mangled e é lido pelas funções deste módulo.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

from ..exceptions import AssignmentError
from ..values import RuntimeId, Value, ValueKind
from .refs import PROXY_TAG, ProxyRef

if TYPE_CHECKING:  # pragma: no cover
    from .resolver import ProxyResolver


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def view_ref(view: "ProxyView") -> ProxyRef:
    return object.__getattribute__(view, "_ProxyView__ref")


def view_requester(view: "ProxyView") -> RuntimeId:
    return object.__getattribute__(view, "_ProxyView__requester")


def view_resolver(view: "ProxyView") -> "ProxyResolver":
    return object.__getattribute__(view, "_ProxyView__resolver")


def _read(view: "ProxyView", name: str) -> Any:
    resolver = view_resolver(view)
    requester = view_requester(view)
    value = resolver.resolve_get(view_ref(view), name, requester)
    return resolver.adapter(requester).to_native(value)


def _write(view: "ProxyView", name: str, obj: Any) -> None:
    resolver = view_resolver(view)
    requester = view_requester(view)
    value = resolver.adapter(requester).from_native(obj)
    resolver.resolve_set(view_ref(view), name, value, requester)


class ProxyView:
    __slots__ = ("__ref", "__requester", "__resolver")

    def __init__(self, resolver: "ProxyResolver", ref: ProxyRef, requester: RuntimeId) -> None:
        object.__setattr__(self, "_ProxyView__resolver", resolver)
        object.__setattr__(self, "_ProxyView__ref", ref)
        object.__setattr__(self, "_ProxyView__requester", RuntimeId(requester))

    # iter(view) não deve cair no protocolo legado de __getitem__
    __iter__ = None

    def __getattr__(self, name: str) -> Any:
        if _is_dunder(name):
            raise AttributeError(name)
        return _read(self, name)

    def __getitem__(self, name: str) -> Any:
        return _read(self, name)

    def __contains__(self, name: str) -> bool:
        return view_resolver(self).contains(view_ref(self), name)

    def __setattr__(self, name: str, obj: Any) -> None:
        _write(self, name, obj)

    def __setitem__(self, name: str, obj: Any) -> None:
        _write(self, name, obj)

    def __delattr__(self, name: str) -> None:
        raise AssignmentError(
            message="A ponte não remove bindings através de proxies",
            details={"name": name, "ref": str(view_ref(self))},
        )

    def __dir__(self) -> List[str]:
        return view_resolver(self).list_names(view_ref(self))

    def __repr__(self) -> str:
        return f"<ProxyView {view_ref(self)} seen from {view_requester(self).value}>"


def proxy_ref_of(value: Optional[Value]) -> Optional[ProxyRef]:
    """Retorna o ProxyRef de um handle OPAQUE de proxy, ou None."""
    if value is None or value.kind is not ValueKind.OPAQUE or value.payload != PROXY_TAG:
        return None
    if not isinstance(value.handle, ProxyView):
        return None
    return view_ref(value.handle)


def subview(view: ProxyView, *segments: str) -> ProxyView:
    """
    Cria uma view sobre um caminho aninhado, sem ler nada.

    Útil para escrever dentro de containers do outro runtime:
    `subview(guest, "settings").port = 8080` altera `settings["port"]`
    no guest, enquanto `guest.settings["port"] = 8080` alteraria apenas a
    cópia local.
    """
    return ProxyView(view_resolver(view), view_ref(view).child(*segments), view_requester(view))


def read_table(view: ProxyView, name: str) -> Any:
    """
    Lê `view.<name>` exigindo uma tabela.

    Um dict coluna -> lista do outro runtime é validado como tabela (colunas
    de tamanhos diferentes levantam `RaggedTable`) e chega como DataFrame em
    um runtime com a capability tabular.
    """
    resolver = view_resolver(view)
    requester = view_requester(view)
    value = resolver.resolve_get(view_ref(view), name, requester, as_table=True)
    return resolver.adapter(requester).to_native(value)
