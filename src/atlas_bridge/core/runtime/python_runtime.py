# src/atlas_bridge/core/runtime/python_runtime.py
"""
PythonRuntime — adapter sobre um namespace python isolado.

Cada instância embarca um interpretador lógico: um dicionário de globals
próprio, avaliado com `exec`/`eval`. Host e guest de uma sessão são duas
instâncias independentes, diferenciadas pelo `RuntimeId` e pelo
`TypeProfile` (largura inteira e capability tabular).

`execute` segue a semântica de célula de notebook: todas as instruções são
executadas e, se a última for uma expressão, seu valor é o resultado.

Limites explícitos:
    - `read_only` bloqueia apenas escritas feitas pela ponte (`set`,
      `assign`, `delete`); código executado via `execute` continua livre
    - Não há cancelamento nem timeout de `execute`
"""

from __future__ import annotations

import ast
from typing import Any, Dict, List, Optional

from ..errors import name_not_found, not_indexable
from ..exceptions import AssignmentError, ExecutionError
from ..marshalling.engine import TypeProfile
from ..values import RuntimeId, Value, ValueKind
from .codec import NativeCodec


class PythonRuntime:
    """Runtime Adapter para um namespace python embarcado."""

    def __init__(
        self,
        runtime_id: RuntimeId,
        profile: Optional[TypeProfile] = None,
        *,
        namespace: Optional[Dict[str, Any]] = None,
        read_only: bool = False,
    ) -> None:
        self.runtime_id = RuntimeId(runtime_id)
        self.profile = profile or TypeProfile(rich_tables=True)
        self.namespace: Dict[str, Any] = namespace if namespace is not None else {}
        self.namespace.setdefault("__name__", f"__atlas_{self.runtime_id.value}__")
        self.read_only = read_only
        self.codec = NativeCodec(self.runtime_id, rich_tables=self.profile.rich_tables)

    def __repr__(self) -> str:
        return f"PythonRuntime({self.runtime_id.value!r}, bindings={len(self.names())})"

    # -----------------------------
    # Codec
    # -----------------------------
    def from_native(self, obj: Any) -> Value:
        return self.codec.from_native(obj)

    def to_native(self, value: Value) -> Any:
        return self.codec.to_native(value)

    # -----------------------------
    # Namespace de topo
    # -----------------------------
    def has(self, name: str) -> bool:
        return name in self.namespace

    def names(self) -> List[str]:
        return sorted(n for n in self.namespace if not n.startswith("__"))

    def get(self, name: str) -> Value:
        if name not in self.namespace:
            raise name_not_found(name=name, runtime=self.runtime_id.value)
        return self.codec.from_native(self.namespace[name])

    def _check_writable(self, name: str) -> None:
        if self.read_only:
            raise AssignmentError(
                message=f"Namespace do runtime '{self.runtime_id.value}' é somente leitura",
                details={"name": name, "runtime": self.runtime_id.value},
            )

    def set(self, name: str, value: Value) -> None:
        self._check_writable(name)
        if not isinstance(name, str) or not name:
            raise AssignmentError(
                message="Nome de binding deve ser string não vazia",
                details={"name": repr(name), "runtime": self.runtime_id.value},
            )
        native = self.codec.to_native(value)
        self.namespace[name] = native

    def delete(self, name: str) -> None:
        self._check_writable(name)
        if name not in self.namespace:
            raise name_not_found(name=name, runtime=self.runtime_id.value)
        del self.namespace[name]

    # -----------------------------
    # Avaliação
    # -----------------------------
    def execute(self, code: str) -> Value:
        filename = f"<atlas-bridge:{self.runtime_id.value}>"
        try:
            tree = ast.parse(code, filename=filename, mode="exec")
            tail = None
            if tree.body and isinstance(tree.body[-1], ast.Expr):
                tail = ast.Expression(body=tree.body.pop().value)
            exec(compile(tree, filename, "exec"), self.namespace)
            result = eval(compile(tail, filename, "eval"), self.namespace) if tail else None
        except Exception as exc:
            raise ExecutionError(
                message=f"{type(exc).__name__}: {exc}",
                details={
                    "runtime": self.runtime_id.value,
                    "exc_type": type(exc).__name__,
                    "exc_message": str(exc),
                },
                hint="Erro originado no runtime embarcado; corrija o trecho executado.",
            ) from exc
        return self.codec.from_native(result)

    # -----------------------------
    # Containers
    # -----------------------------
    def navigate(self, container: Value, segment: str) -> Value:
        rid = self.runtime_id.value

        if container.kind is ValueKind.MAPPING:
            if segment not in container.payload:
                raise name_not_found(name=segment, runtime=rid)
            return container.payload[segment]

        if container.kind is ValueKind.TABLE:
            table = container.payload
            if segment not in table.columns:
                raise name_not_found(name=segment, runtime=rid)
            return Value.sequence(table.column(segment))

        if container.kind is ValueKind.OPAQUE:
            try:
                attr = getattr(container.handle, segment)
            except AttributeError:
                raise name_not_found(name=segment, runtime=rid) from None
            return self.codec.from_native(attr)

        raise not_indexable(segment=segment, kind=container.type_tag, runtime=rid)

    def assign(self, container: Value, segment: str, value: Value) -> None:
        rid = self.runtime_id.value
        self._check_writable(segment)

        if container.kind not in (ValueKind.MAPPING, ValueKind.TABLE, ValueKind.OPAQUE):
            raise not_indexable(segment=segment, kind=container.type_tag, runtime=rid)
        if container.handle is None:
            raise AssignmentError(
                message="Container sem referência viva no runtime",
                details={"segment": segment, "kind": container.type_tag, "runtime": rid},
            )

        native = self.codec.to_native(value)
        try:
            if container.kind is ValueKind.OPAQUE:
                setattr(container.handle, segment, native)
            else:
                # dict (chave) ou DataFrame (coluna)
                container.handle[segment] = native
        except (AttributeError, TypeError, ValueError, KeyError) as exc:
            raise AssignmentError(
                message=f"Runtime '{rid}' rejeitou a escrita em '{segment}': {exc}",
                details={"segment": segment, "kind": container.type_tag, "runtime": rid},
            ) from exc
