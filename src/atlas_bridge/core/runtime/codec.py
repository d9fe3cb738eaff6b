# src/atlas_bridge/core/runtime/codec.py
"""
Codec nativo dos runtimes python.

Traduz objetos de um namespace python para `Value` (leitura) e `Value` para
objetos nativos (escrita). A leitura é sempre profunda: listas, dicts e
DataFrames são convertidos por inteiro a cada acesso, mantendo a semântica de
view viva da ponte (nada é cacheado).

Mapeamento (v1):
  - None / bool / int / float / str (e escalares numpy) -> escalares
  - list / tuple / numpy.ndarray 1-d / pandas.Series    -> SEQUENCE
  - dict com chaves string                              -> MAPPING
  - ColumnMapping (tabela degradada escrita pela ponte)  -> MAPPING tabular
  - pandas.DataFrame                                    -> TABLE
  - ProxyView                                           -> OPAQUE("proxy")
  - qualquer outro objeto (funções, módulos, dicts com chaves não string,
    containers cíclicos, DataFrames não suportados)     -> OPAQUE(tipo)
"""

from __future__ import annotations

from typing import Any, Optional, Set

import numpy as np
import pandas as pd

from ..errors import unsupported_conversion
from ..exceptions import UnsupportedConversion
from ..marshalling.tables import table_from_dataframe, table_to_dataframe
from ..proxy.refs import PROXY_TAG
from ..proxy.view import ProxyView
from ..values import RuntimeId, Value, ValueKind


def _type_tag(obj: Any) -> str:
    cls = type(obj)
    module = cls.__module__
    if module in ("builtins", "__main__"):
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


class ColumnMapping(dict):
    """
    Dict coluna -> lista entregue a um runtime sem a capability tabular.

    Ao voltar pela ponte, o mapeamento é lido como `tabular=True` e é
    reconstruído como tabela em um runtime com a capability (colunas de
    tamanhos diferentes levantam `RaggedTable`). Cópias via `dict(...)`
    perdem a marcação.
    """


class NativeCodec:
    """Codec de um runtime python específico (dono dos handles OPAQUE)."""

    def __init__(self, runtime_id: RuntimeId, *, rich_tables: bool) -> None:
        self.runtime_id = runtime_id
        self.rich_tables = rich_tables

    # -----------------------------
    # Leitura: nativo -> Value
    # -----------------------------
    def from_native(self, obj: Any) -> Value:
        return self._from_native(obj, set())

    def _opaque(self, obj: Any, tag: Optional[str] = None) -> Value:
        return Value.opaque(self.runtime_id, tag or _type_tag(obj), obj)

    def _from_native(self, obj: Any, seen: Set[int]) -> Value:
        if obj is None:
            return Value.null()
        if isinstance(obj, (bool, np.bool_)):
            return Value.boolean(bool(obj))
        if isinstance(obj, (int, np.integer)):
            return Value.integer(int(obj))
        if isinstance(obj, (float, np.floating)):
            # NaN fora de tabelas continua float (só células de tabela viram NULL)
            return Value.float_(float(obj))
        if isinstance(obj, str):
            return Value.string(obj)

        if isinstance(obj, ProxyView):
            return self._opaque(obj, PROXY_TAG)

        if isinstance(obj, pd.DataFrame):
            try:
                return Value.table(table_from_dataframe(obj), handle=obj)
            except UnsupportedConversion as exc:
                return self._opaque(obj, str(exc.details.get("type_tag", "pandas.DataFrame")))

        if isinstance(obj, (list, tuple, dict)):
            if id(obj) in seen:
                return self._opaque(obj, f"cyclic:{type(obj).__name__}")
            seen = seen | {id(obj)}

            if isinstance(obj, dict):
                if not all(isinstance(k, str) for k in obj):
                    return self._opaque(obj)
                return Value.mapping(
                    {k: self._from_native(v, seen) for k, v in obj.items()},
                    tabular=isinstance(obj, ColumnMapping),
                    handle=obj,
                )
            return Value.sequence((self._from_native(x, seen) for x in obj), handle=obj)

        if isinstance(obj, pd.Series) or (isinstance(obj, np.ndarray) and obj.ndim == 1):
            return Value.sequence((self._from_native(x, seen) for x in obj.tolist()), handle=obj)

        return self._opaque(obj)

    # -----------------------------
    # Escrita: Value -> nativo
    # -----------------------------
    def to_native(self, value: Value) -> Any:
        if value.is_scalar:
            return value.payload
        if value.kind is ValueKind.SEQUENCE:
            return [self.to_native(v) for v in value.payload]
        if value.kind is ValueKind.MAPPING:
            items = {k: self.to_native(v) for k, v in value.payload.items()}
            return ColumnMapping(items) if value.tabular else items
        if value.kind is ValueKind.TABLE:
            if self.rich_tables:
                return table_to_dataframe(value.payload)
            return ColumnMapping(value.payload.to_python())
        if value.kind is ValueKind.OPAQUE:
            if value.owner != self.runtime_id:
                raise unsupported_conversion(
                    type_tag=value.type_tag,
                    source=value.owner.value if value.owner else "unknown",
                    target=self.runtime_id.value,
                )
            return value.handle
        raise unsupported_conversion(  # pragma: no cover
            type_tag=value.type_tag, source="unknown", target=self.runtime_id.value
        )
