# src/atlas_bridge/core/marshalling/tables.py
"""
Interop entre `Table` e `pandas.DataFrame`.

Este módulo é a representação "rica" de tabelas nos runtimes python: um
runtime com a capability tabular materializa `Table` como DataFrame, e
DataFrames lidos de um namespace viram `Table`.

Mapeamento de dtypes (v1):
  - bool / boolean      <-> "boolean"
  - int* / Int*         <-> "integer"
  - float*              <-> "float"
  - object / string     <-> tipo inferido das células (escalares)
  - demais (datetime, category, ...) -> UnsupportedConversion("column:<dtype>")

Notas:
  - Nulos (None, NaN, pd.NA) viram NULL.
  - O índice do DataFrame não faz parte da tabela; a ordem das linhas é
    preservada e o retorno usa RangeIndex.
  - Rótulos de coluna precisam ser strings.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional, Tuple

import numpy as np
import pandas as pd
from pandas.api import types as ptypes

from ..exceptions import UnsupportedConversion
from ..values import Table, Value, ValueKind
from .rules import infer_column_dtype

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


def _is_missing(x: Any) -> bool:
    if x is None or x is pd.NA:
        return True
    return isinstance(x, float) and math.isnan(x)


def scalar_value(x: Any) -> Value:
    """Converte um escalar python/numpy em `Value`; outros tipos falham."""
    if _is_missing(x):
        return Value.null()
    if isinstance(x, (bool, np.bool_)):
        return Value.boolean(bool(x))
    if isinstance(x, (int, np.integer)):
        return Value.integer(int(x))
    if isinstance(x, (float, np.floating)):
        fx = float(x)
        return Value.null() if math.isnan(fx) else Value.float_(fx)
    if isinstance(x, str):
        return Value.string(x)
    raise UnsupportedConversion(
        message=f"Célula do tipo '{type(x).__name__}' não é escalar",
        details={"type_tag": f"cell:{type(x).__name__}"},
    )


def _column_dtype(name: str, series: pd.Series) -> Optional[str]:
    """
    Tipo da coluna a partir do dtype pandas, antes de ler as células.

    Retorna None para colunas object/string, cujo tipo é inferido das
    células.
    """
    dtype = series.dtype
    if isinstance(dtype, pd.CategoricalDtype):
        raise UnsupportedConversion(
            message=f"Coluna '{name}' possui dtype não suportado: {dtype}",
            details={"type_tag": f"column:{dtype}", "column": name},
        )
    if ptypes.is_bool_dtype(dtype):
        return ValueKind.BOOLEAN.value
    if ptypes.is_integer_dtype(dtype):
        return ValueKind.INTEGER.value
    if ptypes.is_float_dtype(dtype):
        return ValueKind.FLOAT.value
    if ptypes.is_object_dtype(dtype) or ptypes.is_string_dtype(dtype):
        return None
    raise UnsupportedConversion(
        message=f"Coluna '{name}' possui dtype não suportado: {dtype}",
        details={"type_tag": f"column:{dtype}", "column": name},
    )


def table_from_dataframe(df: pd.DataFrame) -> Table:
    """
    Converte um DataFrame em `Table` preservando ordem e nomes de colunas.

    Raises:
        UnsupportedConversion: rótulo não string, rótulo duplicado, dtype ou
            célula não suportados.
    """
    labels = list(df.columns)
    for label in labels:
        if not isinstance(label, str):
            raise UnsupportedConversion(
                message=f"Rótulo de coluna não é string: {label!r}",
                details={"type_tag": "column-label", "label": repr(label)},
                hint="Renomeie as colunas com strings antes de cruzar a fronteira.",
            )
    if len(set(labels)) != len(labels):
        raise UnsupportedConversion(
            message="DataFrame possui colunas duplicadas",
            details={"type_tag": "column-duplicate", "columns": labels},
        )

    dtypes: List[str] = []
    data: List[Tuple[Value, ...]] = []
    for i, name in enumerate(labels):
        series = df.iloc[:, i]
        dtype = _column_dtype(name, series)
        cells = tuple(scalar_value(x) for x in series.tolist())
        if dtype is None:
            dtype = infer_column_dtype(name, cells)
        if dtype == ValueKind.FLOAT.value:
            cells = tuple(
                Value.float_(float(c.payload)) if c.kind is ValueKind.INTEGER else c
                for c in cells
            )
        dtypes.append(dtype)
        data.append(cells)

    return Table(columns=tuple(labels), dtypes=tuple(dtypes), data=tuple(data))


def _series_for(name: str, dtype: str, cells: Tuple[Value, ...]) -> pd.Series:
    values = [c.payload if c.kind is not ValueKind.NULL else None for c in cells]
    has_null = any(v is None for v in values)

    if dtype == ValueKind.INTEGER.value:
        ints = [v for v in values if v is not None]
        if any(v < _INT64_MIN or v > _INT64_MAX for v in ints):
            return pd.Series(values, name=name, dtype=object)
        return pd.Series(values, name=name, dtype="Int64" if has_null else "int64")
    if dtype == ValueKind.FLOAT.value:
        return pd.Series([np.nan if v is None else v for v in values], name=name, dtype="float64")
    if dtype == ValueKind.BOOLEAN.value:
        return pd.Series(values, name=name, dtype="boolean" if has_null else "bool")
    return pd.Series(values, name=name, dtype=object)


def table_to_dataframe(table: Table) -> pd.DataFrame:
    """Materializa uma `Table` como DataFrame (RangeIndex, colunas na ordem)."""
    if not table.columns:
        return pd.DataFrame()
    series = {
        name: _series_for(name, dtype, cells)
        for name, dtype, cells in zip(table.columns, table.dtypes, table.data)
    }
    return pd.DataFrame(series, columns=list(table.columns))
