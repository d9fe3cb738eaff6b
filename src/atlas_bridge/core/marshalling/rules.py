# src/atlas_bridge/core/marshalling/rules.py
"""
Regras canônicas de conversão entre runtimes.

Cada regra é uma função pura `(engine, value, source, target) -> Value`,
registrada por `(RuntimeId de origem, ValueKind)` no `RuleRegistry` do
`MarshallingEngine`. As regras padrão são as mesmas para as duas direções;
o que muda entre direções é o `TypeProfile` do runtime de destino.

Política (v1):
    - escalares: sem perda; inteiro fora da largura do destino vira float
      com `precision_loss=True`
    - sequência: elemento a elemento (vazia continua vazia)
    - mapeamento: chave a chave; mapeamento `tabular` é reconstruído como
      tabela quando o destino possui tabelas ricas
    - tabela: tabela rica, ou mapeamento coluna -> sequência (degradação)
    - opaco: só atravessa de volta para o runtime dono

Invariantes:
    - Nenhuma regra descarta colunas, linhas ou chaves
    - Nenhuma regra produz NULL para um valor não convertível
    - Nenhuma regra possui efeitos colaterais
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, List, Sequence, Tuple

from ..errors import ragged_table, unsupported_conversion
from ..exceptions import UnsupportedConversion
from ..values import RuntimeId, Table, Value, ValueKind

if TYPE_CHECKING:  # pragma: no cover
    from .engine import MarshallingEngine


ConversionRule = Callable[["MarshallingEngine", Value, RuntimeId, RuntimeId], Value]


# -----------------------------
# Helpers: tabelas
# -----------------------------

def infer_column_dtype(name: str, cells: Sequence[Value]) -> str:
    """
    Infere o tipo escalar de uma coluna a partir das células não nulas.

    Regras:
      - apenas nulos -> "null"
      - inteiros e floats misturados -> "float"
      - qualquer outra mistura -> UnsupportedConversion
      - célula não escalar -> UnsupportedConversion
    """
    kinds = set()
    for cell in cells:
        if not cell.is_scalar:
            raise UnsupportedConversion(
                message=f"Coluna '{name}' contém célula não escalar ({cell.type_tag})",
                details={"type_tag": f"cell:{cell.type_tag}", "column": name},
                hint="Colunas de tabela aceitam apenas valores escalares.",
            )
        if cell.kind is not ValueKind.NULL:
            kinds.add(cell.kind)

    if not kinds:
        return ValueKind.NULL.value
    if len(kinds) == 1:
        return next(iter(kinds)).value
    if kinds == {ValueKind.INTEGER, ValueKind.FLOAT}:
        return ValueKind.FLOAT.value

    raise UnsupportedConversion(
        message=f"Coluna '{name}' mistura tipos incompatíveis",
        details={
            "type_tag": "column:mixed",
            "column": name,
            "kinds": sorted(k.value for k in kinds),
        },
        hint="Uniformize o tipo da coluna antes de convertê-la.",
    )


def _normalize_cells(dtype: str, cells: Sequence[Value]) -> Tuple[Value, ...]:
    if dtype != ValueKind.FLOAT.value:
        return tuple(cells)
    # inteiros em coluna float passam a ser floats
    return tuple(
        Value.float_(float(c.payload), precision_loss=c.precision_loss)
        if c.kind is ValueKind.INTEGER
        else c
        for c in cells
    )


def table_from_mapping(value: Value) -> Table:
    """
    Reconstrói uma `Table` a partir de um MAPPING coluna -> SEQUENCE.

    A ordem das chaves do mapeamento define a ordem das colunas.

    Raises:
        UnsupportedConversion: se o valor não for um mapeamento de sequências.
        RaggedTable: se as sequências possuírem comprimentos diferentes.
    """
    if value.kind is ValueKind.TABLE:
        return value.payload
    if value.kind is not ValueKind.MAPPING:
        raise UnsupportedConversion(
            message=f"Valor do tipo '{value.type_tag}' não pode ser lido como tabela",
            details={"type_tag": value.type_tag},
        )

    lengths: Dict[str, int] = {}
    for name, col in value.payload.items():
        if col.kind is not ValueKind.SEQUENCE:
            raise UnsupportedConversion(
                message=f"Coluna '{name}' não é uma sequência ({col.type_tag})",
                details={"type_tag": f"column:{col.type_tag}", "column": name},
            )
        lengths[name] = len(col.payload)

    if len(set(lengths.values())) > 1:
        raise ragged_table(lengths=lengths)

    columns: List[str] = []
    dtypes: List[str] = []
    data: List[Tuple[Value, ...]] = []
    for name, col in value.payload.items():
        dtype = infer_column_dtype(name, col.payload)
        columns.append(name)
        dtypes.append(dtype)
        data.append(_normalize_cells(dtype, col.payload))

    return Table(columns=tuple(columns), dtypes=tuple(dtypes), data=tuple(data))


# -----------------------------
# Regras escalares
# -----------------------------

def convert_identity(engine: "MarshallingEngine", value: Value, source: RuntimeId, target: RuntimeId) -> Value:
    return value


def convert_integer(engine: "MarshallingEngine", value: Value, source: RuntimeId, target: RuntimeId) -> Value:
    if engine.profile(target).fits_integer(value.payload):
        return value
    try:
        approx = float(value.payload)
    except OverflowError:
        raise unsupported_conversion(
            type_tag="integer", source=source.value, target=target.value
        ) from None
    return Value.float_(approx, precision_loss=True)


# -----------------------------
# Regras compostas
# -----------------------------

def convert_sequence(engine: "MarshallingEngine", value: Value, source: RuntimeId, target: RuntimeId) -> Value:
    return Value.sequence(engine.convert(item, source, target) for item in value.payload)


def convert_mapping(engine: "MarshallingEngine", value: Value, source: RuntimeId, target: RuntimeId) -> Value:
    if value.tabular and engine.profile(target).rich_tables:
        rebuilt = Value.table(table_from_mapping(value))
        return convert_table(engine, rebuilt, source, target)

    items = {key: engine.convert(item, source, target) for key, item in value.payload.items()}
    return Value.mapping(items, tabular=value.tabular)


def _convert_column(
    engine: "MarshallingEngine",
    dtype: str,
    cells: Sequence[Value],
    source: RuntimeId,
    target: RuntimeId,
) -> Tuple[str, Tuple[Value, ...], bool]:
    converted = tuple(engine.convert(c, source, target) for c in cells)
    lossy = any(c.precision_loss for c in converted)
    if dtype == ValueKind.INTEGER.value and lossy:
        # coluna inteira que excede a largura do destino passa a ser float
        dtype = ValueKind.FLOAT.value
        converted = _normalize_cells(dtype, converted)
    return dtype, converted, lossy


def convert_table(engine: "MarshallingEngine", value: Value, source: RuntimeId, target: RuntimeId) -> Value:
    table: Table = value.payload
    dtypes: List[str] = []
    data: List[Tuple[Value, ...]] = []
    lossy = False
    for dtype, cells in zip(table.dtypes, table.data):
        new_dtype, new_cells, col_lossy = _convert_column(engine, dtype, cells, source, target)
        dtypes.append(new_dtype)
        data.append(new_cells)
        lossy = lossy or col_lossy

    if engine.profile(target).rich_tables:
        converted = Table(columns=table.columns, dtypes=tuple(dtypes), data=tuple(data))
        return Value(ValueKind.TABLE, converted, precision_loss=lossy)

    # degradação: coluna -> sequência, ordem de linhas preservada
    return Value(
        ValueKind.MAPPING,
        {name: Value.sequence(cells) for name, cells in zip(table.columns, data)},
        precision_loss=lossy,
        tabular=True,
    )


def convert_opaque(engine: "MarshallingEngine", value: Value, source: RuntimeId, target: RuntimeId) -> Value:
    if value.owner == target:
        return value
    raise unsupported_conversion(type_tag=value.type_tag, source=source.value, target=target.value)


DEFAULT_RULES: Dict[ValueKind, ConversionRule] = {
    ValueKind.NULL: convert_identity,
    ValueKind.BOOLEAN: convert_identity,
    ValueKind.INTEGER: convert_integer,
    ValueKind.FLOAT: convert_identity,
    ValueKind.STRING: convert_identity,
    ValueKind.SEQUENCE: convert_sequence,
    ValueKind.MAPPING: convert_mapping,
    ValueKind.TABLE: convert_table,
    ValueKind.OPAQUE: convert_opaque,
}
