# tests/core/marshalling/test_engine_tables.py
"""
Testes de conversão de tabelas no MarshallingEngine.

Política validada:
- destino com capability tabular → TABLE (ordem, nomes e tipos preservados)
- destino sem capability → MAPPING coluna -> SEQUENCE com `tabular=True`
- o caminho inverso reconstrói a TABLE a partir do mapeamento tabular
- colunas de tamanhos diferentes são rejeitadas (RaggedTable)

Invariantes:
    - Nenhuma coluna, linha ou chave é descartada
    - A degradação nunca é um erro
"""

import pytest

from atlas_bridge.core.exceptions import RaggedTable, UnsupportedConversion
from atlas_bridge.core.marshalling.rules import table_from_mapping
from atlas_bridge.core.values import RuntimeId, Value, ValueKind, table_of

HOST = RuntimeId.HOST
GUEST = RuntimeId.GUEST


@pytest.fixture
def id_label_table():
    return table_of({"id": [1, 2], "label": ["a", "b"]})


def test_table_round_trip_with_rich_guest(rich_engine, id_label_table):
    there = rich_engine.convert(Value.table(id_label_table), HOST, GUEST)

    assert there.kind is ValueKind.TABLE
    assert there.payload.columns == ("id", "label")
    assert there.payload.dtypes == ("integer", "string")

    back = rich_engine.convert(there, GUEST, HOST)
    assert back.kind is ValueKind.TABLE
    assert back.payload == id_label_table


def test_table_degrades_to_mapping_of_sequences(degraded_engine, id_label_table):
    there = degraded_engine.convert(Value.table(id_label_table), HOST, GUEST)

    assert there.kind is ValueKind.MAPPING
    assert there.tabular is True
    assert list(there.payload) == ["id", "label"]
    assert there.to_python() == {"id": [1, 2], "label": ["a", "b"]}


def test_degraded_table_round_trip_rebuilds_table(degraded_engine, id_label_table):
    there = degraded_engine.convert(Value.table(id_label_table), HOST, GUEST)
    back = degraded_engine.convert(there, GUEST, HOST)

    assert back.kind is ValueKind.TABLE
    assert back.payload == id_label_table


def test_untagged_mapping_is_not_turned_into_table(rich_engine):
    v = Value.from_python({"id": [1, 2], "label": ["a", "b"]})
    out = rich_engine.convert(v, GUEST, HOST)
    assert out.kind is ValueKind.MAPPING


def test_as_table_rebuilds_mapping_on_rich_target(rich_engine):
    v = Value.from_python({"id": [1, 2], "label": ["a", "b"]})
    out = rich_engine.convert(v, GUEST, HOST, as_table=True)

    assert out.kind is ValueKind.TABLE
    assert out.payload.to_python() == {"id": [1, 2], "label": ["a", "b"]}


def test_as_table_on_degraded_target_keeps_tabular_mapping(degraded_engine):
    v = Value.from_python({"id": [1, 2]})
    out = degraded_engine.convert(v, HOST, GUEST, as_table=True)

    assert out.kind is ValueKind.MAPPING
    assert out.tabular is True


def test_ragged_columns_are_rejected(rich_engine):
    v = Value.from_python({"a": [1, 2, 3], "b": [1]})

    with pytest.raises(RaggedTable) as exc:
        rich_engine.convert(v, GUEST, HOST, as_table=True)

    assert exc.value.details["lengths"] == {"a": 3, "b": 1}


def test_as_table_rejects_non_mapping(rich_engine):
    with pytest.raises(UnsupportedConversion):
        rich_engine.convert(Value.integer(1), GUEST, HOST, as_table=True)


def test_table_from_mapping_rejects_scalar_column():
    with pytest.raises(UnsupportedConversion) as exc:
        table_from_mapping(Value.from_python({"a": 1}))
    assert exc.value.details["type_tag"] == "column:integer"


def test_table_from_mapping_rejects_nested_cells():
    with pytest.raises(UnsupportedConversion) as exc:
        table_from_mapping(Value.from_python({"a": [[1]]}))
    assert exc.value.details["type_tag"] == "cell:sequence"


def test_integer_column_overflowing_guest_becomes_float(rich_engine):
    t = table_of({"n": [1, 2**40]})
    out = rich_engine.convert(Value.table(t), HOST, GUEST)

    assert out.precision_loss is True
    assert out.payload.dtypes == ("float",)
    assert out.payload.column("n") == (Value.float_(1.0), Value.float_(float(2**40), precision_loss=True))


def test_table_cells_with_nulls_survive_degradation(degraded_engine):
    t = table_of({"x": [1.5, None]})
    out = degraded_engine.convert(Value.table(t), HOST, GUEST)
    assert out.to_python() == {"x": [1.5, None]}


def test_empty_table_round_trip(degraded_engine):
    t = table_of({"a": []})
    there = degraded_engine.convert(Value.table(t), HOST, GUEST)
    back = degraded_engine.convert(there, GUEST, HOST)

    assert back.payload.columns == ("a",)
    assert back.payload.n_rows == 0
