# src/atlas_bridge/core/values.py
"""
Modelo canônico de valores do Atlas Bridge.

Este módulo define a representação intermediária (tagged union) usada por
todas as camadas da ponte entre runtimes: adapters produzem `Value` a partir
de objetos nativos, o motor de marshalling converte `Value` entre runtimes e
a camada de proxy devolve `Value` ao runtime solicitante.

Componentes principais:
    - RuntimeId  → identificação fixa dos dois runtimes (host, guest)
    - ValueKind  → variantes do tagged union
    - Table      → tabela colunar com schema (nomes + tipos escalares)
    - Value      → valor imutável com metadados de conversão

Invariantes:
    - Todo `Value` possui exatamente um `kind`
    - Tabelas possuem colunas únicas e o mesmo número de linhas por coluna
    - O `handle` nativo nunca participa de comparação de igualdade

Limites explícitos:
    - Não converte valores entre runtimes (ver core.marshalling)
    - Não acessa interpretadores (ver core.runtime)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple


class RuntimeId(str, Enum):
    """Runtimes conhecidos pela ponte. O conjunto é fixo em dois membros."""

    HOST = "host"
    GUEST = "guest"

    @property
    def other(self) -> "RuntimeId":
        return RuntimeId.GUEST if self is RuntimeId.HOST else RuntimeId.HOST


class ValueKind(str, Enum):
    """
    Variantes do tagged union `Value`.

    Os valores são strings para facilitar serialização em eventos e
    payloads de erro (ex.: `details["kind"] == "table"`).
    """

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    TABLE = "table"
    OPAQUE = "opaque"


SCALAR_KINDS = frozenset(
    {
        ValueKind.NULL,
        ValueKind.BOOLEAN,
        ValueKind.INTEGER,
        ValueKind.FLOAT,
        ValueKind.STRING,
    }
)

# Tipos de coluna aceitos em Table (subconjunto escalar de ValueKind).
COLUMN_DTYPES = frozenset(k.value for k in SCALAR_KINDS)


@dataclass(frozen=True)
class Table:
    """
    Tabela colunar com schema explícito.

    Campos:
    - columns: nomes de coluna, na ordem declarada
    - dtypes: tipo escalar de cada coluna (mesma ordem de `columns`)
    - data: valores por coluna (tupla de `Value` escalares por coluna)

    A validação estrutural ocorre na construção; uma `Table` inválida
    nunca existe.
    """

    columns: Tuple[str, ...]
    dtypes: Tuple[str, ...]
    data: Tuple[Tuple["Value", ...], ...]

    def __post_init__(self) -> None:
        if len(self.columns) != len(self.dtypes) or len(self.columns) != len(self.data):
            raise ValueError("Table columns, dtypes and data must have the same length")
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Table column names must be unique: {list(self.columns)}")
        for dtype in self.dtypes:
            if dtype not in COLUMN_DTYPES:
                raise ValueError(f"Unknown column dtype: {dtype}")
        lengths = {len(col) for col in self.data}
        if len(lengths) > 1:
            raise ValueError("Table columns must share the same row count")

    @property
    def n_rows(self) -> int:
        return len(self.data[0]) if self.data else 0

    def column(self, name: str) -> Tuple["Value", ...]:
        return self.data[self.columns.index(name)]

    def dtype_of(self, name: str) -> str:
        return self.dtypes[self.columns.index(name)]

    def to_python(self) -> Dict[str, list]:
        """Retorna `{coluna: [valores python]}` preservando a ordem das colunas."""
        return {
            name: [cell.to_python() for cell in col]
            for name, col in zip(self.columns, self.data)
        }


@dataclass(frozen=True)
class Value:
    """
    Valor imutável trocado entre os componentes da ponte.

    Campos:
    - kind: variante do tagged union
    - payload: conteúdo (escalar python, tupla de Value, dict str->Value,
      Table, ou tag de tipo para OPAQUE)
    - owner: runtime dono de um handle OPAQUE
    - precision_loss: inteiro convertido para float por exceder a largura
      do runtime de destino
    - tabular: MAPPING originado da degradação de uma TABLE
    - handle: objeto nativo de origem (apenas navegação/escrita aninhada)
    """

    kind: ValueKind
    payload: Any = None
    owner: Optional[RuntimeId] = None
    precision_loss: bool = False
    tabular: bool = False
    handle: Any = field(default=None, compare=False, repr=False)

    # -----------------------------
    # Construtores
    # -----------------------------
    @classmethod
    def null(cls) -> "Value":
        return cls(ValueKind.NULL)

    @classmethod
    def boolean(cls, v: bool) -> "Value":
        return cls(ValueKind.BOOLEAN, bool(v))

    @classmethod
    def integer(cls, v: int) -> "Value":
        return cls(ValueKind.INTEGER, int(v))

    @classmethod
    def float_(cls, v: float, *, precision_loss: bool = False) -> "Value":
        return cls(ValueKind.FLOAT, float(v), precision_loss=precision_loss)

    @classmethod
    def string(cls, v: str) -> "Value":
        return cls(ValueKind.STRING, str(v))

    @classmethod
    def sequence(cls, items: Iterable["Value"], *, handle: Any = None) -> "Value":
        return cls(ValueKind.SEQUENCE, tuple(items), handle=handle)

    @classmethod
    def mapping(
        cls,
        items: Mapping[str, "Value"],
        *,
        tabular: bool = False,
        handle: Any = None,
    ) -> "Value":
        return cls(ValueKind.MAPPING, dict(items), tabular=tabular, handle=handle)

    @classmethod
    def table(cls, table: Table, *, handle: Any = None) -> "Value":
        return cls(ValueKind.TABLE, table, handle=handle)

    @classmethod
    def opaque(cls, owner: RuntimeId, type_tag: str, handle: Any) -> "Value":
        return cls(ValueKind.OPAQUE, type_tag, owner=owner, handle=handle)

    @classmethod
    def from_python(cls, obj: Any) -> "Value":
        """
        Constrói um Value a partir de dados python puros (sem handles).

        Útil em testes e na construção de tabelas a partir de dicts.
        Objetos não representáveis levantam `TypeError`.
        """
        if obj is None:
            return cls.null()
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            return cls.integer(obj)
        if isinstance(obj, float):
            return cls.float_(obj)
        if isinstance(obj, str):
            return cls.string(obj)
        if isinstance(obj, (list, tuple)):
            return cls.sequence(cls.from_python(x) for x in obj)
        if isinstance(obj, dict):
            if not all(isinstance(k, str) for k in obj):
                raise TypeError("Mapping keys must be strings")
            return cls.mapping({k: cls.from_python(v) for k, v in obj.items()})
        raise TypeError(f"Cannot build Value from {type(obj).__name__}")

    # -----------------------------
    # Inspeção
    # -----------------------------
    @property
    def is_scalar(self) -> bool:
        return self.kind in SCALAR_KINDS

    @property
    def type_tag(self) -> str:
        if self.kind is ValueKind.OPAQUE:
            return str(self.payload)
        return self.kind.value

    def to_python(self) -> Any:
        """Converte para dados python puros. OPAQUE devolve o handle."""
        if self.is_scalar:
            return self.payload
        if self.kind is ValueKind.SEQUENCE:
            return [v.to_python() for v in self.payload]
        if self.kind is ValueKind.MAPPING:
            return {k: v.to_python() for k, v in self.payload.items()}
        if self.kind is ValueKind.TABLE:
            return self.payload.to_python()
        return self.handle


def table_of(columns: Mapping[str, Sequence[Any]], dtypes: Optional[Mapping[str, str]] = None) -> Table:
    """
    Atalho para construir uma `Table` a partir de `{coluna: [valores]}`.

    Sem `dtypes`, o tipo de cada coluna é inferido das células não nulas
    (ver `core.marshalling.rules.table_from_mapping`).
    """
    from .marshalling.rules import table_from_mapping

    if dtypes is None:
        mapping = Value.mapping({n: Value.from_python(list(col)) for n, col in columns.items()})
        return table_from_mapping(mapping)

    names = tuple(columns.keys())
    data = tuple(tuple(Value.from_python(x) for x in columns[n]) for n in names)
    return Table(columns=names, dtypes=tuple(dtypes[n] for n in names), data=data)
