"""
Motor de marshalling do Atlas Bridge.

Funções puras de conversão de `Value` entre os sistemas de tipos do host e
do guest, sem efeitos colaterais e sem dependência de runtime.

Componentes:
    - engine → MarshallingEngine, TypeProfile, RuleRegistry
    - rules  → regras padrão por ValueKind, reconstrução de tabelas
    - tables → interop Table <-> pandas.DataFrame
"""

from .engine import MarshallingEngine, RuleRegistry, TypeProfile, has_precision_loss
from .rules import ConversionRule, infer_column_dtype, table_from_mapping
from .tables import table_from_dataframe, table_to_dataframe

__all__ = [
    "MarshallingEngine",
    "RuleRegistry",
    "TypeProfile",
    "has_precision_loss",
    "ConversionRule",
    "infer_column_dtype",
    "table_from_mapping",
    "table_from_dataframe",
    "table_to_dataframe",
]
