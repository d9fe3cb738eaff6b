# src/atlas_bridge/core/marshalling/engine.py
"""
Motor de marshalling do Atlas Bridge.

O `MarshallingEngine` converte um `Value` do sistema de tipos de um runtime
para o sistema de tipos do outro, despachando para a regra registrada em
`(RuntimeId de origem, ValueKind)`.

Decisões arquiteturais:
    - As capabilities de cada runtime (`TypeProfile`) são fixadas na
      construção do engine (cache por sessão), nunca sondadas por conversão
    - Conversão de um runtime para ele mesmo é identidade
    - O engine é puro: não registra eventos nem acessa interpretadores

Invariantes:
    - Falhas são sempre exceções tipadas (`UnsupportedConversion`,
      `RaggedTable`); nunca há coerção silenciosa para NULL
    - Regras registradas explicitamente substituem as regras padrão apenas
      para a chave `(source, kind)` informada
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from ..errors import unsupported_conversion
from ..exceptions import UnsupportedConversion
from ..values import RuntimeId, Value, ValueKind
from .rules import DEFAULT_RULES, ConversionRule, table_from_mapping


@dataclass(frozen=True)
class TypeProfile:
    """
    Capabilities de tipo de um runtime embarcado.

    Campos:
    - int_bits: largura do inteiro nativo (None = sem limite)
    - rich_tables: o runtime representa tabelas nativamente (ex.: pandas)
    """

    int_bits: Optional[int] = None
    rich_tables: bool = False

    def fits_integer(self, v: int) -> bool:
        if self.int_bits is None:
            return True
        bound = 1 << (self.int_bits - 1)
        return -bound <= v < bound


class RuleRegistry:
    """Registro de regras de conversão por `(RuntimeId de origem, ValueKind)`."""

    def __init__(self) -> None:
        self._rules: Dict[Tuple[RuntimeId, ValueKind], ConversionRule] = {}
        for source in RuntimeId:
            for kind, rule in DEFAULT_RULES.items():
                self._rules[(source, kind)] = rule

    def register(self, source: RuntimeId, kind: ValueKind, rule: ConversionRule) -> None:
        self._rules[(RuntimeId(source), ValueKind(kind))] = rule

    def lookup(self, source: RuntimeId, kind: ValueKind) -> Optional[ConversionRule]:
        return self._rules.get((source, kind))


class MarshallingEngine:
    """Conversão de valores entre os dois runtimes de uma sessão."""

    def __init__(
        self,
        profiles: Mapping[RuntimeId, TypeProfile],
        *,
        rules: Optional[RuleRegistry] = None,
    ) -> None:
        missing = [rid.value for rid in RuntimeId if rid not in profiles]
        if missing:
            raise ValueError(f"TypeProfile ausente para runtime(s): {missing}")
        self._profiles: Dict[RuntimeId, TypeProfile] = dict(profiles)
        self.rules: RuleRegistry = rules or RuleRegistry()

    def profile(self, runtime: RuntimeId) -> TypeProfile:
        return self._profiles[runtime]

    def convert(
        self,
        value: Value,
        source: RuntimeId,
        target: RuntimeId,
        *,
        as_table: bool = False,
    ) -> Value:
        """
        Converte `value` do runtime `source` para o runtime `target`.

        Com `as_table=True`, um MAPPING coluna -> SEQUENCE é tratado como
        alvo de conversão tabular (validação de colunas e comprimentos).

        Raises:
            UnsupportedConversion: nenhuma regra cobre o valor.
            RaggedTable: mapeamento tabular com colunas de tamanhos diferentes.
        """
        if as_table:
            if value.kind not in (ValueKind.MAPPING, ValueKind.TABLE):
                raise UnsupportedConversion(
                    message=f"Valor do tipo '{value.type_tag}' não pode ser lido como tabela",
                    details={"type_tag": value.type_tag, "source": source.value, "target": target.value},
                )
            value = Value.table(table_from_mapping(value), handle=value.handle)

        if source == target:
            return value

        rule = self.rules.lookup(source, value.kind)
        if rule is None:
            raise unsupported_conversion(
                type_tag=value.type_tag, source=source.value, target=target.value
            )
        return rule(self, value, source, target)


def has_precision_loss(value: Value) -> bool:
    """Indica se o valor (ou algum valor aninhado) perdeu precisão."""
    if value.precision_loss:
        return True
    if value.kind is ValueKind.SEQUENCE:
        return any(has_precision_loss(v) for v in value.payload)
    if value.kind is ValueKind.MAPPING:
        return any(has_precision_loss(v) for v in value.payload.values())
    return False
