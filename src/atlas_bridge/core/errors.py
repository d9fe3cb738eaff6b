"""
Atlas Bridge — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Atlas Bridge.
Erros são artefatos de domínio e fazem parte do contrato operacional
da ponte, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Nenhuma decisão implícita é permitida: a ponte não recupera falhas por conta
própria, apenas as expõe ao chamador.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, Optional

from .exceptions import (
    AssignmentError,
    BridgeException,
    EnvironmentAlreadyActive,
    EnvironmentAlreadyExists,
    EnvironmentNotFound,
    ExecutionError,
    NameNotFound,
    NotIndexable,
    ProxyCycle,
    RaggedTable,
    ReservedNameCollision,
    SessionAlreadyStarted,
    SessionBlocked,
    SessionNotReady,
    UnsupportedConversion,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BridgeErrorPayload:
    """
    Payload canônico de erro do Atlas Bridge.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Lookup
LOOKUP_NOT_FOUND = "LOOKUP_NOT_FOUND"
LOOKUP_NOT_INDEXABLE = "LOOKUP_NOT_INDEXABLE"
LOOKUP_PROXY_CYCLE = "LOOKUP_PROXY_CYCLE"

# Conversão
CONVERSION_UNSUPPORTED = "CONVERSION_UNSUPPORTED"
CONVERSION_RAGGED_TABLE = "CONVERSION_RAGGED_TABLE"

# Runtime
ASSIGNMENT_REJECTED = "ASSIGNMENT_REJECTED"
EXECUTION_FAILED = "EXECUTION_FAILED"

# Environment
ENVIRONMENT_NOT_FOUND = "ENVIRONMENT_NOT_FOUND"
ENVIRONMENT_ALREADY_ACTIVE = "ENVIRONMENT_ALREADY_ACTIVE"
ENVIRONMENT_ALREADY_EXISTS = "ENVIRONMENT_ALREADY_EXISTS"

# Session
SESSION_ALREADY_STARTED = "SESSION_ALREADY_STARTED"
SESSION_BLOCKED = "SESSION_BLOCKED"
SESSION_NOT_READY = "SESSION_NOT_READY"
SESSION_RESERVED_NAME = "SESSION_RESERVED_NAME"

# Fallback para exceções fora da hierarquia da ponte
BRIDGE_INTERNAL_ERROR = "BRIDGE_INTERNAL_ERROR"


_CODES = (
    (NameNotFound, LOOKUP_NOT_FOUND),
    (NotIndexable, LOOKUP_NOT_INDEXABLE),
    (ProxyCycle, LOOKUP_PROXY_CYCLE),
    (UnsupportedConversion, CONVERSION_UNSUPPORTED),
    (RaggedTable, CONVERSION_RAGGED_TABLE),
    (AssignmentError, ASSIGNMENT_REJECTED),
    (ExecutionError, EXECUTION_FAILED),
    (EnvironmentNotFound, ENVIRONMENT_NOT_FOUND),
    (EnvironmentAlreadyActive, ENVIRONMENT_ALREADY_ACTIVE),
    (EnvironmentAlreadyExists, ENVIRONMENT_ALREADY_EXISTS),
    (SessionAlreadyStarted, SESSION_ALREADY_STARTED),
    (SessionBlocked, SESSION_BLOCKED),
    (SessionNotReady, SESSION_NOT_READY),
    (ReservedNameCollision, SESSION_RESERVED_NAME),
)


def error_code_for(exc: BaseException) -> str:
    """Retorna o código estável do catálogo para uma exceção."""
    for cls, code in _CODES:
        if isinstance(exc, cls):
            return code
    return BRIDGE_INTERNAL_ERROR


def payload_from_exception(exc: BaseException) -> BridgeErrorPayload:
    """Converte exceções em BridgeErrorPayload (serializável, acionável).

    Regras:
    - BridgeException: já vem com message/details/hint.
    - Outras exceções: encapsular como BRIDGE_INTERNAL_ERROR sem expor stack trace.
    """
    if isinstance(exc, BridgeException):
        return BridgeErrorPayload(
            type=error_code_for(exc),
            message=exc.message,
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return BridgeErrorPayload(
        type=BRIDGE_INTERNAL_ERROR,
        message=str(exc) or "Erro inesperado na ponte",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o log de eventos da sessão",
    )


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def name_not_found(*, name: str, runtime: str) -> NameNotFound:
    return NameNotFound(
        message=f"Nome não encontrado no runtime '{runtime}': {name}",
        details={"name": name, "runtime": runtime},
        hint="Defina a variável no runtime alvo antes de acessá-la pela ponte.",
    )


def not_indexable(*, segment: str, kind: str, runtime: str) -> NotIndexable:
    return NotIndexable(
        message=f"Valor do tipo '{kind}' não é navegável (atributo '{segment}')",
        details={"segment": segment, "kind": kind, "runtime": runtime},
        hint="Apenas mapeamentos, tabelas e objetos opacos aceitam acesso por atributo.",
    )


def unsupported_conversion(*, type_tag: str, source: str, target: str) -> UnsupportedConversion:
    return UnsupportedConversion(
        message=f"Conversão não suportada para '{type_tag}' ({source} -> {target})",
        details={"type_tag": type_tag, "source": source, "target": target},
        hint="Converta o valor para um tipo de dado suportado antes de cruzar a fronteira.",
    )


def ragged_table(*, lengths: Dict[str, int]) -> RaggedTable:
    return RaggedTable(
        message="Colunas com comprimentos diferentes não formam uma tabela",
        details={"lengths": dict(lengths)},
        hint="Garanta que todas as colunas possuam o mesmo número de linhas.",
    )


def proxy_cycle(*, runtime: str, hop: str, path: str) -> ProxyCycle:
    return ProxyCycle(
        message=f"Cadeia de proxies cíclica em '{path}' (salto repetido: {hop})",
        details={"runtime": runtime, "hop": hop, "path": path},
        hint="Um proxy aponta, direta ou indiretamente, para o próprio caminho; reatribua a variável.",
    )


def with_path(exc: BridgeException, path: str) -> BridgeException:
    """Cópia da exceção com o caminho de proxy completo em `details["path"]`."""
    return replace(exc, details={**(exc.details or {}), "path": path})
