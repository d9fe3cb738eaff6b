"""
Atlas Bridge — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do Atlas Bridge.

Objetivo:
- Permitir que adapters, marshalling, proxies e sessão levantem falhas
  semânticas tipadas
- Facilitar o mapeamento determinístico para BridgeErrorPayload
- Evitar ValueError/RuntimeError genéricos nas fronteiras entre runtimes

Regras:
- Nenhuma falha é recuperada implicitamente (sem retry, sem fallback).
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class BridgeException(Exception):
    """Base class para exceções internas do Atlas Bridge.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Lookup (resolução de nomes / caminhos)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BridgeLookupError(BridgeException):
    """Falha de resolução de nome em um namespace de runtime."""


@dataclass(frozen=True)
class NameNotFound(BridgeLookupError):
    """Nome ausente no namespace (ou container) alvo."""


@dataclass(frozen=True)
class NotIndexable(BridgeLookupError):
    """Travessia de atributo através de um valor não navegável."""


@dataclass(frozen=True)
class ProxyCycle(BridgeLookupError):
    """Cadeia de proxies que volta a um salto ainda não resolvido."""


# ---------------------------------------------------------------------------
# Conversão
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConversionError(BridgeException):
    """Nenhuma regra de conversão aplicável ou conversão inválida."""


@dataclass(frozen=True)
class UnsupportedConversion(ConversionError):
    """Formato de valor sem regra para a direção solicitada."""


@dataclass(frozen=True)
class RaggedTable(ConversionError):
    """Reconstrução de tabela encontrou colunas com comprimentos diferentes."""


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AssignmentError(BridgeException):
    """O runtime alvo rejeitou a escrita."""


@dataclass(frozen=True)
class ExecutionError(BridgeException):
    """Falha de avaliação encapsulada (mensagem e runtime preservados)."""


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BridgeEnvironmentError(BridgeException):
    """Violação de pré-condição de ativação de Environment."""


@dataclass(frozen=True)
class EnvironmentNotFound(BridgeEnvironmentError):
    """Environment não declarado."""


@dataclass(frozen=True)
class EnvironmentAlreadyActive(BridgeEnvironmentError):
    """Outro Environment já está ativo na sessão."""


@dataclass(frozen=True)
class EnvironmentAlreadyExists(BridgeEnvironmentError):
    """Criação explícita de um Environment com nome já registrado."""


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SessionError(BridgeException):
    """Violação do ciclo de vida da sessão."""


@dataclass(frozen=True)
class SessionAlreadyStarted(SessionError):
    """`start_session` chamado mais de uma vez."""


@dataclass(frozen=True)
class SessionBlocked(SessionError):
    """Ativação obrigatória falhou; a sessão não pode iniciar."""


@dataclass(frozen=True)
class SessionNotReady(SessionError):
    """Chamada a uma sessão não iniciada ou já encerrada."""


@dataclass(frozen=True)
class ReservedNameCollision(SessionError):
    """Nome reservado de proxy raiz já ocupado no namespace."""
