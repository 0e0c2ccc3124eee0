"""
Analysis exceptions.

Typed exceptions for the food analysis relay. Every failure the relay can
report maps to one ErrorKind, one HTTP status and one user-facing message.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Type


class ErrorKind(str, Enum):
    """Classification of relay failures."""

    VALIDATION = "VALIDATION"  # Missing/empty image in request
    CONFIGURATION = "CONFIGURATION"  # Credential not configured
    AUTH = "AUTH"  # External API rejected the credential
    QUOTA = "QUOTA"  # External API usage limit reached
    NETWORK = "NETWORK"  # Transport failure reaching the external API
    EMPTY_RESPONSE = "EMPTY_RESPONSE"  # External API returned no text
    PARSE = "PARSE"  # External API text is not valid JSON
    UNKNOWN = "UNKNOWN"  # Anything else


GENERIC_ERROR_MESSAGE = "Erro ao analisar a imagem. Tente novamente."

ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "Imagem não fornecida",
    ErrorKind.CONFIGURATION: (
        "API key da OpenAI não configurada. "
        "Configure OPENAI_API_KEY nas variáveis de ambiente."
    ),
    ErrorKind.AUTH: "Chave da API OpenAI inválida ou não configurada.",
    ErrorKind.QUOTA: "Limite de uso da API OpenAI excedido.",
    ErrorKind.NETWORK: "Erro de conexão. Verifique sua internet.",
    ErrorKind.EMPTY_RESPONSE: GENERIC_ERROR_MESSAGE,
    ErrorKind.PARSE: GENERIC_ERROR_MESSAGE,
    ErrorKind.UNKNOWN: GENERIC_ERROR_MESSAGE,
}


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class AnalysisError(Exception):
    """
    Base exception for all relay failures.

    Carries the error kind, the HTTP status returned to the caller and
    the user-facing message. The optional detail is for logs only and is
    never sent to the client.

    Example:
        >>> err = QuotaError(detail="429 insufficient_quota")
        >>> err.status_code, err.message
        (500, 'Limite de uso da API OpenAI excedido.')
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    status_code: int = 500

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None) -> None:
        self.message = message or ERROR_MESSAGES[self.kind]
        self.detail = detail
        super().__init__(self.message)

    @staticmethod
    def from_kind(kind: ErrorKind, detail: Optional[str] = None) -> AnalysisError:
        """Build the exception matching a given kind."""
        return _ERRORS_BY_KIND[kind](detail=detail)


# ═══════════════════════════════════════════════════════════
# REQUEST EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ValidationError(AnalysisError):
    """Image missing or empty in the request body."""

    kind = ErrorKind.VALIDATION
    status_code = 400


class ConfigurationError(AnalysisError):
    """
    External API credential not configured.

    Raised before any external call is attempted.
    """

    kind = ErrorKind.CONFIGURATION


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class AuthError(AnalysisError):
    """External API rejected the credential."""

    kind = ErrorKind.AUTH


class QuotaError(AnalysisError):
    """External API usage limit exceeded."""

    kind = ErrorKind.QUOTA


class NetworkError(AnalysisError):
    """Connection to the external API failed or timed out."""

    kind = ErrorKind.NETWORK


class EmptyResponseError(AnalysisError):
    """External API answered without any text."""

    kind = ErrorKind.EMPTY_RESPONSE


class ParseError(AnalysisError):
    """External API text could not be parsed as JSON."""

    kind = ErrorKind.PARSE


class UnknownError(AnalysisError):
    kind = ErrorKind.UNKNOWN


_ERRORS_BY_KIND: Dict[ErrorKind, Type[AnalysisError]] = {
    cls.kind: cls
    for cls in (
        ValidationError,
        ConfigurationError,
        AuthError,
        QuotaError,
        NetworkError,
        EmptyResponseError,
        ParseError,
        UnknownError,
    )
}


_MESSAGE_MARKERS = (
    (ErrorKind.QUOTA, ("quota",)),
    (ErrorKind.AUTH, ("api key", "api_key", "apikey")),
    (ErrorKind.NETWORK, ("network", "fetch", "connection")),
)


def kind_from_message(text: str) -> ErrorKind:
    """
    Classify an untyped error by the markers in its text.

    Last resort for exceptions that carry no typed kind. Checked in
    order: quota, credential, network.

    Example:
        >>> kind_from_message("You exceeded your current quota")
        <ErrorKind.QUOTA: 'QUOTA'>
    """
    lowered = text.lower()
    for kind, markers in _MESSAGE_MARKERS:
        if any(marker in lowered for marker in markers):
            return kind
    return ErrorKind.UNKNOWN


class VisionProviderError(Exception):
    """
    Failure reported by a vision provider adapter.

    Adapters translate SDK exceptions into one of the external kinds
    (AUTH, QUOTA, NETWORK, UNKNOWN).
    """

    def __init__(self, kind: ErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)
