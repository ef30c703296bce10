from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional


class ConfigurationError(Exception):
    """Raised at startup when client configuration is incomplete or invalid."""


@dataclass(frozen=True)
class OAuthError:
    """Base of the token exchange failure variants.

    Variants are returned inside ``Err`` rather than raised. ``kind`` is a
    stable tag callers can switch on when rendering a diagnostic.
    """

    kind: ClassVar[str] = "oauth_error"

    def describe(self) -> str:
        return self.kind

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "error_description": self.describe()}


@dataclass(frozen=True)
class NetworkFailure(OAuthError):
    detail: str

    kind: ClassVar[str] = "network_failure"

    def describe(self) -> str:
        return f"Network error during token exchange: {self.detail}"


@dataclass(frozen=True)
class TlsFailure(OAuthError):
    detail: str

    kind: ClassVar[str] = "tls_failure"

    def describe(self) -> str:
        return f"TLS error during token exchange: {self.detail}"


@dataclass(frozen=True)
class HttpStatusError(OAuthError):
    status_code: int

    kind: ClassVar[str] = "http_status_error"

    def describe(self) -> str:
        return f"Token endpoint responded with HTTP {self.status_code}"

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "status_code": self.status_code}


@dataclass(frozen=True)
class ProviderError(OAuthError):
    """OAuth2 error body returned by the token endpoint, e.g. ``invalid_grant``."""

    status_code: int
    error: str
    description: Optional[str] = None

    kind: ClassVar[str] = "provider_error"

    def describe(self) -> str:
        if self.description:
            return f"{self.error}: {self.description}"
        return self.error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error,
            "error_description": self.description,
            "status_code": self.status_code,
        }


@dataclass(frozen=True)
class DecodeFailure(OAuthError):
    detail: str

    kind: ClassVar[str] = "decode_failure"

    def describe(self) -> str:
        return f"Unexpected token response format: {self.detail}"
