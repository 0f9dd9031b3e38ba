"""Outcome models for authorization redirect responses.

A redirect from the authorization endpoint resolves to exactly one of:
an authorization code, an access token (implicit grant) or an error.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from authflow.models.request import AuthorizationRequest

_SCOPE_SPLIT = re.compile(r"[\s,]+")


class ErrorCode(str, Enum):
    """Error codes of RFC 6749 Sections 4.1.2.1, 4.2.2.1 and 5.2.

    Servers outside the registry map to UNRECOGNIZED rather than failing.
    """

    ACCESS_DENIED = "access_denied"
    INVALID_CLIENT = "invalid_client"
    INVALID_GRANT = "invalid_grant"
    INVALID_REQUEST = "invalid_request"
    INVALID_SCOPE = "invalid_scope"
    SERVER_ERROR = "server_error"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
    UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_value(cls, value: str | None) -> ErrorCode:
        if value is None or value == cls.UNRECOGNIZED.value:
            return cls.UNRECOGNIZED
        try:
            return cls(value)
        except ValueError:
            return cls.UNRECOGNIZED


class AccessToken(BaseModel):
    """Access token delivered in the redirect fragment (RFC 6749 Section 4.2.2)."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str | None = None
    expires_in: int = Field(default=0, ge=0)  # 0 means unknown
    refresh_token: str | None = None
    scope: str | None = None

    @property
    def scopes(self) -> list[str]:
        """Scope tokens, split on whitespace or commas.

        Some providers join scopes with commas instead of spaces.
        """
        if not self.scope:
            return []
        return [token for token in _SCOPE_SPLIT.split(self.scope) if token]

    def calculate_expires_at(self, now: float | None = None) -> float | None:
        """Absolute expiry timestamp, or None when the lifetime is unknown."""
        if self.expires_in == 0:
            return None
        return (time.time() if now is None else now) + self.expires_in


@dataclass(frozen=True)
class CodeIssued:
    request: AuthorizationRequest
    code: str
    state: str | None = None


@dataclass(frozen=True)
class TokenIssued:
    request: AuthorizationRequest
    access_token: AccessToken
    state: str | None = None


@dataclass(frozen=True)
class AuthorizationErrorOutcome:
    """Error reported by the authorization server.

    ``error`` is the raw value as sent, so UNRECOGNIZED codes can still be
    inspected.
    """

    request: AuthorizationRequest
    error_code: ErrorCode
    error: str | None = None
    description: str | None = None
    info_uri: str | None = None
    state: str | None = None


FlowOutcome = CodeIssued | TokenIssued | AuthorizationErrorOutcome
