"""Exception hierarchy for OAuth 2.0 authorization flow errors.

Only caller misuse is raised. Errors reported by the authorization server
are delivered to the error callback as data, never raised.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all authorization flow errors."""

    pass


class InvalidRequestError(OAuth2Error, ValueError):
    """Raised when an authorization request is given a bad value."""

    pass


class ScopeValidationError(InvalidRequestError):
    """Raised when a scope token violates the RFC 6749 Section 3.3 grammar."""

    def __init__(self, scope: str):
        super().__init__(f"Bad scope: {scope!r}")
        self.scope = scope


class IncompleteRequestError(OAuth2Error):
    """Raised when a required request field is unset at build time.

    Endpoint, response type and client ID must all be present before a
    request can be turned into a URL.
    """

    pass
