"""Authorization request models for OAuth 2.0.

Covers the authorization endpoint request of RFC 6749 Section 3.1,
Section 4.1.1 (authorization code grant) and Section 4.2.1 (implicit grant).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit

from authflow.models.errors import IncompleteRequestError, InvalidRequestError
from authflow.primitives.scope import validate_scopes

logger = logging.getLogger(__name__)

DEFAULT_SCOPE_DELIMITER = " "


class ResponseType(str, Enum):
    """Value of the ``response_type`` request parameter."""

    CODE = "code"
    TOKEN = "token"

    @classmethod
    def parse(cls, value: str | ResponseType) -> ResponseType:
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidRequestError(f"Unsupported response type: {value!r}") from e

    @property
    def success_key(self) -> str:
        """Parameter whose presence marks a successful response."""
        return "code" if self is ResponseType.CODE else "access_token"


def _check_url(url: str, name: str, require_host: bool) -> str:
    """Reject malformed or fragment-bearing URLs."""
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidRequestError(f"{name} is malformed: {url!r}") from e

    if not parts.scheme or (require_host and not parts.netloc):
        raise InvalidRequestError(f"{name} must be an absolute URL: {url!r}")

    # An empty trailing "#" still counts as a fragment component
    if "#" in url:
        raise InvalidRequestError(f"{name} must not include a fragment component.")

    return url


@dataclass(frozen=True)
class AuthorizationRequest:
    """Immutable OAuth 2.0 authorization request.

    Validated on construction, so every instance can be serialized with
    ``to_url()``. Use ``AuthorizationRequestBuilder`` to assemble one
    step by step.
    """

    endpoint: str
    response_type: ResponseType
    client_id: str
    redirect_uri: str | None = None
    scopes: frozenset[str] | None = None
    state: str | None = None
    extra_parameters: Mapping[str, str] = field(default_factory=dict, hash=False)
    scope_delimiter: str = DEFAULT_SCOPE_DELIMITER

    def __post_init__(self) -> None:
        if not self.endpoint:
            raise IncompleteRequestError("Endpoint is not set.")
        if self.response_type is None:
            raise IncompleteRequestError("Response type is not set.")
        if not self.client_id:
            raise IncompleteRequestError("Client ID is not set.")

        _check_url(self.endpoint, "Endpoint", require_host=True)
        if self.redirect_uri is not None:
            _check_url(self.redirect_uri, "Redirect URI", require_host=False)
        if len(self.scope_delimiter) != 1:
            raise InvalidRequestError("Scope delimiter must be a single character.")

        # Normalize so the frozen instance owns its collections
        object.__setattr__(self, "response_type", ResponseType.parse(self.response_type))
        scopes = frozenset(validate_scopes(self.scopes or ()))
        object.__setattr__(self, "scopes", scopes or None)
        object.__setattr__(
            self, "extra_parameters", MappingProxyType(dict(self.extra_parameters))
        )

    def build_scope(self) -> str | None:
        """Join scope tokens with the configured delimiter.

        Tokens are sorted so the same set always yields the same URL.
        """
        if not self.scopes:
            return None
        return self.scope_delimiter.join(sorted(self.scopes))

    def to_url(self) -> str:
        """Build the complete authorization URL.

        A query already present on the endpoint is kept and comes first.
        Then ``response_type``, ``client_id``, ``redirect_uri``, ``scope``,
        ``state`` and finally the extra parameters in insertion order.
        """
        parts = urlsplit(self.endpoint)

        params: list[tuple[str, str]] = [
            ("response_type", self.response_type.value),
            ("client_id", self.client_id),
        ]
        if self.redirect_uri is not None:
            params.append(("redirect_uri", self.redirect_uri))
        scope = self.build_scope()
        if scope is not None:
            params.append(("scope", scope))
        if self.state is not None:
            params.append(("state", self.state))
        for name, value in self.extra_parameters.items():
            if not name:
                continue
            params.append((name, "" if value is None else value))

        query = urlencode(params)
        if parts.query:
            query = f"{parts.query}&{query}"

        return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))

    def to_dict(self) -> dict[str, Any]:
        """Snapshot the request as a JSON-compatible dict."""
        return {
            "endpoint": self.endpoint,
            "response_type": self.response_type.value,
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scopes": sorted(self.scopes) if self.scopes else None,
            "state": self.state,
            "extra_parameters": dict(self.extra_parameters),
            "scope_delimiter": self.scope_delimiter,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AuthorizationRequest:
        """Restore a request from ``to_dict()`` output, re-validating it."""
        scopes = data.get("scopes")
        return cls(
            endpoint=data.get("endpoint"),
            response_type=data.get("response_type"),
            client_id=data.get("client_id"),
            redirect_uri=data.get("redirect_uri"),
            scopes=frozenset(scopes) if scopes else None,
            state=data.get("state"),
            extra_parameters=data.get("extra_parameters") or {},
            scope_delimiter=data.get("scope_delimiter") or DEFAULT_SCOPE_DELIMITER,
        )


class AuthorizationRequestBuilder:
    """Fluent builder for AuthorizationRequest.

    URL and scope values are checked as they are set. Missing required
    fields are only reported by ``build()`` or ``to_url()``.
    """

    def __init__(self) -> None:
        self.endpoint: str | None = None
        self.response_type: ResponseType | None = None
        self.client_id: str | None = None
        self.redirect_uri: str | None = None
        self.scopes: set[str] | None = None
        self.state: str | None = None
        self.extra_parameters: dict[str, str] | None = None
        self.scope_delimiter: str = DEFAULT_SCOPE_DELIMITER

    def set_endpoint(self, endpoint: str | None) -> AuthorizationRequestBuilder:
        if endpoint is not None:
            _check_url(endpoint, "Endpoint", require_host=True)
        self.endpoint = endpoint
        return self

    def set_response_type(
        self, response_type: ResponseType | str | None
    ) -> AuthorizationRequestBuilder:
        self.response_type = (
            None if response_type is None else ResponseType.parse(response_type)
        )
        return self

    def set_client_id(self, client_id: str | None) -> AuthorizationRequestBuilder:
        self.client_id = client_id
        return self

    def set_redirect_uri(self, redirect_uri: str | None) -> AuthorizationRequestBuilder:
        if redirect_uri is not None:
            _check_url(redirect_uri, "Redirect URI", require_host=False)
        self.redirect_uri = redirect_uri
        return self

    def set_scopes(self, scopes: Iterable[str] | None) -> AuthorizationRequestBuilder:
        """Replace the whole scope set. ``None`` or an empty set clears it."""
        if scopes is None:
            self.scopes = None
            return self
        self.scopes = set(validate_scopes(scopes)) or None
        return self

    def add_scopes(self, *scopes: str) -> AuthorizationRequestBuilder:
        """Add scope tokens. Nothing is added if any token is invalid."""
        valid = validate_scopes(scopes)
        if valid:
            if self.scopes is None:
                self.scopes = set()
            self.scopes.update(valid)
        return self

    def remove_scopes(self, *scopes: str) -> AuthorizationRequestBuilder:
        if self.scopes is None:
            return self
        for scope in scopes:
            self.scopes.discard(scope)
        if not self.scopes:
            self.scopes = None
        return self

    def set_state(self, state: str | None) -> AuthorizationRequestBuilder:
        self.state = state
        return self

    def set_extra_parameters(
        self, parameters: Mapping[str, str] | None
    ) -> AuthorizationRequestBuilder:
        self.extra_parameters = dict(parameters) if parameters else None
        return self

    def add_parameter(self, name: str, value: str | None) -> AuthorizationRequestBuilder:
        """Add a provider-specific query parameter, e.g. ``display``."""
        if not name:
            return self
        if self.extra_parameters is None:
            self.extra_parameters = {}
        self.extra_parameters[name] = "" if value is None else value
        return self

    def remove_parameter(self, name: str) -> AuthorizationRequestBuilder:
        if self.extra_parameters is None or name is None:
            return self
        self.extra_parameters.pop(name, None)
        if not self.extra_parameters:
            self.extra_parameters = None
        return self

    def set_scope_delimiter(self, delimiter: str) -> AuthorizationRequestBuilder:
        """Set the character used to join scopes, e.g. ``,`` for some providers."""
        if not isinstance(delimiter, str) or len(delimiter) != 1:
            raise InvalidRequestError("Scope delimiter must be a single character.")
        self.scope_delimiter = delimiter
        return self

    def build(self) -> AuthorizationRequest:
        """Freeze the collected values into an AuthorizationRequest.

        Raises:
            IncompleteRequestError: If endpoint, response type or client ID
                is unset
        """
        request = AuthorizationRequest(
            endpoint=self.endpoint,
            response_type=self.response_type,
            client_id=self.client_id,
            redirect_uri=self.redirect_uri,
            scopes=frozenset(self.scopes) if self.scopes else None,
            state=self.state,
            extra_parameters=self.extra_parameters or {},
            scope_delimiter=self.scope_delimiter,
        )
        logger.debug(f"Built authorization request for client {request.client_id}")
        return request

    def to_url(self) -> str:
        return self.build().to_url()
