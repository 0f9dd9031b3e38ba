"""Environment-based configuration for authorization requests."""

from __future__ import annotations

import os
from collections.abc import Mapping

from authflow.models.request import AuthorizationRequestBuilder

DEFAULT_PREFIX = "OAUTH_"


def request_from_env(
    prefix: str = DEFAULT_PREFIX, environ: Mapping[str, str] | None = None
) -> AuthorizationRequestBuilder:
    """Create a request builder from environment variables.

    Reads ``<prefix>ENDPOINT``, ``RESPONSE_TYPE``, ``CLIENT_ID``,
    ``REDIRECT_URI``, ``SCOPES`` (whitespace separated), ``STATE`` and
    ``SCOPE_DELIMITER``. Unset or empty variables leave the field unset, so
    missing required values are reported by ``build()``.

    Args:
        prefix: Variable name prefix
        environ: Mapping to read from, defaults to ``os.environ``

    Raises:
        InvalidRequestError: If a set variable holds an invalid value
    """
    env = os.environ if environ is None else environ

    def get(name: str) -> str | None:
        return env.get(f"{prefix}{name}") or None

    builder = AuthorizationRequestBuilder()
    builder.set_endpoint(get("ENDPOINT"))
    builder.set_response_type(get("RESPONSE_TYPE"))
    builder.set_client_id(get("CLIENT_ID"))
    builder.set_redirect_uri(get("REDIRECT_URI"))
    builder.set_state(get("STATE"))

    scopes = get("SCOPES")
    if scopes:
        builder.add_scopes(*scopes.split())

    # Read raw so a comma or other single character survives
    delimiter = env.get(f"{prefix}SCOPE_DELIMITER")
    if delimiter:
        builder.set_scope_delimiter(delimiter)

    return builder
