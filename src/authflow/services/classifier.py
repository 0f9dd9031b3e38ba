"""Redirect classification for OAuth 2.0 authorization responses.

Decides whether a URL the host is about to navigate to carries the
authorization server's response, and extracts its parameters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

from authflow.models.request import AuthorizationRequest, ResponseType
from authflow.primitives.parameters import ParameterMap, parse_parameters

logger = logging.getLogger(__name__)


class ResponseKind(str, Enum):
    CODE = "code"
    TOKEN = "token"
    ERROR = "error"


@dataclass(frozen=True)
class RedirectResponse:
    """A navigation recognized as an authorization response."""

    kind: ResponseKind
    parameters: ParameterMap


class RedirectClassifier:
    """Classifies navigation targets against one authorization request.

    Stateless: every call is an independent attempt, so the same classifier
    can be fed any number of unrelated navigations before the real
    redirect arrives.
    """

    def __init__(self, request: AuthorizationRequest):
        self.request = request

    def classify(self, url: str) -> RedirectResponse | None:
        """Classify a navigation target URL.

        The code flow reads the query component and the implicit flow reads
        the fragment. An ``error`` parameter wins over the success key.

        Args:
            url: URL the host is about to load

        Returns:
            RedirectResponse, or None if the URL is not a response
        """
        redirect_uri = self.request.redirect_uri
        if redirect_uri is not None and not url.startswith(redirect_uri):
            logger.debug(f"Ignoring navigation outside redirect URI: {url}")
            return None

        try:
            parts = urlsplit(url)
        except ValueError:
            logger.debug(f"Ignoring malformed navigation URL: {url}")
            return None
        if not parts.scheme:
            logger.debug(f"Ignoring relative navigation URL: {url}")
            return None

        response_type = self.request.response_type
        if response_type is ResponseType.CODE:
            component = parts.query
        else:
            component = parts.fragment
        if not component:
            return None

        parameters = parse_parameters(component)

        if "error" in parameters:
            return RedirectResponse(ResponseKind.ERROR, parameters)
        if response_type.success_key in parameters:
            return RedirectResponse(ResponseKind(response_type.value), parameters)

        logger.debug(f"Navigation component has no response parameters: {url}")
        return None
