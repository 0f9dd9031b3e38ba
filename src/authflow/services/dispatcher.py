"""Dispatch of classified authorization responses to application callbacks."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from authflow.models.outcomes import (
    AccessToken,
    AuthorizationErrorOutcome,
    CodeIssued,
    ErrorCode,
    FlowOutcome,
    TokenIssued,
)
from authflow.models.request import AuthorizationRequest
from authflow.services.classifier import RedirectResponse, ResponseKind

logger = logging.getLogger(__name__)

CodeIssuedCallback = Callable[[AuthorizationRequest, str, str | None], None]
TokenIssuedCallback = Callable[[AuthorizationRequest, AccessToken, str | None], None]
ErrorCallback = Callable[
    [AuthorizationRequest, ErrorCode, str | None, str | None, str | None], None
]


class FlowListener(Protocol):
    """Object-style alternative to registering three separate callbacks."""

    def on_code_issued(
        self, request: AuthorizationRequest, code: str, state: str | None
    ) -> None: ...

    def on_token_issued(
        self,
        request: AuthorizationRequest,
        access_token: AccessToken,
        state: str | None,
    ) -> None: ...

    def on_error(
        self,
        request: AuthorizationRequest,
        error_code: ErrorCode,
        description: str | None,
        info_uri: str | None,
        state: str | None,
    ) -> None: ...


class FlowCallbacks:
    """Manages the three outcome callbacks of an authorization flow."""

    def __init__(self):
        self._code_issued: CodeIssuedCallback | None = None
        self._token_issued: TokenIssuedCallback | None = None
        self._error: ErrorCallback | None = None

    @classmethod
    def from_listener(cls, listener: FlowListener) -> FlowCallbacks:
        callbacks = cls()
        callbacks.on_code_issued(listener.on_code_issued)
        callbacks.on_token_issued(listener.on_token_issued)
        callbacks.on_error(listener.on_error)
        return callbacks

    def on_code_issued(self, callback: CodeIssuedCallback) -> None:
        """Register your callback for an issued authorization code.

        Args:
            callback: Called with (request, code, state). ``state`` is
                whatever the server echoed back, or None.
        """
        self._code_issued = callback

    def on_token_issued(self, callback: TokenIssuedCallback) -> None:
        """Register your callback for an access token from the implicit grant.

        Args:
            callback: Called with (request, access_token, state).
        """
        self._token_issued = callback

    def on_error(self, callback: ErrorCallback) -> None:
        """Register your callback for errors reported by the server.

        Args:
            callback: Called with (request, error_code, description,
                info_uri, state).
        """
        self._error = callback

    def call_code_issued(self, outcome: CodeIssued) -> None:
        """Invoke your code callback. Logs any errors that occur."""
        if self._code_issued:
            try:
                self._code_issued(outcome.request, outcome.code, outcome.state)
            except Exception as e:
                logger.warning(f"Code issued callback failed: {e}")

    def call_token_issued(self, outcome: TokenIssued) -> None:
        """Invoke your token callback. Logs any errors that occur."""
        if self._token_issued:
            try:
                self._token_issued(outcome.request, outcome.access_token, outcome.state)
            except Exception as e:
                logger.warning(f"Token issued callback failed: {e}")

    def call_error(self, outcome: AuthorizationErrorOutcome) -> None:
        """Invoke your error callback. Logs any errors that occur."""
        if self._error:
            try:
                self._error(
                    outcome.request,
                    outcome.error_code,
                    outcome.description,
                    outcome.info_uri,
                    outcome.state,
                )
            except Exception as e:
                logger.warning(f"Error callback failed: {e}")


class FlowDispatcher:
    """Turns a classified redirect into an outcome and fires its callback.

    Exactly one callback runs per dispatched response. Callback failures
    are contained here and never reach the host's navigation handling.
    """

    def __init__(self, callbacks: FlowCallbacks):
        self.callbacks = callbacks

    def dispatch(
        self, request: AuthorizationRequest, response: RedirectResponse
    ) -> FlowOutcome:
        outcome = self.build_outcome(request, response)

        if isinstance(outcome, CodeIssued):
            logger.info(f"Authorization code issued to client {request.client_id}")
            self.callbacks.call_code_issued(outcome)
        elif isinstance(outcome, TokenIssued):
            logger.info(f"Access token issued to client {request.client_id}")
            self.callbacks.call_token_issued(outcome)
        else:
            logger.info(
                f"Authorization server returned error {outcome.error} "
                f"for client {request.client_id}"
            )
            self.callbacks.call_error(outcome)

        return outcome

    @staticmethod
    def build_outcome(
        request: AuthorizationRequest, response: RedirectResponse
    ) -> FlowOutcome:
        params = response.parameters
        state = params.get_first("state")

        if response.kind is ResponseKind.ERROR:
            error = params.get_first("error")
            error_code = ErrorCode.from_value(error)
            if error_code is ErrorCode.UNRECOGNIZED:
                logger.warning(f"Unrecognized error code from server: {error!r}")
            return AuthorizationErrorOutcome(
                request=request,
                error_code=error_code,
                error=error,
                description=params.get_first("error_description"),
                info_uri=params.get_first("error_uri"),
                state=state,
            )

        if response.kind is ResponseKind.CODE:
            return CodeIssued(request=request, code=params.get_first("code"), state=state)

        access_token = AccessToken(
            access_token=params.get_first("access_token"),
            token_type=params.get_first("token_type"),
            expires_in=max(params.get_int("expires_in"), 0),
            refresh_token=params.get_first("refresh_token"),
            scope=params.get_first("scope"),
        )
        return TokenIssued(request=request, access_token=access_token, state=state)
