"""OAuth 2.0 authorization flow orchestration.

Ties an authorization request to a host surface: the request URL is
loaded by the host, and every navigation the host observes is offered
back to the flow for classification and dispatch.
"""

from __future__ import annotations

import logging
from typing import Protocol

from authflow.models.outcomes import FlowOutcome
from authflow.models.request import AuthorizationRequest
from authflow.services.classifier import RedirectClassifier
from authflow.services.dispatcher import FlowCallbacks, FlowDispatcher

logger = logging.getLogger(__name__)


class HostSurface(Protocol):
    """Protocol for whatever loads the authorization page.

    Allows different strategies:
    - Embedded browser view that intercepts navigations
    - System browser with a loopback redirect receiver
    - Test doubles that record the URL
    """

    def load_url(self, url: str) -> None:
        """Start loading the given URL."""
        ...


class AuthorizationFlow:
    """One authorization attempt against one authorization endpoint.

    With ``latch`` enabled (the default) the flow resolves at most once:
    after the first dispatched outcome, later navigations are ignored until
    ``reset()`` is called. With ``latch=False`` every matching navigation
    is dispatched.
    """

    def __init__(
        self,
        request: AuthorizationRequest,
        callbacks: FlowCallbacks,
        latch: bool = True,
    ):
        self.request = request
        self.latch = latch
        self._classifier = RedirectClassifier(request)
        self._dispatcher = FlowDispatcher(callbacks)
        self._outcome: FlowOutcome | None = None

    @property
    def outcome(self) -> FlowOutcome | None:
        """Most recently dispatched outcome, if any."""
        return self._outcome

    @property
    def is_resolved(self) -> bool:
        return self._outcome is not None

    def start(self, surface: HostSurface) -> str:
        """Serialize the request and hand its URL to the host surface.

        Returns:
            The authorization URL that was loaded
        """
        url = self.request.to_url()
        logger.info(f"Starting authorization flow for client {self.request.client_id}")
        surface.load_url(url)
        return url

    def should_override_url_loading(self, url: str) -> bool:
        """Offer a navigation target to the flow.

        Never raises on account of the URL or of callback behavior.

        Args:
            url: URL the host is about to navigate to

        Returns:
            True if the URL was an authorization response and a callback
            was dispatched for it
        """
        if self.latch and self._outcome is not None:
            logger.debug(f"Flow already resolved, ignoring navigation: {url}")
            return False

        response = self._classifier.classify(url)
        if response is None:
            return False

        self._outcome = self._dispatcher.dispatch(self.request, response)
        return True

    def reset(self) -> None:
        """Forget the dispatched outcome so the flow accepts responses again."""
        self._outcome = None
