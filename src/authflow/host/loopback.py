"""Loopback redirect receiver for desktop and CLI clients.

The system browser shows the authorization page, and the authorization
server redirects back to a small HTTP server on this machine (RFC 8252
Section 7.3). Every request the server receives is offered to the flow as
a navigation.

Only the authorization code flow works this way: browsers never send the
URL fragment to a server, so implicit grant responses cannot be received.
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from urllib.parse import urlsplit

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, Response
from starlette.routing import Route

from authflow.models.errors import InvalidRequestError, OAuth2Error
from authflow.models.outcomes import FlowOutcome
from authflow.models.request import ResponseType
from authflow.services.flow import AuthorizationFlow

logger = logging.getLogger(__name__)

STARTUP_POLL_INTERVAL = 0.01

COMPLETED_PAGE = (
    "<!DOCTYPE html><html><body>"
    "<p>Authorization complete. You can close this window.</p>"
    "</body></html>"
)


class BrowserSurface:
    """Host surface that opens the authorization URL in the system browser."""

    def load_url(self, url: str) -> None:
        logger.info(f"Opening browser at {url}")
        if not webbrowser.open(url):
            logger.warning(f"Could not open a browser, visit this URL: {url}")


class LoopbackRedirectReceiver:
    """HTTP server listening on the redirect URI of a code flow.

    Host and port come from the request's redirect URI, which must be a
    plain ``http`` URI with an explicit port.
    """

    def __init__(self, flow: AuthorizationFlow):
        request = flow.request
        if request.response_type is not ResponseType.CODE:
            raise InvalidRequestError(
                "Loopback redirects only support the authorization code flow."
            )
        if request.redirect_uri is None:
            raise InvalidRequestError("Loopback redirects need a redirect URI.")

        parts = urlsplit(request.redirect_uri)
        if parts.scheme != "http" or not parts.hostname or parts.port is None:
            raise InvalidRequestError(
                "Loopback redirect URI must look like http://127.0.0.1:<port>/path"
            )

        self.flow = flow
        self.host = parts.hostname
        self.port = parts.port
        self.path = parts.path or "/"
        self._scheme = parts.scheme
        self._netloc = parts.netloc
        self._resolved = asyncio.Event()

        self._app = Starlette(
            routes=[Route(self.path, self._handle_redirect, methods=["GET"])]
        )
        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task | None = None

    @property
    def app(self) -> Starlette:
        return self._app

    async def start(self) -> None:
        """Start the HTTP server and wait until it accepts connections.

        Raises:
            OAuth2Error: If the server stops before it starts listening,
                e.g. because the port is taken
        """
        config = uvicorn.Config(
            app=self._app, host=self.host, port=self.port, log_level="warning"
        )
        self._server = uvicorn.Server(config)

        # Start server in background task
        self._serve_task = asyncio.create_task(self._server.serve())
        while not self._server.started:
            if self._serve_task.done():
                task, self._serve_task = self._serve_task, None
                cause = None if task.cancelled() else task.exception()
                raise OAuth2Error(
                    f"Loopback receiver failed to listen on {self.host}:{self.port}"
                ) from cause
            await asyncio.sleep(STARTUP_POLL_INTERVAL)
        logger.info(f"Loopback receiver listening on {self.host}:{self.port}{self.path}")

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._server:
            self._server.should_exit = True
        if self._serve_task:
            await self._serve_task
            self._serve_task = None

    async def wait_for_outcome(self, timeout: float | None = None) -> FlowOutcome:
        """Wait until the flow has dispatched an outcome.

        Raises:
            asyncio.TimeoutError: If nothing arrives within ``timeout`` seconds
        """
        await asyncio.wait_for(self._resolved.wait(), timeout)
        return self.flow.outcome

    async def _handle_redirect(self, request: Request) -> Response:
        # Rebuild the URL on the configured origin so the redirect URI prefix
        # check does not depend on the Host header the browser sent.
        url = str(request.url.replace(scheme=self._scheme, netloc=self._netloc))

        if not self.flow.should_override_url_loading(url):
            return Response("Not an authorization response", status_code=400)

        self._resolved.set()
        return HTMLResponse(COMPLETED_PAGE)


async def authorize_in_browser(
    flow: AuthorizationFlow, timeout: float | None = 300.0
) -> FlowOutcome:
    """Run a code flow through the system browser and a loopback receiver.

    Callbacks registered on the flow fire as usual. The outcome is also
    returned for convenience.
    """
    receiver = LoopbackRedirectReceiver(flow)
    await receiver.start()
    try:
        flow.start(BrowserSurface())
        return await receiver.wait_for_outcome(timeout)
    finally:
        await receiver.stop()
