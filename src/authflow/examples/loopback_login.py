"""
Log in through the system browser and print the authorization code.

Configure the request with OAUTH_* environment variables (or a .env file):

    OAUTH_ENDPOINT=https://auth.example.com/authorize
    OAUTH_RESPONSE_TYPE=code
    OAUTH_CLIENT_ID=my-client
    OAUTH_REDIRECT_URI=http://127.0.0.1:8765/callback
    OAUTH_SCOPES="openid profile"
"""

import asyncio
import logging
import secrets

from dotenv import load_dotenv

from authflow.config import request_from_env
from authflow.host.loopback import authorize_in_browser
from authflow.models.outcomes import AccessToken, ErrorCode
from authflow.models.request import AuthorizationRequest
from authflow.services.dispatcher import FlowCallbacks
from authflow.services.flow import AuthorizationFlow


def print_code(request: AuthorizationRequest, code: str, state: str | None) -> None:
    if state != request.state:
        logging.warning(f"State mismatch: sent {request.state}, got {state}")
    print(f"Authorization code: {code}")


def print_token(
    request: AuthorizationRequest, access_token: AccessToken, state: str | None
) -> None:
    print(f"Access token: {access_token.access_token}")


def print_error(
    request: AuthorizationRequest,
    error_code: ErrorCode,
    description: str | None,
    info_uri: str | None,
    state: str | None,
) -> None:
    print(f"Authorization failed: {error_code.value} ({description or ''})")


async def main():
    builder = request_from_env()
    if builder.state is None:
        builder.set_state(secrets.token_urlsafe(16))
    request = builder.build()

    callbacks = FlowCallbacks()
    callbacks.on_code_issued(print_code)
    callbacks.on_token_issued(print_token)
    callbacks.on_error(print_error)

    flow = AuthorizationFlow(request, callbacks)
    try:
        await authorize_in_browser(flow)
    except asyncio.TimeoutError:
        print("Timed out waiting for the authorization server.")


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
