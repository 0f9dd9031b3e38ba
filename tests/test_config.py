import pytest

from authflow.config import request_from_env
from authflow.models.errors import IncompleteRequestError, InvalidRequestError
from authflow.models.request import ResponseType


class TestRequestFromEnv:
    def test_all_fields_are_read(self):
        # Arrange
        environ = {
            "OAUTH_ENDPOINT": "https://auth.example.com/authorize",
            "OAUTH_RESPONSE_TYPE": "token",
            "OAUTH_CLIENT_ID": "client-123",
            "OAUTH_REDIRECT_URI": "https://app.example.com/callback",
            "OAUTH_SCOPES": "read  write",
            "OAUTH_STATE": "XYZ",
            "OAUTH_SCOPE_DELIMITER": ",",
        }

        # Act
        request = request_from_env(environ=environ).build()

        # Assert
        assert request.endpoint == "https://auth.example.com/authorize"
        assert request.response_type is ResponseType.TOKEN
        assert request.client_id == "client-123"
        assert request.redirect_uri == "https://app.example.com/callback"
        assert request.scopes == frozenset({"read", "write"})
        assert request.state == "XYZ"
        assert request.scope_delimiter == ","

    def test_custom_prefix(self):
        environ = {
            "GITHUB_ENDPOINT": "https://github.com/login/oauth/authorize",
            "GITHUB_RESPONSE_TYPE": "code",
            "GITHUB_CLIENT_ID": "abc",
        }

        request = request_from_env(prefix="GITHUB_", environ=environ).build()

        assert request.client_id == "abc"

    def test_missing_values_are_reported_at_build(self):
        builder = request_from_env(environ={"OAUTH_CLIENT_ID": "client-123"})

        assert builder.endpoint is None
        with pytest.raises(IncompleteRequestError):
            builder.build()

    def test_invalid_response_type_fails_fast(self):
        with pytest.raises(InvalidRequestError):
            request_from_env(environ={"OAUTH_RESPONSE_TYPE": "id_token"})

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("OAUTH_CLIENT_ID", "from-env")

        assert request_from_env().client_id == "from-env"
