"""Tests for redirect classification.

Covers redirect URI prefix filtering, component selection by response
type, error precedence and the not-a-response cases.
"""

import pytest

from authflow.models.request import AuthorizationRequestBuilder, ResponseType
from authflow.services.classifier import RedirectClassifier, ResponseKind

REDIRECT_URI = "https://app.example.com/callback"


def make_classifier(response_type, redirect_uri=REDIRECT_URI) -> RedirectClassifier:
    request = (
        AuthorizationRequestBuilder()
        .set_endpoint("https://auth.example.com/authorize")
        .set_response_type(response_type)
        .set_client_id("client-123")
        .set_redirect_uri(redirect_uri)
        .build()
    )
    return RedirectClassifier(request)


class TestCodeFlow:
    def setup_method(self):
        self.classifier = make_classifier(ResponseType.CODE)

    def test_code_in_query_is_recognized(self):
        # Act
        response = self.classifier.classify(f"{REDIRECT_URI}?code=ABC&state=XYZ")

        # Assert
        assert response.kind is ResponseKind.CODE
        assert response.parameters.get_first("code") == "ABC"
        assert response.parameters.get_first("state") == "XYZ"

    def test_code_in_fragment_is_ignored(self):
        assert self.classifier.classify(f"{REDIRECT_URI}#code=ABC") is None

    def test_error_takes_precedence_over_code(self):
        response = self.classifier.classify(f"{REDIRECT_URI}?code=ABC&error=server_error")

        assert response.kind is ResponseKind.ERROR

    def test_error_in_query(self):
        response = self.classifier.classify(
            f"{REDIRECT_URI}?error=invalid_scope&error_description=bad"
        )

        assert response.kind is ResponseKind.ERROR
        assert response.parameters.get_first("error_description") == "bad"

    def test_access_token_does_not_count_for_code_flow(self):
        assert self.classifier.classify(f"{REDIRECT_URI}?access_token=T1") is None


class TestTokenFlow:
    def setup_method(self):
        self.classifier = make_classifier(ResponseType.TOKEN)

    def test_token_in_fragment_is_recognized(self):
        response = self.classifier.classify(
            f"{REDIRECT_URI}#access_token=T1&token_type=Bearer&expires_in=3600"
        )

        assert response.kind is ResponseKind.TOKEN
        assert response.parameters.get_first("access_token") == "T1"

    def test_token_in_query_is_ignored(self):
        assert self.classifier.classify(f"{REDIRECT_URI}?access_token=T1") is None

    def test_error_in_fragment(self):
        response = self.classifier.classify(f"{REDIRECT_URI}#error=access_denied")

        assert response.kind is ResponseKind.ERROR

    def test_error_in_query_is_not_inspected(self):
        assert self.classifier.classify(f"{REDIRECT_URI}?error=access_denied") is None


class TestNotAResponse:
    @pytest.mark.parametrize(
        "url",
        [
            "https://auth.example.com/login?code=ABC",
            "https://evil.example.com/callback?code=ABC",
            "http://app.example.com/callback?code=ABC",
        ],
    )
    def test_url_outside_redirect_uri_is_ignored(self, url):
        classifier = make_classifier(ResponseType.CODE)

        assert classifier.classify(url) is None

    def test_prefix_match_is_byte_prefix(self):
        # Anything that starts with the redirect URI string matches
        classifier = make_classifier(ResponseType.CODE)

        response = classifier.classify(f"{REDIRECT_URI}/extra?code=ABC")

        assert response.kind is ResponseKind.CODE

    @pytest.mark.parametrize(
        "suffix", ["", "?", "?state=XYZ", "?foo=bar&baz", "#code=ABC"]
    )
    def test_missing_or_unrecognized_component(self, suffix):
        classifier = make_classifier(ResponseType.CODE)

        assert classifier.classify(f"{REDIRECT_URI}{suffix}") is None

    def test_malformed_url_is_ignored(self):
        classifier = make_classifier(ResponseType.CODE, redirect_uri=None)

        assert classifier.classify("https://[::1/callback?code=ABC") is None

    def test_relative_url_is_ignored(self):
        classifier = make_classifier(ResponseType.CODE, redirect_uri=None)

        assert classifier.classify("/callback?code=ABC") is None


class TestWithoutRedirectUri:
    def test_any_url_with_response_shape_matches(self):
        classifier = make_classifier(ResponseType.CODE, redirect_uri=None)

        response = classifier.classify("https://anywhere.example.com/?code=ABC")

        assert response.kind is ResponseKind.CODE

    def test_classification_is_repeatable(self):
        classifier = make_classifier(ResponseType.CODE, redirect_uri=None)
        url = "https://anywhere.example.com/?code=ABC"

        assert classifier.classify(url) == classifier.classify(url)
