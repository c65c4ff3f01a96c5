"""
Tests for the Google Ads REST client
"""

import json
from unittest.mock import Mock, patch

import httpx
import pytest

from keywordtrends.ads_client import ADS_ENDPOINT, AccessTokenProvider, GoogleAdsClient
from keywordtrends.exceptions import AdsApiError, MalformedResponseError


def make_client(settings, handler, **kwargs):
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return GoogleAdsClient(settings, http_client=http, **kwargs)


class TestPost:
    """Tests for GoogleAdsClient.post"""

    def test_headers_and_payload(self, settings):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"results": []})

        client = make_client(settings, handler)
        assert client.post("customers/1234567890:generateKeywordIdeas", {"a": 1}) == {"results": []}

        assert seen["url"] == f"{ADS_ENDPOINT}/customers/1234567890:generateKeywordIdeas"
        assert seen["headers"]["authorization"] == "Bearer test-token"
        assert seen["headers"]["developer-token"] == "dev-token"
        assert seen["headers"]["login-customer-id"] == "1234567890"
        assert seen["body"] == {"a": 1}

    def test_error_payload_raises(self, settings):
        def handler(request):
            return httpx.Response(
                400, json={"error": {"code": 400, "message": "Request contains an invalid argument."}}
            )

        client = make_client(settings, handler)
        with pytest.raises(AdsApiError, match="invalid argument") as exc_info:
            client.post("geoTargetConstants:suggest", {})
        assert exc_info.value.status_code == 400

    def test_error_in_successful_response_raises(self, settings):
        client = make_client(settings, lambda request: httpx.Response(200, json={"errors": ["boom"]}))
        with pytest.raises(AdsApiError):
            client.post("geoTargetConstants:suggest", {})

    def test_non_json_body(self, settings):
        client = make_client(settings, lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(MalformedResponseError):
            client.post("geoTargetConstants:suggest", {})

    def test_non_json_error_body(self, settings):
        client = make_client(settings, lambda request: httpx.Response(502, text="Bad Gateway"))
        with pytest.raises(AdsApiError) as exc_info:
            client.post("geoTargetConstants:suggest", {})
        assert exc_info.value.status_code == 502

    def test_transport_error_not_retried_by_default(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused")

        client = make_client(settings, handler)
        with pytest.raises(AdsApiError, match="connection refused"):
            client.post("geoTargetConstants:suggest", {})
        assert len(calls) == 1

    def test_transport_error_retried_when_enabled(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused")
            return httpx.Response(200, json={"ok": True})

        client = make_client(settings, handler, max_attempts=2)
        with patch("time.sleep"):
            assert client.post("geoTargetConstants:suggest", {}) == {"ok": True}
        assert len(calls) == 2


class TestSearch:
    """Tests for GoogleAdsClient.search"""

    def test_follows_page_tokens(self, settings):
        pages = {
            None: {"results": [{"id": 1}], "nextPageToken": "p2"},
            "p2": {"results": [{"id": 2}]},
        }
        requests = []

        def handler(request):
            body = json.loads(request.content)
            requests.append((str(request.url), body))
            return httpx.Response(200, json=pages[body.get("pageToken")])

        client = make_client(settings, handler)
        rows = client.search("SELECT campaign.id FROM campaign", customer_id="111-222-3333")

        assert rows == [{"id": 1}, {"id": 2}]
        assert requests[0][0].endswith("/customers/1112223333/googleAds:search")
        assert requests[1][1]["pageToken"] == "p2"

    def test_error_on_later_page_aborts(self, settings):
        responses = [
            httpx.Response(200, json={"results": [{"id": 1}], "nextPageToken": "p2"}),
            httpx.Response(500, json={"error": {"message": "Internal error"}}),
        ]
        client = make_client(settings, lambda request: responses.pop(0))

        with pytest.raises(AdsApiError, match="Internal error"):
            client.search("SELECT campaign.id FROM campaign")


class TestAccessTokenProvider:
    """Tests for access token resolution"""

    def test_static_token(self):
        assert AccessTokenProvider("abc")() == "abc"

    def test_application_default_credentials(self):
        credentials = Mock(valid=False, token="adc-token")
        with patch("google.auth.default", return_value=(credentials, "project")) as default:
            provider = AccessTokenProvider()
            assert provider() == "adc-token"
            provider()

        default.assert_called_once()
        assert credentials.refresh.call_count == 2
