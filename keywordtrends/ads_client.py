# ABOUTME: Thin synchronous client for the Google Ads REST API
# ABOUTME: Adds auth headers, surfaces API errors, pages through googleAds:search

import json
import logging
from typing import Callable, Optional

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import Settings, normalize_customer_id
from .exceptions import AdsApiError, MalformedResponseError

logger = logging.getLogger(__name__)

ADS_VERSION = "v22"
ADS_ENDPOINT = f"https://googleads.googleapis.com/{ADS_VERSION}"

ADWORDS_SCOPE = "https://www.googleapis.com/auth/adwords"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class AccessTokenProvider:
    """
    Supplies OAuth access tokens for the Ads API.

    Uses a static token when one is configured, otherwise Application Default
    Credentials refreshed on demand.
    """

    def __init__(
        self,
        static_token: Optional[str] = None,
        scopes: tuple[str, ...] = (ADWORDS_SCOPE, CLOUD_PLATFORM_SCOPE),
    ):
        self.static_token = static_token
        self.scopes = scopes
        self._credentials = None

    def __call__(self) -> str:
        if self.static_token:
            return self.static_token

        if self._credentials is None:
            import google.auth

            self._credentials, _ = google.auth.default(scopes=list(self.scopes))

        if not self._credentials.valid:
            from google.auth.transport.requests import Request

            self._credentials.refresh(Request())
            logger.debug("Refreshed Google access token")

        return self._credentials.token


class GoogleAdsClient:
    """
    Google Ads REST client.

    Every request carries a bearer token plus the developer-token and
    login-customer-id headers. Failures (transport errors, non-2xx status,
    `error`/`errors` in the payload) raise AdsApiError; nothing is retried
    unless `max_attempts` is raised above 1, in which case only transport
    errors are retried with exponential backoff.

    Usage:
        client = GoogleAdsClient(Settings.load())
        rows = client.search("SELECT campaign.id FROM campaign")
    """

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.Client] = None,
        token_provider: Optional[Callable[[], str]] = None,
        max_attempts: int = 1,
        timeout: float = 60.0,
    ):
        self.settings = settings
        self.customer_id = settings.ads_account_id
        self.http = http_client or httpx.Client(timeout=timeout)
        self.token_provider = token_provider or AccessTokenProvider(settings.access_token)
        self.max_attempts = max(1, max_attempts)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.token_provider()}",
            "developer-token": self.settings.developer_token,
            "login-customer-id": self.customer_id,
            "Content-Type": "application/json",
        }

    def _send(self, url: str, payload: dict) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=8),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        try:
            return retrying(self.http.post, url, json=payload, headers=self._headers())
        except httpx.TransportError as e:
            logger.error(f"Google Ads request failed: {e}")
            raise AdsApiError(f"Google Ads request to {url} failed: {e}") from e

    def post(self, service: str, payload: dict) -> dict:
        """
        POST a JSON payload to `{endpoint}/{service}` and return the decoded body.

        Raises:
            AdsApiError: on transport failure, HTTP error status or error payload
            MalformedResponseError: if the body is not JSON
        """
        url = f"{ADS_ENDPOINT}/{service}"
        logger.debug(f"{service} --> {json.dumps(payload, indent=2)}")
        response = self._send(url, payload)

        try:
            data = response.json() if response.content else {}
        except ValueError:
            logger.error(f"Response is not valid JSON:\n{response.text}")
            if response.status_code >= 400:
                raise AdsApiError(
                    f"Google Ads API failed: {response.status_code}",
                    status_code=response.status_code,
                    details={"response_text": response.text},
                ) from None
            raise MalformedResponseError(
                f"Google Ads API returned invalid JSON for {service}", raw_text=response.text
            ) from None

        error = (data.get("error") or data.get("errors")) if isinstance(data, dict) else None
        if error or response.status_code >= 400:
            message = f"Google Ads API failed: {response.status_code}"
            if isinstance(error, dict):
                message = error.get("message", message)
            elif error:
                message = json.dumps(error, indent=2)
            logger.error(f"Google Ads API error for {service}: {json.dumps(error, indent=2)}")
            raise AdsApiError(
                message,
                status_code=response.status_code,
                details={"error": error},
            )

        return data

    def search(self, query: str, customer_id: Optional[str] = None) -> list[dict]:
        """
        Execute a GAQL query via googleAds:search, following nextPageToken.

        A failure on any page aborts the whole query; partial rows are discarded.
        """
        customer_id = normalize_customer_id(customer_id or self.customer_id)
        request = {"query": query}
        results = []
        while True:
            response = self.post(f"customers/{customer_id}/googleAds:search", request)
            results.extend(response.get("results", []))
            logger.info(f"Fetching results... #{len(results)}")
            page_token = response.get("nextPageToken")
            if not page_token:
                break
            request["pageToken"] = page_token
        return results

    def close(self) -> None:
        self.http.close()
