"""Search client interface and the default REST implementation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

import requests

from search_extract.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
DEFAULT_USER_AGENT = "search-extract/1.0"


class SearchClient(ABC):
    """Performs the authenticated search request for the stage."""

    @abstractmethod
    def open(
        self,
        consumer_key: str,
        consumer_secret: str,
        application_name: str,
        auth_endpoint_url: str,
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def search(self, search_endpoint_url: str, term: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError


class RestSearchClient(SearchClient):
    """
    Search client speaking the application-only bearer token flow.

    `open` exchanges the consumer key and secret for a bearer token with a
    single client-credentials request; `search` sends the term as the `q`
    parameter. No retries and no token refresh.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, user_agent: str = DEFAULT_USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent
        self.session: requests.Session | None = None
        self.bearer_token: str | None = None

    def open(
        self,
        consumer_key: str,
        consumer_secret: str,
        application_name: str,
        auth_endpoint_url: str,
    ) -> None:
        self.session = requests.Session()
        self.session.headers["User-Agent"] = f"{application_name} ({self.user_agent})"

        # Key and secret are percent-encoded before basic auth, as the token endpoint expects.
        auth = (quote(consumer_key, safe=""), quote(consumer_secret, safe=""))
        try:
            response = self.session.post(
                auth_endpoint_url,
                auth=auth,
                data={"grant_type": "client_credentials"},
                headers={"Content-Type": "application/x-www-form-urlencoded;charset=UTF-8"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise FetchError(f"Token request to {auth_endpoint_url} failed: {e}") from e

        if not isinstance(payload, dict):
            raise FetchError("Token response is not a JSON object")
        token_type = str(payload.get("token_type", "")).lower()
        token = payload.get("access_token")
        if token_type != "bearer" or not token:
            raise FetchError(f"Token response has no bearer token (token_type={token_type!r})")

        self.bearer_token = token
        logger.info("Opened search connection for %s", application_name)

    def search(self, search_endpoint_url: str, term: str) -> Optional[str]:
        if self.session is None or self.bearer_token is None:
            raise FetchError("Search client is not open")

        try:
            response = self.session.get(
                search_endpoint_url,
                params={"q": term},
                headers={"Authorization": f"Bearer {self.bearer_token}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Search request to {search_endpoint_url} failed: {e}") from e

        logger.info("Search for %r returned %d bytes", term, len(response.content))
        return response.text or None

    def close(self) -> None:
        if self.session is not None:
            self.session.close()
        self.session = None
        self.bearer_token = None
