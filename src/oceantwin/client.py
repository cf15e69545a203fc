"""Preconfigured HTTP client for the ocean digital-twin API."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import requests

from .config import ClientConfig

logger = logging.getLogger(__name__)

_COUNT_ENDPOINT = "count"


class ApiError(RuntimeError):
    """Raised when the API returns an error status or a malformed payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiClient:
    """Tiny wrapper binding a ``requests`` session to a :class:`ClientConfig`."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._owns_session = session is None
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def timeout(self) -> Optional[float]:
        return self.config.timeout

    def get(self, path: str, *, params: Optional[Mapping[str, str]] = None) -> requests.Response:
        url = self.config.url_for(path)
        logger.debug("GET %s params=%s", url, params)
        return self._session.get(
            url,
            params=params,
            headers=dict(self.config.headers),
            timeout=self.timeout,
        )

    def put(self, path: str, *, json: Any = None) -> requests.Response:
        url = self.config.url_for(path)
        logger.debug("PUT %s", url)
        return self._session.put(
            url,
            json=json,
            headers=dict(self.config.headers),
            timeout=self.timeout,
        )

    def get_count(self, *, raise_for_status: bool = False) -> requests.Response:
        """GET ``/count`` and hand back the raw response."""

        response = self.get(_COUNT_ENDPOINT)
        if raise_for_status:
            _check_status(response)
        return response

    def update_count(self, *, raise_for_status: bool = False) -> requests.Response:
        """PUT ``/count`` and hand back the raw response."""

        response = self.put(_COUNT_ENDPOINT)
        if raise_for_status:
            _check_status(response)
        return response

    def get_json(self, path: str, *, params: Optional[Mapping[str, str]] = None) -> Any:
        response = self.get(path, params=params)
        _check_status(response)
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"API returned invalid JSON for {path}", response.status_code) from exc

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def create_client(
    base_url: Optional[str] = None,
    *,
    timeout_ms: Optional[int] = None,
    session: Optional[requests.Session] = None,
) -> ApiClient:
    """Build an :class:`ApiClient`, overriding the default base URL or timeout."""

    overrides = {}
    if base_url is not None:
        overrides["base_url"] = base_url
    if timeout_ms is not None:
        overrides["timeout_ms"] = timeout_ms
    config = ClientConfig.from_mapping(overrides) if overrides else ClientConfig()
    return ApiClient(config, session=session)


def get_count(client: ApiClient) -> requests.Response:
    return client.get_count()


def update_count(client: ApiClient) -> requests.Response:
    return client.update_count()


def _check_status(response: requests.Response) -> None:
    if not 200 <= response.status_code < 300:
        raise ApiError(f"API error {response.status_code}: {response.text}", response.status_code)
