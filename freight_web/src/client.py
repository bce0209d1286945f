"""
HTTP client for the Freight Logistics REST API.

Every page in the web client fetches data through ``ApiClient``:

- Paths are joined onto the configured API base URL
- Bodies are sent as JSON and the user's token is forwarded as a bearer header
- Successful responses return the parsed JSON envelope
- Failures raise ``ApiError`` carrying the API's ``message`` (or a message
  derived from the status code), including non-JSON and network failures
- Identical GETs inside the throttle window reuse the previous response;
  any successful write empties the throttle cache
"""

import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

import requests
import structlog

logger = structlog.get_logger(__name__)


class ApiError(Exception):
    """Backend request failed; ``message`` is safe to show to the user."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiClient:
    """
    Thin JSON client over a shared ``requests.Session``.

    Args:
        base_url: API base URL including the ``/api`` prefix
        timeout: Per-request timeout in seconds
        throttle_seconds: GET reuse window; 0 disables throttling
        session: Optional session (tests pass a mock)
        clock: Monotonic clock used for the throttle window
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        throttle_seconds: float = 0.0,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.throttle_seconds = throttle_seconds
        self.session = session or requests.Session()
        self._clock = clock
        self._cache: Dict[Hashable, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    # =========================================================================
    # Public verbs
    # =========================================================================

    def get(
        self,
        path: str,
        token: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        throttle: bool = True
    ) -> Any:
        return self.request("GET", path, token=token, params=params, throttle=throttle)

    def post(self, path: str, json: Any = None, token: Optional[str] = None) -> Any:
        return self.request("POST", path, token=token, json=json)

    def put(self, path: str, json: Any = None, token: Optional[str] = None) -> Any:
        return self.request("PUT", path, token=token, json=json)

    def delete(self, path: str, token: Optional[str] = None) -> Any:
        return self.request("DELETE", path, token=token)

    def request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        throttle: bool = False
    ) -> Any:
        """
        Send a request and return the parsed JSON body.

        Raises:
            ApiError: Network failure, non-JSON body, or non-2xx status
        """
        method = method.upper()
        url = self.url_for(path)
        throttled = method == "GET" and throttle and self.throttle_seconds > 0
        cache_key = self._cache_key(url, params, token)

        if throttled:
            cached = self._cached(cache_key)
            if cached is not None:
                logger.debug("api_request_throttled", method=method, path=path)
                return cached

        headers = {"Accept": "application/json"}
        if json is not None:
            headers["Content-Type"] = "application/json"
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("api_request_failed", method=method, path=path, error=str(e))
            raise ApiError(f"Failed to load {self._resource_name(path)}") from e

        data = self._parse(response)

        logger.debug("api_request_completed", method=method, path=path, status_code=response.status_code)

        if throttled:
            self._store(cache_key, data)
        elif method != "GET":
            self.clear_cache()

        return data

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _cache_key(url: str, params: Optional[Dict[str, Any]], token: Optional[str]) -> Hashable:
        items = tuple(sorted((k, str(v)) for k, v in (params or {}).items()))
        return (url, items, token)

    def _cached(self, key: Hashable) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            stored_at, data = entry
            if now - stored_at >= self.throttle_seconds:
                del self._cache[key]
                return None
            return data

    def _store(self, key: Hashable, data: Any) -> None:
        now = self._clock()
        with self._lock:
            # Drop expired entries so the cache stays bounded by the window
            expired = [k for k, (at, _) in self._cache.items() if now - at >= self.throttle_seconds]
            for k in expired:
                del self._cache[k]
            self._cache[key] = (now, data)

    @staticmethod
    def _resource_name(path: str) -> str:
        return path.strip("/").split("?")[0] or "data"

    @staticmethod
    def _parse(response: requests.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            snippet = (response.text or "")[:100]
            raise ApiError(
                f"Server responded with non-JSON content: {snippet}...",
                response.status_code
            )

        try:
            data = response.json()
        except ValueError:
            raise ApiError("Server responded with invalid JSON", response.status_code)

        if not response.ok:
            message = None
            if isinstance(data, dict):
                message = data.get("message") or data.get("error")
            raise ApiError(
                message or f"Request failed with status {response.status_code}",
                response.status_code
            )

        return data
