import logging
import time
from typing import Any, Dict, Optional

import httpx

from .errors import ConfigurationError, UpstreamError

DEFAULT_BASE_URL = "https://api.pipedrive.com/v1"


class PipedriveClientError(UpstreamError):
    """Base error for client failures."""


class PipedriveHTTPError(PipedriveClientError):
    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        response_json: Optional[Dict[str, Any]] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(f"{status_code} {method} {url}: {message}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.message = message
        self.response_json = response_json
        self.response_text = response_text


class PipedriveParseError(PipedriveClientError):
    pass


class PipedriveClient:
    """
    Shared HTTP client for the Pipedrive REST API.
    - Handles token auth, base URL and timeouts
    - Returns raw dict payloads; callers own shape handling
    - No retries: a failed call surfaces immediately
    """

    def __init__(
        self,
        *,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        base_url = (base_url or "").rstrip("/")
        api_token = (api_token or "").strip()

        if not api_token:
            raise ConfigurationError("Pipedrive API token must be provided.")
        if not base_url:
            raise ConfigurationError("base_url must be provided.")

        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.log = logger or logging.getLogger("pipedrive_mcp.client")

        self._owns_http = http is None
        # Pipedrive v1 authenticates with an api_token query parameter
        self.http = http or httpx.AsyncClient(
            base_url=self.base_url,
            params={"api_token": api_token},
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout_seconds,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "PipedriveClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        operation: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Core request method.
        - Raises PipedriveHTTPError on non-2xx HTTP responses
        - Raises PipedriveClientError on network/timeout errors
        - Raises PipedriveParseError if the response isn't a JSON object
        - Returns parsed JSON dict on success ({} for empty bodies)
        """
        method = method.upper()
        req_url = url
        start = time.perf_counter()

        try:
            resp = await self.http.request(method, req_url, params=params, json=json)
        except httpx.TimeoutException as exc:
            raise PipedriveClientError(
                f"Timeout calling {method} {url}: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise PipedriveClientError(
                f"Network error calling {method} {url}: {exc}"
            ) from exc

        duration_ms = int((time.perf_counter() - start) * 1000)
        # path only: the query string carries the token
        self.log.debug(
            "upstream.request",
            extra={
                "operation": operation,
                "method": method,
                "path": resp.request.url.path,
                "status": resp.status_code,
                "duration_ms": duration_ms,
            },
        )

        if resp.status_code < 200 or resp.status_code >= 300:
            raise self._to_http_error(resp, method=method, url=url)

        return self._safe_json(resp, method=method, url=url)

    def _safe_json(
        self, resp: httpx.Response, *, method: str, url: str
    ) -> Dict[str, Any]:
        if not resp.content:
            return {}

        try:
            data = resp.json()
        except Exception as exc:
            snippet = (resp.text or "")[:500]
            raise PipedriveParseError(
                f"Expected JSON from {method} {url}, got non-JSON body snippet: "
                f"{snippet!r}"
            ) from exc

        if not isinstance(data, dict):
            raise PipedriveParseError(
                f"Expected top-level JSON object from {method} {url}, "
                f"got {type(data).__name__}"
            )
        return data

    def _to_http_error(
        self, resp: httpx.Response, *, method: str, url: str
    ) -> PipedriveHTTPError:
        response_json: Optional[Dict[str, Any]] = None
        response_text: Optional[str] = None
        message = "request failed"

        try:
            parsed = resp.json()
            if isinstance(parsed, dict):
                response_json = parsed
                # Pipedrive errors carry "error" and sometimes "error_info"
                message = parsed.get("error") or parsed.get("message") or message
        except Exception:
            response_text = (resp.text or "")[:500]

        return PipedriveHTTPError(
            status_code=resp.status_code,
            method=method,
            url=url,
            message=str(message),
            response_json=response_json,
            response_text=response_text,
        )

    async def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        operation: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.request("GET", url, params=params, operation=operation)

    async def post(
        self, url: str, *, json: Dict[str, Any], operation: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.request("POST", url, json=json, operation=operation)

    async def put(
        self, url: str, *, json: Dict[str, Any], operation: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.request("PUT", url, json=json, operation=operation)

    async def delete(
        self, url: str, *, operation: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.request("DELETE", url, operation=operation)


__all__ = [
    "DEFAULT_BASE_URL",
    "PipedriveClient",
    "PipedriveClientError",
    "PipedriveHTTPError",
    "PipedriveParseError",
]
