"""Upstream session: the authenticated client plus its resource handles."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

from .client import DEFAULT_BASE_URL, PipedriveClient
from .errors import ConfigurationError, NotInitializedError
from .handles import ResourceHandle, handle_type_for

log = logging.getLogger("pipedrive_mcp.core.context")


class GatewaySession:
    """
    Holds the authenticated upstream client for the lifetime of the process.

    Built once at startup and passed to every component that talks upstream.
    ``initialize`` must run before the first request is dispatched; every
    accessor fails fast with NotInitializedError otherwise.
    """

    def __init__(self) -> None:
        self._client: Optional[PipedriveClient] = None
        self._handles: Dict[str, ResourceHandle] = {}

    @property
    def initialized(self) -> bool:
        return self._client is not None

    def initialize(
        self,
        api_token: Optional[str],
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        http: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not api_token or not api_token.strip():
            raise ConfigurationError(
                "Pipedrive API token is not set (PIPEDRIVE_API_TOKEN)."
            )
        self._client = PipedriveClient(
            api_token=api_token,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            http=http,
        )
        self._handles = {}
        log.info("Pipedrive client initialized", extra={"path": self._client.base_url})

    @property
    def client(self) -> PipedriveClient:
        if self._client is None:
            raise NotInitializedError("Pipedrive client not initialized")
        return self._client

    def get_resource_handle(self, resource_name: str) -> ResourceHandle:
        """Return the handle for a resource family, e.g. ``"deals"``."""
        handle_cls = handle_type_for(resource_name)
        client = self.client
        handle = self._handles.get(resource_name)
        if handle is None:
            handle = handle_cls(client)
            self._handles[resource_name] = handle
        return handle

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._handles = {}


__all__ = ["GatewaySession"]
