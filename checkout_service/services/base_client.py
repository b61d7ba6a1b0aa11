"""
Commerce Backend Client

Shared HTTP plumbing for the inventory, payment, shipping/tax, analytics and
loyalty clients. Transport failures and unusable responses are translated
here, so no raw httpx error ever crosses into the checkout flow.
"""

import asyncio
import logging
from typing import Any, Awaitable, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..core.errors import MalformedResponseError, ServiceUnavailableError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ServiceClient:
    """
    Base client for one commerce backend service.

    Subclasses set ``service_name`` and build their calls on ``_request``.
    """

    service_name = "service"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the service
            timeout: Request timeout in seconds
            http_client: Pre-built client (shared pools, tests); closed by its owner
        """
        self.base_url = base_url.rstrip("/")
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._pending: set[asyncio.Task] = set()

    async def close(self) -> None:
        """Wait for background sends, then close the HTTP client"""
        await self.drain()
        if self._owns_http_client:
            await self._http_client.aclose()

    def _generate_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Make an HTTP request and return the decoded JSON body"""
        url = f"{self.base_url}{path}"

        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                headers=self._generate_headers(),
                json=body,
                params=params,
            )
        except httpx.HTTPError as e:
            logger.error(f"{self.service_name} request failed: {method} {path} - {e!r}")
            raise ServiceUnavailableError(service=self.service_name) from e

        if response.status_code >= 400:
            logger.error(
                f"{self.service_name} request failed: {method} {path} - "
                f"{response.status_code} {response.text}"
            )
            raise ServiceUnavailableError(
                service=self.service_name,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{self.service_name} returned non-JSON body for {method} {path}")
            raise MalformedResponseError(service=self.service_name) from e

    def _parse(self, model: type[ModelT], data: Any) -> ModelT:
        """Validate a response body against its expected shape"""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"{self.service_name} response rejected: {e}")
            raise MalformedResponseError(service=self.service_name) from e

    # ==================== Background sends ====================

    def _fire_and_forget(self, coro: Awaitable[None], description: str) -> None:
        """
        Run a side-effect call without making the caller wait for it.

        Failures are logged and dropped. Must be called from a running loop.
        """

        async def runner() -> None:
            try:
                await coro
            except Exception as e:
                logger.warning(f"{self.service_name} {description} failed: {e!r}")

        task = asyncio.create_task(runner())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for outstanding background sends"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
