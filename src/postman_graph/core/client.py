"""Postman API client.

Issues credentialed GET requests against the Postman API and assembles the
combined dataset consumed by the graph builder and the JSON-LD serializer.

Load sequence:
1. Fail with AuthError if no API key is set (no network call is made)
2. Fetch workspaces, collections, environments and the user concurrently;
   the first failure aborts the load
3. Fetch collection details one at a time for the first ``detail_limit``
   collections; a failed detail fetch is logged and skipped
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import ValidationError

from .entities import (
    Collection,
    CollectionDetail,
    CombinedDataset,
    Environment,
    PostmanEntity,
    User,
    Workspace,
)
from .errors import AuthError, HttpError, NetworkError, PostmanAPIError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.getpostman.com"
DEFAULT_DETAIL_LIMIT = 5

EntityT = TypeVar("EntityT", bound=PostmanEntity)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T10:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PostmanClient:
    """HTTP client for the Postman API.

    The client holds its own credential; there is no shared global instance.

    Example usage:
        client = PostmanClient(api_key="PMAK-...")
        dataset = await client.load_all()
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        detail_limit: int = DEFAULT_DETAIL_LIMIT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Postman client.

        Args:
            api_key: Postman API key. May be empty; calls then fail with AuthError.
            base_url: API base URL.
            timeout: Request timeout in seconds.
            detail_limit: Number of collections to fetch in full.
            transport: Optional httpx transport (used to fake the API in tests).
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.detail_limit = detail_limit
        self._transport = transport

    @classmethod
    def from_settings(cls, settings, api_key: Optional[str] = None) -> "PostmanClient":
        """Build a client from Settings, optionally overriding the key."""
        return cls(
            api_key=api_key or settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
            detail_limit=settings.detail_limit,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "X-API-Key": self.api_key or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _ensure_key(self) -> None:
        if not self.api_key:
            raise AuthError()

    async def _request(self, endpoint: str) -> httpx.Response:
        """GET an endpoint and return the successful response.

        Raises:
            AuthError: If no API key is set.
            HttpError: On a non-success response.
            NetworkError: If the request could not be completed.
        """
        self._ensure_key()
        logger.debug(f"GET {self.base_url}{endpoint}")

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(endpoint)
        except httpx.RequestError as e:
            logger.error(f"Network error on {endpoint}: {e}")
            raise NetworkError(f"Network error: {e}") from e

        if not response.is_success:
            error = _error_from_response(response)
            logger.error(f"API request {endpoint} failed: {error.message}")
            raise error

        return response

    async def _fetch_one(self, endpoint: str, key: str, model: Type[EntityT]) -> EntityT:
        response = await self._request(endpoint)
        return _decode(response, model, _as_dict(_envelope(response).get(key)))

    async def _fetch_many(self, endpoint: str, key: str, model: Type[EntityT]) -> List[EntityT]:
        response = await self._request(endpoint)
        return [_decode(response, model, raw) for raw in _as_list(_envelope(response).get(key))]

    # =========================================================================
    # Entity fetchers
    # =========================================================================

    async def get_workspaces(self) -> List[Workspace]:
        return await self._fetch_many("/workspaces", "workspaces", Workspace)

    async def get_workspace(self, workspace_id: str) -> Workspace:
        return await self._fetch_one(f"/workspaces/{workspace_id}", "workspace", Workspace)

    async def get_collections(self) -> List[Collection]:
        return await self._fetch_many("/collections", "collections", Collection)

    async def get_collection(self, collection_id: str) -> CollectionDetail:
        return await self._fetch_one(f"/collections/{collection_id}", "collection", CollectionDetail)

    async def get_environments(self) -> List[Environment]:
        return await self._fetch_many("/environments", "environments", Environment)

    async def get_environment(self, environment_id: str) -> Environment:
        return await self._fetch_one(f"/environments/{environment_id}", "environment", Environment)

    async def get_user(self) -> User:
        return await self._fetch_one("/me", "user", User)

    # =========================================================================
    # Orchestration
    # =========================================================================

    async def load_all(self) -> CombinedDataset:
        """Fetch everything needed for one knowledge graph.

        Returns:
            CombinedDataset with a UTC timestamp of assembly time.

        Raises:
            AuthError: If no API key is set (before any network call).
            HttpError: If a summary call fails.
            NetworkError: If a summary call cannot reach the API.
        """
        self._ensure_key()
        logger.info("Fetching Postman workspace data")

        workspaces, collections, environments, user = await asyncio.gather(
            self.get_workspaces(),
            self.get_collections(),
            self.get_environments(),
            self.get_user(),
        )

        logger.info(
            f"Fetched {len(workspaces)} workspaces, {len(collections)} collections, "
            f"{len(environments)} environments (user: {user.username or 'Unknown'})"
        )

        detailed_collections = await self._load_details(collections)

        return CombinedDataset(
            user=user,
            workspaces=workspaces,
            collections=collections,
            detailed_collections=detailed_collections,
            environments=environments,
            timestamp=utc_timestamp(),
        )

    async def _load_details(self, collections: List[Collection]) -> List[CollectionDetail]:
        details: List[CollectionDetail] = []
        for collection in collections[: self.detail_limit]:
            try:
                details.append(await self.get_collection(collection.id))
            except PostmanAPIError as e:
                logger.warning(f"Skipping collection {collection.id}: {e.message}")
        return details


def _error_from_response(response: httpx.Response) -> HttpError:
    """Build an HttpError from an upstream error body.

    Postman error bodies look like {"error": {"name": ..., "message": ...}}.
    """
    message = None
    error_name = None
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            error_name = error.get("name")
        elif isinstance(error, str):
            message = error

    return HttpError(response.status_code, message, error_name=error_name)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _envelope(response: httpx.Response) -> Dict[str, Any]:
    """Decode a success body; a non-object body is treated as empty."""
    try:
        data = response.json()
    except ValueError as e:
        raise HttpError(response.status_code, "Invalid JSON in API response") from e
    return _as_dict(data)


def _decode(response: httpx.Response, model: Type[EntityT], raw: Any) -> EntityT:
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        logger.error(f"Invalid {model.__name__} payload from {response.url.path}: {e}")
        raise HttpError(
            response.status_code, f"Invalid {model.__name__} payload in API response"
        ) from e
