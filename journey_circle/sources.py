"""
Graph sources: where ``DiagramEngine.refresh()`` gets its snapshot.

A source is anything with ``async fetch(circle_id) -> GraphSnapshot`` (or a
bare async callable with that signature).  Failures are raised; the engine
turns them into its ERROR state.
"""

import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from .errors import FetchError
from .model import GraphSnapshot

logger = logging.getLogger(__name__)


@runtime_checkable
class GraphSource(Protocol):
    async def fetch(self, circle_id: Any) -> GraphSnapshot:
        ...


class StaticGraphSource:
    """Serve a fixed snapshot (or payload mapping) for every identity."""

    def __init__(self, snapshot):
        if not isinstance(snapshot, GraphSnapshot):
            snapshot = GraphSnapshot.from_payload(snapshot)
        self.snapshot = snapshot
        self.calls = 0

    async def fetch(self, circle_id):
        self.calls += 1
        return self.snapshot


class RestGraphSource:
    """
    Fetch a circle's problems, solutions and offers from the REST API.

    The three collections are requested concurrently from
    ``{base_url}/journey-circles/{id}/{problems|solutions|offers}``.  A 404
    means "nothing saved yet" and yields an empty list; any other error
    status raises FetchError.

    Args:
        base_url: API root, e.g. ``https://example.org/wp-json/directreach/v2``
        nonce: Sent as ``X-WP-Nonce`` when given
        client: Shared httpx.AsyncClient; one is created per fetch otherwise
        timeout: Request timeout in seconds for self-created clients
    """

    collections = ("problems", "solutions", "offers")

    def __init__(self, base_url, nonce=None, client=None, timeout=10.0):
        self.base_url = base_url.rstrip("/")
        self.nonce = nonce
        self._client = client
        self._timeout = timeout

    def _headers(self):
        headers = {"Content-Type": "application/json"}
        if self.nonce:
            headers["X-WP-Nonce"] = self.nonce
        return headers

    async def fetch(self, circle_id):
        if self._client is not None:
            return await self._fetch_all(self._client, circle_id)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._fetch_all(client, circle_id)

    async def _fetch_all(self, client, circle_id):
        problems, solutions, offers = await asyncio.gather(*(
            self._get_list(client, f"journey-circles/{circle_id}/{name}")
            for name in self.collections
        ))
        logger.debug("Fetched circle %s: %d problems, %d solutions, %d offers",
                     circle_id, len(problems), len(solutions), len(offers))
        return GraphSnapshot.from_payload({
            "problems": problems,
            "solutions": solutions,
            "offers": offers,
        })

    async def _get_list(self, client, endpoint):
        url = f"{self.base_url}/{endpoint}"
        try:
            response = await client.get(url, headers=self._headers())
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out fetching {endpoint}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"Network error fetching {endpoint}: {e}") from e

        if response.status_code == 404:
            return []
        if response.is_error:
            raise FetchError(
                f"API {response.status_code}: {response.reason_phrase}",
                status=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {endpoint}") from e

        if isinstance(body, list):
            return body
        if isinstance(body, dict):
            return body.get("data") or body.get("items") or []
        return []
