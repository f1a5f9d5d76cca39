"""Tests for graph sources, with the REST API mocked through httpx.MockTransport."""

import httpx
import pytest

from journey_circle.engine import EngineState
from journey_circle.errors import FetchError
from journey_circle.model import GraphSnapshot
from journey_circle.sources import GraphSource, RestGraphSource, StaticGraphSource

BASE = "https://crm.example.test/wp-json/directreach/v2"


def make_client(routes, seen=None):
    """AsyncClient answering ``routes[collection]`` (a Response or a callable)."""

    def handler(request):
        if seen is not None:
            seen.append(request)
        name = request.url.path.rsplit("/", 1)[-1]
        route = routes.get(name, httpx.Response(404))
        return route(request) if callable(route) else route

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def circle_routes(**overrides):
    """Fresh responses for a circle with two problems, one solution and three offers."""
    routes = {
        "problems": httpx.Response(200, json=[
            {"id": 11, "title": "Cold leads", "position": 0, "is_primary": 1},
            {"id": 12, "title": "No ROI data", "position": 3, "is_primary": 0},
        ]),
        "solutions": httpx.Response(200, json={"data": [
            {"id": 21, "title": "Nurture", "position": 0, "problem_id": 11},
        ]}),
        "offers": httpx.Response(200, json={"items": [{"id": 31}, {"id": 32}, {"id": 33}]}),
    }
    routes.update(overrides)
    return routes


class TestRestGraphSource:
    @pytest.mark.asyncio
    async def test_fetches_all_collections(self):
        seen = []
        async with make_client(circle_routes(), seen) as client:
            source = RestGraphSource(BASE + "/", nonce="abc123", client=client)
            snapshot = await source.fetch(7)

        assert isinstance(source, GraphSource)
        assert sorted(r.url.path.rsplit("/", 1)[-1] for r in seen) == \
            ["offers", "problems", "solutions"]
        assert all(r.url.path.startswith("/wp-json/directreach/v2/journey-circles/7/") for r in seen)
        assert all(r.headers["X-WP-Nonce"] == "abc123" for r in seen)

        assert [p.id for p in snapshot.problems] == ["11", "12"]
        assert snapshot.problems[0].is_primary
        assert snapshot.problems[1].slot == 3
        assert snapshot.solutions[0].problem_id == "11"
        assert snapshot.offer_count == 3

    @pytest.mark.asyncio
    async def test_no_nonce_header_by_default(self):
        seen = []
        async with make_client(circle_routes(), seen) as client:
            await RestGraphSource(BASE, client=client).fetch(7)

        assert all("X-WP-Nonce" not in r.headers for r in seen)

    @pytest.mark.asyncio
    async def test_not_found_means_empty(self):
        async with make_client({}) as client:
            snapshot = await RestGraphSource(BASE, client=client).fetch(7)

        assert snapshot == GraphSnapshot.empty()

    @pytest.mark.asyncio
    async def test_error_status(self):
        routes = circle_routes(solutions=httpx.Response(500))
        async with make_client(routes) as client:
            with pytest.raises(FetchError) as excinfo:
                await RestGraphSource(BASE, client=client).fetch(7)

        assert excinfo.value.status == 500
        assert str(excinfo.value) == "API 500: Internal Server Error"

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        routes = circle_routes(offers=httpx.Response(200, content=b"<html>"))
        async with make_client(routes) as client:
            with pytest.raises(FetchError, match="Invalid JSON"):
                await RestGraphSource(BASE, client=client).fetch(7)

    @pytest.mark.asyncio
    async def test_network_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(circle_routes(problems=refuse)) as client:
            with pytest.raises(FetchError, match="Network error"):
                await RestGraphSource(BASE, client=client).fetch(7)

    @pytest.mark.asyncio
    async def test_timeout(self):
        def stall(request):
            raise httpx.ReadTimeout("too slow", request=request)

        async with make_client(circle_routes(offers=stall)) as client:
            with pytest.raises(FetchError, match="Timed out"):
                await RestGraphSource(BASE, client=client).fetch(7)

    @pytest.mark.asyncio
    async def test_engine_surfaces_api_errors(self, make_engine):
        routes = circle_routes(problems=httpx.Response(403))
        async with make_client(routes) as client:
            engine = make_engine(source=RestGraphSource(BASE, client=client), circle_id=7)
            await engine.refresh()

        assert engine.state is EngineState.ERROR
        assert engine.error == "API 403: Forbidden"


class TestStaticGraphSource:
    @pytest.mark.asyncio
    async def test_serves_payload(self):
        source = StaticGraphSource({"problems": [{"id": "a", "slot": 2}], "offerCount": 4})

        first = await source.fetch(1)
        second = await source.fetch(2)

        assert first is second
        assert first.offer_count == 4
        assert source.calls == 2
