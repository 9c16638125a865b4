"""Tests for options module.

HTTP traffic is served by httpx.MockTransport (no network).
"""

import httpx
import pytest

from src.errors import OptionsLoadError
from src.options import OptionsLoader
from src.schema import DynamicOptionsConfig, SelectOption


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _api(**extra) -> DynamicOptionsConfig:
    data = {"source": "api", "url": "https://options.test/cities", "retryDelay": 0}
    data.update(extra)
    return DynamicOptionsConfig.model_validate(data)


def _loader_for(handler, **kwargs) -> tuple[OptionsLoader, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    return OptionsLoader(client=client, **kwargs), requests


class TestApiSource:
    """Tests for the api option source."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_get_with_dependency_params(self):
        loader, requests = _loader_for(
            lambda r: httpx.Response(200, json=[{"label": "Tokyo", "value": "tyo"}])
        )
        config = _api(dependencies=["country"], params={"limit": 5}, cache=False)

        options = await loader.load(config, {"country": "JP", "other": "x"})

        assert options == [SelectOption(label="Tokyo", value="tyo")]
        assert requests[0].method == "GET"
        assert requests[0].url.params["country"] == "JP"
        assert requests[0].url.params["limit"] == "5"
        assert "other" not in requests[0].url.params

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_post_sends_json(self):
        loader, requests = _loader_for(lambda r: httpx.Response(200, json=["a", "b"]))
        config = _api(method="POST", headers={"X-Token": "t"}, dependencies=["country"])

        options = await loader.load(config, {"country": "US"})

        assert [o.value for o in options] == ["a", "b"]
        assert requests[0].method == "POST"
        assert requests[0].headers["X-Token"] == "t"
        assert b'"country"' in requests[0].content

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_transform(self):
        loader, _ = _loader_for(
            lambda r: httpx.Response(200, json={"data": [{"name": "Oslo", "code": "osl"}]})
        )
        config = _api(
            transform=lambda body: [{"label": i["name"], "value": i["code"]} for i in body["data"]]
        )
        options = await loader.load(config)
        assert options[0].label == "Oslo"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_options_envelope(self):
        loader, _ = _loader_for(lambda r: httpx.Response(200, json={"options": [1, 2]}))
        options = await loader.load(_api())
        assert [o.label for o in options] == ["1", "2"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        responses = iter([httpx.Response(503), httpx.Response(200, json=["ok"])])
        loader, requests = _loader_for(lambda r: next(responses))
        options = await loader.load(_api(retryAttempts=1))
        assert [o.value for o in options] == ["ok"]
        assert len(requests) == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_exhausted_retries_raise(self):
        loader, requests = _loader_for(lambda r: httpx.Response(500))
        with pytest.raises(OptionsLoadError) as exc_info:
            await loader.load(_api(retryAttempts=2))
        assert len(requests) == 3
        assert exc_info.value.code == "OPTIONS_LOAD_ERROR"
        assert exc_info.value.details["attempts"] == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        loader, _ = _loader_for(handler)
        with pytest.raises(OptionsLoadError, match="refused"):
            await loader.load(_api())

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_list_payload(self):
        loader, _ = _loader_for(lambda r: httpx.Response(200, json={"unexpected": True}))
        with pytest.raises(OptionsLoadError, match="Expected a list"):
            await loader.load(_api())


class TestCaching:
    """Tests for option caching."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cached_per_dependency_values(self):
        loader, requests = _loader_for(lambda r: httpx.Response(200, json=["x"]))
        config = _api(dependencies=["country"])

        await loader.load(config, {"country": "US"})
        await loader.load(config, {"country": "US"})
        await loader.load(config, {"country": "JP"})

        assert len(requests) == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cache_expires(self):
        clock = _Clock()
        loader, requests = _loader_for(lambda r: httpx.Response(200, json=["x"]), clock=clock)
        config = _api(cacheDuration=1000)

        await loader.load(config)
        clock.now = 0.5
        await loader.load(config)
        clock.now = 1.5
        await loader.load(config)

        assert len(requests) == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_expired_entries_are_pruned(self):
        clock = _Clock()
        loader, _requests = _loader_for(lambda r: httpx.Response(200, json=["x"]), clock=clock)
        config = _api(dependencies=["country"], cacheDuration=1000)

        for country in ("US", "JP", "FR"):
            await loader.load(config, {"country": country})
        assert loader.cache_size == 3

        clock.now = 5.0
        await loader.load(config, {"country": "DE"})
        assert loader.cache_size == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_expired_lookup_drops_entry(self):
        clock = _Clock()
        loader, _requests = _loader_for(lambda r: httpx.Response(500), clock=clock)
        config = _api(cacheDuration=1000, retryAttempts=0)
        loader._cache[loader._cache_key(config, {})] = (1.0, [SelectOption(value="x", label="x")])

        clock.now = 2.0
        with pytest.raises(OptionsLoadError):
            await loader.load(config)
        assert loader.cache_size == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cache_disabled(self):
        loader, requests = _loader_for(lambda r: httpx.Response(200, json=["x"]))
        config = _api(cache=False)
        await loader.load(config)
        await loader.load(config)
        assert len(requests) == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_clear_cache(self):
        loader, requests = _loader_for(lambda r: httpx.Response(200, json=["x"]))
        config = _api()
        await loader.load(config)
        loader.clear_cache()
        await loader.load(config)
        assert len(requests) == 2


class TestFunctionAndStoreSources:
    """Tests for the function and store option sources."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sync_loader(self):
        config = DynamicOptionsConfig(
            source="function", loader=lambda values: [values["country"] + "-1"], cache=False
        )
        options = await OptionsLoader().load(config, {"country": "US"})
        assert [o.value for o in options] == ["US-1"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_async_loader(self):
        async def loader(values):
            return [{"label": "A", "value": 1}]

        config = DynamicOptionsConfig(source="function", loader=loader)
        options = await OptionsLoader().load(config)
        assert options == [SelectOption(label="A", value=1)]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failing_loader(self):
        def loader(values):
            raise RuntimeError("db down")

        config = DynamicOptionsConfig(source="function", loader=loader)
        with pytest.raises(OptionsLoadError, match="db down"):
            await OptionsLoader().load(config)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_store(self):
        loader = OptionsLoader(store={"colors": ["red", "green"]})
        config = DynamicOptionsConfig(source="store", storeKey="colors")
        options = await loader.load(config)
        assert [o.label for o in options] == ["red", "green"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_store_missing_key(self):
        config = DynamicOptionsConfig(source="store", storeKey="sizes")
        with pytest.raises(OptionsLoadError, match="sizes"):
            await OptionsLoader().load(config)


class TestLifecycle:
    """Tests for client ownership."""

    @pytest.mark.unit
    def test_timeout_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORM_OPTIONS_TIMEOUT", "2.5")
        assert OptionsLoader().timeout == 2.5

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        async with OptionsLoader(client=client):
            pass
        assert client.is_closed is False
        await client.aclose()
