"""Dynamic option loading for select-like fields.

Options can come from an HTTP endpoint, a host-supplied loader function or
an in-process store. Results are cached per cache key and dependency values.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Mapping
from typing import Any, Callable

import httpx
from pydantic import ValidationError

from src.config import EnvVar, get_environment
from src.errors import OptionsLoadError
from src.schema import DynamicOptionsConfig, SelectOption

logger = logging.getLogger(__name__)


class OptionsLoader:
    """Loads and caches SelectOption lists described by DynamicOptionsConfig.

    Example:
        >>> async with OptionsLoader() as loader:
        ...     options = await loader.load(field.options, form_values)

    Attributes:
        timeout: HTTP timeout in seconds.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        store: Mapping[str, Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the loader.

        Args:
            client: HTTP client to use. One is created lazily when omitted
                and closed by `aclose()`.
            timeout: HTTP timeout in seconds. Defaults to FORM_OPTIONS_TIMEOUT.
            store: Mapping read by the "store" source.
            clock: Monotonic clock in seconds, used for cache expiry.
        """
        self.timeout = (
            timeout if timeout is not None else get_environment(EnvVar.FORM_OPTIONS_TIMEOUT)
        )
        self._client = client
        self._owns_client = client is None
        self._store: Mapping[str, Any] = store if store is not None else {}
        self._clock = clock
        self._cache: dict[tuple[Any, ...], tuple[float, list[SelectOption]]] = {}

    async def __aenter__(self) -> "OptionsLoader":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this loader created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        """Number of cached option lists, expired ones included until pruned."""
        return len(self._cache)

    async def load(
        self,
        config: DynamicOptionsConfig,
        values: Mapping[str, Any] | None = None,
    ) -> list[SelectOption]:
        """Load options for a field.

        Args:
            config: The field's dynamic option configuration.
            values: Current form values; the declared dependencies are read
                from here.

        Returns:
            list[SelectOption]: Loaded (or cached) options.

        Raises:
            OptionsLoadError: If the source fails or returns unusable data.
        """
        values = values or {}
        dependency_values = {dep: values.get(dep) for dep in config.dependencies}
        key = self._cache_key(config, dependency_values)

        if config.cache:
            cached = self._cache.get(key)
            if cached is not None:
                if cached[0] > self._clock():
                    return list(cached[1])
                del self._cache[key]

        if config.source == "api":
            raw = await self._fetch(config, dependency_values)
        elif config.source == "function":
            raw = await self._call_loader(config, values)
        else:
            raw = self._read_store(config)

        options = self._to_options(raw, config)

        if config.cache:
            now = self._clock()
            for stale in [k for k, (expires, _) in self._cache.items() if expires <= now]:
                del self._cache[stale]
            self._cache[key] = (now + config.cache_duration / 1000, options)

        return list(options)

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    async def _fetch(self, config: DynamicOptionsConfig, dependency_values: dict[str, Any]) -> Any:
        if not config.url:
            raise OptionsLoadError("Dynamic options from api require a url")

        client = self._get_client()
        payload = {**config.params, **{k: v for k, v in dependency_values.items() if v is not None}}
        attempts = max(config.retry_attempts, 0) + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                if config.method == "POST":
                    response = await client.post(config.url, json=payload, headers=config.headers)
                else:
                    response = await client.get(config.url, params=payload, headers=config.headers)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                last_error = e
                logger.warning(
                    f"Options request to {config.url} returned {e.response.status_code} "
                    f"(attempt {attempt + 1}/{attempts})"
                )
            except (httpx.RequestError, ValueError) as e:
                last_error = e
                logger.warning(
                    f"Options request to {config.url} failed: {e} (attempt {attempt + 1}/{attempts})"
                )

            if attempt < attempts - 1 and config.retry_delay > 0:
                await asyncio.sleep(config.retry_delay / 1000)

        raise OptionsLoadError(
            f"Failed to load options from {config.url}: {last_error}",
            details={"url": config.url, "attempts": attempts},
        ) from last_error

    async def _call_loader(self, config: DynamicOptionsConfig, values: Mapping[str, Any]) -> Any:
        if config.loader is None:
            raise OptionsLoadError("Dynamic options from function require a loader")
        try:
            result = config.loader(dict(values))
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise OptionsLoadError(f"Options loader failed: {e}") from e
        return result

    def _read_store(self, config: DynamicOptionsConfig) -> Any:
        if not config.store_key:
            raise OptionsLoadError("Dynamic options from store require a store_key")
        if config.store_key not in self._store:
            raise OptionsLoadError(
                f"No options in store under '{config.store_key}'",
                details={"store_key": config.store_key},
            )
        return self._store[config.store_key]

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    @staticmethod
    def _cache_key(config: DynamicOptionsConfig, dependency_values: dict[str, Any]) -> tuple[Any, ...]:
        identity = config.cache_key or config.url or config.store_key or id(config.loader)
        deps = tuple(sorted((k, repr(v)) for k, v in dependency_values.items()))
        return (config.source, identity, config.method, deps)

    @staticmethod
    def _to_options(raw: Any, config: DynamicOptionsConfig) -> list[SelectOption]:
        if config.transform is not None:
            try:
                raw = config.transform(raw)
            except Exception as e:
                raise OptionsLoadError(f"Options transform failed: {e}") from e

        if isinstance(raw, Mapping) and isinstance(raw.get("options"), list):
            raw = raw["options"]
        if not isinstance(raw, (list, tuple)):
            raise OptionsLoadError(
                f"Expected a list of options, got {type(raw).__name__}",
                details={"source": config.source},
            )

        try:
            return [SelectOption.model_validate(item) for item in raw]
        except ValidationError as e:
            raise OptionsLoadError(f"Invalid option entry: {e}") from e


__all__ = ["OptionsLoader"]
