"""State-synchronization bridge between a form and an external store.

The form controller only relies on the StateBridge contract; how the store
holds its state (single mapping, nested slices, observable objects) is
hidden behind the selector and updater of StateManagerConfig.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]
ValuesListener = Callable[[dict[str, Any]], None]


class Store(Protocol):
    """Minimal store interface adapted by StoreBridge."""

    def get_state(self) -> Any: ...

    def set_state(self, state: Any) -> None: ...

    def subscribe(self, listener: Callable[[Any], None]) -> Unsubscribe: ...


@dataclass
class StateManagerConfig:
    """How a bridge reads and writes form values in a store.

    Attributes:
        store: The external store.
        selector: Maps store state to the form value mapping. Defaults to
            the state itself.
        updater: Produces the new store state from (state, values). May
            mutate state in place and return None. Defaults to merging the
            values into a mapping state.
    """

    store: Any = None
    selector: Callable[[Any], Mapping[str, Any]] | None = None
    updater: Callable[[Any, dict[str, Any]], Any] | None = None


class StateBridge(ABC):
    """Contract the form controller uses to synchronize with a store."""

    @abstractmethod
    def connect(self, config: StateManagerConfig) -> None:
        """Attach the bridge to a store."""

    @abstractmethod
    def disconnect(self) -> None:
        """Detach from the store and drop every subscription."""

    @abstractmethod
    def sync_to_external(self, values: Mapping[str, Any]) -> None:
        """Write the form values to the store."""

    @abstractmethod
    def sync_from_external(self) -> dict[str, Any]:
        """Read the form values from the store."""

    @abstractmethod
    def subscribe(self, callback: ValuesListener) -> Unsubscribe:
        """Call back with the form values whenever the store changes."""


class ObservableStore:
    """Minimal in-process store notifying listeners on every state change.

    Example:
        >>> store = ObservableStore({"name": ""})
        >>> unsubscribe = store.subscribe(print)
        >>> store.update(name="Ada")
        {'name': 'Ada'}
    """

    def __init__(self, state: Any = None):
        self._state = state if state is not None else {}
        self._listeners: list[Callable[[Any], None]] = []

    def get_state(self) -> Any:
        return self._state

    def set_state(self, state: Any) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Store listener raised")

    def update(self, **changes: Any) -> None:
        """Merge keyword changes into a mapping state."""
        self.set_state({**self._state, **changes})

    def subscribe(self, listener: Callable[[Any], None]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class StoreBridge(StateBridge):
    """StateBridge over any store exposing get_state, set_state and subscribe.

    Args:
        config: Optional configuration to connect immediately.
    """

    def __init__(self, config: StateManagerConfig | None = None):
        self._config: StateManagerConfig | None = None
        self._subscriptions: list[Unsubscribe] = []
        if config is not None:
            self.connect(config)

    @property
    def connected(self) -> bool:
        return self._config is not None

    def connect(self, config: StateManagerConfig) -> None:
        if config.store is None:
            raise ValueError("StateManagerConfig.store is required")
        if self._config is not None:
            self.disconnect()
        self._config = config

    def disconnect(self) -> None:
        for unsubscribe in list(self._subscriptions):
            unsubscribe()
        self._subscriptions.clear()
        self._config = None

    def sync_to_external(self, values: Mapping[str, Any]) -> None:
        config = self._require_config()
        state = config.store.get_state()
        if config.updater is not None:
            new_state = config.updater(state, dict(values))
            config.store.set_state(state if new_state is None else new_state)
        elif isinstance(state, Mapping):
            config.store.set_state({**state, **values})
        else:
            config.store.set_state(dict(values))

    def sync_from_external(self) -> dict[str, Any]:
        config = self._require_config()
        return self._select(config.store.get_state())

    def subscribe(self, callback: ValuesListener) -> Unsubscribe:
        config = self._require_config()
        store_unsubscribe = config.store.subscribe(lambda state: callback(self._select(state)))

        def unsubscribe() -> None:
            if unsubscribe in self._subscriptions:
                self._subscriptions.remove(unsubscribe)
                store_unsubscribe()

        self._subscriptions.append(unsubscribe)
        return unsubscribe

    def _select(self, state: Any) -> dict[str, Any]:
        config = self._require_config()
        selected = config.selector(state) if config.selector is not None else state
        return dict(selected or {})

    def _require_config(self) -> StateManagerConfig:
        if self._config is None:
            raise RuntimeError("StoreBridge is not connected")
        return self._config


__all__ = [
    "Store",
    "Unsubscribe",
    "ValuesListener",
    "StateManagerConfig",
    "StateBridge",
    "ObservableStore",
    "StoreBridge",
]
