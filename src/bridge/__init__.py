"""Synchronization between form values and an external state store."""

from src.bridge.lib import (
    ObservableStore,
    StateBridge,
    StateManagerConfig,
    Store,
    StoreBridge,
    Unsubscribe,
    ValuesListener,
)

__all__ = [
    "Store",
    "Unsubscribe",
    "ValuesListener",
    "StateManagerConfig",
    "StateBridge",
    "ObservableStore",
    "StoreBridge",
]
