"""Unit tests for bridge module."""

import pytest

from src.bridge import ObservableStore, StateBridge, StateManagerConfig, StoreBridge


class TestObservableStore:
    """Tests for ObservableStore."""

    @pytest.mark.unit
    def test_default_state(self):
        assert ObservableStore().get_state() == {}

    @pytest.mark.unit
    def test_listeners_notified(self):
        store = ObservableStore({"a": 1})
        seen = []
        store.subscribe(seen.append)
        store.update(b=2)
        assert seen == [{"a": 1, "b": 2}]

    @pytest.mark.unit
    def test_unsubscribe_is_idempotent(self):
        store = ObservableStore()
        unsubscribe = store.subscribe(lambda state: None)
        unsubscribe()
        unsubscribe()
        assert store.listener_count == 0

    @pytest.mark.unit
    def test_failing_listener_does_not_block_others(self, caplog):
        store = ObservableStore()
        seen = []

        def broken(state):
            raise RuntimeError("listener down")

        store.subscribe(broken)
        store.subscribe(seen.append)
        store.set_state({"x": 1})
        assert seen == [{"x": 1}]
        assert "listener raised" in caplog.text


class TestStoreBridge:
    """Tests for StoreBridge."""

    @pytest.mark.unit
    def test_is_state_bridge(self):
        assert isinstance(StoreBridge(), StateBridge)

    @pytest.mark.unit
    def test_connect_requires_store(self):
        with pytest.raises(ValueError, match="store is required"):
            StoreBridge(StateManagerConfig())

    @pytest.mark.unit
    def test_unconnected_bridge_raises(self):
        with pytest.raises(RuntimeError, match="not connected"):
            StoreBridge().sync_from_external()

    @pytest.mark.unit
    def test_default_merge_round_trip(self):
        store = ObservableStore({"theme": "dark"})
        bridge = StoreBridge(StateManagerConfig(store=store))
        bridge.sync_to_external({"name": "Ada"})
        assert store.get_state() == {"theme": "dark", "name": "Ada"}
        assert bridge.sync_from_external() == {"theme": "dark", "name": "Ada"}

    @pytest.mark.unit
    def test_non_mapping_state_replaced(self):
        store = ObservableStore(state=["legacy"])
        StoreBridge(StateManagerConfig(store=store)).sync_to_external({"a": 1})
        assert store.get_state() == {"a": 1}

    @pytest.mark.unit
    def test_selector_and_updater(self):
        store = ObservableStore({"user": {"form": {"name": "Ada"}}, "session": "s1"})

        def updater(state, values):
            return {**state, "user": {"form": values}}

        bridge = StoreBridge(
            StateManagerConfig(
                store=store,
                selector=lambda state: state["user"]["form"],
                updater=updater,
            )
        )
        assert bridge.sync_from_external() == {"name": "Ada"}
        bridge.sync_to_external({"name": "Grace"})
        assert store.get_state() == {"user": {"form": {"name": "Grace"}}, "session": "s1"}

    @pytest.mark.unit
    def test_in_place_updater(self):
        store = ObservableStore({"form": {}})
        notified = []
        store.subscribe(notified.append)

        def updater(state, values):
            state["form"].update(values)

        bridge = StoreBridge(
            StateManagerConfig(store=store, selector=lambda s: s["form"], updater=updater)
        )
        bridge.sync_to_external({"a": 1})
        assert store.get_state() == {"form": {"a": 1}}
        assert len(notified) == 1

    @pytest.mark.unit
    def test_subscribe_receives_selected_values(self):
        store = ObservableStore({"form": {}})
        bridge = StoreBridge(StateManagerConfig(store=store, selector=lambda s: s["form"]))
        seen = []
        unsubscribe = bridge.subscribe(seen.append)
        store.set_state({"form": {"a": 1}})
        unsubscribe()
        store.set_state({"form": {"a": 2}})
        assert seen == [{"a": 1}]

    @pytest.mark.unit
    def test_disconnect_drops_subscriptions(self):
        store = ObservableStore()
        bridge = StoreBridge(StateManagerConfig(store=store))
        bridge.subscribe(lambda values: None)
        bridge.subscribe(lambda values: None)
        assert store.listener_count == 2
        bridge.disconnect()
        assert store.listener_count == 0
        assert bridge.connected is False

    @pytest.mark.unit
    def test_reconnect_switches_store(self):
        first, second = ObservableStore({"a": 1}), ObservableStore({"a": 2})
        bridge = StoreBridge(StateManagerConfig(store=first))
        bridge.subscribe(lambda values: None)
        bridge.connect(StateManagerConfig(store=second))
        assert first.listener_count == 0
        assert bridge.sync_from_external() == {"a": 2}
