from __future__ import annotations

import httpchain
from httpchain import ConfigStore, HttpChainConfig, HttpChainContext


def test_set_config_deep_merges_default_headers() -> None:
    store = ConfigStore()
    store.set_config({"default_headers": {"X": "1"}})
    store.set_config({"default_headers": {"Y": "2"}})

    assert store.get_config("default_headers") == {"X": "1", "Y": "2"}


def test_set_config_replaces_only_supplied_keys() -> None:
    store = ConfigStore()
    store.set_config({"trace_enabled": True, "binary_content_types": ["image/png"]})
    store.set_config({"binary_content_types": ["image/jpeg"]})

    assert store.get_config("trace_enabled") is True
    assert store.get_config("binary_content_types") == {"image/jpeg"}
    assert store.get_config("response_only") is False


def test_get_config_returns_snapshot_or_single_value() -> None:
    store = ConfigStore({"default_url": "https://example.test"})

    snapshot = store.get_config()

    assert snapshot["default_url"] == "https://example.test"
    assert snapshot["date_format"] == "%Y-%m-%d %H:%M:%S.%f"
    assert store.get_config("default_url") == "https://example.test"
    assert store.get_config("unknown_key") is None


def test_extra_keys_are_kept() -> None:
    store = ConfigStore()
    store.set_config({"team": "payments"})

    assert store.get_config("team") == "payments"


def test_reset_restores_initial_config() -> None:
    store = ConfigStore(HttpChainConfig(trace_enabled=True))
    store.set_config({"trace_enabled": False, "default_headers": {"A": "1"}})
    store.reset()

    assert store.get_config("trace_enabled") is True
    assert store.get_config("default_headers") == {}


def test_default_url_comes_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("HTTPCHAIN_DEFAULT_URL", "https://env.example.test")

    assert ConfigStore().get_config("default_url") == "https://env.example.test"
    assert HttpChainContext(config={"trace_enabled": True}).get_config("default_url") == "https://env.example.test"


def test_module_level_accessors_use_default_context() -> None:
    httpchain.set_config({"metadata_enabled": True})

    assert httpchain.get_config("metadata_enabled") is True
    assert httpchain.default_context().get_config("metadata_enabled") is True
    assert httpchain.get_call_count() == 0
    assert httpchain.get_trace() == {}


def test_contexts_do_not_share_state() -> None:
    first = HttpChainContext()
    second = HttpChainContext()
    first.set_config({"response_only": True})

    assert first.get_config("response_only") is True
    assert second.get_config("response_only") is False


def test_get_config_snapshot_is_detached_from_store() -> None:
    store = ConfigStore({"default_headers": {"Accept": "text/plain"}, "binary_content_types": ["image/png"]})

    snapshot = store.get_config()
    snapshot["default_headers"]["Injected"] = "yes"
    snapshot["binary_content_types"].add("image/gif")
    store.get_config("default_headers")["Other"] = "no"

    assert store.get_config("default_headers") == {"Accept": "text/plain"}
    assert store.get_config("binary_content_types") == {"image/png"}
    assert store.config.default_headers == {"Accept": "text/plain"}
