"""End-to-end tests for the restcache CLI.

Runs the real Typer app through :class:`typer.testing.CliRunner` with
config and cache directories isolated to ``tmp_path`` and the network
replaced by an :class:`httpx.MockTransport`.
"""

from __future__ import annotations

import functools
import json
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from restcache import __version__
from restcache.app import app, main
from restcache.cache import CacheStore, cache_key
from restcache.client import ApiClient
from restcache.config import (
    load_global_config,
    load_profile,
    profile_exists,
    save_global_config,
    save_profile,
)
from restcache.models import ClientConfig, GlobalConfig, Profile

BASE_URL = "https://api.example.com"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def network(recording_transport, monkeypatch: pytest.MonkeyPatch):
    """Route every CLI request through a recording MockTransport."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/missing":
            return httpx.Response(404, text="no such item")
        if request.url.path == "/down":
            raise httpx.ConnectError("connection refused", request=request)
        if request.method == "POST":
            return httpx.Response(201, json={"created": json.loads(request.content)})
        return httpx.Response(200, json={"id": 42, "path": request.url.path})

    transport = recording_transport(handler)
    monkeypatch.setattr(
        "restcache.commands.request.ApiClient",
        functools.partial(ApiClient, transport=transport),
    )
    return transport


def _cache_dir(root: Path) -> Path:
    return root / "cache" / "restcache" / "responses"


# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------


class TestRootApp:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"restcache {__version__}" in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for name in ("request", "cache", "config", "profile"):
            assert name in result.output


# ---------------------------------------------------------------------------
# request
# ---------------------------------------------------------------------------


class TestRequestCommand:
    def test_get_prints_response(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        result = runner.invoke(
            app,
            ["--json", "-q", "request", "get", "/items", "-p", "id=42", "--base-url", BASE_URL],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"id": 42, "path": "/items"}
        assert str(network.requests[0].url) == f"{BASE_URL}/items?id=42"

    def test_cache_else_network_second_call_is_cached(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        args = [
            "--plain", "request", "GET", "/items", "-p", "id=42",
            "--policy", "cache_else_network", "--base-url", BASE_URL,
        ]

        first = runner.invoke(app, args)
        second = runner.invoke(app, args)

        assert first.exit_code == 0, first.output
        assert "Network response" in first.output
        assert second.exit_code == 0, second.output
        assert "Cached response" in second.output
        assert "id\t42" in second.output
        assert network.calls == 1

    def test_cache_then_network_prints_both(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        url = f"{BASE_URL}/items"
        CacheStore().write(cache_key(url), b'{"id": 1}')

        result = runner.invoke(
            app,
            ["--plain", "request", "GET", "/items", "--policy", "cache_then_network",
             "--base-url", BASE_URL],
        )

        assert result.exit_code == 0, result.output
        assert result.output.index("Cached response") < result.output.index("Network response")
        assert "id\t1" in result.output
        assert "id\t42" in result.output

    def test_update_cache_prints_nothing_but_stores(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        result = runner.invoke(
            app,
            ["--plain", "request", "GET", "/items", "--policy", "update_cache",
             "--base-url", BASE_URL],
        )

        assert result.exit_code == 0, result.output
        assert "No result delivered." in result.output
        assert (_cache_dir(isolated_config) / cache_key(f"{BASE_URL}/items")).is_file()

    def test_post_json_body(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        result = runner.invoke(
            app,
            ["--json", "-q", "request", "POST", "/items", "-p", "name=widget",
             "--json-body", "--base-url", BASE_URL],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"created": {"name": "widget"}}
        assert network.requests[0].headers["Content-Type"] == "application/json"

    def test_status_code_error_exit_code(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        result = runner.invoke(
            app, ["--plain", "request", "GET", "/missing", "--base-url", BASE_URL]
        )

        assert result.exit_code == 5
        assert "HTTP 404" in result.output
        assert "no such item" in result.output

    def test_transport_error_exit_code(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        result = runner.invoke(
            app, ["--plain", "request", "GET", "/down", "--base-url", BASE_URL]
        )

        assert result.exit_code == 6
        assert "connection refused" in result.output

    def test_malformed_param_is_usage_error(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        result = runner.invoke(
            app, ["--plain", "request", "GET", "/items", "-p", "noequals", "--base-url", BASE_URL]
        )

        assert result.exit_code == 2
        assert "name=value" in result.output
        assert network.calls == 0

    def test_profile_supplies_base_url(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        save_profile(Profile(name="items", client=ClientConfig(base_url=BASE_URL, url_suffix=".json")))

        result = runner.invoke(app, ["--json", "-q", "--profile", "items", "request", "GET", "/items"])

        assert result.exit_code == 0, result.output
        assert str(network.requests[0].url) == f"{BASE_URL}/items.json"

    def test_env_base_url(
        self, runner: CliRunner, isolated_config: Path, network, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RESTCACHE_BASE_URL", "https://env.example.com")

        result = runner.invoke(app, ["--json", "-q", "request", "GET", "/items"])

        assert result.exit_code == 0, result.output
        assert str(network.requests[0].url) == "https://env.example.com/items"

    def test_unknown_profile_fails(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        result = runner.invoke(app, ["--plain", "--profile", "nope", "request", "GET", "/items"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_disabled_cache_never_stores(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        config = GlobalConfig()
        config.cache.enabled = False
        save_global_config(config)

        result = runner.invoke(
            app,
            ["--plain", "request", "GET", "/items", "--policy", "network_only",
             "--base-url", BASE_URL],
        )

        assert result.exit_code == 0, result.output
        assert not any(_cache_dir(isolated_config).glob("*"))


# ---------------------------------------------------------------------------
# cache
# ---------------------------------------------------------------------------


class TestCacheCommands:
    def test_key_matches_store(self, runner: CliRunner, isolated_config: Path) -> None:
        save_profile(Profile(name="items", client=ClientConfig(base_url=BASE_URL)))

        result = runner.invoke(
            app, ["--json", "-q", "-P", "items", "cache", "key", "/items", "-p", "id=42"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {
            "key": cache_key(f"{BASE_URL}/items", [("id", "42")]),
            "cached": False,
        }

    def test_key_depends_on_parameter_order(self, runner: CliRunner, isolated_config: Path) -> None:
        ab = runner.invoke(app, ["--json", "-q", "cache", "key", "/x", "-p", "a=1", "-p", "b=2"])
        ba = runner.invoke(app, ["--json", "-q", "cache", "key", "/x", "-p", "b=2", "-p", "a=1"])
        assert json.loads(ab.output)["key"] != json.loads(ba.output)["key"]

    def test_stats_and_clear(self, runner: CliRunner, isolated_config: Path) -> None:
        store = CacheStore()
        store.write(cache_key("/a"), b"1")
        store.write(cache_key("/b"), b"2")

        stats = runner.invoke(app, ["--json", "cache", "stats"])
        assert stats.exit_code == 0, stats.output
        rows = {row["setting"]: row["value"] for row in json.loads(stats.output)}
        assert rows["size"] == "2"

        cleared = runner.invoke(app, ["--plain", "cache", "clear"])
        assert cleared.exit_code == 0, cleared.output
        assert "Removed 2 cached response(s)." in cleared.output
        assert store.stats()["size"] == 0


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_show(self, runner: CliRunner, isolated_config: Path) -> None:
        save_profile(Profile(name="items"))

        result = runner.invoke(app, ["--json", "-q", "config", "show"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["profiles"] == ["items"]
        assert data["cache"]["enabled"] is True

    def test_set_nested_bool(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "cache.enabled", "false"])

        assert result.exit_code == 0, result.output
        assert load_global_config().cache.enabled is False

    def test_set_default_profile(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "default_profile", "items"])

        assert result.exit_code == 0, result.output
        assert load_global_config().default_profile == "items"

    def test_set_unknown_key(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "cache.colour", "red"])
        assert result.exit_code == 2

    def test_set_rejects_non_boolean(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "cache.enabled", "maybe"])

        assert result.exit_code == 2
        assert load_global_config().cache.enabled is True

    def test_set_none_clears_optional(self, runner: CliRunner, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_profile="items"))

        result = runner.invoke(app, ["config", "set", "default_profile", "none"])

        assert result.exit_code == 0, result.output
        assert load_global_config().default_profile is None

    def test_set_cache_directory(
        self, runner: CliRunner, isolated_config: Path
    ) -> None:
        target = isolated_config / "elsewhere"

        result = runner.invoke(app, ["config", "set", "cache.directory", str(target)])

        assert result.exit_code == 0, result.output
        assert load_global_config().cache.directory == str(target)

    def test_reset_force(self, runner: CliRunner, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_profile="items"))

        result = runner.invoke(app, ["config", "reset", "--force"])

        assert result.exit_code == 0, result.output
        assert load_global_config() == GlobalConfig()

    def test_reset_declined(self, runner: CliRunner, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_profile="items"))

        result = runner.invoke(app, ["config", "reset"], input="n\n")

        assert result.exit_code == 0
        assert load_global_config().default_profile == "items"


# ---------------------------------------------------------------------------
# profile
# ---------------------------------------------------------------------------


class TestProfileCommands:
    def test_add_then_request_uses_it(
        self, runner: CliRunner, isolated_config: Path, network
    ) -> None:
        added = runner.invoke(
            app, ["profile", "add", "items", "--base-url", BASE_URL, "--suffix", ".json"]
        )
        assert added.exit_code == 0, added.output

        result = runner.invoke(app, ["--json", "-q", "-P", "items", "request", "GET", "/items"])

        assert result.exit_code == 0, result.output
        assert str(network.requests[0].url) == f"{BASE_URL}/items.json"

    def test_add_stores_client_settings(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(
            app,
            ["profile", "add", "items", "--base-url", BASE_URL, "--username", "alice",
             "--password", "secret", "--timeout", "7.5", "--trust-all"],
        )

        assert result.exit_code == 0, result.output
        client = load_profile("items").client
        assert client.base_url == BASE_URL
        assert client.username == "alice"
        assert client.password == "secret"
        assert client.timeout == 7.5
        assert client.accept_all_certificates is True

    def test_add_default_sets_global_default(
        self, runner: CliRunner, isolated_config: Path
    ) -> None:
        result = runner.invoke(app, ["profile", "add", "items", "--base-url", BASE_URL, "--default"])

        assert result.exit_code == 0, result.output
        assert load_global_config().default_profile == "items"

    def test_add_without_default_suggests_usage(
        self, runner: CliRunner, isolated_config: Path
    ) -> None:
        result = runner.invoke(app, ["profile", "add", "items", "--base-url", BASE_URL])

        assert "restcache --profile items" in result.output
        assert load_global_config().default_profile is None

    def test_add_requires_base_url(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["profile", "add", "items"])

        assert result.exit_code == 2
        assert profile_exists("items") is False

    def test_list(self, runner: CliRunner, isolated_config: Path) -> None:
        save_profile(Profile(name="beta", client=ClientConfig(base_url="https://b.example.com")))
        save_profile(Profile(name="alpha", client=ClientConfig(base_url=BASE_URL)))
        save_global_config(GlobalConfig(default_profile="beta"))

        result = runner.invoke(app, ["--json", "profile", "list"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [
            {"profile": "alpha", "base_url": BASE_URL, "default": ""},
            {"profile": "beta", "base_url": "https://b.example.com", "default": "*"},
        ]

    def test_list_empty(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["profile", "list"])

        assert result.exit_code == 0
        assert "No profiles configured." in result.output

    def test_remove_clears_default(self, runner: CliRunner, isolated_config: Path) -> None:
        save_profile(Profile(name="items", client=ClientConfig(base_url=BASE_URL)))
        save_global_config(GlobalConfig(default_profile="items"))

        result = runner.invoke(app, ["profile", "remove", "items", "--force"])

        assert result.exit_code == 0, result.output
        assert profile_exists("items") is False
        assert load_global_config().default_profile is None

    def test_remove_declined_keeps_profile(self, runner: CliRunner, isolated_config: Path) -> None:
        save_profile(Profile(name="items"))

        result = runner.invoke(app, ["profile", "remove", "items"], input="n\n")

        assert result.exit_code == 0
        assert profile_exists("items") is True

    def test_remove_unknown(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["profile", "remove", "nope", "--force"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


class TestMain:
    def test_library_error_maps_to_exit_code(
        self, isolated_config: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["--profile", "nope", "cache", "stats"])

        assert excinfo.value.code == 1
        assert "Profile 'nope' not found" in capsys.readouterr().err

    def test_success_exits_zero(
        self, isolated_config: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["--json", "-q", "cache", "key", "/x"])

        assert excinfo.value.code == 0
        assert json.loads(capsys.readouterr().out)["cached"] is False
