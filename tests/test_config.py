"""Tests for configuration loading and validation."""

import json

import pytest

from episode_mood.config import (
    DEFAULT_TIMEOUT,
    SPOTIFY_API_URL,
    SPOTIFY_TOKEN_URL,
    config_from_dict,
    format_url,
    load_config,
)
from episode_mood.errors import ConfigurationError

from tests.conftest import CONFIG_DICT, IBL_URL

REQUIRED_KEYS = [
    "certFile",
    "keyFile",
    "spotifyClientId",
    "spotifyClientSecret",
    "musicUrl",
    "iblUrl",
    "playlisterUrl",
]


@pytest.fixture(autouse=True)
def no_spotify_env(monkeypatch):
    monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)
    monkeypatch.delenv("SPOTIFY_CLIENT_SECRET", raising=False)
    monkeypatch.delenv("EPISODE_MOOD_CONFIG", raising=False)


class TestLoadConfig:
    def test_loads_all_fields(self, config_file):
        config = load_config(config_file)
        assert config.cert_file == "/etc/pki/client.crt"
        assert config.key_file == "/etc/pki/client.key"
        assert config.spotify_client_id == "client-id"
        assert config.spotify_client_secret == "client-secret"
        assert config.ibl_url == IBL_URL
        assert config.timeout == DEFAULT_TIMEOUT

    def test_path_from_environment(self, config_file, monkeypatch):
        monkeypatch.setenv("EPISODE_MOOD_CONFIG", str(config_file))
        assert load_config().spotify_client_id == "client-id"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read config file"):
            load_config(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_config(path)

    def test_nan_timeout_in_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(CONFIG_DICT)[:-1] + ', "timeout": NaN}')
        with pytest.raises(ConfigurationError, match="timeout"):
            load_config(path)

    def test_json_must_be_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(["certFile"]))
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config(path)


class TestConfigValidation:
    @pytest.mark.parametrize("key", REQUIRED_KEYS)
    def test_missing_field_is_named(self, key):
        raw = {k: v for k, v in CONFIG_DICT.items() if k != key}
        with pytest.raises(ConfigurationError) as exc_info:
            config_from_dict(raw)
        assert exc_info.value.config_key == key
        assert exc_info.value.message == f"Config incomplete: {key} is missing"

    @pytest.mark.parametrize("key", REQUIRED_KEYS)
    def test_blank_field_is_missing(self, key):
        raw = {**CONFIG_DICT, key: "   "}
        with pytest.raises(ConfigurationError, match=key):
            config_from_dict(raw)

    def test_spotify_credentials_from_environment(self, monkeypatch):
        monkeypatch.setenv("SPOTIFY_CLIENT_ID", "env-id")
        monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "env-secret")
        raw = {k: v for k, v in CONFIG_DICT.items() if not k.startswith("spotifyClient")}
        config = config_from_dict(raw)
        assert config.spotify_client_id == "env-id"
        assert config.spotify_client_secret == "env-secret"

    def test_file_credentials_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("SPOTIFY_CLIENT_ID", "env-id")
        assert config_from_dict(CONFIG_DICT).spotify_client_id == "client-id"

    def test_template_needs_placeholder(self):
        raw = {**CONFIG_DICT, "playlisterUrl": "http://playlister.test/versions"}
        with pytest.raises(ConfigurationError, match="playlisterUrl"):
            config_from_dict(raw)

    def test_spotify_defaults(self):
        raw = {k: v for k, v in CONFIG_DICT.items() if k not in ("spotifyTokenUrl", "spotifyApiUrl")}
        config = config_from_dict(raw)
        assert config.spotify_token_url == SPOTIFY_TOKEN_URL
        assert config.spotify_api_url == SPOTIFY_API_URL

    @pytest.mark.parametrize("timeout", [0, -1, "30", True, float("nan"), float("inf")])
    def test_invalid_timeout(self, timeout):
        with pytest.raises(ConfigurationError, match="timeout"):
            config_from_dict({**CONFIG_DICT, "timeout": timeout})

    def test_custom_timeout(self):
        assert config_from_dict({**CONFIG_DICT, "timeout": 5}).timeout == 5.0


class TestFormatUrl:
    def test_substitutes_identifier(self):
        assert format_url(IBL_URL, "epid1") == "http://ibl.test/ibl/v1/episodes/epid1"

    def test_quotes_identifier(self):
        assert format_url("http://x.test/%s", "a/b c") == "http://x.test/a%2Fb%20c"
