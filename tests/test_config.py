"""
Tests for config/ - schema defaults, env overrides and the JSON loader.
"""

import json

from golsdk.config.loader import (
    camel_to_snake,
    convert_keys,
    convert_to_camel,
    load_config,
    save_config,
    snake_to_camel,
)
from golsdk.config.schema import Config


class TestConfigSchema:
    def test_defaults(self):
        config = Config()
        assert config.server.url == "ws://localhost:3000/ws"
        assert config.server.open_timeout == 10.0
        assert config.watch.generations == 0
        assert config.watch.render is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("GOLSDK_SERVER__URL", "ws://env/ws")
        assert Config().server.url == "ws://env/ws"


class TestKeyConversion:
    def test_camel_to_snake(self):
        assert camel_to_snake("openTimeout") == "open_timeout"
        assert camel_to_snake("url") == "url"

    def test_snake_to_camel(self):
        assert snake_to_camel("open_timeout") == "openTimeout"

    def test_nested_conversion(self):
        data = {"server": {"openTimeout": 1}, "items": [{"aB": 1}]}
        assert convert_keys(data) == {"server": {"open_timeout": 1}, "items": [{"a_b": 1}]}
        assert convert_to_camel(convert_keys(data)) == data


class TestLoader:
    def test_missing_file_returns_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.json")
        assert config.server.url == "ws://localhost:3000/ws"

    def test_load_camel_case_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"server": {"url": "ws://file/ws", "openTimeout": 2.5}}))

        config = load_config(path)

        assert config.server.url == "ws://file/ws"
        assert config.server.open_timeout == 2.5

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert load_config(path).server.url == "ws://localhost:3000/ws"

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = Config()
        config.watch.rows = 12

        save_config(config, path)

        on_disk = json.loads(path.read_text())
        assert on_disk["server"]["openTimeout"] == 10.0
        assert load_config(path).watch.rows == 12
