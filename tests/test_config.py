import json
from pathlib import Path

from htmlgo_bridge.config import AppConfig, dump_config, load_config


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "missing.toml")
    assert config == AppConfig()
    assert config.service.endpoint == "/api/convert"
    assert config.prefixes.package_prefix == "h"
    assert config.log.attempt_log is None


def test_sections_override_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        'environment = "prod"\n'
        "[service]\n"
        'production_url = "https://convert.example.com"\n'
        "timeout_s = 3\n"
        "[prefixes]\n"
        'component_prefix_primary = "vt"\n'
        "[editor]\n"
        "children_mode = true\n"
        "[log]\n"
        'attempt_log = "runs/attempts.jsonl"\n'
        'level = "debug"\n',
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.environment == "prod"
    assert config.service.production_url == "https://convert.example.com"
    assert config.service.local_url == "http://localhost:8080"
    assert config.service.timeout_s == 3.0
    assert config.prefixes.component_prefix_primary == "vt"
    assert config.prefixes.component_prefix_extended == "vx"
    assert config.editor.children_mode is True
    assert config.log.attempt_log == Path("runs/attempts.jsonl")
    assert config.log.level == "DEBUG"


def test_base_url_follows_environment() -> None:
    config = AppConfig()
    assert config.base_url("local") == "http://localhost:8080"
    assert config.base_url("production") == "https://htmlgo-convert.vercel.app"
    assert config.base_url("prod") == "https://htmlgo-convert.vercel.app"


def test_dump_config_is_json() -> None:
    payload = json.loads(dump_config(AppConfig()))
    assert payload["prefixes"] == {
        "package_prefix": "h",
        "component_prefix_primary": "v",
        "component_prefix_extended": "vx",
    }
    assert payload["api"]["enable_local_api"] is False
