from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .constants import DEFAULT_CONFIG_PATH


@dataclass(slots=True)
class ServiceConfig:
    local_url: str = "http://localhost:8080"
    production_url: str = "https://htmlgo-convert.vercel.app"
    endpoint: str = "/api/convert"
    timeout_s: float = 10.0


@dataclass(slots=True)
class PrefixDefaults:
    package_prefix: str = "h"
    component_prefix_primary: str = "v"
    component_prefix_extended: str = "vx"


@dataclass(slots=True)
class EditorConfig:
    auto_convert: bool = False
    children_mode: bool = False


@dataclass(slots=True)
class LogConfig:
    attempt_log: Path | None = None
    level: str = "INFO"


@dataclass(slots=True)
class APIConfig:
    enable_local_api: bool = False
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    service: ServiceConfig = field(default_factory=ServiceConfig)
    prefixes: PrefixDefaults = field(default_factory=PrefixDefaults)
    editor: EditorConfig = field(default_factory=EditorConfig)
    log: LogConfig = field(default_factory=LogConfig)
    api: APIConfig = field(default_factory=APIConfig)
    environment: str | None = None

    def base_url(self, environment: str) -> str:
        if environment == "local":
            return self.service.local_url
        return self.service.production_url


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    data = raw.get(name)
    return data if isinstance(data, Mapping) else None


def _build_service(data: Mapping[str, object] | None) -> ServiceConfig:
    if not data:
        return ServiceConfig()
    defaults = ServiceConfig()
    return ServiceConfig(
        local_url=str(data.get("local_url", defaults.local_url)),
        production_url=str(data.get("production_url", defaults.production_url)),
        endpoint=str(data.get("endpoint", defaults.endpoint)),
        timeout_s=float(data.get("timeout_s", defaults.timeout_s)),
    )


def _build_prefixes(data: Mapping[str, object] | None) -> PrefixDefaults:
    if not data:
        return PrefixDefaults()
    return PrefixDefaults(
        package_prefix=str(data.get("package_prefix", "h")),
        component_prefix_primary=str(data.get("component_prefix_primary", "v")),
        component_prefix_extended=str(data.get("component_prefix_extended", "vx")),
    )


def _build_editor(data: Mapping[str, object] | None) -> EditorConfig:
    if not data:
        return EditorConfig()
    return EditorConfig(
        auto_convert=bool(data.get("auto_convert", False)),
        children_mode=bool(data.get("children_mode", False)),
    )


def _build_log(data: Mapping[str, object] | None) -> LogConfig:
    if not data:
        return LogConfig()
    attempt_log = data.get("attempt_log")
    return LogConfig(
        attempt_log=Path(str(attempt_log)) if attempt_log else None,
        level=str(data.get("level", "INFO")).upper(),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(
        enable_local_api=bool(data.get("enable_local_api", False)),
        host=str(data.get("host", "127.0.0.1")),
        port=int(data.get("port", 8000)),
    )


def load_config(path: Path | None = None) -> AppConfig:
    path = path or DEFAULT_CONFIG_PATH
    raw = _read_toml(path)
    environment = raw.get("environment")
    return AppConfig(
        service=_build_service(_section(raw, "service")),
        prefixes=_build_prefixes(_section(raw, "prefixes")),
        editor=_build_editor(_section(raw, "editor")),
        log=_build_log(_section(raw, "log")),
        api=_build_api(_section(raw, "api")),
        environment=str(environment) if environment else None,
    )


def dump_config(config: AppConfig) -> str:
    payload = {
        "environment": config.environment,
        "service": {
            "local_url": config.service.local_url,
            "production_url": config.service.production_url,
            "endpoint": config.service.endpoint,
            "timeout_s": config.service.timeout_s,
        },
        "prefixes": {
            "package_prefix": config.prefixes.package_prefix,
            "component_prefix_primary": config.prefixes.component_prefix_primary,
            "component_prefix_extended": config.prefixes.component_prefix_extended,
        },
        "editor": {
            "auto_convert": config.editor.auto_convert,
            "children_mode": config.editor.children_mode,
        },
        "log": {
            "attempt_log": str(config.log.attempt_log) if config.log.attempt_log else None,
            "level": config.log.level,
        },
        "api": {
            "enable_local_api": config.api.enable_local_api,
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)
