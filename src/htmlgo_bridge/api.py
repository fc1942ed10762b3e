from __future__ import annotations

from pathlib import Path

import httpx
from fastapi import APIRouter, Depends, FastAPI, HTTPException

from .config import AppConfig, load_config
from .constants import APP_VERSION
from .controller import ConversionController, create_controller
from .dependencies import get_controller
from .editors import TextBuffer
from .environment import HostIdentity, resolve_environment
from .models import ConversionDirection
from .prefixes import PrefixField
from .schemas import EditorText, HealthStatus, OptionsUpdate, OutcomePayload, PrefixValue, SessionState
from .settings import Settings, get_settings
from .tracking import LoggingTracker

router = APIRouter()


def _direction(value: str) -> ConversionDirection:
    try:
        return ConversionDirection(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid conversion direction") from exc


def _prefix_field(value: str) -> PrefixField:
    try:
        return PrefixField(value)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown prefix field: {value}") from exc


def _state(controller: ConversionController) -> SessionState:
    snapshot = controller.snapshot()
    return SessionState(
        state=str(snapshot["state"]),
        environment=str(snapshot["environment"]),
        markup=str(snapshot["markup"]),
        code=str(snapshot["code"]),
        prefixes=dict(snapshot["prefixes"]),  # type: ignore[arg-type]
        children_mode=bool(snapshot["childrenMode"]),
    )


@router.get("/health", response_model=HealthStatus)
async def health(controller: ConversionController = Depends(get_controller)) -> HealthStatus:
    return HealthStatus(status="ok", version=APP_VERSION, environment=controller.environment)


@router.get("/state", response_model=SessionState, response_model_by_alias=True)
async def session_state(controller: ConversionController = Depends(get_controller)) -> SessionState:
    return _state(controller)


@router.put("/editors/{role}", response_model=SessionState, response_model_by_alias=True)
async def set_editor_text(
    role: str,
    payload: EditorText,
    controller: ConversionController = Depends(get_controller),
) -> SessionState:
    if role not in ("markup", "code"):
        raise HTTPException(status_code=404, detail=f"Unknown editor: {role}")
    controller.editor(role).set_text(payload.text)  # type: ignore[arg-type]
    await controller.drain()
    return _state(controller)


@router.post("/convert/{direction}", response_model=OutcomePayload)
async def convert(
    direction: str,
    controller: ConversionController = Depends(get_controller),
) -> OutcomePayload:
    conversion = _direction(direction)
    outcome = await controller.convert(conversion)
    if outcome is None:
        return OutcomePayload(dropped=True, direction=conversion.value)
    return OutcomePayload(**outcome.to_dict())


@router.get("/prefixes")
async def get_prefixes(controller: ConversionController = Depends(get_controller)) -> dict[str, str]:
    return controller.prefixes.get().as_payload()


@router.put("/prefixes/{field}", response_model=SessionState, response_model_by_alias=True)
async def set_prefix(
    field: str,
    payload: PrefixValue,
    controller: ConversionController = Depends(get_controller),
) -> SessionState:
    controller.set_prefix(_prefix_field(field), payload.value)
    await controller.drain()
    return _state(controller)


@router.put("/options", response_model=SessionState, response_model_by_alias=True)
async def set_options(
    payload: OptionsUpdate,
    controller: ConversionController = Depends(get_controller),
) -> SessionState:
    controller.set_children_mode(payload.children_mode)
    await controller.drain()
    return _state(controller)


def _prepare_config(settings: Settings, config_path: Path | None) -> AppConfig:
    config = load_config(config_path or settings.config_path)
    if settings.enable_local_api is not None:
        config.api.enable_local_api = settings.enable_local_api
    if settings.env:
        config.environment = settings.env
    return config


def create_app(
    config_path: Path | None = None,
    *,
    require_enabled: bool = True,
    host: HostIdentity | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = get_settings()
    config = _prepare_config(settings, config_path)
    if require_enabled and not config.api.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via config.api.enable_local_api")

    identity = host or HostIdentity(hostname=config.api.host, port=config.api.port)
    environment = resolve_environment(config.environment, identity)
    controller = create_controller(
        config,
        environment=environment,
        markup_editor=TextBuffer("markup"),
        code_editor=TextBuffer("code"),
        service_url=settings.service_url,
        transport=transport,
        tracker=LoggingTracker(environment),
    )

    app = FastAPI(title="HTML/Go Converter Session", version=APP_VERSION)
    app.state.config = config
    app.state.controller = controller
    app.include_router(router)

    @app.on_event("shutdown")
    async def _shutdown() -> None:  # pragma: no cover - FastAPI lifecycle
        controller.close()

    return app


__all__ = ["create_app", "router"]
