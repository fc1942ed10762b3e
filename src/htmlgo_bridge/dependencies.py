"""FastAPI dependency providers for the session controller."""

from __future__ import annotations

from fastapi import HTTPException, Request

from .controller import ConversionController


def get_controller(request: Request) -> ConversionController:
    controller = getattr(request.app.state, "controller", None)
    if controller is None:
        raise HTTPException(status_code=503, detail="CONTROLLER_UNAVAILABLE")
    return controller


__all__ = ["get_controller"]
