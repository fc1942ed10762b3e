from fastapi import FastAPI, HTTPException

from htmlgo_bridge.api import create_app

try:
    app = create_app(require_enabled=True)
except RuntimeError:
    app = FastAPI(title="HTML/Go Converter Session", version="1.0.0")

    @app.get("/")
    async def api_disabled() -> dict[str, str]:
        raise HTTPException(
            status_code=503,
            detail="Local API disabled. Enable by setting enable_local_api = true under [api] in config.toml",
        )

if __name__ == "__main__":
    import uvicorn

    from htmlgo_bridge.config import load_config
    from htmlgo_bridge.settings import get_settings

    api_config = load_config(get_settings().config_path).api
    uvicorn.run(app, host=api_config.host, port=api_config.port)
