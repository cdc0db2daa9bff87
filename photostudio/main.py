"""
Purpose:
- FastAPI application factory and router mounts.
- Adds CORS for local dev, the StudioError handler and the static front end.
- Uvicorn will serve this on 0.0.0.0:8000 by default.
"""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from .core.errors import StudioError
from .core.settings import settings
from .session.controller import StudioController
from .session.store import SessionStore
from .api.health import router as health_router
from .api.studio import router as studio_router
from .api.vlm import router as vlm_router

STATIC_DIR = Path(__file__).parent / "static"

log = logging.getLogger(__name__)

def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

async def studio_error_handler(request: Request, exc: StudioError):
    log.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.message})

def create_app(controller: StudioController | None = None) -> FastAPI:
    configure_logging()
    app = FastAPI(title="PhotoStudio API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.controller = controller or StudioController(SessionStore(settings.session_ttl_seconds))
    app.add_exception_handler(StudioError, studio_error_handler)

    app.include_router(health_router)
    app.include_router(studio_router)
    app.include_router(vlm_router)

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/", include_in_schema=False)
    def index():
        return FileResponse(STATIC_DIR / "index.html")

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("photostudio.main:app", host=settings.host, port=settings.port)
