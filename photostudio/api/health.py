# Common language: Environment/ops probe that surfaces library versions, model config and key presence.
# Use this before/after upgrades to confirm no silent drift.

from fastapi import APIRouter, Request
from ..core.settings import settings
import sys, importlib

router = APIRouter(tags=["health"])

def _ver(modname: str) -> str:
    try:
        m = importlib.import_module(modname)
        return getattr(m, "__version__", "unknown")
    except ImportError:
        return "not-installed"

@router.get("/healthz")
def healthz(request: Request):
    ctl = getattr(request.app.state, "controller", None)
    return {
        "status": "ok",
        "python": sys.version.split()[0],
        "versions": {
            "fastapi": _ver("fastapi"),
            "uvicorn": _ver("uvicorn"),
            "pydantic": _ver("pydantic"),
            "pydantic_settings": _ver("pydantic_settings"),
            "PIL": _ver("PIL"),
            "httpx": _ver("httpx"),
            "google.genai": _ver("google.genai"),
        },
        "config": {
            "edit_model": settings.edit_model_name,
            "caption_model": settings.caption_model_name,
            "max_upload_bytes": settings.max_upload_bytes,
        },
        "env_keys_present": {
            "GEMINI_API_KEY": bool(settings.gemini_api_key),
        },
        "sessions": len(ctl.store) if ctl is not None else 0,
    }
