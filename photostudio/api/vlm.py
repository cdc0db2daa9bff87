"""
Purpose:
- Stateless /edit and /caption over data URLs; the raw request layer with no session.
"""

import logging

from fastapi import APIRouter
from starlette.concurrency import run_in_threadpool

from ..core.errors import StudioError
from ..vlm import gemini
from .schema import VlmCaptionIn, VlmEditIn, VlmOut

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/vlm", tags=["vlm"])

@router.post("/edit", response_model=VlmOut)
async def edit(payload: VlmEditIn):
    try:
        img = await run_in_threadpool(gemini.edit_image, payload.image, payload.instruction)
        return VlmOut(ok=True, image=img)
    except StudioError as e:
        return VlmOut(ok=False, error=e.message)
    except Exception as e:
        log.exception("vlm edit failed")
        return VlmOut(ok=False, error=str(e) or e.__class__.__name__)

@router.post("/caption", response_model=VlmOut)
async def caption(payload: VlmCaptionIn):
    try:
        cap = await run_in_threadpool(gemini.generate_caption, payload.image, payload.tone, payload.instruction)
        return VlmOut(ok=True, caption=cap)
    except StudioError as e:
        return VlmOut(ok=False, error=e.message)
    except Exception as e:
        log.exception("vlm caption failed")
        return VlmOut(ok=False, error=str(e) or e.__class__.__name__)
