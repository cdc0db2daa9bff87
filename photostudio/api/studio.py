"""
Purpose:
- Expose /api/v1/studio/* endpoints backing the browser view.
- Each call resolves the caller's in-memory session from a cookie, applies
  one controller action and returns the refreshed session view.
"""

from fastapi import APIRouter, File, Request, Response, UploadFile

from ..core.errors import InvalidImageError
from ..core.settings import settings
from ..session.controller import StudioController
from ..vlm.prompts import EDIT_PRESETS, TONE_PHRASES
from .schema import (
    CaptionIn,
    CopyIn,
    EditIn,
    PresetOut,
    PresetsOut,
    SessionView,
    TabIn,
    ToneIn,
    ToneOut,
)

router = APIRouter(prefix="/api/v1/studio", tags=["studio"])

def _controller(request: Request) -> StudioController:
    return request.app.state.controller

def _session_id(request: Request, response: Response) -> str:
    ctl = _controller(request)
    sess = ctl.store.get_or_create(request.cookies.get(settings.session_cookie_name))
    response.set_cookie(settings.session_cookie_name, sess.id, httponly=True, samesite="lax")
    return sess.id

@router.get("/state", response_model=SessionView)
def get_state(request: Request, response: Response):
    sid = _session_id(request, response)
    ctl = _controller(request)
    return ctl.view(ctl.store.get_or_create(sid))

@router.post("/upload", response_model=SessionView)
async def upload(request: Request, response: Response, image: UploadFile = File(...)):
    sid = _session_id(request, response)
    limit = settings.max_upload_bytes
    if image.size is not None and image.size > limit:
        raise InvalidImageError(f"Image is larger than {limit} bytes")
    # one byte past the limit is enough for sniff_image to reject it
    raw = await image.read(limit + 1)
    ctl = _controller(request)
    return ctl.view(ctl.upload(sid, raw))

@router.post("/edit", response_model=SessionView)
async def edit(payload: EditIn, request: Request, response: Response):
    """
    Run one edit against the original upload. Model failures come back as
    image.error in the view, not as an HTTP error.
    """
    sid = _session_id(request, response)
    ctl = _controller(request)
    return ctl.view(await ctl.apply_edit(sid, payload.instruction))

@router.post("/caption", response_model=SessionView)
async def caption(payload: CaptionIn, request: Request, response: Response):
    sid = _session_id(request, response)
    ctl = _controller(request)
    return ctl.view(await ctl.generate_caption(sid, payload.tone, payload.instruction))

@router.post("/tone", response_model=SessionView)
def set_tone(payload: ToneIn, request: Request, response: Response):
    sid = _session_id(request, response)
    ctl = _controller(request)
    return ctl.view(ctl.set_tone(sid, payload.tone))

@router.post("/tab", response_model=SessionView)
def set_tab(payload: TabIn, request: Request, response: Response):
    sid = _session_id(request, response)
    ctl = _controller(request)
    return ctl.view(ctl.select_tab(sid, payload.tab))

@router.post("/reset", response_model=SessionView)
def reset(request: Request, response: Response):
    sid = _session_id(request, response)
    ctl = _controller(request)
    return ctl.view(ctl.reset(sid))

@router.post("/copy", response_model=SessionView)
def copy(payload: CopyIn, request: Request, response: Response):
    """
    The browser writes to the clipboard itself and reports back here.
    """
    sid = _session_id(request, response)
    ctl = _controller(request)
    if not payload.ok:
        return ctl.view(ctl.copy_failed(sid, payload.error or "unknown clipboard error"))
    return ctl.view(ctl.mark_copied(sid))

@router.get("/download")
def download(request: Request, response: Response):
    sid = _session_id(request, response)
    payload = _controller(request).download(sid)
    return Response(
        content=payload.data,
        media_type=payload.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{settings.download_filename}"'},
    )

@router.get("/presets", response_model=PresetsOut)
def presets():
    return PresetsOut(
        presets=[PresetOut(label=label, instruction=cmd) for label, cmd in EDIT_PRESETS],
        tones=[ToneOut(tone=t, phrase=p) for t, p in TONE_PHRASES.items()],
    )
