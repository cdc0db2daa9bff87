"""
Purpose:
- The view controller: turns user actions into state transitions and
  dispatches the two remote requests.

How it's used:
- The studio router owns one StudioController bound to the app's SessionStore.
- Remote calls run in the threadpool; the event loop stays free while a
  request is in flight, and the session lock is never held across the call.
"""

from __future__ import annotations
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from starlette.concurrency import run_in_threadpool

from ..core.errors import InvalidTransitionError, StudioError
from ..core.settings import settings
from ..services.encoding import ImagePayload, parse_data_url, upload_to_data_url
from ..vlm import gemini
from ..vlm.prompts import Tone
from .state import Session, Tab
from .store import SessionStore

log = logging.getLogger(__name__)

EditFn = Callable[[str, str], str]
CaptionFn = Callable[[str, Tone, str], str]

class StudioController:
    def __init__(
        self,
        store: SessionStore,
        edit_fn: Optional[EditFn] = None,
        caption_fn: Optional[CaptionFn] = None,
    ):
        self.store = store
        # late-bound so tests can monkeypatch gemini.edit_image / generate_caption
        self._edit_fn = edit_fn
        self._caption_fn = caption_fn

    # --- simple transitions --------------------------------------------------

    def upload(self, session_id: str, raw: bytes) -> Session:
        data_url = upload_to_data_url(raw)
        log.info("session %s uploaded %d bytes", session_id, len(raw))
        return self.store.update(session_id, lambda s: s.upload(data_url))

    def select_tab(self, session_id: str, tab: Tab | str) -> Session:
        return self.store.update(session_id, lambda s: s.select_tab(tab))

    def set_tone(self, session_id: str, tone: Tone | str) -> Session:
        return self.store.update(session_id, lambda s: _with_caption(s, s.caption.with_tone(tone)))

    def reset(self, session_id: str) -> Session:
        log.info("session %s reset", session_id)
        return self.store.update(session_id, lambda s: s.reset())

    def mark_copied(self, session_id: str) -> Session:
        sess = self.store.get_or_create(session_id)
        if not sess.caption.text:
            raise InvalidTransitionError("Nothing to copy yet")
        now = self.store.now()
        return self.store.update(
            session_id,
            lambda s: _replace(s, copy=s.copy.mark(now, settings.copied_indicator_ms)),
        )

    def copy_failed(self, session_id: str, reason: str) -> Session:
        # clipboard failures are logged only; state is untouched
        log.error("session %s failed to copy text: %s", session_id, reason)
        return self.store.get_or_create(session_id)

    def download(self, session_id: str) -> ImagePayload:
        sess = self.store.get_or_create(session_id)
        shown = sess.image.displayed
        if shown is None:
            raise InvalidTransitionError("No image to download")
        return parse_data_url(shown)

    # --- remote requests -----------------------------------------------------

    async def apply_edit(self, session_id: str, instruction: str) -> Session:
        token_box: Dict[str, Any] = {}

        def _begin(s: Session) -> Session:
            image, token = s.image.begin_edit(instruction)
            token_box["token"] = token
            token_box["source"] = s.image.original
            return _replace(s, image=image)

        self.store.update(session_id, _begin)
        token = token_box["token"]
        edit_fn = self._edit_fn or gemini.edit_image

        try:
            result = await run_in_threadpool(edit_fn, token_box["source"], instruction)
        except StudioError as e:
            log.warning("session %s edit failed: %s", session_id, e.message)
            return self._finish_image(session_id, lambda img: img.edit_failed(token, e.message))
        except Exception as e:
            log.exception("session %s edit crashed", session_id)
            return self._finish_image(session_id, lambda img: img.edit_failed(token, str(e)))

        return self._finish_image(session_id, lambda img: img.edit_succeeded(token, result))

    async def generate_caption(
        self,
        session_id: str,
        tone: Optional[Tone | str] = None,
        instruction: Optional[str] = None,
    ) -> Session:
        box: Dict[str, Any] = {}

        def _begin(s: Session) -> Session:
            source = s.image.displayed
            if source is None:
                raise InvalidTransitionError("Upload an image before generating a caption")
            cap = s.caption
            if tone is not None:
                cap = cap.with_tone(tone)
            if instruction is not None:
                cap = cap.with_instruction(instruction)
            cap, token = cap.begin()
            box.update(token=token, source=source, tone=cap.tone, instruction=cap.instruction)
            return _with_caption(s, cap)

        self.store.update(session_id, _begin)
        token = box["token"]
        caption_fn = self._caption_fn or gemini.generate_caption

        try:
            text = await run_in_threadpool(caption_fn, box["source"], box["tone"], box["instruction"])
        except StudioError as e:
            log.warning("session %s caption failed: %s", session_id, e.message)
            return self._finish_caption(session_id, lambda c: c.failed(token, e.message))
        except Exception as e:
            log.exception("session %s caption crashed", session_id)
            return self._finish_caption(session_id, lambda c: c.failed(token, str(e)))

        return self._finish_caption(session_id, lambda c: c.succeeded(token, text))

    def _finish_image(self, session_id: str, fn) -> Session:
        def _apply(s: Session) -> Session:
            image = fn(s.image)
            if image is s.image:
                log.debug("session %s dropped stale edit result", session_id)
            return _replace(s, image=image)
        return self.store.update(session_id, _apply)

    def _finish_caption(self, session_id: str, fn) -> Session:
        def _apply(s: Session) -> Session:
            cap = fn(s.caption)
            if cap is s.caption:
                log.debug("session %s dropped stale caption result", session_id)
            return _with_caption(s, cap)
        return self.store.update(session_id, _apply)

    # --- rendering -----------------------------------------------------------

    def view(self, sess: Session) -> Dict[str, Any]:
        img, cap = sess.image, sess.caption
        return {
            "session_id": sess.id,
            "active_tab": sess.active_tab.value,
            "image": {
                "status": img.status,
                "original": img.original,
                "edited": img.edited,
                "loading": img.loading,
                "error": img.error,
            },
            "caption": {
                "status": cap.status,
                "text": cap.text,
                "loading": cap.loading,
                "tone": cap.tone.value,
                "instruction": cap.instruction,
                "error": cap.error,
            },
            "copied": sess.copy.is_copied(self.store.now()),
        }

def _replace(s: Session, **changes) -> Session:
    return replace(s, **changes)

def _with_caption(s: Session, cap) -> Session:
    return _replace(s, caption=cap)
