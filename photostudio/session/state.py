"""
Purpose:
- Immutable per-feature state objects for the studio view.
- Every transition returns a new instance; nothing mutates in place.

State machines:
- image:   empty -> uploaded -> editing -> (edited | error); reset -> empty
- caption: idle -> generating -> (ready | failed)

Each feature carries a `generation` counter. Starting a request hands out the
current value as a token; completions with a different token are stale (a
reset or new upload happened while the request was in flight) and are ignored.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from ..core.errors import EmptyInstructionError, InvalidTransitionError, RequestInFlightError
from ..vlm.prompts import DEFAULT_TONE, Tone

class Tab(str, Enum):
    EDITOR = "editor"
    CAPTION = "caption"

@dataclass(frozen=True)
class ImageState:
    original: Optional[str] = None
    edited: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None
    generation: int = 0

    @property
    def status(self) -> str:
        if self.original is None:
            return "empty"
        if self.loading:
            return "editing"
        if self.error is not None:
            return "error"
        if self.edited is not None:
            return "edited"
        return "uploaded"

    @property
    def displayed(self) -> Optional[str]:
        return self.edited or self.original

    def upload(self, data_url: str) -> "ImageState":
        return ImageState(original=data_url, generation=self.generation + 1)

    def begin_edit(self, instruction: str) -> tuple["ImageState", int]:
        if self.original is None:
            raise InvalidTransitionError("Upload an image before editing")
        if not (instruction or "").strip():
            raise EmptyInstructionError()
        if self.loading:
            raise RequestInFlightError()
        token = self.generation + 1
        return replace(self, loading=True, error=None, generation=token), token

    def edit_succeeded(self, token: int, image: str) -> "ImageState":
        if token != self.generation or not self.loading:
            return self
        return replace(self, edited=image, loading=False, error=None)

    def edit_failed(self, token: int, message: str) -> "ImageState":
        if token != self.generation or not self.loading:
            return self
        # edited and error are never set together
        return replace(self, edited=None, loading=False, error=message or "Failed to edit image")

    def reset(self) -> "ImageState":
        return ImageState(generation=self.generation + 1)

@dataclass(frozen=True)
class CaptionState:
    text: Optional[str] = None
    loading: bool = False
    tone: Tone = DEFAULT_TONE
    instruction: str = ""
    error: Optional[str] = None
    generation: int = 0

    @property
    def status(self) -> str:
        if self.loading:
            return "generating"
        if self.error is not None:
            return "failed"
        if self.text is not None:
            return "ready"
        return "idle"

    def with_tone(self, tone: Tone | str) -> "CaptionState":
        return replace(self, tone=Tone(tone))

    def with_instruction(self, instruction: str) -> "CaptionState":
        return replace(self, instruction=instruction or "")

    def clear_text(self) -> "CaptionState":
        # keeps tone/instruction; drops text and any in-flight request
        return replace(self, text=None, loading=False, error=None, generation=self.generation + 1)

    def begin(self) -> tuple["CaptionState", int]:
        if self.loading:
            raise RequestInFlightError()
        token = self.generation + 1
        return replace(self, loading=True, error=None, generation=token), token

    def succeeded(self, token: int, text: str) -> "CaptionState":
        if token != self.generation or not self.loading:
            return self
        return replace(self, text=text, loading=False, error=None)

    def failed(self, token: int, message: str) -> "CaptionState":
        if token != self.generation or not self.loading:
            return self
        return replace(self, loading=False, error=message or "Failed to generate caption")

    def reset(self) -> "CaptionState":
        return CaptionState(generation=self.generation + 1)

@dataclass(frozen=True)
class CopyState:
    copied_until: float = 0.0

    def is_copied(self, now: float) -> bool:
        return now < self.copied_until

    def mark(self, now: float, duration_ms: int) -> "CopyState":
        return CopyState(copied_until=now + duration_ms / 1000.0)

@dataclass(frozen=True)
class Session:
    id: str
    active_tab: Tab = Tab.EDITOR
    image: ImageState = field(default_factory=ImageState)
    caption: CaptionState = field(default_factory=CaptionState)
    copy: CopyState = field(default_factory=CopyState)
    touched_at: float = 0.0

    def upload(self, data_url: str) -> "Session":
        return replace(self, image=self.image.upload(data_url), caption=self.caption.clear_text())

    def select_tab(self, tab: Tab | str) -> "Session":
        tab = Tab(tab)
        if tab is Tab.CAPTION and self.image.original is None:
            raise InvalidTransitionError("Upload an image before opening the caption tab")
        return replace(self, active_tab=tab)

    def reset(self) -> "Session":
        return Session(
            id=self.id,
            image=self.image.reset(),
            caption=self.caption.reset(),
            touched_at=self.touched_at,
        )
