"""
Purpose:
- Pydantic models for studio/vlm in/out so the API is self-documenting and stable.
"""

from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Optional

from ..session.state import Tab
from ..vlm.prompts import DEFAULT_TONE, Tone

class EditIn(BaseModel):
    instruction: str = Field(..., description="What to change in the image")

class CaptionIn(BaseModel):
    tone: Optional[Tone] = Field(None, description="Caption style preset; keeps the current one if omitted")
    instruction: Optional[str] = Field(None, description="Optional extra guidance for the caption")

class ToneIn(BaseModel):
    tone: Tone

class TabIn(BaseModel):
    tab: Tab

class CopyIn(BaseModel):
    ok: bool = True
    error: Optional[str] = Field(None, description="Browser-side clipboard error, if any")

class ImageView(BaseModel):
    status: str
    original: Optional[str] = None
    edited: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None

class CaptionView(BaseModel):
    status: str
    text: Optional[str] = None
    loading: bool = False
    tone: Tone = DEFAULT_TONE
    instruction: str = ""
    error: Optional[str] = None

class SessionView(BaseModel):
    session_id: str
    active_tab: Tab
    image: ImageView
    caption: CaptionView
    copied: bool = False

# ---- stateless glue endpoints ----

class VlmEditIn(BaseModel):
    image: str = Field(..., description="data:image/...;base64,... URL")
    instruction: str = Field(..., description="What to change in the image")

class VlmCaptionIn(BaseModel):
    image: str = Field(..., description="data:image/...;base64,... URL")
    tone: Tone = DEFAULT_TONE
    instruction: str = ""

class VlmOut(BaseModel):
    ok: bool = True
    image: Optional[str] = None
    caption: Optional[str] = None
    error: Optional[str] = None

class PresetOut(BaseModel):
    label: str
    instruction: str

class ToneOut(BaseModel):
    tone: Tone
    phrase: str

class PresetsOut(BaseModel):
    presets: List[PresetOut] = []
    tones: List[ToneOut] = []
