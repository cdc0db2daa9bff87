"""
Gemini request layer:
- edit_image: data URL + instruction -> data URL of the modified image
- generate_caption: data URL + tone + instruction -> caption text

Both are single round trips with no retries. The client is cached like a
model singleton and can be swapped out by passing client=... (tests do).
"""

from __future__ import annotations
import base64
import binascii
import logging
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..core.errors import (
    EmptyInstructionError,
    GenerationError,
    InvalidImageError,
    MissingCredentialsError,
    NoImageReturnedError,
    StudioError,
)
from ..core.settings import settings
from ..services.encoding import strip_data_url, to_data_url
from .prompts import CAPTION_FALLBACK, Tone, build_caption_prompt, build_edit_prompt

log = logging.getLogger(__name__)

_CLIENT_SINGLETON = None  # cached genai.Client

# Errors the SDK surfaces for network, auth and quota problems
_TRANSPORT_ERRORS = (genai_errors.APIError, httpx.HTTPError, ConnectionError, TimeoutError)

def get_client():
    """
    Return a cached genai.Client built from settings.gemini_api_key.
    """
    global _CLIENT_SINGLETON
    if _CLIENT_SINGLETON is not None:
        return _CLIENT_SINGLETON
    if not settings.gemini_api_key:
        raise MissingCredentialsError()
    _CLIENT_SINGLETON = genai.Client(api_key=settings.gemini_api_key)
    return _CLIENT_SINGLETON

def reset_client() -> None:
    global _CLIENT_SINGLETON
    _CLIENT_SINGLETON = None

def _image_part(data_url: str) -> types.Part:
    payload = strip_data_url(data_url)
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Invalid base64 payload: {e}") from e
    return types.Part.from_bytes(data=raw, mime_type=settings.image_mime_type)

def _generate(client: Any, model: str, contents: list, config: Optional[types.GenerateContentConfig] = None):
    try:
        return client.models.generate_content(model=model, contents=contents, config=config)
    except _TRANSPORT_ERRORS as e:
        log.warning("gemini call to %s failed: %s", model, e)
        raise GenerationError(str(e) or e.__class__.__name__) from e
    except StudioError:
        raise
    except Exception as e:
        # auth, validation and value errors from the SDK
        log.exception("gemini call to %s crashed", model)
        raise GenerationError(str(e) or e.__class__.__name__) from e

def _iter_parts(response: Any):
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return
    content = getattr(candidates[0], "content", None)
    for part in (getattr(content, "parts", None) or []):
        yield part

def edit_image(data_url: str, instruction: str, client: Any = None) -> str:
    if not (instruction or "").strip():
        raise EmptyInstructionError()
    client = client or get_client()
    contents = [_image_part(data_url), build_edit_prompt(instruction)]
    config = types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"])

    log.info("edit request: model=%s instruction=%r", settings.edit_model_name, instruction)
    response = _generate(client, settings.edit_model_name, contents, config)

    for part in _iter_parts(response):
        inline = getattr(part, "inline_data", None)
        if inline is not None and inline.data:
            raw = inline.data
            if isinstance(raw, str):
                # some transports hand back the base64 text instead of bytes
                return f"data:image/png;base64,{raw}"
            return to_data_url(raw, "image/png")
        text = getattr(part, "text", None)
        if text:
            log.debug("edit response text part: %s", text)

    raise NoImageReturnedError()

def generate_caption(data_url: str, tone: Tone | str, instruction: str = "", client: Any = None) -> str:
    tone = Tone(tone)
    client = client or get_client()
    contents = [_image_part(data_url), build_caption_prompt(tone, instruction)]

    log.info("caption request: model=%s tone=%s", settings.caption_model_name, tone.value)
    response = _generate(client, settings.caption_model_name, contents)
    return getattr(response, "text", None) or CAPTION_FALLBACK
