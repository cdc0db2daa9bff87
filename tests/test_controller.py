import asyncio
import logging

import pytest

from photostudio.core.errors import (
    GenerationError,
    InvalidTransitionError,
    NoImageReturnedError,
    RequestInFlightError,
)
from photostudio.session.controller import StudioController
from photostudio.vlm.prompts import Tone

EDITED = "data:image/png;base64,RURJVEVE"

def _uploaded(controller, png_bytes) -> str:
    sid = controller.store.get_or_create(None).id
    controller.upload(sid, png_bytes)
    return sid

def test_edit_scenario_success(store, png_bytes):
    seen = {}

    def fake_edit(source, instruction):
        seen["source"], seen["instruction"] = source, instruction
        return EDITED

    ctl = StudioController(store, edit_fn=fake_edit)
    sid = _uploaded(ctl, png_bytes)
    sess = asyncio.run(ctl.apply_edit(sid, "Remove the background entirely"))

    assert sess.image.edited == EDITED
    assert sess.image.loading is False
    assert sess.image.error is None
    assert seen["instruction"] == "Remove the background entirely"
    assert seen["source"] == sess.image.original

def test_edit_scenario_no_image(store, png_bytes):
    def fake_edit(source, instruction):
        raise NoImageReturnedError()

    ctl = StudioController(store, edit_fn=fake_edit)
    sid = _uploaded(ctl, png_bytes)
    sess = asyncio.run(ctl.apply_edit(sid, "Remove the background entirely"))

    assert sess.image.error == "No image data returned from AI"
    assert sess.image.edited is None
    assert sess.image.loading is False

def test_edit_unexpected_error_becomes_message(store, png_bytes):
    def fake_edit(source, instruction):
        raise RuntimeError("kaboom")

    ctl = StudioController(store, edit_fn=fake_edit)
    sid = _uploaded(ctl, png_bytes)
    sess = asyncio.run(ctl.apply_edit(sid, "x"))
    assert sess.image.error == "kaboom" and sess.image.loading is False

def test_edit_dropped_after_reset(store, png_bytes):
    box = {}

    def fake_edit(source, instruction):
        box["ctl"].reset(box["sid"])
        return EDITED

    ctl = StudioController(store, edit_fn=fake_edit)
    sid = _uploaded(ctl, png_bytes)
    box.update(ctl=ctl, sid=sid)
    sess = asyncio.run(ctl.apply_edit(sid, "x"))

    assert sess.image.original is None
    assert sess.image.edited is None
    assert sess.image.loading is False

def test_edit_requires_upload(controller):
    sid = controller.store.get_or_create(None).id
    with pytest.raises(InvalidTransitionError):
        asyncio.run(controller.apply_edit(sid, "x"))

def test_caption_uses_edited_image_and_tone(store, png_bytes):
    calls = []

    def fake_caption(source, tone, instruction):
        calls.append((source, tone, instruction))
        return "Quiet luxury."

    ctl = StudioController(store, edit_fn=lambda s, i: EDITED, caption_fn=fake_caption)
    sid = _uploaded(ctl, png_bytes)
    asyncio.run(ctl.apply_edit(sid, "x"))
    sess = asyncio.run(ctl.generate_caption(sid, Tone.LUXURY, "gold watch"))

    assert calls == [(EDITED, Tone.LUXURY, "gold watch")]
    assert sess.caption.text == "Quiet luxury."
    assert sess.caption.loading is False
    assert sess.caption.tone is Tone.LUXURY

def test_caption_failure_is_surfaced(store, png_bytes):
    def fake_caption(source, tone, instruction):
        raise GenerationError("quota exceeded")

    ctl = StudioController(store, caption_fn=fake_caption)
    sid = _uploaded(ctl, png_bytes)
    sess = asyncio.run(ctl.generate_caption(sid))
    assert sess.caption.loading is False
    assert sess.caption.text is None
    assert sess.caption.error == "quota exceeded"

def test_upload_clears_previous_results(store, png_bytes):
    ctl = StudioController(store, edit_fn=lambda s, i: EDITED, caption_fn=lambda s, t, i: "cap")
    sid = _uploaded(ctl, png_bytes)
    asyncio.run(ctl.apply_edit(sid, "x"))
    asyncio.run(ctl.generate_caption(sid))
    sess = ctl.upload(sid, png_bytes)
    assert sess.image.edited is None
    assert sess.caption.text is None

def test_copy_indicator_clears_after_two_seconds(store, clock, png_bytes):
    ctl = StudioController(store, caption_fn=lambda s, t, i: "cap")
    sid = _uploaded(ctl, png_bytes)
    asyncio.run(ctl.generate_caption(sid))

    sess = ctl.mark_copied(sid)
    assert ctl.view(sess)["copied"] is True
    clock.advance(1.5)
    assert ctl.view(store.get(sid))["copied"] is True
    clock.advance(0.5)
    assert ctl.view(store.get(sid))["copied"] is False

def test_copy_failure_only_logs(controller, png_bytes, caplog):
    sid = _uploaded(controller, png_bytes)
    before = controller.store.get(sid)
    with caplog.at_level(logging.ERROR):
        after = controller.copy_failed(sid, "permission denied")
    assert after.image == before.image and after.caption == before.caption
    assert "permission denied" in caplog.text

def test_reset_restores_initial_view(store, png_bytes):
    ctl = StudioController(store, edit_fn=lambda s, i: EDITED, caption_fn=lambda s, t, i: "cap")
    sid = _uploaded(ctl, png_bytes)
    asyncio.run(ctl.apply_edit(sid, "x"))
    asyncio.run(ctl.generate_caption(sid, Tone.PERSUASIVE, "buy now"))
    ctl.select_tab(sid, "caption")

    view = ctl.view(ctl.reset(sid))
    assert view["active_tab"] == "editor"
    assert view["image"] == {"status": "empty", "original": None, "edited": None, "loading": False, "error": None}
    assert view["caption"]["text"] is None
    assert view["caption"]["tone"] == "Professional"
    assert view["caption"]["instruction"] == ""
    assert view["copied"] is False

def test_download_prefers_edited(store, png_bytes):
    ctl = StudioController(store, edit_fn=lambda s, i: EDITED)
    sid = _uploaded(ctl, png_bytes)
    assert ctl.download(sid).data == png_bytes
    asyncio.run(ctl.apply_edit(sid, "x"))
    assert ctl.download(sid).data == b"EDITED"

def test_caption_dropped_after_reset(store, png_bytes):
    box = {}

    def fake_caption(source, tone, instruction):
        box["ctl"].reset(box["sid"])
        return "too late"

    ctl = StudioController(store, caption_fn=fake_caption)
    sid = _uploaded(ctl, png_bytes)
    box.update(ctl=ctl, sid=sid)
    sess = asyncio.run(ctl.generate_caption(sid, Tone.MINIMALIST))

    assert sess.caption.text is None
    assert sess.caption.loading is False
    assert sess.caption.error is None
    assert sess.caption.tone is Tone.PROFESSIONAL
    assert sess.image.original is None

def test_caption_failure_dropped_after_new_upload(store, png_bytes):
    box = {}

    def fake_caption(source, tone, instruction):
        box["ctl"].upload(box["sid"], png_bytes)
        raise GenerationError("quota exceeded")

    ctl = StudioController(store, caption_fn=fake_caption)
    sid = _uploaded(ctl, png_bytes)
    box.update(ctl=ctl, sid=sid)
    sess = asyncio.run(ctl.generate_caption(sid))

    assert sess.caption.error is None
    assert sess.caption.loading is False
    assert sess.image.original is not None

def test_second_edit_while_in_flight_is_rejected(store, png_bytes):
    box = {}

    def fake_edit(source, instruction):
        try:
            asyncio.run(box["ctl"].apply_edit(box["sid"], "again"))
        except RequestInFlightError as e:
            box["rejected"] = e
        return EDITED

    ctl = StudioController(store, edit_fn=fake_edit)
    sid = _uploaded(ctl, png_bytes)
    box.update(ctl=ctl, sid=sid)
    sess = asyncio.run(ctl.apply_edit(sid, "first"))

    assert isinstance(box["rejected"], RequestInFlightError)
    assert sess.image.edited == EDITED
    assert sess.image.loading is False

def test_second_caption_while_in_flight_is_rejected(store, png_bytes):
    box = {}

    def fake_caption(source, tone, instruction):
        try:
            asyncio.run(box["ctl"].generate_caption(box["sid"]))
        except RequestInFlightError as e:
            box["rejected"] = e
        return "only one"

    ctl = StudioController(store, caption_fn=fake_caption)
    sid = _uploaded(ctl, png_bytes)
    box.update(ctl=ctl, sid=sid)
    sess = asyncio.run(ctl.generate_caption(sid))

    assert isinstance(box["rejected"], RequestInFlightError)
    assert sess.caption.text == "only one"

def test_reset_clears_copied_indicator(store, png_bytes):
    ctl = StudioController(store, caption_fn=lambda s, t, i: "cap")
    sid = _uploaded(ctl, png_bytes)
    asyncio.run(ctl.generate_caption(sid))
    ctl.mark_copied(sid)
    assert ctl.view(ctl.reset(sid))["copied"] is False
