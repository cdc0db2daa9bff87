from io import BytesIO
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from photostudio.main import create_app
from photostudio.services.encoding import to_data_url
from photostudio.session.controller import StudioController
from photostudio.session.store import SessionStore

def make_png(color=(200, 30, 30), size=(8, 8)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()

class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.t = start

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds

def image_response(raw: bytes, text: str | None = None):
    parts = []
    if text:
        parts.append(SimpleNamespace(text=text, inline_data=None))
    parts.append(SimpleNamespace(text=None, inline_data=SimpleNamespace(mime_type="image/png", data=raw)))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))], text=text)

def text_response(text: str | None):
    part = SimpleNamespace(text=text, inline_data=None)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))], text=text)

class FakeModels:
    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls = []

    def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return self.response

class FakeGenaiClient:
    def __init__(self, response=None, error: Exception | None = None):
        self.models = FakeModels(response, error)

    @property
    def calls(self):
        return self.models.calls

@pytest.fixture
def png_bytes() -> bytes:
    return make_png()

@pytest.fixture
def png_data_url(png_bytes) -> str:
    return to_data_url(png_bytes, "image/png")

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

@pytest.fixture
def store(clock) -> SessionStore:
    return SessionStore(ttl_seconds=3600, clock=clock)

@pytest.fixture
def controller(store) -> StudioController:
    return StudioController(store)

@pytest.fixture
def client(controller) -> TestClient:
    return TestClient(create_app(controller))
