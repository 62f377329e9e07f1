# tests/conftest.py
import io
import itertools
import os
import types

# Config is read at import time; point it at throwaway resources first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TOGETHER_API_KEY_DEFAULT", "test-default-key")
os.environ.setdefault("GCS_BUCKET", "test-bucket")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import httpx
import openai
import pytest
import requests
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from comics_api.config import FLASH_IMAGE_MODEL
from comics_api.features.pages.gateway import ImageGateway
from comics_api.features.pages.materializer import ResultMaterializer
from comics_api.features.pages.router import get_image_gateway, get_materializer
from comics_api.lib.db import Base, get_db, make_engine
from comics_api.main import app
from comics_api.models import Page, Story


# -------- Utilities --------
def tiny_png_bytes(color=(10, 20, 30)) -> bytes:
    im = Image.new("RGB", (8, 8), color)
    buf = io.BytesIO()
    im.save(buf, format="PNG")
    return buf.getvalue()


def status_error(status: int, message: str = "upstream said no") -> openai.APIStatusError:
    req = httpx.Request("POST", "https://api.together.xyz/v1/images/generations")
    resp = httpx.Response(status, request=req, json={"error": {"message": message}})
    return openai.APIStatusError(message, response=resp, body={"error": {"message": message}})


# -------- Database --------
@pytest.fixture
def engine():
    eng = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()


def make_story(db, *, user_id="user-1", slug="cosmic-falcon-101", title="Falcon", style="noir") -> Story:
    story = Story(slug=slug, title=title, style=style, user_id=user_id)
    db.add(story)
    db.commit()
    return story


def make_page(db, story, number, *, image="auto", prompt=None, characters=None) -> Page:
    page = Page(
        story_id=story.id,
        page_number=number,
        prompt=prompt or f"page {number} prompt",
        character_image_urls=characters or [],
        generated_image_url=f"https://cdn.test/{story.id}/page-{number}.png" if image == "auto" else image,
    )
    db.add(page)
    db.commit()
    return page


# -------- Fake image service (OpenAI-compatible) --------
class FakeImages:
    def __init__(self):
        self.calls = []
        self.error = None
        self.url = "https://together.test/tmp/generated.png"

    def generate(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return types.SimpleNamespace(data=[types.SimpleNamespace(url=self.url)] if self.url else [])


class FakeImageClient:
    def __init__(self):
        self.images = FakeImages()
        self.keys = []

    def factory(self, api_key=None):
        self.keys.append(api_key)
        return self

    @property
    def last_call(self):
        return self.images.calls[-1]


@pytest.fixture
def image_client():
    return FakeImageClient()


@pytest.fixture
def gateway(image_client):
    return ImageGateway(FLASH_IMAGE_MODEL, client_factory=image_client.factory)


# -------- Fake download + bucket --------
class FakeResponse:
    def __init__(self, content: bytes, status: int = 200):
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeHTTP:
    def __init__(self, content: bytes = None, status: int = 200):
        self.content = tiny_png_bytes() if content is None else content
        self.status = status
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        return FakeResponse(self.content, self.status)


class FakeBucket:
    def __init__(self):
        self.objects = {}
        self.fail = False

    def upload(self, data, object_name, *, content_type="application/octet-stream", **kwargs):
        if self.fail:
            raise RuntimeError("bucket unavailable")
        self.objects[object_name] = (data, content_type)
        return {
            "bucket": "test-bucket",
            "object": object_name,
            "gs_uri": f"gs://test-bucket/{object_name}",
            "public_url": f"https://cdn.test/{object_name}",
            "content_type": content_type,
        }


@pytest.fixture
def http():
    return FakeHTTP()


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def materializer(http, bucket):
    ticks = itertools.count(1_700_000_000_000)
    return ResultMaterializer(http=http, upload=bucket.upload, clock_ms=lambda: next(ticks))


# -------- Test client --------
@pytest.fixture
def client(session_factory, gateway, materializer):
    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_image_gateway] = lambda: gateway
    app.dependency_overrides[get_materializer] = lambda: materializer
    yield TestClient(app)
    app.dependency_overrides.clear()


AUTH = {"X-User-Id": "user-1"}
