"""Shared fixtures: app built with a fake backend and fake image fetcher.

The real dlib backend is never touched here; routes only see the
RecognitionBackend contract.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from face_compare_api.config import Settings
from face_compare_api.core.readiness import ReadinessState
from face_compare_api.main import create_app
from face_compare_api.utils.image import decode_image


class FakeBackend:
    """Canned recognition backend that records what it was given."""

    def __init__(self):
        self.loaded = False
        self.compare_calls = []
        self.detect_calls = []
        self.error = None
        # Read bytes with OpenCV the way the dlib engine does
        self.decode_images = False
        self.compare_result = {
            'success': True,
            'match': False,
            'distance': 0.6234,
            'similarity': 37.66,
            'threshold': 0.5,
            'confidence': 'low',
            'processingTimeMs': 1234
        }
        self.detect_result = {'faceFound': True, 'processingTimeMs': 456}

    def load(self):
        self.loaded = True

    def compare(self, reference, probe):
        self.compare_calls.append((reference, probe))
        if self.error is not None:
            raise self.error
        return self.compare_result

    def detect(self, image):
        self.detect_calls.append(image)
        if self.error is not None:
            raise self.error
        if self.decode_images:
            decode_image(image)
        return self.detect_result


class FakeFetcher:
    """Returns fixed bytes for any URL."""

    def __init__(self, payload=b'reference-image'):
        self.payload = payload
        self.urls = []
        self.error = None

    async def fetch(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def settings():
    return Settings(_env_file=None, greeting="Hello from tests", log_format="text")


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def readiness():
    return ReadinessState(ready=True)


@pytest.fixture
def app(settings, backend, fetcher, readiness):
    return create_app(settings, backend=backend, fetcher=fetcher, readiness=readiness)


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def loading_client(settings, backend, fetcher):
    """Client for an app whose models have not loaded yet."""
    app = create_app(
        settings, backend=backend, fetcher=fetcher, readiness=ReadinessState(),
    )
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
