"""POST /compare — validation gates and backend hand-off."""

import pytest

from face_compare_api.core.backend import NoFaceDetectedError
from face_compare_api.utils.image import ImageFetchError

VALID_BODY = {
    "imageUrl": "https://example.com/image.jpg",
    "base64Image": "dGVzdA==",
}


async def test_missing_image_url_returns_400(client):
    res = await client.post("/compare", json={"base64Image": "test"})
    assert res.status_code == 400
    assert res.json()["success"] is False
    assert "Missing" in res.json()["error"]


async def test_missing_base64_image_returns_400(client):
    res = await client.post("/compare", json={"imageUrl": "https://example.com/image.jpg"})
    assert res.status_code == 400
    assert res.json()["success"] is False


async def test_empty_payload_returns_400(client):
    res = await client.post("/compare", json={})
    assert res.status_code == 400


async def test_absent_body_is_treated_as_missing_fields(client):
    res = await client.post("/compare")
    assert res.status_code == 400
    assert "Missing" in res.json()["error"]


async def test_empty_strings_count_as_missing(client):
    res = await client.post("/compare", json={"imageUrl": "", "base64Image": ""})
    assert res.status_code == 400
    assert "Missing" in res.json()["error"]


@pytest.mark.parametrize("url", [
    "ftp://example.com/image.jpg",
    "example.com/image.jpg",
    "file:///etc/passwd",
])
async def test_non_http_url_returns_400(client, fetcher, url):
    res = await client.post("/compare", json={"imageUrl": url, "base64Image": "test"})
    assert res.status_code == 400
    assert "Invalid" in res.json()["error"]
    assert fetcher.urls == []


@pytest.mark.parametrize("url", [
    "https://example.com/image.jpg",
    "http://example.com/image.jpg",
])
async def test_http_and_https_urls_are_accepted(client, url):
    res = await client.post("/compare", json={"imageUrl": url, "base64Image": "dGVzdA=="})
    assert res.status_code == 200
    assert res.json()["success"] is True


async def test_result_has_all_fields(client):
    body = (await client.post("/compare", json=VALID_BODY)).json()
    for key in ("success", "match", "distance", "similarity",
                "threshold", "confidence", "processingTimeMs"):
        assert key in body


async def test_result_values_are_in_range(client):
    body = (await client.post("/compare", json=VALID_BODY)).json()
    assert body["confidence"] in ("high", "medium", "low")
    assert isinstance(body["distance"], float)
    assert 0 <= body["similarity"] <= 100
    assert body["processingTimeMs"] >= 0


async def test_backend_receives_fetched_and_decoded_images(client, backend, fetcher):
    await client.post("/compare", json=VALID_BODY)
    assert fetcher.urls == ["https://example.com/image.jpg"]
    assert backend.compare_calls == [(b"reference-image", b"test")]


async def test_data_url_prefix_is_stripped(client, backend):
    body = dict(VALID_BODY, base64Image="data:image/png;base64,dGVzdA==")
    res = await client.post("/compare", json=body)
    assert res.status_code == 200
    assert backend.compare_calls[0][1] == b"test"


async def test_undecodable_base64_returns_400(client, backend):
    body = dict(VALID_BODY, base64Image="not base64!!")
    res = await client.post("/compare", json=body)
    assert res.status_code == 400
    assert "Invalid" in res.json()["error"]
    assert backend.compare_calls == []


async def test_unreachable_image_url_returns_400(client, fetcher):
    fetcher.error = ImageFetchError("Invalid imageUrl: server responded with 404")
    res = await client.post("/compare", json=VALID_BODY)
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid imageUrl: server responded with 404"


async def test_no_face_returns_400(client, backend):
    backend.error = NoFaceDetectedError("No face detected in reference image")
    res = await client.post("/compare", json=VALID_BODY)
    assert res.status_code == 400
    assert res.json()["error"] == "No face detected in reference image"


async def test_backend_failure_returns_500_with_message(client, backend):
    backend.error = RuntimeError("dlib exploded")
    res = await client.post("/compare", json=VALID_BODY)
    assert res.status_code == 500
    assert res.json() == {
        "success": False,
        "error": "dlib exploded",
        "message": "dlib exploded",
    }


async def test_backend_failure_without_message_names_the_exception(client, backend):
    backend.error = KeyError()
    res = await client.post("/compare", json=VALID_BODY)
    assert res.status_code == 500
    assert res.json()["error"] == "KeyError"
    assert res.json()["message"] == "KeyError"


async def test_non_string_fields_return_400(client, backend):
    res = await client.post("/compare", json={"imageUrl": 42, "base64Image": ["x"]})
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid request body"
    assert backend.compare_calls == []


async def test_non_object_body_returns_400(client):
    res = await client.post("/compare", json=["https://example.com/image.jpg"])
    assert res.status_code == 400
    assert res.json()["success"] is False


async def test_returns_503_while_models_load(loading_client, backend):
    res = await loading_client.post("/compare", json=VALID_BODY)
    assert res.status_code == 503
    assert res.json()["error"] == "Models still loading"
    assert backend.compare_calls == []


async def test_readiness_is_checked_before_input(loading_client):
    res = await loading_client.post("/compare", json={})
    assert res.status_code == 503
