"""Fallback for unmatched routes and methods."""


async def test_unknown_get_route_returns_404(client):
    res = await client.get("/unknown")
    assert res.status_code == 404
    assert res.json() == {
        "message": "url not found",
        "error": "Not Found",
        "path": "/unknown",
    }


async def test_unknown_post_route_returns_404(client):
    res = await client.post("/nonexistent", json={"test": "data"})
    assert res.status_code == 404
    assert res.json()["path"] == "/nonexistent"


async def test_wrong_method_on_known_path_returns_404(client):
    res = await client.get("/compare")
    assert res.status_code == 404
    assert res.json()["error"] == "Not Found"


async def test_path_keeps_query_string(client):
    res = await client.get("/unknown", params={"a": "1"})
    assert res.json()["path"] == "/unknown?a=1"


async def test_unknown_route_while_loading_is_still_404(loading_client):
    res = await loading_client.delete("/detect")
    assert res.status_code == 404
