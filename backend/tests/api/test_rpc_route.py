"""Batched RPC Endpoint: POST /api/rpc and GET /api/rpc.

Tests cover:
    - Results are positionally aligned with the calls
    - One failing entry does not affect the others
    - Each entry sees the request's credential
    - A malformed entry fails only itself; a non-array body or an oversized
      batch is rejected whole with 400
    - GET lists procedures
"""

from tests.fakes import bearer


async def test_batch_results_aligned(http):
    res = await http.post("/api/rpc", headers=bearer("user-token"), json=[
        {"procedure": "todoCategory.create", "kind": "mutation", "input": {"name": "Work"}},
        {"procedure": "todoCategory.create", "kind": "mutation", "input": {"name": "Work"}},
        {"procedure": "todoCategory.list", "kind": "query"},
    ])
    assert res.status_code == 200
    first, second, third = res.json()
    assert first["ok"] and first["result"]["name"] == "Work"
    assert second == {
        "ok": False,
        "error": {
            "code": "CONFLICT",
            "message": "Category 'Work' already exists",
            "category": "conflict",
            "http_status": 409,
        },
    }
    assert third["ok"] and [c["name"] for c in third["result"]] == ["Work"]


async def test_failing_entry_isolated(http):
    res = await http.post("/api/rpc", json=[
        {"procedure": "feed.getUserFeeds", "kind": "query"},
        {"procedure": "feed.getPublicFeeds", "kind": "query"},
        {"procedure": "feed.unknown", "kind": "query"},
    ])
    unauthenticated, public, missing = res.json()
    assert unauthenticated["error"]["code"] == "UNAUTHORIZED"
    assert public == {"ok": True, "result": []}
    assert missing["error"]["code"] == "PROCEDURE_NOT_FOUND"
    assert missing["error"]["path"] == "feed.unknown"


async def test_validation_error_details(http):
    res = await http.post("/api/rpc", headers=bearer("user-token"), json=[
        {"procedure": "todoCategory.create", "kind": "mutation",
         "input": {"name": "Work", "color": "blue"}},
    ])
    error = res.json()[0]["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert [d["field"] for d in error["details"]] == ["color"]


async def test_cookie_session(http):
    res = await http.post(
        "/api/rpc",
        headers={"cookie": "scrapshelf.session-token=admin-token"},
        json=[{"procedure": "feed.refreshAll", "kind": "mutation"}],
    )
    assert res.json()[0]["ok"] is True


async def test_empty_batch(http):
    res = await http.post("/api/rpc", json=[])
    assert res.status_code == 200
    assert res.json() == []


async def test_malformed_entry_fails_only_itself(http):
    res = await http.post("/api/rpc", json=[
        {"procedure": "feed.getPublicFeeds", "kind": "read"},
        {"procedure": "feed.getPublicFeeds", "kind": "query"},
        "not an envelope",
        {"procedure": "", "kind": "query"},
    ])
    assert res.status_code == 200
    bad_kind, ok, not_object, empty_name = res.json()
    assert bad_kind["error"]["code"] == "VALIDATION_ERROR"
    assert [d["field"] for d in bad_kind["error"]["details"]] == ["kind"]
    assert ok == {"ok": True, "result": []}
    assert not_object["error"]["code"] == "VALIDATION_ERROR"
    assert empty_name["error"]["code"] == "PROCEDURE_NOT_FOUND"


async def test_non_array_body_rejected(http):
    res = await http.post("/api/rpc", json={"procedure": "feed.getPublicFeeds", "kind": "query"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_oversized_batch_rejected(http):
    calls = [{"procedure": "feed.getPublicFeeds", "kind": "query"}] * 51
    res = await http.post("/api/rpc", json=calls)
    assert res.status_code == 400
    assert res.json()["error"]["details"][0]["field"] == "body"


async def test_list_procedures(http):
    res = await http.get("/api/rpc")
    described = {p["procedure"]: p["kind"] for p in res.json()}
    assert described["feed.refreshAll"] == "mutation"
    assert described["scrapBook.getById"] == "query"
    assert len(described) == 13
