import pytest
from fastapi.testclient import TestClient

from proofread.checkers import MockGrammarChecker, MockSpellingChecker, MockStyleChecker
from proofread.main import app
from proofread.services.sessions import SessionRegistry, get_session_registry
from proofread.storage import JsonDocumentStore


@pytest.fixture
def registry(settings) -> SessionRegistry:
    return SessionRegistry(
        settings,
        clients={
            "spelling": MockSpellingChecker(),
            "grammar": MockGrammarChecker(),
            "style": MockStyleChecker(),
        },
        store=JsonDocumentStore(settings.data_dir),
    )


@pytest.fixture
def client(registry, monkeypatch, tmp_path):
    monkeypatch.setenv("PROOFREAD_DATA_DIR", str(tmp_path / "startup-data"))
    app.dependency_overrides[get_session_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
        test_client.portal.call(registry.aclose)
    app.dependency_overrides.clear()


def _create(client: TestClient, content: str, **extra) -> dict:
    response = client.post("/sessions", json={"content": content, **extra})
    assert response.status_code == 201
    return response.json()


def test_read_root_returns_ok(client) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "ok"


def test_healthz_returns_ok_after_startup(client) -> None:
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.text == "ok"


def test_healthz_returns_503_without_registry() -> None:
    app.state.registry = None
    test_client = TestClient(app)

    response = test_client.get("/healthz")

    assert response.status_code == 503


def test_create_and_check_session(client) -> None:
    created = _create(client, "Teh cat sat.")
    assert created["suggestions"] == []

    response = client.post(f"/sessions/{created['session_id']}/check")

    body = response.json()
    assert response.status_code == 200
    assert [(item["text"], item["replacement"], item["kind"]) for item in body["suggestions"]] == [
        ("Teh", "The", "spelling")
    ]
    assert body["highlights"] == [{"from": 0, "to": 3, "colorTag": "red", "id": body["suggestions"][0]["id"]}]


def test_apply_suggestion_updates_content(client) -> None:
    session = _create(client, "Teh cat sat.", check=True)
    suggestion_id = session["suggestions"][0]["id"]

    response = client.post(f"/sessions/{session['session_id']}/suggestions/{suggestion_id}/apply")

    body = response.json()
    assert response.status_code == 200
    assert body["content"] == "The cat sat."
    assert body["applied"] == suggestion_id
    assert body["drifted"] is False
    assert body["suggestions"] == []


def test_apply_stale_suggestion_returns_conflict(client, registry) -> None:
    session = _create(client, "see teh cat", check=True)
    suggestion_id = session["suggestions"][0]["id"]
    registry.get(session["session_id"]).buffer.replace_range(4, 7, "the")

    response = client.post(f"/sessions/{session['session_id']}/suggestions/{suggestion_id}/apply")

    assert response.status_code == 409
    assert "no longer in the document" in response.json()["notice"]
    follow_up = client.get(f"/sessions/{session['session_id']}").json()
    assert follow_up["suggestions"] == []


def test_edit_shifts_suggestions(client) -> None:
    session = _create(client, "Hello teh world", check=True)

    response = client.post(
        f"/sessions/{session['session_id']}/edits",
        json={"start": 0, "end": 0, "text": "Oh "},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["content"] == "Oh Hello teh world"
    assert [(item["start"], item["end"]) for item in body["suggestions"]] == [(9, 12)]
    assert body["dropped"] == []


def test_edit_validation_errors(client) -> None:
    session = _create(client, "short")

    reversed_range = client.post(f"/sessions/{session['session_id']}/edits", json={"start": 3, "end": 1})
    out_of_bounds = client.post(f"/sessions/{session['session_id']}/edits", json={"start": 0, "end": 99})

    assert reversed_range.status_code == 422
    assert out_of_bounds.status_code == 422


def test_dismiss_and_clear_dismissals(client) -> None:
    session = _create(client, "Teh cat sat.", check=True)
    session_id = session["session_id"]
    suggestion_id = session["suggestions"][0]["id"]

    dismissed = client.post(f"/sessions/{session_id}/suggestions/{suggestion_id}/dismiss").json()
    rechecked = client.post(f"/sessions/{session_id}/check").json()
    cleared = client.delete(f"/sessions/{session_id}/dismissals").json()
    restored = client.post(f"/sessions/{session_id}/check").json()

    assert dismissed["suggestions"] == [] and dismissed["dismissed"] == 1
    assert rechecked["suggestions"] == []
    assert cleared["cleared"] == 1
    assert [item["text"] for item in restored["suggestions"]] == ["Teh"]


def test_unknown_session_and_suggestion_return_404(client) -> None:
    session = _create(client, "Fine text.")

    assert client.get("/sessions/missing").status_code == 404
    assert client.post("/sessions/missing/check").status_code == 404
    assert client.post(f"/sessions/{session['session_id']}/suggestions/nope/apply").status_code == 404
    assert client.post(f"/sessions/{session['session_id']}/suggestions/nope/dismiss").status_code == 404


def test_close_session(client) -> None:
    session = _create(client, "Bye.")

    assert client.delete(f"/sessions/{session['session_id']}").status_code == 204
    assert client.get(f"/sessions/{session['session_id']}").status_code == 404
    assert client.delete(f"/sessions/{session['session_id']}").status_code == 404


def test_save_and_restore_document(client, settings) -> None:
    session = _create(client, "Teh cat sat.", title="Draft", check=True)

    saved = client.post(f"/sessions/{session['session_id']}/save", json={"document_id": "draft-1"})
    restored = client.post("/sessions/restore/draft-1")

    assert saved.status_code == 200
    assert saved.json()["document_id"] == "draft-1"
    assert (settings.data_dir / "draft-1.json").exists()
    body = restored.json()
    assert restored.status_code == 201
    assert body["session_id"] != session["session_id"]
    assert body["title"] == "Draft"
    assert body["content"] == "Teh cat sat."
    assert [item["text"] for item in body["suggestions"]] == ["Teh"]


def test_restore_unknown_document_returns_404(client) -> None:
    assert client.post("/sessions/restore/never-saved").status_code == 404


def test_restore_corrupt_document_returns_422(client, settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    (settings.data_dir / "broken.json").write_text("{not json", encoding="utf-8")

    response = client.post("/sessions/restore/broken")

    assert response.status_code == 422
    assert "could not be read" in response.json()["detail"]


def test_update_debounce_intervals(client) -> None:
    session = _create(client, "Some text")

    updated = client.put(f"/sessions/{session['session_id']}/debounce", json={"intervals": {"spelling": 1.5}})
    unknown = client.put(f"/sessions/{session['session_id']}/debounce", json={"intervals": {"thesaurus": 1.0}})
    negative = client.put(f"/sessions/{session['session_id']}/debounce", json={"intervals": {"style": -1}})

    assert updated.status_code == 200
    assert updated.json()["intervals"] == {"spelling": 1.5, "grammar": 0.05, "style": 0.05}
    assert unknown.status_code == 422
    assert negative.status_code == 422
    assert client.put("/sessions/missing/debounce", json={"intervals": {"spelling": 1.0}}).status_code == 404
