"""HTTP tests for the game and settings endpoints."""

import pytest
from fastapi.testclient import TestClient

from dungeon_master.app import create_app
from dungeon_master.llm import EchoLLM, LLMError

HERE = "[[coordinates[x: 0, y: 0]]]"
ARIN = {"name": "Arin", "race": "Human", "class": "Fighter"}


@pytest.fixture
def make_client(tmp_path, stub_llm):
    def _make(responses: dict, models: list[str] | None = None) -> TestClient:
        llm = stub_llm(responses, models=models)
        client = TestClient(create_app(saves_dir=tmp_path / "saves", llm=llm))
        client.llm = llm
        return client
    return _make


def _start(client: TestClient, **extra) -> str:
    resp = client.post("/api/start", json={"character": ARIN, **extra})
    assert resp.status_code == 200, resp.text
    return resp.json()["sessionId"]


def test_health(make_client) -> None:
    assert make_client({}).get("/api/health").json() == {"status": "ok"}


def test_models(make_client) -> None:
    client = make_client({}, models=["llama3:latest", "mistral:7b"])
    assert client.get("/api/models").json() == {"models": ["llama3:latest", "mistral:7b"]}


def test_start_returns_opening_scene(make_client) -> None:
    client = make_client({"intro": [f"You arrive at Emberfall. {HERE}"]})
    resp = client.post("/api/start", json={"character": ARIN})
    data = resp.json()
    assert resp.status_code == 200
    assert data["message"] == "You arrive at Emberfall."

    state = client.get(f"/api/state/{data['sessionId']}").json()
    assert state["model"] == "llama3:latest"
    assert state["character"]["hp"] == 10
    assert state["character"]["maxHp"] == 10
    assert [m["role"] for m in state["history"]] == ["system", "assistant"]
    assert state["currentPosition"] == {"x": 0, "y": 0}


def test_start_with_explicit_model_and_language(make_client) -> None:
    client = make_client({"intro": ["Bienvenue."]})
    session_id = _start(client, model="mistral", language="fr")
    state = client.get(f"/api/state/{session_id}").json()
    assert state["model"] == "mistral"
    assert state["language"] == "fr"


def test_start_upstream_failure_is_502(make_client) -> None:
    client = make_client({"intro": [LLMError("Cannot connect")]})
    resp = client.post("/api/start", json={"character": ARIN})
    assert resp.status_code == 502
    assert resp.json()["detail"].startswith("The spirits are silent.")


def test_start_rejects_missing_character_name(make_client) -> None:
    resp = make_client({}).post("/api/start", json={"character": {"class": "Fighter"}})
    assert resp.status_code == 422


def test_action_then_continue(make_client) -> None:
    client = make_client({
        "intro": [f"You stand in a muddy yard. {HERE}"],
        "narrator": [
            f"You swing your sword. [[ROLL: 1d20+2]] {HERE}",
            f"The dummy splits in two. {HERE}",
        ],
    })
    session_id = _start(client)

    step = client.post("/api/action", json={"sessionId": session_id, "action": "I attack the dummy"}).json()
    assert step["status"] == "continue"
    assert step["message"] == "You swing your sword. [[ROLL: 1d20+2]]"
    assert step["rolls"][0]["expression"] == "1d20+2"

    step = client.post("/api/continue", json={"sessionId": session_id}).json()
    assert step["status"] == "complete"
    assert step["message"] == "The dummy splits in two."

    history = client.get(f"/api/state/{session_id}").json()["history"]
    assert [m["role"] for m in history] == ["system", "assistant", "user", "assistant", "system", "assistant"]
    client.llm.assert_exhausted()


def test_action_upstream_failure_keeps_history(make_client) -> None:
    client = make_client({
        "intro": [f"Le vent souffle. {HERE}"],
        "narrator": [LLMError("LLM backend timed out after 120s")],
    })
    session_id = _start(client, language="fr")

    resp = client.post("/api/action", json={"sessionId": session_id, "action": "J'attends"})
    assert resp.status_code == 502
    assert resp.json()["detail"].startswith("Les esprits sont silencieux.")
    assert len(client.get(f"/api/state/{session_id}").json()["history"]) == 2


@pytest.mark.parametrize("path,body", [
    ("/api/action", {"sessionId": "missing", "action": "hello"}),
    ("/api/continue", {"sessionId": "missing"}),
    ("/api/session/model", {"sessionId": "missing", "model": "mistral"}),
])
def test_unknown_session_is_404(make_client, path: str, body: dict) -> None:
    assert make_client({}).post(path, json=body).status_code == 404


def test_state_unknown_session_is_404(make_client) -> None:
    assert make_client({}).get("/api/state/missing").status_code == 404


def test_switch_model(make_client) -> None:
    client = make_client({"intro": [f"Hello. {HERE}"], "narrator": [f"Hi. {HERE}"]})
    session_id = _start(client)

    resp = client.post("/api/session/model", json={"sessionId": session_id, "model": "mistral"})
    assert resp.json()["model"] == "mistral"

    client.post("/api/action", json={"sessionId": session_id, "action": "I wave"})
    assert client.llm.calls[-1][2] == "mistral"


def test_echo_backend_serves_start_and_models(tmp_path) -> None:
    client = TestClient(create_app(saves_dir=tmp_path / "saves", llm=EchoLLM()))
    assert client.get("/api/models").json() == {"models": ["echo"]}

    session_id = _start(client)
    assert client.get(f"/api/state/{session_id}").json()["model"] == "echo"
