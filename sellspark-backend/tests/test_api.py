"""HTTP surface tests against an in-memory store."""

import pytest
from fastapi.testclient import TestClient

from sellspark.main import create_app

from fakes import FakeCompletionClient

LEADS = "Leads go cold"


@pytest.fixture
def client(make_service, settings):
    service = make_service(FakeCompletionClient(pain={LEADS: {"lead_flow": 7, "follow_up": 7}}))
    return TestClient(create_app(service=service, settings=settings))


def _start(client, **params):
    response = client.post("/consultation/start", params=params)
    assert response.status_code == 200
    return response.json()


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_start_returns_opening_question(client):
    body = _start(client, business_context="Fitness coaching", business_name="Peak")

    assert body["status"] == "CREATED"
    assert body["step"] == 0
    assert "Peak" in body["pending_question"]["text"]
    assert len(body["pending_question"]["suggested_replies"]) == 4


def test_respond_advances_step(client):
    session_id = _start(client)["session_id"]

    response = client.post(f"/consultation/{session_id}/respond", params={"answer": "Jane"})

    assert response.status_code == 200
    body = response.json()
    assert body["step"] == 1
    assert body["is_complete"] is False
    assert body["next_question"].startswith("Nice to meet you, Jane!")


def test_empty_answer_is_bad_request(client):
    session_id = _start(client)["session_id"]
    response = client.post(f"/consultation/{session_id}/respond", params={"answer": "  "})
    assert response.status_code == 400


def test_unknown_session_is_not_found(client):
    assert client.get("/consultation/nope").status_code == 404
    assert client.post("/consultation/nope/respond", params={"answer": "hi"}).status_code == 404


def test_results_before_completion_conflict(client):
    session_id = _start(client)["session_id"]
    assert client.get(f"/consultation/{session_id}/results").status_code == 409


def test_full_consultation_flow(client):
    session_id = _start(client, business_context="Online fitness coaching")["session_id"]

    answers = ["Jane", "Automate my follow-ups", LEADS, LEADS]
    bodies = [
        client.post(f"/consultation/{session_id}/respond", params={"answer": a}).json()
        for a in answers
    ]

    assert bodies[2]["persona"]["id"] == "solo_scaling_sally"
    assert bodies[-1]["is_complete"] is True
    assert bodies[-1]["pain_matrix"]["lead_flow"] == 10

    results = client.get(f"/consultation/{session_id}/results")
    assert results.status_code == 200
    report = results.json()
    assert report["persona"]["id"] == "solo_scaling_sally"
    assert {m["recipe_id"] for m in report["roi_metrics"]} == {"smart_lead_scoring", "automated_follow_up"}
    assert len(report["narratives"]) == 2

    again = client.post(f"/consultation/{session_id}/respond", params={"answer": "more"})
    assert again.status_code == 400


def test_reset_restarts_interview(client):
    session_id = _start(client)["session_id"]
    client.post(f"/consultation/{session_id}/respond", params={"answer": "Jane"})

    response = client.post(f"/consultation/{session_id}/reset")

    assert response.status_code == 200
    assert response.json()["step"] == 0
    assert client.get(f"/consultation/{session_id}").json()["status"] == "ACTIVE"
