#!/usr/bin/env python3
"""
HTTP surface tests using FastAPI's TestClient with a heuristic supervisor.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import main
from Agents.Supervisor.merge_engine import DocumentAnalysisCoordinator
from Agents.Supervisor.supervisor_agent import DriftAnalysisSupervisor
from fakes import HISTORY, SPEC_V1, SPEC_V2, CallableOracle, make_config, make_request


@pytest.fixture
def client(monkeypatch):
    supervisor = DriftAnalysisSupervisor(None, make_config())
    monkeypatch.setattr(main, "supervisor", supervisor)
    monkeypatch.setattr(main, "coordinator", DocumentAnalysisCoordinator(supervisor))
    return TestClient(main.app)


def _body(contents, **extra):
    return make_request(contents, **extra).model_dump(mode="json")


def test_analyze_example(client):
    response = client.post("/api/analyze", json=_body([SPEC_V1, SPEC_V2]))
    assert response.status_code == 200
    data = response.json()
    assert data["drift_score"] == 57
    assert data["inflection_point"] == "V1 -> V2"
    assert data["diagnostics"]["fallback_used"] is True


def test_analyze_transitions(client):
    response = client.post("/api/analyze/transitions", json=_body(HISTORY))
    assert response.status_code == 200
    assert len(response.json()["transition_summaries"]) == 4


def test_validation_errors(client):
    assert client.post("/api/analyze", json=_body([SPEC_V1, "short"])).status_code == 400
    assert client.post("/api/analyze", json=_body([SPEC_V1] * 11)).status_code == 400
    assert client.post("/api/analyze", json={"versions": [{"version": "V1", "content": SPEC_V1}]}).status_code == 422
    assert client.post("/api/analyze", json={**_body([SPEC_V1, SPEC_V2]), "template": "poem"}).status_code == 422


def test_terminal_failure_is_500(client, monkeypatch):
    supervisor = DriftAnalysisSupervisor(
        CallableOracle(lambda system_prompt, payload: "not json"),
        make_config(),
    )
    monkeypatch.setattr(main, "supervisor", supervisor)
    response = client.post("/api/analyze", json=_body([SPEC_V1, SPEC_V2]))
    assert response.status_code == 500
    assert "V1 -> V2" in response.json()["detail"]


def test_synthesis_requires_oracle(client):
    drifts = client.post("/api/analyze", json=_body([SPEC_V1, SPEC_V2])).json()["drifts"]
    body = {"versions": [{"version": "V1"}, {"version": "V2"}], "drifts": drifts}
    assert client.post("/api/analyze/synthesis", json=body).status_code == 503
    assert client.post("/api/analyze/synthesis", json={**body, "drifts": []}).status_code == 400


def test_document_lifecycle(client):
    assert client.get("/api/documents/doc-1/analysis").status_code == 404

    first = client.post("/api/documents/doc-1/analysis", json=_body(HISTORY[:3]))
    assert first.status_code == 200
    assert len(first.json()["versions"]) == 3

    second = client.post("/api/documents/doc-1/analysis", json=_body(HISTORY[:4]))
    assert second.status_code == 200
    assert len(second.json()["transition_summaries"]) == 3

    stored = client.get("/api/documents/doc-1/analysis")
    assert stored.json() == second.json()

    deleted = client.delete("/api/documents/doc-1/analysis")
    assert deleted.json() == {"doc_id": "doc-1", "deleted": True}
    assert client.get("/api/documents/doc-1/analysis").status_code == 404


def test_templates_info_and_health(client):
    templates = client.get("/api/templates").json()["templates"]
    assert [t["value"] for t in templates] == ["product_spec", "contract", "prd", "memo"]

    info = client.get("/api/info").json()
    assert info["oracle"]["enabled"] is False
    assert info["limits"]["max_versions"] == 10

    health = client.get("/health").json()
    assert health["status"] == "healthy"


def test_invalid_appended_version_is_400(client):
    client.post("/api/documents/doc-2/analysis", json=_body(HISTORY[:3]))
    response = client.post("/api/documents/doc-2/analysis", json=_body(HISTORY[:3] + ["too short"]))
    assert response.status_code == 400
    assert len(client.get("/api/documents/doc-2/analysis").json()["versions"]) == 3
