"""Tests for the read-only workspace endpoints."""

import pytest

from tests.fakes.workspace_data import sample_snapshot


@pytest.fixture
def snapshot(monkeypatch):
    snapshot = sample_snapshot()
    monkeypatch.setattr("app.api.workspace.load_workspace_snapshot", lambda: snapshot)
    return snapshot


def test_related_items(client, login, snapshot):
    response = client.get("/v1/workspace/related/focus-area/fa-onboarding", headers=login())

    assert response.status_code == 200
    first = response.json()[0]
    assert first == {
        "id": "arch-ops",
        "kind": "archetype",
        "title": "Operations Manager",
        "status": "active",
        "path": "/customer-archetypes",
    }


def test_related_items_for_unknown_id_is_empty(client, login, snapshot):
    response = client.get("/v1/workspace/related/objective/gone", headers=login())

    assert response.status_code == 200
    assert response.json() == []


def test_related_items_unknown_kind(client, login, snapshot):
    response = client.get("/v1/workspace/related/spaceship/x", headers=login())

    assert response.status_code == 400
    assert response.json() == {"kind": "invalid_argument", "message": "Unknown entity kind: spaceship"}


def test_alignment_warnings_visible_to_leadership(client, login, snapshot):
    response = client.get("/v1/workspace/alignment-warnings", headers=login("leadership"))

    assert response.status_code == 200
    assert [w["message"] for w in response.json()] == [
        "1 focus area without target customers",
        "1 hypothesis not linked to customers",
        "1 objective not aligned to focus areas",
        "1 proposed decision without linked evidence",
    ]


def test_connection_counts(client, login, snapshot):
    response = client.get("/v1/workspace/connection-counts", headers=login())

    assert response.status_code == 200
    assert response.json()["focus_areas_with_archetypes"] == 1


def test_executive_metrics(client, login, snapshot):
    response = client.get("/v1/workspace/metrics", headers=login("cpo"))

    assert response.status_code == 200
    body = response.json()
    assert body["strategic_alignment_score"]["overall_score"] == 70
    assert [fa["id"] for fa in body["focus_area_metrics"]] == ["fa-onboarding", "fa-billing"]


def test_focus_area_and_archetype_metrics(client, login, snapshot):
    headers = login()

    focus_areas = client.get("/v1/workspace/focus-areas/metrics", headers=headers).json()
    archetypes = client.get("/v1/workspace/archetypes/metrics", headers=headers).json()

    assert focus_areas[0]["validation_rate"] == 50
    ops = next(a for a in archetypes if a["id"] == "arch-ops")
    assert ops["confidence_score"] == 63
    assert ops["readiness_score"] == 50


def test_requires_login(client, snapshot):
    response = client.get("/v1/workspace/metrics")

    assert response.status_code == 401


def test_snapshot_read_failure_is_internal(client, login, fake_db):
    headers = login()
    fake_db.fail("hypotheses")

    response = client.get("/v1/workspace/alignment-warnings", headers=headers)

    assert response.status_code == 500
    assert response.json()["kind"] == "internal"
    assert response.json()["message"].startswith("Failed to load workspace")


def test_loads_snapshot_from_database(client, login, fake_db):
    headers = login()
    fake_db.seed("focus_areas", {"id": "fa-1", "title": "Claims", "status": "active"})
    fake_db.seed(
        "customer_archetypes",
        {"id": "arch-1", "name": "Clinic Owner", "status": "active", "related_focus_area_ids": ["fa-1"]},
    )

    response = client.get("/v1/workspace/related/focus-area/fa-1", headers=headers)

    assert response.status_code == 200
    assert [(item["kind"], item["id"]) for item in response.json()] == [("archetype", "arch-1")]
