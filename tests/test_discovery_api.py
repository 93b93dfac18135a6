"""Tests for the hypothesis and archetype write endpoints."""

from datetime import datetime, timedelta, timezone

import pytest


@pytest.fixture
def seeded(fake_db):
    fake_db.seed("focus_areas", {"id": "fa-1", "title": "Faster claims", "status": "active"})
    fake_db.seed(
        "hypotheses",
        {
            "id": "hyp-1",
            "belief": "Clinic owners do their own billing",
            "test": "Ask 10 owners",
            "status": "active",
            "focus_area_id": "fa-1",
            "evidence": [],
        },
    )
    fake_db.seed(
        "customer_archetypes",
        {
            "id": "arch-1",
            "name": "Clinic Owner",
            "status": "active",
            "interview_target": 4,
            "specific_pain_points": [
                {"id": "hp-1", "content": "Billing takes a day", "status": "validated"},
                {"id": "hp-2", "content": "Claims get rejected", "status": "hypothesis"},
            ],
            "confidence_score": 99,
        },
    )
    return fake_db


class TestHypothesisStatus:
    def test_validate_logs_decision(self, client, login, seeded):
        response = client.post(
            "/v1/hypotheses/hyp-1/status",
            json={"status": "validated", "result": "9 of 10 do"},
            headers=login(),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "validated"
        decision = seeded.rows("decisions")[0]
        assert body["decision_id"] == decision["id"]
        assert decision["owner"] == "Jordan Lee"
        assert decision["created_by"] == "user-1"
        assert decision["related_hypothesis_ids"] == ["hyp-1"]
        assert "**Related Focus Area:** Faster claims" in decision["context"]

    def test_decision_failure_keeps_status(self, client, login, seeded):
        seeded.fail("decisions", "insert")

        response = client.post("/v1/hypotheses/hyp-1/status", json={"status": "invalidated"}, headers=login())

        assert response.status_code == 500
        assert response.json()["message"].startswith("Hypothesis status updated but decision generation failed")
        assert seeded.rows("hypotheses")[0]["status"] == "invalidated"

    def test_unknown_status_value(self, client, login, seeded):
        response = client.post("/v1/hypotheses/hyp-1/status", json={"status": "maybe"}, headers=login())

        assert response.status_code == 400
        assert response.json() == {"kind": "invalid_argument", "message": "Invalid value for status"}

    def test_unknown_hypothesis(self, client, login, seeded):
        response = client.post("/v1/hypotheses/nope/status", json={"status": "parked"}, headers=login())

        assert response.status_code == 400
        assert response.json()["message"] == "Hypothesis not found"

    def test_leadership_cannot_change_status(self, client, login, seeded):
        response = client.post("/v1/hypotheses/hyp-1/status", json={"status": "parked"}, headers=login("leadership"))

        assert response.status_code == 403
        assert seeded.rows("hypotheses")[0]["status"] == "active"


class TestEvidence:
    def test_add_then_remove(self, client, login, seeded):
        headers = login()

        added = client.post(
            "/v1/hypotheses/hyp-1/evidence",
            json={"type": "interview", "description": "Owner confirmed", "strength": "strong"},
            headers=headers,
        )
        assert added.status_code == 200
        assert added.json() == {
            "hypothesis_id": "hyp-1",
            "evidence_count": 1,
            "overall_evidence_strength": "strong",
        }

        evidence_id = seeded.rows("hypotheses")[0]["evidence"][0]["id"]
        removed = client.delete(f"/v1/hypotheses/hyp-1/evidence/{evidence_id}", headers=headers)

        assert removed.status_code == 200
        assert removed.json()["evidence_count"] == 0
        assert removed.json()["overall_evidence_strength"] == "weak"

    def test_remove_unknown_evidence(self, client, login, seeded):
        response = client.delete("/v1/hypotheses/hyp-1/evidence/ev-missing", headers=login())

        assert response.status_code == 400
        assert response.json()["message"] == "Evidence not found"


class TestArchetypeUpdate:
    def test_patch_recomputes_scores(self, client, login, seeded):
        response = client.patch(
            "/v1/archetypes/arch-1",
            json={"problem_statement": "They want a seamless billing flow", "confidence_score": 5},
            headers=login(),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["confidence_score"] == 50
        assert body["bs_flags"] == ["seamless"]
        assert body["updated_fields"] == ["bs_flags", "confidence_score", "problem_statement", "readiness_score"]

        row = seeded.rows("customer_archetypes")[0]
        assert row["confidence_score"] == 50
        assert row["problem_statement"] == "They want a seamless billing flow"
        assert datetime.fromisoformat(row["updated_at"]) > datetime.now(timezone.utc) - timedelta(minutes=1)

    def test_immutable_field(self, client, login, seeded):
        response = client.patch("/v1/archetypes/arch-1", json={"id": "arch-2"}, headers=login())

        assert response.status_code == 400
        assert response.json() == {"kind": "invalid_argument", "message": "id cannot be changed"}

    def test_invalid_value(self, client, login, seeded):
        response = client.patch("/v1/archetypes/arch-1", json={"status": "retired"}, headers=login())

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid value for status"

    def test_unknown_archetype(self, client, login, seeded):
        response = client.post("/v1/archetypes/missing/recompute-scores", headers=login())

        assert response.status_code == 400
        assert response.json()["message"] == "Archetype not found"

    def test_recompute_overwrites_stale_cache(self, client, login, seeded):
        response = client.post("/v1/archetypes/arch-1/recompute-scores", headers=login())

        assert response.status_code == 200
        assert response.json()["confidence_score"] == 50
        assert seeded.rows("customer_archetypes")[0]["confidence_score"] == 50
        assert "updated_at" in seeded.rows("customer_archetypes")[0]
