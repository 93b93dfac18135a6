"""Tests for the hypothesis engine: status transitions, auto-decisions, evidence."""

import pytest

from app.core.errors import Internal, InvalidArgument
from app.core.hypothesis_engine import (
    add_evidence,
    build_auto_decision,
    calculate_overall_evidence_strength,
    remove_evidence,
    update_hypothesis_status,
)
from app.core.schemas_discovery import EvidenceCreate
from app.core.schemas_workspace import (
    EvidenceStrength,
    Hypothesis,
    HypothesisEvidence,
    HypothesisStatus,
    UserProfile,
)


@pytest.fixture
def seeded(fake_db):
    fake_db.seed("focus_areas", {"id": "fa-1", "title": "Onboarding drop-off"})
    fake_db.seed(
        "hypotheses",
        {
            "id": "hyp-1",
            "belief": "Ops managers abandon setup when importing data",
            "test": "Watch five trial setups",
            "status": "active",
            "risks": ["desirable"],
            "focus_area_id": "fa-1",
            "evidence": [],
        },
    )
    return fake_db


def _evidence(*strengths: str) -> list[HypothesisEvidence]:
    return [HypothesisEvidence(id=f"e{i}", type="interview", strength=s) for i, s in enumerate(strengths)]


class TestStatusTransition:
    def test_validated_creates_proceed_decision(self, seeded):
        response = update_hypothesis_status("hyp-1", HypothesisStatus.VALIDATED, result="4 of 5 stalled")

        decisions = seeded.rows("decisions")
        assert len(decisions) == 1
        decision = decisions[0]
        assert response.decision_id == decision["id"]
        assert decision["related_hypothesis_ids"] == ["hyp-1"]
        assert decision["focus_area_id"] == "fa-1"
        assert decision["auto_generated"] is True
        assert decision["status"] == "proposed"
        assert [o["title"] for o in decision["options"]] == [
            "Proceed with implementation",
            "Gather more evidence",
        ]
        assert "**Result:** 4 of 5 stalled" in decision["context"]
        assert "**Related Focus Area:** Onboarding drop-off" in decision["context"]

        hypothesis = seeded.rows("hypotheses")[0]
        assert hypothesis["status"] == "validated"
        assert hypothesis["result"] == "4 of 5 stalled"
        assert hypothesis["validated_at"]

    def test_invalidated_creates_pivot_decision(self, seeded):
        update_hypothesis_status("hyp-1", HypothesisStatus.INVALIDATED)

        decision = seeded.rows("decisions")[0]
        assert [o["title"] for o in decision["options"]] == ["Pivot approach", "Archive and move on"]
        assert seeded.rows("hypotheses")[0]["invalidated_at"]

    def test_parked_creates_no_decision(self, seeded):
        response = update_hypothesis_status("hyp-1", HypothesisStatus.PARKED)

        assert response.decision_id is None
        assert seeded.rows("decisions") == []
        assert seeded.rows("hypotheses")[0]["status"] == "parked"

    def test_suppressed_auto_generation(self, seeded):
        update_hypothesis_status("hyp-1", HypothesisStatus.VALIDATED, auto_generate_decision=False)
        assert seeded.rows("decisions") == []

    def test_decision_failure_is_reported_after_status_commit(self, seeded):
        seeded.fail("decisions", "insert")

        with pytest.raises(Internal) as exc_info:
            update_hypothesis_status("hyp-1", HypothesisStatus.VALIDATED)

        assert exc_info.value.message.startswith("Hypothesis status updated but decision generation failed")
        assert seeded.rows("hypotheses")[0]["status"] == "validated"

    def test_status_write_failure_creates_no_decision(self, seeded):
        seeded.fail("hypotheses", "update")

        with pytest.raises(Internal):
            update_hypothesis_status("hyp-1", HypothesisStatus.VALIDATED)
        assert seeded.rows("decisions") == []

    def test_unknown_hypothesis(self, fake_db):
        with pytest.raises(InvalidArgument) as exc_info:
            update_hypothesis_status("missing", HypothesisStatus.VALIDATED)
        assert exc_info.value.field == "hypothesis_id"

    def test_actor_becomes_owner(self, seeded):
        actor = UserProfile(id="user-9", display_name="Jordan Lee", role="cpo")
        update_hypothesis_status("hyp-1", HypothesisStatus.VALIDATED, actor=actor)

        decision = seeded.rows("decisions")[0]
        assert decision["owner"] == "Jordan Lee"
        assert decision["created_by"] == "user-9"


class TestBuildAutoDecision:
    def test_long_belief_is_truncated_in_title(self):
        hypothesis = Hypothesis(id="h", belief="x" * 80)
        decision = build_auto_decision(hypothesis, HypothesisStatus.VALIDATED)
        assert decision["title"] == "[Auto] Hypothesis Validated: " + "x" * 60 + "..."

    def test_options_get_distinct_ids(self):
        decision = build_auto_decision(Hypothesis(id="h", belief="b"), HypothesisStatus.INVALIDATED)
        ids = [o["id"] for o in decision["options"]]
        assert len(set(ids)) == 2
        assert all(o["selected"] is False for o in decision["options"])

    def test_unresolved_status_has_no_template(self):
        with pytest.raises(ValueError):
            build_auto_decision(Hypothesis(id="h"), HypothesisStatus.ACTIVE)


class TestEvidenceStrength:
    def test_no_evidence_is_weak(self):
        assert calculate_overall_evidence_strength([]) == EvidenceStrength.WEAK

    def test_single_strong(self):
        assert calculate_overall_evidence_strength(_evidence("strong")) == EvidenceStrength.STRONG

    def test_two_weak_stay_weak(self):
        assert calculate_overall_evidence_strength(_evidence("weak", "weak")) == EvidenceStrength.WEAK

    def test_mixed_is_moderate(self):
        assert calculate_overall_evidence_strength(_evidence("weak", "strong")) == EvidenceStrength.MODERATE

    def test_quantity_bonus_is_capped(self):
        assert calculate_overall_evidence_strength(_evidence(*["moderate"] * 5)) == EvidenceStrength.STRONG
        assert calculate_overall_evidence_strength(_evidence(*["weak"] * 5)) == EvidenceStrength.MODERATE
        assert calculate_overall_evidence_strength(_evidence(*["weak"] * 20)) == EvidenceStrength.MODERATE


class TestEvidenceWrites:
    def test_add_evidence_recomputes_strength(self, seeded):
        evidence, strength = add_evidence(
            "hyp-1",
            EvidenceCreate(type="interview", description="Saw it in 4 sessions", strength="strong"),
        )

        assert len(evidence) == 1
        assert strength == EvidenceStrength.STRONG
        row = seeded.rows("hypotheses")[0]
        assert row["overall_evidence_strength"] == "strong"
        assert row["evidence"][0]["type"] == "interview"

    def test_remove_unknown_evidence(self, seeded):
        with pytest.raises(InvalidArgument) as exc_info:
            remove_evidence("hyp-1", "nope")
        assert exc_info.value.field == "evidence_id"

    def test_remove_evidence(self, seeded):
        evidence, _ = add_evidence(
            "hyp-1",
            EvidenceCreate(type="survey", description="n=40", strength="moderate"),
        )
        remaining, strength = remove_evidence("hyp-1", evidence[0].id)
        assert remaining == []
        assert strength == EvidenceStrength.WEAK
