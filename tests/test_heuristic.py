#!/usr/bin/env python3
"""
Unit tests for the heuristic transition analyzer.
"""

import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shared.drift_analyzer.heuristic import (
    FRAMING_SHIFT_ELEMENT,
    heuristic_transition,
    summarize_transition,
)
from fakes import HISTORY, SPEC_V1, SPEC_V2, make_version


def test_example_transition():
    """Timeline weakens and compliance appears, both high."""
    v1, v2 = make_version(1, SPEC_V1), make_version(2, SPEC_V2)
    outcome = heuristic_transition(v1, v2)

    assert [(d.decision_axis, d.type, d.significance) for d in outcome.drifts] == [
        ("timeline", "weakened", "high"),
        ("compliance", "appeared", "high"),
    ]
    assert outcome.model_failed is True
    assert all(d.from_version == "V1" and d.to_version == "V2" for d in outcome.drifts)

    summary = outcome.transition_summary
    assert summary.summary == "launch timeline certainty weakened (high)."
    assert summary.primary_owner == "Jon"
    assert summary.no_material_drift is False


def test_identical_content_yields_framing_shift():
    v1, v2 = make_version(1, SPEC_V1), make_version(2, SPEC_V1)
    outcome = heuristic_transition(v1, v2)

    assert len(outcome.drifts) == 1
    drift = outcome.drifts[0]
    assert drift.element == FRAMING_SHIFT_ELEMENT
    assert drift.type == "shifted"
    assert drift.decision_axis == "risk"
    assert drift.significance == "medium"
    assert outcome.transition_summary.no_material_drift is True


def test_deterministic_and_never_empty():
    versions = [make_version(i, c) for i, c in enumerate(HISTORY, 1)]
    for before, after in zip(versions, versions[1:]):
        first = heuristic_transition(before, after)
        second = heuristic_transition(before, after)
        assert first == second
        assert len(first.drifts) >= 1
        assert first.transition_summary.from_version == before.version
        assert first.transition_summary.to_version == after.version


def test_geography_drift_direction():
    v1 = make_version(1, "Pilot in Japan and Italy, Europe later this year.")
    v2 = make_version(2, "Pilot in Japan only, with the rest deferred for now.")
    outcome = heuristic_transition(v1, v2)

    geography = [d for d in outcome.drifts if d.element == "market coverage commitment"]
    assert len(geography) == 1
    assert geography[0].type == "weakened"


def test_summary_prefers_earliest_on_ties():
    v1, v2 = make_version(1, SPEC_V1), make_version(2, SPEC_V2)
    outcome = heuristic_transition(v1, v2)
    reversed_summary = summarize_transition(v1, v2, list(reversed(outcome.drifts)), False)
    assert reversed_summary.summary == "legal and compliance constraints appeared (high)."


def test_owner_falls_back_to_role_then_unknown():
    v1 = make_version(1, SPEC_V1)
    anonymous = v1.model_copy(update={"version": "V2", "author_name": None, "author_role": None})
    with_role = v1.model_copy(update={"version": "V2", "author_name": None})

    assert summarize_transition(v1, with_role, [], True).primary_owner == "PM"
    assert summarize_transition(v1, anonymous, [], True).primary_owner == "Unknown"
    assert summarize_transition(v1, anonymous, [], True).summary == "No material drift detected."


def test_added_legal_gate_is_compliance_drift():
    v1 = make_version(1, "We will ship the planner by Q2 for all users.")
    v2 = make_version(2, "We will ship the planner by Q2 for all users, never without legal approval.")
    outcome = heuristic_transition(v1, v2)

    compliance = [d for d in outcome.drifts if d.decision_axis == "compliance"]
    assert [(d.type, d.significance) for d in compliance] == [("appeared", "high")]
    assert outcome.transition_summary.no_material_drift is False


def test_framing_shift_is_logged(caplog):
    v1, v2 = make_version(1, SPEC_V1), make_version(2, SPEC_V1)
    with caplog.at_level(logging.DEBUG, logger="agents.heuristic"):
        heuristic_transition(v1, v2)
    assert any("V1 -> V2" in r.getMessage() for r in caplog.records if r.name == "agents.heuristic")
