#!/usr/bin/env python3
"""
Unit tests for the whole-document aggregate.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shared.drift_analyzer.aggregate import (
    aggregate_analysis,
    compute_drift_score,
    find_inflection_point,
    headline_for_score,
    owner_line,
    top_decision_axis,
)
from shared.drift_analyzer.enrichment import enrich_drift
from shared.drift_analyzer.heuristic import summarize_transition
from fakes import drift_entry, make_version


def _drift(from_version, to_version, significance="medium", axis="scope"):
    fields = drift_entry(significance=significance, decision_axis=axis)
    fields.update(from_version=from_version, to_version=to_version)
    return enrich_drift(fields)


def _versions(count):
    return [make_version(i, f"Version {i} of the rollout plan text.") for i in range(1, count + 1)]


def _summaries(versions):
    return [summarize_transition(a, b, [], True) for a, b in zip(versions, versions[1:])]


def test_score_floor_and_saturation():
    assert compute_drift_score([]) == 25
    assert compute_drift_score([_drift("V1", "V2", "high")] * 2 + [_drift("V1", "V2", "low")] * 2) == 25 + 28 + 8
    assert compute_drift_score([_drift("V1", "V2", "high")] * 10) == 100


def test_score_is_monotone():
    drifts = []
    previous = compute_drift_score(drifts)
    for significance in ["low", "medium", "high", "low", "high"]:
        drifts.append(_drift("V1", "V2", significance))
        score = compute_drift_score(drifts)
        assert 25 <= score <= 100
        assert score >= previous
        previous = score


def test_inflection_point_prefers_earliest_on_ties():
    versions = _versions(4)
    drifts = [_drift("V2", "V3", "high"), _drift("V3", "V4", "medium"), _drift("V3", "V4", "low")]
    assert find_inflection_point(drifts, _summaries(versions), versions) == "V2 -> V3"


def test_inflection_point_without_drifts():
    versions = _versions(3)
    assert find_inflection_point([], _summaries(versions), versions) == "V1 -> V2"
    assert find_inflection_point([], [], versions) == "V1 -> V2"


def test_headline_thresholds():
    assert headline_for_score(70) == "Major decision-level shifts occurred across revisions."
    assert headline_for_score(40) == "Meaningful drift is present in commitments and operating posture."
    assert headline_for_score(39) == "Document meaning is mostly stable with targeted adjustments."


def test_top_axis_and_owners():
    drifts = [_drift("V1", "V2", "medium", "timeline"), _drift("V1", "V2", "medium", "compliance")]
    assert top_decision_axis(drifts) == "timeline"
    assert top_decision_axis(drifts + [_drift("V1", "V2", "low", "compliance")]) == "compliance"
    assert top_decision_axis([]) == "scope"

    versions = _versions(3)
    assert owner_line(versions) == "Maya and Jon"
    assert owner_line(versions[:1]) == "Maya"
    assert owner_line([v.model_copy(update={"author_name": None}) for v in versions]) == "document owner"


def test_aggregate_texts():
    versions = _versions(2)
    drifts = [_drift("V1", "V2", "high", "compliance")]
    aggregate = aggregate_analysis("contract", drifts, _summaries(versions), versions)

    assert aggregate.drift_score == 25 + 14 + 2
    assert aggregate.inflection_point == "V1 -> V2"
    assert aggregate.narrative.startswith("In the Contract context, the strongest semantic movement is on compliance.")
    assert "The largest turning point is V1 -> V2" in aggregate.narrative
    assert aggregate.recommended_action.startswith("Schedule a decision review between Maya and Jon to reconcile compliance-related drifts")
