"""
Whole-document aggregation.

Every value here is a pure function of the full drift set, the transition
summaries and the version list. The merge engine relies on that: it never
patches an aggregate, it recomputes it.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence

from ..models import AggregateSummary, DriftItem, TransitionSummary, Version
from ..templates import get_template_label
from .enrichment import significance_weight


SCORE_FLOOR = 25
HIGH_POINTS = 14
MEDIUM_POINTS = 8
PER_DRIFT_POINTS = 2
MAJOR_DRIFT_THRESHOLD = 70
MEANINGFUL_DRIFT_THRESHOLD = 40


def transition_key(from_version: str, to_version: str) -> str:
    return f"{from_version} -> {to_version}"


def compute_drift_score(drifts: Sequence[DriftItem]) -> int:
    """
    Saturating score: min(100, 25 + 14*high + 8*medium + 2*all).

    The floor of 25 applies even when there are no drifts.
    """
    high = sum(1 for d in drifts if d.significance == "high")
    medium = sum(1 for d in drifts if d.significance == "medium")
    return min(100, SCORE_FLOOR + HIGH_POINTS * high + MEDIUM_POINTS * medium + PER_DRIFT_POINTS * len(drifts))


def transition_weights(drifts: Sequence[DriftItem],
                       transitions: Sequence[TransitionSummary]) -> List[tuple]:
    """(key, weight) per transition, in version order."""
    weights: Dict[tuple, int] = {}
    for drift in drifts:
        pair = (drift.from_version, drift.to_version)
        weights[pair] = weights.get(pair, 0) + significance_weight(drift.significance)
    return [
        (transition_key(t.from_version, t.to_version), weights.get((t.from_version, t.to_version), 0))
        for t in transitions
    ]


def find_inflection_point(drifts: Sequence[DriftItem],
                          transitions: Sequence[TransitionSummary],
                          versions: Sequence[Version]) -> str:
    """Heaviest transition; ties go to the earliest in version order."""
    best: Optional[tuple] = None
    for key, weight in transition_weights(drifts, transitions):
        if best is None or weight > best[1]:
            best = (key, weight)
    if best is not None:
        return best[0]
    if len(versions) >= 2:
        return transition_key(versions[0].version, versions[1].version)
    return ""


def top_decision_axis(drifts: Sequence[DriftItem]) -> str:
    totals: Dict[str, int] = {}
    for drift in drifts:
        axis = drift.decision_axis or "scope"
        totals[axis] = totals.get(axis, 0) + significance_weight(drift.significance)
    if not totals:
        return "scope"
    # max() keeps the first axis seen on ties
    return max(totals.items(), key=lambda item: item[1])[0]


def headline_for_score(drift_score: int) -> str:
    if drift_score >= MAJOR_DRIFT_THRESHOLD:
        return "Major decision-level shifts occurred across revisions."
    if drift_score >= MEANINGFUL_DRIFT_THRESHOLD:
        return "Meaningful drift is present in commitments and operating posture."
    return "Document meaning is mostly stable with targeted adjustments."


def owner_line(versions: Sequence[Version]) -> str:
    owners: List[str] = []
    for version in versions:
        if version.author_name and version.author_name not in owners:
            owners.append(version.author_name)
    if len(owners) >= 2:
        return f"{owners[0]} and {owners[-1]}"
    return owners[0] if owners else "document owner"


def aggregate_analysis(template: str,
                       drifts: Sequence[DriftItem],
                       transitions: Sequence[TransitionSummary],
                       versions: Sequence[Version]) -> AggregateSummary:
    """Deterministic score, inflection point and fallback narrative."""
    inflection_point = find_inflection_point(drifts, transitions, versions)
    drift_score = compute_drift_score(drifts)
    axis = top_decision_axis(drifts)

    narrative = (
        f"In the {get_template_label(template)} context, the strongest semantic movement is on {axis}. "
        f"The largest turning point is {inflection_point}, where commitment force and risk posture changed most. "
        "Cross-owner edits indicate alignment work is still required before downstream execution "
        "decisions are considered stable."
    )
    recommended_action = (
        f"Schedule a decision review between {owner_line(versions)} to reconcile {axis}-related drifts "
        "and confirm which commitments are binding for the next execution phase."
    )

    return AggregateSummary(
        inflection_point=inflection_point,
        drift_score=drift_score,
        headline=headline_for_score(drift_score),
        narrative=narrative,
        recommended_action=recommended_action,
    )
