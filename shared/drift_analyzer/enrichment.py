"""Derived drift fields, filled uniformly for heuristic and oracle drifts."""

from __future__ import annotations
from typing import Any, Dict, Iterable, List

from ..models import DriftItem


SIGNIFICANCE_WEIGHTS = {"high": 3, "medium": 2, "low": 1}
_CONFIDENCE = {"high": 0.82, "medium": 0.68, "low": 0.55}


def significance_weight(significance: str) -> int:
    return SIGNIFICANCE_WEIGHTS.get(significance, 1)


def significance_to_confidence(significance: str) -> float:
    return _CONFIDENCE.get(significance, 0.55)


def infer_reversibility(axis: str) -> str:
    if axis == "ownership":
        return "easy"
    if axis in ("compliance", "obligation"):
        return "hard"
    return "medium"


def infer_blast_radius(axis: str) -> str:
    if axis in ("compliance", "economics", "obligation"):
        return "external"
    if axis in ("timeline", "scope", "ownership"):
        return "org"
    return "team"


def to_strength_delta(drift_type: str, significance: str) -> int:
    magnitude = 2 if significance == "high" else 1
    if drift_type in ("strengthened", "appeared"):
        return magnitude
    if drift_type in ("weakened", "disappeared"):
        return -magnitude
    return 0


def enrich_drift(fields: Dict[str, Any]) -> DriftItem:
    """
    Build a complete DriftItem from a partial field mapping.

    Values already present (not None) are kept; the rest are derived from
    type, significance and decision axis.
    """
    axis = fields.get("decision_axis") or "scope"
    significance = fields["significance"]

    def pick(name: str, default: Any) -> Any:
        value = fields.get(name)
        return default if value is None else value

    return DriftItem(
        id=fields.get("id") or "tmp",
        element=fields["element"],
        type=fields["type"],
        decision_axis=axis,
        strength_delta=pick("strength_delta", to_strength_delta(fields["type"], significance)),
        reversibility=pick("reversibility", infer_reversibility(axis)),
        blast_radius=pick("blast_radius", infer_blast_radius(axis)),
        confidence=pick("confidence", significance_to_confidence(significance)),
        evidence_quality=pick("evidence_quality", "direct"),
        from_version=fields["from_version"],
        to_version=fields["to_version"],
        from_text=fields["from_text"],
        to_text=fields["to_text"],
        significance=significance,
        explanation=fields["explanation"],
        question_to_ask=fields["question_to_ask"],
    )


def reindex_drifts(drifts: Iterable[DriftItem]) -> List[DriftItem]:
    """Assign ids d1..dN in the given order."""
    return [drift.model_copy(update={"id": f"d{index}"}) for index, drift in enumerate(drifts, 1)]
