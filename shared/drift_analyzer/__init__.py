"""
Drift Analyzer Module
Deterministic, fully local pieces of the semantic drift pipeline:
signal extraction, heuristic transition analysis, drift enrichment and
whole-document aggregation.
"""

from .signals import (
    Signals,
    extract_signals,
    build_intent,
    sample_evidence,
)
from .enrichment import (
    SIGNIFICANCE_WEIGHTS,
    significance_weight,
    enrich_drift,
    reindex_drifts,
)
from .heuristic import (
    FRAMING_SHIFT_ELEMENT,
    heuristic_transition,
    summarize_transition,
)
from .aggregate import (
    aggregate_analysis,
    compute_drift_score,
    find_inflection_point,
    transition_key,
)

__all__ = [
    'Signals',
    'extract_signals',
    'build_intent',
    'sample_evidence',
    'SIGNIFICANCE_WEIGHTS',
    'significance_weight',
    'enrich_drift',
    'reindex_drifts',
    'FRAMING_SHIFT_ELEMENT',
    'heuristic_transition',
    'summarize_transition',
    'aggregate_analysis',
    'compute_drift_score',
    'find_inflection_point',
    'transition_key',
]
