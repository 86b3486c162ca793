#!/usr/bin/env python3
"""
Integration tests for full analysis runs through the Supervisor Agent.
"""

import asyncio
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from Agents.Supervisor.supervisor_agent import HEURISTIC_ONLY_WARNING, DriftAnalysisSupervisor
from Agents.workers.synthesizer.prompts.synthesis_prompt import DRIFT_SYNTHESIS_PROMPT
from Agents.workers.transition_analyzer.prompts.transition_prompt import DRIFT_TRANSITION_PROMPT
from shared.concurrency import CancellationToken
from shared.exceptions import (
    InvalidRequestError,
    OracleUnavailableError,
    TransitionAnalysisError,
)
from shared.models import SynthesisRequest, SynthesisVersion
from fakes import (
    HISTORY,
    SPEC_V1,
    SPEC_V2,
    SYNTHESIS_JSON,
    CallableOracle,
    make_config,
    make_request,
    standard_responder,
    transition_json,
)


def _run(supervisor, request, **kwargs):
    return asyncio.run(supervisor.run_analysis(request, **kwargs))


# ----------------- Heuristic runs -----------------
def test_heuristic_example_run():
    """Firm Q2 -> tentative Q2 with legal review scores 57."""
    supervisor = DriftAnalysisSupervisor(None, make_config())
    result = _run(supervisor, make_request([SPEC_V1, SPEC_V2]))

    assert [d.id for d in result.drifts] == ["d1", "d2"]
    assert [d.decision_axis for d in result.drifts] == ["timeline", "compliance"]
    assert result.drift_score == 57
    assert result.headline == "Meaningful drift is present in commitments and operating posture."
    assert result.inflection_point == "V1 -> V2"
    assert [v.version for v in result.versions] == ["V1", "V2"]
    assert len(result.transition_summaries) == 1

    assert result.diagnostics.fallback_used is True
    assert result.diagnostics.transition_model_failures == 1
    assert result.diagnostics.warnings == [HEURISTIC_ONLY_WARNING]


def test_heuristic_history_properties():
    supervisor = DriftAnalysisSupervisor(None, make_config())
    result = _run(supervisor, make_request(HISTORY))

    keys = [f"{t.from_version} -> {t.to_version}" for t in result.transition_summaries]
    assert keys == ["V1 -> V2", "V2 -> V3", "V3 -> V4", "V4 -> V5"]
    assert result.inflection_point in keys
    assert [d.id for d in result.drifts] == [f"d{i}" for i in range(1, len(result.drifts) + 1)]
    assert 25 <= result.drift_score <= 100
    assert result.diagnostics.transition_model_failures == 4
    assert result.transition_summaries[-1].no_material_drift is True


def test_disabled_oracle_is_never_called():
    oracle = CallableOracle(standard_responder)
    supervisor = DriftAnalysisSupervisor(oracle, make_config(oracle_enabled=False))
    result = _run(supervisor, make_request([SPEC_V1, SPEC_V2]))

    assert oracle.calls == []
    assert supervisor.oracle_configured is False
    assert result.diagnostics.fallback_used is True


# ----------------- Oracle runs -----------------
def test_oracle_run_with_synthesis():
    oracle = CallableOracle(standard_responder)
    supervisor = DriftAnalysisSupervisor(oracle, make_config())
    result = _run(supervisor, make_request(HISTORY, title="Planner"))

    assert len(oracle.calls_for(DRIFT_TRANSITION_PROMPT)) == 4
    assert len(oracle.calls_for(DRIFT_SYNTHESIS_PROMPT)) == 1
    assert [d.id for d in result.drifts] == [f"d{i}" for i in range(1, 9)]
    assert [(d.from_version, d.to_version) for d in result.drifts[::2]] == [
        ("V1", "V2"), ("V2", "V3"), ("V3", "V4"), ("V4", "V5"),
    ]
    assert result.drift_score == 100
    assert result.inflection_point == "V1 -> V2"
    assert result.headline == "Launch commitment softened while compliance scope grew."
    assert result.diagnostics.fallback_used is False
    assert result.diagnostics.transition_model_failures == 0
    assert result.diagnostics.warnings == []


def test_skip_synthesis_keeps_aggregate_texts():
    oracle = CallableOracle(standard_responder)
    supervisor = DriftAnalysisSupervisor(oracle, make_config())
    result = _run(supervisor, make_request(HISTORY), skip_synthesis=True)

    assert oracle.calls_for(DRIFT_SYNTHESIS_PROMPT) == []
    assert result.headline == "Major decision-level shifts occurred across revisions."


def test_synthesis_failure_is_not_fatal():
    def responder(system_prompt, payload):
        if system_prompt == DRIFT_SYNTHESIS_PROMPT:
            return "I'd rather not."
        return transition_json(2)

    supervisor = DriftAnalysisSupervisor(CallableOracle(responder), make_config())
    result = _run(supervisor, make_request([SPEC_V1, SPEC_V2]))

    assert result.headline == "Meaningful drift is present in commitments and operating posture."
    assert len(result.diagnostics.warnings) == 1
    assert result.diagnostics.warnings[0].startswith("Synthesis failed")


def test_terminal_transition_failure_aborts_batch():
    def responder(system_prompt, payload):
        if '"version": "V3"' in payload and '"version": "V4"' in payload:
            return "no json today"
        return standard_responder(system_prompt, payload)

    supervisor = DriftAnalysisSupervisor(CallableOracle(responder), make_config())
    with pytest.raises(TransitionAnalysisError) as excinfo:
        _run(supervisor, make_request(HISTORY))
    assert (excinfo.value.from_version, excinfo.value.to_version) == ("V3", "V4")


def test_unavailable_oracle_falls_back_per_transition():
    def responder(system_prompt, payload):
        if system_prompt == DRIFT_TRANSITION_PROMPT and '"version": "V1"' in payload:
            return OracleUnavailableError("throttled")
        return standard_responder(system_prompt, payload)

    supervisor = DriftAnalysisSupervisor(CallableOracle(responder), make_config())
    result = _run(supervisor, make_request([SPEC_V1, SPEC_V2, HISTORY[2]]))

    diagnostics = result.diagnostics
    assert diagnostics.fallback_used is True
    assert diagnostics.transition_model_failures == 1
    assert [(e.from_version, e.to_version, e.reason) for e in diagnostics.transition_errors] == [
        ("V1", "V2", "throttled"),
    ]
    assert diagnostics.warnings == ["Heuristic analyzer used for V1 -> V2: oracle unavailable."]
    assert [d.decision_axis for d in result.drifts[:2]] == ["timeline", "compliance"]
    assert result.headline == "Launch commitment softened while compliance scope grew."


def test_unavailable_oracle_propagates_without_fallback():
    supervisor = DriftAnalysisSupervisor(
        CallableOracle(lambda system_prompt, payload: OracleUnavailableError("down")),
        make_config(fallback_on_unavailable=False),
    )
    with pytest.raises(OracleUnavailableError):
        _run(supervisor, make_request([SPEC_V1, SPEC_V2]))


# ----------------- Request handling -----------------
def test_request_limits():
    supervisor = DriftAnalysisSupervisor(None, make_config())
    with pytest.raises(InvalidRequestError):
        _run(supervisor, make_request([SPEC_V1, "too short"]))
    with pytest.raises(InvalidRequestError):
        _run(supervisor, make_request([SPEC_V1] * 11))


def test_cancelled_run_returns_none():
    token = CancellationToken()
    token.cancel()
    supervisor = DriftAnalysisSupervisor(None, make_config())
    assert _run(supervisor, make_request([SPEC_V1, SPEC_V2]), token=token) is None


def test_standalone_synthesis():
    heuristic = DriftAnalysisSupervisor(None, make_config())
    drifts = _run(heuristic, make_request([SPEC_V1, SPEC_V2])).drifts
    request = SynthesisRequest(title="Plan", versions=[SynthesisVersion(version="V1", author_name="Maya")],
                               drifts=drifts)

    with pytest.raises(OracleUnavailableError):
        asyncio.run(heuristic.synthesize(request))

    oracle = CallableOracle(lambda system_prompt, payload: SYNTHESIS_JSON)
    result = asyncio.run(DriftAnalysisSupervisor(oracle, make_config()).synthesize(request))
    assert result.recommended_action.startswith("Maya and Jon")
    assert '"author_name": "Maya"' in oracle.calls[0]["payload"]
