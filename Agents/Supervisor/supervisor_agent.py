"""
Supervisor Agent
Orchestrates a full drift analysis and coordinates the worker agents.

This agent:
1. Validates the analysis request
2. Fans transition analysis out over the Transition Analyzer (bounded concurrency)
3. Falls back to the heuristic analyzer when the oracle is unconfigured or unreachable
4. Builds intent digests and the deterministic aggregate
5. Runs the Synthesis Agent over the complete drift set
6. Records how the result was produced in diagnostics
"""

import time
from typing import Iterable, List, Optional, Sequence

from shared.concurrency import CancellationToken, map_with_concurrency
from shared.config import Config
from shared.drift_analyzer.aggregate import aggregate_analysis
from shared.drift_analyzer.enrichment import reindex_drifts
from shared.drift_analyzer.heuristic import heuristic_transition
from shared.drift_analyzer.signals import build_intent
from shared.exceptions import (
    AnalysisCancelled,
    InvalidRequestError,
    OracleUnavailableError,
    SynthesisError,
)
from shared.logging_config import get_agent_logger
from shared.models import (
    AnalysisResult,
    AnalyzeRequest,
    Diagnostics,
    SynthesisRequest,
    SynthesisResult,
    TransitionError,
    TransitionOutcome,
    Version,
)
from shared.oracle import BedrockOracle, TextOracle

from Agents.workers.synthesizer.synthesis_agent import SynthesisAgent, to_synthesis_versions
from Agents.workers.transition_analyzer.transition_agent import OracleTransitionAnalyzer

logger = get_agent_logger("supervisor")

HEURISTIC_ONLY_WARNING = "Heuristic analyzer used for all transitions."


# ============================================================================
# RESULT ASSEMBLY
# ============================================================================

def build_diagnostics(outcomes: Sequence[TransitionOutcome], heuristic_only: bool) -> Diagnostics:
    """
    Diagnostics for a set of transition outcomes.

    A heuristic-only run always reports at least one model failure and the
    heuristic warning, even for a single transition.
    """
    if heuristic_only:
        return Diagnostics(
            fallback_used=True,
            transition_model_failures=max(1, len(outcomes)),
            warnings=[HEURISTIC_ONLY_WARNING],
        )

    warnings: List[str] = []
    for outcome in outcomes:
        warnings.extend(outcome.warnings)
    return Diagnostics(
        fallback_used=any(o.model_failed for o in outcomes),
        transition_model_failures=sum(1 for o in outcomes if o.model_failed),
        warnings=warnings,
        transition_errors=[o.failure for o in outcomes if o.failure is not None],
    )


def assemble_result(versions: Sequence[Version], template: str,
                    outcomes: Iterable[TransitionOutcome], diagnostics: Diagnostics) -> AnalysisResult:
    """Combine ordered transition outcomes into a complete AnalysisResult."""
    outcomes = list(outcomes)
    drifts = reindex_drifts(drift for outcome in outcomes for drift in outcome.drifts)
    summaries = [outcome.transition_summary for outcome in outcomes]
    aggregate = aggregate_analysis(template, drifts, summaries, versions)

    return AnalysisResult(
        versions=[build_intent(v) for v in versions],
        drifts=drifts,
        transition_summaries=summaries,
        narrative=aggregate.narrative,
        inflection_point=aggregate.inflection_point,
        drift_score=aggregate.drift_score,
        headline=aggregate.headline,
        recommended_action=aggregate.recommended_action,
        diagnostics=diagnostics,
    )


# ============================================================================
# SUPERVISOR
# ============================================================================

class DriftAnalysisSupervisor:
    """
    Full-run orchestration of the drift pipeline.

    With no oracle (or DRIFT_ORACLE_ENABLED=false) every transition goes
    through the heuristic analyzer and synthesis is skipped.
    """

    def __init__(self, oracle: Optional[TextOracle] = None, config: Optional[Config] = None,
                 synthesis_oracle: Optional[TextOracle] = None):
        self.config = config or Config()
        if not self.config.oracle_enabled:
            oracle = None

        self.oracle = oracle
        self.transition_analyzer = OracleTransitionAnalyzer(oracle, self.config) if oracle else None
        self.synthesis_agent = SynthesisAgent(synthesis_oracle or oracle, self.config) if oracle else None

    @property
    def oracle_configured(self) -> bool:
        return self.transition_analyzer is not None

    def validate_request(self, request: AnalyzeRequest) -> None:
        """Raise InvalidRequestError when the request is outside accepted limits."""
        count = len(request.versions)
        if count < 2 or count > self.config.max_versions_per_request:
            raise InvalidRequestError(
                f"Expected between 2 and {self.config.max_versions_per_request} versions, got {count}"
            )
        for version in request.versions:
            if len(version.content) < self.config.min_version_chars:
                raise InvalidRequestError(
                    f"Version {version.version} content must be at least {self.config.min_version_chars} characters"
                )

    async def analyze_transition(
        self,
        from_version: Version,
        to_version: Version,
        template: str = "product_spec",
        title: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> TransitionOutcome:
        """
        Analyze one transition with the oracle, or heuristically when there is none.

        TransitionAnalysisError always propagates. OracleUnavailableError
        propagates unless fallback_on_unavailable is set, in which case the
        heuristic answer is returned with the failure recorded on it.
        """
        if self.transition_analyzer is None:
            return heuristic_transition(from_version, to_version)

        try:
            return await self.transition_analyzer.analyze(from_version, to_version, template, title, token)
        except OracleUnavailableError as e:
            if not self.config.fallback_on_unavailable:
                raise
            label = f"{from_version.version} -> {to_version.version}"
            logger.warning(f"⚠️ Oracle unavailable for {label}, using heuristic analyzer: {e}")
            outcome = heuristic_transition(from_version, to_version)
            return outcome.model_copy(update={
                "warnings": [f"Heuristic analyzer used for {label}: oracle unavailable."],
                "failure": TransitionError(
                    from_version=from_version.version,
                    to_version=to_version.version,
                    reason=str(e),
                ),
            })

    async def apply_synthesis(
        self,
        result: AnalysisResult,
        versions: Sequence[Version],
        template: str = "product_spec",
        title: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> AnalysisResult:
        """
        Replace headline, narrative and action with the synthesizer's version.

        Skipped when there are no drifts or no oracle. A synthesis failure
        keeps the aggregate values and adds a warning.
        """
        if self.synthesis_agent is None or not result.drifts:
            return result

        try:
            synthesis = await self.synthesis_agent.synthesize(
                to_synthesis_versions(versions), result.drifts, template, title
            )
        except SynthesisError as e:
            if token is not None:
                token.raise_if_cancelled()
            diagnostics = result.diagnostics.model_copy(update={
                "warnings": result.diagnostics.warnings + [f"Synthesis failed, deterministic narrative kept: {e}"],
            })
            return result.model_copy(update={"diagnostics": diagnostics})

        if token is not None:
            token.raise_if_cancelled()
        return result.model_copy(update={
            "headline": synthesis.headline,
            "narrative": synthesis.narrative,
            "recommended_action": synthesis.recommended_action,
        })

    async def run_analysis(
        self,
        request: AnalyzeRequest,
        token: Optional[CancellationToken] = None,
        skip_synthesis: bool = False,
    ) -> Optional[AnalysisResult]:
        """
        Full analysis over every transition of the request.

        Returns None when the token is cancelled before the run completes.

        Raises:
            InvalidRequestError: request outside accepted limits
            TransitionAnalysisError: a transition failed terminally (whole batch aborts)
            OracleUnavailableError: oracle unreachable and fallback disabled
        """
        self.validate_request(request)
        try:
            return await self._run(request, token, skip_synthesis)
        except AnalysisCancelled:
            logger.info("Analysis superseded before completion; result discarded")
            return None

    async def _run(self, request: AnalyzeRequest, token: Optional[CancellationToken],
                   skip_synthesis: bool) -> AnalysisResult:
        start_time = time.time()
        pairs = request.transitions
        heuristic_only = not self.oracle_configured

        logger.info("=" * 60)
        logger.info(f"🚀 Drift analysis: {len(request.versions)} versions, {len(pairs)} transitions "
                    f"({'heuristic' if heuristic_only else 'oracle'})")
        logger.info("=" * 60)

        async def analyze_pair(pair, index):
            return await self.analyze_transition(pair[0], pair[1], request.template, request.title, token)

        outcomes = await map_with_concurrency(pairs, self.config.transition_concurrency, analyze_pair, token)
        if token is not None:
            token.raise_if_cancelled()
        logger.info(f"Transitions phase completed in {time.time() - start_time:.2f}s")

        result = assemble_result(request.versions, request.template, outcomes,
                                 build_diagnostics(outcomes, heuristic_only))

        if not skip_synthesis:
            result = await self.apply_synthesis(result, request.versions, request.template, request.title, token)

        logger.info(f"✅ Analysis complete: {len(result.drifts)} drifts, score {result.drift_score}, "
                    f"inflection {result.inflection_point} ({time.time() - start_time:.2f}s)")
        return result

    async def synthesize(self, request: SynthesisRequest) -> SynthesisResult:
        """
        Standalone synthesis over drifts computed earlier.

        Raises:
            OracleUnavailableError: no oracle is configured
            SynthesisError: the synthesizer failed
        """
        if self.synthesis_agent is None:
            raise OracleUnavailableError("Text-generation oracle is not configured")
        return await self.synthesis_agent.synthesize(
            request.versions, request.drifts, request.template, request.title
        )


# ============================================================================
# AGENT CREATION
# ============================================================================

def create_supervisor(config: Optional[Config] = None) -> DriftAnalysisSupervisor:
    """
    Create a supervisor wired to Bedrock when the oracle is enabled.

    Example:
        >>> supervisor = create_supervisor()
        >>> result = await supervisor.run_analysis(request)
    """
    config = config or Config()
    if not config.oracle_enabled:
        logger.info("Oracle disabled; supervisor will use the heuristic analyzer")
        return DriftAnalysisSupervisor(None, config)

    supervisor = DriftAnalysisSupervisor(
        oracle=BedrockOracle(config),
        config=config,
        synthesis_oracle=BedrockOracle(config, model_id=config.bedrock_synthesis_model_id),
    )
    logger.info(f"Supervisor created with Bedrock model {config.bedrock_model_id}")
    return supervisor
