"""
Incremental Merge Engine

When a document gains exactly one new version, only the newest transition
is analyzed and merged into the stored analysis; everything else is
recomputed from the merged drift set. DocumentAnalysisCoordinator keeps one
stored result and one in-flight computation per document. Starting a new
computation supersedes the previous one, which then finishes without
writing anything.
"""

from typing import Dict, List, Optional

from shared.concurrency import CancellationToken
from shared.drift_analyzer.aggregate import aggregate_analysis
from shared.drift_analyzer.enrichment import reindex_drifts
from shared.drift_analyzer.signals import build_intent
from shared.exceptions import AnalysisCancelled
from shared.logging_config import get_agent_logger
from shared.models import AnalysisResult, AnalyzeRequest, Diagnostics, TransitionOutcome

from Agents.Supervisor.supervisor_agent import DriftAnalysisSupervisor, build_diagnostics

logger = get_agent_logger("merge_engine")


def can_merge_incrementally(stored: Optional[AnalysisResult], request: AnalyzeRequest) -> bool:
    """Stored result covers exactly the request's versions minus the last one."""
    if stored is None:
        return False
    stored_labels = [v.version for v in stored.versions]
    request_labels = [v.version for v in request.versions]
    return len(request_labels) == len(stored_labels) + 1 and request_labels[:-1] == stored_labels


def merge_diagnostics(stored: Diagnostics, new: Diagnostics) -> Diagnostics:
    warnings: List[str] = list(stored.warnings)
    for warning in new.warnings:
        if warning not in warnings:
            warnings.append(warning)
    return Diagnostics(
        fallback_used=stored.fallback_used or new.fallback_used,
        transition_model_failures=stored.transition_model_failures + new.transition_model_failures,
        warnings=warnings,
        transition_errors=stored.transition_errors + new.transition_errors,
    )


def merge_transition(stored: AnalysisResult, request: AnalyzeRequest,
                     outcome: TransitionOutcome, heuristic_only: bool) -> AnalysisResult:
    """
    Append one transition outcome to a copy of `stored`.

    The aggregate (score, inflection point, headline, narrative, action) is
    recomputed over the full merged set; `stored` itself is never modified.
    """
    merged = stored.model_copy(deep=True)
    new_version = request.versions[-1]

    drifts = reindex_drifts(merged.drifts + outcome.drifts)
    summaries = merged.transition_summaries + [outcome.transition_summary]
    aggregate = aggregate_analysis(request.template, drifts, summaries, request.versions)

    return merged.model_copy(update={
        "versions": merged.versions + [build_intent(new_version)],
        "drifts": drifts,
        "transition_summaries": summaries,
        "narrative": aggregate.narrative,
        "inflection_point": aggregate.inflection_point,
        "drift_score": aggregate.drift_score,
        "headline": aggregate.headline,
        "recommended_action": aggregate.recommended_action,
        "diagnostics": merge_diagnostics(merged.diagnostics, build_diagnostics([outcome], heuristic_only)),
    })


class DocumentAnalysisCoordinator:
    """Per-document stored analysis with single-flight recomputation."""

    def __init__(self, supervisor: DriftAnalysisSupervisor):
        self.supervisor = supervisor
        self._results: Dict[str, AnalysisResult] = {}
        self._tokens: Dict[str, CancellationToken] = {}

    def get(self, doc_id: str) -> Optional[AnalysisResult]:
        return self._results.get(doc_id)

    def cancel(self, doc_id: str) -> None:
        token = self._tokens.pop(doc_id, None)
        if token is not None:
            token.cancel()

    def forget(self, doc_id: str) -> None:
        """Cancel any in-flight computation and drop the stored result."""
        self.cancel(doc_id)
        self._results.pop(doc_id, None)

    def _begin(self, doc_id: str) -> CancellationToken:
        previous = self._tokens.get(doc_id)
        if previous is not None:
            logger.info(f"Superseding in-flight analysis for document {doc_id}")
            previous.cancel()
        token = CancellationToken()
        self._tokens[doc_id] = token
        return token

    def _publish(self, doc_id: str, token: CancellationToken, result: AnalysisResult) -> Optional[AnalysisResult]:
        if token.cancelled:
            return None
        self._results[doc_id] = result
        if self._tokens.get(doc_id) is token:
            del self._tokens[doc_id]
        return result

    async def submit(self, doc_id: str, request: AnalyzeRequest,
                     force_full: bool = False) -> Optional[AnalysisResult]:
        """
        Recompute the analysis for a document and store it.

        Returns the stored result, or None when this computation was
        superseded or (incremental path only) failed. Invalid requests and
        full-run errors propagate and leave the stored result untouched.
        """
        self.supervisor.validate_request(request)
        token = self._begin(doc_id)
        stored = self._results.get(doc_id)

        if not force_full and can_merge_incrementally(stored, request):
            return await self._submit_incremental(doc_id, request, stored, token)

        logger.info(f"Full analysis for document {doc_id} ({len(request.versions)} versions)")
        result = await self.supervisor.run_analysis(request, token)
        if result is None:
            return None
        return self._publish(doc_id, token, result)

    async def _submit_incremental(self, doc_id: str, request: AnalyzeRequest,
                                  stored: AnalysisResult, token: CancellationToken) -> Optional[AnalysisResult]:
        from_version, to_version = request.versions[-2], request.versions[-1]
        logger.info(f"Incremental merge for document {doc_id}: {from_version.version} -> {to_version.version}")

        try:
            outcome = await self.supervisor.analyze_transition(
                from_version, to_version, request.template, request.title, token
            )
            token.raise_if_cancelled()
            merged = merge_transition(stored, request, outcome, not self.supervisor.oracle_configured)
            merged = await self.supervisor.apply_synthesis(
                merged, request.versions, request.template, request.title, token
            )
        except AnalysisCancelled:
            logger.info(f"Incremental merge for document {doc_id} superseded")
            return None
        except Exception as e:
            logger.error(f"❌ Incremental merge for document {doc_id} failed: {e}")
            return None

        return self._publish(doc_id, token, merged)
