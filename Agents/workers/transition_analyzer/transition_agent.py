"""
Transition Analyzer Agent

Asks the text-generation oracle for the drifts of ONE adjacent version pair
and enforces the output contract:

- output budget sized from the combined input length
- truncated, empty or unparseable replies are re-prompted with a RETRY
  instruction, up to `max_json_retries` times
- version labels always come from the call, never from the model
- every drift is enriched and re-indexed before it leaves this module

Transport failures are not retried here; OracleUnavailableError propagates
so the supervisor can decide whether to fall back.
"""

import asyncio
import math
import time
from typing import Optional

from shared.concurrency import CancellationToken
from shared.config import Config
from shared.drift_analyzer.enrichment import enrich_drift, reindex_drifts
from shared.drift_analyzer.heuristic import summarize_transition
from shared.exceptions import ContractViolationError, TransitionAnalysisError
from shared.logging_config import get_agent_logger
from shared.models import OracleTransitionPayload, TransitionOutcome, Version
from shared.oracle import TextOracle

from Agents.workers.transition_analyzer.json_repair import parse_model_json
from Agents.workers.transition_analyzer.prompts.transition_prompt import (
    DRIFT_TRANSITION_PROMPT,
    build_retry_instruction,
    build_transition_prompt,
)

logger = get_agent_logger("transition_analyzer")


def estimate_output_budget(from_version: Version, to_version: Version, config: Optional[Config] = None) -> int:
    """
    Output token budget for one transition call.

    2000 + 80% of the estimated input tokens (4 chars per token), clamped to
    the configured floor and ceiling.
    """
    config = config or Config()
    total_chars = len(from_version.content) + len(to_version.content)
    estimated_input_tokens = math.ceil(total_chars / 4)
    estimated = 2000 + math.ceil(estimated_input_tokens * 0.8)
    return max(config.min_transition_output_tokens, min(config.max_transition_output_tokens, estimated))


class OracleTransitionAnalyzer:
    """Oracle-backed analyzer for a single transition."""

    def __init__(self, oracle: TextOracle, config: Optional[Config] = None):
        self.oracle = oracle
        self.config = config or Config()

    async def analyze(
        self,
        from_version: Version,
        to_version: Version,
        template: str = "product_spec",
        title: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> TransitionOutcome:
        """
        Analyze one transition.

        Raises:
            TransitionAnalysisError: every attempt was spent without a valid reply
            OracleUnavailableError: the oracle transport failed
            AnalysisCancelled: the token was cancelled at a checkpoint
        """
        label = f"{from_version.version} -> {to_version.version}"
        budget = estimate_output_budget(from_version, to_version, self.config)
        base_payload = build_transition_prompt(from_version, to_version, template, title)
        last_reason = "Unknown transition parse failure."
        start_time = time.time()

        for attempt in range(self.config.max_json_retries + 1):
            if attempt > 0:
                logger.warning(f"⚠️ Transition {label} attempt {attempt} rejected: {last_reason}")
                await asyncio.sleep(self.config.retry_delay_seconds)
                if token is not None:
                    token.raise_if_cancelled()

            reply = await self.oracle.complete(
                DRIFT_TRANSITION_PROMPT,
                base_payload + build_retry_instruction(attempt),
                budget,
            )
            if token is not None:
                token.raise_if_cancelled()

            if reply.truncated:
                last_reason = "Transition output was truncated (stop_reason=max_tokens)."
                continue

            if not reply.text.strip():
                last_reason = "Oracle transition response missing text content."
                continue

            try:
                payload = parse_model_json(reply.text, OracleTransitionPayload)
            except ContractViolationError as e:
                last_reason = f"{e} (stop_reason={reply.stop_reason or 'unknown'})."
                continue

            outcome = self._build_outcome(from_version, to_version, payload)
            logger.info(f"✅ Transition {label}: {len(outcome.drifts)} drifts "
                        f"in {time.time() - start_time:.2f}s ({attempt + 1} attempt(s))")
            return outcome

        logger.error(f"❌ Transition {label} failed after {self.config.max_json_retries + 1} attempts")
        raise TransitionAnalysisError(from_version.version, to_version.version, last_reason)

    def _build_outcome(self, from_version: Version, to_version: Version,
                       payload: OracleTransitionPayload) -> TransitionOutcome:
        drifts = reindex_drifts(
            enrich_drift({
                **drift.model_dump(),
                "from_version": from_version.version,
                "to_version": to_version.version,
            })
            for drift in payload.drifts
        )

        return TransitionOutcome(
            drifts=drifts,
            transition_summary=summarize_transition(from_version, to_version, drifts, False),
            model_failed=False,
        )
