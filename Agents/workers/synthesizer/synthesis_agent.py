"""
Synthesis Agent

One oracle call over the complete drift set that rewrites the headline,
narrative and recommended action. Single attempt, small budget. Callers
treat any SynthesisError as non-fatal and keep the deterministic aggregate.
"""

import time
from typing import Optional, Sequence

from shared.config import Config
from shared.exceptions import ContractViolationError, OracleUnavailableError, SynthesisError
from shared.logging_config import get_agent_logger
from shared.models import DriftItem, SynthesisResult, SynthesisVersion, Version
from shared.oracle import TextOracle

from Agents.workers.transition_analyzer.json_repair import parse_model_json
from Agents.workers.synthesizer.prompts.synthesis_prompt import (
    DRIFT_SYNTHESIS_PROMPT,
    build_synthesis_prompt,
)

logger = get_agent_logger("synthesizer")


def to_synthesis_versions(versions: Sequence[Version]) -> list:
    return [
        SynthesisVersion(version=v.version, author_name=v.author_name, author_role=v.author_role)
        for v in versions
    ]


class SynthesisAgent:
    """Writes the whole-document headline, narrative and next step."""

    def __init__(self, oracle: TextOracle, config: Optional[Config] = None):
        self.oracle = oracle
        self.config = config or Config()

    async def synthesize(
        self,
        versions: Sequence[SynthesisVersion],
        drifts: Sequence[DriftItem],
        template: str = "product_spec",
        title: Optional[str] = None,
    ) -> SynthesisResult:
        """
        Raises:
            SynthesisError: the oracle failed or its reply broke the contract
        """
        start_time = time.time()
        payload = build_synthesis_prompt(versions, drifts, template, title)

        try:
            reply = await self.oracle.complete(DRIFT_SYNTHESIS_PROMPT, payload, self.config.synthesis_max_tokens)
            result = parse_model_json(reply.text, SynthesisResult)
        except (OracleUnavailableError, ContractViolationError) as e:
            logger.warning(f"⚠️ Synthesis failed: {e}")
            raise SynthesisError(str(e)) from e

        logger.info(f"✅ Synthesis over {len(drifts)} drifts in {time.time() - start_time:.2f}s")
        return result
