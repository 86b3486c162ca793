"""
Text-generation oracle.

The pipeline only needs one capability from a model: send a system prompt
and a user payload, get back text plus the reason generation stopped. The
Bedrock implementation streams through strands' BedrockModel the same way
the worker agents always have; tests substitute scripted oracles.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from botocore.config import Config as BotocoreConfig
from strands.models.bedrock import BedrockModel

from .config import Config
from .exceptions import OracleUnavailableError
from .logging_config import get_agent_logger

logger = get_agent_logger("oracle")


@dataclass
class OracleReply:
    text: str
    stop_reason: Optional[str] = None

    @property
    def truncated(self) -> bool:
        """Generation was cut off by the output token ceiling."""
        return self.stop_reason == "max_tokens"


class TextOracle:
    """Interface for anything that can answer a prompt."""

    async def complete(self, system_prompt: str, payload: str, max_tokens: int) -> OracleReply:
        raise NotImplementedError


class BedrockOracle(TextOracle):
    """Oracle backed by an Amazon Bedrock model via strands."""

    def __init__(self, config: Optional[Config] = None, model_id: Optional[str] = None):
        self.config = config or Config()
        self.model_id = model_id or self.config.bedrock_model_id
        self._models: Dict[int, BedrockModel] = {}

    def _model_for(self, max_tokens: int) -> BedrockModel:
        """One model (and boto client) per output budget, reused across calls."""
        model = self._models.get(max_tokens)
        if model is None:
            model = BedrockModel(
                model_id=self.model_id,
                region_name=self.config.aws_region,
                max_tokens=max_tokens,
                temperature=0.0,
                boto_client_config=BotocoreConfig(read_timeout=self.config.oracle_read_timeout_seconds),
            )
            self._models[max_tokens] = model
        return model

    async def complete(self, system_prompt: str, payload: str, max_tokens: int) -> OracleReply:
        messages = [{"role": "user", "content": [{"text": payload}]}]

        text = ""
        stop_reason = None
        try:
            model = self._model_for(max_tokens)
            async for event in model.stream(messages, system_prompt=system_prompt):
                if "contentBlockDelta" in event:
                    delta = event["contentBlockDelta"].get("delta", {})
                    if "text" in delta:
                        text += delta["text"]
                elif "messageStop" in event:
                    stop_reason = event["messageStop"].get("stopReason")
        except Exception as e:
            logger.error(f"❌ Oracle call to {self.model_id} failed: {e}")
            raise OracleUnavailableError(f"{self.model_id}: {e}") from e

        logger.debug(f"Oracle {self.model_id} returned {len(text)} chars (stop_reason={stop_reason})")
        return OracleReply(text=text, stop_reason=stop_reason)
