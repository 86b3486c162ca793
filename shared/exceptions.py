"""Error types raised by the drift analysis pipeline."""

from typing import Optional


class DriftAnalysisError(Exception):
    """Base class for all pipeline errors."""


class InvalidRequestError(DriftAnalysisError):
    """An analysis request is outside the accepted limits."""


class OracleUnavailableError(DriftAnalysisError):
    """The text-generation oracle could not be reached or rejected the call."""


class ContractViolationError(DriftAnalysisError):
    """An oracle response held no JSON object satisfying the output contract."""


class TransitionAnalysisError(DriftAnalysisError):
    """A transition failed terminally after every attempt was spent."""

    def __init__(self, from_version: str, to_version: str, reason: str):
        self.from_version = from_version
        self.to_version = to_version
        self.reason = reason
        super().__init__(f"Transition {from_version} -> {to_version} failed: {reason}")


class SynthesisError(DriftAnalysisError):
    """The synthesizer produced no usable headline/narrative/action triple."""


class AnalysisCancelled(Exception):
    """Raised internally when a superseded computation reaches a checkpoint."""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(reason or "analysis superseded")
