"""Shared data models for the semantic drift analysis service."""

from typing import List, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field


DriftType = Literal["strengthened", "weakened", "shifted", "appeared", "disappeared"]
Significance = Literal["low", "medium", "high"]
DecisionAxis = Literal["timeline", "scope", "obligation", "risk", "ownership", "compliance", "economics"]
Reversibility = Literal["easy", "medium", "hard"]
BlastRadius = Literal["team", "org", "external"]
EvidenceQuality = Literal["direct", "inferred"]
DomainTemplate = Literal["product_spec", "contract", "prd", "memo"]


# Input Models
class Version(BaseModel):
    """One immutable revision in a document history."""
    model_config = ConfigDict(frozen=True)

    version: str = Field(..., min_length=1, description="Ordinal label, e.g. V1")
    timestamp: Optional[str] = Field(None, description="When the revision was captured")
    content: str = Field(..., description="Plain-text content of the revision")
    author_name: Optional[str] = Field(None, description="Author display name")
    author_role: Optional[str] = Field(None, description="Author role")
    author_handle: Optional[str] = Field(None, description="Author handle")


class AnalyzeRequest(BaseModel):
    """Request for a drift analysis over an ordered version history."""
    title: Optional[str] = Field(None, description="Document title")
    template: DomainTemplate = Field("product_spec", description="Domain template guiding the oracle")
    versions: List[Version] = Field(..., min_length=2, description="Ordered version history")

    @property
    def transitions(self) -> List[tuple]:
        """Adjacent (from, to) version pairs in document order."""
        return list(zip(self.versions[:-1], self.versions[1:]))


# Per-version Intent Digest
class VersionIntent(BaseModel):
    """Deterministic digest of what a version commits to."""
    primary_goal: str
    commitments: List[str] = Field(default_factory=list)
    tone: str
    scope: str
    stance: str


class SemanticVersion(BaseModel):
    """A version label paired with its intent digest."""
    version: str
    timestamp: Optional[str] = None
    intent: VersionIntent


# Drift Records
class DriftItem(BaseModel):
    """One decision-level change between two adjacent versions."""
    id: str = Field(..., description="Stable id of the form dN")
    element: str = Field(..., description="Concrete label of what drifted")
    type: DriftType
    decision_axis: DecisionAxis
    strength_delta: int = Field(..., ge=-2, le=2)
    reversibility: Reversibility
    blast_radius: BlastRadius
    confidence: float = Field(..., ge=0.0, le=1.0)
    evidence_quality: EvidenceQuality
    from_version: str
    to_version: str
    from_text: str
    to_text: str
    significance: Significance
    explanation: str
    question_to_ask: str


class OracleDrift(BaseModel):
    """Lean drift entry as the oracle is asked to return it.

    Version labels are never read from the oracle; derived fields are optional
    and filled in by enrichment when absent.
    """
    id: str = ""
    element: str
    type: DriftType
    from_text: str
    to_text: str
    significance: Significance
    explanation: str
    question_to_ask: str
    decision_axis: Optional[DecisionAxis] = None
    strength_delta: Optional[int] = Field(None, ge=-2, le=2)
    reversibility: Optional[Reversibility] = None
    blast_radius: Optional[BlastRadius] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    evidence_quality: Optional[EvidenceQuality] = None


class OracleTransitionPayload(BaseModel):
    """The single JSON object the oracle must return for one transition."""
    from_version: Optional[str] = None
    to_version: Optional[str] = None
    drifts: List[OracleDrift] = Field(..., min_length=2, max_length=5)


class TransitionSummary(BaseModel):
    """One-line summary of a single transition."""
    from_version: str
    to_version: str
    summary: str
    primary_owner: str
    no_material_drift: bool


class TransitionError(BaseModel):
    """A transition that could not be analyzed by the oracle."""
    from_version: str
    to_version: str
    reason: str


class Diagnostics(BaseModel):
    """How an analysis was produced."""
    fallback_used: bool = False
    transition_model_failures: int = Field(0, ge=0)
    warnings: List[str] = Field(default_factory=list)
    transition_errors: List[TransitionError] = Field(default_factory=list)


class TransitionOutcome(BaseModel):
    """Analyzer answer for one transition, before whole-document aggregation."""
    drifts: List[DriftItem]
    transition_summary: TransitionSummary
    model_failed: bool = False
    warnings: List[str] = Field(default_factory=list)
    failure: Optional[TransitionError] = None


class SynthesisResult(BaseModel):
    """Headline, narrative and next step written over the whole drift picture."""
    headline: str
    narrative: str
    recommended_action: str


class AggregateSummary(BaseModel):
    """Deterministic whole-document aggregate."""
    inflection_point: str
    drift_score: int = Field(..., ge=0, le=100)
    headline: str
    narrative: str
    recommended_action: str


class AnalysisResult(BaseModel):
    """Complete drift analysis of a document history."""
    versions: List[SemanticVersion]
    drifts: List[DriftItem]
    transition_summaries: List[TransitionSummary] = Field(default_factory=list)
    narrative: str
    inflection_point: str
    drift_score: int = Field(..., ge=0, le=100)
    headline: str
    recommended_action: str
    diagnostics: Diagnostics = Field(default_factory=Diagnostics)


# Synthesis Request Models
class SynthesisVersion(BaseModel):
    """Lightweight author context given to the synthesizer."""
    version: str
    author_name: Optional[str] = None
    author_role: Optional[str] = None


class SynthesisRequest(BaseModel):
    """Request for a standalone synthesis over already-computed drifts."""
    title: Optional[str] = None
    template: DomainTemplate = "product_spec"
    versions: List[SynthesisVersion]
    drifts: List[DriftItem]
