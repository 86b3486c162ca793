from __future__ import annotations
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern

from ..models import SemanticVersion, Version, VersionIntent

# ----------------- Keyword families -----------------
_TIMELINE_FIRM = re.compile(r"\b(we will|must|approved|fixed|hard gate|final decision|by q[1-4])\b", re.I)
_TIMELINE_TENTATIVE = re.compile(r"\b(target|tentative|subject to|estimate|aim|conditional|gated)\b", re.I)
_SCOPE_BROAD = re.compile(r"\b(platform|multiple|expanded|broader|all|every)\b", re.I)
_SCOPE_FOCUSED = re.compile(r"\b(focused|single|narrow|specific|wedge)\b", re.I)
_LEGAL = re.compile(r"\b(legal|privacy|compliance|disclosure|terms|consent|indemnity|liability)\b", re.I)
_BOOKING = re.compile(r"\b(booking|checkout|one-click|flight|hotel links)\b", re.I)
_MONETIZATION = re.compile(r"\b(sponsored|placement|partner|referral|pricing|acv|revenue|valuation|tranche)\b", re.I)
_PERFORMANCE = re.compile(r"\b(p95|p99|throughput|latency|sla|slo|seconds)\b", re.I)
_GEOGRAPHY_TOKENS = ("us", "japan", "italy", "thailand", "apac", "europe", "global", "markets")

_COMMITMENT = re.compile(r"\b(will|must|commit|deliver|ship|launch|target|aim|require)\b", re.I)
_TONE_CAUTIOUS = re.compile(r"\b(tentative|targeting|may|explore|consider|conditional)\b", re.I)
_TONE_ASSERTIVE = re.compile(r"\b(requirement|must|will|deadline|approved)\b", re.I)
_STANCE_RISK = re.compile(r"\b(legal|liability|compliance|disclosure|sign-off|risk)\b", re.I)
_STANCE_EXECUTION = re.compile(r"\b(ship|launch|execute|throughput|growth)\b", re.I)

# A mention is negated when one of these appears up to three words earlier in the same clause.
_NEGATORS = frozenset({"no", "not", "skip", "skipping", "waive", "waived", "none"})
_NEGATION_WINDOW = 3
_CLAUSE_BREAK = re.compile(r"[.;:,!?\n]")
_WORD = re.compile(r"[a-z'-]+")


@dataclass(frozen=True)
class Signals:
    """Categorical decision signals read from one version's text."""
    timeline: str = "none"          # firm | tentative | none
    scope: str = "moderate"         # focused | moderate | broad
    legal: bool = False
    booking: bool = False
    monetization: bool = False
    performance_target: bool = False
    geography_count: int = 0


# ----------------- Helpers -----------------
def _has_affirmed_term(content: str, pattern: Pattern[str]) -> bool:
    for clause in _CLAUSE_BREAK.split(content):
        for match in pattern.finditer(clause):
            preceding = _WORD.findall(clause[:match.start()].lower())[-_NEGATION_WINDOW:]
            if not _NEGATORS.intersection(preceding):
                return True
    return False

def _count_geographies(content: str) -> int:
    text = content.lower()
    return sum(1 for token in _GEOGRAPHY_TOKENS if re.search(rf"\b{token}\b", text))

def classify_timeline(content: str) -> str:
    if _TIMELINE_FIRM.search(content):
        return "firm"
    if _TIMELINE_TENTATIVE.search(content):
        return "tentative"
    return "none"

def classify_scope(content: str) -> str:
    if _SCOPE_BROAD.search(content):
        return "broad"
    if _SCOPE_FOCUSED.search(content):
        return "focused"
    return "moderate"

def classify_tone(content: str) -> str:
    if _TONE_CAUTIOUS.search(content):
        return "cautious"
    if _TONE_ASSERTIVE.search(content):
        return "assertive"
    return "balanced"

def classify_stance(content: str) -> str:
    if _STANCE_RISK.search(content):
        return "risk-managed"
    if _STANCE_EXECUTION.search(content):
        return "execution-driven"
    return "balanced"

def find_commitments(content: str, limit: int = 4) -> List[str]:
    lines = [line.strip() for line in re.split(r"[.\n]", content)]
    matches = [line for line in lines if line and _COMMITMENT.search(line)]
    return (matches or [line for line in lines if line])[:limit]

def sample_evidence(content: str, limit: int = 180) -> str:
    return re.sub(r"\s+", " ", content.strip())[:limit]

# ----------------- Public API -----------------
def extract_signals(content: Optional[str]) -> Signals:
    """Map text onto the fixed signal vector. Total: never raises."""
    content = content or ""
    return Signals(
        timeline=classify_timeline(content),
        scope=classify_scope(content),
        legal=_has_affirmed_term(content, _LEGAL),
        booking=bool(_BOOKING.search(content)),
        monetization=bool(_MONETIZATION.search(content)),
        performance_target=bool(_PERFORMANCE.search(content)),
        geography_count=_count_geographies(content),
    )

def build_intent(version: Version) -> SemanticVersion:
    """Deterministic intent digest carried in AnalysisResult.versions."""
    content = version.content
    return SemanticVersion(
        version=version.version,
        timestamp=version.timestamp,
        intent=VersionIntent(
            primary_goal="Deliver the stated initiative with evolving certainty.",
            commitments=find_commitments(content),
            tone=classify_tone(content),
            scope=classify_scope(content),
            stance=classify_stance(content),
        ),
    )
