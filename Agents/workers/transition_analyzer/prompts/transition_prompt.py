"""
Transition Prompt Template

System prompt and user payload for analyzing ONE adjacent version pair.
The model answers with a single JSON object validated against
OracleTransitionPayload.
"""

import json
from typing import Optional

from shared.models import Version
from shared.templates import get_template_guidance, get_template_label


DRIFT_TRANSITION_PROMPT = """You are a semantic document analyst.
You receive exactly two adjacent versions of one document: FROM and TO.
Identify how decision meaning changed between them, in two internal steps:
1) Normalize each version into decision facts (goals, commitments, constraints, risk posture, ownership cues).
2) Compute deltas from those facts, not from surface wording.

Allowed drift types: strengthened | weakened | shifted | appeared | disappeared
Allowed decision axes: timeline | scope | obligation | risk | ownership | compliance | economics
Allowed significance: low | medium | high
Optional metadata enums:
- reversibility: easy|medium|hard
- blast_radius: team|org|external
- evidence_quality: direct|inferred

Respond with STRICT JSON only, exactly one object of this shape:
{
  "drifts": [
    {
      "element": "concrete domain-specific label, e.g. launch date commitment",
      "type": "strengthened|weakened|shifted|appeared|disappeared",
      "decision_axis": "timeline|scope|obligation|risk|ownership|compliance|economics",
      "strength_delta": -2,
      "from_text": "short direct quote from FROM",
      "to_text": "short direct quote from TO",
      "significance": "low|medium|high",
      "explanation": "one sentence",
      "question_to_ask": "one sentence"
    }
  ]
}

Rules:
- Return 2 to 5 drifts, most decision-relevant first. Never more than 5.
- "strength_delta" uses -2..+2 where negative weakens and positive strengthens commitment force.
- "from_text" and "to_text" must be short direct quotes from the provided text.
- Do not include version labels or ids; they are assigned by the caller.
- Return only JSON, no markdown, no extra keys."""


def build_transition_prompt(
    from_version: Version,
    to_version: Version,
    template: str = "product_spec",
    title: Optional[str] = None,
) -> str:
    """
    Build the user payload for one transition.

    Args:
        from_version: Earlier version of the pair
        to_version: Later version of the pair
        template: Domain template key
        title: Document title, if known

    Returns:
        Prompt string embedding a JSON payload of both versions
    """
    def describe(version: Version) -> dict:
        return {
            "version": version.version,
            "timestamp": version.timestamp or "",
            "author_name": version.author_name or "",
            "author_role": version.author_role or "",
            "content": version.content,
        }

    payload = {
        "title": title or "Untitled Document",
        "template": get_template_label(template),
        "template_guidance": get_template_guidance(template),
        "from": describe(from_version),
        "to": describe(to_version),
    }
    return f"Analyze this transition:\n{json.dumps(payload, indent=2)}"


def build_retry_instruction(attempt: int) -> str:
    """Suffix appended to the payload on re-prompts; empty on the first attempt."""
    if attempt == 0:
        return ""
    return (f"\n\nRETRY {attempt}: Prior output was invalid JSON. "
            "Return only one valid JSON object matching the schema.")
