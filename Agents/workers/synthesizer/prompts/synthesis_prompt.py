"""
Synthesis Prompt Template

The synthesizer never sees raw document text, only the drifts already
computed for the whole history plus light author context.
"""

import json
from typing import Optional, Sequence

from shared.models import DriftItem, SynthesisVersion
from shared.templates import get_template_label


DRIFT_SYNTHESIS_PROMPT = """You are a decision analyst writing the executive summary of a document's evolution.
You receive every semantic drift detected across the document's versions.

Respond with STRICT JSON only, exactly one object:
{
  "headline": "one plain-English sentence summarizing the key finding",
  "narrative": "one concise paragraph: what changed in decision meaning, why it matters, who must align next",
  "recommended_action": "1-2 sentence concrete next step naming who should do what"
}

Rules:
- Name the specific elements and versions that matter most; avoid generic phrasing.
- Refer to people by the author names or roles provided.
- Return only JSON, no markdown, no extra keys."""


def build_synthesis_prompt(
    versions: Sequence[SynthesisVersion],
    drifts: Sequence[DriftItem],
    template: str = "product_spec",
    title: Optional[str] = None,
) -> str:
    payload = {
        "title": title or "Untitled Document",
        "template": get_template_label(template),
        "versions": [
            {
                "version": v.version,
                "author_name": v.author_name or "",
                "author_role": v.author_role or "",
            }
            for v in versions
        ],
        "drifts": [
            {
                "id": d.id,
                "transition": f"{d.from_version} -> {d.to_version}",
                "element": d.element,
                "type": d.type,
                "decision_axis": d.decision_axis,
                "significance": d.significance,
                "explanation": d.explanation,
            }
            for d in drifts
        ],
    }
    return f"Summarize this drift analysis:\n{json.dumps(payload, indent=2)}"
