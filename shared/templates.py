"""Domain templates that steer the oracle toward the right kind of decisions."""

from typing import Dict, List


TEMPLATE_OPTIONS: List[Dict[str, str]] = [
    {
        "value": "product_spec",
        "label": "Product Spec",
        "description": "Track goals, launch commitments, scope boundaries, and user focus.",
        "guidance": "Prioritize product goals, delivery commitments, scope discipline, target users, and execution certainty.",
    },
    {
        "value": "contract",
        "label": "Contract",
        "description": "Track obligations, liability, carve-outs, payment terms, and remedies.",
        "guidance": "Prioritize obligations, rights, liability, indemnity, termination, and ambiguity in legal commitments.",
    },
    {
        "value": "prd",
        "label": "PRD",
        "description": "Track product requirements, acceptance criteria, assumptions, and metrics.",
        "guidance": "Prioritize requirements clarity, acceptance criteria, technical constraints, and measurable success criteria.",
    },
    {
        "value": "memo",
        "label": "Memo",
        "description": "Track claims, recommendations, confidence, and decision framing.",
        "guidance": "Prioritize argument strength, recommendation clarity, risk framing, and confidence shifts.",
    },
]

_BY_VALUE = {option["value"]: option for option in TEMPLATE_OPTIONS}
DEFAULT_TEMPLATE = "product_spec"


def get_template_label(template: str) -> str:
    option = _BY_VALUE.get(template)
    return option["label"] if option else "Template"


def get_template_guidance(template: str) -> str:
    """Unknown templates get the product spec guidance."""
    return _BY_VALUE.get(template, _BY_VALUE[DEFAULT_TEMPLATE])["guidance"]
