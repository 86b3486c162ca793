"""
JSON extraction and repair for model output.

Models wrap JSON in prose, code fences, smart quotes and trailing commas.
`parse_model_json` walks a fixed list of candidate strings and returns the
first one that both parses and validates against the expected pydantic
model.
"""

import json
import re
from typing import Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from shared.exceptions import ContractViolationError
from shared.logging_config import get_tool_logger

logger = get_tool_logger("json_repair")

ModelT = TypeVar("ModelT", bound=BaseModel)

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.I)
_ANY_FENCE = re.compile(r"```[\s\S]*?\n([\s\S]*?)\s*```")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def extract_fenced_json(text: str) -> Optional[str]:
    """Body of the first ```json fence, else of the first fence of any kind."""
    match = _JSON_FENCE.search(text) or _ANY_FENCE.search(text)
    if match and match.group(1):
        return match.group(1).strip()
    return None


def _balanced_object_end(text: str, start: int) -> Optional[int]:
    """Index just past the object opening at `start`, ignoring braces inside strings."""
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def slice_first_json_object(text: str) -> Optional[str]:
    first = text.find("{")
    if first < 0:
        return None
    end = _balanced_object_end(text, first)
    return text[first:end] if end is not None else None


def extract_all_json_objects(text: str) -> List[str]:
    """Every balanced object, one per opening brace, nested ones included."""
    objects = []
    start = text.find("{")
    while start >= 0:
        end = _balanced_object_end(text, start)
        if end is not None:
            objects.append(text[start:end])
        start = text.find("{", start + 1)
    return objects


def sanitize_json_candidate(candidate: str) -> str:
    """Strip a BOM, straighten smart quotes, drop trailing commas."""
    cleaned = candidate.lstrip("\ufeff")
    cleaned = cleaned.replace("\u201c", '"').replace("\u201d", '"')
    cleaned = cleaned.replace("\u2018", "'").replace("\u2019", "'")
    cleaned = _TRAILING_COMMA.sub(r"\1", cleaned)
    return cleaned.strip()


def iter_json_candidates(text: str) -> Iterator[str]:
    """Candidate strings in the order they should be tried."""
    sources = [text]
    fenced = extract_fenced_json(text)
    if fenced:
        sources.append(fenced)
    first_object = slice_first_json_object(text)
    if first_object:
        sources.append(first_object)
    sources.extend(extract_all_json_objects(text))

    for source in sources:
        yield source
        sanitized = sanitize_json_candidate(source)
        yield sanitized
        yield sanitize_json_candidate(slice_first_json_object(source) or source)


def parse_model_json(text: str, model: Type[ModelT]) -> ModelT:
    """
    Return the first candidate in `text` that validates as `model`.

    Raises:
        ContractViolationError: when no candidate parses and validates.
    """
    if not text or not text.strip():
        raise ContractViolationError("Empty model response")

    parsed_any = False
    tried = set()
    for candidate in iter_json_candidates(text):
        if candidate in tried:
            continue
        tried.add(candidate)
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        parsed_any = True
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.debug(f"Candidate rejected by {model.__name__}: {e.error_count()} errors")

    if parsed_any:
        logger.warning(f"⚠️ JSON found but none matched {model.__name__}")
        raise ContractViolationError(f"Response JSON does not match {model.__name__}")
    logger.warning("⚠️ All JSON parsing strategies failed")
    raise ContractViolationError("Model did not return valid JSON")
