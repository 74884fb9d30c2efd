"""
Structured output recovery for reasoning engine responses.

Engines asked for pure JSON still wrap it in prose or markdown fences, or
add trailing commentary. The decoder recovers the intended object through
an ordered fallback chain and classifies terminal failures:

1. direct parse of the raw text
2. parse after removing code-fence markers
3. parse of the span from the first ``{`` to the last ``}``
4. scan for the first embedded object that parses on its own

Each stage runs only when the previous one failed. Schema validation of
the recovered object is a separate step (``decode_model``).
"""

import json
import logging
import re
from enum import Enum
from typing import Any, Dict, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..exceptions import ResponseDecodeError, SchemaIncompleteError


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


class DecodeStage(str, Enum):
    """Fallback stage that produced the decoded object."""
    DIRECT = "direct"
    FENCES_STRIPPED = "fences_stripped"
    BRACE_SPAN = "brace_span"
    EMBEDDED_SCAN = "embedded_scan"


def _loads_object(text: str) -> Dict[str, Any]:
    value = json.loads(text)
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    return value


def _brace_span(text: str) -> str:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ValueError("no brace-delimited span")
    return text[start:end + 1]


def _first_embedded_object(text: str) -> Dict[str, Any]:
    decoder = json.JSONDecoder()
    index = text.find("{")
    while index != -1:
        try:
            value, _ = decoder.raw_decode(text, index)
        except (json.JSONDecodeError, RecursionError):
            value = None
        if isinstance(value, dict):
            return value
        index = text.find("{", index + 1)
    raise ValueError("no embedded JSON object")


def decode_with_stage(raw: str) -> Tuple[Dict[str, Any], DecodeStage]:
    """
    Recover a JSON object and report which stage produced it.

    Raises:
        ResponseDecodeError: If every stage fails. The raw text is logged.
    """
    attempts = (
        (DecodeStage.DIRECT, lambda: _loads_object(raw)),
        (DecodeStage.FENCES_STRIPPED, lambda: _loads_object(_FENCE_PATTERN.sub("", raw).strip())),
        (DecodeStage.BRACE_SPAN, lambda: _loads_object(_brace_span(raw))),
        (DecodeStage.EMBEDDED_SCAN, lambda: _first_embedded_object(raw)),
    )
    for stage, attempt in attempts:
        try:
            value = attempt()
        except (ValueError, RecursionError):
            # json.JSONDecodeError is a ValueError; nesting past the
            # interpreter limit raises RecursionError
            continue
        if stage is not DecodeStage.DIRECT:
            logger.debug(f"Recovered engine JSON via {stage.value} fallback")
        return value, stage

    logger.error(f"Failed to decode engine response as JSON. Raw text:\n{raw}")
    raise ResponseDecodeError(raw_length=len(raw))


def decode_json_object(raw: str) -> Dict[str, Any]:
    """Recover the single JSON object carried by ``raw``."""
    value, _ = decode_with_stage(raw)
    return value


def decode_model(raw: str, model: Type[M], stage: str) -> M:
    """
    Decode ``raw`` and validate it against a stage contract.

    Raises:
        ResponseDecodeError: If no JSON object can be recovered.
        SchemaIncompleteError: If the object misses or mistypes required fields.
    """
    payload = decode_json_object(raw)
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(x) for x in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        logger.warning(f"{stage} response failed schema validation: {errors}")
        raise SchemaIncompleteError(stage=stage, errors=errors) from e
