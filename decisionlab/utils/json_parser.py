"""Unified JSON parsing from advisor (LLM) output.

Handles common LLM response patterns: plain JSON, markdown code blocks,
JSON with surrounding text. Advisor replies may be a JSON object or, for
list-shaped answers, a bare JSON array.
"""

import json
import re
from typing import Any, Tuple, Type, Union

_CODE_BLOCK = re.compile(r'```(?:json)?\s*(.*?)\s*```', re.DOTALL)
_OBJECT_SPAN = re.compile(r'\{.*\}', re.DOTALL)
_ARRAY_SPAN = re.compile(r'\[.*\]', re.DOTALL)


def _accepted_types(expect: str) -> Tuple[Type, ...]:
    if expect == "object":
        return (dict,)
    if expect == "array":
        return (list,)
    if expect == "any":
        return (dict, list)
    raise ValueError(f"Unknown expect value: {expect!r}")


def parse_json_from_llm(raw: str, expect: str = "object") -> Union[dict, list]:
    """Parse JSON from LLM output, handling common wrapping patterns.

    Supports:
    - Plain JSON: '{"key": "value"}'
    - Markdown code blocks: '```json\\n{"key": "value"}\\n```'
    - JSON with surrounding text

    Args:
        raw: Raw LLM output string.
        expect: "object" (default), "array" or "any" - the JSON container
            type the caller accepts.

    Returns:
        Parsed JSON container.

    Raises:
        ValueError: If no valid JSON of the expected type is found.
    """
    accepted = _accepted_types(expect)

    if not raw or not raw.strip():
        raise ValueError("Empty input")

    text = raw.strip()

    candidates = [text]

    code_block_match = _CODE_BLOCK.search(text)
    if code_block_match:
        candidates.append(code_block_match.group(1).strip())

    # Outermost container first: "[{...}]" must not be read as its first object
    spans = []
    if dict in accepted:
        spans.append(_OBJECT_SPAN.search(text))
    if list in accepted:
        spans.append(_ARRAY_SPAN.search(text))
    for match in sorted((m for m in spans if m), key=lambda m: m.start()):
        candidates.append(match.group(0))

    for candidate in candidates:
        try:
            result: Any = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(result, accepted):
            return result

    raise ValueError(f"No valid JSON found in LLM output: {text[:200]}")
