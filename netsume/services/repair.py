"""
Recovery of a JSON array from free-text model output.

Models asked for "only JSON" still wrap the payload in prose or code fences,
and long answers get cut off at the output token limit. ``extract_json_array``
returns the best candidate substring; parsing it is the caller's job and a
parse failure there is final.
"""

import re

from netsume.services.errors import NoArrayFound, TruncatedBeyondRepair

FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return FENCE_PATTERN.sub("", text).strip()


def _find_array_end(text: str, start: int) -> int:
    """Index of the bracket closing the array opened at ``start``, or -1.

    Brackets inside string literals are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return index
    return -1


def extract_json_array(text: str) -> str:
    cleaned = strip_code_fences(text or "")

    first_bracket = cleaned.find("[")
    if first_bracket == -1:
        raise NoArrayFound("The AI response did not contain a valid JSON array.")

    last_bracket = _find_array_end(cleaned, first_bracket)
    if last_bracket == -1:
        # Truncated output: close the array after the last complete object.
        last_curly = cleaned.rfind("}")
        if last_curly <= first_bracket:
            raise TruncatedBeyondRepair("JSON cut off too early to repair.")
        cleaned = cleaned[: last_curly + 1] + "]"
        last_bracket = len(cleaned) - 1

    return cleaned[first_bracket : last_bracket + 1]
