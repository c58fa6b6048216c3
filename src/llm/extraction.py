"""JSON payload extraction from free-form model text.

Gemini often wraps the requested JSON in prose or markdown fences:

    Here you go:
    ```json
    [{"id": "1"}]
    ```
    Enjoy!

extract_json_payload() recovers the payload by slicing from the FIRST opening
delimiter to the LAST closing delimiter of the expected shape. This is a
heuristic, not a balanced-delimiter parser: a stray "[" or "]" in the
surrounding prose ends up inside the slice and the parse fails. Callers treat
that as a failed candidate and move on.
"""

import json
from enum import Enum
from typing import Any


class PayloadError(ValueError):
    """Model text did not contain a usable JSON payload."""


class JsonShape(Enum):
    """Expected top-level JSON shape, with its opening and closing delimiters."""

    OBJECT = ("{", "}")
    ARRAY = ("[", "]")

    @property
    def opening(self) -> str:
        return self.value[0]

    @property
    def closing(self) -> str:
        return self.value[1]


def extract_json_payload(text: str, shape: JsonShape) -> str:
    """Slice the JSON payload out of model text.

    Args:
        text: Raw model text.
        shape: Expected top-level shape.

    Returns:
        The inclusive substring between the first opening and the last closing
        delimiter, or the original text if either is missing (or they are out of order).
    """
    first = text.find(shape.opening)
    last = text.rfind(shape.closing)
    if first == -1 or last == -1 or last < first:
        return text
    return text[first : last + 1]


def parse_json_payload(text: str, shape: JsonShape) -> Any:
    """Extract and parse the JSON payload.

    Raises:
        PayloadError: If the extracted text is not valid JSON.
    """
    payload = extract_json_payload(text, shape)
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise PayloadError(f"Could not parse {shape.name.lower()} payload: {e.msg} (pos {e.pos})") from e
