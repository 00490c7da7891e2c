"""JSON extraction and validation for raw model replies.

- extract_json_text: pick the text to parse (fenced block interior or whole reply)
- extract_record: parse and validate it into a CommitMsgCandidate
"""

import json
import re

from pydantic import ValidationError

from ai_commit.exceptions import EmptyResponse, MalformedResponse, MissingRequiredField
from ai_commit.schemas import CommitMsgCandidate

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def extract_json_text(raw_response: str) -> str:
    """Returns the interior of the first fenced block, or the whole reply, trimmed."""
    match = _FENCED_BLOCK.search(raw_response)
    if match:
        return match.group(1).strip()
    return raw_response.strip()


def extract_record(raw_response: str) -> CommitMsgCandidate:
    """Parse a raw model reply into a validated commit record.

    Args:
        raw_response: The raw text returned by the provider.

    Returns:
        The validated CommitMsgCandidate, with defaults for absent optional keys.

    Raises:
        EmptyResponse: If the reply is blank.
        MalformedResponse: If the reply is not a JSON object of the expected shape.
        MissingRequiredField: If the record has no non-empty subject.
    """
    if not raw_response or not raw_response.strip():
        raise EmptyResponse("Model returned an empty response")

    candidate_text = extract_json_text(raw_response)

    try:
        parsed = json.loads(candidate_text)
    except json.JSONDecodeError as e:
        raise MalformedResponse(
            f"Failed to parse model response as JSON: {e}\n"
            f"Raw response:\n{raw_response}"
        ) from e

    if not isinstance(parsed, dict):
        raise MalformedResponse(
            f"Expected a JSON object, got {type(parsed).__name__}\n"
            f"Raw response:\n{raw_response}"
        )

    subject = parsed.get("subject")
    if not isinstance(subject, str) or not subject.strip():
        raise MissingRequiredField("subject")

    try:
        return CommitMsgCandidate.model_validate(parsed)
    except ValidationError as e:
        raise MalformedResponse(
            f"Model response does not match the commit schema: {e}\n"
            f"Parsed JSON: {parsed}"
        ) from e
