import json
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from prwarden.models.review_comment import ReviewComment
from prwarden.review.errors import ErrorKind
from prwarden.utils.logger import logger

_FENCE = re.compile(r"```(?:json)?\s*")
_OUTER_LIST = re.compile(r"\[[\s\S]*\]")


@dataclass
class ParsedComments:
    comments: List[ReviewComment] = field(default_factory=list)
    dropped: int = 0


@dataclass
class ParseFailure:
    reason: str
    kind: ErrorKind = ErrorKind.PARSE_DEGRADED


ParseResult = Union[ParsedComments, ParseFailure]


def _primary(raw: str) -> Any:
    cleaned = _FENCE.sub("", raw).strip()
    match = _OUTER_LIST.search(cleaned)
    if match:
        cleaned = match.group(0)
    return json.loads(cleaned)


def _secondary(raw: str) -> Any:
    start = raw.find("[")
    end = raw.rfind("]")
    if start == -1 or end <= start:
        raise ValueError("no list delimiters in response")
    return json.loads(raw[start : end + 1])


def validate_comments(entries: List[Any]) -> ParsedComments:
    result = ParsedComments()
    for entry in entries:
        if not isinstance(entry, dict):
            result.dropped += 1
            continue
        try:
            result.comments.append(ReviewComment.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Invalid comment structure, skipping: {e.errors()[0]['msg']}")
            result.dropped += 1
    return result


def parse_review_response(raw: Optional[str]) -> ParseResult:
    """
    Turn the model's raw text into validated review comments.

    The primary pass strips markdown fences and decodes the outermost list;
    the secondary pass decodes whatever sits between the first ``[`` and the
    last ``]``. Anything else is a ParseFailure, which callers treat as
    "no comments".
    """
    if not raw or not raw.strip():
        return ParseFailure("empty response")

    try:
        parsed = _primary(raw)
    except ValueError as e:
        logger.warning(f"Failed to parse model response, trying fallback: {e}")
        try:
            parsed = _secondary(raw)
            logger.info("Parsed model response with fallback method")
        except ValueError as fallback_error:
            logger.error(f"Fallback parsing also failed: {fallback_error}")
            return ParseFailure(f"response is not valid JSON: {fallback_error}")

    if not isinstance(parsed, list):
        return ParseFailure(f"expected a list of comments, got {type(parsed).__name__}")

    return validate_comments(parsed)
