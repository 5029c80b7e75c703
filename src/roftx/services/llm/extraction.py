"""
Response text extraction over provider envelopes of unknown shape.

Providers (and different versions of the same provider) put the generated
text in different places. Each matcher below recognises one shape and
returns the text, or None when the shape does not fit. Matchers are total:
a missing key, wrong type, or empty list is a non-match, never an error.

Order matters; the first matcher returning a non-empty string wins:

1. {"completion": "..."}
2. {"completion": {"content": "..."}}
3. {"completion": {"content": [{"text": "..."}]}}
4. {"content": [{"text": "..."}]} or {"content": [{"content": [{"text": "..."}]}]}
5. {"messages": [{"role": "assistant", "content": {"text": "..."} | "..."}]}
6. {"output_text": "..."}
7. {"text": "..."}
8. {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
9. {"choices": [{"message": {"content": "..."}}]} or {"choices": [{"text": "..."}]}
"""

from collections.abc import Callable
from typing import Any

Matcher = Callable[[Any], str | None]

ASSISTANT_ROLES = {"assistant", "model"}


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    return None


def _first(seq: Any) -> Any:
    if isinstance(seq, list) and seq:
        return seq[0]
    return None


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _part_text(part: Any) -> str | None:
    """Text of a content part, which may itself be a bare string."""
    if isinstance(part, str):
        return _text(part)
    return _text(_get(part, "text"))


def match_completion_string(envelope: Any) -> str | None:
    return _text(_get(envelope, "completion"))


def match_completion_content_string(envelope: Any) -> str | None:
    return _text(_get(_get(envelope, "completion"), "content"))


def match_completion_content_parts(envelope: Any) -> str | None:
    return _part_text(_first(_get(_get(envelope, "completion"), "content")))


def match_content_parts(envelope: Any) -> str | None:
    first = _first(_get(envelope, "content"))
    text = _part_text(first)
    if text is not None:
        return text
    # One level of nesting, e.g. a tool-result block wrapping text blocks
    return _part_text(_first(_get(first, "content")))


def match_messages(envelope: Any) -> str | None:
    messages = _get(envelope, "messages")
    if not isinstance(messages, list) or not messages:
        return None

    chosen = next(
        (m for m in messages if _get(m, "role") in ASSISTANT_ROLES),
        messages[0],
    )
    content = _get(chosen, "content")
    if isinstance(content, str):
        return _text(content)
    if isinstance(content, list):
        return _part_text(_first(content))
    return _text(_get(content, "text"))


def match_output_text(envelope: Any) -> str | None:
    return _text(_get(envelope, "output_text"))


def match_text(envelope: Any) -> str | None:
    return _text(_get(envelope, "text"))


def match_candidates(envelope: Any) -> str | None:
    candidate = _first(_get(envelope, "candidates"))
    return _part_text(_first(_get(_get(candidate, "content"), "parts")))


def match_choices(envelope: Any) -> str | None:
    choice = _first(_get(envelope, "choices"))
    message_content = _get(_get(choice, "message"), "content")
    if isinstance(message_content, list):
        return _part_text(_first(message_content))
    return _text(message_content) or _text(_get(choice, "text"))


MATCHERS: tuple[Matcher, ...] = (
    match_completion_string,
    match_completion_content_string,
    match_completion_content_parts,
    match_content_parts,
    match_messages,
    match_output_text,
    match_text,
    match_candidates,
    match_choices,
)


def extract_text(envelope: Any, matchers: tuple[Matcher, ...] = MATCHERS) -> str:
    """
    Return the generated text from a decoded provider envelope.

    Args:
        envelope: Decoded JSON body (any JSON value)
        matchers: Ordered matchers to try

    Returns:
        Text from the first matching shape, or "" when none matched

    Example:
        >>> extract_text({"candidates": [{"content": {"parts": [{"text": "b"}]}}]})
        'b'
        >>> extract_text({})
        ''
    """
    for matcher in matchers:
        text = matcher(envelope)
        if text:
            return text
    return ""


def extract_usage(envelope: Any) -> dict[str, Any] | None:
    """Pass through provider usage metadata when present."""
    for key in ("usage", "usageMetadata"):
        usage = _get(envelope, key)
        if isinstance(usage, dict):
            return usage
    return None
