# ─────────────────────────────────────────────────────────────────────────────
# Prompt Validation
# ─────────────────────────────────────────────────────────────────────────────


from typing import Any

from pydantic import ValidationError

from sketchgen.exceptions import (
    InvalidInputError,
    PromptTooLongError,
    PromptTooShortError,
)
from sketchgen.schemas import GenerateRequest

MIN_PROMPT_LENGTH = 3
MAX_PROMPT_LENGTH = 500


def normalize_prompt(
    raw: Any,
    min_length: int = MIN_PROMPT_LENGTH,
    max_length: int = MAX_PROMPT_LENGTH,
) -> str:
    """Trim and bounds-check a user prompt.

    Both bounds are inclusive and apply to the trimmed value. No other
    transformation happens here; markup in the prompt is passed through
    untouched.

    Raises:
        InvalidInputError: ``raw`` is not a string.
        PromptTooShortError: fewer than ``min_length`` characters.
        PromptTooLongError: more than ``max_length`` characters.
    """
    if not isinstance(raw, str):
        raise InvalidInputError()

    prompt = raw.strip()
    if len(prompt) < min_length:
        raise PromptTooShortError(min_length)
    if len(prompt) > max_length:
        raise PromptTooLongError(max_length)
    return prompt


def prompt_from_body(body: bytes) -> Any:
    """Pull the raw ``prompt`` value out of a request body.

    The body must be a JSON object. Malformed JSON and non-object bodies
    raise :class:`InvalidInputError`; a missing ``prompt`` comes back as
    ``None`` and is rejected later by :func:`normalize_prompt`.
    """
    try:
        payload = GenerateRequest.model_validate_json(body)
    except ValidationError:
        raise InvalidInputError() from None
    return payload.prompt
