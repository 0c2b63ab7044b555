"""
Prompt validation shared by the generation endpoint and the builder client
"""
from enum import Enum

MIN_PROMPT_LENGTH = 10
MAX_PROMPT_LENGTH = 2000
MIN_PROMPT_WORDS = 3


class ValidationFailure(str, Enum):
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    TOO_FEW_WORDS = "too_few_words"


_MESSAGES = {
    ValidationFailure.TOO_SHORT: f"Prompt must be at least {MIN_PROMPT_LENGTH} characters",
    ValidationFailure.TOO_LONG: f"Prompt must be {MAX_PROMPT_LENGTH} characters or less",
    ValidationFailure.TOO_FEW_WORDS: f"Prompt must contain at least {MIN_PROMPT_WORDS} words",
}


class PromptValidationError(ValueError):
    """Raised when a prompt fails the length or word-count checks"""

    def __init__(self, failure: ValidationFailure):
        self.failure = failure
        super().__init__(_MESSAGES[failure])


def validate_prompt(prompt: str) -> str:
    """
    Check a free-text store description before it is sent anywhere.

    Args:
        prompt: Raw text typed by the user

    Returns:
        The prompt with surrounding whitespace removed

    Raises:
        PromptValidationError: too short, too long or fewer than three words
    """
    trimmed = prompt.strip()

    if len(trimmed) < MIN_PROMPT_LENGTH:
        raise PromptValidationError(ValidationFailure.TOO_SHORT)
    if len(trimmed) > MAX_PROMPT_LENGTH:
        raise PromptValidationError(ValidationFailure.TOO_LONG)
    if len(trimmed.split()) < MIN_PROMPT_WORDS:
        raise PromptValidationError(ValidationFailure.TOO_FEW_WORDS)

    return trimmed
