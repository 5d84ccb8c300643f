"""Drift detection between freshly generated and previously written output."""

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Formatter = Callable[[str], str]


def normalize_output(text: str) -> str:
    """Default formatter: unify line endings and the trailing newline."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text.rstrip("\n") + "\n"


def verify(fresh: str, previous: Optional[str], formatter: Formatter = normalize_output) -> bool:
    """Compare fresh output with the previous file after formatting both.

    Args:
        fresh: Newly generated text
        previous: Existing file contents, or None if the file is missing
        formatter: String-to-string transform applied to both sides

    Returns:
        True when the formatted texts are identical
    """
    if previous is None:
        logger.debug("No previous output to verify against")
        return False
    matches = formatter(fresh) == formatter(previous)
    if not matches:
        logger.debug("Generated output differs from the previous file")
    return matches
